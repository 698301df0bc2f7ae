"""
Routed board items as seen by the delay calculator.

Three kinds of item carry delay: track segments (lines), vias and pads.
Each is a small dataclass holding just what the calculator needs; the
board model builds them from its own tracks, vias and pads.

All lengths are in length IU (nanometers).
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..units import mm_to_iu
from .netclass import NetClass

__all__ = [
    "DelayItem",
    "GeometryContext",
    "ItemType",
    "LineItem",
    "MergeStatus",
    "PadItem",
    "Polyline",
    "ViaItem",
]


class MergeStatus(Enum):
    """Result of merging collinear or duplicate track fragments.

    - NORMAL: Not involved in a merge
    - MERGED_ACTIVE: Absorbed other fragments and represents them
    - MERGED_RETIRED: Absorbed into another item; contributes no delay
    """

    NORMAL = "normal"
    MERGED_ACTIVE = "merged_active"
    MERGED_RETIRED = "merged_retired"


class ItemType(Enum):
    """Kind of routed item."""

    LINE = "line"
    VIA = "via"
    PAD = "pad"


@dataclass(frozen=True)
class Polyline:
    """Open chain of straight segments.

    Attributes:
        points: Vertices as (x, y) in length IU
    """

    points: tuple[tuple[int, int], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(tuple(p) for p in self.points))

    @classmethod
    def from_mm(cls, points: Iterable[tuple[float, float]]) -> Polyline:
        """Build from vertices given in millimeters."""
        return cls(tuple((mm_to_iu(x), mm_to_iu(y)) for x, y in points))

    def length(self) -> int:
        """Total length in IU; each segment is rounded to a whole IU."""
        total = 0
        for (x1, y1), (x2, y2) in zip(self.points, self.points[1:]):
            total += round(math.hypot(x2 - x1, y2 - y1))
        return total

    @property
    def segment_count(self) -> int:
        return max(len(self.points) - 1, 0)


@dataclass
class DelayItem:
    """Common part of every routed item.

    Attributes:
        net_class: Effective net class of the item's net (None if unassigned)
        merge_status: Whether the item was merged away
    """

    net_class: NetClass | None = field(default=None, kw_only=True)
    merge_status: MergeStatus = field(default=MergeStatus.NORMAL, kw_only=True)

    @property
    def is_retired(self) -> bool:
        return self.merge_status == MergeStatus.MERGED_RETIRED

    @property
    def delay_profile_name(self) -> str:
        """Name of the delay profile that governs this item, or ''."""
        if self.net_class is None:
            return ""
        return self.net_class.delay_profile


@dataclass
class LineItem(DelayItem):
    """Track segment or arc chain on one copper layer."""

    layer: Hashable
    shape: Polyline

    @property
    def item_type(self) -> ItemType:
        return ItemType.LINE


@dataclass
class ViaItem(DelayItem):
    """Via, with the layers the signal actually uses and the padstack span.

    The signal layers are where connected tracks attach; the via layers are
    the physical start and end of the padstack.
    """

    signal_start_layer: Hashable
    signal_end_layer: Hashable
    via_start_layer: Hashable
    via_end_layer: Hashable

    @property
    def item_type(self) -> ItemType:
        return ItemType.VIA


@dataclass
class PadItem(DelayItem):
    """Component pad with a fixed pad-to-die delay in time IU."""

    pad_to_die_delay: int = 0

    @property
    def item_type(self) -> ItemType:
        return ItemType.PAD


@dataclass
class GeometryContext:
    """Net class and layer to use when there is no concrete board item.

    Attributes:
        net_class: Net class supplying the delay profile name
        layer: Copper layer the geometry would be routed on
    """

    net_class: NetClass | None
    layer: Hashable = None

    @property
    def delay_profile_name(self) -> str:
        if self.net_class is None:
            return ""
        return self.net_class.delay_profile
