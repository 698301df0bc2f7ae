"""
Geometry queries the delay calculator depends on.

The calculator never measures anything itself. It asks a geometry
accessor for two things, both in length IU:
- how far a via travels between two copper layers
- how long a polyline is
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import Protocol

from ..physics import Stackup
from ..units import mm_to_iu
from .items import Polyline

logger = logging.getLogger(__name__)

__all__ = ["GeometryAccessor", "StackupGeometry"]


class GeometryAccessor(Protocol):
    """Physical measurements of the board."""

    def stackup_height(self, layer_from: Hashable, layer_to: Hashable) -> int:
        """Via barrel length between two copper layers, in IU."""
        ...

    def physical_length(self, shape: Polyline) -> int:
        """Length of a shape, in IU."""
        ...


class StackupGeometry:
    """Geometry accessor backed by a board stackup.

    Attributes:
        stackup: Physical layer stack (layer names are the layer identifiers)
        use_stackup_height: When False, every via height is 0, matching the
            board option that ignores via height in length calculations
    """

    def __init__(self, stackup: Stackup, use_stackup_height: bool = True) -> None:
        self.stackup = stackup
        self.use_stackup_height = use_stackup_height

    def stackup_height(self, layer_from: Hashable, layer_to: Hashable) -> int:
        if not self.use_stackup_height:
            return 0

        if self.stackup.get_layer(str(layer_from)) is None:
            logger.debug(f"Layer {layer_from} not in stackup, via height is 0")
            return 0
        if self.stackup.get_layer(str(layer_to)) is None:
            logger.debug(f"Layer {layer_to} not in stackup, via height is 0")
            return 0

        return mm_to_iu(self.stackup.layer_distance(str(layer_from), str(layer_to)))

    def physical_length(self, shape: Polyline) -> int:
        return shape.length()

    def __repr__(self) -> str:
        return f"StackupGeometry({self.stackup!r}, use_stackup_height={self.use_stackup_height})"
