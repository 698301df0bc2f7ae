"""Propagation delay calculation from user-defined delay profiles.

    >>> from kicad_delay.physics import Stackup
    >>> from kicad_delay.timing import (
    ...     DelayProfile, DelayProfileStore, GeometryContext, LineItem, NetClass,
    ...     Polyline, PropagationDelayCalculator, StackupGeometry,
    ... )
    >>>
    >>> store = DelayProfileStore([DelayProfile("Fast", layer_delays={"F.Cu": 5.0})])
    >>> calc = PropagationDelayCalculator.attach(store, StackupGeometry(Stackup.default_2layer()))
    >>> fast = NetClass("HS", delay_profile="Fast")
    >>> line = LineItem("F.Cu", Polyline.from_mm([(0, 0), (10, 0)]), net_class=fast)
    >>> calc.delay_for_item(line)
    50
"""

from .cache import DelayProfileCache
from .calculator import PropagationDelayCalculator
from .geometry import GeometryAccessor, StackupGeometry
from .items import (
    DelayItem,
    GeometryContext,
    ItemType,
    LineItem,
    MergeStatus,
    PadItem,
    Polyline,
    ViaItem,
)
from .netclass import DEFAULT_NETCLASS, NetClass, NetClassPattern, NetSettings
from .profiles import (
    DelayProfile,
    DelayProfileStore,
    SettingsListener,
    ViaOverrideEntry,
    ViaOverrideKey,
)

__all__ = [
    # Profiles
    "DelayProfile",
    "DelayProfileStore",
    "SettingsListener",
    "ViaOverrideEntry",
    "ViaOverrideKey",
    "DelayProfileCache",
    # Items
    "DelayItem",
    "GeometryContext",
    "ItemType",
    "LineItem",
    "MergeStatus",
    "PadItem",
    "Polyline",
    "ViaItem",
    # Net classes
    "DEFAULT_NETCLASS",
    "NetClass",
    "NetClassPattern",
    "NetSettings",
    # Calculation
    "GeometryAccessor",
    "PropagationDelayCalculator",
    "StackupGeometry",
]
