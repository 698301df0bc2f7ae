"""
kicad-delay: Propagation delay calculations from KiCad delay profiles.

Computes signal propagation delay for routed tracks, vias and pads from
user-defined delay profiles, and converts target delays back into track
lengths for length tuning.

Modules:
    timing: Delay profiles, profile cache and the delay calculator
    physics: Board stackup used for via heights
    project: Delay profiles and net classes from .kicad_pro files
    config: Configuration file support
    units: Length and time unit conversion

Quick Start::

    from kicad_delay import (
        GeometryContext, PropagationDelayCalculator, Stackup, StackupGeometry,
        load_delay_settings,
    )

    store, net_settings = load_delay_settings("board.kicad_pro")
    geometry = StackupGeometry(Stackup.jlcpcb_4layer())
    calculator = PropagationDelayCalculator.attach(store, geometry)

    ddr = net_settings.effective_net_class("DQ0")
    length = calculator.length_for_delay(150_000, GeometryContext(ddr, "In1.Cu"))
"""

__version__ = "0.1.0"

from kicad_delay.physics import Stackup
from kicad_delay.project import load_delay_settings
from kicad_delay.timing import (
    DelayProfile,
    DelayProfileCache,
    DelayProfileStore,
    GeometryContext,
    LineItem,
    MergeStatus,
    NetClass,
    NetSettings,
    PadItem,
    Polyline,
    PropagationDelayCalculator,
    StackupGeometry,
    ViaItem,
    ViaOverrideEntry,
)

__all__ = [
    "__version__",
    # Profiles
    "DelayProfile",
    "DelayProfileCache",
    "DelayProfileStore",
    "ViaOverrideEntry",
    # Items
    "GeometryContext",
    "LineItem",
    "MergeStatus",
    "PadItem",
    "Polyline",
    "ViaItem",
    # Net classes
    "NetClass",
    "NetSettings",
    # Calculation
    "PropagationDelayCalculator",
    "Stackup",
    "StackupGeometry",
    # Project
    "load_delay_settings",
]
