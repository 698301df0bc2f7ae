"""Physical board description used by delay calculations.

Stackup Analysis:
    >>> from kicad_delay.physics import Stackup
    >>>
    >>> stackup = Stackup.jlcpcb_4layer()
    >>> h_mm = stackup.layer_distance("F.Cu", "In1.Cu")
"""

from .constants import (
    COPPER_1OZ,
    COPPER_HALF_OZ,
    FR4_STANDARD,
    ROGERS_4350B,
    CopperWeight,
    DielectricMaterial,
    get_material_or_default,
)
from .stackup import (
    LayerType,
    Stackup,
    StackupLayer,
)

__all__ = [
    # Materials
    "COPPER_HALF_OZ",
    "COPPER_1OZ",
    "FR4_STANDARD",
    "ROGERS_4350B",
    "CopperWeight",
    "DielectricMaterial",
    "get_material_or_default",
    # Stackup
    "LayerType",
    "Stackup",
    "StackupLayer",
]
