"""Copper and laminate data for the stackup presets.

Copper foil is specified by weight (oz/ft^2); one ounce is a 35 um foil.
Laminates carry the dielectric constant and loss tangent that
``Stackup.from_layers_data`` fills in when a layer record omits them.
"""

from __future__ import annotations

from dataclasses import dataclass

# Foil thickness of 1 oz/ft^2 copper, in mm
MM_PER_OZ = 0.035


@dataclass(frozen=True)
class CopperWeight:
    """Copper foil weight and the resulting layer thickness."""

    oz: float
    thickness_mm: float

    @classmethod
    def from_oz(cls, oz: float) -> CopperWeight:
        return cls(oz=oz, thickness_mm=oz * MM_PER_OZ)


COPPER_HALF_OZ = CopperWeight.from_oz(0.5)
COPPER_1OZ = CopperWeight.from_oz(1.0)


@dataclass(frozen=True)
class DielectricMaterial:
    """Laminate used for prepreg and core layers.

    Attributes:
        name: Display name
        epsilon_r: Relative permittivity
        loss_tangent: tan(delta) at 1 GHz
    """

    name: str
    epsilon_r: float
    loss_tangent: float


FR4_STANDARD = DielectricMaterial("FR4", epsilon_r=4.5, loss_tangent=0.02)
ROGERS_4350B = DielectricMaterial("Rogers RO4350B", epsilon_r=3.48, loss_tangent=0.0037)

# Lookup keys are lower case
MATERIALS: dict[str, DielectricMaterial] = {
    "fr4": FR4_STANDARD,
    "fr-4": FR4_STANDARD,
    "rogers 4350b": ROGERS_4350B,
    "ro4350b": ROGERS_4350B,
}


def get_material_or_default(
    name: str | None, default: DielectricMaterial = FR4_STANDARD
) -> DielectricMaterial:
    """Laminate by name (case-insensitive), or ``default`` when unknown."""
    if not name:
        return default
    return MATERIALS.get(name.lower(), default)
