"""PCB stackup representation for via height calculations.

Provides the Stackup class describing the physical layer order of a board,
with copper and dielectric thicknesses and manufacturer presets. The delay
calculator uses it to find how far a via barrel travels between two copper
layers.

Example::

    from kicad_delay.physics import Stackup

    stackup = Stackup.jlcpcb_4layer()

    # Distance between copper mid-planes, in mm
    h = stackup.layer_distance("F.Cu", "B.Cu")

    # Or build from layer records (e.g. exported from a board file)
    stackup = Stackup.from_layers_data([
        {"name": "F.Cu", "type": "copper", "thickness": 0.035},
        {"name": "core", "type": "core", "thickness": 1.53, "epsilon_r": 4.5},
        {"name": "B.Cu", "type": "copper", "thickness": 0.035},
    ])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import (
    COPPER_1OZ,
    COPPER_HALF_OZ,
    FR4_STANDARD,
    MM_PER_OZ,
    get_material_or_default,
)


class LayerType(Enum):
    """Type of layer in the stackup."""

    COPPER = "copper"
    DIELECTRIC = "dielectric"  # Prepreg or core
    SOLDER_MASK = "solder mask"
    SILK_SCREEN = "silk screen"


@dataclass
class StackupLayer:
    """Single layer in a PCB stackup.

    Attributes:
        name: Layer name (e.g., "F.Cu", "prepreg 1", "core")
        layer_type: Type of layer (copper, dielectric, etc.)
        thickness_mm: Layer thickness in millimeters
        material: Material name (e.g., "FR4", "copper")
        epsilon_r: Relative permittivity (for dielectrics)
        loss_tangent: Loss tangent tan(delta) (for dielectrics)
        copper_weight_oz: Copper weight in oz/ft^2 (for copper layers)
    """

    name: str
    layer_type: LayerType
    thickness_mm: float = 0.0
    material: str = ""
    epsilon_r: float = 0.0
    loss_tangent: float = 0.0
    copper_weight_oz: float | None = None

    @property
    def is_copper(self) -> bool:
        """Check if this is a copper layer."""
        return self.layer_type == LayerType.COPPER

    @property
    def is_dielectric(self) -> bool:
        """Check if this is a dielectric layer."""
        return self.layer_type == LayerType.DIELECTRIC


def _copper(name: str, weight_oz: float) -> StackupLayer:
    thickness = COPPER_1OZ.thickness_mm if weight_oz >= 1.0 else COPPER_HALF_OZ.thickness_mm
    return StackupLayer(
        name=name,
        layer_type=LayerType.COPPER,
        thickness_mm=thickness,
        material="copper",
        copper_weight_oz=weight_oz,
    )


def _dielectric(
    name: str, thickness_mm: float, epsilon_r: float = 4.5, material: str = "FR4"
) -> StackupLayer:
    return StackupLayer(
        name=name,
        layer_type=LayerType.DIELECTRIC,
        thickness_mm=thickness_mm,
        material=material,
        epsilon_r=epsilon_r,
        loss_tangent=0.02,
    )


@dataclass
class Stackup:
    """Complete PCB layer stackup.

    The stackup is ordered from top to bottom:
    - layers[0] is the top layer (typically F.Cu or solder mask)
    - layers[-1] is the bottom layer (typically B.Cu or solder mask)

    Attributes:
        layers: Ordered list of layers from top to bottom
        board_thickness_mm: Total board thickness in mm
        copper_finish: Surface finish (e.g., "ENIG", "HASL")
    """

    layers: list[StackupLayer] = field(default_factory=list)
    board_thickness_mm: float = 1.6
    copper_finish: str = ""

    @classmethod
    def from_layers_data(cls, items: list[dict[str, Any]], copper_finish: str = "") -> Stackup:
        """Build a stackup from layer records.

        Each record needs ``name`` and ``type`` (KiCad stackup type strings:
        "copper", "prepreg", "core", "Top Solder Mask", ...). ``thickness``
        is in mm; ``material`` and ``epsilon_r`` are optional.

        Args:
            items: Layer records ordered top to bottom
            copper_finish: Surface finish name

        Returns:
            Stackup with the given layers

        Raises:
            ValueError: If a record has no name or type
        """
        layers = []
        for index, item in enumerate(items):
            if "name" not in item or "type" not in item:
                raise ValueError(f"Stackup layer {index} needs 'name' and 'type'")

            layer_type = cls._parse_layer_type(str(item["type"]))
            layer = StackupLayer(
                name=str(item["name"]),
                layer_type=layer_type,
                thickness_mm=float(item.get("thickness", 0.0)),
                material=str(item.get("material", "")),
            )

            if layer_type == LayerType.DIELECTRIC:
                material = get_material_or_default(layer.material or None)
                layer.epsilon_r = float(item.get("epsilon_r", material.epsilon_r))
                layer.loss_tangent = float(item.get("loss_tangent", material.loss_tangent))
            elif layer_type == LayerType.COPPER and layer.thickness_mm > 0:
                # Approximate oz from foil thickness
                layer.copper_weight_oz = layer.thickness_mm / MM_PER_OZ

            layers.append(layer)

        total_thickness = sum(layer.thickness_mm for layer in layers)
        return cls(
            layers=layers,
            board_thickness_mm=total_thickness if total_thickness > 0 else 1.6,
            copper_finish=copper_finish,
        )

    @classmethod
    def generic(cls, num_copper_layers: int, dielectric_mm: float = 0.2) -> Stackup:
        """Create a generic stackup for N copper layers.

        Args:
            num_copper_layers: Number of copper layers (at least 2)
            dielectric_mm: Thickness of each dielectric layer

        Returns:
            Generic stackup with 1oz outer and 0.5oz inner copper
        """
        if num_copper_layers < 2:
            raise ValueError(f"A stackup needs at least 2 copper layers, got {num_copper_layers}")

        layers = [_copper("F.Cu", 1.0)]
        for i in range(1, num_copper_layers - 1):
            dielectric_name = "core" if i % 2 == 0 else "prepreg"
            layers.append(_dielectric(f"{dielectric_name} {i}", dielectric_mm))
            layers.append(_copper(f"In{i}.Cu", 0.5))
        layers.append(_dielectric("prepreg bottom", dielectric_mm))
        layers.append(_copper("B.Cu", 1.0))

        total_thickness = sum(layer.thickness_mm for layer in layers)
        return cls(layers=layers, board_thickness_mm=total_thickness)

    @staticmethod
    def _parse_layer_type(type_str: str) -> LayerType:
        """Parse layer type from KiCad string.

        Args:
            type_str: Type string from KiCad (e.g., "copper", "prepreg", "core")

        Returns:
            LayerType enum value
        """
        type_lower = type_str.lower()
        if type_lower == "copper":
            return LayerType.COPPER
        elif type_lower in ("prepreg", "core", "dielectric"):
            return LayerType.DIELECTRIC
        elif "mask" in type_lower:
            return LayerType.SOLDER_MASK
        elif "silk" in type_lower:
            return LayerType.SILK_SCREEN
        else:
            return LayerType.DIELECTRIC

    # Manufacturer presets

    @classmethod
    def default_2layer(cls, thickness_mm: float = 1.6) -> Stackup:
        """Create a generic 2-layer FR4 stackup with 1oz copper on both sides.

        Args:
            thickness_mm: Total board thickness (default 1.6mm)
        """
        dielectric_thickness = thickness_mm - 2 * COPPER_1OZ.thickness_mm

        return cls(
            layers=[
                _copper("F.Cu", 1.0),
                _dielectric("core", dielectric_thickness, FR4_STANDARD.epsilon_r),
                _copper("B.Cu", 1.0),
            ],
            board_thickness_mm=thickness_mm,
        )

    @classmethod
    def jlcpcb_4layer(cls) -> Stackup:
        """JLCPCB JLC04161H-7628 4-layer stackup.

        Standard 1.6mm 4-layer:
        - F.Cu: 35um (1oz)
        - Prepreg: 0.2104mm (7628), er=4.05
        - In1.Cu: 17.5um (0.5oz)
        - Core: 1.065mm, er=4.6
        - In2.Cu: 17.5um (0.5oz)
        - Prepreg: 0.2104mm (7628), er=4.05
        - B.Cu: 35um (1oz)
        """
        return cls(
            layers=[
                _copper("F.Cu", 1.0),
                _dielectric("prepreg 1", 0.2104, 4.05, "FR4 7628"),
                _copper("In1.Cu", 0.5),
                _dielectric("core", 1.065, 4.6),
                _copper("In2.Cu", 0.5),
                _dielectric("prepreg 2", 0.2104, 4.05, "FR4 7628"),
                _copper("B.Cu", 1.0),
            ],
            board_thickness_mm=1.6,
            copper_finish="HASL",
        )

    @classmethod
    def oshpark_4layer(cls) -> Stackup:
        """OSH Park 4-layer stackup.

        - F.Cu: 35um (1oz)
        - Prepreg: 0.17mm, er=4.5
        - In1.Cu: 17.5um (0.5oz)
        - Core: 1.2mm, er=4.5
        - In2.Cu: 17.5um (0.5oz)
        - Prepreg: 0.17mm, er=4.5
        - B.Cu: 35um (1oz)
        """
        return cls(
            layers=[
                _copper("F.Cu", 1.0),
                _dielectric("prepreg 1", 0.17),
                _copper("In1.Cu", 0.5),
                _dielectric("core", 1.2),
                _copper("In2.Cu", 0.5),
                _dielectric("prepreg 2", 0.17),
                _copper("B.Cu", 1.0),
            ],
            board_thickness_mm=1.6,
            copper_finish="ENIG",
        )

    @classmethod
    def default_6layer(cls) -> Stackup:
        """Create a generic 6-layer FR4 stackup with 1oz outer and 0.5oz inner copper."""
        return cls(
            layers=[
                _copper("F.Cu", 1.0),
                _dielectric("prepreg 1", 0.18),
                _copper("In1.Cu", 0.5),
                _dielectric("core 1", 0.36),
                _copper("In2.Cu", 0.5),
                _dielectric("prepreg 2", 0.18),
                _copper("In3.Cu", 0.5),
                _dielectric("core 2", 0.36),
                _copper("In4.Cu", 0.5),
                _dielectric("prepreg 3", 0.18),
                _copper("B.Cu", 1.0),
            ],
            board_thickness_mm=1.6,
        )

    @classmethod
    def from_preset(cls, preset: str) -> Stackup:
        """Create a stackup from a preset name.

        Args:
            preset: One of "generic-2", "jlcpcb-4", "oshpark-4", "generic-6"

        Raises:
            ValueError: If the preset is unknown
        """
        preset_map = {
            "generic-2": cls.default_2layer,
            "jlcpcb-4": cls.jlcpcb_4layer,
            "oshpark-4": cls.oshpark_4layer,
            "generic-6": cls.default_6layer,
        }
        if preset not in preset_map:
            raise ValueError(
                f"Unknown stackup preset: {preset}. Available: {', '.join(preset_map)}"
            )
        return preset_map[preset]()

    # Query methods

    @property
    def copper_layers(self) -> list[StackupLayer]:
        """Get all copper layers in order from top to bottom."""
        return [layer for layer in self.layers if layer.is_copper]

    @property
    def num_copper_layers(self) -> int:
        """Get number of copper layers."""
        return len(self.copper_layers)

    def get_layer(self, name: str) -> StackupLayer | None:
        """Get a layer by name, or None if not found."""
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def get_layer_index(self, name: str) -> int:
        """Get the index of a layer in the stackup.

        Args:
            name: Layer name

        Returns:
            Index (0 = top), or -1 if not found
        """
        for i, layer in enumerate(self.layers):
            if layer.name == name:
                return i
        return -1

    def layer_distance(self, first_layer: str, second_layer: str) -> float:
        """Distance a via travels between two copper layers.

        Measured between the copper mid-planes: half of each end layer's
        thickness plus every copper and dielectric layer in between. Layer
        order does not matter.

        Args:
            first_layer: Copper layer name (e.g., "F.Cu")
            second_layer: Copper layer name (e.g., "In2.Cu")

        Returns:
            Distance in mm, or 0.0 if either layer is not a copper layer
            of this stackup or both are the same layer
        """
        start = self.get_layer_index(first_layer)
        end = self.get_layer_index(second_layer)
        if start < 0 or end < 0 or start == end:
            return 0.0
        if not (self.layers[start].is_copper and self.layers[end].is_copper):
            return 0.0

        if end < start:
            start, end = end, start

        total = (self.layers[start].thickness_mm + self.layers[end].thickness_mm) / 2
        for layer in self.layers[start + 1 : end]:
            if layer.is_copper or layer.is_dielectric:
                total += layer.thickness_mm
        return total

    def summary(self) -> dict:
        """Get a summary of the stackup.

        Returns:
            Dictionary with stackup information
        """
        return {
            "board_thickness_mm": self.board_thickness_mm,
            "num_copper_layers": self.num_copper_layers,
            "copper_finish": self.copper_finish,
            "layers": [
                {
                    "name": layer.name,
                    "type": layer.layer_type.value,
                    "thickness_mm": layer.thickness_mm,
                    "material": layer.material,
                    "epsilon_r": layer.epsilon_r if layer.is_dielectric else None,
                    "copper_oz": layer.copper_weight_oz if layer.is_copper else None,
                }
                for layer in self.layers
            ],
        }

    def __repr__(self) -> str:
        """String representation."""
        return f"Stackup(layers={self.num_copper_layers}L, thickness={self.board_thickness_mm}mm)"
