"""Tests for the physics stackup module and the stackup geometry accessor."""

import pytest

from kicad_delay.physics import (
    COPPER_1OZ,
    COPPER_HALF_OZ,
    FR4_STANDARD,
    ROGERS_4350B,
    CopperWeight,
    LayerType,
    Stackup,
    StackupLayer,
    get_material_or_default,
)
from kicad_delay.timing import Polyline, StackupGeometry


class TestStackupPresets:
    """Tests for manufacturer presets."""

    def test_default_2layer(self):
        stackup = Stackup.default_2layer()
        assert stackup.num_copper_layers == 2
        assert [layer.name for layer in stackup.copper_layers] == ["F.Cu", "B.Cu"]
        assert stackup.board_thickness_mm == 1.6

    def test_jlcpcb_4layer(self):
        stackup = Stackup.jlcpcb_4layer()
        assert stackup.num_copper_layers == 4
        assert stackup.copper_finish == "HASL"
        assert stackup.get_layer("In1.Cu").thickness_mm == pytest.approx(COPPER_HALF_OZ.thickness_mm)

    def test_oshpark_4layer(self):
        stackup = Stackup.oshpark_4layer()
        assert stackup.num_copper_layers == 4
        assert stackup.copper_finish == "ENIG"

    def test_default_6layer(self):
        stackup = Stackup.default_6layer()
        assert [layer.name for layer in stackup.copper_layers] == [
            "F.Cu", "In1.Cu", "In2.Cu", "In3.Cu", "In4.Cu", "B.Cu",
        ]

    @pytest.mark.parametrize(
        "preset,layers",
        [("generic-2", 2), ("jlcpcb-4", 4), ("oshpark-4", 4), ("generic-6", 6)],
    )
    def test_from_preset(self, preset, layers):
        assert Stackup.from_preset(preset).num_copper_layers == layers

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown stackup preset"):
            Stackup.from_preset("nope-8")

    def test_generic(self):
        stackup = Stackup.generic(4, dielectric_mm=0.5)
        assert [layer.name for layer in stackup.copper_layers] == ["F.Cu", "In1.Cu", "In2.Cu", "B.Cu"]
        assert stackup.layer_distance("In1.Cu", "In2.Cu") == pytest.approx(0.5175)

    def test_generic_needs_two_layers(self):
        with pytest.raises(ValueError):
            Stackup.generic(1)


class TestLayerDistance:
    """Tests for Stackup.layer_distance."""

    def test_outer_layers_2layer(self):
        """Half of each copper plus the core."""
        stackup = Stackup.default_2layer()
        assert stackup.layer_distance("F.Cu", "B.Cu") == pytest.approx(1.565)

    def test_adjacent_layers(self):
        stackup = Stackup.jlcpcb_4layer()
        assert stackup.layer_distance("F.Cu", "In1.Cu") == pytest.approx(0.23665)

    def test_inner_layers(self):
        stackup = Stackup.jlcpcb_4layer()
        assert stackup.layer_distance("In1.Cu", "In2.Cu") == pytest.approx(1.0825)

    def test_through_all_layers(self):
        """Inner copper between the ends counts in full."""
        stackup = Stackup.jlcpcb_4layer()
        assert stackup.layer_distance("F.Cu", "B.Cu") == pytest.approx(1.5558)

    def test_order_does_not_matter(self):
        stackup = Stackup.oshpark_4layer()
        assert stackup.layer_distance("B.Cu", "In1.Cu") == stackup.layer_distance("In1.Cu", "B.Cu")

    def test_same_layer(self):
        assert Stackup.jlcpcb_4layer().layer_distance("In1.Cu", "In1.Cu") == 0.0

    def test_unknown_layer(self):
        assert Stackup.jlcpcb_4layer().layer_distance("F.Cu", "In7.Cu") == 0.0

    def test_non_copper_layer(self):
        assert Stackup.jlcpcb_4layer().layer_distance("F.Cu", "core") == 0.0

    def test_solder_mask_is_ignored(self):
        """Layers other than copper and dielectric add nothing."""
        stackup = Stackup(
            layers=[
                StackupLayer("F.Cu", LayerType.COPPER, 0.035),
                StackupLayer("core", LayerType.DIELECTRIC, 1.0),
                StackupLayer("mask", LayerType.SOLDER_MASK, 0.5),
                StackupLayer("B.Cu", LayerType.COPPER, 0.035),
            ]
        )
        assert stackup.layer_distance("F.Cu", "B.Cu") == pytest.approx(1.035)


class TestFromLayersData:
    """Tests for building a stackup from layer records."""

    def test_parse_records(self):
        stackup = Stackup.from_layers_data(
            [
                {"name": "F.Mask", "type": "Top Solder Mask", "thickness": 0.01},
                {"name": "F.Cu", "type": "copper", "thickness": 0.035},
                {"name": "core", "type": "core", "thickness": 1.51, "epsilon_r": 4.2},
                {"name": "B.Cu", "type": "copper", "thickness": 0.035},
            ]
        )
        assert stackup.num_copper_layers == 2
        assert stackup.get_layer("F.Mask").layer_type == LayerType.SOLDER_MASK
        assert stackup.get_layer("core").epsilon_r == 4.2
        assert stackup.get_layer("F.Cu").copper_weight_oz == pytest.approx(1.0)
        assert stackup.board_thickness_mm == pytest.approx(1.59)
        assert stackup.layer_distance("F.Cu", "B.Cu") == pytest.approx(1.545)

    def test_dielectric_material_defaults(self):
        stackup = Stackup.from_layers_data(
            [{"name": "pp", "type": "prepreg", "thickness": 0.1, "material": "RO4350B"}]
        )
        assert stackup.get_layer("pp").epsilon_r == pytest.approx(3.48)

    def test_missing_type(self):
        with pytest.raises(ValueError, match="needs 'name' and 'type'"):
            Stackup.from_layers_data([{"name": "F.Cu"}])

    def test_empty(self):
        stackup = Stackup.from_layers_data([])
        assert stackup.num_copper_layers == 0
        assert stackup.board_thickness_mm == 1.6


class TestStackupQueries:
    """Tests for stackup lookups and summaries."""

    def test_get_layer_index(self):
        stackup = Stackup.default_2layer()
        assert stackup.get_layer_index("F.Cu") == 0
        assert stackup.get_layer_index("B.Cu") == 2
        assert stackup.get_layer_index("In1.Cu") == -1
        assert stackup.get_layer("In1.Cu") is None

    def test_summary(self):
        summary = Stackup.default_2layer().summary()
        assert summary["num_copper_layers"] == 2
        assert summary["layers"][0]["copper_oz"] == 1.0
        assert summary["layers"][1]["epsilon_r"] == 4.5

    def test_repr(self):
        assert repr(Stackup.jlcpcb_4layer()) == "Stackup(layers=4L, thickness=1.6mm)"

    def test_outer_copper_is_1oz(self):
        assert Stackup.default_6layer().get_layer("B.Cu").thickness_mm == COPPER_1OZ.thickness_mm


class TestStackupGeometry:
    """Tests for the stackup-backed geometry accessor."""

    def test_height_in_iu(self):
        geometry = StackupGeometry(Stackup.default_2layer())
        assert geometry.stackup_height("F.Cu", "B.Cu") == 1_565_000

    def test_4layer_heights(self):
        geometry = StackupGeometry(Stackup.jlcpcb_4layer())
        assert geometry.stackup_height("In1.Cu", "In2.Cu") == 1_082_500
        assert geometry.stackup_height("F.Cu", "B.Cu") == 1_555_800

    def test_unknown_layer(self):
        geometry = StackupGeometry(Stackup.default_2layer())
        assert geometry.stackup_height("F.Cu", "In1.Cu") == 0
        assert geometry.stackup_height(0, 3) == 0

    def test_height_disabled(self):
        geometry = StackupGeometry(Stackup.default_2layer(), use_stackup_height=False)
        assert geometry.stackup_height("F.Cu", "B.Cu") == 0

    def test_physical_length(self):
        geometry = StackupGeometry(Stackup.default_2layer())
        assert geometry.physical_length(Polyline(((0, 0), (300, 400)))) == 500


class TestMaterials:
    """Tests for copper weights and laminates."""

    def test_copper_weights(self):
        assert COPPER_1OZ.thickness_mm == pytest.approx(0.035)
        assert COPPER_HALF_OZ.thickness_mm == pytest.approx(0.0175)
        assert CopperWeight.from_oz(2.0).thickness_mm == pytest.approx(0.07)

    def test_material_lookup(self):
        assert get_material_or_default("Rogers 4350B") is ROGERS_4350B
        assert get_material_or_default("FR-4") is FR4_STANDARD
        assert get_material_or_default(None) is FR4_STANDARD
        assert get_material_or_default("unobtainium", ROGERS_4350B) is ROGERS_4350B
