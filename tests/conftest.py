"""Pytest fixtures for kicad-delay tests."""

import json
from pathlib import Path

import pytest

from kicad_delay.timing import (
    DelayProfile,
    DelayProfileStore,
    NetClass,
    PropagationDelayCalculator,
    ViaOverrideEntry,
)

# Layer identifiers of a 4-layer board, top to bottom
LAYER_0 = "F.Cu"
LAYER_1 = "In1.Cu"
LAYER_2 = "In2.Cu"
LAYER_3 = "B.Cu"

# Minimal KiCad project with delay profiles and net classes
MINIMAL_PROJECT = {
    "meta": {"filename": "test.kicad_pro", "version": 3},
    "time_domain_parameters": {
        "delay_profiles_user_defined": [
            {
                "profile_name": "Fast",
                "via_prop_delay": 10.0,
                "track_propagation_delays": {
                    "F.Cu": 5.0,
                    "In1.Cu": 6.0,
                    "In2.Cu": 6.0,
                    "B.Cu": 5.0,
                },
                "via_overrides": [
                    {
                        "signal_layer_from": "F.Cu",
                        "signal_layer_to": "B.Cu",
                        "via_layer_from": "F.Cu",
                        "via_layer_to": "B.Cu",
                        "delay": 120,
                    }
                ],
            },
            {
                "profile_name": "Slow",
                "via_prop_delay": 20.0,
                "track_propagation_delays": {"F.Cu": 7.5},
                "via_overrides": [],
            },
        ]
    },
    "net_settings": {
        "classes": [
            {"name": "Default", "delay_profile": ""},
            {"name": "HighSpeed", "delay_profile": "Fast"},
            {"name": "Legacy", "delay_profile": "Slow"},
            {"name": "Broken", "delay_profile": "Missing"},
        ],
        "netclass_assignments": {"CLK": "HighSpeed"},
        "netclass_patterns": [
            {"netclass": "HighSpeed", "pattern": "DQ*"},
            {"netclass": "Legacy", "pattern": "OLD_?"},
        ],
    },
}


class FakeGeometry:
    """Geometry accessor with fixed via heights (IU) per layer pair."""

    def __init__(self, heights=None):
        self.heights = dict(heights or {})
        self.height_queries = []

    def stackup_height(self, layer_from, layer_to):
        self.height_queries.append((layer_from, layer_to))
        if (layer_from, layer_to) in self.heights:
            return self.heights[(layer_from, layer_to)]
        return self.heights.get((layer_to, layer_from), 0)

    def physical_length(self, shape):
        return shape.length()


@pytest.fixture
def fast_profile() -> DelayProfile:
    """Profile "Fast": 5 time IU/mm on F.Cu, 10 time IU/mm via, one override."""
    return DelayProfile(
        name="Fast",
        layer_delays={LAYER_0: 5.0, LAYER_1: 6.0, LAYER_2: 6.0, LAYER_3: 5.0},
        via_delay=10.0,
        via_overrides=(ViaOverrideEntry(LAYER_0, LAYER_3, LAYER_0, LAYER_3, delay=120),),
    )


@pytest.fixture
def fast_class() -> NetClass:
    return NetClass("HighSpeed", delay_profile="Fast")


@pytest.fixture
def untimed_class() -> NetClass:
    return NetClass("Default", delay_profile="")


@pytest.fixture
def geometry() -> FakeGeometry:
    # 0.2 mm between F.Cu and B.Cu, 1.6 mm between the inner layers
    return FakeGeometry({(LAYER_0, LAYER_3): 200_000, (LAYER_1, LAYER_2): 1_600_000})


@pytest.fixture
def store(fast_profile: DelayProfile) -> DelayProfileStore:
    return DelayProfileStore([fast_profile])


@pytest.fixture
def calculator(store: DelayProfileStore, geometry: FakeGeometry) -> PropagationDelayCalculator:
    return PropagationDelayCalculator.attach(store, geometry)


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    """Write a minimal .kicad_pro file with delay profiles."""
    path = tmp_path / "test.kicad_pro"
    path.write_text(json.dumps(MINIMAL_PROJECT, indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user-level config and environment from leaking into tests."""
    monkeypatch.setattr("kicad_delay.config.USER_CONFIG_PATH", tmp_path / "no-user-config.toml")
    monkeypatch.delenv("KICAD_DELAY_TIME_UNIT", raising=False)
