"""
Delay profile records and the store that owns them.

A delay profile names a timing policy: a propagation delay per millimeter
for each copper layer, a default via delay per millimeter, and explicit
via overrides for specific layer combinations. Net classes refer to a
profile by name.

The store is the single owner of the profile list. Anything that derives
state from it (the delay calculator's cache) subscribes and is told to
rebuild whenever the list changes.

Example::

    store = DelayProfileStore()
    store.subscribe(calculator)

    store.add_profile(
        DelayProfile(
            name="DDR4",
            layer_delays={"F.Cu": 5900.0, "In1.Cu": 6800.0},
            via_delay=7000.0,
            via_overrides=(
                ViaOverrideEntry("F.Cu", "In1.Cu", "F.Cu", "B.Cu", delay=9500),
            ),
        )
    )  # calculator.on_settings_changed() runs here
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import NamedTuple, Protocol

logger = logging.getLogger(__name__)

__all__ = [
    "DelayProfile",
    "DelayProfileStore",
    "SettingsListener",
    "ViaOverrideEntry",
    "ViaOverrideKey",
]


class ViaOverrideKey(NamedTuple):
    """Exact layer combination a via override applies to."""

    signal_layer_from: Hashable
    signal_layer_to: Hashable
    via_layer_from: Hashable
    via_layer_to: Hashable


@dataclass(frozen=True)
class ViaOverrideEntry:
    """Explicit delay for a via between specific layers.

    Attributes:
        signal_layer_from: Layer the signal enters the via on
        signal_layer_to: Layer the signal leaves the via on
        via_layer_from: First layer of the via padstack
        via_layer_to: Last layer of the via padstack
        delay: Final delay in time IU (not a per-length rate)
    """

    signal_layer_from: Hashable
    signal_layer_to: Hashable
    via_layer_from: Hashable
    via_layer_to: Hashable
    delay: int

    @property
    def key(self) -> ViaOverrideKey:
        """Composite lookup key for this override."""
        return ViaOverrideKey(
            self.signal_layer_from,
            self.signal_layer_to,
            self.via_layer_from,
            self.via_layer_to,
        )


@dataclass(frozen=True)
class DelayProfile:
    """Named propagation delay policy.

    Attributes:
        name: Unique profile name, referenced by net classes
        layer_delays: Delay per millimeter for each copper layer, in time IU
        via_delay: Default via delay per millimeter of barrel, in time IU
        via_overrides: Explicit via delays, in file order
    """

    name: str
    layer_delays: Mapping[Hashable, float] = field(default_factory=dict)
    via_delay: float = 0.0
    via_overrides: tuple[ViaOverrideEntry, ...] = ()

    def __post_init__(self) -> None:
        # Freeze the containers so cached references cannot drift
        object.__setattr__(self, "layer_delays", MappingProxyType(dict(self.layer_delays)))
        object.__setattr__(self, "via_overrides", tuple(self.via_overrides))

    def layer_delay(self, layer: Hashable) -> float | None:
        """Delay per millimeter on a layer, or None if the layer has no entry."""
        return self.layer_delays.get(layer)

    def __repr__(self) -> str:
        return (
            f"DelayProfile({self.name!r}, layers={len(self.layer_delays)}, "
            f"via_delay={self.via_delay}, overrides={len(self.via_overrides)})"
        )


class SettingsListener(Protocol):
    """Receives a call whenever the delay profile store changes."""

    def on_settings_changed(self) -> None: ...


class DelayProfileStore:
    """Ordered collection of delay profiles with change notification.

    Listeners are notified synchronously, in subscription order, after every
    mutation. Iterating the store yields profiles in their stored order.
    """

    def __init__(self, profiles: Iterable[DelayProfile] = ()) -> None:
        self._profiles: list[DelayProfile] = list(profiles)
        self._listeners: list[SettingsListener] = []

    def __iter__(self) -> Iterator[DelayProfile]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    @property
    def profiles(self) -> tuple[DelayProfile, ...]:
        """Snapshot of the stored profiles."""
        return tuple(self._profiles)

    @property
    def profile_names(self) -> list[str]:
        return [profile.name for profile in self._profiles]

    def subscribe(self, listener: SettingsListener) -> None:
        """Register a listener; subscribing twice has no extra effect."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SettingsListener) -> None:
        """Remove a listener if it is registered."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self) -> None:
        """Tell every listener that the profiles changed."""
        logger.debug(f"Delay profiles changed, notifying {len(self._listeners)} listener(s)")
        for listener in list(self._listeners):
            listener.on_settings_changed()

    def set_profiles(self, profiles: Iterable[DelayProfile]) -> None:
        """Replace all profiles (e.g. after loading a project)."""
        self._profiles = list(profiles)
        self.notify()

    def add_profile(self, profile: DelayProfile) -> None:
        """Append a profile."""
        self._profiles.append(profile)
        self.notify()

    def remove_profile(self, name: str) -> bool:
        """Remove every profile with the given name.

        Returns:
            True if anything was removed
        """
        remaining = [profile for profile in self._profiles if profile.name != name]
        if len(remaining) == len(self._profiles):
            return False
        self._profiles = remaining
        self.notify()
        return True

    def clear(self) -> None:
        """Remove all profiles."""
        self._profiles = []
        self.notify()
