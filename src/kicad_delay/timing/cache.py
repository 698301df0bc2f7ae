"""
Lookup cache over the delay profile store.

Holds two maps, both keyed by profile name:
- profile name -> DelayProfile
- profile name -> {ViaOverrideKey: delay}

The cache is rebuilt in full from the store and never updated
incrementally. A rebuild binds fresh dictionaries instead of clearing the
old ones in place, so a mapping handed out before the rebuild stays a
consistent snapshot of its generation. Callers must still look up again
after a rebuild to see current data; ``generation`` tells them when to.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .profiles import DelayProfile, ViaOverrideKey

logger = logging.getLogger(__name__)

__all__ = ["DelayProfileCache"]

_NO_OVERRIDES: Mapping[ViaOverrideKey, int] = MappingProxyType({})


class DelayProfileCache:
    """Name-indexed view of delay profiles and their via overrides.

    Attributes:
        generation: Number of rebuilds so far (0 while empty)
    """

    def __init__(self) -> None:
        self._profiles: dict[str, DelayProfile] = {}
        self._via_overrides: dict[str, dict[ViaOverrideKey, int]] = {}
        self.generation = 0

    def rebuild(self, profiles: Iterable[DelayProfile]) -> None:
        """Repopulate both maps from the given profiles.

        Profiles are read once, in order. When two profiles share a name, or
        two via overrides in one profile share a key, the later one wins.

        Args:
            profiles: The store's profiles (or any iterable of profiles)
        """
        profile_map: dict[str, DelayProfile] = {}
        override_map: dict[str, dict[ViaOverrideKey, int]] = {}

        for profile in profiles:
            profile_map[profile.name] = profile

            overrides: dict[ViaOverrideKey, int] = {}
            for entry in profile.via_overrides:
                overrides[entry.key] = entry.delay
            override_map[profile.name] = overrides

        self._profiles = profile_map
        self._via_overrides = override_map
        self.generation += 1

        logger.debug(
            f"Rebuilt delay profile cache (generation {self.generation}): "
            f"{len(profile_map)} profile(s)"
        )

    def lookup(self, name: str | None) -> DelayProfile | None:
        """Find a profile by name.

        Returns:
            The profile, or None when no profile has that name. None means
            "no timing policy configured", not an error.
        """
        if not name:
            return None
        return self._profiles.get(name)

    def via_overrides(self, name: str) -> Mapping[ViaOverrideKey, int]:
        """Via overrides of a profile, keyed by exact layer combination.

        Returns:
            Read-only mapping, empty when the profile is unknown
        """
        overrides = self._via_overrides.get(name)
        if overrides is None:
            return _NO_OVERRIDES
        return MappingProxyType(overrides)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    @property
    def profile_names(self) -> list[str]:
        return list(self._profiles)
