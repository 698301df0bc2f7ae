"""
Propagation delay calculation from user-defined delay profiles.

Converts routed items to delays in time IU, and target delays back to
track lengths. The profile for an item comes from its net class; the
profile supplies per-layer delay constants (time IU per mm), a default via
delay constant and exact via overrides.

Formulas:
- Line: ``layer_delay[layer] * length_mm``
- Via: the override for (signal from, signal to, via from, via to) if one
  exists, else ``via_delay * stackup_height_mm(signal from, signal to)``
- Pad: the pad's own pad-to-die delay

Missing configuration is never an error. An unknown profile, a layer
without a constant or a retired item all give 0; a via without an override
falls back to the stackup formula.

Example::

    store = DelayProfileStore(load_profiles())
    geometry = StackupGeometry(Stackup.jlcpcb_4layer())
    calculator = PropagationDelayCalculator.attach(store, geometry)

    delay = calculator.delay_for_item(item, context)
    length = calculator.length_for_delay(delay, context)
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence

from ..units import PCB_IU_PER_MM
from .cache import DelayProfileCache
from .geometry import GeometryAccessor
from .items import DelayItem, GeometryContext, LineItem, PadItem, Polyline, ViaItem
from .profiles import DelayProfile, DelayProfileStore, ViaOverrideKey

logger = logging.getLogger(__name__)

__all__ = ["PropagationDelayCalculator"]


class PropagationDelayCalculator:
    """Delay calculator over a delay profile store.

    The calculator owns a DelayProfileCache and rebuilds it whenever the
    store reports a change. The cache starts empty; use ``attach()`` to
    subscribe and populate in one step. Every calculation only reads the
    cache, so results always reflect the most recent rebuild.

    Not thread-safe: rebuilds and calculations must run on the same thread.

    Attributes:
        store: Delay profile store read on every rebuild
        geometry: Source of via heights and shape lengths
    """

    def __init__(self, store: DelayProfileStore, geometry: GeometryAccessor) -> None:
        self.store = store
        self.geometry = geometry
        self._cache = DelayProfileCache()

    @classmethod
    def attach(
        cls, store: DelayProfileStore, geometry: GeometryAccessor
    ) -> PropagationDelayCalculator:
        """Create a calculator, subscribe it to the store and fill its cache."""
        calculator = cls(store, geometry)
        store.subscribe(calculator)
        calculator.on_settings_changed()
        return calculator

    def detach(self) -> None:
        """Stop receiving store notifications."""
        self.store.unsubscribe(self)

    @property
    def cache(self) -> DelayProfileCache:
        return self._cache

    def on_settings_changed(self) -> None:
        """Rebuild the profile cache from the store."""
        self._cache.rebuild(self.store)

    def get_delay_profile(self, name: str | None) -> DelayProfile | None:
        """Cached profile by name, or None when no profile has that name."""
        return self._cache.lookup(name)

    def delay_for_item(self, item: DelayItem, context: GeometryContext | None = None) -> int:
        """Propagation delay of one routed item.

        Retired items are 0 without any profile lookup. Pads report their
        pad-to-die delay whether or not a profile applies.

        Args:
            item: Line, via or pad
            context: Geometry context of the caller (not needed for items)

        Returns:
            Delay in time IU
        """
        if item.is_retired:
            return 0

        if isinstance(item, PadItem):
            return item.pad_to_die_delay

        profile = self._cache.lookup(item.delay_profile_name)
        if profile is None:
            logger.debug(f"No delay profile '{item.delay_profile_name}' for {type(item).__name__}")
            return 0

        return self._item_delay(item, profile)

    def delays_for_items(
        self, items: Sequence[DelayItem], context: GeometryContext | None = None
    ) -> list[int]:
        """Propagation delays for a batch of items sharing one net class.

        The profile is resolved once, from the first item, and used for the
        whole batch. Callers must only batch items of the same net (or at
        least the same delay profile): a mixed batch is computed entirely
        with the first item's profile. Unlike ``delay_for_item``, pads in a
        batch without a profile get 0 rather than their pad-to-die delay.

        Args:
            items: Items of one net
            context: Geometry context of the caller (not needed for items)

        Returns:
            One delay per item, in order. Empty for an empty batch; all
            zeros when the first item's profile does not resolve.
        """
        if not items:
            return []

        profile = self._cache.lookup(items[0].delay_profile_name)
        if profile is None:
            logger.debug(
                f"No delay profile '{items[0].delay_profile_name}', "
                f"{len(items)} item(s) get zero delay"
            )
            return [0] * len(items)

        return [self._item_delay(item, profile) for item in items]

    def length_for_delay(self, delay: int, context: GeometryContext) -> int:
        """Track length on ``context.layer`` that has the given delay.

        Inverts the line formula only; via and pad delays are not considered.

        Args:
            delay: Target delay in time IU
            context: Net class and layer of the track

        Returns:
            Length in IU, or 0 if no profile or layer constant applies
        """
        profile = self._cache.lookup(context.delay_profile_name)
        if profile is None:
            return 0

        delay_per_mm = self._layer_delay(profile, context.layer)
        if not delay_per_mm:
            return 0

        length_mm = delay / delay_per_mm
        return int(length_mm * PCB_IU_PER_MM)

    def delay_for_shape(self, shape: Polyline, context: GeometryContext) -> int:
        """Delay of a polyline that is not (yet) a board item.

        Used for proposed tuning patterns before they are committed.

        Args:
            shape: Centerline of the proposed track
            context: Net class and layer of the track

        Returns:
            Delay in time IU, or 0 if no profile applies
        """
        profile = self._cache.lookup(context.delay_profile_name)
        if profile is None:
            return 0

        return self._line_delay(profile, context.layer, self.geometry.physical_length(shape))

    def _item_delay(self, item: DelayItem, profile: DelayProfile) -> int:
        if item.is_retired:
            return 0

        if isinstance(item, LineItem):
            return self._line_delay(profile, item.layer, self.geometry.physical_length(item.shape))

        if isinstance(item, ViaItem):
            return self._via_delay(profile, item)

        if isinstance(item, PadItem):
            return item.pad_to_die_delay

        return 0

    def _line_delay(self, profile: DelayProfile, layer: Hashable, length_iu: int) -> int:
        delay_per_mm = self._layer_delay(profile, layer)
        if delay_per_mm is None:
            return 0
        return int(delay_per_mm * (length_iu / PCB_IU_PER_MM))

    def _via_delay(self, profile: DelayProfile, via: ViaItem) -> int:
        # Layers are used as given; they are expected in stackup order already
        key = ViaOverrideKey(
            via.signal_start_layer,
            via.signal_end_layer,
            via.via_start_layer,
            via.via_end_layer,
        )
        override = self._cache.via_overrides(profile.name).get(key)
        if override is not None:
            return override

        height_iu = self.geometry.stackup_height(via.signal_start_layer, via.signal_end_layer)
        return int(profile.via_delay * (height_iu / PCB_IU_PER_MM))

    @staticmethod
    def _layer_delay(profile: DelayProfile, layer: Hashable) -> float | None:
        delay_per_mm = profile.layer_delay(layer)
        if delay_per_mm is None:
            logger.debug(f"Delay profile '{profile.name}' has no delay for layer {layer}")
        return delay_per_mm
