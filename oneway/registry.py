"""
Global registry: one shared container per feature id.

Independently initialized call sites share a feature's state by looking it
up here. Registration is first-wins: later registrations for the same id
are no-ops so observers of the existing container are never reset.
Lookups and sends for unregistered features log a warning and return an
empty result instead of raising.

Usage:
    from oneway import registry

    registry.register_state(ToDoFeature, ToDoState())
    registry.send(ToDoFeature, Add("milk"))
    stream = registry.observe(ToDoFeature)
"""

import threading
from typing import Any, AsyncIterator, Dict, Optional, Union

from .core.feature import Feature
from .logging_config import get_logger
from .runtime.container import OneWay

logger = get_logger(__name__)

FeatureRef = Union[Feature, str]


def _feature_id(feature: FeatureRef) -> str:
    return feature if isinstance(feature, str) else feature.id


class GlobalOneWay:
    """
    Process-wide feature id -> container map.

    Entries move Unregistered -> Registered once and stay registered for
    the life of the process; only _reset() (tests) clears them.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, OneWay] = {}
        self._lock = threading.Lock()

    def register_state(self, feature: Feature, initial_state: Any, **options: Any) -> bool:
        """
        Create the shared container for a feature if none exists.

        Args:
            feature: Feature to register
            initial_state: Initial state for the new container
            **options: Extra OneWay constructor arguments (context, effects,
                delivery, config)

        Returns:
            True if a container was created, False if one already existed
        """
        with self._lock:
            if feature.id in self._entries:
                logger.debug("Feature %s already registered, keeping existing state", feature.id)
                return False
            self._entries[feature.id] = OneWay(feature, initial_state, **options)
        logger.debug("Registered feature %s", feature.id)
        return True

    def lookup(self, feature: FeatureRef) -> Optional[OneWay]:
        """
        Typed accessor for a registered container.

        A Feature argument must be the very Feature the container was
        registered with; a different Feature sharing the id is a miss.
        A plain id string skips that check.
        """
        feature_id = _feature_id(feature)
        with self._lock:
            oneway = self._entries.get(feature_id)
        if oneway is None:
            logger.warning("The initial state for feature %s has not been registered", feature_id)
            return None
        if isinstance(feature, Feature) and oneway.feature is not feature:
            logger.warning(
                "Feature %s is registered with a different feature definition (%r)",
                feature_id,
                oneway.feature,
            )
            return None
        return oneway

    def is_registered(self, feature: FeatureRef) -> bool:
        with self._lock:
            return _feature_id(feature) in self._entries

    def observe(self, feature: FeatureRef) -> Optional[AsyncIterator[Any]]:
        """State stream of the registered container, or None if unregistered."""
        oneway = self.lookup(feature)
        if oneway is None:
            return None
        return oneway.observe()

    state_stream = observe

    def state(self, feature: FeatureRef) -> Optional[Any]:
        """Committed state of the registered container, or None."""
        oneway = self.lookup(feature)
        if oneway is None:
            return None
        return oneway.state

    def send(self, feature: FeatureRef, action: Any, trace: bool = False) -> bool:
        """
        Forward an action to the registered container.

        Returns:
            False (with a warning) if the feature is not registered
        """
        oneway = self.lookup(feature)
        if oneway is None:
            return False
        oneway.send(action, trace=trace)
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _reset(self) -> None:
        """Drop every entry. Test suites only."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for oneway in entries:
            oneway.close()


_global: Optional[GlobalOneWay] = None
_global_lock = threading.Lock()


def get_global_oneway() -> GlobalOneWay:
    """Return the process-wide registry, creating it on first use."""
    global _global
    with _global_lock:
        if _global is None:
            _global = GlobalOneWay()
        return _global


def register_state(feature: Feature, initial_state: Any, **options: Any) -> bool:
    return get_global_oneway().register_state(feature, initial_state, **options)


def lookup(feature: FeatureRef) -> Optional[OneWay]:
    return get_global_oneway().lookup(feature)


def observe(feature: FeatureRef) -> Optional[AsyncIterator[Any]]:
    return get_global_oneway().observe(feature)


def state(feature: FeatureRef) -> Optional[Any]:
    return get_global_oneway().state(feature)


def send(feature: FeatureRef, action: Any, trace: bool = False) -> bool:
    return get_global_oneway().send(feature, action, trace=trace)


def _reset() -> None:
    """Clear the process-wide registry. Test suites only."""
    get_global_oneway()._reset()
