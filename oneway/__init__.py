"""
OneWay

Unidirectional state management: immutable state, typed actions, pure
reducers, and cancellable asynchronous effects.

Public API:
- Feature, FeatureState, FeatureAction, Cancel, Reducer: Feature contract
- EffectHandler, effect: Asynchronous follow-up actions
- OneWay: The state container (send / observe / cancel / transform)
- GlobalOneWay, get_global_oneway: Process-wide registry
- Tracer, TraceEvent: State transition diagnostics
"""

__version__ = "0.1.0"

from .core import (
    Cancel,
    EffectHandler,
    Feature,
    FeatureAction,
    FeatureState,
    Reducer,
    effect,
    subscription_key,
)
from .runtime.container import OneWay
from .registry import GlobalOneWay, get_global_oneway
from .trace import TraceEvent, Tracer

__all__ = [
    "Cancel",
    "EffectHandler",
    "Feature",
    "FeatureAction",
    "FeatureState",
    "Reducer",
    "effect",
    "subscription_key",
    "OneWay",
    "GlobalOneWay",
    "get_global_oneway",
    "TraceEvent",
    "Tracer",
]
