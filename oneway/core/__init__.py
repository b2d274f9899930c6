"""
Core state-management primitives.

This module provides the feature contract every container is built from:
- FeatureState: Immutable state snapshots with named fields
- FeatureAction / Cancel: Action variants and the reserved cancel variant
- Reducer: Per-variant, total state transitions
- EffectHandler: Asynchronous follow-up action producers
- Feature: The bundle binding all of the above to a stable id
- subscription_key: Deterministic keys for in-flight effects
"""

from .feature import Cancel, Feature, FeatureAction, FeatureState, is_cancel
from .reducer import Reducer
from .effects import EffectHandler, FunctionEffect, effect
from .canonical import canonicalize, canonical_json_str
from .ids import stable_id, subscription_key
from .errors import FeatureDefinitionError, OneWayError

__all__ = [
    "Cancel",
    "Feature",
    "FeatureAction",
    "FeatureState",
    "is_cancel",
    "Reducer",
    "EffectHandler",
    "FunctionEffect",
    "effect",
    "canonicalize",
    "canonical_json_str",
    "stable_id",
    "subscription_key",
    "FeatureDefinitionError",
    "OneWayError",
]
