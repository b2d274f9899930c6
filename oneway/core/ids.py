"""
Stable identifier generation.

Subscription keys namespace an action by its feature and are fully
determined by the action's variant and payload.
"""

import hashlib
from typing import Any

from .canonical import canonical_json_str


def stable_id(*parts: str) -> str:
    """
    Generate stable ID derived from inputs (no randomness).

    Args:
        *parts: String parts to combine into ID

    Returns:
        SHA-256 hash as hex string
    """
    raw = "|".join(parts).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def subscription_key(feature_id: str, action: Any) -> str:
    """
    Derive the subscription key for an action dispatched on a feature.

    Value-equal actions yield the same key (restart semantics); actions that
    differ in any payload field yield different keys.

    Example:
        subscription_key("TodoFeature", ReserveToDo(seconds=3))
        -> "TodoFeature:ReserveToDo:5b1c..."
    """
    payload = canonical_json_str(action)
    tag = payload_tag(action)
    return f"{feature_id}:{tag}:{stable_id(feature_id, tag, payload)}"


def payload_tag(action: Any) -> str:
    variant = getattr(action, "variant", None)
    if isinstance(variant, str):
        return variant
    return type(action).__qualname__
