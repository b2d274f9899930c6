"""
Canonical serialization for action payloads.

Subscription keys are derived from an action's canonical form, so two
value-equal actions must serialize identically and any payload difference
must show up in the output.
"""

import dataclasses
import enum
import json
from typing import Any

from .feature import FeatureAction


def type_tag(obj: Any) -> str:
    """Qualified class name used as the variant tag of an action or payload."""
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def canonicalize(obj: Any) -> Any:
    """
    Convert an action (or any payload value) to a JSON-compatible canonical form.

    Rules:
    - dict keys stringified and sorted
    - tuples, lists converted to lists; sets and frozensets sorted
    - dataclasses become {"__type__": tag, field: value, ...}
    - enum members become {"__type__": tag, "name": member name}
    - numbers that compare equal serialize equally: bools and integral
      floats become ints
    - payload-less FeatureAction subclasses become {"__type__": tag, attr: value, ...}
    - other primitives pass through, anything else falls back to repr()
    """
    if obj is None or isinstance(obj, str):
        return obj
    if isinstance(obj, bool):
        return int(obj)
    if isinstance(obj, int):
        return obj
    if isinstance(obj, float):
        return int(obj) if obj.is_integer() else obj
    if isinstance(obj, enum.Enum):
        return {"__type__": type_tag(obj), "name": obj.name}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        out = {"__type__": type_tag(obj)}
        for f in dataclasses.fields(obj):
            out[f.name] = canonicalize(getattr(obj, f.name))
        return out
    if isinstance(obj, dict):
        items = {str(canonicalize(k)): canonicalize(v) for k, v in obj.items()}
        return {k: items[k] for k in sorted(items)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((canonicalize(x) for x in obj), key=lambda v: json.dumps(v, sort_keys=True))
    if isinstance(obj, bytes):
        return obj.hex()
    if isinstance(obj, FeatureAction):
        out = {"__type__": type_tag(obj)}
        for name, value in sorted(getattr(obj, "__dict__", {}).items()):
            out[name] = canonicalize(value)
        return out
    return {"__type__": type_tag(obj), "repr": repr(obj)}


def canonical_json_str(obj: Any) -> str:
    """
    Deterministic JSON string of the canonical form.

    Guarantees:
    - sort_keys=True (secondary safety)
    - separators remove whitespace
    - ensure_ascii=False keeps UTF-8 stable
    """
    canon = canonicalize(obj)
    return json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
