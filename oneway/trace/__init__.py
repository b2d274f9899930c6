"""
State transition tracing.

Tracer publishes TraceEvents describing field-level state changes for
dispatches that asked to be traced.
"""

from .tracer import MISSING, NO_CHANGES, StateChange, TraceEvent, Tracer, diff_states, named_fields

__all__ = [
    "MISSING",
    "NO_CHANGES",
    "StateChange",
    "TraceEvent",
    "Tracer",
    "diff_states",
    "named_fields",
]
