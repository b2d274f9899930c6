"""
Tracer: field-level diffs of state transitions.

Tracing is opt-in per dispatch. A disabled trace does nothing at all, not
even the diff. Trace events are published to the tracer's own broadcast,
never to the state stream.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple

from ..runtime.broadcast import Broadcast
from ..logging_config import get_logger
from ..runtime.delivery import DeliveryContext

TRACE_LOGGER = "oneway.trace"

SEPARATOR = "-----------------------------"
NO_CHANGES = "No changes"


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


@dataclass(frozen=True)
class StateChange:
    name: str
    old: Any
    new: Any

    def render(self) -> str:
        return f"{self.name}: {self.old!r} -> {self.new!r}"


@dataclass(frozen=True)
class TraceEvent:
    """
    Diagnostic record of one traced dispatch.

    Fields:
        context: Label of the tracing context (None = unknown)
        action: The dispatched action
        changes: Changed attributes in declaration order (empty = no changes)
    """
    context: Optional[str]
    action: Any
    changes: Tuple[StateChange, ...]

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def render(self) -> str:
        if self.changes:
            body = "\n".join(change.render() for change in self.changes)
        else:
            body = NO_CHANGES
        return "\n".join([
            SEPARATOR,
            f"[Context: {self.context or 'Unknown'}]",
            f"Action Triggered: {self.action!r}",
            "Changed State:",
            body,
            SEPARATOR,
        ])


def named_fields(state: Any) -> Iterator[Tuple[str, Any]]:
    """Enumerate a state's (name, value) pairs."""
    enumerate_fields = getattr(state, "named_fields", None)
    if callable(enumerate_fields):
        yield from enumerate_fields()
    elif dataclasses.is_dataclass(state) and not isinstance(state, type):
        for f in dataclasses.fields(state):
            yield f.name, getattr(state, f.name)
    elif isinstance(state, dict):
        yield from state.items()
    else:
        yield "value", state


def _differs(old: Any, new: Any) -> bool:
    try:
        return bool(old != new)
    except Exception:
        return str(old) != str(new)


def diff_states(old: Any, new: Any) -> Tuple[StateChange, ...]:
    """
    Changed attributes between two snapshots, matched by name.

    Attributes of `old` come first in their order, followed by attributes
    only present on `new`.
    """
    old_fields = dict(named_fields(old))
    new_fields = dict(named_fields(new))
    changes = []
    for name, old_value in old_fields.items():
        new_value = new_fields.get(name, MISSING)
        if new_value is MISSING or _differs(old_value, new_value):
            changes.append(StateChange(name, old_value, new_value))
    for name, new_value in new_fields.items():
        if name not in old_fields:
            changes.append(StateChange(name, MISSING, new_value))
    return tuple(changes)


class Tracer:
    """
    Per-container tracer.

    `events` replays the most recent event (None before the first one) to
    new subscribers. Rendered events are logged to "oneway.trace", stamped
    with the owning feature id.
    """

    def __init__(
        self,
        context: Optional[str] = None,
        delivery: Optional[DeliveryContext] = None,
        feature: Optional[str] = None,
    ) -> None:
        self.context = context
        self._log = get_logger(TRACE_LOGGER, feature=feature)
        self.events: Broadcast[Optional[TraceEvent]] = Broadcast(
            None, delivery or DeliveryContext.current(), name="trace"
        )

    @property
    def last_event(self) -> Optional[TraceEvent]:
        return self.events.value

    def trace(
        self,
        enabled: bool,
        action: Any,
        old: Any,
        new: Any,
        context: Optional[str] = None,
    ) -> Optional[TraceEvent]:
        """
        Diff old/new for a dispatched action and publish the event.

        Returns:
            The published TraceEvent, or None when disabled or on failure
        """
        if not enabled:
            return None
        try:
            event = TraceEvent(
                context=context or self.context,
                action=action,
                changes=diff_states(old, new),
            )
            self._log.info(event.render())
        except Exception:
            self._log.exception("Failed to trace %s", type(action).__name__)
            return None
        self.events.publish(event)
        return event
