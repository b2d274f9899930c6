"""
Feature contract: state, actions, and the bundle that binds them.

A Feature is the static description of one state slice:
- State: immutable, value-equatable snapshot (FeatureState)
- Action: closed set of variants (FeatureAction subclasses)
- Reducer: total function (state, action) -> state
- Effects: handlers turning actions into asynchronous follow-up actions
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence, Tuple

from .errors import FeatureDefinitionError
from ..logging_config import get_logger


class FeatureState:
    """
    Base for feature state snapshots.

    Subclasses are expected to be frozen dataclasses. named_fields() is the
    one place a state describes its attributes; the tracer diffs through it.
    Plain subclasses report their public instance attributes by default.
    """

    __slots__ = ()

    def named_fields(self) -> Iterator[Tuple[str, Any]]:
        """Yield (name, value) for every attribute, in declaration order."""
        if dataclasses.is_dataclass(self):
            for f in dataclasses.fields(self):
                yield f.name, getattr(self, f.name)
            return
        for name, value in getattr(self, "__dict__", {}).items():
            if not name.startswith("_"):
                yield name, value


class FeatureAction:
    """
    Base for action variants.

    Each variant is a subclass; payload-carrying variants are frozen
    dataclasses whose fields are the payload.
    """

    __slots__ = ()

    @property
    def variant(self) -> str:
        return type(self).__qualname__

    @staticmethod
    def cancel(target: Any) -> "Cancel":
        """Build the cancel action for a previously dispatched action."""
        return Cancel(target=target)


@dataclass(frozen=True)
class Cancel(FeatureAction):
    """Reserved variant: cancel the subscription started for `target`."""
    target: Any


def is_cancel(action: Any) -> bool:
    return isinstance(action, Cancel)


Reduce = Callable[[Any, Any], Any]


@dataclass(frozen=True, eq=False)
class Feature:
    """
    Immutable bundle describing one state slice.

    Fields:
        id: Stable unique identity (registry key, subscription namespace)
        reducer: Reducer or any callable (state, action) -> state
        effects: Effect handlers attached to every container of this feature
        state_type: Declared state class (informational, used in lookups)
        action_type: Declared action base class (informational)

    Features compare by identity: two Feature objects sharing an id are
    still different features.
    """
    id: str
    reducer: Reduce
    effects: Sequence[Any] = ()
    state_type: Optional[type] = None
    action_type: Optional[type] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise FeatureDefinitionError("Feature id must be a non-empty string")
        if not callable(self.reducer):
            raise FeatureDefinitionError(f"Feature {self.id!r} reducer is not callable")
        object.__setattr__(self, "effects", tuple(self.effects))

    def reduce(self, state: Any, action: Any) -> Any:
        """
        Total reduction.

        Unhandled variants, None results and reducer exceptions all leave the
        state unchanged; exceptions are logged.
        """
        try:
            new_state = self.reducer(state, action)
        except Exception:
            get_logger(__name__, feature=self.id).exception(
                "Reducer failed for %r, keeping previous state", action
            )
            return state
        if new_state is None:
            return state
        return new_state

    def __repr__(self) -> str:
        return f"Feature(id={self.id!r})"
