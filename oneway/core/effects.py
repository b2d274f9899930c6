"""
Effect handlers: side effects that answer actions with more actions.

A handler receives the dispatched action and the state at dispatch time
(before that action's own reduction) and returns an async iterator of
follow-up actions, or None when it has nothing to do for the action.

Handlers own their failures: anything that can go wrong inside the
sequence should be turned into an action or dropped.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Callable, Optional

EffectStream = AsyncIterator[Any]


class EffectHandler(ABC):
    """Abstract effect handler."""

    @property
    def name(self) -> str:
        return type(self).__qualname__

    @abstractmethod
    def handle(self, action: Any, state: Any) -> Optional[EffectStream]:
        """
        Start the effect for an action.

        Returns:
            Async iterator of follow-up actions (may be empty or unbounded),
            or None if the action needs no effect
        """
        ...


class FunctionEffect(EffectHandler):
    """Effect handler backed by an async generator function."""

    def __init__(self, fn: Callable[[Any, Any], Optional[EffectStream]]) -> None:
        self._fn = fn

    @property
    def name(self) -> str:
        return getattr(self._fn, "__qualname__", repr(self._fn))

    def handle(self, action: Any, state: Any) -> Optional[EffectStream]:
        return self._fn(action, state)

    def __repr__(self) -> str:
        return f"FunctionEffect({self.name})"


def effect(fn: Callable[[Any, Any], Optional[EffectStream]]) -> EffectHandler:
    """
    Decorator turning an async generator function into an EffectHandler.

    Usage:
        @effect
        async def reserve(action, state):
            if isinstance(action, ReserveToDo):
                await asyncio.sleep(action.seconds)
                yield Add("Reserved To-Do")
    """
    return FunctionEffect(fn)
