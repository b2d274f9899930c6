"""
Reducer: Pure state transition functions.

The reducer must be:
- Pure (no side effects, no I/O)
- Deterministic (same input -> same output)
- Total (unhandled variants leave the state unchanged)
"""

from typing import Any, Callable, Dict

# Handler signature: (current_state, action) -> new_state
Handler = Callable[[Any, Any], Any]


class Reducer:
    """
    Registry of per-variant handlers for state transitions.

    Usage:
        reducer = Reducer()
        reducer.register(Add, handle_add)

        @reducer.on(Delete)
        def handle_delete(state, action):
            ...

        new_state = reducer(state, action)
    """

    def __init__(self) -> None:
        self._handlers: Dict[type, Handler] = {}

    def register(self, action_type: type, handler: Handler) -> None:
        """
        Register action handler.

        Args:
            action_type: Action variant class
            handler: Pure function (state, action) -> new_state
        """
        self._handlers[action_type] = handler

    def on(self, action_type: type) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        def deco(handler: Handler) -> Handler:
            self.register(action_type, handler)
            return handler
        return deco

    def handles(self, action: Any) -> bool:
        return self._lookup(type(action)) is not None

    def apply(self, state: Any, action: Any) -> Any:
        """
        Apply action to state using the registered handler.

        Variants are matched by exact class first, then by the nearest
        registered base class. No handler means no change.
        """
        handler = self._lookup(type(action))
        if handler is None:
            return state
        return handler(state, action)

    __call__ = apply

    def _lookup(self, action_type: type):
        handler = self._handlers.get(action_type)
        if handler is not None:
            return handler
        for base in action_type.__mro__[1:]:
            if base in self._handlers:
                return self._handlers[base]
        return None
