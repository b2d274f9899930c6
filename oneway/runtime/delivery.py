"""
Delivery context: the single execution context that publishes commits.

A DeliveryContext wraps one asyncio event loop. Committed states, trace
events and effect emissions are all handled on it, in scheduling order,
so observers never need their own synchronization.

Containers created inside a running loop share that loop's context.
Containers created from plain threads share one process-wide context
driven by a daemon thread.
"""

import asyncio
import threading
from typing import Any, Callable, Coroutine, Dict, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)

_contexts: Dict[asyncio.AbstractEventLoop, "DeliveryContext"] = {}
_shared: Optional["DeliveryContext"] = None
_lock = threading.Lock()


class DeliveryContext:
    """
    Thread-safe scheduling onto one event loop.

    call_soon() callbacks and spawn() task starts run in FIFO order
    regardless of which thread scheduled them.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, thread: Optional[threading.Thread] = None) -> None:
        self._loop = loop
        self._thread = thread

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def closed(self) -> bool:
        return self._loop.is_closed()

    def in_context(self) -> bool:
        """True when called from a callback or task running on this context's loop."""
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> bool:
        """
        Schedule fn(*args) on the delivery loop.

        Returns:
            False if the loop is closed and the callback was dropped
        """
        try:
            if self.in_context():
                self._loop.call_soon(fn, *args)
            else:
                self._loop.call_soon_threadsafe(fn, *args)
        except RuntimeError:
            logger.warning("Delivery loop is closed, dropping %s", getattr(fn, "__qualname__", fn))
            return False
        return True

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Optional[Any]:
        """
        Run a coroutine as a task on the delivery loop.

        Returns:
            A handle with cancel() and add_done_callback(), or None if the
            loop is closed (the coroutine is closed without running)
        """
        try:
            if self.in_context():
                return self._loop.create_task(coro)
            return asyncio.run_coroutine_threadsafe(coro, self._loop)
        except RuntimeError:
            coro.close()
            logger.warning("Delivery loop is closed, effect not started")
            return None

    def cancel(self, handle: Any) -> None:
        """Cancel a handle returned by spawn(), from any thread."""
        if isinstance(handle, asyncio.Future) and not self.in_context():
            self.call_soon(handle.cancel)
        else:
            handle.cancel()

    @classmethod
    def for_loop(cls, loop: asyncio.AbstractEventLoop) -> "DeliveryContext":
        """
        Context cached for a loop. Entries for closed loops are evicted on
        every call.
        """
        with _lock:
            for stale in [cached for cached in _contexts if cached.is_closed()]:
                del _contexts[stale]
            ctx = _contexts.get(loop)
            if ctx is None:
                ctx = cls(loop)
                _contexts[loop] = ctx
            return ctx

    @classmethod
    def current(cls) -> "DeliveryContext":
        """Context of the running loop, or the shared background context."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return cls.shared()
        return cls.for_loop(loop)

    @classmethod
    def shared(cls) -> "DeliveryContext":
        """Process-wide context backed by a daemon thread (started lazily)."""
        global _shared
        with _lock:
            if _shared is None or _shared.closed:
                _shared = cls._start_background()
            return _shared

    @classmethod
    def _start_background(cls) -> "DeliveryContext":
        loop = asyncio.new_event_loop()
        ready = threading.Event()

        def run() -> None:
            asyncio.set_event_loop(loop)
            loop.call_soon(ready.set)
            loop.run_forever()

        thread = threading.Thread(target=run, name="oneway-delivery", daemon=True)
        thread.start()
        ready.wait()
        logger.debug("Started shared delivery loop")
        return cls(loop, thread)

    def __repr__(self) -> str:
        return f"DeliveryContext(loop={self._loop!r})"
