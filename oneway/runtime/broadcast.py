"""
Replay-latest multicast.

A Broadcast holds one current value. New subscribers first receive the
current value, then every published value in publish order. All
subscribers see the same sequence.
"""

import asyncio
import itertools
import threading
from typing import Any, AsyncIterator, Callable, Dict, Generic, TypeVar

from .delivery import DeliveryContext
from ..logging_config import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class Disposable:
    """Handle that detaches a subscriber. dispose() is idempotent."""

    def __init__(self, on_dispose: Callable[[], None]) -> None:
        self._on_dispose = on_dispose
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._on_dispose()


class Broadcast(Generic[T]):
    """
    Replay-latest broadcast bound to a delivery context.

    publish() must be called on the delivery context. subscribe() may be
    called from anywhere: off-context subscriptions are registered on the
    delivery context so the replayed value can never overtake a publish.
    """

    def __init__(self, initial: T, delivery: DeliveryContext, name: str = "") -> None:
        self._value = initial
        self._delivery = delivery
        self.name = name
        self._subscribers: Dict[int, Callable[[T], None]] = {}
        self._ids = itertools.count()
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers.values())
        for callback in subscribers:
            self._deliver(callback, value)

    def subscribe(self, callback: Callable[[T], None], replay: bool = True) -> Disposable:
        """
        Register a subscriber.

        Args:
            callback: Called with each value on the delivery context
            replay: Deliver the current value first

        Returns:
            Disposable that detaches the callback
        """
        sub_id = next(self._ids)

        def attach() -> None:
            if disposable.disposed:
                return
            with self._lock:
                self._subscribers[sub_id] = callback
                current = self._value
            if replay:
                self._deliver(callback, current)

        def detach() -> None:
            with self._lock:
                self._subscribers.pop(sub_id, None)

        disposable = Disposable(detach)
        if self._delivery.in_context():
            attach()
        else:
            self._delivery.call_soon(attach)
        return disposable

    async def stream(self) -> AsyncIterator[T]:
        """
        Async iterator over the current value and every later publish.

        Never terminates on its own; stop iterating (or close the iterator)
        to unsubscribe. Safe to iterate from a loop other than the delivery
        loop.
        """
        queue: "asyncio.Queue[T]" = asyncio.Queue()
        consumer = asyncio.get_running_loop()

        if consumer is self._delivery.loop:
            push = queue.put_nowait
        else:
            def push(value: T) -> None:
                consumer.call_soon_threadsafe(queue.put_nowait, value)

        disposable = self.subscribe(push)
        try:
            while True:
                yield await queue.get()
        finally:
            disposable.dispose()

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _deliver(self, callback: Callable[[T], None], value: Any) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Subscriber of %s failed", self.name or "broadcast")

    def __repr__(self) -> str:
        return f"Broadcast(name={self.name!r}, value={self._value!r})"
