"""
Subscription table: live effect streams keyed by subscription key.

One dispatch creates at most one Subscription, holding a task per effect
handler that answered the action. The entry is dropped when all of its
streams finish or when it is cancelled.
"""

import threading
from typing import Any, Dict, List, Optional

from .delivery import DeliveryContext


class Subscription:
    """
    Cancellable handle for the effect streams started by one dispatch.

    Cancellation is cooperative: the cancelled flag is checked before each
    emission is forwarded, and the underlying tasks are cancelled on the
    delivery context.
    """

    def __init__(self, key: str, delivery: DeliveryContext, streams: int) -> None:
        self.key = key
        self._delivery = delivery
        self._remaining = streams
        self._handles: List[Any] = []
        self._cancelled = False
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def finished(self) -> bool:
        return self._remaining <= 0

    def attach(self, handle: Any) -> None:
        with self._lock:
            self._handles.append(handle)
            cancelled = self._cancelled
        if cancelled:
            self._delivery.cancel(handle)

    def stream_finished(self) -> bool:
        """Record one finished stream. True when it was the last one."""
        with self._lock:
            self._remaining -= 1
            return self._remaining == 0

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            handles = list(self._handles)
        for handle in handles:
            self._delivery.cancel(handle)

    def __repr__(self) -> str:
        return f"Subscription(key={self.key!r}, cancelled={self._cancelled})"


class SubscriptionTable:
    """Thread-safe map of subscription key -> live Subscription."""

    def __init__(self) -> None:
        self._entries: Dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def replace(self, subscription: Subscription) -> Optional[Subscription]:
        """
        Store a subscription, cancelling any live one under the same key.

        Returns:
            The replaced subscription, if any
        """
        with self._lock:
            previous = self._entries.get(subscription.key)
            self._entries[subscription.key] = subscription
        if previous is not None:
            previous.cancel()
        return previous

    def get(self, key: str) -> Optional[Subscription]:
        with self._lock:
            return self._entries.get(key)

    def cancel(self, key: str) -> bool:
        """Cancel and remove by key. Unknown keys are a no-op (returns False)."""
        with self._lock:
            subscription = self._entries.pop(key, None)
        if subscription is None:
            return False
        subscription.cancel()
        return True

    def discard(self, subscription: Subscription) -> bool:
        """Remove a finished subscription unless it was already replaced."""
        with self._lock:
            if self._entries.get(subscription.key) is subscription:
                del self._entries[subscription.key]
                return True
            return False

    def cancel_all(self) -> int:
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for subscription in entries:
            subscription.cancel()
        return len(entries)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
