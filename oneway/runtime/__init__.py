"""
Container runtime.

- DeliveryContext: Shared event-loop context that publishes commits
- Broadcast: Replay-latest multicast of states, actions and trace events
- SubscriptionTable: Live effect streams keyed by subscription key
- OneWay (oneway.runtime.container): The state container
"""

from .delivery import DeliveryContext
from .broadcast import Broadcast, Disposable
from .subscriptions import Subscription, SubscriptionTable

__all__ = [
    "DeliveryContext",
    "Broadcast",
    "Disposable",
    "Subscription",
    "SubscriptionTable",
]
