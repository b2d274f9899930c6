"""
OneWay: the state container.

Dispatch pipeline for send(action):
1. record the action as last dispatched
2. reduce against the pending (not yet committed) state, or the committed one
3. start effect handlers with the pre-action state
4. schedule the commit on the delivery context

send() is serialized by a per-container lock and returns once the reduce
and effect registration are done. Commits always happen later, on the
delivery context. Sends issued before that commit runs fold into it, so
observers see one published state for the whole batch.
"""

import threading
from typing import Any, AsyncIterator, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from ..config import OneWayConfig
from ..core.effects import EffectHandler
from ..core.feature import Feature, is_cancel
from ..core.ids import subscription_key
from ..logging_config import get_logger
from ..metrics import set_active_subscriptions, track_action, track_commit, track_effect_failure
from ..trace.tracer import Tracer
from .broadcast import Broadcast, Disposable
from .delivery import DeliveryContext
from .subscriptions import Subscription, SubscriptionTable

S = TypeVar("S")

_NOTHING = object()


class OneWay(Generic[S]):
    """
    Container owning one committed state for one Feature.

    Usage:
        oneway = OneWay(ToDoFeature, ToDoState())
        oneway.send(Add("milk"), trace=True)

        async for state in oneway.observe():
            ...
    """

    def __init__(
        self,
        feature: Feature,
        initial_state: S,
        context: Optional[str] = None,
        effects: Sequence[EffectHandler] = (),
        delivery: Optional[DeliveryContext] = None,
        config: Optional[OneWayConfig] = None,
    ) -> None:
        self.feature = feature
        self._config = config or OneWayConfig.from_env()
        self._delivery = delivery or DeliveryContext.current()
        self._effects: Tuple[EffectHandler, ...] = tuple(feature.effects) + tuple(effects)
        self._log = get_logger(__name__, feature=feature.id)

        self._lock = threading.Lock()
        self._committed: S = initial_state
        self._pending: Any = _NOTHING
        # (action, before, after, traced) for every send folded into the pending commit
        self._dispatched: List[Tuple[Any, Any, Any, bool]] = []
        self._last_action: Any = None

        self._subscriptions = SubscriptionTable()
        self._links: Dict[str, Disposable] = {}
        self._links_lock = threading.Lock()

        self._states: Broadcast[S] = Broadcast(initial_state, self._delivery, name=f"{feature.id}.state")
        self.actions: Broadcast[Any] = Broadcast(None, self._delivery, name=f"{feature.id}.actions")
        self.tracer = Tracer(context=context, delivery=self._delivery, feature=feature.id)

    # -- observation -------------------------------------------------------

    @property
    def state(self) -> S:
        """Last committed state."""
        return self._committed

    @property
    def last_action(self) -> Any:
        """Last dispatched action (None before the first send)."""
        return self._last_action

    @property
    def delivery(self) -> DeliveryContext:
        return self._delivery

    def observe(self) -> AsyncIterator[S]:
        """
        Committed states: the current one first, then every commit in order.

        Never terminates; every observer sees the same sequence.
        """
        return self._states.stream()

    def subscribe(self, callback: Callable[[S], None]) -> Disposable:
        """Callback form of observe(); callbacks run on the delivery context."""
        return self._states.subscribe(callback)

    def active_subscriptions(self) -> List[str]:
        return self._subscriptions.keys()

    # -- dispatch ----------------------------------------------------------

    def send(self, action: Any, trace: bool = False) -> None:
        """
        Dispatch an action. Never raises.

        Cancel actions are routed to cancel() without reduction, effects,
        commit or trace.
        """
        traced = trace or self._config.trace_all

        with self._lock:
            self._last_action = action
            self._delivery.call_soon(self.actions.publish, action)

            if is_cancel(action):
                target = action.target
            else:
                target = _NOTHING
                base = self._committed if self._pending is _NOTHING else self._pending
                candidate = self.feature.reduce(base, action)
                self._pending = candidate
                self._dispatched.append((action, base, candidate, traced))
                self._start_effects(action, base, traced)
                self._delivery.call_soon(self._commit)

        if target is not _NOTHING:
            track_action(self.feature.id, "cancel")
            self.cancel(target)
        else:
            track_action(self.feature.id, "action")
            self._log.debug("Dispatched %r", action)

    def cancel(self, action: Any) -> None:
        """Cancel the effects started for `action`. Unknown or finished keys are a no-op."""
        key = subscription_key(self.feature.id, action)
        if self._subscriptions.cancel(key):
            self._log.debug("Cancelled effects for %r", action)
        else:
            self._log.debug("Nothing to cancel for %r", action)
        set_active_subscriptions(self.feature.id, len(self._subscriptions))

    def transform(
        self,
        source: Broadcast[Any],
        mapper: Callable[[Any], Any],
        link_id: Optional[str] = None,
    ) -> Disposable:
        """
        Forward actions from another container's action stream into send().

        Only actions dispatched after linking are forwarded. mapper returns
        the action to send, or None to skip. One link per link_id (default:
        the source's name); linking again replaces the previous link.
        """
        link_id = link_id or source.name

        def forward(value: Any) -> None:
            if value is None:
                return
            try:
                mapped = mapper(value)
            except Exception:
                self._log.exception("Transform %s failed for %r", link_id, value)
                return
            if mapped is not None:
                self.send(mapped)

        disposable = source.subscribe(forward, replay=False)
        with self._links_lock:
            previous = self._links.get(link_id)
            self._links[link_id] = disposable
        if previous is not None:
            previous.dispose()
        return disposable

    def close(self) -> None:
        """Cancel every live effect and drop every transform link."""
        cancelled = self._subscriptions.cancel_all()
        with self._links_lock:
            links = list(self._links.values())
            self._links.clear()
        for link in links:
            link.dispose()
        set_active_subscriptions(self.feature.id, 0)
        self._log.debug("Closed container (%d subscriptions cancelled)", cancelled)

    # -- internals ---------------------------------------------------------

    def _commit(self) -> None:
        with self._lock:
            if self._pending is _NOTHING:
                return
            new_state = self._pending
            self._committed = new_state
            self._pending = _NOTHING
            dispatched, self._dispatched = self._dispatched, []

        for action, before, after, traced in dispatched:
            self.tracer.trace(traced, action, before, after)
        track_commit(self.feature.id)
        self._states.publish(new_state)

    def _start_effects(self, action: Any, state: Any, traced: bool) -> None:
        streams = []
        for handler in self._effects:
            try:
                stream = handler.handle(action, state)
            except Exception:
                track_effect_failure(self.feature.id)
                self._log.exception("Effect %s failed to start for %r", handler.name, action)
                continue
            if stream is None:
                continue
            if not hasattr(stream, "__aiter__"):
                track_effect_failure(self.feature.id)
                self._log.error("Effect %s returned %r, expected an async iterator", handler.name, stream)
                continue
            streams.append((handler, stream))

        if not streams:
            return

        subscription = Subscription(subscription_key(self.feature.id, action), self._delivery, len(streams))
        if self._subscriptions.replace(subscription) is not None:
            self._log.debug("Restarted effects for %r", action)

        for handler, stream in streams:
            handle = self._delivery.spawn(self._consume(subscription, handler, stream, traced))
            if handle is None:
                self._finish_stream(subscription)
            else:
                subscription.attach(handle)
        set_active_subscriptions(self.feature.id, len(self._subscriptions))

    async def _consume(self, subscription: Subscription, handler: EffectHandler, stream: Any, traced: bool) -> None:
        try:
            async for emitted in stream:
                if subscription.cancelled:
                    break
                if is_cancel(emitted):
                    self.cancel(emitted.target)
                else:
                    self.send(emitted, trace=traced)
        except Exception:
            track_effect_failure(self.feature.id)
            self._log.exception("Effect %s failed", handler.name)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                try:
                    await aclose()
                except Exception:
                    self._log.exception("Effect %s failed to close", handler.name)
            self._finish_stream(subscription)

    def _finish_stream(self, subscription: Subscription) -> None:
        if subscription.stream_finished() and self._subscriptions.discard(subscription):
            set_active_subscriptions(self.feature.id, len(self._subscriptions))

    def __repr__(self) -> str:
        return f"OneWay(feature={self.feature.id!r}, state={self._committed!r})"
