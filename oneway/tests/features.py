"""
Small features shared by the test suite.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, List, Tuple

from oneway.core import Cancel, EffectHandler, Feature, FeatureAction, FeatureState, Reducer


# -- Counter ----------------------------------------------------------------

@dataclass(frozen=True)
class Counter(FeatureState):
    count: int = 0


class CounterAction(FeatureAction):
    pass


@dataclass(frozen=True)
class Increment(CounterAction):
    pass


@dataclass(frozen=True)
class SetCount(CounterAction):
    value: int


@dataclass(frozen=True)
class Double(CounterAction):
    pass


@dataclass(frozen=True)
class Unmodeled(CounterAction):
    note: str = ""


counter_reducer = Reducer()


@counter_reducer.on(Increment)
def _increment(state: Counter, action: Increment) -> Counter:
    return Counter(count=state.count + 1)


@counter_reducer.on(SetCount)
def _set(state: Counter, action: SetCount) -> Counter:
    return Counter(count=action.value)


@counter_reducer.on(Double)
def _double(state: Counter, action: Double) -> Counter:
    return Counter(count=state.count * 2)


CounterFeature = Feature(id="CounterFeature", reducer=counter_reducer, state_type=Counter)


class Recorder(EffectHandler):
    """Records (action, state) for every call; starts no effect."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, Any]] = []

    def handle(self, action: Any, state: Any):
        self.calls.append((action, state))
        return None


# -- Pinger -----------------------------------------------------------------

@dataclass(frozen=True)
class Pings(FeatureState):
    pings: Tuple[str, ...] = ()

    def count(self, name: str) -> int:
        return sum(1 for p in self.pings if p == name)


class PingAction(FeatureAction):
    pass


@dataclass(frozen=True)
class Watch(PingAction):
    name: str
    interval: float = 0.01


@dataclass(frozen=True)
class Ping(PingAction):
    name: str


@dataclass(frozen=True)
class StopWatching(PingAction):
    name: str
    interval: float = 0.01


ping_reducer = Reducer()


@ping_reducer.on(Ping)
def _ping(state: Pings, action: Ping) -> Pings:
    return Pings(pings=state.pings + (action.name,))


class PingEffects(EffectHandler):
    """Watch pings forever; StopWatching cancels the matching Watch."""

    def handle(self, action: Any, state: Any):
        if isinstance(action, Watch):
            return self._watch(action)
        if isinstance(action, StopWatching):
            return self._stop(action)
        return None

    async def _watch(self, action: Watch):
        while True:
            await asyncio.sleep(action.interval)
            yield Ping(action.name)

    async def _stop(self, action: StopWatching):
        yield Cancel(Watch(action.name, action.interval))


PingFeature = Feature(id="PingFeature", reducer=ping_reducer, effects=[PingEffects()], state_type=Pings)
