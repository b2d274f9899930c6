"""
Async helpers for observing containers in tests.
"""

import asyncio
import time
from typing import Any, AsyncIterator, Callable, List


async def take(stream: AsyncIterator[Any], count: int, timeout: float = 1.0) -> List[Any]:
    """Collect the next `count` values from a stream."""
    out: List[Any] = []

    async def run() -> None:
        while len(out) < count:
            out.append(await stream.__anext__())

    await asyncio.wait_for(run(), timeout)
    return out


async def wait_for_state(oneway: Any, predicate: Callable[[Any], bool], timeout: float = 1.0) -> Any:
    """Observe until a committed state satisfies predicate; return it."""
    stream = oneway.observe()

    async def run() -> Any:
        async for state in stream:
            if predicate(state):
                return state

    try:
        return await asyncio.wait_for(run(), timeout)
    finally:
        await stream.aclose()


async def settle(ticks: int = 5) -> None:
    """Let the delivery loop run a few iterations."""
    for _ in range(ticks):
        await asyncio.sleep(0)


def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> bool:
    """Poll from a plain thread (for the shared background delivery context)."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()
