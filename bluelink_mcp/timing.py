"""Cooperative timing helpers used to pace polling and enforce minimum durations.

All durations are in milliseconds. Callers go through this module (rather than
calling ``asyncio.sleep`` directly) so tests can swap in a fake clock.
"""

import asyncio
import time
from typing import Callable


async def sleep_ms(ms: float) -> None:
    """Suspend the current task for ``ms`` milliseconds."""
    await asyncio.sleep(max(ms, 0) / 1000)


def monotonic_ms() -> float:
    """Current monotonic clock reading in milliseconds."""
    return time.monotonic() * 1000


async def poll_until(
    predicate: Callable[[], bool],
    attempts: int,
    interval_ms: float,
) -> bool:
    """
    Wait until ``predicate`` returns True or the attempt budget runs out.

    The predicate is checked before each sleep, so an already-true predicate
    returns immediately. At most ``attempts`` sleeps of ``interval_ms`` happen,
    capping the wait at ``attempts * interval_ms``.

    Returns:
        True if the predicate became true, False if the budget was exhausted.
    """
    for _ in range(attempts):
        if predicate():
            return True
        await sleep_ms(interval_ms)
    return predicate()
