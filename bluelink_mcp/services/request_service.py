"""Vehicle command issuance.

Commands are fire-and-confirm: the car may take minutes to act, so a request
is reported as issued once the client acknowledges it (or the poll budget runs
out). The transport can re-authenticate before dispatching, so every request
takes at least ``MIN_REQUEST_MS`` before the confirmation is returned.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable

from bluelink_mcp import timing
from bluelink_mcp.vehicle import VehicleClient

logger = logging.getLogger(__name__)

ACK_POLL_ATTEMPTS = 10
ACK_POLL_INTERVAL_MS = 500
MIN_REQUEST_MS = 3000

# Strong references to fire-and-forget tasks until they finish
_background_tasks: set[asyncio.Task] = set()


@dataclass
class RequestUpdate:
    """Latest callback data reported for a command type."""

    command_type: str
    is_complete: bool
    did_succeed: bool
    data: Any = None
    updates: int = 0
    updated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "command_type": self.command_type,
            "is_complete": self.is_complete,
            "did_succeed": self.did_succeed,
            "data": self.data,
            "updates": self.updates,
            "updated_at": self.updated_at.isoformat(),
        }


class RequestTracker:
    """In-memory record of the most recent callback per command type."""

    def __init__(self) -> None:
        self._updates: dict[str, RequestUpdate] = {}

    def start(self, command_type: str) -> None:
        """Reset the record for a newly submitted command."""
        self._updates[command_type] = RequestUpdate(
            command_type=command_type, is_complete=False, did_succeed=False
        )

    def record(self, command_type: str, is_complete: bool, did_succeed: bool, data: Any) -> None:
        previous = self._updates.get(command_type)
        self._updates[command_type] = RequestUpdate(
            command_type=command_type,
            is_complete=is_complete,
            did_succeed=did_succeed,
            data=data,
            updates=(previous.updates if previous else 0) + 1,
        )

    def get(self, command_type: str) -> RequestUpdate | None:
        return self._updates.get(command_type)

    def all(self) -> list[RequestUpdate]:
        return sorted(self._updates.values(), key=lambda u: u.updated_at, reverse=True)


# Global singleton
_tracker: RequestTracker | None = None


def get_request_tracker() -> RequestTracker:
    """Get the global RequestTracker instance."""
    global _tracker
    if _tracker is None:
        _tracker = RequestTracker()
    return _tracker


def reset_request_tracker() -> None:
    """Reset the request tracker singleton (for testing)."""
    global _tracker
    _tracker = None


def run_in_background(awaitable: Awaitable[Any], description: str) -> asyncio.Task:
    """
    Schedule an awaitable without waiting for it.

    Failures are logged when the task finishes; nobody awaits the result.
    """
    task = asyncio.ensure_future(awaitable)
    _background_tasks.add(task)

    def _done(t: asyncio.Task) -> None:
        _background_tasks.discard(t)
        if t.cancelled():
            logger.warning("Background %s was cancelled", description)
        elif t.exception() is not None:
            logger.error("Background %s failed: %s", description, t.exception())

    task.add_done_callback(_done)
    return task


async def issue_request(
    client: VehicleClient,
    command_type: str,
    message: str,
    payload: Any = None,
) -> str:
    """
    Submit a vehicle command and return ``message`` once it has been issued.

    Waits for the first acknowledgement callback (at most
    ``ACK_POLL_ATTEMPTS * ACK_POLL_INTERVAL_MS``), then pads the total time to
    ``MIN_REQUEST_MS``. The message is returned unchanged whether or not the
    callback fired; later callbacks only update the request tracker.

    Args:
        client: Vehicle client to submit through.
        command_type: Client command type (e.g. "climate", "lock").
        message: Confirmation text returned to the caller.
        payload: Optional command payload (e.g. a ClimateRequest).

    Returns:
        The confirmation message, verbatim.
    """
    acknowledged = asyncio.Event()
    tracker = get_request_tracker()
    tracker.start(command_type)

    def on_update(is_complete: bool, did_succeed: bool, data: Any) -> None:
        tracker.record(command_type, is_complete, did_succeed, data)
        if not acknowledged.is_set():
            logger.debug("First acknowledgement for %s", command_type)
            acknowledged.set()

    start = timing.monotonic_ms()
    pending = client.process_request(command_type, payload, on_update)
    if inspect.isawaitable(pending):
        run_in_background(pending, f"{command_type} request")

    got_ack = await timing.poll_until(
        acknowledged.is_set, ACK_POLL_ATTEMPTS, ACK_POLL_INTERVAL_MS
    )
    if not got_ack:
        logger.warning(
            "No acknowledgement for %s after %d polls", command_type, ACK_POLL_ATTEMPTS
        )

    elapsed = timing.monotonic_ms() - start
    if elapsed < MIN_REQUEST_MS:
        await timing.sleep_ms(MIN_REQUEST_MS - elapsed)

    logger.info("Issued %s request in %dms", command_type, timing.monotonic_ms() - start)
    return message
