import asyncio
import os
from datetime import datetime
from unittest.mock import patch

import pytest

from bluelink_mcp.services.client_service import reset_vehicle_client
from bluelink_mcp.services.request_service import reset_request_tracker
from bluelink_mcp.services.version_service import reset_version_checker
from bluelink_mcp.vehicle import BluelinkSettings, CarInfo, VehicleState, VehicleStatus

# Monday
LAST_CHECK = datetime(2024, 1, 15, 15, 5)


@pytest.fixture(autouse=True)
def reset_config():
    """Reset env vars and service singletons around each test."""
    # Store original env vars
    keys = [
        "BLUELINK_MCP_HOST",
        "BLUELINK_MCP_PORT",
        "BLUELINK_MCP_TOOLS",
        "BLUELINK_DEBUG_LOGGING",
        "BLUELINK_LOG_FILE",
        "BLUELINK_CUSTOM_CLIMATES",
        "BLUELINK_CLIENT_FACTORY",
        "BLUELINK_GITHUB_USER",
        "BLUELINK_GITHUB_REPO",
    ]
    original_env = {key: os.environ.get(key) for key in keys}

    yield

    # Restore original env vars
    for key, value in original_env.items():
        if value is not None:
            os.environ[key] = value
        elif key in os.environ:
            del os.environ[key]

    reset_vehicle_client()
    reset_request_tracker()
    reset_version_checker()


class FakeClock:
    """Millisecond clock that only moves when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    async def sleep_ms(self, ms: float) -> None:
        self.sleeps.append(ms)
        self.now += max(ms, 0)
        # Let scheduled tasks (callbacks, background refreshes) run
        await asyncio.sleep(0)

    def monotonic_ms(self) -> float:
        return self.now


@pytest.fixture
def fake_clock():
    """Patch the timing module so sleeps advance a fake clock instantly."""
    clock = FakeClock()
    with patch("bluelink_mcp.timing.sleep_ms", clock.sleep_ms), \
         patch("bluelink_mcp.timing.monotonic_ms", clock.monotonic_ms):
        yield clock


def _make_status(
    nickname: str = "Ioniq",
    model_name: str = "IONIQ 5",
    model_year: str = "2023",
    **state,
) -> VehicleStatus:
    values = {
        "soc": 80,
        "locked": True,
        "climate": False,
        "is_charging": False,
        "is_plugged_in": False,
        "last_remote_status_check": LAST_CHECK,
        "charging_power": 0.0,
        "remaining_charge_time_mins": 0,
    }
    values.update(state)
    return VehicleStatus(
        car=CarInfo(model_name=model_name, model_year=model_year, nickname=nickname),
        status=VehicleState(**values),
    )


@pytest.fixture
def make_status():
    """Factory for vehicle status snapshots."""
    return _make_status


class FakeVehicleClient:
    """
    In-memory vehicle client.

    ack controls the process_request callback:
    "immediate" calls it before returning, "deferred" calls it from a
    scheduled coroutine (then reports completion), "never" never calls it.
    """

    def __init__(self, status: VehicleStatus | None = None, ack: str = "immediate") -> None:
        self.status = status or _make_status()
        self.settings = BluelinkSettings(climate_temp_warm=22.5, climate_temp_cold=18.0)
        self.ack = ack
        self.requests: list[tuple] = []
        self.status_calls: list[tuple[bool, bool]] = []

    async def get_status(self, force_remote_refresh: bool, allow_cache_fallback: bool) -> VehicleStatus:
        self.status_calls.append((force_remote_refresh, allow_cache_fallback))
        return self.status

    def get_cached_status(self) -> VehicleStatus:
        return self.status

    def get_config(self) -> BluelinkSettings:
        return self.settings

    def process_request(self, command_type, payload, on_update):
        self.requests.append((command_type, payload))
        if self.ack == "immediate":
            on_update(False, False, None)
            return None
        if self.ack == "deferred":
            async def _send():
                await asyncio.sleep(0)
                on_update(False, False, None)
                await asyncio.sleep(0)
                on_update(True, True, {"result": "ok"})
            return _send()
        return None


@pytest.fixture
def fake_client():
    """Vehicle client that acknowledges requests immediately."""
    return FakeVehicleClient()


@pytest.fixture
def client_factory():
    """Build fake vehicle clients with custom status or ack behaviour."""
    return FakeVehicleClient
