"""Vehicle client capability consumed by the command dispatcher.

Concrete regional Bluelink clients (authentication, cloud polling, payload
encoding) live outside this package. They only need to satisfy the
``VehicleClient`` protocol below and raise ``VehicleClientError`` on failure.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Protocol


# (is_complete, did_succeed, data)
UpdateCallback = Callable[[bool, bool, Any], None]


class VehicleClientError(Exception):
    """Raised by vehicle clients for auth, network or vehicle-offline failures."""


@dataclass(frozen=True)
class CarInfo:
    """Static metadata about the car."""

    model_name: str
    model_year: str
    nickname: str = ""


@dataclass(frozen=True)
class VehicleState:
    """Snapshot of the car's last reported state."""

    soc: int
    locked: bool
    climate: bool
    is_charging: bool
    is_plugged_in: bool
    last_remote_status_check: datetime
    charging_power: float = 0.0
    remaining_charge_time_mins: int = 0


@dataclass(frozen=True)
class VehicleStatus:
    """Car metadata plus its (possibly stale) state."""

    car: CarInfo
    status: VehicleState


@dataclass(frozen=True)
class BluelinkSettings:
    """Client-side settings the handlers read climate temperatures from."""

    climate_temp_warm: float
    climate_temp_cold: float


@dataclass(frozen=True)
class ClimateRequest:
    """Payload for a ``climate`` command."""

    enable: bool
    front_defrost: bool
    rear_defrost: bool
    steering: bool
    temp: float
    duration_minutes: int
    name: Optional[str] = None


# camelCase keys accepted from shortcut/app exported presets
_CLIMATE_ALIASES = {
    "frontDefrost": "front_defrost",
    "rearDefrost": "rear_defrost",
    "durationMinutes": "duration_minutes",
}


@dataclass(frozen=True)
class CustomClimateConfig:
    """A user-defined, named climate preset."""

    name: str
    temp: float
    front_defrost: bool = False
    rear_defrost: bool = False
    steering: bool = False
    duration_minutes: int = 15

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "CustomClimateConfig":
        """
        Build a preset from a JSON object.

        Raises:
            ValueError: If the object is not a dict, or lacks a string ``name``
                or a numeric ``temp``.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"climate preset must be an object, got {type(raw).__name__}")

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in raw.items():
            key = _CLIMATE_ALIASES.get(key, key)
            if key in known:
                values[key] = value

        name = values.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"climate preset requires a non-empty string name, got {name!r}")
        temp = values.get("temp")
        if isinstance(temp, bool) or not isinstance(temp, (int, float)):
            raise ValueError(f"climate preset {name!r} requires a numeric temp, got {temp!r}")

        return cls(**values)

    def to_request(self) -> ClimateRequest:
        """Copy this preset into a climate request that turns the climate on."""
        return ClimateRequest(
            enable=True,
            front_defrost=self.front_defrost,
            rear_defrost=self.rear_defrost,
            steering=self.steering,
            temp=self.temp,
            duration_minutes=self.duration_minutes,
            name=self.name,
        )


class VehicleClient(Protocol):
    """The capability surface the dispatcher needs from a Bluelink client."""

    async def get_status(
        self, force_remote_refresh: bool, allow_cache_fallback: bool
    ) -> VehicleStatus:
        """Return the vehicle status, optionally refreshing from the car."""
        ...

    def get_cached_status(self) -> VehicleStatus:
        """Return the last known status without any network access."""
        ...

    def get_config(self) -> BluelinkSettings:
        """Return the client settings."""
        ...

    def process_request(
        self,
        command_type: str,
        payload: Optional[Any],
        on_update: UpdateCallback,
    ) -> Optional[Awaitable[None]]:
        """
        Submit a command to the car.

        ``on_update`` must be called at least once (first acknowledgement) and
        may be called again with the final completion/success state. An
        awaitable return value is scheduled by the caller, never awaited.
        """
        ...
