"""Command handlers invoked by the resolver.

Each handler takes the vehicle client (plus the catalog entry's data) and
returns the sentence read back to the user.
"""

from datetime import datetime, timedelta

from bluelink_mcp import timing
from bluelink_mcp.services.request_service import issue_request, run_in_background
from bluelink_mcp.vehicle import ClimateRequest, CustomClimateConfig, VehicleClient, VehicleStatus


CLIMATE_DURATION_MINUTES = 15
REMOTE_STATUS_SEND_MS = 3000

REMOTE_STATUS_RESPONSE = (
    "I've issued a remote status request. Ask me for the normal status again "
    "in 30 seconds and I will have your answer."
)


def format_day_time(moment: datetime) -> str:
    """Format as "<weekday>, <h:mm AM/PM>", e.g. "Monday, 3:05 PM"."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment:%A}, {hour}:{moment:%M} {meridiem}"


def charge_completion_string(last_seen: datetime, remaining_mins: int) -> str:
    """When charging finishes, counted from the last status check."""
    return format_day_time(last_seen + timedelta(minutes=remaining_mins))


def _status_name(status: VehicleStatus) -> str:
    return status.car.nickname or status.car.model_year


def _action_name(status: VehicleStatus) -> str:
    return status.car.nickname or f"your {status.car.model_name}"


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

async def get_status(client: VehicleClient, data: object = None) -> str:
    """Describe the (possibly cached) vehicle status."""
    status = await client.get_status(False, True)
    state = status.status
    car_name = _status_name(status)

    response = (
        f"{car_name}'s battery is at {state.soc}% and "
        f"{'locked' if state.locked else 'un-locked'}"
    )
    if state.climate:
        response += ", and your climate is currently on"

    if state.is_charging:
        complete_at = charge_completion_string(
            state.last_remote_status_check, state.remaining_charge_time_mins
        )
        response += (
            f". Also your car is charging at {state.charging_power}kw "
            f"and will be finished charging at {complete_at}"
        )
    elif state.is_plugged_in:
        response += ". Also your car is currently plugged into a charger"

    response += (
        f". This was {car_name}'s status as of "
        f"{format_day_time(state.last_remote_status_check)}."
    )
    return response


async def get_remote_status(client: VehicleClient, data: object = None) -> str:
    """Kick off a live status refresh without waiting for the result."""
    # A remote refresh takes far longer than a voice assistant will wait
    run_in_background(client.get_status(True, True), "remote status refresh")
    await timing.sleep_ms(REMOTE_STATUS_SEND_MS)
    return REMOTE_STATUS_RESPONSE


# ---------------------------------------------------------------------------
# Climate
# ---------------------------------------------------------------------------

async def warm(client: VehicleClient, data: object = None) -> str:
    status = client.get_cached_status()
    return await issue_request(
        client,
        "climate",
        f"I've issued a request to pre-warm {_action_name(status)}.",
        ClimateRequest(
            enable=True,
            front_defrost=True,
            rear_defrost=True,
            steering=True,
            temp=client.get_config().climate_temp_warm,
            duration_minutes=CLIMATE_DURATION_MINUTES,
        ),
    )


async def cool(client: VehicleClient, data: object = None) -> str:
    status = client.get_cached_status()
    return await issue_request(
        client,
        "climate",
        f"I've issued a request to pre-cool {_action_name(status)}.",
        ClimateRequest(
            enable=True,
            front_defrost=False,
            rear_defrost=False,
            steering=False,
            temp=client.get_config().climate_temp_cold,
            duration_minutes=CLIMATE_DURATION_MINUTES,
        ),
    )


async def climate_off(client: VehicleClient, data: object = None) -> str:
    status = client.get_cached_status()
    return await issue_request(
        client,
        "climate",
        f"I've issued a request to turn off the climate on {_action_name(status)}.",
        ClimateRequest(
            enable=False,
            front_defrost=False,
            rear_defrost=False,
            steering=False,
            temp=client.get_config().climate_temp_cold,
            duration_minutes=CLIMATE_DURATION_MINUTES,
        ),
    )


async def custom_climate(client: VehicleClient, data: CustomClimateConfig) -> str:
    """Turn on a user-defined climate preset."""
    status = client.get_cached_status()
    return await issue_request(
        client,
        "climate",
        f"I've issued a request to turn on climate setting {data.name} on {_action_name(status)}.",
        data.to_request(),
    )


# ---------------------------------------------------------------------------
# Locks and charging
# ---------------------------------------------------------------------------

async def lock(client: VehicleClient, data: object = None) -> str:
    status = client.get_cached_status()
    return await issue_request(
        client, "lock", f"I've issued a request to lock {_action_name(status)}."
    )


async def unlock(client: VehicleClient, data: object = None) -> str:
    status = client.get_cached_status()
    return await issue_request(
        client, "unlock", f"I've issued a request to unlock {_action_name(status)}."
    )


async def start_charge(client: VehicleClient, data: object = None) -> str:
    status = client.get_cached_status()
    return await issue_request(
        client, "startCharge", f"I've issued a request to start charging {_action_name(status)}."
    )


async def stop_charge(client: VehicleClient, data: object = None) -> str:
    status = client.get_cached_status()
    return await issue_request(
        client, "stopCharge", f"I've issued a request to stop charging {_action_name(status)}."
    )
