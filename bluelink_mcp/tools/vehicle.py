"""MCP tools for issuing voice commands to the vehicle."""

import json
import logging
from typing import Any

from mcp.types import Tool, TextContent

from bluelink_mcp.config import config
from bluelink_mcp.services.client_service import ClientNotConfiguredError, get_vehicle_client
from bluelink_mcp.services.command_catalog import build_catalog
from bluelink_mcp.services.request_service import get_request_tracker
from bluelink_mcp.services.resolver_service import resolve_and_execute
from bluelink_mcp.vehicle import VehicleClientError

logger = logging.getLogger(__name__)

VEHICLE_TOOLS: list[Tool] = [
    Tool(
        name="vehicle_command",
        description=(
            "Run a spoken vehicle command such as \"what's my car status\", "
            "\"pre-warm the car\", \"unlock my car\" or \"<preset> climate\". "
            "Returns the sentence to read back to the user."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "text": {
                    "type": "string",
                    "description": "The phrase as spoken (e.g., \"lock my car\")",
                },
            },
            "required": ["text"],
        },
    ),
    Tool(
        name="vehicle_commands",
        description=(
            "List supported commands in match order. Each command runs when all "
            "of its trigger words appear in the phrase; the first match wins."
        ),
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
    Tool(
        name="vehicle_last_request",
        description=(
            "Show the latest update the car reported for issued commands "
            "(completion and success), per command type."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "command_type": {
                    "type": "string",
                    "description": "Optional: climate, lock, unlock, startCharge or stopCharge. Omit for all.",
                },
            },
        },
    ),
]


async def handle_vehicle_tool(
    name: str, arguments: dict[str, Any]
) -> list[TextContent]:
    """Handle execution of vehicle tools."""
    if name == "vehicle_command":
        return await _handle_command(arguments)
    elif name == "vehicle_commands":
        return _handle_list(arguments)
    elif name == "vehicle_last_request":
        return _handle_last_request(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown vehicle tool: {name}")]


async def _handle_command(args: dict[str, Any]) -> list[TextContent]:
    """Handle vehicle_command tool."""
    text = (args.get("text") or "").strip()
    if not text:
        return [TextContent(type="text", text="Error: text must not be empty")]

    try:
        client = await get_vehicle_client()
        response = await resolve_and_execute(
            text,
            client,
            debug_logging=config.debug_logging,
            custom_climates=config.custom_climates,
        )
    except ClientNotConfiguredError as e:
        return [TextContent(type="text", text=f"Error: {e}")]
    except (VehicleClientError, OSError, RuntimeError) as e:
        logger.error("Vehicle command %r failed: %s", text, e)
        return [TextContent(type="text", text=f"Error: vehicle request failed - {e}")]

    return [TextContent(type="text", text=response)]


def _handle_list(args: dict[str, Any]) -> list[TextContent]:
    """Handle vehicle_commands tool."""
    catalog = build_catalog(config.custom_climates)
    commands = [
        {"words": list(entry.words), "command": entry.handler.__name__}
        for entry in catalog
    ]
    return [TextContent(type="text", text=json.dumps(commands, indent=2))]


def _handle_last_request(args: dict[str, Any]) -> list[TextContent]:
    """Handle vehicle_last_request tool."""
    tracker = get_request_tracker()
    command_type = args.get("command_type")

    if command_type:
        update = tracker.get(command_type)
        if update is None:
            return [TextContent(type="text", text=f"No {command_type} request has been issued")]
        return [TextContent(type="text", text=json.dumps(update.to_dict(), indent=2, default=str))]

    updates = [u.to_dict() for u in tracker.all()]
    return [TextContent(type="text", text=json.dumps(updates, indent=2, default=str))]
