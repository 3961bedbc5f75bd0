"""Release check tool for bluelink-mcp."""

import json
from typing import Any

import httpx
from mcp.types import Tool, TextContent

from bluelink_mcp.services.version_service import get_version_checker


VERSION_TOOLS: list[Tool] = [
    Tool(
        name="version_check",
        description=(
            "Compare the running version with the latest GitHub release. "
            "Returns both versions, release details and whether an update is recommended."
        ),
        inputSchema={
            "type": "object",
            "properties": {},
        },
    ),
]


async def handle_version_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle execution of version tools."""
    if name == "version_check":
        return await _version_check(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown version tool: {name}")]


async def _version_check(args: dict[str, Any]) -> list[TextContent]:
    """Check for a newer release."""
    checker = get_version_checker()
    try:
        release = await checker.get_release()
        update_available = await checker.prompt_for_update()
    except httpx.TimeoutException:
        return [TextContent(type="text", text=json.dumps({"error": "GitHub request timed out"}))]
    except httpx.HTTPError as e:
        return [TextContent(type="text", text=json.dumps({"error": f"GitHub request failed: {e}"}))]
    except (KeyError, ValueError) as e:
        return [TextContent(type="text", text=json.dumps({"error": f"Unexpected release data: {e}"}))]

    return [TextContent(type="text", text=json.dumps({
        "current_version": checker.current_version,
        "latest_version": release.version,
        "update_available": update_available,
        "release": release.to_dict(),
    }, indent=2))]
