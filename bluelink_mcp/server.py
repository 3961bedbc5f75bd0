import logging
from typing import Any

from mcp.server import Server
from mcp.types import Tool, TextContent

from bluelink_mcp.config import config
from bluelink_mcp.tools.vehicle import VEHICLE_TOOLS, handle_vehicle_tool
from bluelink_mcp.tools.version import VERSION_TOOLS, handle_version_tool

logger = logging.getLogger(__name__)

# Create the MCP server
server = Server("bluelink-mcp")


def get_enabled_tools() -> list[Tool]:
    """Get all tools from enabled tool groups."""
    tools: list[Tool] = []

    if config.is_enabled("vehicle"):
        tools.extend(VEHICLE_TOOLS)
        logger.info("Enabled tool group: vehicle (%d tools)", len(VEHICLE_TOOLS))

    if config.is_enabled("version"):
        tools.extend(VERSION_TOOLS)
        logger.info("Enabled tool group: version (%d tools)", len(VERSION_TOOLS))

    return tools


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools based on configuration."""
    return get_enabled_tools()


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Route tool calls to the appropriate handler."""
    logger.info("Tool call: %s with args: %s", name, arguments)

    # Route to appropriate handler based on tool prefix
    if name.startswith("vehicle_"):
        if not config.is_enabled("vehicle"):
            return [TextContent(type="text", text="Vehicle tools are not enabled")]
        return await handle_vehicle_tool(name, arguments)

    elif name.startswith("version_"):
        if not config.is_enabled("version"):
            return [TextContent(type="text", text="Version tools are not enabled")]
        return await handle_version_tool(name, arguments)

    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]
