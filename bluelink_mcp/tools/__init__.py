from bluelink_mcp.tools.vehicle import VEHICLE_TOOLS, handle_vehicle_tool
from bluelink_mcp.tools.version import VERSION_TOOLS, handle_version_tool

__all__ = [
    "VEHICLE_TOOLS",
    "handle_vehicle_tool",
    "VERSION_TOOLS",
    "handle_version_tool",
]
