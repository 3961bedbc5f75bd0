"""Services module for bluelink-mcp."""

from bluelink_mcp.services.client_service import get_vehicle_client, reset_vehicle_client, set_vehicle_client
from bluelink_mcp.services.resolver_service import resolve_and_execute

__all__ = ["get_vehicle_client", "reset_vehicle_client", "set_vehicle_client", "resolve_and_execute"]
