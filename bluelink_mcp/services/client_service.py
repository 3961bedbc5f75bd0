"""Vehicle client provisioning.

The concrete Bluelink client is supplied by a factory named in
``BLUELINK_CLIENT_FACTORY`` as ``module:callable``. The factory receives the
config and may be sync or async.
"""

import importlib
import inspect
import logging

from bluelink_mcp.config import config
from bluelink_mcp.vehicle import VehicleClient

logger = logging.getLogger(__name__)


class ClientNotConfiguredError(RuntimeError):
    """No usable vehicle client factory is configured."""


# Global singleton
_client: VehicleClient | None = None


def load_factory(path: str):
    """
    Import the factory callable named by ``module:callable``.

    Raises:
        ClientNotConfiguredError: If the path is malformed or does not resolve.
    """
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ClientNotConfiguredError(f"Invalid client factory {path!r}, expected 'module:callable'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ClientNotConfiguredError(f"Cannot import client factory module {module_name!r}: {e}") from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ClientNotConfiguredError(f"Client factory {path!r} is not callable")
    return factory


async def get_vehicle_client() -> VehicleClient:
    """Get the global vehicle client, building it on first use."""
    global _client
    if _client is None:
        if not config.client_factory:
            raise ClientNotConfiguredError("No vehicle client configured (BLUELINK_CLIENT_FACTORY)")

        factory = load_factory(config.client_factory)
        client = factory(config)
        if inspect.isawaitable(client):
            client = await client
        if client is None:
            raise ClientNotConfiguredError(f"Client factory {config.client_factory!r} returned no client")

        logger.info("Vehicle client initialized from %s", config.client_factory)
        _client = client
    return _client


def set_vehicle_client(client: VehicleClient) -> None:
    """Install a ready-made vehicle client."""
    global _client
    _client = client


def reset_vehicle_client() -> None:
    """Reset the vehicle client singleton (for testing)."""
    global _client
    _client = None
