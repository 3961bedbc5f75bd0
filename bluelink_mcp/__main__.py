import json
import logging
import sys
from logging.handlers import RotatingFileHandler

import uvicorn
from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from bluelink_mcp import __version__
from bluelink_mcp.config import config
from bluelink_mcp.server import server
from bluelink_mcp.services.client_service import ClientNotConfiguredError, get_vehicle_client
from bluelink_mcp.services.resolver_service import resolve_and_execute
from bluelink_mcp.vehicle import VehicleClientError

# Configure logging to stderr (stdout is used for MCP protocol in stdio mode)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("bluelink-mcp")

REQUEST_LOG_MAX_BYTES = 100_000

# Create SSE transport
sse = SseServerTransport("/messages")


def configure_request_log(path: str) -> logging.Handler:
    """Write voice requests and responses to a small rotating log file."""
    handler = RotatingFileHandler(path, maxBytes=REQUEST_LOG_MAX_BYTES, backupCount=1)
    handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    logging.getLogger("bluelink_mcp.services.resolver_service").addHandler(handler)
    return handler


async def handle_sse(request):
    async with sse.connect_sse(
        request.scope, request.receive, request._send
    ) as streams:
        await server.run(
            streams[0], streams[1], server.create_initialization_options()
        )


async def handle_messages(request):
    await sse.handle_post_message(request.scope, request.receive, request._send)


async def handle_health(request):
    return JSONResponse({
        "status": "ok",
        "service": "bluelink-mcp",
        "version": __version__,
        "enabled_tools": list(config.enabled_tools),
        "custom_climates": [preset.name for preset in config.custom_climates],
    })


async def _read_shortcut_text(request: Request) -> str:
    """Shortcuts post {"text": "..."}, a JSON string, or the bare phrase."""
    body = (await request.body()).decode("utf-8", errors="replace")
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            return ""
        if isinstance(data, str):
            return data.strip()
        if isinstance(data, dict):
            return str(data.get("text") or "").strip()
        return ""
    return body.strip()


async def handle_shortcut(request: Request):
    """Run a voice shortcut phrase and return the sentence to speak."""
    text = await _read_shortcut_text(request)
    if not text:
        return JSONResponse({"error": "text is required"}, status_code=400)

    try:
        client = await get_vehicle_client()
        response = await resolve_and_execute(
            text,
            client,
            debug_logging=config.debug_logging,
            custom_climates=config.custom_climates,
        )
    except ClientNotConfiguredError as e:
        logger.error("Shortcut request failed: %s", e)
        return JSONResponse({"error": str(e)}, status_code=503)
    except (VehicleClientError, OSError, RuntimeError) as e:
        logger.error("Vehicle request %r failed: %s", text, e)
        return JSONResponse({"error": f"Vehicle request failed: {e}"}, status_code=502)

    return JSONResponse({"response": response})


# Create Starlette app
app = Starlette(
    routes=[
        Route("/health", endpoint=handle_health),
        Route("/sse", endpoint=handle_sse),
        Route("/messages", endpoint=handle_messages, methods=["POST"]),
        Route("/v1/shortcut", endpoint=handle_shortcut, methods=["POST"]),
    ],
)


def main() -> None:
    """Run the bluelink-mcp server."""
    logger.info("Starting bluelink-mcp server v%s", __version__)

    if config.log_file:
        configure_request_log(config.log_file)
        logger.info("Request log: %s", config.log_file)

    logger.info("Enabled tool groups: %s", ", ".join(sorted(config.enabled_tools)))
    logger.info("Custom climate presets: %d", len(config.custom_climates))
    logger.info("Server: http://%s:%d", config.host, config.port)

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
