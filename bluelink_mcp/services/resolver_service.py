"""Resolve a spoken phrase to a vehicle command and run it."""

import logging
from typing import Iterable, Sequence

from bluelink_mcp.services.command_catalog import CommandEntry, build_catalog
from bluelink_mcp.vehicle import CustomClimateConfig, VehicleClient

logger = logging.getLogger(__name__)


def _debug_log(msg: str, *args) -> None:
    """Log at INFO; a failing handler never changes the reply."""
    try:
        logger.info(msg, *args)
    except Exception:
        pass


def unsupported_response(text: str) -> str:
    """Reply for phrases no command matches."""
    return f"You asked me {text} and I don't support that command"


def missing_word(entry: CommandEntry, text: str) -> str | None:
    """Return the first trigger word not found in ``text``, or None if all match."""
    folded = text.casefold()
    for word in entry.words:
        if word not in folded:
            return word
    return None


def resolve(
    text: str,
    catalog: Sequence[CommandEntry],
    debug_logging: bool = False,
) -> CommandEntry | None:
    """Return the first catalog entry whose trigger words all appear in ``text``."""
    for entry in catalog:
        word = missing_word(entry, text)
        if word is None:
            return entry
        if debug_logging:
            _debug_log("could not find %s in %s", word, text.casefold())
    return None


async def resolve_and_execute(
    text: str,
    client: VehicleClient,
    debug_logging: bool = False,
    custom_climates: Iterable[CustomClimateConfig] = (),
) -> str:
    """
    Match a phrase against the command catalog and run the first match.

    Args:
        text: Raw phrase from the voice assistant.
        client: Vehicle client the handler talks to.
        debug_logging: Log the phrase, match misses and the response.
        custom_climates: User climate presets, matched as "<name> climate".

    Returns:
        The handler's response, or an "unsupported" reply echoing ``text``.
        Vehicle client errors are not caught here.
    """
    if debug_logging:
        _debug_log("Voice request: %s", text)

    catalog = build_catalog(custom_climates)
    entry = resolve(text, catalog, debug_logging=debug_logging)
    if entry is None:
        response = unsupported_response(text)
    else:
        response = await entry.handler(client, entry.data)

    if debug_logging:
        _debug_log("Voice response: %s", response)
    return response
