"""Ordered catalog of voice command trigger words.

A phrase matches an entry when every trigger word appears somewhere in it
(case-insensitive substring match). Entries are tried in order and the first
match wins, so the order is the only thing separating overlapping entries:
"unlock" contains "lock" and must come first, "status remote" must come
before plain "status". ``check_catalog`` enforces this.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Sequence

from bluelink_mcp.services import handlers
from bluelink_mcp.vehicle import CustomClimateConfig, VehicleClient

logger = logging.getLogger(__name__)

CommandHandler = Callable[[VehicleClient, Any], Awaitable[str]]


@dataclass(frozen=True)
class CommandEntry:
    """Trigger words mapped to the handler they invoke."""

    words: tuple[str, ...]
    handler: CommandHandler
    data: Any = None

    def __post_init__(self) -> None:
        if not self.words or not all(self.words):
            raise ValueError("command entry needs at least one non-empty trigger word")
        object.__setattr__(self, "words", tuple(w.casefold() for w in self.words))

    @property
    def name(self) -> str:
        return " ".join(self.words)


def shadows(earlier: CommandEntry, later: CommandEntry) -> bool:
    """
    True if ``earlier`` matches every phrase ``later`` matches.

    That is the case when each word of ``earlier`` is a substring of some word
    of ``later``, e.g. ("lock",) shadows ("unlock",) and ("status",) shadows
    ("status", "remote").
    """
    return all(any(word in other for other in later.words) for word in earlier.words)


def check_catalog(entries: Sequence[CommandEntry]) -> None:
    """
    Verify that every entry can be reached.

    Raises:
        ValueError: If an entry is shadowed by one placed before it (this
            covers duplicate trigger-word sets).
    """
    for index, entry in enumerate(entries):
        for earlier in entries[:index]:
            if shadows(earlier, entry):
                raise ValueError(
                    f"command {entry.name!r} is unreachable: {earlier.name!r} comes first"
                )


# Order matters, see the module docstring.
BASE_COMMANDS: tuple[CommandEntry, ...] = (
    CommandEntry(("status", "remote"), handlers.get_remote_status),
    CommandEntry(("status",), handlers.get_status),
    CommandEntry(("warm",), handlers.warm),
    CommandEntry(("cool",), handlers.cool),
    CommandEntry(("climate", "off"), handlers.climate_off),
    CommandEntry(("unlock",), handlers.unlock),
    CommandEntry(("lock",), handlers.lock),
    CommandEntry(("start", "charging"), handlers.start_charge),
    CommandEntry(("stop", "charging"), handlers.stop_charge),
)

check_catalog(BASE_COMMANDS)


def custom_climate_entry(preset: CustomClimateConfig) -> CommandEntry:
    """Entry matching "<preset name> climate"."""
    return CommandEntry(
        tuple(preset.name.split()) + ("climate",),
        handlers.custom_climate,
        preset,
    )


def build_catalog(
    custom_climates: Iterable[CustomClimateConfig] = (),
) -> tuple[CommandEntry, ...]:
    """
    Build a fresh catalog: the base commands followed by one entry per preset.

    Presets that could never be matched (their words are already claimed by
    an earlier entry, e.g. a preset called "Off") are skipped with a warning.
    """
    catalog = list(BASE_COMMANDS)
    for preset in custom_climates:
        entry = custom_climate_entry(preset)
        blocker = next((e for e in catalog if shadows(e, entry)), None)
        if blocker is not None:
            logger.warning(
                "Ignoring climate preset %r: phrase %r already triggers %r",
                preset.name,
                entry.name,
                blocker.name,
            )
            continue
        catalog.append(entry)
    return tuple(catalog)
