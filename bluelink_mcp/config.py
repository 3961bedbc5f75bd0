import json
import logging
import os
from dataclasses import dataclass, field

from bluelink_mcp.vehicle import CustomClimateConfig

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_bool(value: str | None) -> bool:
    """Parse an env var flag."""
    return (value or "").strip().lower() in _TRUE_VALUES


def parse_custom_climates(raw: str | None) -> list[CustomClimateConfig]:
    """
    Parse custom climate presets from a JSON list.

    Invalid JSON or invalid entries are logged and skipped, so a typo in one
    preset does not take the rest of the commands down with it.
    """
    if not raw or not raw.strip():
        return []

    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("BLUELINK_CUSTOM_CLIMATES is not valid JSON: %s", e)
        return []

    if not isinstance(items, list):
        logger.error("BLUELINK_CUSTOM_CLIMATES must be a JSON list, got %s", type(items).__name__)
        return []

    presets: list[CustomClimateConfig] = []
    for item in items:
        try:
            presets.append(CustomClimateConfig.from_dict(item))
        except (TypeError, ValueError) as e:
            logger.error("Skipping invalid climate preset %r: %s", item, e)
    return presets


@dataclass
class BluelinkMcpConfig:
    """Configuration for bluelink-mcp server."""

    # Server settings
    host: str = "localhost"
    port: int = 8011

    # Tool groups to enable (comma-separated in env, or list)
    enabled_tools: set[str] = field(default_factory=lambda: {"vehicle", "version"})

    # Request logging
    debug_logging: bool = False
    log_file: str | None = None

    # User-defined climate presets, matched as "<name> climate"
    custom_climates: list[CustomClimateConfig] = field(default_factory=list)

    # "module:callable" building the vehicle client
    client_factory: str | None = None

    # Release check target
    github_user: str = "andyfase"
    github_repo: str = "egmp-bluelink-scriptable"

    @classmethod
    def from_env(cls) -> "BluelinkMcpConfig":
        """Load configuration from environment variables."""
        tools_str = os.getenv("BLUELINK_MCP_TOOLS", "vehicle,version")
        enabled_tools = {t.strip() for t in tools_str.split(",") if t.strip()}

        return cls(
            host=os.getenv("BLUELINK_MCP_HOST", "localhost"),
            port=int(os.getenv("BLUELINK_MCP_PORT", "8011")),
            enabled_tools=enabled_tools,
            debug_logging=_parse_bool(os.getenv("BLUELINK_DEBUG_LOGGING")),
            log_file=os.getenv("BLUELINK_LOG_FILE") or None,
            custom_climates=parse_custom_climates(os.getenv("BLUELINK_CUSTOM_CLIMATES")),
            client_factory=os.getenv("BLUELINK_CLIENT_FACTORY") or None,
            github_user=os.getenv("BLUELINK_GITHUB_USER", "andyfase"),
            github_repo=os.getenv("BLUELINK_GITHUB_REPO", "egmp-bluelink-scriptable"),
        )

    def is_enabled(self, tool_group: str) -> bool:
        """Check if a tool group is enabled."""
        return tool_group in self.enabled_tools


# Global config instance
config = BluelinkMcpConfig.from_env()
