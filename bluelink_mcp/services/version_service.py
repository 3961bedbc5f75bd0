"""Release check against the project's GitHub releases."""

import logging
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from bluelink_mcp import __version__
from bluelink_mcp.config import config

logger = logging.getLogger(__name__)

ASSET_BINARY = "egmp-bluelink.js"
TIMEOUT_SECONDS = 10.0

# Releases compare as numbers: v1.7.0 -> 170, so 10 is one minor version
UPDATE_THRESHOLD = 10


@dataclass
class GithubRelease:
    version: str
    name: str
    date: str
    url: str
    asset_name: str
    notes: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def version_to_number(version: str) -> int:
    """Convert "v1.7.0" to 170."""
    return int(version.replace("v", "").replace(".", ""))


class VersionChecker:
    """Fetches (once) and compares against the latest GitHub release."""

    def __init__(self, github_user: str, github_repo: str, current_version: str = __version__) -> None:
        self.github_user = github_user
        self.github_repo = github_repo
        self.current_version = current_version
        self._latest: GithubRelease | None = None

    @property
    def url(self) -> str:
        return f"https://api.github.com/repos/{self.github_user}/{self.github_repo}/releases/latest"

    async def get_release(self) -> GithubRelease:
        """
        Get the latest release, fetching it on first use.

        Raises:
            httpx.HTTPError: On connection failure or a non-2xx response.
        """
        if self._latest is not None:
            return self._latest

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        async with httpx.AsyncClient(timeout=TIMEOUT_SECONDS) as client:
            response = await client.get(self.url, headers=headers)
            response.raise_for_status()

        body = response.json()
        asset_url = ""
        for asset in body.get("assets", []):
            if asset.get("name") == ASSET_BINARY:
                asset_url = asset.get("browser_download_url", "")

        self._latest = GithubRelease(
            version=body["tag_name"],
            name=body.get("name") or "",
            date=body.get("published_at") or "",
            url=asset_url,
            asset_name=ASSET_BINARY,
            notes=body.get("body") or "",
        )
        logger.debug("Latest release of %s/%s is %s", self.github_user, self.github_repo, self._latest.version)
        return self._latest

    async def get_release_version(self) -> str:
        return (await self.get_release()).version

    async def prompt_for_update(self) -> bool:
        """True when the latest release is at least one minor version ahead."""
        latest = await self.get_release_version()
        return version_to_number(latest) - version_to_number(self.current_version) >= UPDATE_THRESHOLD


# Global singleton
_checker: VersionChecker | None = None


def get_version_checker() -> VersionChecker:
    """Get the global VersionChecker for the configured repository."""
    global _checker
    if _checker is None:
        _checker = VersionChecker(config.github_user, config.github_repo)
    return _checker


def reset_version_checker() -> None:
    """Reset the version checker singleton (for testing)."""
    global _checker
    _checker = None
