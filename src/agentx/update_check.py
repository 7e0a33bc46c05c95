"""Update check for the AgentX CLI.

Checks GitHub releases for a newer version and caches the result locally.
Shows a passive notification after CLI command execution.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Protocol
from urllib.request import Request, urlopen

from pydantic import BaseModel, ValidationError

# Cache validity period
CACHE_MAX_AGE = timedelta(hours=12)

# Cache file name within the AgentX cache directory
CACHE_FILENAME = "update.json"

LATEST_RELEASE_URL = "https://api.github.com/repos/agentsdance/agentx/releases/latest"
RELEASE_NOTES_URL = "https://github.com/agentsdance/agentx/releases/latest"

FETCH_TIMEOUT_SECONDS = 5

DEFAULT_UPGRADE_COMMAND = "pip install --upgrade agentx"

_SEMVER_PATTERN = re.compile(r"v?\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.-]+)?")


class UpdateCacheData(BaseModel):
    """Schema for the update check cache file."""

    checked_at: datetime
    latest: str = ""
    ignored: str = ""


@dataclass(frozen=True)
class SemVersion:
    """Parsed semantic version. Build metadata is dropped."""

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = field(default=())

    def compare(self, other: SemVersion) -> int:
        """Return -1, 0, or 1 following semver precedence rules."""
        core = (self.major, self.minor, self.patch)
        other_core = (other.major, other.minor, other.patch)
        if core != other_core:
            return -1 if core < other_core else 1
        return _compare_prerelease(self.pre, other.pre)


def _compare_identifiers(a: str, b: str) -> int:
    # Numeric identifiers sort below alphanumeric ones
    a_num, b_num = a.isdigit(), b.isdigit()
    if a_num and b_num:
        return (int(a) > int(b)) - (int(a) < int(b))
    if a_num != b_num:
        return -1 if a_num else 1
    return (a > b) - (a < b)


def _compare_prerelease(a: tuple[str, ...], b: tuple[str, ...]) -> int:
    # A release outranks any of its pre-releases
    if not a and not b:
        return 0
    if not a:
        return 1
    if not b:
        return -1

    for a_id, b_id in zip(a, b):
        result = _compare_identifiers(a_id, b_id)
        if result != 0:
            return result

    if len(a) == len(b):
        return 0
    return -1 if len(a) < len(b) else 1


def parse_semver(value: str) -> tuple[SemVersion, str] | None:
    """Find a semantic version in *value*.

    Returns:
        The parsed version and its normalized 'v'-prefixed form, or None
        if *value* holds no semantic version.
    """
    match = _SEMVER_PATTERN.search(value.strip())
    if match is None:
        return None

    text = match.group(0)
    normalized = text if text.startswith("v") else f"v{text}"

    core = normalized[1:].split("+", 1)[0]
    core, _, pre = core.partition("-")
    major, minor, patch = (int(part) for part in core.split("."))
    identifiers = tuple(pre.split(".")) if pre else ()
    return SemVersion(major, minor, patch, identifiers), normalized


class VersionSource(Protocol):
    """Protocol for fetching the latest released version."""

    def fetch_latest(self) -> str:
        """Fetch the latest release tag.

        Raises:
            OSError: On connection failure, timeout, or HTTP error status.
            ValueError: If the response carries no usable tag.
        """
        ...


class GitHubReleaseSource:
    """Fetches the latest release tag from the GitHub releases API."""

    def __init__(self, url: str = LATEST_RELEASE_URL, timeout: float = FETCH_TIMEOUT_SECONDS) -> None:
        self._url = url
        self._timeout = timeout

    def fetch_latest(self) -> str:
        # GitHub rejects API requests without a User-Agent
        request = Request(
            self._url,
            headers={"User-Agent": "agentx", "Accept": "application/vnd.github+json"},
        )
        with urlopen(request, timeout=self._timeout) as response:  # noqa: S310
            data = json.loads(response.read())
        tag = data.get("tag_name") if isinstance(data, dict) else None
        if not tag:
            msg = "update check returned empty tag"
            raise ValueError(msg)
        return str(tag)


def get_upgrade_command() -> str:
    """Command shown in the notice; AGENTX_UPGRADE_COMMAND overrides it."""
    return os.environ.get("AGENTX_UPGRADE_COMMAND", "").strip() or DEFAULT_UPGRADE_COMMAND


def force_update_check() -> bool:
    return bool(os.environ.get("AGENTX_FORCE_UPDATE_CHECK", "").strip())


@dataclass
class UpdateInfo:
    """Information about an available update."""

    current: str
    latest: str
    command: str

    def message(self) -> str:
        """Format the update notification message."""
        current = self.current.removeprefix("v")
        latest = self.latest.removeprefix("v")
        return (
            f"Update available: {current} → {latest}\n"
            f"Run: {self.command}\n"
            f"Release notes: {RELEASE_NOTES_URL}"
        )


class UpdateChecker:
    """Checks for updates using a VersionSource with local caching."""

    def __init__(
        self,
        source: VersionSource,
        current_version: str,
        cache_dir: Path,
        max_age: timedelta = CACHE_MAX_AGE,
    ) -> None:
        self._source = source
        self._current_version = current_version
        self._cache_path = cache_dir / CACHE_FILENAME
        self._max_age = max_age

    def check(self) -> UpdateInfo | None:
        """Check for updates, using cache when fresh.

        Builds whose version is not semver (e.g. 'dev') are never told to
        upgrade unless AGENTX_FORCE_UPDATE_CHECK is set.

        Returns:
            UpdateInfo if a newer, non-ignored version is available.

        Raises:
            OSError, ValueError: If the fetch fails and no cached version
                exists to fall back on.
        """
        parsed_current = parse_semver(self._current_version)
        if parsed_current is None:
            if not force_update_check():
                return None
            current = SemVersion(0, 0, 0)
        else:
            current = parsed_current[0]

        cache = self._load_cache()
        latest = cache.latest if cache is not None else ""

        if cache is None or not latest or self._is_stale(cache):
            try:
                fetched = self._source.fetch_latest()
            except (OSError, ValueError):
                if not latest:
                    raise
            else:
                latest = fetched
                ignored = cache.ignored if cache is not None else ""
                cache = UpdateCacheData(checked_at=_now(), latest=fetched, ignored=ignored)
                self._save_cache(cache)

        parsed_latest = parse_semver(latest)
        if parsed_latest is None:
            return None
        latest_version, latest_normalized = parsed_latest

        if cache is not None and cache.ignored and cache.ignored == latest_normalized:
            return None

        if latest_version.compare(current) <= 0:
            return None

        return UpdateInfo(
            current=self._current_version,
            latest=latest_normalized,
            command=get_upgrade_command(),
        )

    def skip_version(self, version: str) -> str:
        """Record *version* as ignored until a newer release appears.

        Returns:
            The normalized version that was recorded.

        Raises:
            ValueError: If *version* is not a semantic version.
        """
        parsed = parse_semver(version)
        if parsed is None:
            msg = f"Invalid version: {version}"
            raise ValueError(msg)
        normalized = parsed[1]

        cache = self._load_cache() or UpdateCacheData(checked_at=_now())
        self._save_cache(
            UpdateCacheData(
                checked_at=cache.checked_at,
                latest=cache.latest or normalized,
                ignored=normalized,
            )
        )
        return normalized

    def _is_stale(self, cache: UpdateCacheData) -> bool:
        checked_at = cache.checked_at
        if checked_at.tzinfo is None:
            checked_at = checked_at.replace(tzinfo=timezone.utc)
        return _now() - checked_at > self._max_age

    def _load_cache(self) -> UpdateCacheData | None:
        """Load the cache file. Missing or corrupt means no cache."""
        if not self._cache_path.exists():
            return None
        try:
            return UpdateCacheData.model_validate_json(self._cache_path.read_text())
        except (OSError, UnicodeDecodeError, ValidationError):
            return None

    def _save_cache(self, cache: UpdateCacheData) -> None:
        self._cache_path.parent.mkdir(parents=True, exist_ok=True)
        self._cache_path.write_text(cache.model_dump_json())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_update_notice(current_version: str, cache_dir: Path) -> str | None:
    """Convenience function: check for updates and return formatted message or None.

    Constructs real dependencies internally. This is the function called from CLI wiring.
    """
    checker = UpdateChecker(GitHubReleaseSource(), current_version, cache_dir)
    result = checker.check()
    if result is not None:
        return result.message()
    return None
