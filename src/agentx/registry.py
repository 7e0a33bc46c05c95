"""Registry catalog fetch with network → cache → bundled fallback.

Each tier either yields a whole non-empty catalog or is discarded; tiers
are never merged. When every tier comes up empty the network error is
raised, since it is the one the user can act on.
"""

import contextlib
import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol
from urllib.request import Request, urlopen

from pydantic import ValidationError

from agentx.errors import RegistryFetchError, format_validation_errors
from agentx.home import get_cache_dir
from agentx.registry_schema import RegistryDocument, RegistryEntry

# Network tier bound in seconds
FETCH_TIMEOUT_SECONDS = 10

BUNDLED_DATA_DIR = Path(__file__).parent / "data"


class CatalogKind(str, Enum):
    """Which registry to read."""

    SKILLS = "skills"
    PLUGINS = "plugins"


class CatalogOrigin(str, Enum):
    """Tier a catalog was taken from."""

    NETWORK = "network"
    CACHE = "cache"
    BUNDLED = "bundled"


DEFAULT_REGISTRY_URLS = {
    CatalogKind.SKILLS: "https://raw.githubusercontent.com/agentsdance/agentskills/master/skills.json",
    CatalogKind.PLUGINS: "https://raw.githubusercontent.com/agentsdance/agentx/master/registry/plugins.json",
}

REGISTRY_URL_ENV_VARS = {
    CatalogKind.SKILLS: "AGENTX_SKILLS_REGISTRY_URL",
    CatalogKind.PLUGINS: "AGENTX_PLUGINS_REGISTRY_URL",
}

CACHE_FILENAMES = {
    CatalogKind.SKILLS: "skills-registry.json",
    CatalogKind.PLUGINS: "plugin-registry.json",
}

BUNDLED_FILENAMES = {
    CatalogKind.SKILLS: "skills.json",
    CatalogKind.PLUGINS: "plugins.json",
}


@dataclass(frozen=True)
class RegistryCatalog:
    """An immutable catalog snapshot from exactly one tier."""

    kind: CatalogKind
    origin: CatalogOrigin
    entries: tuple[RegistryEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def get(self, name: str) -> RegistryEntry | None:
        return next((entry for entry in self.entries if entry.name == name), None)


class CatalogSource(Protocol):
    """Protocol for downloading a registry document."""

    def fetch(self, url: str, timeout: float) -> bytes:
        """Return the raw response body.

        Raises:
            OSError: On connection failure, timeout, or HTTP error status.
        """
        ...


class HttpCatalogSource:
    """Downloads registry documents over HTTP(S)."""

    def fetch(self, url: str, timeout: float) -> bytes:
        request = Request(url, headers={"User-Agent": "agentx", "Accept": "application/json"})
        # urlopen raises HTTPError (an OSError) for 4xx/5xx responses
        with urlopen(request, timeout=timeout) as response:  # noqa: S310
            body: bytes = response.read()
        return body


def parse_catalog(data: bytes | str, kind: CatalogKind) -> tuple[RegistryEntry, ...]:
    """Parse a registry document and return the entries for *kind*.

    Raises:
        ValueError: If the data is not JSON or does not match the schema.
    """
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        msg = f"invalid JSON: {e}"
        raise ValueError(msg) from e

    try:
        document = RegistryDocument.model_validate(raw)
    except ValidationError as e:
        raise ValueError(format_validation_errors(e)) from e

    entries = document.skills if kind == CatalogKind.SKILLS else document.plugins
    return tuple(entries)


def get_registry_url(kind: CatalogKind) -> str:
    """Registry URL for *kind*, honouring the environment override."""
    return os.environ.get(REGISTRY_URL_ENV_VARS[kind], "").strip() or DEFAULT_REGISTRY_URLS[kind]


def default_bundled_paths(kind: CatalogKind) -> list[Path]:
    """Well-known locations of a bundled registry snapshot, in search order."""
    filename = BUNDLED_FILENAMES[kind]
    return [
        Path("registry") / filename,
        Path("..") / "registry" / filename,
        BUNDLED_DATA_DIR / filename,
    ]


class RegistryFetcher:
    """Fetches one registry through the three-tier cascade."""

    def __init__(
        self,
        kind: CatalogKind,
        source: CatalogSource | None = None,
        url: str | None = None,
        cache_dir: Path | None = None,
        bundled_paths: list[Path] | None = None,
        timeout: float = FETCH_TIMEOUT_SECONDS,
    ) -> None:
        self._kind = kind
        self._source = source if source is not None else HttpCatalogSource()
        self._url = url or get_registry_url(kind)
        self._cache_path = (cache_dir or get_cache_dir()) / CACHE_FILENAMES[kind]
        self._bundled_paths = bundled_paths if bundled_paths is not None else default_bundled_paths(kind)
        self._timeout = timeout

    def fetch_catalog(self) -> RegistryCatalog:
        """Return the first non-empty catalog from network, cache, or bundle.

        Raises:
            RegistryFetchError: The network tier's error, when no tier
                produced a non-empty catalog.
        """
        network_error: RegistryFetchError | None = None
        try:
            catalog = self.fetch_network()
        except RegistryFetchError as e:
            network_error = e
            catalog = None

        if catalog is not None and len(catalog) > 0:
            return catalog

        cached = self.read_cache()
        if cached is not None and len(cached) > 0:
            return cached

        bundled = self.read_bundled()
        if bundled is not None and len(bundled) > 0:
            return bundled

        if network_error is not None:
            raise network_error
        return RegistryCatalog(kind=self._kind, origin=CatalogOrigin.NETWORK)

    def fetch_network(self) -> RegistryCatalog:
        """Download and parse the registry, then refresh the cache.

        Raises:
            RegistryFetchError: If the download or parse fails.
        """
        label = f"{self._kind.value} registry"
        try:
            body = self._source.fetch(self._url, self._timeout)
        except OSError as e:
            msg = f"Failed to fetch {label} from {self._url}: {e}"
            raise RegistryFetchError(msg) from e

        try:
            entries = parse_catalog(body, self._kind)
        except ValueError as e:
            msg = f"Failed to parse {label}: {e}"
            raise RegistryFetchError(msg) from e

        self._write_cache(body)
        return RegistryCatalog(kind=self._kind, origin=CatalogOrigin.NETWORK, entries=entries)

    def read_cache(self) -> RegistryCatalog | None:
        """Catalog from the cache file, or None if missing or corrupt."""
        entries = self._read_file(self._cache_path)
        if entries is None:
            return None
        return RegistryCatalog(kind=self._kind, origin=CatalogOrigin.CACHE, entries=entries)

    def read_bundled(self) -> RegistryCatalog | None:
        """First bundled snapshot that parses with a non-empty list."""
        for path in self._bundled_paths:
            entries = self._read_file(path)
            if entries:
                return RegistryCatalog(kind=self._kind, origin=CatalogOrigin.BUNDLED, entries=entries)
        return None

    def _read_file(self, path: Path) -> tuple[RegistryEntry, ...] | None:
        try:
            return parse_catalog(path.read_bytes(), self._kind)
        except (OSError, ValueError):
            return None

    def _write_cache(self, body: bytes) -> None:
        """Replace the cache file with *body*. Failure is not an error."""
        tmp_path = self._cache_path.with_suffix(".tmp")
        try:
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(body)
            os.replace(tmp_path, self._cache_path)
        except OSError:
            # A stale or missing cache only costs a cache miss later
            with contextlib.suppress(OSError):
                tmp_path.unlink()


def fetch_catalog(kind: CatalogKind) -> RegistryCatalog:
    """Convenience function: cascade-fetch *kind* with default settings.

    Constructs real dependencies internally. This is the function called
    from CLI wiring.
    """
    return RegistryFetcher(kind).fetch_catalog()
