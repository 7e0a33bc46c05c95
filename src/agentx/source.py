"""Source resolution for unit install.

Turns the string a user passes to `agentx skills install` (or plugins
install) into a typed SourceDescriptor.

Resolution order (first match wins):
1. Path exists on disk → local
2. GitHub tree URL (github.com/<org>/<repo>/tree/<branch>/<path...>) → git + subpath
3. Trailing #fragment without '/' → stripped into a name hint
4. http(s)://, file:// or git@host:path remote → git
5. Otherwise → InvalidSourceError
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

from agentx.errors import InvalidSourceError

GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})


class SourceKind(str, Enum):
    """Type of unit source."""

    LOCAL = "local"
    GIT_REPO = "git-repo"
    GIT_REPO_WITH_FRAGMENT = "git-repo-with-fragment"


@dataclass(frozen=True)
class SourceDescriptor:
    """Result of source resolution.

    Exactly one of local_path or repo_url is set. fragment, sub_path and
    ref only appear alongside repo_url.
    """

    kind: SourceKind

    # LOCAL: absolute filesystem path
    local_path: Path | None = None

    # GIT_*: clone URL
    repo_url: str | None = None

    # Name hint from a trailing #name
    fragment: str | None = None

    # Path inside the repository, from a tree URL
    sub_path: str | None = None

    # Branch named in a tree URL
    ref: str | None = None

    @property
    def is_git(self) -> bool:
        return self.kind in (SourceKind.GIT_REPO, SourceKind.GIT_REPO_WITH_FRAGMENT)

    def display(self) -> str:
        """Canonical source string recorded on installed units."""
        if self.local_path is not None:
            return str(self.local_path)
        if self.repo_url is None:
            raise InvalidSourceError("", "no local path or repository URL")
        if self.sub_path:
            return f"{self.repo_url}/tree/{self.ref or 'HEAD'}/{self.sub_path}"
        if self.fragment:
            return f"{self.repo_url}#{self.fragment}"
        return self.repo_url


def _local_path(source: str) -> Path | None:
    """Return the absolute path if *source* names something on disk."""
    candidate = Path(source).expanduser()
    try:
        exists = candidate.exists()
    except (OSError, ValueError):
        return None
    if not exists:
        return None
    return Path(os.path.abspath(candidate))


def _parse_github_tree_url(source: str) -> SourceDescriptor | None:
    """Parse https://github.com/<org>/<repo>/tree/<branch>[/<path...>].

    The branch is kept as ref. A tree URL without a path below the branch
    resolves to the whole repository.
    """
    parsed = urlparse(source)
    if parsed.scheme not in ("http", "https") or parsed.netloc.lower() not in GITHUB_HOSTS:
        return None

    parts = parsed.path.strip("/").split("/")
    if len(parts) < 4 or parts[2] != "tree" or not parts[3]:
        return None

    org, repo, _, ref = parts[:4]
    sub_path = "/".join(part for part in parts[4:] if part)
    repo_url = f"https://github.com/{org}/{repo}"

    if sub_path:
        return SourceDescriptor(
            kind=SourceKind.GIT_REPO_WITH_FRAGMENT,
            repo_url=repo_url,
            sub_path=sub_path,
            ref=ref,
        )
    return SourceDescriptor(kind=SourceKind.GIT_REPO, repo_url=repo_url, ref=ref)


def _split_fragment(source: str) -> tuple[str, str | None]:
    """Split a trailing '#name' off *source*.

    A '#' followed by a '/' is part of the URL, not a fragment.
    """
    idx = source.rfind("#")
    if idx <= 0:
        return source, None
    fragment = source[idx + 1 :]
    if "/" in fragment:
        return source, None
    return source[:idx], fragment or None


def _is_git_remote(url: str) -> bool:
    """Check if *url* is something git can clone.

    Recognized patterns:
    - http(s)://host/path
    - file:///path
    - git@host:path
    """
    if url.startswith("git@"):
        return ":" in url[4:]

    parsed = urlparse(url)
    if parsed.scheme in ("http", "https"):
        return bool(parsed.netloc)
    if parsed.scheme == "file":
        return bool(parsed.path)
    return False


def resolve_source(source: str) -> SourceDescriptor:
    """Classify user input as a local path or a git remote.

    Args:
        source: Raw string from the install command.

    Returns:
        SourceDescriptor with the classification and parsed details.

    Raises:
        InvalidSourceError: If source is empty or not recognisable.
    """
    source = source.strip()
    if not source:
        raise InvalidSourceError(source, "source cannot be empty")

    # 1. Anything that exists on disk is local, valid unit or not
    local = _local_path(source)
    if local is not None:
        return SourceDescriptor(kind=SourceKind.LOCAL, local_path=local)

    # 2. GitHub tree URL; the subpath is more specific than any fragment
    tree = _parse_github_tree_url(source)
    if tree is not None:
        return tree

    # 3. Fragment name hint
    remainder, fragment = _split_fragment(source)

    # 4. Git remote
    if _is_git_remote(remainder):
        if fragment:
            return SourceDescriptor(
                kind=SourceKind.GIT_REPO_WITH_FRAGMENT,
                repo_url=remainder,
                fragment=fragment,
            )
        return SourceDescriptor(kind=SourceKind.GIT_REPO, repo_url=remainder)

    raise InvalidSourceError(source)
