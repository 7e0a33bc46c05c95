"""Locate an installable unit inside a directory tree.

Repositories come in three shapes: a single unit at the root, several
units under a conventional subdirectory (skills/, commands/, plugins/),
or a unit addressed by an explicit path. The search below tolerates all
three and refuses to guess between several candidates.
"""

from pathlib import Path

from agentx.errors import UnitNotFoundError
from agentx.kinds import UnitKindPolicy

DEFAULT_NESTED_DIR = ".claude"


def _inside(root: Path, candidate: Path) -> bool:
    """True if *candidate* does not escape *root* via '..' or symlinks."""
    try:
        return candidate.resolve().is_relative_to(root.resolve())
    except OSError:
        return False


def _locate_sub_path(root: Path, policy: UnitKindPolicy, sub_path: str) -> Path:
    """Exact lookup of an explicit path. No fallback search."""
    candidate = root / sub_path
    kind = policy.kind.value

    if _inside(root, candidate):
        if policy.is_valid(candidate):
            return candidate
        if policy.is_file_unit:
            command_file = candidate.with_name(policy.entry_name(candidate.name))
            if policy.is_valid(command_file):
                return command_file

    msg = f"{kind.capitalize()} not found at path: {sub_path}"
    raise UnitNotFoundError(msg)


def _locate_by_name(root: Path, policy: UnitKindPolicy, name: str, nested_dir: str) -> Path:
    """Try <root>/<name>, <root>/<subdir>/<name>, <root>/<nested>/<subdir>/<name>."""
    entry = policy.entry_name(name)
    candidates = [
        root / entry,
        root / policy.subdir / entry,
        root / nested_dir / policy.subdir / entry,
    ]
    for candidate in candidates:
        if _inside(root, candidate) and policy.is_valid(candidate):
            return candidate

    msg = f"{policy.kind.value.capitalize()} '{name}' not found in repository"
    raise UnitNotFoundError(msg)


def _locate_default(root: Path, policy: UnitKindPolicy) -> Path:
    """Root itself, else the only entry of <root>/<subdir>."""
    if policy.is_valid(root):
        return root

    kind_dir = root / policy.subdir
    if kind_dir.is_dir():
        entries = list(kind_dir.iterdir())
        if len(entries) == 1 and policy.is_valid(entries[0]):
            return entries[0]

    kind = policy.kind.value
    msg = f"No {kind} found in {root}; use URL#{kind}-name to specify which {kind} to install"
    raise UnitNotFoundError(msg)


def locate(
    root: Path,
    policy: UnitKindPolicy,
    name_hint: str | None = None,
    sub_path: str | None = None,
    nested_dir: str = DEFAULT_NESTED_DIR,
) -> Path:
    """Find the unit of *policy*'s kind under *root*.

    Search policy, first valid match wins:
    1. sub_path given: exactly <root>/<sub_path> (plus '.md' for commands).
    2. name_hint given: root, conventional subdir, agent-nested subdir.
    3. Neither: root itself, else a lone entry in the conventional subdir.

    Args:
        root: Directory to search (a clone or a local directory).
        policy: Kind of unit to look for.
        name_hint: Unit name, usually from a #fragment.
        sub_path: Path relative to root, usually from a tree URL.
        nested_dir: Agent directory searched for name hints (e.g. ".claude").

    Returns:
        Path to the unit directory or command file.

    Raises:
        UnitNotFoundError: If the search is exhausted or ambiguous.
    """
    if sub_path:
        return _locate_sub_path(root, policy, sub_path)
    if name_hint:
        return _locate_by_name(root, policy, name_hint, nested_dir)
    return _locate_default(root, policy)
