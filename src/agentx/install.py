"""Copy a located unit into its destination store.

This is the only module that writes into a content store. Installation
never merges or overwrites: an occupied target is an AlreadyExistsError.
"""

import shutil
from dataclasses import replace
from pathlib import Path

from agentx.errors import AlreadyExistsError, CopyFailedError
from agentx.kinds import UnitKindPolicy, UnitScope
from agentx.unit import InstallableUnit, parse_unit

# Version-control metadata never copied into a store
VCS_DIRS = (".git", ".hg", ".svn")


def _copy_unit(source: Path, target: Path) -> None:
    """Copy a unit file or directory tree, preserving permission bits.

    Raises:
        CopyFailedError: On any filesystem failure. Whatever was copied
            before the failure stays on disk.
    """
    try:
        if source.is_dir():
            shutil.copytree(source, target, ignore=shutil.ignore_patterns(*VCS_DIRS))
        else:
            shutil.copy2(source, target)
    except shutil.Error as e:
        # copytree collects per-file failures and raises them together
        failures = "; ".join(f"{src}: {why}" for src, _dst, why in e.args[0])
        raise CopyFailedError(source, target, failures) from e
    except OSError as e:
        raise CopyFailedError(source, target, e.strerror or str(e)) from e


def install_unit(
    unit_path: Path,
    policy: UnitKindPolicy,
    destination_root: Path,
    scope: UnitScope = UnitScope.PERSONAL,
    source: str | None = None,
) -> InstallableUnit:
    """Install the unit at *unit_path* into *destination_root*.

    Args:
        unit_path: Located skill directory, command file, or plugin directory.
        policy: Kind of unit at unit_path.
        destination_root: Store directory for this kind and scope.
        scope: Scope recorded on the installed unit.
        source: Source string recorded on the unit. Defaults to unit_path.

    Returns:
        The parsed unit with installed_path and source set.

    Raises:
        InvalidManifestError: If the unit cannot be parsed.
        AlreadyExistsError: If destination_root already holds that name.
        CopyFailedError: If copying fails part way.
    """
    unit = parse_unit(unit_path, policy, scope)

    target = destination_root / policy.entry_name(unit.name)
    if target.exists() or target.is_symlink():
        raise AlreadyExistsError(policy.kind.value, unit.name, target)

    try:
        destination_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CopyFailedError(unit_path, destination_root, e.strerror or str(e)) from e

    _copy_unit(unit_path, target)

    return replace(unit, installed_path=target, source=source or str(unit_path))
