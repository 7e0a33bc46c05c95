"""Read and prune installed units in an agent's content store.

There is no index: every call re-scans the destination roots, so a unit
copied in by hand shows up the same as one installed by AgentX.
"""

import shutil
from dataclasses import dataclass, field, replace
from pathlib import Path

from agentx.errors import InvalidManifestError, UnitNotFoundError
from agentx.kinds import UnitKind, UnitKindPolicy, UnitScope, policy_for
from agentx.profiles import CLAUDE, AgentProfile
from agentx.sanitize import validate_unit_name
from agentx.unit import InstallableUnit, declared_name, parse_unit


@dataclass
class UnitStatus:
    """Health of one installed unit.

    `valid` is False only for hard problems (unreadable or missing
    manifest); metadata gaps are reported as issues on a valid unit.
    """

    unit: InstallableUnit
    valid: bool = True
    issues: list[str] = field(default_factory=list)


def _scopes(kind: UnitKind, scope: UnitScope | None) -> list[UnitScope]:
    # The plugin store is shared by all scopes
    if kind == UnitKind.PLUGIN:
        return [UnitScope.PERSONAL]
    if scope is not None:
        return [scope]
    return [UnitScope.PERSONAL, UnitScope.PROJECT]


def _roots(kind: UnitKind, agent: AgentProfile, scope: UnitScope | None) -> list[tuple[Path, UnitScope]]:
    """Destination roots to scan, without duplicates (cwd may be $HOME)."""
    roots: list[tuple[Path, UnitScope]] = []
    seen: set[Path] = set()
    for each in _scopes(kind, scope):
        root = agent.destination_root(kind, each)
        key = root.resolve()
        if key not in seen:
            seen.add(key)
            roots.append((root, each))
    return roots


def _entries(root: Path, policy: UnitKindPolicy) -> list[Path]:
    """Candidate unit entries under *root*: .md files or directories."""
    try:
        children = sorted(root.iterdir())
    except OSError:
        return []

    if policy.is_file_unit:
        return [child for child in children if policy.is_valid(child)]
    return [child for child in children if child.is_dir() and not child.name.startswith(".")]


def list_units(
    kind: UnitKind,
    agent: AgentProfile = CLAUDE,
    scope: UnitScope | None = None,
) -> list[InstallableUnit]:
    """Installed units of *kind*, personal before project.

    Entries that are not valid units or fail to parse are skipped.
    Returns an empty list when *agent* does not support *kind*.
    """
    if not agent.supports(kind):
        return []

    policy = policy_for(kind)
    units: list[InstallableUnit] = []
    for root, each_scope in _roots(kind, agent, scope):
        for entry in _entries(root, policy):
            if not policy.is_valid(entry):
                continue
            try:
                unit = parse_unit(entry, policy, each_scope)
            except InvalidManifestError:
                continue
            units.append(replace(unit, installed_path=entry, source_path=None))
    return units


def get_unit(
    name: str,
    kind: UnitKind,
    agent: AgentProfile = CLAUDE,
    scope: UnitScope | None = None,
) -> InstallableUnit:
    """First installed unit called *name*.

    Raises:
        UnitNotFoundError: If no such unit is installed.
    """
    for unit in list_units(kind, agent, scope):
        if unit.name == name:
            return unit
    msg = f"{kind.value.capitalize()} not found: {name}"
    raise UnitNotFoundError(msg)


def remove_unit(
    name: str,
    kind: UnitKind,
    agent: AgentProfile = CLAUDE,
    scope: UnitScope = UnitScope.PERSONAL,
) -> Path:
    """Delete the installed unit called *name*.

    Returns:
        The path that was removed.

    Raises:
        UnitNotFoundError: If nothing by that name is installed, or the
            name is not a plain entry name.
        UnsupportedUnitError: If *agent* does not support *kind*.
    """
    not_found = f"{kind.value.capitalize()} not found: {name}"
    try:
        validate_unit_name(name)
    except ValueError as e:
        raise UnitNotFoundError(not_found) from e

    policy = policy_for(kind)
    target = agent.destination_root(kind, scope) / policy.entry_name(name)

    if target.is_symlink() or target.is_file():
        target.unlink()
    elif target.is_dir():
        shutil.rmtree(target)
    else:
        raise UnitNotFoundError(not_found)
    return target


def _status(entry: Path, policy: UnitKindPolicy, scope: UnitScope) -> UnitStatus:
    fallback = InstallableUnit(
        name=policy.unit_name(entry),
        kind=policy.kind,
        scope=scope,
        installed_path=entry,
    )

    if not policy.manifest_path(entry).is_file():
        return UnitStatus(unit=fallback, valid=False, issues=["Manifest not found"])

    try:
        unit = parse_unit(entry, policy, scope)
        # A command is named by its file
        has_name = policy.is_file_unit or bool(declared_name(entry, policy))
    except InvalidManifestError as e:
        return UnitStatus(unit=fallback, valid=False, issues=[e.reason])

    unit = replace(unit, installed_path=entry, source_path=None)
    status = UnitStatus(unit=unit)
    if not unit.description:
        status.issues.append("Missing description")
    if not has_name:
        status.issues.append("Missing name")
    if policy.kind == UnitKind.PLUGIN and not unit.version:
        status.issues.append("Missing version in manifest")
    return status


def check_units(
    kind: UnitKind,
    agent: AgentProfile = CLAUDE,
    scope: UnitScope | None = None,
) -> list[UnitStatus]:
    """Validate every entry in the destination roots of *kind*.

    Unlike list_units(), directories without a manifest and unparseable
    manifests are reported rather than skipped.
    """
    if not agent.supports(kind):
        return []

    policy = policy_for(kind)
    return [
        _status(entry, policy, each_scope)
        for root, each_scope in _roots(kind, agent, scope)
        for entry in _entries(root, policy)
    ]
