"""Unit install pipeline for AgentX.

resolve source → (clone) → locate → parse → install. Handles local
directories, single command files, git repositories, #fragment name
hints, and GitHub tree URLs.
"""

from dataclasses import dataclass, field
from pathlib import Path

from agentx.errors import AgentxError, AlreadyExistsError, InvalidSourceError, UnitNotFoundError, UnsupportedUnitError
from agentx.git_source import cloned_repository
from agentx.install import install_unit
from agentx.kinds import COMMAND, PLUGIN, SKILL, UnitKind, UnitKindPolicy, UnitScope, is_command_file
from agentx.locator import locate
from agentx.profiles import CLAUDE, AgentProfile
from agentx.registry_schema import RegistryEntry
from agentx.source import SourceDescriptor, resolve_source
from agentx.unit import InstallableUnit


def candidate_policies(kind: UnitKind, profile: AgentProfile) -> list[UnitKindPolicy]:
    """Kinds to search for, in order, when installing *kind* for *profile*.

    A skill install also accepts a command when the agent supports them,
    so one `skills install` covers both forms.

    Raises:
        UnsupportedUnitError: If the agent supports none of them.
    """
    if kind == UnitKind.PLUGIN:
        policies = [PLUGIN]
    elif kind == UnitKind.COMMAND:
        policies = [COMMAND]
    else:
        policies = [SKILL, COMMAND]

    supported = [policy for policy in policies if profile.supports(policy.kind)]
    if not supported:
        msg = f"{kind.value.capitalize()} units are not supported for {profile.name}"
        raise UnsupportedUnitError(msg)
    return supported


def _locate_any(
    root: Path,
    policies: list[UnitKindPolicy],
    name_hint: str | None,
    sub_path: str | None,
    nested_dir: str,
) -> tuple[Path, UnitKindPolicy]:
    """Run the locator once per policy; first hit wins.

    Raises:
        UnitNotFoundError: The first policy's error if every search fails.
    """
    first_error: UnitNotFoundError | None = None
    for policy in policies:
        try:
            return locate(root, policy, name_hint=name_hint, sub_path=sub_path, nested_dir=nested_dir), policy
        except UnitNotFoundError as e:
            if first_error is None:
                first_error = e
    if first_error is None:
        raise ValueError("no unit kinds to search for")
    raise first_error


def _install_local(
    descriptor: SourceDescriptor,
    policies: list[UnitKindPolicy],
    profile: AgentProfile,
    scope: UnitScope,
) -> InstallableUnit:
    path = descriptor.local_path
    if path is None:
        raise InvalidSourceError(descriptor.display(), "not a local path")

    if path.is_file():
        if not is_command_file(path):
            raise InvalidSourceError(str(path), "unsupported file type")
        if COMMAND not in policies:
            msg = f"Command files are not supported for {profile.name}"
            raise UnsupportedUnitError(msg)
        policy = COMMAND
    else:
        path, policy = _locate_any(path, policies, None, None, profile.nested_dir)

    return install_unit(
        path,
        policy,
        profile.destination_root(policy.kind, scope),
        scope=scope,
        source=str(descriptor.local_path),
    )


def _install_git(
    descriptor: SourceDescriptor,
    policies: list[UnitKindPolicy],
    profile: AgentProfile,
    scope: UnitScope,
) -> InstallableUnit:
    if descriptor.repo_url is None:
        raise InvalidSourceError(descriptor.display(), "not a git repository")

    with cloned_repository(descriptor.repo_url, ref=descriptor.ref) as repo_dir:
        path, policy = _locate_any(
            repo_dir,
            policies,
            descriptor.fragment,
            descriptor.sub_path,
            profile.nested_dir,
        )
        return install_unit(
            path,
            policy,
            profile.destination_root(policy.kind, scope),
            scope=scope,
            source=descriptor.display(),
        )


def add_unit(
    source: str,
    kind: UnitKind,
    profile: AgentProfile = CLAUDE,
    scope: UnitScope = UnitScope.PERSONAL,
) -> InstallableUnit:
    """Install a unit from any supported source form.

    Args:
        source: Local path, git URL, git URL#name, or GitHub tree URL.
        kind: SKILL (skill or command), COMMAND, or PLUGIN.
        profile: Agent whose store receives the unit.
        scope: Personal or project store for skills and commands.

    Returns:
        The installed unit.

    Raises:
        InvalidSourceError: If the source string is not recognisable.
        CloneFailedError: If the repository cannot be cloned.
        UnitNotFoundError: If no unit is found in the source.
        InvalidManifestError: If the unit's manifest is malformed.
        AlreadyExistsError: If a unit with the same name is installed.
        CopyFailedError: If copying fails part way.
        UnsupportedUnitError: If the agent cannot hold this kind.
    """
    policies = candidate_policies(kind, profile)
    descriptor = resolve_source(source)

    if descriptor.is_git:
        return _install_git(descriptor, policies, profile, scope)
    return _install_local(descriptor, policies, profile, scope)


@dataclass
class InstallAllResult:
    """Per-unit outcome of a bulk install."""

    succeeded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        """Return True if nothing failed (skipped is OK)."""
        return len(self.failed) == 0


def install_catalog(
    entries: list[RegistryEntry],
    kind: UnitKind,
    profile: AgentProfile = CLAUDE,
    scope: UnitScope = UnitScope.PERSONAL,
) -> InstallAllResult:
    """Install every catalog entry. Continues on failure.

    Already-installed units are reported as skipped.
    """
    result = InstallAllResult()

    for entry in entries:
        try:
            unit = add_unit(entry.source, kind, profile=profile, scope=scope)
        except AlreadyExistsError:
            result.skipped.append(entry.name)
        except AgentxError as e:
            result.failed.append((entry.name, str(e)))
        else:
            result.succeeded.append(unit.name)

    return result
