"""Agent adapters and install-to-many-agents orchestration.

Each adapter answers the same small contract (exists, has/install/remove
a unit, capability flags) so bulk operations can treat every agent alike.
The adapters here are backed by the on-disk content stores.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from agentx.add import add_unit
from agentx.errors import AgentxError, AlreadyExistsError
from agentx.kinds import UnitKind, UnitScope
from agentx.profiles import CLAUDE, CODEX, AgentProfile
from agentx.store import list_units, remove_unit
from agentx.unit import InstallableUnit


class AgentAdapter(Protocol):
    """Contract an agent integration must satisfy for bulk installs."""

    @property
    def name(self) -> str: ...

    def exists(self) -> bool:
        """Whether the agent appears to be present on this machine."""
        ...

    def supports_skills(self) -> bool: ...

    def supports_plugins(self) -> bool: ...

    def has_unit(self, name: str, kind: UnitKind) -> bool:
        """Whether a unit called *name* is installed.

        Raises:
            AgentxError: If the agent's store cannot be inspected.
        """
        ...

    def install_unit(self, source: str, kind: UnitKind) -> InstallableUnit:
        """Install from *source*.

        Raises:
            AgentxError: On any pipeline failure.
        """
        ...

    def remove_unit(self, name: str, kind: UnitKind) -> None: ...


class StoreAgentAdapter:
    """Adapter that installs into an AgentProfile's personal content store."""

    def __init__(self, profile: AgentProfile, scope: UnitScope = UnitScope.PERSONAL) -> None:
        self._profile = profile
        self._scope = scope

    @property
    def name(self) -> str:
        return self._profile.name

    @property
    def profile(self) -> AgentProfile:
        return self._profile

    def exists(self) -> bool:
        # Presence is judged by the personal root whatever the install scope
        return self._profile.base_dir(UnitScope.PERSONAL).is_dir()

    def supports_skills(self) -> bool:
        return self._profile.supports(UnitKind.SKILL)

    def supports_plugins(self) -> bool:
        return self._profile.supports(UnitKind.PLUGIN)

    def has_unit(self, name: str, kind: UnitKind) -> bool:
        kinds = [UnitKind.SKILL, UnitKind.COMMAND] if kind == UnitKind.SKILL else [kind]
        return any(
            unit.name == name
            for each in kinds
            for unit in list_units(each, self._profile, self._scope)
        )

    def install_unit(self, source: str, kind: UnitKind) -> InstallableUnit:
        return add_unit(source, kind, profile=self._profile, scope=self._scope)

    def remove_unit(self, name: str, kind: UnitKind) -> None:
        remove_unit(name, kind, self._profile, self._scope)


def get_all_agents(scope: UnitScope = UnitScope.PERSONAL) -> list[StoreAgentAdapter]:
    """Every agent AgentX can install into, targeting *scope*."""
    return [StoreAgentAdapter(CLAUDE, scope), StoreAgentAdapter(CODEX, scope)]


class AgentOutcome(str, Enum):
    """What happened for one agent during a bulk install."""

    INSTALLED = "installed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class AgentInstallResult:
    """Per-agent outcome of install_to_agents()."""

    agent: str
    outcome: AgentOutcome
    message: str = ""
    unit: InstallableUnit | None = None


def _supports(agent: AgentAdapter, kind: UnitKind) -> bool:
    if kind == UnitKind.PLUGIN:
        return agent.supports_plugins()
    return agent.supports_skills()


def install_to_agents(
    agents: list[AgentAdapter],
    kind: UnitKind,
    source: str,
    name: str | None = None,
) -> list[AgentInstallResult]:
    """Install *source* into each agent, collecting one result per agent.

    Agents that cannot hold *kind*, or are not present on this machine,
    are skipped. When *name* is known up
    front, agents that already have it are skipped without cloning. A
    failure for one agent never stops the rest.
    """
    results: list[AgentInstallResult] = []

    for agent in agents:
        if not _supports(agent, kind):
            results.append(AgentInstallResult(agent.name, AgentOutcome.SKIPPED, "not supported"))
            continue

        if not agent.exists():
            results.append(AgentInstallResult(agent.name, AgentOutcome.SKIPPED, "not installed"))
            continue

        try:
            if name is not None and agent.has_unit(name, kind):
                results.append(AgentInstallResult(agent.name, AgentOutcome.SKIPPED, "already installed"))
                continue
            unit = agent.install_unit(source, kind)
        except AlreadyExistsError:
            results.append(AgentInstallResult(agent.name, AgentOutcome.SKIPPED, "already installed"))
        except AgentxError as e:
            results.append(AgentInstallResult(agent.name, AgentOutcome.FAILED, str(e)))
        else:
            results.append(AgentInstallResult(agent.name, AgentOutcome.INSTALLED, unit=unit))

    return results
