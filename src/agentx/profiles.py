"""Per-agent destination roots for installed units.

An AgentProfile maps (unit kind, scope) to the directory units are copied
into. Plugins are agent-independent and always land in AgentX Home.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from agentx.errors import UnsupportedUnitError
from agentx.home import get_codex_home, get_plugins_dir
from agentx.kinds import UnitKind, UnitScope


@dataclass(frozen=True)
class AgentProfile:
    """Content-store layout of one agent.

    Attributes:
        name: Display name.
        nested_dir: Dotted directory the agent reads from inside a project
            (e.g. ".claude"); the locator also searches it in repositories.
        personal_root: Returns the user-level base directory.
        supports_commands: Whether single-file commands can be installed.
        supports_plugins: Whether plugin bundles can be installed.
    """

    name: str
    nested_dir: str
    personal_root: Callable[[], Path]
    supports_commands: bool = True
    supports_plugins: bool = False

    def base_dir(self, scope: UnitScope) -> Path:
        if scope == UnitScope.PROJECT:
            return Path.cwd() / self.nested_dir
        return self.personal_root()

    def supports(self, kind: UnitKind) -> bool:
        if kind == UnitKind.COMMAND:
            return self.supports_commands
        if kind == UnitKind.PLUGIN:
            return self.supports_plugins
        return True

    def destination_root(self, kind: UnitKind, scope: UnitScope = UnitScope.PERSONAL) -> Path:
        """Directory that units of *kind* are installed into for *scope*.

        Raises:
            UnsupportedUnitError: If this agent cannot hold *kind* units.
        """
        if not self.supports(kind):
            msg = f"{kind.value.capitalize()} units are not supported for {self.name}"
            raise UnsupportedUnitError(msg)
        if kind == UnitKind.PLUGIN:
            return get_plugins_dir()
        subdir = "commands" if kind == UnitKind.COMMAND else "skills"
        return self.base_dir(scope) / subdir


CLAUDE = AgentProfile(
    name="Claude Code",
    nested_dir=".claude",
    personal_root=lambda: Path.home() / ".claude",
    supports_commands=True,
    supports_plugins=True,
)

CODEX = AgentProfile(
    name="Codex",
    nested_dir=".codex",
    personal_root=get_codex_home,
    supports_commands=False,
    supports_plugins=False,
)

PROFILES: dict[str, AgentProfile] = {
    "claude": CLAUDE,
    "claudecode": CLAUDE,
    "codex": CODEX,
    "codexcli": CODEX,
}


def normalize_agent_name(name: str) -> str:
    """Lowercase and strip separators so 'Claude-Code' matches 'claudecode'."""
    normalized = name.strip().lower()
    for sep in ("-", "_", " "):
        normalized = normalized.replace(sep, "")
    return normalized


def get_profile(name: str) -> AgentProfile:
    """Look up an agent profile by user-supplied name.

    Raises:
        ValueError: If the name does not match a known agent.
    """
    profile = PROFILES.get(normalize_agent_name(name))
    if profile is None:
        msg = f"Unknown agent: {name} (use 'claude' or 'codex')"
        raise ValueError(msg)
    return profile
