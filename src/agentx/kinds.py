"""Unit kinds and the policy record that drives the shared pipeline.

Skills, commands, and plugins differ only in how a candidate path is
recognised, where their manifest lives, which conventional subdirectory
holds them in a repository, and how they are named on disk. Everything
else (locating, parsing, copying) is one code path parameterised by a
UnitKindPolicy.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

SKILL_MANIFEST = "SKILL.md"
PLUGIN_MANIFEST = Path(".claude-plugin") / "plugin.json"
COMMAND_SUFFIX = ".md"


class UnitKind(str, Enum):
    """Type of installable unit."""

    COMMAND = "command"
    SKILL = "skill"
    PLUGIN = "plugin"


class UnitScope(str, Enum):
    """Which destination root a skill or command is installed into."""

    PERSONAL = "personal"
    PROJECT = "project"


def is_skill_dir(path: Path) -> bool:
    """A skill is a directory containing SKILL.md."""
    return path.is_dir() and (path / SKILL_MANIFEST).is_file()


def is_plugin_dir(path: Path) -> bool:
    """A plugin is a directory containing .claude-plugin/plugin.json."""
    return path.is_dir() and (path / PLUGIN_MANIFEST).is_file()


def is_command_file(path: Path) -> bool:
    """A command is a regular file with the .md suffix."""
    return path.is_file() and path.suffix == COMMAND_SUFFIX


@dataclass(frozen=True)
class UnitKindPolicy:
    """Everything the pipeline needs to know about one unit kind.

    Attributes:
        kind: The unit kind this policy describes.
        subdir: Conventional directory holding units of this kind, both in
            repositories and under an agent's content root.
        manifest: Manifest path relative to the unit directory, or None
            when the unit file is its own manifest.
        is_valid: Validity predicate for a candidate path.
    """

    kind: UnitKind
    subdir: str
    manifest: Path | None
    is_valid: Callable[[Path], bool]

    @property
    def is_file_unit(self) -> bool:
        return self.manifest is None

    def entry_name(self, name: str) -> str:
        """On-disk entry name for a unit called *name*."""
        if self.is_file_unit:
            return name + COMMAND_SUFFIX
        return name

    def unit_name(self, path: Path) -> str:
        """Fallback unit name derived from the path itself."""
        if self.is_file_unit:
            return path.stem
        return path.name

    def manifest_path(self, unit_path: Path) -> Path:
        """File whose content describes the unit at *unit_path*."""
        if self.manifest is None:
            return unit_path
        return unit_path / self.manifest


SKILL = UnitKindPolicy(
    kind=UnitKind.SKILL,
    subdir="skills",
    manifest=Path(SKILL_MANIFEST),
    is_valid=is_skill_dir,
)

COMMAND = UnitKindPolicy(
    kind=UnitKind.COMMAND,
    subdir="commands",
    manifest=None,
    is_valid=is_command_file,
)

PLUGIN = UnitKindPolicy(
    kind=UnitKind.PLUGIN,
    subdir="plugins",
    manifest=PLUGIN_MANIFEST,
    is_valid=is_plugin_dir,
)

POLICIES: dict[UnitKind, UnitKindPolicy] = {
    UnitKind.SKILL: SKILL,
    UnitKind.COMMAND: COMMAND,
    UnitKind.PLUGIN: PLUGIN,
}


def policy_for(kind: UnitKind) -> UnitKindPolicy:
    """Return the policy instance for *kind*."""
    return POLICIES[kind]
