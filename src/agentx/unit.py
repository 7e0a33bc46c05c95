"""Installable unit records and the manifest parser that builds them.

There is no metadata index: a unit is whatever a directory or file on
disk says it is, so list, check, and install all go through parse_unit().
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from agentx.config_tree import ConfigObject, load_json_tree
from agentx.errors import InvalidManifestError, format_validation_errors
from agentx.frontmatter import FrontmatterError, parse_allowed_tools, parse_document
from agentx.kinds import SKILL_MANIFEST, UnitKind, UnitKindPolicy, UnitScope
from agentx.plugin_schema import PluginManifest
from agentx.sanitize import validate_unit_name

MCP_CONFIG_FILE = ".mcp.json"


@dataclass
class PluginComponents:
    """Sub-assets a plugin bundle provides."""

    commands: list[str] = field(default_factory=list)
    agents: list[str] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    hooks: list[str] = field(default_factory=list)
    mcp_servers: list[str] = field(default_factory=list)

    def summary(self) -> str:
        """Short human-readable count, e.g. '2 cmd, 1 skill, 1 mcp'."""
        labels = [
            (self.commands, "cmd"),
            (self.agents, "agent"),
            (self.skills, "skill"),
            (self.hooks, "hook"),
            (self.mcp_servers, "mcp"),
        ]
        parts = [f"{len(items)} {label}" for items, label in labels if items]
        return ", ".join(parts) if parts else "empty"


@dataclass
class InstallableUnit:
    """A skill, command, or plugin as parsed from disk."""

    name: str
    kind: UnitKind
    description: str = ""
    author: str = ""
    version: str = ""
    scope: UnitScope = UnitScope.PERSONAL
    allowed_tools: list[str] = field(default_factory=list)
    source_path: Path | None = None
    installed_path: Path | None = None
    source: str = ""
    components: PluginComponents | None = None

    @property
    def path(self) -> Path | None:
        """Where the unit lives now: installed location, else its source."""
        return self.installed_path or self.source_path


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise InvalidManifestError(path, "manifest not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidManifestError(path, str(e)) from e


def _checked_name(name: str, manifest: Path) -> str:
    try:
        return validate_unit_name(name)
    except ValueError as e:
        raise InvalidManifestError(manifest, str(e)) from e


def _parse_markdown_unit(unit_path: Path, policy: UnitKindPolicy, scope: UnitScope) -> InstallableUnit:
    """Skill directory or command file: frontmatter name, description, tools."""
    manifest = policy.manifest_path(unit_path)
    content = _read_text(manifest)

    try:
        document = parse_document(content)
    except FrontmatterError as e:
        raise InvalidManifestError(manifest, str(e)) from e

    name = document.get_str("name") or policy.unit_name(unit_path)
    allowed_tools: list[str] = []
    if document.metadata:
        allowed_tools = parse_allowed_tools(document.metadata.get("allowed-tools"))

    return InstallableUnit(
        name=_checked_name(name, manifest),
        kind=policy.kind,
        description=document.get_str("description"),
        author=document.get_str("author"),
        scope=scope,
        allowed_tools=allowed_tools,
        source_path=unit_path,
    )


def _list_files(directory: Path, suffix: str) -> list[str]:
    """Stems of regular files in *directory* with *suffix*. Best-effort."""
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []
    return [entry.stem for entry in entries if entry.is_file() and entry.suffix == suffix]


def _list_skill_dirs(directory: Path) -> list[str]:
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []
    return [entry.name for entry in entries if (entry / SKILL_MANIFEST).is_file()]


def _list_mcp_servers(mcp_path: Path) -> list[str]:
    """Server names declared under "mcpServers" in .mcp.json. Best-effort."""
    try:
        tree = load_json_tree(mcp_path)
    except (OSError, ValueError):
        return []
    if not isinstance(tree, ConfigObject):
        return []
    servers = tree.get_object("mcpServers")
    return servers.keys() if servers is not None else []


def scan_components(plugin_path: Path) -> PluginComponents:
    """Scan the fixed component locations of a plugin.

    Each scan is independent: a missing or unreadable location yields an
    empty list.
    """
    return PluginComponents(
        commands=_list_files(plugin_path / "commands", ".md"),
        agents=_list_files(plugin_path / "agents", ".md"),
        skills=_list_skill_dirs(plugin_path / "skills"),
        hooks=_list_files(plugin_path / "hooks", ".json"),
        mcp_servers=_list_mcp_servers(plugin_path / MCP_CONFIG_FILE),
    )


def _parse_plugin(unit_path: Path, policy: UnitKindPolicy) -> InstallableUnit:
    """Plugin directory: JSON manifest plus component scan."""
    manifest_path = policy.manifest_path(unit_path)
    content = _read_text(manifest_path)

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidManifestError(manifest_path, f"invalid JSON: {e}") from e

    try:
        manifest = PluginManifest.model_validate(data)
    except ValidationError as e:
        raise InvalidManifestError(manifest_path, format_validation_errors(e)) from e

    name = manifest.name.strip() or policy.unit_name(unit_path)

    return InstallableUnit(
        name=_checked_name(name, manifest_path),
        kind=policy.kind,
        description=manifest.description,
        author=manifest.author.name,
        version=manifest.version,
        source_path=unit_path,
        components=scan_components(unit_path),
    )


def parse_unit(unit_path: Path, policy: UnitKindPolicy, scope: UnitScope = UnitScope.PERSONAL) -> InstallableUnit:
    """Read the unit at *unit_path* into an InstallableUnit.

    Args:
        unit_path: Skill directory, command file, or plugin directory.
        policy: Kind of unit at that path.
        scope: Scope recorded on skills and commands.

    Returns:
        The parsed unit with source_path set.

    Raises:
        InvalidManifestError: If the manifest is missing, unreadable,
            malformed, or yields an unusable name.
    """
    if policy.kind == UnitKind.PLUGIN:
        return _parse_plugin(unit_path, policy)
    return _parse_markdown_unit(unit_path, policy, scope)


def declared_name(unit_path: Path, policy: UnitKindPolicy) -> str:
    """Name written in the unit's manifest, or "" when it relies on the fallback.

    Raises:
        InvalidManifestError: If the manifest cannot be read or parsed.
    """
    unit = parse_unit(unit_path, policy)
    manifest = policy.manifest_path(unit_path)
    content = _read_text(manifest)

    if policy.kind == UnitKind.PLUGIN:
        # parse_unit already proved the manifest is valid JSON
        raw_name = json.loads(content).get("name")
        return unit.name if isinstance(raw_name, str) and raw_name.strip() else ""

    return unit.name if parse_document(content).get_str("name") else ""
