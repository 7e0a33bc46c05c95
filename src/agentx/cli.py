"""AgentX CLI entry point."""

import sys
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from agentx import __version__, cli_logger, exit_codes
from agentx.add import add_unit, candidate_policies, install_catalog
from agentx.agents import AgentOutcome, get_all_agents, install_to_agents
from agentx.errors import AgentxError, InvalidSourceError, UnitNotFoundError, handle_cli_error
from agentx.git import is_git_available
from agentx.home import get_cache_dir
from agentx.kinds import UnitKind, UnitScope
from agentx.profiles import CLAUDE, AgentProfile, get_profile
from agentx.registry import CatalogKind, RegistryCatalog, fetch_catalog
from agentx.source import resolve_source
from agentx.store import UnitStatus, check_units, list_units, remove_unit
from agentx.unit import InstallableUnit
from agentx.update_check import GitHubReleaseSource, UpdateChecker, get_update_notice

app = typer.Typer(
    name="agentx",
    help="AgentX - Install skills, commands, and plugins for AI coding agents.",
    no_args_is_help=True,
)
skills_app = typer.Typer(help="Manage skills and slash commands.", no_args_is_help=True)
plugins_app = typer.Typer(help="Manage Claude Code plugins.", no_args_is_help=True)
app.add_typer(skills_app, name="skills")
app.add_typer(plugins_app, name="plugins")

console = Console()

ALL_AGENTS = "all"

AgentOption = Annotated[
    str,
    typer.Option("--agent", "-a", help="Target agent: claude or codex."),
]
InstallAgentOption = Annotated[
    str,
    typer.Option("--agent", "-a", help="Target agent: claude, codex, or all."),
]
ProjectOption = Annotated[
    bool,
    typer.Option("--project", "-p", help="Use the project store (./.claude, ./.codex) instead of personal."),
]
ScopeOption = Annotated[
    UnitScope | None,
    typer.Option("--scope", "-s", help="Only show one scope. Default: both."),
]


def require_profile(agent: str) -> AgentProfile:
    """Resolve an --agent value.

    Raises:
        typer.Exit: With INVALID_ARGS if the agent is unknown.
    """
    try:
        return get_profile(agent)
    except ValueError as e:
        cli_logger.error(str(e))
        raise typer.Exit(exit_codes.INVALID_ARGS) from e


def require_git_for(source: str) -> None:
    """Verify git is available when *source* must be cloned.

    Raises:
        typer.Exit: With INVALID_SOURCE or GIT_ERROR.
    """
    try:
        descriptor = resolve_source(source)
    except InvalidSourceError as e:
        cli_logger.error(str(e))
        raise typer.Exit(e.exit_code) from e

    if descriptor.is_git and not is_git_available():
        cli_logger.error("Git is not available")
        cli_logger.dim("  • AgentX requires git to install from repositories")
        raise typer.Exit(exit_codes.GIT_ERROR)


def _scope(project: bool) -> UnitScope:
    return UnitScope.PROJECT if project else UnitScope.PERSONAL


def _skill_kinds(profile: AgentProfile) -> list[UnitKind]:
    """Kinds shown under `skills`: skills, plus commands where supported."""
    return [policy.kind for policy in candidate_policies(UnitKind.SKILL, profile)]


def _truncate(text: str, width: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 1] + "…"


def _install(source: str, kind: UnitKind, agent: str, project: bool) -> None:
    require_git_for(source)

    if agent.strip().lower() == ALL_AGENTS:
        results = install_to_agents(get_all_agents(_scope(project)), kind, source)
        for result in results:
            if result.outcome == AgentOutcome.INSTALLED and result.unit is not None:
                cli_logger.success(f"{result.agent}: installed '{result.unit.name}'")
                cli_logger.dim(f"  {result.unit.installed_path}")
            elif result.outcome == AgentOutcome.SKIPPED:
                cli_logger.skipped(f"{result.agent}: {result.message}")
            else:
                cli_logger.error(f"{result.agent}: {result.message}")
        if any(r.outcome == AgentOutcome.FAILED for r in results):
            raise typer.Exit(exit_codes.GENERAL_ERROR)
        raise typer.Exit(exit_codes.SUCCESS)

    profile = require_profile(agent)
    try:
        unit = add_unit(source, kind, profile=profile, scope=_scope(project))
    except AgentxError as e:
        cli_logger.error(str(e))
        raise typer.Exit(e.exit_code) from e

    cli_logger.success(f"Installed {unit.kind.value} '{unit.name}' for {profile.name}")
    cli_logger.dim(f"  {unit.installed_path}")
    raise typer.Exit(exit_codes.SUCCESS)


def _remove(name: str, kinds: list[UnitKind], agent: str, project: bool) -> None:
    profile = require_profile(agent)
    scope = _scope(project)

    for kind in kinds:
        try:
            path = remove_unit(name, kind, profile, scope)
        except UnitNotFoundError:
            continue
        except AgentxError as e:
            cli_logger.error(str(e))
            raise typer.Exit(e.exit_code) from e
        cli_logger.success(f"Removed {kind.value} '{name}'")
        cli_logger.dim(f"  {path}")
        raise typer.Exit(exit_codes.SUCCESS)

    label = kinds[0].value
    cli_logger.error(f"{label.capitalize()} not found: {name} ({scope.value} scope)")
    raise typer.Exit(exit_codes.UNIT_NOT_FOUND)


def _print_check_table(statuses: list[UnitStatus]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME", style="cyan")
    table.add_column("TYPE")
    table.add_column("SCOPE")
    table.add_column("STATUS")
    table.add_column("ISSUES")

    for status in statuses:
        if not status.valid:
            status_str = "[red]invalid[/red]"
        elif status.issues:
            status_str = "[yellow]warning[/yellow]"
        else:
            status_str = "[green]ok[/green]"
        issues = ", ".join(status.issues) if status.issues else "-"
        unit = status.unit
        table.add_row(unit.name, unit.kind.value, unit.scope.value, status_str, issues)

    console.print(table)


def _check(kinds: list[UnitKind], profile: AgentProfile, scope: UnitScope | None, label: str) -> None:
    statuses = [status for kind in kinds for status in check_units(kind, profile, scope)]
    if not statuses:
        cli_logger.info(f"No {label} installed for {profile.name}")
        raise typer.Exit(exit_codes.SUCCESS)

    _print_check_table(statuses)
    if any(not status.valid for status in statuses):
        raise typer.Exit(exit_codes.UNIT_INVALID)
    raise typer.Exit(exit_codes.SUCCESS)


def _fetch(kind: CatalogKind) -> RegistryCatalog:
    try:
        catalog = fetch_catalog(kind)
    except AgentxError as e:
        cli_logger.error(str(e))
        raise typer.Exit(e.exit_code) from e

    if len(catalog) == 0:
        cli_logger.info(f"The {kind.value} registry is empty")
        raise typer.Exit(exit_codes.SUCCESS)
    return catalog


def _is_git_source(source: str) -> bool:
    try:
        return resolve_source(source).is_git
    except InvalidSourceError:
        return False


def _install_all(catalog: RegistryCatalog, kind: UnitKind, profile: AgentProfile, project: bool) -> None:
    if any(_is_git_source(entry.source) for entry in catalog) and not is_git_available():
        cli_logger.error("Git is not available")
        raise typer.Exit(exit_codes.GIT_ERROR)

    result = install_catalog(list(catalog.entries), kind, profile=profile, scope=_scope(project))

    for name in result.succeeded:
        cli_logger.success(f"Installed '{name}'")
    for name in result.skipped:
        cli_logger.skipped(f"'{name}' already installed")
    for name, message in result.failed:
        cli_logger.error(f"'{name}': {message}")

    cli_logger.info(
        f"\n{len(result.succeeded)} installed, {len(result.skipped)} skipped, {len(result.failed)} failed"
    )
    if not result.all_succeeded:
        raise typer.Exit(exit_codes.GENERAL_ERROR)
    raise typer.Exit(exit_codes.SUCCESS)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"agentx {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show AgentX version and exit.",
    ),
) -> None:
    """AgentX - Install skills, commands, and plugins for AI coding agents."""


@app.command()
def update(
    skip: Annotated[
        bool,
        typer.Option("--skip", help="Do not notify about the latest version again."),
    ] = False,
) -> None:
    """Check GitHub releases for a newer AgentX version."""
    checker = UpdateChecker(GitHubReleaseSource(), __version__, get_cache_dir())

    try:
        info = checker.check()
    except (OSError, ValueError) as e:
        cli_logger.error(f"Update check failed: {e}")
        raise typer.Exit(exit_codes.GENERAL_ERROR) from e

    if info is None:
        cli_logger.success(f"AgentX {__version__} is up to date")
        raise typer.Exit(exit_codes.SUCCESS)

    if skip:
        skipped = checker.skip_version(info.latest)
        cli_logger.info(f"Skipping {skipped} until a newer release is available")
        raise typer.Exit(exit_codes.SUCCESS)

    cli_logger.info(info.message())
    raise typer.Exit(exit_codes.SUCCESS)


def _print_skill_table(units: list[InstallableUnit]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME", style="cyan")
    table.add_column("TYPE")
    table.add_column("SCOPE")
    table.add_column("DESCRIPTION")

    for unit in units:
        table.add_row(unit.name, unit.kind.value, unit.scope.value, _truncate(unit.description) or "-")

    console.print(table)


@skills_app.command("list")
def skills_list(
    agent: AgentOption = "claude",
    scope: ScopeOption = None,
) -> None:
    """List installed skills and commands."""
    profile = require_profile(agent)
    units = [unit for kind in _skill_kinds(profile) for unit in list_units(kind, profile, scope)]

    if not units:
        cli_logger.info(f"No skills installed for {profile.name}")
        raise typer.Exit(exit_codes.SUCCESS)

    _print_skill_table(units)


@skills_app.command("install")
def skills_install(
    source: Annotated[
        str,
        typer.Argument(help="Local path, git URL, git URL#name, or GitHub tree URL."),
    ],
    agent: InstallAgentOption = "claude",
    project: ProjectOption = False,
) -> None:
    """Install a skill or command.

    A repository holding several skills needs a #name fragment or a tree
    URL pointing at one of them.
    """
    _install(source, UnitKind.SKILL, agent, project)


@skills_app.command("remove")
def skills_remove(
    name: Annotated[str, typer.Argument(help="Installed skill or command name.")],
    agent: AgentOption = "claude",
    project: ProjectOption = False,
) -> None:
    """Remove an installed skill or command."""
    profile = require_profile(agent)
    # Commands first: a name can exist as both
    kinds = sorted(_skill_kinds(profile), key=lambda k: k != UnitKind.COMMAND)
    _remove(name, kinds, agent, project)


@skills_app.command("check")
def skills_check(
    agent: AgentOption = "claude",
    scope: ScopeOption = None,
) -> None:
    """Validate installed skills and commands."""
    profile = require_profile(agent)
    _check(_skill_kinds(profile), profile, scope, "skills")


@skills_app.command("available")
def skills_available(agent: AgentOption = "claude") -> None:
    """List skills published in the registry."""
    profile = require_profile(agent)
    catalog = _fetch(CatalogKind.SKILLS)
    installed = {unit.name for kind in _skill_kinds(profile) for unit in list_units(kind, profile)}

    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME", style="cyan")
    table.add_column("AUTHOR")
    table.add_column("DESCRIPTION")
    table.add_column("INSTALLED")

    for entry in catalog:
        mark = "[green]✓[/green]" if entry.name in installed else "-"
        table.add_row(entry.name, entry.author or "-", _truncate(entry.description) or "-", mark)

    console.print(table)
    cli_logger.dim(f"Source: {catalog.origin.value}")


@skills_app.command("install-all")
def skills_install_all(
    agent: AgentOption = "claude",
    project: ProjectOption = False,
) -> None:
    """Install every skill in the registry. Already installed ones are skipped."""
    profile = require_profile(agent)
    catalog = _fetch(CatalogKind.SKILLS)
    _install_all(catalog, UnitKind.SKILL, profile, project)


@plugins_app.command("list")
def plugins_list() -> None:
    """List installed plugins."""
    units = list_units(UnitKind.PLUGIN, CLAUDE)

    if not units:
        cli_logger.info("No plugins installed")
        raise typer.Exit(exit_codes.SUCCESS)

    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME", style="cyan")
    table.add_column("VERSION")
    table.add_column("COMPONENTS")
    table.add_column("DESCRIPTION")

    for unit in units:
        components = unit.components.summary() if unit.components is not None else "-"
        table.add_row(unit.name, unit.version or "-", components, _truncate(unit.description) or "-")

    console.print(table)


@plugins_app.command("install")
def plugins_install(
    source: Annotated[
        str,
        typer.Argument(help="Local path, git URL, git URL#name, or GitHub tree URL."),
    ],
) -> None:
    """Install a plugin into AgentX Home."""
    _install(source, UnitKind.PLUGIN, "claude", project=False)


@plugins_app.command("remove")
def plugins_remove(
    name: Annotated[str, typer.Argument(help="Installed plugin name.")],
) -> None:
    """Remove an installed plugin."""
    _remove(name, [UnitKind.PLUGIN], "claude", project=False)


@plugins_app.command("check")
def plugins_check() -> None:
    """Validate installed plugins."""
    _check([UnitKind.PLUGIN], CLAUDE, None, "plugins")


@plugins_app.command("available")
def plugins_available() -> None:
    """List plugins published in the registry."""
    catalog = _fetch(CatalogKind.PLUGINS)
    installed = {unit.name for unit in list_units(UnitKind.PLUGIN, CLAUDE)}

    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME", style="cyan")
    table.add_column("VERSION")
    table.add_column("COMPONENTS")
    table.add_column("DESCRIPTION")
    table.add_column("INSTALLED")

    for entry in catalog:
        mark = "[green]✓[/green]" if entry.name in installed else "-"
        table.add_row(
            entry.name,
            entry.version or "-",
            entry.components_summary,
            _truncate(entry.description) or "-",
            mark,
        )

    console.print(table)
    cli_logger.dim(f"Source: {catalog.origin.value}")


@plugins_app.command("install-all")
def plugins_install_all() -> None:
    """Install every plugin in the registry. Already installed ones are skipped."""
    catalog = _fetch(CatalogKind.PLUGINS)
    _install_all(catalog, UnitKind.PLUGIN, CLAUDE, project=False)


def _show_update_notice() -> None:
    """Show update notice if a newer release is available on GitHub.

    Suppressed when stderr is not a TTY (piped output).
    Errors are silently ignored: the update check must never crash the CLI.
    """
    if not sys.stderr.isatty():
        return
    try:
        notice = get_update_notice(__version__, get_cache_dir())
    except (OSError, ValueError):
        return
    if notice is not None:
        cli_logger.warning(notice)


def main_cli() -> None:
    """CLI entry point with top-level exception handling.

    Wraps the Typer app to catch any unhandled exceptions and format them
    as clean error messages instead of raw tracebacks.
    """
    try:
        app()
    except Exception as e:
        sys.exit(handle_cli_error(e))
    finally:
        _show_update_notice()


if __name__ == "__main__":
    main_cli()
