"""Console output for the AgentX CLI.

Messages often carry paths, URLs and git output, so the text is escaped
before Rich sees it; only the prefixes below use markup. Failures and
warnings go to stderr so `agentx skills list | ...` stays parseable.
"""

from rich.console import Console
from rich.markup import escape

_console = Console()
_err_console = Console(stderr=True)


def success(message: str) -> None:
    """Something was installed or removed."""
    _console.print(f"[green]✓[/green] {escape(message)}")


def skipped(message: str) -> None:
    """Nothing to do for this item, e.g. it is already installed."""
    _console.print(f"[dim]-[/dim] {escape(message)}")


def error(message: str) -> None:
    _err_console.print(f"[red]✗[/red] {escape(message)}")


def warning(message: str) -> None:
    _err_console.print(f"[yellow]![/yellow] {escape(message)}")


def info(message: str) -> None:
    _console.print(escape(message))


def dim(message: str) -> None:
    """Secondary detail such as an installed path or the catalog origin."""
    _console.print(f"[dim]{escape(message)}[/dim]")
