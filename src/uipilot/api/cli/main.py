"""uipilot CLI entry point."""

from typing import Optional

import typer
from rich.console import Console

from uipilot.api.cli.commands import run, scenarios

app = typer.Typer(
    name="uipilot",
    help="uipilot - Goal-driven UI exploration agents",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Register command groups
app.add_typer(run.app, name="run", help="Execute projects")
app.add_typer(scenarios.app, name="scenarios", help="Inspect scenarios")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Settings YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """uipilot CLI."""
    # Store global options in context for subcommands
    ctx.obj = {"config": config, "verbose": verbose}


@app.command()
def version():
    """Show uipilot version."""
    from uipilot import __version__

    console.print(f"[bold blue]uipilot[/bold blue] version [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
