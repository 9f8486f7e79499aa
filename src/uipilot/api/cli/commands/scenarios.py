"""Scenarios command - Inspect project scenarios and their dependencies."""

from pathlib import Path

import typer
from rich.console import Console

from uipilot.api.cli.output_formatter import definitions_table
from uipilot.application.resolver import ScenarioDependencyResolver
from uipilot.core.domain.errors import ProjectFileError, ScenarioDependencyCycleError
from uipilot.infrastructure.persistence.file_project_loader import FileProjectLoader

app = typer.Typer(help="Scenario inspection")
console = Console()


def _load_resolver(project_file: Path) -> ScenarioDependencyResolver:
    try:
        definition = FileProjectLoader(project_file).load()
    except ProjectFileError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return ScenarioDependencyResolver(definition.scenarios)


@app.command("list")
def list_scenarios(
    project_file: Path = typer.Argument(..., help="Project YAML file"),
):
    """List all scenarios in execution order."""
    resolver = _load_resolver(project_file)
    try:
        ordered = resolver.resolve_all()
    except ScenarioDependencyCycleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not ordered:
        console.print("[yellow]No scenarios defined[/yellow]")
        return
    console.print(definitions_table(ordered, title="Scenarios"))


@app.command("chain")
def show_chain(
    project_file: Path = typer.Argument(..., help="Project YAML file"),
    scenario_id: str = typer.Argument(..., help="Scenario ID"),
):
    """Show the dependency chain a scenario runs with."""
    resolver = _load_resolver(project_file)
    try:
        chain = resolver.resolve_chain(scenario_id)
    except ScenarioDependencyCycleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except ProjectFileError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(definitions_table(chain, title=f"Dependency chain of {scenario_id}"))
