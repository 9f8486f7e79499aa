"""Run command - Execute projects."""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from uipilot.api.cli.output_formatter import print_agent_steps, scenario_state_table
from uipilot.api.cli.plugins import FactoryLoadError, load_factory
from uipilot.application.project import Project
from uipilot.config.log_config import setup_logging
from uipilot.config.settings import UiPilotSettings
from uipilot.core.domain.errors import ProjectFileError, ScenarioDependencyCycleError

app = typer.Typer(help="Execute projects")
console = Console()


def load_settings(ctx: typer.Context) -> UiPilotSettings:
    global_opts = ctx.obj or {}
    config = global_opts.get("config")
    if config:
        return UiPilotSettings.load_from_file(Path(config))
    return UiPilotSettings()


@app.command("project")
def run_project(
    ctx: typer.Context,
    project_file: Path = typer.Argument(..., help="Project YAML file"),
    device_factory: str = typer.Option(
        ..., "--device-factory", help="Device factory as 'module:callable'"
    ),
    ai_factory: str = typer.Option(
        ..., "--ai-factory", help="Decision provider factory as 'module:callable'"
    ),
    scenario_ids: Optional[List[str]] = typer.Option(
        None, "--scenario", "-s", help="Run only these scenarios (repeatable)"
    ),
    debug: Optional[bool] = typer.Option(
        None, "--debug", help="Enable debug output (overrides settings)"
    ),
):
    """Execute the scenarios of a project.

    Examples:
        # Run every scenario
        uipilot run project project.yaml --device-factory mydevices:connect --ai-factory myai:create

        # Run one scenario (its dependencies run as part of it)
        uipilot run project project.yaml -s enable-dark-mode --device-factory ... --ai-factory ...
    """
    global_opts = ctx.obj or {}
    settings = load_settings(ctx)
    debug = debug if debug is not None else (settings.debug or global_opts.get("verbose", False))
    setup_logging(debug=debug, log_file=settings.log_file, log_level=settings.log_level)

    try:
        device_factory_fn = load_factory(device_factory)
        ai_factory_fn = load_factory(ai_factory)
    except FactoryLoadError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)

    try:
        project = Project.from_file(
            project_file,
            device_factory=device_factory_fn,
            decision_provider_factory=ai_factory_fn,
            settings=settings,
        )
    except ScenarioDependencyCycleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except ProjectFileError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    known_ids = {assignment.definition.id for assignment in project.assignments}
    unknown = [scenario_id for scenario_id in scenario_ids or [] if scenario_id not in known_ids]
    if unknown:
        console.print(f"[red]Unknown scenario(s): {', '.join(unknown)}[/red]")
        raise typer.Exit(1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("[>] Executing project...", total=None)

        for assignment in project.assignments:
            scenario_id = assignment.definition.id

            def on_running_info(info, scenario_id=scenario_id):
                if info is not None:
                    progress.update(
                        task,
                        description=f"[>] {scenario_id} {' '.join(str(info).splitlines())}",
                    )

            assignment.executor.running_info.add_listener(on_running_info)

        success = asyncio.run(project.execute(scenario_ids or None))

    console.print(scenario_state_table(project.assignments))

    if debug:
        for assignment in project.assignments:
            for agent_task, agent in assignment.executor.task_to_agents.value:
                print_agent_steps(agent_task.goal, agent)

    if success:
        console.print("[bold green]All scenarios succeeded[/bold green]")
    else:
        console.print("[bold red]Some scenarios failed[/bold red]")
        raise typer.Exit(1)
