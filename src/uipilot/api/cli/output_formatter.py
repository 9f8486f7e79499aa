"""
Output formatting for the CLI.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from uipilot.application.project import ScenarioAssignment
from uipilot.application.schemas import ScenarioDefinition
from uipilot.core.domain.agent import Agent
from uipilot.core.domain.models import ScenarioExecutorState

console = Console()

STATE_STYLES = {
    ScenarioExecutorState.IDLE: "white",
    ScenarioExecutorState.RUNNING: "bold yellow",
    ScenarioExecutorState.SUCCESS: "bold green",
    ScenarioExecutorState.FAILED: "bold red",
}


def truncate(text: str, max_length: int = 80) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def scenario_state_table(assignments: list[ScenarioAssignment]) -> Table:
    """One row per scenario: state, progress and goal."""
    table = Table(title="Scenarios")
    table.add_column("Scenario", style="cyan")
    table.add_column("State")
    table.add_column("Progress", style="magenta")
    table.add_column("Goal", style="white")

    for assignment in assignments:
        state = assignment.state
        running_info = assignment.executor.running_info.value
        progress = " ".join(str(running_info).splitlines()) if running_info else ""
        table.add_row(
            assignment.definition.id,
            Text(state.value, style=STATE_STYLES[state]),
            progress,
            truncate(assignment.scenario.goal or ""),
        )
    return table


def definitions_table(definitions: list[ScenarioDefinition], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", style="dim")
    table.add_column("Scenario", style="cyan")
    table.add_column("Depends on", style="white")
    table.add_column("Form factor", style="white")
    table.add_column("Goal", style="white")

    for index, definition in enumerate(definitions, start=1):
        table.add_row(
            str(index),
            definition.id,
            definition.dependency or "",
            definition.device_form_factor.value,
            truncate(definition.goal),
        )
    return table


def print_agent_steps(goal: str, agent: Agent) -> None:
    """Print the steps of an agent's latest attempt."""
    context_history = agent.latest_context.value
    console.print(f"[bold]Goal:[/bold] {goal}")
    if context_history is None:
        console.print("  [dim]not started[/dim]")
        return
    for index, step in enumerate(context_history.steps, start=1):
        if step.is_failure():
            style = "red"
        elif step.is_goal_achieved():
            style = "green"
        else:
            style = "white"
        console.print(f"  [bold]Turn {index}[/bold]", style=style)
        for line in step.text().splitlines():
            console.print(f"    {line}", style=style)
