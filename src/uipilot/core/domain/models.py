"""
Core Domain Models

This module defines the data models of the exploration domain:
- Step: one observe-decide-act cycle's recorded outcome
- ContextHistory: append-only record of steps for one goal attempt
- RunningInfo: progress snapshot published by a scenario executor
- DeviceFormFactor / ScenarioExecutorState: enumerations shared by layers

Steps are immutable once appended. A ContextHistory is owned by exactly one
Agent for one goal attempt; observers only read it.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from uipilot.core.domain.commands import Command, GoalAchieved


class DeviceFormFactor(str, Enum):
    """Device interaction model."""

    MOBILE = "mobile"
    TV = "tv"

    def is_tv(self) -> bool:
        return self is DeviceFormFactor.TV

    def requires_focus_tree(self) -> bool:
        """Directional-pad devices need the focused view tree to navigate."""
        return self.is_tv()


class ScenarioExecutorState(str, Enum):
    """Lifecycle of one scenario executor."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class Step:
    """
    Recorded outcome of one step.

    Attributes:
        memo: Reasoning or failure description
        screenshot_file_name: Reference to the screenshot taken for the step
                              (None when capture failed)
        ai_request: Request text sent to the decision provider (if any)
        ai_response: Response text returned by the decision provider (if any)
        command: Command issued in this step (None for failure memos)
        failure: True for steps recording a command the device could not perform
    """

    memo: str
    screenshot_file_name: str | None = None
    ai_request: str | None = None
    ai_response: str | None = None
    command: Command | None = None
    failure: bool = False

    def is_goal_achieved(self) -> bool:
        return isinstance(self.command, GoalAchieved)

    def is_failure(self) -> bool:
        return self.failure

    def text(self) -> str:
        """Human-readable summary of the step."""
        lines = [f"memo: {self.memo}"]
        if self.command is not None:
            lines.append(f"command: {self.command.describe()}")
        if self.screenshot_file_name:
            lines.append(f"screenshot: {self.screenshot_file_name}")
        return "\n".join(lines)


StepListener = Callable[[list[Step]], None]


class ContextHistory:
    """
    Append-only step record for one goal attempt.

    The goal counts as achieved as soon as any recorded step carries the
    GoalAchieved command. Listeners receive a snapshot of the step list on
    every append.
    """

    def __init__(self, goal: str):
        self.goal = goal
        self._steps: list[Step] = []
        self._listeners: list[StepListener] = []

    @property
    def steps(self) -> list[Step]:
        """Snapshot of the recorded steps."""
        return list(self._steps)

    def add_step(self, step: Step) -> None:
        self._steps.append(step)
        snapshot = self.steps
        for listener in list(self._listeners):
            listener(snapshot)

    def add_listener(self, listener: StepListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def is_goal_achieved(self) -> bool:
        return any(step.is_goal_achieved() for step in self._steps)

    def prompt(self) -> str:
        """Render goal and step history for presentation to a decision provider."""
        lines = [f"Goal: {self.goal}", ""]
        if not self._steps:
            lines.append("No steps taken yet.")
        for index, step in enumerate(self._steps, start=1):
            lines.append(f"Step {index}:")
            lines.append(step.text())
            lines.append("")
        return "\n".join(lines).rstrip()

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"ContextHistory(goal={self.goal!r}, steps={len(self._steps)})"


@dataclass(frozen=True)
class RunningInfo:
    """
    Progress snapshot published while a scenario executor runs.

    Attributes:
        all_tasks: Number of tasks in the scenario
        running_tasks: 1-based index of the task currently running
        retried_tasks: Scenario retries already used
        max_retry: Scenario retry budget
    """

    all_tasks: int
    running_tasks: int
    retried_tasks: int
    max_retry: int

    def __str__(self) -> str:
        return (
            f"task:{self.running_tasks}/{self.all_tasks}\n"
            f"retry:{self.retried_tasks}/{self.max_retry}"
        )
