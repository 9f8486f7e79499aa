"""
Decision Provider Protocol

Contract for the component that chooses the next commands. Prompt
construction and transport (LLM APIs, scripted fakes, ...) belong to the
implementation; the agent only passes context in and records the result.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from uipilot.core.domain.commands import Command, CommandType
from uipilot.core.domain.models import ContextHistory, Step


@dataclass
class DecisionInput:
    """
    Everything the decision provider sees for one step.

    Attributes:
        context_history: Goal and steps recorded so far
        dump_hierarchy: View hierarchy text dumped from the device
        focused_tree: Focus-only view tree (TV form factor only)
        command_types: Command kinds the provider may choose from
        screenshot_file_name: Screenshot reference for this step (None when
                              capture failed)
    """

    context_history: ContextHistory
    dump_hierarchy: str
    command_types: list[CommandType]
    screenshot_file_name: str | None = None
    focused_tree: str | None = None


@dataclass
class DecisionOutput:
    """
    Decision provider result.

    Attributes:
        commands: Ordered commands to run, at least one
        step: Step recorded for this decision (memo, request/response text)
    """

    commands: list[Command]
    step: Step


@runtime_checkable
class DecisionProviderProtocol(Protocol):
    """Chooses the next commands for the agent."""

    async def decide(self, decision_input: DecisionInput) -> DecisionOutput:
        ...
