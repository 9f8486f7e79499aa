"""
Interceptor Interfaces

Interceptors wrap the four externally visible agent operations without
touching their implementation:

- InitializerInterceptor: device -> None, resets app/device state before stepping
- DecisionInterceptor: DecisionInput -> DecisionOutput, wraps the decision provider
- ExecuteCommandsInterceptor: ExecuteCommandsInput -> ExecuteCommandsOutput,
  wraps applying the chosen commands to the device
- StepInterceptor: StepInput -> StepResult, wraps one full step

Every interceptor receives the input and a Chain. Awaiting
``chain.proceed(input)`` runs the rest of the chain; not calling it
short-circuits everything registered before this interceptor, including
the built-in operation.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from uipilot.core.domain.commands import CommandType
from uipilot.core.domain.models import ContextHistory, DeviceFormFactor
from uipilot.core.interfaces.decision import (
    DecisionInput,
    DecisionOutput,
    DecisionProviderProtocol,
)
from uipilot.core.interfaces.device import DeviceProtocol

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class Chain(Generic[InputT, OutputT]):
    """Continuation handed to an interceptor: the rest of the chain."""

    def __init__(self, proceed: Callable[[InputT], Awaitable[OutputT]]):
        self._proceed = proceed

    async def proceed(self, value: InputT) -> OutputT:
        return await self._proceed(value)


class StepResult(str, Enum):
    """Outcome of one step."""

    GOAL_ACHIEVED = "goal_achieved"
    CONTINUE = "continue"


@dataclass
class ExecuteCommandsInput:
    decision_output: DecisionOutput
    context_history: ContextHistory
    screenshot_file_name: str | None
    device: DeviceProtocol


@dataclass
class ExecuteCommandsOutput:
    pass


@dataclass
class StepInput:
    """
    Input of one step.

    The decision and execute-commands chains are carried along so that a
    step interceptor can substitute the whole step while the built-in step
    still goes through the configured chains.
    """

    context_history: ContextHistory
    command_types: list[CommandType]
    device: DeviceProtocol
    device_form_factor: DeviceFormFactor
    decision_provider: DecisionProviderProtocol
    decision_chain: Callable[[DecisionInput], Awaitable[DecisionOutput]]
    execute_commands_chain: Callable[
        [ExecuteCommandsInput], Awaitable[ExecuteCommandsOutput]
    ]


class Interceptor(ABC):
    """Marker base class for every interceptor kind."""


class InitializerInterceptor(Interceptor):
    @abstractmethod
    async def intercept(
        self, device: DeviceProtocol, chain: Chain[DeviceProtocol, None]
    ) -> None:
        ...


class DecisionInterceptor(Interceptor):
    @abstractmethod
    async def intercept(
        self,
        decision_input: DecisionInput,
        chain: Chain[DecisionInput, DecisionOutput],
    ) -> DecisionOutput:
        ...


class ExecuteCommandsInterceptor(Interceptor):
    @abstractmethod
    async def intercept(
        self,
        execute_commands_input: ExecuteCommandsInput,
        chain: Chain[ExecuteCommandsInput, ExecuteCommandsOutput],
    ) -> ExecuteCommandsOutput:
        ...


class StepInterceptor(Interceptor):
    @abstractmethod
    async def intercept(
        self, step_input: StepInput, chain: Chain[StepInput, StepResult]
    ) -> StepResult:
        ...
