"""
Agent - Goal-Directed Exploration Loop

An Agent drives one device towards one natural-language goal:

1. Create a fresh ContextHistory for the goal and run the initializer chain
2. Loop up to ``max_step`` times while the goal is not achieved:
   screenshot -> decide -> act, recorded as steps in the ContextHistory
3. Stop when the decision provider answers with only GoalAchieved, when the
   step budget is exhausted, when cancelled, or when an unexpected error
   ends the run

Every externally visible operation goes through an interception chain
(initializer, decision, execute-commands, step) built once from the
interceptors in the AgentConfig.

Published state:
- running: True while a step loop is active
- archived: True as soon as the current ContextHistory holds a GoalAchieved step
- latest_context: ContextHistory of the most recent attempt
"""

import asyncio
import time
from dataclasses import dataclass, field, replace

import structlog

from uipilot.core.domain.chain import build_chain, interceptors_of_type
from uipilot.core.domain.commands import (
    BackPress,
    CommandType,
    GoalAchieved,
    default_command_types,
    default_command_types_for_tv,
)
from uipilot.core.domain.errors import ConfigurationError, DeviceAutomationError
from uipilot.core.domain.models import ContextHistory, DeviceFormFactor, Step
from uipilot.core.domain.state import StateValue
from uipilot.core.interfaces.decision import (
    DecisionInput,
    DecisionOutput,
    DecisionProviderProtocol,
)
from uipilot.core.interfaces.device import DeviceProtocol
from uipilot.core.interfaces.interceptors import (
    DecisionInterceptor,
    ExecuteCommandsInput,
    ExecuteCommandsInterceptor,
    ExecuteCommandsOutput,
    InitializerInterceptor,
    Interceptor,
    StepInput,
    StepInterceptor,
    StepResult,
)

logger = structlog.get_logger()

INITIALIZE_BACK_PRESS_COUNT = 10


@dataclass(frozen=True)
class AgentConfig:
    """
    Capabilities and policy for one agent.

    Attributes:
        decision_provider: Chooses the next commands
        device: Device driver the agent acts on
        device_form_factor: Interaction model of the device
        interceptors: Interceptors in registration order
    """

    decision_provider: DecisionProviderProtocol
    device: DeviceProtocol
    device_form_factor: DeviceFormFactor = DeviceFormFactor.MOBILE
    interceptors: tuple[Interceptor, ...] = field(default_factory=tuple)

    def to_builder(self) -> "AgentConfigBuilder":
        """Start a new builder pre-filled with this configuration."""
        builder = AgentConfigBuilder()
        for interceptor in self.interceptors:
            builder.add_interceptor(interceptor)
        builder.device(self.device)
        builder.decision_provider(self.decision_provider)
        builder.device_form_factor(self.device_form_factor)
        return builder


class AgentConfigBuilder:
    """Collects AgentConfig parts; ``build()`` freezes them."""

    def __init__(self) -> None:
        self._interceptors: list[Interceptor] = []
        self._device: DeviceProtocol | None = None
        self._decision_provider: DecisionProviderProtocol | None = None
        self._device_form_factor = DeviceFormFactor.MOBILE

    def add_interceptor(self, interceptor: Interceptor) -> "AgentConfigBuilder":
        self._interceptors.append(interceptor)
        return self

    def device(self, device: DeviceProtocol) -> "AgentConfigBuilder":
        self._device = device
        return self

    def decision_provider(
        self, decision_provider: DecisionProviderProtocol
    ) -> "AgentConfigBuilder":
        self._decision_provider = decision_provider
        return self

    def device_form_factor(
        self, device_form_factor: DeviceFormFactor
    ) -> "AgentConfigBuilder":
        self._device_form_factor = device_form_factor
        return self

    def build(self) -> AgentConfig:
        if self._device is None:
            raise ConfigurationError("AgentConfig requires a device")
        if self._decision_provider is None:
            raise ConfigurationError("AgentConfig requires a decision provider")
        return AgentConfig(
            decision_provider=self._decision_provider,
            device=self._device,
            device_form_factor=self._device_form_factor,
            interceptors=tuple(self._interceptors),
        )


def command_types_for(device_form_factor: DeviceFormFactor) -> list[CommandType]:
    """Default vocabulary for a form factor."""
    if device_form_factor.is_tv():
        return default_command_types_for_tv()
    return default_command_types()


class Agent:
    """
    Runs the bounded step loop for one goal at a time.

    The scheduling context is explicit: ``step_interval`` is the pause
    between steps that did not reach the goal (0 in tests).
    """

    def __init__(self, agent_config: AgentConfig, step_interval: float = 1.0):
        self.config = agent_config
        self.device = agent_config.device
        self.decision_provider = agent_config.decision_provider
        self.device_form_factor = agent_config.device_form_factor
        self.step_interval = step_interval
        self.logger = logger.bind(component="agent")

        interceptors = agent_config.interceptors
        self._initializer_chain = build_chain(
            interceptors_of_type(interceptors, InitializerInterceptor),
            self._initialize,
        )
        self._decision_chain = build_chain(
            interceptors_of_type(interceptors, DecisionInterceptor),
            self.decision_provider.decide,
        )
        self._execute_commands_chain = build_chain(
            interceptors_of_type(interceptors, ExecuteCommandsInterceptor),
            self._execute_commands,
        )
        self._step_chain = build_chain(
            interceptors_of_type(interceptors, StepInterceptor),
            self._step,
        )

        self.running: StateValue[bool] = StateValue(False)
        self.archived: StateValue[bool] = StateValue(False)
        self.latest_context: StateValue[ContextHistory | None] = StateValue(None)
        self._context_histories: list[ContextHistory] = []
        self._detach_context = None

        self._task: asyncio.Task | None = None
        self._job: asyncio.Task | None = None
        self._cancel_requested = False

    @property
    def context_histories(self) -> list[ContextHistory]:
        """Every ContextHistory created by this agent, oldest first."""
        return list(self._context_histories)

    @property
    def is_running(self) -> bool:
        return self.running.value

    @property
    def is_archived(self) -> bool:
        return self.archived.value

    async def wait_until_finished(self) -> None:
        """Suspend until the agent is no longer running."""
        await self.running.wait_for(lambda running: not running)

    def execute_async(
        self,
        goal: str,
        max_step: int = 10,
        max_retry: int = 1,
        command_types: list[CommandType] | None = None,
    ) -> asyncio.Task:
        """
        Run ``goal`` in the background with goal-level retries.

        Any previous background run of this agent is cancelled first. Each
        retry starts over with a new ContextHistory.

        Returns:
            The scheduled asyncio.Task.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
        # running holds from scheduling until the task ends.
        self.running.value = True
        task = asyncio.get_running_loop().create_task(
            self._execute_with_retry(goal, max_step, max_retry, command_types)
        )
        task.add_done_callback(self._on_task_done)
        self._task = task
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        if self._task is task and self._job is None:
            self.running.value = False

    async def _execute_with_retry(
        self,
        goal: str,
        max_step: int,
        max_retry: int,
        command_types: list[CommandType] | None,
    ) -> None:
        for attempt in range(max_retry + 1):
            self.logger.debug("agent.attempt.start", goal=goal, attempt=attempt)
            await self.execute(goal, max_step, command_types)
            if self.archived.value or self._cancel_requested:
                break

    async def execute(
        self,
        goal: str,
        max_step: int = 10,
        command_types: list[CommandType] | None = None,
    ) -> None:
        """
        Run one attempt at ``goal`` and return when it ends.

        Never raises for failures inside the loop; they end the run with
        ``running`` False and ``archived`` unchanged. Cancellation through
        ``cancel()`` also returns normally.
        """
        if command_types is None:
            command_types = command_types_for(self.device_form_factor)

        self._cancel_requested = False
        self.running.value = True
        job = asyncio.get_running_loop().create_task(
            self._run(goal, max_step, command_types)
        )
        self._job = job
        try:
            await job
        except asyncio.CancelledError:
            # Only swallow cancellation requested through cancel(); a
            # cancelled caller must still see CancelledError.
            current = asyncio.current_task()
            if not self._cancel_requested or (current and current.cancelling()):
                raise
            self.logger.info("agent.execute.cancelled", goal=goal)
        finally:
            if self._job is job:
                self._job = None
                self.running.value = False

    async def _run(
        self, goal: str, max_step: int, command_types: list[CommandType]
    ) -> None:
        self.logger.info("agent.execute.start", goal=goal, max_step=max_step)
        try:
            context_history = ContextHistory(goal)
            self._attach_context(context_history)

            await self._initializer_chain(self.device)

            remaining = max_step
            while remaining > 0 and not self.archived.value:
                remaining -= 1
                step_input = StepInput(
                    context_history=context_history,
                    command_types=command_types,
                    device=self.device,
                    device_form_factor=self.device_form_factor,
                    decision_provider=self.decision_provider,
                    decision_chain=self._decision_chain,
                    execute_commands_chain=self._execute_commands_chain,
                )
                result = await self._step_chain(step_input)
                if result is StepResult.GOAL_ACHIEVED:
                    self.logger.info("agent.goal_achieved", goal=goal)
                    break
                await asyncio.sleep(self.step_interval)
        except Exception as e:
            self.logger.error(
                "agent.execute.failed",
                goal=goal,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
        finally:
            self.logger.info(
                "agent.execute.end", goal=goal, archived=self.archived.value
            )

    def _attach_context(self, context_history: ContextHistory) -> None:
        if self._detach_context is not None:
            self._detach_context()
        self._context_histories.append(context_history)
        self.archived.value = context_history.is_goal_achieved()
        self._detach_context = context_history.add_listener(self._on_steps_changed)
        self.latest_context.value = context_history

    def _on_steps_changed(self, steps: list[Step]) -> None:
        self.archived.value = any(step.is_goal_achieved() for step in steps)

    def cancel(self) -> None:
        """Cancel the in-flight run, if any. Recorded steps are kept."""
        if self._job is not None and not self._job.done():
            self._cancel_requested = True
            self._job.cancel()
        if self._task is not None and not self._task.done():
            self._cancel_requested = True
            self._task.cancel()
        self.running.value = False

    async def _initialize(self, device: DeviceProtocol) -> None:
        """Default initializer: back out of whatever screen is open."""
        for _ in range(INITIALIZE_BACK_PRESS_COUNT):
            try:
                await device.execute_commands([BackPress()])
            except Exception as e:
                self.logger.warning("agent.initialize.back_press_failed", error=str(e))

    async def _step(self, step_input: StepInput) -> StepResult:
        context_history = step_input.context_history
        device = step_input.device
        screenshot_file_name: str | None = str(int(time.time() * 1000))
        try:
            screenshot_file_name = await device.capture_screenshot(
                screenshot_file_name
            )
        except Exception as e:
            self.logger.warning(
                "agent.step.screenshot_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            screenshot_file_name = None

        self.logger.debug("agent.step.context", prompt=context_history.prompt())
        focused_tree = None
        if step_input.device_form_factor.requires_focus_tree():
            focused_tree = await device.dump_focused_view_hierarchy()
        decision_input = DecisionInput(
            context_history=context_history,
            dump_hierarchy=await device.dump_view_hierarchy(),
            focused_tree=focused_tree,
            command_types=step_input.command_types,
            screenshot_file_name=screenshot_file_name,
        )
        decision_output: DecisionOutput = await step_input.decision_chain(decision_input)
        commands = decision_output.commands
        goal_achieved = len(commands) == 1 and isinstance(commands[0], GoalAchieved)

        # The recorded step always carries the issued command; archived is
        # derived from it.
        step = decision_output.step
        if commands and (step.command is None or goal_achieved):
            step = replace(step, command=commands[0])
        context_history.add_step(step)

        if goal_achieved:
            return StepResult.GOAL_ACHIEVED

        await step_input.execute_commands_chain(
            ExecuteCommandsInput(
                decision_output=decision_output,
                context_history=context_history,
                screenshot_file_name=screenshot_file_name,
                device=device,
            )
        )
        return StepResult.CONTINUE

    async def _execute_commands(
        self, execute_commands_input: ExecuteCommandsInput
    ) -> ExecuteCommandsOutput:
        context_history = execute_commands_input.context_history
        device = execute_commands_input.device
        for command in execute_commands_input.decision_output.commands:
            if isinstance(command, GoalAchieved):
                continue
            try:
                await device.execute_commands([command])
            except DeviceAutomationError as e:
                self.logger.warning(
                    "agent.command.failed", command=command.describe(), error=str(e)
                )
                context_history.add_step(
                    Step(
                        memo=f"Failed to perform action: {e}. Please try other actions.",
                        screenshot_file_name=execute_commands_input.screenshot_file_name,
                        failure=True,
                    )
                )
        return ExecuteCommandsOutput()

    def __repr__(self) -> str:
        return (
            f"Agent(running={self.running.value}, archived={self.archived.value}, "
            f"attempts={len(self._context_histories)})"
        )
