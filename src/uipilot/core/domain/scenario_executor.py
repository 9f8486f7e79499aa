"""
Scenario Executor

Runs an ordered list of agent tasks as one scenario with scenario-level
retries. Each attempt:

1. Cancels and discards the agents of the previous attempt
2. Creates one fresh Agent per task and publishes the (task, agent) list
3. Runs the tasks strictly one after another; a task whose agent does not
   reach its goal stops the attempt, since later tasks depend on it
4. Marks the scenario successful once every agent is archived

Attempts always restart from the first task. Aggregate observables
(all_archived, any_running) are folded over the current agent generation
whenever the generation or any agent flag changes.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from uipilot.core.domain.agent import Agent, AgentConfig
from uipilot.core.domain.models import RunningInfo, ScenarioExecutorState
from uipilot.core.domain.state import StateValue

logger = structlog.get_logger()


@dataclass(frozen=True)
class AgentTask:
    """One goal to run with one agent configuration."""

    goal: str
    agent_config: AgentConfig


@dataclass(frozen=True)
class Scenario:
    """
    Resolved, dependency-ordered run plan.

    Attributes:
        tasks: Tasks in execution order, prerequisites first
        max_retry: Additional attempts after the first one fails
        max_step_count: Step budget for every agent in the scenario
    """

    tasks: tuple[AgentTask, ...]
    max_retry: int = 0
    max_step_count: int = 10

    def __post_init__(self) -> None:
        if self.max_retry < 0:
            raise ValueError("max_retry must not be negative")
        if self.max_step_count < 1:
            raise ValueError("max_step_count must be at least 1")

    @property
    def goal(self) -> str | None:
        """Goal of the last task, i.e. what the scenario is about."""
        return self.tasks[-1].goal if self.tasks else None


TaskToAgents = tuple[tuple[AgentTask, Agent], ...]


class ScenarioExecutor:
    """
    Sequences agent tasks with retries and publishes aggregate state.

    Published state:
        task_to_agents: Current (task, agent) generation
        running_info: Progress snapshot, None while idle
        all_archived: Every current agent reached its goal
        any_running: At least one current agent is running
        state: Idle / Running / Success / Failed
    """

    def __init__(
        self,
        step_interval: float = 1.0,
        finish_debounce: float = 0.1,
        agent_factory: Callable[[AgentConfig], Agent] | None = None,
    ):
        self.step_interval = step_interval
        self.finish_debounce = finish_debounce
        self._agent_factory = agent_factory or self._create_agent
        self.logger = logger.bind(component="scenario_executor")

        self.task_to_agents: StateValue[TaskToAgents] = StateValue(())
        self.running_info: StateValue[RunningInfo | None] = StateValue(None)
        self.all_archived: StateValue[bool] = StateValue(False)
        self.any_running: StateValue[bool] = StateValue(False)
        self.state: StateValue[ScenarioExecutorState] = StateValue(
            ScenarioExecutorState.IDLE
        )

        self._listener_removers: list[Callable[[], None]] = []
        self._task: asyncio.Task | None = None
        self._cancel_requested = False
        self._run_token: object | None = None

    def _create_agent(self, agent_config: AgentConfig) -> Agent:
        return Agent(agent_config, step_interval=self.step_interval)

    @property
    def agents(self) -> list[Agent]:
        return [agent for _, agent in self.task_to_agents.value]

    def is_success(self) -> bool:
        return self.state.value is ScenarioExecutorState.SUCCESS

    def execute_async(self, scenario: Scenario) -> asyncio.Task:
        """Run ``scenario`` in the background, cancelling any previous run."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self.execute(scenario))
        return self._task

    async def execute(self, scenario: Scenario) -> bool:
        """
        Run ``scenario`` to completion.

        Returns:
            True if every task reached its goal within the retry budget.
        """
        self.logger.info(
            "scenario.execute.start",
            tasks=len(scenario.tasks),
            max_retry=scenario.max_retry,
            goal=scenario.goal,
        )
        self._cancel_requested = False
        run_token = object()
        self._run_token = run_token
        self.state.value = ScenarioExecutorState.RUNNING
        finished_successfully = False
        try:
            for attempt in range(scenario.max_retry + 1):
                if self._cancel_requested:
                    break
                self._cancel_agents()
                task_to_agents = tuple(
                    (task, self._agent_factory(task.agent_config))
                    for task in scenario.tasks
                )
                self._publish(task_to_agents)
                self.logger.info("scenario.attempt.start", attempt=attempt)

                for index, (task, agent) in enumerate(task_to_agents):
                    self.running_info.value = RunningInfo(
                        all_tasks=len(task_to_agents),
                        running_tasks=index + 1,
                        retried_tasks=attempt,
                        max_retry=scenario.max_retry,
                    )
                    if self._cancel_requested:
                        break
                    await agent.execute(task.goal, scenario.max_step_count)
                    if not agent.archived.value:
                        self.logger.info(
                            "scenario.attempt.stopped",
                            attempt=attempt,
                            task_index=index,
                            goal=task.goal,
                        )
                        break
                    if index == len(task_to_agents) - 1:
                        self.logger.info("scenario.all_agents_archived", attempt=attempt)
                        finished_successfully = True
                    await asyncio.sleep(0)

                if finished_successfully or self._cancel_requested:
                    break
        except asyncio.CancelledError:
            # A superseding run owns the published state from here on.
            if self._run_token is run_token:
                self.state.value = ScenarioExecutorState.IDLE
            raise
        finally:
            if self._run_token is run_token:
                self.running_info.value = None

        if self._cancel_requested:
            finished_successfully = False
            self.state.value = ScenarioExecutorState.IDLE
        elif finished_successfully:
            self.state.value = ScenarioExecutorState.SUCCESS
        else:
            self.state.value = ScenarioExecutorState.FAILED
        self.logger.info(
            "scenario.execute.end",
            success=finished_successfully,
            state=self.state.value.value,
        )
        return finished_successfully

    def cancel(self) -> None:
        """Cancel the in-flight run and every published agent."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if self.state.value is ScenarioExecutorState.RUNNING:
            self._cancel_requested = True
        self._cancel_agents()

    async def wait_until_finished(self) -> None:
        """
        Suspend until no agent is running.

        The idle condition has to hold for ``finish_debounce`` seconds so
        that the gap between two attempts is not taken as the end.
        """
        while True:
            await self.any_running.wait_for(lambda running: not running)
            try:
                await asyncio.wait_for(
                    self.any_running.wait_for_change(), timeout=self.finish_debounce
                )
            except asyncio.TimeoutError:
                return

    def _cancel_agents(self) -> None:
        for _, agent in self.task_to_agents.value:
            agent.cancel()

    def _publish(self, task_to_agents: TaskToAgents) -> None:
        for remove in self._listener_removers:
            remove()
        self._listener_removers = []
        self.task_to_agents.value = task_to_agents
        for _, agent in task_to_agents:
            self._listener_removers.append(
                agent.running.add_listener(lambda _value: self._recompute())
            )
            self._listener_removers.append(
                agent.archived.add_listener(lambda _value: self._recompute())
            )
        self._recompute()

    def _recompute(self) -> None:
        agents = self.agents
        self.all_archived.value = bool(agents) and all(
            agent.archived.value for agent in agents
        )
        self.any_running.value = any(agent.running.value for agent in agents)
