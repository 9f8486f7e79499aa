"""
Unit tests for interception chain composition.

For interceptors [A, B] around terminal T the entry order must be B, A, T
and the exit order T, A, B, for every interceptor kind.
"""

import pytest

from tests.conftest import make_config
from tests.fakes import FakeDecisionProvider, FakeDevice
from uipilot.core.domain.agent import Agent
from uipilot.core.domain.chain import build_chain, interceptors_of_type
from uipilot.core.domain.commands import GoalAchieved, Scroll
from uipilot.core.domain.models import Step
from uipilot.core.domain.scenario_executor import AgentTask, Scenario, ScenarioExecutor
from uipilot.core.interfaces.decision import DecisionOutput
from uipilot.core.interfaces.interceptors import (
    DecisionInterceptor,
    ExecuteCommandsInterceptor,
    InitializerInterceptor,
    StepInterceptor,
    StepResult,
)


class _Recording:
    def __init__(self, name, log):
        self.name = name
        self.log = log

    async def intercept(self, value, chain):
        self.log.append(f"enter {self.name}")
        result = await chain.proceed(value)
        self.log.append(f"exit {self.name}")
        return result


class RecordingInitializer(_Recording, InitializerInterceptor):
    pass


class RecordingDecision(_Recording, DecisionInterceptor):
    pass


class RecordingExecuteCommands(_Recording, ExecuteCommandsInterceptor):
    pass


class RecordingStep(_Recording, StepInterceptor):
    pass


class NumberInitializer(InitializerInterceptor):
    def __init__(self, number, log):
        self.number = number
        self.log = log

    async def intercept(self, device, chain):
        self.log.append(self.number)
        await chain.proceed(device)


class TestBuildChain:
    @pytest.mark.asyncio
    async def test_without_interceptors_runs_terminal(self):
        async def terminal(value):
            return value * 2

        chain = build_chain([], terminal)
        assert await chain(21) == 42

    @pytest.mark.asyncio
    async def test_last_registered_is_outermost(self):
        log = []

        async def terminal(value):
            log.append("T")
            return value

        chain = build_chain(
            [RecordingStep("A", log), RecordingStep("B", log)], terminal
        )
        assert await chain("input") == "input"
        assert log == ["enter B", "enter A", "T", "exit A", "exit B"]

    @pytest.mark.asyncio
    async def test_interceptor_not_proceeding_short_circuits(self):
        log = []

        class Stop(StepInterceptor):
            async def intercept(self, step_input, chain):
                log.append("stop")
                return StepResult.CONTINUE

        async def terminal(value):
            log.append("T")
            return StepResult.GOAL_ACHIEVED

        chain = build_chain([RecordingStep("A", log), Stop()], terminal)
        assert await chain(None) is StepResult.CONTINUE
        assert log == ["stop"]

    def test_interceptors_of_type_keeps_order(self):
        log = []
        first = RecordingStep("first", log)
        decision = RecordingDecision("decision", log)
        second = RecordingStep("second", log)

        selected = interceptors_of_type([first, decision, second], StepInterceptor)

        assert selected == [first, second]


class TestAgentChains:
    @pytest.mark.asyncio
    async def test_every_chain_kind_folds_in_registration_order(self):
        log = []
        device = FakeDevice()
        provider = FakeDecisionProvider(script=[[Scroll()]])

        class LoggingDevice(FakeDevice):
            async def execute_commands(self, commands):
                log.append("T execute")
                await device.execute_commands(commands)

        config = make_config(
            LoggingDevice(),
            provider,
            RecordingInitializer("initA", log),
            RecordingInitializer("initB", log),
            RecordingDecision("decA", log),
            RecordingDecision("decB", log),
            RecordingExecuteCommands("exeA", log),
            RecordingExecuteCommands("exeB", log),
            RecordingStep("stepA", log),
            RecordingStep("stepB", log),
        )
        agent = Agent(config, step_interval=0)

        await agent.execute("Open settings", max_step=1)

        initializer_log = log[: log.index("exit initB") + 1]
        assert initializer_log[:2] == ["enter initB", "enter initA"]
        assert initializer_log[-2:] == ["exit initA", "exit initB"]
        # default initializer presses back at the core of the chain
        assert initializer_log[2:-2] == ["T execute"] * 10

        step_log = log[len(initializer_log):]
        assert step_log == [
            "enter stepB",
            "enter stepA",
            "enter decB",
            "enter decA",
            "exit decA",
            "exit decB",
            "enter exeB",
            "enter exeA",
            "T execute",
            "exit exeA",
            "exit exeB",
            "exit stepA",
            "exit stepB",
        ]

    @pytest.mark.asyncio
    async def test_decision_interceptor_can_replace_provider(self):
        provider = FakeDecisionProvider(default=[Scroll()])

        class Canned(DecisionInterceptor):
            async def intercept(self, decision_input, chain):
                return DecisionOutput(
                    commands=[GoalAchieved()],
                    step=Step(memo="canned", command=GoalAchieved()),
                )

        agent = Agent(make_config(FakeDevice(), provider, Canned()), step_interval=0)
        await agent.execute("Open settings")

        assert provider.inputs == []
        assert agent.is_archived
        assert [s.memo for s in agent.latest_context.value.steps] == ["canned"]

    @pytest.mark.asyncio
    async def test_step_interceptor_can_skip_the_step(self):
        provider = FakeDecisionProvider()

        class Skip(StepInterceptor):
            async def intercept(self, step_input, chain):
                return StepResult.GOAL_ACHIEVED

        agent = Agent(make_config(FakeDevice(), provider, Skip()), step_interval=0)
        await agent.execute("Open settings")

        assert provider.inputs == []
        assert len(agent.latest_context.value) == 0
        assert not agent.is_archived
        assert not agent.is_running

    @pytest.mark.asyncio
    async def test_initializers_run_in_order_for_every_agent(self):
        log = []
        device = FakeDevice()
        provider = FakeDecisionProvider()
        config = make_config(
            device,
            provider,
            NumberInitializer(400, log),
            NumberInitializer(300, log),
            NumberInitializer(200, log),
            NumberInitializer(100, log),
        )
        executor = ScenarioExecutor(step_interval=0, finish_debounce=0)
        scenario = Scenario(
            tasks=(AgentTask("first", config), AgentTask("second", config))
        )

        assert await executor.execute(scenario)
        assert log == [100, 200, 300, 400, 100, 200, 300, 400]
