"""
Application Layer - Scenario Factory

Wires scenario definitions to core domain objects:
- Builds AgentConfig presets from a definition's form factor, initialize
  method and cleanup option
- Turns a resolved dependency chain into a Scenario (ancestors first)
- Creates ScenarioExecutors using the configured scheduling settings
"""

import structlog

from uipilot.application.interceptors import (
    CleanupDataInitializer,
    LaunchAppInitializer,
    NoopInitializer,
    StepTimingInterceptor,
)
from uipilot.application.schemas import (
    BackInitializeMethod,
    CleanupAppData,
    CleanupData,
    InitializeMethod,
    NoopCleanupData,
    NoopInitializeMethod,
    OpenAppInitializeMethod,
    ScenarioDefinition,
)
from uipilot.config.settings import UiPilotSettings
from uipilot.core.domain.agent import AgentConfigBuilder
from uipilot.core.domain.models import DeviceFormFactor
from uipilot.core.domain.scenario_executor import AgentTask, Scenario, ScenarioExecutor
from uipilot.core.interfaces.decision import DecisionProviderProtocol
from uipilot.core.interfaces.device import DeviceProtocol

logger = structlog.get_logger()


def agent_config_builder(
    device_form_factor: DeviceFormFactor,
    initialize_method: InitializeMethod,
    cleanup_data: CleanupData,
) -> AgentConfigBuilder:
    """
    Start an AgentConfig for one scenario definition.

    The cleanup interceptor is registered last so it runs first: app data
    is cleared before the initialize method takes effect.
    """
    builder = AgentConfigBuilder().device_form_factor(device_form_factor)

    if isinstance(initialize_method, NoopInitializeMethod):
        builder.add_interceptor(NoopInitializer())
    elif isinstance(initialize_method, OpenAppInitializeMethod):
        builder.add_interceptor(LaunchAppInitializer(initialize_method.package_name))
    elif not isinstance(initialize_method, BackInitializeMethod):
        raise ValueError(f"Unknown initialize method: {initialize_method!r}")

    if isinstance(cleanup_data, CleanupAppData):
        builder.add_interceptor(CleanupDataInitializer(cleanup_data.package_name))
    elif not isinstance(cleanup_data, NoopCleanupData):
        raise ValueError(f"Unknown cleanup option: {cleanup_data!r}")

    return builder


class ScenarioFactory:
    """
    Creates scenarios and executors for one device and decision provider.

    Every task of every scenario shares the same device and decision
    provider; the form factor and initialization come from each task's own
    definition.
    """

    def __init__(
        self,
        device: DeviceProtocol,
        decision_provider: DecisionProviderProtocol,
        settings: UiPilotSettings | None = None,
    ):
        self.device = device
        self.decision_provider = decision_provider
        self.settings = settings or UiPilotSettings()
        self.logger = logger.bind(component="scenario_factory")

    def create_task(self, definition: ScenarioDefinition) -> AgentTask:
        builder = agent_config_builder(
            definition.device_form_factor,
            definition.initialize_method,
            definition.cleanup_data,
        )
        builder.add_interceptor(StepTimingInterceptor())
        agent_config = (
            builder.device(self.device)
            .decision_provider(self.decision_provider)
            .build()
        )
        return AgentTask(goal=definition.goal, agent_config=agent_config)

    def create_scenario(self, chain: list[ScenarioDefinition]) -> Scenario:
        """
        Build a Scenario from a resolved chain (ancestors first).

        Retry and step budgets come from the last definition, the scenario
        the chain was resolved for.
        """
        if not chain:
            raise ValueError("Cannot create a scenario from an empty chain")
        target = chain[-1]
        max_retry = (
            target.max_retry
            if target.max_retry is not None
            else self.settings.default_max_retry
        )
        max_step = (
            target.max_step
            if target.max_step is not None
            else self.settings.default_max_step
        )
        self.logger.debug(
            "scenario.created",
            scenario_id=target.id,
            chain=[definition.id for definition in chain],
            max_retry=max_retry,
            max_step=max_step,
        )
        return Scenario(
            tasks=tuple(self.create_task(definition) for definition in chain),
            max_retry=max_retry,
            max_step_count=max_step,
        )

    def create_executor(self) -> ScenarioExecutor:
        return ScenarioExecutor(
            step_interval=self.settings.step_interval,
            finish_debounce=self.settings.finish_debounce,
        )
