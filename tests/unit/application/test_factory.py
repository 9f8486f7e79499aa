"""
Unit tests for the scenario factory and agent config presets.
"""

import pytest

from tests.fakes import FakeDecisionProvider, FakeDevice
from uipilot.application.factory import ScenarioFactory, agent_config_builder
from uipilot.application.interceptors import (
    CleanupDataInitializer,
    LaunchAppInitializer,
    NoopInitializer,
    StepTimingInterceptor,
)
from uipilot.application.schemas import (
    BackInitializeMethod,
    CleanupAppData,
    NoopCleanupData,
    NoopInitializeMethod,
    OpenAppInitializeMethod,
    ScenarioDefinition,
)
from uipilot.config.settings import UiPilotSettings
from uipilot.core.domain.agent import Agent
from uipilot.core.domain.commands import BackPress, ClearState, LaunchApp
from uipilot.core.domain.models import DeviceFormFactor


def build_agent(device, initialize_method, cleanup_data=None) -> Agent:
    config = (
        agent_config_builder(
            DeviceFormFactor.MOBILE, initialize_method, cleanup_data or NoopCleanupData()
        )
        .device(device)
        .decision_provider(FakeDecisionProvider())
        .build()
    )
    return Agent(config, step_interval=0)


class TestAgentConfigPresets:
    @pytest.mark.asyncio
    async def test_back_presses_back(self):
        device = FakeDevice()
        await build_agent(device, BackInitializeMethod()).execute("goal")
        assert device.executed == [BackPress()] * 10

    @pytest.mark.asyncio
    async def test_noop_leaves_device_alone(self):
        device = FakeDevice()
        await build_agent(device, NoopInitializeMethod()).execute("goal")
        assert device.executed == []

    @pytest.mark.asyncio
    async def test_open_app_launches_app(self):
        device = FakeDevice()
        await build_agent(
            device, OpenAppInitializeMethod(package_name="com.example")
        ).execute("goal")
        assert device.executed == [LaunchApp(app_id="com.example")]

    @pytest.mark.asyncio
    async def test_cleanup_runs_before_launch(self):
        device = FakeDevice()
        await build_agent(
            device,
            OpenAppInitializeMethod(package_name="com.example"),
            CleanupAppData(package_name="com.example"),
        ).execute("goal")
        assert device.executed == [
            ClearState(app_id="com.example"),
            LaunchApp(app_id="com.example"),
        ]

    @pytest.mark.asyncio
    async def test_cleanup_then_back(self):
        device = FakeDevice()
        await build_agent(
            device, BackInitializeMethod(), CleanupAppData(package_name="com.example")
        ).execute("goal")
        assert device.executed == [ClearState(app_id="com.example")] + [BackPress()] * 10

    def test_interceptor_registration(self):
        builder = agent_config_builder(
            DeviceFormFactor.TV,
            OpenAppInitializeMethod(package_name="com.example"),
            CleanupAppData(package_name="com.example"),
        )
        config = builder.device(FakeDevice()).decision_provider(FakeDecisionProvider()).build()

        assert config.device_form_factor is DeviceFormFactor.TV
        assert [type(i) for i in config.interceptors] == [
            LaunchAppInitializer,
            CleanupDataInitializer,
        ]

    def test_unknown_initialize_method(self):
        with pytest.raises(ValueError, match="Unknown initialize method"):
            agent_config_builder(DeviceFormFactor.MOBILE, object(), NoopCleanupData())

    def test_unknown_cleanup_option(self):
        with pytest.raises(ValueError, match="Unknown cleanup option"):
            agent_config_builder(DeviceFormFactor.MOBILE, NoopInitializeMethod(), object())


class TestScenarioFactory:
    def test_create_task(self):
        device = FakeDevice()
        provider = FakeDecisionProvider()
        factory = ScenarioFactory(device, provider)

        task = factory.create_task(
            ScenarioDefinition(
                id="a",
                goal="Open settings",
                initialize_method=NoopInitializeMethod(),
                device_form_factor=DeviceFormFactor.TV,
            )
        )

        assert task.goal == "Open settings"
        assert task.agent_config.device is device
        assert task.agent_config.decision_provider is provider
        assert task.agent_config.device_form_factor is DeviceFormFactor.TV
        assert [type(i) for i in task.agent_config.interceptors] == [
            NoopInitializer,
            StepTimingInterceptor,
        ]

    def test_create_scenario_uses_target_budgets(self):
        factory = ScenarioFactory(FakeDevice(), FakeDecisionProvider())
        chain = [
            ScenarioDefinition(id="a", goal="first", max_retry=5, max_step=50),
            ScenarioDefinition(id="b", goal="second", dependency="a", max_retry=2, max_step=3),
        ]

        scenario = factory.create_scenario(chain)

        assert [task.goal for task in scenario.tasks] == ["first", "second"]
        assert scenario.max_retry == 2
        assert scenario.max_step_count == 3

    def test_create_scenario_falls_back_to_settings(self):
        settings = UiPilotSettings(default_max_retry=4, default_max_step=7)
        factory = ScenarioFactory(FakeDevice(), FakeDecisionProvider(), settings)

        scenario = factory.create_scenario([ScenarioDefinition(id="a", goal="g")])

        assert scenario.max_retry == 4
        assert scenario.max_step_count == 7

    def test_create_scenario_rejects_empty_chain(self):
        factory = ScenarioFactory(FakeDevice(), FakeDecisionProvider())
        with pytest.raises(ValueError, match="empty chain"):
            factory.create_scenario([])

    def test_create_executor_uses_settings(self):
        settings = UiPilotSettings(step_interval=0.5, finish_debounce=0.2)
        executor = ScenarioFactory(FakeDevice(), FakeDecisionProvider(), settings).create_executor()

        assert executor.step_interval == 0.5
        assert executor.finish_debounce == 0.2
