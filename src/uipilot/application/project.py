"""
Application Layer - Project Runner

A Project assigns one ScenarioExecutor to every scenario of a project
definition and runs them in dependency order. Both the CLI and tests use
this service to run whole projects.

Dependency cycles are detected while the project is assembled, so no agent
ever starts for a project with a cycle.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog

from uipilot.application.factory import ScenarioFactory
from uipilot.application.resolver import ScenarioDependencyResolver
from uipilot.application.schemas import ProjectDefinition, ScenarioDefinition
from uipilot.config.settings import UiPilotSettings
from uipilot.core.domain.models import ScenarioExecutorState
from uipilot.core.domain.scenario_executor import Scenario, ScenarioExecutor
from uipilot.core.interfaces.decision import DecisionProviderProtocol
from uipilot.core.interfaces.device import DeviceProtocol
from uipilot.infrastructure.persistence.file_project_loader import FileProjectLoader

logger = structlog.get_logger()


@dataclass
class ScenarioAssignment:
    """A scenario definition, its resolved run plan and its executor."""

    definition: ScenarioDefinition
    scenario: Scenario
    executor: ScenarioExecutor

    @property
    def state(self) -> ScenarioExecutorState:
        return self.executor.state.value


class Project:
    """Runs every scenario of a project definition."""

    def __init__(
        self,
        definition: ProjectDefinition,
        device_factory: Callable[[], DeviceProtocol],
        decision_provider_factory: Callable[[], DecisionProviderProtocol],
        settings: UiPilotSettings | None = None,
    ):
        self.definition = definition
        self.settings = settings or UiPilotSettings()
        self.logger = logger.bind(component="project")

        resolver = ScenarioDependencyResolver(definition.scenarios)
        ordered = resolver.resolve_all()

        factory = ScenarioFactory(
            device=device_factory(),
            decision_provider=decision_provider_factory(),
            settings=self.settings,
        )
        self.assignments: list[ScenarioAssignment] = [
            ScenarioAssignment(
                definition=scenario_definition,
                scenario=factory.create_scenario(
                    resolver.resolve_chain(scenario_definition.id)
                ),
                executor=factory.create_executor(),
            )
            for scenario_definition in ordered
        ]

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        device_factory: Callable[[], DeviceProtocol],
        decision_provider_factory: Callable[[], DecisionProviderProtocol],
        settings: UiPilotSettings | None = None,
    ) -> "Project":
        definition = FileProjectLoader(path).load()
        return cls(definition, device_factory, decision_provider_factory, settings)

    def assignment(self, scenario_id: str) -> ScenarioAssignment:
        for assignment in self.assignments:
            if assignment.definition.id == scenario_id:
                return assignment
        raise KeyError(scenario_id)

    async def execute(self, scenario_ids: list[str] | None = None) -> bool:
        """
        Run the selected scenarios (all by default) one after another.

        Returns:
            True if every executed scenario succeeded.
        """
        selected = [
            assignment
            for assignment in self.assignments
            if scenario_ids is None or assignment.definition.id in scenario_ids
        ]
        self.logger.info(
            "project.execute.start",
            scenarios=[assignment.definition.id for assignment in selected],
        )
        for assignment in selected:
            self.logger.info("project.scenario.start", scenario_id=assignment.definition.id)
            await assignment.executor.execute(assignment.scenario)
            self.logger.info(
                "project.scenario.end",
                scenario_id=assignment.definition.id,
                state=assignment.state.value,
            )
        success = all(assignment.executor.is_success() for assignment in selected)
        self.logger.info("project.execute.end", success=success)
        return success

    def is_success(self) -> bool:
        return all(assignment.executor.is_success() for assignment in self.assignments)

    def cancel(self) -> None:
        for assignment in self.assignments:
            assignment.executor.cancel()
