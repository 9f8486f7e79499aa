"""
Scenario Dependency Resolution

Turns the dependency links of scenario definitions into execution order:
- resolve_chain: one scenario and its ancestors, ancestors first
- resolve_all: every scenario in a valid topological order

A cycle raises ScenarioDependencyCycleError before anything runs.
"""

import structlog

from uipilot.application.schemas import ScenarioDefinition
from uipilot.core.domain.errors import ProjectFileError, ScenarioDependencyCycleError

logger = structlog.get_logger()


class ScenarioDependencyResolver:
    """Resolves dependency chains over a fixed set of scenario definitions."""

    def __init__(self, scenarios: list[ScenarioDefinition]):
        self._scenarios = list(scenarios)
        self._by_id = {scenario.id: scenario for scenario in scenarios}
        self.logger = logger.bind(component="dependency_resolver")

    def _lookup(self, scenario_id: str) -> ScenarioDefinition:
        try:
            return self._by_id[scenario_id]
        except KeyError:
            raise ProjectFileError(f"Unknown scenario: {scenario_id}") from None

    def resolve_chain(self, scenario_id: str) -> list[ScenarioDefinition]:
        """
        Return ``scenario_id`` preceded by all of its ancestors.

        Raises:
            ScenarioDependencyCycleError: If the dependency links loop
            ProjectFileError: If an id is unknown
        """
        chain: list[ScenarioDefinition] = []
        visited: list[str] = []
        current: ScenarioDefinition | None = self._lookup(scenario_id)
        while current is not None:
            if current.id in visited:
                self.logger.error(
                    "dependency.cycle", scenario_id=scenario_id, chain=visited
                )
                raise ScenarioDependencyCycleError(visited + [current.id])
            visited.append(current.id)
            chain.append(current)
            current = (
                self._lookup(current.dependency) if current.dependency else None
            )
        chain.reverse()
        return chain

    def resolve_all(self) -> list[ScenarioDefinition]:
        """Every scenario, each one after its dependency."""
        ordered: list[ScenarioDefinition] = []
        placed: set[str] = set()
        for scenario in self._scenarios:
            for ancestor in self.resolve_chain(scenario.id):
                if ancestor.id not in placed:
                    placed.add(ancestor.id)
                    ordered.append(ancestor)
        return ordered
