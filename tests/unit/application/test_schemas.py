"""
Unit tests for project definition schemas.
"""

import pytest
from pydantic import ValidationError

from uipilot.application.schemas import (
    BackInitializeMethod,
    CleanupAppData,
    NoopCleanupData,
    OpenAppInitializeMethod,
    ProjectDefinition,
    ScenarioDefinition,
)
from uipilot.core.domain.models import DeviceFormFactor


class TestScenarioDefinition:
    def test_defaults(self):
        definition = ScenarioDefinition(id="a", goal="Open settings")

        assert definition.dependency is None
        assert definition.device_form_factor is DeviceFormFactor.MOBILE
        assert isinstance(definition.initialize_method, BackInitializeMethod)
        assert isinstance(definition.cleanup_data, NoopCleanupData)
        assert definition.max_retry is None
        assert definition.max_step is None

    def test_discriminated_unions(self):
        definition = ScenarioDefinition.model_validate(
            {
                "id": "a",
                "goal": "Open settings",
                "device_form_factor": "tv",
                "initialize_method": {"type": "open_app", "package_name": "com.example"},
                "cleanup_data": {"type": "cleanup", "package_name": "com.example"},
            }
        )

        assert definition.device_form_factor is DeviceFormFactor.TV
        assert definition.initialize_method == OpenAppInitializeMethod(
            package_name="com.example"
        )
        assert definition.cleanup_data == CleanupAppData(package_name="com.example")

    def test_unknown_initialize_method(self):
        with pytest.raises(ValidationError):
            ScenarioDefinition.model_validate(
                {"id": "a", "goal": "g", "initialize_method": {"type": "reboot"}}
            )

    def test_open_app_requires_package(self):
        with pytest.raises(ValidationError):
            ScenarioDefinition.model_validate(
                {"id": "a", "goal": "g", "initialize_method": {"type": "open_app"}}
            )

    @pytest.mark.parametrize("field,value", [("max_retry", -1), ("max_step", 0)])
    def test_budgets_are_bounded(self, field, value):
        with pytest.raises(ValidationError):
            ScenarioDefinition(id="a", goal="g", **{field: value})

    def test_is_frozen(self):
        definition = ScenarioDefinition(id="a", goal="g")
        with pytest.raises(ValidationError):
            definition.goal = "other"


class TestProjectDefinition:
    def test_duplicate_ids(self):
        with pytest.raises(ValidationError, match="Duplicate scenario ids: a"):
            ProjectDefinition(
                scenarios=[
                    ScenarioDefinition(id="a", goal="g1"),
                    ScenarioDefinition(id="a", goal="g2"),
                ]
            )

    def test_unknown_dependency(self):
        with pytest.raises(ValidationError, match="depends on unknown scenario 'b'"):
            ProjectDefinition(
                scenarios=[ScenarioDefinition(id="a", goal="g", dependency="b")]
            )

    def test_cycles_are_left_to_the_resolver(self):
        project = ProjectDefinition(
            scenarios=[
                ScenarioDefinition(id="a", goal="g", dependency="b"),
                ScenarioDefinition(id="b", goal="g", dependency="a"),
            ]
        )
        assert len(project.scenarios) == 2
