"""
Project Definition Schemas

Pydantic models for the project file: a list of scenario definitions, each
optionally naming a prerequisite scenario through ``dependency``.

Example project YAML:

    scenarios:
      - id: open-settings
        goal: Open the settings screen
        initialize_method:
          type: open_app
          package_name: com.example.app
      - id: enable-dark-mode
        goal: Enable dark mode
        dependency: open-settings
        max_retry: 2
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from uipilot.core.domain.models import DeviceFormFactor


class BackInitializeMethod(BaseModel):
    """Press back repeatedly before the first step (default)."""

    type: Literal["back"] = "back"


class NoopInitializeMethod(BaseModel):
    """Leave the device as it is."""

    type: Literal["noop"] = "noop"


class OpenAppInitializeMethod(BaseModel):
    """Launch an app before the first step."""

    type: Literal["open_app"] = "open_app"
    package_name: str = Field(min_length=1)


InitializeMethod = Annotated[
    Union[BackInitializeMethod, NoopInitializeMethod, OpenAppInitializeMethod],
    Field(discriminator="type"),
]


class NoopCleanupData(BaseModel):
    type: Literal["noop"] = "noop"


class CleanupAppData(BaseModel):
    """Clear the app's data before initializing."""

    type: Literal["cleanup"] = "cleanup"
    package_name: str = Field(min_length=1)


CleanupData = Annotated[
    Union[NoopCleanupData, CleanupAppData],
    Field(discriminator="type"),
]


class ScenarioDefinition(BaseModel):
    """
    One scenario as declared in the project file.

    ``max_retry`` and ``max_step`` fall back to the configured defaults
    when omitted.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    goal: str = Field(min_length=1)
    dependency: str | None = None
    device_form_factor: DeviceFormFactor = DeviceFormFactor.MOBILE
    initialize_method: InitializeMethod = Field(default_factory=BackInitializeMethod)
    cleanup_data: CleanupData = Field(default_factory=NoopCleanupData)
    max_retry: int | None = Field(default=None, ge=0)
    max_step: int | None = Field(default=None, ge=1)


class ProjectDefinition(BaseModel):
    """All scenarios of a project."""

    scenarios: list[ScenarioDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> "ProjectDefinition":
        ids = [scenario.id for scenario in self.scenarios]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate scenario ids: {', '.join(duplicates)}")
        known = set(ids)
        for scenario in self.scenarios:
            if scenario.dependency is not None and scenario.dependency not in known:
                raise ValueError(
                    f"Scenario '{scenario.id}' depends on unknown scenario "
                    f"'{scenario.dependency}'"
                )
        return self
