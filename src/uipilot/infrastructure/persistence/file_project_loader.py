"""
File-Based Project Loader
=========================

Reads project definitions stored as YAML files.

Responsibilities:
- Parse the project YAML and validate it into a ProjectDefinition
- Report malformed files as ProjectFileError with the offending path
"""

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from uipilot.application.schemas import ProjectDefinition
from uipilot.core.domain.errors import ProjectFileError

logger = structlog.get_logger()


class FileProjectLoader:
    """
    Loads a ProjectDefinition from a YAML file.

    Example:
        >>> loader = FileProjectLoader("project.yaml")
        >>> project = loader.load()
        >>> [scenario.id for scenario in project.scenarios]
        ['open-settings', 'enable-dark-mode']
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.logger = logger.bind(component="file_project_loader")

    def load(self) -> ProjectDefinition:
        """
        Read and validate the project file.

        Raises:
            ProjectFileError: If the file is missing, not YAML, or invalid
        """
        if not self.path.exists():
            raise ProjectFileError(f"Project file not found: {self.path}")

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error("project.yaml.invalid", path=str(self.path), error=str(e))
            raise ProjectFileError(f"Invalid YAML in {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ProjectFileError(f"Project file must contain a mapping: {self.path}")

        try:
            project = ProjectDefinition.model_validate(data)
        except ValidationError as e:
            self.logger.error(
                "project.validation_failed", path=str(self.path), errors=e.error_count()
            )
            raise ProjectFileError(f"Invalid project file {self.path}: {e}") from e

        self.logger.debug(
            "project.loaded", path=str(self.path), scenarios=len(project.scenarios)
        )
        return project
