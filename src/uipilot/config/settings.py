"""
Configuration management.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings


class UiPilotSettings(BaseSettings):
    """Runtime settings with environment variable support (``UIPILOT_*``)."""

    # Scheduling
    step_interval: float = Field(default=1.0, ge=0, description="Pause between steps in seconds")
    finish_debounce: float = Field(default=0.1, ge=0, description="Idle time before a scenario counts as finished")

    # Budgets used when a scenario does not declare its own
    default_max_step: int = Field(default=10, ge=1, description="Steps per agent attempt")
    default_max_retry: int = Field(default=0, ge=0, description="Scenario retries")

    # Debug settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    model_config = {
        "env_file": ".env",
        "env_prefix": "UIPILOT_",
        "case_sensitive": False,
    }

    @classmethod
    def load_from_file(cls, config_path: Path) -> "UiPilotSettings":
        """Load settings from a YAML configuration file."""
        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)
