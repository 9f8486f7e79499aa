"""
Unit tests for UiPilotSettings.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from uipilot.config.settings import UiPilotSettings


class TestUiPilotSettings:
    def test_defaults(self):
        settings = UiPilotSettings()
        assert settings.step_interval == 1.0
        assert settings.finish_debounce == 0.1
        assert settings.default_max_step == 10
        assert settings.default_max_retry == 0
        assert settings.debug is False

    def test_environment_override(self):
        with patch.dict(os.environ, {"UIPILOT_STEP_INTERVAL": "0.25", "UIPILOT_DEBUG": "true"}):
            settings = UiPilotSettings()
        assert settings.step_interval == 0.25
        assert settings.debug is True

    def test_rejects_invalid_budget(self):
        with pytest.raises(ValidationError):
            UiPilotSettings(default_max_step=0)

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        settings = UiPilotSettings.load_from_file(tmp_path / "missing.yaml")
        assert settings.step_interval == 1.0

    def test_load_from_file(self, tmp_path: Path):
        path = tmp_path / "uipilot.yaml"
        path.write_text("step_interval: 0\ndefault_max_retry: 3\n")

        loaded = UiPilotSettings.load_from_file(path)

        assert loaded.step_interval == 0
        assert loaded.default_max_retry == 3
