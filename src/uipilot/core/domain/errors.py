"""
Domain Errors

Exception hierarchy shared by the agent loop, the scenario executor and the
project layer.

Recoverable errors (handled inside the step loop):
- DeviceAutomationError: one device command failed, recorded as a failure step
- CaptureError: screenshot capture failed, step continues without it

Fatal errors (reported to the caller):
- ConfigurationError: agent configuration is incomplete
- ProjectFileError: project definition file is malformed
- ScenarioDependencyCycleError: scenario dependencies form a cycle
"""


class UiPilotError(Exception):
    """Base class for all uipilot errors."""


class DeviceAutomationError(UiPilotError):
    """A device command could not be performed."""


class CaptureError(UiPilotError):
    """A screenshot could not be captured."""


class ConfigurationError(UiPilotError):
    """Agent or application configuration is invalid."""


class ProjectFileError(UiPilotError):
    """Project definition could not be loaded or validated."""


class ScenarioDependencyCycleError(UiPilotError):
    """
    Scenario dependencies contain a cycle.

    Attributes:
        chain: Scenario ids visited before the cycle was detected, ending
               with the id that was seen twice.
    """

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(
            "Scenario dependency cycle detected: " + " -> ".join(chain)
        )
