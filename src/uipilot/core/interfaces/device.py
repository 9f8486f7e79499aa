"""
Device Protocol

Contract for the device driver the agent observes and acts on. The concrete
automation backend (adb, simulator, browser, ...) is supplied by the caller.
"""

from typing import Protocol, runtime_checkable

from uipilot.core.domain.commands import Command


@runtime_checkable
class DeviceProtocol(Protocol):
    """
    Device driver capability.

    Implementations raise DeviceAutomationError when a command cannot be
    performed and CaptureError when a screenshot cannot be taken.
    """

    async def execute_commands(self, commands: list[Command]) -> None:
        """Execute a batch of commands in order."""
        ...

    async def dump_view_hierarchy(self) -> str:
        """Return the current view hierarchy as structured text."""
        ...

    async def dump_focused_view_hierarchy(self) -> str:
        """Return a focus-only view tree (directional-pad devices)."""
        ...

    async def capture_screenshot(self, name: str) -> str:
        """Capture a screenshot under ``name`` and return its file path."""
        ...
