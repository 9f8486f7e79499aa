"""
Built-in Interceptors

Initializer interceptors selected by a scenario's initialize method and
cleanup option, plus a step interceptor that logs step timing.
"""

import time

import structlog

from uipilot.core.domain.commands import ClearState, LaunchApp
from uipilot.core.interfaces.device import DeviceProtocol
from uipilot.core.interfaces.interceptors import (
    Chain,
    InitializerInterceptor,
    StepInput,
    StepInterceptor,
    StepResult,
)

logger = structlog.get_logger()


class NoopInitializer(InitializerInterceptor):
    """Skips initialization entirely."""

    async def intercept(
        self, device: DeviceProtocol, chain: Chain[DeviceProtocol, None]
    ) -> None:
        return None


class LaunchAppInitializer(InitializerInterceptor):
    """Launches an app instead of the default back-press initialization."""

    def __init__(self, package_name: str):
        self.package_name = package_name

    async def intercept(
        self, device: DeviceProtocol, chain: Chain[DeviceProtocol, None]
    ) -> None:
        logger.info("initializer.launch_app", package_name=self.package_name)
        await device.execute_commands([LaunchApp(app_id=self.package_name)])


class CleanupDataInitializer(InitializerInterceptor):
    """Clears app data, then continues with the rest of the initialization."""

    def __init__(self, package_name: str):
        self.package_name = package_name

    async def intercept(
        self, device: DeviceProtocol, chain: Chain[DeviceProtocol, None]
    ) -> None:
        logger.info("initializer.clear_state", package_name=self.package_name)
        await device.execute_commands([ClearState(app_id=self.package_name)])
        await chain.proceed(device)


class StepTimingInterceptor(StepInterceptor):
    """Logs the outcome and duration of every step."""

    async def intercept(
        self, step_input: StepInput, chain: Chain[StepInput, StepResult]
    ) -> StepResult:
        started = time.monotonic()
        result = await chain.proceed(step_input)
        logger.debug(
            "step.finished",
            goal=step_input.context_history.goal,
            step=len(step_input.context_history),
            result=result.value,
            duration_seconds=round(time.monotonic() - started, 3),
        )
        return result
