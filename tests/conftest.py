"""Shared fixtures for the uipilot test suite."""

import pytest
import structlog

from tests.fakes import FakeDecisionProvider, FakeDevice
from uipilot.application.interceptors import NoopInitializer
from uipilot.core.domain.agent import AgentConfig, AgentConfigBuilder
from uipilot.core.domain.models import DeviceFormFactor


def make_config(
    device,
    decision_provider,
    *interceptors,
    device_form_factor: DeviceFormFactor = DeviceFormFactor.MOBILE,
) -> AgentConfig:
    builder = (
        AgentConfigBuilder()
        .device(device)
        .decision_provider(decision_provider)
        .device_form_factor(device_form_factor)
    )
    for interceptor in interceptors:
        builder.add_interceptor(interceptor)
    return builder.build()


@pytest.fixture(autouse=True)
def reset_structlog():
    """CLI tests configure structlog globally; restore defaults afterwards."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def device():
    return FakeDevice()


@pytest.fixture
def goal_provider():
    """Decision provider that achieves every goal immediately."""
    return FakeDecisionProvider()


@pytest.fixture
def quiet_config(device, goal_provider):
    """Config whose initializer does nothing, so only step commands reach the device."""
    return make_config(device, goal_provider, NoopInitializer())
