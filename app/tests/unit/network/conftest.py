"""Shared fixtures for network monitor tests."""

from unittest.mock import MagicMock

import pytest

from preppath.network import (
    ManualConnectivitySource,
    NetworkMonitor,
    NetworkMonitorConfig,
)


@pytest.fixture
def connectivity_source():
    """Platform source reporting an online wifi connection."""
    return ManualConnectivitySource(online=True, connection_type="wifi")


@pytest.fixture
def on_connection_lost():
    return MagicMock(name="on_connection_lost")


@pytest.fixture
def on_connection_restored():
    return MagicMock(name="on_connection_restored")


@pytest.fixture
def monitor_factory(
    connectivity_source,
    latency_probe,
    gated_sleep,
    on_connection_lost,
    on_connection_restored,
):
    """Factory for monitors wired to the fake source, probe and gated sleep."""

    def _factory(source=connectivity_source, probe=latency_probe, **config_kwargs):
        config_kwargs.setdefault("on_connection_lost", on_connection_lost)
        config_kwargs.setdefault("on_connection_restored", on_connection_restored)
        return NetworkMonitor(
            NetworkMonitorConfig(**config_kwargs),
            source=source,
            probe=probe,
            sleep=gated_sleep,
        )

    return _factory
