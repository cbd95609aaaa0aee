import pytest

from tests.factories.network import FakeLatencyProbe
from tests.factories.resilience import GatedSleep, RecordingSleep


@pytest.fixture
def recording_sleep():
    """Sleep that returns immediately and records requested delays."""
    return RecordingSleep()


@pytest.fixture
def gated_sleep():
    """Sleep that blocks until the test releases it."""
    return GatedSleep()


@pytest.fixture
def latency_probe():
    """Probe reporting a fast 100ms round trip."""
    return FakeLatencyProbe([100.0])
