"""Unit tests for the HTTP latency probe."""

import httpx
import pytest

from preppath.network import HttpLatencyProbe


def make_clock(*readings):
    values = iter(readings)
    return lambda: next(values)


@pytest.mark.unit
class TestHttpLatencyProbe:
    """Tests for HttpLatencyProbe.measure."""

    @pytest.mark.asyncio
    async def test_measures_round_trip_with_head_request(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            probe = HttpLatencyProbe(
                "https://probe.example.com/favicon.ico",
                client=client,
                clock=make_clock(10.0, 10.25),
            )

            latency = await probe.measure()

        assert latency == pytest.approx(250.0)
        assert len(requests) == 1
        assert requests[0].method == "HEAD"
        assert str(requests[0].url) == "https://probe.example.com/favicon.ico"
        assert requests[0].headers["Cache-Control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_error_status_still_counts_as_round_trip(self):
        """Any response completes the round trip, whatever its status."""

        def handler(request):
            return httpx.Response(404)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            probe = HttpLatencyProbe(
                "https://probe.example.com/missing",
                client=client,
                clock=make_clock(1.0, 1.5),
            )

            latency = await probe.measure()

        assert latency == pytest.approx(500.0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
        ],
    )
    async def test_network_failure_returns_none(self, error):
        def handler(request):
            raise error

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            probe = HttpLatencyProbe(
                "https://probe.example.com/favicon.ico",
                client=client,
                clock=make_clock(0.0, 1.0),
            )

            latency = await probe.measure()

        assert latency is None
