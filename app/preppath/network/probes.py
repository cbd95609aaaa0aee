"""Latency probes for connection-quality classification.

A probe measures one round trip and returns the elapsed time in
milliseconds, or None if the request could not complete. Probes never
raise for network failures.
"""

import time
from typing import Callable, Optional, Protocol

import httpx

from preppath.logging import get_module_logger

logger = get_module_logger()


class LatencyProbe(Protocol):
    """Interface for round-trip latency measurement."""

    async def measure(self) -> Optional[float]:
        """Round-trip time in milliseconds, or None on failure."""
        ...


class HttpLatencyProbe:
    """Measure latency with a HEAD request to a small resource.

    Attributes:
        url: Resource to request
        timeout_ms: Request timeout in milliseconds
    """

    def __init__(
        self,
        url: str,
        timeout_ms: float = 5000,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the probe.

        Args:
            url: Resource to request
            timeout_ms: Request timeout in milliseconds
            client: Optional shared AsyncClient. A short-lived client is
                created per probe when omitted.
            clock: Monotonic clock returning seconds
        """
        self.url = url
        self.timeout_ms = timeout_ms
        self._client = client
        self._clock = clock
        self._logger = logger.bind(probe_url=url)

    async def measure(self) -> Optional[float]:
        timeout = httpx.Timeout(self.timeout_ms / 1000)
        headers = {"Cache-Control": "no-cache"}
        start = self._clock()
        try:
            if self._client is not None:
                await self._client.head(self.url, headers=headers, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    await client.head(self.url, headers=headers)
        except httpx.HTTPError as e:
            self._logger.debug(
                "latency_probe_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        elapsed_ms = (self._clock() - start) * 1000
        self._logger.debug("latency_probe_completed", elapsed_ms=elapsed_ms)
        return elapsed_ms
