"""Best-effort reachability and latency probes."""

import asyncio
import logging
import time

import httpx

from appvitals.models.schemas import ProbeResult

logger = logging.getLogger(__name__)


class ProbeClient:
    """Issues HEAD requests against arbitrary URLs.

    A probe only answers "did the request complete, and how long did it take".
    Status codes and bodies are never inspected, so a 404 or 500 still counts
    as reachable. Timeouts and transport errors count as unreachable and
    report the time elapsed until the failure. There are no retries.
    """

    DEFAULT_TIMEOUT = 8.0

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "appvitals/0.1",
    ) -> None:
        """Initialize the probe client.

        Args:
            client: Optional httpx client. If not provided, one is created per probe.
            timeout: Default timeout in seconds for probes that don't pass their own.
            user_agent: User-Agent header sent with every probe.
        """
        self._client = client
        self.timeout = timeout
        self.user_agent = user_agent

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(follow_redirects=True)

    async def probe(self, url: str, timeout: float | None = None) -> ProbeResult:
        """Probe a URL once.

        Args:
            url: URL to probe.
            timeout: Timeout in seconds, defaults to the client's timeout.

        Returns:
            ProbeResult with reachability and wall-clock round-trip time.
        """
        timeout = self.timeout if timeout is None else timeout
        client = await self._get_client()
        start = time.monotonic()

        try:
            # httpx timeouts are per phase, wait_for bounds the whole round trip
            await asyncio.wait_for(
                client.head(
                    url,
                    timeout=timeout,
                    follow_redirects=True,
                    headers={"User-Agent": self.user_agent},
                ),
                timeout=timeout,
            )
            reachable = True
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.debug(f"Probe timed out after {timeout}s: {url}")
            reachable = False
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Probe failed for {url}: {e}")
            reachable = False
        finally:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            if self._client is None:
                await client.aclose()

        return ProbeResult(url=url, reachable=reachable, response_time_ms=elapsed_ms)
