"""HTTP fetcher.

Downloads templates, PDFs and fonts referenced by URL using httpx.
"""

import logging

import httpx

from slideforms.interfaces.errors import FetchError
from slideforms.interfaces.fetcher import BaseFetcher

logger = logging.getLogger(__name__)


class HttpFetcher(BaseFetcher):
    """Fetcher implementation backed by ``httpx.AsyncClient``.

    Attributes:
        timeout: Seconds allowed for one request.
        max_bytes: Largest accepted payload; larger bodies are rejected.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_bytes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Seconds allowed for one request.
            max_bytes: Optional payload size limit.
            transport: Optional httpx transport, used to stub the network.
        """
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._transport = transport

    async def fetch(self, url: str) -> bytes:
        logger.info(f"Fetching {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    content = await self._read_body(url, response)
        except httpx.HTTPStatusError as e:
            logger.error(f"Fetch failed: {e.response.status_code} - {url}")
            raise FetchError(
                f"Fetching {url} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Fetch error for {url}: {e}")
            raise FetchError(f"Fetching {url} failed: {e}") from e

        logger.debug(f"Fetched {len(content)} bytes from {url}")
        return content

    async def _read_body(self, url: str, response: httpx.Response) -> bytes:
        """Read a streamed body, stopping as soon as it exceeds ``max_bytes``."""
        if self.max_bytes is None:
            return await response.aread()

        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            raise FetchError(
                f"Payload at {url} is {declared} bytes; the limit is {self.max_bytes}"
            )

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > self.max_bytes:
                logger.error(f"Fetch aborted: {url} exceeds {self.max_bytes} bytes")
                raise FetchError(
                    f"Payload at {url} exceeds the limit of {self.max_bytes} bytes"
                )
        return bytes(body)
