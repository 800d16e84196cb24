import logging
from typing import Optional, Protocol

import aiohttp

logger = logging.getLogger(__name__)

DRAIN_CHUNK_SIZE = 64 * 1024


class HttpClient(Protocol):
    async def get(self, url: str) -> int:
        """Issue a GET and return the status code.

        Implementations must read the whole body and release the connection
        before returning, on every status code. Callers only see the status
        and cannot drain it themselves.

        Transport failures are raised as exceptions.
        """
        ...


class AiohttpClient:
    """Shared ``aiohttp`` session sized for ``pool_size`` concurrent requests."""

    def __init__(
        self,
        pool_size: int = 10,
        timeout_s: Optional[float] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.pool_size = max(1, pool_size)
        self.timeout_s = timeout_s
        self.headers = headers or {"User-Agent": "downpour/0.1"}
        self._session: Optional[aiohttp.ClientSession] = None

    async def open(self) -> None:
        if self._session is None:
            connector = aiohttp.TCPConnector(
                limit=self.pool_size, limit_per_host=self.pool_size
            )
            timeout = aiohttp.ClientTimeout(total=self.timeout_s)
            self._session = aiohttp.ClientSession(
                connector=connector, timeout=timeout, headers=self.headers
            )
            logger.debug(
                f"Opened HTTP session: pool_size={self.pool_size}, timeout={self.timeout_s}"
            )

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("Closed HTTP session")

    async def __aenter__(self) -> "AiohttpClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def get(self, url: str) -> int:
        if self._session is None:
            raise RuntimeError("AiohttpClient is not open")
        async with self._session.get(url) as resp:
            # Drain the body in chunks so the connection goes back to the pool
            size = 0
            async for chunk in resp.content.iter_chunked(DRAIN_CHUNK_SIZE):
                size += len(chunk)
            logger.debug(f"Fetched {url}: status={resp.status}, size={size} bytes")
            return resp.status
