"""Remote configuration download."""

from __future__ import annotations

import httpx

from config_updater.errors import HTTPStatusError, NetworkError
from config_updater.logging import get_logger

log = get_logger("config_updater.fetcher")

FETCH_TIMEOUT_SECONDS = 30.0


class Fetcher:
    """Downloads the remote document as opaque bytes.

    A fresh ``httpx.AsyncClient`` is opened for every fetch and closed when
    it returns. There are no retries; the next scheduled cycle is the retry.
    """

    def __init__(
        self,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, url: str, user_agent: str) -> bytes:
        """GET *url* and return the response body.

        Raises:
            NetworkError: On connection errors and timeouts.
            HTTPStatusError: When the status is outside 2xx.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": user_agent},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = await client.get(url)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"request timed out after {self._timeout:g}s") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"request to {url} failed") from exc

        if not resp.is_success:
            raise HTTPStatusError(resp.status_code, url)

        data = resp.content
        log.info("config_downloaded", bytes=len(data))
        return data
