from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from src import config

TIMEOUT_SECONDS = 60

logger = logging.getLogger(__name__)


class YCApiClient:
    """Fetches the public YC company directory (a single JSON array)."""

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = TIMEOUT_SECONDS,
    ) -> None:
        self.url = url or config.YC_COMPANIES_URL
        self._client = client
        self.timeout = timeout

    async def fetch_companies(self) -> List[Dict[str, Any]]:
        """Return every company object from the endpoint.

        Raises:
            httpx.HTTPStatusError: on a non-2xx response.
            httpx.RequestError: on transport failures.
            ValueError: if the payload is not a JSON array.
        """
        if self._client is not None:
            payload = await self._get(self._client)
        else:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
                follow_redirects=True,
            ) as client:
                payload = await self._get(client)

        if not isinstance(payload, list):
            raise ValueError(
                f"Expected a JSON array from {self.url}, got {type(payload).__name__}"
            )
        companies = [item for item in payload if isinstance(item, dict)]
        logger.info("Fetched %d companies from %s", len(companies), self.url)
        return companies

    async def _get(self, client: httpx.AsyncClient) -> Any:
        r = await client.get(self.url)
        r.raise_for_status()
        return r.json()
