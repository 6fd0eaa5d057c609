"""
Roachagram API client.

Fetches raw anagram responses from the external Roachagram API.
Every request carries a fresh device identifier in the X-Device-ID header.
"""

import logging
import uuid
from typing import Optional

import httpx

from domain.services.anagram_source import AnagramSourceError, IAnagramSource
from shared.constants import ANAGRAM_API_PATH, ANAGRAM_API_TIMEOUT_SECONDS, DEVICE_ID_HEADER

logger = logging.getLogger(__name__)


class RoachagramApiClient(IAnagramSource):
    """httpx-based implementation of IAnagramSource

    Accepts an existing AsyncClient (tests, shared pools); otherwise
    creates and owns one lazily.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = ANAGRAM_API_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of the HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{ANAGRAM_API_PATH}"

    @staticmethod
    def generate_device_id() -> str:
        return str(uuid.uuid4())

    async def fetch(self, input_text: str) -> str:
        """Fetch anagrams for `input_text` and return the response body as text"""
        if input_text is None or not input_text.strip():
            raise ValueError("Input cannot be null or empty.")

        headers = {DEVICE_ID_HEADER: self.generate_device_id()}

        try:
            resp = await self.client.get(
                self.endpoint,
                params={"input": input_text},
                headers=headers,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Anagram API error: %s %s",
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise AnagramSourceError(
                f"Anagram API returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error("Anagram API connection error: %s", exc)
            raise AnagramSourceError("Cannot connect to anagram API") from exc

        logger.info("Anagram API: %d chars for input of %d chars", len(resp.text), len(input_text))
        return resp.text

    async def close(self) -> None:
        """Close the HTTP client if this instance created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
