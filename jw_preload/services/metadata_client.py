"""Client for the external media metadata API."""

import json
import logging
from urllib.parse import quote

import httpx

from jw_preload.core.config import settings

logger = logging.getLogger(__name__)


class MetadataFetchError(Exception):
    """Base exception for metadata fetch failures."""

    def __init__(self, media_id: str, message: str):
        self.media_id = media_id
        self.message = message
        super().__init__(f"{media_id}: {message}")


class DownloadFailed(MetadataFetchError):
    """Transport failure or non-success response from the metadata API."""

    def __init__(self, media_id: str, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(media_id, message)


class DecodeFailed(MetadataFetchError):
    """The metadata API answered with a body that is not JSON."""


class MetadataClient:
    """Fetches one media item's metadata document.

    Every call is a single attempt; callers decide what a failure means.
    """

    def __init__(
        self,
        base_url: str | None = None,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root, defaults to ``settings.metadata_api_root``
            params: Provider-specific query parameters added to every request
            timeout: Overall per-request deadline in seconds
            transport: Optional httpx transport (tests use ``MockTransport``)
        """
        self.base_url = (base_url or settings.metadata_api_root).rstrip("/")
        self.params = dict(settings.metadata_api_params if params is None else params)
        seconds = timeout if timeout is not None else settings.metadata_fetch_timeout
        self.timeout = httpx.Timeout(seconds, connect=min(seconds, 5.0))
        self._transport = transport

    def media_url(self, media_id: str) -> str:
        """Endpoint URL for ``media_id``."""
        return f"{self.base_url}/media/{quote(media_id, safe='')}"

    def _query(self) -> dict[str, str]:
        return {**self.params, "format": "json"}

    def fetch(self, media_id: str) -> str:
        """Fetch the serialized metadata document for ``media_id``.

        Returns:
            The response body, verified to be JSON, unmodified.

        Raises:
            DownloadFailed: On transport errors, timeouts and non-2xx responses.
            DecodeFailed: When the body is not valid JSON.
        """
        url = self.media_url(media_id)

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(url, params=self._query())
        except httpx.TimeoutException as e:
            raise DownloadFailed(media_id, f"request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise DownloadFailed(media_id, f"request failed: {e}") from e

        if not response.is_success:
            raise DownloadFailed(
                media_id,
                f"metadata API returned {response.status_code}",
                status_code=response.status_code,
            )

        body = response.text
        try:
            json.loads(body)
        except ValueError as e:
            raise DecodeFailed(media_id, f"response is not valid JSON: {e}") from e

        logger.debug(f"Fetched metadata for {media_id} ({len(body)} bytes)")
        return body
