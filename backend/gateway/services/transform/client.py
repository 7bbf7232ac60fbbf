"""HTTP client for the external image transformation service."""

import logging
from collections.abc import Mapping

import httpx

from gateway.config import Settings, get_settings
from gateway.models.domain.image import TransformOptions
from gateway.services.image.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

# Inbound headers that describe the gateway hop, not the image request
HOP_BY_HOP_HEADERS = {
    "connection",
    "content-length",
    "host",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
}


def forwardable_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Filter inbound request headers down to those safe to forward."""
    return {
        name: value
        for name, value in headers.items()
        if name.lower() not in HOP_BY_HOP_HEADERS
    }


class TransformClient:
    """
    Async client for the transformation service.

    The service is asked to fetch ``url`` and apply the given options;
    the response body is the transformed image.
    """

    def __init__(
        self,
        base_url: str | None = None,
        path: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()

        self._base_url = (base_url or settings.transform_base_url).rstrip("/")
        self._path = path or settings.transform_path
        self._timeout = timeout or settings.transform_timeout

        self._http_client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout, connect=10.0),
            transport=transport,
        )

    async def transform(
        self,
        target_url: str,
        headers: Mapping[str, str],
        options: TransformOptions,
    ) -> bytes:
        """
        Request a transformed image.

        Args:
            target_url: Source image URL
            headers: Inbound request headers to pass through
            options: Transformation options

        Returns:
            Response body (may be empty)

        Raises:
            UpstreamUnavailableError: On transport failure or non-success status
        """
        params = {"url": target_url, **options.to_dict()}

        try:
            response = await self._http_client.get(
                self._path,
                params=params,
                headers=forwardable_headers(headers),
            )
            logger.info(f"Transform response: {response.status_code} for {target_url}")
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Transform service rejected {target_url}: {e.response.status_code}")
            raise UpstreamUnavailableError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Transform service unreachable for {target_url}: {e}")
            raise UpstreamUnavailableError(str(e)) from e

        return response.content

    async def health_check(self) -> bool:
        """Check that the transformation service answers at all."""
        try:
            await self._http_client.get("/", timeout=5.0)
            return True
        except httpx.HTTPError as e:
            logger.error(f"Transform service health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http_client.aclose()
