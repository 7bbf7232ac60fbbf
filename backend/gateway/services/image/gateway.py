"""Cache waterfall for transformed images.

Lookup order, first hit wins:

1. Edge cache, keyed by the full request URL. A hit is returned verbatim.
2. Durable store, keyed by the semantic cache key.
3. Transformation service. A non-empty result is written to the durable
   store in the background.

Every assembled response is then written to the edge cache in the
background. Background writes run after the response has been sent and
their failures are only logged.
"""

import logging
from collections.abc import Mapping

from fastapi import BackgroundTasks, Response

from gateway.models.domain.image import TransformRequest
from gateway.services.cache.durable import ObjectStore
from gateway.services.cache.edge import EdgeCache
from gateway.services.image.errors import EmptyUpstreamResultError
from gateway.services.image.response import build_image_response
from gateway.services.transform.client import TransformClient
from gateway.services.transform.singleflight import SingleFlight

logger = logging.getLogger(__name__)


class ImageGateway:
    """
    Resolves transform requests through the edge, durable and origin tiers.

    One instance is shared by all requests; it holds no per-request state.
    """

    def __init__(
        self,
        edge: EdgeCache,
        store: ObjectStore,
        transformer: TransformClient,
        max_age: int,
        coalescer: SingleFlight[bytes] | None = None,
    ):
        self._edge = edge
        self._store = store
        self._transformer = transformer
        self._max_age = max_age
        self._coalescer = coalescer

    async def resolve(
        self,
        request_url: str,
        headers: Mapping[str, str],
        transform_request: TransformRequest,
        cache_key: str,
        background: BackgroundTasks,
    ) -> Response:
        """
        Produce the response for a validated transform request.

        Args:
            request_url: Full caller-facing URL (edge cache key)
            headers: Inbound request headers, forwarded to the transformer
            transform_request: Validated request
            cache_key: Durable store key
            background: Task list run after the response is sent

        Returns:
            Image response

        Raises:
            UpstreamUnavailableError: Transformation service unreachable
            EmptyUpstreamResultError: Transformation service returned nothing
        """
        cached = await self._edge.match(request_url)
        if cached is not None:
            return cached
        logger.info(f"Cache miss for: {cache_key}")

        image = await self._store.get(cache_key)
        if not image:
            logger.info(f"Durable miss for: {cache_key}")
            image = await self._transform(headers, transform_request, cache_key)
            background.add_task(self._write_durable, cache_key, image)

        response = build_image_response(image, transform_request.output_format, self._max_age)
        background.add_task(self._write_edge, request_url, response)
        return response

    async def _transform(
        self,
        headers: Mapping[str, str],
        transform_request: TransformRequest,
        cache_key: str,
    ) -> bytes:
        async def call() -> bytes:
            return await self._transformer.transform(
                transform_request.source_url,
                headers,
                transform_request.options,
            )

        if self._coalescer is not None:
            image = await self._coalescer.do(cache_key, call)
        else:
            image = await call()

        if not image:
            raise EmptyUpstreamResultError()
        return image

    async def _write_durable(self, cache_key: str, image: bytes) -> None:
        try:
            await self._store.put(cache_key, image)
        except Exception as e:
            logger.warning(f"Durable write failed for {cache_key}: {e}")

    async def _write_edge(self, request_url: str, response: Response) -> None:
        try:
            await self._edge.put(request_url, response)
        except Exception as e:
            logger.warning(f"Edge write failed for {request_url}: {e}")
