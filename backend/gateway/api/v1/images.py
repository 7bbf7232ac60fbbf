"""Image delivery endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response

from gateway.config import Settings, get_settings
from gateway.dependencies import get_image_gateway
from gateway.models.domain.image import TransformRequest
from gateway.models.schemas.common import ErrorResponse
from gateway.redis.keys import CacheKeys
from gateway.services.image.gateway import ImageGateway
from gateway.services.image.options import negotiate_format, parse_transform_options
from gateway.services.image.source import validate_source

logger = logging.getLogger(__name__)
router = APIRouter()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route(
    "/",
    methods=ALL_METHODS,
    response_class=Response,
    responses={
        200: {"content": {"image/*": {}}, "description": "Transformed image"},
        400: {"model": ErrorResponse, "description": "Missing or invalid source"},
        403: {"model": ErrorResponse, "description": "Source host not allowed"},
        404: {"model": ErrorResponse, "description": "Transformation service unavailable"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
)
async def serve_image(
    request: Request,
    background: BackgroundTasks,
    settings: Annotated[Settings, Depends(get_settings)],
    gateway: Annotated[ImageGateway, Depends(get_image_gateway)],
) -> Response:
    """
    Serve a transformed image.

    Query parameters: ``src`` (base64 source URL, required), ``fit``,
    ``w``, ``h``, ``q`` and ``enlarge``. The output format follows the
    Accept header unless the source is a PNG or GIF.
    """
    query = request.query_params

    options = parse_transform_options(query)
    negotiated = negotiate_format(request.headers.get("accept"))
    source = validate_source(query.get("src"), settings.allowed_source_hosts_list)

    transform_request = TransformRequest.build(source, options, negotiated)
    cache_key = CacheKeys.image(
        transform_request.source_url,
        transform_request.options,
        prefix=settings.durable_key_prefix,
    )

    return await gateway.resolve(
        request_url=str(request.url),
        headers=request.headers,
        transform_request=transform_request,
        cache_key=cache_key,
        background=background,
    )
