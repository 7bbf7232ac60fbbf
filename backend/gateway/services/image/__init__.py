"""Image request parsing, validation and response assembly."""

from gateway.services.image.options import negotiate_format, parse_transform_options
from gateway.services.image.response import build_image_response, image_headers
from gateway.services.image.source import validate_source

__all__ = [
    "build_image_response",
    "image_headers",
    "negotiate_format",
    "parse_transform_options",
    "validate_source",
]
