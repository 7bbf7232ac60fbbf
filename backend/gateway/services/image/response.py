"""Image response assembly."""

from fastapi import Response

from gateway.models.domain.image import OutputFormat

# Served images are untrusted third-party content
CONTENT_SECURITY_POLICY = "default-src 'none'; navigate-to 'none'; form-action 'none'"


def image_headers(output_format: OutputFormat, max_age: int) -> dict[str, str]:
    """Headers sent with every transformed image."""
    return {
        "cache-control": f"public, max-age={max_age}",
        "access-control-allow-origin": "*",
        "content-security-policy": CONTENT_SECURITY_POLICY,
        "content-type": output_format.mime_type,
    }


def build_image_response(image: bytes, output_format: OutputFormat, max_age: int) -> Response:
    """Build the 200 response for an image payload."""
    return Response(content=image, headers=image_headers(output_format, max_age))
