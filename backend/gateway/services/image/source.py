"""Source image reference decoding and validation."""

import base64
import binascii
import logging
import re
from collections.abc import Iterable
from urllib.parse import urlsplit

from gateway.models.domain.image import OutputFormat, ValidatedSource
from gateway.services.image.errors import (
    DisallowedExtensionError,
    ForbiddenHostError,
    InvalidSourceError,
    MissingSourceError,
)

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = re.compile(r"\.(jpe?g|png|gif|webp)$", re.IGNORECASE)

# Extensions whose format the transformer must keep
SOURCE_FORMATS = {
    ".png": OutputFormat.PNG,
    ".gif": OutputFormat.GIF,
}

ALLOWED_SCHEMES = {"http", "https"}

# Characters browsers (WHATWG URL parsing) read differently from urlsplit:
# backslash acts as a path separator, tabs and newlines are dropped.
AMBIGUOUS_URL_CHARS = re.compile(r"[\\\x00-\x20\x7f]")


def decode_source(src: str) -> str:
    """
    Decode a base64 source reference.

    Accepts the standard and URL-safe alphabets with or without padding.
    A space is read as ``+`` since form decoding turns unescaped pluses
    into spaces.

    Raises:
        InvalidSourceError: If the value is not valid base64 UTF-8 text
    """
    normalized = src.strip().replace(" ", "+").replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)

    try:
        return base64.b64decode(normalized, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Undecodable source value: {e}")
        raise InvalidSourceError() from e


def validate_source(src: str | None, allowed_hosts: Iterable[str]) -> ValidatedSource:
    """
    Decode and validate the caller-supplied source image reference.

    Args:
        src: Base64-encoded absolute URL from the ``src`` query parameter
        allowed_hosts: Hostnames images may be fetched from

    Returns:
        ValidatedSource with the decoded URL and its parts

    Raises:
        MissingSourceError: ``src`` absent or empty
        InvalidSourceError: not base64, not an absolute http(s) URL, or
            ambiguous (backslashes, whitespace, credentials)
        DisallowedExtensionError: path is not a supported image type
        ForbiddenHostError: host not allow-listed
    """
    if not src:
        raise MissingSourceError()

    url = decode_source(src)
    if AMBIGUOUS_URL_CHARS.search(url):
        raise InvalidSourceError()

    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as e:
        raise InvalidSourceError() from e

    if parts.scheme.lower() not in ALLOWED_SCHEMES or not hostname:
        raise InvalidSourceError()

    # Credentials in the authority are never forwarded
    if "@" in parts.netloc:
        raise InvalidSourceError()

    pathname = parts.path
    match = ALLOWED_EXTENSIONS.search(pathname)
    if not match:
        raise DisallowedExtensionError()

    if hostname not in {host.lower() for host in allowed_hosts}:
        logger.warning(f"Rejected source host: {hostname}")
        raise ForbiddenHostError(hostname)

    return ValidatedSource(
        url=parts.geturl(),
        hostname=hostname,
        pathname=pathname,
        source_format=SOURCE_FORMATS.get(match.group(0).lower()),
    )
