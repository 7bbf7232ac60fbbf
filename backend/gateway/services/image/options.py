"""Transformation option parsing and output format negotiation.

Options are produced by a fixed, ordered list of rules. The rule order is
the serialization order of the durable cache key, so new rules must be
appended rather than inserted.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from gateway.models.domain.image import OutputFormat, TransformOptions

_AVIF_PATTERN = re.compile(r"image/avif")
_WEBP_PATTERN = re.compile(r"image/webp")


@dataclass(frozen=True)
class OptionRule:
    """Maps a query parameter onto a transformation option."""

    option: str
    param: str
    fallback: Callable[[Mapping[str, str]], str | None] | None = None

    def resolve(self, query: Mapping[str, str]) -> str | None:
        value = query.get(self.param)
        if value:
            return value
        if self.fallback is not None:
            return self.fallback(query)
        return None


def _enlarge_fit(query: Mapping[str, str]) -> str | None:
    # enlarge=true is shorthand for fit=cover
    if query.get("enlarge") == "true":
        return "cover"
    return None


OPTION_RULES: tuple[OptionRule, ...] = (
    OptionRule("fit", "fit", fallback=_enlarge_fit),
    OptionRule("width", "w"),
    OptionRule("height", "h"),
    OptionRule("quality", "q"),
)


def parse_transform_options(query: Mapping[str, str]) -> TransformOptions:
    """
    Build transformation options from query parameters.

    Empty parameters are treated as absent. Never raises.

    Args:
        query: Request query parameters

    Returns:
        TransformOptions in rule order
    """
    items = []
    for rule in OPTION_RULES:
        value = rule.resolve(query)
        if value:
            items.append((rule.option, value))
    return TransformOptions(tuple(items))


def negotiate_format(accept: str | None) -> OutputFormat | None:
    """
    Pick an output format from the Accept header.

    Returns None when the client has no preference the gateway can honour;
    the caller then falls back to JPEG.
    """
    accept = accept or ""
    if _AVIF_PATTERN.search(accept):
        return OutputFormat.AVIF
    if _WEBP_PATTERN.search(accept):
        return OutputFormat.WEBP
    return None
