"""Domain models for image transformation requests."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class OutputFormat(str, Enum):
    """Image formats the gateway can serve."""

    AVIF = "avif"
    WEBP = "webp"
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"

    @property
    def mime_type(self) -> str:
        """Content type for this format."""
        return f"image/{self.value}"


@dataclass(frozen=True)
class TransformOptions:
    """
    Ordered, immutable set of transformation options.

    Iteration order is insertion order and feeds the durable cache key,
    so two option sets are only equal when both keys and order match.
    """

    items: tuple[tuple[str, str], ...] = ()

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self.items)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get an option value by key."""
        for name, value in self.items:
            if name == key:
                return value
        return default

    def with_option(self, key: str, value: str) -> "TransformOptions":
        """Return a copy with the option appended (or replaced in place)."""
        if key in self:
            return TransformOptions(
                tuple((name, value if name == key else old) for name, old in self.items)
            )
        return TransformOptions(self.items + ((key, value),))

    def to_dict(self) -> dict[str, str]:
        """Convert to an ordered dictionary."""
        return dict(self.items)


@dataclass(frozen=True)
class ValidatedSource:
    """A decoded and allow-listed source image reference."""

    url: str
    hostname: str
    pathname: str
    source_format: OutputFormat | None = None


@dataclass(frozen=True)
class TransformRequest:
    """Everything needed to produce one transformed image."""

    source_url: str
    options: TransformOptions = field(default_factory=TransformOptions)
    output_format: OutputFormat = OutputFormat.JPEG

    @classmethod
    def build(
        cls,
        source: ValidatedSource,
        options: TransformOptions,
        negotiated: OutputFormat | None,
    ) -> "TransformRequest":
        """
        Resolve the output format and final options for a request.

        PNG and GIF sources keep their own format regardless of the
        Accept header. Otherwise the negotiated format (if any) is both
        the output format and a ``format`` option for the transformer.
        """
        if source.source_format is not None:
            return cls(source.url, options, source.source_format)

        if negotiated is not None:
            return cls(source.url, options.with_option("format", negotiated.value), negotiated)

        return cls(source.url, options, OutputFormat.JPEG)
