"""Durable store key builder."""

from gateway.models.domain.image import TransformOptions


def _escape(text: str, reserved: str) -> str:
    """Percent-encode ``%`` and the given separator characters."""
    return "".join(f"%{ord(char):02X}" if char == "%" or char in reserved else char for char in text)


class CacheKeys:
    """Centralized cache key management."""

    PREFIX = "imgcache"
    SOURCE_SEPARATOR = "|"
    OPTION_SEPARATOR = "-"
    PAIR_SEPARATOR = ":"

    @classmethod
    def options(cls, options: TransformOptions) -> str:
        """Serialize options as ``key:value`` pairs in insertion order.

        Separators inside values are escaped so no value can pose as a
        further option.
        """
        reserved = cls.SOURCE_SEPARATOR + cls.OPTION_SEPARATOR
        return cls.OPTION_SEPARATOR.join(
            f"{key}{cls.PAIR_SEPARATOR}{_escape(value, reserved)}" for key, value in options
        )

    @classmethod
    def image(
        cls,
        source_url: str,
        options: TransformOptions,
        prefix: str | None = None,
    ) -> str:
        """Durable store key for a transformed image.

        Unhashed, so the key reads back as source URL plus options. The
        first ``|`` always ends the source URL.
        """
        source = _escape(source_url, cls.SOURCE_SEPARATOR)
        return f"{prefix or cls.PREFIX}:{source}{cls.SOURCE_SEPARATOR}{cls.options(options)}"
