"""Typed failures of the image request pipeline."""

from fastapi import status

from gateway.middleware.error_handler import AppError


class MissingSourceError(AppError):
    """The ``src`` query parameter was not supplied."""

    def __init__(self) -> None:
        super().__init__(
            code="MISSING_SOURCE",
            message='Missing "src" value',
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class InvalidSourceError(AppError):
    """The ``src`` value is not base64 or does not decode to an absolute URL."""

    def __init__(self) -> None:
        super().__init__(
            code="INVALID_SOURCE",
            message='Invalid "src" value',
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class DisallowedExtensionError(AppError):
    """The source path does not end with a supported image extension."""

    def __init__(self) -> None:
        super().__init__(
            code="DISALLOWED_EXTENSION",
            message="Disallowed file extension",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class ForbiddenHostError(AppError):
    """The source host is not on the allow-list."""

    def __init__(self, hostname: str) -> None:
        super().__init__(
            code="FORBIDDEN_HOST",
            message="Invalid url for source images",
            status_code=status.HTTP_403_FORBIDDEN,
            details={"hostname": hostname},
        )


class UpstreamUnavailableError(AppError):
    """The transformation service could not be reached or refused the request.

    Reported to callers as a plain 404 so transport details never leak.
    """

    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(
            code="NOT_FOUND",
            message="Not Found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class EmptyUpstreamResultError(AppError):
    """The transformation service answered with an empty body."""

    def __init__(self) -> None:
        super().__init__(
            code="EMPTY_UPSTREAM_RESULT",
            message="Unable to fetch image",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
