"""Domain exceptions raised by services and mapped to HTTP responses by the error handlers."""

from __future__ import annotations

from typing import Any


class ValidationError(ValueError):
    """Malformed or missing input (400)."""


class ConflictError(ValueError):
    """Duplicate state: already liked, already following, taken username (409).

    ``extra`` is merged into the JSON error body, e.g. the current likeCount.
    """

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.extra = extra


class NotFoundError(LookupError):
    """Unknown id, user or rate, including rates that are not visible yet (404)."""


class UnauthorizedError(PermissionError):
    """Missing or wrong credentials (401)."""


class RateNotFoundError(NotFoundError):
    def __init__(self, message: str = "Rate not found") -> None:
        super().__init__(message)
