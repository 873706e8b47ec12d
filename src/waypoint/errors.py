"""Waypoint exception hierarchy.

Shared across the route table, dispatcher, and middleware so every
module raises and catches the same types. Every ``HTTPError`` is
rendered with the single error envelope ``{"error": detail}``.
"""

from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when routes, middleware, or config are invalid.

    Surfaces at registration or startup, never per request.
    """


class InvalidToken(WaypointError):  # noqa: N818
    """Raised by token verifiers when a bearer token cannot be accepted."""


@dataclass(frozen=True, slots=True)
class HTTPError(WaypointError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher, middleware, or handlers. The dispatcher
    catches these and renders ``{"error": detail}`` with ``status``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the method and path."""

    def __init__(self, detail: str = "Route not found") -> None:
        super().__init__(status=404, detail=detail)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request body or parameters could not be understood."""

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status=400, detail=detail)


class Unauthorized(HTTPError):  # noqa: N818
    """401 — missing or rejected credentials."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(
            status=401,
            detail=detail,
            headers=(("WWW-Authenticate", "Bearer"),),
        )


class PayloadTooLarge(HTTPError):  # noqa: N818
    """413 — request body exceeds the configured limit."""

    def __init__(self, detail: str = "Request too large") -> None:
        super().__init__(status=413, detail=detail)


class TooManyRequests(HTTPError):  # noqa: N818
    """429 — rate limit exceeded. Carries a ``Retry-After`` header."""

    def __init__(
        self,
        retry_after: int,
        detail: str = "Too many requests. Please try again later.",
    ) -> None:
        super().__init__(
            status=429,
            detail=detail,
            headers=(("Retry-After", str(retry_after)),),
        )


class RequestTimeout(HTTPError):  # noqa: N818
    """504 — the handler did not finish within ``request_timeout``."""

    def __init__(self, detail: str = "Request timed out") -> None:
        super().__init__(status=504, detail=detail)
