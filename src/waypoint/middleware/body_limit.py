"""Request size limit middleware."""

from waypoint.errors import PayloadTooLarge
from waypoint.http.request import Request
from waypoint.http.response import error_response
from waypoint.middleware.protocol import CONTINUE, MiddlewareResult

DEFAULT_MAX_BYTES = 1024 * 1024  # 1 MiB


class BodyLimitMiddleware:
    """Reject bodies larger than ``max_bytes`` with a 413.

    Checks the declared ``Content-Length`` as well as the bytes actually
    received.
    """

    __slots__ = ("max_bytes",)

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        self.max_bytes = max_bytes

    def handle(self, request: Request) -> MiddlewareResult:
        declared = request.content_length or 0
        if declared > self.max_bytes or len(request.body) > self.max_bytes:
            return error_response(PayloadTooLarge())
        return CONTINUE
