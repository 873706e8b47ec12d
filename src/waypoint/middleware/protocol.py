"""Middleware protocol and the tri-state middleware result.

A middleware is any object with a ``handle`` method::

    class RequestId:
        def handle(self, request: Request) -> MiddlewareResult:
            request.state["request_id"] = uuid.uuid4().hex
            return CONTINUE

``handle`` may be ``def`` or ``async def`` and returns one of:

- ``CONTINUE`` (or ``None``) -- run the next middleware, then the handler;
- a ``Response`` -- stop here and send that response;
- ``HALT`` -- stop here with no response body (sent as an empty 204).

A middleware may also define ``process_response(request, response)``.
Hooks of every middleware that continued run in reverse order once the
handler has produced its response. Setting ``is_auth = True`` marks the
authentication step, which ``skip_auth_scope="auth"`` skips for
``skip_auth`` routes.
"""

import enum
from collections.abc import Awaitable
from typing import Any, Protocol, TypeAlias, runtime_checkable

from waypoint.errors import ConfigurationError
from waypoint.http.request import Request
from waypoint.http.response import Response


class Signal(enum.Enum):
    """Non-response middleware outcomes."""

    CONTINUE = "continue"
    HALT = "halt"


CONTINUE = Signal.CONTINUE
HALT = Signal.HALT

MiddlewareResult: TypeAlias = Response | Signal | None


class Middleware(Protocol):
    """Protocol for waypoint middleware.

    Accepts sync and async implementations::

        class Maintenance:
            def handle(self, request: Request) -> MiddlewareResult:
                return Response.error("Down for maintenance", 503)

        class AuditLog:
            async def handle(self, request: Request) -> MiddlewareResult:
                await audit.record(request.method, request.path)
                return CONTINUE
    """

    def handle(self, request: Request) -> MiddlewareResult | Awaitable[MiddlewareResult]: ...


@runtime_checkable
class ResponseHook(Protocol):
    """Optional second half of a middleware: rewrite the outgoing response."""

    def process_response(
        self, request: Request, response: Response
    ) -> Response | Awaitable[Response]: ...


class FunctionMiddleware:
    """Adapter that lets a plain ``(request) -> MiddlewareResult`` callable act as middleware."""

    __slots__ = ("func", "is_auth")

    def __init__(self, func: Any, *, is_auth: bool = False) -> None:
        self.func = func
        self.is_auth = is_auth

    def handle(self, request: Request) -> Any:
        return self.func(request)

    def __repr__(self) -> str:
        return f"FunctionMiddleware({getattr(self.func, '__qualname__', self.func)!r})"


def as_middleware(obj: Any) -> Middleware:
    """Return *obj* if it has ``handle``, wrap it if it's a plain callable."""
    if callable(getattr(obj, "handle", None)):
        return obj
    if callable(obj):
        return FunctionMiddleware(obj)
    msg = f"Middleware must define handle(request) or be callable, got {type(obj).__name__}"
    raise ConfigurationError(msg)


def is_auth_middleware(middleware: Any) -> bool:
    """True if *middleware* declares itself the authentication step."""
    return bool(getattr(middleware, "is_auth", False))
