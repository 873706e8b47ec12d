"""Bearer token authentication middleware.

Reads ``Authorization: Bearer <token>``, hands the token to a
user-supplied verifier, and stores the resulting identity at
``request.state["user"]``. Issuing tokens is the application's job.

Usage::

    from waypoint.middleware.auth import BearerAuthConfig, BearerAuthMiddleware

    def verify(token: str) -> dict | None:
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])
        return {"id": payload["user_id"], "user_name": payload.get("username")}

    app.use(BearerAuthMiddleware(BearerAuthConfig(
        verify_token=verify,
        public_routes=("POST:/auth/login", "POST:/auth/refresh"),
    )))
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from waypoint._internal.invoke import invoke
from waypoint.errors import ConfigurationError, InvalidToken, Unauthorized
from waypoint.http.request import Request
from waypoint.http.response import error_response
from waypoint.middleware.protocol import CONTINUE, MiddlewareResult

logger = logging.getLogger("waypoint.middleware")

TokenVerifier: TypeAlias = Callable[[str], Any | Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class BearerAuthConfig:
    """Configuration for ``BearerAuthMiddleware``.

    ``verify_token`` returns the authenticated identity, or ``None`` (or
    raises ``InvalidToken``) to reject the token. ``public_routes`` are
    ``"METHOD:/path"`` prefixes that pass without a token.
    """

    verify_token: TokenVerifier | None = None
    public_routes: tuple[str, ...] = ()
    state_key: str = "user"


class BearerAuthMiddleware:
    """Reject requests without a valid bearer token with a 401."""

    __slots__ = ("config",)

    is_auth = True

    def __init__(self, config: BearerAuthConfig) -> None:
        if config.verify_token is None:
            msg = "BearerAuthMiddleware requires BearerAuthConfig(verify_token=...)."
            raise ConfigurationError(msg)
        self.config = config

    def _is_public(self, request: Request) -> bool:
        route_key = f"{request.method}:{request.path}"
        return any(route_key.startswith(public) for public in self.config.public_routes)

    async def handle(self, request: Request) -> MiddlewareResult:
        if self._is_public(request):
            return CONTINUE

        token = request.bearer_token
        if token is None:
            logger.info("401 %s %s: no token provided", request.method, request.path)
            return error_response(Unauthorized("No token provided"))

        assert self.config.verify_token is not None
        try:
            user = await invoke(self.config.verify_token, token)
        except InvalidToken as exc:
            logger.info("401 %s %s: %s", request.method, request.path, exc)
            user = None

        if user is None:
            return error_response(Unauthorized("Invalid token"))

        request.state[self.config.state_key] = user
        return CONTINUE
