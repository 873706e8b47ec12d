"""Request dispatch — normalise, route, run middleware, invoke, serialise.

The only component that turns ASGI scope/messages into waypoint types
and back. Everything it reads after construction (route table, middleware
tuple, prefixes, config) is immutable, so one Dispatcher is shared by
every concurrent request; all per-request data lives on the Request.

Pipeline for one request:

1. Strip ``root_path`` and the mount prefix from the percent-encoded
   path. Parameters are decoded only after matching, so ``%2F`` never
   splits a segment.
2. ``OPTIONS`` -> empty 200, before routing and middleware.
3. First matching route, or 404 ``{"error": "Route not found"}``.
4. Middleware chain in registration order unless the route skips it.
5. Handler under the request timeout.
6. Response hooks in reverse order, then JSON serialisation.
"""

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote, unquote

import anyio

from waypoint._internal.asgi import Receive, Scope, Send, read_body
from waypoint._internal.invoke import invoke
from waypoint.config import AppConfig
from waypoint.context import AppContext
from waypoint.errors import HTTPError, NotFound, RequestTimeout
from waypoint.http.request import Request
from waypoint.http.response import Response, coerce_result, error_response
from waypoint.middleware.protocol import CONTINUE, HALT, Middleware, is_auth_middleware
from waypoint.routing.pattern import strip_trailing_slash
from waypoint.routing.prefix import MountPrefixes
from waypoint.routing.route import Route, RouteMatch
from waypoint.routing.table import RouteTable
from waypoint.server.sender import send_response

logger = logging.getLogger("waypoint.dispatch")

INTERNAL_ERROR = "internal error"

# Characters left as-is when re-encoding an already-decoded ASGI path
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


def internal_error() -> Response:
    """The generic 500 envelope. Never carries exception details."""
    return Response.error(INTERNAL_ERROR, 500)


def routing_path(scope: Scope) -> str:
    """The request path, still percent-encoded.

    Uses ``raw_path`` when the server provides it and re-encodes the
    decoded ``path`` otherwise.
    """
    raw = scope.get("raw_path")
    if raw:
        return raw.decode("latin-1").split("?", 1)[0]
    return quote(scope["path"], safe=_PATH_SAFE)


class Dispatcher:
    """Resolve requests against a frozen route table and middleware chain.

    Usage::

        dispatcher = Dispatcher(table, middleware, config=config, context=context)
        response = await dispatcher.dispatch(request)
    """

    __slots__ = ("_config", "_context", "_middleware", "_prefixes", "_table")

    def __init__(
        self,
        table: RouteTable,
        middleware: Sequence[Middleware] = (),
        *,
        config: AppConfig | None = None,
        context: AppContext | None = None,
    ) -> None:
        self._table = table
        self._middleware: tuple[Middleware, ...] = tuple(middleware)
        self._config = config or AppConfig()
        self._context = context or AppContext(config=self._config)
        self._prefixes = MountPrefixes(self._config.mount_prefixes)

    @property
    def context(self) -> AppContext:
        return self._context

    # -- Path normalisation --

    def normalize_path(self, path: str, root_path: str = "") -> str:
        """Return the canonical, prefix-free path used for route matching.

        *path* is percent-encoded; *root_path* is decoded, as ASGI sends it.
        """
        stripped = self._prefixes.strip(path, quote(root_path, safe=_PATH_SAFE))
        return strip_trailing_slash(stripped)

    # -- Dispatch --

    async def dispatch(self, request: Request) -> Response:
        """Process one request whose path is already normalised."""
        if request.method == "OPTIONS":
            return Response.empty(200)

        match = self._table.match(request.method, request.path)
        if match is None:
            logger.debug("404 %s %s: no route", request.method, request.path)
            return error_response(NotFound())

        match = RouteMatch(
            route=match.route,
            params={name: unquote(value) for name, value in match.params.items()},
        )
        request = request.with_route_params(match.params)

        ran: list[Middleware] = []
        for middleware in self._chain_for(match.route):
            try:
                result = await invoke(middleware.handle, request)
            except HTTPError as exc:
                return error_response(exc)
            except Exception:
                logger.exception(
                    "Middleware %r failed on %s %s", middleware, request.method, request.path
                )
                return internal_error()

            if result is None or result is CONTINUE:
                ran.append(middleware)
                continue
            if result is HALT:
                logger.debug("%r halted %s %s", middleware, request.method, request.path)
                return Response.empty(204)
            if isinstance(result, Response):
                logger.debug(
                    "%r short-circuited %s %s with %d",
                    middleware,
                    request.method,
                    request.path,
                    result.status,
                )
                return result
            logger.error("Middleware %r returned unsupported result %r", middleware, result)
            return internal_error()

        response = await self._invoke_handler(match, request)
        return await self._apply_response_hooks(ran, request, response)

    def _chain_for(self, route: Route) -> tuple[Middleware, ...]:
        """The middleware that runs for *route*, in registration order."""
        if not route.skip_auth:
            return self._middleware
        if self._config.skip_auth_scope == "chain":
            return ()
        return tuple(mw for mw in self._middleware if not is_auth_middleware(mw))

    async def _invoke_handler(self, match: RouteMatch, request: Request) -> Response:
        """Call the matched handler; convert every failure into an envelope."""
        route = match.route
        args: tuple[Any, ...]
        if route.options.positional:
            args = (request, *match.positional_params())
        else:
            args = (request, dict(match.params))

        try:
            with anyio.move_on_after(self._config.request_timeout) as scope:
                result = await invoke(route.handler, *args)
        except HTTPError as exc:
            return error_response(exc)
        except Exception:
            logger.exception(
                "Unhandled error in %s for %s %s",
                route.handler_name,
                request.method,
                request.path,
            )
            return internal_error()

        if scope.cancelled_caught:
            logger.warning(
                "%s %s timed out after %ss in %s",
                request.method,
                request.path,
                self._config.request_timeout,
                route.handler_name,
            )
            return error_response(RequestTimeout())

        return coerce_result(result)

    async def _apply_response_hooks(
        self,
        ran: list[Middleware],
        request: Request,
        response: Response,
    ) -> Response:
        for middleware in reversed(ran):
            hook = getattr(middleware, "process_response", None)
            if hook is None:
                continue
            try:
                response = await invoke(hook, request, response)
            except HTTPError as exc:
                response = error_response(exc)
            except Exception:
                logger.exception("Response hook of %r failed", middleware)
                return internal_error()
        return response

    # -- ASGI --

    async def handle_asgi(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process a single ASGI ``http`` scope through the full pipeline."""
        body = await read_body(receive)
        path = self.normalize_path(routing_path(scope), scope.get("root_path", ""))
        request = Request.from_asgi(dict(scope), body, path=path, context=self._context)

        response = await self.dispatch(request)
        sent = await send_response(response, send)
        logger.debug("%s %s -> %d", request.method, request.raw_path, sent.status)
