"""Waypoint application class.

Mutable during setup (route registration, middleware, lifecycle hooks).
Frozen at runtime when the first request, lifespan startup, or test
client arrives.
"""

import inspect
import threading
from collections.abc import Callable
from typing import Any

from waypoint._internal.asgi import Receive, Scope, Send
from waypoint._internal.types import Handler, Hook
from waypoint.config import AppConfig
from waypoint.context import AppContext
from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.middleware.protocol import Middleware, as_middleware
from waypoint.routing.route import Route
from waypoint.routing.table import HandlerRef, RouteTable
from waypoint.server.dispatcher import Dispatcher


class App:
    """The waypoint application.

    Routes can be registered directly or with decorators::

        app = App(AppConfig(mount_prefixes=("/custom/api", "/api")))
        app.use(BearerAuthMiddleware(BearerAuthConfig(verify_token=verify)))

        app.post("/auth/login", auth.login, skip_auth=True)
        app.get("/leads", (LeadsController, "list"))

        @app.get("/leads/{id}")
        def get_lead(request: Request, params: dict[str, str]):
            return {"id": params["id"]}

    Thread safety:
        Setup is single-threaded (registration at import time). The
        freeze transition uses a Lock + double-check so exactly one thread
        builds the dispatcher, even when several server workers call
        ``__call__()`` concurrently on the first request.
    """

    __slots__ = (
        "_context",
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_middleware_list",
        "_shutdown_hooks",
        "_startup_hooks",
        "_table",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        context: AppContext | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._context: AppContext = context or AppContext(config=self.config)
        self._table = RouteTable()
        self._middleware_list: list[Middleware] = []
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._dispatcher: Dispatcher | None = None

    # -- Route registration --

    def register(
        self,
        method: str,
        path: str,
        handler: HandlerRef,
        *,
        skip_auth: bool = False,
        positional: bool = False,
        name: str | None = None,
    ) -> Route:
        """Append a route to the table. First registered, first matched."""
        self._check_not_frozen()
        return self._table.register(
            method, path, handler, skip_auth=skip_auth, positional=positional, name=name
        )

    def route(
        self,
        method: str,
        path: str,
        *,
        skip_auth: bool = False,
        positional: bool = False,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator."""

        def decorator(func: Handler) -> Handler:
            self.register(
                method, path, func, skip_auth=skip_auth, positional=positional, name=name
            )
            return func

        return decorator

    def get(self, path: str, handler: HandlerRef | None = None, **options: Any) -> Any:
        """Register a GET route: ``app.get(path, handler)`` or ``@app.get(path)``."""
        return self._method_route("GET", path, handler, options)

    def post(self, path: str, handler: HandlerRef | None = None, **options: Any) -> Any:
        """Register a POST route: ``app.post(path, handler)`` or ``@app.post(path)``."""
        return self._method_route("POST", path, handler, options)

    def put(self, path: str, handler: HandlerRef | None = None, **options: Any) -> Any:
        """Register a PUT route: ``app.put(path, handler)`` or ``@app.put(path)``."""
        return self._method_route("PUT", path, handler, options)

    def patch(self, path: str, handler: HandlerRef | None = None, **options: Any) -> Any:
        """Register a PATCH route: ``app.patch(path, handler)`` or ``@app.patch(path)``."""
        return self._method_route("PATCH", path, handler, options)

    def delete(self, path: str, handler: HandlerRef | None = None, **options: Any) -> Any:
        """Register a DELETE route: ``app.delete(path, handler)`` or ``@app.delete(path)``."""
        return self._method_route("DELETE", path, handler, options)

    def _method_route(
        self,
        method: str,
        path: str,
        handler: HandlerRef | None,
        options: dict[str, Any],
    ) -> Any:
        if handler is None:
            return self.route(method, path, **options)
        return self.register(method, path, handler, **options)

    @property
    def routes(self) -> tuple[Route, ...]:
        """Registered routes in registration order."""
        return self._table.routes

    @property
    def context(self) -> AppContext:
        return self._context

    # -- Middleware --

    def use(self, middleware: Middleware | Callable[[Request], Any]) -> None:
        """Append a middleware to the chain. Registration order is run order."""
        self._check_not_frozen()
        self._middleware_list.append(as_middleware(middleware))

    # -- Lifecycle hooks --

    def on_startup(self, func: Hook) -> Hook:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def run_startup_hooks(self) -> None:
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def run_shutdown_hooks(self) -> None:
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Dispatch --

    async def dispatch(self, request: Request) -> Response:
        """Dispatch an in-process request (path already prefix-free)."""
        return await self._ensure_frozen().dispatch(request)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        await self._ensure_frozen().handle_asgi(scope, receive, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs startup/shutdown hooks and reports completion to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.run_startup_hooks()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.run_shutdown_hooks()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> Dispatcher:
        """Thread-safe freeze with double-check locking."""
        if self._dispatcher is not None:
            return self._dispatcher
        with self._freeze_lock:
            if self._dispatcher is None:
                self._freeze()
        assert self._dispatcher is not None
        return self._dispatcher

    def _freeze(self) -> None:
        """Freeze the route table and middleware into a Dispatcher.

        MUST only be called while holding _freeze_lock.
        """
        self._table.freeze()
        self._dispatcher = Dispatcher(
            self._table,
            tuple(self._middleware_list),
            config=self.config,
            context=self._context,
        )
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and middleware before the first request."
            )
            raise RuntimeError(msg)
