"""Ordered route table with first-match-wins lookup.

Routes are appended in registration order and scanned in that order.
There is no deduplication and no conflict detection: a route whose
pattern overlaps an earlier one for the same method is unreachable for
the paths the earlier one matches.
"""

from collections.abc import Callable
from typing import Any, TypeAlias

from waypoint._internal.types import Handler
from waypoint.errors import ConfigurationError
from waypoint.routing.pattern import compile_pattern
from waypoint.routing.route import METHODS, Route, RouteMatch, RouteOptions

HandlerRef: TypeAlias = Handler | tuple[Any, str]


def resolve_handler(ref: HandlerRef) -> Callable[..., Any]:
    """Turn a handler reference into a callable at registration time.

    Accepts a callable, or a ``(controller, "action")`` pair where the
    controller is an instance or a class (instantiated once, with no
    arguments).

    Raises ``ConfigurationError`` when the action is missing or not
    callable.
    """
    if isinstance(ref, tuple):
        if len(ref) != 2 or not isinstance(ref[1], str):
            msg = f"Handler pair must be (controller, 'action'), got {ref!r}"
            raise ConfigurationError(msg)
        controller, action = ref
        if isinstance(controller, type):
            controller = controller()
        handler = getattr(controller, action, None)
        if handler is None or not callable(handler):
            msg = f"{type(controller).__name__} has no callable action {action!r}"
            raise ConfigurationError(msg)
        return handler

    if not callable(ref):
        msg = f"Route handler must be callable, got {type(ref).__name__}"
        raise ConfigurationError(msg)
    return ref


class RouteTable:
    """The process-wide route table.

    Usage::

        table = RouteTable()
        table.get("/leads/{id}", get_lead)
        table.post("/auth/login", login, skip_auth=True)
        table.freeze()
        match = table.match("GET", "/leads/42")
    """

    __slots__ = ("_frozen", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._frozen = False

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
        """Append one route. Must be called before freeze()."""
        if self._frozen:
            msg = "Cannot register routes after the route table is frozen."
            raise RuntimeError(msg)

        method = method.upper()
        if method not in METHODS:
            allowed = ", ".join(sorted(METHODS))
            msg = f"Cannot register {method} {path!r}: method must be one of {allowed}."
            raise ConfigurationError(msg)

        route = Route(
            method=method,
            path=path,
            handler=resolve_handler(handler),
            pattern=compile_pattern(path),
            options=RouteOptions(skip_auth=skip_auth, positional=positional, name=name),
        )
        self._routes.append(route)
        return route

    def get(self, path: str, handler: HandlerRef, **options: Any) -> Route:
        return self.register("GET", path, handler, **options)

    def post(self, path: str, handler: HandlerRef, **options: Any) -> Route:
        return self.register("POST", path, handler, **options)

    def put(self, path: str, handler: HandlerRef, **options: Any) -> Route:
        return self.register("PUT", path, handler, **options)

    def patch(self, path: str, handler: HandlerRef, **options: Any) -> Route:
        return self.register("PATCH", path, handler, **options)

    def delete(self, path: str, handler: HandlerRef, **options: Any) -> Route:
        return self.register("DELETE", path, handler, **options)

    def freeze(self) -> None:
        """Make the table read-only. No more routes can be registered."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, in registration order."""
        return tuple(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route matching *method* and *path*, or None.

        A path registered only for other methods is simply no match; the
        dispatcher answers both cases with 404.
        """
        method = method.upper()
        for route in self._routes:
            if route.method != method:
                continue
            params = route.pattern.match(path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None
