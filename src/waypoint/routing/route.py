"""Route, RouteOptions, RouteMatch and PathSegment frozen dataclasses."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from waypoint.routing.pattern import CompiledPattern

# Methods a route may be registered for. OPTIONS is answered by the
# dispatcher before routing and is never registrable.
METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Literal:  ``/leads``           (is_param=False)
    Param:    ``/{id}`` or ``/:id`` (is_param=True, value="id")
    """

    value: str
    is_param: bool = False


@dataclass(frozen=True, slots=True)
class RouteOptions:
    """Per-route flags.

    ``skip_auth`` exempts the route from the middleware chain (or only
    from the auth step, depending on ``AppConfig.skip_auth_scope``).
    ``positional`` binds route parameters as positional handler arguments
    in declaration order instead of a single mapping.
    """

    skip_auth: bool = False
    positional: bool = False
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Created at registration, lives for the lifetime of the process.
    """

    method: str
    path: str
    handler: Callable[..., Any]
    pattern: CompiledPattern
    options: RouteOptions = field(default_factory=RouteOptions)

    @property
    def skip_auth(self) -> bool:
        return self.options.skip_auth

    @property
    def handler_name(self) -> str:
        """Qualified handler name for logs and ``waypoint routes``."""
        func = getattr(self.handler, "__func__", self.handler)
        name = getattr(func, "__qualname__", None) or repr(self.handler)
        module = getattr(func, "__module__", None)
        return f"{module}.{name}" if module else name


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route lookup."""

    route: Route
    params: dict[str, str]

    def positional_params(self) -> tuple[str, ...]:
        """Parameter values in the order the pattern declares them."""
        return tuple(self.params[name] for name in self.route.pattern.param_names)
