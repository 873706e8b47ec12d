"""Waypoint — a small routing and dispatch layer for JSON APIs on ASGI.

An ordered route table with first-match-wins lookup, ``{name}`` and
``:name`` path parameters, a short-circuiting middleware chain, and a
single JSON error envelope.

Basic usage::

    from waypoint import App

    app = App()

    @app.get("/leads/{id}")
    def get_lead(request, params):
        return {"id": params["id"], "name": "Jane"}

Serve it with any ASGI server, or ``waypoint run myapp:app``.
"""

__version__ = "0.1.0"
__all__ = [
    "CONTINUE",
    "HALT",
    "App",
    "AppConfig",
    "AppContext",
    "BadRequest",
    "ConfigurationError",
    "HTTPError",
    "Middleware",
    "NotFound",
    "Request",
    "Response",
    "RouteTable",
    "WaypointError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    if name == "App":
        from waypoint.app import App

        return App

    if name == "AppConfig":
        from waypoint.config import AppConfig

        return AppConfig

    if name == "AppContext":
        from waypoint.context import AppContext

        return AppContext

    if name == "Request":
        from waypoint.http.request import Request

        return Request

    if name == "Response":
        from waypoint.http.response import Response

        return Response

    if name == "RouteTable":
        from waypoint.routing.table import RouteTable

        return RouteTable

    if name in ("CONTINUE", "HALT", "Middleware"):
        from waypoint.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("BadRequest", "ConfigurationError", "HTTPError", "NotFound", "WaypointError"):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
