"""``waypoint routes`` — print the route table in match order."""

import argparse
import sys

from waypoint.cli._resolve import resolve_app
from waypoint.routing.route import Route


def format_routes(routes: tuple[Route, ...]) -> str:
    """Render METHOD / PATH / HANDLER / FLAGS rows, one per route."""
    rows: list[tuple[str, str, str, str]] = []
    for route in routes:
        flags = []
        if route.options.skip_auth:
            flags.append("skip_auth")
        if route.options.positional:
            flags.append("positional")
        handler = route.handler_name
        if route.options.name:
            handler = f"{handler} ({route.options.name})"
        rows.append((route.method, route.path, handler, ",".join(flags)))

    width_method = max([6, *(len(r[0]) for r in rows)])
    width_path = max([4, *(len(r[1]) for r in rows)])
    width_handler = max([7, *(len(r[2]) for r in rows)])
    fmt = f"{{:<{width_method}}}  {{:<{width_path}}}  {{:<{width_handler}}}  {{}}"

    lines = [fmt.format("METHOD", "PATH", "HANDLER", "FLAGS").rstrip()]
    lines.append("-" * min(width_method + width_path + width_handler + 11, 100))
    lines.extend(fmt.format(*row).rstrip() for row in rows)
    return "\n".join(lines)


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a waypoint app."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not app.routes:
        print("No routes registered.")
        return
    print(format_routes(app.routes))
