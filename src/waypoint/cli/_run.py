"""``waypoint run`` — serve an app with uvicorn."""

import argparse
import sys

from waypoint.cli._resolve import resolve_app
from waypoint.logs import configure_logging


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and hand it to uvicorn.

    uvicorn is an optional dependency (``pip install waypoint-router[server]``).
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        import uvicorn
    except ImportError as exc:
        print(
            "Error: 'waypoint run' needs uvicorn: pip install waypoint-router[server]",
            file=sys.stderr,
        )
        raise SystemExit(1) from exc

    configure_logging(app.config.log_level)
    uvicorn.run(
        app,
        host=args.host or app.config.host,
        port=args.port or app.config.port,
        log_level=app.config.log_level,
    )
