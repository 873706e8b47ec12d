"""Logging setup for the ``waypoint`` logger hierarchy.

Library modules only call ``logging.getLogger("waypoint.<area>")``;
installing a handler is left to the application or the CLI.

Loggers:
    waypoint.dispatch -- one debug line per request, handler faults
    waypoint.middleware -- auth and rate-limit rejections
"""

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_HANDLER_ATTR = "_waypoint_handler"


def configure_logging(level: str | int = "info") -> logging.Logger:
    """Attach one stderr handler to the ``waypoint`` logger and set its level.

    Safe to call more than once; the handler is installed only once.
    """
    logger = logging.getLogger("waypoint")
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        msg = f"Unknown log level: {level!r}"
        raise ValueError(msg)
    logger.setLevel(resolved)

    if not any(getattr(h, _HANDLER_ATTR, False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
    return logger
