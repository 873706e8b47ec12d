"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Literal, TypeAlias

from waypoint.errors import ConfigurationError

SkipAuthScope: TypeAlias = Literal["chain", "auth"]

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(mount_prefixes=("/custom/api", "/api"), request_timeout=10.0)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Routing
    mount_prefixes: tuple[str, ...] = ()

    # "chain": skip_auth routes bypass every middleware.
    # "auth": skip_auth routes bypass only middleware marked is_auth.
    skip_auth_scope: SkipAuthScope = "chain"

    # Seconds a handler may run before a 504; None disables the limit
    request_timeout: float | None = 30.0

    # Logging
    log_level: str = "info"

    def __post_init__(self) -> None:
        if self.skip_auth_scope not in ("chain", "auth"):
            msg = f"skip_auth_scope must be 'chain' or 'auth', got {self.skip_auth_scope!r}"
            raise ConfigurationError(msg)
        if self.request_timeout is not None and self.request_timeout <= 0:
            msg = f"request_timeout must be positive or None, got {self.request_timeout!r}"
            raise ConfigurationError(msg)
        for prefix in self.mount_prefixes:
            if not prefix.startswith("/") or prefix == "/":
                msg = f"Mount prefix {prefix!r} must start with '/' and not be the root"
                raise ConfigurationError(msg)

    @classmethod
    def from_env(
        cls,
        prefix: str = "WAYPOINT_",
        environ: Mapping[str, str] | None = None,
    ) -> AppConfig:
        """Build a config from environment variables.

        Each field maps to ``{prefix}{FIELD_NAME}``; unset variables keep
        the default. ``mount_prefixes`` is comma-separated and
        ``request_timeout`` accepts ``none`` to disable the limit::

            WAYPOINT_PORT=8080
            WAYPOINT_MOUNT_PREFIXES=/custom/api,/api
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for f in fields(cls):
            raw = env.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _parse_field(f.name, raw.strip())
        return cls(**values)  # type: ignore[arg-type]


def _parse_field(name: str, raw: str) -> object:
    """Convert one environment string to the type of field *name*."""
    try:
        match name:
            case "port":
                return int(raw)
            case "debug":
                lowered = raw.lower()
                if lowered in _TRUE:
                    return True
                if lowered in _FALSE:
                    return False
                raise ValueError(raw)
            case "request_timeout":
                return None if raw.lower() in ("", "none") else float(raw)
            case "mount_prefixes":
                return tuple(p.strip() for p in raw.split(",") if p.strip())
            case _:
                return raw
    except ValueError as exc:
        msg = f"Invalid value for {name}: {raw!r}"
        raise ConfigurationError(msg) from exc
