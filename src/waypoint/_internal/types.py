"""Shared type aliases used across waypoint modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: (request, params) or (request, *positional_params)
Handler: TypeAlias = Callable[..., Any]

# Lifecycle hook: zero-argument, sync or async
Hook: TypeAlias = Callable[[], Any]
