"""Explicit application context.

Shared collaborators (database handles, API clients, the config) live on
an ``AppContext`` built once per app and reachable from every request as
``request.context``. Nothing is looked up through module globals.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from waypoint.config import AppConfig


@dataclass(frozen=True, slots=True)
class AppContext:
    """Process-wide, read-only context handed to handlers and middleware.

    Usage::

        context = AppContext(services={"leads": LeadRepository(db)})
        app = App(context=context)

        def get_lead(request, params):
            return request.context.service("leads").get(params["id"])
    """

    config: AppConfig = field(default_factory=AppConfig)
    services: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "services", MappingProxyType(dict(self.services)))

    def service(self, name: str) -> Any:
        """Return the service registered as *name*.

        Raises ``LookupError`` if no such service exists.
        """
        try:
            return self.services[name]
        except KeyError:
            msg = f"No service named {name!r} in the application context"
            raise LookupError(msg) from None
