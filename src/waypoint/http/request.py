"""Immutable HTTP request.

Frozen metadata plus the fully-read body. The request is built once per
HTTP call by the dispatcher; route parameters are attached with
``with_route_params`` after matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from waypoint.context import AppContext
from waypoint.http.body import decode_body, is_json_content_type
from waypoint.http.headers import Headers
from waypoint.http.query import QueryParams

_MISSING = object()


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``state`` is the one mutable slot: a per-request dict where middleware
    leaves data for the handler (the authenticated user, a request id).
    It is shared by every copy made with ``with_route_params`` and
    discarded with the request.

    ``path`` is the prefix-free routing path, still percent-encoded;
    ``route_params`` hold the decoded values.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    body: bytes = b""
    route_params: dict[str, str] = field(default_factory=dict)
    context: AppContext = field(default_factory=AppContext)
    raw_path: str = ""
    client: tuple[str, int] | None = None
    state: dict[str, Any] = field(default_factory=dict, compare=False)

    # Private: decoded-body cache shared between copies
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def is_json(self) -> bool:
        return is_json_content_type(self.content_type)

    @property
    def data(self) -> Any:
        """The body decoded per content type (JSON or form mapping).

        Decoded on first access and cached. Raises ``BadRequest`` for a
        malformed JSON body.
        """
        if "data" not in self._cache:
            self._cache["data"] = decode_body(self.body, self.content_type)
        return self._cache["data"]

    @property
    def bearer_token(self) -> str | None:
        """The token from ``Authorization: Bearer <token>``, if present."""
        auth = self.headers.get("authorization")
        if not auth:
            return None
        scheme, _, token = auth.partition(" ")
        if scheme.lower() != "bearer":
            return None
        return token.strip() or None

    @property
    def forwarded_for(self) -> str | None:
        """Client address claimed by a proxy: first ``X-Forwarded-For`` hop, else ``X-Real-IP``.

        Client-supplied; only meaningful behind a proxy that overwrites it.
        """
        forwarded = self.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        return self.headers.get("x-real-ip") or None

    @property
    def client_ip(self) -> str:
        """The transport peer address from the ASGI scope."""
        if self.client:
            return self.client[0]
        return "unknown"

    # -- Accessors --

    def get(self, key: str, default: Any = None) -> Any:
        """Return a field from the decoded body, or *default*."""
        data = self.data
        if isinstance(data, dict):
            return data.get(key, default)
        return default

    def param(self, name: str, default: str | None = None) -> str | None:
        """Return a matched route parameter, or *default*."""
        value = self.route_params.get(name, _MISSING)
        return default if value is _MISSING else value

    def with_route_params(self, params: dict[str, str]) -> Request:
        """Return a copy carrying *params*; ``state`` and the cache are shared."""
        return replace(self, route_params=dict(params))

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: dict[str, Any],
        body: bytes,
        *,
        path: str,
        context: AppContext,
    ) -> Request:
        """Create a Request from an ASGI scope, its body, and a normalised path."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=path,
            headers=Headers(scope.get("headers", ())),
            query=QueryParams(scope.get("query_string", b"")),
            body=body,
            context=context,
            raw_path=scope["path"],
            client=tuple(client) if client else None,
        )
