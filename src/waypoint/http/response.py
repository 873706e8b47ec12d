"""JSON response with a chainable .with_*() transformation API.

Each transformation returns a new Response. Every body is serialised as
JSON; every error uses the one envelope ``{"error": "<message>"}``.
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import json
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Final

from waypoint.errors import HTTPError

CONTENT_TYPE: Final = "application/json"


class _Empty(enum.Enum):
    EMPTY = "EMPTY"

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY: Final = _Empty.EMPTY
"""Marks a response with no body at all (as opposed to JSON ``null``)."""


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    This is the structured handler result: ``body`` is any JSON-serialisable
    value and ``status`` defaults to 200.
    """

    body: Any = EMPTY
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()

    # -- Constructors --

    @classmethod
    def json(cls, body: Any, status: int = 200) -> Response:
        """A JSON response."""
        return cls(body=body, status=status)

    @classmethod
    def error(cls, message: str, status: int = 400) -> Response:
        """An error response in the standard envelope."""
        return cls(body={"error": message}, status=status)

    @classmethod
    def empty(cls, status: int = 200) -> Response:
        """A response with no body."""
        return cls(body=EMPTY, status=status)

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str] | tuple[tuple[str, str], ...]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items()) if isinstance(headers, Mapping) else tuple(headers)
        return replace(self, headers=(*self.headers, *new))

    # -- Body helpers --

    @property
    def is_empty(self) -> bool:
        return self.body is EMPTY

    @property
    def body_bytes(self) -> bytes:
        """The body encoded as JSON bytes (``b""`` when empty)."""
        if self.body is EMPTY:
            return b""
        return json.dumps(self.body, default=_json_default, separators=(",", ":")).encode(
            "utf-8"
        )

    def header(self, name: str) -> str | None:
        """Return the first header named *name* (case-insensitive)."""
        wanted = name.lower()
        for hname, hvalue in self.headers:
            if hname.lower() == wanted:
                return hvalue
        return None


def _json_default(value: Any) -> Any:
    """Serialise the common non-JSON types handlers return."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, decimal.Decimal):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def coerce_result(value: Any) -> Response:
    """Convert a handler's return value to a Response.

    Dispatch order:

    1. ``Response``                -> pass through
    2. ``(body, int)``             -> body with that status
    3. ``(body, int, headers)``    -> body with status and headers
    4. anything else               -> 200 with the value as body
    """
    if isinstance(value, Response):
        return value
    if isinstance(value, tuple) and len(value) in (2, 3) and _is_status(value[1]):
        response = Response(body=value[0], status=value[1])
        if len(value) == 3:
            response = response.with_headers(value[2])
        return response
    return Response(body=value)


def _is_status(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def error_response(exc: HTTPError) -> Response:
    """Render an ``HTTPError`` in the standard envelope, keeping its headers."""
    response = Response.error(exc.detail or f"Error {exc.status}", exc.status)
    if exc.headers:
        response = response.with_headers(exc.headers)
    return response
