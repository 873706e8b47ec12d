"""ASGI response sending — translates a waypoint Response to ASGI messages."""

import logging

from waypoint._internal.asgi import Send
from waypoint.http.response import CONTENT_TYPE, Response

logger = logging.getLogger("waypoint.dispatch")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_body(response: Response) -> tuple[Response, bytes]:
    """Serialise *response*; an unserialisable body becomes a 500 envelope."""
    try:
        return response, response.body_bytes
    except (TypeError, ValueError):
        logger.exception("Response body for status %d is not JSON serialisable", response.status)
        fallback = Response.error("internal error", 500)
        return fallback, fallback.body_bytes


async def send_response(response: Response, send: Send) -> Response:
    """Translate a waypoint Response into ASGI send() calls.

    Returns the response actually sent (differs from *response* only if
    its body could not be serialised).
    """
    response, body = encode_body(response)
    if not _body_allowed(response.status):
        body = b""

    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", CONTENT_TYPE.encode("latin-1")),
    ]
    for name, value in response.headers:
        if name.lower() in ("content-type", "content-length"):
            continue
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
    return response
