"""Request body decoding.

JSON when the content type says so (``application/json`` or any
``+json`` suffix), URL-encoded form otherwise. Form fields keep their
first value, matching how PHP-style clients post scalar fields.
"""

import json
from typing import Any
from urllib.parse import parse_qs

from waypoint.errors import BadRequest


def is_json_content_type(content_type: str | None) -> bool:
    """True for ``application/json`` and ``application/*+json``."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or (
        media_type.startswith("application/") and media_type.endswith("+json")
    )


def decode_body(raw: bytes, content_type: str | None) -> Any:
    """Decode *raw* according to *content_type*.

    An empty body decodes to ``{}`` for either encoding.

    Raises:
        BadRequest: If the body is declared JSON but does not parse, or
            is not valid UTF-8.
    """
    if not raw.strip():
        return {}

    if is_json_content_type(content_type):
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise BadRequest("Malformed JSON body") from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BadRequest("Request body is not valid UTF-8") from exc
    parsed = parse_qs(text, keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items()}
