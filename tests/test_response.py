"""Tests for waypoint.http.response — JSON bodies and result coercion."""

import dataclasses
import datetime
import decimal
import enum
import uuid

import pytest

from waypoint.errors import NotFound, TooManyRequests
from waypoint.http.response import EMPTY, Response, coerce_result, error_response


class Stage(enum.Enum):
    NEW = "new"


@dataclasses.dataclass
class Lead:
    id: str
    name: str


class TestResponse:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.body is EMPTY
        assert response.is_empty
        assert response.body_bytes == b""

    def test_error_envelope(self) -> None:
        response = Response.error("Lead not found", 404)
        assert response.body == {"error": "Lead not found"}
        assert response.status == 404

    def test_compact_json(self) -> None:
        assert Response.json({"id": "7", "tags": [1, 2]}).body_bytes == b'{"id":"7","tags":[1,2]}'

    def test_null_body_is_not_empty(self) -> None:
        response = Response.json(None)
        assert not response.is_empty
        assert response.body_bytes == b"null"

    def test_transformations_return_new_instances(self) -> None:
        original = Response.json([])
        changed = original.with_status(201).with_header("X-Id", "1")
        assert original.status == 200
        assert original.headers == ()
        assert changed.status == 201
        assert changed.header("x-id") == "1"

    def test_with_headers_mapping_and_pairs(self) -> None:
        response = Response().with_headers({"A": "1"}).with_headers((("B", "2"),))
        assert response.headers == (("A", "1"), ("B", "2"))

    def test_serialises_common_types(self) -> None:
        body = {
            "lead": Lead(id="1", name="Jane"),
            "created": datetime.date(2024, 5, 1),
            "score": decimal.Decimal("8.50"),
            "ref": uuid.UUID("12345678-1234-5678-1234-567812345678"),
            "stage": Stage.NEW,
            "tags": {"b", "a"},
        }
        assert Response.json(body).body_bytes == (
            b'{"lead":{"id":"1","name":"Jane"},"created":"2024-05-01","score":"8.50",'
            b'"ref":"12345678-1234-5678-1234-567812345678","stage":"new","tags":["a","b"]}'
        )

    def test_unserialisable_raises(self) -> None:
        with pytest.raises(TypeError, match="not JSON serializable"):
            _ = Response.json(object()).body_bytes


class TestCoerceResult:
    def test_response_passthrough(self) -> None:
        response = Response.json({}, 202)
        assert coerce_result(response) is response

    def test_plain_value(self) -> None:
        assert coerce_result({"id": "1"}) == Response(body={"id": "1"})

    def test_body_and_status(self) -> None:
        assert coerce_result(({"id": "1"}, 201)) == Response(body={"id": "1"}, status=201)

    def test_body_status_headers(self) -> None:
        response = coerce_result(([], 200, {"X-Total": "0"}))
        assert response.header("X-Total") == "0"

    def test_bool_is_not_a_status(self) -> None:
        assert coerce_result(("ok", True)).body == ("ok", True)

    def test_list_is_a_body(self) -> None:
        assert coerce_result([{"a": 1}, 201]).body == [{"a": 1}, 201]

    def test_none_is_null_body(self) -> None:
        assert coerce_result(None).body is None


class TestErrorResponse:
    def test_not_found(self) -> None:
        response = error_response(NotFound())
        assert response.status == 404
        assert response.body == {"error": "Route not found"}

    def test_keeps_exception_headers(self) -> None:
        response = error_response(TooManyRequests(30))
        assert response.status == 429
        assert response.header("Retry-After") == "30"
