"""Tests for waypoint.http.request — the immutable request value."""

import pytest

from waypoint.context import AppContext
from waypoint.errors import BadRequest
from waypoint.http.headers import Headers
from waypoint.http.request import Request


def _request(body: bytes = b"", content_type: str | None = None, **kwargs) -> Request:
    headers = {"Content-Type": content_type} if content_type else {}
    headers.update(kwargs.pop("headers", {}))
    return Request(
        method=kwargs.pop("method", "POST"),
        path=kwargs.pop("path", "/leads"),
        headers=Headers.from_dict(headers),
        body=body,
        **kwargs,
    )


class TestRequestBody:
    def test_json_body(self) -> None:
        request = _request(b'{"name": "Jane"}', "application/json; charset=utf-8")
        assert request.is_json
        assert request.data == {"name": "Jane"}
        assert request.get("name") == "Jane"

    def test_form_body(self) -> None:
        request = _request(b"name=Jane&tags=a&tags=b", "application/x-www-form-urlencoded")
        assert request.data == {"name": "Jane", "tags": "a"}

    def test_missing_content_type_is_form(self) -> None:
        assert _request(b"name=Jane").data == {"name": "Jane"}

    def test_empty_body(self) -> None:
        assert _request(b"", "application/json").data == {}

    def test_malformed_json(self) -> None:
        request = _request(b"{oops", "application/json")
        with pytest.raises(BadRequest, match="Malformed JSON body"):
            _ = request.data

    def test_get_on_non_mapping_body(self) -> None:
        request = _request(b"[1, 2]", "application/json")
        assert request.get("name", "fallback") == "fallback"

    def test_data_cached_across_copies(self) -> None:
        request = _request(b'{"a": 1}', "application/json")
        first = request.data
        assert request.with_route_params({"id": "1"}).data is first


class TestRequestMetadata:
    def test_bearer_token(self) -> None:
        request = _request(headers={"Authorization": "Bearer abc.def"})
        assert request.bearer_token == "abc.def"

    @pytest.mark.parametrize("value", ["Basic abc", "Bearer", "Bearer   "])
    def test_bearer_token_absent(self, value: str) -> None:
        assert _request(headers={"Authorization": value}).bearer_token is None

    def test_client_ip_ignores_forwarded_for(self) -> None:
        request = _request(
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}, client=("10.0.0.1", 1)
        )
        assert request.client_ip == "10.0.0.1"

    def test_forwarded_for_first_hop(self) -> None:
        request = _request(headers={"X-Forwarded-For": " 203.0.113.9 , 10.0.0.1"})
        assert request.forwarded_for == "203.0.113.9"

    def test_forwarded_for_real_ip(self) -> None:
        assert _request(headers={"X-Real-IP": "198.51.100.7"}).forwarded_for == "198.51.100.7"

    def test_forwarded_for_absent(self) -> None:
        assert _request(client=("10.0.0.1", 1)).forwarded_for is None

    def test_client_ip_from_transport(self) -> None:
        assert _request(client=("192.0.2.4", 5000)).client_ip == "192.0.2.4"

    def test_client_ip_unknown(self) -> None:
        assert _request().client_ip == "unknown"

    @pytest.mark.parametrize(("value", "expected"), [("12", 12), ("abc", None)])
    def test_content_length(self, value: str, expected: int | None) -> None:
        assert _request(headers={"Content-Length": value}).content_length == expected

    def test_frozen(self) -> None:
        request = _request()
        with pytest.raises(AttributeError):
            request.path = "/other"  # type: ignore[misc]


class TestRouteParams:
    def test_with_route_params_copies(self) -> None:
        request = _request()
        bound = request.with_route_params({"id": "7"})
        assert bound.param("id") == "7"
        assert request.param("id") is None
        assert bound.param("missing", "default") == "default"

    def test_state_shared_between_copies(self) -> None:
        request = _request()
        bound = request.with_route_params({"id": "7"})
        bound.state["user"] = "u1"
        assert request.state["user"] == "u1"


class TestFromAsgi:
    def test_builds_request(self) -> None:
        context = AppContext()
        scope = {
            "type": "http",
            "method": "get",
            "path": "/api/leads",
            "query_string": b"page=2",
            "headers": [(b"Accept", b"application/json")],
            "client": ["127.0.0.1", 1234],
        }
        request = Request.from_asgi(scope, b"", path="/leads", context=context)

        assert request.method == "GET"
        assert request.path == "/leads"
        assert request.raw_path == "/api/leads"
        assert request.query["page"] == "2"
        assert request.headers["accept"] == "application/json"
        assert request.client == ("127.0.0.1", 1234)
        assert request.context is context
