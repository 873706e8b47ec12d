"""Tests for waypoint.app — App lifecycle, registration, and ASGI entry."""

import asyncio
from typing import Any

import pytest

from waypoint.app import App
from waypoint.config import AppConfig
from waypoint.context import AppContext
from waypoint.errors import ConfigurationError
from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.testing import TestClient


class LeadsController:
    def list(self, request, params):
        return [{"id": "1"}]

    def show(self, request, params):
        return {"id": params["id"]}


class TestAppRegistration:
    def test_decorator_form(self) -> None:
        app = App()

        @app.get("/leads/{id}")
        def get_lead(request, params):
            return params

        assert len(app.routes) == 1
        assert app.routes[0].method == "GET"
        assert app.routes[0].handler is get_lead

    def test_decorator_returns_function(self) -> None:
        app = App()

        def get_lead(request, params):
            return params

        assert app.get("/leads/{id}")(get_lead) is get_lead

    def test_direct_call_returns_route(self) -> None:
        app = App()
        route = app.post("/auth/login", lambda request, params: {}, skip_auth=True)
        assert route.skip_auth is True
        assert route.path == "/auth/login"

    def test_route_decorator_with_method(self) -> None:
        app = App()

        @app.route("put", "/leads/{id}")
        def update(request, params):
            return params

        assert app.routes[0].method == "PUT"

    def test_controller_pair(self) -> None:
        app = App()
        app.get("/leads", (LeadsController, "list"))
        app.get("/leads/{id}", (LeadsController, "show"))
        assert app.routes[0].handler_name.endswith("LeadsController.list")

    def test_all_method_helpers(self) -> None:
        app = App()
        handler = lambda request, params: None  # noqa: E731
        app.get("/r", handler)
        app.post("/r", handler)
        app.put("/r", handler)
        app.patch("/r", handler)
        app.delete("/r", handler)
        assert [r.method for r in app.routes] == ["GET", "POST", "PUT", "PATCH", "DELETE"]

    def test_invalid_path_raises_at_registration(self) -> None:
        app = App()
        with pytest.raises(ConfigurationError):
            app.get("/leads/{id}/notes/{id}", lambda request, params: None)

    def test_invalid_middleware(self) -> None:
        app = App()
        with pytest.raises(ConfigurationError, match="Middleware must define"):
            app.use(42)  # type: ignore[arg-type]


class TestFreeze:
    async def test_register_after_first_request(self) -> None:
        app = App()
        app.get("/leads", lambda request, params: [])

        async with TestClient(app) as client:
            await client.get("/leads")

        with pytest.raises(RuntimeError, match="Cannot modify"):
            app.get("/contacts", lambda request, params: [])

    async def test_use_after_freeze(self) -> None:
        app = App()
        await app.dispatch(Request(method="GET", path="/"))
        with pytest.raises(RuntimeError):
            app.use(lambda request: None)

    async def test_hooks_after_freeze(self) -> None:
        app = App()
        await app.dispatch(Request(method="GET", path="/"))
        with pytest.raises(RuntimeError):
            app.on_startup(lambda: None)

    def test_freeze_is_idempotent(self) -> None:
        app = App()
        first = app._ensure_frozen()
        assert app._ensure_frozen() is first


class TestContext:
    async def test_handler_reads_services(self) -> None:
        leads = {"7": {"id": "7", "name": "Jane"}}
        app = App(context=AppContext(services={"leads": leads}))

        @app.get("/leads/{id}")
        def get_lead(request, params):
            return request.context.service("leads")[params["id"]]

        async with TestClient(app) as client:
            response = await client.get("/leads/7")
        assert response.json() == {"id": "7", "name": "Jane"}

    def test_default_context_carries_config(self) -> None:
        config = AppConfig(port=9000)
        app = App(config)
        assert app.context.config is config


class TestAppDispatch:
    async def test_dispatch_in_process(self) -> None:
        app = App()
        app.get("/leads/{id}", lambda request, params: Response.json(params, 202))

        response = await app.dispatch(Request(method="GET", path="/leads/4"))
        assert response.status == 202
        assert response.body == {"id": "4"}

    async def test_non_http_scope_ignored(self) -> None:
        app = App()
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return {}

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "websocket"}, receive, send)
        assert sent == []

    async def test_form_body(self) -> None:
        app = App()
        app.post("/auth/login", lambda request, params: {"user": request.get("username")})

        async with TestClient(app) as client:
            response = await client.post(
                "/auth/login",
                body=b"username=jane&password=x",
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        assert response.json() == {"user": "jane"}

    async def test_json_body(self) -> None:
        app = App()
        app.post("/leads", lambda request, params: ({"name": request.get("name")}, 201))

        async with TestClient(app) as client:
            response = await client.post("/leads", json={"name": "Jane"})
        assert response.status == 201
        assert response.json() == {"name": "Jane"}

    async def test_query_params(self) -> None:
        app = App()
        app.get(
            "/leads",
            lambda request, params: {
                "page": request.query.get_int("page", 1),
                "status": request.query.get("status"),
            },
        )

        async with TestClient(app) as client:
            response = await client.get("/leads?page=3", query={"status": "new"})
        assert response.json() == {"page": 3, "status": "new"}


async def _lifespan_exchange(
    app: App,
) -> tuple[list[dict[str, Any]], bool]:
    """Drive the full lifespan protocol and return messages sent by the app.

    Returns (sent_messages, startup_ok).
    """
    sent: list[dict[str, Any]] = []
    receive_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def receive() -> dict[str, Any]:
        return await receive_queue.get()

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    scope: dict[str, Any] = {
        "type": "lifespan",
        "asgi": {"version": "3.0", "spec_version": "2.0"},
    }

    task = asyncio.create_task(app(scope, receive, send))

    await receive_queue.put({"type": "lifespan.startup"})
    await asyncio.sleep(0.01)

    startup_ok = any(m["type"] == "lifespan.startup.complete" for m in sent)
    if startup_ok:
        await receive_queue.put({"type": "lifespan.shutdown"})
    await asyncio.wait_for(task, timeout=2.0)
    return sent, startup_ok


class TestLifespanProtocol:
    async def test_happy_path(self) -> None:
        app = App()
        events: list[str] = []

        @app.on_startup
        async def connect():
            events.append("startup")

        @app.on_shutdown
        def disconnect():
            events.append("shutdown")

        sent, ok = await _lifespan_exchange(app)

        assert ok is True
        assert events == ["startup", "shutdown"]
        types = [m["type"] for m in sent]
        assert types == ["lifespan.startup.complete", "lifespan.shutdown.complete"]

    async def test_startup_failure(self) -> None:
        app = App()

        @app.on_startup
        async def connect():
            msg = "Database connection refused"
            raise ConnectionError(msg)

        sent, ok = await _lifespan_exchange(app)

        assert ok is False
        failed = [m for m in sent if m["type"] == "lifespan.startup.failed"]
        assert len(failed) == 1
        assert "Database connection refused" in failed[0]["message"]

    async def test_lifespan_freezes_app(self) -> None:
        app = App()
        await _lifespan_exchange(app)
        with pytest.raises(RuntimeError):
            app.get("/late", lambda request, params: None)

    async def test_test_client_runs_hooks(self) -> None:
        app = App()
        events: list[str] = []
        app.on_startup(lambda: events.append("startup"))
        app.on_shutdown(lambda: events.append("shutdown"))

        async with TestClient(app):
            assert events == ["startup"]
        assert events == ["startup", "shutdown"]
