"""Tests for roost.server.dispatcher — match, invoke, respond."""

import asyncio
import logging
import time
from pathlib import Path

import pytest

from roost import Redirect, Request, Response, controller, get, post
from roost.discovery.descriptor import ParamShape
from roost.discovery.scanner import StaticScanner
from roost.errors import HTTPError, NotFound
from roost.registry import ComponentRegistry
from roost.server.dispatcher import (
    NOT_FOUND_BODY,
    Dispatcher,
    RequestContext,
    supply,
    to_response,
)
from roost.static import StaticAssets


@controller("/demo")
class DemoController:
    @get("/")
    def index(self) -> str:
        return "<p>index</p>"

    @get("/users/{id}")
    def user(self, id: str) -> str:
        return f"user {id}"

    @get("/pair/{a}/{b}")
    def pair(self, params: dict[str, str]) -> str:
        return f"{params['a']}-{params['b']}"

    @get("/missing-text")
    def missing_text(self, name: str) -> str:
        return f"[{name}]"

    @get("/unknown")
    def unknown(self, count: int) -> str:
        return f"count={count}"

    @post("/echo")
    async def echo(self, request: Request) -> str:
        return f"{request.method}:{await request.text()}"

    @get("/number")
    def number(self) -> int:
        return 42

    @get("/nothing")
    def nothing(self) -> None:
        return None

    @get("/bytes")
    def raw(self) -> bytes:
        return b"\x00\x01"

    @get("/response")
    def response(self) -> Response:
        return Response("created", status=201).with_header("X-Id", "7")

    @get("/redirect")
    def redirect(self) -> Redirect:
        return Redirect("/demo/")

    @get("/fail")
    def fail(self) -> str:
        raise ValueError("database unavailable")

    @get("/async-fail")
    async def async_fail(self) -> str:
        raise RuntimeError("async boom")

    @get("/forbidden")
    def forbidden(self) -> str:
        raise HTTPError(403, "Forbidden", headers=(("X-Reason", "policy"),))

    @get("/gone")
    def gone(self) -> str:
        raise NotFound("No such thing")

    @get("/slow")
    def slow(self) -> str:
        time.sleep(0.01)
        return "slow"


@controller("/load")
class LoadController:
    @get("/busy")
    def busy(self) -> str:
        time.sleep(0.5)
        return "done"

    @get("/quick")
    def quick(self) -> str:
        return "quick"


@pytest.fixture
def dispatcher() -> Dispatcher:
    registry = ComponentRegistry()
    registry.bootstrap(StaticScanner(DemoController).scan())
    return Dispatcher(registry.route_table)


def _request(method: str, path: str, body: bytes = b"") -> Request:
    async def receive() -> dict:
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(method=method, path=path, _receive=receive)


class TestMatchAndInvoke:
    async def test_no_params(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/"))
        assert response.status == 200
        assert response.text == "<p>index</p>"
        assert response.content_type == "text/html; charset=utf-8"

    async def test_text_param(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/users/42"))
        assert response.text == "user 42"

    async def test_params_mapping(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/pair/x/y"))
        assert response.text == "x-y"

    async def test_unmatched_text_param_is_empty(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/missing-text"))
        assert response.text == "[]"

    async def test_unknown_shape_gets_none(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/unknown"))
        assert response.status == 200
        assert response.text == "count=None"

    async def test_exchange_param_async_handler(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("POST", "/demo/echo", b"hello"))
        assert response.text == "POST:hello"

    async def test_sync_handler_runs_in_thread(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/slow"))
        assert response.text == "slow"


class TestRespond:
    async def test_non_text_is_stringified(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/number"))
        assert response.status == 200
        assert response.text == "42"

    async def test_none_is_empty(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/nothing"))
        assert response.status == 200
        assert response.body == ""

    async def test_bytes_verbatim(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/bytes"))
        assert response.body_bytes == b"\x00\x01"

    async def test_response_passthrough(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/response"))
        assert response.status == 201
        assert response.header("x-id") == "7"

    async def test_redirect(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/redirect"))
        assert response.status == 302
        assert response.header("Location") == "/demo/"


class TestNotFound:
    async def test_unknown_path(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/nope"))
        assert response.status == 404
        assert response.text == NOT_FOUND_BODY

    async def test_wrong_method(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("DELETE", "/demo/"))
        assert response.status == 404

    async def test_partial_path(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/users/1/extra"))
        assert response.status == 404

    async def test_exact_body(self) -> None:
        assert NOT_FOUND_BODY == "<html><body><h1>404 - Not Found</h1></body></html>"


class TestFailures:
    async def test_handler_failure_is_500(
        self, dispatcher: Dispatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="roost.server"):
            response = await dispatcher.dispatch(_request("GET", "/demo/fail"))
        assert response.status == 500
        assert response.text == "Internal Server Error: database unavailable"
        assert "500 GET /demo/fail" in caplog.text

    async def test_async_failure_is_500(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/async-fail"))
        assert response.status == 500
        assert "async boom" in response.text

    async def test_dispatcher_keeps_serving_after_failure(self, dispatcher: Dispatcher) -> None:
        await dispatcher.dispatch(_request("GET", "/demo/fail"))
        response = await dispatcher.dispatch(_request("GET", "/demo/"))
        assert response.status == 200

    async def test_hidden_error_details(self) -> None:
        registry = ComponentRegistry()
        registry.bootstrap(StaticScanner(DemoController).scan())
        dispatcher = Dispatcher(registry.route_table, expose_errors=False)
        response = await dispatcher.dispatch(_request("GET", "/demo/fail"))
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_http_error_keeps_status(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/forbidden"))
        assert response.status == 403
        assert response.text == "Forbidden"
        assert response.header("X-Reason") == "policy"

    async def test_not_found_raised_by_handler(self, dispatcher: Dispatcher) -> None:
        response = await dispatcher.dispatch(_request("GET", "/demo/gone"))
        assert response.status == 404
        assert response.text == "No such thing"


class TestStatic:
    @pytest.fixture
    def static_dispatcher(self, tmp_path: Path, dispatcher: Dispatcher) -> Dispatcher:
        (tmp_path / "css").mkdir()
        (tmp_path / "css" / "site.css").write_text("body {}")
        (tmp_path / "robots.txt").write_text("User-agent: *")
        static = StaticAssets(tmp_path, prefix="/static")
        return Dispatcher(dispatcher.route_table, static=static)

    async def test_asset(self, static_dispatcher: Dispatcher) -> None:
        response = await static_dispatcher.dispatch(_request("GET", "/static/css/site.css"))
        assert response.status == 200
        assert response.body_bytes == b"body {}"
        assert response.content_type == "text/css"
        assert response.header("Cache-Control") == "public, max-age=3600"

    async def test_missing_asset(self, static_dispatcher: Dispatcher) -> None:
        response = await static_dispatcher.dispatch(_request("GET", "/static/nope.js"))
        assert response.status == 404
        assert response.body_bytes == b""

    async def test_robots_alias(self, static_dispatcher: Dispatcher) -> None:
        response = await static_dispatcher.dispatch(_request("GET", "/robots.txt"))
        assert response.status == 200
        assert response.text == "User-agent: *"

    async def test_traversal_is_not_found(self, static_dispatcher: Dispatcher) -> None:
        response = await static_dispatcher.dispatch(_request("GET", "/static/../secret"))
        assert response.status == 404

    async def test_routes_still_served(self, static_dispatcher: Dispatcher) -> None:
        response = await static_dispatcher.dispatch(_request("GET", "/demo/"))
        assert response.text == "<p>index</p>"

    async def test_root_prefix_keeps_routes_reachable(
        self, tmp_path: Path, dispatcher: Dispatcher
    ) -> None:
        (tmp_path / "robots.txt").write_text("User-agent: *")
        root = Dispatcher(dispatcher.route_table, static=StaticAssets(tmp_path, prefix="/"))
        response = await root.dispatch(_request("GET", "/demo/users/7"))
        assert response.text == "user 7"
        robots = await root.dispatch(_request("GET", "/robots.txt"))
        assert robots.text == "User-agent: *"


class TestHelpers:
    def test_supply(self) -> None:
        request = _request("GET", "/")
        ctx = RequestContext(params={"id": "3"}, request=request)
        assert supply(ParamShape.EXCHANGE, "request", ctx) is request
        assert supply(ParamShape.PARAMS, "params", ctx) == {"id": "3"}
        assert supply(ParamShape.TEXT, "id", ctx) == "3"
        assert supply(ParamShape.TEXT, "other", ctx) == ""
        assert supply(ParamShape.UNKNOWN, "x", ctx) is None

    def test_to_response_str(self) -> None:
        response = to_response("hi")
        assert (response.status, response.body) == (200, "hi")

    def test_to_response_object(self) -> None:
        class Thing:
            def __str__(self) -> str:
                return "thing"

        assert to_response(Thing()).text == "thing"


class TestConcurrency:
    @pytest.fixture
    def load_dispatcher(self) -> Dispatcher:
        registry = ComponentRegistry()
        registry.bootstrap(StaticScanner(LoadController).scan())
        return Dispatcher(registry.route_table)

    async def test_slow_sync_handlers_run_side_by_side(
        self, load_dispatcher: Dispatcher
    ) -> None:
        start = time.perf_counter()
        responses = await asyncio.gather(
            *(load_dispatcher.dispatch(_request("GET", "/load/busy")) for _ in range(60))
        )
        elapsed = time.perf_counter() - start
        assert [r.text for r in responses] == ["done"] * 60
        assert elapsed < 0.9

    async def test_fast_route_answers_while_slow_ones_are_busy(
        self, load_dispatcher: Dispatcher
    ) -> None:
        busy = [
            asyncio.create_task(load_dispatcher.dispatch(_request("GET", "/load/busy")))
            for _ in range(50)
        ]
        await asyncio.sleep(0.05)
        start = time.perf_counter()
        response = await load_dispatcher.dispatch(_request("GET", "/load/quick"))
        elapsed = time.perf_counter() - start
        assert response.text == "quick"
        assert elapsed < 0.3
        assert not all(task.done() for task in busy)
        await asyncio.gather(*busy)
