"""
Unit tests for the generic request client.

Tests cover:
- Method, path and body of outbound calls for every verb
- Success decoding and provider error pass-through
- Transport failures returning None instead of raising
- Per-call configuration merging
- Concurrent calls on one client
"""

import asyncio
import json

import httpx
import pytest
from structlog.testing import capture_logs


def ok_json(payload, status_code=200):
    return lambda request: httpx.Response(status_code, json=payload)


def refuse_connection(request: httpx.Request):
    raise httpx.ConnectError("Connection refused", request=request)


class TestVerbs:
    """Each wrapper issues exactly one call with its method, path and body."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("verb", ["post", "put", "patch"])
    async def test_body_verbs_send_json_body(self, make_api, verb):
        api, transport = make_api(ok_json({}))

        async with api:
            await getattr(api, verb)("/items/1", {"name": "widget", "qty": 2})

        assert len(transport.requests) == 1
        sent = transport.requests[0]
        assert sent.method == verb.upper()
        assert str(sent.url) == "https://provider.test/api/v1/items/1"
        assert json.loads(sent.content) == {"name": "widget", "qty": 2}
        assert sent.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("verb", ["get", "delete"])
    async def test_bodyless_verbs_send_no_body(self, make_api, verb):
        api, transport = make_api(ok_json({}))

        async with api:
            await getattr(api, verb)("/items/1")

        assert len(transport.requests) == 1
        sent = transport.requests[0]
        assert sent.method == verb.upper()
        assert str(sent.url) == "https://provider.test/api/v1/items/1"
        assert sent.content == b""

    @pytest.mark.asyncio
    async def test_request_ignores_body_for_get(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.request("get", "/items", {"ignored": True})

        sent = transport.requests[0]
        assert sent.method == "GET"
        assert sent.content == b""

    @pytest.mark.asyncio
    async def test_post_without_data_sends_no_body(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.post("/auth/login")

        assert transport.requests[0].content == b""

    @pytest.mark.asyncio
    async def test_post_with_empty_dict_sends_empty_object(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.post("/auth/login", {})

        assert json.loads(transport.requests[0].content) == {}

    def test_base_url_is_exposed(self, make_api):
        api, _ = make_api(ok_json({}))
        assert api.base_url == "https://provider.test/api/v1"


class TestSuccess:

    @pytest.mark.asyncio
    async def test_get_returns_decoded_body(self, make_api):
        api, _ = make_api(ok_json({"x": 1}))

        async with api:
            assert await api.get("/foo") == {"x": 1}

    @pytest.mark.asyncio
    async def test_list_body_is_passed_through(self, make_api):
        api, _ = make_api(ok_json([1, 2, 3]))

        async with api:
            assert await api.get("/numbers") == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, make_api):
        api, _ = make_api(lambda request: httpx.Response(204))

        async with api:
            result = await api.send("DELETE", "/items/1")

        assert result.kind == "success"
        assert result.data is None
        assert result.status_code == 204

    @pytest.mark.asyncio
    async def test_redirect_is_followed(self, make_api):
        def handler(request: httpx.Request):
            if request.url.path.endswith("/old"):
                return httpx.Response(302, headers={"location": "https://provider.test/api/v1/new"})
            return httpx.Response(200, json={"x": 1})

        api, transport = make_api(handler)

        async with api:
            result = await api.send("GET", "/old")

        assert result.kind == "success"
        assert result.data == {"x": 1}
        assert result.status_code == 200
        assert [r.url.path for r in transport.requests] == ["/api/v1/old", "/api/v1/new"]

    @pytest.mark.asyncio
    async def test_send_tags_success(self, make_api):
        api, _ = make_api(ok_json({"x": 1}, status_code=201))

        async with api:
            result = await api.send("POST", "/items", {"x": 1})

        assert result.ok
        assert result.kind == "success"
        assert result.data == {"x": 1}
        assert result.status_code == 201


class TestFailures:
    """Faults are returned, never raised."""

    @pytest.mark.asyncio
    async def test_provider_error_body_is_returned(self, make_api):
        api, _ = make_api(ok_json({"message": "bad creds"}, status_code=401))

        async with api:
            assert await api.post("/auth/login", {}) == {"message": "bad creds"}

    @pytest.mark.asyncio
    async def test_send_tags_provider_error(self, make_api):
        api, _ = make_api(ok_json({"message": "bad creds"}, status_code=401))

        async with api:
            result = await api.send("POST", "/auth/login", {})

        assert not result.ok
        assert result.kind == "provider_error"
        assert result.data == {"message": "bad creds"}
        assert result.status_code == 401

    @pytest.mark.asyncio
    async def test_connection_refused_returns_none(self, make_api):
        api, _ = make_api(refuse_connection)

        async with api:
            assert await api.get("/foo") is None

    @pytest.mark.asyncio
    async def test_connection_refused_is_tagged_empty(self, make_api):
        api, _ = make_api(refuse_connection)

        async with api:
            result = await api.send("GET", "/foo")

        assert result.kind == "empty"
        assert result.status_code is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self, make_api):
        def time_out(request):
            raise httpx.ReadTimeout("timed out", request=request)

        api, _ = make_api(time_out)

        async with api:
            assert await api.get("/slow") is None

    @pytest.mark.asyncio
    async def test_non_json_error_body_is_returned_as_text(self, make_api):
        api, _ = make_api(lambda request: httpx.Response(502, text="Bad Gateway"))

        async with api:
            result = await api.send("GET", "/foo")

        assert result.kind == "provider_error"
        assert result.data == "Bad Gateway"
        assert result.status_code == 502

    @pytest.mark.asyncio
    async def test_error_without_body_returns_none(self, make_api):
        api, _ = make_api(lambda request: httpx.Response(500))

        async with api:
            result = await api.send("GET", "/foo")

        assert result.kind == "empty"
        assert result.data is None
        assert result.status_code == 500

    @pytest.mark.asyncio
    async def test_undecodable_success_body_returns_none(self, make_api):
        api, _ = make_api(lambda request: httpx.Response(200, text="<html>ok</html>"))

        async with api:
            result = await api.send("GET", "/foo")

        assert result.kind == "empty"
        assert result.data is None
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_failure_is_logged_with_call_context(self, make_api):
        api, _ = make_api(ok_json({"message": "bad creds"}, status_code=401))

        with capture_logs() as logs:
            async with api:
                await api.post("/auth/login", {})

        failures = [entry for entry in logs if entry["event"] == "provider_request_failed"]
        assert len(failures) == 1
        assert failures[0]["log_level"] == "warning"
        assert failures[0]["status_code"] == 401
        assert failures[0]["method"] == "POST"
        assert failures[0]["url"] == "/auth/login"
        assert failures[0]["error"] == {"message": "bad creds"}
        assert failures[0]["call_id"]


class TestConfig:
    """Extra per-call configuration is merged into the outbound call."""

    @pytest.mark.asyncio
    async def test_custom_header_is_sent(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.post("/auth/login", {}, {"headers": {"authorization": "Basic abc"}})

        assert transport.requests[0].headers["authorization"] == "Basic abc"

    @pytest.mark.asyncio
    async def test_query_params_are_sent(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.get("/transactions", {"params": {"page": 2}})

        assert transport.requests[0].url.params["page"] == "2"

    @pytest.mark.asyncio
    async def test_per_call_values_take_precedence(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.post("/items", {"from": "data"}, {"json": {"from": "config"}})

        assert json.loads(transport.requests[0].content) == {"from": "config"}

    @pytest.mark.asyncio
    async def test_no_timeout_by_default(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.get("/foo")

        timeout = transport.requests[0].extensions["timeout"]
        assert timeout == {"connect": None, "read": None, "write": None, "pool": None}

    @pytest.mark.asyncio
    async def test_per_call_timeout(self, make_api):
        api, transport = make_api(ok_json({}))

        async with api:
            await api.get("/foo", {"timeout": 5.0})

        assert transport.requests[0].extensions["timeout"]["read"] == 5.0


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_interleaved_calls_get_their_own_results(self, make_api):
        async def echo_after_delay(request: httpx.Request):
            delay = float(request.url.params["delay"])
            await asyncio.sleep(delay)
            return httpx.Response(200, json={"path": request.url.path})

        api, transport = make_api(echo_after_delay)
        # Later calls finish first
        delays = [0.05, 0.04, 0.03, 0.02, 0.01]

        async with api:
            results = await asyncio.gather(*(
                api.get(f"/items/{i}", {"params": {"delay": d}})
                for i, d in enumerate(delays)
            ))

        assert results == [{"path": f"/api/v1/items/{i}"} for i in range(len(delays))]
        assert len(transport.requests) == len(delays)

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_concurrent_success(self, make_api):
        def handler(request: httpx.Request):
            if request.url.path.endswith("/down"):
                raise httpx.ConnectError("Connection refused", request=request)
            return httpx.Response(200, json={"up": True})

        api, _ = make_api(handler)

        async with api:
            down, up = await asyncio.gather(api.get("/down"), api.get("/up"))

        assert down is None
        assert up == {"up": True}
