"""
Pytest configuration and shared fixtures for the relay tests.
"""

import asyncio
from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from relay.clients import get_demo_client, get_monnify_api
from relay.config import Settings, get_settings
from relay.main import app
from relay.services.api_helper import ApiHelper


PROVIDER_URL = "https://provider.test/api/v1"


class RecordingTransport(httpx.MockTransport):
    """
    MockTransport that keeps every request it receives.
    """

    def __init__(self, handler: Callable):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request):
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def make_api():
    """
    Factory building an ApiHelper backed by a recording mock transport.

    Returns (api, transport) so tests can inspect outbound requests.
    """
    def _make(handler: Callable, base_url: str = PROVIDER_URL):
        transport = RecordingTransport(handler)
        return ApiHelper(base_url, transport=transport), transport

    return _make


@pytest.fixture
def test_settings() -> Settings:
    """Settings with known credentials, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        monnify_api_key="key",
        monnify_secret_key="secret",
        demo_api_url="https://demo.test/"
    )


@pytest.fixture
def client(test_settings):
    """
    TestClient for the app with settings overridden.

    Server exceptions are returned as responses so the 500 handler can be
    asserted on.
    """
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def provider(client, make_api):
    """
    Route the app's Monnify calls to a mock handler.

    Call with a handler; returns the recording transport. Clients are closed
    on teardown.
    """
    opened: List[ApiHelper] = []

    def _install(handler: Callable) -> RecordingTransport:
        api, transport = make_api(handler)
        opened.append(api)
        app.dependency_overrides[get_monnify_api] = lambda: api
        return transport

    yield _install

    for api in opened:
        asyncio.run(api.aclose())


@pytest.fixture
def demo_upstream(client):
    """
    Route the demo endpoint's call to a mock handler.

    Call with a handler; returns the recording transport. Clients are closed
    on teardown.
    """
    opened: List[httpx.AsyncClient] = []

    def _install(handler: Callable) -> RecordingTransport:
        transport = RecordingTransport(handler)
        demo = httpx.AsyncClient(transport=transport, follow_redirects=True)
        opened.append(demo)
        app.dependency_overrides[get_demo_client] = lambda: demo
        return transport

    yield _install

    for demo in opened:
        asyncio.run(demo.aclose())
