"""Shared fixtures for studydash tests."""

from __future__ import annotations

import json

import httpx
import pytest

from studydash.clients.llm import LLMClient
from studydash.clients.rl import RLClient
from studydash.clients.transport import ApiTransport
from studydash.config.settings import ApiConfig, Settings

BASE_URL = "http://dashboard.test"

DEFAULT_ROUTES = {
    "/api/llm/generate-question": {"question": "What is the capital of France?", "correctAnswer": "Paris"},
    "/api/llm/generate-feedback": {"feedback": "Paris is the capital.", "hint": "Think of the Eiffel Tower."},
    "/api/rl/next-action": {"nextTopic": "european-capitals", "learningStyle": "visual"},
    "/api/rl/update": {"ok": True},
}


class FakeBackend:
    """In-process stand-in for the remote API.

    ``routes`` maps a path to a JSON body, an ``httpx.Response``, an int status
    code, an exception instance to raise, or a callable taking the request.
    Every request is recorded in ``calls`` as (method, path, decoded body).
    """

    def __init__(self, routes=None):
        self.routes = dict(DEFAULT_ROUTES if routes is None else routes)
        self.calls: list[tuple[str, str, object]] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = None
        if request.content and request.headers.get("content-type", "").startswith("application/json"):
            body = json.loads(request.content)
        self.calls.append((request.method, request.url.path, body))

        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404)
        if callable(route) and not isinstance(route, type):
            route = route(request)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, int):
            return httpx.Response(route)
        return httpx.Response(200, json=route)

    def paths(self) -> list[str]:
        return [path for _, path, _ in self.calls]

    def bodies(self, path: str) -> list:
        return [body for _, p, body in self.calls if p == path]


def connect_error(request: httpx.Request) -> httpx.ConnectError:
    return httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api_config():
    return ApiConfig(base_url=BASE_URL, timeout_seconds=5)


@pytest.fixture
def transport(backend, api_config):
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(backend.handle))
    return ApiTransport(api_config, client=client)


@pytest.fixture
def llm(transport):
    return LLMClient(transport)


@pytest.fixture
def rl(transport):
    return RLClient(transport)


@pytest.fixture
def settings(tmp_path, api_config):
    return Settings(api=api_config, data_dir=tmp_path / "data")
