"""Tests for the HTTP transport boundary."""

from __future__ import annotations

import httpx
import pytest

from conftest import connect_error
from studydash.errors import ErrorKind, TransportError, ValidationError


class TestApiTransport:
    @pytest.mark.asyncio
    async def test_post_sends_json(self, transport, backend):
        data = await transport.post("/api/rl/update", {"reward": 1.0})
        assert data == {"ok": True}
        assert backend.calls == [("POST", "/api/rl/update", {"reward": 1.0})]

    @pytest.mark.asyncio
    async def test_server_error(self, transport, backend):
        backend.routes["/api/courses"] = 500
        with pytest.raises(TransportError) as exc_info:
            await transport.get("/api/courses")
        assert exc_info.value.kind == ErrorKind.SERVER_ERROR
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_unknown_path_is_not_found(self, transport):
        with pytest.raises(TransportError) as exc_info:
            await transport.get("/api/nowhere")
        assert exc_info.value.kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_connection_failure_is_network_error(self, transport, backend):
        backend.routes["/api/courses"] = connect_error
        with pytest.raises(TransportError) as exc_info:
            await transport.get("/api/courses")
        assert exc_info.value.kind == ErrorKind.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_non_json_body(self, transport, backend):
        backend.routes["/api/courses"] = httpx.Response(200, text="<html>oops</html>")
        with pytest.raises(ValidationError):
            await transport.get("/api/courses")

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, transport, backend):
        backend.routes["/api/progress/c1"] = httpx.Response(204)
        assert await transport.put("/api/progress/c1", {"progress": 50}) is None

    @pytest.mark.asyncio
    async def test_aclose(self, transport):
        async with transport:
            pass
        assert transport._client.is_closed
