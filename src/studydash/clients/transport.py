"""JSON-over-HTTP transport shared by the remote service clients."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from studydash.config.settings import ApiConfig
from studydash.errors import TransportError, ValidationError

logger = logging.getLogger(__name__)


class ApiTransport:
    """Thin wrapper around ``httpx.AsyncClient``.

    Non-2xx responses and connection failures are turned into
    ``TransportError`` here, with the kind decided from the status code.
    Response bodies are decoded as JSON; an undecodable body raises
    ``ValidationError``.
    """

    def __init__(self, config: ApiConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )

    async def __aenter__(self) -> "ApiTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        params: Optional[dict] = None,
        files: Optional[dict] = None,
        data: Optional[dict] = None,
    ) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(
                method, path, json=json_body, params=params, files=files, data=data,
            )
        except httpx.TransportError as e:
            raise TransportError.network(f"{method} {path}: {e}") from e

        if not response.is_success:
            raise TransportError.from_status(
                response.status_code, f"{method} {path} returned {response.status_code}"
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ValidationError(f"{method} {path}: response is not JSON") from e

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json_body: Any = None) -> Any:
        return await self.request("POST", path, json_body=json_body)

    async def put(self, path: str, json_body: Any = None) -> Any:
        return await self.request("PUT", path, json_body=json_body)
