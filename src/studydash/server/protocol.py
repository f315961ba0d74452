"""JSON-lines protocol messages exchanged with the dashboard front-end."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional

from studydash.errors import AppError


@dataclass
class Request:
    """Incoming request from the front-end."""
    id: int
    method: str
    params: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> Request:
        if "method" not in data:
            raise ValueError("Request is missing 'method'")
        return cls(
            id=data.get("id", 0),
            method=data["method"],
            params=data.get("params") or {},
        )


@dataclass
class Response:
    """Outgoing response; exactly one of result/error is written."""
    id: int
    result: Optional[dict] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def from_exception(cls, req_id: int, exc: Exception) -> Response:
        if isinstance(exc, AppError):
            return cls(id=req_id, error=exc.message, error_kind=exc.kind.value)
        return cls(id=req_id, error=str(exc))

    def to_json_line(self) -> str:
        d: dict = {"id": self.id}
        if self.error is not None:
            d["error"] = self.error
            if self.error_kind is not None:
                d["errorKind"] = self.error_kind
        else:
            d["result"] = self.result
        return json.dumps(d) + "\n"


@dataclass
class Notification:
    """Server-initiated message (no id, no response expected)."""
    method: str
    params: dict = field(default_factory=dict)

    def to_json_line(self) -> str:
        return json.dumps({"method": self.method, "params": self.params}) + "\n"
