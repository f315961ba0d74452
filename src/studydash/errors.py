"""Error taxonomy shared by the HTTP clients and the quiz session."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    SERVER_ERROR = "SERVER_ERROR"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK_ERROR: "Network error. Please check your connection.",
    ErrorKind.UNAUTHORIZED: "Unauthorized access. Please log in again.",
    ErrorKind.SERVER_ERROR: "Server error. Please try again later.",
    ErrorKind.NOT_FOUND: "Requested resource not found.",
    ErrorKind.VALIDATION_ERROR: "Invalid data received. Please check your input.",
    ErrorKind.UNKNOWN_ERROR: "An unknown error occurred. Please try again later.",
}


def classify_status(status_code: int) -> ErrorKind:
    """Map an HTTP status code to an error kind."""
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN_ERROR


class AppError(Exception):
    """Base error carrying a kind, a status code and a user-facing message."""

    def __init__(
        self,
        kind: ErrorKind,
        status_code: int,
        message: Optional[str] = None,
        detail: str = "",
    ):
        self.kind = kind
        self.status_code = status_code
        self.message = message or ERROR_MESSAGES[kind]
        self.detail = detail
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.kind.value}: {self.detail})"
        return self.message

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "statusCode": self.status_code,
            "message": self.message,
        }


class TransportError(AppError):
    """A remote call failed: no response, or a non-2xx status."""

    @classmethod
    def from_status(cls, status_code: int, detail: str = "") -> "TransportError":
        return cls(classify_status(status_code), status_code, detail=detail)

    @classmethod
    def network(cls, detail: str = "") -> "TransportError":
        return cls(ErrorKind.NETWORK_ERROR, 503, detail=detail)


class ValidationError(AppError):
    """A payload did not have the expected shape."""

    def __init__(self, detail: str = "", message: Optional[str] = None):
        super().__init__(ErrorKind.VALIDATION_ERROR, 400, message=message, detail=detail)
