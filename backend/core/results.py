from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from rest_framework import status
from rest_framework.response import Response

T = TypeVar("T")

INTERNAL_MESSAGE = "Internal server error"


class ErrorKind(str, enum.Enum):
    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    INTERNAL = "INTERNAL"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.SIGNATURE_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """
    Expected failure of a core operation.

    Services return a Failure instead of raising so callers decide how to
    present it; HTTP views use `failure_response`.
    """

    kind: ErrorKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def invalid(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "Failure":
        return cls(ErrorKind.INVALID_INPUT, message, details or {})

    @classmethod
    def not_found(cls, message: str) -> "Failure":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def forbidden(cls, message: str) -> "Failure":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def conflict(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "Failure":
        return cls(ErrorKind.CONFLICT, message, details or {})

    @classmethod
    def internal(cls) -> "Failure":
        return cls(ErrorKind.INTERNAL, INTERNAL_MESSAGE)


Result = Union[Ok[T], Failure]


def failure_body(failure: Failure) -> Dict[str, Any]:
    message = INTERNAL_MESSAGE if failure.kind is ErrorKind.INTERNAL else failure.message
    body: Dict[str, Any] = {"code": failure.kind.value, "message": message}
    if failure.details and failure.kind is not ErrorKind.INTERNAL:
        body["details"] = failure.details
    return {"error": body}


def failure_response(failure: Failure) -> Response:
    return Response(failure_body(failure), status=failure.kind.http_status)
