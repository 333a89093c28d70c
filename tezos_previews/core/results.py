"""Structured results passed between pipeline stages"""

from enum import Enum
from typing import Generic, Optional, TypeVar
from dataclasses import dataclass

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why a pipeline step produced no data"""
    NO_LINKS_FOUND = "no_links_found"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"
    VALIDATION_ERROR = "validation_error"
    UNSUPPORTED = "unsupported"
    UNEXPECTED = "unexpected"


@dataclass
class Result(Generic[T]):
    """Success with data, or failure with a kind and a message"""
    ok: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def success(cls, data: T) -> "Result[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, error: str) -> "Result[T]":
        return cls(ok=False, error=error, error_kind=kind)

    @classmethod
    def from_failure(cls, other: "Result", prefix: Optional[str] = None) -> "Result[T]":
        """Carry another result's failure forward, optionally prefixing the message"""
        error = other.error or "Unknown error"
        if prefix:
            error = f"{prefix}: {error}"
        return cls(ok=False, error=error, error_kind=other.error_kind or ErrorKind.UNEXPECTED)
