"""Tagged result returned by every service operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure kinds a service can report."""

    CONFIGURATION = "CONFIGURATION"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "LINK_EXPIRED"
    VALIDATION = "VALIDATION"
    UPSTREAM = "UPSTREAM_FAILURE"


@dataclass
class ServiceResult:
    """Outcome of a service call.

    On success ``value`` holds the payload. On failure ``kind`` and ``error``
    are set; ``value`` may still carry partial data (an expired recording
    keeps its name).
    """

    success: bool
    value: Any = None
    kind: ErrorKind | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: Any = None) -> "ServiceResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str, value: Any = None) -> "ServiceResult":
        return cls(success=False, value=value, kind=kind, error=error)
