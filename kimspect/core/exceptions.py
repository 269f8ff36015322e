from __future__ import annotations

from typing import Optional


class KimspectError(Exception):
    """Base class for every error that reaches the command boundary."""

    exit_code: int = 1


class ValidationError(KimspectError):
    """The requested selector combination is invalid. Fixable by the user."""

    exit_code = 2


class NotFound(KimspectError):
    exit_code = 1

    def __init__(self, kind: str, name: str, namespace: Optional[str] = None) -> None:
        self.kind = kind
        self.name = name
        self.namespace = namespace
        where = f" in namespace {namespace}" if namespace else ""
        super().__init__(f"{kind} {name!r} not found{where}")


class ApiError(KimspectError):
    """Transport or authentication failure reported by the cluster client."""

    exit_code = 3

    def __init__(self, message: str, *, cause: Optional[BaseException] = None, status: Optional[int] = None) -> None:
        self.cause = cause
        self.status = status
        super().__init__(message)


class MalformedResource(KimspectError):
    """The API returned an object without the fields every resource must have."""

    exit_code = 4

    def __init__(self, message: str, *, kind: Optional[str] = None, name: Optional[str] = None) -> None:
        self.kind = kind
        self.name = name
        super().__init__(message)


class Cancelled(KimspectError):
    exit_code = 130


__all__ = ["KimspectError", "ValidationError", "NotFound", "ApiError", "MalformedResource", "Cancelled"]
