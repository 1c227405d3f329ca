"""
Custom exceptions for ipfs_client.

This module defines the exception hierarchy used throughout
the library. Every error carries an ``ErrorKind`` tag so callers can
branch on the failure category without matching individual classes.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Categories of failure surfaced by the client."""
    TRANSPORT = "transport"
    CANCELLED = "cancelled"
    SYNTAX = "syntax"
    MISSING_FIELD = "missing_field"
    POST_CONDITION = "post_condition"
    NOT_FOUND = "not_found"


class IPFSClientError(Exception):
    """Base exception for all ipfs_client errors."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class TransportError(IPFSClientError):
    """Raised when the HTTP exchange with the daemon fails."""


class ConnectionError(TransportError):
    """Raised when the daemon cannot be reached."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class ProtocolError(TransportError):
    """Raised when the daemon's HTTP framing is invalid."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class HTTPStatusError(TransportError):
    """Raised when the daemon answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str, body: str = "") -> None:
        super().__init__(f"HTTP error {status_code}: {message}")
        self.status_code = status_code
        self.body = body


class StreamError(TransportError):
    """Raised when the daemon reports a failure in the middle of a stream."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)


class FetchAbortedError(TransportError):
    """Raised in the blocked caller when the fetch is aborted."""

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Fetch aborted") -> None:
        super().__init__(message)


class JSONSyntaxError(IPFSClientError):
    """Raised when a line or document is not valid JSON."""

    kind = ErrorKind.SYNTAX

    def __init__(self, message: str, raw: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"{message}\nInput JSON:\n{raw}", cause)
        self.raw = raw


class MissingFieldError(IPFSClientError):
    """Raised when valid JSON lacks an expected property."""

    kind = ErrorKind.MISSING_FIELD

    def __init__(self, field: str, line_number: int, document: str) -> None:
        super().__init__(
            f'Unexpected reply: valid JSON, but without the "{field}" '
            f"property on line {line_number}:\n{document}"
        )
        self.field = field
        self.line_number = line_number
        self.document = document


class PostConditionError(IPFSClientError):
    """Raised when a well-formed response violates an operation invariant."""

    kind = ErrorKind.POST_CONDITION

    def __init__(self, message: str, object_id: str, response: Any) -> None:
        super().__init__(message)
        self.object_id = object_id
        self.response = response


class NotFoundError(IPFSClientError):
    """Raised when a search over a response stream finds no match."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, key: str, body: str) -> None:
        super().__init__(f"Could not find info for {key} in response: {body}")
        self.key = key
        self.body = body
