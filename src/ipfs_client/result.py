"""
Tagged results for callers that prefer matching over exception handling.

``attempt`` runs any client operation and captures library errors into a
``Result``; errors that are not ``IPFSClientError`` still propagate.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .exceptions import ErrorKind, IPFSClientError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one operation: either a value or an error."""

    value: Optional[T] = None
    error: Optional[IPFSClientError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """The failure category, or None on success."""
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value or re-raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def attempt(func: Callable[..., T], *args: Any, **kwargs: Any) -> "Result[T]":
    """
    Call ``func`` and wrap its outcome.

    Example:
        result = attempt(client.pin_add, cid)
        if result.kind is ErrorKind.POST_CONDITION:
            ...
    """
    try:
        return Result(value=func(*args, **kwargs))
    except IPFSClientError as e:
        return Result(error=e)
