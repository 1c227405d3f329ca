"""
HTTP primitives for ipfs_client.

This module defines the core data structures passed between the
operation layer and the transport. All classes are immutable to ensure
thread safety and simplify reasoning.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union


# Type aliases for better readability
Headers = List[Tuple[bytes, bytes]]
QueryParams = Sequence[Tuple[str, str]]
StatusCode = int


class FileUploadType(Enum):
    """How the payload of a FileUpload is interpreted."""
    FILE_CONTENTS = "contents"  # payload is the data itself
    FILE_NAME = "name"          # payload is a path to read the data from


@dataclass(frozen=True)
class FileUpload:
    """
    One part of a multipart upload.

    ``path`` is the name the daemon sees for the part (e.g. "foo.txt").
    """

    path: str
    type: FileUploadType
    data: Union[str, bytes]

    @classmethod
    def from_contents(cls, path: str, data: Union[str, bytes]) -> "FileUpload":
        return cls(path=path, type=FileUploadType.FILE_CONTENTS, data=data)

    @classmethod
    def from_file(cls, path: str, filename: str) -> "FileUpload":
        return cls(path=path, type=FileUploadType.FILE_NAME, data=filename)


@dataclass(frozen=True)
class Request:
    """
    Immutable HTTP request representation.

    ``target`` is the request-target sent on the request line (path plus
    query string). ``body`` is an iterable of byte chunks, or None.
    """

    method: bytes
    target: bytes
    headers: Headers = field(default_factory=list)
    body: Optional[Iterable[bytes]] = None

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, bytes):
            raise ValueError("method must be bytes")

        if not isinstance(self.target, bytes):
            raise ValueError("target must be bytes")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")


@dataclass(frozen=True)
class Response:
    """
    Immutable HTTP response head.

    The body is not part of the response object; it is read from the
    connection that produced it.
    """

    status_code: StatusCode
    headers: Headers = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        if isinstance(name, str):
            name = name.encode()

        name_lower = name.lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value

        return None
