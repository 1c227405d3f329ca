"""
Pytest configuration for ipfs_client tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import pytest
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ipfs_client import Client
from ipfs_client.http_primitives import FileUpload
from ipfs_client.transport import Transport


Reply = Union[bytes, List[bytes], Exception]


class FakeTransport(Transport):
    """
    Transport double that serves canned replies.

    Each reply is either the whole body, a list of body chunks, or an
    exception to raise. Requests are recorded as (url, files) pairs.
    """

    def __init__(self, replies: Optional[List[Reply]] = None) -> None:
        self.replies: List[Reply] = list(replies or [])
        self.requests: List[Tuple[str, Sequence[FileUpload]]] = []
        self.chunks_served = 0
        self.closed_early = False
        self.stopped = False
        self.reset_count = 0
        self.cloned_from: Optional["FakeTransport"] = None

    def reply(self, *replies: Reply) -> "FakeTransport":
        self.replies.extend(replies)
        return self

    def stream(self, url: str, files: Sequence[FileUpload] = ()) -> Iterator[bytes]:
        self.requests.append((url, list(files)))
        reply = self.replies.pop(0) if self.replies else b""

        if isinstance(reply, Exception):
            raise reply

        chunks = reply if isinstance(reply, list) else [reply]
        finished = False
        try:
            for chunk in chunks:
                self.chunks_served += 1
                yield chunk
            finished = True
        finally:
            if not finished:
                self.closed_early = True

    def stop_fetch(self) -> None:
        self.stopped = True

    def reset_fetch(self) -> None:
        self.stopped = False
        self.reset_count += 1

    def clone(self) -> "FakeTransport":
        twin = FakeTransport(self.replies)
        twin.cloned_from = self
        return twin

    @property
    def last_url(self) -> str:
        return self.requests[-1][0]

    @property
    def last_files(self) -> Sequence[FileUpload]:
        return self.requests[-1][1]


PREFIX = "http://localhost:5001/api/v0"
CONTROL = "?stream-channels=true&json=true&encoding=json"


@pytest.fixture
def fake_transport():
    """Create a transport double with no queued replies."""
    return FakeTransport()


@pytest.fixture
def client(fake_transport):
    """Create a client wired to the transport double."""
    return Client(transport=fake_transport)


@pytest.fixture
def endpoint_url():
    """Build the URL a default client produces for an endpoint."""
    def _url(path: str, query: str = "") -> str:
        return f"{PREFIX}/{path}{CONTROL}{query}"
    return _url


@pytest.fixture
def http_response():
    """Build raw HTTP/1.1 response bytes for the mock network."""
    def _create(
        body: bytes = b"",
        status: int = 200,
        reason: str = "OK",
        headers: Optional[List[Tuple[str, str]]] = None,
        chunked: bool = False,
        trailers: Optional[List[Tuple[str, str]]] = None,
    ) -> bytes:
        lines = [f"HTTP/1.1 {status} {reason}"]
        for name, value in headers or [("Content-Type", "application/json")]:
            lines.append(f"{name}: {value}")

        if chunked:
            lines.append("Transfer-Encoding: chunked")
            head = ("\r\n".join(lines) + "\r\n\r\n").encode()
            payload = b""
            if body:
                payload += f"{len(body):x}\r\n".encode() + body + b"\r\n"
            payload += b"0\r\n"
            for name, value in trailers or []:
                payload += f"{name}: {value}\r\n".encode()
            return head + payload + b"\r\n"

        lines.append(f"Content-Length: {len(body)}")
        return ("\r\n".join(lines) + "\r\n\r\n").encode() + body

    return _create


@pytest.fixture
def ndjson():
    """Join JSON lines into an NDJSON body."""
    def _join(*lines: str) -> bytes:
        return "".join(line + "\n" for line in lines).encode()
    return _join
