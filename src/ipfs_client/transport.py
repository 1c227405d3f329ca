"""
Transport layer for ipfs_client.

``Transport`` is the port the client talks to; ``HTTPTransport`` is the
implementation built on h11 and the network backends. A transport owns
an abort latch: ``stop_fetch`` cancels in-flight and future requests
until ``reset_fetch`` is called.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, Optional, Sequence, Set
from urllib.parse import quote

from .exceptions import (
    ConnectionError,
    FetchAbortedError,
    HTTPStatusError,
    StreamError,
)
from .http11 import HTTP11Connection
from .http_primitives import FileUpload, Request
from .multipart import MultipartBody
from .network import NetworkBackend, SocketNetworkBackend, format_host_header, parse_url

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ipfs_client/0.1.0"
STREAM_ERROR_TRAILER = b"x-stream-error"


class Transport(ABC):
    """
    Interface for performing daemon requests.

    Implementations must allow ``stop_fetch`` to be called from a thread
    other than the one blocked in ``stream``/``fetch``.
    """

    @abstractmethod
    def stream(self, url: str, files: Sequence[FileUpload] = ()) -> Iterator[bytes]:
        """
        Perform a request and yield the response body in chunks.

        Closing the returned iterator early abandons the response.

        Raises:
            TransportError: On connection, HTTP or stream failures
            FetchAbortedError: If the fetch is aborted
        """
        pass

    def fetch(self, url: str, files: Sequence[FileUpload], sink: BinaryIO) -> None:
        """Perform a request and write the whole response body to ``sink``."""
        for chunk in self.stream(url, files):
            sink.write(chunk)

    def url_encode(self, raw: str) -> str:
        """Percent-encode everything except unreserved characters."""
        return quote(raw, safe="")

    @abstractmethod
    def stop_fetch(self) -> None:
        """Abort in-flight requests and refuse new ones until reset."""
        pass

    @abstractmethod
    def reset_fetch(self) -> None:
        """Clear the abort latch."""
        pass

    @abstractmethod
    def clone(self) -> "Transport":
        """Return an independent transport with the same settings."""
        pass


class HTTPTransport(Transport):
    """
    Transport over HTTP/1.1.

    Every request uses a fresh connection that is closed once the body has
    been consumed. Requests are always POSTs, as the daemon's RPC API
    requires.
    """

    def __init__(
        self,
        backend: Optional[NetworkBackend] = None,
        verbose: bool = False,
        connect_timeout: Optional[float] = None,
        poll_interval: float = HTTP11Connection.DEFAULT_POLL_INTERVAL,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Initialize the transport.

        Args:
            backend: Network backend to use (blocking sockets by default)
            verbose: Log request and response headers at DEBUG level
            connect_timeout: Timeout in seconds for establishing connections
            poll_interval: Seconds between abort checks during blocking reads
            user_agent: Value of the User-Agent header
        """
        self._backend = backend or SocketNetworkBackend()
        self._verbose = verbose
        self._connect_timeout = connect_timeout
        self._poll_interval = poll_interval
        self._user_agent = user_agent

        self._abort_event = threading.Event()
        self._active: Set[HTTP11Connection] = set()
        self._active_lock = threading.Lock()

    def stream(self, url: str, files: Sequence[FileUpload] = ()) -> Iterator[bytes]:
        if self._abort_event.is_set():
            raise FetchAbortedError()

        scheme, host, port, target = parse_url(url)
        multipart = MultipartBody(files) if files else None
        request = self._build_request(scheme, host, port, target, multipart)

        try:
            connection = self._connect(scheme, host, port)
        except ConnectionError:
            if multipart is not None:
                multipart.close()
            raise
        with self._active_lock:
            self._active.add(connection)

        try:
            response = connection.handle_request(request)
            if self._verbose:
                logger.debug(f"< {response.status_code} {response.headers}")

            if not response.is_success:
                body = b"".join(connection.iter_body()).decode("utf-8", "replace")
                raise HTTPStatusError(response.status_code, self._error_message(body), body)

            yield from connection.iter_body()

            for name, value in connection.trailers:
                if name.lower() == STREAM_ERROR_TRAILER:
                    raise StreamError(value.decode("utf-8", "replace"))
        finally:
            if multipart is not None:
                multipart.close()
            connection.close()
            with self._active_lock:
                self._active.discard(connection)

    def _build_request(
        self,
        scheme: str,
        host: str,
        port: int,
        target: str,
        multipart: Optional[MultipartBody],
    ) -> Request:
        headers = [
            (b"Host", format_host_header(host, port, scheme).encode()),
            (b"User-Agent", self._user_agent.encode()),
            (b"Accept", b"*/*"),
            (b"Connection", b"close"),
        ]

        if multipart is None:
            headers.append((b"Content-Length", b"0"))
            body = None
        else:
            headers.append((b"Content-Type", multipart.content_type.encode()))
            headers.append((b"Transfer-Encoding", b"chunked"))
            body = multipart.iter_chunks()

        request = Request(method=b"POST", target=target.encode(), headers=headers, body=body)
        if self._verbose:
            logger.debug(f"> POST {target} {headers}")
        return request

    def _connect(self, scheme: str, host: str, port: int) -> HTTP11Connection:
        try:
            stream = self._backend.connect_tcp(host, port, timeout=self._connect_timeout)
            if scheme == "https":
                stream = self._backend.connect_tls(stream, host, timeout=self._connect_timeout)
        except OSError as e:
            raise ConnectionError(f"Failed to connect to {host}:{port}: {e}", cause=e) from e

        return HTTP11Connection(
            stream,
            abort_event=self._abort_event,
            poll_interval=self._poll_interval,
        )

    @staticmethod
    def _error_message(body: str) -> str:
        """Extract the daemon's error message from an error reply."""
        try:
            doc = json.loads(body)
        except ValueError:
            return body.strip()
        if isinstance(doc, dict) and "Message" in doc:
            return str(doc["Message"])
        return body.strip()

    def stop_fetch(self) -> None:
        self._abort_event.set()
        with self._active_lock:
            active = list(self._active)
        for connection in active:
            connection.close()
        logger.debug(f"Fetch aborted ({len(active)} active requests)")

    def reset_fetch(self) -> None:
        self._abort_event.clear()

    @property
    def aborted(self) -> bool:
        return self._abort_event.is_set()

    def clone(self) -> "HTTPTransport":
        """
        Return a transport with the same settings and its own abort latch.

        The network backend is shared; backends hold no per-request state.
        """
        return HTTPTransport(
            backend=self._backend,
            verbose=self._verbose,
            connect_timeout=self._connect_timeout,
            poll_interval=self._poll_interval,
            user_agent=self._user_agent,
        )
