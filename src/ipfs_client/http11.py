"""
HTTP/1.1 connection implementation for ipfs_client.

This module implements the HTTP11Connection class that drives one
blocking HTTP/1.1 request/response cycle over a NetworkStream using h11.
"""

import logging
import socket
import threading
import time
from enum import Enum
from typing import Any, Dict, Iterator, Optional

import h11

from .http_primitives import Headers, Request, Response
from .network.stream import NetworkStream
from .exceptions import (
    ConnectionError,
    FetchAbortedError,
    ProtocolError,
)

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of an HTTP/1.1 connection."""
    NEW = "new"           # Connection created, not yet used
    ACTIVE = "active"     # Connection handling a request
    CLOSED = "closed"     # Connection closed, cannot be reused


class HTTP11Connection:
    """
    HTTP/1.1 connection driver.

    The connection serves a single request. Reads wake up every
    ``poll_interval`` seconds to check ``abort_event``, so a request can be
    cancelled from another thread even while the daemon is silent.
    """

    READ_CHUNK_SIZE = 65536  # 64KB chunks
    DEFAULT_POLL_INTERVAL = 0.1

    def __init__(
        self,
        stream: NetworkStream,
        abort_event: Optional[threading.Event] = None,
        poll_interval: Optional[float] = None,
    ):
        """
        Initialize HTTP/1.1 connection.

        Args:
            stream: The NetworkStream to use for communication
            abort_event: Set by another thread to cancel the request
            poll_interval: Seconds between cancellation checks while reading
        """
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._state = ConnectionState.NEW
        self._abort_event = abort_event or threading.Event()
        self._poll_interval = poll_interval or self.DEFAULT_POLL_INTERVAL
        self._trailers: Headers = []

        # Metrics
        self._request_count = 0
        self._bytes_sent = 0
        self._bytes_received = 0
        self._start_time: Optional[float] = None

        self._stream.set_read_timeout(self._poll_interval)

    def handle_request(self, request: Request) -> Response:
        """
        Send a request and receive the response head.

        The body is read afterwards with ``iter_body``.

        Raises:
            ConnectionError: If the connection is not available or fails
            ProtocolError: If HTTP protocol error occurs
            FetchAbortedError: If the request is aborted
        """
        if self._state != ConnectionState.NEW:
            raise ConnectionError(f"Connection is {self._state.value}")

        self._state = ConnectionState.ACTIVE
        self._request_count += 1
        self._start_time = time.time()

        try:
            self._send_request(request)
            response = self._receive_response()
        except Exception:
            self.close()
            raise

        logger.debug(
            f"{request.method.decode()} {request.target.decode()} -> "
            f"{response.status_code} ({time.time() - self._start_time:.3f}s)"
        )
        return response

    def _send_request(self, request: Request) -> None:
        """Send request headers, body and end of message."""
        self._send_event(h11.Request(
            method=request.method,
            target=request.target,
            headers=request.headers,
        ))

        if request.body is not None:
            for chunk in request.body:
                if self._abort_event.is_set():
                    raise FetchAbortedError()
                if chunk:
                    self._send_event(h11.Data(data=chunk))

        self._send_event(h11.EndOfMessage())

    def _send_event(self, event: Any) -> None:
        """Send an h11 event to the network stream."""
        try:
            data = self._h11_connection.send(event)
        except h11.LocalProtocolError as e:
            raise ProtocolError(str(e), cause=e) from e

        if data:
            try:
                self._stream.write(data)
            except OSError as e:
                if self._abort_event.is_set():
                    raise FetchAbortedError() from e
                raise ConnectionError(f"Failed to send request: {e}", cause=e) from e
            self._bytes_sent += len(data)

    def _next_event(self) -> Any:
        """Return the next h11 event, reading from the stream as needed."""
        while True:
            try:
                event = self._h11_connection.next_event()
            except h11.RemoteProtocolError as e:
                raise ProtocolError(str(e), cause=e) from e

            if event is h11.NEED_DATA:
                self._receive_data()
                continue

            return event

    def _receive_data(self) -> None:
        """Feed the next chunk from the stream into h11, honoring aborts."""
        while True:
            if self._abort_event.is_set():
                raise FetchAbortedError()

            try:
                data = self._stream.read(self.READ_CHUNK_SIZE)
            except socket.timeout:
                continue
            except OSError as e:
                if self._abort_event.is_set():
                    raise FetchAbortedError() from e
                raise ConnectionError(f"Failed to read response: {e}", cause=e) from e

            self._bytes_received += len(data)
            # b"" tells h11 the peer closed the connection
            self._h11_connection.receive_data(data)
            return

    def _receive_response(self) -> Response:
        """Read events until the response head arrives."""
        while True:
            event = self._next_event()

            if isinstance(event, h11.Response):
                return Response(status_code=event.status_code, headers=list(event.headers))

            if isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed by server")

    def iter_body(self) -> Iterator[bytes]:
        """
        Yield response body chunks until the end of the message.

        The connection is closed when iteration finishes, fails, or the
        generator is closed early.
        """
        try:
            while True:
                event = self._next_event()

                if isinstance(event, h11.Data):
                    yield bytes(event.data)
                elif isinstance(event, h11.EndOfMessage):
                    self._trailers = list(event.headers)
                    return
                elif isinstance(event, h11.ConnectionClosed):
                    raise ProtocolError("Connection closed unexpectedly")
        finally:
            self.close()

    @property
    def trailers(self) -> Headers:
        """Trailer headers received after a chunked body."""
        return self._trailers

    def close(self) -> None:
        """Close the connection and cleanup resources."""
        if self._state != ConnectionState.CLOSED:
            self._state = ConnectionState.CLOSED
            self._stream.close()
            logger.debug(
                f"Connection closed: sent={self._bytes_sent}B "
                f"received={self._bytes_received}B"
            )

    @property
    def is_closed(self) -> bool:
        """Check if connection is closed."""
        return self._state == ConnectionState.CLOSED

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get connection metrics.

        Returns:
            Dictionary with connection metrics
        """
        return {
            "request_count": self._request_count,
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "state": self._state.value,
        }
