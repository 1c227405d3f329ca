"""
Mock network implementations for testing.

This module provides mock implementations of NetworkStream and NetworkBackend
that can be used for unit testing without requiring actual network connections.
"""

import socket
import threading
from typing import Any, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    This implementation serves canned bytes from memory and records
    everything written to it. With ``hold_open`` the stream never reports
    end-of-stream once its data is exhausted; reads then time out until
    the stream is closed, like a daemon streaming an endless reply.
    """

    def __init__(
        self,
        data: bytes = b"",
        read_size: Optional[int] = None,
        hold_open: bool = False,
    ):
        """
        Initialize the mock stream.

        Args:
            data: Initial data to be available for reading.
            read_size: Maximum bytes returned per read (None for no limit).
            hold_open: Keep the stream open after the data is consumed.
        """
        self._data = data
        self._position = 0
        self._read_size = read_size
        self._hold_open = hold_open
        self._read_timeout: Optional[float] = None
        self._closed = threading.Event()
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []

    def read(self, max_bytes: int = 65536) -> bytes:
        """
        Read data from the mock stream.

        Raises:
            OSError: If the stream is closed.
            socket.timeout: If held open with no data left.
        """
        if self._closed.is_set():
            raise OSError("Stream is closed")

        if self._position >= len(self._data):
            if not self._hold_open:
                return b""
            self._closed.wait(self._read_timeout if self._read_timeout is not None else 0.01)
            if self._closed.is_set():
                raise OSError("Stream is closed")
            raise socket.timeout("timed out")

        if self._read_size is not None:
            max_bytes = min(max_bytes, self._read_size)
        end = min(self._position + max_bytes, len(self._data))
        result = self._data[self._position:end]
        self._position = end

        return result

    def write(self, data: bytes) -> None:
        """
        Write data to the mock stream.

        Raises:
            OSError: If the stream is closed.
        """
        if self._closed.is_set():
            raise OSError("Stream is closed")

        self._write_buffer.append(data)

    def set_read_timeout(self, timeout: Optional[float]) -> None:
        self._read_timeout = timeout

    def close(self) -> None:
        """Close the mock stream."""
        self._closed.set()

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        """Check if the mock stream is closed."""
        return self._closed.is_set()

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def add_data(self, data: bytes) -> None:
        """Add data to be available for reading."""
        self._data += data


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Each connection is served the next queued response. Streams and
    connection attempts are recorded for inspection.
    """

    def __init__(self, responses: Optional[List[bytes]] = None, **stream_options: Any):
        """
        Initialize the mock backend.

        Args:
            responses: Raw HTTP responses, one per connection, in order.
            **stream_options: Passed to every MockNetworkStream created.
        """
        self._responses: List[bytes] = list(responses or [])
        self._stream_options = stream_options
        self.streams: List[MockNetworkStream] = []
        self.connections: List[Tuple[str, int]] = []
        self.connect_error: Optional[OSError] = None

    def queue_response(self, data: bytes) -> None:
        """Queue the raw bytes served to the next connection."""
        self._responses.append(data)

    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> MockNetworkStream:
        """
        Create a mock TCP connection.

        Raises:
            OSError: If ``connect_error`` is set.
        """
        if self.connect_error is not None:
            raise self.connect_error

        data = self._responses.pop(0) if self._responses else b""
        stream = MockNetworkStream(data, **self._stream_options)
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))

        self.connections.append((host, port))
        self.streams.append(stream)
        return stream

    def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        timeout: Optional[float] = None,
    ) -> NetworkStream:
        """Mark the mock stream as TLS encrypted and return it."""
        if isinstance(stream, MockNetworkStream):
            stream.set_extra_info("ssl_object", True)
        return stream

    @property
    def last_stream(self) -> Optional[MockNetworkStream]:
        return self.streams[-1] if self.streams else None
