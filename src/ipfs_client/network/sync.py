"""
Blocking socket backend for ipfs_client.
"""

import socket
import ssl
from typing import Any, Optional

from .backend import NetworkBackend
from .stream import NetworkStream
from .utils import configure_socket, create_ssl_context


class SocketNetworkStream(NetworkStream):
    """NetworkStream over a blocking (optionally TLS-wrapped) socket."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.closed = False

    def read(self, max_bytes: int = 65536) -> bytes:
        if self.closed:
            raise OSError("Stream is closed")
        return self.sock.recv(max_bytes)

    def write(self, data: bytes) -> None:
        if self.closed:
            raise OSError("Stream is closed")
        self.sock.sendall(data)

    def set_read_timeout(self, timeout: Optional[float]) -> None:
        self.sock.settimeout(timeout)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            # shutdown wakes a recv() blocked in another thread
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # peer already gone
        self.sock.close()

    def get_extra_info(self, name: str) -> Optional[Any]:
        if name == "socket":
            return self.sock
        elif name == "peername":
            try:
                return self.sock.getpeername()
            except OSError:
                return None
        elif name == "sockname":
            try:
                return self.sock.getsockname()
            except OSError:
                return None
        elif name == "ssl_object":
            return isinstance(self.sock, ssl.SSLSocket)
        return None

    @property
    def is_closed(self) -> bool:
        return self.closed


class SocketNetworkBackend(NetworkBackend):
    """Network backend using plain blocking sockets."""

    def __init__(self, ssl_context: Optional[ssl.SSLContext] = None) -> None:
        self._ssl_context = ssl_context

    def connect_tcp(
        self, host: str, port: int, timeout: Optional[float] = None
    ) -> SocketNetworkStream:
        sock = socket.create_connection((host, port), timeout=timeout)
        return SocketNetworkStream(configure_socket(sock))

    def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        timeout: Optional[float] = None,
    ) -> SocketNetworkStream:
        if self._ssl_context is None:
            self._ssl_context = create_ssl_context()
        sock = stream.get_extra_info("socket")
        sock.settimeout(timeout)
        ssl_sock = self._ssl_context.wrap_socket(sock, server_hostname=host)
        return SocketNetworkStream(ssl_sock)
