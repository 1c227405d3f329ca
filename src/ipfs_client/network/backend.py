"""
Network backend interface for ipfs_client.

A backend opens the connections the transport sends requests over. The
transport asks for one fresh connection per request and never reuses it.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """Factory for blocking network streams."""

    @abstractmethod
    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> NetworkStream:
        """
        Open a TCP connection to ``host:port``.

        ``timeout`` bounds connection setup only; the transport sets its
        own read timeout on the returned stream.

        Raises:
            OSError: If the daemon cannot be reached.
        """
        pass

    @abstractmethod
    def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        timeout: Optional[float] = None,
    ) -> NetworkStream:
        """
        Wrap an open TCP stream in TLS, verifying the certificate for ``host``.

        Raises:
            OSError: If the handshake fails.
        """
        pass
