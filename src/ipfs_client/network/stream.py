"""
Network stream interface for ipfs_client.

This module defines the NetworkStream interface that all network stream
implementations must follow for consistent behavior across the library.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    Interface for blocking network streams.

    Reads block for at most the stream's read timeout; when no data
    arrives in that window ``socket.timeout`` is raised so the caller can
    check for cancellation and read again.
    """

    @abstractmethod
    def read(self, max_bytes: int = 65536) -> bytes:
        """
        Read data from the stream.

        Args:
            max_bytes: Maximum number of bytes to read.

        Returns:
            The data read, or b"" once the peer has closed the stream.

        Raises:
            socket.timeout: If no data arrived within the read timeout.
            OSError: If a network error occurs or the stream was closed.
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write all of ``data`` to the stream.

        Raises:
            OSError: If a network error occurs or the stream was closed.
        """
        pass

    @abstractmethod
    def set_read_timeout(self, timeout: Optional[float]) -> None:
        """Set the per-read timeout in seconds (None blocks indefinitely)."""
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close the stream and cleanup resources.

        May be called from another thread to interrupt a blocked read.
        """
        pass

    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the stream.

        Args:
            name: The name of the information to retrieve. Common values include:
                 - "socket": The underlying socket object
                 - "peername": The remote endpoint address
                 - "sockname": The local endpoint address
                 - "ssl_object": Whether the stream is SSL/TLS encrypted

        Returns:
            The requested information or None if not available.
        """
        pass

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Check if the stream is closed."""
        pass
