"""
Network backend components for ipfs_client.

This module provides the low-level networking abstractions
used by the HTTP transport.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .sync import SocketNetworkBackend, SocketNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream
from .utils import (
    configure_socket,
    create_ssl_context,
    parse_url,
    format_host_header,
)

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "SocketNetworkBackend",
    "SocketNetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
    "configure_socket",
    "create_ssl_context",
    "parse_url",
    "format_host_header",
]
