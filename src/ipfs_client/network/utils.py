"""
Network helpers shared by the backends and the transport.
"""

import socket
import ssl
from typing import Optional, Tuple
from urllib.parse import urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443}

KEEPALIVE_OPTIONS = (
    ("TCP_KEEPIDLE", 60),
    ("TCP_KEEPINTVL", 10),
    ("TCP_KEEPCNT", 6),
)


def configure_socket(sock: socket.socket) -> socket.socket:
    """
    Enable TCP_NODELAY and keep-alive on a connected socket.

    Peer lookups can stream for minutes with long silent gaps, so idle
    connections are probed instead of being dropped by middleboxes.
    """
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)

    for name, value in KEEPALIVE_OPTIONS:
        option = getattr(socket, name, None)
        if option is not None:
            sock.setsockopt(socket.IPPROTO_TCP, option, value)

    return sock


def create_ssl_context(
    verify: bool = True,
    cafile: Optional[str] = None,
    client_cert: Optional[Tuple[str, str]] = None,
) -> ssl.SSLContext:
    """
    Build the TLS context for daemons served over https.

    Args:
        verify: Verify the server certificate and hostname
        cafile: CA bundle to trust instead of the system store
        client_cert: (certificate, private key) paths for client auth
    """
    context = ssl.create_default_context(cafile=cafile)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.options |= ssl.OP_NO_COMPRESSION

    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    if client_cert is not None:
        context.load_cert_chain(*client_cert)

    return context


def parse_url(url: str) -> Tuple[str, str, int, str]:
    """
    Split a request URL into (scheme, host, port, target).

    ``target`` is the path plus query string as sent on the request line.

    Raises:
        ValueError: If the URL has no host
    """
    parts = urlsplit(url)
    scheme = parts.scheme or "http"

    if not parts.hostname:
        raise ValueError(f"No hostname found in URL: {url}")

    port = parts.port or DEFAULT_PORTS.get(scheme, 80)
    target = parts.path or "/"
    if parts.query:
        target = f"{target}?{parts.query}"

    return scheme, parts.hostname, port, target


def format_host_header(host: str, port: int, scheme: str) -> str:
    """Value of the Host header; the port is omitted when it is the scheme default."""
    if ":" in host:
        host = f"[{host}]"
    if DEFAULT_PORTS.get(scheme) == port:
        return host
    return f"{host}:{port}"
