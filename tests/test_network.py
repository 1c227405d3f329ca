"""
Tests for network interfaces, utilities and implementations.

This module covers the mock stream and backend used throughout the test
suite, the blocking socket stream, and the URL/header helpers.
"""

import socket
import ssl
import threading

import pytest

from ipfs_client.network import (
    MockNetworkBackend,
    MockNetworkStream,
    NetworkBackend,
    NetworkStream,
    SocketNetworkBackend,
    SocketNetworkStream,
    configure_socket,
    create_ssl_context,
    format_host_header,
    parse_url,
)


class TestMockNetworkStream:
    """Test cases for MockNetworkStream."""

    def test_read_write_basic(self) -> None:
        """Test basic read and write operations."""
        stream = MockNetworkStream()

        stream.write(b"hello world")
        assert stream.written_data == b"hello world"

        stream.add_data(b"hello world")
        assert stream.read(5) == b"hello"
        assert stream.read() == b" world"

    def test_read_empty_stream(self) -> None:
        """Test that an exhausted stream reports end-of-stream."""
        stream = MockNetworkStream()
        assert stream.read() == b""

    def test_read_size_limit(self) -> None:
        """Test the per-read size limit."""
        stream = MockNetworkStream(b"abcdef", read_size=2)
        assert [stream.read(), stream.read(), stream.read(), stream.read()] == [
            b"ab", b"cd", b"ef", b""
        ]

    def test_hold_open_times_out(self) -> None:
        """Test that a held stream times out instead of ending."""
        stream = MockNetworkStream(b"x", hold_open=True)
        stream.set_read_timeout(0.01)

        assert stream.read() == b"x"
        with pytest.raises(socket.timeout):
            stream.read()

    def test_close_wakes_held_read(self) -> None:
        """Test that closing from another thread ends a waiting read."""
        stream = MockNetworkStream(hold_open=True)
        stream.set_read_timeout(10)

        timer = threading.Timer(0.05, stream.close)
        timer.start()
        with pytest.raises(OSError):
            stream.read()
        timer.join()

    def test_closed_stream(self) -> None:
        """Test operations on a closed stream."""
        stream = MockNetworkStream(b"data")
        stream.close()

        assert stream.is_closed
        with pytest.raises(OSError):
            stream.read()
        with pytest.raises(OSError):
            stream.write(b"x")

    def test_extra_info(self) -> None:
        """Test extra info storage."""
        stream = MockNetworkStream()
        assert stream.get_extra_info("peername") is None

        stream.set_extra_info("peername", ("127.0.0.1", 5001))
        assert stream.get_extra_info("peername") == ("127.0.0.1", 5001)


class TestMockNetworkBackend:
    """Test cases for MockNetworkBackend."""

    def test_responses_served_in_order(self) -> None:
        """Test that each connection gets the next response."""
        backend = MockNetworkBackend([b"first"])
        backend.queue_response(b"second")

        assert backend.connect_tcp("localhost", 5001).read() == b"first"
        assert backend.connect_tcp("localhost", 5002).read() == b"second"
        assert backend.connections == [("localhost", 5001), ("localhost", 5002)]
        assert len(backend.streams) == 2

    def test_stream_options(self) -> None:
        """Test that stream options reach every stream."""
        backend = MockNetworkBackend([b"abc"], read_size=1)
        assert backend.connect_tcp("localhost", 80).read() == b"a"

    def test_connect_error(self) -> None:
        """Test a configured connection failure."""
        backend = MockNetworkBackend()
        backend.connect_error = ConnectionRefusedError("refused")

        with pytest.raises(OSError):
            backend.connect_tcp("localhost", 5001)
        assert backend.last_stream is None

    def test_connect_tls(self) -> None:
        """Test the TLS upgrade marker."""
        backend = MockNetworkBackend()
        stream = backend.connect_tls(backend.connect_tcp("localhost", 443), "localhost")

        assert stream.get_extra_info("ssl_object") is True
        assert stream.get_extra_info("peername") == ("localhost", 443)


class TestSocketNetworkStream:
    """Test the blocking socket stream over a socket pair."""

    @pytest.fixture
    def pair(self):
        """Create a connected stream and its peer socket."""
        left, right = socket.socketpair()
        stream = SocketNetworkStream(left)
        yield stream, right
        stream.close()
        right.close()

    def test_read_write(self, pair) -> None:
        """Test moving bytes in both directions."""
        stream, peer = pair

        stream.write(b"ping")
        assert peer.recv(4) == b"ping"

        peer.sendall(b"pong")
        assert stream.read(4) == b"pong"

    def test_read_timeout(self, pair) -> None:
        """Test that a silent peer times out."""
        stream, _ = pair
        stream.set_read_timeout(0.01)

        with pytest.raises(socket.timeout):
            stream.read()

    def test_peer_close(self, pair) -> None:
        """Test end-of-stream after the peer closes."""
        stream, peer = pair
        peer.close()
        assert stream.read() == b""

    def test_close(self, pair) -> None:
        """Test closing the stream."""
        stream, _ = pair
        stream.close()
        stream.close()

        assert stream.is_closed
        with pytest.raises(OSError):
            stream.read()
        with pytest.raises(OSError):
            stream.write(b"x")

    def test_extra_info(self, pair) -> None:
        """Test socket details."""
        stream, _ = pair
        assert isinstance(stream.get_extra_info("socket"), socket.socket)
        assert stream.get_extra_info("ssl_object") is False
        assert stream.get_extra_info("unknown") is None


class TestSocketNetworkBackend:
    """Test the blocking socket backend against a local listener."""

    def test_connect_tcp(self) -> None:
        """Test connecting to a listening socket."""
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]

        try:
            stream = SocketNetworkBackend().connect_tcp("127.0.0.1", port, timeout=5)
            accepted, _ = server.accept()
            try:
                assert stream.get_extra_info("peername") == ("127.0.0.1", port)
                stream.write(b"hi")
                assert accepted.recv(2) == b"hi"
            finally:
                stream.close()
                accepted.close()
        finally:
            server.close()

    def test_connect_refused(self) -> None:
        """Test connecting to a closed port."""
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.bind(("127.0.0.1", 0))
        port = server.getsockname()[1]
        server.close()

        with pytest.raises(OSError):
            SocketNetworkBackend().connect_tcp("127.0.0.1", port, timeout=5)


class TestNetworkUtils:
    """Test network helper functions."""

    def test_configure_socket(self) -> None:
        """Test that the socket options are applied."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            assert configure_socket(sock) is sock
            assert sock.getsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY) != 0
            assert sock.getsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE) != 0
        finally:
            sock.close()

    @pytest.mark.parametrize("url,expected", [
        ("http://localhost:5001/api/v0/id?json=true",
         ("http", "localhost", 5001, "/api/v0/id?json=true")),
        ("https://ipfs.example/api/v0/id", ("https", "ipfs.example", 443, "/api/v0/id")),
        ("http://127.0.0.1", ("http", "127.0.0.1", 80, "/")),
        ("http://[::1]:5001/x", ("http", "::1", 5001, "/x")),
    ])
    def test_parse_url(self, url, expected) -> None:
        """Test splitting URLs into request components."""
        assert parse_url(url) == expected

    def test_parse_url_without_host(self) -> None:
        """Test that a URL needs a host."""
        with pytest.raises(ValueError):
            parse_url("/api/v0/id")

    @pytest.mark.parametrize("host,port,scheme,expected", [
        ("localhost", 5001, "http", "localhost:5001"),
        ("localhost", 80, "http", "localhost"),
        ("ipfs.example", 443, "https", "ipfs.example"),
        ("::1", 5001, "http", "[::1]:5001"),
    ])
    def test_format_host_header(self, host, port, scheme, expected) -> None:
        """Test Host header values."""
        assert format_host_header(host, port, scheme) == expected

    def test_ssl_context(self) -> None:
        """Test certificate verification settings."""
        strict = create_ssl_context()
        assert strict.verify_mode == ssl.CERT_REQUIRED
        assert strict.check_hostname

        relaxed = create_ssl_context(verify=False)
        assert relaxed.verify_mode == ssl.CERT_NONE
        assert not relaxed.check_hostname


class TestNetworkInterfaces:
    """Test that network interfaces are properly defined."""

    def test_abstract_interfaces(self) -> None:
        """Test that the interfaces cannot be instantiated."""
        with pytest.raises(TypeError):
            NetworkStream()
        with pytest.raises(TypeError):
            NetworkBackend()

    def test_implementations(self) -> None:
        """Test that implementations satisfy the interfaces."""
        assert issubclass(MockNetworkStream, NetworkStream)
        assert issubclass(SocketNetworkStream, NetworkStream)
        assert issubclass(MockNetworkBackend, NetworkBackend)
        assert issubclass(SocketNetworkBackend, NetworkBackend)
