"""
Tests for multipart/form-data bodies.
"""

import pytest

from ipfs_client.http_primitives import FileUpload
from ipfs_client.multipart import FILE_CHUNK_SIZE, MultipartBody


def encode(files, boundary="B") -> bytes:
    return b"".join(MultipartBody(files, boundary=boundary).iter_chunks())


class TestMultipartBody:
    """Test MultipartBody output."""

    def test_content_type(self) -> None:
        """Test that the boundary appears in the content type."""
        body = MultipartBody([FileUpload.from_contents("a", b"")], boundary="xyz")
        assert body.boundary == "xyz"
        assert body.content_type == "multipart/form-data; boundary=xyz"

    def test_random_boundary(self) -> None:
        """Test that each body gets its own boundary."""
        files = [FileUpload.from_contents("a", b"")]
        assert MultipartBody(files).boundary != MultipartBody(files).boundary

    def test_contents_parts(self) -> None:
        """Test the framing of in-memory parts."""
        body = encode([
            FileUpload.from_contents("foo.txt", "abcd"),
            FileUpload.from_contents("dir/bar.bin", b"\x00\x01"),
        ])

        assert body.startswith(b"--B\r\n")
        assert body.endswith(b"\r\n--B--\r\n")
        assert body.count(b"--B\r\n") == 2
        assert b'Content-Disposition: form-data; name="file"; filename="foo.txt"' in body
        assert b'filename="dir%2Fbar.bin"' in body
        assert body.count(b"Content-Type: application/octet-stream") == 2
        assert b"\r\n\r\nabcd\r\n" in body
        assert b"\r\n\r\n\x00\x01\r\n" in body

    def test_file_is_streamed(self, tmp_path) -> None:
        """Test that named files are read in bounded chunks."""
        data = b"x" * (FILE_CHUNK_SIZE * 2 + 10)
        path = tmp_path / "big.bin"
        path.write_bytes(data)

        multipart = MultipartBody([FileUpload.from_file("big.bin", str(path))], boundary="B")
        chunks = list(multipart.iter_chunks())

        assert len(chunks) > 2
        assert max(len(chunk) for chunk in chunks) <= FILE_CHUNK_SIZE
        assert data in b"".join(chunks)

    def test_files_closed_after_reading(self, tmp_path) -> None:
        """Test that opened files are released."""
        path = tmp_path / "a.txt"
        path.write_bytes(b"abc")

        multipart = MultipartBody([FileUpload.from_file("a.txt", str(path))])
        (handle,) = multipart._handles
        list(multipart.iter_chunks())

        assert handle.closed

    def test_missing_file(self, tmp_path) -> None:
        """Test that a missing file is reported up front."""
        with pytest.raises(FileNotFoundError):
            MultipartBody([FileUpload.from_file("x", str(tmp_path / "missing"))])

    def test_unicode_contents(self) -> None:
        """Test that text contents are UTF-8 encoded."""
        body = encode([FileUpload.from_contents("n", "é")])
        assert "é".encode() + b"\r\n--B--\r\n" in body
