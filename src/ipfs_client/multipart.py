"""
multipart/form-data bodies for FileUpload parts.

Encoding is done by requests-toolbelt's streaming encoder; this module maps
FileUpload parts onto its fields and hands the body out in chunks so that
files referenced by name are streamed from disk instead of being loaded whole.
"""

import io
from typing import BinaryIO, Iterator, List, Optional, Sequence
from urllib.parse import quote

from requests_toolbelt import MultipartEncoder

from .http_primitives import FileUpload, FileUploadType

FILE_CHUNK_SIZE = 65536
PART_CONTENT_TYPE = "application/octet-stream"


class MultipartBody:
    """
    Streaming multipart body for a list of FileUpload parts.

    Every part is sent as a ``file`` form field. The part's path is
    percent-encoded into the filename, which the daemon unescapes.

    Files named by FILE_NAME parts are opened up front, so a missing file
    raises FileNotFoundError before any request is sent. They are closed
    once the body has been read or ``close`` is called.
    """

    def __init__(self, files: Sequence[FileUpload], boundary: Optional[str] = None) -> None:
        self._handles: List[BinaryIO] = []
        try:
            fields = [("file", self._field(part)) for part in files]
        except OSError:
            self.close()
            raise

        self._encoder = MultipartEncoder(fields=fields, boundary=boundary)

    def _field(self, part: FileUpload) -> tuple:
        filename = quote(part.path, safe="")

        if part.type is FileUploadType.FILE_NAME:
            handle = open(part.data, "rb")
            self._handles.append(handle)
            return filename, handle, PART_CONTENT_TYPE

        data = part.data.encode("utf-8") if isinstance(part.data, str) else part.data
        return filename, io.BytesIO(data), PART_CONTENT_TYPE

    @property
    def boundary(self) -> str:
        return self._encoder.boundary_value

    @property
    def content_type(self) -> str:
        return self._encoder.content_type

    def iter_chunks(self) -> Iterator[bytes]:
        """Yield the encoded body in chunks of at most FILE_CHUNK_SIZE bytes."""
        try:
            while True:
                chunk = self._encoder.read(FILE_CHUNK_SIZE)
                if not chunk:
                    return
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        """Close the files opened for FILE_NAME parts."""
        for handle in self._handles:
            handle.close()
        self._handles = []
