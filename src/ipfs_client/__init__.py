"""
ipfs_client - client for the IPFS daemon HTTP RPC API

A blocking client that builds RPC requests, streams the daemon's
replies over HTTP/1.1 and reduces JSON and NDJSON bodies into
plain Python values.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .client import Client, ClientConfig, PinRmOptions
from .http_primitives import FileUpload, FileUploadType
from .transport import Transport, HTTPTransport
from .result import Result, attempt
from .exceptions import (
    ErrorKind,
    IPFSClientError,
    TransportError,
    ConnectionError,
    ProtocolError,
    HTTPStatusError,
    StreamError,
    FetchAbortedError,
    JSONSyntaxError,
    MissingFieldError,
    PostConditionError,
    NotFoundError,
)

__all__ = [
    "Client",
    "ClientConfig",
    "PinRmOptions",
    "FileUpload",
    "FileUploadType",
    "Transport",
    "HTTPTransport",
    "Result",
    "attempt",
    "ErrorKind",
    "IPFSClientError",
    "TransportError",
    "ConnectionError",
    "ProtocolError",
    "HTTPStatusError",
    "StreamError",
    "FetchAbortedError",
    "JSONSyntaxError",
    "MissingFieldError",
    "PostConditionError",
    "NotFoundError",
]
