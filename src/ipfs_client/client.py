"""
IPFS daemon client.

``Client`` maps each RPC endpoint of the daemon's HTTP API onto one
method. Every method builds the request URL, performs the request through
the client's transport, and reduces the reply to the value the caller
gets back.
"""

import io
import json
import logging
from contextlib import closing
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, List, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import PostConditionError
from .http_primitives import FileUpload, QueryParams
from .properties import get_property
from .reducers import (
    collect_array,
    decode_text,
    find_first,
    iter_lines,
    merge_records,
    parse_json,
)
from .transport import HTTPTransport, Transport
from .urls import build_url

logger = logging.getLogger(__name__)

Options = Union[Sequence[Tuple[str, Any]], Mapping[str, Any]]


class PinRmOptions(Enum):
    """How ``pin_rm`` treats the object's descendants."""
    NON_RECURSIVE = "false"
    RECURSIVE = "true"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable connection settings of a client."""

    host: str = "localhost"
    port: int = 5001
    timeout: str = ""
    protocol: str = "http://"
    api_path: str = "/api/v0"

    @property
    def url_prefix(self) -> str:
        """Base URL of every endpoint, without a trailing slash."""
        api_path = "/" + self.api_path.strip("/") if self.api_path.strip("/") else ""
        host = f"[{self.host}]" if ":" in self.host and not self.host.startswith("[") else self.host
        return f"{self.protocol}{host}:{self.port}{api_path}"


def _param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Client:
    """
    Client for the daemon's HTTP RPC API.

    Calls block until the reply has been fully reduced. ``abort`` may be
    called from another thread to cancel a blocked call; the transport
    then refuses requests until ``reset`` is called.

    Copying a client (``copy.copy``, ``copy.deepcopy`` or ``clone``) clones
    its transport, so each copy can be aborted independently.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5001,
        timeout: str = "",
        protocol: str = "http://",
        api_path: str = "/api/v0",
        verbose: bool = False,
        transport: Optional[Transport] = None,
    ):
        """
        Initialize the client.

        Args:
            host: Daemon host name or address
            port: Daemon API port
            timeout: Server-side timeout for every request, e.g. "20s"
            protocol: URL scheme prefix, "http://" or "https://"
            api_path: Path of the API below the host
            verbose: Log request and response headers at DEBUG level
            transport: Transport to use instead of a new HTTPTransport
        """
        self._config = ClientConfig(
            host=host,
            port=port,
            timeout=timeout,
            protocol=protocol,
            api_path=api_path,
        )
        self._url_prefix = self._config.url_prefix
        self._transport = transport if transport is not None else HTTPTransport(verbose=verbose)

        logger.debug(f"Client created for {self._url_prefix}")

    @classmethod
    def _from_parts(cls, config: ClientConfig, transport: Transport) -> "Client":
        client = cls.__new__(cls)
        client._config = config
        client._url_prefix = config.url_prefix
        client._transport = transport
        return client

    def clone(self) -> "Client":
        """Return a client with the same configuration and a cloned transport."""
        logger.debug(f"Cloning client for {self._url_prefix}")
        return self._from_parts(self._config, self._transport.clone())

    def __copy__(self) -> "Client":
        return self.clone()

    def __deepcopy__(self, memo: dict) -> "Client":
        return self.clone()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Abort any request still in flight."""
        self._transport.stop_fetch()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    # ------------------------------------------------------------------
    # Identity and configuration
    # ------------------------------------------------------------------

    def id(self) -> Any:
        """Return the identity document of the daemon's peer."""
        return self._fetch_json(self._make_url("id"))

    def version(self) -> Any:
        """Return the daemon's version document."""
        return self._fetch_json(self._make_url("version"))

    def config_get(self, key: str = "") -> Any:
        """
        Return a configuration value, or the whole configuration.

        For a key the daemon replies ``{"Key": key, "Value": value}``; only
        ``value`` is returned.
        """
        if not key:
            return self._fetch_json(self._make_url("config/show"))

        response = self._fetch_json(self._make_url("config", [("arg", key)]))
        return get_property(response, "Value")

    def config_set(self, key: str, value: Any) -> None:
        """Set configuration ``key`` to the JSON ``value``."""
        self._fetch_json(self._make_url("config", [("arg", key), ("arg", json.dumps(value))]))

    def config_replace(self, config: Any) -> None:
        """Replace the whole configuration with ``config``."""
        self._fetch(
            self._make_url("config/replace"),
            [FileUpload.from_contents("new_config.json", json.dumps(config))],
        )

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def dht_find_peer(self, peer_id: str) -> List[str]:
        """
        Return the multiaddresses of ``peer_id``.

        The daemon streams query events until the peer is found; reading
        stops at the first event that carries the peer's addresses.

        Raises:
            NotFoundError: If the stream ends without the peer
        """
        def match(event: Any) -> Tuple[bool, Any]:
            responses = event.get("Responses") if isinstance(event, dict) else None
            if isinstance(responses, list):
                for response in responses:
                    if isinstance(response, dict) and response.get("ID") == peer_id:
                        return True, response.get("Addrs")
            return False, None

        url = self._make_url("routing/findpeer", [("arg", peer_id)])
        with closing(self._transport.stream(url)) as chunks:
            return find_first(iter_lines(chunks), match, f"peer {peer_id}")

    def dht_find_provs(self, cid: str) -> List[Any]:
        """Return the routing events of a provider search, one per reply line."""
        url = self._make_url("routing/findprovs", [("arg", cid)])
        with closing(self._transport.stream(url)) as chunks:
            return collect_array(iter_lines(chunks))

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def block_get(self, block_id: str, output: Optional[BinaryIO] = None) -> Optional[bytes]:
        """Return the raw block, or write it to ``output`` when given."""
        return self._fetch_raw(self._make_url("block/get", [("arg", block_id)]), output)

    def block_put(self, block: FileUpload) -> Any:
        """Store a block; returns ``{"Key": cid, "Size": n}``."""
        return self._fetch_json(self._make_url("block/put"), [block])

    def block_stat(self, block_id: str) -> Any:
        return self._fetch_json(self._make_url("block/stat", [("arg", block_id)]))

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def files_get(self, path: str, output: Optional[BinaryIO] = None) -> Optional[bytes]:
        """Return the contents of the file at ``path`` (or write them to ``output``)."""
        return self._fetch_raw(self._make_url("cat", [("arg", path)]), output)

    def files_add(self, files: Sequence[FileUpload]) -> List[dict]:
        """
        Add files and return one ``{"path", "hash", "size"}`` record per file.

        The daemon reports progress and results for each file on separate
        lines, in any order; they are merged by file name.
        """
        url = self._make_url("add", [("progress", "true")])
        with closing(self._transport.stream(url, files)) as chunks:
            return merge_records(
                iter_lines(chunks),
                key_field="Name",
                fields={"Hash": "hash", "Bytes": "size"},
                key_name="path",
            )

    def files_ls(self, path: str) -> Any:
        return self._fetch_json(self._make_url("file/ls", [("arg", path)]))

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def key_gen(self, key_name: str, key_type: str = "rsa", key_size: int = 2048) -> str:
        """Generate a key and return its ID."""
        response = self._fetch_json(self._make_url(
            "key/gen",
            [("arg", key_name), ("type", key_type), ("size", str(key_size))],
        ))
        return get_property(response, "Id")

    def key_list(self) -> List[Any]:
        """Return ``[{"Name": ..., "Id": ...}, ...]`` for all keys."""
        response = self._fetch_json(self._make_url("key/list"))
        return get_property(response, "Keys")

    def key_rm(self, key_name: str) -> None:
        self._fetch(self._make_url("key/rm", [("arg", key_name)]))

    def key_rename(self, old_key: str, new_key: str) -> None:
        self._fetch(self._make_url("key/rename", [("arg", old_key), ("arg", new_key)]))

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def name_publish(self, object_id: str, key_name: str = "self", options: Options = ()) -> str:
        """
        Publish ``object_id`` under the key ``key_name``; returns the name.

        Args:
            object_id: Path or CID to publish
            key_name: Name of the key to publish under
            options: Extra (name, value) query parameters, e.g.
                [("lifetime", "24h"), ("allow-offline", True)]
        """
        items = options.items() if isinstance(options, Mapping) else options
        params = [("arg", object_id), ("key", key_name)]
        params.extend((name, _param(value)) for name, value in items)

        response = self._fetch_json(self._make_url("name/publish", params))
        return get_property(response, "Name")

    def name_resolve(self, name_id: str) -> str:
        """Resolve a name to the path it points to."""
        response = self._fetch_json(self._make_url("name/resolve", [("arg", name_id)]))
        return get_property(response, "Path")

    # ------------------------------------------------------------------
    # DAG
    # ------------------------------------------------------------------

    def dag_put(self, node: Any, pin: bool = False) -> str:
        """Store a JSON node and return its CID."""
        response = self._fetch_json(
            self._make_url("dag/put", [("pin", _param(pin))]),
            [FileUpload.from_contents("file", json.dumps(node))],
        )
        return get_property(get_property(response, "Cid"), "/")

    def dag_get(self, path: str) -> Any:
        return self._fetch_json(self._make_url("dag/get", [("arg", path)]))

    def dag_resolve(self, path: str) -> Any:
        """Return ``{"Cid": ..., "RemPath": ...}`` for ``path``."""
        return self._fetch_json(self._make_url("dag/resolve", [("arg", path)]))

    def dag_stat(self, root_id: str) -> Any:
        return self._fetch_json(
            self._make_url("dag/stat", [("arg", root_id), ("progress", "false")])
        )

    def dag_export(self, cid: str, output: Optional[BinaryIO] = None) -> Optional[bytes]:
        """Export the DAG rooted at ``cid`` as a CAR archive."""
        return self._fetch_raw(
            self._make_url("dag/export", [("arg", cid), ("progress", "false")]), output
        )

    def dag_import(self, data: FileUpload, pin: bool = True) -> str:
        """
        Import a CAR archive and return its root CID.

        Comparing the result with the CID given to ``dag_export`` is up to
        the caller.
        """
        response = self._fetch_json(
            self._make_url("dag/import", [("pin-roots", _param(pin))]), [data]
        )
        root = get_property(response, "Root")
        return get_property(get_property(root, "Cid"), "/")

    # ------------------------------------------------------------------
    # Pins
    # ------------------------------------------------------------------

    def pin_add(self, object_id: str) -> None:
        """
        Pin ``object_id``.

        Raises:
            PostConditionError: If the reply does not list the object as pinned
        """
        response = self._fetch_json(self._make_url("pin/add", [("arg", object_id)]))
        pins = get_property(response, "Pins", expected_type=list)

        if object_id not in pins:
            raise PostConditionError(
                f'Request to pin "{object_id}" got a result that does not '
                f"contain it as pinned: {json.dumps(response)}",
                object_id,
                response,
            )

    def pin_ls(self, object_id: Optional[str] = None) -> Any:
        """List all pins, or the pin state of ``object_id``."""
        params = [("arg", object_id)] if object_id else []
        return self._fetch_json(self._make_url("pin/ls", params))

    def pin_rm(
        self,
        object_id: str,
        recursive: Union[bool, PinRmOptions] = PinRmOptions.RECURSIVE,
    ) -> None:
        if isinstance(recursive, PinRmOptions):
            recursive = recursive is PinRmOptions.RECURSIVE
        self._fetch_json(self._make_url(
            "pin/rm", [("arg", object_id), ("recursive", _param(recursive))]
        ))

    # ------------------------------------------------------------------
    # Stats and swarm
    # ------------------------------------------------------------------

    def stats_bw(self) -> Any:
        return self._fetch_json(self._make_url("stats/bw"))

    def stats_repo(self) -> Any:
        return self._fetch_json(self._make_url("stats/repo"))

    def swarm_addrs(self) -> Any:
        return self._fetch_json(self._make_url("swarm/addrs"))

    def swarm_connect(self, peer: str) -> None:
        self._fetch_json(self._make_url("swarm/connect", [("arg", peer)]))

    def swarm_disconnect(self, peer: str) -> None:
        self._fetch_json(self._make_url("swarm/disconnect", [("arg", peer)]))

    def swarm_peers(self) -> Any:
        return self._fetch_json(self._make_url("swarm/peers"))

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def abort(self) -> None:
        """Cancel the calls in flight on this client's transport."""
        self._transport.stop_fetch()

    def reset(self) -> None:
        """Make the transport usable again after ``abort``."""
        self._transport.reset_fetch()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _make_url(self, path: str, params: QueryParams = ()) -> str:
        return build_url(
            self._url_prefix,
            path,
            params,
            timeout=self._config.timeout,
            encode=self._transport.url_encode,
        )

    def _fetch(self, url: str, files: Sequence[FileUpload] = ()) -> bytes:
        body = io.BytesIO()
        self._transport.fetch(url, files, body)
        return body.getvalue()

    def _fetch_json(self, url: str, files: Sequence[FileUpload] = ()) -> Any:
        return parse_json(decode_text(self._fetch(url, files)))

    def _fetch_raw(self, url: str, output: Optional[BinaryIO]) -> Optional[bytes]:
        if output is None:
            return self._fetch(url)
        self._transport.fetch(url, (), output)
        return None
