"""
Basic ipfs_client example.

Adds a file, reads it back, pins it and publishes it under the node's
own key. Needs a daemon listening on localhost:5001.
"""

import logging

from ipfs_client import Client, FileUpload, IPFSClientError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def show_node(client: Client) -> None:
    """Print the node identity and version."""
    identity = client.id()
    logger.info(f"Peer ID: {identity['ID']}")
    logger.info(f"Daemon version: {client.version()['Version']}")


def add_and_read(client: Client) -> str:
    """Add two files and read the first one back."""
    added = client.files_add([
        FileUpload.from_contents("foo.txt", "abcd"),
        FileUpload.from_contents("bar.txt", "Hello and Welcome to IPFS!"),
    ])
    for record in added:
        logger.info(f"Added {record['path']}: {record['hash']} ({record.get('size')} bytes)")

    cid = added[0]["hash"]
    logger.info(f"Contents of {cid}: {client.files_get(cid)!r}")
    return cid


def pin_and_publish(client: Client, cid: str) -> None:
    """Pin the object and publish it under the node's key."""
    client.pin_add(cid)
    logger.info(f"Pinned {cid}")

    name = client.name_publish(cid, options={"lifetime": "1h", "allow-offline": True})
    logger.info(f"Published as /ipns/{name}")
    logger.info(f"Resolves to {client.name_resolve(name)}")


def dag_round_trip(client: Client) -> None:
    """Store a DAG node, export it as a CAR archive and import it again."""
    cid = client.dag_put({"Data": "hello", "Links": []})
    car = client.dag_export(cid)
    logger.info(f"Exported {cid} ({len(car)} bytes)")

    root = client.dag_import(FileUpload.from_contents("file", car))
    logger.info(f"Imported root {root} (matches: {root == cid})")


def main() -> None:
    """Run all examples."""
    with Client(timeout="20s") as client:
        try:
            show_node(client)
            cid = add_and_read(client)
            pin_and_publish(client, cid)
            dag_round_trip(client)
        except IPFSClientError as e:
            logger.error(f"Example failed ({e.kind.value}): {e}")
            raise


if __name__ == "__main__":
    main()
