"""
Cancelling a long-running call from another thread.

A peer lookup can block for a long time while the daemon searches the
DHT. This example starts one in a worker thread, aborts it, and then
resets the client so it can be used again. Needs a daemon on
localhost:5001.
"""

import logging
import sys
import threading
import time

from ipfs_client import Client, ErrorKind, attempt

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s %(threadName)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def lookup(client: Client, peer_id: str) -> None:
    result = attempt(client.dht_find_peer, peer_id)

    if result.ok:
        logger.info(f"Addresses: {result.value}")
    elif result.kind is ErrorKind.CANCELLED:
        logger.info("Lookup aborted")
    else:
        logger.warning(f"Lookup failed: {result.error}")


def main(peer_id: str) -> None:
    client = Client(verbose=True)

    # Clones abort independently of the original
    other = client.clone()

    worker = threading.Thread(target=lookup, args=(client, peer_id), name="lookup")
    worker.start()

    time.sleep(1.0)
    logger.info("Aborting lookup...")
    client.abort()
    worker.join()

    logger.info(f"Clone still usable: {other.version()['Version']}")

    client.reset()
    logger.info(f"Client usable again: {client.version()['Version']}")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "12D3KooWDpJ7As7BWAwRMfu1VU2WCqNjvq387JEYKDBj4kx6nXTN")
