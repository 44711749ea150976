"""
HashLedger - Demo Entry Point

Builds a short chain, prints it, validates it, then shows validation
catching a tampered copy.
"""

import dataclasses
import logging

from .blockchain.ledger import verify
from .config import LedgerConfig
from .integration.session import LedgerSession


DEMO_TRANSFERS = [
    ("alice", "bob", "2.5"),
    ("bob", "carol", "0010"),
    ("carol", "alice", "01.250"),
]


def main(config=None):
    """Main entry point for the HashLedger demo."""
    config = config or LedgerConfig.from_env()
    logging.basicConfig(
        level=config.log_level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    session = LedgerSession(config=config)
    for sender, receiver, amount in DEMO_TRANSFERS:
        block = session.submit(sender, receiver, amount)
        print(f"Canonical payload #{block.index}: {session.serialize_payload(block.payload)}")

    print()
    print(session.format())
    print(f"Chain valid: {session.validate()}")
    total = sum(block.payload.value for block in session.chain[1:])
    print(f"Total transferred: {total}")

    # Rewrite the amount of block 1 without recomputing its hash
    chain = list(session.chain)
    forged = dataclasses.replace(chain[1].payload, amount="2500")
    chain[1] = dataclasses.replace(chain[1], payload=forged)
    report = verify(chain, config.hash_backend)
    print(f"Tampered copy: {report}")

    return 0 if session.validate() and not report else 1


if __name__ == "__main__":
    raise SystemExit(main())
