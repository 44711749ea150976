"""
Ledger Session Module

Single-writer owner of a chain value. The session is what a form or
display layer talks to:

- Boundary validation of raw form fields (sender, receiver, amount)
- Timestamps from an injectable clock (milliseconds since epoch)
- Serialized appends: reading the last hash and publishing the new chain
  happen under one lock, so two appends can never fork the chain
- Snapshot validation
- JSON export/import with verification on import

Author: HashLedger Project
"""

import logging
import time
from threading import Lock
from typing import Callable, List, Optional, Sequence, Union

from ..blockchain.codec import AmountInput, Payload, make_payload, serialize
from ..blockchain.ledger import (
    Block,
    Chain,
    ValidationReport,
    append,
    chain_from_json,
    chain_to_json,
    check_block,
    create_genesis,
    format_chain,
    last_block,
    new_chain,
    verify,
)
from ..config import LedgerConfig
from ..exceptions import ChainIntegrityError


logger = logging.getLogger(__name__)


Clock = Callable[[], int]


def system_clock_ms() -> int:
    """Current wall-clock time in milliseconds since epoch."""
    return time.time_ns() // 1_000_000


class LedgerSession:
    """
    Owns one chain and serializes every append to it.

    The chain itself is an immutable tuple; appends replace the reference.
    Readers get a snapshot and never observe a half-built chain.
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        clock: Optional[Clock] = None,
        chain: Optional[Sequence[Block]] = None
    ):
        """
        Initialize the session.

        Args:
            config: Hash backend and logging settings (defaults if omitted)
            clock: Callable returning milliseconds since epoch
            chain: Optional existing chain to take ownership of. It is
                verified first.

        Raises:
            ChainIntegrityError: If a supplied chain has a foreign genesis
                block, a malformed block, or fails verification
        """
        self._config = config or LedgerConfig()
        self._clock = clock or system_clock_ms
        self._lock = Lock()
        self._callbacks: List[Callable[[Block], None]] = []

        if chain is None:
            self._chain: Chain = new_chain(self._config.hash_backend)
        else:
            self._chain = self._checked(chain)

    def _checked(self, chain: Sequence[Block]) -> Chain:
        chain = tuple(chain)
        backend = self._config.hash_backend

        # verify() does not re-derive genesis
        if chain and chain[0] != create_genesis(backend):
            raise ChainIntegrityError("Chain does not start with the genesis block")

        for position, block in enumerate(chain[1:], start=1):
            try:
                check_block(block, position)
            except ValueError as e:
                raise ChainIntegrityError(f"Block #{position} is malformed: {e}") from e

        report = verify(chain, backend)
        if not report:
            raise ChainIntegrityError(f"Chain failed verification: {report}", report)
        return chain

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def chain(self) -> Chain:
        """Current chain snapshot."""
        return self._chain

    @property
    def length(self) -> int:
        return len(self._chain)

    @property
    def last_block(self) -> Block:
        return last_block(self._chain)

    # ========================================================================
    # Appending
    # ========================================================================

    def submit(self, sender: str, receiver: str, amount: AmountInput) -> Block:
        """
        Validate raw form fields and append them as a new block.

        Raises:
            InvalidPayload: If a field fails boundary validation. Nothing is
                appended in that case.
        """
        try:
            payload = make_payload(sender, receiver, amount)
        except ValueError as e:
            logger.warning("Rejected payload: %s", e)
            raise
        return self.append(payload)

    def append(self, payload: Payload, timestamp: Optional[Union[int, str]] = None) -> Block:
        """
        Append a prebuilt payload.

        Args:
            payload: Payload built with make_payload()
            timestamp: Milliseconds since epoch; taken from the clock if omitted

        Returns:
            The new block
        """
        with self._lock:
            if timestamp is None:
                timestamp = self._clock()
            self._chain = append(self._chain, payload, timestamp, self._config.hash_backend)
            block = self._chain[-1]

        logger.info("Block #%d appended: %s", block.index, payload)
        self._notify(block)
        return block

    def add_callback(self, callback: Callable[[Block], None]) -> None:
        """Add a callback to be notified of new blocks."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[Block], None]) -> None:
        """Remove a callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self, block: Block) -> None:
        for callback in list(self._callbacks):
            try:
                callback(block)
            except Exception:
                # A broken listener must not undo a committed append
                logger.exception("Block callback %r failed", callback)

    # ========================================================================
    # Validation and Display
    # ========================================================================

    def verify(self) -> ValidationReport:
        """Verify a snapshot of the chain."""
        with self._lock:
            snapshot = self._chain
        return verify(snapshot, self._config.hash_backend)

    def validate(self) -> bool:
        """True if the owned chain is intact."""
        return self.verify().ok

    @staticmethod
    def serialize_payload(payload: Payload) -> str:
        """The canonical encoding hashed into a block, for display."""
        return serialize(payload)

    def format(self) -> str:
        return format_chain(self._chain)

    # ========================================================================
    # Export / Import
    # ========================================================================

    def export_json(self) -> str:
        """Export the chain as JSON."""
        return chain_to_json(self._chain)

    @classmethod
    def import_json(
        cls,
        json_str: str,
        config: Optional[LedgerConfig] = None,
        clock: Optional[Clock] = None
    ) -> 'LedgerSession':
        """
        Create a session from exported JSON.

        Raises:
            ChainIntegrityError: If the JSON is malformed or the imported
                chain is rejected (see __init__)
        """
        return cls(config=config, clock=clock, chain=chain_from_json(json_str))
