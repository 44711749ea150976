"""
Blockchain Ledger Module

Implements an append-only, hash-linked chain of immutable blocks:
- SHA-224 content hash over (index, timestamp, payload, previous hash)
- Fixed genesis block anchoring every chain
- Append under the linking rule, returning a new chain value
- Linear validation detecting broken links and tampered hashes

Chains are plain tuples of blocks. Operations take a chain and return a new
one; nothing here holds global state.

Security features:
- Immutable blocks (frozen dataclass)
- Fail closed on empty chains (no substitute block)
- Integrity failures reported as data, never repaired
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ..core_crypto.digests import DEFAULT_BACKEND, get_digest
from ..exceptions import ChainIntegrityError, EmptyChainError
from .codec import Payload, check_payload, serialize


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

GENESIS_PREV_HASH = "0"
GENESIS_TIMESTAMP = "0"
GENESIS_PAYLOAD = Payload(sender="", receiver="", amount="0")

HASH_HEX_LENGTH = 56  # 224 bits


# ============================================================================
# Block Structure (Immutable)
# ============================================================================

@dataclass(frozen=True)
class Block:
    """
    Immutable block structure.

    hash == compute_hash(index, timestamp, payload, previous_hash) for every
    block produced by create_genesis() or append().
    """
    index: int
    timestamp: str  # Milliseconds since epoch, decimal text
    payload: Payload
    previous_hash: str
    hash: str

    @property
    def is_genesis(self) -> bool:
        return self.index == 0 and self.previous_hash == GENESIS_PREV_HASH

    def to_dict(self) -> Dict[str, Any]:
        """Convert block to dictionary for serialization."""
        return {
            'index': self.index,
            'timestamp': self.timestamp,
            'payload': self.payload.to_dict(),
            'previous_hash': self.previous_hash,
            'hash': self.hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """
        Create block from dictionary. Does not verify the hash.

        Raises:
            KeyError: If a field is missing
            TypeError: If a field has the wrong JSON type
            ValueError: If the timestamp is not canonical millisecond text
        """
        index = data['index']
        timestamp = data['timestamp']
        # bool is an int subclass
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Block index must be an integer, got {index!r}")
        if not isinstance(timestamp, str):
            raise TypeError(f"Block timestamp must be a string, got {timestamp!r}")
        if not is_canonical_timestamp(timestamp):
            raise ValueError(f"Block timestamp is not millisecond text: {timestamp!r}")
        for name in ('previous_hash', 'hash'):
            if not isinstance(data[name], str):
                raise TypeError(f"Block {name} must be a string, got {data[name]!r}")

        return cls(
            index=index,
            timestamp=timestamp,
            payload=Payload.from_dict(data['payload']),
            previous_hash=data['previous_hash'],
            hash=data['hash'],
        )

    def __str__(self) -> str:
        return (
            f"Block #{self.index}\n"
            f"  Hash: {self.hash[:16]}...\n"
            f"  Prev: {self.previous_hash[:16]}{'...' if len(self.previous_hash) > 16 else ''}\n"
            f"  Time: {self.timestamp}\n"
            f"  Payload: {self.payload}"
        )


Chain = Tuple[Block, ...]


# ============================================================================
# Hashing
# ============================================================================

def hash_input(index: int, timestamp: str, payload: Payload, previous_hash: str) -> str:
    """The exact string fed to the digest: index, timestamp, payload, previous hash."""
    return f"{index}{timestamp}{serialize(payload)}{previous_hash}"


def compute_hash(
    index: int,
    timestamp: str,
    payload: Payload,
    previous_hash: str,
    backend: str = DEFAULT_BACKEND
) -> str:
    """
    Compute the content hash for a block.

    Args:
        index: Block position in the chain
        timestamp: Milliseconds since epoch as text
        payload: Block payload
        previous_hash: Hash of the preceding block ("0" for genesis)
        backend: Digest backend name (see core_crypto.digests)

    Returns:
        56-character hex SHA-224 digest
    """
    digest = get_digest(backend)
    return digest(hash_input(index, timestamp, payload, previous_hash).encode('utf-8'))


def is_canonical_timestamp(timestamp: str) -> bool:
    """True for the digit text append() stores: ASCII digits, no leading zeros."""
    return (
        isinstance(timestamp, str)
        and timestamp.isascii()
        and timestamp.isdigit()
        and (timestamp == "0" or not timestamp.startswith("0"))
    )


def _timestamp_text(timestamp: Union[int, str]) -> str:
    # bool is an int subclass
    if isinstance(timestamp, bool):
        raise ValueError("Timestamp must be milliseconds since epoch")
    if isinstance(timestamp, int):
        if timestamp < 0:
            raise ValueError(f"Timestamp must be non-negative, got {timestamp}")
        return str(timestamp)
    if isinstance(timestamp, str) and timestamp.isascii() and timestamp.isdigit():
        return str(int(timestamp))
    raise ValueError(f"Timestamp must be milliseconds since epoch, got {timestamp!r}")


# ============================================================================
# Construction
# ============================================================================

def create_genesis(backend: str = DEFAULT_BACKEND) -> Block:
    """Create the genesis block. Every call returns an identical block."""
    return Block(
        index=0,
        timestamp=GENESIS_TIMESTAMP,
        payload=GENESIS_PAYLOAD,
        previous_hash=GENESIS_PREV_HASH,
        hash=compute_hash(
            0, GENESIS_TIMESTAMP, GENESIS_PAYLOAD, GENESIS_PREV_HASH, backend
        ),
    )


def new_chain(backend: str = DEFAULT_BACKEND) -> Chain:
    """Create a chain holding only the genesis block."""
    return (create_genesis(backend),)


def last_block(chain: Sequence[Block]) -> Block:
    """
    Get the last block of a chain.

    Raises:
        EmptyChainError: If the chain has no blocks
    """
    if not chain:
        raise EmptyChainError("Chain is empty; it must contain at least the genesis block")
    return chain[-1]


def append(
    chain: Sequence[Block],
    payload: Payload,
    timestamp: Union[int, str],
    backend: str = DEFAULT_BACKEND
) -> Chain:
    """
    Append a new block linked to the current last block.

    Args:
        chain: Existing chain (at least the genesis block)
        payload: Payload built with make_payload()
        timestamp: Milliseconds since epoch, int or digit string
        backend: Digest backend name

    Returns:
        New chain with the block appended; the input is not modified

    Raises:
        EmptyChainError: If the chain has no blocks
        InvalidPayload: If the payload is not eligible for appending
        ValueError: If the timestamp is not a non-negative integer
    """
    prev_block = last_block(chain)
    check_payload(payload)
    timestamp = _timestamp_text(timestamp)

    index = len(chain)
    block = Block(
        index=index,
        timestamp=timestamp,
        payload=payload,
        previous_hash=prev_block.hash,
        hash=compute_hash(index, timestamp, payload, prev_block.hash, backend),
    )

    logger.debug("Appended block #%d hash=%s", index, block.hash[:16])
    return tuple(chain) + (block,)


def check_block(block: Block, position: int) -> None:
    """
    Assert that a stored non-genesis block has the shape append() produces.

    Hashes are not checked here; that is verify()'s job.

    Raises:
        ValueError: If the index, timestamp or hashes are malformed
        InvalidPayload: If the payload is not eligible for appending
    """
    if not isinstance(block, Block):
        raise ValueError(f"Expected Block, got {type(block).__name__}")
    if isinstance(block.index, bool) or block.index != position:
        raise ValueError(f"Block at position {position} has index {block.index!r}")
    if not is_canonical_timestamp(block.timestamp):
        raise ValueError(f"Block #{position} timestamp is not millisecond text: {block.timestamp!r}")
    if not isinstance(block.previous_hash, str) or not isinstance(block.hash, str):
        raise ValueError(f"Block #{position} hashes must be strings")
    check_payload(block.payload)


# ============================================================================
# Validation
# ============================================================================

class ChainStatus(Enum):
    """Outcome of chain verification."""
    VALID = "valid"
    EMPTY = "empty"
    BROKEN_LINK = "broken_link"
    TAMPERED_HASH = "tampered_hash"


@dataclass(frozen=True)
class ValidationReport:
    """Result of verify(): the status and the first failing position, if any."""
    status: ChainStatus
    index: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is ChainStatus.VALID

    def __bool__(self) -> bool:
        return self.ok

    def __str__(self) -> str:
        if self.index is None:
            return self.status.value
        return f"{self.status.value} at block #{self.index}"


def verify(chain: Sequence[Block], backend: str = DEFAULT_BACKEND) -> ValidationReport:
    """
    Walk the chain and report the first integrity failure.

    The genesis block is trusted as is. For each later block the link to its
    predecessor is checked first, then the stored hash is recomputed from the
    block's own fields. Scanning stops at the first failure.
    """
    if not chain:
        logger.warning("Validation of an empty chain")
        return ValidationReport(ChainStatus.EMPTY)

    for i in range(1, len(chain)):
        previous = chain[i - 1]
        current = chain[i]

        if current.previous_hash != previous.hash:
            logger.warning("Broken link at block #%d", i)
            return ValidationReport(ChainStatus.BROKEN_LINK, i)

        expected = compute_hash(
            current.index,
            current.timestamp,
            current.payload,
            current.previous_hash,
            backend
        )
        if current.hash != expected:
            logger.warning("Hash mismatch at block #%d", i)
            return ValidationReport(ChainStatus.TAMPERED_HASH, i)

    return ValidationReport(ChainStatus.VALID)


def validate(chain: Sequence[Block], backend: str = DEFAULT_BACKEND) -> bool:
    """True if every link and every stored hash in the chain checks out."""
    return verify(chain, backend).ok


# ============================================================================
# Serialization
# ============================================================================

def chain_to_json(chain: Sequence[Block]) -> str:
    """Serialize a chain to JSON."""
    return json.dumps({'chain': [block.to_dict() for block in chain]}, indent=2)


def chain_from_json(json_str: str) -> Chain:
    """
    Deserialize a chain from JSON. The result is not verified.

    Raises:
        ChainIntegrityError: If the text is not a well-formed chain document
    """
    try:
        data = json.loads(json_str)
        return tuple(Block.from_dict(block_data) for block_data in data['chain'])
    except (KeyError, TypeError, ValueError) as e:
        raise ChainIntegrityError(f"Malformed chain JSON: {e!r}") from e


def format_chain(chain: Sequence[Block]) -> str:
    """Readable multi-line rendering of a chain."""
    lines = [f"Blockchain (length={len(chain)})", "=" * 60]
    for block in chain:
        lines.append(str(block))
        lines.append("-" * 40)
    return "\n".join(lines)
