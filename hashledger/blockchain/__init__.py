# Blockchain Module
"""
Hash-linked ledger implementation including:
- Record codec (canonical payload encoding) - codec.py
- Block construction, append and validation - ledger.py

Security features:
- Immutable blocks (frozen dataclass)
- Full chain validation with early exit
- No substitute blocks for empty chains
"""

from .codec import (
    Payload,
    canonical_amount,
    make_payload,
    check_payload,
    serialize,
)

from .ledger import (
    Block,
    Chain,
    ChainStatus,
    ValidationReport,
    compute_hash,
    hash_input,
    create_genesis,
    new_chain,
    last_block,
    check_block,
    is_canonical_timestamp,
    append,
    verify,
    validate,
    chain_to_json,
    chain_from_json,
    format_chain,
    GENESIS_PREV_HASH,
    GENESIS_TIMESTAMP,
    GENESIS_PAYLOAD,
    HASH_HEX_LENGTH,
)

__all__ = [
    # Codec
    'Payload',
    'canonical_amount',
    'make_payload',
    'check_payload',
    'serialize',
    # Ledger
    'Block',
    'Chain',
    'ChainStatus',
    'ValidationReport',
    'compute_hash',
    'hash_input',
    'create_genesis',
    'new_chain',
    'last_block',
    'check_block',
    'is_canonical_timestamp',
    'append',
    'verify',
    'validate',
    'chain_to_json',
    'chain_from_json',
    'format_chain',
    'GENESIS_PREV_HASH',
    'GENESIS_TIMESTAMP',
    'GENESIS_PAYLOAD',
    'HASH_HEX_LENGTH',
]
