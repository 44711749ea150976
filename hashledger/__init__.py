# HashLedger
"""
Minimal append-only, hash-linked ledger.

- Record codec: canonical payload encoding used as hash input
- Chain engine: genesis, append and validation over immutable tuples
- Session: single-writer owner of a chain for form/display layers
"""

from .exceptions import (
    LedgerError,
    InvalidPayload,
    EmptyChainError,
    ChainIntegrityError,
    ConfigurationError,
)

from .blockchain import (
    Payload,
    Block,
    Chain,
    ChainStatus,
    ValidationReport,
    canonical_amount,
    make_payload,
    serialize,
    compute_hash,
    create_genesis,
    new_chain,
    append,
    verify,
    validate,
)

from .config import LedgerConfig
from .integration.session import LedgerSession

__version__ = "0.1.0"

__all__ = [
    # Errors
    'LedgerError',
    'InvalidPayload',
    'EmptyChainError',
    'ChainIntegrityError',
    'ConfigurationError',
    # Chain
    'Payload',
    'Block',
    'Chain',
    'ChainStatus',
    'ValidationReport',
    'canonical_amount',
    'make_payload',
    'serialize',
    'compute_hash',
    'create_genesis',
    'new_chain',
    'append',
    'verify',
    'validate',
    # Session
    'LedgerConfig',
    'LedgerSession',
]
