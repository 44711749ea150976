"""
exceptions.py - Error taxonomy for the hashledger package.

Integrity failures found by chain validation are not exceptions; they are
reported as a ValidationReport. These classes cover contract violations at
the boundaries.
"""


class LedgerError(Exception):
    """Base exception for hashledger errors."""
    pass


class InvalidPayload(LedgerError, ValueError):
    """Raised when sender/receiver are empty or the amount is not a positive decimal."""
    pass


class EmptyChainError(LedgerError):
    """Raised when a chain with zero blocks is used where a genesis block is required."""
    pass


class ChainIntegrityError(LedgerError):
    """Raised when an imported chain is malformed or fails verification."""

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report


class ConfigurationError(LedgerError, ValueError):
    """Raised for invalid configuration values."""
    pass
