"""
config.py - Runtime configuration for hashledger.

Values come from the environment (optionally a .env file):
    HASHLEDGER_HASH_BACKEND   builtin | cryptography   (default: builtin)
    HASHLEDGER_LOG_LEVEL      DEBUG | INFO | WARNING | ERROR | CRITICAL

The genesis constants and the hash input order are fixed and not
configurable.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .core_crypto.digests import DEFAULT_BACKEND, available_backends
from .exceptions import ConfigurationError


ENV_HASH_BACKEND = "HASHLEDGER_HASH_BACKEND"
ENV_LOG_LEVEL = "HASHLEDGER_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerConfig:
    """Settings shared by a session and the demo entry point."""
    hash_backend: str = DEFAULT_BACKEND
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if self.hash_backend not in available_backends():
            raise ConfigurationError(
                f"Unknown hash backend {self.hash_backend!r}, "
                f"expected one of {available_backends()}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level {self.log_level!r}, expected one of {list(LOG_LEVELS)}"
            )

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_env(cls, dotenv_path=None) -> 'LedgerConfig':
        """
        Build a config from environment variables.

        Loads a .env file first (existing variables win), then reads the
        HASHLEDGER_* variables.

        Raises:
            ConfigurationError: If a variable holds an unsupported value
        """
        load_dotenv(dotenv_path)
        return cls(
            hash_backend=os.getenv(ENV_HASH_BACKEND, DEFAULT_BACKEND).strip().lower(),
            log_level=os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).strip().upper(),
        )
