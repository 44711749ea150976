"""
Digest backends for block hashing.

Two interchangeable SHA-224 implementations:
- builtin:      the from-scratch implementation in sha224.py
- cryptography: OpenSSL-backed SHA-224 from the cryptography package

Both return lowercase hex and must agree byte for byte; block hashes are a
compatibility surface between implementations.
"""

from typing import Callable, Dict

from cryptography.hazmat.primitives import hashes

from ..exceptions import ConfigurationError
from .sha224 import sha224_hex


DigestFunc = Callable[[bytes], str]

BUILTIN = "builtin"
OPENSSL = "cryptography"
DEFAULT_BACKEND = BUILTIN


def openssl_sha224_hex(data: bytes) -> str:
    """SHA-224 via cryptography's hashes.Hash context."""
    digest = hashes.Hash(hashes.SHA224())
    digest.update(data)
    return digest.finalize().hex()


_BACKENDS: Dict[str, DigestFunc] = {
    BUILTIN: sha224_hex,
    OPENSSL: openssl_sha224_hex,
}


def available_backends():
    """Names accepted by get_digest()."""
    return sorted(_BACKENDS)


def get_digest(name: str = DEFAULT_BACKEND) -> DigestFunc:
    """
    Look up a digest backend by name.

    Raises:
        ConfigurationError: If the backend name is unknown
    """
    try:
        return _BACKENDS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown hash backend {name!r}, expected one of {available_backends()}"
        ) from None
