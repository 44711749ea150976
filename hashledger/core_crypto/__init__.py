# Core Cryptography Module
"""
Hash primitives used by the ledger:
- SHA-224 (from scratch, FIPS 180-4)
- Digest backend selection (builtin or OpenSSL via cryptography)
"""

from .sha224 import sha224, sha224_hex, DIGEST_SIZE
from .digests import get_digest, available_backends, BUILTIN, OPENSSL, DEFAULT_BACKEND

__all__ = [
    'sha224',
    'sha224_hex',
    'DIGEST_SIZE',
    'get_digest',
    'available_backends',
    'BUILTIN',
    'OPENSSL',
    'DEFAULT_BACKEND',
]
