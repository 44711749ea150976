"""
SHA-224 Hash Implementation (From Scratch)

Implements the SHA-224 cryptographic hash function as defined in FIPS 180-4.
SHA-224 shares the SHA-256 compression function; it differs only in the
initial hash state and in truncating the final state to seven words.

Components:
- Padding: Pads message to multiple of 512 bits
- Message Schedule: Expands 16 words to 64 words
- Compression: 64 rounds of compression function
- Output: 224-bit (28-byte) digest
"""

from typing import List


# Initial hash values: second 32 bits of fractional parts of square roots
# of the 9th through 16th primes
H_INITIAL = [
    0xc1059ed8, 0x367cd507, 0x3070dd17, 0xf70e5939,
    0xffc00b31, 0x68581511, 0x64f98fa7, 0xbefa4fa4
]

# Round constants: first 32 bits of fractional parts of cube roots of first 64 primes
K = [
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5,
    0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3,
    0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc,
    0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7,
    0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13,
    0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3,
    0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5,
    0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208,
    0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2
]

MASK_32 = 0xFFFFFFFF

DIGEST_SIZE = 28  # bytes
OUTPUT_WORDS = 7


def _right_rotate(value: int, amount: int) -> int:
    return ((value >> amount) | (value << (32 - amount))) & MASK_32


def _ch(x: int, y: int, z: int) -> int:
    return ((x & y) ^ (~x & z)) & MASK_32


def _maj(x: int, y: int, z: int) -> int:
    return (x & y) ^ (x & z) ^ (y & z)


def _sigma0(x: int) -> int:
    return _right_rotate(x, 7) ^ _right_rotate(x, 18) ^ (x >> 3)


def _sigma1(x: int) -> int:
    return _right_rotate(x, 17) ^ _right_rotate(x, 19) ^ (x >> 10)


def _big_sigma0(x: int) -> int:
    return _right_rotate(x, 2) ^ _right_rotate(x, 13) ^ _right_rotate(x, 22)


def _big_sigma1(x: int) -> int:
    return _right_rotate(x, 6) ^ _right_rotate(x, 11) ^ _right_rotate(x, 25)


def _pad_message(data: bytes) -> bytes:
    """
    Pad the message to a multiple of 64 bytes.

    Appends 0x80, then zeros until length is 56 mod 64, then the original
    bit length as a 64-bit big-endian integer.
    """
    bit_length = len(data) * 8
    data += b'\x80'
    data += b'\x00' * ((56 - (len(data) % 64)) % 64)
    data += bit_length.to_bytes(8, byteorder='big')
    return data


def _message_schedule(chunk: bytes) -> List[int]:
    """Expand a 64-byte chunk into the 64-word message schedule."""
    w = [int.from_bytes(chunk[i:i + 4], byteorder='big') for i in range(0, 64, 4)]
    for i in range(16, 64):
        s0 = _sigma0(w[i - 15])
        s1 = _sigma1(w[i - 2])
        w.append((w[i - 16] + s0 + w[i - 7] + s1) & MASK_32)
    return w


def _compress(state: List[int], w: List[int]) -> List[int]:
    """Run the 64 compression rounds and fold the result into the state."""
    a, b, c, d, e, f, g, h = state

    for i in range(64):
        t1 = (h + _big_sigma1(e) + _ch(e, f, g) + K[i] + w[i]) & MASK_32
        t2 = (_big_sigma0(a) + _maj(a, b, c)) & MASK_32
        h = g
        g = f
        f = e
        e = (d + t1) & MASK_32
        d = c
        c = b
        b = a
        a = (t1 + t2) & MASK_32

    return [
        (s + v) & MASK_32
        for s, v in zip(state, (a, b, c, d, e, f, g, h))
    ]


def sha224(data: bytes) -> bytes:
    """
    Compute the SHA-224 hash of the input data.

    Args:
        data: Input bytes to hash

    Returns:
        224-bit (28-byte) digest as bytes

    Example:
        >>> sha224(b"abc").hex()
        '23097d223405d8228642a477bda255b32aadbce4bda0b3f7e36c9da7'
    """
    padded = _pad_message(data)
    state = H_INITIAL.copy()

    for i in range(0, len(padded), 64):
        state = _compress(state, _message_schedule(padded[i:i + 64]))

    # Truncate: SHA-224 drops the eighth word
    return b''.join(
        word.to_bytes(4, byteorder='big') for word in state[:OUTPUT_WORDS]
    )


def sha224_hex(data: bytes) -> str:
    """
    Compute SHA-224 hash and return as hexadecimal string.

    Returns:
        56-character lowercase hexadecimal string
    """
    return sha224(data).hex()
