"""
Address Commitment Module

Derives the public address commitment a_pk from the address secret a_sk:

    a_pk = SHA256Compress(a_sk || 0^256)

SHA256Compress is the bare SHA-256 compression function applied to one
512-bit block, starting from the standard initial hash value and without
message padding or length encoding. The result is therefore NOT equal to
hashlib.sha256(a_sk + bytes(32)). The same construction is what the proof
circuit evaluates, so the exact byte layout must be kept.
"""

import struct

A_SK_SIZE = 32
A_PK_SIZE = 32
BLOCK_SIZE = 64

# Reserved half of the block, all zero bits.
ZERO_SUFFIX = bytes(BLOCK_SIZE - A_SK_SIZE)

_IV = (
    0x6a09e667, 0xbb67ae85, 0x3c6ef372, 0xa54ff53a,
    0x510e527f, 0x9b05688c, 0x1f83d9ab, 0x5be0cd19,
)

_K = (
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5, 0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3, 0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc, 0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7, 0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13, 0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3, 0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5, 0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208, 0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2,
)

_MASK = 0xffffffff


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK


def sha256_compress(block: bytes) -> bytes:
    """
    Run the SHA-256 compression function once over a 64-byte block.

    Args:
        block: Exactly 64 bytes

    Returns:
        bytes: 32-byte big-endian chaining value
    """
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"block must be {BLOCK_SIZE} bytes, got {len(block)}")

    w = list(struct.unpack(">16I", block))
    for t in range(16, 64):
        s0 = _rotr(w[t - 15], 7) ^ _rotr(w[t - 15], 18) ^ (w[t - 15] >> 3)
        s1 = _rotr(w[t - 2], 17) ^ _rotr(w[t - 2], 19) ^ (w[t - 2] >> 10)
        w.append((w[t - 16] + s0 + w[t - 7] + s1) & _MASK)

    a, b, c, d, e, f, g, h = _IV
    for t in range(64):
        s1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
        ch = (e & f) ^ (~e & g)
        t1 = (h + s1 + ch + _K[t] + w[t]) & _MASK
        s0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        t2 = (s0 + maj) & _MASK
        h, g, f, e, d, c, b, a = g, f, e, (d + t1) & _MASK, c, b, a, (t1 + t2) & _MASK

    state = [(x + y) & _MASK for x, y in zip(_IV, (a, b, c, d, e, f, g, h))]
    return struct.pack(">8I", *state)


def derive_a_pk(a_sk: bytes) -> bytes:
    """
    Compute the public commitment for an address secret.

    Args:
        a_sk: 32-byte address secret

    Returns:
        bytes: 32-byte a_pk
    """
    a_sk = bytes(a_sk)
    if len(a_sk) != A_SK_SIZE:
        raise ValueError(f"a_sk must be {A_SK_SIZE} bytes, got {len(a_sk)}")
    return sha256_compress(a_sk + ZERO_SUFFIX)
