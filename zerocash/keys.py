"""
Encryption Key Module

Key material for the encryption half of an address:
- Random sources (libsodium CSPRNG by default, injectable for tests)
- secp256r1 (NIST P-256) private key generation
- PKCS#8 / SubjectPublicKeyInfo encoding and decoding

Keys cross the library boundary as bytes tagged with an encoding from
KEY_ENCODINGS: PKCS#8 for sk_enc and SubjectPublicKeyInfo for pk_enc, as
DER (KEY_ENCODING, the default) or PEM armour of the same structures.
"""

import hashlib
import logging
import struct
import threading
from typing import Optional, Protocol, Union

import nacl.utils
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from . import config

logger = logging.getLogger(__name__)

CURVE_NAME = "secp256r1"
KEY_ENCODINGS = {
    "der": "secp256r1/pkcs8-der",
    "pem": "secp256r1/pkcs8-pem",
}
KEY_ENCODING = KEY_ENCODINGS["der"]

# Group order of P-256.
CURVE_ORDER = 0xffffffff00000000ffffffffffffffffbce6faada7179e84f3b9cac2fc632551
SCALAR_SIZE = 32

_PEM_PREFIX = b"-----BEGIN"

KeyBytes = Union[bytes, bytearray, memoryview, str]


class KeyDecodingError(ValueError):
    """Raised when serialized key bytes are not a valid secp256r1 key."""


class RandomSource(Protocol):
    def __call__(self, size: int) -> bytes: ...


def system_random(size: int) -> bytes:
    """Draw bytes from libsodium's randombytes (OS CSPRNG, thread-safe)."""
    return nacl.utils.random(size)


class DeterministicRandom:
    """
    Reproducible byte stream for tests and fixtures.

    Output block i is SHAKE-256(seed || i). Never use it for real keys.
    """

    def __init__(self, seed: Union[bytes, str]):
        if isinstance(seed, str):
            seed = seed.encode('utf-8')
        self._seed = bytes(seed)
        self._counter = 0
        self._lock = threading.Lock()

    def __call__(self, size: int) -> bytes:
        with self._lock:
            counter = self._counter
            self._counter += 1
        return hashlib.shake_256(self._seed + struct.pack('>Q', counter)).digest(size)


def random_bytes(size: int, rng: Optional[RandomSource] = None) -> bytes:
    """
    Draw exactly `size` bytes from a random source.

    Args:
        size: Number of bytes
        rng: Random source (defaults to system_random)

    Returns:
        bytes: Random bytes

    Raises:
        RuntimeError: If the source returned a different number of bytes
    """
    source = rng or system_random
    data = bytes(source(size))
    if len(data) != size:
        raise RuntimeError(f"random source returned {len(data)} bytes, expected {size}")
    return data


def generate_private_key(rng: Optional[RandomSource] = None) -> ec.EllipticCurvePrivateKey:
    """
    Generate a fresh secp256r1 private key.

    The scalar is drawn from `rng` by rejection sampling into [1, n-1].
    """
    while True:
        d = int.from_bytes(random_bytes(SCALAR_SIZE, rng), 'big')
        if 0 < d < CURVE_ORDER:
            return ec.derive_private_key(d, ec.SECP256R1())


def _encoding_for(fmt: str) -> serialization.Encoding:
    if fmt == "pem":
        return serialization.Encoding.PEM
    if fmt == "der":
        return serialization.Encoding.DER
    raise ValueError(f"unknown key format {fmt!r}")


def encode_private_key(key: ec.EllipticCurvePrivateKey, fmt: Optional[str] = None) -> bytes:
    """Serialize a private key as PKCS#8 (DER unless fmt/config say pem)."""
    return key.private_bytes(
        encoding=_encoding_for(fmt or config.KEY_FORMAT),
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def encode_public_key(key: ec.EllipticCurvePublicKey, fmt: Optional[str] = None) -> bytes:
    """Serialize a public key as SubjectPublicKeyInfo."""
    return key.public_bytes(
        encoding=_encoding_for(fmt or config.KEY_FORMAT),
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def key_format(data: KeyBytes) -> str:
    """Return 'pem' or 'der' for serialized key bytes."""
    if isinstance(data, str):
        return "pem"
    return "pem" if bytes(data).lstrip().startswith(_PEM_PREFIX) else "der"


def encoding_tag(data: KeyBytes) -> str:
    """Return the KEY_ENCODINGS tag describing serialized key bytes."""
    return KEY_ENCODINGS[key_format(data)]


def _as_bytes(data: KeyBytes) -> bytes:
    if isinstance(data, str):
        return data.encode('ascii', errors='replace')
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise KeyDecodingError(f"key must be bytes, got {type(data).__name__}")


def _check_curve(key, kind: str):
    if not isinstance(key.curve, ec.SECP256R1):
        raise KeyDecodingError(f"{kind} key is on {key.curve.name}, expected {CURVE_NAME}")


def decode_private_key(data: KeyBytes) -> ec.EllipticCurvePrivateKey:
    """
    Parse a serialized secp256r1 private key.

    Raises:
        KeyDecodingError: If the bytes are not a PKCS#8 secp256r1 EC key
    """
    raw = _as_bytes(data)
    try:
        if key_format(raw) == "pem":
            key = serialization.load_pem_private_key(raw, password=None)
        else:
            key = serialization.load_der_private_key(raw, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.debug("Rejected private key (%d bytes): %s", len(raw), e)
        raise KeyDecodingError(f"invalid encryption private key: {e}") from e

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise KeyDecodingError(f"expected an EC private key, got {type(key).__name__}")
    _check_curve(key, "private")
    return key


def decode_public_key(data: KeyBytes) -> ec.EllipticCurvePublicKey:
    """
    Parse a serialized secp256r1 public key.

    Raises:
        KeyDecodingError: If the bytes are not a SubjectPublicKeyInfo secp256r1 key
    """
    raw = _as_bytes(data)
    try:
        if key_format(raw) == "pem":
            key = serialization.load_pem_public_key(raw)
        else:
            key = serialization.load_der_public_key(raw)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.debug("Rejected public key (%d bytes): %s", len(raw), e)
        raise KeyDecodingError(f"invalid encryption public key: {e}") from e

    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise KeyDecodingError(f"expected an EC public key, got {type(key).__name__}")
    _check_curve(key, "public")
    return key


def generate_encryption_keypair(rng: Optional[RandomSource] = None):
    """
    Generate a new encryption keypair.

    Returns:
        Tuple[bytes, bytes]: (sk_enc, pk_enc)
    """
    private_key = generate_private_key(rng)
    return encode_private_key(private_key), encode_public_key(private_key.public_key())


def derive_public_key(sk_enc: KeyBytes) -> bytes:
    """
    Derive pk_enc from sk_enc.

    The public key is written in the same serialization (DER or PEM) as the
    private key it came from, so the result depends on sk_enc alone.
    """
    private_key = decode_private_key(sk_enc)
    return encode_public_key(private_key.public_key(), fmt=key_format(sk_enc))
