"""
ECIES Sealed Box Module

Encrypts messages to the owner of an address using its pk_enc; only the
holder of the matching sk_enc can decrypt.

Construction (secp256r1):
- Fresh ephemeral keypair per message
- ECDH(ephemeral, pk_enc) -> HKDF-SHA256 -> AES-256-GCM key
- Ephemeral point is bound as associated data

Wire layout: ephemeral point (65, X9.62 uncompressed) || nonce (12) || ciphertext+tag
"""

import json
import zlib
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .address import Address, PrivateAddress, PublicAddress
from .keys import (
    RandomSource,
    decode_private_key,
    decode_public_key,
    generate_private_key,
    random_bytes,
)

HKDF_INFO = b"zerocash/ecies/v1"
POINT_SIZE = 65
NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32


class DecryptionError(ValueError):
    """Raised when a sealed message cannot be opened."""


def _point_bytes(key: ec.EllipticCurvePublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )


def _derive_key(shared_secret: bytes, ephemeral_point: bytes) -> bytes:
    return HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=ephemeral_point,
        info=HKDF_INFO,
    ).derive(shared_secret)


class SealedBox:
    """
    ECIES sealed box over an address's encryption keys.

    Encryption (sender):
        - Needs the recipient's pk_enc only
        - Output does not identify the sender

    Decryption (address owner):
        - Needs sk_enc
    """

    def __init__(self, public_key: Optional[bytes] = None,
                 private_key: Optional[bytes] = None,
                 rng: Optional[RandomSource] = None):
        """
        Initialize SealedBox.

        For encryption: provide public_key (pk_enc)
        For decryption: provide private_key (sk_enc)

        Args:
            public_key: Serialized recipient public key
            private_key: Serialized recipient private key
            rng: Random source for ephemeral keys and nonces

        Raises:
            KeyDecodingError: If a supplied key cannot be decoded
        """
        self._public_key = None
        self._private_key = None
        self._rng = rng

        if public_key is not None:
            self._public_key = decode_public_key(public_key)

        if private_key is not None:
            self._private_key = decode_private_key(private_key)
            # Also derive public key
            if self._public_key is None:
                self._public_key = self._private_key.public_key()

    @property
    def public_point(self) -> Optional[bytes]:
        """Recipient public key as an uncompressed point."""
        if self._public_key is not None:
            return _point_bytes(self._public_key)
        return None

    def encrypt(self, plaintext: Union[str, bytes, dict],
                compress: bool = False) -> bytes:
        """
        Encrypt data to the recipient's public key.

        Args:
            plaintext: Data to encrypt (str, bytes, or dict -> JSON)
            compress: Whether to zlib compress before encryption

        Returns:
            bytes: Sealed message
        """
        if self._public_key is None:
            raise ValueError("No public key provided for encryption")

        if isinstance(plaintext, dict):
            plaintext = json.dumps(plaintext, separators=(',', ':'))
        if isinstance(plaintext, str):
            plaintext = plaintext.encode('utf-8')

        if compress:
            plaintext = zlib.compress(plaintext, level=6)

        ephemeral = generate_private_key(self._rng)
        ephemeral_point = _point_bytes(ephemeral.public_key())
        shared = ephemeral.exchange(ec.ECDH(), self._public_key)

        key = _derive_key(shared, ephemeral_point)
        nonce = random_bytes(NONCE_SIZE, self._rng)
        ciphertext = AESGCM(key).encrypt(nonce, plaintext, ephemeral_point)

        return ephemeral_point + nonce + ciphertext

    def decrypt(self, sealed: bytes, decompress: bool = False) -> bytes:
        """
        Decrypt a sealed message with the recipient's private key.

        Args:
            sealed: Output of encrypt()
            decompress: Whether to zlib decompress after decryption

        Returns:
            bytes: Decrypted plaintext

        Raises:
            DecryptionError: If the message is malformed or fails authentication
        """
        if self._private_key is None:
            raise ValueError("No private key provided for decryption")

        sealed = bytes(sealed)
        if len(sealed) < POINT_SIZE + NONCE_SIZE + TAG_SIZE:
            raise DecryptionError("sealed message too short")

        ephemeral_point = sealed[:POINT_SIZE]
        nonce = sealed[POINT_SIZE:POINT_SIZE + NONCE_SIZE]
        ciphertext = sealed[POINT_SIZE + NONCE_SIZE:]

        try:
            ephemeral = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), ephemeral_point)
        except ValueError as e:
            raise DecryptionError(f"invalid ephemeral point: {e}") from e

        shared = self._private_key.exchange(ec.ECDH(), ephemeral)
        key = _derive_key(shared, ephemeral_point)

        try:
            plaintext = AESGCM(key).decrypt(nonce, ciphertext, ephemeral_point)
        except InvalidTag as e:
            raise DecryptionError("authentication failed") from e

        if decompress:
            try:
                plaintext = zlib.decompress(plaintext)
            except zlib.error as e:
                raise DecryptionError(f"payload is not zlib data: {e}") from e

        return plaintext

    def decrypt_json(self, sealed: bytes, decompress: bool = False) -> dict:
        """Decrypt and parse as JSON."""
        plaintext = self.decrypt(sealed, decompress=decompress)
        try:
            return json.loads(plaintext.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecryptionError(f"payload is not JSON: {e}") from e


# Convenience functions
def encrypt_for_address(recipient: Union[Address, PublicAddress],
                        data: Union[str, bytes, dict],
                        rng: Optional[RandomSource] = None) -> bytes:
    """Encrypt to an address without creating a SealedBox object."""
    public = recipient.public if isinstance(recipient, Address) else recipient
    return SealedBox(public_key=public.pk_enc, rng=rng).encrypt(data)


def decrypt_with_address(owner: Union[Address, PrivateAddress], sealed: bytes) -> bytes:
    """Decrypt with an address's sk_enc without creating a SealedBox object."""
    private = owner.private if isinstance(owner, Address) else owner
    return SealedBox(private_key=private.sk_enc).decrypt(sealed)


if __name__ == '__main__':
    print("=== ECIES Sealed Box Test ===")

    owner = Address.generate()
    message = {"type": "NOTE", "value": 42}

    sealed = encrypt_for_address(owner, message)
    print(f"Sealed size: {len(sealed)} bytes")

    opened = SealedBox(private_key=owner.sk_enc).decrypt_json(sealed)
    print(f"Roundtrip Success: {opened == message}")
