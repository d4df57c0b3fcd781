"""
Address Module

An address bundles a private half and the public half derived from it:

    PrivateAddress = (a_sk, sk_enc)
    PublicAddress  = (a_pk, pk_enc)

    a_pk   = SHA256Compress(a_sk || 0^256)
    pk_enc = public key of sk_enc on secp256r1

Usage:
    addr = Address.generate()
    restored = Address.from_private(addr.private)
    assert restored == addr
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from .commitment import A_SK_SIZE, derive_a_pk
from .keys import (
    RandomSource,
    derive_public_key,
    encode_private_key,
    generate_private_key,
    random_bytes,
)

logger = logging.getLogger(__name__)


def _to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    # Non-ASCII text becomes '?' and is then rejected by key decoding.
    if isinstance(value, str):
        return value.encode('ascii', errors='replace')
    return bytes(value)


@dataclass(frozen=True)
class PrivateAddress:
    """Secret half of an address. Secret fields are kept out of repr()."""
    a_sk: bytes = field(repr=False)
    sk_enc: bytes = field(repr=False)

    @classmethod
    def create(cls, a_sk: bytes, sk_enc: bytes) -> "PrivateAddress":
        """
        Wrap an existing address secret and encryption key.

        Nothing is validated here; a_sk must be 32 bytes for the public half
        to be derivable.
        """
        return cls(a_sk=_to_bytes(a_sk), sk_enc=_to_bytes(sk_enc))


@dataclass(frozen=True)
class PublicAddress:
    """Publishable half of an address."""
    a_pk: bytes
    pk_enc: bytes

    @classmethod
    def create(cls, a_sk: bytes, sk_enc: bytes) -> "PublicAddress":
        """
        Derive the public half from a private (a_sk, sk_enc) pair.

        Deterministic: the same inputs always give byte-identical output.

        Args:
            a_sk: 32-byte address secret
            sk_enc: Serialized secp256r1 private key

        Returns:
            PublicAddress: (a_pk, pk_enc)

        Raises:
            ValueError: If a_sk is not 32 bytes
            KeyDecodingError: If sk_enc is not a valid secp256r1 private key
        """
        a_pk = derive_a_pk(_to_bytes(a_sk))
        pk_enc = derive_public_key(sk_enc)
        return cls(a_pk=a_pk, pk_enc=pk_enc)


@dataclass(frozen=True)
class Address:
    """
    Private half plus the public half derived from it.

    Constructing an Address directly re-derives the public half and raises
    ValueError if the given one does not match.
    """
    private: PrivateAddress
    public: PublicAddress

    def __post_init__(self):
        if PublicAddress.create(self.private.a_sk, self.private.sk_enc) != self.public:
            raise ValueError("public address does not match private address")

    @classmethod
    def _derived(cls, private: PrivateAddress, public: PublicAddress) -> "Address":
        # public was just derived from private; skip the second derivation.
        address = object.__new__(cls)
        object.__setattr__(address, 'private', private)
        object.__setattr__(address, 'public', public)
        return address

    @classmethod
    def generate(cls, rng: Optional[RandomSource] = None) -> "Address":
        """
        Create a new address from fresh randomness.

        a_sk and the encryption key scalar are two independent draws from
        `rng` (the libsodium CSPRNG unless a source is injected).
        """
        a_sk = random_bytes(A_SK_SIZE, rng)
        sk_enc = encode_private_key(generate_private_key(rng))

        public = PublicAddress.create(a_sk, sk_enc)
        private = PrivateAddress.create(a_sk, sk_enc)

        logger.debug("Generated address a_pk=%s", public.a_pk.hex())
        return cls._derived(private, public)

    @classmethod
    def from_private(cls, private: PrivateAddress) -> "Address":
        """
        Rebuild a full address from its private half.

        Raises:
            ValueError: If a_sk is not 32 bytes
            KeyDecodingError: If sk_enc cannot be decoded
        """
        if len(private.a_sk) != A_SK_SIZE:
            raise ValueError(f"a_sk must be {A_SK_SIZE} bytes, got {len(private.a_sk)}")

        public = PublicAddress.create(private.a_sk, private.sk_enc)
        logger.debug("Derived public address a_pk=%s", public.a_pk.hex())
        return cls._derived(private, public)

    @property
    def a_sk(self) -> bytes:
        return self.private.a_sk

    @property
    def sk_enc(self) -> bytes:
        return self.private.sk_enc

    @property
    def a_pk(self) -> bytes:
        return self.public.a_pk

    @property
    def pk_enc(self) -> bytes:
        return self.public.pk_enc

    def is_consistent(self) -> bool:
        """Check that the public half matches a fresh derivation from the private half."""
        return PublicAddress.create(self.a_sk, self.sk_enc) == self.public


if __name__ == '__main__':
    import base64

    from .config import configure_logging

    configure_logging()

    print("=== Address Generation ===")
    addr = Address.generate()
    print(f"a_pk:   {addr.a_pk.hex()}")
    print(f"pk_enc: {base64.b64encode(addr.pk_enc).decode('utf-8')}")
    print(f"a_sk:   {addr.a_sk.hex()[:16]}...")

    restored = Address.from_private(addr.private)
    print(f"\nReconstruction matches: {restored == addr}")
