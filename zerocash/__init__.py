"""
Zerocash Address Primitive

Derivation of shielded-transaction addresses:
- PrivateAddress (a_sk, sk_enc) and PublicAddress (a_pk, pk_enc)
- a_pk = SHA256Compress(a_sk || 0^256)
- secp256r1 encryption keys (PKCS#8 / SubjectPublicKeyInfo DER)
- ECIES sealed box for encrypting to an address
"""

from .address import Address, PrivateAddress, PublicAddress
from .commitment import A_PK_SIZE, A_SK_SIZE, derive_a_pk, sha256_compress
from .encryption import DecryptionError, SealedBox, decrypt_with_address, encrypt_for_address
from .keys import (
    KEY_ENCODING,
    KEY_ENCODINGS,
    DeterministicRandom,
    KeyDecodingError,
    RandomSource,
    derive_public_key,
    generate_encryption_keypair,
    system_random,
)
from .models import AddressInfo, PrivateAddressInfo, PublicAddressInfo

__all__ = [
    'Address',
    'PrivateAddress',
    'PublicAddress',
    'A_SK_SIZE',
    'A_PK_SIZE',
    'derive_a_pk',
    'sha256_compress',
    'SealedBox',
    'DecryptionError',
    'encrypt_for_address',
    'decrypt_with_address',
    'KEY_ENCODING',
    'KEY_ENCODINGS',
    'KeyDecodingError',
    'RandomSource',
    'DeterministicRandom',
    'system_random',
    'derive_public_key',
    'generate_encryption_keypair',
    'AddressInfo',
    'PrivateAddressInfo',
    'PublicAddressInfo',
]

__version__ = '1.0.0'
