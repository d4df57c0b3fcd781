"""
Boundary models for exchanging addresses as JSON.

Byte fields travel as standard base64 strings. Importing a model checks
lengths and the key encoding tag before any derivation happens.
"""

import base64
import binascii
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .address import Address, PrivateAddress, PublicAddress
from .commitment import A_PK_SIZE, A_SK_SIZE
from .keys import KEY_ENCODING, KEY_ENCODINGS, encoding_tag


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode('utf-8')


def _unb64(value: str) -> bytes:
    return base64.b64decode(value, validate=True)


def _check_b64(value: str, size: Optional[int] = None) -> str:
    try:
        raw = _unb64(value)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"not valid base64: {e}") from e
    if size is not None and len(raw) != size:
        raise ValueError(f"expected {size} bytes, got {len(raw)}")
    return value


def _check_encoding(value: str) -> str:
    if value not in KEY_ENCODINGS.values():
        raise ValueError(f"unsupported key encoding {value!r}, expected one of {sorted(KEY_ENCODINGS.values())}")
    return value


def _decode_tagged(value: str, tag: str) -> bytes:
    raw = _unb64(value)
    if encoding_tag(raw) != tag:
        raise ValueError(f"key bytes are {encoding_tag(raw)!r} but tagged {tag!r}")
    return raw


class PublicAddressInfo(BaseModel):
    """Public half, safe to publish."""
    a_pk: str = Field(..., description="Base64 32-byte address commitment")
    pk_enc: str = Field(..., description="Base64 serialized encryption public key")
    encoding: str = KEY_ENCODING

    @field_validator('a_pk')
    @classmethod
    def check_a_pk(cls, v):
        return _check_b64(v, A_PK_SIZE)

    @field_validator('pk_enc')
    @classmethod
    def check_pk_enc(cls, v):
        return _check_b64(v)

    @field_validator('encoding')
    @classmethod
    def check_encoding(cls, v):
        return _check_encoding(v)

    @classmethod
    def from_public_address(cls, public: PublicAddress) -> "PublicAddressInfo":
        return cls(
            a_pk=_b64(public.a_pk),
            pk_enc=_b64(public.pk_enc),
            encoding=encoding_tag(public.pk_enc),
        )

    def to_public_address(self) -> PublicAddress:
        return PublicAddress(a_pk=_unb64(self.a_pk), pk_enc=_decode_tagged(self.pk_enc, self.encoding))


class PrivateAddressInfo(BaseModel):
    """Private half. Secret: never send to untrusted parties."""
    a_sk: str = Field(..., description="Base64 32-byte address secret")
    sk_enc: str = Field(..., description="Base64 serialized encryption private key")
    encoding: str = KEY_ENCODING

    @field_validator('a_sk')
    @classmethod
    def check_a_sk(cls, v):
        return _check_b64(v, A_SK_SIZE)

    @field_validator('sk_enc')
    @classmethod
    def check_sk_enc(cls, v):
        return _check_b64(v)

    @field_validator('encoding')
    @classmethod
    def check_encoding(cls, v):
        return _check_encoding(v)

    @classmethod
    def from_private_address(cls, private: PrivateAddress) -> "PrivateAddressInfo":
        return cls(
            a_sk=_b64(private.a_sk),
            sk_enc=_b64(private.sk_enc),
            encoding=encoding_tag(private.sk_enc),
        )

    def to_private_address(self) -> PrivateAddress:
        return PrivateAddress.create(_unb64(self.a_sk), _decode_tagged(self.sk_enc, self.encoding))


class AddressInfo(BaseModel):
    """Full address export."""
    private: PrivateAddressInfo
    public: PublicAddressInfo

    @classmethod
    def from_address(cls, address: Address) -> "AddressInfo":
        return cls(
            private=PrivateAddressInfo.from_private_address(address.private),
            public=PublicAddressInfo.from_public_address(address.public),
        )

    def to_address(self) -> Address:
        """
        Rebuild the address, re-deriving the public half.

        Raises:
            ValueError: If the stored public half does not match the private half
            KeyDecodingError: If sk_enc cannot be decoded
        """
        address = Address.from_private(self.private.to_private_address())
        if address.public != self.public.to_public_address():
            raise ValueError("stored public address does not match private address")
        return address
