"""Tests for the a_pk commitment derivation."""
import hashlib
import os

import pytest

from zerocash.commitment import A_PK_SIZE, ZERO_SUFFIX, derive_a_pk, sha256_compress


def _padded_block(message: bytes) -> bytes:
    """Standard SHA-256 padding for messages that fit in one block."""
    assert len(message) <= 55
    zeros = 64 - len(message) - 1 - 8
    return message + b"\x80" + bytes(zeros) + (len(message) * 8).to_bytes(8, "big")


class TestSha256Compress:
    @pytest.mark.parametrize("message", [b"", b"abc", b"zerocash", b"x" * 55])
    def test_matches_hashlib_on_single_block(self, message):
        assert sha256_compress(_padded_block(message)) == hashlib.sha256(message).digest()

    def test_zero_block_vector(self):
        expected = bytes.fromhex("da5698be17b9b46962335799779fbeca8ce5d491c0d26243bafef9ea1837a9d8")
        assert sha256_compress(bytes(64)) == expected

    @pytest.mark.parametrize("size", [0, 32, 63, 65, 128])
    def test_rejects_wrong_block_size(self, size):
        with pytest.raises(ValueError):
            sha256_compress(bytes(size))


class TestDeriveAPk:
    def test_is_compression_of_secret_and_zero_suffix(self):
        a_sk = bytes(range(32))
        assert ZERO_SUFFIX == bytes(32)
        assert derive_a_pk(a_sk) == sha256_compress(a_sk + bytes(32))

    def test_not_padded_sha256(self):
        a_sk = bytes(range(32))
        assert derive_a_pk(a_sk) != hashlib.sha256(a_sk + bytes(32)).digest()

    def test_deterministic(self):
        a_sk = os.urandom(32)
        assert derive_a_pk(a_sk) == derive_a_pk(a_sk)

    def test_output_length(self):
        assert len(derive_a_pk(os.urandom(32))) == A_PK_SIZE

    def test_single_bit_change(self):
        a_sk = bytearray(32)
        base = derive_a_pk(bytes(a_sk))
        a_sk[31] ^= 1
        assert derive_a_pk(bytes(a_sk)) != base

    @pytest.mark.parametrize("size", [0, 16, 31, 33, 64])
    def test_rejects_wrong_secret_size(self, size):
        with pytest.raises(ValueError):
            derive_a_pk(bytes(size))
