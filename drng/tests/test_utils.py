from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from drng.entropy import SystemEntropy, random_below
from drng.errors import InvalidParameterError
from drng.utils.bytes import byte_width, consteq, from_hex, int_to_fixed, to_hex, xor_bytes
from drng.utils.hash import get_hasher, hash_concat, keccak256, sha3_256

from .conftest import SeededEntropy


def test_keccak_is_not_sha3():
    # pre-standard Keccak padding, as used by ledgers
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    assert sha3_256(b"").hex() == "a7ffc6f8bf1ed76651c14756a061d662f580ff4de43b49fa82d80a4b80f8434a"


def test_get_hasher():
    assert get_hasher("keccak256") is keccak256
    with pytest.raises(InvalidParameterError):
        get_hasher("md5")


def test_hash_concat():
    assert hash_concat([b"ab", b"c"]) == keccak256(b"abc")


def test_hex_helpers():
    assert from_hex("0x0abc") == b"\x0a\xbc"
    assert from_hex("abc") == b"\x0a\xbc"
    assert to_hex(b"\x00\x01") == "0x0001"
    with pytest.raises(ValueError):
        from_hex("0xgg")


def test_fixed_width():
    assert int_to_fixed(1, 4) == b"\x00\x00\x00\x01"
    with pytest.raises(ValueError):
        int_to_fixed(1 << 32, 4)
    assert byte_width(256) == 1
    assert byte_width(257) == 2


def test_xor_and_consteq():
    assert xor_bytes(b"\x0f", b"\xf0") == b"\xff"
    with pytest.raises(ValueError):
        xor_bytes(b"\x00", b"\x00\x00")
    assert consteq(b"abc", bytearray(b"abc"))
    assert not consteq(b"abc", b"abd")


@given(bound=st.integers(min_value=1, max_value=2**300), seed=st.integers(min_value=0, max_value=2**32))
def test_random_below_in_range(bound, seed):
    assert 0 <= random_below(SeededEntropy(seed), bound) < bound


def test_random_below_rejects_bad_bound():
    with pytest.raises(ValueError):
        random_below(SystemEntropy(), 0)


def test_system_entropy():
    a = SystemEntropy().random_bytes(32)
    assert len(a) == 32
    assert a != SystemEntropy().random_bytes(32)
