from itertools import islice

import pytest

from thtools.crypt import (
    MEGAMARI_KEY,
    PATCHCON_KEY,
    crypt75_list,
    crypt105_file,
    crypt105_list,
    decrypt,
    encrypt,
)
from thtools.rng import MersenneTwister

SAMPLE = bytes(range(256)) * 3 + b"tail"


def test_two_byte_block_swaps_without_key():
    assert encrypt(b"ab", 0, 0, 2, 2) == b"ba"


def test_single_pair_key_applied():
    assert encrypt(b"\x00\x00", 0x1B, 0, 2, 2) == bytes([0x1B, 0x1B])


@pytest.mark.parametrize(
    "key, step, block, limit",
    [
        (0x1B, 0x37, 0x40, 0x2800),
        (0x51, 0xE9, 0x40, 0x3000),
        (0xC1, 0x51, 0x80, 0x1000),
        (0x1B, 0x37, 16, 16),
        (0x12, 0x34, 7, 100),
        (0x99, 0x01, 3, 5),
    ],
)
def test_encrypt_decrypt_round_trip(key, step, block, limit):
    for length in (0, 1, 5, 16, 63, 64, 65, 200, len(SAMPLE)):
        data = SAMPLE[:length]
        assert decrypt(encrypt(data, key, step, block, limit), key, step, block, limit) == data


def test_encrypt_changes_data():
    data = bytes(64)
    assert encrypt(data, 0x1B, 0x37, 16, 64) != data


def test_bytes_beyond_limit_untouched():
    data = bytes(range(100))
    out = encrypt(data, 0x1B, 0x37, 16, 32)
    assert out[32:] == data[32:]
    assert len(out) == len(data)


def test_short_input_below_quarter_block_untouched():
    data = b"abc"
    assert encrypt(data, 0x55, 0x11, 16, 16) == data
    assert decrypt(data, 0x55, 0x11, 16, 16) == data


def test_zero_block_rejected():
    with pytest.raises(ValueError):
        encrypt(b"abcd", 1, 1, 0, 4)


def test_crypt75_constant_key():
    assert crypt75_list(bytes(4), 0x5A, 0, 0) == bytes([0x5A] * 4)


def test_crypt105_list_uses_mt_stream():
    expected = bytes(v & 0xFF for v in islice(MersenneTwister(1234), 10))
    assert crypt105_list(bytes(10), 1234) == expected


def test_crypt105_list_is_involution():
    data = b"some archive header bytes"
    assert crypt105_list(crypt105_list(data, 42), 42) == data


def test_crypt105_file_key_from_offset():
    out = crypt105_file(bytes(3), 0, PATCHCON_KEY)
    assert out == bytes([PATCHCON_KEY] * 3)
    shifted = crypt105_file(bytes(2), 2 * MEGAMARI_KEY, 0)
    assert shifted == bytes([MEGAMARI_KEY] * 2)


def test_crypt105_file_is_involution():
    data = b"payload"
    assert crypt105_file(crypt105_file(data, 0x1234, 0x08), 0x1234, 0x08) == data