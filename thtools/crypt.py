"""Byte-level ciphers used by the game archives and data files."""

from __future__ import annotations

from .rng import MersenneTwister

MEGAMARI_KEY = 0x08
PATCHCON_KEY = 0x23


def _effective_end(size: int, block: int, limit: int) -> int:
    if block <= 0:
        raise ValueError(f"block size must be positive, got {block}")
    quarter = block >> 2
    if size < quarter:
        size = 0
    else:
        tail = size % block if size % block < quarter else 0
        size -= tail + size % 2
    if limit % block:
        limit += block - limit % block
    return min(size, limit)


def encrypt(data: bytes, key: int, step: int, block: int, limit: int) -> bytes:
    """Apply the interleaving block cipher; ``decrypt`` undoes it."""
    buf = bytearray(data)
    end = _effective_end(len(buf), block, limit)
    key &= 0xFF
    step &= 0xFF
    increment = (block >> 1) + (block & 1)
    pos = 0
    while pos < end:
        if end - pos < block:
            block = end - pos
            increment = (block >> 1) + (block & 1)
        chunk = buf[pos:pos + block]
        temp = bytearray(block)
        src = block - 1
        out = 0
        while src > 0:
            temp[out] = chunk[src] ^ key
            temp[out + increment] = chunk[src - 1] ^ ((key + step * increment) & 0xFF)
            src -= 2
            out += 1
            key = (key + step) & 0xFF
        if block & 1:
            temp[out] = chunk[src] ^ key
            key = (key + step) & 0xFF
        key = (key + step * increment) & 0xFF
        buf[pos:pos + block] = temp
        pos += block
    return bytes(buf)


def decrypt(data: bytes, key: int, step: int, block: int, limit: int) -> bytes:
    """Reverse ``encrypt`` with the same parameters."""
    buf = bytearray(data)
    end = _effective_end(len(buf), block, limit)
    key &= 0xFF
    step &= 0xFF
    increment = (block >> 1) + (block & 1)
    pos = 0
    while pos < end:
        if end - pos < block:
            block = end - pos
            increment = (block >> 1) + (block & 1)
        chunk = buf[pos:pos + block]
        temp = bytearray(block)
        src = 0
        out = block - 1
        while out > 0:
            temp[out] = chunk[src] ^ key
            temp[out - 1] = chunk[src + increment] ^ ((key + step * increment) & 0xFF)
            out -= 2
            src += 1
            key = (key + step) & 0xFF
        if block & 1:
            temp[out] = chunk[src] ^ key
            key = (key + step) & 0xFF
        key = (key + step * increment) & 0xFF
        buf[pos:pos + block] = temp
        pos += block
    return bytes(buf)


def crypt75_list(data: bytes, key: int, step1: int, step2: int) -> bytes:
    """XOR with a key whose step itself grows; applying it twice restores the data."""
    out = bytearray(data)
    key &= 0xFF
    step1 &= 0xFF
    step2 &= 0xFF
    for i, value in enumerate(out):
        out[i] = value ^ key
        key = (key + step1) & 0xFF
        step1 = (step1 + step2) & 0xFF
    return bytes(out)


def crypt105_list(data: bytes, key: int) -> bytes:
    """XOR with the low bytes of a Mersenne Twister stream seeded with ``key``."""
    rng = MersenneTwister(key)
    return bytes(value ^ (rng.next_int() & 0xFF) for value in data)


def crypt105_file(data: bytes, offset: int, or_key: int) -> bytes:
    """XOR every byte with a key derived from the entry offset."""
    key = ((offset >> 1) | or_key) & 0xFF
    return bytes(value ^ key for value in data)