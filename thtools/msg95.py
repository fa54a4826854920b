"""Conversion between photo-game dialogue files and their text form."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass

_LINE_WIDTH = 64
_MASK32 = 0xFFFFFFFF
_U = rb"\s*([+-]?\d+)"
_I = rb"\s*([+-]?(?:0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*))"


class MsgError(Exception):
    """Raised when a dialogue file or its text form cannot be converted."""


@dataclass(frozen=True)
class _Format:
    header: struct.Struct
    line_count: int
    key_coeffs: tuple[int, ...]
    entry_re: re.Pattern[bytes]

    @property
    def kinds(self) -> str:
        return self.header.format.lstrip("<")

    @property
    def text_size(self) -> int:
        return self.line_count * _LINE_WIDTH

    @property
    def record_size(self) -> int:
        return self.header.size + self.text_size


def _entry_pattern(kinds: str) -> re.Pattern[bytes]:
    parts = [_I if kind == "i" else _U for kind in kinds]
    return re.compile(rb"entry" + rb",".join(parts))


_FORMATS = {
    95: _Format(struct.Struct("<HHII"), 3, (7, 11), _entry_pattern("HHII")),
    125: _Format(
        struct.Struct("<HHHBBIIiiiiii"), 6, (7, 11, 13), _entry_pattern("HHHBBIIiiiiii")
    ),
}


def _format_for(version: int) -> _Format:
    try:
        return _FORMATS[version]
    except KeyError:
        raise MsgError(f"version {version} is not supported") from None


def _apply_key(text: bytes, fields: tuple[int, ...], fmt: _Format, sign: int) -> bytes:
    base = sum(c * f for c, f in zip(fmt.key_coeffs, fields)) + 58
    out = bytearray(text)
    for line in range(fmt.line_count):
        key = base & 0xFF
        for j in range(_LINE_WIDTH):
            pos = line * _LINE_WIDTH + j
            out[pos] = (out[pos] + sign * key) & 0xFF
            key = (key + (line + 1) * 23 + j) & 0xFF
    return bytes(out)


def _parse_unsigned(token: bytes) -> int:
    return int(token) & _MASK32


def _parse_integer(token: bytes) -> int:
    negative = token.startswith(b"-")
    body = token.lstrip(b"+-")
    if body[:2].lower() == b"0x":
        value = int(body[2:], 16)
    elif body.startswith(b"0"):
        value = int(body, 8)
    else:
        value = int(body)
    return -value if negative else value


def _store(kind: str, value: int) -> int:
    if kind == "H":
        return value & 0xFFFF
    if kind == "B":
        return value & 0xFF
    if kind == "I":
        return value & _MASK32
    value &= _MASK32
    return value - (1 << 32) if value >= 1 << 31 else value


def read_msg95(data: bytes, version: int) -> bytes:
    """Decode a binary dialogue file into its text form."""
    fmt = _format_for(version)
    try:
        (count,) = struct.unpack_from("<I", data, 0)
        pointers = struct.unpack_from(f"<{count}I", data, 4)
    except struct.error as exc:
        raise MsgError("file is too short for its entry table") from exc

    out: list[bytes] = []
    for pointer in pointers:
        end = pointer + fmt.record_size
        if end > len(data):
            raise MsgError(f"entry at offset {pointer} runs past the end of the file")
        fields = fmt.header.unpack_from(data, pointer)
        out.append(b"entry " + b",".join(str(f).encode("ascii") for f in fields) + b"\n")
        text = _apply_key(data[pointer + fmt.header.size:end], fields, fmt, +1)
        for line in range(fmt.line_count):
            chunk = text[line * _LINE_WIDTH:(line + 1) * _LINE_WIDTH]
            out.append(chunk.split(b"\0", 1)[0] + b"\n")
    return b"".join(out)


def _split_lines(text: bytes) -> list[bytes]:
    lines = text.split(b"\n")
    if lines and lines[-1] == b"":
        lines.pop()
    return lines


def write_msg95(text: bytes, version: int) -> bytes:
    """Encode the text form of a dialogue file into its binary form."""
    fmt = _format_for(version)
    lines = _split_lines(text)
    count = sum(1 for line in lines if line.startswith(b"entry"))

    out = bytearray(struct.pack("<I", count))
    table_end = 4 + count * 4
    for index in range(count):
        out += struct.pack("<I", (table_end + index * fmt.record_size) & _MASK32)

    kinds = fmt.kinds
    fields: tuple[int, ...] = (0,) * len(kinds)
    body = bytearray(fmt.text_size)
    text_count = 0

    for line in lines:
        line = line.rstrip(b"\r\n")
        match = fmt.entry_re.match(line)
        if match:
            fields = tuple(
                _store(kind, _parse_integer(token) if kind == "i" else _parse_unsigned(token))
                for kind, token in zip(kinds, match.groups())
            )
            body = bytearray(fmt.text_size)
            continue
        if line.startswith(b"//"):
            continue
        chunk = line.split(b"\0", 1)[0][:_LINE_WIDTH].ljust(_LINE_WIDTH, b"\0")
        start = text_count * _LINE_WIDTH
        body[start:start + _LINE_WIDTH] = chunk
        text_count += 1
        if text_count == fmt.line_count:
            out += fmt.header.pack(*fields)
            out += _apply_key(bytes(body), fields, fmt, -1)
            text_count = 0
    return bytes(out)