"""Archive version detection from file names and candidate sets."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class DetectEntry:
    """One known archive version.

    ``variant`` is the smallest version whose archive format is the same as
    ``alias``; ``filename`` is the archive's usual name when it has exactly
    one ASCII name, else None.
    """

    variant: int
    alias: int
    filename: str | None


# Grouped by variant, in the order used for candidate iteration.
DETECT_TABLE: tuple[DetectEntry, ...] = (
    DetectEntry(1, 1, None),
    DetectEntry(2, 2, None),
    DetectEntry(3, 3, None),
    DetectEntry(3, 4, None),
    DetectEntry(3, 5, None),
    DetectEntry(6, 6, None),
    DetectEntry(7, 7, "th07.dat"),
    DetectEntry(8, 8, "th08.dat"),
    DetectEntry(9, 9, "th09.dat"),
    DetectEntry(95, 95, "th095.dat"),
    DetectEntry(95, 10, "th10.dat"),
    DetectEntry(95, 103, "alcostg.dat"),
    DetectEntry(95, 11, "th11.dat"),
    DetectEntry(12, 12, "th12.dat"),
    DetectEntry(12, 125, "th125.dat"),
    DetectEntry(12, 128, "th128.dat"),
    DetectEntry(13, 13, "th13.dat"),
    DetectEntry(14, 14, "th14.dat"),
    DetectEntry(14, 143, "th143.dat"),
    DetectEntry(14, 15, "th15.dat"),
    DetectEntry(14, 16, "th16.dat"),
    DetectEntry(14, 165, "th165.dat"),
    DetectEntry(14, 17, "th17.dat"),
    DetectEntry(14, 18, "th18.dat"),
    DetectEntry(14, 185, "th185.dat"),
    DetectEntry(14, 19, "th19.dat"),
    DetectEntry(75, 75, None),
    DetectEntry(7575, 7575, None),
    DetectEntry(105105, 105105, None),
    DetectEntry(105, 105, None),
    DetectEntry(123, 123, None),
)

_INDEX_BY_ALIAS = {entry.alias: index for index, entry in enumerate(DETECT_TABLE)}

# Shift-JIS encoded names of the older archives.
_SJIS_NAMES: tuple[tuple[int, bytes], ...] = (
    (1, b"\x93\x8c\x95\xfb\xe8\xcb\x88\xd9.\x93\x60"),
    (2, b"\x93\x8c\x95\xfb\x95\x95\x96\x82.\x98\x5e"),
    (3, b"\x96\xb2\x8e\x9e\x8b\xf31.DAT"),
    (3, b"\x96\xb2\x8e\x9e\x8b\xf32.DAT"),
    (4, b"\x93\x8c\x95\xfb\x8c\xb6\x91\x7a.\x8b\xbd"),
    (4, b"\x8c\xb6\x91\x7a\x8b\xbdED.DAT"),
    (5, b"\x89\xf6\xe3\x59\x92\x6b1.DAT"),
    (5, b"\x89\xf6\xe3\x59\x92\x6b2.DAT"),
    (6, b"\x8d\x67\x96\x82\x8b\xbdCM.DAT"),
    (6, b"\x8d\x67\x96\x82\x8b\xbdED.DAT"),
    (6, b"\x8d\x67\x96\x82\x8b\xbdIN.DAT"),
    (6, b"\x8d\x67\x96\x82\x8b\xbdMD.DAT"),
    (6, b"\x8d\x67\x96\x82\x8b\xbdST.DAT"),
    (6, b"\x8d\x67\x96\x82\x8b\xbdTL.DAT"),
)


def _misread_as_cp1252(raw: bytes) -> str:
    """Decode as Windows-1252, mapping its undefined bytes to the same code point."""
    chars = []
    for byte in raw:
        try:
            chars.append(bytes([byte]).decode("cp1252"))
        except UnicodeDecodeError:
            chars.append(chr(byte))
    return "".join(chars)


def _unicode_names() -> tuple[tuple[int, str], ...]:
    names: list[tuple[int, str]] = []
    names.extend((alias, raw.decode("cp932")) for alias, raw in _SJIS_NAMES)
    names.extend((alias, _misread_as_cp1252(raw)) for alias, raw in _SJIS_NAMES)
    names.extend((6, f"th06e_{part}.DAT") for part in ("CM", "ED", "IN", "MD", "ST", "TL"))
    names.extend(
        (75, name)
        for name in ("th075.dat", "th075b.dat", "th075bgm.dat", "sml.dat", "sml2.dat", "smlbgm.dat")
    )
    names.extend(
        (7575, name)
        for name in ("megamari.dat", "megamaribgm.dat", "megamari_e.dat")
    )
    names.extend((7575, f"daybreak{n:02d}.dat") for n in range(8))
    names.extend((105105, name) for name in ("td00.dat", "td01.dat"))
    names.extend((105, f"th105{c}.dat") for c in "abc")
    names.extend((123, f"th123{c}.dat") for c in "abc")
    return tuple(names)


_UNICODE_NAMES = _unicode_names()


def basename(path: str) -> str:
    """Return the part of ``path`` after its last ``/`` or ``\\``."""
    cut = max(path.rfind("/"), path.rfind("\\"))
    return path[cut + 1:]


def detect_filename(filename: str | bytes | None) -> int | None:
    """Guess the archive version from its file name; None if unknown."""
    if filename is None:
        return None
    if isinstance(filename, bytes):
        raw = filename
        name = os.fsdecode(filename)
    else:
        name = filename
        try:
            raw = os.fsencode(filename)
        except UnicodeError:
            raw = b""
    name = basename(name)
    cut = max(raw.rfind(b"/"), raw.rfind(b"\\"))
    raw = raw[cut + 1:]

    for entry in DETECT_TABLE:
        if entry.filename is not None and entry.filename == name:
            return entry.alias
    for alias, sjis in _SJIS_NAMES:
        if sjis == raw:
            return alias
    for alias, known in _UNICODE_NAMES:
        if known == name:
            return alias
    return None


class DetectSet:
    """A set of candidate archive versions, iterated in detection-table order."""

    def __init__(self, versions: Iterable[int] = ()) -> None:
        self._indices: set[int] = set()
        for version in versions:
            self.add(version)

    def add(self, version: int) -> None:
        """Mark ``version`` as a candidate; raise ValueError if it is unknown."""
        try:
            self._indices.add(_INDEX_BY_ALIAS[version])
        except KeyError:
            raise ValueError(f"unknown archive version {version}") from None

    def __iter__(self) -> Iterator[DetectEntry]:
        return (DETECT_TABLE[index] for index in sorted(self._indices))

    def __len__(self) -> int:
        return len(self._indices)

    def __contains__(self, version: object) -> bool:
        index = _INDEX_BY_ALIAS.get(version) if isinstance(version, int) else None
        return index is not None and index in self._indices


def resolve(candidates: Iterable[DetectEntry], filename_guess: int | None) -> int | None:
    """Pick one version from the candidates, or None if inconclusive.

    The file name guess wins if it is among the candidates. Otherwise a lone
    candidate gives its own version, and candidates that all share a variant
    give that variant.
    """
    entries = list(candidates)
    if filename_guess is not None and any(e.alias == filename_guess for e in entries):
        return filename_guess
    if len(entries) == 1:
        return entries[0].alias
    variants = {entry.variant for entry in entries}
    if len(variants) == 1:
        return variants.pop()
    return None