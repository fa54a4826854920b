"""Binary stage background (STD) files: data model, reader and writer."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

_NAME_SIZE = 128
_HEADER_06 = struct.Struct("<HHIII" + f"{_NAME_SIZE}s" * 9)
_HEADER_10 = struct.Struct(f"<HHIII{_NAME_SIZE}s")
_ENTRY_HEADER = struct.Struct("<HH6f")
_QUAD = struct.Struct("<HHHH5f")
_FACE = struct.Struct("<HHfff")
_INSTR = struct.Struct("<IHH")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")

_ENTRY_END = 0x0004FFFF
_END = 0xFFFFFFFF
_FACE_END = 0xFFFF
_INSTR_END = 0xFFFF
_QUAD_SIZE = 0x1C
# Instructions of the oldest layout always carry three 32-bit arguments.
_V0_ARGS_SIZE = 12

_LAYOUTS = {
    **dict.fromkeys((6, 7, 8, 9, 95), 0),
    **dict.fromkeys((10, 103, 11, 12, 125, 128, 13), 1),
    **dict.fromkeys((14, 143, 15, 16, 165, 17, 18, 185, 19), 2),
}


class StdError(Exception):
    """Raised when an STD file or its contents cannot be converted."""


@dataclass
class StdQuad:
    """One quad of an entry."""

    type: int = 0
    script_index: int = 0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    padding: int = 0
    width: float = 0.0
    height: float = 0.0


@dataclass
class StdEntry:
    """An object: a positioned box made of quads."""

    unknown: int = 0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    depth: float = 0.0
    width: float = 0.0
    height: float = 0.0
    quads: list[StdQuad] = field(default_factory=list)


@dataclass
class StdFace:
    """A placement of the object with index ``object_id``."""

    object_id: int = 0
    unknown1: int = 0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class StdInstruction:
    """A script instruction with its raw argument bytes."""

    time: int = 0
    type: int = 0
    args: bytes = b""


@dataclass
class StdFile:
    """A whole STD file.

    Layout 0 uses ``stage_name``, ``song_names`` and ``song_paths``; the
    later layouts use ``anm_name`` instead.
    """

    unknown: int = 0
    anm_name: bytes = b""
    stage_name: bytes = b""
    song_names: list[bytes] = field(default_factory=lambda: [b""] * 4)
    song_paths: list[bytes] = field(default_factory=lambda: [b""] * 4)
    entries: list[StdEntry] = field(default_factory=list)
    faces: list[StdFace] = field(default_factory=list)
    instructions: list[StdInstruction] = field(default_factory=list)


def layout_for_version(version: int) -> int:
    """Return the file layout (0, 1 or 2) used by game ``version``."""
    if not version:
        raise StdError("version must be specified")
    try:
        return _LAYOUTS[version]
    except KeyError:
        raise StdError(f"version {version} is unsupported") from None


def _check_layout(layout: int) -> None:
    if layout not in (0, 1, 2):
        raise StdError(f"unknown layout {layout}")


def _header_struct(layout: int) -> struct.Struct:
    return _HEADER_06 if layout == 0 else _HEADER_10


def _unpack(fmt: struct.Struct, data: bytes, offset: int) -> tuple:
    if offset < 0:
        raise StdError(f"negative offset {offset}")
    try:
        return fmt.unpack_from(data, offset)
    except struct.error:
        raise StdError(f"file is truncated at offset {offset}") from None


def _pack(fmt: struct.Struct, *values: object) -> bytes:
    try:
        return fmt.pack(*values)
    except struct.error as exc:
        raise StdError(f"value out of range: {exc}") from None


def _cstr(raw: bytes) -> bytes:
    return raw.split(b"\0", 1)[0]


def _fixed(name: bytes) -> bytes:
    return bytes(name)[:_NAME_SIZE].ljust(_NAME_SIZE, b"\0")


def read_std(data: bytes, layout: int) -> StdFile:
    """Parse binary STD ``data`` stored in the given layout."""
    _check_layout(layout)
    data = bytes(data)
    std = StdFile()
    header = _header_struct(layout)
    if layout == 0:
        nb_objects, _nb_faces, faces_offset, script_offset, unknown, *names = _unpack(
            header, data, 0
        )
        names = [_cstr(name) for name in names]
        std.stage_name = names[0]
        std.song_names = names[1:5]
        std.song_paths = names[5:9]
    else:
        nb_objects, _nb_faces, faces_offset, script_offset, unknown, anm = _unpack(
            header, data, 0
        )
        std.anm_name = _cstr(anm)
    std.unknown = unknown

    offsets = _unpack(struct.Struct(f"<{nb_objects}I"), data, header.size)
    for offset in offsets:
        _id, unknown, x, y, z, width, height, depth = _unpack(_ENTRY_HEADER, data, offset)
        entry = StdEntry(
            unknown=unknown, x=x, y=y, z=z, depth=depth, width=width, height=height
        )
        pos = offset + _ENTRY_HEADER.size
        while _unpack(_U32, data, pos)[0] != _ENTRY_END:
            qtype, _size, script_index, padding, qx, qy, qz, qw, qh = _unpack(_QUAD, data, pos)
            entry.quads.append(
                StdQuad(
                    type=qtype,
                    script_index=script_index,
                    x=qx,
                    y=qy,
                    z=qz,
                    padding=padding,
                    width=qw,
                    height=qh,
                )
            )
            pos += _QUAD.size
        std.entries.append(entry)

    pos = faces_offset
    while _unpack(_U16, data, pos)[0] != _FACE_END:
        object_id, unknown1, x, y, z = _unpack(_FACE, data, pos)
        std.faces.append(StdFace(object_id=object_id, unknown1=unknown1, x=x, y=y, z=z))
        pos += _FACE.size

    pos = script_offset
    while True:
        time, itype, size = _unpack(_INSTR, data, pos)
        if size == _INSTR_END:
            break
        start = pos + _INSTR.size
        if layout == 0:
            end = start + _V0_ARGS_SIZE
            next_pos = start + size
        else:
            if size < _INSTR.size:
                raise StdError(f"instruction at offset {pos} has invalid size {size}")
            end = next_pos = pos + size
        if end > len(data):
            raise StdError(f"file is truncated at offset {pos}")
        std.instructions.append(StdInstruction(time=time, type=itype, args=data[start:end]))
        pos = next_pos

    return std


def write_std(std: StdFile, layout: int) -> bytes:
    """Serialise ``std`` into the binary form of the given layout."""
    _check_layout(layout)
    header = _header_struct(layout)
    nb_objects = len(std.entries)
    nb_faces = sum(len(entry.quads) for entry in std.entries)

    table_end = header.size + _U32.size * nb_objects
    entry_offsets = []
    offset = table_end
    for entry in std.entries:
        entry_offsets.append(offset)
        offset += _ENTRY_HEADER.size + _QUAD.size * len(entry.quads) + _U32.size
    faces_offset = offset
    script_offset = faces_offset + _FACE.size * len(std.faces) + _U32.size * 4

    out = bytearray()
    if layout == 0:
        songs = list(std.song_names) + [b""] * 4
        paths = list(std.song_paths) + [b""] * 4
        names = [std.stage_name, *songs[:4], *paths[:4]]
        out += _pack(
            header,
            nb_objects,
            nb_faces,
            faces_offset,
            script_offset,
            std.unknown & _END,
            *(_fixed(name) for name in names),
        )
    else:
        out += _pack(
            header,
            nb_objects,
            nb_faces,
            faces_offset,
            script_offset,
            std.unknown & _END,
            _fixed(std.anm_name),
        )

    for entry_offset in entry_offsets:
        out += _pack(_U32, entry_offset)

    for index, entry in enumerate(std.entries):
        out += _pack(
            _ENTRY_HEADER,
            index,
            entry.unknown,
            entry.x,
            entry.y,
            entry.z,
            entry.width,
            entry.height,
            entry.depth,
        )
        for quad in entry.quads:
            out += _pack(
                _QUAD,
                quad.type,
                _QUAD_SIZE,
                quad.script_index,
                quad.padding,
                quad.x,
                quad.y,
                quad.z,
                quad.width,
                quad.height,
            )
        out += _pack(_U32, _ENTRY_END)

    for face in std.faces:
        out += _pack(_FACE, face.object_id, face.unknown1, face.x, face.y, face.z)
    out += _pack(_U32, _END) * 4

    for instr in std.instructions:
        args = bytes(instr.args)
        if layout == 0:
            args = args[:_V0_ARGS_SIZE].ljust(_V0_ARGS_SIZE, b"\0")
            size = _V0_ARGS_SIZE
        else:
            size = _INSTR.size + len(args)
            if size >= _INSTR_END:
                raise StdError(f"instruction {instr.type} has too many arguments")
        out += _pack(_INSTR, instr.time, instr.type, size)
        out += args
    out += _pack(_U32, _END) * 5

    return bytes(out)