"""Text form of stage background (STD) files and the ``thstd`` command."""

from __future__ import annotations

import getopt
import math
import re
import struct
import sys
from typing import Iterator

from .std import StdEntry, StdError, StdFace, StdFile, StdInstruction, StdQuad
from .std import layout_for_version, read_std, write_std

PROGRAM = "thstd"
_VERSION = "0.1.0"
# Text is handled byte for byte; Latin-1 maps every byte to one character.
_ENCODING = "latin-1"
_NAME_SIZE = 128
_MASK32 = 0xFFFFFFFF

# Some of the S arguments are actually colours.
_FORMATS_V0 = {
    0: "Sff", 1: "Sff", 2: "Sff", 3: "Sff", 4: "Sff", 5: "Sff", 6: "SSf",
    7: "fff", 8: "SSf", 9: "Sff", 10: "Sff", 11: "fff", 12: "Sff", 13: "Sff",
}
_FORMATS_V1 = {
    0: "", 1: "SS", 2: "fff", 3: "SSfff", 4: "fff", 5: "SSfff", 6: "fff",
    7: "f", 8: "Cff", 9: "SSCff", 10: "SSfffffffff", 12: "S", 13: "S",
    14: "SS", 16: "S", 17: "S", 18: "SSfff", 19: "S",
}
_FORMATS_V2 = {**_FORMATS_V1, 14: "SSS", 21: "SSf"}
_FORMATS = (_FORMATS_V0, _FORMATS_V1, _FORMATS_V2)

_WS = r"[ \t\n\r\f\v]*"
_INT_RE = re.compile(_WS + r"([+-]?\d+)")
_FLOAT_RE = re.compile(
    _WS + r"([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_HEX_RE = re.compile(_WS + r"([0-9a-fA-F]{1,2})")
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+\Z")

_HEADER_NAMES = {
    "Stage: ": ("stage_name", None),
    "Song1: ": ("song_names", 0),
    "Song2: ": ("song_names", 1),
    "Song3: ": ("song_names", 2),
    "Song4: ": ("song_names", 3),
    "Path1: ": ("song_paths", 0),
    "Path2: ": ("song_paths", 1),
    "Path3: ": ("song_paths", 2),
    "Path4: ": ("song_paths", 3),
}

_ENTRY_FIELDS = (
    ("Unknown:", "h", ("unknown",)),
    ("Position:", "fff", ("x", "y", "z")),
    ("Depth:", "f", ("depth",)),
    ("Width:", "f", ("width",)),
    ("Height:", "f", ("height",)),
)
_QUAD_FIELDS = (
    ("Type:", "h", ("type",)),
    ("Script_index:", "h", ("script_index",)),
    ("Position:", "fff", ("x", "y", "z")),
    ("Padding:", "h", ("padding",)),
    ("Width:", "f", ("width",)),
    ("Height:", "f", ("height",)),
)


def _check_layout(layout: int) -> None:
    if layout not in (0, 1, 2):
        raise StdError(f"unknown layout {layout}")


def _to_f32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _signed32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value >= 1 << 31 else value


def _name_text(name: bytes) -> str:
    return bytes(name).split(b"\0", 1)[0].decode(_ENCODING)


def _format_float(value: float) -> str:
    """Shortest text that reads back as the same single-precision value."""
    if not math.isfinite(value):
        return "%g" % value
    text = "%#.9g" % value
    for precision in range(1, 10):
        candidate = "%#.*g" % (precision, value)
        if _to_f32(float(candidate)) == value:
            text = candidate
            break
    mantissa, e, exponent = text.partition("e")
    mantissa = mantissa.rstrip("0")
    if mantissa.endswith("."):
        mantissa += "0"
    return f"{mantissa}{e}{exponent}f"


def _format_args(args: bytes, fmt: str, layout: int) -> list[str]:
    data = bytes(args)
    if layout == 0:
        data = data[:12].ljust(12, b"\0")
    values = []
    for index, kind in enumerate(fmt):
        chunk = data[index * 4:index * 4 + 4]
        if len(chunk) < 4:
            raise StdError("instruction arguments are truncated")
        if kind == "f":
            values.append(_format_float(struct.unpack("<f", chunk)[0]))
        elif kind == "C":
            values.append("#" + chunk.hex())
        else:
            values.append(str(struct.unpack("<i", chunk)[0]))
    return values


def dump_std(std: StdFile, layout: int) -> str:
    """Render ``std`` in the editable text form of the given layout."""
    _check_layout(layout)
    formats = _FORMATS[layout]
    out: list[str] = []
    write = out.append

    if layout == 0:
        write(f"Stage: {_name_text(std.stage_name)}\n")
        for number in range(4):
            write(f"Song{number + 1}: {_name_text(std.song_names[number])}\n")
            write(f"Path{number + 1}: {_name_text(std.song_paths[number])}\n")
    else:
        write(f"ANM: {_name_text(std.anm_name)}\n")
    write(f"Std_unknown: {_signed32(std.unknown)}\n")

    for object_id, entry in enumerate(std.entries):
        write("\nENTRY:\n")
        write(f"    Unknown: {entry.unknown}\n")
        write("    Position: %g %g %g\n" % (entry.x, entry.y, entry.z))
        write("    Depth: %g\n" % entry.depth)
        write("    Width: %g\n" % entry.width)
        write("    Height: %g\n" % entry.height)
        for quad in entry.quads:
            write("\n    QUAD:\n")
            write(f"        Type: {quad.type}\n")
            write(f"        Script_index: {quad.script_index}\n")
            write("        Position: %g %g %g\n" % (quad.x, quad.y, quad.z))
            write(f"        Padding: {quad.padding}\n")
            write("        Width: %g\n" % quad.width)
            write("        Height: %g\n" % quad.height)
        write("\n")
        for face in std.faces:
            if face.object_id == object_id:
                write("    FACE: %d %g %g %g\n" % (face.unknown1, face.x, face.y, face.z))

    write("\nSCRIPT:\n")
    time = 0
    for instr in std.instructions:
        fmt = formats.get(instr.type)
        if fmt is None:
            raise StdError(f"id {instr.type} was not found in the format table")
        if instr.time != time:
            write(f"{_signed32(instr.time)}:\n")
            time = instr.time
        if not fmt:
            raise StdError(f"id {instr.type} takes no arguments and cannot be dumped")
        write(f"    ins_{instr.type}(" + ", ".join(_format_args(instr.args, fmt, layout)) + ");\n")
    return "".join(out)


def _lines(text: str) -> Iterator[str]:
    for match in _LINE_RE.finditer(text):
        yield match.group(0)


def _scan(line: str, literal: str, kinds: str) -> list:
    """Read numbers after ``literal`` the way scanf does, stopping at the first miss."""
    if not line.startswith(literal):
        return []
    pos = len(literal)
    values: list = []
    for kind in kinds:
        match = (_FLOAT_RE if kind == "f" else _INT_RE).match(line, pos)
        if not match:
            break
        token = match.group(1)
        if kind == "f":
            values.append(_to_f32(float(token)))
        elif kind == "h":
            values.append(int(token) & 0xFFFF)
        else:
            values.append(int(token) & _MASK32)
        pos = match.end()
    return values


def _cut_name(rest: str) -> str:
    body = rest.lstrip(" \t")
    name = body.split("\n", 1)[0].rstrip(" \t")
    if not name and body.startswith("\n"):
        return "\n"
    return name


def _encode_name(name: str) -> bytes:
    try:
        return name.encode(_ENCODING)[:_NAME_SIZE]
    except UnicodeEncodeError as exc:
        raise StdError(f"name {name!r} cannot be stored") from exc


def _parse_args(rest: str, start: int) -> bytes:
    args = bytearray()
    pos = start
    while True:
        if rest.startswith("#", pos):
            for index in range(4):
                match = _HEX_RE.match(rest, pos + 1 + index * 2)
                if not match:
                    raise StdError("malformed color structure")
                args.append(int(match.group(1), 16))
            after = pos + len("#RRBBGGAA")
        else:
            match = _INT_RE.match(rest, pos)
            if not match:
                break
            if rest[match.end():match.end() + 1] in ("f", "."):
                fmatch = _FLOAT_RE.match(rest, pos)
                assert fmatch is not None
                args += struct.pack("<f", _to_f32(float(fmatch.group(1))))
                after = fmatch.end() + 1
            else:
                value = max(-(1 << 63), min(int(match.group(1)), (1 << 63) - 1))
                args += struct.pack("<I", value & _MASK32)
                after = match.end()
        pos = after
        while rest[pos:pos + 1] in (",", " ") and pos < len(rest):
            pos += 1
    return bytes(args)


def parse_std(text: str | bytes, layout: int) -> StdFile:
    """Build an ``StdFile`` from its text form in the given layout."""
    _check_layout(layout)
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode(_ENCODING)
    formats = _FORMATS[layout]
    std = StdFile()
    entry: StdEntry | None = None
    quad: StdQuad | None = None
    set_object = True
    object_id = -1
    instr_time = 0

    for raw in _lines(text):
        line = raw.lstrip(" ")
        shown = line.rstrip("\n")
        header_name = next((p for p in _HEADER_NAMES if line.startswith(p)), None)

        if layout >= 1 and line.startswith("ANM: "):
            std.anm_name = _encode_name(_cut_name(line[len("ANM: "):]))
        elif layout in (0, 1) and line.startswith("Std_unknown: "):
            values = _scan(line, "Std_unknown:", "u")
            if not values:
                raise StdError(f"Script parsing failed for {shown}")
            std.unknown = values[0]
        elif layout == 0 and header_name is not None:
            name = _cut_name(line[len(header_name):])
            if name.startswith("\n"):
                name = " " + name[1:]
            attribute, index = _HEADER_NAMES[header_name]
            if index is None:
                setattr(std, attribute, _encode_name(name))
            else:
                getattr(std, attribute)[index] = _encode_name(name)
        elif line.startswith("ENTRY:"):
            entry = StdEntry()
            std.entries.append(entry)
            set_object = True
            object_id += 1
        elif line.startswith("QUAD:"):
            if entry is None:
                raise StdError("QUAD found before any ENTRY")
            quad = StdQuad()
            entry.quads.append(quad)
            set_object = False
        elif line.startswith("FACE: "):
            values = _scan(line, "FACE:", "hfff")
            if len(values) != 4:
                raise StdError(f"Script parsing failed for {shown}")
            unknown1, x, y, z = values
            std.faces.append(
                StdFace(object_id=object_id & 0xFFFF, unknown1=unknown1, x=x, y=y, z=z)
            )
        elif line.startswith("ins_"):
            rest = line[len("ins_"):]
            paren = rest.find("(")
            if paren < 0:
                raise StdError(f"Script parsing failed for {shown}")
            match = _INT_RE.match(rest[:paren] + " " + rest[paren + 1:])
            if not match:
                raise StdError(f"Script parsing failed for {shown}")
            itype = int(match.group(1)) & 0xFFFF
            if itype not in formats:
                raise StdError(f"id {itype} was not found in the format table")
            args = _parse_args(rest, paren + 1)
            std.instructions.append(StdInstruction(time=instr_time, type=itype, args=args))
        else:
            if object_id >= 0:
                target = entry if set_object else quad
                fields = _ENTRY_FIELDS if set_object else _QUAD_FIELDS
                for literal, kinds, names in fields:
                    for name, value in zip(names, _scan(line, literal, kinds)):
                        setattr(target, name, value)
            values = _scan(line, "", "u")
            if values:
                instr_time = values[0]
    return std


def _usage() -> None:
    print(
        f"Usage: {PROGRAM} [-V] [-c | -d VERSION] [INPUT [OUTPUT]]\n"
        "Options:\n"
        "  -V                    display version information and exit\n"
        "  -c                    create STD file\n"
        "  -d                    dump STD file\n"
        "VERSION can be:\n"
        "  6, 7, 8, 9, 95, 10, 103 (for Uwabami Breakers), 11, 12, 125, 128, 13, 14, "
        "143, 15, 16, 165, 17, 18, 185 or 19"
    )


def _error(message: str) -> int:
    print(f"{PROGRAM}: {message}", file=sys.stderr)
    return 1


def _parse_version(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise StdError(f"version {text} is unsupported") from None


def _write_stdout(data: bytes) -> None:
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is not None:
        sys.stdout.flush()
        buffer.write(data)
        buffer.flush()
    else:
        sys.stdout.write(data.decode(_ENCODING))


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, operands = getopt.gnu_getopt(args, "c:d:V")
    except getopt.GetoptError as exc:
        _error(exc.msg)
        _usage()
        return 1

    command: str | None = None
    version_text = ""
    for opt, value in opts:
        if opt == "-V":
            print(f"{PROGRAM} {_VERSION}")
            return 0
        if command is not None:
            _error("More than one mode specified")
            _usage()
            return 1
        command = opt[1]
        version_text = value

    if command is None:
        _usage()
        return 0

    try:
        layout = layout_for_version(_parse_version(version_text))
        if command == "d":
            if not 1 <= len(operands) <= 2:
                _usage()
                return 1
            try:
                with open(operands[0], "rb") as handle:
                    data = handle.read()
            except OSError:
                return _error(f"couldn't open {operands[0]} for reading")
            text = dump_std(read_std(data, layout), layout).encode(_ENCODING)
            if len(operands) == 2:
                try:
                    with open(operands[1], "wb") as handle:
                        handle.write(text)
                except OSError as exc:
                    return _error(
                        f"couldn't open {operands[1]} for writing: {exc.strerror or exc}"
                    )
            else:
                _write_stdout(text)
            return 0

        if len(operands) != 2:
            _usage()
            return 1
        try:
            with open(operands[0], "rb") as handle:
                source = handle.read()
        except OSError as exc:
            return _error(f"couldn't open {operands[0]} for reading: {exc.strerror or exc}")
        data = write_std(parse_std(source, layout), layout)
        try:
            with open(operands[1], "wb") as handle:
                handle.write(data)
        except OSError as exc:
            return _error(f"couldn't open {operands[1]} for writing: {exc.strerror or exc}")
        return 0
    except StdError as exc:
        return _error(str(exc))


if __name__ == "__main__":
    sys.exit(main())