import struct

import pytest

from thtools.msg95 import MsgError, read_msg95, write_msg95

SAMPLE95 = (
    b"entry 1,2,3,4\n"
    b"Hello there\n"
    b"second line\n"
    b"\n"
    b"// a comment\n"
    b"entry 5,6,7,8\n"
    b"one\n"
    b"two\n"
    b"three\n"
)

SAMPLE125 = (
    b"entry 1,2,3,4,5,6,7,-1,2,-3,4,-5,6\n"
    + b"".join(b"line %d\n" % n for n in range(6))
)


def test_round_trip_95():
    binary = write_msg95(SAMPLE95, 95)
    expected = SAMPLE95.replace(b"// a comment\n", b"")
    assert read_msg95(binary, 95) == expected


def test_round_trip_125():
    binary = write_msg95(SAMPLE125, 125)
    assert read_msg95(binary, 125) == SAMPLE125


def test_layout_of_95_file():
    binary = write_msg95(SAMPLE95, 95)
    record = struct.calcsize("<HHII") + 3 * 64
    count, first, second = struct.unpack_from("<3I", binary, 0)
    assert count == 2
    assert first == 12
    assert second == first + record
    assert len(binary) == 12 + 2 * record
    assert struct.unpack_from("<HHII", binary, first) == (1, 2, 3, 4)


def test_text_is_encrypted():
    binary = write_msg95(SAMPLE95, 95)
    assert b"Hello there" not in binary
    assert b"three" not in binary


def test_long_lines_are_truncated():
    text = b"entry 0,0,0,0\n" + b"x" * 100 + b"\nb\nc\n"
    result = read_msg95(write_msg95(text, 95), 95)
    assert result.split(b"\n")[1] == b"x" * 64


def test_hex_and_octal_furigana_values():
    text = b"entry 1,1,1,1,1,1,1,0x10,010,0,0,0,0\n" + b"a\n" * 6
    result = read_msg95(write_msg95(text, 125), 125)
    assert result.split(b"\n")[0] == b"entry 1,1,1,1,1,1,1,16,8,0,0,0,0"


def test_fields_wrap_to_their_width():
    text = b"entry 65537,0,0,0\nA\nB\nC\n"
    binary = write_msg95(text, 95)
    assert struct.unpack_from("<H", binary, 8)[0] == 1
    assert read_msg95(binary, 95).startswith(b"entry 1,0,0,0\n")


def test_empty_text_gives_empty_table():
    binary = write_msg95(b"", 95)
    assert binary == struct.pack("<I", 0)
    assert read_msg95(binary, 95) == b""


@pytest.mark.parametrize("version", [6, 12])
def test_unsupported_version(version):
    with pytest.raises(MsgError):
        read_msg95(struct.pack("<I", 0), version)
    with pytest.raises(MsgError):
        write_msg95(SAMPLE95, version)


def test_truncated_file_raises():
    binary = write_msg95(SAMPLE95, 95)
    with pytest.raises(MsgError):
        read_msg95(binary[:-10], 95)
    with pytest.raises(MsgError):
        read_msg95(b"\x05\x00", 95)