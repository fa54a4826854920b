import pytest

from thtools.detect import (
    DETECT_TABLE,
    DetectEntry,
    DetectSet,
    basename,
    detect_filename,
    resolve,
)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("a/b\\c.dat", "c.dat"),
        ("a\\b/c.dat", "c.dat"),
        ("plain.dat", "plain.dat"),
        ("dir/", ""),
    ],
)
def test_basename(path, expected):
    assert basename(path) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("th07.dat", 7),
        ("/games/th10.dat", 10),
        ("C:\\games\\th095.dat", 95),
        ("alcostg.dat", 103),
        ("th19.dat", 19),
        ("megamari.dat", 7575),
        ("daybreak07.dat", 7575),
        ("td01.dat", 105105),
        ("th123b.dat", 123),
        ("smlbgm.dat", 75),
        ("th06e_ST.DAT", 6),
        ("東方靈異.伝", 1),
        ("紅魔郷CM.DAT", 6),
        ("夢時空2.DAT", 3),
        ("“Œ•ûèËˆÙ.“`", 1),
        ("\x8dg–‚‹½TL.DAT", 6),
    ],
)
def test_detect_filename_known(name, expected):
    assert detect_filename(name) == expected


def test_detect_filename_sjis_bytes():
    raw = bytes([0x93, 0x8C, 0x95, 0xFB, 0x95, 0x95, 0x96, 0x82]) + b"." + bytes([0x98, 0x5E])
    assert detect_filename(b"some/dir/" + raw) == 2


def test_detect_filename_unknown():
    assert detect_filename("readme.txt") is None
    assert detect_filename(None) is None


def test_detect_filename_is_case_sensitive():
    assert detect_filename("TH07.DAT") is None


def test_table_filenames_round_trip():
    for entry in DETECT_TABLE:
        if entry.filename is not None:
            assert detect_filename(entry.filename) == entry.alias


def test_set_iterates_in_table_order():
    found = DetectSet([19, 6, 95])
    assert [e.alias for e in found] == [6, 95, 19]


def test_set_entries_come_from_table():
    entry = next(iter(DetectSet([103])))
    assert entry == DetectEntry(95, 103, "alcostg.dat")


def test_set_add_and_contains():
    found = DetectSet()
    assert len(found) == 0
    found.add(12)
    found.add(12)
    assert len(found) == 1
    assert 12 in found
    assert 13 not in found


def test_set_rejects_unknown_version():
    with pytest.raises(ValueError):
        DetectSet([4242])


def test_resolve_prefers_filename_guess():
    assert resolve(DetectSet([95, 10, 11]), 10) == 10


def test_resolve_same_variant():
    assert resolve(DetectSet([95, 10, 103, 11]), None) == 95
    assert resolve(DetectSet([3, 4, 5]), None) == 3


def test_resolve_guess_outside_candidates_falls_back():
    assert resolve(DetectSet([14, 15, 16]), 7) == 14


def test_resolve_single_candidate():
    assert resolve(DetectSet([125]), None) == 125


def test_resolve_mixed_variants_is_inconclusive():
    assert resolve(DetectSet([6, 7]), None) is None
    assert resolve(DetectSet([8, 9]), None) is None


def test_resolve_empty():
    assert resolve(DetectSet(), None) is None
    assert resolve(DetectSet(), 7) is None


def test_resolve_from_filename_detection():
    guess = detect_filename("path/th09.dat")
    assert resolve(DetectSet([8, 9]), guess) == 9