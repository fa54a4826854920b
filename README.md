# thtools

Readers and writers for the data files of a family of vertical
shoot-'em-up games. The package handles:

- stage background files (STD), in binary form and in an editable text
  form, with a `thstd` command
- the dialogue files of the photography spin-offs (versions 95 and 125)
- guessing an archive's game version from its file name, and choosing a
  version from a set of candidates
- the XOR ciphers these formats use, a 32-bit Mersenne Twister, and glob
  matching

Only the Python standard library is needed, Python 3.10 or later.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line: `thstd`

`thstd` dumps a binary STD file as text, or builds a binary STD file from
that text. The game version is given with the mode option:

```
thstd -d VERSION INPUT [OUTPUT]
thstd -c VERSION INPUT OUTPUT
```

- `-d` dumps `INPUT`. The text is written to `OUTPUT`, or to standard
  output if `OUTPUT` is left out.
- `-c` reads the text in `INPUT` and writes the binary file to `OUTPUT`.
- `-V` prints the program version and exits.

`VERSION` is one of 6, 7, 8, 9, 95, 10, 103, 11, 12, 125, 128, 13, 14, 143,
15, 16, 165, 17, 18, 185 or 19. Versions 6 to 95 share one file layout,
10 to 13 a second, and 14 onwards a third. Without a mode the usage text
is printed. Errors go to standard error and the exit status is 1.

## Library use

### Stage files (`thtools.std`, `thtools.stdtext`)

```python
from thtools.std import layout_for_version, read_std, write_std
from thtools.stdtext import dump_std, parse_std

layout = layout_for_version(12)          # -> 1
with open("stage1.std", "rb") as fh:
    std = read_std(fh.read(), layout)

text = dump_std(std, layout)
rebuilt = write_std(parse_std(text, layout), layout)
```

`read_std` returns a `StdFile`. It holds a list of `StdEntry` objects, each
with its `StdQuad` list, plus lists of `StdFace` and `StdInstruction`
objects. In layout 0 the header carries a stage name and four song names
and paths. The later layouts carry an `anm_name` instead. `parse_std`
accepts `str` or `bytes`. Unknown versions, malformed data, and instruction
ids missing from the format table raise `StdError`.

### Dialogue files (`thtools.msg95`)

```python
from thtools.msg95 import read_msg95, write_msg95

text = read_msg95(binary_data, 95)   # bytes -> bytes
binary = write_msg95(text, 95)       # bytes -> bytes
```

In the text form, each entry starts with an `entry ...` line of
comma-separated header fields. Three text lines follow for version 95, or
six for version 125. Lines that start with `//` are skipped. Any other
version, or a file too short for its entry table, raises `MsgError`. No
command-line tool is provided for these files. Use the two functions.

### Archive version detection (`thtools.detect`)

```python
from thtools.detect import DetectSet, detect_filename, resolve

detect_filename("th12.dat")               # -> 12
detect_filename("C:\\games\\th08.dat")    # basename is taken first -> 8
detect_filename("unknown.dat")            # -> None

resolve(DetectSet([95, 10, 11]), None)    # all share variant 95 -> 95
resolve(DetectSet([8, 9]), 9)             # file name guess wins -> 9
resolve(DetectSet([8, 9]), None)          # inconclusive -> None
```

`detect_filename` also recognises the Shift-JIS names of the older
archives, given as bytes or as decoded text. `DetectSet` holds candidate
versions and yields `DetectEntry` records in table order.
`DetectSet.add` raises `ValueError` for a version it does not know.

### Ciphers, random numbers, globbing

- `thtools.crypt` provides `encrypt` and `decrypt` (the block-interleaving
  cipher), `crypt75_list`, `crypt105_list` and `crypt105_file`. Each takes
  bytes and returns new bytes.
- `thtools.rng.MersenneTwister(seed)` is MT19937. Call `next_int()` for one
  32-bit value, or iterate over the generator.
- `thtools.match.glob_match(pattern, string)` matches `*` and `?` against
  the whole string.

## What the package does not do

The package does not open, list, extract or build archive containers. It
has no file or memory stream layer and no bit-stream reader. For archives
it offers only version detection from file names, the selection among
candidate versions, and the ciphers.