# romtools

Two command-line helpers for building ROM source trees: a preprocessor that
encodes strings through a charmap, and a scanner that lists the files a source
depends on. There are no runtime dependencies beyond Python 3.10 or later.

## Install

    pip install .

For the test suite:

    pip install ".[test]"
    pytest

## Preprocessing sources with a charmap

`romtools-preproc` rewrites a source file and writes the result to standard
output. It exits with status 1 and prints a message of the form
`file:line: error: ...` when the input is malformed.

    romtools-preproc SRC_FILE CHARMAP_FILE

The extension of `SRC_FILE` decides how it is handled:

- `.s` files are assembly. `@` and `/* */` comments are blanked out.
  `.string "..."` and `.braille "..."` lines become `.byte` lines; a
  `.string` may be followed by `, N` to pad it with zero bytes to length `N`.
  `.include "file"` is expanded in place, with `# LINE "file"` markers
  written around it, and `label::` becomes `label: ; .global label`.
  A file that does not end with a newline gives a warning on standard error.
- `.c` and `.i` files are C. `_("...")` becomes a byte array ending in
  `0xFF`, `__("...")` one without the terminator, `___("...")` an array of
  16-bit values, and `_s("...")` a string literal of `\xNN` escapes.
  `INCBIN_S8`, `INCBIN_U8`, `INCBIN_S16`, `INCBIN_U16`, `INCBIN_S32` and
  `INCBIN_U32` with one or more quoted paths are replaced by the files'
  contents, read little-endian, as an initializer list.

Inside a string, `{NAME}` inserts a charmap constant, and a number in braces
inserts raw bytes: hex as `{0x12}`, `{0x1234}` or `{0x12345678}`, decimal
sized by value or forced with an `H` (halfword) or `W` (word) suffix.
Encoded strings are limited to 1024 bytes.

A charmap file maps characters, escapes and constants to byte sequences of up
to 16 bytes:

    'A' = BB
    '\n' = FE
    PLAYER = FD 01

Entries are read from the top, each may be defined once, and `@` starts a
comment.

## Listing the dependencies of a source file

`romtools-scaninc` follows includes and incbins and prints every file a source
depends on, one per line, sorted.

    romtools-scaninc [-I INCLUDE_DIR]... FILE

`.c` and `.h` files are scanned for `#include "..."` and `INCBIN_*("...")`;
quoted includes are looked up in each `-I` directory and then in the
directory of `FILE`, and those found are scanned in turn. `.s` and `.inc`
files are scanned for `.include "..."` and `.incbin "..."`; included files
that exist are scanned in turn.

## From Python

    from romtools.charmap import Charmap
    from romtools.preproc import preproc_asm_file, preproc_c_file
    from romtools.scaninc import scan_dependencies

    charmap = Charmap.from_file("charmap.txt")
    output = preproc_c_file("src/text.c", charmap)      # bytes
    deps = scan_dependencies("src/main.c", ["include/"])

`Charmap` can also be built from text, `Charmap("'A' = BB\n")`, and looked up
with `char`, `escape` and `constant`. `romtools.string_parser.StringParser`
encodes a single quoted literal, and `romtools.scan_c.ScanCFile` and
`romtools.scan_asm.ScanAsmFile` scan one file without following includes.

Errors in the input raise `romtools.errors.PreprocError` or one of its
subclasses: `SourceError` and `ScanError`, whose messages give the file and
line, and `StringParseError` from the string parser.