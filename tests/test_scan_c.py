import pytest

from romtools.errors import PreprocError, ScanError
from romtools.scan_c import ScanCFile


def scan(text):
    scanner = ScanCFile(text.encode("utf-8") if isinstance(text, str) else text, "f.c")
    scanner.find_incbins()
    return scanner


@pytest.mark.parametrize(
    "text, includes, incbins",
    [
        (
            '#include "global.h"\n#include <stdio.h>\n#include "main.h"\nint x;\n',
            {"global.h", "main.h"},
            set(),
        ),
        (
            'const u8 a[] = INCBIN_U8("graphics/a.4bpp");\n'
            'const u16 b[] = INCBIN_U16 ( "graphics/b.gbapal" );\n'
            'const s32 c[] = INCBIN_S32(\n  "data/c.bin"\n);\n',
            set(),
            {"graphics/a.4bpp", "graphics/b.gbapal", "data/c.bin"},
        ),
        ("#define X INCBIN_U8 \nint y;\n", set(), set()),
        ('const char *s = "INCBIN_U8(\\"x.bin\\") #include \\"y.h\\"";\n', set(), set()),
        (
            '// INCBIN_U8("c.bin")\n'
            'int x; // #include "a.h"\n'
            '/* #include "b.h" */\n'
            '#include "real.h"\n',
            {"real.h"},
            set(),
        ),
        (
            '#include "a.h"\r\nconst u8 d[] = INCBIN_U8("d.bin");\r\n',
            {"a.h"},
            {"d.bin"},
        ),
    ],
)
def test_references_collected(text, includes, incbins):
    s = scan(text)
    assert s.includes == includes
    assert s.incbins == incbins


def test_line_count():
    assert scan("a\nb\nc\n").line_num == 4


def test_bad_include_path_reports_location():
    with pytest.raises(ScanError) as info:
        scan("int a;\n\n#include foo.h\n")
    assert info.value.line_num == 3
    assert info.value.path == "f.c"


@pytest.mark.parametrize(
    "text, message",
    [
        ("#include foo.h\n", "expected '\"' or '<'"),
        ('INCBIN_U8("a.bin";\n', "expected ')'"),
        ('#include "abc', "unexpected EOF in path string"),
        ('#include "ab\nc"\n', "unexpected end of line character in path string"),
        ('#include "a\\b"\n', "unexpected escape in path string"),
        (b"int a;\x00\n", "unexpected null character"),
    ],
)
def test_errors(text, message):
    with pytest.raises(ScanError) as info:
        scan(text)
    assert info.value.message == message


def test_from_file(tmp_path):
    path = tmp_path / "src.c"
    path.write_text('#include "x.h"\nconst u8 a[] = INCBIN_S8("y.bin");\n')
    s = ScanCFile.from_file(str(path))
    s.find_incbins()
    assert (s.includes, s.incbins) == ({"x.h"}, {"y.bin"})


def test_from_missing_file(tmp_path):
    with pytest.raises(PreprocError, match="missing.c"):
        ScanCFile.from_file(str(tmp_path / "missing.c"))