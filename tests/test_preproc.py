import pytest

from romtools.charmap import Charmap
from romtools.errors import PreprocError, SourceError
from romtools.preproc import (
    format_asm_bytes,
    get_file_extension,
    main,
    preproc_asm_file,
    preproc_c_file,
)

CHARMAP_TEXT = "'A' = BB\n'B' = BC\n"


@pytest.fixture
def charmap():
    return Charmap(CHARMAP_TEXT)


@pytest.fixture
def charmap_path(tmp_path):
    path = tmp_path / "charmap.txt"
    path.write_text(CHARMAP_TEXT)
    return str(path)


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_bytes(content)
    return path


@pytest.mark.parametrize(
    "data, expected",
    [(b"\x01\xab", "\t.byte 0x01, 0xAB\n"), (b"", "")],
)
def test_format_asm_bytes(data, expected):
    assert format_asm_bytes(data) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.s", "s"),
        ("dir/x.c", "c"),
        ("a.b.i", "i"),
        ("a", None),
        (".s", None),
        ("a.", None),
    ],
)
def test_get_file_extension(name, expected):
    assert get_file_extension(name) == expected


def test_preproc_asm_file_with_include(tmp_path, charmap):
    inc = write(tmp_path, "inc.s", b'.braille "A"\n')
    main_file = write(
        tmp_path,
        "main.s",
        b'Label::\n\t.string "AB"\n.include "' + str(inc).encode() + b'"\nmov r0\n',
    )

    result = preproc_asm_file(str(main_file), charmap)

    expected = (
        b"Label: ; .global Label\n"
        b"\t.byte 0xBB, 0xBC\n"
        + f'# 1 "{inc}"\n'.encode()
        + b"\t.byte 0x01\n"
        + f'# 4 "{main_file}"\n'.encode()
        + b"mov r0\n"
    )
    assert result == expected


def test_preproc_asm_missing_include(tmp_path, charmap):
    main_file = write(
        tmp_path, "main.s", b'.include "' + str(tmp_path / "none.s").encode() + b'"\n'
    )
    with pytest.raises(PreprocError, match="Failed to open"):
        preproc_asm_file(str(main_file), charmap)


def test_preproc_asm_error_propagates(tmp_path, charmap):
    main_file = write(tmp_path, "main.s", b'nop\n.string "Q"\n')
    with pytest.raises(SourceError) as info:
        preproc_asm_file(str(main_file), charmap)
    assert info.value.line_num == 2


def test_preproc_c_file(tmp_path, charmap):
    src = write(tmp_path, "a.c", b'u8 x[] = _("AB");\n')
    assert preproc_c_file(str(src), charmap) == b"u8 x[] = { 0xBB, 0xBC, 0xFF };\n"


def test_main_wrong_argument_count(capsys):
    assert main(["only_one"]) == 1
    assert "Usage" in capsys.readouterr().err


@pytest.mark.parametrize(
    "source_name, message",
    [("a.txt", "unknown file extension"), (None, "has no file extension")],
)
def test_main_rejects_source_name(tmp_path, capsys, charmap_path, source_name, message):
    source = "noext" if source_name is None else str(write(tmp_path, source_name, b"x\n"))
    assert main([source, charmap_path]) == 1
    assert message in capsys.readouterr().err


def test_main_asm(tmp_path, capsys, charmap_path):
    src = write(tmp_path, "a.s", b'.string "BA"\n')
    assert main([str(src), charmap_path]) == 0
    assert capsys.readouterr().out == "\t.byte 0xBC, 0xBB\n"


def test_main_bad_charmap(tmp_path, capsys):
    cmap = write(tmp_path, "charmap.txt", b"'A' = \n")
    src = write(tmp_path, "a.s", b"nop\n")
    assert main([str(src), str(cmap)]) == 1
    assert "expected byte sequence" in capsys.readouterr().err