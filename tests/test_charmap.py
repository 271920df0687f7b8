import pytest

from romtools.charmap import Charmap
from romtools.errors import PreprocError, SourceError

SAMPLE = (
    "'A' = BB\n"
    "'B' = BC @ a comment\n"
    "'\\n' = FE\n"
    "'\\'' = B4\n"
    "'@' = 00\n"
    "'é' = 1B\n"
    "\n"
    "EOS = FF\n"
    "PLAYER = FD 01\n"
)


@pytest.fixture
def charmap():
    return Charmap(SAMPLE, "charmap.txt")


def test_chars_are_mapped(charmap):
    assert charmap.char(ord("A")) == b"\xbb"
    assert charmap.char(ord("B")) == b"\xbc"
    assert charmap.char(ord("é")) == b"\x1b"


def test_at_inside_literal_is_not_a_comment(charmap):
    assert charmap.char(ord("@")) == b"\x00"


def test_escapes_and_escaped_quote(charmap):
    assert charmap.escape(ord("n")) == b"\xfe"
    assert charmap.char(ord("'")) == b"\xb4"
    assert charmap.escape(ord("'")) == b""


def test_constants(charmap):
    assert charmap.constant("EOS") == b"\xff"
    assert charmap.constant("PLAYER") == b"\xfd\x01"


def test_unmapped_lookups_are_empty(charmap):
    assert charmap.char(ord("Z")) == b""
    assert charmap.escape(ord("t")) == b""
    assert charmap.constant("MISSING") == b""


def test_bytes_input_and_no_trailing_newline():
    cm = Charmap(b"'x' = 0a0B", "cm")
    assert cm.char(ord("x")) == b"\x0a\x0b"


def test_from_file(tmp_path):
    path = tmp_path / "charmap.txt"
    path.write_bytes(SAMPLE.encode("utf-8"))
    cm = Charmap.from_file(str(path))
    assert cm.constant("EOS") == b"\xff"
    assert cm.filename == str(path)


def test_from_missing_file(tmp_path):
    with pytest.raises(PreprocError):
        Charmap.from_file(str(tmp_path / "nope.txt"))


def _error(text):
    with pytest.raises(SourceError) as info:
        Charmap(text, "cm.txt")
    return info.value


def test_redefining_char_reports_line():
    err = _error("'A' = 01\n'A' = 02\n")
    assert err.message == "redefining char"
    assert err.line_num == 2
    assert err.filename == "cm.txt"


def test_redefining_escape_and_constant():
    assert _error("'\\n' = 01\n'\\n' = 02\n").message == "redefining escape"
    assert _error("X = 01\nX = 02\n").message == "redefining constant"


def test_sequence_too_long():
    err = _error("X = " + "00 " * 17 + "\n")
    assert err.message == "byte sequence too long (max is 16 bytes)"


def test_sequence_of_sixteen_is_allowed():
    cm = Charmap("X = " + "01 " * 16 + "\n")
    assert cm.constant("X") == b"\x01" * 16


def test_odd_hex_digit():
    assert _error("X = 012\n").message == "each byte must have 2 hex digits"


def test_missing_sequence_and_equals():
    assert _error("X = \n").message == "expected byte sequence"
    assert _error("X 01\n").message == "expected equals sign"


def test_crlf_rejected():
    assert _error("X = 01\r\n").message == "only Unix-style LF newlines are supported"


def test_junk():
    assert _error("X = 01 zz\n").message == "junk at end of line"
    assert _error("# = 01\n").message == "junk at start of line"


def test_invalid_utf8_and_control_chars():
    err = _error(b"'\xff' = 01\n")
    assert err.message == "invalid encoding in UTF-8 character literal"
    err = _error(b"'\x01' = 01\n")
    assert err.message == "unexpected character U+1 in UTF-8 character literal"


def test_null_character():
    assert _error(b"X = 01\n\x00").message == "unexpected null character"