"""Reading charmap files that map characters, escapes and constants to byte sequences."""

from __future__ import annotations

import enum

from romtools.chars import (
    is_ascii,
    is_ascii_hex_digit,
    is_ascii_printable,
    is_identifier_char,
    is_identifier_start,
)
from romtools.errors import MAX_CHARMAP_SEQUENCE_LENGTH, SourceError
from romtools.scan_asm import _read_source
from romtools.utf8 import decode_utf8

__all__ = ["Charmap"]

_BLANKS = (b"\t", b" ")


class _LhsType(enum.Enum):
    CHAR = enum.auto()
    ESCAPE = enum.auto()
    CONSTANT = enum.auto()
    NONE = enum.auto()


def _remove_comments(data: bytes) -> bytes:
    """Blank out '@' comments outside character literals, stopping at the first NUL."""
    buf = bytearray(data)
    pos = 0
    in_string = False

    def at(p: int) -> bytes:
        return bytes(buf[p:p + 1])

    while at(pos) not in (b"", b"\0"):
        c = at(pos)
        if in_string:
            if c == b"\\" and at(pos + 1) == b"'":
                pos += 2
                continue
            if c == b"'":
                in_string = False
        elif c == b"@":
            while at(pos) not in (b"", b"\n", b"\0"):
                buf[pos:pos + 1] = b" "
                pos += 1
            continue
        elif c == b"'":
            in_string = True
        pos += 1
    return bytes(buf)


class _CharmapReader:
    def __init__(self, data: bytes, filename: str) -> None:
        self._buf = _remove_comments(data)
        self._size = len(self._buf)
        self._pos = 0
        self.line_num = 1
        self.filename = filename

    def _at(self, pos: int) -> bytes:
        """One byte at pos; past the end it reads as NUL."""
        return self._buf[pos:pos + 1] or b"\0"

    def error(self, message: str) -> SourceError:
        return SourceError(self.filename, self.line_num, message)

    def _skip_whitespace(self) -> None:
        while self._at(self._pos) in _BLANKS:
            self._pos += 1

    def _read_constant(self) -> str:
        start = self._pos
        while is_identifier_char(self._at(self._pos)[0]):
            self._pos += 1
        return self._buf[start:self._pos].decode("ascii")

    def _check_null(self) -> bool:
        """At a NUL: raise if it is inside the file, else report end of file."""
        if self._pos < self._size:
            raise self.error("unexpected null character")
        return True

    def read_lhs(self) -> tuple[_LhsType, int | str | None]:
        while True:
            self._skip_whitespace()
            if self._at(self._pos) != b"\n":
                break
            self._pos += 1
            self.line_num += 1

        c = self._at(self._pos)
        if c == b"'":
            return self._read_char_literal()
        if is_identifier_start(c[0]):
            return _LhsType.CONSTANT, self._read_constant()
        if c == b"\r":
            raise self.error("only Unix-style LF newlines are supported")
        if c == b"\0" and self._check_null():
            return _LhsType.NONE, None
        raise self.error("junk at start of line")

    def _read_char_literal(self) -> tuple[_LhsType, int]:
        self._pos += 1
        is_escape = self._at(self._pos) == b"\\"
        if is_escape:
            self._pos += 1

        c = self._at(self._pos)[0]
        if c == 0:
            if self._pos >= self._size:
                raise self.error("unexpected EOF in UTF-8 character literal")
            raise self.error("unexpected null character in UTF-8 character literal")
        if is_ascii(c) and not is_ascii_printable(c):
            raise self.error(f"unexpected character U+{c:X} in UTF-8 character literal")

        decoded = decode_utf8(self._buf, self._pos)
        if not decoded.valid:
            raise self.error("invalid encoding in UTF-8 character literal")
        code = decoded.code
        self._pos += decoded.length

        if self._at(self._pos) != b"'":
            raise self.error("unterminated character literal")
        self._pos += 1

        if is_escape:
            if code >= 128:
                raise self.error("escapes using non-ASCII characters are invalid")
            if code == ord("'"):
                return _LhsType.CHAR, code
            if chr(code) in '\\"':
                raise self.error("cannot escape double quote")
            return _LhsType.ESCAPE, code

        if code == ord("'"):
            raise self.error("empty character literal")
        return _LhsType.CHAR, code

    def expect_equals_sign(self) -> None:
        self._skip_whitespace()
        if self._at(self._pos) != b"=":
            raise self.error("expected equals sign")
        self._pos += 1

    def _hex_at(self, pos: int) -> bool:
        return is_ascii_hex_digit(self._at(pos)[0])

    def read_sequence(self) -> bytes:
        self._skip_whitespace()
        sequence = bytearray()
        while self._hex_at(self._pos) and self._hex_at(self._pos + 1):
            sequence.append(int(self._buf[self._pos:self._pos + 2], 16))
            self._pos += 2
            if len(sequence) > MAX_CHARMAP_SEQUENCE_LENGTH:
                raise self.error(
                    f"byte sequence too long (max is {MAX_CHARMAP_SEQUENCE_LENGTH} bytes)"
                )
            self._skip_whitespace()

        if self._hex_at(self._pos):
            raise self.error("each byte must have 2 hex digits")
        if not sequence:
            raise self.error("expected byte sequence")
        return bytes(sequence)

    def expect_empty_rest_of_line(self) -> None:
        self._skip_whitespace()
        c = self._at(self._pos)
        if c == b"\0":
            self._check_null()
        elif c == b"\n":
            self._pos += 1
            self.line_num += 1
        elif c == b"\r":
            raise self.error("only Unix-style LF newlines are supported")
        else:
            raise self.error("junk at end of line")


class Charmap:
    """Mapping of characters, escapes and named constants to encoded bytes."""

    def __init__(self, text: bytes | str, filename: str = "<charmap>") -> None:
        data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        self.filename = filename
        self._chars: dict[int, bytes] = {}
        self._escapes: dict[int, bytes] = {}
        self._constants: dict[str, bytes] = {}
        tables = {
            _LhsType.CHAR: (self._chars, "redefining char"),
            _LhsType.ESCAPE: (self._escapes, "redefining escape"),
            _LhsType.CONSTANT: (self._constants, "redefining constant"),
        }

        reader = _CharmapReader(data, filename)
        while True:
            kind, key = reader.read_lhs()
            if kind is _LhsType.NONE:
                return
            reader.expect_equals_sign()
            sequence = reader.read_sequence()

            table, message = tables[kind]
            if key in table:
                raise reader.error(message)
            table[key] = sequence

            reader.expect_empty_rest_of_line()

    @classmethod
    def from_file(cls, path: str) -> Charmap:
        return cls(_read_source(path), path)

    def char(self, code: int) -> bytes:
        """Bytes for a character code point, or empty bytes if unmapped."""
        return self._chars.get(code, b"")

    def escape(self, code: int) -> bytes:
        """Bytes for the escape '\\<code>', or empty bytes if unmapped."""
        return self._escapes.get(code, b"")

    def constant(self, name: str) -> bytes:
        """Bytes for a named constant, or empty bytes if unmapped."""
        return self._constants.get(name, b"")