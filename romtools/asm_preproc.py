"""Reading assembly sources for charmap string and braille expansion."""

from __future__ import annotations

import enum
import os
import sys

from romtools.chars import (
    is_ascii_digit,
    is_ascii_printable,
    is_identifier_char,
    is_identifier_start,
)
from romtools.charmap import Charmap
from romtools.errors import MAX_PATH, MAX_STRING_LENGTH, PreprocError, SourceError
from romtools.string_parser import StringParseError, StringParser

__all__ = ["Directive", "AsmFile"]

_NUL = 0
_TAB = ord("\t")
_SPACE = ord(" ")
_NL = ord("\n")
_CR = ord("\r")
_AT = ord("@")
_SLASH = ord("/")
_STAR = ord("*")
_DQUOTE = ord('"')
_SQUOTE = ord("'")
_BACKSLASH = ord("\\")
_COLON = ord(":")
_COMMA = ord(",")

_BRAILLE = {
    ord("A"): 0x01,
    ord("B"): 0x05,
    ord("C"): 0x03,
    ord("D"): 0x0B,
    ord("E"): 0x09,
    ord("F"): 0x07,
    ord("G"): 0x0F,
    ord("H"): 0x0D,
    ord("I"): 0x06,
    ord("J"): 0x0E,
    ord("K"): 0x11,
    ord("L"): 0x15,
    ord("M"): 0x13,
    ord("N"): 0x1B,
    ord("O"): 0x19,
    ord("P"): 0x17,
    ord("Q"): 0x1F,
    ord("R"): 0x1D,
    ord("S"): 0x16,
    ord("T"): 0x1E,
    ord("U"): 0x31,
    ord("V"): 0x35,
    ord("W"): 0x2E,
    ord("X"): 0x33,
    ord("Y"): 0x3B,
    ord("Z"): 0x39,
    ord(" "): 0x00,
    ord(","): 0x04,
    ord("."): 0x2C,
    ord("$"): 0xFF,
}
_BRAILLE_NEWLINE = 0xFE


class Directive(enum.Enum):
    """Directive found at the start of an assembly line."""

    INCLUDE = enum.auto()
    STRING = enum.auto()
    BRAILLE = enum.auto()
    UNKNOWN = enum.auto()


def _remove_comments(data: bytes) -> bytes:
    """Blank out '@' and '/* */' comments outside literals, stopping at the first NUL."""
    buf = bytearray(data)
    size = len(buf)

    def at(pos: int) -> int:
        return buf[pos] if pos < size else _NUL

    pos = 0
    string_char = 0
    while at(pos) != _NUL:
        c = buf[pos]
        if string_char:
            if c == _BACKSLASH and at(pos + 1) == string_char:
                pos += 2
            else:
                if c == string_char:
                    string_char = 0
                pos += 1
        elif c == _AT and (pos == 0 or buf[pos - 1] != _BACKSLASH):
            while at(pos) not in (_NL, _NUL):
                buf[pos] = _SPACE
                pos += 1
        elif c == _SLASH and at(pos + 1) == _STAR:
            buf[pos] = buf[pos + 1] = _SPACE
            pos += 2
            while True:
                if at(pos) == _NUL:
                    return bytes(buf)
                if buf[pos] == _STAR and at(pos + 1) == _SLASH:
                    buf[pos] = buf[pos + 1] = _SPACE
                    pos += 2
                    break
                if buf[pos] != _NL:
                    buf[pos] = _SPACE
                pos += 1
        else:
            if c in (_DQUOTE, _SQUOTE):
                string_char = c
            pos += 1
    return bytes(buf)


def _convert_digit(c: int, radix: int) -> int:
    if ord("0") <= c <= ord("9"):
        digit = c - ord("0")
    elif ord("A") <= c <= ord("F"):
        digit = 10 + c - ord("A")
    elif ord("a") <= c <= ord("f"):
        digit = 10 + c - ord("a")
    else:
        return -1
    return digit if digit < radix else -1


class AsmFile:
    """An assembly source read line by line, with comments already blanked out."""

    def __init__(self, data: bytes | str, filename: str) -> None:
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self._buf = _remove_comments(raw)
        self._size = len(self._buf)
        self._pos = 0
        self._line_start = 0
        self.line_num = 1
        self.filename = filename
        self.warnings: list[str] = []

    @classmethod
    def from_file(cls, path: str) -> AsmFile:
        try:
            with open(path, "rb") as fp:
                data = fp.read()
        except OSError as exc:
            raise PreprocError(f'Failed to open "{path}" for reading.') from exc
        return cls(data, path)

    def _at(self, pos: int) -> int:
        return self._buf[pos] if pos < self._size else _NUL

    def _error(self, message: str) -> SourceError:
        return SourceError(self.filename, self.line_num, message)

    def _warn(self, message: str) -> None:
        text = f"{self.filename}:{self.line_num}: warning: {message}"
        self.warnings.append(text)
        print(text, file=sys.stderr)

    def _skip_whitespace(self) -> None:
        while self._at(self._pos) in (_TAB, _SPACE):
            self._pos += 1

    def _check_for_directive(self, name: bytes) -> bool:
        if self._buf[self._pos:self._pos + len(name)] != name:
            return False
        self._pos += len(name)
        return True

    def get_directive(self) -> Directive:
        """Consume a known directive at the current position, if there is one."""
        self._skip_whitespace()
        if self._check_for_directive(b".include"):
            return Directive.INCLUDE
        if self._check_for_directive(b".string"):
            return Directive.STRING
        if self._check_for_directive(b".braille"):
            return Directive.BRAILLE
        return Directive.UNKNOWN

    def get_global_label(self) -> str:
        """Consume a 'name::' line and return the name, or return '' if there is none."""
        start = self._pos
        pos = start
        if is_identifier_start(self._at(pos)):
            pos += 1
            while is_identifier_char(self._at(pos)):
                pos += 1
        if self._at(pos) == _COLON and self._at(pos + 1) == _COLON:
            self._pos = pos + 2
            self._expect_empty_rest_of_line()
            return self._buf[start:pos].decode("ascii")
        return ""

    def read_path(self) -> str:
        """Read the quoted path of an include directive."""
        self._skip_whitespace()
        if self._at(self._pos) != _DQUOTE:
            raise self._error("expected file path")
        self._pos += 1
        start = self._pos
        length = 0

        while self._at(self._pos) != _DQUOTE:
            c = self._at(self._pos)
            self._pos += 1
            if c == _NUL:
                if self._pos >= self._size:
                    raise self._error("unexpected EOF in include string")
                raise self._error("unexpected null character in include string")
            if not is_ascii_printable(c):
                raise self._error(f"unexpected character '\\x{c:02X}' in include string")
            if c == _BACKSLASH:
                escaped = chr(self._at(self._pos))
                raise self._error(f"unexpected escape '\\{escaped}' in include string")
            length += 1
            if length > MAX_PATH:
                raise self._error("path is too long")

        self._pos += 1
        self._expect_empty_rest_of_line()
        return self._buf[start:start + length].decode("ascii")

    def read_string(self, charmap: Charmap) -> bytes:
        """Read a charmap string with an optional ', <pad length>'."""
        self._skip_whitespace()
        parser = StringParser(self._buf, charmap)
        try:
            consumed, encoded = parser.parse_string(self._pos)
        except StringParseError as exc:
            raise self._error(str(exc)) from exc
        self._pos += consumed

        self._skip_whitespace()
        if self._consume_comma():
            self._skip_whitespace()
            pad_length = self._read_pad_length()
            if len(encoded) < pad_length:
                encoded += bytes(pad_length - len(encoded))

        self._expect_empty_rest_of_line()
        return encoded

    def read_braille(self) -> bytes:
        """Read a braille string literal."""
        self._skip_whitespace()
        if self._at(self._pos) != _DQUOTE:
            raise self._error("expected braille string literal")
        self._pos += 1

        out = bytearray()
        while self._at(self._pos) != _DQUOTE:
            if len(out) == MAX_STRING_LENGTH:
                raise self._error(f"mapped string longer than {MAX_STRING_LENGTH} bytes")
            c = self._at(self._pos)
            if c == _BACKSLASH and self._at(self._pos + 1) == ord("n"):
                out.append(_BRAILLE_NEWLINE)
                self._pos += 2
                continue
            if c not in _BRAILLE:
                if is_ascii_printable(c):
                    raise self._error(f"character '{chr(c)}' not valid in braille string")
                raise self._error(f"character '\\x{c:02X}' not valid in braille string")
            out.append(_BRAILLE[c])
            self._pos += 1

        self._pos += 1
        self._expect_empty_rest_of_line()
        return bytes(out)

    def _consume_comma(self) -> bool:
        if self._at(self._pos) == _COMMA:
            self._pos += 1
            return True
        return False

    def _read_pad_length(self) -> int:
        if not is_ascii_digit(self._at(self._pos)):
            raise self._error("expected integer")
        radix = 10
        if self._at(self._pos) == ord("0") and self._at(self._pos + 1) == ord("x"):
            radix = 16
            self._pos += 2

        n = 0
        while (digit := _convert_digit(self._at(self._pos), radix)) != -1:
            n = n * radix + digit
            if n > MAX_STRING_LENGTH:
                raise self._error(
                    f"pad length greater than maximum length ({MAX_STRING_LENGTH})"
                )
            self._pos += 1
        return n

    def output_line(self) -> bytes:
        """Return the rest of the current line, newline-terminated, and move past it."""
        while self._at(self._pos) not in (_NL, _NUL):
            self._pos += 1

        if self._at(self._pos) == _NUL:
            if self._pos < self._size:
                raise self._error("unexpected null character")
            self._warn("file doesn't end with newline")
            return self._buf[self._line_start:self._pos] + b"\n"

        line = self._buf[self._line_start:self._pos] + b"\n"
        self._pos += 1
        self._line_start = self._pos
        self.line_num += 1
        return line

    def _expect_empty_rest_of_line(self) -> None:
        self._skip_whitespace()
        c = self._at(self._pos)
        if c == _NUL:
            if self._pos < self._size:
                raise self._error("unexpected null character")
            self._warn("file doesn't end with newline")
        elif c == _NL:
            self._pos += 1
            self._line_start = self._pos
            self.line_num += 1
        elif c == _CR:
            raise self._error("only Unix-style LF newlines are supported")
        else:
            raise self._error("junk at end of line")

    def is_at_end(self) -> bool:
        return self._pos >= self._size

    def output_location(self) -> bytes:
        """A line marker setting the assembler's logical file and line number."""
        return b"# %d \"" % self.line_num + os.fsencode(self.filename) + b"\"\n"