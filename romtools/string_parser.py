"""Encoding quoted charmap strings into bytes."""

from __future__ import annotations

from dataclasses import dataclass

from romtools.chars import (
    is_ascii,
    is_ascii_digit,
    is_ascii_printable,
    is_identifier_char,
    is_identifier_start,
)
from romtools.charmap import Charmap
from romtools.errors import MAX_STRING_LENGTH, PreprocError
from romtools.utf8 import decode_utf8

__all__ = ["StringParseError", "StringParser"]

_NUL = 0
_TAB = ord("\t")
_SPACE = ord(" ")
_DQUOTE = ord('"')
_BACKSLASH = ord("\\")
_LBRACE = ord("{")
_RBRACE = ord("}")

_UINT32_MAX = 0xFFFFFFFF


class StringParseError(PreprocError):
    """A string literal could not be encoded with the charmap."""


@dataclass(frozen=True)
class _Integer:
    value: int
    size: int

    def to_bytes(self) -> bytes:
        return (self.value & 0xFFFFFFFF).to_bytes(4, "little")[: self.size]


def _convert_digit(c: int, radix: int) -> int:
    """Value of an ASCII digit in the given radix, or -1 if it is not one."""
    if ord("0") <= c <= ord("9"):
        digit = c - ord("0")
    elif ord("A") <= c <= ord("F"):
        digit = 10 + c - ord("A")
    elif ord("a") <= c <= ord("f"):
        digit = 10 + c - ord("a")
    else:
        return -1
    return digit if digit < radix else -1


class StringParser:
    """Parses "..." literals in a buffer into charmap-encoded bytes."""

    def __init__(self, buffer: bytes, charmap: Charmap) -> None:
        self._buf = bytes(buffer)
        self._size = len(self._buf)
        self._charmap = charmap
        self._pos = 0

    def _at(self, pos: int) -> int:
        return self._buf[pos] if pos < self._size else _NUL

    def parse_string(self, pos: int = 0) -> tuple[int, bytes]:
        """Parse the literal starting at ``pos``; return (bytes consumed, encoded bytes)."""
        self._pos = pos
        if self._at(self._pos) != _DQUOTE:
            raise StringParseError("expected UTF-8 string literal")
        start = self._pos
        self._pos += 1

        out = bytearray()
        while self._at(self._pos) != _DQUOTE:
            if self._at(self._pos) == _LBRACE:
                sequence = self._read_bracketed_constants()
            else:
                sequence = self._read_char_or_escape()
            for byte in sequence:
                if len(out) == MAX_STRING_LENGTH:
                    raise StringParseError(
                        f"mapped string longer than {MAX_STRING_LENGTH} bytes"
                    )
                out.append(byte)

        self._pos += 1
        return self._pos - start, bytes(out)

    def _read_char_or_escape(self) -> bytes:
        is_escape = self._at(self._pos) == _BACKSLASH
        if is_escape:
            self._pos += 1
            # The position is left on the escaped character, as the
            # surrounding loop then treats it.
            if self._at(self._pos) == _DQUOTE:
                sequence = self._charmap.char(_DQUOTE)
                if not sequence:
                    raise StringParseError("no mapping exists for double quote")
                return sequence
            if self._at(self._pos) == _BACKSLASH:
                sequence = self._charmap.char(_BACKSLASH)
                if not sequence:
                    raise StringParseError("no mapping exists for backslash")
                return sequence

        c = self._at(self._pos)
        if c == _NUL:
            if self._pos >= self._size:
                raise StringParseError("unexpected EOF in UTF-8 string")
            raise StringParseError("unexpected null character in UTF-8 string")
        if is_ascii(c) and not is_ascii_printable(c):
            raise StringParseError(f"unexpected character U+{c:X} in UTF-8 string")

        decoded = decode_utf8(self._buf, self._pos)
        self._pos += decoded.length
        if not decoded.valid:
            raise StringParseError("invalid encoding in UTF-8 string")
        code = decoded.code
        if is_escape and code >= 128:
            raise StringParseError("escapes using non-ASCII characters are invalid")

        sequence = self._charmap.escape(code) if is_escape else self._charmap.char(code)
        if not sequence:
            if is_escape:
                raise StringParseError(f"unknown escape '\\{chr(code)}'")
            raise StringParseError(f"unknown character U+{code:X}")
        return sequence

    def _read_bracketed_constants(self) -> bytes:
        total = bytearray()
        self._pos += 1

        while self._at(self._pos) != _RBRACE:
            self._skip_whitespace()
            c = self._at(self._pos)

            if is_identifier_start(c):
                start = self._pos
                self._pos += 1
                while is_identifier_char(self._at(self._pos)):
                    self._pos += 1
                name = self._buf[start:self._pos].decode("ascii")
                sequence = self._charmap.constant(name)
                if not sequence:
                    raise StringParseError(f"unknown constant '{name}'")
                total += sequence
            elif is_ascii_digit(c):
                total += self._read_integer().to_bytes()
            elif c == _NUL:
                if self._pos >= self._size:
                    raise StringParseError("unexpected EOF after left curly bracket")
                raise StringParseError("unexpected null character within curly brackets")
            elif is_ascii_printable(c):
                raise StringParseError(
                    f"unexpected character '{chr(c)}' within curly brackets"
                )
            else:
                raise StringParseError(
                    f"unexpected character '\\x{c:02X}' within curly brackets"
                )

        self._pos += 1
        return bytes(total)

    def _skip_whitespace(self) -> None:
        while self._at(self._pos) in (_TAB, _SPACE):
            self._pos += 1

    def _skip_rest_of_integer(self, radix: int) -> None:
        while _convert_digit(self._at(self._pos), radix) != -1:
            self._pos += 1

    def _accumulate(self, radix: int) -> tuple[int, int]:
        """Read digits in ``radix``; return (value, start position)."""
        start = self._pos
        n = 0
        while (digit := _convert_digit(self._at(self._pos), radix)) != -1:
            n = n * radix + digit
            if n >= _UINT32_MAX:
                self._skip_rest_of_integer(radix)
                literal = self._buf[start:self._pos].decode("ascii")
                raise StringParseError(f'integer literal "{literal}" is too large')
            self._pos += 1
        return n, start

    def _read_decimal(self) -> _Integer:
        n, _ = self._accumulate(10)
        suffix = self._at(self._pos)
        if suffix == ord("H"):
            if n >= 0x10000:
                raise StringParseError(f"{n} is too large to be a halfword")
            size = 2
            self._pos += 1
        elif suffix == ord("W"):
            size = 4
            self._pos += 1
        elif n >= 0x10000:
            size = 4
        elif n >= 0x100:
            size = 2
        else:
            size = 1
        return _Integer(n, size)

    def _read_hex(self) -> _Integer:
        n, start = self._accumulate(16)
        sizes = {2: 1, 4: 2, 8: 4}
        length = self._pos - start
        if length not in sizes:
            literal = self._buf[start:self._pos].decode("ascii")
            raise StringParseError(
                f'hex integer literal "0x{literal}" doesn\'t have length of 2, 4, or 8 digits'
            )
        return _Integer(n, sizes[length])

    def _read_integer(self) -> _Integer:
        if not is_ascii_digit(self._at(self._pos)):
            raise StringParseError("expected integer")
        if self._at(self._pos) == ord("0") and self._at(self._pos + 1) == ord("x"):
            self._pos += 2
            return self._read_hex()
        return self._read_decimal()