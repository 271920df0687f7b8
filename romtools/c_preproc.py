"""Expanding charmap string macros and INCBIN_* arrays in C sources."""

from __future__ import annotations

import os

from romtools.chars import is_ascii_printable, is_identifier_char
from romtools.charmap import Charmap
from romtools.errors import PreprocError, SourceError
from romtools.string_parser import StringParseError, StringParser

__all__ = ["extract_data", "CFile"]

_NUL = 0
_TAB = ord("\t")
_SPACE = ord(" ")
_NL = ord("\n")
_CR = ord("\r")
_DQUOTE = ord('"')
_SQUOTE = ord("'")
_BACKSLASH = ord("\\")
_UNDERSCORE = ord("_")
_LPAREN = ord("(")
_RPAREN = ord(")")
_COMMA = ord(",")
_LOWER_S = ord("s")

_INCBIN_IDENTS = (
    b"INCBIN_S8",
    b"INCBIN_U8",
    b"INCBIN_S16",
    b"INCBIN_U16",
    b"INCBIN_S32",
    b"INCBIN_U32",
)


def extract_data(data: bytes, offset: int, size: int) -> int:
    """Read a little-endian value of 1, 2 or 4 bytes; 4-byte values are signed."""
    if size not in (1, 2, 4):
        raise PreprocError("Invalid size passed to ExtractData.")
    chunk = bytes(data[offset:offset + size])
    if len(chunk) != size:
        raise PreprocError("Invalid offset passed to ExtractData.")
    return int.from_bytes(chunk, "little", signed=(size == 4))


class CFile:
    """A C source whose charmap strings and incbins are expanded by ``preproc``."""

    def __init__(self, data: bytes, filename: str, charmap: Charmap) -> None:
        self._buf = bytes(data)
        self._size = len(self._buf)
        self.filename = filename
        self._charmap = charmap
        self._parser = StringParser(self._buf, charmap)
        self._pos = 0
        self.line_num = 1
        self._out = bytearray()

    @classmethod
    def from_file(cls, path: str, charmap: Charmap) -> CFile:
        try:
            with open(path, "rb") as fp:
                data = fp.read()
        except OSError as exc:
            raise PreprocError(f'Failed to open "{path}" for reading.') from exc
        return cls(data, path, charmap)

    def _at(self, pos: int) -> int:
        return self._buf[pos] if pos < self._size else _NUL

    def _error(self, message: str) -> SourceError:
        return SourceError(self.filename, self.line_num, message.rstrip("\n"))

    def _emit(self, text: str) -> None:
        self._out += text.encode("ascii")

    def preproc(self) -> bytes:
        """Return the file with every _("...") and INCBIN_*("...") expanded."""
        self._pos = 0
        self.line_num = 1
        self._out = bytearray()
        string_char = 0

        while self._pos < self._size:
            if string_char:
                c = self._buf[self._pos]
                if c == string_char:
                    self._out.append(c)
                    self._pos += 1
                    string_char = 0
                elif c == _BACKSLASH and self._at(self._pos + 1) == string_char:
                    self._out += bytes((_BACKSLASH, string_char))
                    self._pos += 2
                else:
                    if c == _NL:
                        self.line_num += 1
                    self._out.append(c)
                    self._pos += 1
            else:
                self._try_convert_string()
                self._try_convert_incbin()

                if self._pos >= self._size:
                    break

                c = self._buf[self._pos]
                self._pos += 1
                self._out.append(c)
                if c == _NL:
                    self.line_num += 1
                elif c in (_DQUOTE, _SQUOTE):
                    string_char = c

        return bytes(self._out)

    def _consume_horizontal_whitespace(self) -> bool:
        if self._at(self._pos) in (_TAB, _SPACE):
            self._pos += 1
            return True
        return False

    def _consume_newline(self) -> bool:
        if self._at(self._pos) == _CR and self._at(self._pos + 1) == _NL:
            self._pos += 2
        elif self._at(self._pos) == _NL:
            self._pos += 1
        else:
            return False
        self.line_num += 1
        self._out.append(_NL)
        return True

    def _skip_whitespace(self) -> None:
        while self._consume_horizontal_whitespace() or self._consume_newline():
            pass

    def _try_convert_string(self) -> None:
        if self._at(self._pos) != _UNDERSCORE or (
            self._pos > 0 and is_identifier_char(self._buf[self._pos - 1])
        ):
            return

        old_pos, old_line = self._pos, self.line_num
        no_terminator = is_16bit = as_string = False

        self._pos += 1
        if self._at(self._pos) == _UNDERSCORE:
            no_terminator = True
            self._pos += 1
        if self._at(self._pos) == _UNDERSCORE:
            is_16bit = True
            self._pos += 1
        if self._at(self._pos) == _LOWER_S:
            as_string = True
            is_16bit = False
            self._pos += 1

        self._skip_whitespace()
        if self._at(self._pos) != _LPAREN:
            self._pos, self.line_num = old_pos, old_line
            return
        self._pos += 1
        self._skip_whitespace()

        self._emit('"' if as_string else "{ ")

        while True:
            self._skip_whitespace()
            c = self._at(self._pos)
            if c == _DQUOTE:
                try:
                    consumed, encoded = self._parser.parse_string(self._pos)
                except StringParseError as exc:
                    raise self._error(str(exc)) from exc
                self._pos += consumed
                self._emit(self._format_string(encoded, is_16bit, as_string))
            elif c == _RPAREN:
                self._pos += 1
                break
            elif self._pos >= self._size:
                raise self._error("unexpected EOF")
            elif is_ascii_printable(c):
                raise self._error(f"unexpected character '{chr(c)}'")
            else:
                raise self._error(f"unexpected character '\\x{c:02X}'")

        if as_string:
            self._emit('"')
        elif no_terminator:
            self._emit(" }")
        else:
            self._emit("0xFF }")

    @staticmethod
    def _format_string(encoded: bytes, is_16bit: bool, as_string: bool) -> str:
        if is_16bit:
            padded = encoded + b"\x00" if len(encoded) % 2 else encoded
            return "".join(
                f"0x{high:02X}{low:02X}, "
                for low, high in zip(padded[::2], padded[1::2])
            )
        if as_string:
            return "".join(f"\\x{b:02X}" for b in encoded)
        return "".join(f"0x{b:02X}, " for b in encoded)

    def _try_convert_incbin(self) -> None:
        kind = next(
            (
                index
                for index, ident in enumerate(_INCBIN_IDENTS)
                if self._buf[self._pos:self._pos + len(ident)] == ident
            ),
            None,
        )
        if kind is None:
            return

        size = 1 << (kind // 2)
        is_signed = kind % 2 == 0

        old_pos, old_line = self._pos, self.line_num
        self._pos += len(_INCBIN_IDENTS[kind])
        self._skip_whitespace()
        if self._at(self._pos) != _LPAREN:
            self._pos, self.line_num = old_pos, old_line
            return
        self._pos += 1

        self._emit("{")

        while True:
            self._skip_whitespace()
            if self._at(self._pos) != _DQUOTE:
                raise self._error("expected double quote")
            self._pos += 1
            path = self._read_path()

            contents = self._read_whole_file(path)
            if len(contents) % size:
                raise self._error(
                    f"Size {size} doesn't evenly divide file size {len(contents)}."
                )

            for offset in range(0, len(contents), size):
                value = extract_data(contents, offset, size)
                if is_signed:
                    self._emit(f"{value},")
                else:
                    self._emit(f"{value & 0xFFFFFFFF}u,")

            self._skip_whitespace()
            if self._at(self._pos) != _COMMA:
                break
            self._pos += 1

        if self._at(self._pos) != _RPAREN:
            raise self._error("expected ')'")
        self._pos += 1
        self._emit("}")

    def _read_path(self) -> str:
        start = self._pos
        while self._at(self._pos) != _DQUOTE:
            c = self._at(self._pos)
            if c == _NUL:
                if self._pos >= self._size:
                    raise self._error("unexpected EOF in path string")
                raise self._error("unexpected null character in path string")
            if c in (_CR, _NL):
                raise self._error("unexpected end of line character in path string")
            if c == _BACKSLASH:
                raise self._error("unexpected escape in path string")
            self._pos += 1
        path = os.fsdecode(self._buf[start:self._pos])
        self._pos += 1
        return path

    def _read_whole_file(self, path: str) -> bytes:
        try:
            with open(path, "rb") as fp:
                return fp.read()
        except OSError as exc:
            raise self._error(f'Failed to open "{path}" for reading.') from exc