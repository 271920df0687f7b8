"""Finding #include and INCBIN_* references in C sources."""

from __future__ import annotations

import os

from romtools.errors import ScanError
from romtools.scan_asm import _read_source

__all__ = ["ScanCFile"]

_INCBIN_PREFIX = b"INCBIN_"
_INCBIN_IDENTS = tuple(
    f"INCBIN_{sign}{bits}".encode("ascii") for bits in (8, 16, 32) for sign in "SU"
)
_INCLUDE = b"#include"

_PATH_PROBLEMS = {
    b"\r": "unexpected end of line character in path string",
    b"\n": "unexpected end of line character in path string",
    b"\\": "unexpected escape in path string",
}


class ScanCFile:
    """Scanner collecting the quoted includes and incbin paths of one C file."""

    def __init__(self, data: bytes, path: str) -> None:
        self._data = bytes(data)
        self._size = len(self._data)
        self._pos = 0
        self.line_num = 1
        self.path = path
        self.incbins: set[str] = set()
        self.includes: set[str] = set()

    @classmethod
    def from_file(cls, path: str) -> ScanCFile:
        return cls(_read_source(path), path)

    def _at(self, pos: int) -> bytes:
        """One byte at pos; past the end it reads as NUL."""
        return self._data[pos:pos + 1] or b"\0"

    def _error(self, message: str) -> ScanError:
        return ScanError(self.path, self.line_num, message)

    def find_incbins(self) -> None:
        """Scan the whole file, filling ``includes`` and ``incbins``."""
        string_char: bytes | None = None
        while self._pos < self._size:
            c = self._at(self._pos)
            if string_char:
                if c == string_char:
                    self._pos += 1
                    string_char = None
                elif c == b"\\" and self._at(self._pos + 1) == string_char:
                    self._pos += 2
                else:
                    if c == b"\n":
                        self.line_num += 1
                    self._pos += 1
                continue

            self._skip_whitespace()
            self._check_include()
            self._check_incbin()

            if self._pos >= self._size:
                break

            c = self._at(self._pos)
            self._pos += 1
            if c == b"\n":
                self.line_num += 1
            elif c in (b'"', b"'"):
                string_char = c
            elif c == b"\0":
                raise self._error("unexpected null character")

    def _consume_horizontal_whitespace(self) -> bool:
        if self._at(self._pos) in (b"\t", b" "):
            self._pos += 1
            return True
        return False

    def _consume_newline(self) -> bool:
        for newline in (b"\n", b"\r\n"):
            if self._data.startswith(newline, self._pos):
                self._pos += len(newline)
                self.line_num += 1
                return True
        return False

    def _consume_comment(self) -> bool:
        if self._data.startswith(b"/*", self._pos):
            self._pos += 2
            while self._at(self._pos) != b"*" and self._at(self._pos + 1) != b"/":
                if self._at(self._pos) == b"\0":
                    return False
                if not self._consume_newline():
                    self._pos += 1
            self._pos += 2
            return True
        if self._data.startswith(b"//", self._pos):
            self._pos += 2
            while not self._consume_newline():
                if self._at(self._pos) == b"\0":
                    return False
                self._pos += 1
            return True
        return False

    def _skip_whitespace(self) -> None:
        while (
            self._consume_horizontal_whitespace()
            or self._consume_newline()
            or self._consume_comment()
        ):
            pass

    def _check_identifier(self, ident: bytes) -> bool:
        return self._data.startswith(ident, self._pos)

    def _check_include(self) -> None:
        if not self._check_identifier(_INCLUDE):
            return
        self._pos += len(_INCLUDE)
        self._consume_horizontal_whitespace()
        path = self._read_path()
        if path:
            self.includes.add(path)

    def _check_incbin(self) -> None:
        if not self._check_identifier(_INCBIN_PREFIX):
            return
        ident = next((i for i in _INCBIN_IDENTS if self._check_identifier(i)), None)
        if ident is None:
            return

        old_pos, old_line = self._pos, self.line_num
        self._pos += len(ident)
        self._skip_whitespace()
        if self._at(self._pos) != b"(":
            self._pos, self.line_num = old_pos, old_line
            return
        self._pos += 1

        self._skip_whitespace()
        path = self._read_path()
        self._skip_whitespace()
        if self._at(self._pos) != b")":
            raise self._error("expected ')'")
        self._pos += 1
        self.incbins.add(path)

    def _read_path(self) -> str:
        c = self._at(self._pos)
        if c == b"<":
            return ""
        if c != b'"':
            raise self._error("expected '\"' or '<'")
        self._pos += 1
        start = self._pos

        while (c := self._at(self._pos)) != b'"':
            if c == b"\0":
                if self._pos >= self._size:
                    raise self._error("unexpected EOF in path string")
                raise self._error("unexpected null character in path string")
            if c in _PATH_PROBLEMS:
                raise self._error(_PATH_PROBLEMS[c])
            self._pos += 1

        path = os.fsdecode(self._data[start:self._pos])
        self._pos += 1
        return path