"""Finding .include and .incbin directives in assembly sources."""

from __future__ import annotations

import enum
import os
from collections.abc import Iterator

from romtools.errors import SCANINC_MAX_PATH, PreprocError, ScanError

__all__ = ["IncDirective", "ScanAsmFile"]

_BLANKS = (b"\t", b" ")


def _read_source(path: str) -> bytes:
    """Read a whole source file, raising PreprocError when it cannot be opened."""
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as exc:
        raise PreprocError(f'Failed to open "{path}" for reading.') from exc


class IncDirective(enum.Enum):
    """Kind of inclusion directive found in an assembly file."""

    NONE = enum.auto()
    INCLUDE = enum.auto()
    INCBIN = enum.auto()


class ScanAsmFile:
    """Scanner over the bytes of one assembly file."""

    def __init__(self, data: bytes, path: str) -> None:
        self._data = bytes(data)
        self._pos = 0
        self.line_num = 1
        self.path = path

    @classmethod
    def from_file(cls, path: str) -> ScanAsmFile:
        return cls(_read_source(path), path)

    def _error(self, message: str) -> ScanError:
        return ScanError(self.path, self.line_num, message)

    def _peek_char(self) -> bytes:
        """The next byte, or b"" at the end of the file."""
        return self._data[self._pos:self._pos + 1]

    def _get_char(self) -> bytes:
        c = self._peek_char()
        if not c:
            return c
        self._pos += 1
        if c == b"\r":
            if self._peek_char() == b"\n":
                self._pos += 1
                self.line_num += 1
                return b"\n"
            raise self._error("CR line endings are not supported")
        if c == b"\n":
            self.line_num += 1
        return c

    def _skip_tabs_and_spaces(self) -> None:
        while self._peek_char() in _BLANKS:
            self._pos += 1

    def _match_inc_directive(self, name: str) -> str | None:
        encoded = name.encode("ascii")
        if not self._data.startswith(encoded, self._pos):
            return None
        self._pos += len(encoded)
        self._skip_tabs_and_spaces()
        if self._get_char() != b'"':
            raise self._error(f'no path after ".{name}" directive')
        return self._read_path()

    def _read_path(self) -> str:
        start = self._pos
        length = 0
        problems = {
            b"": "unexpected EOF in include string",
            b"\0": "unexpected NUL character in include string",
            b"\n": "unexpected end of line character in include string",
            b"\\": "unexpected escape in include string",
        }
        while (c := self._get_char()) != b'"':
            if c in problems:
                raise self._error(problems[c])
            length += 1
            if length > SCANINC_MAX_PATH:
                raise self._error("path is too long")
        return os.fsdecode(self._data[start:start + length])

    def _skip_end_of_line_comment(self) -> None:
        while self._get_char() not in (b"", b"\n"):
            pass

    def _skip_multi_line_comment(self) -> None:
        while c := self._get_char():
            if c == b"*" and self._peek_char() == b"/":
                self._pos += 1
                return

    def _skip_string(self) -> None:
        while (c := self._get_char()) != b'"':
            if not c:
                raise self._error("unexpected EOF in string")
            if c == b"\\":
                self._get_char()

    def _match_any_directive(self) -> tuple[IncDirective, str | None]:
        for kind, name in ((IncDirective.INCBIN, "incbin"), (IncDirective.INCLUDE, "include")):
            path = self._match_inc_directive(name)
            if path is not None:
                return kind, path
        return IncDirective.NONE, None

    def read_until_inc_directive(self) -> tuple[IncDirective, str | None]:
        """Advance to the next directive; returns (IncDirective.NONE, None) at the end."""
        while True:
            self._skip_tabs_and_spaces()
            kind, path = IncDirective.NONE, None

            if self._peek_char() == b".":
                self._pos += 1
                kind, path = self._match_any_directive()

            while True:
                c = self._get_char()
                if not c:
                    return kind, path
                if c == b";":
                    self._skip_end_of_line_comment()
                    break
                if c == b"/" and self._peek_char() == b"*":
                    self._pos += 1
                    self._skip_multi_line_comment()
                elif c == b'"':
                    self._skip_string()
                elif c == b"\n":
                    break

            if kind is not IncDirective.NONE:
                return kind, path

    def directives(self) -> Iterator[tuple[IncDirective, str]]:
        """Yield every remaining (kind, path) directive in file order."""
        while True:
            kind, path = self.read_until_inc_directive()
            if kind is IncDirective.NONE or path is None:
                return
            yield kind, path