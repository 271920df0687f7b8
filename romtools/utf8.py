"""Table-driven UTF-8 decoding of a single code point."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["UnicodeChar", "decode_utf8"]

_BYTE_TYPES = bytes(
    [0] * 128
    + [1] * 16
    + [9] * 16
    + [7] * 32
    + [8, 8]
    + [2] * 30
    + [0xA]
    + [3] * 12
    + [4]
    + [3, 3]
    + [0xB, 6, 6, 6, 5]
    + [8] * 11
)

_ACCEPT = 0
_REJECT = 1

_TRANSITIONS = (
    (0, 1, 2, 3, 5, 8, 7, 1, 1, 1, 4, 6),
    (1,) * 12,
    (1, 0, 1, 1, 1, 1, 1, 0, 1, 0, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 2, 1, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 2, 1, 1, 1, 1),
    (1, 2, 1, 1, 1, 1, 1, 1, 1, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 3, 1, 3, 1, 1),
    (1, 3, 1, 1, 1, 1, 1, 3, 1, 3, 1, 1),
    (1, 3, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1),
)


@dataclass(frozen=True)
class UnicodeChar:
    """A decoded code point and the number of bytes it took; code is -1 if invalid."""

    code: int
    length: int

    @property
    def valid(self) -> bool:
        return self.code != -1


def decode_utf8(data: bytes, pos: int = 0) -> UnicodeChar:
    """Decode the UTF-8 code point starting at ``pos``; bytes past the end read as NUL."""
    state = _ACCEPT
    code = 0
    index = pos
    while True:
        byte = data[index] if index < len(data) else 0
        index += 1
        kind = _BYTE_TYPES[byte]
        if state == _ACCEPT:
            code = (0xFF >> kind) & byte
        else:
            code = (code << 6) | (byte & 0x3F)
        state = _TRANSITIONS[state][kind]
        if state == _REJECT:
            return UnicodeChar(-1, index - pos)
        if state == _ACCEPT:
            return UnicodeChar(code, index - pos)