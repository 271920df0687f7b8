"""Character classification helpers working on single bytes or characters."""

from __future__ import annotations

__all__ = [
    "is_ascii",
    "is_ascii_alpha",
    "is_ascii_digit",
    "is_ascii_hex_digit",
    "is_ascii_alphanum",
    "is_ascii_printable",
    "is_identifier_start",
    "is_identifier_char",
]


def _code(c: int | str) -> int:
    """Return the numeric value of a byte value or a one-character string."""
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        return ord(c)
    return c


def is_ascii(c: int | str) -> bool:
    """Whether the character is in the 7-bit ASCII range."""
    return 0 <= _code(c) < 128


def is_ascii_alpha(c: int | str) -> bool:
    """Whether the character is an ASCII letter."""
    n = _code(c)
    return ord("A") <= n <= ord("Z") or ord("a") <= n <= ord("z")


def is_ascii_digit(c: int | str) -> bool:
    """Whether the character is an ASCII decimal digit."""
    return ord("0") <= _code(c) <= ord("9")


def is_ascii_hex_digit(c: int | str) -> bool:
    """Whether the character is an ASCII hexadecimal digit."""
    n = _code(c)
    return (
        ord("0") <= n <= ord("9")
        or ord("a") <= n <= ord("f")
        or ord("A") <= n <= ord("F")
    )


def is_ascii_alphanum(c: int | str) -> bool:
    """Whether the character is an ASCII letter or digit."""
    return is_ascii_alpha(c) or is_ascii_digit(c)


def is_ascii_printable(c: int | str) -> bool:
    """Whether the character is printable ASCII (space through tilde)."""
    return ord(" ") <= _code(c) <= ord("~")


def is_identifier_start(c: int | str) -> bool:
    """Whether the character can start a C identifier or a "{FOO}" constant."""
    return is_ascii_alpha(c) or _code(c) == ord("_")


def is_identifier_char(c: int | str) -> bool:
    """Whether the character can appear in a C identifier or a "{FOO}" constant."""
    return is_ascii_alphanum(c) or _code(c) == ord("_")