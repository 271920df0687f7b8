"""Exceptions and shared limits for the preprocessing and scanning tools."""

from __future__ import annotations

__all__ = [
    "MAX_PATH",
    "MAX_STRING_LENGTH",
    "MAX_CHARMAP_SEQUENCE_LENGTH",
    "SCANINC_MAX_PATH",
    "PreprocError",
    "SourceError",
    "ScanError",
]

MAX_PATH = 256
MAX_STRING_LENGTH = 1024
MAX_CHARMAP_SEQUENCE_LENGTH = 16
SCANINC_MAX_PATH = 255


class PreprocError(Exception):
    """A fatal error from one of the tools."""


class SourceError(PreprocError):
    """An error located at a line of a preprocessed input file."""

    def __init__(self, filename: str, line_num: int, message: str) -> None:
        self.filename = filename
        self.line_num = line_num
        self.message = message
        super().__init__(f"{filename}:{line_num}: error: {message}")


class ScanError(PreprocError):
    """An error located at a line of a file scanned for dependencies."""

    def __init__(self, path: str, line_num: int, message: str) -> None:
        self.path = path
        self.line_num = line_num
        self.message = message.rstrip("\n")
        super().__init__(f"{path}:{line_num} {self.message}")