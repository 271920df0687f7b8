"""Preprocessing C and assembly sources, encoding strings with a charmap."""

from __future__ import annotations

import sys

from romtools.asm_preproc import AsmFile, Directive
from romtools.c_preproc import CFile
from romtools.charmap import Charmap
from romtools.errors import PreprocError

__all__ = [
    "format_asm_bytes",
    "preproc_asm_file",
    "preproc_c_file",
    "get_file_extension",
    "main",
]

USAGE = "Usage: preproc SRC_FILE CHARMAP_FILE"


def format_asm_bytes(data: bytes) -> str:
    """A '.byte' line for the data, or an empty string if there is none."""
    if not data:
        return ""
    return "\t.byte " + ", ".join(f"0x{b:02X}" for b in data) + "\n"


def preproc_asm_file(path: str, charmap: Charmap) -> bytes:
    """Preprocess an assembly file and the files it includes."""
    out = bytearray()
    stack = [AsmFile.from_file(path)]

    while True:
        while stack[-1].is_at_end():
            stack.pop()
            if not stack:
                return bytes(out)
            out += stack[-1].output_location()

        current = stack[-1]
        directive = current.get_directive()

        if directive is Directive.INCLUDE:
            included = AsmFile.from_file(current.read_path())
            stack.append(included)
            out += included.output_location()
        elif directive is Directive.STRING:
            out += format_asm_bytes(current.read_string(charmap)).encode("ascii")
        elif directive is Directive.BRAILLE:
            out += format_asm_bytes(current.read_braille()).encode("ascii")
        else:
            label = current.get_global_label()
            if label:
                out += f"{label}: ; .global {label}\n".encode("ascii")
            else:
                out += current.output_line()


def preproc_c_file(path: str, charmap: Charmap) -> bytes:
    """Preprocess a C file."""
    return CFile.from_file(path, charmap).preproc()


def get_file_extension(filename: str) -> str | None:
    """The text after the last dot, or None if there is none or the dot leads."""
    dot = filename.rfind(".")
    if dot <= 0:
        return None
    return filename[dot + 1:] or None


def _write_stdout(data: bytes) -> None:
    sys.stdout.flush()
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        sys.stdout.write(data.decode("utf-8", "surrogateescape"))
    else:
        buffer.write(data)
        buffer.flush()


def main(argv: list[str] | None = None) -> int:
    """Preprocess SRC_FILE with CHARMAP_FILE and write the result to stdout."""
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) != 2:
        print(USAGE, file=sys.stderr)
        return 1
    source, charmap_path = argv

    try:
        charmap = Charmap.from_file(charmap_path)
        extension = get_file_extension(source)
        if extension is None:
            raise PreprocError(f'"{source}" has no file extension.')
        if extension == "s":
            output = preproc_asm_file(source, charmap)
        elif extension in ("c", "i"):
            output = preproc_c_file(source, charmap)
        else:
            raise PreprocError(
                f'"{source}" has an unknown file extension of "{extension}".'
            )
    except PreprocError as exc:
        print(exc, file=sys.stderr)
        return 1

    _write_stdout(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())