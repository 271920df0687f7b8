"""Listing the files a C or assembly source depends on."""

from __future__ import annotations

import sys
from collections import deque

from romtools.errors import PreprocError
from romtools.scan_asm import IncDirective, ScanAsmFile
from romtools.scan_c import ScanCFile

__all__ = ["can_open_file", "parse_args", "scan_dependencies", "main"]

USAGE = "Usage: scaninc [-I INCLUDE_PATH] FILE_PATH"


def can_open_file(path: str) -> bool:
    """Whether the file can be opened for reading."""
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def parse_args(argv: list[str]) -> tuple[list[str], str]:
    """Split the arguments into (include directories, file path)."""
    args = list(argv)
    include_dirs: list[str] = []

    while len(args) > 1:
        arg = args.pop(0)
        if not arg.startswith("-I"):
            raise PreprocError(USAGE)
        include_dir = arg[2:]
        if not include_dir:
            include_dir = args.pop(0)
        if include_dir and not include_dir.endswith("/"):
            include_dir += "/"
        include_dirs.append(include_dir)

    if len(args) != 1:
        raise PreprocError(USAGE)
    return include_dirs, args[0]


def _scan_c(initial: str, include_dirs: list[str]) -> set[str]:
    dependencies: set[str] = set()
    queue = deque([initial])
    while queue:
        scanner = ScanCFile.from_file(queue.popleft())
        scanner.find_incbins()
        dependencies.update(scanner.incbins)
        for include in sorted(scanner.includes):
            for include_dir in include_dirs:
                path = include_dir + include
                if can_open_file(path):
                    if path not in dependencies:
                        dependencies.add(path)
                        queue.append(path)
                    break
    return dependencies


def _scan_asm(initial: str) -> set[str]:
    dependencies: set[str] = set()
    queue = deque([initial])
    while queue:
        scanner = ScanAsmFile.from_file(queue.popleft())
        for kind, path in scanner.directives():
            inserted = path not in dependencies
            dependencies.add(path)
            if inserted and kind is IncDirective.INCLUDE and can_open_file(path):
                queue.append(path)
    return dependencies


def scan_dependencies(path: str, include_dirs: list[str]) -> list[str]:
    """Return the sorted dependencies of a .c/.h or .s/.inc file."""
    dot = path.rfind(".")
    if dot == -1:
        raise PreprocError(f'no file extension in path "{path}"')
    extension = path[dot + 1:]

    slash = path.rfind("/")
    src_dir = path[: slash + 1] if slash != -1 else ""
    dirs = [*include_dirs, src_dir]

    if extension in ("c", "h"):
        dependencies = _scan_c(path, dirs)
    elif extension in ("s", "inc"):
        dependencies = _scan_asm(path)
    else:
        raise PreprocError(f'unknown extension "{extension}"')
    return sorted(dependencies)


def main(argv: list[str] | None = None) -> int:
    """Print the dependencies of the given file, one per line."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        include_dirs, path = parse_args(argv)
        dependencies = scan_dependencies(path, include_dirs)
    except PreprocError as exc:
        print(exc, file=sys.stderr)
        return 1
    for dependency in dependencies:
        print(dependency)
    return 0


if __name__ == "__main__":
    sys.exit(main())