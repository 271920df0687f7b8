import pytest

from romtools.errors import PreprocError, ScanError
from romtools.scaninc import can_open_file, main, parse_args, scan_dependencies


def test_can_open_file(tmp_path):
    existing = tmp_path / "a.txt"
    existing.write_bytes(b"x")
    assert can_open_file(str(existing)) is True
    assert can_open_file(str(tmp_path / "missing.txt")) is False


def test_parse_args_joined_and_separate_flags():
    dirs, path = parse_args(["-Iinclude", "-I", "asm/", "file.c"])
    assert dirs == ["include/", "asm/"]
    assert path == "file.c"


def test_parse_args_only_path():
    assert parse_args(["file.s"]) == ([], "file.s")


@pytest.mark.parametrize("argv", [[], ["-x", "file.c"], ["-I", "dir"], ["a.c", "b.c"]])
def test_parse_args_usage_errors(argv):
    with pytest.raises(PreprocError, match="Usage: scaninc"):
        parse_args(argv)


def test_c_dependencies(tmp_path):
    src = tmp_path / "src"
    inc = tmp_path / "include"
    src.mkdir()
    inc.mkdir()
    main_c = src / "main.c"
    main_c.write_text(
        '#include "a.h"\n'
        "#include <stdio.h>\n"
        '#include "missing.h"\n'
        'const u8 x[] = INCBIN_U8("graphics/x.4bpp");\n'
    )
    (src / "a.h").write_text('#include "b.h"\n#include "a.h"\n')
    (inc / "b.h").write_text("/* empty */\n")

    deps = scan_dependencies(str(main_c), [str(inc) + "/"])
    assert deps == sorted(
        [str(inc) + "/b.h", str(src) + "/a.h", "graphics/x.4bpp"]
    )


def test_asm_dependencies(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "main.s").write_text('.include "macros.inc"\n.incbin "data.bin"\n')
    (tmp_path / "macros.inc").write_text(
        '.incbin "other.bin"\n.include "missing.inc"\n.include "macros.inc"\n'
    )
    deps = scan_dependencies("main.s", [])
    assert deps == ["data.bin", "macros.inc", "missing.inc", "other.bin"]


def test_no_extension():
    with pytest.raises(PreprocError, match='no file extension in path "Makefile"'):
        scan_dependencies("Makefile", [])


def test_unknown_extension():
    with pytest.raises(PreprocError, match='unknown extension "txt"'):
        scan_dependencies("notes.txt", [])


def test_scan_error_propagates(tmp_path):
    bad = tmp_path / "bad.c"
    bad.write_text("#include junk\n")
    with pytest.raises(ScanError, match="expected"):
        scan_dependencies(str(bad), [])


def test_main_prints_dependencies(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "main.s").write_text('.incbin "b.bin"\n.incbin "a.bin"\n')
    assert main(["main.s"]) == 0
    assert capsys.readouterr().out.splitlines() == ["a.bin", "b.bin"]


def test_main_reports_errors(capsys):
    assert main(["file.xyz"]) == 1
    assert 'unknown extension "xyz"' in capsys.readouterr().err