import pytest

from romtools.errors import PreprocError, ScanError, SourceError


def test_source_error_message():
    err = SourceError("file.s", 12, "junk at end of line")
    assert str(err) == "file.s:12: error: junk at end of line"
    assert err.filename == "file.s"
    assert err.line_num == 12
    assert err.message == "junk at end of line"


def test_scan_error_message_strips_newline():
    err = ScanError("data/a.s", 3, "unexpected EOF in string\n")
    assert str(err) == "data/a.s:3 unexpected EOF in string"
    assert err.message == "unexpected EOF in string"
    assert err.path == "data/a.s"
    assert err.line_num == 3


@pytest.mark.parametrize(
    "err", [SourceError("a", 1, "x"), ScanError("b", 2, "y")]
)
def test_subclasses_caught_as_preproc_error(err):
    with pytest.raises(PreprocError) as info:
        raise err
    assert info.value is err