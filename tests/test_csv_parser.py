import types

import pytest

from import_engine.csv_parser import RowReader
from import_engine.errors import ParseError


def _write(tmp_path, text, name="data.csv", encoding="utf-8"):
    path = tmp_path / name
    path.write_text(text, encoding=encoding)
    return path


def test_skips_header_rows_and_numbers_lines(tmp_path):
    path = _write(tmp_path, "title\ncolumns\na,b\nc,d\n")
    rows = list(RowReader(path, skip=2))
    assert rows == [(3, ["a", "b"]), (4, ["c", "d"])]


def test_no_skip_yields_every_record(tmp_path):
    path = _write(tmp_path, "a,b\nc,d\n")
    assert [r for _, r in RowReader(path)] == [["a", "b"], ["c", "d"]]


def test_pipe_delimiter(tmp_path):
    path = _write(tmp_path, "h1|h2\nWidget, large|10,50\n")
    rows = list(RowReader(path, delimiter="|", skip=1))
    assert rows == [(2, ["Widget, large", "10,50"])]


def test_blank_rows_are_not_filtered(tmp_path):
    path = _write(tmp_path, "h\na,b\n\n,\n")
    rows = [r for _, r in RowReader(path, skip=1)]
    assert rows == [["a", "b"], [], ["", ""]]


def test_iteration_is_lazy(tmp_path):
    path = _write(tmp_path, "h\na\n")
    assert isinstance(iter(RowReader(path, skip=1)), types.GeneratorType)


def test_width_comes_from_first_record(tmp_path):
    path = _write(tmp_path, "a,b,c\n1,2\n")
    assert RowReader(path, skip=1).width() == 3


def test_bom_is_stripped(tmp_path):
    path = _write(tmp_path, "\ufeffid,name\n1,x\n")
    assert list(RowReader(path))[0] == (1, ["id", "name"])


def test_missing_file_raises_parse_error(tmp_path):
    reader = RowReader(tmp_path / "nope.csv", skip=1)
    with pytest.raises(ParseError):
        list(reader)
    with pytest.raises(ParseError):
        reader.width()


def test_empty_file_has_no_width(tmp_path):
    path = _write(tmp_path, "")
    with pytest.raises(ParseError, match="empty"):
        RowReader(path).width()


def test_bad_quoting_raises_parse_error(tmp_path):
    path = _write(tmp_path, 'h1,h2\n"abc"def,1\n')
    with pytest.raises(ParseError):
        list(RowReader(path, skip=1))


def test_undecodable_bytes_raise_parse_error(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes("nom\ncaf\xe9\n".encode("latin-1"))
    with pytest.raises(ParseError):
        list(RowReader(path, skip=1))
    assert list(RowReader(path, skip=1, encoding="latin-1")) == [(2, ["café"])]


@pytest.mark.parametrize("delimiter, skip", [("", 0), (",,", 0), (",", -1)])
def test_bad_reader_arguments(tmp_path, delimiter, skip):
    with pytest.raises(ValueError):
        RowReader(tmp_path / "x.csv", delimiter=delimiter, skip=skip)
