"""Unit tests for the tabular decoding activity."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from site_geojson.activities.decode_table import decode_rows, open_table
from site_geojson.core.exceptions import ArtifactIOError, TableDecodeError

HEADER_LINE = (
    "Lfd. Nr.,Name ,Straße,PLZ,Ort,Träger bzw. Verantwortlicher,X-Koordinate,Y-Koordinate"
)


def _rows(text: str, delimiter: str = ",") -> list[dict[str, str]]:
    return list(decode_rows(io.StringIO(text, newline=""), delimiter=delimiter))


class TestDecodeRows:
    """Header-keyed row decoding."""

    def test_single_row(self) -> None:
        rows = _rows(f"{HEADER_LINE}\n1,Library A,Main St,10115,Berlin,City,392000,5819000\n")
        assert rows == [
            {
                "Lfd. Nr.": "1",
                "Name ": "Library A",
                "Straße": "Main St",
                "PLZ": "10115",
                "Ort": "Berlin",
                "Träger bzw. Verantwortlicher": "City",
                "X-Koordinate": "392000",
                "Y-Koordinate": "5819000",
            }
        ]

    def test_keys_in_header_order(self) -> None:
        rows = _rows("b,a,c\n1,2,3\n")
        assert list(rows[0]) == ["b", "a", "c"]

    def test_header_name_trailing_space_preserved(self) -> None:
        rows = _rows(f"{HEADER_LINE}\n1,Library A,Main St,10115,Berlin,City,392000,5819000\n")
        assert "Name " in rows[0]
        assert "Name" not in rows[0]

    def test_header_only(self) -> None:
        assert _rows(f"{HEADER_LINE}\n") == []

    def test_empty_stream(self) -> None:
        assert _rows("") == []

    def test_blank_lines_skipped(self) -> None:
        assert len(_rows("a,b\n1,2\n\n3,4\n")) == 2

    def test_quoted_fields(self) -> None:
        rows = _rows('a,b\n"x, y","multi\nline"\n')
        assert rows == [{"a": "x, y", "b": "multi\nline"}]

    def test_custom_delimiter(self) -> None:
        assert _rows("a;b\n1;2\n", delimiter=";") == [{"a": "1", "b": "2"}]

    def test_lazy_and_single_use(self) -> None:
        rows = decode_rows(io.StringIO("a\n1\n2\n", newline=""))
        assert next(rows) == {"a": "1"}
        assert list(rows) == [{"a": "2"}]
        assert list(rows) == []


class TestDecodeFailures:
    """Malformed lines abort the whole sequence."""

    def test_too_many_fields(self) -> None:
        with pytest.raises(TableDecodeError, match="Line 3 has 3 fields, header has 2"):
            _rows("a,b\n1,2\n1,2,3\n")

    def test_too_few_fields(self) -> None:
        with pytest.raises(TableDecodeError, match="has 1 fields, header has 2"):
            _rows("a,b\n1\n")

    def test_bad_quoting(self) -> None:
        with pytest.raises(TableDecodeError, match="Malformed line"):
            _rows('a,b\n"1"x,2\n')

    def test_rows_before_failure_are_yielded(self) -> None:
        rows = decode_rows(io.StringIO("a,b\n1,2\n1,2,3\n", newline=""))
        assert next(rows) == {"a": "1", "b": "2"}
        with pytest.raises(TableDecodeError):
            next(rows)

    def test_error_stage(self) -> None:
        with pytest.raises(TableDecodeError) as exc:
            _rows("a,b\n1\n")
        assert exc.value.stage == "decode_table"
        assert exc.value.code == "TABLE_DECODE_FAILED"


class TestOpenTable:
    """File-backed decoding."""

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "t.csv"
        path.write_text("a,b\n1,2\n", encoding="utf-8")
        with open_table(path) as rows:
            assert list(rows) == [{"a": "1", "b": "2"}]

    def test_undecodable_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "t.csv"
        path.write_bytes(b"a,b\n\xff,2\n")
        with open_table(path) as rows, pytest.raises(TableDecodeError, match="Undecodable"):
            list(rows)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ArtifactIOError) as exc, open_table(tmp_path / "absent.csv"):
            pass
        assert exc.value.stage == "decode_table"
