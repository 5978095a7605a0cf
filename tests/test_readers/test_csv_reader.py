"""
Tests for the CSV / TSV decoder
"""

import pytest

from tabquery.core.errors import DecodeError
from tabquery.readers.base import Format
from tabquery.readers.csv_reader import CSVDecoder


class TestCSVDecoder:
    """Test CSV decoding"""

    def test_header_and_rows(self):
        table = CSVDecoder().decode(b"name,age\nAlice,30\nBob,25\n")

        assert table.header == ("name", "age")
        assert table.rows == (("Alice", "30"), ("Bob", "25"))

    def test_iter_rows_is_lazy(self):
        rows = CSVDecoder().iter_rows(b"a,b\n1,2\n")

        assert next(rows) == ("a", "b")
        assert next(rows) == ("1", "2")

    def test_quoted_fields(self):
        data = b'name,notes\n"Smith, J","said ""hi""\nthen left"\n'
        table = CSVDecoder().decode(data)

        assert table.rows == (("Smith, J", 'said "hi"\nthen left'),)

    def test_empty_fields_preserved(self):
        table = CSVDecoder().decode(b"a,b,c\n1,,3\n,,\n")

        assert table.rows == (("1", "", "3"), ("", "", ""))

    def test_header_only(self):
        table = CSVDecoder().decode(b"a,b\n")

        assert table.header == ("a", "b")
        assert len(table) == 0

    def test_bom_stripped(self):
        table = CSVDecoder().decode("\ufeffid,name\n1,x\n".encode("utf-8"))

        assert table.header == ("id", "name")

    def test_crlf_line_endings(self):
        table = CSVDecoder().decode(b"a,b\r\n1,2\r\n")

        assert table.rows == (("1", "2"),)

    def test_trailing_blank_lines_ignored(self):
        table = CSVDecoder().decode(b"a\n1\n\n\n")

        assert table.rows == (("1",),)

    def test_interior_blank_line_single_column(self):
        table = CSVDecoder().decode(b"a\n1\n\n2\n")

        assert table.rows == (("1",), ("",), ("2",))

    def test_interior_blank_line_multi_column(self):
        with pytest.raises(DecodeError) as exc_info:
            CSVDecoder().decode(b"a,b\n1,2\n\n3,4\n")

        assert exc_info.value.row == 2

    def test_short_row(self):
        with pytest.raises(DecodeError, match="Row 2 \\(line 3\\) has 1 fields, expected 2") as exc_info:
            CSVDecoder().decode(b"a,b\n1,2\n3\n")

        assert exc_info.value.row == 2

    def test_long_row(self):
        with pytest.raises(DecodeError, match="has 3 fields, expected 2"):
            CSVDecoder().decode(b"a,b\n1,2,3\n")

    def test_duplicate_header(self):
        with pytest.raises(DecodeError, match="Duplicate column name 'a'"):
            CSVDecoder().decode(b"a,b,a\n1,2,3\n")

    def test_empty_resource(self):
        with pytest.raises(DecodeError, match="empty"):
            CSVDecoder().decode(b"")

    def test_blank_only_resource(self):
        with pytest.raises(DecodeError, match="empty"):
            CSVDecoder().decode(b"\n\n")

    def test_invalid_utf8(self):
        with pytest.raises(DecodeError, match="not valid utf-8"):
            CSVDecoder().decode(b"a\n\xff\xfe\n")

    def test_field_larger_than_csv_default_limit(self):
        text = "x" * 200_000
        table = CSVDecoder().decode(f"id,text\n1,{text}\n".encode())

        assert table.rows == (("1", text),)

    def test_unterminated_quote(self):
        with pytest.raises(DecodeError):
            CSVDecoder().decode(b'a,b\n"open,2\n')


class TestTSVDecoder:
    """Test the tab-delimited variant"""

    def test_tab_delimiter(self):
        decoder = CSVDecoder("\t")
        table = decoder.decode(b"a\tb\n1,5\t2\n")

        assert decoder.format == Format.TSV
        assert table.rows == (("1,5", "2"),)
