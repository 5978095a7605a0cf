"""
Tests for locator resolution
"""

import pytest

from tabquery.core.errors import ResolveError
from tabquery.readers.base import Format
from tabquery.readers.locator import resolve


class TestResolve:
    """Test resolve()"""

    def test_local_path_by_extension(self):
        locator = resolve("data/people.csv")

        assert locator.format == Format.CSV
        assert locator.scheme == "file"
        assert locator.is_local
        assert locator.path == "data/people.csv"

    def test_extension_case_insensitive(self):
        assert resolve("EXPORT.TSV").format == Format.TSV

    def test_url_extension_ignores_query(self):
        locator = resolve("https://example.com/data.json?token=abc")

        assert locator.format == Format.JSON
        assert locator.scheme == "https"
        assert locator.is_remote

    def test_hint_wins_over_extension(self):
        assert resolve("data.csv", "tsv").format == Format.TSV
        assert resolve("data.csv", Format.JSON).format == Format.JSON

    def test_hint_case_insensitive(self):
        assert resolve("https://example.com/export", "CSV").format == Format.CSV

    def test_file_url_path(self):
        locator = resolve("file:///tmp/my%20data.csv")

        assert locator.is_local
        assert locator.path == "/tmp/my data.csv"

    def test_windows_drive_is_local(self):
        assert resolve("C://data/file.csv").scheme == "file"

    def test_unknown_scheme_kept(self):
        locator = resolve("ftp://example.com/data.csv")

        assert locator.scheme == "ftp"
        assert not locator.is_local
        assert not locator.is_remote

    def test_empty_locator(self):
        with pytest.raises(ResolveError, match="empty"):
            resolve("   ")

    def test_unsupported_hint(self):
        with pytest.raises(ResolveError, match="Unsupported format 'parquet'"):
            resolve("data.csv", "parquet")

    def test_unknown_extension_without_hint(self):
        with pytest.raises(ResolveError, match="Cannot determine the format"):
            resolve("https://example.com/export")

    def test_locators_are_hashable(self):
        assert resolve("a.csv") == resolve("a.csv")
        assert len({resolve("a.csv"), resolve("a.csv")}) == 1
