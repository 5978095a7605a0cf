"""
CSV decoder with row-by-row decoding

Uses Python's built-in csv module. Also serves TSV with a tab delimiter.
"""

import codecs
import csv
import io
import sys
from typing import Iterator, List, Tuple

from tabquery.core.errors import DecodeError
from tabquery.readers.base import BaseDecoder, Format, check_header


def _raise_field_size_limit() -> None:
    """Lift the csv module's 128 KiB per-field cap to the largest value the platform accepts"""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            limit //= 2


_raise_field_size_limit()


class CSVDecoder(BaseDecoder):
    """
    CSV / TSV decoder

    Features:
    - Lazy iteration over rows
    - Standard quoting (quoted fields may hold delimiters, newlines and "")
    - Strict field counts: a short or long row is a DecodeError
    - Leading and trailing blank lines are ignored
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8"):
        """
        Initialize CSV decoder

        Args:
            delimiter: Field delimiter (default: comma)
            encoding: Text encoding of the resource (default: utf-8)
        """
        self.delimiter = delimiter
        self.encoding = encoding
        self.format = Format.TSV if delimiter == "\t" else Format.CSV

    def iter_rows(self, data: bytes) -> Iterator[Tuple[str, ...]]:
        """
        Yield the header, then each data row

        Blank lines between rows are kept pending: they are dropped if
        only blank lines follow, otherwise each one counts as a row with a
        single empty field.
        """
        # utf-8-sig strips a BOM if present
        encoding = "utf-8-sig" if codecs.lookup(self.encoding).name == "utf-8" else self.encoding
        stream = io.TextIOWrapper(io.BytesIO(data), encoding=encoding, newline="")
        reader = csv.reader(stream, delimiter=self.delimiter, strict=True)

        header = None
        width = 0
        row_index = 0
        pending_blank: List[int] = []

        try:
            for fields in reader:
                if header is None:
                    if not fields:
                        continue
                    header = check_header(fields)
                    width = len(header)
                    yield header
                    continue

                if not fields:
                    pending_blank.append(reader.line_num)
                    continue

                for line_num in pending_blank:
                    row_index += 1
                    yield self._check_row([""], row_index, width, line_num)
                pending_blank.clear()

                row_index += 1
                yield self._check_row(fields, row_index, width, reader.line_num)

        except csv.Error as e:
            raise DecodeError(
                f"Malformed CSV near line {reader.line_num}: {e}", row=row_index + 1
            ) from e
        except UnicodeDecodeError as e:
            raise DecodeError(f"Resource is not valid {self.encoding} text: {e}") from e

    def _check_row(self, fields: List[str], row_index: int, width: int, line_num: int) -> Tuple[str, ...]:
        if len(fields) != width:
            raise DecodeError(
                f"Row {row_index} (line {line_num}) has {len(fields)} fields, expected {width}",
                row=row_index,
            )
        return tuple(fields)
