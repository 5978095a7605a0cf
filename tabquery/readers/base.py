"""
Base decoder interface for all resource formats

Decoders turn the raw bytes of a resource into a RawTable: a header plus
rows of string fields. Typing happens later, in tabquery.core.types.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterator, Optional, Sequence, Tuple
from urllib.parse import urlparse

from tabquery.core.errors import DecodeError, ResolveError


class Format(Enum):
    """Resource formats this package can decode"""

    CSV = "csv"
    TSV = "tsv"
    JSON = "json"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Format":
        """
        Look up a format by its name (case-insensitive)

        Raises:
            ResolveError: If the name is not a supported format
        """
        normalized = name.strip().lower()
        for fmt in cls:
            if fmt.value == normalized:
                return fmt
        supported = ", ".join(fmt.value for fmt in cls)
        raise ResolveError(f"Unsupported format '{name}'. Supported formats: {supported}")

    @classmethod
    def from_location(cls, location: str) -> Optional["Format"]:
        """Guess the format from a path or URL extension, or None"""
        path = urlparse(location).path if "://" in location else location
        suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower().lstrip(".")
        for fmt in cls:
            if fmt.value == suffix:
                return fmt
        return None


@dataclass(frozen=True)
class RawTable:
    """
    Decoded but untyped table

    Every row has exactly as many fields as the header.
    """

    header: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]

    def __len__(self) -> int:
        return len(self.rows)


def check_header(header: Sequence[str]) -> Tuple[str, ...]:
    """
    Validate header names

    Raises:
        DecodeError: If a column name appears more than once
    """
    seen = set()
    for name in header:
        if name in seen:
            raise DecodeError(f"Duplicate column name '{name}' in header", row=0)
        seen.add(name)
    return tuple(header)


class BaseDecoder:
    """
    Base class for all format decoders

    Decoders are responsible for:
    1. Turning bytes into text records
    2. Yielding the header, then one tuple of fields per row (lazily)
    3. Rejecting malformed content with a DecodeError
    """

    format: Format

    def iter_rows(self, data: bytes) -> Iterator[Tuple[str, ...]]:
        """
        Yield the header, then each row as a tuple of strings

        This is the core method that all decoders must implement. Rows
        are produced one at a time so callers can consume large resources
        incrementally.
        """
        raise NotImplementedError("Subclasses must implement iter_rows()")

    def decode(self, data: bytes) -> RawTable:
        """
        Decode a complete resource

        Raises:
            DecodeError: If the resource is empty or malformed
        """
        rows = self.iter_rows(data)
        header = next(rows, None)
        if header is None:
            raise DecodeError(f"{self.format.value.upper()} resource is empty")
        return RawTable(header=header, rows=tuple(rows))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.format.value})"
