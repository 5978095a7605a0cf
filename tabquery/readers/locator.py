"""
Resource locator resolution

Turns the FROM text of a statement plus an optional format hint into an
immutable Locator.

Examples:
    "data.csv"                       → Locator("data.csv", CSV, "file")
    "file:///tmp/data.tsv"           → Locator("file:///tmp/data.tsv", TSV, "file")
    "https://example.com/export", "csv" → Locator(..., CSV, "https")
"""

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from tabquery.core.errors import ResolveError
from tabquery.readers.base import Format


@dataclass(frozen=True)
class Locator:
    """A resource address paired with the format used to decode it"""

    location: str
    format: Format
    scheme: str

    @property
    def is_remote(self) -> bool:
        return self.scheme in ("http", "https")

    @property
    def is_local(self) -> bool:
        return self.scheme == "file"

    @property
    def path(self) -> str:
        """Filesystem path for local locators"""
        if self.location.startswith("file://"):
            return unquote(urlparse(self.location).path)
        return self.location

    def __str__(self) -> str:
        return self.location


def _scheme_of(location: str) -> str:
    if "://" not in location:
        return "file"
    scheme = urlparse(location).scheme.lower()
    # Windows drive letters parse as one-letter schemes
    if len(scheme) <= 1:
        return "file"
    return scheme


def resolve(locator_text: str, format_hint: Union[str, Format, None] = None) -> Locator:
    """
    Validate a locator and settle its format

    An explicit format hint always wins over the extension of the path.

    Args:
        locator_text: URL or path taken from the statement
        format_hint: Format name (e.g. "csv"), Format member, or None

    Returns:
        Locator

    Raises:
        ResolveError: If the locator is empty, the hint names an unsupported
            format, or no hint is given and the extension is not recognized
    """
    location = (locator_text or "").strip()
    if not location:
        raise ResolveError("Locator is empty")

    if isinstance(format_hint, Format):
        fmt: Optional[Format] = format_hint
    elif format_hint is not None and format_hint.strip():
        fmt = Format.from_name(format_hint)
    else:
        fmt = Format.from_location(location)
        if fmt is None:
            raise ResolveError(
                f"Cannot determine the format of '{location}', pass a format hint"
            )

    return Locator(location=location, format=fmt, scheme=_scheme_of(location))
