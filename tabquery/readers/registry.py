"""
Decoder registry keyed by Format
"""

from typing import Dict

from tabquery.readers.base import BaseDecoder, Format, RawTable
from tabquery.readers.csv_reader import CSVDecoder
from tabquery.readers.json_reader import JSONDecoder

DECODERS: Dict[Format, BaseDecoder] = {
    Format.CSV: CSVDecoder(","),
    Format.TSV: CSVDecoder("\t"),
    Format.JSON: JSONDecoder(),
}


def get_decoder(fmt: Format) -> BaseDecoder:
    """Return the decoder registered for a format"""
    return DECODERS[fmt]


def decode(data: bytes, fmt: Format) -> RawTable:
    """
    Decode raw bytes into a RawTable

    Args:
        data: Resource content
        fmt: Format of the content

    Raises:
        DecodeError: If the content is malformed
    """
    return get_decoder(fmt).decode(data)
