"""
JSON decoder for arrays of records
"""

import json
from typing import Any, Dict, Iterator, List, Tuple

from tabquery.core.errors import DecodeError
from tabquery.readers.base import BaseDecoder, Format


class JSONDecoder(BaseDecoder):
    """
    Decoder for standard JSON documents.

    Supports:
    - Array of objects: [{"a": 1}, {"a": 2}]
    - Object with a records key: {"data": [{"a": 1}, ...], "meta": ...}

    The header is the ordered union of keys across all records; a record
    missing a key gets an empty field. Note: the whole document is parsed
    at once, JSON offers no row boundaries to stream on.
    """

    format = Format.JSON

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def iter_rows(self, data: bytes) -> Iterator[Tuple[str, ...]]:
        try:
            document = json.loads(data.decode(self.encoding).lstrip("\ufeff"))
        except UnicodeDecodeError as e:
            raise DecodeError(f"Resource is not valid {self.encoding} text: {e}") from e
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON: {e}") from e

        records = self._locate_records(document)

        header: Dict[str, None] = {}
        for index, record in enumerate(records, start=1):
            if not isinstance(record, dict):
                raise DecodeError(
                    f"Record {index} is a {type(record).__name__}, expected an object", row=index
                )
            for key in record:
                header.setdefault(key, None)

        if not header:
            return

        names = tuple(header)
        yield names
        for record in records:
            yield tuple(_to_field(record.get(name)) for name in names)

    def _locate_records(self, document: Any) -> List[Any]:
        """Find the list of records in the document"""
        if isinstance(document, list):
            return document

        if isinstance(document, dict):
            for value in document.values():
                if isinstance(value, list):
                    return value

        raise DecodeError("JSON content must be an array of objects or an object containing one")


def _to_field(value: Any) -> str:
    """Render a JSON value as a string field (null becomes empty)"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value, separators=(",", ":"))
