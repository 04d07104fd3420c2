"""Delimited-text parsing shared by every record loader.

The backing files are comma separated with each field wrapped in double
quotes. Quotes are not interpreted: a comma inside a quoted field still ends
the field. Rows that are too short to map are a hard failure for the whole
load rather than something to skip.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

DELIMITER = ","
QUOTE = '"'

T = TypeVar("T")
PathLike = Union[str, Path]


class MalformedRowError(ValueError):
    """Raised when a row does not carry enough fields for its record type."""

    def __init__(self, path: PathLike, line_number: int, field_count: int, expected: Optional[int] = None) -> None:
        self.path = Path(path)
        self.line_number = line_number
        self.field_count = field_count
        self.expected = expected
        if expected is None:
            detail = f"{field_count} field(s) is too few"
        else:
            detail = f"expected {expected} field(s), found {field_count}"
        super().__init__(f"{self.path}:{line_number}: malformed row, {detail}")


def clean_field(value: str) -> str:
    """Strip whitespace and one layer of surrounding double quotes."""

    value = value.strip()
    if value.startswith(QUOTE):
        value = value[1:]
    if value.endswith(QUOTE):
        value = value[:-1]
    return value.strip()


def split_line(line: str) -> List[str]:
    return line.split(DELIMITER)


def load_csv(
    path: PathLike,
    mapper: Callable[[Sequence[str]], T],
    *,
    min_fields: Optional[int] = None,
) -> List[T]:
    """Map every data line of ``path`` to a record with ``mapper``.

    The first line is a header and is always skipped, as are blank lines.
    Lines break only on carriage returns and line feeds.
    ``min_fields`` rejects short rows up front; an ``IndexError`` raised by the
    mapper is reported the same way.
    """

    source = Path(path)
    with source.open("r", encoding="utf-8-sig") as handle:
        lines = handle.read().split("\n")

    records: List[T] = []
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        fields = split_line(line)
        if min_fields is not None and len(fields) < min_fields:
            raise MalformedRowError(source, line_number, len(fields), min_fields)
        try:
            records.append(mapper(fields))
        except IndexError as exc:
            raise MalformedRowError(source, line_number, len(fields), min_fields) from exc

    logger.debug("Parsed %d row(s) from %s", len(records), source)
    return records


__all__ = ["MalformedRowError", "clean_field", "load_csv", "split_line"]
