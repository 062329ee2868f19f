"""Apply a resolved header -> field mapping to raw spreadsheet rows."""

import math
import re
from collections.abc import Mapping
from typing import Any, Optional

from .models import (
    MappedRecord,
    RequiredFieldUnresolvedError,
    RowProcessingError,
    TITLE_REFERENCE_NAME,
)
from .synonyms import curated_field_for

PRIORITY_RANGE = (1, 4)
HEADER_ROW_OFFSET = 2  # one header row plus 1-based numbering

_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")


def parse_int(value: Any) -> Optional[int]:
    """
    Parse a cell value as a base-10 integer.

    Numbers are floored; strings use their leading integer ("3", " 2 ", "2 (High)").
    Returns None when no integer can be read.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.floor(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        return int(match.group(1)) if match else None
    return None


def _clean_text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    text = str(value).strip()
    return text or None


def _coerce_priority(value: Any) -> Optional[int]:
    priority = parse_int(value)
    if priority is None or not PRIORITY_RANGE[0] <= priority <= PRIORITY_RANGE[1]:
        return None
    return priority


def _coerce_id(value: Any) -> Optional[Any]:
    numeric = parse_int(value)
    if numeric is not None:
        return numeric
    # Non-numeric IDs are kept as written
    return _clean_text(value)


_COERCERS = {
    "id": _coerce_id,
    "priority": _coerce_priority,
}


class RowMapper:
    """Maps raw rows onto MappedRecords using a header -> reference name mapping."""

    def __init__(self, resolved_mapping: Mapping[str, str]):
        """
        Args:
            resolved_mapping: header -> reference name

        Raises:
            RequiredFieldUnresolvedError: If no header maps to the title field
        """
        self.mapping = dict(resolved_mapping)
        self.title_header = next(
            (
                header
                for header, ref in self.mapping.items()
                if ref.strip().lower() == TITLE_REFERENCE_NAME.lower()
            ),
            None,
        )
        if self.title_header is None:
            raise RequiredFieldUnresolvedError()

    def map_row(self, row: Mapping[str, Any], index: int) -> Optional[MappedRecord]:
        """
        Map one row.

        Args:
            row: header -> raw cell value
            index: 0-based position of the row in the data

        Returns:
            MappedRecord, or None if the row has no title

        Raises:
            RowProcessingError: If the row is not a header-keyed mapping
        """
        row_index = index + HEADER_ROW_OFFSET
        if not isinstance(row, Mapping):
            raise RowProcessingError(
                row_index, f"Expected a header-keyed row, got {type(row).__name__}"
            )

        title = _clean_text(row.get(self.title_header))
        if title is None:
            return None

        known: dict[str, Any] = {}
        extra: dict[str, Any] = {}

        for header, reference_name in self.mapping.items():
            if header == self.title_header:
                continue
            value = row.get(header)
            if value is None or value == "":
                continue

            curated = curated_field_for(reference_name)
            if curated is None:
                extra[reference_name] = value
                continue
            if curated.key == "title":
                continue

            coerce = _COERCERS.get(curated.key, _clean_text)
            coerced = coerce(value)
            if coerced is not None:
                known[curated.key] = coerced

        return MappedRecord(
            title=title,
            known_fields=known,
            extra_fields=extra,
            original_row=dict(row),
            row_index=row_index,
        )
