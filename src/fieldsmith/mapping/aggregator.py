"""Collects mapped records and diagnostics for one mapping operation."""

import logging
from typing import Any, Iterable, Mapping

from .models import MappedRecord, OperationResult, OperationStats, RequiredFieldUnresolvedError
from .row_mapper import HEADER_ROW_OFFSET, RowMapper

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Accumulates records, errors, warnings and row statistics."""

    def __init__(self, total_rows: int = 0):
        self.records: list[MappedRecord] = []
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.stats = OperationStats(total_rows=total_rows)

    def add_record(self, record: MappedRecord):
        self.records.append(record)
        self.stats.valid_rows += 1
        if record.id is not None:
            self.stats.rows_with_id += 1
        else:
            self.stats.rows_without_id += 1

    def add_row_error(self, row_index: int, error: Exception):
        message = f"Row {row_index}: {error}"
        logger.error(message)
        self.errors.append(message)

    def add_error(self, message: str):
        self.errors.append(message)

    def add_warning(self, message: str):
        self.warnings.append(message)

    def build(self) -> OperationResult:
        return OperationResult(
            records=self.records,
            errors=self.errors,
            warnings=self.warnings,
            stats=self.stats,
        )


def map_rows(rows: Iterable[Mapping[str, Any]], resolved_mapping: Mapping[str, str]) -> OperationResult:
    """
    Map every row with a resolved header -> reference name mapping.

    Rows are processed in order. A failing row is recorded in errors and
    skipped; rows without a title are skipped silently. The whole operation
    fails only when no header maps to the title field.

    Args:
        rows: Raw rows keyed by header
        resolved_mapping: header -> reference name

    Returns:
        OperationResult with records, errors, warnings and stats
    """
    rows = list(rows)
    aggregator = ResultAggregator(total_rows=len(rows))

    try:
        mapper = RowMapper(resolved_mapping)
    except RequiredFieldUnresolvedError as e:
        logger.warning(f"Mapping rejected: {e}")
        aggregator.add_error(str(e))
        return aggregator.build()

    for index, row in enumerate(rows):
        try:
            record = mapper.map_row(row, index)
        except Exception as e:
            aggregator.add_row_error(index + HEADER_ROW_OFFSET, e)
            continue
        if record is not None:
            aggregator.add_record(record)

    applied = ", ".join(f"{header} -> {ref}" for header, ref in resolved_mapping.items())
    aggregator.add_warning(f"Field mapping applied: {applied}")

    result = aggregator.build()
    logger.info(
        f"Mapped {result.stats.valid_rows} of {result.stats.total_rows} rows "
        f"({len(result.errors)} errors)"
    )
    return result
