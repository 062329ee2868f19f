"""Main entry point for mapping spreadsheet imports onto work item fields."""

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..config import settings
from .aggregator import map_rows
from .cache import CatalogFetcher, CatalogLookup, FieldCatalogCache
from .models import (
    FieldDefinition,
    ImportResult,
    MappingSuggestionResult,
    OperationResult,
)
from .resolver import MappingPolicy, suggest_mapping
from .synonyms import SynonymTable

logger = logging.getLogger(__name__)


class MappingEngine:
    """
    Reconciles import headers with a work item field catalog.

    This is the main entry point for all mapping operations. It coordinates
    the synonym table, fuzzy scoring, the ambiguity policy, the catalog cache
    and row mapping. Share one engine per process so the catalog cache is
    shared across operations.
    """

    def __init__(
        self,
        fetcher: Optional[CatalogFetcher] = None,
        cache: Optional[FieldCatalogCache] = None,
        synonyms: Optional[SynonymTable] = None,
        policy: Optional[MappingPolicy] = None,
    ):
        """
        Initialize the mapping engine.

        Args:
            fetcher: Async callable (project, item_type) -> field definitions
            cache: Optional FieldCatalogCache (created around fetcher if not provided)
            synonyms: Optional SynonymTable (default table if not provided)
            policy: Optional MappingPolicy (built from settings if not provided)
        """
        self.cache = cache or FieldCatalogCache(fetcher)
        self.synonyms = SynonymTable() if synonyms is None else synonyms
        self.policy = policy or MappingPolicy()

    def suggest_mapping(
        self,
        headers: Iterable[str],
        catalog: Iterable[FieldDefinition],
        title_fallback: Optional[bool] = None,
    ) -> MappingSuggestionResult:
        """Suggest a target field for every header against a catalog."""
        return suggest_mapping(
            headers,
            catalog,
            synonyms=self.synonyms,
            policy=self.policy,
            title_fallback=title_fallback,
        )

    def map_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        resolved_mapping: Mapping[str, str],
    ) -> OperationResult:
        """Map raw rows with a resolved header -> reference name mapping."""
        return map_rows(rows, resolved_mapping)

    async def get_cached_catalog(
        self, project: str, item_type: Optional[str] = None
    ) -> list[FieldDefinition]:
        """
        Get the field catalog for a project, fetching it on first use.

        Falls back to the built-in fields when the fetch fails. Use
        lookup_catalog() to tell a fallback catalog from a live one.
        """
        return await self.cache.get(project, item_type or settings.default_item_type)

    async def lookup_catalog(
        self, project: str, item_type: Optional[str] = None
    ) -> CatalogLookup:
        """Get the field catalog along with its cache and degraded state."""
        return await self.cache.lookup(project, item_type or settings.default_item_type)

    def invalidate_catalog_cache(
        self, project: Optional[str] = None, item_type: Optional[str] = None
    ):
        """Drop one cached catalog, or all of them unless both keys are given."""
        self.cache.invalidate(project, item_type)

    async def import_rows(
        self,
        rows: Sequence[Mapping[str, Any]],
        headers: Sequence[str],
        project: Optional[str] = None,
        item_type: Optional[str] = None,
        catalog: Optional[Iterable[FieldDefinition]] = None,
        field_mapping: Optional[Mapping[str, str]] = None,
        ignore_ids: bool = False,
    ) -> ImportResult:
        """
        Map a whole import in one call.

        This will:
        1. Use field_mapping as given, or suggest one from the catalog
           (passed in, or fetched through the cache for project/item_type)
        2. Map every row
        3. Drop IDs if ignore_ids is set
        4. Synthesize steps from "step action"/"step expected" columns

        Args:
            rows: Raw rows keyed by header
            headers: Header texts in file order
            project: Project used to fetch the catalog when none is passed
            item_type: Work item type (settings.default_item_type if not provided)
            catalog: Field catalog to match headers against
            field_mapping: Caller-reviewed header -> reference name mapping
            ignore_ids: Remove IDs so every record is created as new

        Returns:
            ImportResult with records, diagnostics and the suggestion used
        """
        warnings: list[str] = []
        suggestion = None

        if field_mapping is None:
            if catalog is None:
                if project is None:
                    raise ValueError("Either catalog, field_mapping or project is required")
                lookup = await self.lookup_catalog(project, item_type)
                if lookup.warning:
                    warnings.append(lookup.warning)
                catalog = lookup.fields

            suggestion = self.suggest_mapping(headers, catalog)
            warnings.extend(_suggestion_warnings(suggestion))
            field_mapping = suggestion.resolved_mapping

        result = self.map_rows(rows, field_mapping)

        if ignore_ids:
            for record in result.records:
                record.known_fields.pop("id", None)
            result.stats.rows_without_id += result.stats.rows_with_id
            result.stats.rows_with_id = 0
            result.warnings.append(
                "ignore_ids=True: All IDs were removed; all rows will be created as new test cases."
            )

        synthesized = _synthesize_steps(result, headers)
        if synthesized:
            result.warnings.append(
                f"Synthesized steps for {synthesized} rows from step action/expected columns"
            )

        logger.info(
            f"Import mapped {result.stats.valid_rows} of {result.stats.total_rows} rows "
            f"with {len(result.errors)} errors"
        )

        return ImportResult(
            records=result.records,
            errors=result.errors,
            warnings=warnings + result.warnings,
            stats=result.stats,
            suggestion=suggestion,
        )


def _suggestion_warnings(suggestion: MappingSuggestionResult) -> list[str]:
    warnings = []
    for s in suggestion.ambiguous_suggestions:
        options = ", ".join(f"{c.reference_name} ({c.score})" for c in s.candidates)
        if s.header in suggestion.resolved_mapping:
            outcome = f"mapped to {s.suggested_field}"
        else:
            outcome = "left unmapped for review"
        warnings.append(f"Header '{s.header}' is ambiguous between {options}; {outcome}")
    if suggestion.unmapped_headers:
        warnings.append(f"Unmapped headers: {', '.join(suggestion.unmapped_headers)}")
    return warnings


def _synthesize_steps(result: OperationResult, headers: Sequence[str]) -> int:
    if any("steps" in h.lower() for h in headers):
        return 0

    action_header = next((h for h in headers if "step action" in h.lower()), None)
    expected_header = next((h for h in headers if "step expected" in h.lower()), None)
    if action_header is None and expected_header is None:
        return 0

    count = 0
    for record in result.records:
        if record.steps:
            continue
        action = _cell_text(record.original_row, action_header)
        expected = _cell_text(record.original_row, expected_header)
        if action or expected:
            record.known_fields["steps"] = f"1. {action}|{expected}"
            count += 1
    return count


def _cell_text(row: Mapping[str, Any], header: Optional[str]) -> str:
    if header is None:
        return ""
    value = row.get(header)
    return str(value).strip() if value is not None else ""
