"""Dynamic field mapping engine for tabular work item imports."""

from .models import (
    FieldDefinition,
    ValueType,
    MatchReason,
    FieldCandidate,
    MappingSuggestion,
    MappingSuggestionResult,
    MappedRecord,
    OperationStats,
    OperationResult,
    ImportResult,
    FieldMappingError,
    RequiredFieldUnresolvedError,
    CatalogFetchError,
    RowProcessingError,
)
from .normalize import normalize, singularize, edit_distance
from .synonyms import SynonymTable, CURATED_FIELDS, DEFAULT_CATALOG
from .scorer import FuzzyScorer
from .resolver import AmbiguityResolver, MappingPolicy, suggest_mapping
from .cache import FieldCatalogCache, CatalogLookup
from .row_mapper import RowMapper, parse_int
from .aggregator import ResultAggregator, map_rows
from .preview import generate_preview
from .engine import MappingEngine

__all__ = [
    "FieldDefinition",
    "ValueType",
    "MatchReason",
    "FieldCandidate",
    "MappingSuggestion",
    "MappingSuggestionResult",
    "MappedRecord",
    "OperationStats",
    "OperationResult",
    "ImportResult",
    "FieldMappingError",
    "RequiredFieldUnresolvedError",
    "CatalogFetchError",
    "RowProcessingError",
    "normalize",
    "singularize",
    "edit_distance",
    "SynonymTable",
    "CURATED_FIELDS",
    "DEFAULT_CATALOG",
    "FuzzyScorer",
    "AmbiguityResolver",
    "MappingPolicy",
    "suggest_mapping",
    "FieldCatalogCache",
    "CatalogLookup",
    "RowMapper",
    "parse_int",
    "ResultAggregator",
    "map_rows",
    "generate_preview",
    "MappingEngine",
]
