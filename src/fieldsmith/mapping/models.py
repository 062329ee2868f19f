"""Data models for the dynamic field mapping engine."""

from enum import Enum
from typing import Optional, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


TITLE_REFERENCE_NAME = "System.Title"


class ValueType(str, Enum):
    """Semantic type of a schema field."""

    STRING = "string"
    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATETIME = "datetime"


class MatchReason(str, Enum):
    """Why a header was matched to a field (or not)."""

    DIRECT_SYNONYM = "DirectSynonym"
    SINGULAR_SYNONYM = "SingularSynonym"
    EXACT_NAME = "ExactName"
    EXACT_TAIL = "ExactTail"
    SUBSTRING_MATCH = "SubstringMatch"
    EDIT_DISTANCE = "EditDistance"
    FALLBACK_TITLE = "FallbackTitleHeuristic"
    NO_MATCH = "NoMatch"


class FieldDefinition(BaseModel):
    """One field of a remote work item type's schema."""

    model_config = ConfigDict(frozen=True)

    reference_name: str  # e.g. "System.Title" or "Custom.RiskLevel"
    display_name: str
    value_type: ValueType = ValueType.STRING
    required: bool = False
    read_only: bool = False

    @property
    def tail(self) -> str:
        """Last dot-segment of the reference name."""
        return self.reference_name.rsplit(".", 1)[-1]


class FieldCandidate(BaseModel):
    """A scored catalog field competing for a header."""

    reference_name: str
    display_name: str
    score: int = Field(ge=0, le=100)
    reason: MatchReason


class MappingSuggestion(BaseModel):
    """Suggested target field for a single input header."""

    header: str
    suggested_field: Optional[str] = None
    confidence: int = Field(default=0, ge=0, le=100)
    candidates: list[FieldCandidate] = Field(default_factory=list)
    reason: MatchReason = MatchReason.NO_MATCH
    ambiguous: bool = False

    @model_validator(mode="after")
    def _check_confidence(self) -> "MappingSuggestion":
        if (self.confidence == 0) != (self.suggested_field is None):
            raise ValueError("confidence must be 0 exactly when no field is suggested")
        return self


class MappingSuggestionResult(BaseModel):
    """Suggestions for every header plus the auto-accepted header -> field mapping."""

    headers: list[str]
    suggestions: list[MappingSuggestion]
    resolved_mapping: dict[str, str] = Field(default_factory=dict)
    unmapped_headers: list[str] = Field(default_factory=list)

    @property
    def ambiguous_suggestions(self) -> list[MappingSuggestion]:
        return [s for s in self.suggestions if s.ambiguous]

    @property
    def pending_review(self) -> list[MappingSuggestion]:
        """Suggestions that name a field but were not auto-accepted."""
        return [
            s
            for s in self.suggestions
            if s.suggested_field is not None and s.header not in self.resolved_mapping
        ]


class MappedRecord(BaseModel):
    """A single spreadsheet row mapped onto work item fields."""

    title: str = Field(min_length=1)
    known_fields: dict[str, Any] = Field(default_factory=dict)  # curated key -> coerced value
    extra_fields: dict[str, Any] = Field(default_factory=dict)  # reference name -> raw value
    original_row: dict[str, Any] = Field(default_factory=dict)
    row_index: int  # 1-based, counting the header row

    @property
    def id(self) -> Optional[Any]:
        return self.known_fields.get("id")

    @property
    def priority(self) -> Optional[int]:
        return self.known_fields.get("priority")

    @property
    def steps(self) -> Optional[str]:
        return self.known_fields.get("steps")

    @property
    def area_path(self) -> Optional[str]:
        return self.known_fields.get("area_path")


class OperationStats(BaseModel):
    """Row counters for one mapping operation."""

    total_rows: int = 0
    valid_rows: int = 0
    rows_with_id: int = 0
    rows_without_id: int = 0


class OperationResult(BaseModel):
    """Mapped records plus every diagnostic produced along the way."""

    records: list[MappedRecord] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    stats: OperationStats = Field(default_factory=OperationStats)

    @property
    def success(self) -> bool:
        return bool(self.records) or not self.errors


class ImportResult(OperationResult):
    """Result of a batch import, including the mapping suggestion that drove it."""

    suggestion: Optional[MappingSuggestionResult] = None


class FieldMappingError(Exception):
    """Base exception for the field mapping engine."""

    pass


class RequiredFieldUnresolvedError(FieldMappingError):
    """Exception raised when no header maps to the title field."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or f"Field mapping does not map any header to '{TITLE_REFERENCE_NAME}'."
        )


class CatalogFetchError(FieldMappingError):
    """Exception raised when the field catalog cannot be fetched."""

    pass


class RowProcessingError(FieldMappingError):
    """Exception raised when a single row cannot be processed."""

    def __init__(self, row_index: int, message: str):
        self.row_index = row_index
        super().__init__(message)
