"""Static knowledge about well-known work item fields.

Holds the synonym table consulted before fuzzy scoring, the curated field set
that gets explicit type coercion, and the built-in catalog used when the live
catalog cannot be fetched. All of it is built once at import time and exposed
read-only.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .models import FieldDefinition, MatchReason, ValueType
from .normalize import normalize, singularize


@dataclass(frozen=True)
class CuratedField:
    """A well-known field with fixed coercion rules."""

    key: str  # attribute name on MappedRecord.known_fields
    reference_name: str
    display_name: str
    value_type: ValueType
    required: bool = False
    read_only: bool = False


CURATED_FIELDS: tuple[CuratedField, ...] = (
    CuratedField("id", "System.Id", "ID", ValueType.NUMBER, read_only=True),
    CuratedField("title", "System.Title", "Title", ValueType.STRING, required=True),
    CuratedField("steps", "Microsoft.VSTS.TCM.Steps", "Steps", ValueType.TEXT),
    CuratedField("priority", "Microsoft.VSTS.Common.Priority", "Priority", ValueType.NUMBER),
    CuratedField("area_path", "System.AreaPath", "Area Path", ValueType.STRING),
    CuratedField("iteration_path", "System.IterationPath", "Iteration Path", ValueType.STRING),
    CuratedField("description", "System.Description", "Description", ValueType.TEXT),
    CuratedField("tags", "System.Tags", "Tags", ValueType.STRING),
    CuratedField(
        "automation_status",
        "Microsoft.VSTS.TCM.AutomationStatus",
        "Automation Status",
        ValueType.STRING,
    ),
)

# Catalog used when the live catalog fetch fails
DEFAULT_CATALOG: tuple[FieldDefinition, ...] = tuple(
    FieldDefinition(
        reference_name=f.reference_name,
        display_name=f.display_name,
        value_type=f.value_type,
        required=f.required,
        read_only=f.read_only,
    )
    for f in CURATED_FIELDS
) + (FieldDefinition(reference_name="System.AssignedTo", display_name="Assigned To"),)


DEFAULT_SYNONYMS: Mapping[str, str] = MappingProxyType(
    {
        "title": "System.Title",
        "name": "System.Title",
        "titles": "System.Title",
        "testcasetitle": "System.Title",
        "testcasename": "System.Title",
        "summary": "System.Title",
        "id": "System.Id",
        "testcaseid": "System.Id",
        "caseid": "System.Id",
        "tcid": "System.Id",
        "workitemid": "System.Id",
        "steps": "Microsoft.VSTS.TCM.Steps",
        "teststeps": "Microsoft.VSTS.TCM.Steps",
        "action": "Microsoft.VSTS.TCM.Steps",
        "actions": "Microsoft.VSTS.TCM.Steps",
        "procedure": "Microsoft.VSTS.TCM.Steps",
        "priority": "Microsoft.VSTS.Common.Priority",
        "pri": "Microsoft.VSTS.Common.Priority",
        "importance": "Microsoft.VSTS.Common.Priority",
        "level": "Microsoft.VSTS.Common.Priority",
        "areapath": "System.AreaPath",
        "area": "System.AreaPath",
        "iterationpath": "System.IterationPath",
        "iteration": "System.IterationPath",
        "sprint": "System.IterationPath",
        "description": "System.Description",
        "desc": "System.Description",
        "tags": "System.Tags",
        "tag": "System.Tags",
        "labels": "System.Tags",
        "automationstatus": "Microsoft.VSTS.TCM.AutomationStatus",
        "automation": "Microsoft.VSTS.TCM.AutomationStatus",
        "automated": "Microsoft.VSTS.TCM.AutomationStatus",
    }
)


@dataclass(frozen=True)
class SynonymMatch:
    reference_name: str
    confidence: int
    reason: MatchReason


class SynonymTable:
    """Read-only lookup from normalized header terms to reference names."""

    DIRECT_CONFIDENCE = 100
    SINGULAR_CONFIDENCE = 95

    def __init__(self, synonyms: Optional[Mapping[str, str]] = None):
        source = DEFAULT_SYNONYMS if synonyms is None else synonyms
        # Keys are normalized so callers may pass "Area Path" or "area_path"
        self._table: Mapping[str, str] = MappingProxyType(
            {normalize(term): ref for term, ref in source.items()}
        )

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, term: str) -> bool:
        return normalize(term) in self._table

    def lookup(self, header: str) -> Optional[SynonymMatch]:
        """
        Look up a header, exact normalized form first, then its singular form.

        Returns:
            SynonymMatch, or None if neither form is a known term
        """
        norm = normalize(header)
        if not norm:
            return None

        ref = self._table.get(norm)
        if ref is not None:
            return SynonymMatch(ref, self.DIRECT_CONFIDENCE, MatchReason.DIRECT_SYNONYM)

        singular = singularize(norm)
        if singular != norm:
            ref = self._table.get(singular)
            if ref is not None:
                return SynonymMatch(ref, self.SINGULAR_CONFIDENCE, MatchReason.SINGULAR_SYNONYM)

        return None


def curated_field_for(reference_name: str) -> Optional[CuratedField]:
    """Return the curated field for a reference name, matched case-insensitively."""
    return _CURATED_BY_REFERENCE.get(reference_name.strip().lower())


_CURATED_BY_REFERENCE: Mapping[str, CuratedField] = MappingProxyType(
    {
        **{f.reference_name.lower(): f for f in CURATED_FIELDS},
        # Legacy spellings seen in hand-written mappings
        "system.area path": CURATED_FIELDS[4],
        "system.iteration path": CURATED_FIELDS[5],
    }
)
