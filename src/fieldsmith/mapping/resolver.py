"""Ambiguity handling for header -> field suggestions."""

import logging
import re
from collections import defaultdict
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from ..config import settings
from .models import (
    FieldCandidate,
    FieldDefinition,
    MappingSuggestion,
    MappingSuggestionResult,
    MatchReason,
    TITLE_REFERENCE_NAME,
)
from .normalize import normalize
from .scorer import FuzzyScorer
from .synonyms import SynonymTable

logger = logging.getLogger(__name__)

_TITLE_LIKE_RE = re.compile(r"title|name|summary|test case", re.IGNORECASE)
FALLBACK_TITLE_CONFIDENCE = 60


class MappingPolicy(BaseModel):
    """Thresholds deciding when a suggestion is applied automatically."""

    ambiguity_gap: int = Field(default_factory=lambda: settings.ambiguity_gap, ge=0)
    auto_accept_score: int = Field(default_factory=lambda: settings.auto_accept_score, ge=0, le=100)
    max_candidates: int = Field(default_factory=lambda: settings.max_candidates, ge=1)


class AmbiguityResolver:
    """Turns scored candidates into a suggestion and decides whether to apply it."""

    def __init__(self, policy: Optional[MappingPolicy] = None):
        self.policy = policy or MappingPolicy()

    def resolve(self, header: str, candidates: list[FieldCandidate]) -> MappingSuggestion:
        """
        Pick the best candidate for a header.

        Args:
            header: The raw header text
            candidates: Scored candidates, best first

        Returns:
            MappingSuggestion; ambiguous when another candidate is within the gap
        """
        if not candidates:
            return MappingSuggestion(header=header)

        best = candidates[0]
        close = [c for c in candidates if best.score - c.score <= self.policy.ambiguity_gap]

        if len(close) > 1:
            logger.warning(
                f"Header '{header}' is ambiguous between {len(close)} fields "
                f"(best {best.reference_name} at {best.score})"
            )
            return MappingSuggestion(
                header=header,
                suggested_field=best.reference_name,
                confidence=best.score,
                candidates=close[: self.policy.max_candidates],
                reason=best.reason,
                ambiguous=True,
            )

        return MappingSuggestion(
            header=header,
            suggested_field=best.reference_name,
            confidence=best.score,
            candidates=[best],
            reason=best.reason,
        )

    def should_apply(self, suggestion: MappingSuggestion) -> bool:
        """Whether a suggestion goes into the resolved mapping without review."""
        if suggestion.suggested_field is None:
            return False
        if suggestion.ambiguous:
            return suggestion.confidence >= self.policy.auto_accept_score
        return True


def suggest_mapping(
    headers: Iterable[str],
    catalog: Iterable[FieldDefinition],
    synonyms: Optional[SynonymTable] = None,
    policy: Optional[MappingPolicy] = None,
    title_fallback: Optional[bool] = None,
) -> MappingSuggestionResult:
    """
    Suggest a target field for every header.

    Well-known headers are resolved by the synonym table; everything else is
    scored against the catalog and run through the ambiguity policy.

    Args:
        headers: Header texts from the import file
        catalog: Field definitions of the target work item type
        synonyms: Synonym table (default table if not provided)
        policy: Ambiguity thresholds (from settings if not provided)
        title_fallback: Apply the title fallback heuristic (from settings if None)

    Returns:
        MappingSuggestionResult with one suggestion per header
    """
    headers = list(headers)
    synonyms = SynonymTable() if synonyms is None else synonyms
    resolver = AmbiguityResolver(policy)
    scorer = FuzzyScorer(catalog)

    suggestions: list[MappingSuggestion] = []
    resolved: dict[str, str] = {}
    seen: set[str] = set()

    for header in headers:
        duplicate = header in seen
        if duplicate:
            logger.warning(f"Duplicate header '{header}'; only the first column is mapped")
        seen.add(header)

        match = synonyms.lookup(header)
        if match is not None:
            suggestion = MappingSuggestion(
                header=header,
                suggested_field=match.reference_name,
                confidence=match.confidence,
                reason=match.reason,
            )
        else:
            suggestion = resolver.resolve(header, scorer.score(header))

        suggestions.append(suggestion)
        if not duplicate and resolver.should_apply(suggestion):
            resolved[header] = suggestion.suggested_field

    if title_fallback is None:
        title_fallback = settings.title_fallback_heuristic
    if title_fallback:
        _apply_title_fallback(headers, suggestions, resolved)

    _log_shared_targets(resolved)

    unmapped = [s.header for s in suggestions if s.suggested_field is None]
    logger.info(
        f"Suggested mapping for {len(headers)} headers: {len(resolved)} resolved, "
        f"{len(unmapped)} unmapped, {sum(1 for s in suggestions if s.ambiguous)} ambiguous"
    )

    return MappingSuggestionResult(
        headers=headers,
        suggestions=suggestions,
        resolved_mapping=resolved,
        unmapped_headers=unmapped,
    )


def _apply_title_fallback(
    headers: list[str],
    suggestions: list[MappingSuggestion],
    resolved: dict[str, str],
) -> None:
    if any(ref.lower() == TITLE_REFERENCE_NAME.lower() for ref in resolved.values()):
        return

    header = next((h for h in headers if normalize(h) and _TITLE_LIKE_RE.search(h)), None)
    if header is None:
        return

    for i, suggestion in enumerate(suggestions):
        if suggestion.header == header:
            suggestions[i] = MappingSuggestion(
                header=header,
                suggested_field=TITLE_REFERENCE_NAME,
                confidence=FALLBACK_TITLE_CONFIDENCE,
                candidates=suggestion.candidates,
                reason=MatchReason.FALLBACK_TITLE,
            )
            break
    resolved[header] = TITLE_REFERENCE_NAME
    logger.info(f"No title mapping found, falling back to header '{header}'")


def _log_shared_targets(resolved: dict[str, str]) -> None:
    by_target: dict[str, list[str]] = defaultdict(list)
    for header, ref in resolved.items():
        by_target[ref].append(header)
    for ref, sources in by_target.items():
        if len(sources) > 1:
            logger.warning(f"Multiple headers map to '{ref}': {', '.join(sources)}")
