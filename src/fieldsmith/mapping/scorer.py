"""Heuristic scoring of headers against a field catalog."""

from dataclasses import dataclass
from typing import Iterable, Optional

from .models import FieldCandidate, FieldDefinition, MatchReason
from .normalize import edit_distance, normalize, singularize


EXACT_NAME_SCORE = 100
EXACT_TAIL_SCORE = 95
SINGULAR_SCORE = 90
NAME_SUBSTRING_SCORE = 80
TAIL_SUBSTRING_SCORE = 78
EDIT_DISTANCE_SCORES = {1: 75, 2: 70}


@dataclass(frozen=True)
class _IndexedField:
    field: FieldDefinition
    norm_name: str
    norm_tail: str


def _contains_either_way(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return a in b or b in a


class FuzzyScorer:
    """
    Scores a header against every field of a catalog.

    Each field gets the maximum of several independent signals (exact name,
    exact reference tail, singular form, substring, edit distance). Fields
    where no signal fires are left out instead of scoring 0.
    """

    def __init__(self, catalog: Iterable[FieldDefinition]):
        self._fields = [
            _IndexedField(field=f, norm_name=normalize(f.display_name), norm_tail=normalize(f.tail))
            for f in catalog
        ]

    def __len__(self) -> int:
        return len(self._fields)

    def score(self, header: str) -> list[FieldCandidate]:
        """
        Score a header against the catalog.

        Returns:
            Candidates sorted by descending score, ties kept in catalog order
        """
        norm_header = normalize(header)
        if not norm_header:
            return []
        singular = singularize(norm_header)

        candidates = []
        for entry in self._fields:
            signal = self._best_signal(norm_header, singular, entry)
            if signal is None:
                continue
            score, reason = signal
            candidates.append(
                FieldCandidate(
                    reference_name=entry.field.reference_name,
                    display_name=entry.field.display_name,
                    score=score,
                    reason=reason,
                )
            )

        # sorted() is stable, so equal scores stay in catalog order
        return sorted(candidates, key=lambda c: -c.score)

    @staticmethod
    def _best_signal(
        norm_header: str, singular: str, entry: _IndexedField
    ) -> Optional[tuple[int, MatchReason]]:
        # Signals are checked strongest first; the first hit is the maximum
        if norm_header == entry.norm_name:
            return EXACT_NAME_SCORE, MatchReason.EXACT_NAME
        if norm_header == entry.norm_tail:
            return EXACT_TAIL_SCORE, MatchReason.EXACT_TAIL
        if singular == entry.norm_name:
            return SINGULAR_SCORE, MatchReason.EXACT_NAME
        if singular == entry.norm_tail:
            return SINGULAR_SCORE, MatchReason.EXACT_TAIL
        if _contains_either_way(norm_header, entry.norm_name):
            return NAME_SUBSTRING_SCORE, MatchReason.SUBSTRING_MATCH
        if _contains_either_way(norm_header, entry.norm_tail):
            return TAIL_SUBSTRING_SCORE, MatchReason.SUBSTRING_MATCH

        distances = [edit_distance(norm_header, s) for s in (entry.norm_name, entry.norm_tail) if s]
        if not distances:
            return None
        score = EDIT_DISTANCE_SCORES.get(min(distances))
        if score is not None:
            return score, MatchReason.EDIT_DISTANCE
        return None
