"""Tests for ambiguity handling and mapping suggestions."""

import logging

import pytest

from fieldsmith.mapping import (
    AmbiguityResolver,
    FieldCandidate,
    FieldDefinition,
    MappingPolicy,
    MappingSuggestion,
    MatchReason,
    SynonymTable,
    suggest_mapping,
)


def _candidate(reference_name: str, score: int) -> FieldCandidate:
    return FieldCandidate(
        reference_name=reference_name,
        display_name=reference_name.rsplit(".", 1)[-1],
        score=score,
        reason=MatchReason.SUBSTRING_MATCH,
    )


class TestAmbiguityResolver:
    """Tests for AmbiguityResolver."""

    def test_no_candidates(self):
        resolver = AmbiguityResolver()
        suggestion = resolver.resolve("Mystery", [])

        assert suggestion.suggested_field is None
        assert suggestion.confidence == 0
        assert suggestion.reason == MatchReason.NO_MATCH
        assert resolver.should_apply(suggestion) is False

    def test_single_candidate_is_accepted(self):
        resolver = AmbiguityResolver()
        suggestion = resolver.resolve("Review", [_candidate("Custom.ReviewDate", 80)])

        assert suggestion.suggested_field == "Custom.ReviewDate"
        assert suggestion.ambiguous is False
        assert resolver.should_apply(suggestion) is True

    def test_clear_winner_is_accepted(self):
        """Test a best score more than 5 points ahead is unambiguous."""
        resolver = AmbiguityResolver()
        suggestion = resolver.resolve(
            "Review", [_candidate("Custom.A", 80), _candidate("Custom.B", 74)]
        )

        assert suggestion.ambiguous is False
        assert resolver.should_apply(suggestion) is True

    def test_close_low_scores_are_not_applied(self):
        """Test two candidates within 5 points below 90 need review."""
        resolver = AmbiguityResolver()
        suggestion = resolver.resolve(
            "Review", [_candidate("Custom.A", 80), _candidate("Custom.B", 75)]
        )

        assert suggestion.ambiguous is True
        assert suggestion.suggested_field == "Custom.A"
        assert [c.reference_name for c in suggestion.candidates] == ["Custom.A", "Custom.B"]
        assert resolver.should_apply(suggestion) is False

    def test_close_high_scores_are_applied(self):
        resolver = AmbiguityResolver()
        suggestion = resolver.resolve(
            "Owners", [_candidate("Custom.A", 95), _candidate("Custom.B", 90)]
        )

        assert suggestion.ambiguous is True
        assert resolver.should_apply(suggestion) is True

    def test_candidates_are_capped(self):
        resolver = AmbiguityResolver()
        candidates = [_candidate(f"Custom.F{i}", 80) for i in range(8)]
        suggestion = resolver.resolve("Field", candidates)

        assert len(suggestion.candidates) == 5

    def test_policy_is_configurable(self):
        """Test thresholds come from the policy, not hard-coded values."""
        resolver = AmbiguityResolver(
            MappingPolicy(ambiguity_gap=10, auto_accept_score=75, max_candidates=2)
        )
        candidates = [
            _candidate("Custom.A", 80),
            _candidate("Custom.B", 72),
            _candidate("Custom.C", 71),
        ]
        suggestion = resolver.resolve("Field", candidates)

        assert suggestion.ambiguous is True
        assert len(suggestion.candidates) == 2
        assert resolver.should_apply(suggestion) is True


class TestMappingSuggestion:
    """Tests for the MappingSuggestion model."""

    def test_confidence_requires_field(self):
        with pytest.raises(ValueError):
            MappingSuggestion(header="X", confidence=50)

    def test_field_requires_confidence(self):
        with pytest.raises(ValueError):
            MappingSuggestion(header="X", suggested_field="System.Title", confidence=0)

    def test_confidence_upper_bound(self):
        with pytest.raises(ValueError):
            MappingSuggestion(header="X", suggested_field="System.Title", confidence=101)


class TestSuggestMapping:
    """Tests for suggest_mapping()."""

    def test_basic_scenario(self, basic_catalog):
        """Test title, steps and priority headers all resolve."""
        result = suggest_mapping(["Test Case Title", "Steps", "Pri"], basic_catalog)

        assert result.resolved_mapping == {
            "Test Case Title": "System.Title",
            "Steps": "Microsoft.VSTS.TCM.Steps",
            "Pri": "Microsoft.VSTS.Common.Priority",
        }
        assert result.unmapped_headers == []
        assert all(s.reason == MatchReason.DIRECT_SYNONYM for s in result.suggestions)

    def test_custom_field_exact_name(self, custom_catalog):
        result = suggest_mapping(["Risk Level"], custom_catalog)
        [suggestion] = result.suggestions

        assert suggestion.suggested_field == "Custom.RiskLevel"
        assert suggestion.confidence == 100
        assert suggestion.reason == MatchReason.EXACT_NAME
        assert result.resolved_mapping == {"Risk Level": "Custom.RiskLevel"}

    def test_synonyms_ignore_catalog(self):
        """Test synonym hits win even when the catalog suggests otherwise."""
        catalog = [FieldDefinition(reference_name="Custom.Title", display_name="Title")]
        result = suggest_mapping(["Title"], catalog)
        [suggestion] = result.suggestions

        assert suggestion.suggested_field == "System.Title"
        assert suggestion.confidence == 100
        assert suggestion.reason == MatchReason.DIRECT_SYNONYM

    def test_synonyms_work_with_empty_catalog(self):
        result = suggest_mapping(["Area", "Sprint"], [])

        assert result.resolved_mapping == {
            "Area": "System.AreaPath",
            "Sprint": "System.IterationPath",
        }

    def test_ambiguous_header_left_unmapped(self, custom_catalog):
        result = suggest_mapping(["Review"], custom_catalog)
        [suggestion] = result.suggestions

        assert suggestion.ambiguous is True
        assert suggestion.suggested_field == "Custom.ReviewDate"
        assert suggestion.confidence == 80
        assert [c.reference_name for c in suggestion.candidates] == [
            "Custom.ReviewDate",
            "Custom.ReviewDue",
        ]
        assert "Review" not in result.resolved_mapping
        assert "Review" not in result.unmapped_headers
        assert result.pending_review == [suggestion]

    def test_ambiguous_high_confidence_is_applied(self):
        catalog = [
            FieldDefinition(reference_name="Custom.TeamOwners", display_name="Owners"),
            FieldDefinition(reference_name="Custom.Owners", display_name="Owner Group"),
        ]
        result = suggest_mapping(["Owners"], catalog)
        [suggestion] = result.suggestions

        assert suggestion.ambiguous is True
        assert suggestion.confidence == 100
        assert result.resolved_mapping == {"Owners": "Custom.TeamOwners"}

    def test_unmatched_header(self, custom_catalog):
        result = suggest_mapping(["Zebra Crossing", "###"], custom_catalog)

        assert result.unmapped_headers == ["Zebra Crossing", "###"]
        assert result.resolved_mapping == {}
        for suggestion in result.suggestions:
            assert suggestion.confidence == 0
            assert suggestion.reason == MatchReason.NO_MATCH

    def test_confidence_bounds_hold(self, custom_catalog):
        headers = ["Title", "Review", "Severty", "Risk Levels", "Nothing Here", "Steps"]
        result = suggest_mapping(headers, custom_catalog)

        assert len(result.suggestions) == len(headers)
        for suggestion in result.suggestions:
            assert 0 <= suggestion.confidence <= 100
            assert (suggestion.confidence == 0) == (suggestion.suggested_field is None)

    def test_duplicate_headers_get_one_suggestion_each(self, basic_catalog, caplog):
        """Test every header gets a suggestion while only the first is resolved."""
        result = suggest_mapping(["Title", "Title"], basic_catalog)

        assert len(result.suggestions) == len(result.headers) == 2
        assert [s.suggested_field for s in result.suggestions] == ["System.Title"] * 2
        assert result.resolved_mapping == {"Title": "System.Title"}
        assert "Duplicate header 'Title'" in caplog.text

    def test_empty_synonym_table_disables_synonyms(self):
        """Test an empty table is used as given, so headers go to the catalog."""
        catalog = [FieldDefinition(reference_name="Custom.Title", display_name="Title")]

        result = suggest_mapping(["Title"], catalog, synonyms=SynonymTable({}))

        [suggestion] = result.suggestions
        assert suggestion.suggested_field == "Custom.Title"
        assert suggestion.reason == MatchReason.EXACT_NAME
        assert result.resolved_mapping == {"Title": "Custom.Title"}

    def test_ambiguous_header_logged_as_warning(self, custom_catalog, caplog):
        with caplog.at_level(logging.WARNING, logger="fieldsmith.mapping.resolver"):
            suggest_mapping(["Review"], custom_catalog)

        assert any(
            r.levelno == logging.WARNING and "'Review' is ambiguous" in r.getMessage()
            for r in caplog.records
        )

    def test_shared_target_is_kept_and_logged(self, basic_catalog, caplog):
        """Test two headers resolving to one field are both kept."""
        result = suggest_mapping(["Title", "Name"], basic_catalog)

        assert result.resolved_mapping == {"Title": "System.Title", "Name": "System.Title"}
        assert "Multiple headers map to 'System.Title'" in caplog.text

    def test_title_fallback_heuristic(self):
        catalog = [FieldDefinition(reference_name="Custom.Other", display_name="Other")]
        result = suggest_mapping(["Case Title Text", "Notes"], catalog, title_fallback=True)

        assert result.resolved_mapping["Case Title Text"] == "System.Title"
        suggestion = result.suggestions[0]
        assert suggestion.confidence == 60
        assert suggestion.reason == MatchReason.FALLBACK_TITLE

    def test_title_fallback_disabled(self):
        catalog = [FieldDefinition(reference_name="Custom.Other", display_name="Other")]
        result = suggest_mapping(["Case Title Text"], catalog, title_fallback=False)

        assert result.resolved_mapping == {}
