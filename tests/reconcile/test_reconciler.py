"""
Unit Tests for Cross-Version Reconciliation

Tests match precedence (number, external key, description), the strict
similarity threshold, tie-breaking, determinism and the review helpers.
"""

import pytest

from advancement_toolkit.core.models import MatchConfidence, Requirement
from advancement_toolkit.core.utils import mappings_to_json
from advancement_toolkit.reconcile import (
    ReconcileConfig,
    accepted_targets,
    apply_manual_mapping,
    reconcile_requirements,
    summarize_mappings,
)


def words(start, stop):
    return " ".join(f"w{i}" for i in range(start, stop))


@pytest.fixture
def bowline_versions():
    source = [
        Requirement("s3", "3", "Demonstrate tying a bowline knot"),
        Requirement("s4", "4", "Explain the buddy system"),
    ]
    target = [
        Requirement("t3b", "3b", "Demonstrate tying a bowline knot correctly"),
        Requirement("t5", "5", "Explain map reading"),
    ]
    return source, target


class TestMatching:
    """Tests for the match cascade."""

    def test_reconcile_when_description_close_then_likely(self, bowline_versions):
        """A reworded requirement under a new number is a likely match."""
        source, target = bowline_versions

        mappings = reconcile_requirements(source, target, {"3"})

        assert len(mappings) == 1
        mapping = mappings[0]
        assert mapping.confidence is MatchConfidence.LIKELY
        assert mapping.target_number == "3b"
        assert mapping.target_requirement_id == "t3b"
        assert mapping.score == pytest.approx(5 / 6)

    def test_reconcile_when_description_unrelated_then_none(self, bowline_versions):
        source, target = bowline_versions

        mapping = reconcile_requirements(source, target, {"4"})[0]

        assert mapping.confidence is MatchConfidence.NONE
        assert mapping.target_requirement_id is None
        assert mapping.target_number is None

    def test_reconcile_when_same_number_then_exact_even_if_text_differs(self):
        source = [Requirement("s1", "1", "Old wording")]
        target = [Requirement("t1", "1", "Completely new wording here")]

        mapping = reconcile_requirements(source, target, {"1"})[0]

        assert mapping.confidence is MatchConfidence.EXACT
        assert mapping.target_requirement_id == "t1"
        assert mapping.score is None

    def test_reconcile_when_external_number_shared_then_exact(self):
        source = [Requirement("s", "2a", "Pitch a tent", external_number="SB-17")]
        target = [
            Requirement("t1", "3", "Pitch a tent"),
            Requirement("t2", "4c", "Set up a shelter", external_number="SB-17"),
        ]

        mapping = reconcile_requirements(source, target, {"2a"})[0]

        assert mapping.confidence is MatchConfidence.EXACT
        assert mapping.target_requirement_id == "t2"

    def test_reconcile_when_external_matching_disabled_then_falls_back_to_text(self):
        source = [Requirement("s", "2a", "Pitch a tent", external_number="SB-17")]
        target = [
            Requirement("t1", "3", "Pitch a tent"),
            Requirement("t2", "4c", "Set up a shelter", external_number="SB-17"),
        ]
        config = ReconcileConfig(match_external_numbers=False)

        mapping = reconcile_requirements(source, target, {"2a"}, config)[0]

        assert mapping.confidence is MatchConfidence.LIKELY
        assert mapping.target_requirement_id == "t1"

    def test_reconcile_when_not_completed_then_not_mapped(self, bowline_versions):
        source, target = bowline_versions
        assert reconcile_requirements(source, target, set()) == []

    def test_reconcile_when_completed_then_source_order_kept(self, bowline_versions):
        source, target = bowline_versions

        mappings = reconcile_requirements(source, target, {"4", "3"})

        assert [m.source_number for m in mappings] == ["3", "4"]


class TestThreshold:
    """Tests for the strict similarity threshold."""

    def test_reconcile_when_similarity_exactly_half_then_rejected(self):
        """3 shared words out of 6 is 0.5, which must not match."""
        source = [Requirement("s", "1", "tie a knot")]
        target = [Requirement("t", "9", "tie a knot quickly now tight")]

        mapping = reconcile_requirements(source, target, {"1"})[0]

        assert mapping.confidence is MatchConfidence.NONE

    def test_reconcile_when_similarity_just_above_half_then_likely(self):
        """51 shared words out of 100 is 0.51, which matches."""
        source = [Requirement("s", "1", words(0, 76))]
        target = [Requirement("t", "9", words(25, 100))]

        mapping = reconcile_requirements(source, target, {"1"})[0]

        assert mapping.confidence is MatchConfidence.LIKELY
        assert mapping.score == pytest.approx(0.51)

    def test_reconcile_when_threshold_raised_then_close_match_rejected(self, bowline_versions):
        source, target = bowline_versions

        mapping = reconcile_requirements(source, target, {"3"}, ReconcileConfig(likely_similarity=0.9))[0]

        assert mapping.confidence is MatchConfidence.NONE


class TestEdgeCases:
    """Tests for empty inputs, ties and determinism."""

    def test_reconcile_when_target_empty_then_every_completed_is_none(self, bowline_versions):
        source, _ = bowline_versions

        mappings = reconcile_requirements(source, [], {"3", "4"})

        assert [m.confidence for m in mappings] == [MatchConfidence.NONE, MatchConfidence.NONE]

    def test_reconcile_when_source_empty_then_empty(self, bowline_versions):
        _, target = bowline_versions
        assert reconcile_requirements([], target, {"3"}) == []

    def test_reconcile_when_scores_tie_then_first_target_wins(self):
        source = [Requirement("s", "1", "build a fire safely")]
        target = [
            Requirement("first", "7", "build a fire safely today"),
            Requirement("second", "8", "build a fire safely outdoors"),
        ]

        mapping = reconcile_requirements(source, target, {"1"})[0]

        assert mapping.target_requirement_id == "first"

    def test_reconcile_when_repeated_then_byte_identical_output(self, bowline_versions):
        source, target = bowline_versions

        first = mappings_to_json(reconcile_requirements(source, target, {"3", "4"}))
        second = mappings_to_json(reconcile_requirements(source, target, {"4", "3"}))

        assert first == second


class TestReviewHelpers:
    """Tests for manual overrides and summaries."""

    def test_apply_manual_when_target_chosen_then_manual(self, bowline_versions):
        source, target = bowline_versions
        mappings = reconcile_requirements(source, target, {"3", "4"})

        updated = apply_manual_mapping(mappings, "4", target[1])

        assert updated[1].confidence is MatchConfidence.MANUAL
        assert updated[1].target_requirement_id == "t5"
        assert updated[0] == mappings[0]
        assert mappings[1].confidence is MatchConfidence.NONE

    def test_apply_manual_when_cleared_then_none(self, bowline_versions):
        source, target = bowline_versions
        mappings = reconcile_requirements(source, target, {"3"})

        updated = apply_manual_mapping(mappings, "3", None)

        assert updated[0].confidence is MatchConfidence.NONE
        assert updated[0].score is None

    def test_apply_manual_when_unknown_number_then_raises_key_error(self, bowline_versions):
        source, target = bowline_versions
        mappings = reconcile_requirements(source, target, {"3"})

        with pytest.raises(KeyError):
            apply_manual_mapping(mappings, "99", target[0])

    def test_summarize_then_counts_per_confidence(self, bowline_versions):
        source, target = bowline_versions
        mappings = reconcile_requirements(source, target, {"3", "4"})

        summary = summarize_mappings(mappings)

        assert (summary.exact, summary.likely, summary.manual, summary.none) == (0, 1, 0, 1)
        assert summary.total == 2
        assert summary.needs_review == 2

    def test_accepted_targets_then_only_mapped_requirements(self, bowline_versions):
        source, target = bowline_versions
        mappings = reconcile_requirements(source, target, {"3", "4"})

        assert accepted_targets(mappings) == {"3": "t3b"}
