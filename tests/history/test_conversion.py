"""
Tests for turning parsed history into requirement and progress records.
"""

from advancement_toolkit.core.models import Legacy, ProgressStatus
from advancement_toolkit.history import (
    ParsedMeritBadge,
    ParsedRankProgress,
    ParsedRankRequirement,
    find_partial_badge,
    partial_badge_completed_numbers,
    rank_records,
)
from advancement_toolkit.structuring import build_requirement_tree, forest_stats


def make_rank(code, *rows):
    return ParsedRankProgress(
        rank_code=code,
        rank_name=code.title(),
        requirements=[ParsedRankRequirement(number, desc, date) for number, desc, date in rows],
    )


def test_rank_records_then_ids_prefixed_and_ordered():
    # Arrange
    rank = make_rank(
        "scout",
        ("1a", "Repeat the Scout Oath", "2025-03-18"),
        ("1b", "Explain Scout spirit", None),
    )

    # Act
    requirements, progress = rank_records(rank)

    # Assert
    assert [r.id for r in requirements] == ["scout:1a", "scout:1b"]
    assert [r.display_order for r in requirements] == [0, 1]
    assert requirements[0].parent_requirement_id is None


def test_rank_records_then_progress_only_for_dated_requirements():
    rank = make_rank(
        "scout",
        ("1a", "Repeat the Scout Oath", "2025-03-18"),
        ("1b", "Explain Scout spirit", None),
    )

    _, progress = rank_records(rank)

    assert len(progress) == 1
    record = progress[0]
    assert record.requirement_id == "scout:1a"
    assert record.status is ProgressStatus.COMPLETED
    assert record.completed_at == "2025-03-18"
    assert record.completed_by == "scoutbook-import"


def test_rank_records_when_numbers_repeat_then_suffixed_in_order():
    rank = make_rank(
        "star",
        ("1", "Be active", "2025-01-02"),
        ("MB", "Camping", "2025-07-04"),
        ("MB", "Cooking", None),
    )

    requirements, _ = rank_records(rank, id_prefix="2024-star")

    assert [r.id for r in requirements] == ["2024-star:1", "2024-star:MB#1", "2024-star:MB#2"]


def test_rank_records_then_usable_as_legacy_tree():
    rank = make_rank(
        "scout",
        ("1a", "Repeat the Scout Oath", "2025-03-18"),
        ("1b", "Explain Scout spirit", "2025-03-18"),
        ("2", "Describe the uniform", None),
    )
    requirements, progress = rank_records(rank)

    forest = build_requirement_tree(Legacy(tuple(requirements)), progress)

    assert [root.id for root in forest] == ["scout:1a", "scout:2"]
    assert [child.id for child in forest[0].children] == ["scout:1b"]
    stats = forest_stats(forest)
    assert (stats.completed, stats.total) == (2, 3)


def test_partial_badge_numbers_and_lookup():
    cooking = ParsedMeritBadge("Cooking", "cooking", completed_requirements=["1", "2a", "1"])
    first_aid = ParsedMeritBadge("First Aid", "first_aid")

    assert partial_badge_completed_numbers(cooking) == frozenset({"1", "2a"})
    assert find_partial_badge([cooking, first_aid], "first_aid") is first_aid
    assert find_partial_badge([cooking], "swimming") is None
