"""
Word-set similarity for requirement descriptions.

Words are case-folded and split on whitespace only; punctuation stays
attached ("knot." and "knot" are different words).
"""

from __future__ import annotations

from typing import FrozenSet


def word_set(text: str) -> FrozenSet[str]:
    """Case-folded, whitespace-tokenized set of words in ``text``."""
    return frozenset((text or "").casefold().split())


def jaccard_similarity(a: str, b: str) -> float:
    """
    |A ∩ B| / |A ∪ B| over the word sets of two descriptions.

    Returns 0.0 when both descriptions are empty.

    Example:
        >>> jaccard_similarity("tie a knot", "tie a bowline knot")
        0.75
    """
    return jaccard_of_sets(word_set(a), word_set(b))


def jaccard_of_sets(words_a: FrozenSet[str], words_b: FrozenSet[str]) -> float:
    union = len(words_a | words_b)
    if union == 0:
        return 0.0
    return len(words_a & words_b) / union
