"""
Structural similarity between style-token lists.

Similarity is the higher of two Jaccard indices: one over the full token sets
and one over the "core" tokens only (dimensional families such as width,
height, gap, padding and margin removed), so elements that differ only in
size or spacing across breakpoints still score as similar.
"""

from typing import Iterable, Tuple

from responsive_merge.merge.tokens import is_dimensional


def jaccard(first: Iterable[str], second: Iterable[str]) -> float:
    """
    Jaccard index of two token collections.

    Args:
        first: First token collection
        second: Second token collection

    Returns:
        |intersection| / |union|, 1.0 when both are empty
    """
    set_a, set_b = set(first), set(second)
    union = set_a | set_b
    if not union:
        return 1.0
    return len(set_a & set_b) / len(union)


def core_tokens(tokens: Iterable[str]) -> Tuple[str, ...]:
    """Tokens that are not dimensional (size/spacing)."""
    return tuple(token for token in tokens if not is_dimensional(token))


def similarity_scores(first: Iterable[str], second: Iterable[str]) -> Tuple[float, float]:
    """
    Compute the full-list and core-only Jaccard scores.

    Args:
        first: Token list of the first element
        second: Token list of the second element

    Returns:
        Tuple of (full_score, core_score). When neither list has core tokens
        the core score equals the full score.
    """
    set_a, set_b = set(first), set(second)

    if not set_a and not set_b:
        return 1.0, 1.0
    if not set_a or not set_b:
        return 0.0, 0.0

    full_score = jaccard(set_a, set_b)

    core_a, core_b = core_tokens(set_a), core_tokens(set_b)
    if not core_a and not core_b:
        return full_score, full_score

    return full_score, jaccard(core_a, core_b)


def structural_similarity(first: Iterable[str], second: Iterable[str]) -> float:
    """Maximum of the full-list and core-only Jaccard scores."""
    full_score, core_score = similarity_scores(first, second)
    return max(full_score, core_score)
