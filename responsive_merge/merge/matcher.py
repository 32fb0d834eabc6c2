"""
Cross-variant element matching.

Each wide element is paired with at most one element of the medium tree and
one of the narrow tree. Identity labels are authoritative; elements without
an identity fall back to their positional path key, accepted only when the
tags agree and the style tokens are structurally similar.
"""

from typing import Any, Dict, Optional, Tuple

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.similarity import structural_similarity
from responsive_merge.merge.tree_index import IndexedNode, TreeIndex
from responsive_merge.models import SCOPED_VARIANTS, MatchMethod, MatchRecord, Variant
from responsive_merge.utils.merge_logger import LogLevel, get_logger

# Reasons recorded for unmatched elements
IDENTITY_NOT_FOUND = "identity-not-found"
NO_POSITIONAL_CANDIDATE = "no-positional-candidate"
TAG_MISMATCH = "tag-mismatch"
BELOW_SIMILARITY = "below-similarity"

DEFAULT_SIMILARITY_THRESHOLD = 0.80

MatchOutcome = Tuple[Optional[IndexedNode], MatchMethod, Optional[float], Optional[str]]


def match_element(
    node: IndexedNode,
    target: TreeIndex,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD
) -> MatchOutcome:
    """
    Find the counterpart of a wide element in another variant tree.

    Args:
        node: Wide element (arena node)
        target: Index of the variant tree to search
        threshold: Minimum structural similarity for positional matches

    Returns:
        Tuple of (candidate or None, method, similarity or None, reason or None)
    """
    element = node.element

    if element.identity:
        candidate = target.find_identity(element.identity)
        if candidate is None:
            return None, MatchMethod.UNMATCHED, None, IDENTITY_NOT_FOUND
        return candidate, MatchMethod.BY_IDENTITY, None, None

    candidate = target.find_path(node.path_key)
    if candidate is None:
        return None, MatchMethod.UNMATCHED, None, NO_POSITIONAL_CANDIDATE

    if candidate.element.tag != element.tag:
        return None, MatchMethod.UNMATCHED, None, TAG_MISMATCH

    score = structural_similarity(element.tokens, candidate.element.tokens)
    if score < threshold:
        return None, MatchMethod.UNMATCHED, score, BELOW_SIMILARITY

    return candidate, MatchMethod.BY_POSITION, score, None


def match_elements(context: MergeContext) -> Dict[str, Any]:
    """
    Build the match index for every wide element.

    Populates context.matches (one frozen record per wide arena position)
    and the per-variant match counters.

    Args:
        context: Merge context

    Returns:
        Stats fragment for this pass
    """
    logger = get_logger()
    wide_index = context.index(Variant.WIDE)
    threshold = context.config.similarity_threshold
    counts = context.stats.matches

    records = []
    for node in wide_index:
        fields: Dict[str, Any] = {}
        for variant in SCOPED_VARIANTS:
            candidate, method, score, reason = match_element(node, context.index(variant), threshold)
            fields[f"{variant.value}_position"] = candidate.position if candidate else None
            fields[f"{variant.value}_method"] = method
            fields[f"{variant.value}_similarity"] = score
            fields[f"{variant.value}_reason"] = reason

            if method == MatchMethod.BY_IDENTITY:
                counts[variant.value]["by_identity"] += 1
            elif method == MatchMethod.BY_POSITION:
                counts[variant.value]["by_position"] += 1
            else:
                counts[variant.value]["unmatched"] += 1
                logger.log_event(
                    "match-elements",
                    f"{node.key} unmatched in {variant.value} ({reason})",
                    level=LogLevel.TRACE,
                    sample_id=context.sample_id,
                )

        records.append(MatchRecord(
            wide_key=node.key,
            wide_position=node.position,
            tag=node.element.tag,
            identity=node.element.identity,
            **fields
        ))

    context.matches = records
    context.stats.elements_processed = len(records)

    matched_both = sum(
        1 for record in records
        if record.is_matched(Variant.MEDIUM) and record.is_matched(Variant.NARROW)
    )

    return {
        "elements_processed": len(records),
        "matched_in_both": matched_both,
        "medium": dict(counts[Variant.MEDIUM.value]),
        "narrow": dict(counts[Variant.NARROW.value]),
    }
