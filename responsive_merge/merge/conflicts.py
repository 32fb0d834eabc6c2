"""
Detection of mutually exclusive or dimensionally linked style conflicts.

For every element matched in both the medium and narrow trees, each
conflict-checked family of the family table is compared across the three
variants. Conflicts are diagnostic; the style merger resolves them.
"""

from typing import Any, Dict, List, Optional, Sequence

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.tokens import EXCLUSIVE, FAMILIES, StyleFamily, TokenParser
from responsive_merge.models import ConflictRecord, Variant
from responsive_merge.utils.merge_logger import LogLevel, get_logger


def exclusive_value(tokens: Sequence[str], family: StyleFamily) -> Optional[str]:
    """First unscoped token belonging to an enumerated group."""
    for token in tokens:
        if token in family.values:
            return token
    return None


def pattern_values(tokens: Sequence[str], family: StyleFamily, parser: TokenParser) -> List[str]:
    """All tokens (scoped ones included) whose base matches the family pattern."""
    return [token for token in tokens if family.matches(parser.base_of(token))]


def detect_conflicts_for_element(
    element_key: str,
    wide_tokens: Sequence[str],
    medium_tokens: Sequence[str],
    narrow_tokens: Sequence[str],
    parser: TokenParser,
) -> List[ConflictRecord]:
    """
    Compare the conflict-checked families of one matched element.

    Args:
        element_key: Identity or positional path key of the element
        wide_tokens: Wide style tokens
        medium_tokens: Medium style tokens
        narrow_tokens: Narrow style tokens
        parser: Token parser for the configured scope prefixes

    Returns:
        One ConflictRecord per family whose values differ
    """
    conflicts = []

    for family in FAMILIES:
        if not family.conflict_checked:
            continue

        if family.kind == EXCLUSIVE:
            values = [exclusive_value(tokens, family) for tokens in (wide_tokens, medium_tokens, narrow_tokens)]
            if not any(values):
                continue
            if values[0] != values[1] or values[1] != values[2]:
                conflicts.append(ConflictRecord(
                    element_key=element_key,
                    group=family.name,
                    kind=family.kind,
                    wide_value=values[0],
                    medium_value=values[1],
                    narrow_value=values[2],
                ))
        else:
            lists = [pattern_values(tokens, family, parser) for tokens in (wide_tokens, medium_tokens, narrow_tokens)]
            if not any(lists):
                continue
            joined = [" ".join(values) for values in lists]
            if joined[0] != joined[1] or joined[1] != joined[2]:
                conflicts.append(ConflictRecord(
                    element_key=element_key,
                    group=family.name,
                    kind=family.kind,
                    wide_value=lists[0],
                    medium_value=lists[1],
                    narrow_value=lists[2],
                ))

    return conflicts


def detect_class_conflicts(context: MergeContext) -> Dict[str, Any]:
    """
    Record conflicts for every element matched in both narrower variants.

    Args:
        context: Merge context with a populated match index

    Returns:
        Stats fragment for this pass
    """
    logger = get_logger()
    total = 0
    matched_by_identity = 0
    matched_by_position = 0

    for record in context.matches:
        medium = context.variant_element(record, Variant.MEDIUM)
        narrow = context.variant_element(record, Variant.NARROW)
        if medium is None or narrow is None:
            continue

        if record.identity:
            matched_by_identity += 1
        else:
            matched_by_position += 1

        wide = context.index(Variant.WIDE).element(record.wide_position)
        conflicts = detect_conflicts_for_element(
            record.wide_key, wide.tokens, medium.tokens, narrow.tokens, context.parser
        )
        if not conflicts:
            continue

        context.conflicts.setdefault(record.wide_key, []).extend(conflicts)
        total += len(conflicts)
        logger.log_event(
            "detect-class-conflicts",
            f"{record.wide_key}: {', '.join(c.group for c in conflicts)}",
            level=LogLevel.DEBUG,
            sample_id=context.sample_id,
        )

    context.stats.conflicts_resolved = total
    context.stats.elements_with_conflicts = len(context.conflicts)

    return {
        "elements_with_conflicts": len(context.conflicts),
        "total_conflicts": total,
        "matched_by_identity": matched_by_identity,
        "matched_by_position": matched_by_position,
    }
