"""
Desktop-first merge of style-token lists.

The wide tokens are kept as the unconditional base. For each narrower
variant the merger compares what that variant wants (its effective tokens)
with what the merged list already yields at that width, and appends the
difference as breakpoint-scoped tokens. Narrow is compared against the
result of the medium step, so overrides compose as a cascade.
"""

from typing import Any, Dict, List, Sequence, Tuple

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.tokens import FAMILIES, active_scopes, family_of, family_tokens
from responsive_merge.models import SCOPED_VARIANTS, Element, MatchRecord, Variant
from responsive_merge.utils.merge_logger import LogLevel, get_logger

PASS_NAME = "merge-desktop-first"


def compute_delta(target: Sequence[str], reference: Sequence[str]) -> Tuple[List[str], List[str], int]:
    """
    Compute the tokens a variant must add on top of a reference.

    Comparison is set-based per style family so reordering alone never
    produces a delta; unfamilied tokens use plain set difference.

    Args:
        target: Effective (unscoped) tokens the variant should end up with
        reference: Effective tokens the merged list already yields

    Returns:
        Tuple of (emitted tokens, family reset tokens, unresolved removals)
    """
    reference_set = set(reference)
    emitted: List[str] = []
    seen_families = []

    for token in target:
        family = family_of(token)
        if family is None:
            if token not in reference_set and token not in emitted:
                emitted.append(token)
            continue
        if family.name in seen_families:
            continue
        seen_families.append(family.name)

        wanted = family_tokens(target, family)
        current = family_tokens(reference, family)
        if set(wanted) != set(current):
            emitted.extend(t for t in wanted if t not in emitted)

    resets: List[str] = []
    unresolved = 0
    for family in FAMILIES:
        if family.name in seen_families:
            continue
        current = family_tokens(reference, family)
        if not current:
            continue
        if family.reset_token is None:
            unresolved += 1
        elif current != [family.reset_token]:
            resets.append(family.reset_token)

    target_set = set(target)
    unresolved += sum(
        1 for token in reference
        if family_of(token) is None and token not in target_set
    )

    return emitted, resets, unresolved


def merge_element(context: MergeContext, record: MatchRecord) -> Dict[str, int]:
    """
    Append medium- and narrow-scoped overrides to one merged element.

    Args:
        context: Merge context
        record: Match record of the wide element

    Returns:
        Counters for this element
    """
    parser = context.parser
    merged: Element = context.merged_element(record)
    counts = {"medium": 0, "narrow": 0, "resets": 0, "unresolved": 0}

    for variant in SCOPED_VARIANTS:
        source = context.variant_element(record, variant)
        if source is None:
            continue

        scopes = active_scopes(variant)
        target = parser.effective(source.tokens, scopes)
        reference = parser.effective(merged.tokens, scopes)
        emitted, resets, unresolved = compute_delta(target, reference)

        for base in emitted + resets:
            if merged.add_token(parser.scoped(variant, base)):
                counts[variant.value] += 1
        for base in resets:
            context.register_rule(variant, base, PASS_NAME)

        counts["resets"] += len(resets)
        counts["unresolved"] += unresolved

    return counts


def merge_styles(context: MergeContext) -> Dict[str, Any]:
    """
    Merge every matched element's style tokens into the merged tree.

    Args:
        context: Merge context with a populated match index

    Returns:
        Stats fragment for this pass
    """
    logger = get_logger()
    stats = context.stats
    elements_merged = 0
    medium_classes = 0
    narrow_classes = 0

    for record in context.matches:
        if not (record.is_matched(Variant.MEDIUM) or record.is_matched(Variant.NARROW)):
            continue

        counts = merge_element(context, record)
        elements_merged += 1
        medium_classes += counts["medium"]
        narrow_classes += counts["narrow"]
        stats.family_resets_emitted += counts["resets"]
        stats.unresolved_removals += counts["unresolved"]

        if counts["medium"] or counts["narrow"]:
            logger.log_event(
                PASS_NAME,
                f"{record.wide_key}: +{counts['medium']} medium, +{counts['narrow']} narrow",
                level=LogLevel.TRACE,
                sample_id=context.sample_id,
            )

    stats.elements_merged = elements_merged
    stats.classes_merged = medium_classes + narrow_classes

    return {
        "elements_merged": elements_merged,
        "total_classes_merged": medium_classes + narrow_classes,
        "medium_classes": medium_classes,
        "narrow_classes": narrow_classes,
        "family_resets": stats.family_resets_emitted,
        "unresolved_removals": stats.unresolved_removals,
    }
