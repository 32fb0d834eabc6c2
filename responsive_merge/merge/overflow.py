"""
Horizontal-scroll annotation for rows of fixed-width children.

A row whose children keep a fixed width and refuse to shrink at the narrow
breakpoint overflows the viewport. Such containers get a narrow-scoped
horizontal overflow token so the row scrolls instead of spilling out.
"""

import re
from typing import Any, Dict, List

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.tokens import FAMILIES_BY_NAME, active_scopes, family_tokens
from responsive_merge.models import Element, Variant
from responsive_merge.utils.merge_logger import LogLevel, get_logger

PASS_NAME = "add-horizontal-scroll"

FIXED_WIDTH = re.compile(r"^w-(\[\d+(\.\d+)?px\]|\d+(\.\d+)?|px|custom-.+)$")
NO_SHRINK = "shrink-0"
FLEX_DISPLAYS = ("flex", "inline-flex")
ROW_DIRECTIONS = ("flex-row", "flex-row-reverse")
OVERFLOW_SHORTHANDS = ("overflow-auto", "overflow-scroll", "overflow-hidden")


def is_fixed_narrow_child(context: MergeContext, child: Element) -> bool:
    """Child with a narrow-scoped fixed width whose effective shrink is 0."""
    parser = context.parser
    narrow_bases = parser.scoped_bases(child.tokens, Variant.NARROW)
    if not any(FIXED_WIDTH.match(base) for base in narrow_bases):
        return False

    effective = parser.effective(child.tokens, active_scopes(Variant.NARROW))
    shrink = family_tokens(effective, FAMILIES_BY_NAME["shrink"])
    return shrink == [NO_SHRINK]


def is_horizontal_flex(context: MergeContext, container: Element) -> bool:
    """Container laid out as a flex row at the narrow breakpoint."""
    effective = context.parser.effective(container.tokens, active_scopes(Variant.NARROW))
    display = family_tokens(effective, FAMILIES_BY_NAME["display"])
    if not any(value in FLEX_DISPLAYS for value in display):
        return False

    direction = family_tokens(effective, FAMILIES_BY_NAME["flexDirection"])
    return not direction or all(value in ROW_DIRECTIONS for value in direction)


def declares_overflow(context: MergeContext, container: Element) -> bool:
    """True when horizontal overflow other than visible applies at the narrow breakpoint."""
    overflow_x = FAMILIES_BY_NAME["overflowX"]
    effective = context.parser.effective(container.tokens, active_scopes(Variant.NARROW))
    if any(token in OVERFLOW_SHORTHANDS for token in effective):
        return True
    return any(token != overflow_x.reset_token for token in family_tokens(effective, overflow_x))


def drop_narrow_overflow(context: MergeContext, container: Element) -> List[str]:
    """Remove narrow-scoped overflow-x tokens the scroll token takes over from."""
    parser = context.parser
    overflow_x = FAMILIES_BY_NAME["overflowX"]
    dropped = [
        token for token in container.tokens
        if parser.scope_of(token) == Variant.NARROW and overflow_x.matches(parser.base_of(token))
    ]
    if dropped:
        container.tokens = [token for token in container.tokens if token not in dropped]
    return dropped


def release_unused_rules(context: MergeContext, tokens: List[str]) -> None:
    """Forget synthesized rules no merged element carries any more."""
    for token in tokens:
        if token not in context.custom_rules:
            continue
        if not any(token in element.tokens for element in context.merged_tree.iter_elements()):
            del context.custom_rules[token]


def count_fixed_children(context: MergeContext) -> Dict[int, int]:
    """First pass: qualifying direct children per merged container position."""
    counts: Dict[int, int] = {}
    for node in context.merged_index:
        if not node.children:
            continue
        count = sum(
            1 for position in node.children
            if is_fixed_narrow_child(context, context.merged_index.element(position))
        )
        if count:
            counts[node.position] = count
    return counts


def add_horizontal_scroll(context: MergeContext) -> Dict[str, Any]:
    """
    Annotate overflowing rows with a narrow-scoped scroll token.

    Args:
        context: Merge context after the style merger ran

    Returns:
        Stats fragment for this pass
    """
    logger = get_logger()
    config = context.config
    counts = count_fixed_children(context)
    annotated: List[str] = []

    for position in sorted(counts):
        if counts[position] < config.overflow_min_children:
            continue

        node = context.merged_index.node(position)
        container = node.element
        if not is_horizontal_flex(context, container) or declares_overflow(context, container):
            continue

        dropped = drop_narrow_overflow(context, container)
        if container.add_token(context.parser.scoped(Variant.NARROW, config.overflow_token)):
            release_unused_rules(context, dropped)
            context.register_rule(Variant.NARROW, config.overflow_token, PASS_NAME)
            annotated.append(node.key)
            logger.log_event(
                PASS_NAME,
                f"{node.key}: {counts[position]} fixed-width children",
                level=LogLevel.DEBUG,
                sample_id=context.sample_id,
            )

    context.stats.overflow_candidates = len(counts)
    context.stats.overflow_containers_annotated = len(annotated)

    return {
        "candidates": len(counts),
        "containers_annotated": len(annotated),
        "annotated": annotated,
    }
