"""
Missing-element reporting and visibility injection.

Elements that exist in the wide tree but whose identity is absent from a
narrower tree are kept in the merged tree and hidden at that breakpoint.
"""

from typing import Any, Dict, List, Optional

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.tokens import FAMILIES_BY_NAME, active_scopes, family_tokens
from responsive_merge.models import SCOPED_VARIANTS, Element, MatchRecord, UnmatchedElement, Variant
from responsive_merge.utils.merge_logger import LogLevel, get_logger

HIDDEN = "hidden"
DEFAULT_DISPLAY = "block"


def detect_missing_elements(context: MergeContext) -> Dict[str, Any]:
    """
    Report unmatched wide elements and identities only narrower trees have.

    Args:
        context: Merge context with a populated match index

    Returns:
        Stats fragment for this pass
    """
    logger = get_logger()
    wide_identities = context.index(Variant.WIDE).by_identity

    for variant in SCOPED_VARIANTS:
        missing: List[UnmatchedElement] = []
        for record in context.matches:
            if record.is_matched(variant):
                continue
            missing.append(UnmatchedElement(
                element_key=record.wide_key,
                tag=record.tag,
                variant=variant,
                reason=record.reason_for(variant) or "unmatched",
            ))
        context.unmatched[variant.value] = missing

        extras = [
            identity for identity in context.index(variant).identities()
            if identity not in wide_identities
        ]
        context.extra_identities[variant.value] = extras

        if missing or extras:
            logger.log_event(
                "detect-missing-elements",
                f"{variant.value}: {len(missing)} unmatched, {len(extras)} extra identities",
                level=LogLevel.DEBUG,
                sample_id=context.sample_id,
            )

    total_missing = sum(len(entries) for entries in context.unmatched.values())
    total_extra = sum(len(entries) for entries in context.extra_identities.values())
    context.stats.missing_elements = total_missing
    context.stats.extra_identities = total_extra

    return {
        "missing_medium": len(context.unmatched[Variant.MEDIUM.value]),
        "missing_narrow": len(context.unmatched[Variant.NARROW.value]),
        "extra_medium": len(context.extra_identities[Variant.MEDIUM.value]),
        "extra_narrow": len(context.extra_identities[Variant.NARROW.value]),
    }


def is_hidden_at(context: MergeContext, element: Element, variant: Variant) -> bool:
    effective = context.parser.effective(element.tokens, active_scopes(variant))
    return HIDDEN in effective


def ancestor_hidden_at(context: MergeContext, position: int, variant: Variant) -> bool:
    return any(
        is_hidden_at(context, ancestor.element, variant)
        for ancestor in context.merged_index.ancestors(position)
    )


def display_value(context: MergeContext, element: Optional[Element], variant: Variant) -> Optional[str]:
    """Effective display of an element at a variant, ignoring 'hidden'."""
    if element is None:
        return None
    effective = context.parser.effective(element.tokens, active_scopes(variant))
    for value in family_tokens(effective, FAMILIES_BY_NAME["display"]):
        if value != HIDDEN:
            return value
    return None


def missing_by_identity(record: MatchRecord, variant: Variant) -> bool:
    return bool(record.identity) and not record.is_matched(variant)


def inject_visibility(context: MergeContext) -> Dict[str, Any]:
    """
    Hide identity-bearing elements at breakpoints that do not have them.

    Elements missing at medium get the medium-scoped hidden token; when the
    narrow tree has them again they are shown with their narrow display.
    Elements missing only at narrow get the narrow-scoped hidden token.
    Descendants of an element already hidden at a breakpoint are skipped.

    Args:
        context: Merge context after the style merger ran

    Returns:
        Stats fragment for this pass
    """
    logger = get_logger()
    parser = context.parser
    hidden = {Variant.MEDIUM.value: 0, Variant.NARROW.value: 0}
    reshown = 0
    injected = 0

    for record in context.matches:
        if not record.identity:
            continue
        position = record.wide_position
        merged = context.merged_element(record)
        before = injected

        if missing_by_identity(record, Variant.MEDIUM):
            if not ancestor_hidden_at(context, position, Variant.MEDIUM) and \
                    not is_hidden_at(context, merged, Variant.MEDIUM):
                if merged.add_token(parser.scoped(Variant.MEDIUM, HIDDEN)):
                    context.register_rule(Variant.MEDIUM, HIDDEN, "inject-visibility")
                    hidden[Variant.MEDIUM.value] += 1
                    injected += 1

        if missing_by_identity(record, Variant.NARROW):
            if not ancestor_hidden_at(context, position, Variant.NARROW) and \
                    not is_hidden_at(context, merged, Variant.NARROW):
                if merged.add_token(parser.scoped(Variant.NARROW, HIDDEN)):
                    context.register_rule(Variant.NARROW, HIDDEN, "inject-visibility")
                    hidden[Variant.NARROW.value] += 1
                    injected += 1
        elif missing_by_identity(record, Variant.MEDIUM) and is_hidden_at(context, merged, Variant.NARROW) and \
                not ancestor_hidden_at(context, position, Variant.NARROW):
            # Present at narrow but inherits the medium hidden token
            source = context.variant_element(record, Variant.NARROW)
            display = (
                display_value(context, source, Variant.NARROW)
                or display_value(context, merged, Variant.WIDE)
                or DEFAULT_DISPLAY
            )
            if merged.add_token(parser.scoped(Variant.NARROW, display)):
                context.register_rule(Variant.NARROW, display, "inject-visibility")
                reshown += 1
                injected += 1

        if injected > before:
            logger.log_event(
                "inject-visibility",
                f"{record.wide_key}: {' '.join(t for t in merged.tokens if parser.base_of(t) == HIDDEN)}",
                level=LogLevel.TRACE,
                sample_id=context.sample_id,
            )

    context.stats.visibility_tokens_injected = injected

    return {
        "hidden_medium": hidden[Variant.MEDIUM.value],
        "hidden_narrow": hidden[Variant.NARROW.value],
        "reshown_narrow": reshown,
        "visibility_tokens_injected": injected,
    }
