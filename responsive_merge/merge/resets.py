"""
Compensating resets for dependent properties.

Some tokens only make sense relative to another property: a child's
``h-full`` fills the cross axis of a row, but once the parent switches to a
column at a breakpoint it suddenly fills the main axis. When a breakpoint
override changes such a trigger property and the dependent property is
inherited unchanged, a reset token is added at the same breakpoint.

Rules are data; the traversal below does not need to change to add one.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Pattern, Tuple

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.tokens import FAMILIES_BY_NAME, scopes_before
from responsive_merge.models import SCOPED_VARIANTS, Element, Variant
from responsive_merge.utils.merge_logger import LogLevel, get_logger

PASS_NAME = "reset-dependent-properties"

ROW_DIRECTIONS = ("flex-row", "flex-row-reverse")
COLUMN_DIRECTIONS = ("flex-col", "flex-col-reverse")

SELF = "self"
CHILDREN = "children"


@dataclass(frozen=True)
class ResetRule:
    """
    One dependent-property rule.

    Attributes:
        name: Rule name reported in stats
        trigger_family: Family whose scoped override triggers the rule
        trigger_values: Override values that trigger it (empty = any value)
        target: SELF or CHILDREN
        dependent_family: Family of the property that becomes unsafe
        dependent_pattern: Inherited dependent tokens that need a reset
        reset_token: Axis-neutral token added at the same breakpoint
    """
    name: str
    trigger_family: str
    trigger_values: Tuple[str, ...]
    target: str
    dependent_family: str
    dependent_pattern: Pattern
    reset_token: str


RESET_RULES: Tuple[ResetRule, ...] = (
    ResetRule(
        name="column-resets-child-height",
        trigger_family="flexDirection",
        trigger_values=COLUMN_DIRECTIONS,
        target=CHILDREN,
        dependent_family="height",
        dependent_pattern=re.compile(r"^h-full$"),
        reset_token="h-auto",
    ),
    ResetRule(
        name="row-resets-child-width",
        trigger_family="flexDirection",
        trigger_values=ROW_DIRECTIONS,
        target=CHILDREN,
        dependent_family="width",
        dependent_pattern=re.compile(r"^w-full$"),
        reset_token="w-auto",
    ),
    ResetRule(
        name="direction-resets-child-basis",
        trigger_family="flexDirection",
        trigger_values=(),
        target=CHILDREN,
        dependent_family="basis",
        dependent_pattern=re.compile(r"^basis-"),
        reset_token="basis-auto",
    ),
)


def scoped_trigger(context: MergeContext, element: Element, variant: Variant, rule: ResetRule) -> Optional[str]:
    """Return the override value of the rule's trigger family at a scope, if it fires."""
    family = FAMILIES_BY_NAME[rule.trigger_family]
    for base in context.parser.scoped_bases(element.tokens, variant):
        if family.matches(base) and (not rule.trigger_values or base in rule.trigger_values):
            return base
    return None


def needs_reset(context: MergeContext, element: Element, variant: Variant, rule: ResetRule) -> bool:
    """True when the dependent property is inherited unchanged into the scope."""
    parser = context.parser
    family = FAMILIES_BY_NAME[rule.dependent_family]

    if any(family.matches(base) for base in parser.scoped_bases(element.tokens, variant)):
        return False

    inherited = parser.effective(element.tokens, scopes_before(variant))
    return any(family.matches(token) and rule.dependent_pattern.match(token) for token in inherited)


def apply_rules(context: MergeContext, element: Element, rules: Tuple[ResetRule, ...] = RESET_RULES) -> Dict[str, int]:
    """
    Apply every rule triggered by one element's scoped overrides.

    Args:
        context: Merge context
        element: Merged element whose overrides are inspected
        rules: Rule table

    Returns:
        Count of resets added per rule name
    """
    logger = get_logger()
    applied: Dict[str, int] = {}

    for variant in SCOPED_VARIANTS:
        for rule in rules:
            trigger = scoped_trigger(context, element, variant, rule)
            if trigger is None:
                continue

            targets: List[Element] = [element] if rule.target == SELF else list(element.children)
            for target in targets:
                if not needs_reset(context, target, variant, rule):
                    continue
                if target.add_token(context.parser.scoped(variant, rule.reset_token)):
                    context.register_rule(variant, rule.reset_token, PASS_NAME)
                    applied[rule.name] = applied.get(rule.name, 0) + 1
                    logger.log_event(
                        PASS_NAME,
                        f"{rule.name}: {trigger} at {variant.value} -> {rule.reset_token}",
                        level=LogLevel.TRACE,
                        sample_id=context.sample_id,
                    )

    return applied


def reset_dependent_properties(context: MergeContext) -> Dict[str, Any]:
    """
    Add compensating resets across the merged tree.

    Args:
        context: Merge context after the style merger ran

    Returns:
        Stats fragment for this pass
    """
    by_rule: Dict[str, int] = {rule.name: 0 for rule in RESET_RULES}

    for node in context.merged_index:
        for name, count in apply_rules(context, node.element).items():
            by_rule[name] += count

    total = sum(by_rule.values())
    context.stats.resets_applied = total

    return {
        "total_resets_added": total,
        "by_rule": by_rule,
    }
