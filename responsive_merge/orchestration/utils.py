"""
Utility functions for the merge orchestration.
"""

from typing import Any

from responsive_merge.exceptions import MergeInputError
from responsive_merge.models import Element, Variant
from responsive_merge.orchestration.state import MergeState


def validate_inputs(wide: Any, medium: Any, narrow: Any) -> None:
    """
    Validate the three variant trees before a run.

    Raises:
        MergeInputError: Naming the first invalid variant and the reason
    """
    for variant, root in ((Variant.WIDE, wide), (Variant.MEDIUM, medium), (Variant.NARROW, narrow)):
        if root is None:
            raise MergeInputError(variant.value, "root is missing")
        if not isinstance(root, Element):
            raise MergeInputError(variant.value, f"expected Element, got {type(root).__name__}")
        for element in root.iter_elements():
            if not element.tag or not element.tag.strip():
                raise MergeInputError(variant.value, "element with empty tag")


def get_context_summary(state: MergeState) -> str:
    """
    Get a human-readable summary of a merge state.

    Args:
        state: Current MergeState

    Returns:
        Formatted string summary
    """
    summary = []
    context = state.get("context")
    if context is not None:
        stats = context.stats
        summary.append(f"Sample: {context.sample_id or 'N/A'}")
        summary.append(f"Elements processed: {stats.elements_processed}")
        summary.append(f"Elements merged: {stats.elements_merged}")
        summary.append(f"Classes merged: {stats.classes_merged}")
        summary.append(f"Conflicts: {stats.conflicts_resolved}")
        summary.append(f"Custom rules: {len(context.custom_rules)}")

    completed = state.get("completed_passes") or []
    summary.append(f"Completed passes: {', '.join(completed) if completed else 'none'}")

    return "\n".join(summary)
