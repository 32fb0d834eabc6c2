"""
Registry of merge passes.

Each pass is a function taking the MergeContext and returning a stats
fragment. Passes run in ascending priority; the graph is built from the
enabled subset of this table.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from responsive_merge.exceptions import MergeConfigError
from responsive_merge.merge.conflicts import detect_class_conflicts
from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.matcher import match_elements
from responsive_merge.merge.overflow import add_horizontal_scroll
from responsive_merge.merge.resets import reset_dependent_properties
from responsive_merge.merge.style_merger import merge_styles
from responsive_merge.merge.visibility import detect_missing_elements, inject_visibility
from responsive_merge.models import MergeConfig

PassFunction = Callable[[MergeContext], Dict[str, Any]]


@dataclass(frozen=True)
class PassSpec:
    """Metadata for one registered pass."""
    name: str
    priority: int
    description: str
    run: PassFunction
    required: bool = False


PASSES: List[PassSpec] = [
    PassSpec(
        name="match-elements",
        priority=10,
        description="Pair wide elements with medium and narrow counterparts",
        run=match_elements,
        required=True,
    ),
    PassSpec(
        name="detect-missing-elements",
        priority=20,
        description="Report unmatched elements and variant-only identities",
        run=detect_missing_elements,
    ),
    PassSpec(
        name="detect-class-conflicts",
        priority=30,
        description="Record style groups whose values differ across variants",
        run=detect_class_conflicts,
    ),
    PassSpec(
        name="merge-desktop-first",
        priority=40,
        description="Append breakpoint-scoped overrides to the wide tokens",
        run=merge_styles,
        required=True,
    ),
    PassSpec(
        name="inject-visibility",
        priority=42,
        description="Hide elements at breakpoints whose tree lacks them",
        run=inject_visibility,
    ),
    PassSpec(
        name="reset-dependent-properties",
        priority=45,
        description="Reset properties invalidated by a changed flex direction",
        run=reset_dependent_properties,
    ),
    PassSpec(
        name="add-horizontal-scroll",
        priority=46,
        description="Let rows of fixed-width children scroll at narrow widths",
        run=add_horizontal_scroll,
    ),
]

PASSES_BY_NAME: Dict[str, PassSpec] = {spec.name: spec for spec in PASSES}


def get_passes(config: MergeConfig) -> List[PassSpec]:
    """
    Resolve the ordered list of passes enabled by a configuration.

    Args:
        config: Merge configuration

    Returns:
        Enabled passes sorted by priority

    Raises:
        MergeConfigError: If a required pass is disabled or an unknown pass is named
    """
    for name in config.passes:
        if name not in PASSES_BY_NAME:
            raise MergeConfigError(f"Unknown pass: {name}", field="passes")

    selected = []
    for spec in sorted(PASSES, key=lambda s: s.priority):
        if config.is_enabled(spec.name):
            selected.append(spec)
        elif spec.required:
            raise MergeConfigError(f"Pass '{spec.name}' cannot be disabled", field="passes")
    return selected
