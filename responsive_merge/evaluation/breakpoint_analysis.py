"""
Feasibility analysis for fusing three breakpoint variants.

Compares the identity-bearing elements of the wide, medium and narrow trees:
which identities all three share, whether each shared element keeps the same
structure (so styling alone can adapt it) or changes shape (so the component
has to be swapped), and an overall feasibility score.
"""

import hashlib
import json
from typing import Any, Dict, List, Optional

from responsive_merge.models import (
    BreakpointAnalysis,
    Element,
    IdentityComparison,
    StructureComparison,
    StructureInfo,
    Variant,
)

# Attributes that carry styling or tooling ids rather than structure
IGNORED_ATTRIBUTES = ("style", "data-node-id")

CSS_ONLY = "css-only"
COMPONENT_SWAP = "component-swap"


def structure_shape(element: Element) -> Dict[str, Any]:
    """Tree shape of an element with tokens, identities and styling removed."""
    return {
        "tag": element.tag,
        "attributes": {
            name: value for name, value in sorted(element.attributes.items())
            if name not in IGNORED_ATTRIBUTES
        },
        "text": element.text,
        "children": [structure_shape(child) for child in element.children],
    }


def structure_hash(element: Element) -> str:
    """Short md5 digest of the element's structure shape."""
    normalized = json.dumps(structure_shape(element), sort_keys=True)
    return hashlib.md5(normalized.encode("utf-8")).hexdigest()[:8]


def extract_structures(root: Element) -> Dict[str, StructureInfo]:
    """
    Describe every identity-bearing element of a tree.

    Args:
        root: Tree root

    Returns:
        Mapping of identity to StructureInfo (first occurrence wins)
    """
    structures: Dict[str, StructureInfo] = {}
    for element in root.iter_elements():
        if not element.identity or element.identity in structures:
            continue
        structures[element.identity] = StructureInfo(
            tag=element.tag,
            structure_hash=structure_hash(element),
            tokens=list(element.tokens),
            children_count=len(element.children),
        )
    return structures


def compare_structures(first: Optional[StructureInfo], second: Optional[StructureInfo]) -> StructureComparison:
    """
    Compare one element's structure in two variants.

    Args:
        first: Structure in the first variant
        second: Structure in the second variant

    Returns:
        StructureComparison: exact or similar matches can be adapted with
        styling alone; anything else needs a component swap
    """
    if first is None or second is None:
        return StructureComparison(match=False, reason="missing")

    if first.structure_hash == second.structure_hash:
        return StructureComparison(match=True, type="exact", strategy=CSS_ONLY)

    if first.children_count == second.children_count and first.tag == second.tag:
        return StructureComparison(match=True, type="similar", strategy=CSS_ONLY, confidence=0.8)

    return StructureComparison(match=False, reason="structure-diff", strategy=COMPONENT_SWAP)


def analyze_breakpoints(wide: Element, medium: Element, narrow: Element) -> BreakpointAnalysis:
    """
    Assess how well three variant trees can be fused into one.

    Args:
        wide: Wide variant tree
        medium: Medium variant tree
        narrow: Narrow variant tree

    Returns:
        BreakpointAnalysis with identity statistics, per-identity strategies
        and the feasibility score
    """
    structures = {
        Variant.WIDE: extract_structures(wide),
        Variant.MEDIUM: extract_structures(medium),
        Variant.NARROW: extract_structures(narrow),
    }

    # Union of identities in first-occurrence order, widest variant first
    all_identities: List[str] = []
    for variant_structures in structures.values():
        for identity in variant_structures:
            if identity not in all_identities:
                all_identities.append(identity)

    common = [
        identity for identity in all_identities
        if all(identity in variant_structures for variant_structures in structures.values())
    ]
    variant_only = {
        variant.value: [identity for identity in variant_structures if identity not in common]
        for variant, variant_structures in structures.items()
    }

    css_only: List[str] = []
    component_swap: List[IdentityComparison] = []
    for identity in common:
        wide_info = structures[Variant.WIDE][identity]
        medium_info = structures[Variant.MEDIUM][identity]
        narrow_info = structures[Variant.NARROW][identity]

        wide_medium = compare_structures(wide_info, medium_info)
        wide_narrow = compare_structures(wide_info, narrow_info)
        medium_narrow = compare_structures(medium_info, narrow_info)

        if wide_medium.match and wide_narrow.match and medium_narrow.match:
            css_only.append(identity)
        else:
            component_swap.append(IdentityComparison(
                identity=identity,
                strategy=COMPONENT_SWAP,
                wide_medium=wide_medium,
                wide_narrow=wide_narrow,
                medium_narrow=medium_narrow,
            ))

    total = len(all_identities)
    feasibility = round(len(common) / total * 100, 1) if total else 0.0
    css_only_percentage = round(len(css_only) / len(common) * 100, 1) if common else 0.0

    return BreakpointAnalysis(
        identity_counts={variant.value: len(s) for variant, s in structures.items()},
        common_identities=common,
        variant_only=variant_only,
        css_only=css_only,
        component_swap=component_swap,
        total_identities=total,
        feasibility_score=feasibility,
        css_only_percentage=css_only_percentage,
    )
