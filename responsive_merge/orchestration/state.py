"""
State management for LangGraph orchestration.

Defines MergeState as a TypedDict carrying the per-run MergeContext plus the
stats fragments and pass names accumulated as the graph runs.
"""

import operator
from typing import Annotated, Any, Dict, List, TypedDict

from responsive_merge.merge.context import MergeContext


def merge_pass_stats(
    current: Dict[str, Dict[str, Any]],
    update: Dict[str, Dict[str, Any]]
) -> Dict[str, Dict[str, Any]]:
    """Reducer combining per-pass stats fragments."""
    merged = dict(current or {})
    merged.update(update or {})
    return merged


class MergeState(TypedDict, total=False):
    """
    State for one responsive merge run.

    All fields are optional (total=False) to allow incremental state updates.
    """

    # Shared mutable context (trees, match index, stats)
    context: MergeContext

    # Stats fragment returned by each pass, keyed by pass name
    pass_stats: Annotated[Dict[str, Dict[str, Any]], merge_pass_stats]

    # Pass names in execution order
    completed_passes: Annotated[List[str], operator.add]
