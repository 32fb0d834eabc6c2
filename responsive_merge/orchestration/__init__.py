"""
LangGraph orchestration of the responsive merge passes.

This module wires the registered passes into a linear state graph and runs
them over three variant trees to produce a single merged tree.
"""

from responsive_merge.orchestration.graph import (
    create_merge_graph,
    run_merge,
)
from responsive_merge.orchestration.passes import PASSES, PassSpec, get_passes
from responsive_merge.orchestration.state import MergeState
from responsive_merge.orchestration.utils import (
    get_context_summary,
    validate_inputs,
)

__all__ = [
    "create_merge_graph",
    "run_merge",
    "PASSES",
    "PassSpec",
    "get_passes",
    "MergeState",
    "get_context_summary",
    "validate_inputs",
]
