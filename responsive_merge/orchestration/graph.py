"""
LangGraph construction for the responsive merge pipeline.

Builds a linear state graph with one node per enabled pass, in priority
order, and runs it over a fresh MergeContext.
"""

from typing import Callable, List, Optional

from langgraph.graph import END, StateGraph

from responsive_merge.merge.context import MergeContext
from responsive_merge.models import Element, MergeConfig, MergeResult
from responsive_merge.orchestration.passes import PassSpec, get_passes
from responsive_merge.orchestration.state import MergeState
from responsive_merge.orchestration.utils import validate_inputs
from responsive_merge.utils.merge_logger import LoggedPass, get_logger


def make_pass_node(spec: PassSpec, run_id: str = "", sample_id: Optional[str] = None) -> Callable[[MergeState], MergeState]:
    """
    Wrap a pass function as a graph node.

    Args:
        spec: Registered pass
        run_id: Run ID for logging (empty disables per-pass logging)
        sample_id: Optional sample ID for file logging

    Returns:
        Node function returning the pass's stats fragment as a state update
    """
    logged = LoggedPass(spec.run, spec.name, run_id=run_id, sample_id=sample_id)

    def node(state: MergeState) -> MergeState:
        stats = logged(state["context"])
        return {
            "pass_stats": {spec.name: stats},
            "completed_passes": [spec.name],
        }

    node.__name__ = spec.name.replace("-", "_")
    return node


def create_merge_graph(passes: List[PassSpec], run_id: str = "", sample_id: Optional[str] = None):
    """
    Create and compile the merge LangGraph.

    Args:
        passes: Passes to run, already in priority order
        run_id: Run ID for logging
        sample_id: Optional sample ID for file logging

    Returns:
        Compiled LangGraph application
    """
    if not passes:
        raise ValueError("At least one pass is required")

    graph = StateGraph(MergeState)

    for spec in passes:
        graph.add_node(spec.name, make_pass_node(spec, run_id=run_id, sample_id=sample_id))

    graph.set_entry_point(passes[0].name)

    # Linear chain in priority order
    for current, following in zip(passes, passes[1:]):
        graph.add_edge(current.name, following.name)
    graph.add_edge(passes[-1].name, END)

    return graph.compile()


def run_merge(
    wide: Element,
    medium: Element,
    narrow: Element,
    config: Optional[MergeConfig] = None,
    sample_id: Optional[str] = None,
) -> MergeResult:
    """
    Fuse three variant trees into one responsive tree.

    Args:
        wide: Widest-viewport tree (the base)
        medium: Medium-viewport tree
        narrow: Narrowest-viewport tree
        config: Merge configuration (defaults to MergeConfig())
        sample_id: Optional sample ID used for logging

    Returns:
        MergeResult with the merged tree, statistics, conflicts and rules

    Raises:
        MergeInputError: If a variant tree is invalid
        MergeConfigError: If the configuration is inconsistent
    """
    config = config or MergeConfig()
    validate_inputs(wide, medium, narrow)
    config.ensure_consistent()
    passes = get_passes(config)

    logger = get_logger()
    pass_names = [spec.name for spec in passes]
    run_id = logger.log_run_start(
        sample_id=sample_id,
        passes=pass_names,
        metadata={
            "medium_max_width": config.breakpoints.medium_max_width,
            "narrow_max_width": config.breakpoints.narrow_max_width,
        },
    )

    context = MergeContext(wide, medium, narrow, config, sample_id=sample_id)
    app = create_merge_graph(passes, run_id=run_id, sample_id=sample_id)

    # Pass errors are logged by LoggedPass and propagate from invoke()
    final_state = app.invoke({
        "context": context,
        "pass_stats": {},
        "completed_passes": [],
    })

    return MergeResult(
        sample_id=sample_id,
        merged_tree=context.merged_tree,
        stats=context.stats,
        conflicts=context.conflict_list(),
        unmatched=context.unmatched,
        extra_identities=context.extra_identities,
        custom_rules=list(context.custom_rules.values()),
        pass_stats=final_state.get("pass_stats", {}),
        completed_passes=final_state.get("completed_passes", []),
    )
