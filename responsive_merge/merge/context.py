"""
Per-run working state shared by all merge passes.
"""

from typing import Dict, List, Optional

from responsive_merge.merge.tokens import TokenParser, declarations_for
from responsive_merge.merge.tree_index import TreeIndex
from responsive_merge.models import (
    ConflictRecord,
    CustomRule,
    Element,
    MatchRecord,
    MergeConfig,
    MergeStats,
    UnmatchedElement,
    Variant,
)


class MergeContext:
    """
    Mutable state threaded through every pass of one merge run.

    Holds the source tree indices, the in-progress merged tree (a deep copy
    of the wide tree), the match index, accumulated conflicts and statistics,
    and the table of style rules synthesized during this run.
    """

    def __init__(
        self,
        wide: Element,
        medium: Element,
        narrow: Element,
        config: MergeConfig,
        sample_id: Optional[str] = None,
    ):
        self.config = config
        self.sample_id = sample_id
        self.parser = TokenParser(config.breakpoints)

        self.indices: Dict[Variant, TreeIndex] = {
            Variant.WIDE: TreeIndex(wide),
            Variant.MEDIUM: TreeIndex(medium),
            Variant.NARROW: TreeIndex(narrow),
        }

        self.merged_tree: Element = wide.model_copy(deep=True)
        self.merged_index = TreeIndex(self.merged_tree)

        # One record per wide element, indexed by arena position
        self.matches: List[MatchRecord] = []
        self.conflicts: Dict[str, List[ConflictRecord]] = {}
        self.unmatched: Dict[str, List[UnmatchedElement]] = {
            Variant.MEDIUM.value: [],
            Variant.NARROW.value: [],
        }
        self.extra_identities: Dict[str, List[str]] = {
            Variant.MEDIUM.value: [],
            Variant.NARROW.value: [],
        }
        # Rules synthesized by this run only
        self.custom_rules: Dict[str, CustomRule] = {}
        self.stats = MergeStats()

    def index(self, variant: Variant) -> TreeIndex:
        return self.indices[variant]

    def variant_element(self, record: MatchRecord, variant: Variant) -> Optional[Element]:
        position = record.position_for(variant)
        if position is None:
            return None
        return self.indices[variant].element(position)

    def merged_element(self, record: MatchRecord) -> Element:
        return self.merged_index.element(record.wide_position)

    def register_rule(self, variant: Variant, base: str, source: str) -> CustomRule:
        """Record a synthesized scoped token so a renderer can emit its CSS."""
        token = self.parser.scoped(variant, base)
        rule = self.custom_rules.get(token)
        if rule is None:
            rule = CustomRule(
                token=token,
                media_query=self.config.breakpoints.media_query(variant),
                declarations=declarations_for(base),
                source=source,
            )
            self.custom_rules[token] = rule
        return rule

    def conflict_list(self) -> List[ConflictRecord]:
        return [record for records in self.conflicts.values() for record in records]
