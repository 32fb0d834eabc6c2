"""
Data models and schemas for the responsive breakpoint merge engine.
"""

import os
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from responsive_merge.exceptions import MergeConfigError


class Variant(str, Enum):
    """Breakpoint variants, widest first."""
    WIDE = "wide"
    MEDIUM = "medium"
    NARROW = "narrow"


# Variants that carry breakpoint-scoped overrides, in cascade order
SCOPED_VARIANTS = (Variant.MEDIUM, Variant.NARROW)


class Element(BaseModel):
    """A node of a UI element tree."""
    tag: str
    tokens: List[str] = Field(default_factory=list)
    identity: Optional[str] = None
    children: List["Element"] = Field(default_factory=list)
    sibling_index: int = 0
    attributes: Dict[str, str] = Field(default_factory=dict)
    text: Optional[str] = None

    @field_validator("tokens", mode="before")
    @classmethod
    def collapse_tokens(cls, value: Any) -> List[str]:
        """Accept a class string or a list; drop blanks and repeated tokens."""
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split()
        return list(dict.fromkeys(t.strip() for t in value if t and t.strip()))

    @model_validator(mode="after")
    def number_children(self) -> "Element":
        for index, child in enumerate(self.children):
            child.sibling_index = index
        return self

    @property
    def class_name(self) -> str:
        """Space-joined token list."""
        return " ".join(self.tokens)

    def add_token(self, token: str) -> bool:
        """Append a token unless already present. Returns True when added."""
        if token in self.tokens:
            return False
        self.tokens.append(token)
        return True

    def iter_elements(self) -> Iterator["Element"]:
        """Depth-first, pre-order walk of this element and its descendants."""
        stack = [self]
        while stack:
            element = stack.pop()
            yield element
            stack.extend(reversed(element.children))

    def count_elements(self) -> int:
        return sum(1 for _ in self.iter_elements())


Element.model_rebuild()


class BreakpointConfig(BaseModel):
    """Thresholds and scope prefixes for the two narrower breakpoints.

    Overrides are desktop-first: a token scoped to a variant applies at
    viewport widths at or below that variant's threshold.
    """
    medium_max_width: int = 1024
    narrow_max_width: int = 768
    medium_prefix: str = "max-lg"
    narrow_prefix: str = "max-md"
    separator: str = ":"

    @classmethod
    def desktop_first(cls) -> "BreakpointConfig":
        return cls()

    @classmethod
    def from_widths(cls, medium_max_width: int, narrow_max_width: int) -> "BreakpointConfig":
        return cls(medium_max_width=medium_max_width, narrow_max_width=narrow_max_width)

    def prefix_for(self, variant: Variant) -> Optional[str]:
        """Scope prefix for a variant (Wide has none)."""
        if variant == Variant.MEDIUM:
            return self.medium_prefix
        elif variant == Variant.NARROW:
            return self.narrow_prefix
        return None

    def threshold_for(self, variant: Variant) -> Optional[int]:
        if variant == Variant.MEDIUM:
            return self.medium_max_width
        elif variant == Variant.NARROW:
            return self.narrow_max_width
        return None

    def scoped(self, variant: Variant, base: str) -> str:
        """Prefix a base token so it only applies at the given variant."""
        prefix = self.prefix_for(variant)
        if prefix is None:
            return base
        return f"{prefix}{self.separator}{base}"

    def media_query(self, variant: Variant) -> Optional[str]:
        threshold = self.threshold_for(variant)
        if threshold is None:
            return None
        return f"(max-width: {threshold}px)"

    def ensure_consistent(self) -> None:
        """Raise MergeConfigError when thresholds or prefixes cannot cascade."""
        if self.narrow_max_width <= 0 or self.medium_max_width <= 0:
            raise MergeConfigError("Breakpoint thresholds must be positive", field="breakpoints")
        if self.narrow_max_width >= self.medium_max_width:
            raise MergeConfigError(
                f"Narrow threshold ({self.narrow_max_width}px) must be below "
                f"medium threshold ({self.medium_max_width}px)",
                field="breakpoints",
            )
        if not self.medium_prefix or not self.narrow_prefix:
            raise MergeConfigError("Scope prefixes must not be empty", field="breakpoints")
        if self.medium_prefix == self.narrow_prefix:
            raise MergeConfigError("Medium and narrow prefixes must differ", field="breakpoints")


class PassOptions(BaseModel):
    """Per-pass toggle and options."""
    enabled: bool = True
    options: Dict[str, Any] = Field(default_factory=dict)


class MergeConfig(BaseModel):
    """Configuration for one merge run."""
    breakpoints: BreakpointConfig = Field(default_factory=BreakpointConfig)
    similarity_threshold: float = 0.80
    overflow_min_children: int = 2
    overflow_token: str = "overflow-x-auto"
    passes: Dict[str, PassOptions] = Field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "MergeConfig":
        """Build a configuration from RESPONSIVE_MERGE_* environment variables."""
        load_dotenv()

        breakpoints = BreakpointConfig(
            medium_max_width=int(os.getenv("RESPONSIVE_MERGE_MEDIUM_MAX_WIDTH", "1024")),
            narrow_max_width=int(os.getenv("RESPONSIVE_MERGE_NARROW_MAX_WIDTH", "768")),
            medium_prefix=os.getenv("RESPONSIVE_MERGE_MEDIUM_PREFIX", "max-lg"),
            narrow_prefix=os.getenv("RESPONSIVE_MERGE_NARROW_PREFIX", "max-md"),
        )

        passes = {}
        disabled = os.getenv("RESPONSIVE_MERGE_DISABLED_PASSES", "")
        for name in disabled.split(","):
            name = name.strip()
            if name:
                passes[name] = PassOptions(enabled=False)

        return cls(
            breakpoints=breakpoints,
            similarity_threshold=float(os.getenv("RESPONSIVE_MERGE_SIMILARITY_THRESHOLD", "0.80")),
            passes=passes,
        )

    def is_enabled(self, pass_name: str) -> bool:
        options = self.passes.get(pass_name)
        return options.enabled if options else True

    def ensure_consistent(self) -> None:
        self.breakpoints.ensure_consistent()
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise MergeConfigError(
                f"similarity_threshold must be within [0, 1], got {self.similarity_threshold}",
                field="similarity_threshold",
            )
        if self.overflow_min_children < 1:
            raise MergeConfigError("overflow_min_children must be at least 1", field="overflow_min_children")


class MatchMethod(str, Enum):
    """How a wide element was paired with a variant element."""
    BY_IDENTITY = "by_identity"
    BY_POSITION = "by_position_and_similarity"
    UNMATCHED = "unmatched"


class MatchRecord(BaseModel):
    """Correspondence of one wide element in the medium and narrow trees.

    Positions are indices into each variant's TreeIndex arena.
    """
    wide_key: str
    wide_position: int
    tag: str
    identity: Optional[str] = None
    medium_position: Optional[int] = None
    narrow_position: Optional[int] = None
    medium_method: MatchMethod = MatchMethod.UNMATCHED
    narrow_method: MatchMethod = MatchMethod.UNMATCHED
    medium_similarity: Optional[float] = None
    narrow_similarity: Optional[float] = None
    medium_reason: Optional[str] = None
    narrow_reason: Optional[str] = None

    class Config:
        frozen = True

    def position_for(self, variant: Variant) -> Optional[int]:
        if variant == Variant.WIDE:
            return self.wide_position
        elif variant == Variant.MEDIUM:
            return self.medium_position
        return self.narrow_position

    def reason_for(self, variant: Variant) -> Optional[str]:
        if variant == Variant.MEDIUM:
            return self.medium_reason
        elif variant == Variant.NARROW:
            return self.narrow_reason
        return None

    def is_matched(self, variant: Variant) -> bool:
        return self.position_for(variant) is not None

    @property
    def method(self) -> MatchMethod:
        """Strongest method used for either variant."""
        methods = (self.medium_method, self.narrow_method)
        if MatchMethod.BY_IDENTITY in methods:
            return MatchMethod.BY_IDENTITY
        if MatchMethod.BY_POSITION in methods:
            return MatchMethod.BY_POSITION
        return MatchMethod.UNMATCHED


TokenValue = Union[List[str], str, None]


class ConflictRecord(BaseModel):
    """Style group whose value differs across the three variants."""
    element_key: str
    group: str
    kind: str  # "exclusive" | "pattern"
    wide_value: TokenValue = None
    medium_value: TokenValue = None
    narrow_value: TokenValue = None


class UnmatchedElement(BaseModel):
    """Wide element with no counterpart in a variant tree."""
    element_key: str
    tag: str
    variant: Variant
    reason: str


class CustomRule(BaseModel):
    """Style rule synthesized during a run (reset or scroll tokens)."""
    token: str
    media_query: Optional[str] = None
    declarations: Dict[str, str] = Field(default_factory=dict)
    source: str = ""


def _empty_matches() -> Dict[str, Dict[str, int]]:
    return {
        variant.value: {"by_identity": 0, "by_position": 0, "unmatched": 0}
        for variant in SCOPED_VARIANTS
    }


class MergeStats(BaseModel):
    """Counters accumulated by the passes of one run."""
    elements_processed: int = 0
    elements_merged: int = 0
    classes_merged: int = 0
    conflicts_resolved: int = 0
    elements_with_conflicts: int = 0
    matches: Dict[str, Dict[str, int]] = Field(default_factory=_empty_matches)
    family_resets_emitted: int = 0
    unresolved_removals: int = 0
    resets_applied: int = 0
    overflow_candidates: int = 0
    overflow_containers_annotated: int = 0
    visibility_tokens_injected: int = 0
    missing_elements: int = 0
    extra_identities: int = 0


class MergeResult(BaseModel):
    """Everything a merge run hands to the reporting/rendering side."""
    sample_id: Optional[str] = None
    merged_tree: Element
    stats: MergeStats
    conflicts: List[ConflictRecord] = Field(default_factory=list)
    unmatched: Dict[str, List[UnmatchedElement]] = Field(default_factory=dict)
    extra_identities: Dict[str, List[str]] = Field(default_factory=dict)
    custom_rules: List[CustomRule] = Field(default_factory=list)
    pass_stats: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    completed_passes: List[str] = Field(default_factory=list)

    def unmatched_keys(self, variant: Variant) -> List[str]:
        return [entry.element_key for entry in self.unmatched.get(variant.value, [])]


class StructureInfo(BaseModel):
    """Shape of an identity-bearing element, independent of styling."""
    tag: str
    structure_hash: str
    tokens: List[str] = Field(default_factory=list)
    children_count: int = 0


class StructureComparison(BaseModel):
    """Outcome of comparing one element's structure across two variants."""
    match: bool
    type: Optional[str] = None  # "exact" | "similar"
    strategy: Optional[str] = None  # "css-only" | "component-swap"
    reason: Optional[str] = None  # "missing" | "structure-diff"
    confidence: float = 1.0


class IdentityComparison(BaseModel):
    """Per-identity comparison across the three variants."""
    identity: str
    strategy: str
    wide_medium: StructureComparison
    wide_narrow: StructureComparison
    medium_narrow: StructureComparison


class BreakpointAnalysis(BaseModel):
    """Feasibility report for fusing three variant trees."""
    identity_counts: Dict[str, int] = Field(default_factory=dict)
    common_identities: List[str] = Field(default_factory=list)
    variant_only: Dict[str, List[str]] = Field(default_factory=dict)
    css_only: List[str] = Field(default_factory=list)
    component_swap: List[IdentityComparison] = Field(default_factory=list)
    total_identities: int = 0
    feasibility_score: float = 0.0
    css_only_percentage: float = 0.0

    @property
    def assessment(self) -> str:
        if self.feasibility_score >= 90:
            return "excellent"
        elif self.feasibility_score >= 70:
            return "good"
        return "moderate"
