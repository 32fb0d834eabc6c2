"""
Style token parsing and the declarative style-family table.

A token is ``[scope:]base`` where scope is one of the configured breakpoint
prefixes. Families group tokens that set the same style property, either by
enumeration (mutually exclusive values) or by prefix pattern.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple

from responsive_merge.models import SCOPED_VARIANTS, BreakpointConfig, Variant


EXCLUSIVE = "exclusive"
PATTERN = "pattern"


@dataclass(frozen=True)
class StyleFamily:
    """One style property family.

    Attributes:
        name: Family name, also used as the conflict group name
        kind: EXCLUSIVE (enumerated values) or PATTERN (prefix regex)
        values: Enumerated tokens for EXCLUSIVE families
        pattern: Regex matched against the base token for PATTERN families
        conflict_checked: Whether the conflict detector reports this family
        dimensional: Whether the family is excluded from core similarity
        reset_token: Axis-neutral default emitted when a variant drops the family
        declarations: CSS declarations of the reset token
    """
    name: str
    kind: str
    values: Tuple[str, ...] = ()
    pattern: Optional[Pattern] = None
    conflict_checked: bool = False
    dimensional: bool = False
    reset_token: Optional[str] = None
    declarations: Tuple[Tuple[str, str], ...] = ()

    def matches(self, base: str) -> bool:
        if self.kind == EXCLUSIVE:
            return base in self.values
        return bool(self.pattern.match(base))


FAMILIES: Tuple[StyleFamily, ...] = (
    # Mutually exclusive groups
    StyleFamily(
        "flexDirection", EXCLUSIVE,
        values=("flex-row", "flex-col", "flex-row-reverse", "flex-col-reverse"),
        conflict_checked=True, reset_token="flex-row",
        declarations=(("flex-direction", "row"),),
    ),
    StyleFamily(
        "alignItems", EXCLUSIVE,
        values=("items-start", "items-center", "items-end", "items-baseline", "items-stretch"),
        conflict_checked=True, reset_token="items-stretch",
        declarations=(("align-items", "stretch"),),
    ),
    StyleFamily(
        "justifyContent", EXCLUSIVE,
        values=("justify-start", "justify-center", "justify-end",
                "justify-between", "justify-around", "justify-evenly"),
        conflict_checked=True, reset_token="justify-start",
        declarations=(("justify-content", "flex-start"),),
    ),
    StyleFamily(
        "alignContent", EXCLUSIVE,
        values=("content-start", "content-center", "content-end",
                "content-between", "content-around", "content-evenly", "content-stretch"),
        conflict_checked=True,
    ),
    StyleFamily(
        "display", EXCLUSIVE,
        values=("block", "inline-block", "inline", "flex", "inline-flex", "grid", "inline-grid", "hidden"),
        conflict_checked=True,
    ),
    StyleFamily(
        "position", EXCLUSIVE,
        values=("static", "fixed", "absolute", "relative", "sticky"),
        conflict_checked=True, reset_token="static",
        declarations=(("position", "static"),),
    ),
    # Multi-valued sizing families
    StyleFamily("width", PATTERN, pattern=re.compile(r"^w-"), conflict_checked=True,
                dimensional=True, reset_token="w-auto", declarations=(("width", "auto"),)),
    StyleFamily("minWidth", PATTERN, pattern=re.compile(r"^min-w-"), conflict_checked=True,
                dimensional=True, reset_token="min-w-0", declarations=(("min-width", "0px"),)),
    StyleFamily("maxWidth", PATTERN, pattern=re.compile(r"^max-w-"), conflict_checked=True,
                dimensional=True, reset_token="max-w-none", declarations=(("max-width", "none"),)),
    StyleFamily("height", PATTERN, pattern=re.compile(r"^h-"), conflict_checked=True,
                dimensional=True, reset_token="h-auto", declarations=(("height", "auto"),)),
    StyleFamily("minHeight", PATTERN, pattern=re.compile(r"^min-h-"), conflict_checked=True,
                dimensional=True, reset_token="min-h-0", declarations=(("min-height", "0px"),)),
    StyleFamily("maxHeight", PATTERN, pattern=re.compile(r"^max-h-"), conflict_checked=True,
                dimensional=True, reset_token="max-h-none", declarations=(("max-height", "none"),)),
    StyleFamily("basis", PATTERN, pattern=re.compile(r"^basis-"), conflict_checked=True,
                dimensional=True, reset_token="basis-auto", declarations=(("flex-basis", "auto"),)),
    StyleFamily("grow", PATTERN, pattern=re.compile(r"^grow(-|$)"), conflict_checked=True,
                dimensional=True, reset_token="grow-0", declarations=(("flex-grow", "0"),)),
    StyleFamily("shrink", PATTERN, pattern=re.compile(r"^shrink(-|$)"), conflict_checked=True,
                dimensional=True, reset_token="shrink", declarations=(("flex-shrink", "1"),)),
    # Merge-only families
    StyleFamily("gap", PATTERN, pattern=re.compile(r"^gap-"), dimensional=True,
                reset_token="gap-0", declarations=(("gap", "0px"),)),
    StyleFamily("padding", PATTERN, pattern=re.compile(r"^p[xytrbl]?-"), dimensional=True,
                reset_token="p-0", declarations=(("padding", "0px"),)),
    StyleFamily("margin", PATTERN, pattern=re.compile(r"^-?m[xytrbl]?-"), dimensional=True,
                reset_token="m-0", declarations=(("margin", "0px"),)),
    StyleFamily("flexWrap", EXCLUSIVE, values=("flex-wrap", "flex-wrap-reverse", "flex-nowrap"),
                reset_token="flex-nowrap", declarations=(("flex-wrap", "nowrap"),)),
    StyleFamily("overflowX", PATTERN, pattern=re.compile(r"^overflow-x-"),
                reset_token="overflow-x-visible", declarations=(("overflow-x", "visible"),)),
    StyleFamily("overflowY", PATTERN, pattern=re.compile(r"^overflow-y-"),
                reset_token="overflow-y-visible", declarations=(("overflow-y", "visible"),)),
)

FAMILIES_BY_NAME: Dict[str, StyleFamily] = {family.name: family for family in FAMILIES}

# Declarations for tokens synthesized by passes other than the merger
SYNTHESIZED_DECLARATIONS: Dict[str, Dict[str, str]] = {
    "overflow-x-auto": {"overflow-x": "auto"},
    "overflow-x-scroll": {"overflow-x": "scroll"},
    "hidden": {"display": "none"},
    "block": {"display": "block"},
    "flex": {"display": "flex"},
    "inline-flex": {"display": "inline-flex"},
    "grid": {"display": "grid"},
    "inline-grid": {"display": "inline-grid"},
    "inline-block": {"display": "inline-block"},
    "inline": {"display": "inline"},
}


def family_of(base: str) -> Optional[StyleFamily]:
    """Return the first family recognizing a base token, if any."""
    for family in FAMILIES:
        if family.matches(base):
            return family
    return None


def is_dimensional(base: str) -> bool:
    family = family_of(base)
    return family is not None and family.dimensional


def declarations_for(base: str) -> Dict[str, str]:
    """CSS declarations for a reset or synthesized base token."""
    if base in SYNTHESIZED_DECLARATIONS:
        return dict(SYNTHESIZED_DECLARATIONS[base])
    family = family_of(base)
    if family is not None and family.reset_token == base:
        return dict(family.declarations)
    return {}


class TokenParser:
    """Splits tokens into (scope, base) using the configured prefixes."""

    def __init__(self, breakpoints: BreakpointConfig):
        self.breakpoints = breakpoints
        self._prefixes = {
            f"{breakpoints.prefix_for(variant)}{breakpoints.separator}": variant
            for variant in SCOPED_VARIANTS
        }

    def parse(self, token: str) -> Tuple[Optional[Variant], str]:
        """Split a token into its breakpoint scope (or None) and base token."""
        for prefix, variant in self._prefixes.items():
            if token.startswith(prefix) and len(token) > len(prefix):
                return variant, token[len(prefix):]
        return None, token

    def scope_of(self, token: str) -> Optional[Variant]:
        return self.parse(token)[0]

    def base_of(self, token: str) -> str:
        return self.parse(token)[1]

    def scoped(self, variant: Variant, base: str) -> str:
        return self.breakpoints.scoped(variant, base)

    def unscoped(self, tokens: Iterable[str]) -> List[str]:
        return [token for token in tokens if self.scope_of(token) is None]

    def scoped_bases(self, tokens: Iterable[str], variant: Variant) -> List[str]:
        """Base tokens scoped to exactly the given variant, in order."""
        bases = []
        for token in tokens:
            scope, base = self.parse(token)
            if scope == variant:
                bases.append(base)
        return bases

    def effective(self, tokens: Sequence[str], active: Sequence[Variant]) -> List[str]:
        """Resolve the unscoped tokens that apply when the given scopes are active.

        Scoped tokens are applied in cascade order; each replaces every token
        of its family, unfamilied tokens are appended.

        Args:
            tokens: Token list, possibly containing scoped tokens
            active: Active scopes, widest first (e.g. [MEDIUM, NARROW])

        Returns:
            Effective token list without scope prefixes
        """
        result = self.unscoped(tokens)
        for variant in active:
            for base in self.scoped_bases(tokens, variant):
                family = family_of(base)
                if family is not None:
                    result = [t for t in result if not family.matches(t)]
                if base not in result:
                    result.append(base)
        return result


def active_scopes(variant: Variant) -> List[Variant]:
    """Scopes that apply at a variant's own width."""
    if variant == Variant.MEDIUM:
        return [Variant.MEDIUM]
    elif variant == Variant.NARROW:
        return [Variant.MEDIUM, Variant.NARROW]
    return []


def scopes_before(variant: Variant) -> List[Variant]:
    """Scopes already applied when a variant's own overrides take effect."""
    if variant == Variant.NARROW:
        return [Variant.MEDIUM]
    return []


def family_tokens(tokens: Iterable[str], family: StyleFamily) -> List[str]:
    return [token for token in tokens if family.matches(token)]

