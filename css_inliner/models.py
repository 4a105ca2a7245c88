from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Tuple, Union

MAX_SPECIFICITY_DIGIT = 9


@dataclass(frozen=True, order=True)
class Specificity:
    """Selector weight as (ids, classes and attributes, types)."""

    ids: int = 0
    classes: int = 0
    types: int = 0

    @classmethod
    def clamped(cls, ids: int, classes: int, types: int) -> "Specificity":
        return cls(
            min(ids, MAX_SPECIFICITY_DIGIT),
            min(classes, MAX_SPECIFICITY_DIGIT),
            min(types, MAX_SPECIFICITY_DIGIT),
        )

    def __str__(self) -> str:
        return f"{self.ids}{self.classes}{self.types}"


# Declarations from an element's own style attribute outrank every selector.
INLINE_SPECIFICITY = Specificity(MAX_SPECIFICITY_DIGIT + 1, 0, 0)


@dataclass(frozen=True)
class Selector:
    text: str
    specificity: Specificity = field(default_factory=Specificity)
    has_pseudo: bool = False
    has_attribute: bool = False
    valid: bool = True

    @property
    def is_dynamic(self) -> bool:
        return self.has_pseudo or self.has_attribute or not self.valid

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Declaration:
    name: str
    value: str
    important: bool = False

    def css_text(self) -> str:
        suffix = " !important" if self.important else ""
        return f"{self.name}:{self.value}{suffix}"


@dataclass(frozen=True)
class StyleRule:
    selectors: Tuple[Selector, ...]
    declarations: Tuple[Declaration, ...] = ()

    def with_selectors(self, selectors: Iterable[Selector]) -> "StyleRule":
        return replace(self, selectors=tuple(selectors))

    def importantized(self) -> "StyleRule":
        return replace(self, declarations=tuple(replace(d, important=True) for d in self.declarations))

    @property
    def selector_text(self) -> str:
        return ",".join(selector.text for selector in self.selectors)


@dataclass(frozen=True)
class AtRule:
    """At-rule such as @media or @font-face.

    ``rules`` holds nested rules for grouping at-rules (@media, @supports).
    ``declarations`` holds the body of descriptor at-rules (@font-face, @page).
    ``block`` is an unstructured body kept verbatim. When all three are
    ``None`` the at-rule is a statement such as @import.
    """

    name: str
    params: str = ""
    rules: Tuple["Rule", ...] | None = None
    declarations: Tuple[Declaration, ...] | None = None
    block: str | None = None

    def importantized(self) -> "AtRule":
        if self.rules is None:
            return self
        return replace(self, rules=tuple(rule.importantized() for rule in self.rules))


Rule = Union[StyleRule, AtRule]


@dataclass(frozen=True)
class Property:
    """Resolved value of one CSS property on one element."""

    name: str
    value: str
    important: bool = False
    specificity: Specificity = field(default_factory=Specificity)

    @classmethod
    def from_declaration(cls, declaration: Declaration, specificity: Specificity) -> "Property":
        return cls(
            name=declaration.name,
            value=declaration.value,
            important=declaration.important,
            specificity=specificity,
        )


@dataclass(frozen=True)
class StylesheetResult:
    """Parsed stylesheet as held by the cache."""

    rules: Tuple[Rule, ...] = ()
    warnings: Tuple[str, ...] = ()


@dataclass
class RulePartition:
    inline: List[StyleRule] = field(default_factory=list)
    preserve: List[Rule] = field(default_factory=list)

    def summary(self) -> str:
        return f"{len(self.inline)} inline, {len(self.preserve)} preserved"
