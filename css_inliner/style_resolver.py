from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Tuple

from cssselect import SelectorError
from lxml import etree

from .models import INLINE_SPECIFICITY, Declaration, Property, Selector, Specificity, StyleRule
from .selectors import ElementPredicate, compile_selector
from .stylesheet import parse_inline_style

logger = logging.getLogger(__name__)

# Never rendered as a box, so never styled. Its children are still visited.
UNSTYLED_ELEMENTS = frozenset({"head"})


@dataclass(frozen=True)
class Matcher:
    """One selector of an inlinable rule, ready to test against elements."""

    predicate: ElementPredicate
    specificity: Specificity
    declarations: Tuple[Declaration, ...]
    selector: Selector

    def __call__(self, element: etree._Element) -> bool:
        return self.predicate(element)


def compile_matchers(rules: Iterable[StyleRule]) -> List[Matcher]:
    """Compile one matcher per (rule, selector), in document order."""
    predicates: Dict[str, ElementPredicate | None] = {}
    matchers: List[Matcher] = []
    for rule in rules:
        for selector in rule.selectors:
            if selector.text not in predicates:
                try:
                    predicates[selector.text] = compile_selector(selector.text)
                except (SelectorError, etree.XPathError) as exc:
                    logger.warning("Selector %r cannot be matched and is not inlined: %s", selector.text, exc)
                    predicates[selector.text] = None
            predicate = predicates[selector.text]
            if predicate is not None:
                matchers.append(Matcher(predicate, selector.specificity, rule.declarations, selector))
    return matchers


def precedence(existing: Property | None, incoming: Property | None) -> Property | None:
    """Return whichever of two values for the same property wins.

    Important beats not important, then higher specificity wins, and on a tie
    the incoming (later) property wins.
    """
    if existing is None:
        return incoming
    if incoming is None:
        return existing
    if existing.important != incoming.important:
        return existing if existing.important else incoming
    if existing.specificity > incoming.specificity:
        return existing
    return incoming


def merge_property(properties: Dict[str, Property], candidate: Property) -> None:
    # Assigning to an existing key keeps its position in the dict.
    properties[candidate.name] = precedence(properties.get(candidate.name), candidate)


def format_style(properties: Iterable[Property]) -> str:
    return ";".join(f"{prop.name}:{prop.value}" for prop in properties)


def local_name(element: etree._Element) -> str:
    return etree.QName(element.tag).localname.lower()


class StyleResolver:
    """Resolve and write inline styles for every element of a tree."""

    def __init__(self, rules: Iterable[StyleRule]):
        self.matchers = compile_matchers(rules)

    def resolve(self, element: etree._Element) -> Dict[str, Property]:
        properties: Dict[str, Property] = {}
        for declaration in parse_inline_style(element.get("style", "")):
            merge_property(properties, Property.from_declaration(declaration, INLINE_SPECIFICITY))

        for matcher in self.matchers:
            if matcher(element):
                for declaration in matcher.declarations:
                    merge_property(properties, Property.from_declaration(declaration, matcher.specificity))
        return properties

    def apply_to_element(self, element: etree._Element) -> None:
        properties = self.resolve(element)
        if properties:
            element.set("style", format_style(properties.values()))

    def apply(self, roots: Iterable[etree._Element]) -> int:
        """Inline styles into every styleable element below ``roots``.

        Returns the number of elements visited.
        """
        visited = 0
        for element in iter_styleable(roots):
            self.apply_to_element(element)
            visited += 1
        return visited


def iter_styleable(roots: Iterable[etree._Element]) -> Iterator[etree._Element]:
    """Depth-first, pre-order walk over elements, skipping <head> itself."""
    for root in roots:
        for element in root.iter(etree.Element):
            if local_name(element) not in UNSTYLED_ELEMENTS:
                yield element
