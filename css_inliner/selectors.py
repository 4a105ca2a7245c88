from __future__ import annotations

from functools import lru_cache
from typing import Callable, Iterator

from cssselect import HTMLTranslator, SelectorError, parse
from cssselect.parser import Attrib, Class, CombinedSelector, Element, Hash
from cssselect.xpath import ExpressionError
from lxml import etree

from .models import Selector, Specificity

ElementPredicate = Callable[[etree._Element], bool]

# Combinators point from the subject element back to the context element.
COMBINATOR_AXES = {
    " ": "ancestor::",
    ">": "parent::",
    "~": "preceding-sibling::",
    "+": "preceding-sibling::*[1]/self::",
}


class AnchoredTranslator(HTMLTranslator):
    """Translate a selector into an XPath test evaluated on the element itself.

    cssselect produces expressions that search downwards from a context node.
    Inlining asks the opposite question for one element at a time, so
    combinators are rewritten into predicates on ancestor and sibling axes:
    ``div > p.note`` becomes ``self::p[...][parent::div]``.
    """

    def selector_to_predicate(self, css: str) -> str:
        selectors = parse(css)
        if len(selectors) != 1:
            raise ExpressionError(f"Expected a single selector, got {css!r}")
        selector = selectors[0]
        if selector.pseudo_element is not None:
            raise ExpressionError(f"Pseudo-elements never match an element: {css!r}")
        return "self::" + self._anchored(selector.parsed_tree)

    def _anchored(self, tree) -> str:
        if isinstance(tree, CombinedSelector):
            axis = COMBINATOR_AXES.get(tree.combinator)
            if axis is None:
                raise ExpressionError(f"Unsupported combinator {tree.combinator!r}")
            subject = self._anchored(tree.subselector)
            context = self._anchored(tree.selector)
            return f"{subject}[{axis}{context}]"
        return str(self.xpath(tree))


_translator = AnchoredTranslator()


def _iter_nodes(tree) -> Iterator[object]:
    """Yield every node of a parsed selector, skipping pseudo-class arguments."""
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, CombinedSelector):
            stack.append(node.subselector)
        base = getattr(node, "selector", None)
        if base is not None:
            stack.append(base)


@lru_cache(maxsize=4096)
def parse_selector(text: str) -> Selector:
    """Parse one selector (no commas) into a classified Selector.

    Selectors cssselect cannot parse or translate come back with
    ``valid=False`` and are therefore treated as dynamic.
    """
    text = text.strip()
    try:
        parsed = parse(text)
    except SelectorError:
        return Selector(text=text, valid=False)
    if len(parsed) != 1:
        return Selector(text=text, valid=False)

    ids = classes = types = 0
    has_pseudo = parsed[0].pseudo_element is not None
    has_attribute = False
    for node in _iter_nodes(parsed[0].parsed_tree):
        if isinstance(node, Hash):
            ids += 1
        elif isinstance(node, Attrib):
            classes += 1
            has_attribute = True
        elif isinstance(node, Class):
            classes += 1
        elif isinstance(node, Element):
            if node.element is not None:
                types += 1
        elif not isinstance(node, CombinedSelector):
            # Pseudo-classes, :not(), :is(), :has() and functional pseudos.
            has_pseudo = True

    valid = True
    if not has_pseudo:
        try:
            _translator.selector_to_predicate(text)
        except (SelectorError, ExpressionError):
            valid = False

    return Selector(
        text=text,
        specificity=Specificity.clamped(ids, classes, types),
        has_pseudo=has_pseudo,
        has_attribute=has_attribute,
        valid=valid,
    )


def calculate_specificity(text: str) -> Specificity:
    return parse_selector(text).specificity


def is_dynamic(text: str) -> bool:
    return parse_selector(text).is_dynamic


def compile_selector(text: str) -> ElementPredicate:
    """Compile a selector into a predicate over a single lxml element."""
    expression = etree.XPath(_translator.selector_to_predicate(text))

    def match(element: etree._Element) -> bool:
        return bool(expression(element))

    return match
