from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Sequence

import tinycss2

from .errors import ParseError
from .models import AtRule, Declaration, Rule, StyleRule, StylesheetResult
from .selectors import parse_selector

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "<css input>"

# At-rules whose block is a list of descriptors rather than nested rules.
DESCRIPTOR_AT_RULES = frozenset(
    {"font-face", "page", "counter-style", "property", "font-palette-values", "viewport", "-ms-viewport"}
)
GROUPING_AT_RULES = frozenset(
    {"media", "supports", "document", "-moz-document", "layer", "container", "scope", "starting-style"}
)

Processor = Callable[[List[Rule], List[str]], List[Rule]]


class StylesheetParser:
    """Parse CSS source into StyleRule/AtRule values.

    Syntax errors at the top level of the stylesheet raise ParseError.
    Problems inside a rule body (invalid declarations, nested rules) are
    reported as warnings and the offending part is skipped.
    """

    def __init__(self, processors: Iterable[Processor] | None = None):
        self.processors: List[Processor] = list(processors or [])

    def parse(self, text: str, source: str = DEFAULT_SOURCE) -> StylesheetResult:
        warnings: List[str] = []
        nodes = tinycss2.parse_stylesheet(text, skip_comments=True, skip_whitespace=True)
        for node in nodes:
            if node.type == "error":
                raise ParseError(node.message, node.source_line, node.source_column, source)
        rules = _convert_rules(nodes, source, warnings)
        for processor in self.processors:
            rules = list(processor(rules, warnings))
        logger.debug("Parsed %d rules from %s", len(rules), source)
        return StylesheetResult(rules=tuple(rules), warnings=tuple(warnings))


def _convert_rules(nodes: Sequence, source: str, warnings: List[str]) -> List[Rule]:
    rules: List[Rule] = []
    for node in nodes:
        if node.type == "qualified-rule":
            selectors = tuple(parse_selector(text) for text in _split_selectors(node.prelude))
            if not selectors:
                warnings.append(_warning(source, node, "Rule without selector ignored"))
                continue
            declarations = _convert_declarations(node.content, source, warnings)
            rules.append(StyleRule(selectors=selectors, declarations=declarations))
        elif node.type == "at-rule":
            rules.append(_convert_at_rule(node, source, warnings))
        elif node.type == "error":
            warnings.append(_warning(source, node, node.message))
    return rules


def _convert_at_rule(node, source: str, warnings: List[str]) -> AtRule:
    name = node.lower_at_keyword
    params = _serialize(node.prelude)
    if node.content is None:
        return AtRule(name=name, params=params)
    if name in DESCRIPTOR_AT_RULES:
        return AtRule(name=name, params=params, declarations=_convert_declarations(node.content, source, warnings))
    if name in GROUPING_AT_RULES or name.endswith("keyframes"):
        nested = tinycss2.parse_rule_list(node.content, skip_comments=True, skip_whitespace=True)
        return AtRule(name=name, params=params, rules=tuple(_convert_rules(nested, source, warnings)))
    return AtRule(name=name, params=params, block=tinycss2.serialize(node.content).strip())


def _convert_declarations(content: Sequence, source: str, warnings: List[str]) -> tuple:
    declarations: List[Declaration] = []
    for node in tinycss2.parse_declaration_list(content, skip_comments=True, skip_whitespace=True):
        if node.type == "declaration":
            declarations.append(_to_declaration(node))
        elif node.type == "error":
            warnings.append(_warning(source, node, node.message))
        else:
            warnings.append(_warning(source, node, f"Nested {node.type} ignored"))
    return tuple(declarations)


def _to_declaration(node) -> Declaration:
    # Custom properties are case-sensitive.
    name = node.name if node.name.startswith("--") else node.lower_name
    return Declaration(name=name, value=_serialize(node.value), important=bool(node.important))


def _split_selectors(prelude: Sequence) -> List[str]:
    groups: List[list] = [[]]
    for token in prelude:
        if token.type == "literal" and token.value == ",":
            groups.append([])
        else:
            groups[-1].append(token)
    texts = [_serialize(group) for group in groups]
    return [text for text in texts if text]


def _serialize(tokens: Sequence) -> str:
    """Serialize component values with runs of whitespace collapsed to one space."""
    return "".join(" " if token.type == "whitespace" else token.serialize() for token in tokens).strip()


def _warning(source: str, node, message: str) -> str:
    return f"{source}:{node.source_line}:{node.source_column}: {message}"


def parse_inline_style(style_value: str) -> List[Declaration]:
    """Parse the value of a style attribute into declarations, in order.

    Invalid declarations are dropped.
    """
    declarations: List[Declaration] = []
    if not style_value or not style_value.strip():
        return declarations
    for node in tinycss2.parse_declaration_list(style_value, skip_comments=True, skip_whitespace=True):
        if node.type == "declaration":
            declarations.append(_to_declaration(node))
    return declarations


def serialize_rules(rules: Iterable[Rule]) -> str:
    """Serialize rules into compact CSS text."""
    return "".join(serialize_rule(rule) for rule in rules)


def serialize_rule(rule: Rule) -> str:
    if isinstance(rule, StyleRule):
        return f"{rule.selector_text}{{{serialize_declarations(rule.declarations)}}}"
    prelude = f"@{rule.name} {rule.params}" if rule.params else f"@{rule.name}"
    if rule.rules is not None:
        return f"{prelude}{{{serialize_rules(rule.rules)}}}"
    if rule.declarations is not None:
        return f"{prelude}{{{serialize_declarations(rule.declarations)}}}"
    if rule.block is not None:
        return f"{prelude}{{{rule.block}}}"
    return f"{prelude};"


def serialize_declarations(declarations: Iterable[Declaration]) -> str:
    return ";".join(declaration.css_text() for declaration in declarations)
