from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from .cache import StylesheetCache
from .config import InlinerConfig
from .document import HtmlDocument, parse_html
from .models import Rule
from .resolvers import Reader, Resolver, file_resolver, less_reader, url_resolver
from .rules import AttributePolicy, partition_rules
from .style_resolver import StyleResolver
from .stylesheet import Processor, serialize_rules
from .template_tags import TagFinder, find_handlebars_tags, restore, stash

logger = logging.getLogger(__name__)

WarningSink = Callable[[str], None]


def log_warning(warning: str) -> None:
    """Default observer for stylesheet warnings."""
    logger.warning("CSS warning: %s", warning)


class CSSInliner:
    """Inline the stylesheets of HTML documents into style attributes.

    One inliner is meant to be long-lived: its stylesheet cache is shared by
    every document it processes, including from several threads at once.
    """

    def __init__(
        self,
        directory: str | None = None,
        base_url: str | None = None,
        resolve: Resolver | None = None,
        read: Reader | None = None,
        processors: Iterable[Processor] | None = None,
        attribute_policy: AttributePolicy | str = AttributePolicy.PRESERVE,
        importantize_preserved: bool = False,
        find_tags: TagFinder | None = None,
        on_warning: WarningSink | None = None,
        cache: StylesheetCache | None = None,
    ):
        if resolve is None:
            if directory is not None:
                resolve = file_resolver(directory)
            elif base_url is not None:
                resolve = url_resolver(base_url)
        self.cache = cache or StylesheetCache(resolve=resolve, read=read, processors=processors)
        self.attribute_policy = AttributePolicy.coerce(attribute_policy)
        self.importantize_preserved = importantize_preserved
        self.find_tags = find_tags
        self.on_warning = on_warning

    @classmethod
    def from_config(cls, config: InlinerConfig, **kwargs) -> "CSSInliner":
        if config.less:
            kwargs["read"] = less_reader(kwargs.get("read"))
        return cls(
            directory=config.directory,
            base_url=config.base_url,
            attribute_policy=config.attribute_policy,
            importantize_preserved=config.importantize_preserved,
            find_tags=find_handlebars_tags if config.handlebars else None,
            **kwargs,
        )

    def inline(self, html: str | bytes, on_warning: WarningSink | None = None) -> str:
        """Inline CSS into the document.

        Rules that apply to elements directly are written into their style
        attributes. Rules that cannot be inlined (media queries, pseudo
        selectors, ...) are added back in a single <style> element.
        """
        marked, stashed = self._stash(html)
        document = parse_html(marked)
        rules = self._extract_rules(document, on_warning)

        partition = partition_rules(rules, self.attribute_policy)
        visited = StyleResolver(partition.inline).apply(document.roots())
        logger.debug("Applied %d inline rules to %d elements", len(partition.inline), visited)

        preserved: Sequence[Rule] = partition.preserve
        if self.importantize_preserved:
            preserved = [rule.importantized() for rule in preserved]
        self._add_rules(document, preserved)
        return restore(document.serialize(), stashed)

    def critical(self, html: str | bytes, on_warning: WarningSink | None = None) -> str:
        """Gather all stylesheets into a single <style> element, without inlining."""
        marked, stashed = self._stash(html)
        document = parse_html(marked)
        rules = self._extract_rules(document, on_warning)
        self._add_rules(document, rules)
        return restore(document.serialize(), stashed)

    def _stash(self, html: str | bytes) -> Tuple[str, Dict[str, str]]:
        if isinstance(html, bytes):
            html = html.decode("utf-8")
        if self.find_tags is None:
            return html, {}
        return stash(html, self.find_tags)

    def _extract_rules(self, document: HtmlDocument, on_warning: WarningSink | None) -> List[Rule]:
        rules: List[Rule] = []
        warnings: List[str] = []
        for reference in document.extract_stylesheets():
            if reference.is_link:
                result = self.cache.load(reference.value)
            else:
                result = self.cache.compile(reference.value)
            rules.extend(result.rules)
            warnings.extend(result.warnings)

        sink = on_warning or self.on_warning or log_warning
        for warning in warnings:
            sink(warning)
        return rules

    @staticmethod
    def _add_rules(document: HtmlDocument, rules: Sequence[Rule]) -> None:
        if rules:
            document.insert_stylesheet(serialize_rules(rules))
