from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

import lxml.html
from lxml import etree

from .resolvers import is_absolute_reference
from .style_resolver import local_name

FULL_DOCUMENT_RE = re.compile(r"<(?:!doctype|html|head|body)[\s>/]", re.IGNORECASE)
DOCTYPE_RE = re.compile(r"\A\ufeff?\s*<!doctype[\s>]", re.IGNORECASE)
FRAGMENT_CONTAINER = "div"


@dataclass
class StylesheetReference:
    """A stylesheet found in the document: inline CSS text or a link href."""

    kind: str
    value: str

    @property
    def is_link(self) -> bool:
        return self.kind == "link"


@dataclass
class HtmlDocument:
    """Parsed HTML owned by one pipeline run.

    Complete documents are rooted at <html>. Fragments are parsed into a
    container element that is never styled and never serialized.
    """

    root: etree._Element
    doctype: str | None = None
    fragment: bool = False

    def roots(self) -> List[etree._Element]:
        if not self.fragment:
            return [self.root]
        return [child for child in self.root if isinstance(child.tag, str)]

    def head(self) -> etree._Element | None:
        return None if self.fragment else self.root.find("head")

    def body(self) -> etree._Element | None:
        return None if self.fragment else self.root.find("body")

    def extract_stylesheets(self) -> List[StylesheetReference]:
        """Remove <style> and local stylesheet <link> elements, in document order.

        Links to absolute URLs (``http://``, ``//cdn``) stay in the document.
        """
        references: List[StylesheetReference] = []
        for element in list(self.root.iter(etree.Element)):
            name = local_name(element)
            if name == "style":
                references.append(StylesheetReference("style", element.text or ""))
                element.drop_tree()
            elif name == "link" and is_local_stylesheet(element):
                references.append(StylesheetReference("link", element.get("href").strip()))
                element.drop_tree()
        return references

    def insert_stylesheet(self, css: str) -> etree._Element:
        """Insert a <style> element first in <head>, else <body>, else the document."""
        style = lxml.html.Element("style")
        style.text = css
        parent = self.head()
        if parent is None:
            parent = self.body()
        if parent is None:
            parent = self.root
        style.tail = parent.text
        parent.text = None
        parent.insert(0, style)
        return style

    def serialize(self) -> str:
        if self.fragment:
            markup = lxml.html.tostring(self.root, encoding="unicode")
            return markup[markup.index(">") + 1 : markup.rindex("<")]
        return lxml.html.tostring(self.root, encoding="unicode", doctype=self.doctype)


def is_local_stylesheet(element: etree._Element) -> bool:
    rel = (element.get("rel") or "").lower().split()
    href = (element.get("href") or "").strip()
    return "stylesheet" in rel and bool(href) and not is_absolute_reference(href)


def parse_html(html: str | bytes) -> HtmlDocument:
    if isinstance(html, bytes):
        html = html.decode("utf-8")
    if FULL_DOCUMENT_RE.search(html):
        root = lxml.html.document_fromstring(html)
        # lxml reports a default HTML 4 doctype when the source has none.
        doctype = None
        if DOCTYPE_RE.match(html):
            doctype = root.getroottree().docinfo.doctype or None
        return HtmlDocument(root=root, doctype=doctype)
    root = lxml.html.fragment_fromstring(html, create_parent=FRAGMENT_CONTAINER)
    return HtmlDocument(root=root, fragment=True)
