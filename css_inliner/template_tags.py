"""
Protect template-language tags from the HTML parser and serializer.

Before parsing, every tag reported by a tag finder is replaced with a marker
``tag:<md5 of tag>``. The marker is a valid attribute value and also parses
as a CSS declaration, so ``style="{{styles}}"`` survives inlining. After
serializing, markers are replaced with the original tags.
"""

from __future__ import annotations

import hashlib
import re
from typing import Callable, Dict, Iterable, List, Tuple

TagFinder = Callable[[str], Iterable[str]]

MARKER_PREFIX = "tag:"
MARKER_RE = re.compile(r"tag:([0-9a-f]{32})")
RAW_BLOCK_NAME_RE = re.compile(r"\{\{\{\{\s*([^\s}]+)")


def hash_tag(tag: str) -> str:
    return hashlib.md5(tag.encode("utf-8"), usedforsecurity=False).hexdigest()


def stash(html: str, find_tags: TagFinder) -> Tuple[str, Dict[str, str]]:
    """Replace template tags with markers, returning the marked HTML and the stash."""
    # Longest first: one tag may contain another, e.g. {{a}} inside {{{a}}}.
    tags = sorted({tag for tag in find_tags(html) if tag}, key=len, reverse=True)
    stashed: Dict[str, str] = {}
    for tag in tags:
        digest = hash_tag(tag)
        stashed[digest] = tag
        html = html.replace(tag, MARKER_PREFIX + digest)
    return html, stashed


def restore(html: str, stashed: Dict[str, str]) -> str:
    """Put back stashed tags. Markers with no stash entry are left as they are."""

    def replace(match: re.Match) -> str:
        return stashed.get(match.group(1), match.group(0))

    return MARKER_RE.sub(replace, html)


def find_handlebars_tags(template: str) -> List[str]:
    """Find Handlebars/Mustache tags in document order.

    Handles expressions ``{{name}}``, unescaped ``{{{html}}}``, comments
    ``{{!-- --}}`` and raw blocks ``{{{{raw}}}} ... {{{{/raw}}}}``, which are
    returned whole so their content never reaches the HTML parser.
    Escaped expressions ``\\{{name}}`` are plain text.
    """
    tags: List[str] = []
    position = 0
    while True:
        start = template.find("{{", position)
        if start < 0:
            break

        if start > 0 and template[start - 1] == "\\":
            end = template.find("}}", start + 2)
            if end < 0:
                break
            position = end + 2
            continue

        if template.startswith("{{{{", start):
            end = template.find("}}}}", start + 4)
            if end < 0:
                break
            position = end + 4
            name = RAW_BLOCK_NAME_RE.match(template, start)
            if name and not name.group(1).startswith("/"):
                closing_re = re.compile(r"\{\{\{\{/\s*" + re.escape(name.group(1)) + r"\s*\}\}\}\}")
                closing = closing_re.search(template, position)
                if closing is not None:
                    position = closing.end()
            tags.append(template[start:position])
            continue

        if template.startswith("{{!--", start):
            closer = "--}}"
        elif template.startswith("{{{", start):
            closer = "}}}"
        else:
            closer = "}}"
        end = template.find(closer, start + 2)
        if end < 0:
            break
        tags.append(template[start : end + len(closer)])
        position = end + len(closer)
    return tags
