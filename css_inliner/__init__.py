"""
CSS inliner package.

This module exposes the inliner, its resolvers and the template tag helpers.
"""

from __future__ import annotations

__all__ = [
    "AttributePolicy",
    "CSSInliner",
    "InlinerConfig",
    "InlinerError",
    "LoadError",
    "ParseError",
    "StylesheetCache",
    "file_resolver",
    "find_handlebars_tags",
    "less_reader",
    "load_config",
    "null_resolver",
    "read_source",
    "restore",
    "stash",
    "url_resolver",
]

from .cache import StylesheetCache  # noqa: E402
from .config import InlinerConfig, load_config  # noqa: E402
from .errors import InlinerError, LoadError, ParseError  # noqa: E402
from .pipeline import CSSInliner  # noqa: E402
from .resolvers import file_resolver, less_reader, null_resolver, read_source, url_resolver  # noqa: E402
from .rules import AttributePolicy  # noqa: E402
from .template_tags import find_handlebars_tags, restore, stash  # noqa: E402
