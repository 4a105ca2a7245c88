"""
Resolve stylesheet references found in a document and read their source.

Resolvers turn the ``href`` of a ``<link>`` element into an identifier (a
filename or URL) that is guaranteed to stay inside a base directory or base
URL, so a document cannot reach ``../../etc/passwd``. A resolver returns
``None`` for references it refuses to resolve.
"""

from __future__ import annotations

import errno
import io
import os
import posixpath
import re
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, urljoin, urlparse

import lesscpy
import requests

from .errors import LoadError

Resolver = Callable[[str], Optional[str]]
Reader = Callable[[str], str]

ABSOLUTE_REFERENCE_RE = re.compile(r"^(//|[a-zA-Z][a-zA-Z0-9+.-]*:)")
HTTP_RE = re.compile(r"^https?://", re.IGNORECASE)
DEFAULT_TIMEOUT = 10.0
LESS_EXTENSION = ".less"


def is_absolute_reference(reference: str) -> bool:
    """True for references naming a host or scheme (``//cdn/x.css``, ``http://``)."""
    return bool(ABSOLUTE_REFERENCE_RE.match(reference.strip()))


def _anchored_path(reference: str) -> str:
    # "../foo" becomes "/foo", so it cannot climb out of the base.
    path = unquote(urlparse(reference.replace("\\", "/")).path)
    return posixpath.normpath("/" + path).lstrip("/")


def file_resolver(directory: str | os.PathLike | None = None) -> Resolver:
    """Resolve relative URLs to files within ``directory``.

    file_resolver("/var/www")("/foo.css")        -> "/var/www/foo.css"
    file_resolver("/var/www")("../../foo.css")   -> "/var/www/foo.css"
    file_resolver("/var/www")("//cdn/foo.css")   -> None
    """
    base = Path(os.path.abspath(directory or "."))

    def resolve(reference: str) -> str | None:
        trimmed = reference.strip()
        if not trimmed or is_absolute_reference(trimmed):
            return None
        return str(base / _anchored_path(trimmed))

    return resolve


def url_resolver(base_url: str) -> Resolver:
    """Resolve paths to URLs within ``base_url``."""
    parsed = urlparse(base_url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Base URL must include scheme and host name: {base_url!r}")
    base = base_url if base_url.endswith("/") else base_url + "/"

    def resolve(reference: str) -> str | None:
        trimmed = reference.strip()
        if not trimmed:
            return None
        return urljoin(base, _anchored_path(trimmed))

    return resolve


def null_resolver() -> Resolver:
    """Resolver used when no directory or base URL is configured."""

    def resolve(reference: str) -> str | None:
        return None

    return resolve


def read_source(identifier: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Read stylesheet source from a file or an http(s) URL."""
    if HTTP_RE.match(identifier):
        try:
            response = requests.get(identifier, timeout=timeout)
        except requests.RequestException as exc:
            raise LoadError(f"Cannot fetch stylesheet {identifier}: {exc}", identifier, type(exc).__name__) from exc
        if response.status_code != 200:
            raise LoadError(
                f"Expected OK, got status code {response.status_code} for {identifier}",
                identifier,
                str(response.status_code),
            )
        return response.text

    try:
        return Path(identifier).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise LoadError(f"Stylesheet {identifier} is not valid UTF-8", identifier, "EILSEQ") from exc
    except OSError as exc:
        code = errno.errorcode.get(exc.errno, type(exc).__name__) if exc.errno else type(exc).__name__
        raise LoadError(f"Cannot read stylesheet {identifier}: {exc.strerror or exc}", identifier, code) from exc


def less_reader(read: Reader | None = None) -> Reader:
    """Wrap a reader so that ``.less`` stylesheets are compiled to CSS.

    Other identifiers are passed through unchanged.
    """
    read = read or read_source

    def read_less(identifier: str) -> str:
        source = read(identifier)
        if not is_less(identifier):
            return source
        try:
            return lesscpy.compile(io.StringIO(source), minify=False)
        except Exception as exc:
            raise LoadError(f"Cannot compile Less stylesheet {identifier}: {exc}", identifier, "ELESS") from exc

    return read_less


def is_less(identifier: str) -> bool:
    return posixpath.splitext(urlparse(identifier).path)[1].lower() == LESS_EXTENSION
