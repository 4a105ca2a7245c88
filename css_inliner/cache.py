from __future__ import annotations

import hashlib
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, Iterable

from .errors import LoadError
from .models import StylesheetResult
from .resolvers import Reader, Resolver, null_resolver, read_source
from .stylesheet import Processor, StylesheetParser

logger = logging.getLogger(__name__)


class StylesheetCache:
    """Compile and load stylesheets, keeping parsed results in memory.

    One instance is shared by every document an inliner processes. For each
    key at most one parse (or load-and-parse) runs at a time; concurrent
    callers for the same key wait for it and receive the same result object.
    Successful results are kept for the lifetime of the cache. Failures are
    raised to every waiting caller and then forgotten, so the next call
    retries.
    """

    def __init__(
        self,
        resolve: Resolver | None = None,
        read: Reader | None = None,
        processors: Iterable[Processor] | None = None,
        parser: StylesheetParser | None = None,
    ):
        self.resolve: Resolver = resolve or null_resolver()
        self.read: Reader = read or read_source
        self.parser = parser or StylesheetParser(processors)
        self._lock = threading.Lock()
        self._entries: Dict[str, Future] = {}

    def compile(self, source: str | bytes) -> StylesheetResult:
        """Parse CSS source text, keyed by a hash of its content."""
        text = source.decode("utf-8") if isinstance(source, bytes) else str(source)
        key = "sha1:" + hashlib.sha1(text.encode("utf-8")).hexdigest()
        return self._get_or_compute(key, lambda: self.parser.parse(text))

    def load(self, reference: str) -> StylesheetResult:
        """Resolve a stylesheet reference, then read and parse it."""
        identifier = self.resolve(reference)
        if identifier is None:
            raise LoadError(f"Cannot resolve external stylesheet {reference!r}", identifier=reference)
        logger.debug("Resolved stylesheet %r to %s", reference, identifier)

        def compute() -> StylesheetResult:
            return self.parser.parse(self.read(identifier), source=identifier)

        return self._get_or_compute("path:" + identifier, compute)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _get_or_compute(self, key: str, compute: Callable[[], StylesheetResult]) -> StylesheetResult:
        with self._lock:
            future = self._entries.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._entries[key] = future

        if not owner:
            logger.debug("Stylesheet cache hit for %s", key)
            return future.result()

        logger.debug("Stylesheet cache miss for %s", key)
        try:
            result = compute()
        except BaseException as exc:
            with self._lock:
                if self._entries.get(key) is future:
                    del self._entries[key]
            future.set_exception(exc)
            raise
        future.set_result(result)
        return result
