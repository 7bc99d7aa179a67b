"""
core/data/inventory/resolver.py - Identifier resolution cache

Memoizes ``(kind, id) -> object`` lookups for the lifetime of one adapter.
Resolved names are session/region specific, so a resolver is never shared
across adapters and there is no global instance.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from core.exceptions import APICallError, ResolveError, ValidationError
from core.parallel.retry import categorize_error, get_error_code

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, str], Any]


@dataclass(frozen=True)
class ResolveFailure:
    """A lookup that failed and was degraded to an empty display value"""

    kind: str
    identifier: str
    error_code: str
    category: str


class CacheResolver:
    """Memoizing ``(kind, id)`` resolver

    The first ``resolve`` of a key calls ``get_by_id`` and stores the result;
    later calls return the cached object. Failures are never cached, so the
    next access retries.

    Writes go through one lock, and a per-key in-flight lock makes concurrent
    resolves of the same key share a single fetch (fan-out tasks may resolve
    the same identifier at the same time).

    Example:
        resolver = CacheResolver(adapter.get_by_id)

        vpc = resolver.resolve("vpc", "vpc-0abc")          # remote call
        vpc = resolver.resolve("vpc", "vpc-0abc")          # cached
        name = resolver.resolve_name("vpc", "vpc-0dead", vpc_name)  # "" on failure
    """

    def __init__(self, get_by_id: Fetcher, name: str = ""):
        """Initialize resolver

        Args:
            get_by_id: ``(kind, identifier) -> object`` remote lookup
            name: Owner name for logging (e.g. "elasticache/default/ap-northeast-2")
        """
        self._get_by_id = get_by_id
        self._name = name
        self._cache: dict[tuple[str, str], Any] = {}
        self._inflight: dict[tuple[str, str], threading.Lock] = {}
        self._lock = threading.Lock()
        self._failures: list[ResolveFailure] = []
        self._hits = 0
        self._misses = 0
        self._fetches = 0

    @staticmethod
    def _key(kind: str, identifier: str) -> tuple[str, str]:
        return (str(getattr(kind, "value", kind)), identifier)

    def resolve(self, kind: str, identifier: str) -> Any:
        """Return the object for ``(kind, identifier)``, fetching on first use

        Raises:
            ValidationError: identifier is empty
            ResolveError: the remote lookup failed (not cached)
        """
        if not identifier:
            raise ValidationError("identifier", identifier, "non-empty identifier")

        key = self._key(kind, identifier)

        with self._lock:
            if key in self._cache:
                self._hits += 1
                return self._cache[key]
            key_lock = self._inflight.setdefault(key, threading.Lock())

        with key_lock:
            # Another thread may have stored it while we waited
            with self._lock:
                if key in self._cache:
                    self._hits += 1
                    return self._cache[key]
                self._misses += 1
                self._fetches += 1

            try:
                obj = self._get_by_id(key[0], identifier)
            except ResolveError:
                raise
            except Exception as e:
                raise ResolveError(key[0], identifier, cause=e) from e
            else:
                with self._lock:
                    self._cache[key] = obj
                return obj
            finally:
                with self._lock:
                    if self._inflight.get(key) is key_lock:
                        del self._inflight[key]

    def try_resolve(self, kind: str, identifier: str) -> Any | None:
        """``resolve`` that records the failure and returns None instead of raising"""
        if not identifier:
            return None
        try:
            return self.resolve(kind, identifier)
        except ResolveError as e:
            self._record_failure(e)
            return None

    def resolve_name(
        self,
        kind: str,
        identifier: str,
        extract: Callable[[Any], str],
    ) -> str:
        """Resolve and extract a display value, degrading to "" on failure

        Failures are logged and recorded (see ``failures``) but never raised,
        so one missing name does not fail the enrichment of a resource.
        """
        obj = self.try_resolve(kind, identifier)
        if obj is None:
            return ""
        try:
            return extract(obj) or ""
        except (KeyError, AttributeError, TypeError) as e:
            logger.debug(f"Display name extraction failed for {kind}/{identifier}: {e}")
            return ""

    def resolve_names(
        self,
        kind: str,
        identifiers: list[str],
        extract: Callable[[Any], str],
    ) -> list[str]:
        """``resolve_name`` for each id, keeping only the names that resolved"""
        names = [self.resolve_name(kind, identifier, extract) for identifier in identifiers]
        return [name for name in names if name]

    def prime(self, kind: str, identifier: str, obj: Any) -> None:
        """Store an object already obtained by a listing (no remote call)"""
        if not identifier:
            return
        with self._lock:
            self._cache.setdefault(self._key(kind, identifier), obj)

    def peek(self, kind: str, identifier: str) -> Any | None:
        """Cached object or None, without fetching"""
        with self._lock:
            return self._cache.get(self._key(kind, identifier))

    def _record_failure(self, error: ResolveError) -> None:
        cause = error.cause or error
        if isinstance(cause, APICallError) and cause.cause is not None:
            cause = cause.cause
        failure = ResolveFailure(
            kind=error.kind,
            identifier=error.identifier,
            error_code=get_error_code(cause),
            category=categorize_error(cause).value,
        )
        with self._lock:
            self._failures.append(failure)
        logger.debug(
            f"Degraded enrichment [{self._name or 'resolver'}] "
            f"{failure.kind}/{failure.identifier}: {failure.error_code or failure.category}"
        )

    @property
    def failures(self) -> list[ResolveFailure]:
        with self._lock:
            return list(self._failures)

    @property
    def stats(self) -> dict[str, int]:
        """Cache statistics"""
        with self._lock:
            return {
                "entries": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "fetches": self._fetches,
                "failures": len(self._failures),
                "inflight": len(self._inflight),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __repr__(self) -> str:
        stats = self.stats
        return f"CacheResolver(name={self._name!r}, entries={stats['entries']}, fetches={stats['fetches']})"
