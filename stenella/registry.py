# stenella/registry.py
"""
In-memory list of feed source URLs.

The list is the only shared mutable state in the process. Readers (the
sources endpoint, the aggregator's snapshot) may run concurrently; add and
remove take the lock exclusively. Readers always get a copy so network work
happens outside the lock.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from urllib.parse import urlsplit

from stenella.feeds import DEFAULT_SOURCES


class SourceRegistryError(ValueError):
    """Base class for registry failures."""


class InvalidSourceError(SourceRegistryError):
    """URL is empty or not absolute."""


class DuplicateSourceError(SourceRegistryError):
    """URL is already registered."""


class SourceNotFoundError(SourceRegistryError):
    """URL is not registered."""


class ReadWriteLock:
    """Many readers or a single writer. Writers are not starved by new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def is_absolute_url(url: str) -> bool:
    try:
        return bool(urlsplit(url).scheme)
    except ValueError:
        return False


class SourceRegistry:
    def __init__(self, sources: list[str] | None = None):
        self._lock = ReadWriteLock()
        self._sources: list[str] = []
        for url in sources or []:
            # Seeds get the same check as add(); duplicates collapse silently
            url = url.strip()
            if not is_absolute_url(url):
                raise InvalidSourceError(f"invalid URL: {url!r}")
            if url not in self._sources:
                self._sources.append(url)

    def list(self) -> list[str]:
        """Snapshot of the current sources, in insertion order."""
        with self._lock.read():
            return list(self._sources)

    def add(self, url: str) -> str:
        url = (url or "").strip()
        if not url:
            raise InvalidSourceError("url is required")
        if not is_absolute_url(url):
            raise InvalidSourceError(f"invalid URL: {url!r}")

        with self._lock.write():
            if url in self._sources:
                raise DuplicateSourceError(f"source already exists: {url}")
            self._sources.append(url)
        return url

    def remove(self, url: str) -> str:
        url = (url or "").strip()
        if not url:
            raise InvalidSourceError("url is required")

        with self._lock.write():
            try:
                self._sources.remove(url)
            except ValueError:
                raise SourceNotFoundError(f"source not found: {url}") from None
        return url

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._sources)

    def __contains__(self, url: object) -> bool:
        with self._lock.read():
            return url in self._sources


def create_registry(sources: list[str] | None = None) -> SourceRegistry:
    """Build the process-start registry, seeded with the default feeds."""
    return SourceRegistry(list(DEFAULT_SOURCES) if sources is None else sources)
