"""Ordered package source registry.

Sources are queried from index 0 upward until a match is found, so a newly
added source always outranks every source added before it.
"""
from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple

from depload.constants import Constants
from depload.exceptions import SourceConfigurationError


class PackageSourceList:
    """Ordered, mutable list of package source locations."""

    def __init__(self, initial: Optional[Iterable[str]] = None) -> None:
        if initial is None:
            initial = (Constants.DEFAULT_PACKAGE_SOURCE,)
        self._sources: List[str] = list(initial)

    def add_source(self, location: str) -> None:
        """Insert a source ahead of all existing ones. Duplicates are allowed."""
        if not location or not location.strip():
            raise SourceConfigurationError("Package source location must not be empty")
        self._sources.insert(0, location.strip())

    @property
    def sources(self) -> Tuple[str, ...]:
        """Sources in query priority order."""
        return tuple(self._sources)

    def __iter__(self) -> Iterator[str]:
        return iter(self.sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __repr__(self) -> str:
        return f"PackageSourceList({self._sources!r})"
