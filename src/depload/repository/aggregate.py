"""Compose an ordered list of sources into one logical repository."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from depload.exceptions import InstallIOError
from depload.versioning import VersionRange
from depload.common.logging_utils import extra_context, is_debug_enabled, safe_url

from .base import Repository
from .feed import FeedRepository
from .local import LocalFolderRepository
from .models import PackageMetadata

logger = logging.getLogger(__name__)


class RepositoryFactory:  # pylint: disable=too-few-public-methods
    """Create a repository for a source location string.

    ``http(s)://`` locations are V3 feeds; anything else is a local folder.
    """

    def create(self, source: str) -> Repository:
        scheme = source.split("://", 1)[0].lower() if "://" in source else ""
        if scheme in ("http", "https"):
            return FeedRepository(source)
        if scheme == "file":
            return LocalFolderRepository(source[len("file://"):])
        return LocalFolderRepository(source)


class AggregateRepository(Repository):
    """Query sources in list order; the first source with a match wins.

    Built fresh for each effective source set so per-request source rules
    stay isolated.
    """

    def __init__(
        self,
        sources: Iterable[str],
        factory: Optional[RepositoryFactory] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.sources: Tuple[str, ...] = tuple(sources)
        super().__init__(", ".join(self.sources))
        self._factory = factory or RepositoryFactory()
        self._log = log or logger
        self._repositories: Dict[str, Repository] = {}

    def repository_for(self, source: str) -> Repository:
        """Per-source repository, created on first use."""
        if source not in self._repositories:
            self._repositories[source] = self._factory.create(source)
        return self._repositories[source]

    def find(
        self,
        package_id: str,
        version_range: Optional[VersionRange] = None,
        allow_prerelease: bool = False,
        allow_unlisted: bool = False,
    ) -> Optional[PackageMetadata]:
        for source in self.sources:
            metadata = self.repository_for(source).find(
                package_id, version_range, allow_prerelease, allow_unlisted
            )
            if metadata is not None:
                if is_debug_enabled(self._log):
                    self._log.debug(
                        "Resolved %s %s from %s",
                        metadata.package_id,
                        metadata.version,
                        safe_url(source),
                        extra=extra_context(
                            event="package_resolved",
                            component="aggregate",
                            outcome="found",
                            package_id=metadata.package_id,
                            version=metadata.version,
                            source=safe_url(source),
                        ),
                    )
                return metadata
        return None

    def download(self, metadata: PackageMetadata, destination: Path) -> Path:
        if metadata.source not in self.sources:
            raise InstallIOError(
                "Package was not resolved from this repository",
                package_id=metadata.package_id,
                version=metadata.version,
                source=metadata.source,
            )
        return self.repository_for(metadata.source).download(metadata, destination)
