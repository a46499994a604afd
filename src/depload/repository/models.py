"""Data models shared by repositories, the package manager and the resolvers."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from depload.frameworks import FrameworkDescriptor


@dataclass(frozen=True)
class PackageMetadata:
    """A concrete package version found in a source."""
    package_id: str
    version: str
    source: str
    listed: bool = True
    download_url: Optional[str] = None


@dataclass(frozen=True)
class LibraryFile:
    """A file under ``lib/``; ``framework`` is None for files directly under ``lib/``."""
    path: str
    framework: Optional[FrameworkDescriptor] = None


@dataclass(frozen=True)
class NuspecMetadata:
    """Fields read from a package manifest."""
    package_id: str
    version: str
    title: Optional[str] = None
    authors: Optional[str] = None
    description: Optional[str] = None
    # framework short name ("" for ungrouped) -> dependency ids, informational only
    dependency_groups: Dict[str, Tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class InstalledPackage:
    """A package materialized under the packages root.

    Paths in ``content_files`` and ``library_files`` are POSIX-style and
    relative to ``install_path``, with the casing found on disk.
    """
    package_id: str
    version: str
    install_path: Path
    content_files: Tuple[str, ...] = ()
    library_files: Tuple[LibraryFile, ...] = ()
    source: Optional[str] = None

    @property
    def content_segments(self) -> Tuple[str, ...]:
        """Distinct top-level directories of the content files, in file order."""
        seen = []
        for path in self.content_files:
            segment = path.split("/", 1)[0]
            if segment not in seen:
                seen.append(segment)
        return tuple(seen)

    def __str__(self) -> str:
        return f"{self.package_id}.{self.version}"
