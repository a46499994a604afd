"""Repository interface implemented by every package source."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from depload.versioning import VersionRange

from .models import PackageMetadata


class Repository(ABC):
    """A single package source."""

    def __init__(self, source: str) -> None:
        self.source = source

    @abstractmethod
    def find(
        self,
        package_id: str,
        version_range: Optional[VersionRange] = None,
        allow_prerelease: bool = False,
        allow_unlisted: bool = False,
    ) -> Optional[PackageMetadata]:
        """Return the best version satisfying the constraints, or None."""

    @abstractmethod
    def download(self, metadata: PackageMetadata, destination: Path) -> Path:
        """Write the package archive into ``destination`` and return its path."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source!r})"
