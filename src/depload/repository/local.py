"""Local package sources: a folder of archives, and the installed-packages root."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from depload.constants import Constants
from depload.exceptions import InstallIOError
from depload.versioning import VersionRange, pick_version

from .base import Repository
from .models import InstalledPackage, PackageMetadata
from .nupkg import read_archive_nuspec, read_installed_package

logger = logging.getLogger(__name__)


class LocalFolderRepository(Repository):
    """Source backed by a directory of ``.nupkg`` files (flat or nested)."""

    def __init__(self, source: str) -> None:
        super().__init__(source)
        self.path = Path(source).expanduser()

    def _archives(self, package_id: str) -> Dict[str, Path]:
        """Map version -> archive for one package id (case-insensitive)."""
        found: Dict[str, Path] = {}
        if not self.path.is_dir():
            logger.warning("Package source folder does not exist: %s", self.path)
            return found
        wanted = package_id.lower()
        for archive in sorted(self.path.rglob(f"*{Constants.NUPKG_EXTENSION}")):
            # cheap name filter before opening the archive
            if not archive.name.lower().startswith(wanted + "."):
                continue
            try:
                nuspec = read_archive_nuspec(archive)
            except (InstallIOError, ValueError) as e:
                logger.warning("Skipping unreadable package %s: %s", archive, e)
                continue
            if nuspec.package_id.lower() == wanted:
                found.setdefault(nuspec.version, archive)
        return found

    def find(
        self,
        package_id: str,
        version_range: Optional[VersionRange] = None,
        allow_prerelease: bool = False,
        allow_unlisted: bool = False,
    ) -> Optional[PackageMetadata]:
        archives = self._archives(package_id)
        version = pick_version(archives.keys(), version_range, allow_prerelease)
        if version is None:
            return None
        nuspec = read_archive_nuspec(archives[version])
        return PackageMetadata(
            package_id=nuspec.package_id,
            version=version,
            source=self.source,
            download_url=str(archives[version]),
        )

    def download(self, metadata: PackageMetadata, destination: Path) -> Path:
        archive = Path(metadata.download_url) if metadata.download_url else None
        if archive is None or not archive.is_file():
            archive = self._archives(metadata.package_id).get(metadata.version)
        if archive is None:
            raise InstallIOError(
                "Package archive disappeared from source",
                package_id=metadata.package_id,
                version=metadata.version,
                source=self.source,
            )
        destination.mkdir(parents=True, exist_ok=True)
        target = destination / archive.name
        try:
            shutil.copy2(archive, target)
        except OSError as e:
            raise InstallIOError(
                f"Unable to copy package archive: {e}",
                package_id=metadata.package_id,
                version=metadata.version,
                source=self.source,
            ) from e
        return target


class InstalledPackageRepository:
    """Read-only view over the packages root.

    Lists whatever is physically present, independent of any install run.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def list_packages(self) -> Iterator[InstalledPackage]:
        """Yield installed packages in folder-name order."""
        if not self.root.is_dir():
            return
        for package_dir in sorted(p for p in self.root.iterdir() if p.is_dir()):
            package = read_installed_package(package_dir)
            if package is not None:
                yield package

    def find_packages(self, package_id: str) -> List[InstalledPackage]:
        """All installed versions of a package id (case-insensitive)."""
        wanted = package_id.lower()
        return [p for p in self.list_packages() if p.package_id.lower() == wanted]

    def find_package(
        self,
        package_id: str,
        version_range: Optional[VersionRange] = None,
        allow_prerelease: bool = False,
    ) -> Optional[InstalledPackage]:
        """Highest installed version satisfying the constraints, or None."""
        installed = {p.version: p for p in self.find_packages(package_id)}
        version = pick_version(installed.keys(), version_range, allow_prerelease)
        return installed[version] if version is not None else None
