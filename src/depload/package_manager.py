"""Install or update one package from a repository into the packages root."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from depload.package_request import PackageRequest
from depload.repository import InstalledPackage, InstalledPackageRepository, PackageMetadata, Repository
from depload.repository.nupkg import extract_package
from depload.versioning import parse_version
from depload.common.logging_utils import extra_context

logger = logging.getLogger(__name__)


class PackageManager:
    """Resolve packages through a repository and materialize them locally.

    Installed packages live in ``<packages_path>/<id>.<version>/``.
    """

    def __init__(
        self,
        repository: Repository,
        packages_path: Path,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.repository = repository
        self.packages_path = Path(packages_path)
        self._log = log or logger

    @property
    def local_repository(self) -> InstalledPackageRepository:
        return InstalledPackageRepository(self.packages_path)

    def get_install_path(self, package: InstalledPackage) -> Path:
        """Install folder of an installed package, with the casing found on disk."""
        return package.install_path

    def install_package(self, request: PackageRequest, update: bool = False) -> Optional[InstalledPackage]:
        """Install (or update) the package a request describes.

        Without ``update`` an already installed version satisfying the request
        is reused. With ``update`` the newest satisfying version is installed
        and other installed versions of the same id are removed.

        Returns:
            The installed package, or None when no source has a match

        Raises:
            InstallIOError: When fetching or extracting fails
        """
        if not update:
            existing = self.local_repository.find_package(
                request.package_id, request.version_range, request.allow_prerelease
            )
            if existing is not None:
                self._log.info(
                    "%s %s is already installed",
                    existing.package_id,
                    existing.version,
                    extra=extra_context(
                        event="package_install",
                        component="package_manager",
                        outcome="already_installed",
                        package_id=existing.package_id,
                        version=existing.version,
                    ),
                )
                return existing

        metadata = self.repository.find(
            request.package_id,
            request.version_range,
            request.allow_prerelease,
            request.allow_unlisted,
        )
        if metadata is None:
            return None

        installed = self._find_installed(metadata)
        if installed is None:
            installed = self._fetch_and_extract(metadata)
        else:
            self._log.info("%s %s is up to date", installed.package_id, installed.version)

        if update:
            self._remove_other_versions(installed)
        return installed

    def _find_installed(self, metadata: PackageMetadata) -> Optional[InstalledPackage]:
        """Installed copy of exactly this id and version, whatever its folder is called."""
        wanted = parse_version(metadata.version)
        for package in self.local_repository.find_packages(metadata.package_id):
            try:
                if parse_version(package.version) == wanted:
                    return package
            except ValueError:
                continue
        return None

    def _fetch_and_extract(self, metadata: PackageMetadata) -> InstalledPackage:
        self.packages_path.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=self.packages_path, prefix=".download-") as tmp:
            archive = self.repository.download(metadata, Path(tmp))
            installed = extract_package(archive, self.packages_path, source=metadata.source)
        self._log.info(
            "Installed %s %s",
            installed.package_id,
            installed.version,
            extra=extra_context(
                event="package_install",
                component="package_manager",
                outcome="installed",
                package_id=installed.package_id,
                version=installed.version,
                target=str(installed.install_path),
            ),
        )
        return installed

    def _remove_other_versions(self, keep: InstalledPackage) -> None:
        for other in self.local_repository.find_packages(keep.package_id):
            if other.install_path == keep.install_path:
                continue
            self._log.info("Removing %s %s", other.package_id, other.version)
            try:
                shutil.rmtree(other.install_path)
            except OSError as e:
                self._log.warning(
                    "Couldn't remove %s %s: %s",
                    other.package_id,
                    other.version,
                    e,
                    extra=extra_context(
                        event="package_remove",
                        component="package_manager",
                        outcome="error",
                        package_id=other.package_id,
                        version=other.version,
                        target=str(other.install_path),
                    ),
                )
