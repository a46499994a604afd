"""Package installation orchestrator.

Installs declared packages one at a time, in declaration order, and puts
each package's content folders at the front of the host input paths. Later
requests therefore win over earlier ones.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from depload.assemblies import AssemblyResolver
from depload.constants import Constants, NotFoundPolicy
from depload.exceptions import DepLoadError, InstallIOError, PackageNotFoundError, SourceConfigurationError
from depload.filesystem import FileSystem
from depload.frameworks import FrameworkDescriptor
from depload.package_manager import PackageManager
from depload.package_request import PackageRequest
from depload.repository import AggregateRepository, InstalledPackage, RepositoryFactory
from depload.sources import PackageSourceList
from depload.common.logging_utils import extra_context, safe_url

logger = logging.getLogger(__name__)


class InstallOutcome(Enum):
    """Outcome of one package request."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class InstallResult:
    """Result of installing one request against its effective sources."""
    outcome: InstallOutcome
    request: PackageRequest
    sources: Tuple[str, ...]
    package: Optional[InstalledPackage] = None
    error: Optional[DepLoadError] = None

    @property
    def found(self) -> bool:
        return self.outcome is InstallOutcome.FOUND


class PackageInstaller:
    """Install requested packages and feed their content into the host input paths."""

    def __init__(
        self,
        file_system: FileSystem,
        sources: Optional[PackageSourceList] = None,
        log: Optional[logging.Logger] = None,
        factory: Optional[RepositoryFactory] = None,
    ) -> None:
        self._file_system = file_system
        self._package_sources = sources if sources is not None else PackageSourceList()
        self._packages: List[PackageRequest] = []
        self._installed: Dict[str, InstalledPackage] = {}
        self._packages_path: Path = Path(Constants.DEFAULT_PACKAGES_PATH)
        self._factory = factory
        self._log = log or logger

    @classmethod
    def from_config(cls, config, file_system: FileSystem, log: Optional[logging.Logger] = None) -> "PackageInstaller":
        """Build an installer from an InstallerConfig."""
        initial = (Constants.DEFAULT_PACKAGE_SOURCE,) if config.include_default_source else ()
        installer = cls(file_system, PackageSourceList(initial), log=log)
        installer.packages_path = config.packages_path
        # config lists sources highest priority first
        for source in reversed(config.sources):
            installer.add_package_source(source)
        for request in config.packages:
            installer.add_request(request)
        return installer

    @property
    def packages_path(self) -> Path:
        return self._packages_path

    @packages_path.setter
    def packages_path(self, value: Union[str, Path]) -> None:
        if value is None or not str(value).strip():
            raise SourceConfigurationError("packages_path must not be empty")
        self._packages_path = Path(value)

    @property
    def absolute_packages_path(self) -> Path:
        return self._file_system.combine(self._packages_path)

    @property
    def package_sources(self) -> Tuple[str, ...]:
        return self._package_sources.sources

    @property
    def packages(self) -> Tuple[PackageRequest, ...]:
        return tuple(self._packages)

    @property
    def installed_packages(self) -> Tuple[InstalledPackage, ...]:
        return tuple(self._installed.values())

    def add_package_source(self, package_source: str) -> None:
        """Add a source ahead of all existing ones (sources are searched from index 0)."""
        self._package_sources.add_source(package_source)

    def add_package(
        self,
        package_id: str,
        sources: Optional[Sequence[str]] = None,
        version_spec: Optional[str] = None,
        allow_prerelease: bool = False,
        allow_unlisted: bool = False,
        exclusive: bool = False,
    ) -> PackageRequest:
        request = PackageRequest(
            package_id=package_id,
            sources=tuple(sources or ()),
            version_spec=version_spec,
            allow_prerelease=allow_prerelease,
            allow_unlisted=allow_unlisted,
            exclusive=exclusive,
        )
        return self.add_request(request)

    def add_request(self, request: PackageRequest) -> PackageRequest:
        self._packages.append(request)
        return request

    def _get_package_manager(self, sources: Sequence[str]) -> PackageManager:
        repository = AggregateRepository(sources, factory=self._factory, log=self._log)
        return PackageManager(repository, self.absolute_packages_path, log=self._log)

    def install_package(self, request: PackageRequest, update_packages: bool = False) -> InstallResult:
        """Install one request and merge its content paths.

        Fetch failures are captured in the result rather than raised.
        """
        sources = request.effective_sources(self._package_sources)
        package_manager = self._get_package_manager(sources)
        try:
            installed = package_manager.install_package(request, update_packages)
        except InstallIOError as e:
            self._log.error(
                "Failed to install %s: %s",
                request,
                e,
                extra=extra_context(
                    event="package_install",
                    component="installer",
                    outcome="error",
                    package_id=request.package_id,
                    version=request.version_spec,
                ),
            )
            return InstallResult(InstallOutcome.ERROR, request, sources, error=e)

        if installed is None:
            error = PackageNotFoundError(request.package_id, request.version_spec, sources)
            self._log.warning(
                "Unable to find package %s (version %s) in sources: %s",
                request.package_id,
                request.version_spec or "any",
                ", ".join(safe_url(s) for s in sources) or "<none>",
                extra=extra_context(
                    event="package_install",
                    component="installer",
                    outcome="not_found",
                    package_id=request.package_id,
                    version=request.version_spec,
                ),
            )
            return InstallResult(InstallOutcome.NOT_FOUND, request, sources, error=error)

        # Use the directory name from an actual file to get the on-disk casing right
        install_path = package_manager.get_install_path(installed)
        for content_segment in installed.content_segments:
            content_path = install_path / content_segment
            if content_path in self._file_system.input_paths:
                continue
            self._file_system.input_paths.insert(0, content_path)
            self._log.debug("Added input path %s from package %s", content_path, installed)

        self._installed[installed.package_id.lower()] = installed
        return InstallResult(InstallOutcome.FOUND, request, sources, package=installed)

    def install_packages(
        self,
        update_packages: bool = False,
        not_found_policy: NotFoundPolicy = NotFoundPolicy.SKIP,
    ) -> List[InstallResult]:
        """Install every declared package in declaration order.

        Raises:
            PackageNotFoundError: When a package is missing and the policy is ABORT
            InstallIOError: When fetching or extracting fails
        """
        results: List[InstallResult] = []
        for request in self._packages:
            result = self.install_package(request, update_packages)
            if result.outcome is InstallOutcome.ERROR:
                raise result.error
            if result.outcome is InstallOutcome.NOT_FOUND and not_found_policy is NotFoundPolicy.ABORT:
                raise result.error
            results.append(result)
        return results

    def get_compatible_assembly_paths(self, target_framework: Optional[FrameworkDescriptor] = None) -> List[Path]:
        """Compatible assemblies of everything under the packages root."""
        target = target_framework or FrameworkDescriptor.parse(Constants.DEFAULT_TARGET_FRAMEWORK)
        resolver = AssemblyResolver(self.absolute_packages_path, target, log=self._log)
        return resolver.get_compatible_assembly_paths()
