"""Select the usable binary assets of installed packages for one target framework."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from depload.constants import Constants
from depload.frameworks import FrameworkDescriptor, get_nearest
from depload.repository import InstalledPackage, InstalledPackageRepository
from depload.common.logging_utils import extra_context

logger = logging.getLogger(__name__)


class AssemblyResolver:
    """Compute each installed package's compatible assembly set.

    The nearest framework is chosen once per package; files are then kept
    when they are framework-agnostic or declare exactly that framework.
    """

    def __init__(
        self,
        packages_path: Path,
        target_framework: FrameworkDescriptor,
        log: Optional[logging.Logger] = None,
        extensions: Iterable[str] = Constants.ASSEMBLY_EXTENSIONS,
    ) -> None:
        self.packages_path = Path(packages_path)
        self.target_framework = target_framework
        self.extensions = tuple(e.lower() for e in extensions)
        self._log = log or logger

    def resolve_package(self, package: InstalledPackage) -> List[Path]:
        """Compatible assembly paths for one package."""
        files_and_frameworks = [(f.path, f.framework) for f in package.library_files]
        nearest = get_nearest(
            self.target_framework,
            (framework for _, framework in files_and_frameworks if framework is not None),
        )

        package_root = package.install_path
        assembly_paths = [
            package_root / path
            for path, framework in files_and_frameworks
            if framework is None or framework == nearest
        ]
        assembly_paths = [p for p in assembly_paths if p.suffix.lower() in self.extensions]

        for assembly_path in assembly_paths:
            self._log.debug(
                "Added assembly file %s from package %s.%s",
                assembly_path,
                package.package_id,
                package.version,
                extra=extra_context(
                    event="assembly_added",
                    component="assemblies",
                    package_id=package.package_id,
                    version=package.version,
                    target=str(assembly_path),
                ),
            )

        if not assembly_paths:
            self._log.debug(
                "Could not find compatible framework for package %s.%s (this is normal for content-only packages)",
                package.package_id,
                package.version,
                extra=extra_context(
                    event="framework_incompatible",
                    component="assemblies",
                    outcome="empty",
                    package_id=package.package_id,
                    version=package.version,
                ),
            )
        return assembly_paths

    def get_compatible_assembly_paths(self) -> List[Path]:
        """Assemblies of every package found under the packages root."""
        assembly_paths: List[Path] = []
        for package in InstalledPackageRepository(self.packages_path).list_packages():
            assembly_paths.extend(self.resolve_package(package))
        return assembly_paths
