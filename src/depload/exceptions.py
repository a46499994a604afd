"""Error taxonomy for package acquisition and resolution.

Every error keeps the offending package id, version and sources so log lines
and CLI output stay diagnosable without a traceback.
"""
from __future__ import annotations

from typing import Iterable, Optional, Tuple


class DepLoadError(Exception):
    """Base class for all depload errors."""


class SourceConfigurationError(DepLoadError, ValueError):
    """A required configuration value is missing or empty.

    Raised while configuring the installer, before any network activity.
    """


class PackageNotFoundError(DepLoadError):
    """No source in the effective set has a version satisfying the request."""

    def __init__(
        self,
        package_id: str,
        version_spec: Optional[str],
        sources: Iterable[str],
    ) -> None:
        self.package_id = package_id
        self.version_spec = version_spec
        self.sources: Tuple[str, ...] = tuple(sources)
        super().__init__(
            f"Unable to find package {package_id} "
            f"(version {version_spec or 'any'}) in sources: {', '.join(self.sources) or '<none>'}"
        )


class InstallIOError(DepLoadError, OSError):
    """The repository failed while fetching or unpacking a package."""

    def __init__(
        self,
        message: str,
        *,
        package_id: Optional[str] = None,
        version: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        self.package_id = package_id
        self.version = version
        self.source = source
        details = []
        if package_id:
            details.append(f"package={package_id}" + (f".{version}" if version else ""))
        if source:
            details.append(f"source={source}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)
