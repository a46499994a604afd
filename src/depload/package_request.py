"""Declarative record of one requested package."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from depload.exceptions import SourceConfigurationError
from depload.versioning import VersionRange


@dataclass(frozen=True)
class PackageRequest:
    """A package the host wants available locally.

    ``sources`` are tried before the global registry, or instead of it when
    ``exclusive`` is set.
    """

    package_id: str
    sources: Tuple[str, ...] = ()
    version_spec: Optional[str] = None
    allow_prerelease: bool = False
    allow_unlisted: bool = False
    exclusive: bool = False
    version_range: VersionRange = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.package_id or not self.package_id.strip():
            raise SourceConfigurationError("Package id must not be empty")
        object.__setattr__(self, "package_id", self.package_id.strip())
        object.__setattr__(self, "sources", tuple(s for s in (self.sources or ()) if s))
        if self.exclusive and not self.sources:
            raise SourceConfigurationError(
                f"Package {self.package_id} is exclusive but declares no sources"
            )
        try:
            version_range = VersionRange.parse(self.version_spec)
        except ValueError as exc:
            raise SourceConfigurationError(
                f"Invalid version spec for package {self.package_id}: {exc}"
            ) from exc
        object.__setattr__(self, "version_range", version_range)

    @property
    def uses_default_sources(self) -> bool:
        """True when the global registry alone answers this request."""
        return not self.sources

    def effective_sources(self, global_sources: Iterable[str]) -> Tuple[str, ...]:
        """Sources to query for this request, in priority order."""
        if not self.sources:
            return tuple(global_sources)
        if self.exclusive:
            return self.sources
        return self.sources + tuple(global_sources)

    def __str__(self) -> str:
        return f"{self.package_id} {self.version_spec or '*'}"
