"""Data models for NuGet versions and version ranges."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Optional

import semantic_version

_VERSION_RE = re.compile(
    r"^\s*v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?(?:\.(?P<revision>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+(?P<meta>[0-9A-Za-z.-]+))?\s*$"
)
_FLOAT_RE = re.compile(r"^\s*(?P<prefix>\d+(?:\.\d+)*)\.\*\s*$")


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """A NuGet version: semantic version plus the optional fourth (revision) part.

    Ordering follows semver precedence, with revision breaking ties.
    Build metadata is ignored for ordering and equality.
    """

    semver: semantic_version.Version
    revision: int = 0
    original: str = ""

    @property
    def is_prerelease(self) -> bool:
        return bool(self.semver.prerelease)

    def _key(self):
        return (self.semver.truncate("prerelease"), self.revision)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "NuGetVersion") -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        """Normalized form: ``1.0.0``, ``1.0.0.5``, ``2.0.0-beta.1``."""
        v = self.semver
        text = f"{v.major}.{v.minor}.{v.patch}"
        if self.revision:
            text += f".{self.revision}"
        if v.prerelease:
            text += "-" + ".".join(v.prerelease)
        return text


def parse_version(text: str) -> NuGetVersion:
    """Parse a NuGet version string.

    Accepts two to four numeric parts plus optional prerelease and metadata.

    Raises:
        ValueError: If the text is not a valid version
    """
    if text is None:
        raise ValueError("Version is required")
    match = _VERSION_RE.match(text)
    if not match:
        raise ValueError(f"Invalid version: {text!r}")
    pre = tuple(match.group("pre").split(".")) if match.group("pre") else ()
    meta = tuple(match.group("meta").split(".")) if match.group("meta") else ()
    semver = semantic_version.Version(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        prerelease=pre,
        build=meta,
    )
    return NuGetVersion(semver, int(match.group("revision") or 0), text.strip())


@dataclass(frozen=True)
class VersionRange:
    """NuGet version range.

    ``1.0`` means ``>= 1.0``; ``[1.0]`` is exact; ``[1.0,2.0)`` and ``(,2.0]``
    are intervals; ``1.*`` floats within the major version. A range with
    neither bound matches every version.
    """

    min_version: Optional[NuGetVersion] = None
    max_version: Optional[NuGetVersion] = None
    min_inclusive: bool = True
    max_inclusive: bool = False
    raw: Optional[str] = None

    @classmethod
    def parse(cls, spec: Optional[str]) -> "VersionRange":
        """Parse a NuGet version spec.

        Raises:
            ValueError: If the spec is malformed
        """
        if spec is None or not spec.strip() or spec.strip().lower() in ("latest", "*"):
            return cls(raw=spec)
        text = spec.strip()

        floating = _FLOAT_RE.match(text)
        if floating:
            parts = [int(p) for p in floating.group("prefix").split(".")]
            upper = parts[:-1] + [parts[-1] + 1]
            return cls(
                min_version=parse_version(".".join(str(p) for p in parts)),
                max_version=parse_version(".".join(str(p) for p in upper)),
                min_inclusive=True,
                max_inclusive=False,
                raw=spec,
            )

        if text[0] not in "[(":
            return cls(min_version=parse_version(text), min_inclusive=True, raw=spec)

        if len(text) < 3 or text[-1] not in "])":
            raise ValueError(f"Invalid version range: {spec!r}")
        min_inclusive = text[0] == "["
        max_inclusive = text[-1] == "]"
        body = text[1:-1]

        if "," not in body:
            if not (min_inclusive and max_inclusive):
                raise ValueError(f"Exact version range must use brackets: {spec!r}")
            exact = parse_version(body)
            return cls(exact, exact, True, True, raw=spec)

        low, _, high = body.partition(",")
        if "," in high:
            raise ValueError(f"Invalid version range: {spec!r}")
        min_version = parse_version(low) if low.strip() else None
        max_version = parse_version(high) if high.strip() else None
        if min_version is None and max_version is None:
            raise ValueError(f"Version range needs at least one bound: {spec!r}")
        if min_version is not None and max_version is not None and min_version > max_version:
            raise ValueError(f"Version range lower bound exceeds upper bound: {spec!r}")
        return cls(min_version, max_version, min_inclusive, max_inclusive, raw=spec)

    @property
    def is_exact(self) -> bool:
        return (
            self.min_version is not None
            and self.min_version == self.max_version
            and self.min_inclusive
            and self.max_inclusive
        )

    def satisfies(self, version: NuGetVersion) -> bool:
        if self.min_version is not None:
            if self.min_inclusive and version < self.min_version:
                return False
            if not self.min_inclusive and version <= self.min_version:
                return False
        if self.max_version is not None:
            if self.max_inclusive and version > self.max_version:
                return False
            if not self.max_inclusive and version >= self.max_version:
                return False
        return True

    def __str__(self) -> str:
        return self.raw or "*"
