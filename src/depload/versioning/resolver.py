"""Pick the best version out of a feed's candidate list."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .models import NuGetVersion, VersionRange, parse_version

logger = logging.getLogger(__name__)


def _parse_candidates(candidates: Iterable[str]) -> List[NuGetVersion]:
    parsed: List[NuGetVersion] = []
    for v in candidates:
        try:
            parsed.append(parse_version(v))
        except ValueError:
            logger.debug("Skipping invalid version %r", v)
            continue
    return parsed


def pick_version(
    candidates: Iterable[str],
    version_range: Optional[VersionRange] = None,
    allow_prerelease: bool = False,
) -> Optional[str]:
    """Return the highest candidate satisfying the range.

    Prerelease versions only count when ``allow_prerelease`` is set or the
    range pins that exact prerelease.

    Args:
        candidates: Version strings as published by a source
        version_range: Constraint; None matches everything
        allow_prerelease: Whether prerelease versions may be chosen

    Returns:
        The chosen version string as published, or None
    """
    version_range = version_range or VersionRange()
    matches: List[NuGetVersion] = []
    for ver in _parse_candidates(candidates):
        if ver.is_prerelease and not allow_prerelease and not version_range.is_exact:
            continue
        if version_range.satisfies(ver):
            matches.append(ver)
    if not matches:
        return None
    return max(matches).original
