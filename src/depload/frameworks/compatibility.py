"""Framework compatibility rules and nearest-framework reduction.

``is_compatible`` answers whether assets built for a candidate framework can
run on a target. ``get_nearest`` picks the single best candidate out of a set,
which the assembly resolver then uses as an exact-match filter.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

import semantic_version

from .models import FrameworkDescriptor, FrameworkIdentifiers

logger = logging.getLogger(__name__)

_V = semantic_version.Version

# Highest .NETStandard version each target version implements, ascending by target version.
_NET_STANDARD_SUPPORT = {
    FrameworkIdentifiers.NET_FRAMEWORK: (
        (_V("4.5.0"), _V("1.1.0")),
        (_V("4.5.1"), _V("1.2.0")),
        (_V("4.6.0"), _V("1.3.0")),
        (_V("4.6.1"), _V("2.0.0")),
    ),
    FrameworkIdentifiers.NET_CORE_APP: (
        (_V("1.0.0"), _V("1.6.0")),
        (_V("2.0.0"), _V("2.0.0")),
        (_V("3.0.0"), _V("2.1.0")),
    ),
    FrameworkIdentifiers.WINDOWS: (
        (_V("8.0.0"), _V("1.1.0")),
        (_V("8.1.0"), _V("1.2.0")),
    ),
}

# Profiles that narrow the API surface without changing binary compatibility.
_NEUTRAL_PROFILES = {"", "client", "full"}


def _supported_net_standard(target: FrameworkDescriptor) -> Optional[semantic_version.Version]:
    table = _NET_STANDARD_SUPPORT.get(target.identifier)
    if not table:
        return None
    supported = None
    for min_target, standard in table:
        if target.version >= min_target:
            supported = standard
    return supported


def _profile_compatible(target: FrameworkDescriptor, candidate: FrameworkDescriptor) -> bool:
    if candidate.profile == target.profile:
        return True
    if candidate.identifier == FrameworkIdentifiers.NET_FRAMEWORK:
        return candidate.profile in _NEUTRAL_PROFILES and target.profile in _NEUTRAL_PROFILES
    # platform-specific assets (net6.0-windows) need a matching target platform
    return not candidate.profile


def is_compatible(target: FrameworkDescriptor, candidate: FrameworkDescriptor) -> bool:
    """Return True when assets for ``candidate`` can be used by ``target``."""
    if FrameworkIdentifiers.UNSUPPORTED in (target.identifier, candidate.identifier):
        return False
    if candidate.is_portable:
        if target.is_portable:
            return candidate.profile == target.profile
        return any(is_compatible(target, member) for member in candidate.portable_members)

    if candidate.identifier == target.identifier:
        return candidate.version <= target.version and _profile_compatible(target, candidate)

    if candidate.identifier == FrameworkIdentifiers.NET_STANDARD:
        supported = _supported_net_standard(target)
        return supported is not None and candidate.version <= supported

    return False


def _rank(target: FrameworkDescriptor, candidate: FrameworkDescriptor) -> Tuple:
    return (
        candidate.identifier == target.identifier,
        not candidate.is_portable,
        candidate.version,
        candidate.profile == target.profile,
        -len(candidate.portable_members),
    )


def get_nearest(
    target: FrameworkDescriptor,
    candidates: Iterable[FrameworkDescriptor],
) -> Optional[FrameworkDescriptor]:
    """Pick the compatible candidate closest to ``target``.

    Preference order: same framework family, non-portable over portable,
    highest version, exact profile match, smallest portable profile.

    Returns:
        The nearest candidate, or None when nothing is compatible
    """
    compatible = [c for c in set(candidates) if c is not None and is_compatible(target, c)]
    if not compatible:
        return None
    # sort first so ties resolve the same way regardless of set ordering
    compatible.sort(key=lambda c: c.short_name)
    nearest = max(compatible, key=lambda c: _rank(target, c))
    logger.debug("Nearest framework to %s is %s", target, nearest)
    return nearest
