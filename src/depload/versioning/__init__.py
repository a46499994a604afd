"""NuGet version parsing, range matching and candidate selection."""

from .models import NuGetVersion, VersionRange, parse_version
from .resolver import pick_version

__all__ = [
    "NuGetVersion",
    "VersionRange",
    "parse_version",
    "pick_version",
]
