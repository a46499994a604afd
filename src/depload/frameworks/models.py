"""Framework descriptor parsing and rendering.

Handles the folder names found under ``lib/`` in packages (``net45``,
``netstandard2.0``, ``net6.0-windows``, ``portable-net45+win8``) as well as
long names such as ``.NETFramework,Version=v4.6``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

import semantic_version


class FrameworkIdentifiers:  # pylint: disable=too-few-public-methods
    """Canonical framework identifiers."""

    NET_FRAMEWORK = ".NETFramework"
    NET_STANDARD = ".NETStandard"
    NET_CORE_APP = ".NETCoreApp"
    PORTABLE = ".NETPortable"
    WINDOWS = "Windows"
    WINDOWS_PHONE = "WindowsPhone"
    SILVERLIGHT = "Silverlight"
    MONO_ANDROID = "MonoAndroid"
    XAMARIN_IOS = "Xamarin.iOS"
    XAMARIN_MAC = "Xamarin.Mac"
    UAP = "UAP"
    # lib/ folders that do not name a known framework; never compatible
    UNSUPPORTED = "Unsupported"


# short folder prefix -> identifier
_SHORT_NAMES = {
    "net": FrameworkIdentifiers.NET_FRAMEWORK,
    "netstandard": FrameworkIdentifiers.NET_STANDARD,
    "netcoreapp": FrameworkIdentifiers.NET_CORE_APP,
    "netcore": FrameworkIdentifiers.WINDOWS,
    "win": FrameworkIdentifiers.WINDOWS,
    "wp": FrameworkIdentifiers.WINDOWS_PHONE,
    "sl": FrameworkIdentifiers.SILVERLIGHT,
    "monoandroid": FrameworkIdentifiers.MONO_ANDROID,
    "xamarinios": FrameworkIdentifiers.XAMARIN_IOS,
    "xamarinmac": FrameworkIdentifiers.XAMARIN_MAC,
    "uap": FrameworkIdentifiers.UAP,
}

# identifier -> short folder prefix (first spelling wins)
_PREFIXES = {
    FrameworkIdentifiers.NET_FRAMEWORK: "net",
    FrameworkIdentifiers.NET_STANDARD: "netstandard",
    FrameworkIdentifiers.NET_CORE_APP: "netcoreapp",
    FrameworkIdentifiers.WINDOWS: "win",
    FrameworkIdentifiers.WINDOWS_PHONE: "wp",
    FrameworkIdentifiers.SILVERLIGHT: "sl",
    FrameworkIdentifiers.MONO_ANDROID: "monoandroid",
    FrameworkIdentifiers.XAMARIN_IOS: "xamarinios",
    FrameworkIdentifiers.XAMARIN_MAC: "xamarinmac",
    FrameworkIdentifiers.UAP: "uap",
}

# Frameworks whose versions are always written with dots
_DOTTED = {FrameworkIdentifiers.NET_STANDARD, FrameworkIdentifiers.NET_CORE_APP, FrameworkIdentifiers.UAP}

_SHORT_RE = re.compile(r"^(?P<name>[a-z][a-z.]*?)(?P<version>\d[\d.]*)?(?:-(?P<profile>[a-z0-9.+]+))?$")
_LONG_RE = re.compile(r"^(?P<name>\.?[a-z][a-z.]*?)(?P<version>\d[\d.]*)?$")

_EMPTY_VERSION = semantic_version.Version(major=0, minor=0, patch=0)


def _version_from_text(text: Optional[str], dotted: bool) -> semantic_version.Version:
    """Convert ``45`` / ``4.5`` / ``4.6.2`` to a three-part version."""
    if not text:
        return _EMPTY_VERSION
    text = text.strip(".")
    if "." in text or dotted:
        parts = [int(p) for p in text.split(".") if p]
    else:
        # undotted short names use one digit per part: net462 -> 4.6.2
        parts = [int(ch) for ch in text]
    parts = (parts + [0, 0, 0])[:3]
    return semantic_version.Version(major=parts[0], minor=parts[1], patch=parts[2])


@dataclass(frozen=True)
class FrameworkDescriptor:
    """Immutable target framework identity.

    Equality is exact over identifier, version and profile. Identifiers are
    canonicalized and profiles lower-cased by ``parse`` so equal folder names
    in different casing compare equal.
    """

    identifier: str
    version: semantic_version.Version = field(default=_EMPTY_VERSION)
    profile: str = ""

    @classmethod
    def parse(cls, name: Optional[str]) -> Optional["FrameworkDescriptor"]:
        """Parse a short folder name or long framework name.

        Args:
            name: e.g. ``net45``, ``netstandard2.0``, ``.NETFramework,Version=v4.6``

        Returns:
            FrameworkDescriptor or None when the name is not a known framework
        """
        if not name:
            return None
        text = name.strip()
        if "," in text:
            return cls._parse_long(text)
        lowered = text.lower()
        if lowered.startswith("portable-"):
            members = lowered[len("portable-"):]
            if not members:
                return None
            return cls(FrameworkIdentifiers.PORTABLE, _EMPTY_VERSION, members)
        if lowered.startswith("."):
            match = _LONG_RE.match(lowered)
            if not match:
                return None
            identifier = _canonical_identifier(match.group("name"))
            if identifier is None:
                return None
            return cls(identifier, _version_from_text(match.group("version"), True))

        match = _SHORT_RE.match(lowered)
        if not match:
            return None
        # dotted spellings such as Xamarin.iOS10
        identifier = _SHORT_NAMES.get(match.group("name").replace(".", ""))
        if identifier is None:
            return None
        version = _version_from_text(match.group("version"), identifier in _DOTTED)
        if identifier == FrameworkIdentifiers.NET_FRAMEWORK and version.major >= 5:
            identifier = FrameworkIdentifiers.NET_CORE_APP
        return cls(identifier, version, match.group("profile") or "")

    @classmethod
    def _parse_long(cls, text: str) -> Optional["FrameworkDescriptor"]:
        parts = [p.strip() for p in text.split(",")]
        identifier = _canonical_identifier(parts[0].lower())
        if identifier is None:
            return None
        version = _EMPTY_VERSION
        profile = ""
        for part in parts[1:]:
            key, _, value = part.partition("=")
            key = key.strip().lower()
            if key == "version":
                version = _version_from_text(value.strip().lstrip("vV"), True)
            elif key == "profile":
                profile = value.strip().lower()
        return cls(identifier, version, profile)

    @classmethod
    def unsupported(cls) -> "FrameworkDescriptor":
        """Descriptor for a folder name that is not a known framework."""
        return cls(FrameworkIdentifiers.UNSUPPORTED)

    @property
    def is_portable(self) -> bool:
        return self.identifier == FrameworkIdentifiers.PORTABLE

    @property
    def portable_members(self) -> Tuple["FrameworkDescriptor", ...]:
        """Member frameworks of a portable profile (empty for other frameworks)."""
        if not self.is_portable:
            return ()
        members = []
        for token in self.profile.split("+"):
            member = FrameworkDescriptor.parse(token)
            if member is not None:
                members.append(member)
        return tuple(members)

    @property
    def short_name(self) -> str:
        """Render the folder name form, e.g. ``net462`` or ``net6.0-windows``."""
        if self.is_portable:
            return f"portable-{self.profile}"
        v = self.version
        if self.identifier == FrameworkIdentifiers.NET_CORE_APP and v.major >= 5:
            name = f"net{v.major}.{v.minor}"
        elif self.identifier in _DOTTED:
            name = f"{_PREFIXES[self.identifier]}{v.major}.{v.minor}"
            if v.patch:
                name += f".{v.patch}"
        else:
            prefix = _PREFIXES.get(self.identifier, self.identifier.lower())
            digits = [v.major, v.minor, v.patch]
            keep = 2 if self.identifier == FrameworkIdentifiers.NET_FRAMEWORK else 1
            while len(digits) > keep and digits[-1] == 0:
                digits.pop()
            if v == _EMPTY_VERSION:
                name = prefix
            elif any(d > 9 for d in digits):
                name = prefix + ".".join(str(d) for d in digits)
            else:
                name = prefix + "".join(str(d) for d in digits)
        if self.profile:
            name += f"-{self.profile}"
        return name

    def __str__(self) -> str:
        return self.short_name


def _canonical_identifier(lowered: str) -> Optional[str]:
    for identifier in _PREFIXES:
        if identifier.lower() == lowered:
            return identifier
    if lowered == FrameworkIdentifiers.PORTABLE.lower():
        return FrameworkIdentifiers.PORTABLE
    return None
