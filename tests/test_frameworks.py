"""Tests for framework descriptors, compatibility and nearest-framework selection."""

import pytest
import semantic_version

from depload.frameworks import FrameworkDescriptor, FrameworkIdentifiers, get_nearest, is_compatible


def fw(name):
    parsed = FrameworkDescriptor.parse(name)
    assert parsed is not None, name
    return parsed


class TestParse:
    """Folder and long name parsing."""

    @pytest.mark.parametrize("name,identifier,version,profile", [
        ("net45", FrameworkIdentifiers.NET_FRAMEWORK, "4.5.0", ""),
        ("net462", FrameworkIdentifiers.NET_FRAMEWORK, "4.6.2", ""),
        ("net4.6.2", FrameworkIdentifiers.NET_FRAMEWORK, "4.6.2", ""),
        ("net40-client", FrameworkIdentifiers.NET_FRAMEWORK, "4.0.0", "client"),
        ("netstandard2.0", FrameworkIdentifiers.NET_STANDARD, "2.0.0", ""),
        ("netcoreapp3.1", FrameworkIdentifiers.NET_CORE_APP, "3.1.0", ""),
        ("net6.0", FrameworkIdentifiers.NET_CORE_APP, "6.0.0", ""),
        ("net6.0-windows", FrameworkIdentifiers.NET_CORE_APP, "6.0.0", "windows"),
        ("NET45", FrameworkIdentifiers.NET_FRAMEWORK, "4.5.0", ""),
        (".NETFramework4.5", FrameworkIdentifiers.NET_FRAMEWORK, "4.5.0", ""),
        (".NETFramework,Version=v4.6", FrameworkIdentifiers.NET_FRAMEWORK, "4.6.0", ""),
        (".NETFramework,Version=v4.0,Profile=Client", FrameworkIdentifiers.NET_FRAMEWORK, "4.0.0", "client"),
        ("uap10.0", FrameworkIdentifiers.UAP, "10.0.0", ""),
        ("xamarinmac20", FrameworkIdentifiers.XAMARIN_MAC, "2.0.0", ""),
        ("Xamarin.iOS10", FrameworkIdentifiers.XAMARIN_IOS, "1.0.0", ""),
    ])
    def test_parses_known_names(self, name, identifier, version, profile):
        parsed = fw(name)
        assert parsed.identifier == identifier
        assert parsed.version == semantic_version.Version(version)
        assert parsed.profile == profile

    @pytest.mark.parametrize("name", ["", None, "foo", "1.0", "portable-"])
    def test_unknown_names_return_none(self, name):
        assert FrameworkDescriptor.parse(name) is None

    def test_portable_profile_members(self):
        portable = fw("portable-net45+win8")
        assert portable.is_portable
        assert portable.portable_members == (fw("net45"), fw("win8"))

    @pytest.mark.parametrize("name", [
        "net45", "net462", "net40-client", "netstandard2.0", "netcoreapp3.1",
        "net6.0", "net6.0-windows", "portable-net45+win8", "win8", "wp81",
    ])
    def test_short_name_round_trips(self, name):
        assert fw(name).short_name == name

    def test_equality_is_exact(self):
        assert fw("net45") == fw("NET45")
        assert fw("net45") != fw("net451")
        assert fw("net40") != fw("net40-client")
        assert len({fw("net45"), fw(".NETFramework,Version=v4.5")}) == 1


class TestIsCompatible:
    """Compatibility ruleset."""

    @pytest.mark.parametrize("target,candidate,expected", [
        ("net46", "net45", True),
        ("net45", "net46", False),
        ("net46", "netstandard1.3", True),
        ("net46", "netstandard2.0", False),
        ("net461", "netstandard2.0", True),
        ("net48", "netstandard2.1", False),
        ("netcoreapp3.1", "netstandard2.1", True),
        ("netcoreapp2.0", "netstandard2.1", False),
        ("net6.0", "netcoreapp3.1", True),
        ("net6.0", "net45", False),
        ("net6.0", "net6.0-windows", False),
        ("net6.0-windows", "net6.0", True),
        ("net40", "net40-client", True),
        ("net46", "portable-net45+win8", True),
        ("netcoreapp2.0", "portable-net45+win8", False),
    ])
    def test_rules(self, target, candidate, expected):
        assert is_compatible(fw(target), fw(candidate)) is expected


class TestGetNearest:
    """Nearest framework reduction."""

    def test_prefers_same_family_over_net_standard(self):
        candidates = [fw("net40"), fw("net45"), fw("netstandard1.0")]
        assert get_nearest(fw("net46"), candidates) == fw("net45")

    def test_skips_incompatible_net_standard(self):
        candidates = [fw("netstandard2.0"), fw("net45")]
        assert get_nearest(fw("net46"), candidates) == fw("net45")

    def test_highest_compatible_net_standard(self):
        candidates = [fw("net45"), fw("netstandard1.3"), fw("netstandard2.0")]
        assert get_nearest(fw("netcoreapp3.1"), candidates) == fw("netstandard2.0")

    def test_prefers_specific_over_portable(self):
        candidates = [fw("portable-net45+win8"), fw("net45")]
        assert get_nearest(fw("net46"), candidates) == fw("net45")

    def test_portable_when_nothing_else(self):
        candidates = [fw("portable-net45+win8"), fw("netstandard2.0")]
        assert get_nearest(fw("net46"), candidates) == fw("portable-net45+win8")

    def test_none_when_nothing_compatible(self):
        assert get_nearest(fw("net46"), [fw("netstandard2.0"), fw("net6.0")]) is None

    def test_none_for_empty_candidates(self):
        assert get_nearest(fw("net46"), []) is None


class TestUnsupported:
    """Descriptor for lib folders that are not framework names."""

    def test_never_compatible(self):
        unsupported = FrameworkDescriptor.unsupported()
        assert not is_compatible(fw("net46"), unsupported)
        assert not is_compatible(unsupported, unsupported)

    def test_ignored_by_nearest(self):
        assert get_nearest(fw("net46"), [FrameworkDescriptor.unsupported(), fw("net45")]) == fw("net45")
