"""Tests for package requests and effective source computation."""

import pytest

from depload.exceptions import SourceConfigurationError
from depload.package_request import PackageRequest

GLOBAL = ("g1", "g2")


class TestEffectiveSources:
    """Exclusive and non-exclusive source composition."""

    def test_no_explicit_sources_uses_global(self):
        request = PackageRequest("Pkg")
        assert request.uses_default_sources
        assert request.effective_sources(GLOBAL) == GLOBAL

    def test_exclusive_uses_explicit_verbatim(self):
        request = PackageRequest("Pkg", sources=("e1", "e2"), exclusive=True)
        assert request.effective_sources(GLOBAL) == ("e1", "e2")

    def test_non_exclusive_prepends_explicit(self):
        request = PackageRequest("Pkg", sources=("e1",))
        assert request.effective_sources(GLOBAL) == ("e1", "g1", "g2")

    def test_sources_list_is_frozen(self):
        request = PackageRequest("Pkg", sources=["e1"])
        assert request.sources == ("e1",)


class TestValidation:
    """Configuration-time validation."""

    @pytest.mark.parametrize("package_id", ["", "  ", None])
    def test_empty_id(self, package_id):
        with pytest.raises(SourceConfigurationError):
            PackageRequest(package_id)

    def test_exclusive_without_sources(self):
        with pytest.raises(SourceConfigurationError):
            PackageRequest("Pkg", exclusive=True)

    def test_invalid_version_spec(self):
        with pytest.raises(SourceConfigurationError) as excinfo:
            PackageRequest("Pkg", version_spec="[1.0")
        assert "Pkg" in str(excinfo.value)

    def test_version_range_parsed(self):
        request = PackageRequest("Pkg", version_spec="[1.0,2.0)")
        assert request.version_range.max_version is not None
