"""Tests for the ordered package source registry."""

import pytest

from depload.constants import Constants
from depload.exceptions import SourceConfigurationError
from depload.sources import PackageSourceList


class TestPackageSourceList:
    """Front-insertion priority semantics."""

    def test_default_source_seeded(self):
        assert PackageSourceList().sources == (Constants.DEFAULT_PACKAGE_SOURCE,)

    def test_priority_is_reverse_of_add_order(self):
        sources = PackageSourceList([])
        for location in ["a", "b", "c"]:
            sources.add_source(location)
        assert sources.sources == ("c", "b", "a")

    def test_new_sources_outrank_default(self):
        sources = PackageSourceList()
        sources.add_source("https://my.feed/v3/index.json")
        assert list(sources) == ["https://my.feed/v3/index.json", Constants.DEFAULT_PACKAGE_SOURCE]

    def test_duplicates_allowed(self):
        sources = PackageSourceList([])
        sources.add_source("a")
        sources.add_source("a")
        assert len(sources) == 2

    @pytest.mark.parametrize("location", ["", "   ", None])
    def test_empty_source_rejected(self, location):
        with pytest.raises(SourceConfigurationError):
            PackageSourceList().add_source(location)
