"""Tests for value objects."""

import pytest

from config import DataConfig
from query.options import QueryOptions
from value_objects import PageDefaults, PopulationProgress, ProvisionReport, SearchResult


class TestPageDefaults:
    """Test PageDefaults value object."""

    def test_default_values(self):
        defaults = PageDefaults()
        assert defaults.default_page_size == 100
        assert defaults.max_page_size == 10000

    def test_from_config(self):
        defaults = PageDefaults.from_config(DataConfig(default_page_size=5, max_page_size=50))
        assert defaults == PageDefaults(default_page_size=5, max_page_size=50)

    def test_immutable(self):
        defaults = PageDefaults()
        with pytest.raises(Exception):
            defaults.max_page_size = 1


class TestSearchResult:

    def test_duration_header_precision(self):
        result = SearchResult(data=[], options=QueryOptions(), total=0, duration_ms=0.12345)
        assert result.duration_header == "0.123ms"


class TestPopulationProgress:

    def test_percentage(self):
        assert PopulationProgress("randoBase", 100_000, 10_000_000).percentage == pytest.approx(1.0)

    def test_empty_run_is_complete(self):
        assert PopulationProgress("randoBase", 0, 0).percentage == 100.0

    def test_str(self):
        assert str(PopulationProgress("randoCustom", 500, 1000)) == "randoCustom: 500/1000 (50.00%)"


class TestProvisionReport:

    def test_defaults(self):
        report = ProvisionReport()
        assert report.created == []
        assert report.existing == []
