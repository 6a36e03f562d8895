"""Tests for the industry taxonomy classifier and crisis indicators."""

import pytest

from app.core.taxonomy import (
    BASE_CRISIS_INDICATORS,
    INDUSTRY_TAXONOMY,
    classify_industry,
    define_crisis_indicators,
)


class TestClassifyIndustry:
    """Name-based classification, first declared industry wins."""

    def test_bank_name_is_financial_services(self):
        result = classify_industry("Acme Bank Corp")
        assert result.primary == "financial_services"
        assert result.secondary == []
        assert result.subcategories == ["banking", "insurance"]

    def test_unmatched_name_defaults_to_technology(self):
        result = classify_industry("Gamma Systems Inc")
        assert result.primary == "technology"
        assert result.subcategories == []

    def test_substring_match_within_token(self):
        # "solarworks" contains "solar"
        assert classify_industry("SolarWorks Ltd").primary == "energy"

    def test_first_declared_industry_wins_over_later_matches(self):
        # "software" (technology) and "bank" (financial_services) both match
        result = classify_industry("Bank Software Partners")
        assert result.primary == "technology"
        assert result.subcategories == INDUSTRY_TAXONOMY["technology"]["subcategories"][:2]

    def test_context_with_many_hits_overrides_name(self):
        context = "A hospital network offering clinical care and medical research"
        result = classify_industry("Gamma Systems Inc", context)
        assert result.primary == "healthcare"
        assert result.subcategories == INDUSTRY_TAXONOMY["healthcare"]["subcategories"]

    def test_context_with_two_hits_does_not_override(self):
        result = classify_industry("Acme Bank Corp", "cloud software vendor")
        assert result.primary == "financial_services"
        assert result.subcategories == ["banking", "insurance"]

    def test_classification_is_deterministic(self):
        context = "oil and gas exploration with solar and wind power projects"
        first = classify_industry("Northwind Holdings", context)
        second = classify_industry("Northwind Holdings", context)
        assert first == second


class TestCrisisIndicators:
    """Crisis indicator lists per industry."""

    @pytest.mark.parametrize("industry", list(INDUSTRY_TAXONOMY) + ["aerospace", ""])
    def test_always_contains_base_terms(self, industry):
        indicators = define_crisis_indicators(industry)
        assert set(BASE_CRISIS_INDICATORS) <= set(indicators)

    def test_unknown_industry_gets_exactly_base_terms(self):
        assert define_crisis_indicators("aerospace") == BASE_CRISIS_INDICATORS
        assert len(define_crisis_indicators("aerospace")) == 9

    def test_industry_extensions(self):
        assert "hack" in define_crisis_indicators("technology")
        assert "fraud" in define_crisis_indicators("financial_services")
        assert "FDA warning" in define_crisis_indicators("healthcare")
        assert "spill" in define_crisis_indicators("energy")
        assert "supply chain" in define_crisis_indicators("retail")
