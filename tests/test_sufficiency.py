import pytest

from brand_overview.models.analysis import STANDARD_SUGGESTIONS, Insufficient, Sufficient
from brand_overview.models.company import CompanyProfile
from brand_overview.services.sufficiency import (
    DataSufficiencyPolicy,
    has_meaningful_data,
    is_generic_company_name,
)


@pytest.fixture
def policy():
    return DataSufficiencyPolicy()


@pytest.mark.parametrize("name", [
    "Tech Corp",
    "  tech   corp ",
    "ABC Company",
    "Test Company Ltd",
    "Sample Company",
])
def test_generic_names(name):
    assert is_generic_company_name(name)


@pytest.mark.parametrize("name", [
    "Acme Dynamics",
    "Tech Corporation of India",
    "ABC Companyhouse",
    "",
    None,
])
def test_specific_names(name):
    assert not is_generic_company_name(name)


def test_generic_name_is_insufficient_even_with_good_analysis(policy, acme_analysis):
    verdict = policy.evaluate(CompanyProfile(name="Tech Corp", website="https://techcorp.com"),
                              acme_analysis)

    assert isinstance(verdict, Insufficient)
    assert "too generic" in verdict.reason
    assert verdict.suggestions == STANDARD_SUGGESTIONS


def test_missing_website_alone_is_sufficient(policy, acme_analysis):
    verdict = policy.evaluate(CompanyProfile(name="Acme Dynamics"), acme_analysis)

    assert verdict == Sufficient()
    assert verdict.is_sufficient


def test_empty_analysis(policy, acme_company):
    verdict = policy.evaluate(acme_company, {})

    assert not verdict.is_sufficient
    assert verdict.reason == "Analysis data is missing or empty"


def test_self_reported_insufficiency_keeps_reason_and_suggestions(policy, acme_company):
    verdict = policy.evaluate(acme_company, {
        "insufficientData": True,
        "reason": "Website is parked",
        "suggestions": ["Provide the real website"],
    })

    assert verdict.reason == "Website is parked"
    assert verdict.suggestions == ["Provide the real website"]


def test_placeholder_values_are_not_meaningful(policy, acme_company):
    analysis = {
        "overview": "Analysis completed",
        "mission": "Not available",
        "products": [],
        "targetMarket": "Unknown",
        "brandPositioning": "   ",
    }

    assert not has_meaningful_data(analysis)
    assert policy.evaluate(acme_company, analysis).reason == "Analysis contains no meaningful data"


def test_short_overview_is_insufficient(policy, acme_company):
    verdict = policy.evaluate(acme_company, {"overview": "Makes robots", "products": ["Arms"]})

    assert isinstance(verdict, Insufficient)
    assert "too short" in verdict.reason


def test_products_alone_count_as_meaningful(policy, acme_company):
    verdict = policy.evaluate(acme_company, {"products": ["Robotic arms"]})

    assert verdict.is_sufficient


def test_analysis_checked_without_company(policy, acme_analysis):
    assert policy.evaluate(None, acme_analysis).is_sufficient
    assert not policy.evaluate(None, None).is_sufficient
