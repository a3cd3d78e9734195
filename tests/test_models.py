import pytest

from brand_overview.config import Settings, validate_config
from brand_overview.models.analysis import DATA_NOT_FOUND
from brand_overview.models.company import CompanyProfile
from brand_overview.prompts import BrandOverviewPrompts
from brand_overview.validation import (
    validate_company_data,
    validate_required,
    validate_url,
)


def test_profile_from_account_record():
    company = CompanyProfile.from_crm_record({
        "id": 42, "Account_Name": "Acme Dynamics", "Website": "", "Industry": "Automation",
    })

    assert company.id == "42"
    assert company.name == "Acme Dynamics"
    assert company.website is None
    assert not company.has_website


def test_profile_prefers_company_name():
    company = CompanyProfile.from_crm_record({"Company_Name": "Acme", "Account_Name": "Acme Holdings"})

    assert company.name == "Acme"
    assert company.id is None


@pytest.mark.parametrize("website", [None, "", "undefined", "No website available"])
def test_placeholder_websites(website):
    assert not CompanyProfile(name="Acme", website=website).has_website


def test_overview_dict_shapes(sufficient_overview, insufficient_overview):
    full = sufficient_overview.to_dict()
    assert full["geolocation"]["headquarters"] == "Austin, Texas, USA"
    assert "insufficientData" not in full

    summary = insufficient_overview.insufficient_summary()
    assert summary["overview"] == DATA_NOT_FOUND
    assert summary["company"]["name"] == "Tech Corp"
    assert summary["message"].startswith("Please enter the correct company name")


def test_validators():
    assert validate_url("https://acmedynamics.com/about")
    assert not validate_url("acmedynamics.com")
    assert validate_required("x", "Name")
    with pytest.raises(ValueError, match="Name is required"):
        validate_required("  ", "Name")


def test_company_validation():
    assert validate_company_data(CompanyProfile(name="Acme", website="https://acme.com"))
    assert validate_company_data(CompanyProfile(name="Acme"))
    with pytest.raises(ValueError, match="Invalid website URL format"):
        validate_company_data(CompanyProfile(name="Acme", website="acme"))
    with pytest.raises(ValueError, match="Company name is required, Invalid website URL format"):
        validate_company_data(CompanyProfile(name="   ", website="acme"))


def test_validate_config_by_environment():
    development = Settings(_env_file=None, ENVIRONMENT="development", GEMINI_API_KEY="")
    assert "GEMINI_API_KEY" in validate_config(development)

    production = Settings(_env_file=None, ENVIRONMENT="production", GEMINI_API_KEY="")
    with pytest.raises(RuntimeError, match="Missing required configuration"):
        validate_config(production)


def test_models_list_parsing():
    settings = Settings(_env_file=None, GEMINI_MODELS=" gemini-2.5-pro, ,gemini-2.5-flash ")

    assert settings.gemini_models == ["gemini-2.5-pro", "gemini-2.5-flash"]


def test_analysis_prompt_content(acme_company):
    prompt = BrandOverviewPrompts.analysis_prompt(
        acme_company, "x" * 5000, {"socialMedia": {"linkedin": {"available": True}}}
    )

    assert "- Name: Acme Dynamics" in prompt
    assert "x" * 3000 in prompt
    assert "x" * 3001 not in prompt
    assert '- Social Media Presence: {"linkedin": {"available": true}}' in prompt
    assert "- Tech Stack: null" in prompt
    assert DATA_NOT_FOUND in prompt


def test_prompts_without_website():
    company = CompanyProfile(name="Acme Dynamics")

    assert "Website: No website available" in BrandOverviewPrompts.analysis_prompt(company, None)
    assert "No website content available" in BrandOverviewPrompts.geolocation_prompt(company, "")
    assert "acme.com" in BrandOverviewPrompts.traffic_estimate_prompt("acme.com")
