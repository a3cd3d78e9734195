import json
import os
import sys
from typing import Any, Callable, Dict, List, Optional, Union

import pytest


def _ensure_repo_on_path() -> None:
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if root not in sys.path:
        sys.path.append(root)


_ensure_repo_on_path()

from brand_overview.models.analysis import BrandOverview, Insufficient, Sufficient  # noqa: E402
from brand_overview.models.company import CompanyProfile  # noqa: E402
from brand_overview.services.analysis_service import AnalysisService  # noqa: E402
from brand_overview.services.llm_service import (  # noqa: E402
    LLMProviderInterface,
    LLMResponse,
    LLMService,
)

Reply = Union[str, Exception]


class ScriptedProvider(LLMProviderInterface):
    """LLM provider double answering from a script or a prompt-based function."""

    def __init__(self, replies: Optional[List[Reply]] = None,
                 responder: Optional[Callable[[str, str], Reply]] = None):
        self.replies = list(replies or [])
        self.responder = responder
        self.calls: List[Dict[str, str]] = []

    async def generate(self, prompt: str, model: str, temperature: float = 0.4) -> LLMResponse:
        self.calls.append({"prompt": prompt, "model": model})
        reply = self.responder(prompt, model) if self.responder else self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, tokens_used=100, cost=0.001, provider="scripted", model=model)

    def calculate_cost(self, tokens: int, model: str) -> float:
        return 0.0


class RecordingNotifier:
    def __init__(self):
        self.notifications: List[Dict[str, Any]] = []

    async def send_error_notification(self, error, context=None):
        self.notifications.append({"error": str(error), "context": context or {}})
        return True


ACME_ANALYSIS: Dict[str, Any] = {
    "overview": "Acme Dynamics designs and manufactures industrial automation systems for mid-size factories.",
    "mission": "Make automation affordable for every manufacturer",
    "products": ["Robotic arms", "PLC controllers", "Factory analytics software"],
    "targetMarket": "Mid-size manufacturers in North America and Europe",
    "differentiators": ["Modular hardware", "Fast deployment"],
    "brandPositioning": "The practical automation partner",
    "companySize": "1,200 employees",
    "annualRevenue": "$25 billion",
    "onlineRevenue": "$2 billion",
    "aov": "$45,000",
    "orderVolume": "5,000 orders/year",
    "salesChannels": ["Direct sales", "Distributors", "Online store"],
    "geographicPresence": ["United States", "Germany"],
    "decisionMakers": ["Jane Doe (CEO)", "John Roe (CMO)"],
    "recentNews": ["Opened a plant in Ohio", "Launched AcmeCloud"],
    "marketingIndicators": "Active on LinkedIn, trade show sponsor",
    "techStack": ["Salesforce", "SAP"],
    "marketingBudget": "Not publicly available",
    "websiteTraffic": "100K-1M visits/month (Source: SimilarWeb, Confidence: medium)",
}

ACME_GEOLOCATION: Dict[str, Any] = {
    "headquarters": "Austin, Texas, USA",
    "offices": ["Austin", "Munich"],
    "serviceAreas": ["North America", "Europe"],
    "markets": ["Automotive", "Electronics"],
    "regions": ["Americas", "EMEA"],
}


@pytest.fixture
def acme_company() -> CompanyProfile:
    return CompanyProfile(id="42", name="Acme Dynamics", website="https://acmedynamics.com",
                          industry="Industrial Automation")


@pytest.fixture
def acme_analysis() -> Dict[str, Any]:
    return json.loads(json.dumps(ACME_ANALYSIS))


@pytest.fixture
def acme_geolocation() -> Dict[str, Any]:
    return dict(ACME_GEOLOCATION)


@pytest.fixture
def sufficient_overview(acme_company, acme_analysis, acme_geolocation) -> BrandOverview:
    return BrandOverview(
        company=acme_company,
        verdict=Sufficient(),
        analysis=acme_analysis,
        geolocation=acme_geolocation,
        enhanced_data={},
        scraped_content={"url": acme_company.website, "title": "Acme", "description": None,
                         "structuredData": {}},
        generated_at="2024-01-01T00:00:00",
    )


@pytest.fixture
def insufficient_overview() -> BrandOverview:
    return BrandOverview(
        company=CompanyProfile(id="7", name="Tech Corp"),
        verdict=Insufficient(reason='Company name "Tech Corp" is too generic to identify a specific company'),
        analysis={"overview": "DATA_NOT_FOUND_DUE_TO_INCORRECT_COMPANY_NAME_OR_WEBSITE_URL",
                  "insufficientData": True},
        geolocation={"headquarters": "Not specified", "offices": [], "serviceAreas": [],
                     "markets": [], "regions": []},
        enhanced_data={},
        scraped_content=None,
        generated_at="2024-01-01T00:00:00",
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


def make_analysis_service(provider: ScriptedProvider, models: Optional[List[str]] = None,
                          **kwargs) -> AnalysisService:
    llm = LLMService(provider, models=models or ["model-a"], calls_per_minute=1000)
    kwargs.setdefault("retry_delay", 0)
    kwargs.setdefault("geolocation_retry_delay", 0)
    return AnalysisService(llm, **kwargs)
