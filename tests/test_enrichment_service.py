import asyncio

import httpx
import pytest

from brand_overview.models.company import CompanyProfile
from brand_overview.services.enrichment_service import EnrichmentService
from brand_overview.sources import EnrichmentSource, SourceContext, default_sources
from brand_overview.sources.presence import LegalDataSource, ReviewsSource, SocialMediaSource
from brand_overview.sources.tech_stack import TechStackSource, parse_technology_page
from brand_overview.sources.traffic import TrafficProvider, WebsiteTrafficSource

TECH_PAGE = """
<html><body>
  <div class="technology"><span class="name">React</span><span class="category">JavaScript frameworks</span></div>
  <div class="technology"><span class="name">Nginx</span><span class="category">Web servers</span></div>
  <div class="technology"><span class="name">React</span><span class="category">Duplicate</span></div>
  <div class="technology"><span class="category">Nameless</span></div>
</body></html>
"""


def context_for(handler):
    return SourceContext(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), timeout=1.0)


def not_found(request):
    return httpx.Response(404)


def offline(request):
    raise httpx.ConnectError("offline", request=request)


class RecordingSource(EnrichmentSource):
    def __init__(self, name, result=None, error=None, delay=0.0, tracker=None):
        self.name = name
        self.result = result if result is not None else {"available": True}
        self.error = error
        self.delay = delay
        self.tracker = tracker

    async def fetch(self, company, context):
        if self.tracker is not None:
            self.tracker["running"] += 1
            self.tracker["peak"] = max(self.tracker["peak"], self.tracker["running"])
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error:
                raise self.error
            return self.result
        finally:
            if self.tracker is not None:
                self.tracker["running"] -= 1


@pytest.mark.asyncio
async def test_collect_keys_results_by_source(acme_company):
    service = EnrichmentService(
        [RecordingSource("socialMedia", {"linkedin": {"available": True}}),
         RecordingSource("newsArticles", {"googleNews": {"available": False}})],
        context_for(not_found),
    )

    enhanced = await service.collect(acme_company, {"text": "page"})

    assert enhanced == {
        "website": {"text": "page"},
        "socialMedia": {"linkedin": {"available": True}},
        "newsArticles": {"googleNews": {"available": False}},
    }


@pytest.mark.asyncio
async def test_failing_source_is_isolated(acme_company):
    service = EnrichmentService(
        [RecordingSource("socialMedia", error=RuntimeError("blocked")),
         TechStackSource(),
         RecordingSource("reviews", {"googleReviews": []})],
        context_for(offline),
    )

    enhanced = await service.collect(acme_company)

    assert enhanced["socialMedia"] == {"available": False}
    assert enhanced["reviews"] == {"googleReviews": []}
    assert enhanced["techStack"]["technologies"] == []


@pytest.mark.asyncio
async def test_slow_source_times_out(acme_company):
    service = EnrichmentService(
        [RecordingSource("newsArticles", delay=1.0), RecordingSource("reviews", {"googleReviews": []})],
        context_for(not_found),
        source_timeout=0.05,
    )

    enhanced = await service.collect(acme_company)

    assert enhanced["newsArticles"] == {"available": False}
    assert enhanced["reviews"] == {"googleReviews": []}


@pytest.mark.asyncio
async def test_concurrency_is_bounded(acme_company):
    tracker = {"running": 0, "peak": 0}
    sources = [RecordingSource(f"source{i}", delay=0.01, tracker=tracker) for i in range(6)]
    service = EnrichmentService(sources, context_for(not_found), max_concurrent=2)

    enhanced = await service.collect(acme_company)

    assert tracker["peak"] == 2
    assert len(enhanced) == 7


def test_default_sources_cover_every_signal():
    names = [source.name for source in default_sources()]

    assert names == [
        "socialMedia",
        "businessDirectories",
        "newsArticles",
        "financialData",
        "legalData",
        "reviews",
        "techStack",
        "websiteTraffic",
    ]


@pytest.mark.asyncio
async def test_social_media_probes(acme_company):
    def handler(request):
        if request.url.host == "www.linkedin.com":
            return httpx.Response(200, text="<html>Acme Dynamics</html>")
        return httpx.Response(404)

    found = await SocialMediaSource().fetch(acme_company, context_for(handler))

    assert found["linkedin"] == {"url": "https://www.linkedin.com/company/acme-dynamics", "available": True}
    assert found["twitter"] == {"available": False}
    assert set(found) == {"linkedin", "twitter", "facebook", "instagram", "youtube"}


@pytest.mark.asyncio
async def test_legal_and_reviews(acme_company):
    context = context_for(lambda request: httpx.Response(200, text="results"))

    legal = await LegalDataSource().fetch(acme_company, context)
    reviews = await ReviewsSource().fetch(acme_company, context)

    assert legal["mca"]["available"] is True
    assert reviews["googleReviews"] == [
        {"company": "Acme Dynamics", "url": "https://www.google.com/search?q=Acme+Dynamics+reviews"}
    ]


def test_parse_technology_page():
    assert parse_technology_page(TECH_PAGE) == [
        {"name": "React", "category": "JavaScript frameworks"},
        {"name": "Nginx", "category": "Web servers"},
        {"name": "React", "category": "Duplicate"},
    ]


@pytest.mark.asyncio
async def test_tech_stack_prefers_wappalyzer_api(acme_company):
    def handler(request):
        if request.url.path.startswith("/api/v1/lookup"):
            return httpx.Response(200, json={"technologies": [
                {"name": "Shopify", "category": "Ecommerce", "version": None},
                {"name": "Shopify", "category": "Ecommerce", "version": None},
            ]})
        return httpx.Response(404)

    data = await TechStackSource().fetch(acme_company, context_for(handler))

    assert data["primarySource"] == "wappalyzer"
    assert data["technologies"] == [{"name": "Shopify", "category": "Ecommerce", "version": None}]
    assert data["builtWith"] is None


@pytest.mark.asyncio
async def test_tech_stack_falls_back_to_builtwith(acme_company):
    def handler(request):
        if request.url.host == "builtwith.com":
            return httpx.Response(200, text=TECH_PAGE)
        return httpx.Response(503)

    data = await TechStackSource().fetch(acme_company, context_for(handler))

    assert data["primarySource"] == "builtwith"
    assert data["wappalyzer"] == {"available": False}
    assert [tech["name"] for tech in data["technologies"]] == ["React", "Nginx"]


@pytest.mark.asyncio
async def test_tech_stack_without_website():
    data = await TechStackSource().fetch(CompanyProfile(name="Acme Dynamics"), context_for(not_found))

    assert data == TechStackSource().empty()


@pytest.mark.asyncio
async def test_traffic_from_first_provider_with_numbers(acme_company):
    providers = [
        TrafficProvider("first", "first", "https://first.test/{domain}", ".visits", ".rank", "medium"),
        TrafficProvider("second", "second", "https://second.test/{domain}", ".visits", ".rank", "low"),
    ]

    def handler(request):
        if request.url.host == "first.test":
            return httpx.Response(200, text='<span class="visits">N/A</span>')
        return httpx.Response(200, text='<span class="visits">1.2M</span><span class="rank">#4,512</span>')

    data = await WebsiteTrafficSource(providers=providers).fetch(acme_company, context_for(handler))

    assert data["first"] == {"available": False}
    assert data["second"]["url"] == "https://second.test/acmedynamics.com"
    assert data["estimatedMonthlyVisits"] == "1.2M"
    assert data["trafficRank"] == "#4,512"
    assert data["primarySource"] == "second"
    assert data["confidence"] == "low"


@pytest.mark.asyncio
async def test_traffic_falls_back_to_estimator(acme_company):
    domains = []

    async def estimator(domain):
        domains.append(domain)
        return "10K-100K visits/month"

    data = await WebsiteTrafficSource(estimator=estimator).fetch(acme_company, context_for(not_found))

    assert domains == ["acmedynamics.com"]
    assert data["estimatedMonthlyVisits"] == "10K-100K visits/month"
    assert data["primarySource"] == "ai_estimation"
    assert data["similarWeb"] == {"available": False}


@pytest.mark.asyncio
async def test_traffic_without_estimator(acme_company):
    data = await WebsiteTrafficSource().fetch(acme_company, context_for(not_found))

    assert data["estimatedMonthlyVisits"] == "Not available"
    assert data["primarySource"] is None
