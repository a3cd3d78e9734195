"""
Website traffic estimates.

Public traffic pages are tried in order (SimilarWeb, SEMrush, Alexa,
Ahrefs). When none of them shows a number, an optional estimator (the
language model) is asked for a traffic bucket.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from ..models.analysis import NOT_AVAILABLE
from ..models.company import CompanyProfile
from .base import EnrichmentSource, SourceContext, bare_domain, unavailable

logger = logging.getLogger(__name__)

TrafficEstimator = Callable[[str], Awaitable[str]]

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


@dataclass
class TrafficProvider:
    key: str
    source: str
    url_template: str
    visits_selector: str
    rank_selector: str
    confidence: str


TRAFFIC_PROVIDERS: List[TrafficProvider] = [
    TrafficProvider(
        "similarWeb", "similarweb",
        "https://www.similarweb.com/website/{domain}/",
        '[data-testid="visits"], .visits, .traffic-value',
        '[data-testid="rank"], .rank, .ranking-value',
        "medium",
    ),
    TrafficProvider(
        "semrush", "semrush",
        "https://www.semrush.com/analytics/overview/?q={domain}&searchType=domain",
        '[data-testid="traffic"], .traffic, .visits-value',
        '[data-testid="rank"], .rank, .ranking-value',
        "medium",
    ),
    TrafficProvider(
        "alexa", "alexa",
        "https://www.alexa.com/siteinfo/{domain}",
        ".rank-global, .traffic-rank, .visits",
        ".rank-global, .global-rank, .ranking",
        "low",
    ),
    TrafficProvider(
        "ahrefs", "ahrefs",
        "https://ahrefs.com/traffic-checker/?input={domain}&mode=subdomains",
        '[data-testid="traffic"], .traffic, .visits-value, .traffic-checker-value, .organic-traffic',
        '[data-testid="rank"], .rank, .ranking-value, .domain-rank',
        "medium",
    ),
]


def first_text(soup: BeautifulSoup, selector: str) -> str:
    element = soup.select_one(selector)
    return element.get_text().strip() if element else ""


class WebsiteTrafficSource(EnrichmentSource):
    name = "websiteTraffic"

    def __init__(self, estimator: Optional[TrafficEstimator] = None,
                 providers: Optional[List[TrafficProvider]] = None):
        self.estimator = estimator
        self.providers = providers if providers is not None else TRAFFIC_PROVIDERS

    def empty(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {provider.key: None for provider in self.providers}
        data.update({
            "estimatedMonthlyVisits": None,
            "trafficRank": None,
            "primarySource": None,
            "confidence": "low",
        })
        return data

    async def fetch(self, company: CompanyProfile, context: SourceContext) -> Dict[str, Any]:
        data = self.empty()
        if not company.has_website:
            return data

        domain = bare_domain(company.website)

        for provider in self.providers:
            found = await self._lookup(context, provider, domain)
            data[provider.key] = found
            if found["available"]:
                data.update({
                    "estimatedMonthlyVisits": found["monthlyVisits"],
                    "trafficRank": found["trafficRank"],
                    "primarySource": provider.source,
                    "confidence": provider.confidence,
                })
                return data

        if self.estimator is not None:
            data["estimatedMonthlyVisits"] = await self.estimator(domain)
            data["primarySource"] = "ai_estimation"
        else:
            data["estimatedMonthlyVisits"] = NOT_AVAILABLE
        return data

    @staticmethod
    async def _lookup(context: SourceContext, provider: TrafficProvider, domain: str) -> Dict[str, Any]:
        url = provider.url_template.format(domain=domain)
        try:
            response = await context.get(url, timeout=context.timeout * 2, headers=BROWSER_HEADERS)
        except httpx.HTTPError as e:
            logger.debug(f"{provider.source} traffic lookup failed for {domain}: {e}")
            return unavailable()

        soup = BeautifulSoup(response.text, "html.parser")
        visits = first_text(soup, provider.visits_selector)
        if not visits or visits == "N/A":
            return unavailable()
        return {
            "available": True,
            "monthlyVisits": visits,
            "trafficRank": first_text(soup, provider.rank_selector),
            "url": url,
        }
