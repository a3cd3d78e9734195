"""
Presence probes: social media, business directories, news, financial,
legal and review listings.

Each source derives candidate URLs from the company name and records which
of them answer. Nothing is parsed from the pages themselves; the model only
gets to know where the company shows up.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Tuple
from urllib.parse import quote_plus

from ..models.company import CompanyProfile
from .base import EnrichmentSource, SourceContext

logger = logging.getLogger(__name__)

UrlBuilder = Callable[[str], str]


def hyphen_slug(name: str) -> str:
    return "-".join(name.strip().lower().split())


def compact_slug(name: str) -> str:
    return "".join(name.strip().lower().split())


class ProbeSource(EnrichmentSource):
    """Probes a fixed list of URL templates concurrently."""

    targets: List[Tuple[str, UrlBuilder]] = []

    async def fetch(self, company: CompanyProfile, context: SourceContext) -> Dict[str, Any]:
        urls = [(key, build(company.name)) for key, build in self.targets]
        results = await asyncio.gather(*(context.probe(url) for _, url in urls))
        found = {key: result for (key, _), result in zip(urls, results)}
        available = [key for key, result in found.items() if result["available"]]
        logger.debug(f"{self.name} for {company.name}: {available or 'nothing found'}")
        return found


class SocialMediaSource(ProbeSource):
    name = "socialMedia"
    targets = [
        ("linkedin", lambda n: f"https://www.linkedin.com/company/{hyphen_slug(n)}"),
        ("twitter", lambda n: f"https://x.com/{compact_slug(n)}"),
        ("facebook", lambda n: f"https://www.facebook.com/{compact_slug(n)}"),
        ("instagram", lambda n: f"https://www.instagram.com/{compact_slug(n)}"),
        ("youtube", lambda n: f"https://www.youtube.com/@{compact_slug(n)}"),
    ]


class BusinessDirectorySource(ProbeSource):
    name = "businessDirectories"
    targets = [
        ("crunchbase", lambda n: f"https://www.crunchbase.com/organization/{hyphen_slug(n)}"),
        ("linkedin", lambda n: f"https://www.linkedin.com/company/{hyphen_slug(n)}"),
        ("tofler", lambda n: f"https://tofler.in/search?q={quote_plus(n)}"),
        ("zaubacorp", lambda n: f"https://www.zaubacorp.com/company-search/{quote_plus(n)}"),
    ]


class NewsSource(ProbeSource):
    name = "newsArticles"
    targets = [
        ("googleNews", lambda n: f"https://news.google.com/search?q={quote_plus(n)}&hl=en&gl=US&ceid=US:en"),
        ("reuters", lambda n: f"https://www.reuters.com/search/news?blob={quote_plus(n)}"),
        ("bloomberg", lambda n: f"https://www.bloomberg.com/search?query={quote_plus(n)}"),
    ]


class FinancialDataSource(ProbeSource):
    name = "financialData"
    targets = [
        ("yahooFinance", lambda n: f"https://finance.yahoo.com/quote/{quote_plus(n.upper())}"),
        ("bloomberg", lambda n: f"https://www.bloomberg.com/quote/{quote_plus(n.upper())}:US"),
        ("reuters", lambda n: f"https://www.reuters.com/companies/{hyphen_slug(n)}"),
        ("moneyControl", lambda n: f"https://www.moneycontrol.com/india/stockpricequote/{quote_plus(n)}"),
    ]


class LegalDataSource(EnrichmentSource):
    """Corporate registry references; the MCA portal is a form, so it is only cited."""

    name = "legalData"
    MCA_URL = "https://www.mca.gov.in/mcafoportal/viewCompanyMasterData.do"

    async def fetch(self, company: CompanyProfile, context: SourceContext) -> Dict[str, Any]:
        return {"mca": {"url": self.MCA_URL, "available": True}}


class ReviewsSource(EnrichmentSource):
    name = "reviews"

    async def fetch(self, company: CompanyProfile, context: SourceContext) -> Dict[str, Any]:
        url = f"https://www.google.com/search?q={quote_plus(company.name)}+reviews"
        probe = await context.probe(url)
        reviews: List[Dict[str, Any]] = []
        if probe["available"]:
            reviews.append({"company": company.name, "url": url})
        return {"googleReviews": reviews}
