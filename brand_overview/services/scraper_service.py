"""
Website scraping and company website discovery.

Pages are fetched with httpx and parsed with BeautifulSoup. The scraper
returns page text, meta tags and a handful of structured signals (contacts,
social links, careers and partnership links) for the analysis prompt.
"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus, urlparse

import httpx
from bs4 import BeautifulSoup

from ..exceptions import ScrapeError

logger = logging.getLogger(__name__)

META_TAGS = {
    "description": ("name", "description"),
    "keywords": ("name", "keywords"),
    "ogTitle": ("property", "og:title"),
    "ogDescription": ("property", "og:description"),
    "ogImage": ("property", "og:image"),
}

SOCIAL_DOMAINS = ["facebook", "linkedin", "twitter", "instagram"]
CAREER_KEYWORDS = ["career", "job", "work"]
PARTNERSHIP_KEYWORDS = ["partner", "rfp", "tender"]

# Hosts that never serve as a company's own website
EXCLUDED_HOSTS = [
    r"google\.",
    r"gstatic\.",
    r"facebook\.",
    r"instagram\.",
    r"twitter\.",
    r"linkedin\.",
    r"youtube\.",
    r"yelp\.",
    r"wikipedia\.",
    r"schema\.org",
    r"w3\.org",
]

URL_PATTERN = re.compile(r"https?://[^\s\"'<>]+")
PROBE_TLDS = [".com", ".in", ".org"]


def empty_scrape(url: Optional[str]) -> Dict[str, Any]:
    """Placeholder used when a site cannot be scraped."""
    return {"text": "", "meta": {}, "url": url, "structuredData": {}}


def company_slug(company_name: str, separator: str = "") -> str:
    return re.sub(r"\s+", separator, company_name.strip().lower())


class ScraperService:
    """Fetches and parses company websites."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0,
                 probe_timeout: float = 3.0, user_agent: Optional[str] = None):
        self.client = client
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self.headers = {"User-Agent": user_agent} if user_agent else {}

    async def scrape_website(self, url: str) -> Dict[str, Any]:
        """
        Fetch a page and extract its content.

        Returns:
            dict with ``text``, ``meta``, ``url`` and ``structuredData``

        Raises:
            ScrapeError: the page could not be fetched
        """
        try:
            response = await self.client.get(
                url, headers=self.headers, timeout=self.timeout, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error scraping website {url}: {e}")
            raise ScrapeError(f"Failed to scrape website: {e}") from e

        content = self.parse_html(response.text, url)
        logger.info(f"Scraped {url}: {len(content['text'])} chars of text")
        return content

    def parse_html(self, html: str, url: Optional[str] = None) -> Dict[str, Any]:
        soup = BeautifulSoup(html, "html.parser")

        for element in soup(["script", "style"]):
            element.decompose()

        body = soup.body or soup
        text = re.sub(r"\s+", " ", body.get_text(" ")).strip()

        meta: Dict[str, Optional[str]] = {
            "title": soup.title.get_text().strip() if soup.title else "",
        }
        for key, (attribute, value) in META_TAGS.items():
            tag = soup.find("meta", attrs={attribute: value})
            meta[key] = tag.get("content") if tag else None

        organization = " ".join(
            re.sub(r"\s+", " ", element.get_text(" ")).strip()
            for element in soup.select('[itemtype*="Organization"]')
        )

        structured_data = {
            "organization": organization,
            "contact": [
                link.get_text().strip()
                for link in soup.select('a[href^="mailto:"], a[href^="tel:"]')
            ],
            "socialMedia": self._links(soup, SOCIAL_DOMAINS, attribute="href"),
            "careers": self._links(soup, CAREER_KEYWORDS),
            "partnerships": self._links(soup, PARTNERSHIP_KEYWORDS),
        }

        return {"text": text, "meta": meta, "url": url, "structuredData": structured_data}

    @staticmethod
    def _links(soup: BeautifulSoup, keywords: List[str], attribute: Optional[str] = None) -> List[str]:
        selector = ", ".join(f'a[href*="{keyword}"]' for keyword in keywords)
        values = []
        for link in soup.select(selector):
            value = link.get(attribute) if attribute else link.get_text().strip()
            if value:
                values.append(value)
        return values

    async def find_company_website(self, company_name: str) -> Optional[str]:
        """
        Discover a website for a company that arrived without one.

        Harvests URLs from search result pages first, then probes common
        domain patterns. Returns None when nothing reachable is found.
        """
        if not company_name or not company_name.strip():
            return None

        slug = company_slug(company_name)
        queries = [
            f"{company_name} official website",
            f"{company_name} company website",
        ] + [f"site:{slug}{tld}" for tld in PROBE_TLDS]

        for query in queries:
            search_url = f"https://www.google.com/search?q={quote_plus(query)}"
            try:
                response = await self.client.get(
                    search_url, headers=self.headers, timeout=5.0
                )
            except httpx.HTTPError as e:
                logger.debug(f"Website search failed for query {query!r}: {e}")
                continue

            candidate = self._pick_candidate(response.text, company_name)
            if candidate:
                logger.info(f"Found website for {company_name} via search: {candidate}")
                return candidate

        for domain in self._probe_domains(slug):
            url = f"https://{domain}"
            try:
                response = await self.client.get(
                    url, headers=self.headers, timeout=self.probe_timeout, follow_redirects=True
                )
            except httpx.HTTPError:
                continue
            if response.status_code == 200:
                logger.info(f"Found website for {company_name} by probing: {url}")
                return url

        logger.info(f"No website found for {company_name}")
        return None

    def _pick_candidate(self, html: str, company_name: str) -> Optional[str]:
        slugs = {company_slug(company_name), company_slug(company_name, "-")}
        for match in URL_PATTERN.findall(html or ""):
            url = self._clean_and_validate_url(match)
            if not url:
                continue
            host = urlparse(url).netloc.lower()
            if any(slug and slug in host for slug in slugs):
                return url
        return None

    @staticmethod
    def _probe_domains(slug: str) -> List[str]:
        domains = [f"{slug}{tld}" for tld in PROBE_TLDS]
        domains += [f"www.{slug}.com", f"www.{slug}.in"]
        return domains

    def _clean_and_validate_url(self, url: str) -> Optional[str]:
        """Clean a harvested URL; None for hosts that are not company sites."""
        if not url:
            return None

        url = url.split("#")[0].rstrip(".,;)")

        if not (url.startswith("http://") or url.startswith("https://")):
            if url.startswith("www.") or ("." in url and not url.startswith("/")):
                url = "https://" + url
            else:
                return None

        for pattern in EXCLUDED_HOSTS:
            if re.search(pattern, urlparse(url).netloc.lower()):
                return None

        return url
