"""
Technology stack lookup for a company website.

Tries the Wappalyzer API, then the Wappalyzer lookup page, then BuiltWith,
stopping at the first source that names any technology.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from ..models.company import CompanyProfile
from .base import EnrichmentSource, SourceContext, unavailable

logger = logging.getLogger(__name__)

WAPPALYZER_API = "https://www.wappalyzer.com/api/v1/lookup?url={url}"
WAPPALYZER_PAGE = "https://www.wappalyzer.com/lookup/{url}"
BUILTWITH_PAGE = "https://builtwith.com/{url}"

ITEM_SELECTOR = '[data-testid="technology"], .technology, .tech-item'
NAME_SELECTOR = '.name, .tech-name, [data-testid="technology-name"]'
CATEGORY_SELECTOR = '.category, .tech-category, [data-testid="technology-category"]'


def parse_technology_page(html: str) -> List[Dict[str, str]]:
    soup = BeautifulSoup(html, "html.parser")
    technologies = []
    for item in soup.select(ITEM_SELECTOR):
        name = item.select_one(NAME_SELECTOR)
        category = item.select_one(CATEGORY_SELECTOR)
        if name and name.get_text().strip():
            technologies.append({
                "name": name.get_text().strip(),
                "category": category.get_text().strip() if category else "",
            })
    return technologies


def dedupe_by_name(technologies: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    seen = set()
    unique = []
    for tech in technologies:
        if tech.get("name") in seen:
            continue
        seen.add(tech.get("name"))
        unique.append(tech)
    return unique


class TechStackSource(EnrichmentSource):
    name = "techStack"

    def empty(self) -> Dict[str, Any]:
        return {"wappalyzer": None, "builtWith": None, "technologies": [], "primarySource": None}

    async def fetch(self, company: CompanyProfile, context: SourceContext) -> Dict[str, Any]:
        data = self.empty()
        if not company.has_website:
            logger.info(f"No website for {company.name}, skipping tech stack")
            return data

        target = quote(company.website, safe="")

        technologies = await self._wappalyzer_api(context, target)
        if technologies is None:
            technologies = await self._scrape(context, WAPPALYZER_PAGE.format(url=target))
        if technologies:
            data["wappalyzer"] = {"available": True, "technologies": technologies}
            data["primarySource"] = "wappalyzer"
        else:
            data["wappalyzer"] = unavailable()
            technologies = await self._scrape(context, BUILTWITH_PAGE.format(url=target))
            if technologies:
                data["builtWith"] = {"available": True, "technologies": technologies}
                data["primarySource"] = "builtwith"
            else:
                data["builtWith"] = unavailable()

        data["technologies"] = dedupe_by_name(technologies or [])
        return data

    @staticmethod
    async def _wappalyzer_api(context: SourceContext, target: str) -> Optional[List[Dict[str, Any]]]:
        try:
            response = await context.get(
                WAPPALYZER_API.format(url=target),
                timeout=context.timeout * 2,
                headers={"Accept": "application/json"},
            )
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Wappalyzer API lookup failed: {e}")
            return None

        raw = payload.get("technologies") if isinstance(payload, dict) else None
        if not raw:
            return None
        return [
            {"name": tech.get("name"), "category": tech.get("category"), "version": tech.get("version")}
            for tech in raw
            if isinstance(tech, dict) and tech.get("name")
        ]

    @staticmethod
    async def _scrape(context: SourceContext, url: str) -> List[Dict[str, str]]:
        try:
            response = await context.get(url, timeout=context.timeout * 2)
        except httpx.HTTPError as e:
            logger.debug(f"Tech stack page {url} failed: {e}")
            return []
        return parse_technology_page(response.text)
