"""
Shared pieces for enrichment sources.

A source looks up one kind of public signal about a company (social
profiles, directories, news, tech stack...) and returns a JSON-friendly
dict. Sources are independent of each other; the enrichment service runs
them concurrently and isolates their failures.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from ..models.company import CompanyProfile

logger = logging.getLogger(__name__)

UNAVAILABLE: Dict[str, Any] = {"available": False}


def unavailable() -> Dict[str, Any]:
    return dict(UNAVAILABLE)


@dataclass
class SourceContext:
    """What every source needs to reach the network."""
    client: httpx.AsyncClient
    timeout: float = 5.0
    headers: Dict[str, str] = field(default_factory=dict)

    async def get(self, url: str, timeout: Optional[float] = None, **kwargs) -> httpx.Response:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        response = await self.client.get(
            url,
            headers=headers,
            timeout=timeout or self.timeout,
            follow_redirects=True,
            **kwargs,
        )
        response.raise_for_status()
        return response

    async def probe(self, url: str) -> Dict[str, Any]:
        """``{url, available: True}`` when the page answers, else ``{available: False}``."""
        try:
            await self.get(url)
        except httpx.HTTPError as e:
            logger.debug(f"Probe failed for {url}: {e}")
            return unavailable()
        return {"url": url, "available": True}


@dataclass
class SourceResult:
    """Outcome of running one source."""
    name: str
    data: Dict[str, Any]
    ok: bool = True
    error: Optional[str] = None


class EnrichmentSource(ABC):
    """One best-effort enrichment lookup."""

    # Key of this source in the enhanced data dict
    name: str = ""

    @abstractmethod
    async def fetch(self, company: CompanyProfile, context: SourceContext) -> Dict[str, Any]:
        """Look the company up; may raise, the caller isolates failures."""
        pass

    def empty(self) -> Dict[str, Any]:
        """Value recorded when the source fails outright."""
        return unavailable()


def bare_domain(website: str) -> str:
    """https://example.com/ -> example.com"""
    domain = website.strip()
    for prefix in ("https://", "http://"):
        if domain.startswith(prefix):
            domain = domain[len(prefix):]
    return domain.rstrip("/")
