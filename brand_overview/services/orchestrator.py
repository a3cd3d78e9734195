"""
Brand overview pipeline: check the company name, scrape, enrich, analyze,
check sufficiency, geolocate, assemble.

An insufficient verdict ends the run early with a result that carries the
reason and suggestions and no geolocation lookup. The whole run is bounded
by an overall deadline.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..exceptions import AnalysisFailedError, BrandOverviewError, ScrapeError
from ..models.analysis import (
    DATA_NOT_FOUND,
    BrandOverview,
    Insufficient,
    default_geolocation,
)
from ..models.company import CompanyProfile
from .analysis_service import AnalysisService
from .enrichment_service import EnrichmentService
from .scraper_service import ScraperService, empty_scrape
from .sufficiency import DataSufficiencyPolicy

logger = logging.getLogger(__name__)


def scrape_summary(scraped: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if scraped is None:
        return None
    meta = scraped.get("meta") or {}
    return {
        "url": scraped.get("url"),
        "title": meta.get("title"),
        "description": meta.get("description"),
        "structuredData": scraped.get("structuredData"),
    }


class BrandOverviewOrchestrator:
    """Sequences the services that produce one brand overview."""

    def __init__(
        self,
        scraper: ScraperService,
        enrichment: EnrichmentService,
        analysis: AnalysisService,
        policy: Optional[DataSufficiencyPolicy] = None,
        deadline_seconds: Optional[float] = None,
    ):
        self.scraper = scraper
        self.enrichment = enrichment
        self.analysis = analysis
        self.policy = policy or DataSufficiencyPolicy()
        self.deadline_seconds = deadline_seconds

    async def generate_brand_overview(self, company: CompanyProfile) -> BrandOverview:
        """
        Produce a brand overview for one company.

        Raises:
            AnalysisFailedError: the model failed on every retry
            BrandOverviewError: the overall deadline passed
        """
        if not self.deadline_seconds:
            return await self._generate(company)
        try:
            return await asyncio.wait_for(self._generate(company), timeout=self.deadline_seconds)
        except asyncio.TimeoutError as e:
            logger.error(f"Brand overview for {company.name} timed out after {self.deadline_seconds}s")
            raise BrandOverviewError(
                f"Brand overview generation timed out after {self.deadline_seconds:g} seconds"
            ) from e

    async def _generate(self, company: CompanyProfile) -> BrandOverview:
        logger.info(f"Generating brand overview for {company.name}")

        # Generic names are rejected before any outbound request
        verdict = self.policy.check_company(company)
        if isinstance(verdict, Insufficient):
            logger.info(f"Insufficient data for {company.name}: {verdict.reason}")
            return self._insufficient(company, verdict, {}, None)

        scraped = await self._scrape(company)
        enhanced_data = await self.enrichment.collect(company, scraped)
        analysis = await self.analysis.analyze_company(company, scraped, enhanced_data)

        verdict = self.policy.evaluate(company, analysis)
        if isinstance(verdict, Insufficient):
            return self._insufficient(company, verdict, enhanced_data, scraped)

        geolocation = await self._geolocate(company, scraped)

        logger.info(f"Brand overview generated for {company.name}")
        return BrandOverview(
            company=company,
            verdict=verdict,
            analysis=analysis,
            geolocation=geolocation,
            enhanced_data=enhanced_data,
            scraped_content=scrape_summary(scraped),
            generated_at=datetime.now().isoformat(),
        )

    def _insufficient(
        self,
        company: CompanyProfile,
        verdict: Insufficient,
        enhanced_data: Dict[str, Any],
        scraped: Optional[Dict[str, Any]],
    ) -> BrandOverview:
        return BrandOverview(
            company=company,
            verdict=verdict,
            analysis={
                "overview": DATA_NOT_FOUND,
                "message": verdict.message,
                "insufficientData": True,
            },
            geolocation=default_geolocation(),
            enhanced_data=enhanced_data,
            scraped_content=scrape_summary(scraped),
            generated_at=datetime.now().isoformat(),
        )

    async def _scrape(self, company: CompanyProfile) -> Dict[str, Any]:
        if not company.has_website:
            return empty_scrape(None)
        try:
            return await self.scraper.scrape_website(company.website)
        except ScrapeError as e:
            logger.warning(f"Continuing without website content for {company.name}: {e}")
            return empty_scrape(company.website)

    async def _geolocate(self, company: CompanyProfile, scraped: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return await self.analysis.get_geolocation_info(company, scraped)
        except AnalysisFailedError as e:
            logger.warning(f"Using default geolocation for {company.name}: {e}")
            return default_geolocation()
