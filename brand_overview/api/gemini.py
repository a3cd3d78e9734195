"""
Direct access to the individual pipeline steps: scrape, analyze,
geolocate, and the complete overview for ad-hoc company data.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..exceptions import ScrapeError
from ..models.company import CompanyDataRequest, CompanyProfile, ScrapeRequest
from ..services.analysis_service import AnalysisService
from ..services.orchestrator import BrandOverviewOrchestrator
from ..services.scraper_service import ScraperService
from ..validation import validate_company_data
from .dependencies import get_analysis_service, get_orchestrator, get_scraper_service
from .responses import error_response, overview_response

logger = logging.getLogger(__name__)
router = APIRouter()


def check_company(request: CompanyDataRequest) -> Optional[JSONResponse]:
    """Error response for a missing or invalid company, None when it is usable."""
    if request.companyData is None:
        return error_response(400, "Company data is required")
    try:
        validate_company_data(request.companyData)
    except ValueError as e:
        return error_response(400, str(e))
    return None


def scraped_or_empty(request: CompanyDataRequest) -> dict:
    return request.scrapedContent or {"text": ""}


@router.post("/scrape")
async def scrape(request: ScrapeRequest, scraper: ScraperService = Depends(get_scraper_service)):
    """Scrape one website."""
    if not request.url:
        return error_response(400, "URL is required")
    try:
        return {"success": True, "data": await scraper.scrape_website(request.url)}
    except ScrapeError as e:
        return error_response(500, str(e))


@router.post("/analyze")
async def analyze(request: CompanyDataRequest,
                  analysis: AnalysisService = Depends(get_analysis_service)):
    """Run the company analysis on caller-supplied data."""
    invalid = check_company(request)
    if invalid is not None:
        return invalid
    try:
        result = await analysis.analyze_company(request.companyData, scraped_or_empty(request))
        return {"success": True, "data": result}
    except Exception as e:
        logger.error(f"Error analyzing {request.companyData.name}: {e}")
        return error_response(500, str(e))


@router.post("/geolocation")
async def geolocation(request: CompanyDataRequest,
                      analysis: AnalysisService = Depends(get_analysis_service)):
    """Extract geolocation for caller-supplied data."""
    invalid = check_company(request)
    if invalid is not None:
        return invalid
    try:
        result = await analysis.get_geolocation_info(request.companyData, scraped_or_empty(request))
        return {"success": True, "data": result}
    except Exception as e:
        logger.error(f"Error extracting geolocation for {request.companyData.name}: {e}")
        return error_response(500, str(e))


@router.post("/brand-overview")
async def brand_overview(request: CompanyDataRequest,
                         orchestrator: BrandOverviewOrchestrator = Depends(get_orchestrator)):
    """Generate a complete brand overview without touching the CRM."""
    invalid = check_company(request)
    if invalid is not None:
        return invalid
    company: CompanyProfile = request.companyData
    try:
        overview = await orchestrator.generate_brand_overview(company)
        return overview_response(overview)
    except Exception as e:
        logger.error(f"Error generating brand overview for {company.name}: {e}")
        return error_response(500, str(e))
