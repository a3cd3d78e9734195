"""
Brand overview endpoints for companies stored in Zoho CRM.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from ..models.analysis import BrandOverview
from ..models.company import (
    BatchGenerateRequest,
    CompanyProfile,
    SearchGenerateRequest,
    UpdateCompanyRequest,
)
from ..services.crm_service import ZohoCRMService
from ..services.orchestrator import BrandOverviewOrchestrator
from .dependencies import get_crm_service, get_orchestrator
from .responses import error_response, overview_response

logger = logging.getLogger(__name__)
router = APIRouter()


def batch_entry(overview: BrandOverview, **identity: Any) -> Dict[str, Any]:
    """Insufficient overviews are summarized; sufficient ones are returned in full."""
    if overview.insufficient_data:
        return {**identity, "insufficientData": True, **overview.insufficient_summary()}
    return overview.to_dict()


@router.post("/generate/{company_id}")
async def generate_brand_overview(
    company_id: str,
    crm: ZohoCRMService = Depends(get_crm_service),
    orchestrator: BrandOverviewOrchestrator = Depends(get_orchestrator),
):
    """Generate a brand overview for one CRM company."""
    try:
        company = await crm.get_company_with_website(company_id)
        if company is None:
            return error_response(404, "Company not found")

        overview = await orchestrator.generate_brand_overview(company)
        return overview_response(overview)
    except Exception as e:
        logger.error(f"Error generating brand overview for {company_id}: {e}")
        return error_response(500, str(e))


@router.post("/generate-batch")
async def generate_batch(
    request: BatchGenerateRequest,
    crm: ZohoCRMService = Depends(get_crm_service),
    orchestrator: BrandOverviewOrchestrator = Depends(get_orchestrator),
):
    """
    Generate brand overviews for several companies, one after another.

    A failure for one company is recorded in ``errors`` and does not stop
    the batch.
    """
    if request.companyIds is None:
        return error_response(400, "Company IDs array is required")

    results: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []

    for company_id in request.companyIds:
        try:
            company = await crm.get_company_with_website(company_id)
            if company is None:
                errors.append({"companyId": company_id, "error": "Company not found"})
                continue
            overview = await orchestrator.generate_brand_overview(company)
            results.append(batch_entry(overview, companyId=company_id))
        except Exception as e:
            logger.error(f"Batch generation failed for {company_id}: {e}")
            errors.append({"companyId": company_id, "error": str(e)})

    return {
        "success": True,
        "data": {
            "results": results,
            "errors": errors,
            "totalProcessed": len(request.companyIds),
            "successful": len(results),
            "failed": len(errors),
        },
    }


@router.post("/update/{company_id}")
async def update_company_with_overview(
    company_id: str,
    request: UpdateCompanyRequest,
    crm: ZohoCRMService = Depends(get_crm_service),
    orchestrator: BrandOverviewOrchestrator = Depends(get_orchestrator),
):
    """Generate an overview and write the caller's update fields to the company."""
    try:
        company = await crm.get_company_with_website(company_id)
        if company is None:
            return error_response(404, "Company not found")

        overview = await orchestrator.generate_brand_overview(company)
        if overview.insufficient_data:
            logger.info(f"Company {company_id} not updated, insufficient data")
            return overview_response(overview)

        update_result = await crm.update_company(company_id, request.updateFields)

        return {
            "success": True,
            "data": {
                "brandOverview": overview.to_dict(),
                "updateResult": update_result,
            },
        }
    except Exception as e:
        logger.error(f"Error updating company {company_id} with brand overview: {e}")
        return error_response(500, str(e))


@router.get("/companies-with-websites")
async def companies_with_websites(
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=200),
    crm: ZohoCRMService = Depends(get_crm_service),
):
    """List one page of CRM companies that have a website."""
    try:
        companies = await crm.get_companies(page=page, per_page=per_page)
        with_websites = [
            record for record in companies.get("data") or []
            if isinstance(record.get("Website"), str) and record["Website"].strip()
        ]
        return {
            "success": True,
            "data": {
                "companies": with_websites,
                "total": len(with_websites),
                "page": page,
                "per_page": per_page,
            },
        }
    except Exception as e:
        logger.error(f"Error getting companies with websites: {e}")
        return error_response(500, str(e))


@router.post("/search-and-generate")
async def search_and_generate(
    request: SearchGenerateRequest,
    crm: ZohoCRMService = Depends(get_crm_service),
    orchestrator: BrandOverviewOrchestrator = Depends(get_orchestrator),
):
    """Search CRM companies and generate an overview for each match."""
    if not request.searchTerm:
        return error_response(400, "Search term is required")

    try:
        search_results = await crm.search_companies(request.searchTerm, request.searchField)
    except Exception as e:
        logger.error(f"Error searching companies for {request.searchTerm!r}: {e}")
        return error_response(500, str(e))

    records = search_results.get("data") or []
    if not records:
        return {
            "success": True,
            "data": {
                "companies": [],
                "brandOverviews": [],
                "message": "No companies found matching the search criteria",
            },
        }

    overviews: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []

    for record in records:
        company = CompanyProfile.from_crm_record(record)
        try:
            overview = await orchestrator.generate_brand_overview(company)
            overviews.append(batch_entry(overview, companyId=company.id, companyName=company.name))
        except Exception as e:
            logger.error(f"Search generation failed for {company.name}: {e}")
            errors.append({"companyId": company.id, "companyName": company.name, "error": str(e)})

    return {
        "success": True,
        "data": {
            "companies": records,
            "brandOverviews": overviews,
            "errors": errors,
            "totalFound": len(records),
            "successful": len(overviews),
            "failed": len(errors),
        },
    }
