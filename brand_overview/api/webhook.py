"""
Webhook receiver for Zoho CRM lead creation.

Zoho posts form data whose key names depend on how the workflow was set up,
so several aliases are accepted for each value. A lead with a company name
gets a brand overview generated and written back onto it.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from fastapi import APIRouter, Depends, Request

from ..exceptions import AnalysisFailedError
from ..models.company import CompanyProfile
from ..services.crm_service import ZohoCRMService
from ..services.notification_service import SlackNotificationService
from ..services.orchestrator import BrandOverviewOrchestrator
from ..services.scraper_service import ScraperService
from .dependencies import get_crm_service, get_notifier, get_orchestrator, get_scraper_service
from .responses import error_response

logger = logging.getLogger(__name__)
router = APIRouter()

LEAD_ID_KEYS = ["leadId", "id", "lead_id", "resource_id", "Lead_ID"]
COMPANY_KEYS = ["company", "Company", "company_name", "Company_Name"]
WEBSITE_KEYS = ["website", "Website", "website_url", "Website_URL"]


def first_value(payload: Mapping[str, Any], keys) -> Optional[str]:
    for key in keys:
        value = payload.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


async def read_payload(request: Request) -> Dict[str, Any]:
    """JSON body or form fields, depending on the content type."""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        body = await request.json()
        return body if isinstance(body, dict) else {}
    form = await request.form()
    return dict(form)


@router.post("/lead-created")
async def lead_created(
    request: Request,
    orchestrator: BrandOverviewOrchestrator = Depends(get_orchestrator),
    crm: ZohoCRMService = Depends(get_crm_service),
    scraper: ScraperService = Depends(get_scraper_service),
    notifier: SlackNotificationService = Depends(get_notifier),
):
    """Generate a brand overview for a new lead and write it to the CRM."""
    try:
        payload = await read_payload(request)
    except Exception as e:
        logger.error(f"Unreadable webhook payload: {e}")
        return error_response(400, "Invalid webhook payload")

    lead_id = first_value(payload, LEAD_ID_KEYS)
    company_name = first_value(payload, COMPANY_KEYS)
    website = first_value(payload, WEBSITE_KEYS)
    received_at = datetime.now().isoformat()

    logger.info(f"Webhook received: lead {lead_id} for {company_name}")

    if not company_name:
        logger.info("Missing company name, skipping brand overview generation")
        return {
            "success": True,
            "message": "Webhook received successfully (no brand overview - missing data)",
            "data": {
                "receivedAt": received_at,
                "leadId": lead_id,
                "company": company_name,
                "website": website,
                "brandOverview": None,
            },
        }

    if not lead_id:
        return error_response(400, "Lead ID is required")

    if not website:
        website = await scraper.find_company_website(company_name)

    context = {"leadId": lead_id, "company": company_name, "website": website}

    try:
        overview = await orchestrator.generate_brand_overview(
            CompanyProfile(id=lead_id, name=company_name, website=website)
        )
    except AnalysisFailedError as e:
        logger.error(f"Brand overview generation failed for lead {lead_id}: {e}")
        await notifier.send_error_notification(e, {**context, "step": "Gemini AI Analysis Failed"})
        return error_response(500, f"Failed to generate brand overview: {e}")
    except Exception as e:
        logger.error(f"Brand overview generation failed for lead {lead_id}: {e}")
        return error_response(500, f"Failed to generate brand overview: {e}")

    if overview.insufficient_data:
        reason = overview.verdict.reason
        logger.info(f"Lead {lead_id} not updated, insufficient data: {reason}")
        await notifier.send_error_notification(
            f"insufficient data: {reason}", {**context, "step": "Insufficient Data Detected"}
        )
        return {
            "success": True,
            "insufficientData": True,
            "message": "Lead processed, insufficient data - CRM not updated",
            "data": {
                "receivedAt": received_at,
                "leadId": lead_id,
                "website": website,
                **overview.insufficient_summary(),
            },
        }

    try:
        update_result = await crm.update_lead_with_brand_overview(lead_id, overview)
    except Exception as e:
        logger.error(f"Failed to update lead {lead_id}: {e}")
        return error_response(500, str(e))

    return {
        "success": True,
        "message": "Lead processed, brand overview generated and updated in Zoho CRM",
        "data": {
            "receivedAt": received_at,
            "leadId": lead_id,
            "company": company_name,
            "website": website,
            "brandOverview": {
                "analysis": overview.analysis,
                "geolocation": overview.geolocation,
                "scrapedContent": overview.scraped_content,
            },
            "zohoUpdate": update_result,
        },
    }


@router.get("/health")
async def webhook_health():
    return {
        "success": True,
        "message": "Webhook endpoint is healthy",
        "timestamp": datetime.now().isoformat(),
    }
