"""
Zoho OAuth and metadata endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ..services.crm_service import ZohoCRMService
from .dependencies import get_crm_service
from .responses import error_response

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/auth")
async def auth_url(crm: ZohoCRMService = Depends(get_crm_service)):
    """Authorization URL to grant the application CRM access"""
    return {
        "success": True,
        "authURL": crm.get_auth_url(),
        "message": "Use this URL to authorize the application",
    }


@router.get("/auth/callback")
async def auth_callback(code: Optional[str] = None, crm: ZohoCRMService = Depends(get_crm_service)):
    """OAuth redirect target: exchanges the code for tokens"""
    if not code:
        return error_response(400, "Authorization code is required")
    try:
        tokens = await crm.exchange_code_for_tokens(code)
    except Exception as e:
        logger.error(f"OAuth code exchange failed: {e}")
        return error_response(500, str(e))
    return {
        "success": True,
        "message": "Authentication successful",
        "tokens": {"access_token": tokens["access_token"], "expires_in": tokens["expires_in"]},
    }


@router.post("/auth/refresh")
async def refresh_token(crm: ZohoCRMService = Depends(get_crm_service)):
    try:
        tokens = await crm.refresh_access_token()
    except Exception as e:
        return error_response(500, str(e))
    return {
        "success": True,
        "message": "Token refreshed successfully",
        "tokens": {"access_token": tokens["access_token"], "expires_in": tokens["expires_in"]},
    }


@router.get("/auth/validate")
async def validate_token(crm: ZohoCRMService = Depends(get_crm_service)):
    return {"success": True, "isValid": await crm.validate_token()}


@router.get("/leads/metadata")
async def lead_metadata(crm: ZohoCRMService = Depends(get_crm_service)):
    """Lead field metadata, to check the field names the mapping writes"""
    return {"success": True, "metadata": await crm.get_lead_metadata()}
