"""
Response envelopes shared by the routers.

Success: ``{success: true, data}``. Failure: ``{success: false, error}``.
Insufficient data: ``{success: true, insufficientData: true, data: {...}}``.
"""

from typing import Any, Dict

from fastapi.responses import JSONResponse

from ..models.analysis import BrandOverview


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def overview_response(overview: BrandOverview) -> Dict[str, Any]:
    if overview.insufficient_data:
        return {
            "success": True,
            "insufficientData": True,
            "data": overview.insufficient_summary(),
        }
    return {"success": True, "data": overview.to_dict()}
