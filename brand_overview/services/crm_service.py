"""
Zoho CRM client.

Handles OAuth (authorization URL, code exchange, refresh), company reads
and updates, and writing a brand overview onto a lead. The access token and
its expiry are the only shared mutable state and are replaced together.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from ..exceptions import (
    CRMError,
    InsufficientDataUploadError,
    TokenRefreshError,
    UploadValidationError,
)
from ..models.analysis import BrandOverview, Insufficient
from ..models.company import CompanyProfile
from .field_mapping import FieldMappingEngine, FieldMapping, validate_field_mappings
from .sufficiency import DataSufficiencyPolicy, has_meaningful_data

logger = logging.getLogger(__name__)

OAUTH_SCOPES = "ZohoCRM.modules.ALL,ZohoCRM.settings.ALL,ZohoCRM.org.READ"


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float


class ZohoCRMService:
    """Async Zoho CRM v8 client."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        redirect_uri: str = "",
        api_base_url: str = "https://www.zohoapis.in/crm/v8",
        auth_url: str = "https://accounts.zoho.in/oauth/v2",
        company_module: str = "Accounts",
        refresh_buffer_seconds: int = 300,
        mapping_engine: Optional[FieldMappingEngine] = None,
        policy: Optional[DataSufficiencyPolicy] = None,
        notifier=None,
    ):
        self.client = client
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.redirect_uri = redirect_uri
        self.api_base_url = api_base_url.rstrip("/")
        self.auth_url = auth_url.rstrip("/")
        self.company_module = company_module
        self.refresh_buffer_seconds = refresh_buffer_seconds
        self.mapping_engine = mapping_engine or FieldMappingEngine(notifier=notifier)
        self.policy = policy or DataSufficiencyPolicy()
        self.notifier = notifier
        self._token: Optional[AccessToken] = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @property
    def access_token(self) -> Optional[str]:
        return self._token.value if self._token else None

    def is_token_expired(self) -> bool:
        """True when there is no token or it expires within the refresh buffer."""
        if self._token is None:
            return True
        return time.time() > self._token.expires_at - self.refresh_buffer_seconds

    def get_auth_url(self) -> str:
        params = {
            "scope": OAUTH_SCOPES,
            "client_id": self.client_id,
            "response_type": "code",
            "access_type": "offline",
            "redirect_uri": self.redirect_uri,
        }
        return f"{self.auth_url}/auth?{urlencode(params)}"

    async def exchange_code_for_tokens(self, code: str) -> Dict[str, Any]:
        """Trade an authorization code for access and refresh tokens."""
        data = await self._token_request({
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code": code,
        }, "Failed to exchange authorization code")
        if data.get("refresh_token"):
            self.refresh_token = data["refresh_token"]
        return data

    async def refresh_access_token(self) -> Dict[str, Any]:
        """
        Refresh the access token.

        Raises:
            TokenRefreshError: Zoho refused or could not be reached
        """
        return await self._token_request({
            "refresh_token": self.refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "refresh_token",
        }, "Failed to refresh access token")

    async def _token_request(self, params: Dict[str, str], failure: str) -> Dict[str, Any]:
        try:
            response = await self.client.post(f"{self.auth_url}/token", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"{failure}: {e}")
            raise TokenRefreshError(failure) from e

        if not data.get("access_token"):
            logger.error(f"{failure}: {data.get('error', 'no access_token in response')}")
            raise TokenRefreshError(failure)

        expires_in = int(data.get("expires_in", 3600))
        self._token = AccessToken(data["access_token"], time.time() + expires_in)
        logger.info(f"Zoho access token obtained, expires in {expires_in}s")
        tokens = {"access_token": data["access_token"], "expires_in": expires_in}
        if data.get("refresh_token"):
            tokens["refresh_token"] = data["refresh_token"]
        return tokens

    async def get_auth_headers(self) -> Dict[str, str]:
        if self.is_token_expired():
            await self.refresh_access_token()
        if not self.access_token:
            raise TokenRefreshError("No access token available")
        return {
            "Authorization": f"Zoho-oauthtoken {self.access_token}",
            "Content-Type": "application/json",
        }

    async def validate_token(self) -> bool:
        try:
            await self._request("GET", "/org")
        except CRMError:
            return False
        return True

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = await self.get_auth_headers()
        try:
            response = await self.client.request(
                method, f"{self.api_base_url}{path}", headers=headers, **kwargs
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = self._error_detail(e.response)
            raise CRMError(f"Zoho CRM {method} {path} failed: {detail}") from e
        except httpx.HTTPError as e:
            raise CRMError(f"Zoho CRM {method} {path} failed: {e}") from e

        # 204 for empty searches and lists
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict):
            if body.get("message"):
                return str(body["message"])
            records = body.get("data")
            if isinstance(records, list) and records and isinstance(records[0], dict):
                return str(records[0].get("message", records[0]))
        return f"HTTP {response.status_code}"

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    async def get_company_with_website(self, company_id: str) -> Optional[CompanyProfile]:
        """Read one company record; None when Zoho has no such record."""
        body = await self._request("GET", f"/{self.company_module}/{company_id}")
        records = body.get("data") or []
        if not records:
            return None
        return CompanyProfile.from_crm_record(records[0])

    async def get_companies(self, page: int = 1, per_page: int = 10) -> Dict[str, Any]:
        return await self._request(
            "GET",
            f"/{self.company_module}",
            params={
                "page": page,
                "per_page": per_page,
                "fields": "Account_Name,Company_Name,Website,Industry,Description",
            },
        )

    async def search_companies(self, search_term: str, search_field: str = "Company_Name") -> Dict[str, Any]:
        criteria = f"({search_field}:equals:{search_term})"
        return await self._request(
            "GET", f"/{self.company_module}/search", params={"criteria": criteria}
        )

    async def update_company(self, company_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        record = {"id": company_id, **update_data}
        return await self._request(
            "PUT", f"/{self.company_module}/{company_id}", json={"data": [record]}
        )

    # ------------------------------------------------------------------
    # Leads
    # ------------------------------------------------------------------

    async def get_lead_metadata(self) -> Optional[Dict[str, Any]]:
        """Lead field metadata, or None if it cannot be fetched."""
        try:
            return await self._request("GET", "/settings/fields", params={"module": "Leads"})
        except CRMError as e:
            logger.error(f"Error getting lead metadata: {e}")
            return None

    def validate_brand_overview_data(self, brand_overview: Optional[BrandOverview]) -> None:
        """
        Refuse overviews that must never reach the CRM.

        Raises:
            InsufficientDataUploadError: the overview carries an Insufficient verdict
                or the analysis fails the sufficiency policy
            UploadValidationError: the overview or its analysis is missing
        """
        if brand_overview is None:
            raise UploadValidationError("Brand overview data is missing")

        if isinstance(brand_overview.verdict, Insufficient):
            raise InsufficientDataUploadError(brand_overview.verdict.reason)

        analysis = brand_overview.analysis
        if not analysis:
            raise UploadValidationError("Analysis data is missing or empty - cannot upload to CRM")
        if not has_meaningful_data(analysis):
            raise UploadValidationError("Analysis contains no meaningful data - cannot upload to CRM")

        verdict = self.policy.evaluate(brand_overview.company, analysis)
        if isinstance(verdict, Insufficient):
            raise InsufficientDataUploadError(verdict.reason)

        if not brand_overview.geolocation:
            logger.warning("Geolocation data is missing from brand overview")

    async def update_lead_with_brand_overview(self, lead_id: str,
                                              brand_overview: BrandOverview) -> Dict[str, Any]:
        """
        Write a brand overview onto a lead.

        Validation errors propagate unchanged before anything is written.
        Zoho request failures are reported to the notifier and raised as
        CRMError.
        """
        self.validate_brand_overview_data(brand_overview)

        field_mappings = await self.mapping_engine.map_to_external_schema(
            brand_overview.analysis, brand_overview.geolocation
        )
        validate_field_mappings(field_mappings)

        try:
            await self._warn_unknown_fields(field_mappings)
            result = await self._request(
                "PUT",
                f"/Leads/{lead_id}",
                json={
                    "data": [{"id": lead_id, **field_mappings}],
                    "skip_feature_execution": [{"name": "cadences"}],
                },
            )
        except CRMError as e:
            logger.error(f"Error updating lead {lead_id}: {e}")
            if self.notifier is not None:
                await self.notifier.send_error_notification(
                    e, {"leadId": lead_id, "step": "Zoho CRM Update Failed"}
                )
            raise CRMError(f"Failed to update lead: {e}") from e

        logger.info(f"Lead {lead_id} updated in Zoho CRM with {len(field_mappings)} fields")
        return result

    async def _warn_unknown_fields(self, field_mappings: FieldMapping) -> List[str]:
        metadata = await self.get_lead_metadata()
        if not metadata or not metadata.get("fields"):
            return []
        known = {field.get("api_name") for field in metadata["fields"]}
        unknown = [name for name in field_mappings if name not in known]
        if unknown:
            logger.warning(f"Fields missing in Zoho CRM: {', '.join(unknown)}")
        return unknown
