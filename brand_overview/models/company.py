"""
Pydantic models for company input and API request bodies.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CompanyProfile(BaseModel):
    """Company identity handed to the brand overview pipeline."""
    id: Optional[str] = None
    name: str
    website: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None

    class Config:
        frozen = True

    @property
    def has_website(self) -> bool:
        return bool(self.website) and self.website not in ("undefined", "No website available")

    @classmethod
    def from_crm_record(cls, record: Dict[str, Any]) -> "CompanyProfile":
        """Build a profile from a Zoho record (Accounts or Leads layout)."""
        name = (
            record.get("Company_Name")
            or record.get("Account_Name")
            or record.get("Company")
            or ""
        )
        return cls(
            id=str(record["id"]) if record.get("id") is not None else None,
            name=name,
            website=record.get("Website") or None,
            industry=record.get("Industry") or None,
            description=record.get("Description") or None,
        )


class CompanyDataRequest(BaseModel):
    """Body for endpoints that take raw company data"""
    companyData: Optional[CompanyProfile] = None
    scrapedContent: Optional[Dict[str, Any]] = None


class ScrapeRequest(BaseModel):
    url: Optional[str] = None


class BatchGenerateRequest(BaseModel):
    companyIds: Optional[List[str]] = None


class UpdateCompanyRequest(BaseModel):
    updateFields: Dict[str, Any] = Field(default_factory=dict)


class SearchGenerateRequest(BaseModel):
    searchTerm: Optional[str] = None
    searchField: str = "Company_Name"
