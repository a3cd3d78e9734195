"""
Analysis, geolocation and verdict types shared across the pipeline.

Analysis and geolocation records stay plain dicts keyed by the camelCase
names the model is prompted to return; the constants below pin down the
expected keys and the sentinel strings downstream consumers rely on.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .company import CompanyProfile

# Sentinels reproduced exactly for CRM compatibility
DATA_NOT_FOUND = "DATA_NOT_FOUND_DUE_TO_INCORRECT_COMPANY_NAME_OR_WEBSITE_URL"
NOT_AVAILABLE = "Not available"
NOT_PUBLICLY_AVAILABLE = "Not publicly available"
NOT_SPECIFIED = "Not specified"
GEOGRAPHIC_INFO_NOT_AVAILABLE = "Geographic information not available"

ANALYSIS_COMPLETED = "Analysis completed"
ANALYSIS_COMPLETED_WITH_ISSUES = "Analysis completed with parsing issues"

INSUFFICIENT_DATA_MESSAGE = (
    "Please enter the correct company name and website URL "
    "to generate a comprehensive brand overview."
)

STANDARD_SUGGESTIONS = [
    "Please verify the company name is correct and complete",
    "Please provide a valid website URL for the company",
    'Ensure the company name is not too generic (e.g., "Tech Corp", "ABC Company")',
    "Check for any spelling errors in the company name",
]

ANALYSIS_FIELDS = [
    "overview",
    "mission",
    "products",
    "targetMarket",
    "differentiators",
    "brandPositioning",
    "companySize",
    "annualRevenue",
    "onlineRevenue",
    "aov",
    "orderVolume",
    "salesChannels",
    "geographicPresence",
    "decisionMakers",
    "recentNews",
    "marketingIndicators",
    "techStack",
    "marketingBudget",
    "websiteTraffic",
]

SEQUENCE_FIELDS = frozenset([
    "products",
    "differentiators",
    "salesChannels",
    "geographicPresence",
    "decisionMakers",
    "recentNews",
    "techStack",
])

MONETARY_FIELDS = frozenset(["annualRevenue", "onlineRevenue", "marketingBudget"])

GEOLOCATION_FIELDS = ["headquarters", "offices", "serviceAreas", "markets", "regions"]


def default_geolocation() -> Dict[str, Any]:
    return {
        "headquarters": NOT_SPECIFIED,
        "offices": [],
        "serviceAreas": [],
        "markets": [],
        "regions": [],
    }


@dataclass(frozen=True)
class Sufficient:
    """Enough signal to publish a generated overview."""

    @property
    def is_sufficient(self) -> bool:
        return True


@dataclass(frozen=True)
class Insufficient:
    """Not enough signal; carries why and what the user can fix."""
    reason: str
    suggestions: List[str] = field(default_factory=lambda: list(STANDARD_SUGGESTIONS))
    message: str = INSUFFICIENT_DATA_MESSAGE

    @property
    def is_sufficient(self) -> bool:
        return False


SufficiencyVerdict = Union[Sufficient, Insufficient]


@dataclass
class BrandOverview:
    """Terminal result of one orchestrator run."""
    company: CompanyProfile
    verdict: SufficiencyVerdict
    analysis: Dict[str, Any]
    geolocation: Dict[str, Any]
    enhanced_data: Dict[str, Any]
    scraped_content: Optional[Dict[str, Any]]
    generated_at: str

    @property
    def insufficient_data(self) -> bool:
        return isinstance(self.verdict, Insufficient)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "company": self.company.model_dump(),
            "analysis": self.analysis,
            "geolocation": self.geolocation,
            "enhancedData": self.enhanced_data,
            "scrapedContent": self.scraped_content,
            "generatedAt": self.generated_at,
        }
        if isinstance(self.verdict, Insufficient):
            result.update({
                "insufficientData": True,
                "reason": self.verdict.reason,
                "suggestions": list(self.verdict.suggestions),
                "message": self.verdict.message,
                "overview": DATA_NOT_FOUND,
            })
        return result

    def insufficient_summary(self) -> Dict[str, Any]:
        """Payload returned to API callers for an insufficient overview."""
        verdict = self.verdict
        return {
            "company": self.company.model_dump(),
            "reason": getattr(verdict, "reason", None),
            "suggestions": list(getattr(verdict, "suggestions", [])),
            "message": getattr(verdict, "message", None),
            "overview": DATA_NOT_FOUND,
        }
