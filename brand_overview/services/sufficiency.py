"""
Data sufficiency policy.

Decides whether the signal behind an analysis is strong enough to publish a
generated overview. The model is also prompted to self-report insufficiency;
this policy is the independent backstop applied before anything reaches the
CRM, and the CRM client re-applies it at write time.
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional

from ..models.analysis import (
    ANALYSIS_COMPLETED,
    ANALYSIS_COMPLETED_WITH_ISSUES,
    NOT_AVAILABLE,
    Insufficient,
    Sufficient,
    SufficiencyVerdict,
)
from ..models.company import CompanyProfile

logger = logging.getLogger(__name__)

# Placeholder names that never identify a real company
GENERIC_COMPANY_NAMES = [
    "tech corp",
    "abc company",
    "abc corp",
    "xyz company",
    "test company",
    "test corp",
    "sample company",
    "example company",
    "demo company",
    "company name",
    "my company",
    "your company",
]

MEANINGFUL_FIELDS = ["overview", "mission", "products", "targetMarket", "brandPositioning"]

UNAVAILABLE_VALUES = frozenset([
    NOT_AVAILABLE,
    "Unknown",
    ANALYSIS_COMPLETED,
    ANALYSIS_COMPLETED_WITH_ISSUES,
])

MIN_OVERVIEW_CHARS = 20


def is_generic_company_name(name: Optional[str]) -> bool:
    """Exact or prefix match against the placeholder-name denylist."""
    if not name:
        return False
    normalized = re.sub(r"\s+", " ", name.strip().lower())
    return any(
        normalized == generic or normalized.startswith(generic + " ")
        for generic in GENERIC_COMPANY_NAMES
    )


def is_meaningful(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    if isinstance(value, str):
        return bool(value.strip()) and value not in UNAVAILABLE_VALUES
    return False


def has_meaningful_data(analysis: Dict[str, Any], fields: Iterable[str] = MEANINGFUL_FIELDS) -> bool:
    return any(is_meaningful(analysis.get(name)) for name in fields)


class DataSufficiencyPolicy:
    """Produces a SufficiencyVerdict for a company and its analysis."""

    def check_company(self, company: CompanyProfile) -> SufficiencyVerdict:
        # A missing website is not enough on its own when the name is specific
        if is_generic_company_name(company.name):
            return Insufficient(
                reason=f'Company name "{company.name}" is too generic to identify a specific company'
            )
        return Sufficient()

    def check_analysis(self, analysis: Optional[Dict[str, Any]]) -> SufficiencyVerdict:
        if not analysis:
            return Insufficient(reason="Analysis data is missing or empty")

        if analysis.get("insufficientData") is True:
            kwargs = {}
            if analysis.get("suggestions"):
                kwargs["suggestions"] = list(analysis["suggestions"])
            return Insufficient(
                reason=analysis.get("reason") or "Insufficient data to generate brand overview",
                **kwargs,
            )

        if not has_meaningful_data(analysis):
            return Insufficient(reason="Analysis contains no meaningful data")

        overview = analysis.get("overview")
        if isinstance(overview, str) and len(overview) < MIN_OVERVIEW_CHARS:
            return Insufficient(reason="Overview is too short to be a meaningful brand overview")

        return Sufficient()

    def evaluate(self, company: Optional[CompanyProfile],
                 analysis: Optional[Dict[str, Any]]) -> SufficiencyVerdict:
        """Company checks first, then the analysis; the first failure wins."""
        if company is not None:
            verdict = self.check_company(company)
            if not verdict.is_sufficient:
                logger.info(f"Insufficient data for {company.name}: {verdict.reason}")
                return verdict

        verdict = self.check_analysis(analysis)
        if not verdict.is_sufficient:
            name = company.name if company is not None else "unknown company"
            logger.info(f"Insufficient data for {name}: {verdict.reason}")
        return verdict
