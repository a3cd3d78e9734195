"""Data models for the brand overview service."""

from .analysis import (
    BrandOverview,
    Insufficient,
    Sufficient,
    SufficiencyVerdict,
)
from .company import CompanyProfile

__all__ = [
    "BrandOverview", "CompanyProfile", "Insufficient", "Sufficient", "SufficiencyVerdict"
]
