"""Enrichment sources consulted before the company analysis."""

from typing import List, Optional

from .base import EnrichmentSource, SourceContext, SourceResult
from .presence import (
    BusinessDirectorySource,
    FinancialDataSource,
    LegalDataSource,
    NewsSource,
    ReviewsSource,
    SocialMediaSource,
)
from .tech_stack import TechStackSource
from .traffic import TrafficEstimator, WebsiteTrafficSource


def default_sources(traffic_estimator: Optional[TrafficEstimator] = None) -> List[EnrichmentSource]:
    return [
        SocialMediaSource(),
        BusinessDirectorySource(),
        NewsSource(),
        FinancialDataSource(),
        LegalDataSource(),
        ReviewsSource(),
        TechStackSource(),
        WebsiteTrafficSource(estimator=traffic_estimator),
    ]


__all__ = [
    "EnrichmentSource",
    "SourceContext",
    "SourceResult",
    "default_sources",
]
