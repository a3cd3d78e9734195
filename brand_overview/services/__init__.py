"""
Services for the brand overview pipeline.
"""

from .analysis_service import AnalysisService
from .crm_service import ZohoCRMService
from .enrichment_service import EnrichmentService
from .field_mapping import FieldMappingEngine
from .llm_service import GeminiProvider, LLMService
from .normalizer import AnalysisNormalizer
from .notification_service import SlackNotificationService
from .orchestrator import BrandOverviewOrchestrator
from .response_extractor import ResponseExtractor
from .scraper_service import ScraperService
from .sufficiency import DataSufficiencyPolicy

__all__ = [
    'AnalysisNormalizer', 'AnalysisService', 'BrandOverviewOrchestrator',
    'DataSufficiencyPolicy', 'EnrichmentService', 'FieldMappingEngine',
    'GeminiProvider', 'LLMService', 'ResponseExtractor', 'ScraperService',
    'SlackNotificationService', 'ZohoCRMService',
]
