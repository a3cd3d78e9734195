"""
FastAPI dependency providers.

Services are built once in the application lifespan and stored on
``app.state``; routes receive them through these providers so tests can
swap in doubles with ``app.dependency_overrides``.
"""

from fastapi import Request

from ..services.analysis_service import AnalysisService
from ..services.crm_service import ZohoCRMService
from ..services.notification_service import SlackNotificationService
from ..services.orchestrator import BrandOverviewOrchestrator
from ..services.scraper_service import ScraperService


def get_orchestrator(request: Request) -> BrandOverviewOrchestrator:
    return request.app.state.orchestrator


def get_crm_service(request: Request) -> ZohoCRMService:
    return request.app.state.crm_service


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def get_scraper_service(request: Request) -> ScraperService:
    return request.app.state.scraper_service


def get_notifier(request: Request) -> SlackNotificationService:
    return request.app.state.notifier
