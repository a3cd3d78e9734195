"""
Main FastAPI application entry point.
Handles application initialization, middleware setup, and route registration.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import brand_overview, gemini, health, webhook, zoho
from .config import Settings, settings, validate_config
from .services.analysis_service import AnalysisService
from .services.crm_service import ZohoCRMService
from .services.enrichment_service import EnrichmentService
from .services.field_mapping import FieldMappingEngine
from .services.llm_service import GeminiProvider, LLMService
from .services.notification_service import SlackNotificationService
from .services.orchestrator import BrandOverviewOrchestrator
from .services.scraper_service import ScraperService
from .services.sufficiency import DataSufficiencyPolicy
from .sources import SourceContext, default_sources

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def build_services(app: FastAPI, config: Settings) -> None:
    """Create the process-scoped services and store them on app.state."""
    llm_client = httpx.AsyncClient(timeout=config.LLM_TIMEOUT_SECONDS)
    web_client = httpx.AsyncClient(timeout=config.SCRAPE_TIMEOUT_SECONDS)
    crm_client = httpx.AsyncClient(timeout=config.ZOHO_TIMEOUT_SECONDS)
    app.state.http_clients = [llm_client, web_client, crm_client]

    notifier = SlackNotificationService(config.SLACK_WEBHOOK_URL, web_client, config.ENVIRONMENT)
    policy = DataSufficiencyPolicy()

    llm_service = LLMService(
        GeminiProvider(config.GEMINI_API_KEY, config.GEMINI_API_BASE_URL, llm_client),
        models=config.gemini_models,
        min_response_chars=config.LLM_MIN_RESPONSE_CHARS,
        calls_per_minute=config.LLM_RATE_LIMIT_PER_MINUTE,
    )
    analysis_service = AnalysisService(
        llm_service,
        max_retries=config.ANALYSIS_MAX_RETRIES,
        retry_delay=config.ANALYSIS_RETRY_DELAY_SECONDS,
        geolocation_max_retries=config.GEOLOCATION_MAX_RETRIES,
        geolocation_retry_delay=config.GEOLOCATION_RETRY_DELAY_SECONDS,
    )
    scraper_service = ScraperService(
        web_client, timeout=config.SCRAPE_TIMEOUT_SECONDS, user_agent=config.USER_AGENT
    )
    enrichment_service = EnrichmentService(
        default_sources(traffic_estimator=analysis_service.estimate_traffic),
        SourceContext(
            client=web_client,
            timeout=config.SOURCE_TIMEOUT_SECONDS,
            headers={"User-Agent": config.USER_AGENT},
        ),
        max_concurrent=config.MAX_CONCURRENT_SOURCES,
        source_timeout=config.SOURCE_DEADLINE_SECONDS,
    )

    app.state.notifier = notifier
    app.state.llm_service = llm_service
    app.state.analysis_service = analysis_service
    app.state.scraper_service = scraper_service
    app.state.crm_service = ZohoCRMService(
        crm_client,
        client_id=config.ZOHO_CLIENT_ID,
        client_secret=config.ZOHO_CLIENT_SECRET,
        refresh_token=config.ZOHO_REFRESH_TOKEN,
        redirect_uri=config.ZOHO_REDIRECT_URI,
        api_base_url=config.ZOHO_API_BASE_URL,
        auth_url=config.ZOHO_AUTH_URL,
        company_module=config.ZOHO_COMPANY_MODULE,
        refresh_buffer_seconds=config.ZOHO_TOKEN_REFRESH_BUFFER_SECONDS,
        mapping_engine=FieldMappingEngine(notifier=notifier),
        policy=policy,
        notifier=notifier,
    )
    app.state.orchestrator = BrandOverviewOrchestrator(
        scraper_service,
        enrichment_service,
        analysis_service,
        policy=policy,
        deadline_seconds=config.REQUEST_DEADLINE_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.VERSION}")
    validate_config(settings)

    app.state.started_at = time.time()
    build_services(app, settings)

    # Log configuration
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Gemini models: {', '.join(settings.gemini_models)}")
    logger.info(f"Gemini API key configured: {'Yes' if settings.GEMINI_API_KEY else 'No'}")
    logger.info(f"Zoho credentials configured: {'Yes' if settings.ZOHO_REFRESH_TOKEN else 'No'}")
    logger.info(f"Slack notifications: {'Enabled' if settings.SLACK_WEBHOOK_URL else 'Disabled'}")
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    for client in app.state.http_clients:
        await client.aclose()
    logger.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Brand overview generation for Zoho CRM companies and leads",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# Add request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests"""
    start_time = time.time()

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"{request.method} {request.url.path} - {response.status_code} - {process_time:.4f}s")

    return response


# Register routers
app.include_router(health.router, tags=["health"])
app.include_router(zoho.router, prefix="/api/zoho", tags=["zoho"])
app.include_router(gemini.router, prefix="/api/gemini", tags=["gemini"])
app.include_router(brand_overview.router, prefix="/api/brand-overview", tags=["brand_overview"])
app.include_router(webhook.router, prefix="/api/webhook", tags=["webhook"])


# Error handlers
@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    """Custom 404 handler"""
    return JSONResponse(
        status_code=404,
        content={
            "error": "Route not found",
            "message": f"The requested route {request.url.path} does not exist",
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies use the standard error envelope"""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', []))}: {error.get('msg')}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"success": False, "error": details})


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    """Anything a route did not handle"""
    logger.error(f"Internal server error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
