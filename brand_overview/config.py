"""
Application configuration using Pydantic settings.
Loads from environment variables and .env file.
"""

import logging
from typing import List

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Brand Overview Service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    PORT: int = 3000

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    # Ordered fallback chain, primary model first
    GEMINI_MODELS: str = "gemini-2.5-pro,gemini-2.5-flash,gemini-2.5-flash-lite"

    # LLM Service Configuration
    LLM_TIMEOUT_SECONDS: float = 120.0
    LLM_RATE_LIMIT_PER_MINUTE: int = 50
    LLM_MIN_RESPONSE_CHARS: int = 50

    # Retry budgets
    ANALYSIS_MAX_RETRIES: int = 3
    ANALYSIS_RETRY_DELAY_SECONDS: float = 2.0
    GEOLOCATION_MAX_RETRIES: int = 5
    GEOLOCATION_RETRY_DELAY_SECONDS: float = 3.0

    # Zoho CRM
    ZOHO_CLIENT_ID: str = ""
    ZOHO_CLIENT_SECRET: str = ""
    ZOHO_REFRESH_TOKEN: str = ""
    ZOHO_REDIRECT_URI: str = ""
    ZOHO_API_BASE_URL: str = "https://www.zohoapis.in/crm/v8"
    ZOHO_AUTH_URL: str = "https://accounts.zoho.in/oauth/v2"
    ZOHO_COMPANY_MODULE: str = "Accounts"
    ZOHO_TOKEN_REFRESH_BUFFER_SECONDS: int = 300
    ZOHO_TIMEOUT_SECONDS: float = 30.0

    # Slack
    SLACK_WEBHOOK_URL: str = ""

    # Scraping and enrichment
    SCRAPE_TIMEOUT_SECONDS: float = 10.0
    SOURCE_TIMEOUT_SECONDS: float = 5.0
    # Upper bound for one source, which may issue several requests
    SOURCE_DEADLINE_SECONDS: float = 60.0
    MAX_CONCURRENT_SOURCES: int = 4
    USER_AGENT: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # Overall budget for one brand overview
    REQUEST_DEADLINE_SECONDS: float = 600.0

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra fields from .env

    @property
    def gemini_models(self) -> List[str]:
        return [m.strip() for m in self.GEMINI_MODELS.split(",") if m.strip()]

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


REQUIRED_SETTINGS = [
    "ZOHO_CLIENT_ID",
    "ZOHO_CLIENT_SECRET",
    "ZOHO_REFRESH_TOKEN",
    "GEMINI_API_KEY",
]


def validate_config(config: Settings) -> List[str]:
    """
    Return the names of required settings that are empty.

    Outside development a missing key is an error; in development it is
    only logged so the server can start for local work.
    """
    missing = [name for name in REQUIRED_SETTINGS if not getattr(config, name, None)]
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if config.ENVIRONMENT == "development":
            logger.warning(f"Configuration warning: {message}")
        else:
            raise RuntimeError(message)
    return missing


settings = Settings()
