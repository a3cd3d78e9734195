"""
Company analysis and geolocation through the language model.

Each call builds a prompt, asks the LLMService (which already falls back
across models), and runs the text through the ResponseExtractor. Upstream
exceptions are retried with exponential backoff; malformed output is never
retried because the extractor always recovers something.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from ..exceptions import AnalysisFailedError
from ..models.analysis import NOT_AVAILABLE
from ..models.company import CompanyProfile
from ..prompts import BrandOverviewPrompts
from .llm_service import LLMService
from .normalizer import AnalysisNormalizer
from .response_extractor import ResponseExtractor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalysisService:
    """Turns company data into analysis and geolocation records."""

    def __init__(
        self,
        llm_service: LLMService,
        extractor: Optional[ResponseExtractor] = None,
        normalizer: Optional[AnalysisNormalizer] = None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        geolocation_max_retries: int = 5,
        geolocation_retry_delay: float = 3.0,
    ):
        self.llm_service = llm_service
        self.normalizer = normalizer or AnalysisNormalizer()
        self.extractor = extractor or ResponseExtractor(self.normalizer)
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.geolocation_max_retries = geolocation_max_retries
        self.geolocation_retry_delay = geolocation_retry_delay

    async def analyze_company(
        self,
        company: CompanyProfile,
        scraped_content: Optional[Dict[str, Any]] = None,
        enhanced_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a company.

        Returns either a complete analysis record or an insufficient-data
        record (``insufficientData: True``); the latter is left unnormalized
        so it never looks like real data.

        Raises:
            AnalysisFailedError: every attempt raised upstream.
        """
        prompt = BrandOverviewPrompts.analysis_prompt(
            company, (scraped_content or {}).get("text"), enhanced_data
        )

        async def attempt() -> Dict[str, Any]:
            response = await self.llm_service.generate(prompt)
            if response.all_models_failed:
                logger.warning(f"All models returned unusable output for {company.name}")

            result = self.extractor.extract(response.content)
            logger.info(
                f"Analysis for {company.name} from {response.model} "
                f"extracted via {result.method.value}"
            )
            if result.insufficient_data:
                return result.data
            if not result.parsed:
                logger.warning(f"Analysis for {company.name} was not valid JSON, keeping recovered text")
            return self.normalizer.normalize(result.data)

        return await self._with_retries(
            attempt,
            label=f"analysis of {company.name}",
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            failure_message="Failed to analyze company with the language model after multiple attempts",
        )

    async def get_geolocation_info(
        self,
        company: CompanyProfile,
        scraped_content: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Extract headquarters, offices, service areas, markets and regions.

        Unparseable output degrades to the default record carrying the raw
        text; only repeated upstream failures raise AnalysisFailedError.
        """
        prompt = BrandOverviewPrompts.geolocation_prompt(
            company, (scraped_content or {}).get("text")
        )

        async def attempt() -> Dict[str, Any]:
            response = await self.llm_service.generate(prompt)
            return self.extractor.extract_geolocation(response.content)

        return await self._with_retries(
            attempt,
            label=f"geolocation of {company.name}",
            max_retries=self.geolocation_max_retries,
            retry_delay=self.geolocation_retry_delay,
            failure_message="Failed to extract geolocation information after multiple attempts",
        )

    async def estimate_traffic(self, domain: str) -> str:
        """Single-shot traffic bucket estimate; "Not available" on any failure."""
        try:
            response = await self.llm_service.generate(
                BrandOverviewPrompts.traffic_estimate_prompt(domain),
                min_response_chars=1,
            )
        except Exception as e:
            logger.error(f"Error estimating traffic for {domain}: {e}")
            return NOT_AVAILABLE
        if response.all_models_failed:
            return NOT_AVAILABLE
        return response.content.strip() or NOT_AVAILABLE

    async def _with_retries(
        self,
        operation: Callable[[], Awaitable[T]],
        label: str,
        max_retries: int,
        retry_delay: float,
        failure_message: str,
    ) -> T:
        last_error: Optional[Exception] = None

        for attempt in range(1, max_retries + 1):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                logger.warning(f"Attempt {attempt}/{max_retries} failed for {label}: {e}")

                if attempt < max_retries:
                    # Exponential backoff
                    await asyncio.sleep(retry_delay * (2 ** (attempt - 1)))

        logger.error(f"All retry attempts failed for {label}")
        raise AnalysisFailedError(failure_message) from last_error
