"""
Multi-source enrichment.

Runs every configured source concurrently under a semaphore. A source that
raises or overruns its timeout is recorded with its empty value; it never
affects the other sources or the pipeline.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..models.company import CompanyProfile
from ..sources import EnrichmentSource, SourceContext, SourceResult

logger = logging.getLogger(__name__)


class EnrichmentService:
    """Best-effort gather over enrichment sources."""

    def __init__(self, sources: List[EnrichmentSource], context: SourceContext,
                 max_concurrent: int = 4, source_timeout: Optional[float] = None):
        self.sources = sources
        self.context = context
        self.source_timeout = source_timeout
        self._semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def collect(self, company: CompanyProfile,
                      scraped_content: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Collect enhanced data for a company.

        Returns a dict keyed by source name, plus ``website`` holding the
        scraped content passed in.
        """
        results = await asyncio.gather(*(self._run(source, company) for source in self.sources))

        enhanced: Dict[str, Any] = {"website": scraped_content}
        for result in results:
            enhanced[result.name] = result.data

        failed = [result.name for result in results if not result.ok]
        if failed:
            logger.warning(f"Enrichment sources failed for {company.name}: {', '.join(failed)}")
        logger.info(f"Enrichment for {company.name}: {len(results) - len(failed)}/{len(results)} sources ok")
        return enhanced

    async def _run(self, source: EnrichmentSource, company: CompanyProfile) -> SourceResult:
        async with self._semaphore:
            try:
                fetch = source.fetch(company, self.context)
                if self.source_timeout:
                    data = await asyncio.wait_for(fetch, timeout=self.source_timeout)
                else:
                    data = await fetch
                return SourceResult(name=source.name, data=data)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Enrichment source {source.name} failed: {e}")
                return SourceResult(name=source.name, data=source.empty(), ok=False, error=str(e))
