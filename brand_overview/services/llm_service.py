"""
LLM Service with model fallback and usage tracking.

This service wraps the Gemini generateContent REST API behind a provider
interface and adds an ordered fallback chain across model variants, a
response-quality gate, per-minute rate limiting and token/cost metrics.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM provider."""
    content: str
    tokens_used: int
    cost: float
    provider: str
    model: str
    all_models_failed: bool = False


@dataclass
class GenerationMetrics:
    """Metrics for content generation."""
    total_tokens: int
    total_cost: float
    api_calls: int
    failed_calls: int
    fallbacks_used: int
    average_response_time: float


class LLMProviderInterface(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: str,
        temperature: float = 0.4,
    ) -> LLMResponse:
        """Generate content using the LLM."""
        pass

    @abstractmethod
    def calculate_cost(self, tokens: int, model: str) -> float:
        """Calculate cost for token usage."""
        pass


class GeminiProvider(LLMProviderInterface):
    """Google Gemini API provider."""

    # Token costs per 1K tokens
    MODEL_COSTS = {
        "gemini-2.5-pro": {"input": 0.00125, "output": 0.01},
        "gemini-2.5-flash": {"input": 0.0003, "output": 0.0025},
        "gemini-2.5-flash-lite": {"input": 0.0001, "output": 0.0004},
    }

    def __init__(self, api_key: str, base_url: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = client

    async def generate(
        self,
        prompt: str,
        model: str,
        temperature: float = 0.4,
    ) -> LLMResponse:
        """Generate content using the Gemini API."""
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature},
        }

        response = await self.client.post(
            f"{self.base_url}/models/{model}:generateContent",
            params={"key": self.api_key},
            json=payload,
        )
        response.raise_for_status()
        data = response.json()

        candidates = data.get("candidates") or []
        parts = candidates[0].get("content", {}).get("parts", []) if candidates else []
        content = "".join(part.get("text", "") for part in parts)
        tokens_used = int(data.get("usageMetadata", {}).get("totalTokenCount", 0))

        return LLMResponse(
            content=content,
            tokens_used=tokens_used,
            cost=self.calculate_cost(tokens_used, model),
            provider="gemini",
            model=model,
        )

    def calculate_cost(self, tokens: int, model: str) -> float:
        """Calculate cost for Gemini token usage."""
        costs = self.MODEL_COSTS.get(model, self.MODEL_COSTS["gemini-2.5-flash"])
        # Estimate 75% input, 25% output tokens
        input_tokens = int(tokens * 0.75)
        output_tokens = tokens - input_tokens

        return (input_tokens * costs["input"] / 1000) + (output_tokens * costs["output"] / 1000)


class RateLimiter:
    """Rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 50):
        self.calls_per_minute = calls_per_minute
        self.calls: List[float] = []

    async def acquire(self):
        """Wait if necessary to respect rate limits."""
        now = time.time()

        # Remove calls older than 1 minute
        self.calls = [call_time for call_time in self.calls if now - call_time < 60]

        if len(self.calls) >= self.calls_per_minute:
            oldest_call = min(self.calls)
            wait_time = 60 - (now - oldest_call)
            if wait_time > 0:
                await asyncio.sleep(wait_time)

        self.calls.append(time.time())


ALL_MODELS_FAILED_RESPONSE = {
    "insufficientData": True,
    "reason": "All AI models failed to generate analysis - technical issue",
    "suggestions": [
        "Please try again later",
        "Check if the company name is correct",
        "Ensure the company name is not too generic",
    ],
    "overview": "TECHNICAL_ERROR_ALL_MODELS_FAILED",
}


class LLMService:
    """Ordered model fallback over a single provider."""

    def __init__(
        self,
        provider: LLMProviderInterface,
        models: List[str],
        min_response_chars: int = 50,
        calls_per_minute: int = 50,
    ):
        if not models:
            raise ValueError("At least one model must be configured")
        self.provider = provider
        self.models = list(models)
        self.min_response_chars = min_response_chars
        self.rate_limiter = RateLimiter(calls_per_minute=calls_per_minute)
        self.metrics = GenerationMetrics(0, 0.0, 0, 0, 0, 0.0)
        self._response_times: List[float] = []

    async def generate(self, prompt: str, temperature: float = 0.4,
                       min_response_chars: Optional[int] = None) -> LLMResponse:
        """
        Try each model in order and return the first usable response.

        Empty or very short responses move on to the next model. An exception
        from the last model propagates so callers can retry; if every model
        answered with unusable text a synthesized insufficient-data JSON is
        returned with `all_models_failed` set. Prompts expecting a short
        answer pass a smaller `min_response_chars`.
        """
        min_chars = self.min_response_chars if min_response_chars is None else min_response_chars
        for index, model in enumerate(self.models):
            is_last = index == len(self.models) - 1
            await self.rate_limiter.acquire()
            start_time = time.time()

            try:
                response = await self.provider.generate(prompt, model, temperature)
            except Exception as e:
                self.metrics.failed_calls += 1
                logger.warning(f"Model {model} failed: {e}")
                if is_last:
                    raise
                self.metrics.fallbacks_used += 1
                continue

            self._record(response, time.time() - start_time)

            text = response.content.strip()
            if len(text) < max(min_chars, 1):
                logger.warning(f"Model {model} returned a low-quality response ({len(text)} chars)")
                if not is_last:
                    self.metrics.fallbacks_used += 1
                continue

            logger.debug(f"Model {model} answered with {len(text)} chars")
            return response

        logger.error("All models returned unusable responses")
        return LLMResponse(
            content=json.dumps(ALL_MODELS_FAILED_RESPONSE),
            tokens_used=0,
            cost=0.0,
            provider="fallback",
            model="fallback",
            all_models_failed=True,
        )

    def _record(self, response: LLMResponse, elapsed: float) -> None:
        self.metrics.total_tokens += response.tokens_used
        self.metrics.total_cost += response.cost
        self.metrics.api_calls += 1
        self._response_times.append(elapsed)
        self.metrics.average_response_time = sum(self._response_times) / len(self._response_times)

    def get_metrics(self) -> GenerationMetrics:
        """Get current generation metrics."""
        return self.metrics

    def reset_metrics(self):
        """Reset generation metrics."""
        self.metrics = GenerationMetrics(0, 0.0, 0, 0, 0, 0.0)
        self._response_times.clear()

    def metrics_dict(self) -> Dict[str, float]:
        m = self.metrics
        return {
            "total_tokens": m.total_tokens,
            "total_cost": round(m.total_cost, 6),
            "api_calls": m.api_calls,
            "failed_calls": m.failed_calls,
            "fallbacks_used": m.fallbacks_used,
            "average_response_time": round(m.average_response_time, 4),
        }
