"""
Recovery of structured JSON from free-form language model output.

Models wrap JSON in markdown fences, prepend prose, truncate, or answer in
plain text. The extractor walks a ladder of increasingly lenient strategies
and always returns an analysis-shaped dict, tagged with the strategy that
produced it:

1. strip fences and parse the whole text
2. regex candidates, most specific first (fenced json, any fence, bare
   object, bare array)
3. insufficient-data phrases in the text
4. degraded record built from the first meaningful lines of long text
5. minimal record built from the first 500 characters
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Pattern

from ..models.analysis import (
    ANALYSIS_COMPLETED,
    ANALYSIS_COMPLETED_WITH_ISSUES,
    DATA_NOT_FOUND,
    INSUFFICIENT_DATA_MESSAGE,
    STANDARD_SUGGESTIONS,
    default_geolocation,
)
from .normalizer import AnalysisNormalizer

logger = logging.getLogger(__name__)


class ExtractionMethod(Enum):
    """How an analysis dict was obtained from raw text."""
    DIRECT = "direct"
    PATTERN = "pattern"
    INSUFFICIENT_INDICATOR = "insufficient_indicator"
    DEGRADED_TEXT = "degraded_text"
    MINIMAL_TEXT = "minimal_text"


@dataclass
class ExtractionResult:
    data: Dict[str, Any]
    method: ExtractionMethod

    @property
    def parsed(self) -> bool:
        return self.method in (ExtractionMethod.DIRECT, ExtractionMethod.PATTERN)

    @property
    def insufficient_data(self) -> bool:
        return self.data.get("insufficientData") is True


LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
TRAILING_FENCE = re.compile(r"\s*```\s*$")

CANDIDATE_PATTERNS: List[Pattern] = [
    re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE),
    re.compile(r"```[a-zA-Z]*\s*([\s\S]*?)\s*```"),
    re.compile(r"\{[\s\S]*\}"),
    re.compile(r"\[[\s\S]*\]"),
]

INSUFFICIENT_DATA_INDICATORS = [
    "insufficient data",
    "not enough information",
    "no data found",
    "company not found",
    "website not found",
    "generic company name",
    "misspelled",
    "incorrect company",
    "no website available",
]

DEGRADED_TEXT_THRESHOLD = 200
OVERVIEW_MAX_CHARS = 500


def insufficient_analysis(reason: str, suggestions: Optional[List[str]] = None,
                          raw_response: Optional[str] = None) -> Dict[str, Any]:
    """Analysis dict carrying the insufficient-data marker."""
    data: Dict[str, Any] = {
        "insufficientData": True,
        "reason": reason or "Insufficient data to generate brand overview",
        "suggestions": list(suggestions) if suggestions else list(STANDARD_SUGGESTIONS),
        "overview": DATA_NOT_FOUND,
        "message": INSUFFICIENT_DATA_MESSAGE,
    }
    if raw_response is not None:
        data["rawResponse"] = raw_response
    return data


class ResponseExtractor:
    """Turns raw model text into a JSON object, never raising."""

    def __init__(self, normalizer: Optional[AnalysisNormalizer] = None):
        self.normalizer = normalizer or AnalysisNormalizer()

    def parse_json(self, text: str) -> Optional[Any]:
        """Steps 1 and 2 of the ladder. Returns None when nothing parses."""
        if not text:
            return None
        value = self._try_load(self._strip_fences(text))
        if value is not None:
            return value
        return self._match_patterns(text)

    def _match_patterns(self, text: str) -> Optional[Any]:
        for pattern in CANDIDATE_PATTERNS:
            for match in pattern.finditer(text):
                candidate = match.group(1) if pattern.groups else match.group(0)
                value = self._try_load(candidate)
                if value is not None:
                    logger.debug(f"Recovered JSON with pattern {pattern.pattern!r}")
                    return value
        return None

    def extract(self, text: str) -> ExtractionResult:
        """Extract an analysis object from model output."""
        text = text or ""

        direct = self._as_object(self._try_load(self._strip_fences(text)))
        if direct is not None:
            return ExtractionResult(self._standardize(direct), ExtractionMethod.DIRECT)

        recovered = self._as_object(self._match_patterns(text))
        if recovered is not None:
            return ExtractionResult(self._standardize(recovered), ExtractionMethod.PATTERN)

        logger.warning(f"Model response was not parseable JSON ({len(text)} chars)")

        lowered = text.lower()
        if any(indicator in lowered for indicator in INSUFFICIENT_DATA_INDICATORS):
            data = insufficient_analysis(
                "Unable to find sufficient data for the provided company information",
                raw_response=text,
            )
            return ExtractionResult(data, ExtractionMethod.INSUFFICIENT_INDICATOR)

        if len(text) > DEGRADED_TEXT_THRESHOLD:
            lines = [line for line in text.split("\n") if len(line.strip()) > 10]
            overview = " ".join(lines[:5])[:OVERVIEW_MAX_CHARS]
            data = self.normalizer.normalize({
                "overview": overview or ANALYSIS_COMPLETED_WITH_ISSUES,
                "rawResponse": text,
                "parsingError": True,
            })
            return ExtractionResult(data, ExtractionMethod.DEGRADED_TEXT)

        data = self.normalizer.normalize({
            "overview": text[:OVERVIEW_MAX_CHARS] or ANALYSIS_COMPLETED,
            "rawResponse": text,
        })
        return ExtractionResult(data, ExtractionMethod.MINIMAL_TEXT)

    def extract_geolocation(self, text: str) -> Dict[str, Any]:
        """Extract a geolocation object, degrading to defaults plus the raw text."""
        value = self._as_object(self.parse_json(text or ""))
        if value is not None:
            return self.normalizer.normalize_geolocation(value)

        logger.warning("Geolocation response was not parseable JSON, using defaults")
        data = default_geolocation()
        data["geolocationAnalysis"] = text
        data["rawResponse"] = text
        return data

    @staticmethod
    def _strip_fences(text: str) -> str:
        return TRAILING_FENCE.sub("", LEADING_FENCE.sub("", text.strip())).strip()

    @staticmethod
    def _try_load(candidate: str) -> Optional[Any]:
        if not candidate:
            return None
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            return None

    @staticmethod
    def _as_object(value: Any) -> Optional[Dict[str, Any]]:
        if isinstance(value, dict):
            return value
        # A model occasionally wraps its single object in a list
        if isinstance(value, list) and value and isinstance(value[0], dict):
            return value[0]
        return None

    @staticmethod
    def _standardize(data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace a model-reported insufficiency with the canonical shape."""
        if data.get("insufficientData") is True:
            return insufficient_analysis(data.get("reason"), data.get("suggestions"))
        return data
