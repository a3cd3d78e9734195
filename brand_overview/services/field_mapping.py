"""
Mapping of brand overview analysis onto the Zoho CRM lead field schema.

The engine either produces the canned insufficient-data template or the full
derived mapping. Derivation includes the marketing budget estimate: 5% of the
company's revenue, parsed from free text such as "$25 billion" or
"₹50 crore".
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from ..exceptions import UploadValidationError
from ..models.analysis import (
    DATA_NOT_FOUND,
    GEOGRAPHIC_INFO_NOT_AVAILABLE,
    NOT_PUBLICLY_AVAILABLE,
)
from .response_extractor import ResponseExtractor
from .sufficiency import is_meaningful

logger = logging.getLogger(__name__)

FieldMapping = Dict[str, str]

EXTERNAL_FIELDS = [
    "Overview",
    "Product_Services",
    "Target_Market",
    "Brand_Positioning",
    "Brand_Revenue",
    "Online_Revenue",
    "AOV",
    "Order_Volume",
    "Sales_Channels",
    "Company_Size",
    "Brand_Size_Scale",
    "Decision_Makers",
    "Marketing_Indicators",
    "Tech_Stack",
    "Marketing_Budget",
    "Geographic_Presence",
    "Recent_News_Updates",
    "Website_Traffic",
]

CRITICAL_FIELDS = ["Overview", "Geographic_Presence"]

_PROVIDE_DETAILS = "Not available - please provide correct company details"

INSUFFICIENT_DATA_TEMPLATE: FieldMapping = {
    "Overview": DATA_NOT_FOUND,
    "Product_Services": "Please enter the correct company name and website URL",
    "Target_Market": "Data not available - please verify company information",
    "Brand_Positioning": "Unable to generate brand overview with current data",
    **{name: _PROVIDE_DETAILS for name in EXTERNAL_FIELDS[4:]},
}

SCALAR_FIELDS = {
    "overview": "Overview",
    "targetMarket": "Target_Market",
    "brandPositioning": "Brand_Positioning",
    "companySize": "Company_Size",
    "aov": "AOV",
    "orderVolume": "Order_Volume",
    "marketingIndicators": "Marketing_Indicators",
}

BULLET_FIELDS = {
    "products": "Product_Services",
    "recentNews": "Recent_News_Updates",
}

COMMA_FIELDS = {
    "salesChannels": "Sales_Channels",
    "decisionMakers": "Decision_Makers",
    "techStack": "Tech_Stack",
}

HEADQUARTERS_PLACEHOLDERS = frozenset([
    "Not specified",
    "Not specified in the provided text.",
    "Unknown",
    "N/A",
])

TRAFFIC_ANNOTATIONS = [
    re.compile(r"\(Source: [^)]+, Confidence: [^)]+\)"),
    re.compile(r"\(Confidence: [^)]+\)"),
    re.compile(r"\(Source: [^)]+\)"),
    re.compile(r"Source: [^,]+"),
]

MARKETING_BUDGET_RATE = 0.05

_NUMBER = r"(\d[\d,]*(?:\.\d+)?)"

# Checked in order; the first unit found after a number wins
REVENUE_UNITS = [
    ("billion", re.compile(_NUMBER + r"\s*billion", re.IGNORECASE), 1_000_000_000),
    ("million", re.compile(_NUMBER + r"\s*million", re.IGNORECASE), 1_000_000),
    ("crores", re.compile(_NUMBER + r"\s*crores?", re.IGNORECASE), 10_000_000),
    ("lakhs", re.compile(_NUMBER + r"\s*lakhs?", re.IGNORECASE), 100_000),
]
BARE_NUMBER = re.compile(_NUMBER)


@dataclass
class RevenueFigure:
    """A revenue string resolved to a base amount."""
    amount: float
    unit: str
    magnitude: float
    source_text: str


def format_number(value: float) -> str:
    """Group thousands and keep at most three decimals: 1250000000.0 -> 1,250,000,000"""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text or "0"


def parse_revenue(value: Any) -> Optional[RevenueFigure]:
    """
    Resolve a free-text revenue figure to a number.

    Recognizes billion, million, crore (10,000,000) and lakh (100,000)
    following a number, then falls back to the first bare number.
    Returns None when the text has no positive number.
    """
    if value is None:
        return None
    text = str(value)

    for unit, pattern, multiplier in REVENUE_UNITS:
        match = pattern.search(text)
        if match:
            magnitude = float(match.group(1).replace(",", ""))
            return _positive(RevenueFigure(magnitude * multiplier, unit, magnitude, text))

    match = BARE_NUMBER.search(text)
    if match:
        amount = float(match.group(1).replace(",", ""))
        return _positive(RevenueFigure(amount, "raw_number", amount, text))
    return None


def _positive(figure: RevenueFigure) -> Optional[RevenueFigure]:
    return figure if figure.amount > 0 else None


def derive_marketing_budget(revenue: Any) -> Optional[str]:
    """5% of the parsed revenue, annotated with where the number came from."""
    figure = parse_revenue(revenue)
    if figure is None:
        return None

    budget = f"${format_number(figure.amount * MARKETING_BUDGET_RATE)}"
    magnitude = format_number(figure.magnitude)
    if figure.unit == "crores":
        return f"{budget} (calculated from ₹{magnitude} crores revenue)"
    if figure.unit == "lakhs":
        return f"{budget} (calculated from ₹{magnitude} lakhs revenue)"
    if figure.unit == "billion":
        return f"{budget} (calculated from ${magnitude} billion revenue)"
    if figure.unit == "million":
        return f"{budget} (calculated from ${magnitude} million revenue)"
    return f"{budget} (calculated from {figure.source_text})"


def clean_website_traffic(traffic: str) -> str:
    for pattern in TRAFFIC_ANNOTATIONS:
        traffic = pattern.sub("", traffic)
    return re.sub(r"\s{2,}", " ", traffic).strip()


def _as_text(value: Any, separator: str = ", ") -> str:
    if isinstance(value, (list, tuple)):
        return separator.join(str(item) for item in value)
    return str(value)


def _has_value(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return bool(value)


def _usable_revenue(value: Any) -> bool:
    return is_meaningful(value) and value != NOT_PUBLICLY_AVAILABLE


def geographic_presence(geolocation: Dict[str, Any]) -> str:
    parts: List[str] = []

    headquarters = geolocation.get("headquarters")
    if (isinstance(headquarters, str) and headquarters.strip()
            and headquarters.strip() not in HEADQUARTERS_PLACEHOLDERS):
        parts.append(f"Headquarters: {headquarters.strip()}")

    if _has_value(geolocation.get("serviceAreas")):
        parts.append(f"Service Areas: {_as_text(geolocation['serviceAreas'])}")

    if _has_value(geolocation.get("markets")):
        parts.append(f"Markets: {_as_text(geolocation['markets'])}")

    return "\n".join(parts) if parts else GEOGRAPHIC_INFO_NOT_AVAILABLE


def validate_field_mappings(field_mappings: Optional[FieldMapping]) -> List[str]:
    """
    Check a mapping before it is sent to the CRM.

    An empty mapping is refused. Missing critical fields only produce a
    warning; their names are returned.
    """
    if not field_mappings:
        raise UploadValidationError("No field mappings generated - cannot update CRM")

    missing = [name for name in CRITICAL_FIELDS if not field_mappings.get(name)]
    if missing:
        logger.warning(f"Missing critical fields: {', '.join(missing)}")
    return missing


class FieldMappingEngine:
    """Maps analysis and geolocation records to CRM field values."""

    def __init__(self, notifier=None, extractor: Optional[ResponseExtractor] = None):
        self.notifier = notifier
        self.extractor = extractor or ResponseExtractor()

    def build_field_mappings(self, analysis: Union[Dict[str, Any], str],
                             geolocation: Union[Dict[str, Any], str, None]) -> FieldMapping:
        """Derive the mapping. May raise on malformed input."""
        if isinstance(analysis, str):
            analysis = self.extractor.extract(analysis).data
        if analysis.get("insufficientData") is True:
            return dict(INSUFFICIENT_DATA_TEMPLATE)

        if isinstance(geolocation, str):
            geolocation = self.extractor.extract_geolocation(geolocation)
        geolocation = geolocation or {}

        mappings: FieldMapping = {}

        for source, target in SCALAR_FIELDS.items():
            if _has_value(analysis.get(source)):
                mappings[target] = _as_text(analysis[source])

        for source, target in BULLET_FIELDS.items():
            if _has_value(analysis.get(source)):
                mappings[target] = _as_text(analysis[source], separator="\n• ")

        for source, target in COMMA_FIELDS.items():
            if _has_value(analysis.get(source)):
                mappings[target] = _as_text(analysis[source])

        brand_revenue = analysis.get("revenue") or analysis.get("annualRevenue")
        if brand_revenue:
            mappings["Brand_Revenue"] = _as_text(brand_revenue)
        if analysis.get("onlineRevenue"):
            mappings["Online_Revenue"] = _as_text(analysis["onlineRevenue"])

        brand_size = analysis.get("brandSize") or analysis.get("companySize")
        if brand_size:
            mappings["Brand_Size_Scale"] = _as_text(brand_size)

        budget = self._marketing_budget(analysis)
        if budget:
            mappings["Marketing_Budget"] = budget

        mappings["Geographic_Presence"] = geographic_presence(geolocation)

        traffic = analysis.get("websiteTraffic")
        if _has_value(traffic):
            cleaned = clean_website_traffic(_as_text(traffic))
            if cleaned:
                mappings["Website_Traffic"] = cleaned

        return mappings

    async def map_to_external_schema(self, analysis: Union[Dict[str, Any], str],
                                     geolocation: Union[Dict[str, Any], str, None]) -> FieldMapping:
        """
        Map to the CRM schema without ever raising.

        On an internal failure the error goes to the notifier and a minimal
        two-field mapping carrying the raw data is returned instead.
        """
        try:
            return self.build_field_mappings(analysis, geolocation)
        except Exception as e:
            logger.error(f"Error mapping brand overview to fields: {e}")
            if self.notifier is not None:
                await self.notifier.send_error_notification(e, {"step": "Field Mapping Failed"})
            return self.fallback_mappings(analysis, geolocation)

    @staticmethod
    def fallback_mappings(analysis: Any, geolocation: Any) -> FieldMapping:
        return {
            "Overview": f"Brand Overview Generated: {datetime.now().isoformat()}",
            "Recent_News_Updates": (
                f"Analysis: {json.dumps(analysis, indent=2, default=str)}\n\n"
                f"Geolocation: {json.dumps(geolocation, indent=2, default=str)}"
            ),
        }

    @staticmethod
    def _marketing_budget(analysis: Dict[str, Any]) -> Optional[str]:
        explicit = analysis.get("marketingBudget")
        if _usable_revenue(explicit):
            return _as_text(explicit)

        for name in ("revenue", "annualRevenue", "onlineRevenue"):
            value = analysis.get(name)
            if _usable_revenue(value):
                budget = derive_marketing_budget(value)
                if budget:
                    return budget
        return None
