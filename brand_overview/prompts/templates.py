"""
Prompt templates for company analysis, geolocation and traffic estimation.

The analysis prompt asks the model to self-report insufficient data; the
DataSufficiencyPolicy re-checks the result independently afterwards.
"""

import json
from typing import Any, Dict, Optional

from ..models.analysis import DATA_NOT_FOUND
from ..models.company import CompanyProfile

WEBSITE_CONTENT_LIMIT = 3000

ENHANCED_SOURCE_LABELS = [
    ("socialMedia", "Social Media Presence"),
    ("businessDirectories", "Business Directory Data"),
    ("newsArticles", "News Articles"),
    ("financialData", "Financial Data"),
    ("legalData", "Legal/Corporate Data"),
    ("reviews", "Customer Reviews"),
    ("techStack", "Tech Stack"),
    ("websiteTraffic", "Website Traffic"),
]


class BrandOverviewPrompts:
    """Prompts sent to the language model."""

    ANALYSIS_TEMPLATE = """CRITICAL: You must provide a COMPLETE and VALID JSON response. Do not truncate or omit any fields.

Analyze the following company information and provide a comprehensive brand overview with enhanced data points:

Company Data:
- Name: {name}
- Website: {website}
- Industry: {industry}
- Description: {description}

WEBSITE CONTENT:
{website_content}

IMPORTANT: PRIORITIZE COMPANY NAME ANALYSIS over website content. Use your knowledge and the data sources below.
If the company name is clear and specific (not generic like "Tech Corp"), provide comprehensive analysis using your knowledge, even without website content.
For revenue data, provide specific dollar amounts when available from public sources, e.g. "$25 billion", "$500 million". Do not use vague descriptions.

ENHANCED DATA SOURCES:
{enhanced_sources}

INSUFFICIENT DATA CHECK: return the special response below if any of these hold:
1. Company name is too generic (e.g., "Tech Corp", "ABC Company", "Test Company", "Company Name")
2. Company name appears to be misspelled or incorrect (e.g., "Allpe" instead of "Apple")
3. Company name is a placeholder or test value
4. Website content is completely unrelated to the company name
5. All data sources return empty or irrelevant results

NOTE: Having no website URL is NOT a reason for insufficient data if the company name is clear and specific.

Insufficient data response, exactly this JSON structure:
{{
  "insufficientData": true,
  "reason": "specific reason why data is insufficient",
  "suggestions": ["suggestion1", "suggestion2"],
  "overview": "{data_not_found}"
}}

Otherwise return a COMPLETE JSON object with ALL of these fields. When data is not available use [] for arrays, "Not available" or "Unknown" for strings and "Not publicly available" for revenue:
{{
  "overview": "company overview",
  "mission": "company mission",
  "products": ["product1", "product2"],
  "targetMarket": "target market description",
  "differentiators": ["differentiator1", "differentiator2"],
  "brandPositioning": "brand positioning statement",
  "companySize": "size indicators",
  "annualRevenue": "specific dollar amount (e.g., '$25 billion', '$500 million')",
  "onlineRevenue": "specific dollar amount (e.g., '$10 billion', '$200 million')",
  "aov": "estimated average order value",
  "orderVolume": "estimated order volume",
  "salesChannels": ["channel1", "channel2"],
  "geographicPresence": ["location1", "location2"],
  "decisionMakers": ["person1", "person2"],
  "recentNews": ["news1", "news2"],
  "marketingIndicators": "social media presence, advertising mentions",
  "techStack": ["technology1", "technology2"],
  "marketingBudget": "estimated marketing budget amount",
  "websiteTraffic": "monthly traffic estimate (e.g., '100K visits/month', '1M+ visits/month')"
}}"""

    GEOLOCATION_TEMPLATE = """CRITICAL: You must provide a COMPLETE and VALID JSON response for geolocation data.

Extract all geolocation information from this company data and website content:

Company: {name}
Website: {website}

Website Content: {website_content}

IMPORTANT: PRIORITIZE COMPANY NAME ANALYSIS over website content. Use your knowledge of the company.

Find all office locations, the headquarters, branch offices, service areas, geographic markets and regional offices.
When data is not available use [] for arrays and "Not specified" for strings.

Return as JSON:
{{
  "headquarters": "location or Not specified",
  "offices": ["office1", "office2"],
  "serviceAreas": ["area1", "area2"],
  "markets": ["market1", "market2"],
  "regions": ["region1", "region2"]
}}"""

    TRAFFIC_ESTIMATE_TEMPLATE = """Estimate the monthly website traffic for this domain: {domain}

Consider company size and industry, type of business (B2B, B2C, e-commerce), market presence and brand recognition.

Answer with exactly one of:
- "Under 1K visits/month"
- "1K-10K visits/month"
- "10K-100K visits/month"
- "100K-1M visits/month"
- "1M+ visits/month"

Return only the traffic estimate, nothing else."""

    @classmethod
    def analysis_prompt(cls, company: CompanyProfile, website_text: Optional[str],
                        enhanced_data: Optional[Dict[str, Any]] = None) -> str:
        enhanced_data = enhanced_data or {}
        sources = "\n".join(
            f"- {label}: {json.dumps(enhanced_data.get(key), default=str)}"
            for key, label in ENHANCED_SOURCE_LABELS
        )
        return cls.ANALYSIS_TEMPLATE.format(
            name=company.name,
            website=company.website or "No website available",
            industry=company.industry or "Unknown",
            description=company.description or "No description available",
            website_content=(
                website_text[:WEBSITE_CONTENT_LIMIT] if website_text
                else "No website content available - analyzing from other sources only"
            ),
            enhanced_sources=sources,
            data_not_found=DATA_NOT_FOUND,
        )

    @classmethod
    def geolocation_prompt(cls, company: CompanyProfile, website_text: Optional[str]) -> str:
        return cls.GEOLOCATION_TEMPLATE.format(
            name=company.name,
            website=company.website or "No website available",
            website_content=(
                website_text[:WEBSITE_CONTENT_LIMIT] if website_text
                else "No website content available"
            ),
        )

    @classmethod
    def traffic_estimate_prompt(cls, domain: str) -> str:
        return cls.TRAFFIC_ESTIMATE_TEMPLATE.format(domain=domain)
