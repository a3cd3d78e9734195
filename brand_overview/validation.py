"""
Input validation helpers for company data.
"""

from typing import Any, Optional
from urllib.parse import urlparse

from .models.company import CompanyProfile


def validate_url(url: Optional[str]) -> bool:
    """Absolute URL with a scheme and host."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def validate_required(value: Any, field_name: str) -> bool:
    if not value or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{field_name} is required")
    return True


def validate_company_data(company: CompanyProfile) -> bool:
    """
    Check a company before it enters the pipeline.

    Raises:
        ValueError: listing every problem found
    """
    errors = []
    try:
        validate_required(company.name, "Company name")
    except ValueError as e:
        errors.append(str(e))
    if company.website and not validate_url(company.website):
        errors.append("Invalid website URL format")
    if errors:
        raise ValueError(", ".join(errors))
    return True
