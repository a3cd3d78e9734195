"""Brand overview generation for Zoho CRM companies and leads."""

__version__ = "1.0.0"
