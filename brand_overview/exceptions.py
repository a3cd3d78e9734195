"""
Error types raised by the brand overview services.

Insufficient data is not an error: it travels as a SufficiencyVerdict.
The exceptions here cover upstream failures and refused CRM writes.
"""


class BrandOverviewError(Exception):
    """Base class for service errors."""


class AnalysisFailedError(BrandOverviewError):
    """The language model could not produce an analysis after all retries."""


class ScrapeError(BrandOverviewError):
    """A website could not be fetched or parsed."""


class CRMError(BrandOverviewError):
    """A Zoho CRM request failed."""


class TokenRefreshError(CRMError):
    """The OAuth access token could not be refreshed."""


class UploadValidationError(BrandOverviewError):
    """A brand overview failed validation before being written to the CRM."""


class InsufficientDataUploadError(UploadValidationError):
    """An insufficient-data overview was offered for upload."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot upload insufficient data to CRM: {reason}")
