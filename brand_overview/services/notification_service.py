"""
Slack error notifications.

Delivery is best-effort: a missing webhook URL or a failed post is logged
and swallowed so a notification can never mask the error being reported.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

# Checked in order against the lowercased error message
ERROR_TYPES = [
    ("language model", "AI Analysis Failure"),
    ("gemini", "AI Analysis Failure"),
    ("zoho", "CRM Update Failure"),
    ("crm", "CRM Update Failure"),
    ("insufficient data", "Data Quality Issue"),
    ("rate limit", "Rate Limiting Issue"),
    ("authentication", "Authentication Error"),
    ("timeout", "Timeout Error"),
    ("timed out", "Timeout Error"),
    ("network", "Network Error"),
]

SEVERITY_HIGH = "🔴 HIGH - Requires immediate attention"
SEVERITY_MEDIUM_TRANSIENT = "🟡 MEDIUM - Temporary issue, may resolve itself"
SEVERITY_LOW = "🟢 LOW - Data quality issue, not critical"
SEVERITY_MEDIUM = "🟡 MEDIUM - Requires investigation"

CONTEXT_LINES = [
    ("leadId", "Lead ID"),
    ("company", "Company"),
    ("website", "Website"),
    ("step", "Failed Step"),
]

RECOMMENDED_ACTIONS = [
    "Check server logs for detailed error information",
    "Verify API credentials and configurations",
    "Check if external services (Gemini AI, Zoho CRM) are accessible",
    "Review the specific lead data for any anomalies",
]


def _message_of(error: Any) -> str:
    return str(error) if error is not None else ""


def get_error_type(error: Any) -> str:
    message = _message_of(error).lower()
    for needle, label in ERROR_TYPES:
        if needle in message:
            return label
    return "General Error"


def get_severity_level(error: Any) -> str:
    message = _message_of(error).lower()
    if "authentication" in message or "credentials" in message:
        return SEVERITY_HIGH
    if "rate limit" in message or "timeout" in message:
        return SEVERITY_MEDIUM_TRANSIENT
    if "insufficient data" in message:
        return SEVERITY_LOW
    return SEVERITY_MEDIUM


def format_error_message(error: Any, context: Optional[Dict[str, Any]] = None,
                         environment: str = "development") -> str:
    """Slack mrkdwn body for an error alert."""
    context = context or {}
    lines = [
        "🚨 *CRM Automation Error Alert*",
        "",
        f"*Error Type:* {get_error_type(error)}",
        f"*Timestamp:* {datetime.now().isoformat()}",
        f"*Environment:* {environment}",
        "",
    ]
    for key, label in CONTEXT_LINES:
        if context.get(key):
            lines.append(f"*{label}:* {context[key]}")

    lines.append("")
    lines.append("*Error Details:*")
    lines.append(f"```{_message_of(error)}```")
    lines.append("")
    lines.append("*Recommended Actions:*")
    lines.extend(f"• {action}" for action in RECOMMENDED_ACTIONS)
    lines.append("")
    lines.append(f"*Severity:* {get_severity_level(error)}")
    return "\n".join(lines)


class SlackNotificationService:
    """Posts error alerts to a Slack incoming webhook."""

    def __init__(self, webhook_url: Optional[str], client: httpx.AsyncClient,
                 environment: str = "development"):
        self.webhook_url = webhook_url
        self.client = client
        self.environment = environment

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def send_error_notification(self, error: Any,
                                      context: Optional[Dict[str, Any]] = None) -> bool:
        """Post an alert; returns whether Slack accepted it."""
        if not self.enabled:
            logger.warning("SLACK_WEBHOOK_URL not configured, skipping Slack notification")
            return False

        payload = {
            "text": format_error_message(error, context, self.environment),
            "unfurl_links": False,
        }
        try:
            response = await self.client.post(self.webhook_url, json=payload, timeout=10.0)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send Slack notification: {e}")
            return False

        logger.info("Slack error notification sent")
        return True
