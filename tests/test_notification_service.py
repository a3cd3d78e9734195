import json
from datetime import datetime

import httpx
import pytest

from brand_overview.exceptions import AnalysisFailedError, InsufficientDataUploadError
from brand_overview.services.notification_service import (
    SlackNotificationService,
    format_error_message,
    get_error_type,
    get_severity_level,
)


@pytest.mark.parametrize("message, expected", [
    ("Failed to analyze company with the language model after multiple attempts", "AI Analysis Failure"),
    ("Gemini quota exhausted", "AI Analysis Failure"),
    ("Failed to update lead: Zoho CRM PUT /Leads/1 failed", "CRM Update Failure"),
    ("insufficient data: name too generic", "Data Quality Issue"),
    ("Rate limit exceeded", "Rate Limiting Issue"),
    ("Authentication failed", "Authentication Error"),
    ("Request timed out", "Timeout Error"),
    ("Network unreachable", "Network Error"),
    ("Something odd", "General Error"),
])
def test_error_type(message, expected):
    assert get_error_type(Exception(message)) == expected


def test_error_type_checks_in_order():
    assert get_error_type("Gemini timeout") == "AI Analysis Failure"


@pytest.mark.parametrize("message, expected", [
    ("Authentication failed", "🔴 HIGH - Requires immediate attention"),
    ("missing credentials", "🔴 HIGH - Requires immediate attention"),
    ("rate limit hit", "🟡 MEDIUM - Temporary issue, may resolve itself"),
    ("connect timeout", "🟡 MEDIUM - Temporary issue, may resolve itself"),
    ("Cannot upload insufficient data to CRM: x", "🟢 LOW - Data quality issue, not critical"),
    ("boom", "🟡 MEDIUM - Requires investigation"),
])
def test_severity(message, expected):
    assert get_severity_level(message) == expected


def test_message_layout():
    error = InsufficientDataUploadError("name too generic")
    text = format_error_message(error, {
        "leadId": "900",
        "company": "Tech Corp",
        "step": "Insufficient Data Detected",
    }, environment="production")

    lines = text.split("\n")
    assert lines[0] == "🚨 *CRM Automation Error Alert*"
    assert "*Error Type:* CRM Update Failure" in lines
    assert "*Environment:* production" in lines
    assert "*Lead ID:* 900" in lines
    assert "*Company:* Tech Corp" in lines
    assert "*Failed Step:* Insufficient Data Detected" in lines
    assert not any(line.startswith("*Website:*") for line in lines)
    assert "```Cannot upload insufficient data to CRM: name too generic```" in lines
    assert lines[-1] == "*Severity:* 🟢 LOW - Data quality issue, not critical"
    timestamp = next(line for line in lines if line.startswith("*Timestamp:* "))
    datetime.fromisoformat(timestamp[len("*Timestamp:* "):])


@pytest.mark.asyncio
async def test_posts_to_webhook():
    posted = []

    def handler(request):
        posted.append(json.loads(request.content))
        return httpx.Response(200, text="ok")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = SlackNotificationService("https://hooks.slack.test/T000/B000", client, "staging")
        sent = await service.send_error_notification(
            AnalysisFailedError("Failed to analyze company with the language model"),
            {"company": "Acme Dynamics", "step": "Gemini AI Analysis Failed"},
        )

    assert sent is True
    assert posted[0]["unfurl_links"] is False
    assert "*Error Type:* AI Analysis Failure" in posted[0]["text"]
    assert "*Environment:* staging" in posted[0]["text"]


@pytest.mark.asyncio
async def test_disabled_without_url():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500))) as client:
        service = SlackNotificationService(None, client)

        assert not service.enabled
        assert await service.send_error_notification(Exception("boom")) is False


@pytest.mark.asyncio
async def test_delivery_failure_is_swallowed():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500))) as client:
        service = SlackNotificationService("https://hooks.slack.test/T000/B000", client)

        assert await service.send_error_notification(Exception("boom")) is False
