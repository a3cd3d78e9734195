import json

import pytest

from brand_overview.models.analysis import (
    ANALYSIS_FIELDS,
    DATA_NOT_FOUND,
    STANDARD_SUGGESTIONS,
)
from brand_overview.services.response_extractor import (
    INSUFFICIENT_DATA_INDICATORS,
    ExtractionMethod,
    ResponseExtractor,
)


@pytest.fixture
def extractor():
    return ResponseExtractor()


def test_fenced_json_round_trips(extractor, acme_analysis):
    text = "```json\n" + json.dumps(acme_analysis, indent=2) + "\n```"

    result = extractor.extract(text)

    assert result.method == ExtractionMethod.DIRECT
    assert result.data == acme_analysis


def test_bare_fence_is_stripped(extractor):
    result = extractor.extract('```\n{"overview": "Plain fenced object"}\n```')

    assert result.method == ExtractionMethod.DIRECT
    assert result.data["overview"] == "Plain fenced object"


def test_object_inside_prose_is_recovered(extractor, acme_analysis):
    text = "Here is the analysis you asked for:\n" + json.dumps(acme_analysis) + "\nLet me know!"

    result = extractor.extract(text)

    assert result.method == ExtractionMethod.PATTERN
    assert result.data == acme_analysis


def test_fenced_block_after_prose_is_recovered(extractor):
    text = 'Sure.\n```json\n{"overview": "Inside a fence"}\n```\nDone.'

    result = extractor.extract(text)

    assert result.parsed
    assert result.data["overview"] == "Inside a fence"


def test_single_object_wrapped_in_list(extractor):
    result = extractor.extract('[{"overview": "Wrapped"}]')

    assert result.data["overview"] == "Wrapped"


def test_model_reported_insufficiency_is_standardized(extractor):
    text = json.dumps({
        "insufficientData": True,
        "reason": "Company name looks misspelled",
        "suggestions": ["Check the spelling"],
        "overview": "whatever",
    })

    result = extractor.extract(text)

    assert result.insufficient_data
    assert result.data["overview"] == DATA_NOT_FOUND
    assert result.data["reason"] == "Company name looks misspelled"
    assert result.data["suggestions"] == ["Check the spelling"]


@pytest.mark.parametrize("phrase", INSUFFICIENT_DATA_INDICATORS)
def test_indicator_phrases_yield_insufficient(extractor, phrase):
    text = f"I am sorry, but there is {phrase.upper()} about this business to write an overview."

    result = extractor.extract(text)

    assert result.method == ExtractionMethod.INSUFFICIENT_INDICATOR
    assert result.insufficient_data
    assert result.data["suggestions"] == STANDARD_SUGGESTIONS
    assert len(result.data["suggestions"]) == 4
    assert result.data["rawResponse"] == text


def test_long_unparseable_text_degrades(extractor):
    lines = [f"Line {i}: Acme builds automation equipment for factories." for i in range(7)]
    text = "\n".join(["ok", ""] + lines)

    result = extractor.extract(text)

    assert result.method == ExtractionMethod.DEGRADED_TEXT
    assert result.data["overview"] == " ".join(lines[:5])[:500]
    assert result.data["parsingError"] is True
    assert result.data["rawResponse"] == text
    for name in ANALYSIS_FIELDS:
        assert name in result.data


def test_short_unparseable_text_is_minimal(extractor):
    result = extractor.extract("Acme makes robots.")

    assert result.method == ExtractionMethod.MINIMAL_TEXT
    assert result.data["overview"] == "Acme makes robots."
    assert result.data["products"] == []
    assert result.data["annualRevenue"] == "Not publicly available"


def test_empty_text_is_minimal(extractor):
    result = extractor.extract("")

    assert result.method == ExtractionMethod.MINIMAL_TEXT
    assert result.data["overview"] == "Analysis completed"


@pytest.mark.parametrize("text", [
    '{"overview": "truncated", "products": [',
    "}{",
    "```json\n```",
    "[1, 2, 3]",
    None,
])
def test_malformed_output_never_raises(extractor, text):
    result = extractor.extract(text)

    assert isinstance(result.data, dict)
    assert "overview" in result.data


def test_geolocation_defaults_filled(extractor):
    geolocation = extractor.extract_geolocation('```json\n{"headquarters": "Pune, India"}\n```')

    assert geolocation == {
        "headquarters": "Pune, India",
        "offices": [],
        "serviceAreas": [],
        "markets": [],
        "regions": [],
    }


def test_unparseable_geolocation_keeps_raw_text(extractor):
    geolocation = extractor.extract_geolocation("Offices in Austin and Munich.")

    assert geolocation["headquarters"] == "Not specified"
    assert geolocation["geolocationAnalysis"] == "Offices in Austin and Munich."
    assert geolocation["rawResponse"] == "Offices in Austin and Munich."
