import asyncio
import base64
import json

import pytest
from langchain_core.language_models import FakeListChatModel
from pydantic import ValidationError

from errors import AnalysisError, EmptyResponseError, MalformedResponseError, TransportError
from graph.llm import (
    GeminiAnalyzer,
    build_request,
    encode_document,
    parse_analysis,
    response_text,
    sanitize_response,
    strip_data_url_prefix,
)
from graph.models import FinancialAnalysis
from prompts.analysis_prompts import ANALYSIS_PROMPT, ANALYSIS_SCHEMA

from conftest import StubLLM, sample_payload


# ── Sanitization ────────────────────────────────────────────────────────
MESSY_RESPONSES = [
    '```json\n{"a": 1,}\n```',
    '```\n{"a": [1, 2,],}\n```',
    '{"a": 1 , ,}',
    '  ,  {"a": {"b": 2,\n},\n}',
    '``` ```json {"a": 1}````',
    "plain text with no json",
    "",
]


@pytest.mark.parametrize("text", MESSY_RESPONSES)
def test_sanitize_is_idempotent(text):
    once = sanitize_response(text)
    assert sanitize_response(once) == once


def test_sanitize_strips_fences_and_trailing_commas():
    assert sanitize_response('```json\n{"a": [1, 2,], "b": 3,}\n```') == '{"a": [1, 2], "b": 3}'


def test_sanitize_keeps_commas_inside_strings_before_text():
    text = '{"summary": "Cash, debt, equity", "a": 1}'
    assert sanitize_response(text) == text


def test_fenced_payload_parses_like_clean_payload(payload):
    clean = json.dumps(payload)
    messy = "```json\n" + json.dumps(payload, indent=2)[:-1].rstrip() + ",\n}\n```"
    assert parse_analysis(sanitize_response(messy)) == parse_analysis(clean)


# ── Parsing ─────────────────────────────────────────────────────────────
def test_parse_maps_camel_case_fields(payload_json):
    analysis = parse_analysis(payload_json)
    assert analysis.dscr == 1.40
    assert analysis.dscr_verdict == "APPROVED"
    assert analysis.debt_to_ebitda == 1.8
    assert analysis.leverage_verdict == "SAFE"
    assert analysis.confidence_score == 0.92


def test_parse_accepts_integers_for_numbers():
    analysis = parse_analysis(json.dumps(sample_payload(dscr=2, confidenceScore=1)))
    assert analysis.dscr == 2.0


def test_period_is_optional():
    payload = sample_payload()
    del payload["period"]
    assert parse_analysis(json.dumps(payload)).period is None


@pytest.mark.parametrize("field", ["dscrVerdict", "ebitda", "currency", "summary", "confidenceScore"])
def test_missing_required_field_is_malformed(field):
    payload = sample_payload()
    del payload[field]
    with pytest.raises(MalformedResponseError):
        parse_analysis(json.dumps(payload))


@pytest.mark.parametrize(
    "overrides",
    [
        {"dscrVerdict": "PASS"},
        {"leverageVerdict": "APPROVED"},
        {"dscr": "1.40"},
        {"currentRatio": None},
        {"totalEquity": True},
    ],
)
def test_wrong_types_and_unknown_verdicts_are_malformed(overrides):
    with pytest.raises(MalformedResponseError):
        parse_analysis(json.dumps(sample_payload(**overrides)))


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_numbers_are_malformed(literal):
    text = json.dumps(sample_payload()).replace('"dscr": 1.4', f'"dscr": {literal}')
    with pytest.raises(MalformedResponseError):
        parse_analysis(text)


def test_invalid_json_is_malformed():
    with pytest.raises(MalformedResponseError):
        parse_analysis("The statement shows strong cash flow.")


def test_analysis_is_immutable(analysis):
    with pytest.raises(ValidationError):
        analysis.dscr = 0.5


# ── Request construction ───────────────────────────────────────────────
def test_strip_data_url_prefix():
    assert strip_data_url_prefix("data:application/pdf;base64,JVBERi0=") == "JVBERi0="
    assert strip_data_url_prefix("JVBERi0=") == "JVBERi0="


def test_build_request_carries_document_and_prompt():
    data = b"%PDF-1.7 statement"
    (message,) = build_request(data, "application/pdf")
    media, text = message.content
    assert media["type"] == "media"
    assert media["mime_type"] == "application/pdf"
    assert base64.b64decode(media["data"]) == data
    assert media["data"] == encode_document(data)
    assert text == {"type": "text", "text": ANALYSIS_PROMPT}


def test_prompt_states_thresholds():
    for threshold in ("DSCR >= 1.25", "< 3.0x", ">= 1.2x", "<= 2.5x"):
        assert threshold in ANALYSIS_PROMPT


def test_prompt_allows_review_for_missing_data():
    assert "Use REVIEW for any verdict" in ANALYSIS_PROMPT


def test_schema_requires_everything_but_period():
    aliases = {field.alias for field in FinancialAnalysis.model_fields.values()}
    assert set(ANALYSIS_SCHEMA["properties"]) == aliases
    assert set(ANALYSIS_SCHEMA["required"]) == aliases - {"period"}


def test_response_text_joins_content_parts():
    class Response:
        content = [{"type": "text", "text": '{"a":'}, {"type": "thinking"}, " 1}"]

    assert response_text(Response()) == '{"a": 1}'


# ── Analyzer ────────────────────────────────────────────────────────────
def test_analyzer_parses_fenced_model_output(payload):
    llm = FakeListChatModel(responses=["```json\n" + json.dumps(payload) + "\n```"])
    analysis = asyncio.run(GeminiAnalyzer(llm=llm).analyze(b"%PDF", "application/pdf"))
    assert analysis == FinancialAnalysis.model_validate(payload)


def test_analyzer_makes_exactly_one_request(payload_json):
    llm = StubLLM(content=payload_json)
    asyncio.run(GeminiAnalyzer(llm=llm).analyze(b"\x89PNG", "image/png"))
    assert len(llm.calls) == 1
    assert llm.calls[0][0].content[0]["mime_type"] == "image/png"


@pytest.mark.parametrize("content", ["", "   \n", []])
def test_empty_response(content):
    llm = StubLLM(content=content)
    with pytest.raises(EmptyResponseError):
        asyncio.run(GeminiAnalyzer(llm=llm).analyze(b"%PDF", "application/pdf"))


def test_transport_failure_is_wrapped_without_retry():
    llm = StubLLM(error=ConnectionError("connection reset by peer"))
    with pytest.raises(TransportError) as exc:
        asyncio.run(GeminiAnalyzer(llm=llm).analyze(b"%PDF", "application/pdf"))
    assert isinstance(exc.value.__cause__, ConnectionError)
    assert len(llm.calls) == 1


def test_missing_field_from_model_is_malformed():
    payload = sample_payload()
    del payload["dscrVerdict"]
    llm = StubLLM(content=json.dumps(payload))
    with pytest.raises(MalformedResponseError):
        asyncio.run(GeminiAnalyzer(llm=llm).analyze(b"%PDF", "application/pdf"))


def test_missing_api_key_is_transport_error(monkeypatch):
    import graph.llm

    monkeypatch.setattr(graph.llm, "GOOGLE_API_KEY", "")
    graph.llm.clear_llm_instance()
    with pytest.raises(TransportError):
        asyncio.run(GeminiAnalyzer().analyze(b"%PDF", "application/pdf"))


def test_user_message_hides_detail():
    err = TransportError("403 API key expired for project 1234")
    assert "403" not in err.user_message
    assert isinstance(err, AnalysisError)
