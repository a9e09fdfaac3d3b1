"""LLM client: sends one statement to Gemini and parses the credit analysis.

The LLM is used ONLY for:
  ✅ Reading the statement and computing the four ratios + verdicts
  ❌ NOT for flow control (that's the router's job)
  ❌ NOT cross-checked locally: ratios and verdicts are trusted as returned
"""

import base64
import logging
import re
from typing import Any, Optional, Protocol

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import ValidationError

from config import GOOGLE_API_KEY, LLM_MODEL, LLM_TEMPERATURE
from errors import EmptyResponseError, MalformedResponseError, TransportError
from graph.models import FinancialAnalysis
from prompts.analysis_prompts import ANALYSIS_PROMPT, ANALYSIS_SCHEMA

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    """Capability seam: anything that turns a document into a FinancialAnalysis.

    Implementations raise AnalysisError on failure. Tests and alternative
    rule engines plug in here instead of Gemini.
    """

    async def analyze(self, data: bytes, mime_type: str) -> FinancialAnalysis: ...


# ── LLM instance (singleton) ───────────────────────────────────────────
_llm_instance = None


def _get_llm():
    """Lazy singleton: creates the LLM once, reuses on every call."""
    global _llm_instance
    if _llm_instance is not None:
        return _llm_instance
    if not GOOGLE_API_KEY:
        logger.error("No GOOGLE_API_KEY found. Check your .env file.")
        return None
    _llm_instance = ChatGoogleGenerativeAI(
        model=LLM_MODEL,
        google_api_key=GOOGLE_API_KEY,
        temperature=LLM_TEMPERATURE,
        response_mime_type="application/json",
        response_schema=ANALYSIS_SCHEMA,
    )
    return _llm_instance


def clear_llm_instance():
    """
    Reset the LLM singleton. Use before each asyncio.run() in Streamlit to avoid
    'Event loop is closed' errors: the cached LLM holds HTTP clients tied to a
    previous event loop that gets closed between reruns.
    """
    global _llm_instance
    _llm_instance = None


# ── Request encoding ───────────────────────────────────────────────────
def encode_document(data: bytes) -> str:
    """Base64 text for the inline file part."""
    return base64.b64encode(data).decode("ascii")


def strip_data_url_prefix(encoded: str) -> str:
    """'data:application/pdf;base64,JVBE...' → 'JVBE...'. Plain base64 passes through."""
    if encoded.startswith("data:") and "," in encoded:
        return encoded.split(",", 1)[1]
    return encoded


def build_request(data: bytes, mime_type: str) -> list[HumanMessage]:
    """One human message: the inline document followed by the fixed instructions."""
    payload = strip_data_url_prefix(encode_document(data))
    return [
        HumanMessage(content=[
            {"type": "media", "mime_type": mime_type, "data": payload},
            {"type": "text", "text": ANALYSIS_PROMPT},
        ])
    ]


# ── Response handling ──────────────────────────────────────────────────
_CODE_FENCE = re.compile(r"`{3,}(?:json)?")
_TRAILING_COMMA = re.compile(r",(?:\s*,)*(\s*[}\]])")


def sanitize_response(text: str) -> str:
    """Strip ```json fences and trailing commas before } or ]. Idempotent."""
    text = _CODE_FENCE.sub("", text)
    text = _TRAILING_COMMA.sub(r"\1", text)
    return text.strip()


def response_text(response: Any) -> str:
    """Text payload of a chat response; content may be a str or a list of parts."""
    content = getattr(response, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


def parse_analysis(text: str) -> FinancialAnalysis:
    """Validate sanitized JSON text against the FinancialAnalysis schema."""
    try:
        return FinancialAnalysis.model_validate_json(text)
    except ValidationError as e:
        raise MalformedResponseError(f"Response does not match the analysis schema: {e}") from e


# ── Analyzer ───────────────────────────────────────────────────────────
class GeminiAnalyzer:
    """Analyzer backed by a Gemini chat model.

    ``llm`` is any object with an async ``ainvoke(messages)``; when omitted,
    the module singleton is used.
    """

    def __init__(self, llm: Optional[Any] = None):
        self._llm = llm

    async def analyze(self, data: bytes, mime_type: str) -> FinancialAnalysis:
        llm = self._llm if self._llm is not None else _get_llm()
        if llm is None:
            raise TransportError("Gemini client is not configured (missing GOOGLE_API_KEY)")

        messages = build_request(data, mime_type)
        try:
            response = await llm.ainvoke(messages)
        except Exception as e:
            raise TransportError(f"Gemini request failed: {e}") from e

        text = response_text(response)
        if not text.strip():
            raise EmptyResponseError("No response text from Gemini")

        analysis = parse_analysis(sanitize_response(text))
        logger.info(
            f"Analysis parsed: DSCR {analysis.dscr:.2f} ({analysis.dscr_verdict}), "
            f"confidence {analysis.confidence_score}"
        )
        return analysis
