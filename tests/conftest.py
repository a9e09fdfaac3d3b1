import json

import pytest
from langchain_core.messages import AIMessage

from errors import TransportError
from graph.models import FinancialAnalysis
from workers.document_intake import UploadedDocument

PDF_MAGIC = b"%PDF-1.7\n"


def sample_payload(**overrides):
    payload = {
        "operatingCashFlow": 1_400_000,
        "totalDebtService": 1_000_000,
        "dscr": 1.40,
        "dscrVerdict": "APPROVED",
        "fundedDebt": 3_600_000,
        "ebitda": 2_000_000,
        "debtToEbitda": 1.8,
        "leverageVerdict": "SAFE",
        "currentAssets": 1_500_000,
        "currentLiabilities": 1_000_000,
        "currentRatio": 1.5,
        "liquidityVerdict": "SAFE",
        "totalLiabilities": 4_000_000,
        "totalEquity": 5_000_000,
        "debtToEquity": 0.8,
        "solvencyVerdict": "SAFE",
        "currency": "USD",
        "period": "FY2024",
        "summary": "Strong coverage, moderate leverage, adequate liquidity.",
        "confidenceScore": 0.92,
    }
    payload.update(overrides)
    return payload


def make_document(size=2 * 1024 * 1024, mime_type="application/pdf", name="statement.pdf"):
    data = PDF_MAGIC + b"0" * max(size - len(PDF_MAGIC), 0)
    return UploadedDocument(name=name, mime_type=mime_type, data=data[:size])


class FakeAnalyzer:
    """Records every call; returns a fixed analysis or raises a fixed error."""

    def __init__(self, result=None, error=None):
        self.result = result if result is not None else FinancialAnalysis.model_validate(sample_payload())
        self.error = error
        self.calls = []

    async def analyze(self, data, mime_type):
        self.calls.append((len(data), mime_type))
        if self.error is not None:
            raise self.error
        return self.result


class StubLLM:
    """Stands in for the Gemini chat model: records messages, returns canned content."""

    def __init__(self, content="", error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.content)


@pytest.fixture
def payload():
    return sample_payload()


@pytest.fixture
def payload_json(payload):
    return json.dumps(payload)


@pytest.fixture
def analysis(payload):
    return FinancialAnalysis.model_validate(payload)


@pytest.fixture
def document():
    return make_document()


@pytest.fixture
def fake_analyzer():
    return FakeAnalyzer()


@pytest.fixture
def failing_analyzer():
    return FakeAnalyzer(error=TransportError("connection reset by peer"))
