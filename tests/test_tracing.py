import pytest

import langsmith_tracing
from langsmith_tracing import analysis_trace


class UnreachableRunTree:
    def __init__(self, **kwargs):
        self.id = "run-1"

    def add_metadata(self, metadata):
        pass

    def add_tags(self, tags):
        pass

    def post(self):
        raise ConnectionError("api.smith.langchain.com unreachable")


def test_disabled_trace_yields_nothing():
    with analysis_trace("statement.pdf", "application/pdf", enabled=False) as trace_id:
        assert trace_id is None


def test_failed_trace_setup_runs_untraced(monkeypatch):
    monkeypatch.setattr(langsmith_tracing, "RunTree", UnreachableRunTree)
    ran = []
    with analysis_trace("statement.pdf", "application/pdf", enabled=True) as trace_id:
        ran.append(trace_id)
    assert ran == [None]


def test_failed_trace_setup_still_propagates_body_errors(monkeypatch):
    monkeypatch.setattr(langsmith_tracing, "RunTree", UnreachableRunTree)
    with pytest.raises(KeyError):
        with analysis_trace("statement.pdf", enabled=True):
            raise KeyError("dscr")
