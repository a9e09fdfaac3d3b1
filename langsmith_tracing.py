"""LangSmith tracing: one analysis run = one trace."""

import logging
import os
from contextlib import contextmanager

import langsmith as ls
from langsmith.run_trees import RunTree

from config import LANGSMITH_TRACING, LANGSMITH_PROJECT

logger = logging.getLogger(__name__)


def _ensure_env():
    """Ensure LangSmith env vars are set when tracing is enabled."""
    if LANGSMITH_TRACING:
        os.environ.setdefault("LANGCHAIN_TRACING_V2", "true")
        os.environ.setdefault("LANGCHAIN_PROJECT", LANGSMITH_PROJECT)


@contextmanager
def analysis_trace(file_name: str, mime_type: str = "", enabled: bool = LANGSMITH_TRACING):
    """
    Create a parent trace for one analysis. The Gemini call made inside this
    context is grouped under it. No-op unless LANGSMITH_TRACING is on.
    """
    if not enabled:
        yield None
        return

    _ensure_env()
    metadata = {"file_name": file_name, "mime_type": mime_type}
    try:
        root = RunTree(
            name="credit_analysis",
            run_type="chain",
            inputs={"file_name": file_name, "mime_type": mime_type},
            project_name=LANGSMITH_PROJECT,
        )
        root.add_metadata(metadata)
        root.add_tags(["credit-analyzer", "analysis"])
        root.post()
    except Exception as e:
        logger.warning(f"Failed to open LangSmith trace for {file_name}, running untraced: {e}")
        yield None
        return

    try:
        with ls.tracing_context(
            project_name=LANGSMITH_PROJECT,
            enabled=True,
            parent=root,
            metadata=metadata,
            tags=["credit-analyzer", "analysis"],
        ):
            yield str(root.id)
    finally:
        # Closing the trace must never break the session
        try:
            root.end()
            root.patch()
        except Exception as e:
            logger.warning(f"Failed to close LangSmith trace for {file_name}: {e}")
