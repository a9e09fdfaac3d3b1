"""Graph assembly: builds and compiles the SessionState graph."""

from functools import partial

from langgraph.graph import StateGraph, START

from config import UPLOAD_DELAY_SECONDS
from graph.llm import Analyzer
from graph.router import router
from graph.session_nodes import analyze_node, upload_node
from graph.state import SessionState


def build_graph(analyzer: Analyzer, upload_delay: float = UPLOAD_DELAY_SECONDS):
    """
    Assemble the uploading → analyzing → complete|error graph.
    Returns a compiled graph ready for invoke/stream.
    """
    builder = StateGraph(SessionState)

    # ── Register nodes ──────────────────────────────────────────────
    builder.add_node("upload", partial(upload_node, delay=upload_delay))
    builder.add_node("analyze", partial(analyze_node, analyzer=analyzer))

    # ── Entry + every node → router ─────────────────────────────────
    builder.add_conditional_edges(START, router)
    builder.add_conditional_edges("upload", router)
    builder.add_conditional_edges("analyze", router)

    # No checkpointer: nothing is persisted between sessions
    return builder.compile()
