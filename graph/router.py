"""Deterministic router: NO LLM calls, pure status-based branching."""

from typing import Literal

from langgraph.graph import END

from graph.state import SessionState, SessionStatus


# All valid destinations for add_conditional_edges
RouterDest = Literal["upload", "analyze", "__end__"]

# Mapping: status → node that moves the session forward
STATUS_NODE_MAP: dict[SessionStatus, str] = {
    SessionStatus.UPLOADING: "upload",
    SessionStatus.ANALYZING: "analyze",
}


def router(state: SessionState) -> RouterDest:
    """
    Rule-based router. Called via add_conditional_edges from START and after
    every node. IDLE, COMPLETE and ERROR have no forward edge: the graph stops
    and only an explicit reset leaves COMPLETE or ERROR.
    """
    return STATUS_NODE_MAP.get(state["status"], END)
