"""Session controller: one upload session, driven through the compiled graph.

Holds the only mutable state in the app (the current SessionState snapshot).
Intake happens here, outside the graph, because a rejected file must leave
the session untouched.
"""

import logging
from typing import Any, AsyncIterator, Optional

from config import UPLOAD_DELAY_SECONDS
from errors import AnalysisError, DocumentValidationError, SessionBusyError
from graph.builder import build_graph
from graph.llm import Analyzer, GeminiAnalyzer
from graph.state import SessionState, SessionStatus, initial_state
from langsmith_tracing import analysis_trace
from workers.document_intake import UploadedDocument, validate

logger = logging.getLogger(__name__)


class SessionController:
    def __init__(self, analyzer: Optional[Analyzer] = None, upload_delay: float = UPLOAD_DELAY_SECONDS):
        self._graph = build_graph(analyzer if analyzer is not None else GeminiAnalyzer(), upload_delay)
        self.state: SessionState = initial_state()
        self.intake_error: Optional[str] = None

    @property
    def status(self) -> SessionStatus:
        return self.state["status"]

    @property
    def busy(self) -> bool:
        return self.status in (SessionStatus.UPLOADING, SessionStatus.ANALYZING)

    def accept(self, document: UploadedDocument) -> UploadedDocument:
        """
        IDLE → UPLOADING if the document passes intake validation; returns the validated document.
        A rejected document sets ``intake_error`` and re-raises the classified
        DocumentValidationError; status and file name stay as they were.
        """
        if self.status != SessionStatus.IDLE:
            raise SessionBusyError(f"Cannot accept {document.name!r} while session is {self.status.value}")

        try:
            document = validate(document)
        except DocumentValidationError as e:
            self.intake_error = str(e)
            raise

        self.intake_error = None
        self.state = SessionState(
            status=SessionStatus.UPLOADING,
            file_name=document.name,
            document=document,
            result=None,
            error_message=None,
        )
        logger.info(f"Accepted {document.name} ({document.mime_type}, {document.size} bytes)")
        return document

    async def run(self) -> AsyncIterator[SessionState]:
        """
        Drive an accepted session to COMPLETE or ERROR, yielding the snapshot
        each time the status changes (starting with UPLOADING).

        If the run ends early (the consumer stops iterating, the task is
        cancelled or tracing fails) the session is moved to ERROR so the user
        can reset it.
        """
        if self.status != SessionStatus.UPLOADING:
            return

        try:
            yield self.state
            with analysis_trace(self.state["file_name"], self.state["document"].mime_type):
                async for snapshot in self._graph.astream(self.state, stream_mode="values"):
                    if not self.busy:
                        # Session was interrupted or reset from outside this run
                        break
                    changed = snapshot["status"] != self.status
                    self.state = SessionState(**{**self.state, **snapshot})
                    if changed:
                        yield self.state
        finally:
            self.interrupt()

    async def submit(self, document: UploadedDocument) -> SessionState:
        """Accept and run to completion. Returns the final snapshot."""
        self.accept(document)
        async for _ in self.run():
            pass
        return self.state

    def interrupt(self) -> None:
        """UPLOADING | ANALYZING → ERROR with the generic message. No-op otherwise."""
        if not self.busy:
            return
        logger.error(f"Analysis of {self.state['file_name']} ended while {self.status.value}")
        self.state = SessionState(
            **{**self.state, "status": SessionStatus.ERROR, "result": None, "error_message": AnalysisError.user_message}
        )

    def reset(self) -> None:
        """
        COMPLETE | ERROR → IDLE. Clears file name, result, error and intake error.
        Raises SessionBusyError while an analysis is in flight; call interrupt() first.
        """
        if self.busy:
            raise SessionBusyError(f"Cannot reset while session is {self.status.value}")
        self.state = initial_state()
        self.intake_error = None


def snapshot_view(state: SessionState) -> dict[str, Any]:
    """JSON-friendly view of a snapshot (document bytes left out, result keys camelCase)."""
    result = state["result"]
    return {
        "status": state["status"].value,
        "fileName": state["file_name"],
        "result": result.model_dump(by_alias=True) if result is not None else None,
        "errorMessage": state["error_message"],
    }
