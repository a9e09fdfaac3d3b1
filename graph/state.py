"""SessionState schema: single source of truth for one upload session."""

from enum import Enum
from typing import TypedDict, Optional

from graph.models import FinancialAnalysis
from workers.document_intake import UploadedDocument


class SessionStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    ERROR = "error"


class SessionState(TypedDict):
    """Flat state dict for the idle → uploading → analyzing → complete|error flow."""

    status: SessionStatus
    file_name: Optional[str]                 # Set once a file is accepted
    document: Optional[UploadedDocument]     # Carried from intake to the analyze node
    result: Optional[FinancialAnalysis]      # Only in COMPLETE
    error_message: Optional[str]             # Only in ERROR


def initial_state() -> SessionState:
    """Factory: returns a clean idle session."""
    return SessionState(
        status=SessionStatus.IDLE,
        file_name=None,
        document=None,
        result=None,
        error_message=None,
    )
