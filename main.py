"""FastAPI entrypoint: exposes the credit analysis session via REST."""

from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from pydantic import BaseModel

import logger_config  # noqa: F401  (configures logging)
from config import HOST, PORT
from errors import FileTooLargeError, UnsupportedTypeError
from graph.llm import Analyzer, GeminiAnalyzer
from graph.session import SessionController, snapshot_view
from graph.state import SessionStatus
from workers.document_intake import UploadedDocument

# ── App ─────────────────────────────────────────────────────────────────
app = FastAPI(title="Loan AI Analyzer", version="1.0.0")


# ── Response models ─────────────────────────────────────────────────────
class SessionResponse(BaseModel):
    status: str
    fileName: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    errorMessage: Optional[str] = None


# ── Dependencies ────────────────────────────────────────────────────────
def get_analyzer() -> Analyzer:
    """Overridden in tests with a fake analyzer."""
    return GeminiAnalyzer()


# ── Endpoints ───────────────────────────────────────────────────────────
@app.get("/")
def root():
    return {"message": "Loan AI Analyzer", "version": app.version, "status": "running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.post("/analysis", response_model=SessionResponse)
async def analyze_statement(
    file: UploadFile = File(..., description="Financial statement (PDF, JPEG, PNG or WEBP)"),
    analyzer: Analyzer = Depends(get_analyzer),
):
    """Run one upload session for the file and return its final snapshot."""
    document = UploadedDocument(
        name=file.filename or "statement",
        mime_type=file.content_type or "",
        data=await file.read(),
    )

    # One controller per request: nothing is shared or persisted between uploads
    controller = SessionController(analyzer=analyzer, upload_delay=0)

    # Intake errors map to HTTP status codes instead of an inline message
    try:
        state = await controller.submit(document)
    except FileTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except UnsupportedTypeError as e:
        raise HTTPException(status_code=415, detail=str(e))

    if state["status"] == SessionStatus.ERROR:
        raise HTTPException(status_code=502, detail=state["error_message"])
    return SessionResponse(**snapshot_view(state))


# ── Run ─────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True, log_config=None)
