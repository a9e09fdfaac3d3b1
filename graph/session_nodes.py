"""Session nodes: the cosmetic upload pause and the single analysis call."""

import asyncio
import logging
from typing import Any, Dict

from errors import AnalysisError
from graph.llm import Analyzer
from graph.state import SessionState, SessionStatus

logger = logging.getLogger(__name__)


async def upload_node(state: SessionState, delay: float) -> Dict[str, Any]:
    """UPLOADING → ANALYZING after a fixed, non-cancelable pause."""
    await asyncio.sleep(delay)
    return {"status": SessionStatus.ANALYZING}


async def analyze_node(state: SessionState, analyzer: Analyzer) -> Dict[str, Any]:
    """
    ANALYZING → COMPLETE | ERROR. Exactly one analyzer call, no retry.
    The cause of a failure is logged; the session only gets the generic message.
    """
    document = state["document"]
    try:
        result = await analyzer.analyze(document.data, document.mime_type)
    except AnalysisError as e:
        logger.error(f"Analysis failed for {document.name} ({type(e).__name__}): {e}")
        return {"status": SessionStatus.ERROR, "result": None, "error_message": AnalysisError.user_message}
    except Exception as e:
        logger.error(f"Unexpected analyzer error for {document.name}: {e}", exc_info=True)
        return {"status": SessionStatus.ERROR, "result": None, "error_message": AnalysisError.user_message}

    logger.info(f"Analysis complete for {document.name}")
    return {"status": SessionStatus.COMPLETE, "result": result, "error_message": None}
