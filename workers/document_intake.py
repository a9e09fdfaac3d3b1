"""Document intake: accept one uploaded file and validate type and size.

Works with Streamlit ``UploadedFile`` objects and plain byte payloads from the
REST API. Validation never touches session state; the controller decides what
to do with the result.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Sequence

from config import ACCEPTED_MIME_TYPES, MAX_UPLOAD_BYTES
from errors import FileTooLargeError, UnsupportedTypeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedDocument:
    name: str
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_streamlit(cls, upload: Any) -> "UploadedDocument":
        """Build from a Streamlit ``UploadedFile`` (name, type, getvalue())."""
        return cls(name=upload.name, mime_type=upload.type or "", data=upload.getvalue())


def first_upload(uploads: Any) -> Optional[Any]:
    """Multi-file drops only use the first entry. Empty selection → None."""
    if uploads is None:
        return None
    if isinstance(uploads, Sequence) and not isinstance(uploads, (str, bytes)):
        return uploads[0] if uploads else None
    return uploads


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """'Image/PNG; charset=binary' → 'image/png'."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def validate(document: UploadedDocument) -> UploadedDocument:
    """
    Return the document (MIME type normalized) if it may be analyzed.
    Raises FileTooLargeError (checked first) or UnsupportedTypeError.
    """
    if document.size > MAX_UPLOAD_BYTES:
        logger.info(f"Rejected {document.name}: {document.size} bytes exceeds {MAX_UPLOAD_BYTES}")
        raise FileTooLargeError(document.size)

    mime_type = normalize_mime_type(document.mime_type)
    if mime_type not in ACCEPTED_MIME_TYPES:
        logger.info(f"Rejected {document.name}: unsupported type {document.mime_type!r}")
        raise UnsupportedTypeError(document.mime_type)

    return replace(document, mime_type=mime_type)
