"""Error taxonomy for intake, analysis and session control.

Intake errors are shown inline and leave the session untouched.
Analysis errors move the session to ``error`` with one generic message;
the detail passed to the constructor is for the logs only.
"""


class DocumentValidationError(Exception):
    """An uploaded file was rejected before analysis."""


class UnsupportedTypeError(DocumentValidationError):
    def __init__(self, mime_type: str | None):
        super().__init__("Please upload a valid PDF or Image file (JPEG, PNG, WEBP).")
        self.mime_type = mime_type


class FileTooLargeError(DocumentValidationError):
    def __init__(self, size: int):
        super().__init__("File size exceeds 10MB limit.")
        self.size = size


class AnalysisError(Exception):
    """The analysis call failed. ``str(err)`` is internal detail."""

    user_message = "Failed to analyze the document. Ensure it contains clear Balance Sheet and Cash Flow data."


class EmptyResponseError(AnalysisError):
    """The model returned no text."""


class MalformedResponseError(AnalysisError):
    """The model's text was not a valid FinancialAnalysis payload."""


class TransportError(AnalysisError):
    """The request never produced a response (network, auth, quota, config)."""


class SessionBusyError(RuntimeError):
    """A file was offered while the session was not idle."""
