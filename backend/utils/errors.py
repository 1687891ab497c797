"""
Error taxonomy for the Interview Assistant.
Every error here is recoverable at the API boundary.
"""


class InterviewAssistantError(Exception):
    """Base class for recoverable application errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(InterviewAssistantError):
    """Input document is not well-formed."""


class FormatError(InterviewAssistantError):
    """Input document is well-formed but does not match the backup schema."""


class UnsupportedFileType(InterviewAssistantError):
    """Uploaded file is neither a PDF nor a DOCX document."""

    status_code = 415


class StorageError(InterviewAssistantError):
    """Persistent read/write failure, e.g. quota exceeded."""

    status_code = 507
