# Utilities module
from .config import config, Config
from .errors import (
    InterviewAssistantError,
    ParseError,
    FormatError,
    UnsupportedFileType,
    StorageError,
)
