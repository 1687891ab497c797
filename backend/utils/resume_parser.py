"""
Best-effort resume parsing.
Only PDF and DOCX uploads are accepted; extraction is a lightweight mock
that pulls contact details with regular expressions.
"""
import logging
import re
from pathlib import PurePath
from typing import Optional

from models.schemas import ParsedResume
from utils.errors import UnsupportedFileType

logger = logging.getLogger(__name__)


class ResumeParser:
    """
    Extracts name, email and phone from an uploaded resume.
    Any field may come back empty, which signals manual entry.
    """

    ALLOWED_TYPES = {
        "application/pdf": ".pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    }

    # Content types browsers send when they cannot tell
    GENERIC_TYPES = {"", "application/octet-stream"}

    EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
    PHONE_PATTERN = re.compile(r"\d{3}[-.]?\d{3}[-.]?\d{4}")

    NAME_PREFIX = re.compile(r"^(resume|cv)[-_\s]*", re.IGNORECASE)

    def check_file_type(self, filename: str, content_type: Optional[str]) -> str:
        """
        Resolve the document type of an upload.

        Raises:
            UnsupportedFileType: neither PDF nor DOCX
        """
        content_type = (content_type or "").split(";")[0].strip().lower()
        if content_type in self.ALLOWED_TYPES:
            return content_type

        if content_type in self.GENERIC_TYPES:
            suffix = PurePath(filename or "").suffix.lower()
            for allowed, extension in self.ALLOWED_TYPES.items():
                if suffix == extension:
                    return allowed

        raise UnsupportedFileType("Please upload a PDF or DOCX file.")

    def parse(self, filename: str, content_type: Optional[str], data: bytes) -> ParsedResume:
        """
        Parse an uploaded resume.

        Args:
            filename: Original file name, used to guess the candidate name
            content_type: Declared MIME type of the upload
            data: Raw file bytes

        Returns:
            ParsedResume with whatever could be extracted
        """
        resolved_type = self.check_file_type(filename, content_type)
        content = data.decode("utf-8", errors="ignore")

        parsed = ParsedResume(
            name=self.extract_name(filename),
            email=self._first_match(self.EMAIL_PATTERN, content),
            phone=self._first_match(self.PHONE_PATTERN, content),
            resume_text=(
                f"Resume content from {filename}\n\n"
                f"File type: {resolved_type}\n"
                f"File size: {len(data)} bytes"
            ),
        )

        missing = parsed.missing_fields()
        if missing:
            logger.info(f"Resume {filename} is missing: {', '.join(missing)}")
        return parsed

    @classmethod
    def extract_name(cls, filename: str) -> str:
        """Guess a name from the file name, e.g. resume_jane-doe.pdf."""
        stem = re.sub(r"\.(pdf|docx)$", "", PurePath(filename or "").name, flags=re.IGNORECASE)
        stem = cls.NAME_PREFIX.sub("", stem)
        stem = re.sub(r"[-_]", " ", stem).strip()
        return " ".join(word.capitalize() for word in stem.split())

    @staticmethod
    def _first_match(pattern: re.Pattern, content: str) -> str:
        match = pattern.search(content)
        return match.group() if match else ""
