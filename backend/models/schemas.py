"""
Pydantic models for candidates, questions, answers and the persisted documents.
JSON keys keep the camelCase wire names; attributes are snake_case.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Difficulty(str, Enum):
    """Question difficulty tiers, in interview order."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def get_order(cls) -> List["Difficulty"]:
        return [cls.EASY, cls.MEDIUM, cls.HARD]


class WireModel(BaseModel):
    """Base model accepting both attribute names and JSON aliases."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ================================================================
# Interview content
# ================================================================

class Question(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    text: str
    difficulty: Difficulty
    time_limit_seconds: int = Field(..., alias="timeLimit", gt=0)


class Answer(WireModel):
    """A single submitted answer. Never mutated after creation."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question: str
    answer_text: str = Field(..., alias="answer")
    time_spent_seconds: int = Field(..., alias="timeSpent", ge=0)
    difficulty: Difficulty


class Candidate(WireModel):
    """A person's interview record."""

    id: str = Field(..., min_length=1)
    name: str
    email: str
    phone: str
    resume_text: Optional[str] = Field(None, alias="resumeText")
    answers: List[Answer] = Field(default_factory=list)
    score: Optional[float] = Field(None, ge=0, le=10)
    summary: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")

    @model_validator(mode="after")
    def _score_and_summary_together(self) -> "Candidate":
        if (self.score is None) != (self.summary is None):
            raise ValueError("score and summary must be set together")
        return self

    @property
    def is_completed(self) -> bool:
        return self.score is not None

    @property
    def total_time_spent(self) -> int:
        return sum(a.time_spent_seconds for a in self.answers)

    def complete(self, score: float, summary: str):
        """Attach final score and summary in one step."""
        if not 0 <= score <= 10:
            raise ValueError(f"score out of range: {score}")
        if summary is None:
            raise ValueError("summary is required")
        self.score = score
        self.summary = summary


# ================================================================
# Persisted documents
# ================================================================

class InterviewSnapshot(WireModel):
    """Interview slice of the persisted state document."""
    questions: List[Question] = Field(default_factory=list)
    current_question_index: int = Field(0, alias="currentQuestionIndex", ge=0)
    is_interview_active: bool = Field(False, alias="isInterviewActive")
    time_remaining: int = Field(0, alias="timeRemaining", ge=0)
    is_timer_running: bool = Field(False, alias="isTimerRunning")
    has_unfinished_interview: bool = Field(False, alias="hasUnfinishedInterview")


class CandidateSlice(WireModel):
    candidates: List[Candidate] = Field(default_factory=list)
    current_candidate: Optional[Candidate] = Field(None, alias="currentCandidate")


class PersistedState(WireModel):
    """The primary store document."""
    candidate: CandidateSlice = Field(default_factory=CandidateSlice)
    interview: InterviewSnapshot = Field(default_factory=InterviewSnapshot)

    def to_wire(self) -> dict:
        data = super().to_wire()
        # currentCandidate is always present, null when absent
        data["candidate"].setdefault("currentCandidate", None)
        return data


class BackupDocument(WireModel):
    """Versioned export/import container."""
    candidates: List[Candidate]
    export_date: str = Field(..., alias="exportDate")
    version: int
    app_version: Optional[str] = Field(None, alias="appVersion")


# ================================================================
# Collaborator and report models
# ================================================================

class ParsedResume(BaseModel):
    """Best-effort data extracted from an uploaded resume."""
    name: str = ""
    email: str = ""
    phone: str = ""
    resume_text: str = ""

    def missing_fields(self) -> List[str]:
        return [f for f in ("name", "email", "phone") if not getattr(self, f)]


class StorageUsage(BaseModel):
    used_bytes: int
    available_bytes: int
    percentage: float
    nearly_full: bool = False


class ProfileAnalysis(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    overall_rating: str


# ================================================================
# API request models
# ================================================================

class CandidateInfo(BaseModel):
    """Manual entry of candidate details."""
    name: str
    email: str
    phone: str
    resume_text: Optional[str] = Field(None, max_length=100_000)

    @field_validator("name", "email", "phone")
    @classmethod
    def _required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please fill in all required fields.")
        return value


class AnswerRequest(BaseModel):
    text: str = ""


class DraftRequest(BaseModel):
    text: str = ""
