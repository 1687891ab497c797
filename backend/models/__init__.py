# Data models
from .schemas import (
    Difficulty,
    Question,
    Answer,
    Candidate,
    InterviewSnapshot,
    CandidateSlice,
    PersistedState,
    BackupDocument,
    ParsedResume,
    StorageUsage,
    ProfileAnalysis,
    CandidateInfo,
    AnswerRequest,
    DraftRequest,
)
