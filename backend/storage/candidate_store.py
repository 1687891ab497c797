"""
Candidate store: owns every candidate record, the current candidate and
the persisted interview snapshot. Observers run after each commit.
"""
import json
import logging
from typing import Any, Callable, List, Optional

from models.schemas import (
    Answer,
    Candidate,
    CandidateSlice,
    InterviewSnapshot,
    PersistedState,
)
from storage.kv_store import KeyValueStore
from utils.config import config
from utils.errors import StorageError

logger = logging.getLogger(__name__)

Observer = Callable[["CandidateStore"], None]


class CandidateStore:
    """
    Single mutable state document for candidates and the interview slice.
    """

    def __init__(self, state: Optional[PersistedState] = None):
        state = state or PersistedState()
        self.candidates: List[Candidate] = list(state.candidate.candidates)
        self.current_candidate: Optional[Candidate] = state.candidate.current_candidate
        self.interview: InterviewSnapshot = state.interview

        self._observers: List[Observer] = []

        # Last persistence failure, shown to the user until a save succeeds
        self.storage_notice: Optional[str] = None

    # ========================================
    # Observers
    # ========================================

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a function that removes it."""
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _commit(self):
        for observer in list(self._observers):
            observer(self)

    # ========================================
    # Current candidate
    # ========================================

    def set_current_candidate(self, candidate: Candidate):
        self.current_candidate = candidate
        self._commit()

    def update_current_candidate(self, **fields: Any):
        if self.current_candidate is None:
            return
        _apply_updates(self.current_candidate, fields)
        self._commit()

    def append_answer(self, answer: Answer):
        if self.current_candidate is None:
            raise RuntimeError("No current candidate to record an answer for")
        self.current_candidate.answers.append(answer)
        self._commit()

    def complete_current_candidate(self, score: float, summary: str) -> Candidate:
        """Attach score and summary and file the candidate in one commit."""
        candidate = self.current_candidate
        if candidate is None:
            raise RuntimeError("No current candidate to complete")

        candidate.complete(score, summary)

        for index, existing in enumerate(self.candidates):
            if existing.id == candidate.id:
                self.candidates[index] = candidate
                break
        else:
            self.candidates.append(candidate)

        self._commit()
        return candidate

    def clear_current_candidate(self):
        self.current_candidate = None
        self._commit()

    # ========================================
    # Candidate collection
    # ========================================

    def add_candidate(self, candidate: Candidate):
        self.candidates.append(candidate)
        self._commit()

    def add_candidates(self, candidates: List[Candidate]):
        self.candidates.extend(candidates)
        self._commit()

    def update_candidate(self, candidate_id: str, **fields: Any) -> Optional[Candidate]:
        candidate = self.get_candidate(candidate_id)
        if candidate is None:
            return None
        _apply_updates(candidate, fields)
        self._commit()
        return candidate

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        return next((c for c in self.candidates if c.id == candidate_id), None)

    def search(self, term: str = "") -> List[Candidate]:
        """Case-insensitive match on name or email."""
        needle = (term or "").strip().lower()
        if not needle:
            return list(self.candidates)
        return [
            c for c in self.candidates
            if needle in c.name.lower() or needle in c.email.lower()
        ]

    @property
    def completed_count(self) -> int:
        return sum(1 for c in self.candidates if c.is_completed)

    # ========================================
    # Interview slice
    # ========================================

    def set_interview(self, snapshot: InterviewSnapshot):
        self.interview = snapshot
        self._commit()

    def reset_interview(self):
        self.interview = InterviewSnapshot()
        self._commit()

    # ========================================
    # Serialization
    # ========================================

    @classmethod
    def from_state(cls, state: Optional[PersistedState]) -> "CandidateStore":
        return cls(state)

    def to_state(self) -> PersistedState:
        return PersistedState(
            candidate=CandidateSlice(
                candidates=self.candidates,
                current_candidate=self.current_candidate,
            ),
            interview=self.interview,
        )

    def clear_all(self):
        """Drop every record and the interview slice."""
        self.candidates = []
        self.current_candidate = None
        self.interview = InterviewSnapshot()
        self._commit()


def _apply_updates(candidate: Candidate, fields: dict):
    # Validate the merged record before touching the live object
    merged = Candidate.model_validate({**candidate.model_dump(), **fields})
    for name in fields:
        setattr(candidate, name, getattr(merged, name))


class StatePersistence:
    """
    Observer that rewrites the whole state document after every commit.
    """

    def __init__(self, kv: KeyValueStore, key: Optional[str] = None):
        self.kv = kv
        self.key = key or config.storage.state_key

    def serialize(self, store: CandidateStore) -> str:
        return json.dumps(store.to_state().to_wire())

    def save(self, store: CandidateStore):
        try:
            self.kv.set(self.key, self.serialize(store))
            store.storage_notice = None
        except StorageError as e:
            logger.error(f"Could not save state: {e}")
            store.storage_notice = e.message

    __call__ = save

    def load(self) -> Optional[PersistedState]:
        """
        Read the persisted document.

        Returns:
            The parsed state, or None when absent or corrupt. A corrupt
            document is removed so the next save starts clean.
        """
        try:
            raw = self.kv.get(self.key)
        except StorageError as e:
            logger.error(f"Could not load state: {e}")
            return None
        if raw is None:
            return None

        try:
            return PersistedState.model_validate(json.loads(raw))
        except (ValueError, RecursionError) as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            logger.warning(f"Discarding corrupt state document '{self.key}': {e}")
            try:
                self.kv.remove(self.key)
            except StorageError as remove_error:
                logger.error(f"Could not remove corrupt state document: {remove_error}")
            return None

    def clear(self):
        self.kv.remove(self.key)


def load_store(kv: KeyValueStore, key: Optional[str] = None) -> CandidateStore:
    """Build a store from persisted state and keep it persisted."""
    persistence = StatePersistence(kv, key)
    store = CandidateStore.from_state(persistence.load())
    store.subscribe(persistence)
    logger.info(f"Loaded candidate store with {len(store.candidates)} candidates")
    return store
