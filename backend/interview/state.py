"""
Interview state machine for managing interview flow.
Tracks question progression, the per-question countdown and completion.
"""
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from models.schemas import Answer, Candidate, InterviewSnapshot, Question
from interview.questions import QuestionBank
from interview.scoring import AnswerScorer
from interview.summary import CandidateSummarizer
from storage.candidate_store import CandidateStore
from utils.config import config as default_config, Config

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"


def format_time(seconds: int) -> str:
    """Format seconds as m:ss."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


class InterviewStateMachine:
    """
    Manages the state of an interview session.
    Handles the timer, answer submission and the final scoring.
    """

    def __init__(
        self,
        store: CandidateStore,
        question_bank: Optional[QuestionBank] = None,
        scorer: Optional[AnswerScorer] = None,
        summarizer: Optional[CandidateSummarizer] = None,
        clock: Clock = time.monotonic,
        config: Optional[Config] = None,
    ):
        """
        Initialize the state machine and restore from the store.

        Args:
            store: Candidate store holding the current candidate
            question_bank: Source of the session questions
            scorer: Scores individual answers
            summarizer: Produces the final score and summary
            clock: Returns elapsed seconds; injectable for tests
            config: Configuration override
        """
        self.store = store
        self.config = config or default_config
        self.question_bank = question_bank or QuestionBank(config=self.config)
        self.scorer = scorer or AnswerScorer(config=self.config)
        self.summarizer = summarizer or CandidateSummarizer(self.scorer, self.config)
        self.clock = clock

        # Session state
        self.status = SessionStatus.NOT_STARTED
        self.questions: List[Question] = []
        self.current_question_index: int = 0
        self.time_remaining: int = 0
        self.is_timer_running: bool = False

        # Timing references, in clock seconds
        self.question_started_at: float = 0.0
        self._last_tick_at: float = 0.0

        # Submission guard and unsent answer text
        self.is_submitting: bool = False
        self.draft: str = ""

        # Informational score of the most recent answer
        self.last_answer_score: Optional[float] = None

        self._restore()

    # ========================================
    # Lifecycle
    # ========================================

    def _restore(self):
        candidate = self.store.current_candidate
        if candidate is not None and candidate.is_completed:
            self.status = SessionStatus.COMPLETED
        elif self.has_unfinished_interview():
            logger.info(f"Found unfinished interview for {candidate.name} "
                        f"({len(candidate.answers)} answers)")

    def start(self, candidate: Candidate) -> bool:
        """
        Start an interview for a fresh candidate.

        Returns:
            True if started, False if an interview is already active
        """
        if self.status == SessionStatus.ACTIVE:
            return False
        if candidate.answers or candidate.score is not None:
            raise ValueError("Interview can only start for a candidate without answers")

        self.store.set_current_candidate(candidate)
        self.questions = self.question_bank.select_questions()
        self.status = SessionStatus.ACTIVE
        self.last_answer_score = None
        self._begin_question(0)

        logger.info(f"Interview started for {candidate.name} with {len(self.questions)} questions")
        return True

    def has_unfinished_interview(self) -> bool:
        """Current candidate has answers but no final score."""
        candidate = self.store.current_candidate
        return (
            candidate is not None
            and len(candidate.answers) > 0
            and candidate.score is None
        )

    def resume(self) -> bool:
        """
        Continue an unfinished interview at the next unanswered question.

        The question restarts with its full time limit; time spent on it
        before the restart is not kept.
        """
        if self.status == SessionStatus.ACTIVE or not self.has_unfinished_interview():
            return False

        candidate = self.store.current_candidate
        saved = self.store.interview.questions
        if len(saved) == self.question_bank.question_count():
            self.questions = list(saved)
        else:
            self.questions = self.question_bank.select_questions()

        self.status = SessionStatus.ACTIVE
        index = len(candidate.answers)
        logger.info(f"Resuming interview for {candidate.name} at question {index + 1}")

        if index >= len(self.questions):
            self._complete()
        else:
            self._begin_question(index)
        return True

    def abandon(self):
        """Drop the current candidate and reset without scoring."""
        if self.store.current_candidate is not None:
            logger.info(f"Interview reset for {self.store.current_candidate.name}")
        self.store.clear_current_candidate()
        self.status = SessionStatus.NOT_STARTED
        self.questions = []
        self.current_question_index = 0
        self.time_remaining = 0
        self.is_timer_running = False
        self.draft = ""
        self.last_answer_score = None
        self.store.reset_interview()

    # ========================================
    # Timer
    # ========================================

    def tick(self) -> Optional[Answer]:
        """
        Sample the clock and account whole elapsed seconds.

        Returns:
            The auto-submitted answer if the countdown ran out
        """
        if self.status != SessionStatus.ACTIVE or not self.is_timer_running:
            return None

        elapsed = int(self.clock() - self._last_tick_at)
        if elapsed <= 0:
            return None

        self._last_tick_at += elapsed
        return self.advance_time(elapsed)

    def advance_time(self, seconds: int) -> Optional[Answer]:
        """
        Let time pass on the current question.

        Args:
            seconds: Whole seconds elapsed

        Returns:
            The auto-submitted answer if the countdown reached zero
        """
        if seconds < 0:
            raise ValueError("Time cannot run backwards")
        if self.status != SessionStatus.ACTIVE or not self.is_timer_running:
            return None

        self.time_remaining = max(0, self.time_remaining - int(seconds))
        self._sync()

        if self.time_remaining == 0:
            return self.submit_answer(auto_submit=True)
        return None

    # ========================================
    # Answers
    # ========================================

    def update_draft(self, text: str):
        """Keep the unsent answer text for auto-submit."""
        self.draft = text

    def submit_answer(self, text: Optional[str] = None, auto_submit: bool = False) -> Optional[Answer]:
        """
        Record the answer for the current question.

        Args:
            text: Answer text; defaults to the current draft
            auto_submit: True when triggered by the countdown

        Returns:
            The recorded answer, or None if the submission was dropped
        """
        if self.status != SessionStatus.ACTIVE:
            raise RuntimeError("No active interview")
        if self.is_submitting:
            logger.warning("Submission already in progress, ignoring")
            return None

        text = self.draft if text is None else text
        if not auto_submit and not text.strip():
            logger.warning("Rejected empty answer")
            return None

        self.is_submitting = True
        try:
            self.is_timer_running = False

            question = self.questions[self.current_question_index]
            time_spent = max(0, int(self.clock() - self.question_started_at))
            if auto_submit and not text:
                text = self.config.interview.auto_submit_placeholder

            self.last_answer_score = self.scorer.score_answer(question.text, text, time_spent)

            answer = Answer(
                question=question.text,
                answer_text=text,
                time_spent_seconds=time_spent,
                difficulty=question.difficulty,
            )
            self.store.append_answer(answer)

            if self.current_question_index >= len(self.questions) - 1:
                self._complete()
            else:
                self._begin_question(self.current_question_index + 1)

            return answer
        finally:
            self.is_submitting = False

    # ========================================
    # Internal transitions
    # ========================================

    def _begin_question(self, index: int):
        self.current_question_index = index
        self.time_remaining = self.questions[index].time_limit_seconds
        self.is_timer_running = True
        self.question_started_at = self.clock()
        self._last_tick_at = self.question_started_at
        self.draft = ""
        self._sync()

    def _complete(self):
        candidate = self.store.current_candidate
        score, summary = self.summarizer.score_and_summarize(candidate.name, candidate.answers)
        self.store.complete_current_candidate(score, summary)

        self.status = SessionStatus.COMPLETED
        self.is_timer_running = False
        self.questions = []
        self.current_question_index = 0
        self.time_remaining = 0
        self.draft = ""
        self._sync()

        logger.info(f"Interview completed for {candidate.name}: {score}/10")

    def _sync(self):
        self.store.set_interview(InterviewSnapshot(
            questions=self.questions,
            current_question_index=self.current_question_index,
            is_interview_active=self.status == SessionStatus.ACTIVE,
            time_remaining=self.time_remaining,
            is_timer_running=self.is_timer_running,
            has_unfinished_interview=self.status == SessionStatus.ACTIVE,
        ))

    # ========================================
    # Status
    # ========================================

    @property
    def current_question(self) -> Optional[Question]:
        if self.status != SessionStatus.ACTIVE or not self.questions:
            return None
        return self.questions[self.current_question_index]

    def timer_urgency(self) -> str:
        question = self.current_question
        if question is None:
            return "normal"
        percentage = self.time_remaining / question.time_limit_seconds * 100
        if percentage > 50:
            return "normal"
        if percentage > 20:
            return "warning"
        return "critical"

    def get_status(self) -> Dict[str, Any]:
        """Get current interview status."""
        candidate = self.store.current_candidate
        question = self.current_question
        total = len(self.questions)

        status: Dict[str, Any] = {
            "status": self.status.value,
            "candidate": candidate.to_wire() if candidate else None,
            "has_unfinished_interview": (
                self.status != SessionStatus.ACTIVE and self.has_unfinished_interview()
            ),
            "answers_count": len(candidate.answers) if candidate else 0,
            "last_answer_score": self.last_answer_score,
            "storage_notice": self.store.storage_notice,
        }

        if question is not None:
            status.update({
                "question_number": self.current_question_index + 1,
                "total_questions": total,
                "question": question.to_wire(),
                "is_last_question": self.current_question_index == total - 1,
                "time_remaining": self.time_remaining,
                "time_display": format_time(self.time_remaining),
                "timer_urgency": self.timer_urgency(),
                "is_timer_running": self.is_timer_running,
                "progress": round((self.current_question_index + 1) / total * 100, 1),
            })

        if self.status == SessionStatus.COMPLETED and candidate is not None:
            status.update({
                "score": candidate.score,
                "summary": candidate.summary,
                "total_time_minutes": candidate.total_time_spent // 60,
            })

        return status
