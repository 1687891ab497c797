import os
import tempfile

# Keep the module-level app away from the working directory
os.environ.setdefault("INTERVIEW_DATA_DIR", tempfile.mkdtemp(prefix="interview-tests-"))

import random

import pytest

from models.schemas import Answer, Candidate, Difficulty
from interview.questions import QuestionBank
from interview.scoring import AnswerScorer
from interview.summary import CandidateSummarizer
from interview.state import InterviewStateMachine
from storage.candidate_store import CandidateStore
from storage.kv_store import InMemoryKeyValueStore


RICH_ANSWER = (
    "On my previous project I worked with a small team to solve a hard problem. "
    "We set a clear goal, shared every result openly, and the impact on customers was visible. "
    "I learned to communicate early, to collaborate across functions, and to keep improving our process every week."
)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FixedRandom:
    """random() always returns the same value; 0.5 means no perturbation."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def random(self) -> float:
        return self.value


def make_candidate(**overrides) -> Candidate:
    data = {
        "id": "candidate-1",
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-123-4567",
    }
    data.update(overrides)
    return Candidate(**data)


def make_answer(text: str, difficulty: Difficulty, time_spent: int, question: str = None) -> Answer:
    questions = {
        Difficulty.EASY: "Tell me about yourself and your background.",
        Difficulty.MEDIUM: "How do you approach problem-solving in your work?",
        Difficulty.HARD: "Where do you see yourself in 5 years and how does this role fit into your career goals?",
    }
    return Answer(
        question=question or questions[difficulty],
        answer_text=text,
        time_spent_seconds=time_spent,
        difficulty=difficulty,
    )


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scorer():
    return AnswerScorer(rng=FixedRandom())


@pytest.fixture
def summarizer(scorer):
    return CandidateSummarizer(scorer)


@pytest.fixture
def question_bank():
    return QuestionBank(rng=random.Random(7))


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store():
    return CandidateStore()


@pytest.fixture
def candidate():
    return make_candidate()


@pytest.fixture
def machine(store, question_bank, scorer, summarizer, clock):
    return InterviewStateMachine(
        store,
        question_bank=question_bank,
        scorer=scorer,
        summarizer=summarizer,
        clock=clock,
    )
