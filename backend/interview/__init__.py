# Interview module
from .questions import QuestionBank, DIFFICULTY_ORDER
from .state import InterviewStateMachine, SessionStatus
from .scoring import AnswerScorer
from .summary import CandidateSummarizer
