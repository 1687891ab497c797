"""
Answer scoring and evaluation system.
Rule tables map an answer to four sub-scores summed into a 0-10 score.
"""
import math
import random
from typing import List, Optional, Tuple
from dataclasses import dataclass

from models.schemas import Difficulty
from utils.config import config as default_config, Config


@dataclass
class ScoreBreakdown:
    """Detailed score breakdown for an answer."""
    length: int
    word_count: int
    time_efficiency: int
    content: int
    perturbation: float
    final_score: float

    @property
    def base_score(self) -> int:
        return self.length + self.word_count + self.time_efficiency + self.content


def round_score(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _tier(value: float, tiers: List[Tuple[float, int]]) -> int:
    # Tiers are ordered from the highest threshold down
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return 0


class AnswerScorer:
    """
    Scores candidate answers with keyword and length heuristics.
    The random source is injectable for reproducible scores.
    """

    # (minimum trimmed characters, points)
    LENGTH_TIERS = [(200, 3), (100, 2), (50, 1)]

    # (minimum words, points)
    WORD_TIERS = [(40, 2), (20, 1)]

    # (maximum time ratio, points)
    TIME_TIERS = [(0.5, 2), (0.8, 1)]

    # (minimum keyword matches, points)
    CONTENT_TIERS = [(5, 3), (3, 2), (1, 1)]

    POSITIVE_KEYWORDS = [
        "experience", "skills", "team", "project", "challenge",
        "solution", "learn", "improve", "achieve", "success",
        "collaborate", "communicate", "leadership", "problem", "solve",
        "goal", "result", "impact", "growth", "development",
    ]

    # Checked in order; anything unmatched is Medium
    DIFFICULTY_INDICATORS = [
        (Difficulty.HARD, ["5 years", "lead a team", "incomplete information", "disagreed with manager"]),
        (Difficulty.EASY, ["tell me about yourself", "strengths", "motivates you", "ideal work"]),
    ]

    def __init__(self, rng: Optional[random.Random] = None, config: Optional[Config] = None):
        self.config = config or default_config
        if rng is None:
            rng = random.Random(self.config.scoring.seed)
        self.rng = rng

    @classmethod
    def classify_question(cls, question: str) -> Difficulty:
        """Guess the difficulty of a question from its wording."""
        lowered = question.lower()
        for difficulty, indicators in cls.DIFFICULTY_INDICATORS:
            if any(indicator in lowered for indicator in indicators):
                return difficulty
        return Difficulty.MEDIUM

    @classmethod
    def count_keywords(cls, text: str) -> int:
        lowered = text.lower()
        return sum(1 for keyword in cls.POSITIVE_KEYWORDS if keyword in lowered)

    def expected_time(self, question: str) -> int:
        return self.config.interview.time_limit_for(self.classify_question(question).value)

    def time_efficiency_score(self, question: str, time_spent: int) -> int:
        ratio = time_spent / self.expected_time(question)
        for max_ratio, points in self.TIME_TIERS:
            if ratio <= max_ratio:
                return points
        return 0

    def get_score_breakdown(self, question: str, answer: str, time_spent: int) -> ScoreBreakdown:
        """
        Score an answer and keep every component.

        Args:
            question: The question text
            answer: The candidate's answer
            time_spent: Seconds spent on the answer

        Returns:
            ScoreBreakdown with sub-scores and the final clamped score
        """
        trimmed = answer.strip()
        words = [w for w in trimmed.split() if w]

        length = _tier(len(trimmed), self.LENGTH_TIERS)
        word_count = _tier(len(words), self.WORD_TIERS)
        time_efficiency = self.time_efficiency_score(question, time_spent)
        content = _tier(self.count_keywords(trimmed), self.CONTENT_TIERS)

        spread = self.config.scoring.random_spread
        perturbation = (self.rng.random() - 0.5) * 2 * spread
        total = length + word_count + time_efficiency + content + perturbation

        return ScoreBreakdown(
            length=length,
            word_count=word_count,
            time_efficiency=time_efficiency,
            content=content,
            perturbation=perturbation,
            final_score=round_score(max(0.0, min(10.0, total))),
        )

    def score_answer(self, question: str, answer: str, time_spent: int) -> float:
        """Score an answer from 0-10 with one decimal."""
        return self.get_score_breakdown(question, answer, time_spent).final_score
