"""
Template-based candidate summaries and profile analysis.
Each tier table maps a threshold to one fixed sentence.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from models.schemas import Answer, Difficulty, ProfileAnalysis
from interview.scoring import AnswerScorer, round_score
from utils.config import config as default_config, Config

logger = logging.getLogger(__name__)


def _pick(value: float, tiers: Sequence[Tuple[Optional[float], str]], strict: bool = False) -> str:
    # A None threshold is the fallback tier
    for threshold, sentence in tiers:
        if threshold is None:
            return sentence
        if (value > threshold) if strict else (value >= threshold):
            return sentence
    return ""


class CandidateSummarizer:
    """
    Builds the narrative summary and the strengths/improvements profile.
    """

    OVERALL_TIERS = [
        (8, "demonstrated exceptional interview performance with comprehensive, well-articulated responses. "),
        (6.5, "showed strong interview skills with solid, thoughtful answers across most questions. "),
        (5, "provided adequate responses but with room for improvement in depth and clarity. "),
        (None, "struggled with several questions and would benefit from additional interview preparation. "),
    ]

    LENGTH_TIERS = [
        (150, "The candidate provided detailed, comprehensive answers showing good communication skills. "),
        (75, "Responses were appropriately detailed with clear communication. "),
        (None, "Answers were brief and could benefit from more specific examples and elaboration. "),
    ]

    # Compared strictly: efficiency must exceed the threshold
    TIME_TIERS = [
        (0.3, "Excellent time management, completing responses efficiently while maintaining quality. "),
        (0, "Good time management with appropriate pacing throughout the interview. "),
        (None, "Used most or all available time, suggesting careful consideration but potentially slower processing. "),
    ]

    HARD_TIERS = [
        (7, "Particularly strong performance on complex questions demonstrates senior-level thinking "
            "and problem-solving abilities."),
        (5, "Handled challenging questions reasonably well with room for growth in complex "
            "problem-solving scenarios."),
        (None, "May need additional support and development when facing complex, strategic challenges."),
    ]

    RATING_TIERS = [
        (8, "Excellent"),
        (6.5, "Good"),
        (5, "Fair"),
        (None, "Needs Improvement"),
    ]

    def __init__(self, scorer: Optional[AnswerScorer] = None, config: Optional[Config] = None):
        self.config = config or default_config
        self.scorer = scorer or AnswerScorer(config=self.config)

    def _rescore(self, answer: Answer) -> float:
        return self.scorer.score_answer(answer.question, answer.answer_text, answer.time_spent_seconds)

    def time_efficiency(self, answers: List[Answer]) -> float:
        """Share of the allowed time left unused, negative when over."""
        allowed = sum(self.config.interview.time_limit_for(a.difficulty.value) for a in answers)
        if allowed == 0:
            return 0.0
        used = sum(a.time_spent_seconds for a in answers)
        return (allowed - used) / allowed

    def summarize(self, name: str, answers: List[Answer], total_score: float) -> str:
        """
        Generate the narrative summary for a finished interview.

        Args:
            name: Candidate name, used as the opening subject
            answers: All answers of the interview
            total_score: Sum of the per-answer scores

        Returns:
            Summary paragraph built from the tier sentences
        """
        count = len(answers)
        avg_score = total_score / count if count else 0.0
        avg_length = sum(len(a.answer_text) for a in answers) / count if count else 0.0

        summary = f"{name} "
        summary += _pick(avg_score, self.OVERALL_TIERS)
        summary += _pick(avg_length, self.LENGTH_TIERS)
        summary += _pick(self.time_efficiency(answers), self.TIME_TIERS, strict=True)

        hard_answers = [a for a in answers if a.difficulty == Difficulty.HARD]
        if hard_answers:
            hard_avg = sum(self._rescore(a) for a in hard_answers) / len(hard_answers)
            summary += _pick(hard_avg, self.HARD_TIERS)

        return summary

    def score_and_summarize(self, name: str, answers: List[Answer]) -> Tuple[float, str]:
        """
        Compute the final score and summary for a finished interview.

        Every answer is scored again here, so the final average can differ
        slightly from the per-answer scores shown during the interview.
        """
        if not answers:
            raise ValueError("Cannot score an interview without answers")

        total = sum(self._rescore(a) for a in answers)
        final_score = round_score(total / len(answers))
        summary = self.summarize(name, answers, total)

        logger.info(f"Scored interview for {name}: {final_score}/10 over {len(answers)} answers")
        return final_score, summary

    def analyze_profile(self, answers: List[Answer]) -> ProfileAnalysis:
        """Derive strengths, improvements and an overall rating."""
        if not answers:
            return ProfileAnalysis(overall_rating=self.RATING_TIERS[-1][1])

        count = len(answers)
        avg_score = sum(self._rescore(a) for a in answers) / count
        avg_length = sum(len(a.answer_text) for a in answers) / count
        avg_time = sum(a.time_spent_seconds for a in answers) / count

        strengths = []
        improvements = []

        if avg_length >= 150:
            strengths.append("Provides detailed, comprehensive responses")
        elif avg_length < 75:
            improvements.append("Could provide more detailed examples and explanations")

        if avg_time <= 45:
            strengths.append("Efficient time management and quick thinking")
        elif avg_time >= 90:
            improvements.append("Could work on being more concise and time-efficient")

        if avg_score >= 7:
            strengths.append("Strong overall interview performance")
        if avg_score >= 6:
            strengths.append("Good communication and articulation skills")

        if avg_score < 6:
            improvements.append("Would benefit from more interview practice and preparation")
        if avg_score < 5:
            improvements.append("Needs significant improvement in response quality and depth")

        return ProfileAnalysis(
            strengths=strengths,
            improvements=improvements,
            overall_rating=_pick(avg_score, self.RATING_TIERS),
        )
