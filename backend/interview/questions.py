"""
Question bank: static pools per difficulty and the selection policy.
"""
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from models.schemas import Difficulty, Question
from utils.config import config as default_config, Config


@dataclass
class DifficultyInfo:
    """Information about a single difficulty tier."""
    description: str
    pool: List[str]
    follow_ups: List[str]


# Draw order for a session
DIFFICULTY_ORDER = Difficulty.get_order()


class QuestionBank:
    """
    Draws the fixed question set for an interview session.
    """

    DIFFICULTIES: Dict[Difficulty, DifficultyInfo] = {
        Difficulty.EASY: DifficultyInfo(
            description="Warm-up questions about the candidate",
            pool=[
                "Tell me about yourself and your background.",
                "What are your greatest strengths?",
                "Why are you interested in this position?",
                "What motivates you in your work?",
                "Describe your ideal work environment.",
                "What are your short-term career goals?",
                "How do you handle feedback and criticism?",
                "What makes you unique as a candidate?",
            ],
            follow_ups=[
                "Can you give me a specific example of that?",
                "How did that experience shape your approach to work?",
                "What did you learn from that situation?",
            ],
        ),
        Difficulty.MEDIUM: DifficultyInfo(
            description="Behavioral questions about past situations",
            pool=[
                "Describe a challenging project you worked on and how you overcame obstacles.",
                "How do you handle working under pressure and tight deadlines?",
                "Tell me about a time when you had to work with a difficult team member.",
                "Describe a situation where you had to learn something new quickly.",
                "How do you prioritize tasks when you have multiple deadlines?",
                "Tell me about a time when you made a mistake and how you handled it.",
                "Describe a time when you had to adapt to a significant change at work.",
                "How do you approach problem-solving in your work?",
            ],
            follow_ups=[
                "What would you do differently if you faced that situation again?",
                "How did you measure the success of your approach?",
                "What was the most challenging aspect of that experience?",
            ],
        ),
        Difficulty.HARD: DifficultyInfo(
            description="Strategic and leadership scenarios",
            pool=[
                "Where do you see yourself in 5 years and how does this role fit into your career goals?",
                "Describe a time when you had to lead a team through a difficult situation.",
                "Tell me about a time when you had to make a decision with incomplete information.",
                "How would you handle a situation where you disagreed with your manager?",
                "Describe a time when you had to influence others without having authority over them.",
                "What would you do if you discovered a significant error in a project that was about to be delivered?",
                "How do you stay current with industry trends and continue learning?",
                "Describe a time when you had to balance competing priorities from different stakeholders.",
            ],
            follow_ups=[
                "How did you ensure stakeholder buy-in for your decision?",
                "What long-term impact did your actions have on the organization?",
                "How do you think this experience prepared you for future leadership roles?",
            ],
        ),
    }

    def __init__(self, rng: Optional[random.Random] = None, config: Optional[Config] = None):
        self.rng = rng or random.Random()
        self.config = config or default_config

    def time_limit_for(self, difficulty: Difficulty) -> int:
        return self.config.interview.time_limit_for(difficulty.value)

    def select_questions(self) -> List[Question]:
        """
        Draw the questions for one session.

        Returns:
            Questions per difficulty drawn without replacement, grouped
            Easy, Medium, Hard
        """
        per_difficulty = self.config.interview.questions_per_difficulty
        selected = []

        for difficulty in DIFFICULTY_ORDER:
            info = self.DIFFICULTIES[difficulty]
            texts = self.rng.sample(info.pool, per_difficulty)
            for index, text in enumerate(texts, start=1):
                selected.append(Question(
                    id=f"{difficulty.value.lower()}_{index}",
                    text=text,
                    difficulty=difficulty,
                    time_limit_seconds=self.time_limit_for(difficulty),
                ))

        return selected

    def question_count(self) -> int:
        return self.config.interview.questions_per_difficulty * len(DIFFICULTY_ORDER)

    def follow_up(self, difficulty: Difficulty) -> str:
        """Pick a canned follow-up prompt for a difficulty tier."""
        return self.rng.choice(self.DIFFICULTIES[difficulty].follow_ups)

    def get_all_difficulties_info(self) -> List[Dict[str, object]]:
        """Get information about all difficulty tiers."""
        return [
            {
                "difficulty": difficulty.value,
                "description": self.DIFFICULTIES[difficulty].description,
                "time_limit_seconds": self.time_limit_for(difficulty),
                "pool_size": len(self.DIFFICULTIES[difficulty].pool),
            }
            for difficulty in DIFFICULTY_ORDER
        ]
