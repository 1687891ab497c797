import random
from collections import Counter

from models.schemas import Difficulty
from interview.questions import QuestionBank, DIFFICULTY_ORDER


def test_select_questions_draws_two_per_difficulty(question_bank):
    questions = question_bank.select_questions()

    assert len(questions) == 6
    assert Counter(q.difficulty for q in questions) == {
        Difficulty.EASY: 2,
        Difficulty.MEDIUM: 2,
        Difficulty.HARD: 2,
    }


def test_questions_are_grouped_in_difficulty_order(question_bank):
    questions = question_bank.select_questions()

    assert [q.difficulty for q in questions] == [
        Difficulty.EASY, Difficulty.EASY,
        Difficulty.MEDIUM, Difficulty.MEDIUM,
        Difficulty.HARD, Difficulty.HARD,
    ]
    assert [q.id for q in questions] == [
        "easy_1", "easy_2", "medium_1", "medium_2", "hard_1", "hard_2",
    ]


def test_time_limits_follow_difficulty():
    for seed in range(20):
        questions = QuestionBank(rng=random.Random(seed)).select_questions()
        limits = {q.difficulty: q.time_limit_seconds for q in questions}
        assert limits == {Difficulty.EASY: 20, Difficulty.MEDIUM: 60, Difficulty.HARD: 120}


def test_questions_drawn_without_replacement_from_their_pool():
    for seed in range(50):
        questions = QuestionBank(rng=random.Random(seed)).select_questions()
        for difficulty in DIFFICULTY_ORDER:
            texts = [q.text for q in questions if q.difficulty == difficulty]
            assert len(set(texts)) == 2
            assert set(texts) <= set(QuestionBank.DIFFICULTIES[difficulty].pool)


def test_same_seed_gives_same_questions():
    first = QuestionBank(rng=random.Random(11)).select_questions()
    second = QuestionBank(rng=random.Random(11)).select_questions()
    assert first == second


def test_pools_have_eight_questions_each():
    for info in QuestionBank.DIFFICULTIES.values():
        assert len(info.pool) == 8


def test_follow_up_comes_from_difficulty_templates(question_bank):
    prompt = question_bank.follow_up(Difficulty.HARD)
    assert prompt in QuestionBank.DIFFICULTIES[Difficulty.HARD].follow_ups


def test_difficulties_info(question_bank):
    info = question_bank.get_all_difficulties_info()
    assert [i["difficulty"] for i in info] == ["Easy", "Medium", "Hard"]
    assert [i["time_limit_seconds"] for i in info] == [20, 60, 120]
