import pytest

from conftest import RICH_ANSWER, make_answer, make_candidate
from models.schemas import Difficulty, Question
from interview.questions import QuestionBank
from interview.state import InterviewStateMachine, SessionStatus, format_time
from storage.candidate_store import load_store

PLACEHOLDER = "No answer provided (time expired)"


def build_machine(store, question_bank, scorer, summarizer, clock):
    return InterviewStateMachine(
        store,
        question_bank=question_bank,
        scorer=scorer,
        summarizer=summarizer,
        clock=clock,
    )


# ========================================
# Start
# ========================================

def test_start_activates_first_question(machine, store, candidate):
    assert machine.start(candidate) is True

    assert machine.status == SessionStatus.ACTIVE
    assert len(machine.questions) == 6
    assert machine.current_question_index == 0
    assert machine.time_remaining == 20
    assert machine.is_timer_running is True
    assert store.current_candidate is candidate
    assert store.interview.is_interview_active is True
    assert store.interview.has_unfinished_interview is True
    assert len(store.interview.questions) == 6


def test_second_start_is_a_no_op(machine, candidate):
    machine.start(candidate)
    questions = list(machine.questions)

    assert machine.start(make_candidate(id="other")) is False
    assert machine.questions == questions
    assert machine.store.current_candidate is candidate


def test_start_rejects_candidate_with_answers(machine, candidate):
    machine.start(candidate)
    machine.submit_answer("first answer")
    machine.abandon()

    with pytest.raises(ValueError):
        machine.start(candidate)


# ========================================
# Timer
# ========================================

def test_advance_time_counts_down(machine, candidate):
    machine.start(candidate)

    assert machine.advance_time(5) is None
    assert machine.time_remaining == 15
    assert machine.store.interview.time_remaining == 15


def test_tick_accounts_whole_seconds_and_carries_fractions(machine, candidate, clock):
    machine.start(candidate)

    clock.advance(2.7)
    machine.tick()
    assert machine.time_remaining == 18

    clock.advance(0.4)
    machine.tick()
    assert machine.time_remaining == 17


def test_tick_without_elapsed_time_changes_nothing(machine, candidate):
    machine.start(candidate)
    assert machine.tick() is None
    assert machine.time_remaining == 20


def test_tick_after_suspension_auto_submits(machine, candidate, clock):
    machine.start(candidate)

    clock.advance(25)
    answer = machine.tick()

    assert answer is not None
    assert answer.answer_text == PLACEHOLDER
    assert answer.time_spent_seconds == 25
    assert machine.current_question_index == 1
    assert machine.time_remaining == 20
    assert machine.is_timer_running is True


def test_auto_submit_at_zero_uses_placeholder(machine, candidate, clock):
    machine.start(candidate)

    clock.advance(20)
    answer = machine.advance_time(20)

    assert answer.answer_text == PLACEHOLDER
    assert answer.answer_text != ""
    assert candidate.answers[-1].answer_text == PLACEHOLDER


def test_auto_submit_keeps_unsent_draft(machine, candidate):
    machine.start(candidate)
    machine.update_draft("I was still typing")

    answer = machine.advance_time(20)

    assert answer.answer_text == "I was still typing"


def test_auto_submit_keeps_whitespace_draft_as_typed(machine, candidate):
    machine.start(candidate)
    machine.update_draft("   ")

    answer = machine.advance_time(20)

    assert answer.answer_text == "   "
    assert candidate.answers[-1].answer_text == "   "


def test_timer_does_not_run_when_not_active(machine):
    assert machine.tick() is None
    assert machine.advance_time(10) is None


def test_negative_time_rejected(machine, candidate):
    machine.start(candidate)
    with pytest.raises(ValueError):
        machine.advance_time(-1)


# ========================================
# Submission
# ========================================

def test_manual_submit_records_floored_time_and_advances(machine, candidate, clock):
    machine.start(candidate)
    first = machine.current_question

    clock.advance(7.9)
    answer = machine.submit_answer("My answer")

    assert answer.question == first.text
    assert answer.difficulty == first.difficulty
    assert answer.time_spent_seconds == 7
    assert machine.current_question_index == 1
    assert machine.time_remaining == machine.questions[1].time_limit_seconds
    assert machine.last_answer_score is not None
    assert candidate.answers == [answer]


def test_blank_manual_submit_is_rejected(machine, candidate):
    machine.start(candidate)

    assert machine.submit_answer("   ") is None
    assert candidate.answers == []
    assert machine.current_question_index == 0


def test_submit_requires_active_interview(machine):
    with pytest.raises(RuntimeError):
        machine.submit_answer("hello")


def test_reentrant_submit_is_dropped(machine, store, candidate):
    machine.start(candidate)
    nested_results = []

    def submit_again(_store):
        if machine.is_submitting and not nested_results:
            nested_results.append(machine.submit_answer("second try"))

    store.subscribe(submit_again)
    machine.submit_answer("first try")

    assert nested_results == [None]
    assert [a.answer_text for a in candidate.answers] == ["first try"]
    assert machine.current_question_index == 1


def test_completes_after_six_mixed_submissions(machine, store, candidate, clock):
    machine.start(candidate)

    for index in range(6):
        assert machine.status == SessionStatus.ACTIVE
        if index % 2 == 0:
            clock.advance(3)
            machine.submit_answer(RICH_ANSWER)
        else:
            clock.advance(machine.time_remaining)
            machine.tick()

    assert machine.status == SessionStatus.COMPLETED
    assert len(candidate.answers) == 6
    assert candidate.score is not None
    assert candidate.summary is not None
    assert store.candidates == [candidate]
    assert store.interview.is_interview_active is False
    assert store.interview.questions == []
    assert machine.current_question is None


class FixedQuestionBank(QuestionBank):
    """Questions whose wording classifies to their own difficulty."""

    TEXTS = [
        ("Tell me about yourself and your background.", Difficulty.EASY),
        ("What are your greatest strengths?", Difficulty.EASY),
        ("How do you approach problem-solving in your work?", Difficulty.MEDIUM),
        ("How do you prioritize tasks when you have multiple deadlines?", Difficulty.MEDIUM),
        ("Where do you see yourself in 5 years and how does this role fit into your career goals?", Difficulty.HARD),
        ("Describe a time when you had to lead a team through a difficult situation.", Difficulty.HARD),
    ]

    def select_questions(self):
        return [
            Question(
                id=f"q_{index}",
                text=text,
                difficulty=difficulty,
                time_limit_seconds=self.time_limit_for(difficulty),
            )
            for index, (text, difficulty) in enumerate(self.TEXTS, start=1)
        ]


def test_all_timeouts_score_zero(store, scorer, summarizer, clock, candidate):
    machine = build_machine(store, FixedQuestionBank(), scorer, summarizer, clock)
    machine.start(candidate)

    for _ in range(6):
        clock.advance(machine.time_remaining)
        machine.tick()

    assert machine.status == SessionStatus.COMPLETED
    assert all(a.answer_text == PLACEHOLDER for a in candidate.answers)
    assert [a.difficulty for a in candidate.answers] == [
        Difficulty.EASY, Difficulty.EASY, Difficulty.MEDIUM,
        Difficulty.MEDIUM, Difficulty.HARD, Difficulty.HARD,
    ]
    assert candidate.score == 0.0
    assert candidate.summary.startswith("Jane Doe struggled with several questions")


def test_submissions_after_completion_raise(machine, candidate):
    machine.start(candidate)
    for _ in range(6):
        machine.submit_answer("answer")

    with pytest.raises(RuntimeError):
        machine.submit_answer("one more")


# ========================================
# Abandon and resume
# ========================================

def test_abandon_resets_without_scoring(machine, store, candidate):
    machine.start(candidate)
    machine.submit_answer("partial")

    machine.abandon()

    assert machine.status == SessionStatus.NOT_STARTED
    assert store.current_candidate is None
    assert store.candidates == []
    assert candidate.score is None
    assert store.interview.is_interview_active is False


def test_start_new_after_completion(machine, store, candidate):
    machine.start(candidate)
    for _ in range(6):
        machine.submit_answer("answer")

    machine.abandon()
    assert machine.start(make_candidate(id="candidate-2", name="Next")) is True
    assert len(store.candidates) == 1


def test_resume_after_restart_continues_at_next_question(kv, question_bank, scorer, summarizer, clock):
    store = load_store(kv)
    first = build_machine(store, question_bank, scorer, summarizer, clock)
    first.start(make_candidate())
    first.submit_answer("one")
    first.submit_answer("two")
    first.advance_time(30)
    questions = list(first.questions)

    # Process restart: everything is rebuilt from the persisted document
    restored_store = load_store(kv)
    restarted = build_machine(restored_store, question_bank, scorer, summarizer, clock)

    assert restarted.status == SessionStatus.NOT_STARTED
    assert restarted.has_unfinished_interview() is True
    assert restarted.get_status()["has_unfinished_interview"] is True

    assert restarted.resume() is True
    assert restarted.status == SessionStatus.ACTIVE
    assert restarted.current_question_index == 2
    assert restarted.questions == questions
    # Full limit is granted again on resume
    assert restarted.time_remaining == 60


def test_resume_declined_discards_interview(kv, question_bank, scorer, summarizer, clock):
    store = load_store(kv)
    first = build_machine(store, question_bank, scorer, summarizer, clock)
    first.start(make_candidate())
    first.submit_answer("one")

    restarted = build_machine(load_store(kv), question_bank, scorer, summarizer, clock)
    restarted.abandon()

    assert restarted.has_unfinished_interview() is False
    assert load_store(kv).current_candidate is None


def test_resume_draws_new_questions_when_none_saved(store, machine, candidate):
    candidate.answers.append(make_answer("earlier", Difficulty.EASY, 5))
    store.set_current_candidate(candidate)

    assert machine.resume() is True
    assert len(machine.questions) == 6
    assert machine.current_question_index == 1


def test_resume_without_unfinished_interview(machine):
    assert machine.resume() is False


def test_restore_completed_candidate(store, question_bank, scorer, summarizer, clock):
    candidate = make_candidate(score=7.5, summary="Done.")
    store.set_current_candidate(candidate)

    restored = build_machine(store, question_bank, scorer, summarizer, clock)

    assert restored.status == SessionStatus.COMPLETED
    status = restored.get_status()
    assert status["score"] == 7.5
    assert status["summary"] == "Done."


# ========================================
# Status
# ========================================

def test_status_reports_countdown_and_urgency(machine, candidate):
    machine.start(candidate)

    status = machine.get_status()
    assert status["status"] == "active"
    assert status["question_number"] == 1
    assert status["total_questions"] == 6
    assert status["time_display"] == "0:20"
    assert status["timer_urgency"] == "normal"
    assert status["is_last_question"] is False

    machine.advance_time(11)
    assert machine.timer_urgency() == "warning"

    machine.advance_time(5)
    assert machine.timer_urgency() == "critical"


def test_format_time():
    assert format_time(0) == "0:00"
    assert format_time(65) == "1:05"
    assert format_time(120) == "2:00"
