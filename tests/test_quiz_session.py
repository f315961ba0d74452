"""Tests for the quiz session state machine."""

from __future__ import annotations

import pytest

from conftest import connect_error
from studydash.engine.adaptive import ADVANCE_TOPIC
from studydash.engine.models import PerformanceEntry
from studydash.engine.quiz_session import (
    EMPTY_ANSWER,
    NO_FEEDBACK_YET,
    QuizSession,
    SessionState,
)
from studydash.errors import ERROR_MESSAGES, ErrorKind

QUESTION = "/api/llm/generate-question"
FEEDBACK = "/api/llm/generate-feedback"
NEXT_ACTION = "/api/rl/next-action"
UPDATE = "/api/rl/update"


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def handed_over():
    return []


@pytest.fixture
def session(llm, rl, clock, handed_over):
    return QuizSession(
        student_id="s1",
        subject="Geography",
        topic="capitals",
        llm=llm,
        rl=rl,
        on_attempt=handed_over.append,
        clock=clock,
    )


class TestLoadQuestion:
    @pytest.mark.asyncio
    async def test_start_reaches_ready(self, session, backend):
        assert session.state == SessionState.IDLE
        assert await session.start()
        assert session.state == SessionState.READY
        assert session.cycle.question == "What is the capital of France?"
        assert session.cycle.topic == "capitals"
        assert session.is_loading is False
        assert backend.bodies(QUESTION)[0]["topic"] == "capitals"

    @pytest.mark.asyncio
    async def test_server_error_surfaces_kind(self, session, backend):
        backend.routes[QUESTION] = 500
        assert not await session.start()
        assert session.state == SessionState.ERROR
        assert session.cycle.question == ""
        assert session.last_error.kind == ErrorKind.SERVER_ERROR
        assert ERROR_MESSAGES[ErrorKind.SERVER_ERROR] in session.error

    @pytest.mark.asyncio
    async def test_no_automatic_retry(self, session, backend):
        backend.routes[QUESTION] = 500
        await session.start()
        assert backend.paths().count(QUESTION) == 1

    @pytest.mark.asyncio
    async def test_explicit_retry_recovers(self, session, backend):
        backend.routes[QUESTION] = connect_error
        await session.start()
        assert session.last_error.kind == ErrorKind.NETWORK_ERROR

        backend.routes[QUESTION] = {"question": "Capital of Spain?", "correctAnswer": "Madrid"}
        assert await session.load_question()
        assert session.state == SessionState.READY
        assert session.error == ""
        assert session.last_error is None

    @pytest.mark.asyncio
    async def test_unanswered_question_is_kept(self, session, backend):
        await session.start()
        backend.routes[QUESTION] = {"question": "Capital of Peru?", "correctAnswer": "Lima"}

        assert not await session.load_question()
        assert session.state == SessionState.READY
        assert session.error == NO_FEEDBACK_YET
        assert session.cycle.question == "What is the capital of France?"
        assert backend.paths().count(QUESTION) == 1


class TestSubmitGuards:
    @pytest.mark.asyncio
    async def test_blank_answer_never_calls_out(self, session, backend):
        await session.start()
        calls_before = len(backend.calls)

        assert not await session.submit("   ")
        assert session.error == EMPTY_ANSWER
        assert session.state == SessionState.READY
        assert len(backend.calls) == calls_before
        assert session.learner.performance_history == ()
        assert session.attempt is None

    @pytest.mark.asyncio
    async def test_submit_before_question(self, session, backend):
        assert not await session.submit("Paris")
        assert backend.calls == []


class TestSubmit:
    @pytest.mark.asyncio
    async def test_correct_answer_trimmed_case_insensitive(self, session, backend, handed_over):
        await session.start()
        assert await session.submit("paris ")
        await session.drain()

        assert session.state == SessionState.FEEDBACK_SHOWN
        assert session.cycle.is_correct is True
        assert session.cycle.feedback == "Paris is the capital."
        assert session.cycle.hint == "Think of the Eiffel Tower."
        assert backend.bodies(UPDATE)[0]["reward"] == 1.0

    @pytest.mark.asyncio
    async def test_punctuation_counts(self, session, backend):
        await session.start()
        await session.submit("Paris!")
        await session.drain()
        assert session.cycle.is_correct is False
        assert backend.bodies(UPDATE)[0]["reward"] == -0.5

    @pytest.mark.asyncio
    async def test_ledgers_grow_by_one(self, session, handed_over):
        await session.start()
        await session.submit("Paris")

        history = session.learner.performance_history
        assert len(history) == 1
        assert history[0].topic == "capitals"
        assert history[0].score == 1
        assert history[0].attempts == 1

        attempt = session.attempt
        assert len(attempt.responses) == 1
        assert attempt.responses[0].quiz_attempt_id == attempt.id
        assert attempt.topic == "capitals"
        assert handed_over == [attempt]

    @pytest.mark.asyncio
    async def test_attempt_reused_across_submissions(self, session, handed_over):
        await session.start()
        await session.submit("Paris")
        await session.next_question()
        await session.submit("Lyon")

        assert len(handed_over) == 2
        assert handed_over[0] is handed_over[1]
        assert len(session.attempt.responses) == 2
        assert {r.quiz_attempt_id for r in session.attempt.responses} == {session.attempt.id}

    @pytest.mark.asyncio
    async def test_topic_updated_before_advance(self, session, backend):
        await session.start()
        await session.submit("Paris")
        assert session.learner.current_topic == "european-capitals"
        # The cycle on screen still belongs to the old topic.
        assert session.cycle.topic == "capitals"

    @pytest.mark.asyncio
    async def test_call_order(self, session, backend):
        await session.start()
        await session.submit("Paris")
        await session.drain()
        paths = backend.paths()
        assert paths[0] == QUESTION
        assert paths[1] == FEEDBACK
        assert set(paths[2:]) == {UPDATE, NEXT_ACTION}

    @pytest.mark.asyncio
    async def test_update_sees_state_at_submission(self, session, backend):
        await session.start()
        await session.submit("Paris")
        await session.drain()
        state = backend.bodies(UPDATE)[0]["state"]
        assert state["currentTopic"] == "capitals"
        assert len(state["performanceHistory"]) == 1

    @pytest.mark.asyncio
    async def test_feedback_failure_commits_nothing(self, session, backend, handed_over):
        await session.start()
        backend.routes[FEEDBACK] = 500

        assert not await session.submit("Paris")
        await session.drain()
        assert session.state == SessionState.READY
        assert session.last_error.kind == ErrorKind.SERVER_ERROR
        assert session.learner.performance_history == ()
        assert session.attempt is None
        assert handed_over == []
        assert UPDATE not in backend.paths()
        assert NEXT_ACTION not in backend.paths()
        # The question stays on screen for another try.
        assert session.cycle.question == "What is the capital of France?"

    @pytest.mark.asyncio
    async def test_update_failure_is_silent(self, session, backend, handed_over):
        await session.start()
        backend.routes[UPDATE] = connect_error

        assert await session.submit("Paris")
        await session.drain()
        assert session.error == ""
        assert session.cycle.feedback
        assert session.cycle.hint
        assert len(handed_over) == 1
        assert session.pending_updates == 0

    @pytest.mark.asyncio
    async def test_rl_style_does_not_override_learner(self, session, backend):
        backend.routes[NEXT_ACTION] = {"nextTopic": "rivers", "learningStyle": "auditory"}
        await session.start()
        await session.submit("Paris")
        assert session.learner.current_topic == "rivers"
        assert session.learner.learning_style == "visual"

    @pytest.mark.asyncio
    async def test_time_spent_accumulates(self, session, clock):
        await session.start()
        clock.now += 12.5
        await session.submit("Paris")
        assert session.learner.time_spent == pytest.approx(12.5)

        await session.next_question()
        clock.now += 4
        await session.submit("Paris")
        assert session.learner.time_spent == pytest.approx(16.5)


class TestHint:
    @pytest.mark.asyncio
    async def test_hint_only(self, session, backend):
        await session.start()
        assert await session.get_hint("")
        assert session.state == SessionState.READY
        assert session.cycle.hint == "Think of the Eiffel Tower."
        assert session.cycle.feedback == ""
        assert session.cycle.is_correct is None
        assert session.learner.performance_history == ()
        assert NEXT_ACTION not in backend.paths()
        assert backend.bodies(FEEDBACK)[0]["studentAnswer"] == ""

    @pytest.mark.asyncio
    async def test_hint_then_submit(self, session):
        await session.start()
        await session.get_hint("Par")
        assert session.cycle.student_answer == "Par"
        assert await session.submit("Paris")
        assert session.cycle.is_correct is True

    @pytest.mark.asyncio
    async def test_hint_failure_stays_ready(self, session, backend):
        await session.start()
        backend.routes[FEEDBACK] = 404
        assert not await session.get_hint("x")
        assert session.state == SessionState.READY
        assert session.last_error.kind == ErrorKind.NOT_FOUND


class TestNextQuestion:
    @pytest.mark.asyncio
    async def test_requires_feedback(self, session, backend):
        await session.start()
        calls_before = len(backend.calls)
        assert not await session.next_question()
        assert session.error
        assert len(backend.calls) == calls_before

    @pytest.mark.asyncio
    async def test_requeries_policy(self, session, backend):
        await session.start()
        await session.submit("Paris")
        backend.routes[NEXT_ACTION] = {"nextTopic": "rivers", "learningStyle": "visual"}

        assert await session.next_question()
        assert backend.paths().count(NEXT_ACTION) == 2
        assert session.cycle.topic == "rivers"
        assert session.cycle.feedback == ""
        assert session.cycle.student_answer == ""
        assert backend.bodies(QUESTION)[-1]["topic"] == "rivers"

    @pytest.mark.asyncio
    async def test_single_decision_when_requery_disabled(self, session, backend):
        session.requery_on_advance = False
        await session.start()
        await session.submit("Paris")
        await session.next_question()
        assert backend.paths().count(NEXT_ACTION) == 1
        assert session.cycle.topic == "european-capitals"


class TestAdaptiveScenarios:
    @pytest.mark.asyncio
    async def test_three_correct_with_policy_down_advances(self, session, backend):
        backend.routes[NEXT_ACTION] = 500
        await session.start()
        for i in range(3):
            assert await session.submit("Paris")
            if i < 2:
                await session.next_question()

        assert [e.score for e in session.learner.performance_history] == [1, 1, 1]
        assert session.learner.current_topic == ADVANCE_TOPIC

    @pytest.mark.asyncio
    async def test_one_of_three_with_policy_down_repeats(self, session, backend):
        backend.routes[NEXT_ACTION] = connect_error
        await session.start()
        session.learner.record(PerformanceEntry(topic="capitals", score=1))
        session.learner.record(PerformanceEntry(topic="capitals", score=0))

        await session.submit("Lyon")
        assert [e.score for e in session.learner.performance_history] == [1, 0, 0]
        assert session.learner.current_topic == "capitals"

    @pytest.mark.asyncio
    async def test_learning_style_change_reaches_llm(self, session, backend):
        await session.start()
        session.set_learning_style("practical")
        await session.submit("Paris")
        await session.next_question()
        assert backend.bodies(QUESTION)[-1]["learningStyle"] == "practical"


class TestComplete:
    @pytest.mark.asyncio
    async def test_nothing_submitted(self, session):
        await session.start()
        assert session.complete() is None

    @pytest.mark.asyncio
    async def test_score_and_time(self, session, clock):
        await session.start()
        clock.now += 10
        await session.submit("Paris")
        await session.next_question()
        clock.now += 10
        await session.submit("Lyon")

        attempt = session.complete()
        assert attempt.is_complete
        assert attempt.score == pytest.approx(0.5)
        assert attempt.time_spent == pytest.approx(20)

    @pytest.mark.asyncio
    async def test_to_dict_hides_answer(self, session):
        await session.start()
        data = session.to_dict()
        assert data["state"] == "ready"
        assert "correctAnswer" not in data["cycle"]
