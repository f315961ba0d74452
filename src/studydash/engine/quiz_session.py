"""Quiz session state machine: load → answer → feedback → next topic."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional

from studydash.clients.llm import LLMClient
from studydash.clients.rl import RLClient
from studydash.engine.adaptive import reward_for
from studydash.engine.models import (
    LearnerState,
    PerformanceEntry,
    QuestionCycle,
    QuestionResponse,
    QuizAttempt,
    new_id,
)
from studydash.engine.normalizer import answers_match
from studydash.errors import AppError

logger = logging.getLogger(__name__)

LOAD_FAILED = "Unable to load question."
HINT_FAILED = "Unable to get hint."
SUBMIT_FAILED = "Unable to submit answer."
EMPTY_ANSWER = "Please provide your answer"
NO_FEEDBACK_YET = "Submit an answer before moving to the next question."


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING_QUESTION = "loading_question"
    READY = "ready"  # Question shown, waiting for an answer
    HINT_REQUESTED = "hint_requested"
    SUBMITTING = "submitting"
    FEEDBACK_SHOWN = "feedback_shown"
    ERROR = "error"  # Question could not be loaded


_LOADABLE = (SessionState.IDLE, SessionState.ERROR, SessionState.FEEDBACK_SHOWN)


class QuizSession:
    """Drives one learner through question cycles.

    The session owns the learner state and the current cycle, and builds up a
    ``QuizAttempt`` that is handed to ``on_attempt`` after every submission.
    It does not guard against overlapping calls; callers check ``is_loading``.
    """

    def __init__(
        self,
        student_id: str,
        subject: str,
        topic: str,
        llm: LLMClient,
        rl: RLClient,
        learning_style: str = "visual",
        attempt: Optional[QuizAttempt] = None,
        on_attempt: Optional[Callable[[QuizAttempt], None]] = None,
        requery_on_advance: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.subject = subject
        self.llm = llm
        self.rl = rl
        self.learner = LearnerState(
            student_id=student_id,
            current_topic=topic,
            learning_style=learning_style,
        )
        self.attempt = attempt
        self._on_attempt = on_attempt or (lambda a: None)
        self.requery_on_advance = requery_on_advance
        self._clock = clock

        self.state = SessionState.IDLE
        self.cycle = QuestionCycle()
        self.is_loading = False
        self.error = ""
        self.last_error: Optional[AppError] = None

        self._question_shown_at: Optional[float] = None
        self._background: set[asyncio.Task] = set()

    # --- error surface ---

    def _clear_error(self) -> None:
        self.error = ""
        self.last_error = None

    def _fail(self, prefix: str, exc: Optional[AppError] = None) -> None:
        self.last_error = exc
        self.error = f"{prefix} {exc.message}" if exc else prefix

    # --- transitions ---

    async def start(self) -> bool:
        return await self.load_question()

    async def load_question(self) -> bool:
        """Fetch a question for the current topic.

        Only runs before the first question, after a failed load or once
        feedback is shown; an unanswered question is never replaced.
        """
        if self.state not in _LOADABLE:
            self._fail(NO_FEEDBACK_YET)
            return False
        self.state = SessionState.LOADING_QUESTION
        self.cycle = QuestionCycle()
        self._clear_error()
        self.is_loading = True
        topic = self.learner.current_topic
        try:
            result = await self.llm.generate_question(
                self.subject, topic, self.learner.learning_style
            )
        except AppError as e:
            self._fail(LOAD_FAILED, e)
            self.state = SessionState.ERROR
            return False
        finally:
            self.is_loading = False

        self.cycle = QuestionCycle(
            topic=topic,
            question=result.question,
            correct_answer=result.correct_answer,
        )
        self._question_shown_at = self._clock()
        self.state = SessionState.READY
        return True

    async def get_hint(self, answer: Optional[str] = None) -> bool:
        """Ask for a hint on the current answer without grading it."""
        if self.state != SessionState.READY:
            self._fail(HINT_FAILED)
            return False
        if answer is not None:
            self.cycle.student_answer = answer

        self.state = SessionState.HINT_REQUESTED
        self._clear_error()
        self.is_loading = True
        try:
            result = await self.llm.generate_feedback(
                self.cycle.question,
                self.cycle.student_answer,
                self.cycle.correct_answer,
                self.learner.learning_style,
            )
        except AppError as e:
            self._fail(HINT_FAILED, e)
            return False
        finally:
            self.is_loading = False
            self.state = SessionState.READY

        self.cycle.hint = result.hint
        return True

    async def submit(self, answer: Optional[str] = None) -> bool:
        """Grade the answer, fetch feedback and update the learner model.

        Commit order: feedback, history, RL update (detached), next topic,
        attempt. If feedback generation fails nothing is committed.
        """
        if self.state != SessionState.READY:
            self._fail(SUBMIT_FAILED)
            return False
        if answer is not None:
            self.cycle.student_answer = answer
        if not self.cycle.student_answer.strip():
            self._fail(EMPTY_ANSWER)
            return False

        self.state = SessionState.SUBMITTING
        self._clear_error()
        self.is_loading = True
        try:
            return await self._commit_submission()
        finally:
            self.is_loading = False

    async def _commit_submission(self) -> bool:
        cycle = self.cycle
        attempt_id = self.attempt.id if self.attempt else new_id()
        is_correct = answers_match(cycle.student_answer, cycle.correct_answer)
        response = QuestionResponse(
            id=new_id(),
            quiz_attempt_id=attempt_id,
            question=cycle.question,
            student_answer=cycle.student_answer,
            correct_answer=cycle.correct_answer,
            is_correct=is_correct,
        )

        try:
            result = await self.llm.generate_feedback(
                cycle.question,
                cycle.student_answer,
                cycle.correct_answer,
                self.learner.learning_style,
            )
        except AppError as e:
            self._fail(SUBMIT_FAILED, e)
            self.state = SessionState.READY
            return False

        cycle.feedback = result.feedback
        cycle.hint = result.hint
        cycle.is_correct = is_correct

        reward = reward_for(is_correct)
        self.learner.record(PerformanceEntry(topic=cycle.topic, score=1 if is_correct else 0))
        self.learner.add_time(self._elapsed())

        self._spawn(self.rl.update_model(self.learner.snapshot(), reward))

        action = await self.rl.get_next_action(self.learner)
        self.learner.current_topic = action.next_topic

        if self.attempt is None:
            self.attempt = QuizAttempt(
                id=attempt_id,
                student_id=self.learner.student_id,
                subject=self.subject,
                topic=cycle.topic,
            )
        self.attempt.add_response(response)
        self._on_attempt(self.attempt)

        self.state = SessionState.FEEDBACK_SHOWN
        logger.info(
            "student=%s topic=%s correct=%s next=%s",
            self.learner.student_id, cycle.topic, is_correct, action.next_topic,
        )
        return True

    async def next_question(self) -> bool:
        """Move on after feedback: re-ask the policy, then load a question."""
        if self.state != SessionState.FEEDBACK_SHOWN:
            self._fail(NO_FEEDBACK_YET)
            return False

        if self.requery_on_advance:
            self.is_loading = True
            try:
                action = await self.rl.get_next_action(self.learner)
            finally:
                self.is_loading = False
            self.learner.current_topic = action.next_topic

        return await self.load_question()

    def set_learning_style(self, style: str) -> None:
        self.learner.learning_style = style

    def complete(self) -> Optional[QuizAttempt]:
        """Close the attempt; returns None if nothing was submitted."""
        if self.attempt is None:
            return None
        if not self.attempt.is_complete:
            self.attempt.finalize(self.learner.time_spent)
        return self.attempt

    # --- background updates ---

    def _elapsed(self) -> float:
        if self._question_shown_at is None:
            return 0.0
        return max(0.0, self._clock() - self._question_shown_at)

    def _spawn(self, coro) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    @property
    def pending_updates(self) -> int:
        return len(self._background)

    async def drain(self) -> None:
        """Wait for outstanding fire-and-forget model updates."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "isLoading": self.is_loading,
            "error": self.error,
            "errorKind": self.last_error.kind.value if self.last_error else None,
            "subject": self.subject,
            "currentTopic": self.learner.current_topic,
            "learningStyle": self.learner.learning_style,
            "timeSpent": self.learner.time_spent,
            "cycle": self.cycle.to_dict(),
            "history": [e.to_dict() for e in self.learner.performance_history],
            "attempt": self.attempt.to_dict() if self.attempt else None,
        }
