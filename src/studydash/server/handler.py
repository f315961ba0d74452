"""Server handler: dispatches JSON-lines requests to the quiz engine."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from studydash.clients.llm import LLMClient
from studydash.clients.rl import RLClient
from studydash.clients.transport import ApiTransport
from studydash.config.settings import Settings
from studydash.engine.analytics import course_progress, predictions
from studydash.engine.course_match import Course, suggest_course
from studydash.engine.models import QuizAttempt
from studydash.engine.quiz_session import QuizSession, SessionState
from studydash.state.attempts import AttemptStore

from .protocol import Notification

logger = logging.getLogger(__name__)


class ServerHandler:
    """Routes incoming requests to engine methods and returns result dicts.

    One quiz session is active at a time; ``startQuiz`` replaces it.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        write_notification: Optional[Callable[[Notification], None]] = None,
        transport: Optional[ApiTransport] = None,
    ):
        self.settings = settings or Settings.load()
        self._write_notification = write_notification or (lambda n: None)

        self.transport = transport or ApiTransport(self.settings.api.resolved())
        self.llm = LLMClient(self.transport)
        self.rl = RLClient(self.transport)
        self.attempts = AttemptStore(db_path=self.settings.data_dir / "attempts.db")

        self._session: Optional[QuizSession] = None

    async def dispatch(self, msg: dict) -> dict:
        """Route a request message to the appropriate handler method."""
        method = msg.get("method", "")
        params = msg.get("params") or {}

        handler_map = {
            "startQuiz": self._start_quiz,
            "getState": self._get_state,
            "getHint": self._get_hint,
            "submit": self._submit,
            "nextQuestion": self._next_question,
            "setLearningStyle": self._set_learning_style,
            "completeQuiz": self._complete_quiz,
            "listAttempts": self._list_attempts,
            "courseAnalytics": self._course_analytics,
            "suggestCourse": self._suggest_course,
            "studyPlan": self._study_plan,
        }

        handler = handler_map.get(method)
        if handler is None:
            raise ValueError(f"Unknown method: {method}")

        return await handler(params)

    async def close(self) -> None:
        if self._session is not None:
            await self._session.drain()
        await self.transport.aclose()

    def _require_session(self) -> QuizSession:
        if self._session is None:
            raise ValueError("No quiz started")
        return self._session

    def _notify_attempt(self, attempt: QuizAttempt) -> None:
        self._write_notification(Notification("attemptUpdated", attempt.to_dict()))

    async def _start_quiz(self, params: dict) -> dict:
        if self._session is not None:
            await self._session.drain()
        self._session = QuizSession(
            student_id=params["studentId"],
            subject=params["subject"],
            topic=params["topic"],
            llm=self.llm,
            rl=self.rl,
            learning_style=params.get(
                "learningStyle", self.settings.default_learning_style.value
            ),
            on_attempt=self._notify_attempt,
            requery_on_advance=self.settings.requery_on_advance,
        )
        await self._session.start()
        return self._session.to_dict()

    async def _get_state(self, params: dict) -> dict:
        return self._require_session().to_dict()

    async def _get_hint(self, params: dict) -> dict:
        session = self._require_session()
        await session.get_hint(params.get("answer"))
        return session.to_dict()

    async def _submit(self, params: dict) -> dict:
        session = self._require_session()
        await session.submit(params.get("answer"))
        return session.to_dict()

    async def _next_question(self, params: dict) -> dict:
        session = self._require_session()
        # A failed load leaves no feedback; retry the load directly.
        if session.state == SessionState.ERROR:
            await session.load_question()
        else:
            await session.next_question()
        return session.to_dict()

    async def _set_learning_style(self, params: dict) -> dict:
        session = self._require_session()
        session.set_learning_style(params["learningStyle"])
        return session.to_dict()

    async def _complete_quiz(self, params: dict) -> dict:
        session = self._require_session()
        await session.drain()
        attempt = session.complete()
        self._session = None
        if attempt is None:
            return {"attempt": None}
        self.attempts.save(attempt)
        logger.info("saved attempt %s (%d responses)", attempt.id, len(attempt.responses))
        return {"attempt": attempt.to_dict()}

    async def _list_attempts(self, params: dict) -> dict:
        student_id = params["studentId"]
        return {
            "attempts": [a.to_dict() for a in self.attempts.list_for_student(student_id)],
            "summary": self.attempts.summary(student_id),
        }

    async def _course_analytics(self, params: dict) -> dict:
        courses = course_progress(params.get("subjects"), params.get("progress"))
        return {
            "courses": [c.to_dict() for c in courses],
            "predictions": predictions(courses).to_dict(),
        }

    async def _suggest_course(self, params: dict) -> dict:
        courses = [Course.from_dict(c) for c in params.get("courses", [])]
        course = suggest_course(params["fileName"], courses)
        return {"course": course.to_dict() if course else None}

    async def _study_plan(self, params: dict) -> dict:
        plan = await self.llm.suggest_study_plan(
            subject=params["subject"],
            topics=params.get("topics", []),
            learning_style=params.get(
                "learningStyle", self.settings.default_learning_style.value
            ),
        )
        return {
            "recommendedOrder": plan.recommended_order,
            "estimatedDuration": plan.estimated_duration,
            "focusAreas": plan.focus_areas,
        }
