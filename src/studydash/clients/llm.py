"""Client for the remote question/feedback generation service."""

from __future__ import annotations

import logging

from studydash.clients.schemas import (
    AssignmentSuggestion,
    GeneratedFeedback,
    GeneratedQuestion,
    StudyPlan,
    validate_payload,
)
from studydash.clients.transport import ApiTransport
from studydash.errors import AppError, ValidationError

logger = logging.getLogger(__name__)

GENERATE_QUESTION = "/api/llm/generate-question"
GENERATE_FEEDBACK = "/api/llm/generate-feedback"
SUGGEST_STUDY_PLAN = "/api/llm/suggest-study-plan"
SUGGEST_ASSIGNMENT = "/api/llm/suggest-assignment"


def _require(**values: str) -> None:
    missing = [k for k, v in values.items() if not isinstance(v, str) or not v.strip()]
    if missing:
        raise ValidationError(f"empty required argument(s): {', '.join(missing)}")


class LLMClient:
    """Stateless wrapper: every call is one round-trip, errors propagate."""

    def __init__(self, transport: ApiTransport):
        self.transport = transport

    async def _call(self, path: str, body: dict, schema):
        try:
            data = await self.transport.post(path, body)
            return validate_payload(schema, data)
        except AppError as e:
            logger.error("LLM call %s failed: %s", path, e)
            raise

    async def generate_question(
        self, subject: str, topic: str, learning_style: str
    ) -> GeneratedQuestion:
        _require(subject=subject, topic=topic, learning_style=learning_style)
        return await self._call(
            GENERATE_QUESTION,
            {"subject": subject, "topic": topic, "learningStyle": learning_style},
            GeneratedQuestion,
        )

    async def generate_feedback(
        self,
        question: str,
        student_answer: str,
        correct_answer: str,
        learning_style: str,
    ) -> GeneratedFeedback:
        return await self._call(
            GENERATE_FEEDBACK,
            {
                "question": question,
                "studentAnswer": student_answer,
                "correctAnswer": correct_answer,
                "learningStyle": learning_style,
            },
            GeneratedFeedback,
        )

    async def suggest_study_plan(
        self, subject: str, topics: list[str], learning_style: str
    ) -> StudyPlan:
        return await self._call(
            SUGGEST_STUDY_PLAN,
            {"subject": subject, "topics": list(topics), "learningStyle": learning_style},
            StudyPlan,
        )

    async def suggest_assignment(
        self, subject: str, topic: str, learning_style: str
    ) -> AssignmentSuggestion:
        return await self._call(
            SUGGEST_ASSIGNMENT,
            {"subject": subject, "topic": topic, "learningStyle": learning_style},
            AssignmentSuggestion,
        )
