"""Learner and quiz records exchanged between the session and the remote services."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class PerformanceEntry:
    topic: str
    score: int  # 1 correct, 0 incorrect
    attempts: int = 1
    last_attempt: str = field(default_factory=now_iso)

    def __post_init__(self):
        if self.score not in (0, 1):
            raise ValueError(f"score must be 0 or 1, got {self.score!r}")
        if self.attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts!r}")

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "score": self.score,
            "attempts": self.attempts,
            "lastAttempt": self.last_attempt,
        }


class LearnerState:
    """Adaptive-learning context for one learner.

    The performance history is append-only and ``time_spent`` only grows.
    """

    def __init__(
        self,
        student_id: str,
        current_topic: str,
        learning_style: str = "visual",
        performance_history: Optional[list[PerformanceEntry]] = None,
        time_spent: float = 0.0,
    ):
        self._student_id = student_id
        self.current_topic = current_topic
        self.learning_style = learning_style
        self._history: list[PerformanceEntry] = list(performance_history or [])
        self._time_spent = float(time_spent)

    @property
    def student_id(self) -> str:
        return self._student_id

    @property
    def performance_history(self) -> tuple[PerformanceEntry, ...]:
        return tuple(self._history)

    @property
    def time_spent(self) -> float:
        return self._time_spent

    def record(self, entry: PerformanceEntry) -> None:
        self._history.append(entry)

    def add_time(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("time_spent cannot decrease")
        self._time_spent += seconds

    def snapshot(self) -> "LearnerState":
        return LearnerState(
            student_id=self._student_id,
            current_topic=self.current_topic,
            learning_style=self.learning_style,
            performance_history=list(self._history),
            time_spent=self._time_spent,
        )

    def to_dict(self) -> dict:
        return {
            "studentId": self._student_id,
            "currentTopic": self.current_topic,
            "performanceHistory": [e.to_dict() for e in self._history],
            "learningStyle": self.learning_style,
            "timeSpent": self._time_spent,
        }


@dataclass
class RLAction:
    next_topic: str
    learning_style: str

    def to_dict(self) -> dict:
        return {"nextTopic": self.next_topic, "learningStyle": self.learning_style}


@dataclass
class QuestionCycle:
    """One question/answer/feedback round."""
    topic: str = ""
    question: str = ""
    correct_answer: str = ""
    student_answer: str = ""
    feedback: str = ""
    hint: str = ""
    is_correct: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "question": self.question,
            "studentAnswer": self.student_answer,
            "feedback": self.feedback,
            "hint": self.hint,
            "isCorrect": self.is_correct,
        }


@dataclass
class QuestionResponse:
    id: str
    quiz_attempt_id: str
    question: str
    student_answer: str
    correct_answer: str
    is_correct: bool
    answered_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "quizAttemptId": self.quiz_attempt_id,
            "question": self.question,
            "studentAnswer": self.student_answer,
            "correctAnswer": self.correct_answer,
            "isCorrect": self.is_correct,
            "answeredAt": self.answered_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> QuestionResponse:
        return cls(
            id=data["id"],
            quiz_attempt_id=data["quizAttemptId"],
            question=data["question"],
            student_answer=data["studentAnswer"],
            correct_answer=data["correctAnswer"],
            is_correct=bool(data["isCorrect"]),
            answered_at=data.get("answeredAt", ""),
        )


@dataclass
class QuizAttempt:
    """Accumulated responses for one sitting."""
    id: str
    student_id: str
    subject: str
    topic: str
    started_at: str = field(default_factory=now_iso)
    completed_at: Optional[str] = None
    responses: list[QuestionResponse] = field(default_factory=list)
    score: float = 0.0
    time_spent: float = 0.0

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.responses if r.is_correct)

    def add_response(self, response: QuestionResponse) -> None:
        self.responses.append(response)

    def finalize(self, time_spent: float) -> None:
        self.completed_at = now_iso()
        self.time_spent = time_spent
        self.score = self.correct_count / len(self.responses) if self.responses else 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "subject": self.subject,
            "topic": self.topic,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "responses": [r.to_dict() for r in self.responses],
            "performance": {"score": self.score, "timeSpent": self.time_spent},
        }

    @classmethod
    def from_dict(cls, data: dict) -> QuizAttempt:
        performance = data.get("performance") or {}
        return cls(
            id=data["id"],
            student_id=data["studentId"],
            subject=data["subject"],
            topic=data["topic"],
            started_at=data.get("startedAt", ""),
            completed_at=data.get("completedAt"),
            responses=[QuestionResponse.from_dict(r) for r in data.get("responses", [])],
            score=float(performance.get("score", 0.0)),
            time_spent=float(performance.get("timeSpent", 0.0)),
        )
