"""Pydantic shapes for remote API payloads.

Each schema lists the fields a payload must carry before it is allowed into
application state. Unknown fields are kept as extras so newer backends do not
break older clients.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from studydash.errors import ValidationError

T = TypeVar("T", bound=BaseModel)


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


# --- LLM service ---


class GeneratedQuestion(Payload):
    question: str
    correct_answer: str = Field(alias="correctAnswer")


class GeneratedFeedback(Payload):
    feedback: str
    hint: str


class StudyPlan(Payload):
    recommended_order: list[str] = Field(alias="recommendedOrder")
    estimated_duration: str = Field(alias="estimatedDuration")
    focus_areas: list[str] = Field(alias="focusAreas")


class AssignmentSuggestion(Payload):
    title: str
    description: str
    type: Literal["manual", "ai-suggested"]


# --- RL service ---


class NextAction(Payload):
    next_topic: str = Field(alias="nextTopic", min_length=1)
    learning_style: str = Field(alias="learningStyle")


# --- Dashboard records ---


class StudentProfile(Payload):
    id: str
    name: str
    email: str
    level: str
    subjects: Optional[list[str]]
    learning_style: Any = Field(alias="learningStyle")
    progress: Optional[dict[str, float]]
    streak_days: Optional[int] = Field(default=None, alias="streakDays")
    total_points: Optional[int] = Field(default=None, alias="totalPoints")


class CourseContent(Payload):
    id: str
    title: str
    instructor: Any
    description: str
    objectives: list[Any]
    schedule: Any


class Assessment(Payload):
    id: str
    title: str
    course: str
    type: str
    due_date: str = Field(alias="dueDate")
    due_time: str = Field(alias="dueTime")
    duration: str
    status: str


class Resource(Payload):
    id: str
    name: str
    type: str
    size: str
    upload_date: str = Field(alias="uploadDate")
    upload_time: str = Field(alias="uploadTime")
    course: str
    category: str


def validate_payload(schema: type[T], data: Any) -> T:
    """Validate ``data`` against ``schema`` or raise ``ValidationError``."""
    if not isinstance(data, dict):
        raise ValidationError(f"{schema.__name__}: expected an object, got {type(data).__name__}")
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"{schema.__name__}: invalid fields: {fields}") from e


def validate_list(schema: type[T], data: Any) -> list[T]:
    if not isinstance(data, list):
        raise ValidationError(f"{schema.__name__}: expected a list, got {type(data).__name__}")
    return [validate_payload(schema, item) for item in data]
