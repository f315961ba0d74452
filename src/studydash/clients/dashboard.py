"""Client for the dashboard's record endpoints (students, courses, resources)."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any

from studydash.clients.schemas import (
    Assessment,
    CourseContent,
    Resource,
    StudentProfile,
    validate_list,
    validate_payload,
)
from studydash.clients.transport import ApiTransport
from studydash.engine.models import QuizAttempt
from studydash.errors import ValidationError

STUDENT = "/api/student"
COURSES = "/api/courses"
ASSESSMENTS = "/api/assessments"
RESOURCES = "/api/resources"
PROGRESS = "/api/progress"


class DashboardClient:
    def __init__(self, transport: ApiTransport):
        self.transport = transport

    # Student endpoints

    async def get_student_profile(self, student_id: str) -> StudentProfile:
        data = await self.transport.get(f"{STUDENT}/{student_id}")
        return validate_payload(StudentProfile, data)

    async def create_student(self, profile: dict) -> StudentProfile:
        data = await self.transport.post(STUDENT, profile)
        return validate_payload(StudentProfile, data)

    async def update_student(self, student_id: str, profile: dict) -> StudentProfile:
        data = await self.transport.put(f"{STUDENT}/{student_id}", profile)
        return validate_payload(StudentProfile, data)

    async def get_learning_progress(self, student_id: str) -> list[dict]:
        data = await self.transport.get(f"{STUDENT}/{student_id}/progress")
        if not isinstance(data, list):
            raise ValidationError("learning progress: expected a list")
        return data

    async def get_quiz_attempts(self, student_id: str) -> list[QuizAttempt]:
        data = await self.transport.get(f"{STUDENT}/{student_id}/quizzes")
        if not isinstance(data, list):
            raise ValidationError("quiz attempts: expected a list")
        try:
            return [QuizAttempt.from_dict(item) for item in data]
        except (KeyError, TypeError) as e:
            raise ValidationError(f"quiz attempts: malformed record ({e})") from e

    # Catalogue endpoints

    async def get_courses(self) -> list[CourseContent]:
        return validate_list(CourseContent, await self.transport.get(COURSES))

    async def get_assessments(self) -> list[Assessment]:
        return validate_list(Assessment, await self.transport.get(ASSESSMENTS))

    async def get_resources(self) -> list[Resource]:
        return validate_list(Resource, await self.transport.get(RESOURCES))

    async def update_progress(self, course_id: str, progress: float) -> Any:
        return await self.transport.put(f"{PROGRESS}/{course_id}", {"progress": progress})

    async def upload_resource(self, path: Path, course_id: str) -> Resource:
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        data = await self.transport.request(
            "POST",
            RESOURCES,
            files={"file": (path.name, path.read_bytes(), content_type)},
            data={"courseId": course_id},
        )
        return validate_payload(Resource, data)
