"""Progress analytics derived from a student profile: grades, trend, CGPA."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_SUBJECTS = ["Mathematics", "Physics", "Computer Science"]
DEFAULT_CREDITS = 3

# (letter, minimum progress, grade points), highest first
GRADE_SCALE: list[tuple[str, float, float]] = [
    ("A", 90, 4.0),
    ("B+", 80, 3.7),
    ("B", 70, 3.3),
    ("C+", 60, 2.7),
    ("C", 0, 2.0),
]

IMPROVEMENT_BELOW = 70
STRENGTH_FROM = 85


@dataclass
class CourseProgress:
    course_id: str
    name: str
    progress: float
    grade: str
    grade_points: float
    credits: int = DEFAULT_CREDITS
    trend: str = "stable"

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_id,
            "name": self.name,
            "progress": self.progress,
            "currentGrade": self.grade,
            "gradePoints": self.grade_points,
            "credits": self.credits,
            "trend": self.trend,
        }


@dataclass
class Predictions:
    semester_cgpa: float
    improvement_areas: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    projected_grades: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "semesterCGPA": self.semester_cgpa,
            "improvementAreas": self.improvement_areas,
            "strengths": self.strengths,
            "projectedGrades": self.projected_grades,
        }


def grade_for(progress: float) -> tuple[str, float]:
    """Letter grade and grade points for a 0-100 progress percentage."""
    for letter, minimum, points in GRADE_SCALE:
        if progress >= minimum:
            return letter, points
    # Negative progress still earns the floor grade.
    letter, _, points = GRADE_SCALE[-1]
    return letter, points


def trend_for(progress: float) -> str:
    if progress >= 80:
        return "improving"
    if progress >= 60:
        return "stable"
    return "needs_attention"


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def course_progress(
    subjects: Optional[list[str]],
    progress: Optional[dict[str, float]],
    credits: int = DEFAULT_CREDITS,
) -> list[CourseProgress]:
    """One ``CourseProgress`` per subject; progress is keyed by lowercased name."""
    progress = progress or {}
    result = []
    for subject in subjects or DEFAULT_SUBJECTS:
        value = float(progress.get(subject.lower(), 0) or 0)
        letter, points = grade_for(value)
        result.append(CourseProgress(
            course_id=slugify(subject),
            name=subject,
            progress=value,
            grade=letter,
            grade_points=points,
            credits=credits,
            trend=trend_for(value),
        ))
    return result


def cgpa(courses: list[CourseProgress]) -> float:
    """Credit-weighted grade point average, rounded to two places."""
    total_credits = sum(c.credits for c in courses)
    if total_credits == 0:
        return 0.0
    total_points = sum(c.grade_points * c.credits for c in courses)
    return round(total_points / total_credits, 2)


def predictions(courses: list[CourseProgress]) -> Predictions:
    return Predictions(
        semester_cgpa=cgpa(courses),
        improvement_areas=[c.name for c in courses if c.progress < IMPROVEMENT_BELOW],
        strengths=[c.name for c in courses if c.progress >= STRENGTH_FROM],
        projected_grades={c.name: c.grade for c in courses},
    )
