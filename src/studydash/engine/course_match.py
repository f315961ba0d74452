"""Suggest a course for an uploaded resource from keywords in its filename."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from studydash.engine.normalizer import normalize_filename


@dataclass
class Course:
    id: str
    name: str
    code: str = ""
    instructor: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Course:
        return cls(
            id=data["id"],
            name=data["name"],
            code=data.get("code", ""),
            instructor=data.get("instructor", ""),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "code": self.code, "instructor": self.instructor}


# (filename keywords, course-name fragment). First matching rule wins.
KEYWORD_RULES: list[tuple[tuple[str, ...], str]] = [
    (("psych", "psychology", "brain", "cognitive"), "psychology"),
    (("math", "calculus", "algebra", "equation"), "math"),
    (("ml", "machine", "learning", "neural", "ai"), "machine learning"),
    (("physics", "quantum", "mechanics"), "physics"),
    (("cs", "computer", "programming", "code"), "computer science"),
]


def suggest_course(filename: str, courses: list[Course]) -> Optional[Course]:
    name = normalize_filename(filename)
    for keywords, fragment in KEYWORD_RULES:
        if any(k in name for k in keywords):
            return next((c for c in courses if fragment in c.name.lower()), None)
    return None
