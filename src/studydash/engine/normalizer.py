"""Answer normalization for comparison."""

from __future__ import annotations

import re


def normalize_answer(text: str) -> str:
    """Normalize a free-text answer: strip surrounding whitespace, lowercase."""
    return text.strip().lower()


def normalize_filename(name: str) -> str:
    """Lowercase a filename and drop its directory part."""
    name = re.split(r"[\\/]", name.strip())[-1]
    return name.lower()


def answers_match(guess: str, correct: str) -> bool:
    """Check a student's answer against the expected one.

    Comparison ignores case and surrounding whitespace only; punctuation and
    inner spacing still count.
    """
    return normalize_answer(guess) == normalize_answer(correct)
