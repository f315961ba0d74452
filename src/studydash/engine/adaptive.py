"""Local adaptive policy: reward shaping and the next-topic fallback.

The remote policy service normally decides what the learner studies next.
When it cannot be reached the loop keeps going on the heuristic below: move
on once the learner averages above the mastery threshold, otherwise repeat
the current topic.
"""

from __future__ import annotations

from collections.abc import Sequence

from studydash.engine.models import LearnerState, PerformanceEntry, RLAction

ADVANCE_TOPIC = "next-topic"
MASTERY_THRESHOLD = 0.7

REWARD_CORRECT = 1.0
REWARD_INCORRECT = -0.5


def reward_for(is_correct: bool) -> float:
    return REWARD_CORRECT if is_correct else REWARD_INCORRECT


def average_score(history: Sequence[PerformanceEntry]) -> float:
    """Mean score over the history; an empty history counts as 0.0."""
    if not history:
        return 0.0
    return sum(e.score for e in history) / len(history)


def fallback_action(state: LearnerState) -> RLAction:
    avg = average_score(state.performance_history)
    next_topic = ADVANCE_TOPIC if avg > MASTERY_THRESHOLD else state.current_topic
    return RLAction(next_topic=next_topic, learning_style=state.learning_style)
