"""DASH / QuickDASH disability scores.

Items are answered 1 (no difficulty) to 5 (unable).  The score is
``((sum of n responses) - n) * 25 / n`` on a 0-100 scale, lower is better,
and is undefined when too many items are unanswered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union

QUICKDASH_ITEMS = (
    "difficulty_opening_jar",
    "difficulty_writing",
    "difficulty_turning_key",
    "difficulty_preparing_meal",
    "difficulty_pushing_door",
    "difficulty_placing_object",
    "arm_shoulder_hand_pain",
    "arm_shoulder_hand_pain_activity",
    "tingling_arm_shoulder_hand",
    "weakness_arm_shoulder_hand",
    "stiffness_arm_shoulder_hand",
)


@dataclass(frozen=True)
class Questionnaire:
    name: str
    item_count: int
    max_missing: int


QUICKDASH = Questionnaire("QuickDASH", item_count=11, max_missing=1)
DASH = Questionnaire("DASH", item_count=30, max_missing=3)

Responses = Union[Sequence[Optional[int]], Mapping[object, Optional[int]]]


def disability_score(responses: Responses, questionnaire: Questionnaire = QUICKDASH) -> Optional[float]:
    """
    Score a completed questionnaire.

    Args:
        responses: One answer per item (``None`` = unanswered), either as a
            sequence in item order or a mapping keyed by item.
        questionnaire: QUICKDASH or DASH.

    Returns:
        Score rounded to one decimal, or None if more than
        ``max_missing`` items are unanswered.

    Raises:
        ValueError: An answer outside 1-5, or more answers than items.
    """
    answers = list(responses.values()) if isinstance(responses, Mapping) else list(responses)
    if len(answers) > questionnaire.item_count:
        raise ValueError(
            f"{questionnaire.name} has {questionnaire.item_count} items, got {len(answers)} answers"
        )
    given = [a for a in answers if a is not None]
    for answer in given:
        if not 1 <= answer <= 5:
            raise ValueError(f"{questionnaire.name} answers must be 1-5, got {answer}")

    missing = questionnaire.item_count - len(given)
    if missing > questionnaire.max_missing or not given:
        return None
    n = len(given)
    return round((sum(given) - n) * 25.0 / n, 1)


def quickdash_score(responses: Responses) -> Optional[float]:
    return disability_score(responses, QUICKDASH)
