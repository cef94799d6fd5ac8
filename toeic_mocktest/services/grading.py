# toeic_mocktest/services/grading.py
"""
Answer normalization and per-question-type graders.

Answer capture and final scoring both go through grade_answer(), so the
correctness flag stored at write time always agrees with the finish-time
recount for the same definition.
"""

import logging
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional

from ..models.schemas import (
    FillBlockQuestion,
    FillQuestion,
    McqQuestion,
    TfngQuestion,
)

logger = logging.getLogger(__name__)

DEFAULT_GRADED_TYPES: FrozenSet[str] = frozenset({"MCQ"})

Grader = Callable[[Any, Any], bool]


def normalize_choice(value: Any) -> str:
    """Trim whitespace and uppercase; None and non-scalars compare as empty"""
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip().upper()


def unpack_blanks(choice: Any) -> Dict[str, str]:
    """
    Slot answers from either {"1": "dog", "2": "play"} or the packed
    string form "1=dog||2=play".
    """
    if isinstance(choice, dict):
        return {str(slot).strip(): value for slot, value in choice.items()}

    slots: Dict[str, str] = {}
    if isinstance(choice, str):
        for part in choice.split("||"):
            slot, sep, answer = part.partition("=")
            if sep and slot.strip():
                slots[slot.strip()] = answer
    return slots


def _grade_mcq(question: McqQuestion, choice: Any) -> bool:
    return normalize_choice(choice) == normalize_choice(question.answer)


def _grade_tfng(question: TfngQuestion, choice: Any) -> bool:
    return normalize_choice(choice) == normalize_choice(question.tfng_answer)


def _grade_fill(question: FillQuestion, choice: Any) -> bool:
    return normalize_choice(choice) == normalize_choice(question.answer)


def _grade_fill_block(question: FillBlockQuestion, choice: Any) -> bool:
    if not question.blanks:
        return False
    slots = unpack_blanks(choice)
    return all(
        normalize_choice(slots.get(str(blank.slot_number), "")) == normalize_choice(blank.correct_answer)
        for blank in question.blanks
    )


# MATCH has no grader yet
GRADERS: Dict[str, Grader] = {
    "MCQ": _grade_mcq,
    "TFNG": _grade_tfng,
    "FILL": _grade_fill,
    "FILL_BLOCK": _grade_fill_block,
}


def resolve_graded_types(graded_types: Optional[Iterable[str]]) -> FrozenSet[str]:
    if graded_types is None:
        return DEFAULT_GRADED_TYPES
    return frozenset(t.upper() for t in graded_types)


def is_gradable(question: Any, graded_types: Optional[Iterable[str]] = None) -> bool:
    return question.type in resolve_graded_types(graded_types) and question.type in GRADERS


def grade_answer(question: Any, choice: Any, graded_types: Optional[Iterable[str]] = None) -> Optional[bool]:
    """
    Correctness of `choice` for `question`.

    Returns None when the question's type carries no grading, so callers
    never mistake an ungraded answer for a wrong one.
    """
    if not is_gradable(question, graded_types):
        return None
    return GRADERS[question.type](question, choice)
