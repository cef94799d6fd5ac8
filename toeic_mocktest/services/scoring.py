# toeic_mocktest/services/scoring.py
"""
Finish-time scoring.

compute_final_scores() is a pure function of the test definition and the
submission: it re-grades every stored choice instead of trusting the
write-time correctness flags, so re-running finish always yields the same
aggregate for the same inputs.
"""

import logging
from typing import Iterable, List, Optional

from ..core.utils import percentage
from ..models.schemas import FinalScores, Section, SectionScore, Submission, TestDefinition
from .grading import grade_answer, is_gradable, resolve_graded_types

logger = logging.getLogger(__name__)


def score_section(section: Section, submission: Submission,
                  graded_types: Optional[Iterable[str]] = None) -> SectionScore:
    """
    Score one section (one TOEIC part). Answers are keyed by section name and
    number; answers for other sections or unknown numbers are ignored.
    """
    graded = resolve_graded_types(graded_types)
    answers = submission.answer_map()

    total = 0
    correct = 0
    ungraded = 0
    for question in section.flattened_questions():
        if not is_gradable(question, graded):
            ungraded += 1
            continue

        total += 1
        answer = answers.get((section.name, question.number))
        if answer is not None and grade_answer(question, answer.choice, graded):
            correct += 1

    return SectionScore(
        section=section.name,
        part=section.part,
        correct=correct,
        total=total,
        percentage=percentage(correct, total),
        ungraded=ungraded,
    )


def compute_final_scores(definition: TestDefinition, submission: Submission,
                         graded_types: Optional[Iterable[str]] = None) -> FinalScores:
    section_scores: List[SectionScore] = [
        score_section(section, submission, graded_types)
        for section in definition.sections
    ]

    stale = count_stale_answers(definition, submission)
    if stale:
        logger.info(f"Ignoring {stale} answer(s) to questions no longer in test {definition.id}")

    return FinalScores(
        section_scores=section_scores,
        total_correct=sum(s.correct for s in section_scores),
        total_questions=sum(s.total for s in section_scores),
    )


def count_stale_answers(definition: TestDefinition, submission: Submission) -> int:
    index = definition.question_index()
    return sum(1 for key in submission.answer_map() if key not in index)
