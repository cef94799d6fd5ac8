# toeic_mocktest/services/review.py
import logging
from typing import List, Optional, Tuple

import markdown

from ..core.exceptions import NotReadyError, ValidationError
from ..models.schemas import (
    ReviewGroup,
    ReviewItem,
    ReviewPayload,
    Submission,
    TestDefinition,
)

logger = logging.getLogger(__name__)

ORDER_BY_SECTION = "section"
ORDER_BY_NUMBER = "number"

REMOVED_PROMPT = "(This question no longer exists)"


def render_explanation(question) -> str:
    if question.explanation_html:
        return question.explanation_html
    if question.explanation:
        return markdown.markdown(question.explanation)
    return ""


def _question_item(section_name: str, question, group, section, answer) -> ReviewItem:
    return ReviewItem(
        section=section_name,
        number=question.number,
        type=question.type,
        prompt=question.prompt,
        options=list(question.options),
        correct_answer=question.correct_answer_display(),
        chosen=answer.choice if answer is not None else "",
        # Stored flag: review shows what was recorded, it does not re-grade
        correct=bool(answer.correct) if answer is not None else False,
        answered=answer is not None,
        explanation_html=render_explanation(question),
        group=ReviewGroup(
            title=group.title,
            instructions=group.instructions,
            passage_html=group.passage_html,
            image_url=group.image_url,
            audio_url=group.audio_url,
            part=section.part,
        ),
    )


def _removed_item(answer) -> ReviewItem:
    return ReviewItem(
        section=answer.section,
        number=answer.number,
        prompt=REMOVED_PROMPT,
        chosen=answer.choice if answer.choice is not None else "",
        correct=False,
        answered=True,
        removed=True,
    )


def build_review_items(definition: TestDefinition, submission: Submission,
                       ordering: str = ORDER_BY_SECTION) -> List[ReviewItem]:
    """
    One item per question in the definition (answered or not), plus a
    placeholder for every answer whose question has been removed.
    """
    if ordering not in (ORDER_BY_SECTION, ORDER_BY_NUMBER):
        raise ValidationError(f"Unknown review ordering: {ordering}")

    answers = submission.answer_map()
    index = definition.question_index()
    section_rank = {name: rank for rank, name in enumerate(definition.section_names())}

    keyed: List[Tuple[Tuple[int, int, int], ReviewItem]] = []
    seq = 0
    for name, questions in definition.questions_by_section().items():
        for question in questions:
            _, group, section = index[(name, question.number)]
            item = _question_item(name, question, group, section, answers.get((name, question.number)))
            keyed.append(((section_rank[name], question.number, seq), item))
            seq += 1

    for answer in submission.answers:
        key = (answer.section, answer.number)
        if key in index or answers.get(key) is not answer:
            continue
        rank = section_rank.get(answer.section, len(section_rank))
        keyed.append(((rank, answer.number, seq), _removed_item(answer)))
        seq += 1

    if ordering == ORDER_BY_NUMBER:
        keyed.sort(key=lambda entry: (entry[0][1], entry[0][2]))
    else:
        keyed.sort(key=lambda entry: entry[0])

    return [item for _, item in keyed]


def build_review(definition: TestDefinition, submission: Optional[Submission],
                 ordering: str = ORDER_BY_SECTION, require_finished: bool = True) -> ReviewPayload:
    """
    Join a finished submission back onto its test definition.

    Scores come from the finish-time snapshot stored on the submission;
    they are not recomputed here.
    """
    if submission is None:
        raise NotReadyError("No submission yet. Please complete the test first.")
    if require_finished and not submission.is_finished:
        raise NotReadyError("No finished submission. Please complete the test first.")

    items = build_review_items(definition, submission, ordering)
    removed = sum(1 for item in items if item.removed)
    if removed:
        logger.info(f"Review for submission {submission.id} includes {removed} removed question(s)")

    return ReviewPayload(
        test_id=definition.id,
        title=definition.title,
        description=definition.description,
        section_scores=submission.section_scores,
        total_correct=submission.total_correct,
        total_questions=submission.total_questions,
        finished_at=submission.finished_at,
        ordering=ordering,
        items=items,
    )
