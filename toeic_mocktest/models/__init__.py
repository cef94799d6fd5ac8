"""
Pydantic models for test definitions, submissions and API payloads
"""

from .schemas import (
    TestDefinition,
    Section,
    QuestionGroup,
    Question,
    Option,
    Submission,
    AnswerRecord,
    SectionScore,
    FinalScores,
    RecordAnswerRequest,
    SubmissionSummary,
    AnswerResult,
    FinishResult,
    ReviewItem,
    ReviewPayload
)

__all__ = [
    "TestDefinition",
    "Section",
    "QuestionGroup",
    "Question",
    "Option",
    "Submission",
    "AnswerRecord",
    "SectionScore",
    "FinalScores",
    "RecordAnswerRequest",
    "SubmissionSummary",
    "AnswerResult",
    "FinishResult",
    "ReviewItem",
    "ReviewPayload"
]
