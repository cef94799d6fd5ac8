# toeic_mocktest/models/schemas.py
"""
Pydantic models for test definitions, submissions and API payloads.

Stored test documents and API bodies use camelCase keys (passageHtml,
durationMinutes, ...); Python code uses the snake_case attribute names.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== Test Definition ====================

class Option(CamelModel):
    key: str
    text: str = ""


class Blank(CamelModel):
    slot_number: int = 0
    correct_answer: str = ""
    limit: str = "ONE WORD ONLY"
    explain: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if "slot" in data and "slotNumber" not in data:
                data["slotNumber"] = data.pop("slot")
            if "answer" in data and "correctAnswer" not in data:
                data["correctAnswer"] = data.pop("answer")
        return data


class MatchPair(CamelModel):
    left: str = ""
    right_answer: str = ""


class QuestionBase(CamelModel):
    number: int
    prompt: str = ""
    options: List[Option] = Field(default_factory=list)
    explanation_html: str = ""
    # Markdown source, rendered when no explanationHtml is authored
    explanation: str = ""
    tags: List[str] = Field(default_factory=list)
    anchors: List[str] = Field(default_factory=list)

    @field_validator("explanation_html", "explanation", "prompt", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def correct_answer_display(self) -> str:
        return ""


class McqQuestion(QuestionBase):
    type: Literal["MCQ"] = "MCQ"
    answer: str = ""

    def correct_answer_display(self) -> str:
        return self.answer


class TfngQuestion(QuestionBase):
    type: Literal["TFNG"] = "TFNG"
    tfng_answer: str = ""

    def correct_answer_display(self) -> str:
        return self.tfng_answer


class FillQuestion(QuestionBase):
    type: Literal["FILL"] = "FILL"
    answer: str = ""

    def correct_answer_display(self) -> str:
        return self.answer


class FillBlockQuestion(QuestionBase):
    type: Literal["FILL_BLOCK"] = "FILL_BLOCK"
    block_text: str = ""
    blanks: List[Blank] = Field(default_factory=list)

    def correct_answer_display(self) -> str:
        return " | ".join(f"{b.slot_number}: {b.correct_answer}" for b in self.blanks)


class MatchQuestion(QuestionBase):
    type: Literal["MATCH"] = "MATCH"
    pairs: List[MatchPair] = Field(default_factory=list)

    def correct_answer_display(self) -> str:
        return " | ".join(f"{p.left} → {p.right_answer}" for p in self.pairs)


class UngradedQuestion(QuestionBase):
    """Any other authored type (TrueFalse, FillIn, ...): kept and shown, never graded"""
    type: str
    answer: str = ""

    def correct_answer_display(self) -> str:
        return self.answer


MODELLED_TYPES = ("MCQ", "TFNG", "FILL", "FILL_BLOCK", "MATCH")
OTHER_TYPE_TAG = "OTHER"


def question_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    kind = kind or "MCQ"
    return kind if kind in MODELLED_TYPES else OTHER_TYPE_TAG


Question = Annotated[
    Union[
        Annotated[McqQuestion, Tag("MCQ")],
        Annotated[TfngQuestion, Tag("TFNG")],
        Annotated[FillQuestion, Tag("FILL")],
        Annotated[FillBlockQuestion, Tag("FILL_BLOCK")],
        Annotated[MatchQuestion, Tag("MATCH")],
        Annotated[UngradedQuestion, Tag(OTHER_TYPE_TAG)],
    ],
    Discriminator(question_tag),
]


class QuestionGroup(CamelModel):
    title: str = ""
    instructions: str = ""
    passage_html: str = ""
    image_url: str = ""
    audio_url: str = ""
    questions: List[Question] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def default_question_type(cls, data: Any) -> Any:
        # Questions authored before the type tag existed are multiple choice
        if isinstance(data, dict) and isinstance(data.get("questions"), list):
            data = dict(data)
            data["questions"] = [
                {**q, "type": q.get("type") or "MCQ"} if isinstance(q, dict) else q
                for q in data["questions"]
            ]
        return data

    @field_validator("title", "instructions", "passage_html", "image_url", "audio_url", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Section(CamelModel):
    name: str
    part: int
    duration_minutes: int = Field(gt=0)
    linear: bool = True
    groups: List[QuestionGroup] = Field(default_factory=list)

    def flattened_questions(self) -> List[Question]:
        questions = [q for group in self.groups for q in group.questions]
        return sorted(questions, key=lambda q: q.number)


class TestDefinition(CamelModel):
    __test__ = False

    id: str
    title: str
    description: str = ""
    sections: List[Section] = Field(default_factory=list)
    visibility: Literal["all", "allow-list", "block-list"] = "all"
    allowed_students: List[str] = Field(default_factory=list)
    blocked_students: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def section_names(self) -> List[str]:
        """Distinct section names in definition order"""
        names: List[str] = []
        for section in self.sections:
            if section.name not in names:
                names.append(section.name)
        return names

    def has_section(self, name: str) -> bool:
        return any(section.name == name for section in self.sections)

    def questions_by_section(self) -> Dict[str, List[Question]]:
        """
        Flattened question view: section name -> questions ordered by number.

        Sections sharing a name (Reading Part 5, 6 and 7) are one numbering scope.
        """
        view: Dict[str, List[Question]] = {name: [] for name in self.section_names()}
        for section in self.sections:
            view[section.name].extend(q for group in section.groups for q in group.questions)
        return {name: sorted(questions, key=lambda q: q.number) for name, questions in view.items()}

    def find_question(self, section_name: str, number: int) -> Optional[Question]:
        for question in self.questions_by_section().get(section_name, []):
            if question.number == number:
                return question
        return None

    def question_index(self) -> Dict[Tuple[str, int], Tuple[Question, QuestionGroup, Section]]:
        """(section name, number) -> (question, enclosing group, enclosing section)"""
        index: Dict[Tuple[str, int], Tuple[Question, QuestionGroup, Section]] = {}
        for section in self.sections:
            for group in section.groups:
                for question in group.questions:
                    index.setdefault((section.name, question.number), (question, group, section))
        return index

    def question_count(self) -> int:
        return sum(len(questions) for questions in self.questions_by_section().values())


# ==================== Submission ====================

class AnswerRecord(CamelModel):
    section: str
    number: int
    choice: Any = ""
    correct: bool = False


class SectionScore(CamelModel):
    section: str
    part: Optional[int] = None
    correct: int = 0
    total: int = 0
    percentage: int = 0
    ungraded: int = 0


class FinalScores(CamelModel):
    section_scores: List[SectionScore] = Field(default_factory=list)
    total_correct: int = 0
    total_questions: int = 0


class Submission(CamelModel):
    id: str
    test_id: str
    student_id: str
    answers: List[AnswerRecord] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    section_scores: List[SectionScore] = Field(default_factory=list)
    total_correct: int = 0
    total_questions: int = 0

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None

    def answer_map(self) -> Dict[Tuple[str, int], AnswerRecord]:
        """(section, number) -> answer; later entries win"""
        return {(a.section, a.number): a for a in self.answers}


# ==================== Requests ====================

class RecordAnswerRequest(CamelModel):
    section: str = Field(..., min_length=1)
    number: int
    choice: Union[str, Dict[str, str]] = ""


# ==================== Responses ====================

class SubmissionSummary(CamelModel):
    """Start/resume response"""
    id: str
    test_id: str
    student_id: str
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    total_correct: int = 0
    total_questions: int = 0
    section_scores: List[SectionScore] = Field(default_factory=list)

    @classmethod
    def from_submission(cls, submission: Submission) -> "SubmissionSummary":
        return cls(
            id=submission.id,
            test_id=submission.test_id,
            student_id=submission.student_id,
            started_at=submission.started_at,
            finished_at=submission.finished_at,
            total_correct=submission.total_correct,
            total_questions=submission.total_questions,
            section_scores=submission.section_scores,
        )


class SubmissionState(SubmissionSummary):
    """Autosave state, including recorded answers"""
    started: bool = True
    answers: List[AnswerRecord] = Field(default_factory=list)

    @classmethod
    def from_submission(cls, submission: Submission) -> "SubmissionState":
        summary = SubmissionSummary.from_submission(submission)
        return cls(**summary.model_dump(), answers=submission.answers)


class NotStartedState(CamelModel):
    started: bool = False


class AnswerResult(CamelModel):
    accepted: bool = True
    correct: bool = False


class FinishResult(CamelModel):
    id: str
    section_scores: List[SectionScore] = Field(default_factory=list)
    total_correct: int = 0
    total_questions: int = 0
    finished_at: Optional[datetime] = None


class ReviewGroup(CamelModel):
    title: str = ""
    instructions: str = ""
    passage_html: str = ""
    image_url: str = ""
    audio_url: str = ""
    part: Optional[int] = None


class ReviewItem(CamelModel):
    section: str
    number: int
    type: str = ""
    prompt: str = ""
    options: List[Option] = Field(default_factory=list)
    correct_answer: str = ""
    chosen: Any = ""
    correct: bool = False
    answered: bool = False
    # Answer refers to a question no longer in the definition
    removed: bool = False
    explanation_html: str = ""
    group: Optional[ReviewGroup] = None


class ReviewPayload(CamelModel):
    test_id: str
    title: str = ""
    description: str = ""
    section_scores: List[SectionScore] = Field(default_factory=list)
    total_correct: int = 0
    total_questions: int = 0
    finished_at: Optional[datetime] = None
    ordering: str = "section"
    items: List[ReviewItem] = Field(default_factory=list)


class AdminReviewPayload(ReviewPayload):
    submission_id: str
    student_id: str
    started_at: Optional[datetime] = None


class TestListItem(CamelModel):
    __test__ = False

    id: str
    title: str
    description: str = ""
    created_at: Optional[datetime] = None


class PartSummary(CamelModel):
    name: str
    part: int
    q_count: int = 0


class AdminTestListItem(TestListItem):
    parts: List[PartSummary] = Field(default_factory=list)
    visibility: str = "all"
    allowed_students: List[str] = Field(default_factory=list)
    blocked_students: List[str] = Field(default_factory=list)


class ResultRow(CamelModel):
    submission_id: str
    test_id: str
    test_title: str = ""
    student_id: str
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    total_correct: int = 0
    total_questions: int = 0
    section_scores: List[SectionScore] = Field(default_factory=list)
