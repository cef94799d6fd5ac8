from datetime import timedelta

import pytest

from conftest import MISSING_TEST_ID, READING_TEST_ID, STUDENT, TWO_SECTION_TEST_ID, mcq, section

from toeic_mocktest.core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    NotReadyError,
    ValidationError,
)
from toeic_mocktest.core.submission_store import MemorySubmissionStore
from toeic_mocktest.core.test_store import MemoryTestDefinitionStore, definition_from_document
from toeic_mocktest.core.utils import DateTimeUtils
from toeic_mocktest.services.test_service import MockTestService, can_access, runner_view

PRIVATE_TEST_ID = "65f1c0de00000000000000a1"
BLOCKING_TEST_ID = "65f1c0de00000000000000a2"


@pytest.fixture
def visibility_service():
    tests = MemoryTestDefinitionStore([
        {
            "_id": PRIVATE_TEST_ID,
            "title": "Private",
            "visibility": "allow-list",
            "allowedStudents": ["Alice"],
            "sections": [section("Reading", 5, [mcq(1, "A")])],
        },
        {
            "_id": BLOCKING_TEST_ID,
            "title": "Open except Bob",
            "visibility": "block-list",
            "blockedStudents": ["bob"],
            "sections": [section("Reading", 5, [mcq(1, "A")])],
        },
    ])
    return MockTestService(tests, MemorySubmissionStore(), graded_types=["MCQ"],
                           review_ordering="section", restamp_finished_at=False)


# ==================== Happy path ====================

def test_start_answer_finish_review(service):
    started = service.start(READING_TEST_ID, STUDENT)
    assert started.answers == []
    assert not started.is_finished

    result = service.record_answer(READING_TEST_ID, STUDENT, "Reading", 1, "b")
    assert (result.accepted, result.correct) == (True, True)

    finished = service.finish(READING_TEST_ID, STUDENT)
    assert finished.total_correct == 1
    assert finished.total_questions == 1
    assert finished.section_scores[0].percentage == 100
    assert finished.id == started.id

    review = service.review(READING_TEST_ID, STUDENT)
    assert review.total_correct == 1
    assert review.items[0].chosen == "b"
    assert review.items[0].correct is True


def test_start_is_idempotent(service):
    first = service.start(READING_TEST_ID, STUDENT)
    service.record_answer(READING_TEST_ID, STUDENT, "Reading", 1, "A")
    second = service.start(READING_TEST_ID, STUDENT)

    assert first.id == second.id
    assert first.started_at == second.started_at
    assert len(second.answers) == 1


def test_answer_without_start_creates_submission(service):
    service.record_answer(READING_TEST_ID, STUDENT, "Reading", 1, "C")

    submission = service.get_submission(READING_TEST_ID, STUDENT)
    assert submission is not None
    assert submission.answers[0].correct is False


def test_overwritten_answer_keeps_latest(service):
    service.start(TWO_SECTION_TEST_ID, STUDENT)
    service.record_answer(TWO_SECTION_TEST_ID, STUDENT, "Listening", 2, "A")
    service.record_answer(TWO_SECTION_TEST_ID, STUDENT, "Listening", 2, "C")

    answers = service.get_submission(TWO_SECTION_TEST_ID, STUDENT).answers
    assert [(a.number, a.choice, a.correct) for a in answers] == [(2, "C", True)]


def test_write_time_flags_agree_with_finish_time_count(service):
    service.start(TWO_SECTION_TEST_ID, STUDENT)
    for sec, number, choice in [("Listening", 1, "A"), ("Listening", 2, "B"),
                                ("Reading", 1, " b "), ("Reading", 2, "D")]:
        service.record_answer(TWO_SECTION_TEST_ID, STUDENT, sec, number, choice)

    flagged = sum(a.correct for a in service.get_submission(TWO_SECTION_TEST_ID, STUDENT).answers)
    finished = service.finish(TWO_SECTION_TEST_ID, STUDENT)

    assert flagged == finished.total_correct == 3
    assert finished.total_questions == 4


def test_finish_twice_keeps_first_finish_time(service, submission_store, monkeypatch):
    service.start(READING_TEST_ID, STUDENT)
    first = service.finish(READING_TEST_ID, STUDENT)

    later = first.finished_at + timedelta(minutes=10)
    monkeypatch.setattr(DateTimeUtils, "now", lambda: later)
    second = service.finish(READING_TEST_ID, STUDENT)

    assert second.finished_at == first.finished_at
    assert (second.total_correct, second.total_questions) == (first.total_correct, first.total_questions)


def test_finish_restamp_policy(definition_store, submission_store, monkeypatch):
    restamping = MockTestService(definition_store, submission_store, graded_types=["MCQ"],
                                 review_ordering="section", restamp_finished_at=True)
    restamping.start(READING_TEST_ID, STUDENT)
    first = restamping.finish(READING_TEST_ID, STUDENT)

    later = first.finished_at + timedelta(minutes=10)
    monkeypatch.setattr(DateTimeUtils, "now", lambda: later)

    assert restamping.finish(READING_TEST_ID, STUDENT).finished_at == later


def test_finish_recounts_against_current_definition(service, definition_store, two_section_doc):
    service.start(TWO_SECTION_TEST_ID, STUDENT)
    service.record_answer(TWO_SECTION_TEST_ID, STUDENT, "Reading", 2, "D")

    # Question removed after the answer was recorded
    edited = dict(two_section_doc)
    edited["sections"] = [two_section_doc["sections"][0],
                          section("Reading", 7, [mcq(1, "B")])]
    definition_store.add(definition_from_document(edited))

    finished = service.finish(TWO_SECTION_TEST_ID, STUDENT)
    assert finished.total_correct == 0
    assert finished.total_questions == 3

    review = service.review(TWO_SECTION_TEST_ID, STUDENT)
    removed = [i for i in review.items if i.removed]
    assert [(i.section, i.number) for i in removed] == [("Reading", 2)]


# ==================== Error paths ====================

def test_finish_without_submission(service):
    with pytest.raises(NotFoundError):
        service.finish(READING_TEST_ID, STUDENT)


def test_finish_unknown_test(service):
    with pytest.raises(NotFoundError):
        service.finish(MISSING_TEST_ID, STUDENT)


def test_malformed_test_id(service):
    with pytest.raises(ValidationError):
        service.start("123", STUDENT)
    with pytest.raises(ValidationError):
        service.finish("123", STUDENT)


def test_blank_student_id(service):
    with pytest.raises(ValidationError):
        service.start(READING_TEST_ID, "   ")


@pytest.mark.parametrize("sec,number", [
    ("Speaking", 1),
    ("", 1),
    ("Reading", 99),
])
def test_record_answer_rejects_unknown_question(service, sec, number):
    with pytest.raises(ValidationError):
        service.record_answer(READING_TEST_ID, STUDENT, sec, number, "A")
    assert service.get_submission(READING_TEST_ID, STUDENT) is None


def test_record_answer_rejects_oversized_choice(service):
    with pytest.raises(ValidationError):
        service.record_answer(READING_TEST_ID, STUDENT, "Reading", 1, "A" * 500)


def test_review_before_start_and_before_finish(service):
    with pytest.raises(NotReadyError):
        service.review(READING_TEST_ID, STUDENT)

    service.start(READING_TEST_ID, STUDENT)
    with pytest.raises(NotReadyError):
        service.review(READING_TEST_ID, STUDENT)


def test_review_uses_configured_ordering(definition_store, submission_store):
    by_number = MockTestService(definition_store, submission_store, graded_types=["MCQ"],
                                review_ordering="number", restamp_finished_at=False)
    by_number.start(TWO_SECTION_TEST_ID, STUDENT)
    by_number.finish(TWO_SECTION_TEST_ID, STUDENT)

    review = by_number.review(TWO_SECTION_TEST_ID, STUDENT)

    assert review.ordering == "number"
    assert [i.section for i in review.items] == ["Listening", "Reading", "Listening", "Reading"]


# ==================== Visibility ====================

def test_allow_list_visibility(visibility_service):
    assert visibility_service.start(PRIVATE_TEST_ID, " alice ").student_id == "alice"
    with pytest.raises(AccessDeniedError):
        visibility_service.start(PRIVATE_TEST_ID, "bob")
    with pytest.raises(AccessDeniedError):
        visibility_service.get_test(PRIVATE_TEST_ID, "bob")


def test_block_list_visibility(visibility_service):
    with pytest.raises(AccessDeniedError):
        visibility_service.record_answer(BLOCKING_TEST_ID, "BOB", "Reading", 1, "A")
    assert visibility_service.record_answer(BLOCKING_TEST_ID, "carol", "Reading", 1, "A").correct


def test_list_tests_filters_by_visibility(visibility_service):
    assert {t.id for t in visibility_service.list_tests("alice")} == {PRIVATE_TEST_ID, BLOCKING_TEST_ID}
    assert visibility_service.list_tests("bob") == []


def test_can_access_defaults_to_everyone(reading_definition):
    assert can_access(reading_definition, "anyone")


# ==================== Runner view ====================

def test_runner_view_hides_answers(two_section_definition):
    view = runner_view(two_section_definition)

    questions = [q for s in view["sections"] for g in s["groups"] for q in g["questions"]]
    assert len(questions) == 4
    assert all("answer" not in q and "explanationHtml" not in q for q in questions)
    assert questions[0]["options"][0] == {"key": "A", "text": "Option A"}
    assert view["sections"][0]["durationMinutes"] == 45
    assert "allowedStudents" not in view


def test_runner_view_hides_blank_and_pair_keys():
    definition = definition_from_document({
        "_id": "65f1c0de00000000000000a3",
        "title": "Mixed",
        "sections": [section("Reading", 7, [
            {"number": 1, "type": "FILL_BLOCK", "blockText": "A [1] and a [2]",
             "blanks": [{"slotNumber": 1, "correctAnswer": "dog", "explain": "noun"}]},
            {"number": 2, "type": "MATCH", "pairs": [{"left": "i", "rightAnswer": "B"}]},
            {"number": 3, "type": "TFNG", "tfngAnswer": "FALSE"},
        ])],
    })

    questions = runner_view(definition)["sections"][0]["groups"][0]["questions"]

    assert questions[0]["blanks"] == [{"slotNumber": 1, "limit": "ONE WORD ONLY"}]
    assert questions[1]["pairs"] == [{"left": "i"}]
    assert "tfngAnswer" not in questions[2]


# ==================== Admin ====================

def test_admin_list_reports_part_counts(service):
    items = {t.id: t for t in service.admin_list_tests()}

    parts = items[TWO_SECTION_TEST_ID].parts
    assert [(p.name, p.part, p.q_count) for p in parts] == [("Listening", 1, 2), ("Reading", 7, 2)]
    assert items[READING_TEST_ID].visibility == "all"


def test_admin_results_and_detail(service):
    service.start(READING_TEST_ID, "s-done")
    service.record_answer(READING_TEST_ID, "s-done", "Reading", 1, "B")
    service.finish(READING_TEST_ID, "s-done")
    in_progress = service.start(TWO_SECTION_TEST_ID, "s-open")

    rows = service.admin_results()
    assert [r.student_id for r in rows] == ["s-done", "s-open"]
    assert rows[0].test_title == "Reading Only"
    assert rows[0].total_correct == 1

    detail = service.admin_result_detail(in_progress.id)
    assert detail.student_id == "s-open"
    assert detail.finished_at is None
    assert len(detail.items) == 4


def test_admin_detail_unknown_submission(service):
    with pytest.raises(NotFoundError):
        service.admin_result_detail("65f1c0de0000000000000999")


def test_health_check(service):
    health = service.health_check()
    assert health["status"] == "healthy"
    assert health["tests"] == 2
    assert health["graded_types"] == ["MCQ"]


def test_uppercase_test_id_reaches_the_same_submission(service):
    upper = READING_TEST_ID.upper()
    started = service.start(READING_TEST_ID, STUDENT)
    service.record_answer(upper, STUDENT, "Reading", 1, "B")

    assert service.get_submission(upper, STUDENT).id == started.id
    finished = service.finish(upper, STUDENT)
    assert finished.id == started.id
    assert finished.total_correct == 1
    assert service.review(upper, STUDENT).test_id == READING_TEST_ID


def test_test_with_unmodelled_question_type_is_playable():
    legacy_id = "65f1c0de00000000000000a4"
    tests = MemoryTestDefinitionStore([{
        "_id": legacy_id,
        "title": "Legacy types",
        "sections": [section("Reading", 5, [
            mcq(1, "A"),
            {"number": 2, "type": "TrueFalse", "prompt": "Is it?", "answer": "True"},
        ])],
    }])
    legacy = MockTestService(tests, MemorySubmissionStore(), graded_types=["MCQ"],
                             review_ordering="section", restamp_finished_at=False)

    assert [t.id for t in legacy.list_tests(STUDENT)] == [legacy_id]
    legacy.start(legacy_id, STUDENT)
    assert legacy.record_answer(legacy_id, STUDENT, "Reading", 2, "True").correct is False
    legacy.record_answer(legacy_id, STUDENT, "Reading", 1, "A")

    finished = legacy.finish(legacy_id, STUDENT)
    assert (finished.total_correct, finished.total_questions) == (1, 1)
    assert finished.section_scores[0].ungraded == 1

    items = legacy.review(legacy_id, STUDENT).items
    assert [(i.type, i.correct_answer) for i in items] == [("MCQ", "A"), ("TrueFalse", "True")]
    assert "answer" not in legacy.get_test(legacy_id, STUDENT)["sections"][0]["groups"][0]["questions"][1]
