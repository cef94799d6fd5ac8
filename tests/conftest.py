import copy
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from toeic_mocktest.api.dependencies import get_service
from toeic_mocktest.core.submission_store import MemorySubmissionStore
from toeic_mocktest.core.test_store import MemoryTestDefinitionStore, definition_from_document
from toeic_mocktest.main import app
from toeic_mocktest.services.test_service import MockTestService

READING_TEST_ID = "65f1c0de00000000000000aa"
TWO_SECTION_TEST_ID = "65f1c0de00000000000000bb"
MISSING_TEST_ID = "65f1c0de00000000000000ff"
STUDENT = "student-1"


def mcq(number, answer, prompt=None, **extra):
    return {
        "number": number,
        "type": "MCQ",
        "prompt": prompt or f"Question {number}",
        "options": [{"key": k, "text": f"Option {k}"} for k in "ABCD"],
        "answer": answer,
        **extra,
    }


def section(name, part, questions, **group_extra):
    return {
        "name": name,
        "part": part,
        "durationMinutes": 45 if name == "Listening" else 75,
        "linear": name == "Listening",
        "groups": [{"title": f"{name} Part {part}", "instructions": "Choose one.",
                    "questions": questions, **group_extra}],
    }


@pytest.fixture
def reading_doc():
    """One Reading section, one question, answer B"""
    return {
        "_id": READING_TEST_ID,
        "title": "Reading Only",
        "description": "Single question",
        "createdAt": datetime(2024, 3, 1, tzinfo=timezone.utc),
        "sections": [
            section("Reading", 5, [mcq(1, "B", explanationHtml="<p>By marks a deadline.</p>")]),
        ],
    }


@pytest.fixture
def two_section_doc():
    """Listening #1-2 and Reading #1-2: numbering restarts per section"""
    return {
        "_id": TWO_SECTION_TEST_ID,
        "title": "Full Mini Test",
        "createdAt": datetime(2024, 3, 2, tzinfo=timezone.utc),
        "sections": [
            section("Listening", 1, [mcq(1, "A"), mcq(2, "C")],
                    imageUrl="/media/p1.jpg", audioUrl="/media/p1.mp3"),
            section("Reading", 7, [mcq(2, "D"), mcq(1, "B")],
                    passageHtml="<p>Memo</p>"),
        ],
    }


@pytest.fixture
def reading_definition(reading_doc):
    return definition_from_document(copy.deepcopy(reading_doc))


@pytest.fixture
def two_section_definition(two_section_doc):
    return definition_from_document(copy.deepcopy(two_section_doc))


@pytest.fixture
def definition_store(reading_doc, two_section_doc):
    return MemoryTestDefinitionStore([reading_doc, two_section_doc])


@pytest.fixture
def submission_store():
    return MemorySubmissionStore()


@pytest.fixture
def service(definition_store, submission_store):
    return MockTestService(
        definition_store,
        submission_store,
        graded_types=["MCQ"],
        review_ordering="section",
        restamp_finished_at=False,
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def student_headers():
    return {"X-Student-Id": STUDENT}


@pytest.fixture
def admin_headers():
    return {"X-Student-Id": "admin-1", "X-User-Role": "admin"}
