# toeic_mocktest/core/submission_store.py
"""
Submission Store: one record per (test, student) pair.

Both backends share the same contract:
  get_or_create  - insert-if-absent, never duplicates under concurrent starts
  get            - None when the student has not started
  upsert_answer  - last write wins per (section, number)
  finalize       - stores the aggregate; finished_at policy set by the caller
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pymongo
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from .config import config
from .exceptions import ConflictError, NotFoundError
from .utils import DateTimeUtils, generate_id
from ..models.schemas import AnswerRecord, FinalScores, Submission

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _results_order(submission: Submission):
    # Newest finish first, unfinished attempts last
    return (
        submission.finished_at is not None,
        submission.finished_at or _EPOCH,
        submission.started_at or _EPOCH,
    )


class MemorySubmissionStore:
    """Dict-backed submissions keyed by (test_id, student_id)"""

    def __init__(self):
        self._submissions: Dict[Tuple[str, str], Submission] = {}
        self._lock = threading.Lock()

    def get_or_create(self, test_id: str, student_id: str) -> Submission:
        key = (test_id, student_id)
        with self._lock:
            submission = self._submissions.get(key)
            if submission is None:
                submission = Submission(
                    id=generate_id(),
                    test_id=test_id,
                    student_id=student_id,
                    started_at=DateTimeUtils.now(),
                )
                self._submissions[key] = submission
                logger.info(f"✅ Submission created: test={test_id} student={student_id}")
            return submission.model_copy(deep=True)

    def get(self, test_id: str, student_id: str) -> Optional[Submission]:
        with self._lock:
            submission = self._submissions.get((test_id, student_id))
            return submission.model_copy(deep=True) if submission else None

    def get_by_id(self, submission_id: str) -> Optional[Submission]:
        with self._lock:
            for submission in self._submissions.values():
                if submission.id == submission_id:
                    return submission.model_copy(deep=True)
        return None

    def upsert_answer(self, test_id: str, student_id: str, section: str,
                      number: int, choice: Any, correct: bool) -> None:
        record = AnswerRecord(section=section, number=number, choice=choice, correct=correct)
        with self._lock:
            submission = self._submissions.get((test_id, student_id))
            if submission is None:
                raise NotFoundError("No submission to record the answer on")

            for i, existing in enumerate(submission.answers):
                if existing.section == section and existing.number == number:
                    submission.answers[i] = record
                    return
            submission.answers.append(record)

    def finalize(self, test_id: str, student_id: str, scores: FinalScores,
                 restamp: bool = False) -> Submission:
        with self._lock:
            submission = self._submissions.get((test_id, student_id))
            if submission is None:
                raise NotFoundError("No submission to finish")

            submission.section_scores = list(scores.section_scores)
            submission.total_correct = scores.total_correct
            submission.total_questions = scores.total_questions
            if restamp or submission.finished_at is None:
                submission.finished_at = DateTimeUtils.now()
            return submission.model_copy(deep=True)

    def list_all(self) -> List[Submission]:
        with self._lock:
            submissions = [s.model_copy(deep=True) for s in self._submissions.values()]
        return sorted(submissions, key=_results_order, reverse=True)

    def count(self) -> int:
        with self._lock:
            return len(self._submissions)


class MongoSubmissionStore:
    """Submissions in the mock submissions collection"""

    def __init__(self, collection, retry_attempts: Optional[int] = None):
        self.collection = collection
        self.retry_attempts = retry_attempts or config.START_RETRY_ATTEMPTS

    @staticmethod
    def _to_model(doc: Dict[str, Any]) -> Submission:
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        for field in ("started_at", "finished_at"):
            data[field] = DateTimeUtils.ensure_aware(data.get(field))
        return Submission.model_validate(data)

    def ensure_indexes(self):
        self.collection.create_index(
            [("test_id", pymongo.ASCENDING), ("student_id", pymongo.ASCENDING)],
            unique=True,
            name="test_student_unique",
        )
        self.collection.create_index([("finished_at", pymongo.DESCENDING)])

    def get_or_create(self, test_id: str, student_id: str) -> Submission:
        query = {"test_id": test_id, "student_id": student_id}
        on_insert = {
            "answers": [],
            "started_at": DateTimeUtils.now(),
            "finished_at": None,
            "section_scores": [],
            "total_correct": 0,
            "total_questions": 0,
        }

        for attempt in range(1, self.retry_attempts + 1):
            try:
                doc = self.collection.find_one_and_update(
                    query,
                    {"$setOnInsert": on_insert},
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
                return self._to_model(doc)
            except DuplicateKeyError:
                # Another request inserted the same pair first; read theirs
                logger.warning(f"Start race on test={test_id} student={student_id} (attempt {attempt})")
                doc = self.collection.find_one(query)
                if doc:
                    return self._to_model(doc)

        raise ConflictError("Could not create or load the submission, please retry")

    def get(self, test_id: str, student_id: str) -> Optional[Submission]:
        doc = self.collection.find_one({"test_id": test_id, "student_id": student_id})
        return self._to_model(doc) if doc else None

    def get_by_id(self, submission_id: str) -> Optional[Submission]:
        if not ObjectId.is_valid(submission_id):
            return None
        doc = self.collection.find_one({"_id": ObjectId(submission_id)})
        return self._to_model(doc) if doc else None

    def upsert_answer(self, test_id: str, student_id: str, section: str,
                      number: int, choice: Any, correct: bool) -> None:
        query = {"test_id": test_id, "student_id": student_id}
        element = {"section": section, "number": number}
        payload = {**element, "choice": choice, "correct": correct}

        replace = ({**query, "answers": {"$elemMatch": element}}, {"$set": {"answers.$": payload}})
        append = ({**query, "answers": {"$not": {"$elemMatch": element}}}, {"$push": {"answers": payload}})

        # Overwrite in place, else append only while no entry exists, else
        # a concurrent append won and the overwrite applies to it
        for selector, update in (replace, append, replace):
            result = self.collection.update_one(selector, update)
            if result.matched_count:
                return

        if not self.collection.count_documents(query, limit=1):
            raise NotFoundError("No submission to record the answer on")
        raise ConflictError("Answer could not be saved, please retry")

    def finalize(self, test_id: str, student_id: str, scores: FinalScores,
                 restamp: bool = False) -> Submission:
        now = DateTimeUtils.now()
        fields = {
            "section_scores": {"$literal": [s.model_dump() for s in scores.section_scores]},
            "total_correct": scores.total_correct,
            "total_questions": scores.total_questions,
            "finished_at": now if restamp else {"$ifNull": ["$finished_at", now]},
        }

        doc = self.collection.find_one_and_update(
            {"test_id": test_id, "student_id": student_id},
            [{"$set": fields}],
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError("No submission to finish")
        return self._to_model(doc)

    def list_all(self) -> List[Submission]:
        cursor = self.collection.find({}).sort([
            ("finished_at", pymongo.DESCENDING),
            ("started_at", pymongo.DESCENDING),
        ])
        return [self._to_model(doc) for doc in cursor]

    def count(self) -> int:
        return self.collection.count_documents({})
