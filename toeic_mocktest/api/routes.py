# toeic_mocktest/api/routes.py
import logging
from typing import Any, Dict, List, Union

from fastapi import APIRouter, Depends

from ..core.config import config
from ..core.utils import DateTimeUtils
from ..models.schemas import (
    AdminReviewPayload,
    AdminTestListItem,
    AnswerResult,
    FinishResult,
    NotStartedState,
    RecordAnswerRequest,
    ResultRow,
    ReviewPayload,
    SubmissionState,
    SubmissionSummary,
    TestListItem,
)
from ..services.test_service import MockTestService
from .dependencies import get_current_student, get_service, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def home():
    """Home endpoint"""
    return {
        "service": config.API_TITLE,
        "version": config.API_VERSION,
        "status": "operational"
    }


@router.get("/api/health")
async def health_check():
    """Health check"""
    return {
        "status": "healthy",
        "timestamp": DateTimeUtils.now().isoformat()
    }


# Admin routes are registered before /{test_id} so "admin" is not read as an id

@router.get("/api/mocktests/admin/list", response_model=List[AdminTestListItem])
def admin_list_tests(_admin: str = Depends(require_admin),
                     service: MockTestService = Depends(get_service)):
    """All tests with per-part question counts"""
    return service.admin_list_tests()


@router.get("/api/mocktests/admin/results", response_model=List[ResultRow])
def admin_results(_admin: str = Depends(require_admin),
                  service: MockTestService = Depends(get_service)):
    """Every submission, newest finish first"""
    return service.admin_results()


@router.get("/api/mocktests/admin/results/{submission_id}", response_model=AdminReviewPayload)
def admin_result_detail(submission_id: str,
                        _admin: str = Depends(require_admin),
                        service: MockTestService = Depends(get_service)):
    """Review of any student's submission"""
    return service.admin_result_detail(submission_id)


@router.get("/api/mocktests", response_model=List[TestListItem])
def list_tests(student_id: str = Depends(get_current_student),
               service: MockTestService = Depends(get_service)):
    """Tests visible to the student"""
    return service.list_tests(student_id)


@router.get("/api/mocktests/{test_id}")
def get_test(test_id: str,
             student_id: str = Depends(get_current_student),
             service: MockTestService = Depends(get_service)) -> Dict[str, Any]:
    """Full test for the runner, without answer keys"""
    return service.get_test(test_id, student_id)


@router.post("/api/mocktests/{test_id}/start", response_model=SubmissionSummary)
def start_test(test_id: str,
               student_id: str = Depends(get_current_student),
               service: MockTestService = Depends(get_service)):
    """Start or resume a session"""
    submission = service.start(test_id, student_id)
    return SubmissionSummary.from_submission(submission)


@router.get("/api/mocktests/{test_id}/submission",
            response_model=Union[SubmissionState, NotStartedState])
def get_submission(test_id: str,
                   student_id: str = Depends(get_current_student),
                   service: MockTestService = Depends(get_service)):
    """Autosave state, or {"started": false} before the first start"""
    submission = service.get_submission(test_id, student_id)
    if submission is None:
        return NotStartedState()
    return SubmissionState.from_submission(submission)


@router.post("/api/mocktests/{test_id}/answer", response_model=AnswerResult)
def record_answer(test_id: str,
                  request_data: RecordAnswerRequest,
                  student_id: str = Depends(get_current_student),
                  service: MockTestService = Depends(get_service)):
    """Autosave one answer with immediate correctness"""
    return service.record_answer(
        test_id, student_id, request_data.section, request_data.number, request_data.choice
    )


@router.post("/api/mocktests/{test_id}/finish", response_model=FinishResult)
def finish_test(test_id: str,
                student_id: str = Depends(get_current_student),
                service: MockTestService = Depends(get_service)):
    """Score the submission"""
    submission = service.finish(test_id, student_id)
    return FinishResult(
        id=submission.id,
        section_scores=submission.section_scores,
        total_correct=submission.total_correct,
        total_questions=submission.total_questions,
        finished_at=submission.finished_at,
    )


@router.get("/api/mocktests/{test_id}/review", response_model=ReviewPayload)
def review_test(test_id: str,
                student_id: str = Depends(get_current_student),
                service: MockTestService = Depends(get_service)):
    """Chosen vs. correct answers with explanations"""
    return service.review(test_id, student_id)
