"""
Business logic: grading, scoring, review assembly and the submission lifecycle
"""

from .grading import normalize_choice, grade_answer
from .scoring import compute_final_scores
from .review import build_review
from .test_service import get_test_service

__all__ = [
    "normalize_choice",
    "grade_answer",
    "compute_final_scores",
    "build_review",
    "get_test_service"
]
