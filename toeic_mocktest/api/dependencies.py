# toeic_mocktest/api/dependencies.py
"""
Identity handover from the upstream authentication layer.

Tokens are verified before requests reach this service; the verified
student id and role arrive as request headers.
"""

import logging

from fastapi import Request

from ..core.config import config
from ..core.exceptions import AccessDeniedError, AuthenticationError
from ..services.test_service import MockTestService, get_test_service

logger = logging.getLogger(__name__)


def get_service() -> MockTestService:
    return get_test_service()


def get_current_student(request: Request) -> str:
    student_id = request.headers.get(config.STUDENT_ID_HEADER, "").strip()
    if not student_id:
        raise AuthenticationError("Missing authenticated student id")
    return student_id


def require_admin(request: Request) -> str:
    user_id = get_current_student(request)
    role = request.headers.get(config.USER_ROLE_HEADER, "").strip().lower()
    if role != config.ADMIN_ROLE.lower():
        logger.warning(f"Admin route refused for user {user_id} with role {role!r}")
        raise AccessDeniedError("Access denied: insufficient role")
    return user_id
