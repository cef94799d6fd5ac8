# toeic_mocktest/core/utils.py
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from bson import ObjectId

from .config import config
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class ValidationUtils:
    """Utility functions for identifier and answer validation"""

    @staticmethod
    def validate_test_id(test_id: Any) -> bool:
        """Test ids are 24-hex ObjectId strings"""
        return isinstance(test_id, str) and ObjectId.is_valid(test_id)

    @staticmethod
    def validate_student_id(student_id: Any) -> bool:
        if not isinstance(student_id, str):
            return False
        stripped = student_id.strip()
        return 0 < len(stripped) <= config.MAX_STUDENT_ID_LENGTH

    @staticmethod
    def require_test_id(test_id: Any) -> str:
        if not ValidationUtils.validate_test_id(test_id):
            raise ValidationError(f"Invalid test id: {test_id!r}")
        # ObjectId hex is case-insensitive; stored ids are lowercase
        return test_id.lower()

    @staticmethod
    def require_student_id(student_id: Any) -> str:
        if not ValidationUtils.validate_student_id(student_id):
            raise ValidationError("Invalid student id")
        return student_id.strip()

    @staticmethod
    def sanitize_choice(choice: Any, max_length: Optional[int] = None) -> Any:
        """Trim a submitted choice and reject oversized payloads"""
        if max_length is None:
            max_length = config.MAX_CHOICE_LENGTH

        if choice is None:
            return ""

        if isinstance(choice, dict):
            sanitized = {}
            for slot, value in choice.items():
                text = "" if value is None else str(value).strip()
                if len(text) > max_length:
                    raise ValidationError(f"Answer for blank {slot} is too long")
                sanitized[str(slot)] = text
            return sanitized

        text = str(choice).strip()
        if len(text) > max_length:
            raise ValidationError("Answer is too long")
        return text


class DateTimeUtils:
    """Utility functions for date/time operations"""

    @staticmethod
    def now() -> datetime:
        """Current time, timezone-aware UTC"""
        return datetime.now(timezone.utc)

    @staticmethod
    def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
        """MongoDB hands back naive UTC datetimes unless the client is tz aware"""
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=timezone.utc)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(correct: int, total: int) -> int:
    """Whole-number percentage, 0 for an empty section"""
    if total <= 0:
        return 0
    return round_half_up(Decimal(correct) * 100 / Decimal(total))


def generate_id() -> str:
    """Generate a new ObjectId string"""
    return str(ObjectId())
