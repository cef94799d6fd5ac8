# toeic_mocktest/core/config.py
import os
from typing import Dict, Any, FrozenSet, List
from urllib.parse import quote_plus
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


REVIEW_ORDERINGS = ("section", "number")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip().upper() for item in os.getenv(name, default).split(",") if item.strip()]


class Config:
    """Centralized configuration management"""

    # ==================== API Configuration ====================
    API_TITLE = "TOEIC Mock Test API"
    API_DESCRIPTION = "Timed TOEIC-style mock tests with autosaved answers, scoring and review"
    API_VERSION = "1.0.0"

    # ==================== Database Configuration ====================
    MONGO_USER = os.getenv("MONGO_USER", "")
    MONGO_PASS = os.getenv("MONGO_PASS", "")
    MONGO_HOST = os.getenv("MONGO_HOST", "localhost:27017")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "toeic")
    MONGO_AUTH_SOURCE = os.getenv("MONGO_AUTH_SOURCE", "admin")
    MONGO_URI = os.getenv("MONGO_URI", "")
    MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

    @property
    def MONGO_CONNECTION_STRING(self) -> str:
        if self.MONGO_URI:
            return self.MONGO_URI
        if not self.MONGO_USER:
            return f"mongodb://{self.MONGO_HOST}/{self.MONGO_DB_NAME}"
        return (
            f"mongodb://{quote_plus(self.MONGO_USER)}:"
            f"{quote_plus(self.MONGO_PASS)}@{self.MONGO_HOST}/"
            f"{self.MONGO_DB_NAME}?authSource={self.MONGO_AUTH_SOURCE}"
        )

    # Collections
    MOCK_TESTS_COLLECTION = os.getenv("MOCK_TESTS_COLLECTION", "mock_tests")
    MOCK_SUBMISSIONS_COLLECTION = os.getenv("MOCK_SUBMISSIONS_COLLECTION", "mock_submissions")

    # ==================== Development Settings ====================
    USE_DUMMY_DATA = _env_flag("USE_DUMMY_DATA", "true")

    # ==================== Scoring & Review Policies ====================
    # When false, repeated finish calls keep the first completion time
    FINISH_RESTAMPS_FINISHED_AT = _env_flag("FINISH_RESTAMPS_FINISHED_AT", "false")
    REVIEW_ORDERING = os.getenv("REVIEW_ORDERING", "section").strip().lower()
    GRADED_QUESTION_TYPES = _env_list("GRADED_QUESTION_TYPES", "MCQ")

    # ==================== Request Limits ====================
    MAX_CHOICE_LENGTH = int(os.getenv("MAX_CHOICE_LENGTH", "200"))
    MAX_STUDENT_ID_LENGTH = int(os.getenv("MAX_STUDENT_ID_LENGTH", "128"))
    START_RETRY_ATTEMPTS = int(os.getenv("START_RETRY_ATTEMPTS", "3"))

    # ==================== Identity Handover ====================
    # Identity is verified upstream; these headers carry the result
    STUDENT_ID_HEADER = os.getenv("STUDENT_ID_HEADER", "X-Student-Id")
    USER_ROLE_HEADER = os.getenv("USER_ROLE_HEADER", "X-User-Role")
    ADMIN_ROLE = os.getenv("ADMIN_ROLE", "admin")

    # ==================== Server ====================
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8070"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    DEBUG_MODE = _env_flag("DEBUG_MODE", "false")

    @property
    def graded_types(self) -> FrozenSet[str]:
        return frozenset(self.GRADED_QUESTION_TYPES)

    # ==================== Environment Overrides ====================
    @classmethod
    def from_env(cls) -> 'Config':
        """Create config with environment variable overrides"""
        return cls()

    # ==================== Validation ====================
    def validate(self) -> Dict[str, Any]:
        """Validate configuration and return status"""
        issues = []

        if self.REVIEW_ORDERING not in REVIEW_ORDERINGS:
            issues.append(f"REVIEW_ORDERING must be one of {', '.join(REVIEW_ORDERINGS)}")

        if not self.GRADED_QUESTION_TYPES:
            issues.append("GRADED_QUESTION_TYPES must name at least one question type")

        if self.MAX_CHOICE_LENGTH < 1:
            issues.append("MAX_CHOICE_LENGTH must be at least 1")

        if self.MAX_STUDENT_ID_LENGTH < 1:
            issues.append("MAX_STUDENT_ID_LENGTH must be at least 1")

        if self.START_RETRY_ATTEMPTS < 1:
            issues.append("START_RETRY_ATTEMPTS must be at least 1")

        return {
            "valid": len(issues) == 0,
            "issues": issues,
            "config_loaded": True,
            "using_dummy_data": self.USE_DUMMY_DATA
        }

# Global configuration instance
config = Config.from_env()

# Validate on import
validation_result = config.validate()
if not validation_result["valid"]:
    import logging
    logger = logging.getLogger(__name__)
    logger.warning(f"Configuration issues: {validation_result['issues']}")
