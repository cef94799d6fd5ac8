# toeic_mocktest/core/exceptions.py
"""
Typed errors raised by the stores and services.

Each error carries the HTTP status and the machine-readable type the API layer
renders, so the client can tell "nothing to show yet" apart from a real fault.
"""


class MockTestError(Exception):
    """Base class for every error the mock test core surfaces"""

    status_code = 500
    error_type = "server_error"
    title = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "error": self.title,
            "message": self.message,
            "type": self.error_type
        }


class NotFoundError(MockTestError):
    """Referenced test or submission does not exist"""

    status_code = 404
    error_type = "not_found_error"
    title = "Resource Not Found"


class ValidationError(MockTestError):
    """Malformed identifier, unknown section or question number, bad answer payload"""

    status_code = 400
    error_type = "validation_error"
    title = "Validation Error"


class NotReadyError(MockTestError):
    """Submission missing or not finished yet"""

    status_code = 409
    error_type = "not_ready"
    title = "Not Ready"


class ConflictError(MockTestError):
    """A concurrent write lost a race that could not be resolved by retrying"""

    status_code = 409
    error_type = "conflict_error"
    title = "Conflict"


class AccessDeniedError(MockTestError):
    """Test visibility rules exclude the caller"""

    status_code = 403
    error_type = "access_denied"
    title = "Access Denied"


class AuthenticationError(MockTestError):
    """No authenticated identity was handed over with the request"""

    status_code = 401
    error_type = "authentication_error"
    title = "Unauthorized"
