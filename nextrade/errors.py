"""Error taxonomy. Each error maps to one HTTP status at the route boundary."""
from typing import Optional


class NextradeError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmail(NextradeError):
    status_code = 400
    default_message = "Email already registered"


class InvalidCredentials(NextradeError):
    status_code = 401
    default_message = "Invalid credentials"


class Unauthorized(NextradeError):
    """Missing or malformed Authorization header."""
    status_code = 401
    default_message = "Unauthorized"


class InvalidToken(NextradeError):
    """Bad signature, expired token or unusable claims."""
    status_code = 401
    default_message = "Invalid token"


class Forbidden(NextradeError):
    status_code = 403
    default_message = "Not allowed"


class ValidationError(NextradeError):
    status_code = 400
    default_message = "Invalid request"


class UpstreamGatewayError(NextradeError):
    status_code = 500
    default_message = "Payment gateway error"
