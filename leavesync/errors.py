"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``main.create_app`` maps them to ``{"message": ...}``
responses with the status code carried by the class.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed input, bad date range, length limits."""
    status_code = 400


class UnauthorizedError(AppError):
    """Missing, invalid or expired token; bad credentials."""
    status_code = 401


class ForbiddenError(AppError):
    """Inactive account, wrong role, acting on someone else's record."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate email, re-reviewing a request, overlapping leave."""
    status_code = 400
