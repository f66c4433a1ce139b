class QuizError(Exception):
    """Base class for failures surfaced to API callers as ``{"error": message}``."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(QuizError):
    status_code = 404


class InsufficientData(QuizError):
    """Fewer than one correct and one incorrect image are stored."""

    status_code = 400


class Unauthorized(QuizError):
    status_code = 401


class ValidationError(QuizError):
    status_code = 400


class StorageError(QuizError):
    """Database or filesystem failure."""

    status_code = 500
