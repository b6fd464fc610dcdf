"""
Error taxonomy for service-level failures.

Services raise these; the FastAPI exception handlers in ``jlpt_api.app`` turn
them into ``{"error": ..., "kind": ...}`` responses.
"""


class TrainerError(Exception):
    """Base class for all expected failures surfaced to API callers."""

    kind = "internal"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(TrainerError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class InvalidInputError(TrainerError):
    kind = "invalid_input"
    status_code = 400
    default_message = "Invalid input"


class ConflictError(TrainerError):
    # Existing clients expect 400 for these, the kind tells them apart
    kind = "conflict"
    status_code = 400
    default_message = "Conflict"


class SessionNotFound(NotFoundError):
    default_message = "Session not found"


class QuestionNotFound(NotFoundError):
    default_message = "Question not found"


class NoQuestionsMatched(InvalidInputError):
    default_message = "No questions found with selected filters"


class IndexOutOfRange(InvalidInputError):
    default_message = "Question index is out of range"


class InvalidAnswer(InvalidInputError):
    default_message = "Invalid answer for this question"


class AlreadyAnswered(ConflictError):
    default_message = "Question already answered"


class ChapterNotEmpty(ConflictError):
    default_message = "Cannot delete chapter with questions"
