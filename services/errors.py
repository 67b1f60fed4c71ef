# services/errors.py
from typing import Optional


class LearningError(Exception):
    """Base for failures that map onto an HTTP response."""
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        if message:
            self.message = message
        # diagnostic text for logs, never rendered to the client
        self.detail = detail
        super().__init__(detail or self.message)


class NotFound(LearningError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class Unauthenticated(LearningError):
    status_code = 401
    message = "Unauthenticated"


class ValidationFailed(LearningError):
    status_code = 422
    message = "The given data was invalid"

    def __init__(self, errors: dict):
        super().__init__()
        self.errors = errors


class DocumentNotReady(LearningError):
    status_code = 422

    def __init__(self, purpose: str = "generating content"):
        super().__init__(f"The document must be fully processed before {purpose}")


class InvalidStateTransition(LearningError):
    status_code = 400
    message = "This attempt has already been completed"


class UploadFailed(LearningError):
    message = "Failed to upload document for processing"


class GenerationFailed(LearningError):
    message = "Failed to generate content"


class EmptyGenerationResult(GenerationFailed):
    message = "Failed to generate quiz questions"


class GradingError(LearningError):
    message = "Quiz cannot be graded"
