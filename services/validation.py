# services/validation.py
"""Request schemas for the JSON endpoints.

Pydantic errors are translated into the field -> messages dict that
`ValidationFailed` carries, keyed by dotted path (`answers.0.answer_index`).
"""
from typing import Annotated, List, Literal

from pydantic import BaseModel, Field, ValidationError

from services.errors import ValidationFailed
from services.prompts import DIFFICULTIES, MAX_QUESTIONS, MIN_QUESTIONS, QUESTION_TYPES, SUMMARY_TYPES

DEFAULT_LANGUAGE = "id"

RecordId = Annotated[int, Field(strict=True, ge=1)]
Count = Annotated[int, Field(strict=True, ge=0)]
LanguageCode = Annotated[str, Field(strict=True, min_length=2, max_length=8)]


class SummaryRequest(BaseModel):
    document_id: RecordId
    summary_type: Literal["concise", "detailed", "bullet_points", "abstract"]
    # stored verbatim; prompts name unknown codes as English
    language: LanguageCode = DEFAULT_LANGUAGE


class QuizRequest(BaseModel):
    document_id: RecordId
    question_count: Annotated[int, Field(strict=True, ge=MIN_QUESTIONS, le=MAX_QUESTIONS)]
    difficulty: Literal["easy", "medium", "hard"]
    question_type: Literal["multiple_choice", "true_false", "mixed"]
    language: LanguageCode = DEFAULT_LANGUAGE


class Answer(BaseModel):
    question_id: Annotated[int, Field(strict=True)]
    answer_index: Count


class SubmitRequest(BaseModel):
    attempt_id: RecordId
    answers: List[Answer] = Field(min_length=1)
    time_spent_seconds: Count


def _one_of(label, choices):
    return f"{label} must be one of: {', '.join(choices)}"


# field path -> {pydantic error type: message}; the None key covers every other type
_MESSAGES = {
    "body": {None: "Request body must be a JSON object"},
    "document_id": {"missing": "Document ID is required", None: "Document ID must be a positive integer"},
    "summary_type": {"missing": "Summary type is required", None: _one_of("Summary type", SUMMARY_TYPES)},
    "question_count": {
        "missing": "Question count is required",
        "greater_than_equal": f"Question count must be at least {MIN_QUESTIONS}",
        "less_than_equal": f"Question count must not exceed {MAX_QUESTIONS}",
        None: "Question count must be an integer",
    },
    "difficulty": {"missing": "Difficulty is required", None: _one_of("Difficulty", DIFFICULTIES)},
    "question_type": {"missing": "Question type is required", None: _one_of("Question type", QUESTION_TYPES)},
    "language": {None: "Language must be a language code such as 'en' or 'id'"},
    "attempt_id": {"missing": "Attempt ID is required", None: "Attempt ID must be a positive integer"},
    "answers": {"missing": "Answers are required", "too_short": "Answers are required",
                None: "Answers must be an array"},
    "answers.*": {None: "Each answer must be an object"},
    "answers.*.question_id": {None: "Question ID is required for each answer"},
    "answers.*.answer_index": {
        "greater_than_equal": "Answer index must be at least 0",
        None: "Answer index is required for each answer",
    },
    "time_spent_seconds": {
        "missing": "Time spent is required",
        "greater_than_equal": "Time spent must be at least 0",
        None: "Time spent must be an integer",
    },
}


def _message(loc: tuple, err: dict) -> str:
    pattern = ".".join("*" if isinstance(p, int) else str(p) for p in loc) or "body"
    messages = _MESSAGES.get(pattern, {})
    # an explicit null reads as an omitted field
    kind = "missing" if err.get("input", ...) is None else err["type"]
    return messages.get(kind) or messages.get(None) or err["msg"]


def _parse(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = {}
        for err in e.errors():
            loc = tuple(err["loc"])
            key = ".".join(str(p) for p in loc) or "body"
            msg = _message(loc, err)
            if msg not in errors.setdefault(key, []):
                errors[key].append(msg)
        raise ValidationFailed(errors) from e


def summary_request(data) -> SummaryRequest:
    return _parse(SummaryRequest, data)


def quiz_request(data) -> QuizRequest:
    return _parse(QuizRequest, data)


def submit_request(data) -> SubmitRequest:
    return _parse(SubmitRequest, data)
