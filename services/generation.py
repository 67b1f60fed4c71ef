# services/generation.py
import logging
import time
from dataclasses import dataclass

from ai_providers.base import AIProvider, FileHandle
from services.errors import (
    DocumentNotReady,
    EmptyGenerationResult,
    GenerationFailed,
    UploadFailed,
)
from services.prompts import MIN_QUESTIONS

logger = logging.getLogger(__name__)

OPTION_COUNTS = {"multiple_choice": 4, "true_false": 2}


@dataclass(frozen=True)
class GeneratedSummary:
    content: str
    word_count: int
    processing_time_seconds: int


def _coerce_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


# standardise provider output: sequential ids, clean strings, drop unusable items
def normalize_questions(items: list, question_type: str) -> list:
    out = []
    for it in items or []:
        if not isinstance(it, dict):
            continue
        text = str(it.get("question") or "").strip()
        options = [str(o).strip() for o in (it.get("options") or []) if str(o).strip()]
        correct = _coerce_int(it.get("correct_answer"))

        if question_type == "mixed":
            kind = (it.get("type") or "").strip().lower()
            if kind not in OPTION_COUNTS:
                kind = "true_false" if len(options) == 2 else "multiple_choice"
        else:
            kind = question_type

        if not text or len(options) != OPTION_COUNTS[kind] or correct is None or not 0 <= correct < len(options):
            logger.warning("Dropping malformed generated question: %r", it)
            continue

        q = {
            "id": len(out) + 1,
            "question": text,
            "options": options,
            "correct_answer": correct,
            "explanation": str(it.get("explanation") or "").strip(),
        }
        if question_type == "mixed":
            q["type"] = kind
        out.append(q)
    return out


class GenerationOrchestrator:
    """Runs upload -> generate -> cleanup against whichever provider is configured."""

    def __init__(self, provider: AIProvider):
        self.provider = provider

    def _upload(self, document) -> FileHandle:
        try:
            handle = self.provider.upload_file(document.file_path)
        except Exception as e:
            logger.error("Provider upload raised for document %s: %s", document.id, e)
            raise GenerationFailed(detail=str(e)) from e
        if not handle:
            raise UploadFailed(detail=f"upload returned no handle for document {document.id}")
        return handle

    def _cleanup(self, handle: FileHandle):
        try:
            if not self.provider.delete_file(handle):
                logger.warning("Cleanup did not remove %s", handle.name)
        except Exception as e:
            logger.warning("Cleanup of %s failed: %s", handle.name, e)

    def generate_summary(self, document, summary_type: str, language: str = "id") -> GeneratedSummary:
        if document.status != "completed":
            raise DocumentNotReady("generating summaries")
        started = time.monotonic()
        handle = self._upload(document)
        try:
            content = self.provider.generate_summary(handle, document.original_filename, summary_type, language)
        except Exception as e:
            logger.error("Summary generation failed for %s: %s", handle.name, e)
            raise GenerationFailed("Failed to generate summary", detail=str(e)) from e
        finally:
            self._cleanup(handle)

        content = (content or "").strip()
        if not content:
            logger.warning("Provider returned an empty summary for %s", handle.name)
            raise EmptyGenerationResult("Failed to generate summary")

        return GeneratedSummary(
            content=content,
            word_count=len(content.split()),
            processing_time_seconds=int(time.monotonic() - started),
        )

    def generate_quiz(self, document, question_count: int, difficulty: str, question_type: str,
                      language: str = "id") -> list:
        if document.status != "completed":
            raise DocumentNotReady("generating quizzes")
        handle = self._upload(document)
        try:
            raw = self.provider.generate_quiz(
                handle, document.original_filename, question_count, difficulty, question_type, language
            )
        except Exception as e:
            logger.error("Quiz generation failed for %s: %s", handle.name, e)
            raise GenerationFailed("Failed to generate quiz", detail=str(e)) from e
        finally:
            self._cleanup(handle)

        questions = normalize_questions(raw, question_type)[:question_count]
        if not questions:
            logger.warning("Provider produced no usable questions for %s", handle.name)
            raise EmptyGenerationResult()
        if len(questions) < min(question_count, MIN_QUESTIONS):
            logger.warning("Provider produced only %d usable questions for %s", len(questions), handle.name)
            raise EmptyGenerationResult(detail=f"{len(questions)} of {question_count} questions usable")
        return questions
