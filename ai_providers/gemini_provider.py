# ai_providers/gemini_provider.py
import json
import logging
import os
from typing import Optional

import google.generativeai as genai

from services.prompts import SYSTEM_QUIZ, SYSTEM_SUMMARIZER, build_quiz_prompt, build_summary_prompt
from .base import AIProvider, FileHandle

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


def build_quiz_schema(question_type: str) -> "genai.protos.Schema":
    """Response schema declared to Gemini; `type` exists only for mixed quizzes."""
    Schema, Type = genai.protos.Schema, genai.protos.Type

    properties = {
        "id": Schema(type=Type.INTEGER, description="Question number starting from 1"),
        "question": Schema(type=Type.STRING, description="The question text"),
        "options": Schema(
            type=Type.ARRAY,
            items=Schema(type=Type.STRING),
            description="Array of answer options (4 for multiple_choice, 2 for true_false)",
        ),
        "correct_answer": Schema(
            type=Type.INTEGER,
            description="Index of correct answer (0-3 for multiple_choice, 0-1 for true_false)",
        ),
        "explanation": Schema(type=Type.STRING, description="Brief explanation of the correct answer"),
    }
    required = ["id", "question", "options", "correct_answer", "explanation"]

    if question_type == "mixed":
        properties["type"] = Schema(
            type=Type.STRING,
            description="Question type: multiple_choice or true_false",
        )
        required.append("type")

    question = Schema(type=Type.OBJECT, properties=properties, required=required)
    return Schema(
        type=Type.OBJECT,
        properties={"questions": Schema(type=Type.ARRAY, items=question)},
        required=["questions"],
    )


class GeminiProvider(AIProvider):
    """File-native provider: the PDF goes to the Gemini File API and is referenced by URI."""

    def __init__(self, model: str = "gemini-2.0-flash", api_key: Optional[str] = None,
                 timeout: float = 120.0):
        genai.configure(api_key=api_key or os.getenv("GEMINI_API_KEY"))
        self.model = model
        self.request_options = {"timeout": timeout}

    def _model(self, system: str):
        return genai.GenerativeModel(self.model, system_instruction=system)

    @staticmethod
    def _file_part(handle: FileHandle):
        return genai.protos.Part(file_data=genai.protos.FileData(file_uri=handle.uri, mime_type=PDF_MIME))

    def upload_file(self, storage_path: str) -> Optional[FileHandle]:
        display_name = os.path.basename(storage_path)
        if not os.path.isfile(storage_path):
            logger.error("Gemini file upload failed: file not found: %s", storage_path)
            return None
        try:
            remote = genai.upload_file(storage_path, mime_type=PDF_MIME, display_name=display_name)
        except Exception as e:
            # transient API errors are reported as "not available" rather than raised
            logger.error("Gemini file upload failed for %s: %s", storage_path, e)
            return None

        logger.info("File uploaded to Gemini: %s -> %s", display_name, remote.name)
        return FileHandle(name=remote.name, display_name=display_name, uri=remote.uri)

    def generate_summary(self, handle: FileHandle, file_name: str, summary_type: str,
                         language: str = "id") -> str:
        prompt = build_summary_prompt(summary_type, file_name, language)
        resp = self._model(SYSTEM_SUMMARIZER).generate_content(
            [prompt, self._file_part(handle)],
            request_options=self.request_options,
        )
        return resp.text

    def generate_quiz(self, handle: FileHandle, file_name: str, question_count: int,
                      difficulty: str, question_type: str, language: str = "id") -> list:
        prompt = build_quiz_prompt(question_count, difficulty, question_type, file_name, language)
        config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=build_quiz_schema(question_type),
        )
        resp = self._model(SYSTEM_QUIZ).generate_content(
            [prompt, self._file_part(handle)],
            generation_config=config,
            request_options=self.request_options,
        )
        data = json.loads(resp.text)
        if not isinstance(data, dict):
            return []
        return data.get("questions") or []

    def delete_file(self, handle: FileHandle) -> bool:
        try:
            genai.delete_file(handle.name)
        except Exception as e:
            logger.warning("Gemini file deletion failed for %s: %s", handle.name, e)
            return False
        logger.info("File deleted from Gemini: %s", handle.name)
        return True
