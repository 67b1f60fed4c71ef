# ai_providers/groq_provider.py
import hashlib
import json
import logging
import os
import time
from typing import Optional

from groq import Groq, RateLimitError

from services import extract_text
from services.prompts import (
    SYSTEM_QUIZ_JSON,
    SYSTEM_SUMMARIZER,
    build_quiz_prompt,
    build_summary_prompt,
)
from .base import AIProvider, FileHandle

logger = logging.getLogger(__name__)

# keeps the request inside the model context window
MAX_CONTEXT_CHARS = 60000


# pull the JSON object out of a model reply (code fences, stray prose)
def _sanitize_json(txt: str) -> str:
    if not txt:
        return "{}"
    t = txt.strip()

    if t.startswith("```"):
        t = t.strip("`")
        if t.lower().startswith("json"):
            t = t[4:].strip()

    start = t.find("{")
    end = t.rfind("}")
    if start == -1 or end <= start:
        return "{}"
    return t[start:end + 1]


def parse_questions(txt: str) -> list:
    """Return the `questions` list from a reply, or [] when it is unusable."""
    try:
        data = json.loads(_sanitize_json(txt))
    except json.JSONDecodeError:
        logger.warning("Quiz response is not valid JSON")
        return []
    if not isinstance(data, dict):
        return []
    questions = data.get("questions")
    return questions if isinstance(questions, list) else []


class GroqProvider(AIProvider):
    """Text-extraction provider: the document is read locally and sent as prompt text."""

    def __init__(self, model: str = "llama-3.3-70b-versatile", api_key: Optional[str] = None,
                 timeout: float = 120.0, client=None):
        self.client = client or Groq(api_key=api_key or os.getenv("GROQ_API_KEY"), timeout=timeout)
        self.model = model
        self.fallback_model = os.getenv("GROQ_FALLBACK_MODEL", "llama-3.1-8b-instant")

    # retries: extra attempts after the first failure
    def _chat(self, system: str, user: str, retries: int = 2, json_mode: bool = False) -> str:
        model_to_use = self.model
        extra = {"response_format": {"type": "json_object"}} if json_mode else {}
        last_error = None
        for i in range(retries + 1):
            try:
                resp = self.client.chat.completions.create(
                    model=model_to_use,
                    messages=[{"role": "system", "content": system},
                              {"role": "user", "content": user}],
                    temperature=0.7,
                    **extra,
                )
                return resp.choices[0].message.content or ""
            except RateLimitError as e:
                last_error = e
                if model_to_use != self.fallback_model:
                    logger.warning("Groq rate limit on %s, switching to %s", model_to_use, self.fallback_model)
                    model_to_use = self.fallback_model
                    continue
                if i < retries:
                    time.sleep(1.5 * (i + 1))
        raise last_error

    def upload_file(self, storage_path: str) -> Optional[FileHandle]:
        if not os.path.isfile(storage_path):
            logger.error("Document processing failed: file not found: %s", storage_path)
            return None

        text = extract_text.from_path(storage_path)
        if not text.strip():
            logger.error("Document processing failed: no text extracted from %s", storage_path)
            return None

        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]
        handle = FileHandle(
            name=f"groq_{digest}",
            display_name=os.path.basename(storage_path),
            text=text,
        )
        logger.info("Document processed for Groq: %s -> %s (%d chars)",
                    storage_path, handle.name, len(text))
        return handle

    def _content(self, handle: FileHandle) -> str:
        if not handle.text:
            raise ValueError(f"No extracted content in handle {handle.name}")
        return handle.text[:MAX_CONTEXT_CHARS]

    def generate_summary(self, handle: FileHandle, file_name: str, summary_type: str,
                         language: str = "id") -> str:
        prompt = build_summary_prompt(summary_type, file_name, language)
        user = prompt + "\n\nDocument Content:\n" + self._content(handle)
        return self._chat(SYSTEM_SUMMARIZER, user).strip()

    def generate_quiz(self, handle: FileHandle, file_name: str, question_count: int,
                      difficulty: str, question_type: str, language: str = "id") -> list:
        prompt = build_quiz_prompt(question_count, difficulty, question_type, file_name,
                                   language, include_json_example=True)
        user = prompt + "\n\nDocument Content:\n" + self._content(handle)
        content = self._chat(SYSTEM_QUIZ_JSON, user, json_mode=True)
        return parse_questions(content)

    def delete_file(self, handle: FileHandle) -> bool:
        # nothing is held remotely; the text lives in the handle
        logger.info("Document content released: %s", handle.name)
        return True
