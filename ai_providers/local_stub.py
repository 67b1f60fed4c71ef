import hashlib
import os
import re
from typing import Optional

from services import extract_text
from services.prompts import true_false_options
from .base import AIProvider, FileHandle


class LocalStub(AIProvider):
    """Offline provider for development: builds content from the document's own sentences."""

    def _sentences(self, text):
        parts = re.split(r'[\.!\?]\s+', text or '')
        return [p.strip() for p in parts if p and len(p.strip()) > 0]

    def upload_file(self, storage_path: str) -> Optional[FileHandle]:
        if not os.path.isfile(storage_path):
            return None
        text = extract_text.from_path(storage_path)
        if not text.strip():
            return None
        digest = hashlib.sha256(text.encode('utf-8')).hexdigest()[:16]
        return FileHandle(name=f'stub_{digest}', display_name=os.path.basename(storage_path), text=text)

    def generate_summary(self, handle: FileHandle, file_name: str, summary_type: str,
                         language: str = "id") -> str:
        sents = self._sentences(handle.text)
        if summary_type == 'bullet_points':
            return '\n'.join(f'• {s}' for s in sents[:6])
        limit = 12 if summary_type == 'detailed' else 6
        return '. '.join(sents[:limit]) if sents else (handle.text or '')[:600]

    def generate_quiz(self, handle: FileHandle, file_name: str, question_count: int,
                      difficulty: str, question_type: str, language: str = "id") -> list:
        sents = self._sentences(handle.text) or [file_name]
        out = []
        for i in range(question_count):
            s = sents[i % len(sents)]
            kind = question_type
            if question_type == 'mixed':
                kind = 'multiple_choice' if i % 2 == 0 else 'true_false'

            if kind == 'true_false':
                q = {
                    'id': i + 1,
                    'question': f'{s}?',
                    'options': true_false_options(language),
                    'correct_answer': 0,
                    'explanation': f"Stated in '{file_name}'.",
                }
            else:
                correct = i % 4
                options = [f'Distractor {n + 1}' for n in range(4)]
                options[correct] = s[:80]
                q = {
                    'id': i + 1,
                    'question': f'Which statement appears in {file_name}?',
                    'options': options,
                    'correct_answer': correct,
                    'explanation': f"Quoted from '{file_name}'.",
                }
            if question_type == 'mixed':
                q['type'] = kind
            out.append(q)
        return out

    def delete_file(self, handle: FileHandle) -> bool:
        return True
