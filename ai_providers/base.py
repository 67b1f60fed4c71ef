from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FileHandle:
    """Reference to a document accepted by a provider.

    `name` identifies the file inside the provider (remote file name or a
    content-addressed token). `text` is only set by providers that extract the
    document locally, so the handle itself carries everything needed later.
    """
    name: str
    display_name: str = ""
    uri: Optional[str] = None
    text: Optional[str] = None


class AIProvider(ABC):
    @abstractmethod
    def upload_file(self, storage_path: str) -> Optional[FileHandle]:
        """Accept the document at `storage_path`; return None when it cannot be used."""

    @abstractmethod
    def generate_summary(self, handle: FileHandle, file_name: str, summary_type: str,
                         language: str = "id") -> str:
        """Return the summary text."""

    @abstractmethod
    def generate_quiz(self, handle: FileHandle, file_name: str, question_count: int,
                      difficulty: str, question_type: str, language: str = "id") -> list:
        """
        Return list[{
          id: int,
          question: str,
          options: list[str],
          correct_answer: int,
          explanation: str,
          type?: 'multiple_choice'|'true_false'   (mixed quizzes only)
        }]
        """

    @abstractmethod
    def delete_file(self, handle: FileHandle) -> bool:
        """Best-effort cleanup. Never raises."""
