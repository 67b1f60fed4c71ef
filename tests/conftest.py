import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ai_providers.base import AIProvider, FileHandle
from app import create_app
from models import Base
from services.store import Store


def make_questions(correct=(0, 1, 2, 3, 0)):
    return [
        {
            "id": i + 1,
            "question": f"Question {i + 1}?",
            "options": ["Option A", "Option B", "Option C", "Option D"],
            "correct_answer": c,
            "explanation": f"Option {'ABCD'[c]} is stated in the document.",
        }
        for i, c in enumerate(correct)
    ]


class FakeProvider(AIProvider):
    """Records every call; `fail_on` names the step that raises."""

    def __init__(self, questions=None, summary="The document explains photosynthesis in plants.",
                 handle=FileHandle(name="files/fake-1", display_name="notes.pdf"),
                 fail_on=None, delete_result=True):
        self.questions = make_questions() if questions is None else questions
        self.summary = summary
        self.handle = handle
        self.fail_on = fail_on
        self.delete_result = delete_result
        self.calls = []

    def _maybe_fail(self, step):
        if self.fail_on == step:
            raise RuntimeError(f"{step} exploded")

    def upload_file(self, storage_path):
        self.calls.append(("upload", storage_path))
        self._maybe_fail("upload")
        return self.handle

    def generate_summary(self, handle, file_name, summary_type, language="id"):
        self.calls.append(("summary", handle.name, file_name, summary_type, language))
        self._maybe_fail("generate")
        return self.summary

    def generate_quiz(self, handle, file_name, question_count, difficulty, question_type, language="id"):
        self.calls.append(("quiz", handle.name, file_name, question_count, difficulty, question_type, language))
        self._maybe_fail("generate")
        return self.questions

    def delete_file(self, handle):
        self.calls.append(("delete", handle.name))
        self._maybe_fail("delete")
        return self.delete_result

    def steps(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(f"sqlite:///{tmp_path / 'test.db'}", future=True)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def store(session_factory):
    s = session_factory()
    yield Store(s)
    s.close()


@pytest.fixture
def document_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Plants convert light into chemical energy. Chlorophyll absorbs light.", encoding="utf-8")
    return str(path)


@pytest.fixture
def make_document(store, document_file):
    def _make(user_id=1, status="completed"):
        return store.create_document(
            user_id=user_id,
            filename=os.path.basename(document_file),
            original_filename="notes.pdf",
            file_path=document_file,
            file_size=os.path.getsize(document_file),
            mime_type="application/pdf",
            status=status,
        )
    return _make


@pytest.fixture
def make_quiz(store, make_document):
    def _make(user_id=1, questions=None):
        doc = make_document(user_id=user_id)
        qs = make_questions() if questions is None else questions
        return store.create_quiz(
            document_id=doc.id,
            user_id=user_id,
            difficulty="medium",
            question_type="multiple_choice",
            question_count=len(qs),
            questions=qs,
        )
    return _make


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def app(tmp_path, provider):
    app = create_app({
        "DATABASE_URL": f"sqlite:///{tmp_path / 'api.db'}",
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "AI_PROVIDER_INSTANCE": provider,
    })
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
