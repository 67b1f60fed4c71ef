# services/quizzer.py
import logging

from models import Quiz, QuizAttempt
from services.attempts import AttemptManager
from services.generation import GenerationOrchestrator
from services.store import Store

logger = logging.getLogger(__name__)


def generate(store: Store, orchestrator: GenerationOrchestrator, user_id: int, document_id: int,
             question_count: int, difficulty: str, question_type: str, language: str = "id") -> Quiz:
    doc = store.get_document(document_id, user_id)
    questions = orchestrator.generate_quiz(doc, question_count, difficulty, question_type, language)
    quiz = store.create_quiz(
        document_id=doc.id,
        user_id=user_id,
        difficulty=difficulty,
        question_type=question_type,
        question_count=len(questions),
        questions=questions,
    )
    logger.info("Generated %s quiz %s for document %s (%d questions)",
                difficulty, quiz.id, doc.id, len(questions))
    return quiz


def start_attempt(store: Store, user_id: int, quiz_id: int) -> QuizAttempt:
    quiz = store.get_quiz(quiz_id, user_id)
    return AttemptManager(store).start(quiz, user_id)


def submit_attempt(store: Store, user_id: int, quiz_id: int, attempt_id: int, answers: list,
                   time_spent_seconds: int):
    quiz = store.get_quiz(quiz_id, user_id)
    attempt = store.get_attempt(attempt_id, user_id, quiz_id=quiz.id)
    result = AttemptManager(store).submit(quiz, attempt, answers, time_spent_seconds)
    return quiz, attempt, result


# answer key is only revealed through graded attempts
def public_questions(questions: list) -> list:
    out = []
    for q in questions:
        item = {"id": q["id"], "question": q["question"], "options": q["options"]}
        if "type" in q:
            item["type"] = q["type"]
        out.append(item)
    return out


def _ts(value):
    return value.isoformat() if value else None


def quiz_to_dict(quiz: Quiz, stats: dict = None) -> dict:
    out = {
        "id": quiz.id,
        "document_id": quiz.document_id,
        "document_name": quiz.document.original_filename if quiz.document else None,
        "user_id": quiz.user_id,
        "difficulty": quiz.difficulty,
        "question_count": quiz.question_count,
        "question_type": quiz.question_type,
        "questions": public_questions(quiz.questions),
        "created_at": _ts(quiz.created_at),
    }
    if stats is not None:
        out.update(stats)
    return out


def attempt_to_dict(a: QuizAttempt) -> dict:
    return {
        "id": a.id,
        "quiz_id": a.quiz_id,
        "user_id": a.user_id,
        "status": a.status,
        "score": a.score,
        "total_questions": a.total_questions,
        "correct_answers": a.correct_answers,
        "incorrect_answers": a.incorrect_answers,
        "unanswered": a.unanswered,
        "time_spent_seconds": a.time_spent_seconds,
        "percentage": a.percentage,
        "passed": a.passed,
        "started_at": _ts(a.started_at),
        "submitted_at": _ts(a.submitted_at),
        "expires_at": _ts(a.expires_at),
        "created_at": _ts(a.created_at),
    }
