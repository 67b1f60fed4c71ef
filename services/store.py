# services/store.py
"""SQLAlchemy persistence for documents, summaries, quizzes and attempts.

Every lookup is scoped by the owning user; a row that exists but belongs to
someone else is reported exactly like a missing row.
"""
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from models import Document, Quiz, QuizAttempt, Summary, utcnow
from services.errors import NotFound


class Store:
    def __init__(self, session: Session):
        self.session = session

    def _scoped(self, model, obj_id: int, user_id: int, label: str):
        obj = (self.session.query(model)
               .filter(model.id == obj_id, model.user_id == user_id)
               .first())
        if obj is None:
            raise NotFound(label)
        return obj

    def _add(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    # ===== DOCUMENTS =====

    def create_document(self, **fields) -> Document:
        return self._add(Document(**fields))

    def get_document(self, document_id: int, user_id: int) -> Document:
        return self._scoped(Document, document_id, user_id, "Document")

    # ===== SUMMARIES =====

    def create_summary(self, **fields) -> Summary:
        return self._add(Summary(**fields))

    def get_summary(self, summary_id: int, user_id: int) -> Summary:
        return self._scoped(Summary, summary_id, user_id, "Summary")

    def record_summary_view(self, summary: Summary) -> Summary:
        # increment in SQL so concurrent readers don't lose counts
        (self.session.query(Summary)
         .filter(Summary.id == summary.id)
         .update({Summary.views_count: Summary.views_count + 1,
                  Summary.last_viewed_at: utcnow()},
                 synchronize_session=False))
        self.session.commit()
        self.session.refresh(summary)
        return summary

    def delete_summary(self, summary_id: int, user_id: int):
        self.session.delete(self.get_summary(summary_id, user_id))
        self.session.commit()

    # ===== QUIZZES =====

    def create_quiz(self, **fields) -> Quiz:
        return self._add(Quiz(**fields))

    def get_quiz(self, quiz_id: int, user_id: int) -> Quiz:
        return self._scoped(Quiz, quiz_id, user_id, "Quiz")

    def delete_quiz(self, quiz_id: int, user_id: int):
        self.session.delete(self.get_quiz(quiz_id, user_id))
        self.session.commit()

    def quiz_stats(self, quiz: Quiz) -> dict:
        attempts_count, best, average = (
            self.session.query(
                func.count(QuizAttempt.id),
                func.max(case((QuizAttempt.status == 'completed', QuizAttempt.score))),
                func.avg(case((QuizAttempt.status == 'completed', QuizAttempt.score))),
            )
            .filter(QuizAttempt.quiz_id == quiz.id, QuizAttempt.user_id == quiz.user_id)
            .one()
        )
        return {"attempts_count": attempts_count, "best_score": best, "average_score": average}

    # ===== ATTEMPTS =====

    def create_attempt(self, **fields) -> QuizAttempt:
        return self._add(QuizAttempt(**fields))

    def get_attempt(self, attempt_id: int, user_id: int, quiz_id: int = None) -> QuizAttempt:
        query = self.session.query(QuizAttempt).filter(
            QuizAttempt.id == attempt_id, QuizAttempt.user_id == user_id
        )
        if quiz_id is not None:
            query = query.filter(QuizAttempt.quiz_id == quiz_id)
        attempt = query.first()
        if attempt is None:
            raise NotFound("Quiz attempt")
        return attempt

    def list_attempts(self, quiz_id: int, user_id: int) -> list:
        return (self.session.query(QuizAttempt)
                .filter(QuizAttempt.quiz_id == quiz_id, QuizAttempt.user_id == user_id)
                .order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc())
                .all())

    def complete_attempt(self, attempt: QuizAttempt, fields: dict) -> bool:
        """Apply `fields` and mark the attempt completed, only if it is still in progress.

        Returns False when another submission got there first.
        """
        updated = (self.session.query(QuizAttempt)
                   .filter(QuizAttempt.id == attempt.id, QuizAttempt.status == 'in_progress')
                   .update(dict(fields, status='completed'), synchronize_session=False))
        self.session.commit()
        self.session.refresh(attempt)
        return updated == 1
