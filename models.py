from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow():
    # naive UTC, matching what SQLite hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Document(Base):
    __tablename__ = 'documents'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=False)
    file_path = Column(String(1024), nullable=False)
    file_size = Column(Integer, default=0)
    mime_type = Column(String(127))
    status = Column(String(16), nullable=False, default='pending')
    created_at = Column(DateTime, default=utcnow)

    summaries = relationship('Summary', back_populates='document', cascade='all, delete-orphan')
    quizzes = relationship('Quiz', back_populates='document', cascade='all, delete-orphan')


class Summary(Base):
    __tablename__ = 'summaries'
    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey('documents.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    content = Column(Text, nullable=False)
    summary_type = Column(String(32), nullable=False)
    language = Column(String(8), nullable=False, default='id')
    word_count = Column(Integer, default=0)
    status = Column(String(16), nullable=False, default='completed')
    processing_time_seconds = Column(Integer, default=0)
    views_count = Column(Integer, nullable=False, default=0)
    last_viewed_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)

    document = relationship('Document', back_populates='summaries')


# ===== QUIZ =====

class Quiz(Base):
    __tablename__ = 'quizzes'
    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey('documents.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    difficulty = Column(String(16), nullable=False)        # easy|medium|hard
    question_type = Column(String(32), nullable=False)     # multiple_choice|true_false|mixed
    question_count = Column(Integer, nullable=False)
    # [{id, question, options, correct_answer, explanation, type?}]
    questions = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    document = relationship('Document', back_populates='quizzes')
    attempts = relationship('QuizAttempt', back_populates='quiz', cascade='all, delete-orphan')


class QuizAttempt(Base):
    __tablename__ = 'quiz_attempts'
    id = Column(Integer, primary_key=True)
    quiz_id = Column(Integer, ForeignKey('quizzes.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(String(16), nullable=False, default='in_progress')
    started_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    # set together on completion
    score = Column(Float)
    total_questions = Column(Integer)
    correct_answers = Column(Integer)
    incorrect_answers = Column(Integer)
    unanswered = Column(Integer)
    time_spent_seconds = Column(Integer)
    percentage = Column(Float)
    passed = Column(Boolean)
    answers = Column(JSON)
    submitted_at = Column(DateTime)

    created_at = Column(DateTime, default=utcnow)

    quiz = relationship('Quiz', back_populates='attempts')

    def is_in_progress(self) -> bool:
        return self.status == 'in_progress'
