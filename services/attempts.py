# services/attempts.py
"""Quiz attempt state machine: in_progress -> completed.

`expired` is a reserved terminal state. Nothing moves an attempt there yet:
an in-progress attempt stays submittable after `expires_at` passes.
"""
import logging
from datetime import timedelta

from models import Quiz, QuizAttempt, utcnow
from services import grader
from services.errors import InvalidStateTransition
from services.store import Store

logger = logging.getLogger(__name__)

ATTEMPT_DURATION = timedelta(hours=1)


class AttemptManager:
    def __init__(self, store: Store, clock=utcnow):
        self.store = store
        self.clock = clock

    def start(self, quiz: Quiz, user_id: int) -> QuizAttempt:
        """Open a new attempt; a user may hold any number of attempts per quiz."""
        started = self.clock()
        attempt = self.store.create_attempt(
            quiz_id=quiz.id,
            user_id=user_id,
            status='in_progress',
            started_at=started,
            expires_at=started + ATTEMPT_DURATION,
        )
        logger.info("Quiz attempt %s started for quiz %s", attempt.id, quiz.id)
        return attempt

    def submit(self, quiz: Quiz, attempt: QuizAttempt, answers: list,
               time_spent_seconds: int) -> grader.GradingResult:
        """Grade `answers` and close the attempt.

        `time_spent_seconds` is the client-reported duration and is stored as given.
        """
        if not attempt.is_in_progress():
            raise InvalidStateTransition()

        result = grader.grade(quiz.questions, answers)
        completed = self.store.complete_attempt(attempt, {
            'score': result.score,
            'total_questions': result.total_questions,
            'correct_answers': result.correct_answers,
            'incorrect_answers': result.incorrect_answers,
            'unanswered': result.unanswered,
            'percentage': result.percentage,
            'passed': result.passed,
            'answers': result.answers_as_dicts(),
            'time_spent_seconds': time_spent_seconds,
            'submitted_at': self.clock(),
        })
        if not completed:
            # a concurrent submit won the in_progress -> completed transition
            raise InvalidStateTransition()

        logger.info("Quiz attempt %s completed: %.2f%%", attempt.id, result.percentage)
        return result
