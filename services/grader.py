# services/grader.py
"""Deterministic scoring of submitted answers against a quiz answer key.

`grade` has no side effects: the same questions and answers always produce
the same `GradingResult`.
"""
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from services.errors import GradingError

PASS_PERCENTAGE = 60.0


@dataclass(frozen=True)
class GradedAnswer:
    question_id: int
    question: str
    options: list
    user_answer: Optional[int]
    correct_answer: int
    is_correct: bool
    explanation: str = ""


@dataclass(frozen=True)
class GradingResult:
    score: float
    total_questions: int
    correct_answers: int
    incorrect_answers: int
    unanswered: int
    percentage: float
    passed: bool
    detailed_answers: List[GradedAnswer] = field(default_factory=list)

    def answers_as_dicts(self) -> list:
        return [asdict(a) for a in self.detailed_answers]


def round_percentage(value: float) -> float:
    # half-up on the decimal representation, not banker's rounding on the binary float
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def grade(questions: list, answers: Iterable[dict]) -> GradingResult:
    """Score `answers` ({question_id, answer_index}) against the quiz `questions`.

    Later answers for the same question_id replace earlier ones; answers for
    ids that are not in the quiz are ignored.
    """
    if not questions:
        raise GradingError(detail="Quiz has no questions to grade")

    answer_map = {}
    for a in answers:
        answer_map[a["question_id"]] = a["answer_index"]

    correct = incorrect = unanswered = 0
    detailed = []
    for q in questions:
        user_answer = answer_map.get(q["id"])
        if user_answer is None:
            unanswered += 1
            is_correct = False
        else:
            is_correct = user_answer == q["correct_answer"]
            if is_correct:
                correct += 1
            else:
                incorrect += 1

        detailed.append(GradedAnswer(
            question_id=q["id"],
            question=q["question"],
            options=list(q["options"]),
            user_answer=user_answer,
            correct_answer=q["correct_answer"],
            is_correct=is_correct,
            explanation=q.get("explanation") or "",
        ))

    total = len(questions)
    score = correct / total * 100
    percentage = round_percentage(score)

    return GradingResult(
        score=score,
        total_questions=total,
        correct_answers=correct,
        incorrect_answers=incorrect,
        unanswered=unanswered,
        percentage=percentage,
        passed=percentage >= PASS_PERCENTAGE,
        detailed_answers=detailed,
    )
