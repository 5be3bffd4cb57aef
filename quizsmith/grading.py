"""
grading.py - Score a set of responses against an answer key

    report = grade(result.questions, result.answers, parse_responses("1A2C3B"))
    report.score, report.total, report.percentage

Questions without a response count as incorrect and are listed in
``report.unanswered``. An empty answer key raises MissingAnswerKeyError so
that "no key" never shows up as a score of zero.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from quizsmith.compact import decode_answer_pairs
from quizsmith.errors import missing_answer_key_error
from quizsmith.models import AnswerMap, Question


log = logging.getLogger(__name__)


@dataclass
class ReviewItem:
    number: int
    selected: Optional[str]
    correct: Optional[str]
    is_correct: bool
    correct_text: str = ""


@dataclass
class GradeReport:
    score: int
    total: int
    unanswered: List[int] = field(default_factory=list)
    review: List[ReviewItem] = field(default_factory=list)

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        # round half up, like the score screen always has
        return int(self.score * 100 / self.total + 0.5)

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "total": self.total,
            "percentage": self.percentage,
            "unanswered": self.unanswered,
            "review": [
                {
                    "number": item.number,
                    "selected": item.selected,
                    "correct": item.correct,
                    "is_correct": item.is_correct,
                    "correct_text": item.correct_text,
                }
                for item in self.review
            ],
        }


def parse_responses(text: str) -> AnswerMap:
    """Decode a compact response string such as ``1A2C3B`` (or ``1A, 2C``)"""
    return decode_answer_pairs(text or "")


def grade(questions: List[Question], answers: AnswerMap, responses: AnswerMap) -> GradeReport:
    if not answers:
        raise missing_answer_key_error(len(questions))

    report = GradeReport(score=0, total=len(questions))
    for question in questions:
        selected = responses.get(question.number)
        correct = answers.get(question.number)
        is_correct = selected is not None and selected == correct
        if selected is None:
            report.unanswered.append(question.number)
        if is_correct:
            report.score += 1

        correct_option = question.option(correct) if correct else None
        report.review.append(ReviewItem(
            number=question.number,
            selected=selected,
            correct=correct,
            is_correct=is_correct,
            correct_text=correct_option.text if correct_option else "",
        ))

    log.debug("Graded %d/%d (%d unanswered)", report.score, report.total, len(report.unanswered))
    return report
