# tests/test_grading.py
"""
Tests for grading.py - Scoring responses
"""
import pytest

from quizsmith.compact import parse_compact
from quizsmith.errors import MissingAnswerKeyError
from quizsmith.grading import grade, parse_responses


QUIZ = """1. Red?
A. yes
B. no

2. Blue?
A. yes
B. no

3. Green?
A. yes
B. no
C. maybe

ANSWER KEY: 1A 2B 3C
"""


class TestParseResponses:
    """Tests for response strings"""

    def test_compact_string(self):
        assert parse_responses("1A2b3C") == {1: "A", 2: "B", 3: "C"}

    def test_empty(self):
        assert parse_responses("") == {}


class TestGrade:
    """Tests for grade"""

    def test_all_correct(self):
        result = parse_compact(QUIZ)
        report = grade(result.questions, result.answers, {1: "A", 2: "B", 3: "C"})

        assert report.score == 3
        assert report.total == 3
        assert report.percentage == 100
        assert report.unanswered == []

    def test_partial_with_unanswered(self):
        """Unanswered questions count as wrong and are listed"""
        result = parse_compact(QUIZ)
        report = grade(result.questions, result.answers, {1: "A", 2: "A"})

        assert report.score == 1
        assert report.percentage == 33
        assert report.unanswered == [3]

    def test_rounding(self):
        result = parse_compact(QUIZ)
        report = grade(result.questions, result.answers, {1: "A", 2: "B"})
        assert report.percentage == 67

    def test_review_items(self):
        result = parse_compact(QUIZ)
        report = grade(result.questions, result.answers, {1: "B"})

        item = report.review[0]
        assert item.number == 1
        assert item.selected == "B"
        assert item.correct == "A"
        assert item.is_correct is False
        assert item.correct_text == "yes"
        assert report.review[2].correct_text == "maybe"

    def test_missing_key_raises(self):
        """No key is an error, not a zero score"""
        result = parse_compact("1. Q?\nA. x\nB. y")
        with pytest.raises(MissingAnswerKeyError):
            grade(result.questions, result.answers, {1: "A"})

    def test_to_dict(self):
        result = parse_compact(QUIZ)
        data = grade(result.questions, result.answers, {1: "A"}).to_dict()

        assert data["score"] == 1
        assert data["total"] == 3
        assert len(data["review"]) == 3
