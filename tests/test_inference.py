# tests/test_inference.py
"""
Tests for inference.py - Correct-answer inference
"""
import pytest

from quizsmith.inference import (
    SCORE_EXACT,
    SCORE_IMAGE,
    AnswerRow,
    infer_correct_answer,
    match_duplicates,
    match_statement,
    score_option,
    statement_content,
)
from quizsmith.models import AnswerConfidence


def rows(*texts):
    return [AnswerRow(label=chr(ord("A") + i), text=t, html=t) for i, t in enumerate(texts)]


class TestStatementContent:
    """Tests for statement parsing"""

    def test_extracts_content(self):
        assert statement_content("The correct answer is: Paris") == "Paris"

    def test_plural_form(self):
        assert statement_content("The correct answers are: A and B") == "A and B"

    def test_not_a_statement(self):
        assert statement_content("Well done!") is None
        assert statement_content(None) is None


class TestScoreOption:
    """Tests for the tiered option score"""

    def test_exact_match(self):
        """Case and whitespace do not matter for an exact match"""
        assert score_option("Paris", "Paris", "  paris ", "paris") == SCORE_EXACT

    def test_image_match(self):
        """Sharing an image source scores the image tier"""
        score = score_option("", '<img src="a.png">', "", '<img src="a.png">')
        assert score == SCORE_IMAGE

    def test_option_inside_verbose_statement(self):
        """A long option quoted inside a longer statement"""
        option = "mitochondria produce energy"
        content = "mitochondria produce energy for the cell"
        extra = len(content) - len(option)
        assert score_option(option, option, content, content) == 500 - 2 * extra

    def test_statement_inside_option(self):
        """The statement is a fragment of a longer option"""
        option = "Paris, the capital of France"
        assert score_option(option, option, "capital of France", "capital of France") == len(option.casefold()) + 100

    def test_word_overlap(self):
        """Mostly shared significant words give a small score"""
        score = score_option("Carbon dioxide gas", "", "dioxide of carbon", "")
        assert score == 3 * 2

    def test_unrelated(self):
        assert score_option("London", "London", "Paris", "Paris") == 0

    def test_tier_order(self):
        """Exact beats image beats containment beats word overlap"""
        exact = score_option("Paris, the capital of France", "", "Paris, the capital of France", "")
        partial = score_option("Paris", "", "Paris, the capital of France", "")
        assert exact > partial


class TestMatchStatement:
    """Tests for statement matching across options"""

    def test_best_score_wins(self):
        found = match_statement(
            rows("Paris", "London", "Paris, the capital of France"),
            "The correct answer is: Paris, the capital of France",
        )
        assert found.label == "C"
        assert found.score == SCORE_EXACT
        assert found.confidence == AnswerConfidence.INFERRED

    def test_tie_goes_to_first_option(self):
        """Equal scores keep the earlier option"""
        found = match_statement(rows("Same", "Same"), "The correct answer is: Same")
        assert found.label == "A"

    def test_no_match(self):
        assert match_statement(rows("Red", "Blue"), "The correct answer is: Green") is None


class TestInferCorrectAnswer:
    """Tests for strategy ordering"""

    def test_checked_first(self):
        """An explicitly checked row wins over a matching statement"""
        options = rows("Red", "Blue")
        options[0].is_checked = True
        found = infer_correct_answer(options, "The correct answer is: Blue")

        assert found.label == "A"
        assert found.strategy == "checked"

    def test_two_checked_rows_ignored(self):
        """Several checked rows say nothing; fall through to the statement"""
        options = rows("Red", "Blue")
        for option in options:
            option.is_checked = True
        found = infer_correct_answer(options, "The correct answer is: Blue")

        assert found.label == "B"
        assert found.strategy == "statement"

    def test_correct_class(self):
        options = rows("Red", "Blue")
        options[1].is_marked_correct = True
        assert infer_correct_answer(options).label == "B"

    def test_duplicate_fallback(self):
        """Repeated option text is the last resort"""
        found = infer_correct_answer(
            rows("Madrid", "Rome"),
            container_html="<div>Madrid</div><div>Rome</div><p>Yes, Rome.</p>",
        )
        assert found.label == "B"
        assert found.confidence == AnswerConfidence.LOW

    def test_duplicate_image(self):
        options = [
            AnswerRow("A", "", '<img src="one.png">'),
            AnswerRow("B", "", '<img src="two.png">'),
        ]
        found = match_duplicates(options, '<img src="one.png"><img src="two.png"><img src="two.png">')
        assert found.label == "B"

    def test_nothing_found(self):
        assert infer_correct_answer(rows("Red", "Blue"), container_html="<p>Red Blue</p>") is None

    def test_no_rows(self):
        assert infer_correct_answer([]) is None
