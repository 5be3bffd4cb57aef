# tests/test_compact.py
"""
Tests for compact.py - Compact plain-text quiz format
"""
import pytest

from quizsmith.compact import (
    decode_answer_pairs,
    extract_answer_key,
    parse_block,
    parse_compact,
    parse_lines,
    split_options,
)
from quizsmith.models import AnswerConfidence, SourceFormat


class TestAnswerKey:
    """Tests for answer key extraction"""

    def test_decode_compact_pairs(self):
        """Glued pairs decode to a number -> letter map"""
        assert decode_answer_pairs("1B2C10D") == {1: "B", 2: "C", 10: "D"}

    def test_decode_punctuated_pairs(self):
        """Separators and lowercase letters are tolerated"""
        assert decode_answer_pairs("1. b, 2) c; 3-a") == {1: "B", 2: "C", 3: "A"}

    def test_marker_line_removed(self):
        """The ANSWER KEY line is consumed and not left in the text"""
        remaining, answers = extract_answer_key("1. Q?\nA. x\nB. y\n\nANSWER KEY: 1B")
        assert "ANSWER KEY" not in remaining
        assert answers == {1: "B"}

    def test_key_continues_on_following_lines(self):
        """Key lines after the marker belong to the key"""
        text = "1. Q?\nA. x\nB. y\n\nAnswer Key:\n1A\n2B 3C\n"
        _, answers = extract_answer_key(text)
        assert answers == {1: "A", 2: "B", 3: "C"}

    def test_key_line_without_marker(self):
        """A line made only of pairs is a key even without a marker"""
        remaining, answers = extract_answer_key("1. Q?\nA. x\nB. y\n\n1B")
        assert answers == {1: "B"}
        assert "1B" not in remaining

    def test_qans_marker(self):
        """QAns lines carry answers"""
        _, answers = extract_answer_key("1. Q?\nA. x\nB. y\nQAns 1A\n")
        assert answers == {1: "A"}

    def test_marker_inside_question_is_text(self):
        """The phrase in question wording does not start a key"""
        text = (
            "1. Where is the answer key printed for 2B pencils?\nA. Front\nB. Back\n\n"
            "ANSWER KEY: 1B"
        )
        remaining, answers = extract_answer_key(text)

        assert "Where is the answer key printed for 2B pencils?" in remaining
        assert answers == {1: "B"}

    def test_marker_line_with_prose_is_text(self):
        """A line opening with the phrase but carrying prose is kept"""
        remaining, answers = extract_answer_key("Answer keys are handed out after the exam.\n1. Q?\nA. x\nB. y")
        assert remaining.startswith("Answer keys are handed out")
        assert answers == {}


class TestBlocks:
    """Tests for single-block parsing"""

    def test_line_options(self):
        """One option per line"""
        draft = parse_block(["1. What is 2+2?", "A. 3", "B. 4"])
        assert draft.source_number == 1
        assert draft.text == "What is 2+2?"
        assert draft.options == [("A", "3"), ("B", "4")]

    def test_inline_options(self):
        """Options on the same line as each other"""
        draft = parse_block(["3. Pick one A. red B. green C. blue"])
        assert draft.text == "Pick one"
        assert [text for _, text in draft.options] == ["red", "green", "blue"]

    def test_learning_outcome_tag(self):
        """A (LO...) tag after the number is kept apart from the text"""
        draft = parse_block(["1. (LO2.3) Define entropy.", "A. Disorder", "B. Order"])
        assert draft.lo == "(LO2.3)"
        assert draft.text == "Define entropy."

    def test_block_without_options(self):
        """Titles and notes are not questions"""
        assert parse_block(["Midterm Quiz", "Answer every question."]) is None

    def test_multiline_option_text_joined(self):
        """Continuation lines belong to the option above"""
        assert split_options("A. first part\n   second part\nB. other") == [
            ("A", "first part second part"),
            ("B", "other"),
        ]

    def test_initials_inside_line_options(self):
        """A capital initial inside option text does not start an option"""
        draft = parse_block([
            "4. Who succeeded him?",
            "A. John F. Kennedy",
            "B. Richard Nixon",
            "C. Lyndon B. Johnson",
        ])
        assert draft.options == [
            ("A", "John F. Kennedy"),
            ("B", "Richard Nixon"),
            ("C", "Lyndon B. Johnson"),
        ]

    def test_initials_keep_answer_letter(self):
        """The key still points at the intended president"""
        result = parse_compact(
            "1. Who was president in 1964?\nA. John F. Kennedy\nB. Richard Nixon\n"
            "C. Lyndon B. Johnson\n\nANSWER KEY: 1C"
        )
        question = result.questions[0]
        assert len(question.options) == 3
        assert question.option(result.answers[1]).text == "Lyndon B. Johnson"


class TestParseCompact:
    """Tests for the full compact parse"""

    def test_single_question_with_key(self):
        """One question, four options, key remapped"""
        result = parse_compact("1. What is 2+2?\nA. 3\nB. 4\nC. 5\nD. 6\n\nANSWER KEY: 1B")

        assert len(result.questions) == 1
        question = result.questions[0]
        assert question.number == 1
        assert question.labels == ["A", "B", "C", "D"]
        assert result.answers == {1: "B"}
        assert result.source_format == SourceFormat.COMPACT

    def test_malformed_question_discarded(self):
        """A one-option block is dropped and the next question becomes number 1"""
        text = (
            "1. Broken question\nA. only one\n\n"
            "2. Good question?\nA. a1\nB. b1\nC. c1\nD. d1\n\n"
            "ANSWER KEY: 1A 2C"
        )
        result = parse_compact(text)

        assert len(result.questions) == 1
        assert result.questions[0].number == 1
        assert result.questions[0].text == "Good question?"
        assert result.answers == {1: "C"}
        assert result.stats.blocks_discarded == 1
        assert result.stats.answers_dropped == 1

    def test_renumbered_in_source_order(self):
        """Source numbers 5, 7, 9 become 1, 2, 3 and the key follows"""
        text = (
            "5. First?\nA. a\nB. b\n\n"
            "7. Second?\nA. a\nB. b\n\n"
            "9. Third?\nA. a\nB. b\nC. c\n\n"
            "ANSWER KEY: 5A 7B 9C"
        )
        result = parse_compact(text)

        assert [q.number for q in result.questions] == [1, 2, 3]
        assert [q.text for q in result.questions] == ["First?", "Second?", "Third?"]
        assert result.answers == {1: "A", 2: "B", 3: "C"}

    def test_every_answer_points_at_an_option(self, compact_quiz):
        """Each answer key resolves to an existing question and option"""
        result = parse_compact(compact_quiz)

        for number, label in result.answers.items():
            question = result.question(number)
            assert question is not None
            assert question.option(label) is not None

    def test_key_for_unknown_option_dropped(self):
        """An answer naming a missing option is not kept"""
        result = parse_compact("1. Q?\nA. x\nB. y\n\nANSWER KEY: 1E")
        assert result.answers == {}
        assert result.stats.answers_dropped == 1

    def test_fixture_quiz(self, compact_quiz):
        """Mixed line and inline options with an LO tag"""
        result = parse_compact(compact_quiz)

        assert len(result.questions) == 2
        assert result.questions[0].lo == "(LO1.1)"
        assert [o.text for o in result.questions[1].options] == ["Mars", "Jupiter", "Venus"]
        assert result.answers == {1: "B", 2: "B"}
        assert result.confidence == {1: AnswerConfidence.EXPLICIT, 2: AnswerConfidence.EXPLICIT}

    def test_no_answer_key(self):
        """Without a key the answer map is empty, not an error"""
        result = parse_compact("1. Q?\nA. x\nB. y")
        assert result.answers == {}
        assert result.has_answer_key is False
        assert result.missing_answers == [1]

    def test_reparse_is_stable(self, compact_quiz):
        """Parsing the same text twice gives the same result"""
        first = parse_compact(compact_quiz)
        second = parse_compact(compact_quiz)
        assert first.to_dict() == second.to_dict()

    def test_raw_text_preserved(self, compact_quiz):
        """Callers hash the original text"""
        result = parse_compact(compact_quiz)
        assert result.raw_text == compact_quiz
        assert result.content_hash


class TestLineFallback:
    """Tests for the line-by-line fallback"""

    def test_fallback_used_when_paragraph_pass_fails(self):
        """Options without a space after the period need the fallback"""
        result = parse_compact("1. What?\nA.3\nB.4\n2. Next?\nA.yes\nB.no\n\nANSWER KEY: 2B")

        assert result.stats.used_fallback is True
        assert [q.text for q in result.questions] == ["What?", "Next?"]
        assert result.answers == {2: "B"}

    def test_parse_lines_skips_questions_without_options(self):
        """A question line with no options is not emitted"""
        drafts = parse_lines("1. Lonely\n2. Real?\nA. x\nB. y")
        assert [d.text for d in drafts] == ["Real?"]

    def test_nothing_usable(self):
        """Only a single-option block leaves no questions"""
        result = parse_compact("1. Lonely\nA. one")
        assert result.questions == []
        assert result.stats.blocks_matched == 0
