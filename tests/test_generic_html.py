# tests/test_generic_html.py
"""
Tests for generic_html.py - Radio-button forms without LMS markup
"""
import pytest

from quizsmith.generic_html import group_radios, option_text, parse_generic_html
from quizsmith.html_utils import make_soup
from quizsmith.models import SourceFormat


class TestQuestionContainers:
    """Tests for pages with "question" containers"""

    def test_fixture_form(self, generic_html):
        """Labels, for= labels and the checked answer are all read"""
        result = parse_generic_html(generic_html)

        assert [q.text for q in result.questions] == [
            "What color is a clear sky?",
            "How many legs does a spider have?",
        ]
        assert [o.text for o in result.questions[0].options] == ["Red", "Blue"]
        assert [o.text for o in result.questions[1].options] == ["Six", "Eight"]
        assert result.answers == {1: "B"}
        assert result.missing_answers == [2]
        assert result.source_format == SourceFormat.GENERIC_HTML

    def test_unchecked_page_has_no_answers(self):
        html = """<html><body><div class="quiz-question">
            <p>Pick one</p>
            <label><input type="radio" name="x"> Yes</label>
            <label><input type="radio" name="x"> No</label>
        </div></body></html>"""
        result = parse_generic_html(html)

        assert result.answers == {}
        assert result.questions[0].text == "Pick one"


class TestRadioGroups:
    """Tests for pages without question containers"""

    def test_grouped_by_name(self):
        """Each name attribute is one question"""
        html = """<html><body>
            <p>First question?</p>
            <input type="radio" name="a" value="1"> Alpha<br>
            <input type="radio" name="a" value="2" checked> Beta<br>
            <p>Second question?</p>
            <input type="radio" name="b" value="1"> Gamma<br>
            <input type="radio" name="b" value="2"> Delta<br>
        </body></html>"""
        result = parse_generic_html(html)

        assert [q.text for q in result.questions] == ["First question?", "Second question?"]
        assert [o.text for o in result.questions[0].options] == ["Alpha", "Beta"]
        assert [o.text for o in result.questions[1].options] == ["Gamma", "Delta"]
        assert result.answers == {1: "B"}

    def test_group_order(self):
        soup = make_soup('<input type="radio" name="b"><input type="radio" name="a"><input type="radio" name="b">')
        groups = group_radios(soup)

        assert [g[0].get("name") for g in groups] == ["b", "a"]
        assert len(groups[0]) == 2

    def test_value_used_when_no_text(self):
        soup = make_soup('<div><input type="radio" name="a" value="maybe"></div>')
        control = soup.select_one("input")
        assert option_text(control, soup) == "maybe"

    def test_single_radio_discarded(self):
        """A group with one option is not a question"""
        html = """<html><body>
            <p>Agree to terms?</p>
            <label><input type="radio" name="agree"> I agree</label>
        </body></html>"""
        result = parse_generic_html(html)

        assert result.stats.blocks_matched == 0
        assert result.stats.blocks_discarded == 1

    def test_options_past_z_counted(self):
        """A group larger than A-Z keeps 26 options and reports the rest"""
        labels = "".join(
            f'<label><input type="radio" name="big"> Choice {i}</label>' for i in range(30)
        )
        html = f'<html><body><div class="question"><p>Pick a number</p>{labels}</div></body></html>'
        result = parse_generic_html(html)

        assert result.questions[0].labels[-1] == "Z"
        assert len(result.questions[0].options) == 26
        assert result.stats.options_dropped == 4


class TestDegenerate:
    """Tests for pages with no recognisable structure"""

    def test_page_text_as_single_question(self):
        result = parse_generic_html("<html><body><h1>Notes</h1><p>Nothing to answer.</p></body></html>")

        assert len(result.questions) == 1
        assert result.questions[0].number == 1
        assert result.questions[0].text == "Notes Nothing to answer."
        assert result.questions[0].options == []
        assert result.stats.blocks_matched == 0

    def test_empty_page(self):
        result = parse_generic_html("<html><body></body></html>")
        assert result.questions == []
