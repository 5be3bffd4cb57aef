# tests/conftest.py
"""
Pytest configuration and shared fixtures for Quizsmith tests
"""
import logging
import pytest
from pathlib import Path


COMPACT_QUIZ = """1. (LO1.1) What is 2+2?
A. 3
B. 4
C. 5
D. 6

2. Which planet is largest?
A. Mars  B. Jupiter  C. Venus

ANSWER KEY: 1B2B
"""

LMS_REVIEW_HTML = """<!DOCTYPE html>
<html><body>
<div class="que multichoice">
  <div class="info"><h3 class="no">Question <span class="qno">1</span></h3></div>
  <div class="formulation">
    <div class="qtext"><span class="accesshide">Question text</span>What is the capital of France?</div>
    <div class="answer">
      <div class="r0"><input type="radio" name="q1:1_answer" value="0">
        <div class="d-flex"><span class="answernumber">a. </span><div class="flex-fill">London</div></div></div>
      <div class="r1"><input type="radio" name="q1:1_answer" value="1">
        <div class="d-flex"><span class="answernumber">b. </span><div class="flex-fill">Berlin</div></div></div>
      <div class="r0"><input type="radio" name="q1:1_answer" value="2" checked="checked">
        <div class="d-flex"><span class="answernumber">c. </span><div class="flex-fill">Paris</div></div></div>
    </div>
  </div>
</div>
<div class="que multichoice">
  <div class="info"><h3 class="no">Question <span class="qno">2</span></h3></div>
  <div class="formulation">
    <div class="qtext">Which gas do plants absorb?</div>
    <div class="answer">
      <div class="r0"><input type="radio" name="q1:2_answer" value="0">
        <span class="answernumber">a. </span><div class="flex-fill">Oxygen</div></div>
      <div class="r1 correct"><input type="radio" name="q1:2_answer" value="1">
        <span class="answernumber">b. </span><div class="flex-fill">Carbon dioxide</div></div>
    </div>
  </div>
</div>
</body></html>
"""

GENERIC_HTML = """<html><body>
<form>
  <div class="question">
    <p>What color is a clear sky?</p>
    <label><input type="radio" name="q1" value="a"> Red</label><br>
    <label><input type="radio" name="q1" value="b" checked> Blue</label><br>
  </div>
  <div class="question">
    <p>How many legs does a spider have?</p>
    <input type="radio" name="q2" id="q2a"><label for="q2a">Six</label>
    <input type="radio" name="q2" id="q2b"><label for="q2b">Eight</label>
  </div>
</form>
</body></html>
"""

LMS_TRANSCRIPT = """Question 1
Not yet answered
Marked out of 1.00
Flag question
Question text
What is the capital of France?
Select one:
a.
Paris
b.
London
Question 2
Not yet answered
Marked out of 1.00
Flag question
Question text
Which gas do plants absorb?
Select one:
a. Oxygen
b. Carbon dioxide
"""


@pytest.fixture(autouse=True)
def reset_quizsmith_logger():
    """CLI runs attach a handler to the package logger; undo that after each test"""
    yield
    logger = logging.getLogger("quizsmith")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No QUIZSMITH_* variables and no global config leaking into a test"""
    for name in ("QUIZSMITH_FORMAT", "QUIZSMITH_SEED", "QUIZSMITH_SHUFFLE", "QUIZSMITH_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def compact_quiz() -> str:
    return COMPACT_QUIZ


@pytest.fixture
def lms_review_html() -> str:
    return LMS_REVIEW_HTML


@pytest.fixture
def generic_html() -> str:
    return GENERIC_HTML


@pytest.fixture
def lms_transcript() -> str:
    return LMS_TRANSCRIPT


@pytest.fixture
def quiz_dir(tmp_path: Path, clean_env) -> Path:
    """A working directory holding one quiz file of each format"""
    work = tmp_path / "work"
    work.mkdir()
    (work / "compact.txt").write_text(COMPACT_QUIZ, encoding="utf-8")
    (work / "review.html").write_text(LMS_REVIEW_HTML, encoding="utf-8")
    (work / "form.html").write_text(GENERIC_HTML, encoding="utf-8")
    (work / "transcript.txt").write_text(LMS_TRANSCRIPT, encoding="utf-8")
    return work
