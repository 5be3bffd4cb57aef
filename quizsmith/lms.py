"""
lms.py - Parser for Learning-Management-System quiz exports

Two payloads are understood:

HTML review pages (Moodle-style markup):

    <div class="que multichoice">
      <span class="qno">1</span>
      <div class="qtext">What is the capital of France?</div>
      <div class="answer">
        <div class="r0"><input type="radio" checked="checked">
          <span class="answernumber">a. </span><div class="flex-fill">Paris</div></div>
        <div class="r1">...</div>
      </div>
      <div class="rightanswer">The correct answer is: Paris</div>
    </div>

Legacy plain-text transcripts (the same page copied as text):

    Question 1
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

Transcripts never include the correct answer, so their answer map is always
empty and the caller has to supply a key.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from bs4.element import Tag

from quizsmith.builder import MIN_OPTIONS, QuestionDraft, build_questions
from quizsmith.detect import is_html
from quizsmith.html_utils import (
    any_of,
    class_contains,
    classes_of,
    display_markup,
    find_first,
    has_class,
    has_explicit_checked,
    inner_html_excluding,
    is_hidden_label,
    make_soup,
    text_excluding,
)
from quizsmith.inference import STATEMENT_RE, AnswerRow, infer_correct_answer
from quizsmith.models import ParseResult, ParseStats, SourceFormat
from quizsmith.text_utils import has_image, letter_label, normalize_label


log = logging.getLogger(__name__)

PLACEHOLDER_LABELS = "ABCD"

ROW_BODY_SELECTORS = (".flex-fill", "[data-region=answer-label]", "label")
STATEMENT_SELECTORS = (".rightanswer", ".feedback", ".generalfeedback", ".specificfeedback")
CONTROL_SELECTOR = "input[type=radio], input[type=checkbox]"

# Plain-text transcript markers
TEXT_QUESTION_RE = re.compile(r"^\s*Question\s+(\d+)", re.IGNORECASE)
TEXT_BODY_MARKER_RE = re.compile(r"^\s*Question\s+text\s*$", re.IGNORECASE)
TEXT_OPTIONS_MARKER_RE = re.compile(r"^\s*Select\s+(?:one|one\s+or\s+more)\s*:?\s*$", re.IGNORECASE)
# "a." alone or "a. text"; "e.g. ..." is continuation text
TEXT_OPTION_RE = re.compile(r"^\s*([A-Za-z])\.(?:\s+(.*)|\s*)$")
TEXT_META_RE = re.compile(
    r"^\s*(?:Not\s+yet\s+answered|Answer\s+saved|Flag\s+question|Remove\s+flag|"
    r"Clear\s+my\s+choice|Finish\s+review|"
    r"Mark(?:ed)?\s+(?:[\d.,]+\s+)?out\s+of\s+[\d.,]+)\s*$",
    re.IGNORECASE,
)
# Status words that are only metadata before the question text starts;
# later they may be genuine option text.
TEXT_STATUS_RE = re.compile(
    r"^\s*(?:Complete|Not\s+complete|Correct|Incorrect|Partially\s+correct)\s*$",
    re.IGNORECASE,
)
TEXT_FEEDBACK_RE = re.compile(r"^\s*(?:Feedback|Your\s+answer\s+is|The\s+correct\s+answer)", re.IGNORECASE)


# ============================================================================
# HTML review pages
# ============================================================================

def _is_answer_number(tag: Tag) -> bool:
    return has_class(tag, "answernumber")


def _is_control(tag: Tag) -> bool:
    return tag.name == "input"


def find_containers(soup) -> List[Tag]:
    """Question containers in document order, outermost only"""
    containers = soup.select("div.que")
    if not containers:
        containers = soup.find_all(class_=class_contains("multichoice"))
    ids = {id(c) for c in containers}
    return [
        c for c in containers
        if not any(id(parent) in ids for parent in c.parents)
    ]


def _question_number(container: Tag) -> Optional[int]:
    qno = container.select_one(".qno")
    if qno is None:
        return None
    digits = re.search(r"\d+", qno.get_text())
    return int(digits.group(0)) if digits else None


def _answer_rows(container: Tag) -> List[Tag]:
    block = container.select_one(".answer")
    if block is not None:
        rows = [child for child in block.children if isinstance(child, Tag)]
        if rows:
            return rows
    return [control.parent for control in container.select(CONTROL_SELECTOR)]


def read_row(row: Tag, index: int) -> Optional[AnswerRow]:
    """
    Read one answer row: its label, its body (markup kept so images survive)
    and the two direct correctness hints.
    """
    number = row.select_one(".answernumber")
    label = normalize_label(number.get_text()) if number is not None else None
    if not label:
        label = letter_label(index)

    exclude = any_of(_is_answer_number, is_hidden_label, _is_control)
    body = find_first(row, ROW_BODY_SELECTORS) or row
    html = inner_html_excluding(body, exclude)
    text = text_excluding(body, exclude)
    if not text and not has_image(html):
        return None

    return AnswerRow(
        label=label,
        text=text,
        html=html,
        is_checked=has_explicit_checked(row.find("input")),
        is_marked_correct="correct" in classes_of(row),
    )


def _is_question_part(tag: Tag) -> bool:
    return has_class(tag, "answer") or has_class(tag, "qtext")


def _inside_question_part(tag: Tag, container: Tag) -> bool:
    node = tag
    while node is not None and node is not container:
        if _is_question_part(node):
            return True
        node = node.parent
    return False


def _reads_statement(tag: Tag) -> bool:
    m = STATEMENT_RE.search(text_excluding(tag, _is_question_part))
    return m is not None and bool(m.group(1).strip())


def _statement(container: Tag) -> Optional[str]:
    """
    Markup of the element reading "The correct answer is ...".

    The usual feedback regions are tried first; after that the innermost
    element anywhere in the container outside the question text and the
    answer rows.
    """
    for selector in STATEMENT_SELECTORS:
        for tag in container.select(selector):
            if STATEMENT_RE.search(text_excluding(tag)):
                return inner_html_excluding(tag, is_hidden_label)

    for tag in container.find_all(True):
        if _inside_question_part(tag, container) or not _reads_statement(tag):
            continue
        if any(_reads_statement(child) for child in tag.find_all(True, recursive=False)):
            continue
        return inner_html_excluding(tag, any_of(is_hidden_label, _is_question_part))
    return None


def parse_container(container: Tag, fallback_number: int) -> Optional[QuestionDraft]:
    number = _question_number(container) or fallback_number

    qtext = container.select_one(".qtext")
    if qtext is None:
        log.debug("Container %d has no question text", number)
        return None
    body = display_markup(
        inner_html_excluding(qtext, is_hidden_label),
        text_excluding(qtext, is_hidden_label),
    )
    if not body:
        log.debug("Container %d has an empty question text", number)
        return None

    rows: List[AnswerRow] = []
    for row_tag in _answer_rows(container):
        row = read_row(row_tag, len(rows))
        if row is not None:
            rows.append(row)

    draft = QuestionDraft(
        text=body,
        options=[(row.label, display_markup(row.html, row.text)) for row in rows],
        source_number=number,
    )

    if not rows:
        if has_image(body):
            # keep a gradable shell for image-only questions
            draft.options = [(c, f"Option {c}") for c in PLACEHOLDER_LABELS]
        return draft

    inference = infer_correct_answer(rows, _statement(container), container.decode())
    if inference is None:
        log.info("Question %d: could not determine the correct answer", number)
    else:
        draft.answer = inference.label
        draft.confidence = inference.confidence
        log.debug("Question %d: answer %s via %s", number, inference.label, inference.strategy)
    return draft


def parse_lms_html(html: str) -> ParseResult:
    soup = make_soup(html)
    stats = ParseStats()
    drafts: List[QuestionDraft] = []

    for counter, container in enumerate(find_containers(soup), start=1):
        stats.blocks_seen += 1
        draft = parse_container(container, counter)
        if draft is None:
            stats.blocks_discarded += 1
            continue
        drafts.append(draft)

    outcome = build_questions(drafts, min_options=1)
    stats.blocks_discarded += outcome.discarded
    stats.blocks_matched = len(outcome.questions)
    stats.answers_dropped = outcome.answers_dropped
    stats.options_dropped = outcome.options_dropped
    log.debug("LMS HTML parse: %s", stats.summary())

    return ParseResult(
        questions=outcome.questions,
        answers=outcome.answers,
        source_format=SourceFormat.LMS_HTML,
        raw_text=html,
        stats=stats,
        confidence=outcome.confidence,
    )


# ============================================================================
# Plain-text transcripts
# ============================================================================

def split_transcript(text: str) -> List[Tuple[int, List[str]]]:
    """Split a transcript into (source number, lines) per "Question N" heading"""
    blocks: List[Tuple[int, List[str]]] = []
    current: Optional[Tuple[int, List[str]]] = None

    for line in text.splitlines():
        m = TEXT_QUESTION_RE.match(line)
        if m:
            current = (int(m.group(1)), [])
            blocks.append(current)
            remainder = line[m.end():].strip()
            if remainder:
                current[1].append(remainder)
        elif current is not None:
            current[1].append(line)
    return blocks


def parse_transcript_block(number: int, lines: List[str]) -> QuestionDraft:
    body: List[str] = []
    options: List[Tuple[str, List[str]]] = []
    state = "meta"

    for raw in lines:
        line = raw.strip()
        if not line or TEXT_META_RE.match(line):
            continue
        if state == "meta" and TEXT_STATUS_RE.match(line):
            continue
        if TEXT_BODY_MARKER_RE.match(line):
            state = "body"
            continue
        if TEXT_OPTIONS_MARKER_RE.match(line):
            state = "options"
            continue
        if TEXT_FEEDBACK_RE.match(line):
            state = "done"
            continue

        m_opt = TEXT_OPTION_RE.match(line)
        if m_opt and (state == "options" or (state == "body" and body)):
            state = "options"
            options.append((m_opt.group(1).upper(), [m_opt.group(2)] if m_opt.group(2) else []))
            continue

        if state in ("meta", "body"):
            state = "body"
            body.append(line)
        elif state == "options" and options:
            options[-1][1].append(line)

    return QuestionDraft(
        text="\n".join(body),
        options=[(label, " ".join(parts)) for label, parts in options if parts],
        source_number=number,
    )


def parse_lms_text(text: str, min_options: int = MIN_OPTIONS) -> ParseResult:
    stats = ParseStats()
    drafts = []
    for number, lines in split_transcript(text):
        stats.blocks_seen += 1
        drafts.append(parse_transcript_block(number, lines))

    outcome = build_questions(drafts, min_options=min_options)
    stats.blocks_discarded = outcome.discarded
    stats.blocks_matched = len(outcome.questions)
    stats.options_dropped = outcome.options_dropped
    log.debug("LMS text parse: %s", stats.summary())

    return ParseResult(
        questions=outcome.questions,
        answers={},
        source_format=SourceFormat.LMS_TEXT,
        raw_text=text,
        stats=stats,
    )


def parse_lms(text: str) -> ParseResult:
    if is_html(text or ""):
        return parse_lms_html(text)
    return parse_lms_text(text or "")
