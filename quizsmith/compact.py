"""
compact.py - Parser for the compact plain-text quiz format

    1. (LO1.2) What is 2+2?
    A. 3
    B. 4
    C. 5
    D. 6

    2. Which planet is largest?
    A. Mars  B. Jupiter  C. Venus

    ANSWER KEY: 1B2B

Questions are separated by blank lines. Options are a capital letter, a
period and whitespace, either one per line or inline. The answer key is a
line starting "ANSWER KEY" followed only by answer pairs (optionally
continued on the following lines), or, when no such marker exists, any line
made only of <number><letter> pairs.

Source numbering is informational: questions are renumbered 1..N in the
order they appear and the answer key is remapped to match.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from quizsmith.builder import MIN_OPTIONS, QuestionDraft, build_questions
from quizsmith.models import ParseResult, ParseStats, SourceFormat
from quizsmith.text_utils import split_blocks


log = logging.getLogger(__name__)

ANSWER_KEY_RE = re.compile(r"^\s*ANSWER\s*KEYS?\b\s*[:\-]?", re.IGNORECASE)
ANSWER_PAIR_RE = re.compile(r"(\d+)\s*[.):\-]?\s*([A-Za-z])(?![A-Za-z])")
KEY_LINE_RE = re.compile(r"^\s*(?:\d+\s*[:\-)]?\s*[A-Za-z](?![A-Za-z])[\s,;]*)+$")
KEY_SEPARATORS_RE = re.compile(r"[\s,;.]+")
QANS_MARKER = "QAns"

QUESTION_HEADER_RE = re.compile(r"^\s*(\d+)\s*\.\s*(\(LO[^)]*\))?\s*", re.IGNORECASE)
LO_TAG_RE = re.compile(r"^\s*(\(LO[^)]*\))\s*", re.IGNORECASE)
LINE_OPTION_RE = re.compile(r"^[ \t]*([A-Z])\.\s+", re.MULTILINE)
INLINE_OPTION_RE = re.compile(r"(?:^|(?<=\s))([A-Z])\.\s+", re.MULTILINE)

FALLBACK_QUESTION_RE = re.compile(r"^(\d+)\.\s*(\(LO[^)]*\))?\s*(.+)$", re.IGNORECASE)
FALLBACK_OPTION_RE = re.compile(r"^([A-Z])\.\s*(.+)$")


# ---------- Answer key ----------

def decode_answer_pairs(text: str) -> Dict[int, str]:
    """Decode '1B2C', '1. B, 2. C' and similar into {1: 'B', 2: 'C'}"""
    answers: Dict[int, str] = {}
    for m in ANSWER_PAIR_RE.finditer(text):
        answers[int(m.group(1))] = m.group(2).upper()
    return answers


def _only_pairs(text: str) -> bool:
    return not KEY_SEPARATORS_RE.sub("", ANSWER_PAIR_RE.sub("", text))


def extract_answer_key(text: str) -> Tuple[str, Dict[int, str]]:
    """
    Remove the answer key from ``text``.

    Returns the remaining text and the decoded answers keyed by the source
    question numbers.
    """
    lines = text.splitlines()
    answers: Dict[int, str] = {}
    kept: List[str] = []
    found_marker = False

    i = 0
    while i < len(lines):
        line = lines[i]
        m = ANSWER_KEY_RE.match(line)
        if not m or not _only_pairs(line[m.end():]):
            kept.append(line)
            i += 1
            continue

        found_marker = True
        answers.update(decode_answer_pairs(line[m.end():]))
        i += 1
        # The key may continue on the following lines ("1B", "2C", ...)
        while i < len(lines) and (not lines[i].strip() or KEY_LINE_RE.match(lines[i])):
            answers.update(decode_answer_pairs(lines[i]))
            i += 1

    if found_marker:
        return "\n".join(kept), answers

    kept = []
    for line in lines:
        if QANS_MARKER in line:
            answers.update(decode_answer_pairs(line.replace(QANS_MARKER, " ")))
        elif KEY_LINE_RE.match(line):
            answers.update(decode_answer_pairs(line))
        else:
            kept.append(line)
    return "\n".join(kept), answers


# ---------- Paragraph pass ----------

def _option_start(body: str) -> Optional[re.Match]:
    """First option marker, preferring one at the start of a line"""
    m = LINE_OPTION_RE.search(body)
    if m:
        return m
    return INLINE_OPTION_RE.search(body)


def split_options(options_text: str) -> List[Tuple[str, str]]:
    """
    Split an options region into (label, text) pairs, in order.

    Each option runs from its marker to the next marker. When two or more
    options start their own lines only line-leading markers count, so an
    initial inside option text ("John F. Kennedy") stays part of it.
    """
    markers = list(LINE_OPTION_RE.finditer(options_text))
    if len(markers) < 2:
        markers = list(INLINE_OPTION_RE.finditer(options_text))
    options: List[Tuple[str, str]] = []
    for index, m in enumerate(markers):
        end = markers[index + 1].start() if index + 1 < len(markers) else len(options_text)
        text = " ".join(part.strip() for part in options_text[m.end():end].splitlines() if part.strip())
        if text:
            options.append((m.group(1), text))
    return options


def parse_block(lines: List[str]) -> Optional[QuestionDraft]:
    """
    Parse one blank-line-delimited block, or return None when it has no
    option markers at all (titles, instructions, stray notes).
    """
    body = "\n".join(lines)
    start = _option_start(body)
    if start is None:
        return None

    head = body[:start.start()]
    source_number: Optional[int] = None
    lo = ""
    m = QUESTION_HEADER_RE.match(head)
    if m:
        source_number = int(m.group(1))
        lo = m.group(2) or ""
        head = head[m.end():]
    else:
        m_lo = LO_TAG_RE.match(head)
        if m_lo:
            lo = m_lo.group(1)
            head = head[m_lo.end():]

    text = "\n".join(part.strip() for part in head.splitlines() if part.strip())
    return QuestionDraft(
        text=text,
        options=split_options(body[start.start():]),
        source_number=source_number,
        lo=lo,
    )


# ---------- Line-by-line fallback ----------

def parse_lines(text: str) -> List[QuestionDraft]:
    """
    State machine over individual lines for input whose paragraphs are not
    separated the way the block pass expects.
    """
    drafts: List[QuestionDraft] = []
    current: Optional[QuestionDraft] = None

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue

        m_q = FALLBACK_QUESTION_RE.match(line)
        if m_q:
            if current is not None and current.options:
                drafts.append(current)
            current = QuestionDraft(
                text=m_q.group(3).strip(),
                source_number=int(m_q.group(1)),
                lo=m_q.group(2) or "",
            )
            continue

        m_opt = FALLBACK_OPTION_RE.match(line)
        if m_opt and current is not None:
            current.options.append((m_opt.group(1), m_opt.group(2).strip()))

    if current is not None and current.options:
        drafts.append(current)
    return drafts


# ---------- Public API ----------

def parse_compact(text: str, min_options: int = MIN_OPTIONS) -> ParseResult:
    working, source_answers = extract_answer_key(text or "")
    stats = ParseStats()

    drafts: List[QuestionDraft] = []
    for block in split_blocks(working):
        stats.blocks_seen += 1
        draft = parse_block(block)
        if draft is None:
            stats.blocks_discarded += 1
            continue
        drafts.append(draft)

    outcome = build_questions(drafts, source_answers, min_options=min_options)
    stats.blocks_discarded += outcome.discarded

    if not outcome.questions:
        log.debug("Paragraph pass found no questions; trying line-by-line parse")
        line_drafts = parse_lines(working)
        outcome = build_questions(line_drafts, source_answers, min_options=min_options)
        stats.used_fallback = True
        stats.blocks_discarded = outcome.discarded
        stats.blocks_seen = len(line_drafts)

    stats.blocks_matched = len(outcome.questions)
    stats.answers_dropped = outcome.answers_dropped
    stats.options_dropped = outcome.options_dropped
    log.debug("Compact parse: %s", stats.summary())

    return ParseResult(
        questions=outcome.questions,
        answers=outcome.answers,
        source_format=SourceFormat.COMPACT,
        raw_text=text or "",
        stats=stats,
        confidence=outcome.confidence,
    )
