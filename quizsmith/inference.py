"""
inference.py - Work out which option is correct when the source does not
say so in a machine-readable way

Strategies, tried in order until one succeeds:

1. exactly one option's input carries an explicit ``checked`` attribute
2. exactly one option row is styled as correct
3. a "The correct answer is: ..." statement, matched against every option
   with a tiered score (see ``score_option``)
4. an option's text or image appears two or more times in the container
   (review pages often repeat the right answer in a feedback panel);
   reported with LOW confidence since short texts repeat by accident

If nothing works the question simply has no answer.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from quizsmith.html_utils import markup_to_text
from quizsmith.models import AnswerConfidence
from quizsmith.text_utils import (
    count_occurrences,
    image_refs,
    normalize_text,
    significant_words,
)


log = logging.getLogger(__name__)

STATEMENT_RE = re.compile(
    r"the\s+correct\s+answers?\s+(?:is|are)\s*:?\s*(.*)",
    re.IGNORECASE | re.DOTALL,
)

# Score tiers; only their order matters
SCORE_EXACT = 10000
SCORE_IMAGE = 5000
SCORE_VERBOSE_CONTAINMENT = 500
SCORE_CONTAINMENT_BONUS = 100
SCORE_FUZZY_PER_WORD = 3

VERBOSE_MIN_LENGTH = 20
CONTAINMENT_MIN_LENGTH = 10
FUZZY_MIN_RATIO = 0.6


@dataclass
class AnswerRow:
    label: str
    text: str
    html: str = ""
    is_checked: bool = False
    is_marked_correct: bool = False


@dataclass
class AnswerInference:
    label: str
    strategy: str
    confidence: AnswerConfidence
    score: int = 0


def statement_content(statement: Optional[str]) -> Optional[str]:
    """
    Markup following "the correct answer is", or None when the statement
    does not have that shape.
    """
    if not statement:
        return None
    m = STATEMENT_RE.search(statement)
    if not m:
        return None
    content = m.group(1).strip()
    return content or None


def score_option(option_text: str, option_html: str, content_text: str, content_html: str) -> int:
    """
    Score how well one option matches the statement's content.

    exact text     10000
    same image      5000
    option inside statement (option > 20 chars)   500 - 2 * extra chars
    statement inside option (option > 10 chars)   len(option) + 100
    word overlap (> 60% of option words > 3 chars)  3 * matching words
    """
    option_norm = normalize_text(option_text)
    content_norm = normalize_text(content_text)
    score = 0

    if option_norm and option_norm == content_norm:
        return SCORE_EXACT

    shared_images = set(image_refs(option_html)) & set(image_refs(content_html))
    if shared_images:
        score = max(score, SCORE_IMAGE)

    if not option_norm or not content_norm:
        return score

    if len(option_norm) > VERBOSE_MIN_LENGTH and option_norm in content_norm:
        extra = len(content_norm) - len(option_norm)
        score = max(score, SCORE_VERBOSE_CONTAINMENT - 2 * extra)

    if len(option_norm) > CONTAINMENT_MIN_LENGTH and content_norm in option_norm:
        # capped below the image tier so tier order holds for long options
        score = max(score, min(len(option_norm) + SCORE_CONTAINMENT_BONUS, SCORE_IMAGE - 1))

    option_words = significant_words(option_text)
    if option_words:
        content_words = set(significant_words(content_text))
        matches = sum(1 for w in option_words if w in content_words)
        if matches / len(option_words) > FUZZY_MIN_RATIO:
            score = max(score, SCORE_FUZZY_PER_WORD * matches)

    return score


def match_statement(rows: Sequence[AnswerRow], statement: Optional[str]) -> Optional[AnswerInference]:
    content_html = statement_content(statement)
    if content_html is None:
        return None
    content_text = markup_to_text(content_html)

    best: Optional[AnswerRow] = None
    best_score = 0
    for row in rows:
        score = score_option(row.text, row.html, content_text, content_html)
        # strictly greater: first-seen option wins a tie
        if score > best_score:
            best, best_score = row, score

    if best is None:
        return None
    return AnswerInference(
        label=best.label,
        strategy="statement",
        confidence=AnswerConfidence.INFERRED,
        score=best_score,
    )


def match_duplicates(rows: Sequence[AnswerRow], container_html: Optional[str]) -> Optional[AnswerInference]:
    if not container_html:
        return None
    container_text = normalize_text(markup_to_text(container_html))

    for row in rows:
        text = normalize_text(row.text)
        if text and count_occurrences(container_text, text) >= 2:
            return AnswerInference(row.label, "duplicate", AnswerConfidence.LOW)
        for src in image_refs(row.html):
            if count_occurrences(container_html, src) >= 2:
                return AnswerInference(row.label, "duplicate", AnswerConfidence.LOW)
    return None


def infer_correct_answer(
    rows: Sequence[AnswerRow],
    statement: Optional[str] = None,
    container_html: Optional[str] = None,
) -> Optional[AnswerInference]:
    """
    Decide which option row is correct.

    Args:
        rows: the option rows with their direct correctness hints
        statement: free text (or markup) that may read "The correct answer is: ..."
        container_html: raw markup of the whole question, for the
            repeated-text heuristic

    Returns:
        AnswerInference, or None when no strategy succeeds
    """
    if not rows:
        return None

    checked: List[AnswerRow] = [r for r in rows if r.is_checked]
    if len(checked) == 1:
        return AnswerInference(checked[0].label, "checked", AnswerConfidence.EXPLICIT)

    marked: List[AnswerRow] = [r for r in rows if r.is_marked_correct]
    if len(marked) == 1:
        return AnswerInference(marked[0].label, "correct-class", AnswerConfidence.EXPLICIT)

    found = match_statement(rows, statement)
    if found is not None:
        return found

    found = match_duplicates(rows, container_html)
    if found is not None:
        log.debug("Answer %s inferred from repeated text (low confidence)", found.label)
        return found

    return None
