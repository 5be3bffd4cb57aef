"""
builder.py - Canonical model builder

Parsers collect QuestionDraft objects in discovery order, carrying whatever
numbering and option letters the source used. The builder turns them into
canonical Questions:

- numbers are reassigned 1..N with no gaps, in discovery order
- options are relabelled A, B, C, ... in order
- answers keyed by source number / source letter are translated into the
  new numbering in the same pass, and anything that no longer points at a
  real question and option is dropped
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from quizsmith.models import AnswerConfidence, AnswerMap, Option, Question
from quizsmith.text_utils import letter_label


log = logging.getLogger(__name__)

MIN_OPTIONS = 2
# labels run A..Z
MAX_OPTIONS = 26


@dataclass
class QuestionDraft:
    text: str
    options: List[Tuple[str, str]] = field(default_factory=list)  # (source label, text)
    source_number: Optional[int] = None
    lo: str = ""
    # Set when the parser determined the answer itself (LMS containers)
    answer: Optional[str] = None
    confidence: Optional[AnswerConfidence] = None


@dataclass
class BuildOutcome:
    questions: List[Question]
    answers: AnswerMap
    confidence: Dict[int, AnswerConfidence]
    discarded: int = 0
    answers_dropped: int = 0
    options_dropped: int = 0


def build_questions(
    drafts: List[QuestionDraft],
    source_answers: Optional[Dict[int, str]] = None,
    min_options: int = MIN_OPTIONS,
) -> BuildOutcome:
    """
    Assign canonical numbering and labels to parsed drafts.

    ``source_answers`` maps *source* question numbers to *source* option
    letters (as read from an answer key). When a source number appears on
    more than one draft, the first draft carrying it receives the answer.
    """
    source_answers = {int(k): v.upper() for k, v in (source_answers or {}).items()}
    questions: List[Question] = []
    answers: AnswerMap = {}
    confidence: Dict[int, AnswerConfidence] = {}
    claimed: set = set()
    discarded = 0
    dropped = 0
    options_dropped = 0

    for draft in drafts:
        if not draft.text.strip() or len(draft.options) < min_options:
            discarded += 1
            log.debug(
                "Discarding block with %d option(s): %.40r",
                len(draft.options), draft.text,
            )
            continue

        number = len(questions) + 1
        if len(draft.options) > MAX_OPTIONS:
            options_dropped += len(draft.options) - MAX_OPTIONS
            log.warning(
                "Question %d has %d options; keeping the first %d",
                number, len(draft.options), MAX_OPTIONS,
            )
        options: List[Option] = []
        label_map: Dict[str, str] = {}
        for index, (source_label, text) in enumerate(draft.options[:MAX_OPTIONS]):
            new_label = letter_label(index)
            options.append(Option(label=new_label, text=text))
            key = (source_label or new_label).upper()
            label_map.setdefault(key, new_label)

        questions.append(Question(number=number, lo=draft.lo, text=draft.text, options=options))

        if draft.answer is not None:
            source_label = draft.answer.upper()
            how = draft.confidence or AnswerConfidence.EXPLICIT
        elif draft.source_number is not None and draft.source_number in source_answers \
                and draft.source_number not in claimed:
            claimed.add(draft.source_number)
            source_label = source_answers[draft.source_number]
            how = AnswerConfidence.EXPLICIT
        else:
            continue

        new_label = label_map.get(source_label)
        if new_label is None:
            dropped += 1
            log.debug("Question %d: answer %s matches no option", number, source_label)
            continue
        answers[number] = new_label
        confidence[number] = how

    dropped += len(set(source_answers) - claimed)
    return BuildOutcome(
        questions=questions,
        answers=answers,
        confidence=confidence,
        discarded=discarded,
        answers_dropped=dropped,
        options_dropped=options_dropped,
    )


def renumber(
    questions: List[Question],
    answers: AnswerMap,
) -> Tuple[List[Question], AnswerMap, int]:
    """
    Renumber an existing question list 1..N and move the answer map along.

    Returns new objects plus the count of answers that were dropped because
    they pointed at no question or at a label the question does not have.
    """
    new_questions: List[Question] = []
    new_answers: AnswerMap = {}
    seen: set = set()

    for index, q in enumerate(questions, start=1):
        new_questions.append(
            Question(
                number=index,
                lo=q.lo,
                text=q.text,
                options=[Option(label=o.label, text=o.text) for o in q.options],
            )
        )
        if q.number in seen:
            continue
        seen.add(q.number)
        label = answers.get(q.number)
        if label is not None and q.option(label) is not None:
            new_answers[index] = label

    dropped = len(answers) - len(new_answers)
    return new_questions, new_answers, dropped


def check_consistency(questions: List[Question], answers: AnswerMap) -> List[int]:
    """Answer keys that do not resolve to an existing question and option"""
    by_number = {q.number: q for q in questions}
    orphans = []
    for number, label in sorted(answers.items()):
        q = by_number.get(number)
        if q is None or q.option(label) is None:
            orphans.append(number)
    return orphans
