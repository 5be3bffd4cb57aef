"""
shuffle.py - Randomise option order for a quiz attempt

Each question's options are permuted independently (Fisher-Yates) and
relabelled A, B, C, ... in their new order. The answer map is translated
through the same old-label -> new-label mapping in the same pass, so the
letter changes but the correct option's text does not.

Question numbers are left alone. Shuffle once per attempt: the returned
pair is what grading must use for the rest of that attempt.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Tuple

from quizsmith.models import AnswerMap, Option, Question
from quizsmith.text_utils import letter_label


def permutation(size: int, rng: random.Random) -> List[int]:
    """Uniform random permutation of range(size), Fisher-Yates"""
    order = list(range(size))
    for i in range(size - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def shuffle_question(question: Question, rng: random.Random) -> Tuple[Question, Dict[str, str]]:
    """A new Question with shuffled options, plus the old -> new label map"""
    order = permutation(len(question.options), rng)
    options: List[Option] = []
    mapping: Dict[str, str] = {}
    for new_index, old_index in enumerate(order):
        old = question.options[old_index]
        new_label = letter_label(new_index)
        options.append(Option(label=new_label, text=old.text))
        mapping[old.label] = new_label

    shuffled = Question(number=question.number, lo=question.lo, text=question.text, options=options)
    return shuffled, mapping


def shuffle_options(
    questions: List[Question],
    answers: AnswerMap,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> Tuple[List[Question], AnswerMap]:
    """
    Shuffle every question's options and remap the answer key to match.

    Neither input is modified. Pass ``rng`` or ``seed`` for a reproducible
    order.
    """
    if rng is None:
        rng = random.Random(seed)

    new_questions: List[Question] = []
    new_answers: AnswerMap = {}
    for question in questions:
        shuffled, mapping = shuffle_question(question, rng)
        new_questions.append(shuffled)
        if question.number in answers:
            old_label = answers[question.number]
            new_answers[question.number] = mapping.get(old_label, old_label)

    # keys without a question are carried over unchanged
    for number, label in answers.items():
        new_answers.setdefault(number, label)

    return new_questions, new_answers
