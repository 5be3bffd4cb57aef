"""
generic_html.py - Last-resort extractor for arbitrary HTML with radio buttons

Used when a page has none of the LMS markers. It works in three steps:

1. elements whose class mentions "question" and which hold radio buttons
   are treated as question containers; when there are none, every radio
   button on the page is grouped by its ``name`` attribute instead
2. option text comes from ``<label for=...>``, an enclosing label, or the
   text that follows the control; the question text is what is left of the
   nearest enclosing block once the options are taken out
3. an answer is recorded only for a control that carries ``checked``

Pages with no structure at all come back as a single question holding the
page text and no options. Callers decide whether that is usable.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from bs4.element import NavigableString, Tag

from quizsmith.builder import MIN_OPTIONS, QuestionDraft, build_questions
from quizsmith.html_utils import (
    BLOCK_TAGS,
    body_or_root,
    class_contains,
    display_markup,
    has_explicit_checked,
    inner_html_excluding,
    is_hidden_label,
    make_soup,
    text_excluding,
)
from quizsmith.models import ParseResult, ParseStats, Question, SourceFormat
from quizsmith.text_utils import collapse_whitespace, letter_label


log = logging.getLogger(__name__)

RADIO_SELECTOR = "input[type=radio]"
NON_CONTENT_TAGS = {"script", "style", "noscript", "template"}


def _is_radio(tag: Tag) -> bool:
    return tag.name == "input" and (tag.get("type") or "").lower() == "radio"


def _is_input(tag: Tag) -> bool:
    return tag.name == "input" or tag.name in NON_CONTENT_TAGS


def _holds_radio(tag: Tag) -> bool:
    return _is_radio(tag) or tag.select_one(RADIO_SELECTOR) is not None


# ---------- Structure discovery ----------

def find_question_containers(soup) -> List[Tag]:
    """Innermost elements with a "question" class that contain radio buttons"""
    candidates = [
        tag for tag in soup.find_all(class_=class_contains("question"))
        if tag.select_one(RADIO_SELECTOR) is not None
    ]
    ids = {id(c) for c in candidates}
    return [
        c for c in candidates
        if not any(id(d) in ids for d in c.descendants if isinstance(d, Tag))
    ]


def group_radios(soup) -> List[List[Tag]]:
    """Radio buttons grouped by ``name``, in document order of first appearance"""
    groups: Dict[str, List[Tag]] = {}
    for control in soup.select(RADIO_SELECTOR):
        key = control.get("name") or f"__unnamed_{id(control.parent)}"
        groups.setdefault(key, []).append(control)
    return list(groups.values())


def common_ancestor(controls: List[Tag]) -> Tag:
    """Lowest element containing every control, never a label"""
    chain = list(controls[0].parents)
    others = [set(id(p) for p in c.parents) for c in controls[1:]]
    ancestor = chain[0]
    for parent in chain:
        if all(id(parent) in o for o in others):
            ancestor = parent
            break
    while ancestor.name == "label" and ancestor.parent is not None:
        ancestor = ancestor.parent
    return ancestor


def row_of(control: Tag, ancestor: Tag) -> Tag:
    """The child of ``ancestor`` that contains ``control``"""
    node = control
    while node.parent is not None and node.parent is not ancestor:
        node = node.parent
    return node


# ---------- Text recovery ----------

def _ends_option(tag: Tag) -> bool:
    """Loose option text runs up to a <br>, a block element or the next control"""
    return tag.name == "br" or (tag.name in BLOCK_TAGS and tag.name != "label") or _holds_radio(tag)


def option_text(control: Tag, soup) -> str:
    control_id = control.get("id")
    if control_id:
        label = soup.find("label", attrs={"for": control_id})
        if label is not None:
            text = text_excluding(label, _is_input)
            if text:
                return text

    label = control.find_parent("label")
    if label is not None:
        text = text_excluding(label, _is_input)
        if text:
            return text

    parts: List[str] = []
    for sibling in control.next_siblings:
        if isinstance(sibling, NavigableString):
            parts.append(str(sibling))
            continue
        if not isinstance(sibling, Tag):
            continue
        if _ends_option(sibling):
            break
        parts.append(text_excluding(sibling, _is_input))
    text = collapse_whitespace(" ".join(parts))
    return text or (control.get("value") or "")


def _preceding_text(row: Tag) -> str:
    """Text of the siblings before ``row``, back to the previous group's options"""
    nodes = []
    for sibling in row.previous_siblings:
        if isinstance(sibling, Tag) and _holds_radio(sibling):
            if _is_radio(sibling):
                # nodes run backwards; drop the bare control's own option text
                while nodes and not (isinstance(nodes[-1], Tag) and _ends_option(nodes[-1])):
                    nodes.pop()
            break
        nodes.append(sibling)

    parts: List[str] = []
    for node in reversed(nodes):
        if isinstance(node, NavigableString):
            parts.append(str(node))
        elif isinstance(node, Tag) and node.name not in NON_CONTENT_TAGS:
            parts.append(text_excluding(node, _is_input))
    return collapse_whitespace(" ".join(parts))


def question_text(ancestor: Tag, controls: List[Tag], soup) -> str:
    group = {id(c) for c in controls}
    rows: Set[int] = {id(row_of(c, ancestor)) for c in controls}
    label_ids = {c.get("id") for c in controls if c.get("id")}

    foreign = [c for c in ancestor.select(RADIO_SELECTOR) if id(c) not in group]
    bare = any(row_of(c, ancestor) is c for c in controls)
    if foreign or bare:
        # option text sits loose beside the controls, or other groups share
        # this block; only the text just before our options is ours
        return _preceding_text(row_of(controls[0], ancestor))

    def exclude(tag: Tag) -> bool:
        return (
            id(tag) in rows
            or _is_input(tag)
            or is_hidden_label(tag)
            or (tag.name == "label" and tag.get("for") in label_ids)
        )

    return display_markup(
        inner_html_excluding(ancestor, exclude),
        text_excluding(ancestor, exclude),
    )


def draft_from_controls(ancestor: Tag, controls: List[Tag], soup) -> QuestionDraft:
    options = []
    answer: Optional[str] = None
    for index, control in enumerate(controls):
        label = letter_label(index)
        options.append((label, option_text(control, soup)))
        if answer is None and has_explicit_checked(control):
            answer = label

    return QuestionDraft(
        text=question_text(ancestor, controls, soup),
        options=[(label, text) for label, text in options if text],
        answer=answer,
    )


# ---------- Public API ----------

def parse_generic_html(html: str, min_options: int = MIN_OPTIONS) -> ParseResult:
    soup = make_soup(html or "")
    stats = ParseStats()
    drafts: List[QuestionDraft] = []

    containers = find_question_containers(soup)
    if containers:
        for container in containers:
            controls = container.select(RADIO_SELECTOR)
            drafts.append(draft_from_controls(container, controls, soup))
    else:
        for controls in group_radios(soup):
            drafts.append(draft_from_controls(common_ancestor(controls), controls, soup))

    stats.blocks_seen = len(drafts)
    outcome = build_questions(drafts, min_options=min_options)
    stats.blocks_discarded = outcome.discarded
    stats.blocks_matched = len(outcome.questions)
    stats.answers_dropped = outcome.answers_dropped
    stats.options_dropped = outcome.options_dropped

    if outcome.questions:
        log.debug("Generic HTML parse: %s", stats.summary())
        return ParseResult(
            questions=outcome.questions,
            answers=outcome.answers,
            source_format=SourceFormat.GENERIC_HTML,
            raw_text=html,
            stats=stats,
            confidence=outcome.confidence,
        )

    log.debug("Generic HTML parse found no radio groups; returning the page as one block")
    page_text = text_excluding(body_or_root(soup), lambda tag: tag.name in NON_CONTENT_TAGS)
    questions = [Question(number=1, text=page_text, options=[])] if page_text else []
    return ParseResult(
        questions=questions,
        answers={},
        source_format=SourceFormat.GENERIC_HTML,
        raw_text=html,
        stats=stats,
    )
