"""
parser.py - One entry point for every supported quiz source

    result = parse_quiz(text)
    result.questions   # [Question(number=1, ...), ...]
    result.answers     # {1: "B", ...}

``parse_quiz`` detects the format (unless one is forced), runs the matching
parser and refuses to hand back a quiz without questions: that case raises
NoQuestionsFoundError. A missing answer key is *not* an error here; it shows
up as ``result.has_answer_key == False`` and is only fatal once somebody
tries to grade.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import frontmatter

from quizsmith.builder import MIN_OPTIONS
from quizsmith.compact import parse_compact
from quizsmith.config_utils import parse_format
from quizsmith.detect import HTML_MARKER_RE, detect_format
from quizsmith.errors import no_questions_found_error
from quizsmith.generic_html import parse_generic_html
from quizsmith.lms import parse_lms_html, parse_lms_text
from quizsmith.models import ParseResult, SourceFormat


log = logging.getLogger(__name__)

DOCUMENT_MARKERS = ("<!doctype", "<html")
HTML_FORMATS = (SourceFormat.LMS_HTML, SourceFormat.GENERIC_HTML)


def _looks_like_document(text: str) -> bool:
    head = text.lower()
    return any(marker in head for marker in DOCUMENT_MARKERS)


def run_parser(text: str, source_format: SourceFormat, min_options: int = MIN_OPTIONS) -> ParseResult:
    if source_format == SourceFormat.LMS_HTML:
        return parse_lms_html(text)
    if source_format == SourceFormat.LMS_TEXT:
        return parse_lms_text(text, min_options=min_options)
    if source_format == SourceFormat.GENERIC_HTML:
        return parse_generic_html(text, min_options=min_options)
    return parse_compact(text, min_options=min_options)


def parse_quiz(
    text: str,
    source_format: Optional[SourceFormat] = None,
    allow_degenerate: bool = False,
    min_options: int = MIN_OPTIONS,
) -> ParseResult:
    """
    Parse quiz text or HTML into canonical questions and answers.

    Args:
        text: raw pasted or uploaded content
        source_format: force a parser instead of detecting one
        allow_degenerate: accept an HTML page with no structure as a single
            question without options
        min_options: questions with fewer options are dropped

    Raises:
        NoQuestionsFoundError: nothing usable was found
    """
    text = text or ""
    detected = source_format is None
    fmt = detect_format(text) if detected else source_format
    log.debug("Parsing as %s%s", fmt.value, " (detected)" if detected else "")

    result = run_parser(text, fmt, min_options=min_options)

    # Compact text with an inline <img> is detected as HTML (as LMS HTML when
    # it also says "select one"); if the HTML parsers found nothing, give the
    # compact parser a go.
    if detected and fmt in HTML_FORMATS and result.stats.blocks_matched == 0 \
            and not _looks_like_document(text):
        compact = parse_compact(text, min_options=min_options)
        if compact.questions:
            log.debug("No HTML structure found; parsed as compact text instead")
            result = compact

    usable = result.stats.blocks_matched > 0 or (allow_degenerate and result.questions)
    if not usable:
        raise no_questions_found_error(
            result.source_format.value,
            blocks_seen=result.stats.blocks_seen,
            blocks_discarded=result.stats.blocks_discarded,
        )

    log.info(
        "Parsed %d question(s) from %s input: %s",
        len(result.questions), result.source_format.value, result.stats.summary(),
    )
    if not result.has_answer_key:
        log.warning("No answer key found; supply one before grading")
    elif result.missing_answers:
        log.info("No answer recorded for question(s) %s",
                 ", ".join(str(n) for n in result.missing_answers))
    return result


def read_quiz_file(path: Union[str, Path]) -> Tuple[Dict[str, Any], str]:
    """
    Read a quiz file, splitting off YAML frontmatter when present.

    HTML files are returned untouched; only text sources carry frontmatter.
    """
    raw = Path(path).read_text(encoding="utf-8")
    if HTML_MARKER_RE.search(raw[:1024]):
        return {}, raw
    post = frontmatter.loads(raw)
    return dict(post.metadata), post.content


def parse_file(
    path: Union[str, Path],
    source_format: Optional[SourceFormat] = None,
    allow_degenerate: bool = False,
    min_options: int = MIN_OPTIONS,
) -> Tuple[Dict[str, Any], ParseResult]:
    """
    Parse a quiz file. Frontmatter may set ``title``, ``format`` and
    ``shuffle``; an explicit ``source_format`` argument wins over ``format``.
    """
    meta, body = read_quiz_file(path)
    fmt = source_format or parse_format(meta.get("format"))
    return meta, parse_quiz(body, fmt, allow_degenerate=allow_degenerate, min_options=min_options)
