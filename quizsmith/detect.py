"""
detect.py - Classify raw quiz input by source format

Heuristics, in priority order:

1. HTML document markers (<!DOCTYPE, <html), an embedded <img> tag or a
   saved LMS question fragment (class="que multichoice") mean HTML. LMS
   review pages are recognised by their multichoice containers or "Select
   one" controls; any other HTML is generic.
2. A "Question N" heading together with an LMS selection marker
   ("Select one:", "Flag question", "Mark 1.00 out of 1.00") means a plain
   text LMS transcript.
3. Everything else is the compact text format.
"""

import re

from quizsmith.models import SourceFormat


HTML_MARKER_RE = re.compile(r"<!DOCTYPE|<html|<img\b", re.IGNORECASE)
LMS_CLASS_RE = re.compile(
    r"""class\s*=\s*["'][^"']*\b(?:multichoice|qtext|que)\b""",
    re.IGNORECASE,
)
LMS_HTML_MARKER_RE = re.compile(LMS_CLASS_RE.pattern + r"|select\s+one", re.IGNORECASE)
LMS_QUESTION_RE = re.compile(r"\bQuestion\s+\d+", re.IGNORECASE)
LMS_SELECTION_RE = re.compile(
    r"Select\s+one\s*:|Flag\s+question|Mark(?:ed)?\s+[\d.,]+\s+out\s+of",
    re.IGNORECASE,
)


def is_html(text: str) -> bool:
    """Document markers, an embedded image, or a saved LMS question fragment"""
    text = text or ""
    return bool(HTML_MARKER_RE.search(text) or LMS_CLASS_RE.search(text))


def detect_format(text: str) -> SourceFormat:
    text = text or ""

    if is_html(text):
        if LMS_HTML_MARKER_RE.search(text):
            return SourceFormat.LMS_HTML
        return SourceFormat.GENERIC_HTML

    if LMS_QUESTION_RE.search(text) and LMS_SELECTION_RE.search(text):
        return SourceFormat.LMS_TEXT

    return SourceFormat.COMPACT
