"""
text_utils.py - Tokenizer and text helpers shared by the parsers

Nothing in here keeps state between calls: every pattern is used through
``match``/``finditer`` with explicit positions, never through iterator state
held at module level.
"""

import re
from typing import List, Optional


WHITESPACE_RE = re.compile(r"\s+")
WORD_RE = re.compile(r"\w+", re.UNICODE)
IMG_SRC_RE = re.compile(r"""<img\b[^>]*?\bsrc\s*=\s*["']([^"']+)["']""", re.IGNORECASE)

SIGNIFICANT_WORD_LENGTH = 3


def split_blocks(raw: str) -> List[List[str]]:
    """
    Split text into blocks of lines, separated by blank line(s).
    """
    lines = raw.splitlines()
    blocks: List[List[str]] = []
    cur: List[str] = []

    def push():
        nonlocal cur, blocks
        if cur and any(line.strip() for line in cur):
            blocks.append(cur)
        cur = []

    for line in lines:
        if not line.strip():
            push()
        else:
            cur.append(line)
    push()
    return blocks


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text or "").strip()


def normalize_text(text: str) -> str:
    """Collapse whitespace and casefold, for comparing option texts"""
    return collapse_whitespace(text).casefold()


def significant_words(text: str) -> List[str]:
    """Casefolded words longer than three characters"""
    return [
        w for w in WORD_RE.findall(normalize_text(text))
        if len(w) > SIGNIFICANT_WORD_LENGTH
    ]


def image_refs(markup: str) -> List[str]:
    """``src`` values of every ``<img>`` tag in a markup string, in order"""
    return [m.group(1) for m in IMG_SRC_RE.finditer(markup or "")]


def has_image(markup: str) -> bool:
    return IMG_SRC_RE.search(markup or "") is not None


def letter_label(index: int) -> str:
    """0 -> 'A', 1 -> 'B', ... up to 25 -> 'Z'; the builder keeps no more options than that"""
    return chr(ord("A") + index)


def normalize_label(raw: str) -> Optional[str]:
    """
    Reduce an answer-number indicator such as ``"c."``, ``"(B)"`` or ``"a)"``
    to a single uppercase letter. Returns None when no letter is present.
    """
    m = re.search(r"[A-Za-z]", raw or "")
    if not m:
        return None
    return m.group(0).upper()


def count_occurrences(haystack: str, needle: str) -> int:
    """Non-overlapping occurrences of ``needle``; zero for an empty needle"""
    if not needle:
        return 0
    count = 0
    pos = haystack.find(needle)
    while pos != -1:
        count += 1
        pos = haystack.find(needle, pos + len(needle))
    return count
