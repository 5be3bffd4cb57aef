"""
models.py

Canonical quiz data model shared by every parser:

    Question(number, lo, text, options=[Option(label, text), ...])
    AnswerMap  = {question number: option label}

Every parser returns a ParseResult whose questions are numbered 1..N and
whose answer map uses the same numbering. Objects are rebuilt on every parse;
nothing here holds state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


AnswerMap = Dict[int, str]

TITLE_LENGTH = 60


class SourceFormat(str, Enum):
    COMPACT = "compact"
    LMS_TEXT = "lms_text"
    LMS_HTML = "lms_html"
    GENERIC_HTML = "generic_html"


class AnswerConfidence(str, Enum):
    EXPLICIT = "explicit"    # answer key, checked attribute or correctness class
    INFERRED = "inferred"    # matched from a "correct answer is" statement
    LOW = "low"              # option text repeated elsewhere in the container


@dataclass
class Option:
    label: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "text": self.text}


@dataclass
class Question:
    number: int
    text: str
    options: List[Option] = field(default_factory=list)
    lo: str = ""

    def option(self, label: str) -> Optional[Option]:
        for opt in self.options:
            if opt.label == label:
                return opt
        return None

    @property
    def labels(self) -> List[str]:
        return [opt.label for opt in self.options]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "lo": self.lo,
            "text": self.text,
            "options": [opt.to_dict() for opt in self.options],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            number=int(data["number"]),
            lo=data.get("lo") or "",
            text=data.get("text") or "",
            options=[
                Option(label=str(o["label"]), text=o.get("text") or "")
                for o in data.get("options", [])
            ],
        )


@dataclass
class ParseStats:
    """Counts reported alongside a parse to help debug noisy input"""
    blocks_seen: int = 0
    blocks_matched: int = 0
    blocks_discarded: int = 0
    answers_dropped: int = 0
    options_dropped: int = 0
    used_fallback: bool = False

    def summary(self) -> str:
        text = (
            f"{self.blocks_matched} block(s) matched, "
            f"{self.blocks_discarded} discarded"
        )
        if self.answers_dropped:
            text += f", {self.answers_dropped} dangling answer(s) dropped"
        if self.options_dropped:
            text += f", {self.options_dropped} option(s) past Z dropped"
        if self.used_fallback:
            text += " (line-by-line fallback)"
        return text


@dataclass
class ParseResult:
    questions: List[Question]
    answers: AnswerMap
    source_format: SourceFormat
    raw_text: str = ""
    stats: ParseStats = field(default_factory=ParseStats)
    confidence: Dict[int, AnswerConfidence] = field(default_factory=dict)

    @property
    def has_answer_key(self) -> bool:
        return bool(self.answers)

    @property
    def missing_answers(self) -> List[int]:
        """Question numbers that have no recorded answer"""
        return [q.number for q in self.questions if q.number not in self.answers]

    @property
    def content_hash(self) -> str:
        return generate_hash(self.raw_text)

    def question(self, number: int) -> Optional[Question]:
        for q in self.questions:
            if q.number == number:
                return q
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.source_format.value,
            "questions": [q.to_dict() for q in self.questions],
            "answers": {str(k): v for k, v in sorted(self.answers.items())},
            "confidence": {str(k): v.value for k, v in sorted(self.confidence.items())},
            "missing_answers": self.missing_answers,
            "stats": {
                "blocks_seen": self.stats.blocks_seen,
                "blocks_matched": self.stats.blocks_matched,
                "blocks_discarded": self.stats.blocks_discarded,
                "answers_dropped": self.stats.answers_dropped,
                "options_dropped": self.stats.options_dropped,
                "used_fallback": self.stats.used_fallback,
            },
        }


def answers_from_dict(data: Optional[Dict[Any, Any]]) -> AnswerMap:
    """Restore an answer map whose keys went through JSON (and became strings)"""
    answers: AnswerMap = {}
    for key, value in (data or {}).items():
        try:
            answers[int(key)] = str(value).upper()
        except (TypeError, ValueError):
            continue
    return answers


# ============================================================================
# Quiz records
# ============================================================================

def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return sign + "".join(reversed(out))


def generate_hash(content: str) -> str:
    """
    Stable 32-bit string hash of quiz content, rendered in base 36.

    Iterates UTF-16 code units with the classic ``h * 31 + c`` step and
    signed 32-bit wraparound, so hashes agree with the ones already stored by
    the browser app.
    """
    value = 0
    data = content.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + code) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return _to_base36(value)


def title_from_questions(questions: List[Question]) -> str:
    if not questions:
        return "Untitled Quiz"
    text = questions[0].text
    if len(text) > TITLE_LENGTH:
        return text[:TITLE_LENGTH] + "..."
    return text


@dataclass
class Quiz:
    """A titled quiz as stored and exchanged by the storage collaborators"""
    title: str
    content: str
    questions: List[Question]
    answers: AnswerMap
    timestamp: str = ""
    id: Optional[int] = None

    @property
    def hash(self) -> str:
        return generate_hash(self.content)

    @classmethod
    def from_parse(
        cls,
        result: ParseResult,
        title: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> "Quiz":
        return cls(
            title=title or title_from_questions(result.questions),
            content=result.raw_text,
            questions=list(result.questions),
            answers=dict(result.answers),
            timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "questions": [q.to_dict() for q in self.questions],
            "answers": {str(k): v for k, v in sorted(self.answers.items())},
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quiz":
        return cls(
            title=data.get("title") or "Untitled Quiz",
            content=data.get("content") or "",
            questions=[Question.from_dict(q) for q in data.get("questions") or []],
            answers=answers_from_dict(data.get("answers")),
            timestamp=data.get("timestamp") or "",
        )
