# errors.py
"""
Custom exception classes with readable error messages for Quizsmith

All exceptions include:
- Clear error description
- Actionable suggestions
- Relevant context
"""
from typing import Optional, Dict, Any, Iterable


class QuizsmithError(Exception):
    """Base exception for all Quizsmith errors"""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error with all details"""
        lines = [
            "",
            "=" * 70,
            f"[x] {self.__class__.__name__}",
            "=" * 70,
            "",
            self.message,
        ]

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append("")
            lines.append("Suggestion:")
            lines.append(f"  {self.suggestion}")

        if self.cause:
            lines.append("")
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        lines.append("")
        lines.append("=" * 70)
        lines.append("")

        return "\n".join(lines)


class ConfigurationError(QuizsmithError):
    """Configuration is missing or invalid"""
    pass


class NoQuestionsFoundError(QuizsmithError):
    """Input parsed without producing a single usable question"""
    pass


class MissingAnswerKeyError(QuizsmithError):
    """Questions exist but there is no answer key to grade against"""
    pass


class UnsupportedFormatError(QuizsmithError):
    """A source format name was requested that Quizsmith does not know"""
    pass


class ArchiveFormatError(QuizsmithError):
    """A quiz archive could not be read"""
    pass


# Specific error factory functions

def no_questions_found_error(
    source_format: str,
    blocks_seen: int = 0,
    blocks_discarded: int = 0,
) -> NoQuestionsFoundError:
    """Create error for input that yielded zero questions"""
    if source_format == "compact":
        hint = (
            "Check the compact format:\n"
            "  1. Question text\n"
            "  A. First option\n"
            "  B. Second option\n\n"
            "  ANSWER KEY: 1B\n\n"
            "Each question needs at least two lettered options."
        )
    elif source_format in ("lms_html", "lms_text"):
        hint = (
            "The LMS export did not contain recognisable question containers.\n"
            "Save the quiz review page as a complete HTML document and try again."
        )
    else:
        hint = (
            "No radio-button groups were found in the HTML.\n"
            "Try pasting the quiz as plain text instead."
        )

    return NoQuestionsFoundError(
        message="No valid questions found",
        suggestion=hint,
        context={
            "source_format": source_format,
            "blocks_seen": blocks_seen,
            "blocks_discarded": blocks_discarded,
        }
    )


def missing_answer_key_error(question_count: int) -> MissingAnswerKeyError:
    """Create error for grading without an answer key"""
    return MissingAnswerKeyError(
        message=f"Cannot grade {question_count} question(s): no answer key",
        suggestion=(
            "Add an answer key to the quiz text:\n"
            "  ANSWER KEY: 1A2C3B\n\n"
            "LMS text transcripts never include answers, so the key\n"
            "must be supplied separately."
        ),
        context={"questions": question_count}
    )


def unsupported_format_error(
    requested: str,
    valid_formats: Iterable[str]
) -> UnsupportedFormatError:
    """Create error for an unknown source format name"""
    valid = list(valid_formats)
    return UnsupportedFormatError(
        message=f"Unsupported source format: {requested}",
        suggestion=(
            "Use one of:\n" +
            "\n".join(f"  - {name}" for name in valid)
        ),
        context={
            "requested": requested,
            "valid_formats": valid,
        }
    )


def archive_format_error(
    reason: str,
    cause: Optional[Exception] = None
) -> ArchiveFormatError:
    """Create error for a malformed quiz archive"""
    return ArchiveFormatError(
        message=f"Invalid quiz archive: {reason}",
        suggestion=(
            "Quiz archives are JSON documents shaped like:\n"
            '  {"version": "1.0", "quizzes": [{"title": ..., "content": ...}]}'
        ),
        context={"reason": reason},
        cause=cause
    )
