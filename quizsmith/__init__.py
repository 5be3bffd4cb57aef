"""
Quizsmith - Multiple-choice quiz parsing, shuffling and grading

Turns pasted compact quiz text, LMS review pages (HTML or copied text) and
arbitrary HTML forms into numbered questions with an answer key.
"""

__version__ = "1.0.0"

from quizsmith.errors import (
    ArchiveFormatError,
    ConfigurationError,
    MissingAnswerKeyError,
    NoQuestionsFoundError,
    QuizsmithError,
    UnsupportedFormatError,
)
from quizsmith.models import AnswerConfidence, Option, ParseResult, Question, Quiz, SourceFormat
from quizsmith.detect import detect_format
from quizsmith.compact import parse_compact
from quizsmith.lms import parse_lms, parse_lms_html, parse_lms_text
from quizsmith.generic_html import parse_generic_html
from quizsmith.parser import parse_file, parse_quiz
from quizsmith.shuffle import shuffle_options
from quizsmith.grading import grade, parse_responses
