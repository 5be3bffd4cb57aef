# cli.py - Command line interface for Quizsmith
"""
Quizsmith CLI - Parse, shuffle, grade and archive multiple-choice quizzes

COMMANDS:
    Parsing:
        quizsmith detect FILE                          Show the detected source format
        quizsmith parse FILE [--format F] [--json]     Parse a quiz and print it
                   [--shuffle] [--seed N]

    Grading:
        quizsmith grade FILE --responses 1A2B          Score responses against the key

    Archives:
        quizsmith export FILE... [--output FILE]       Bundle quizzes into a JSON archive
        quizsmith import ARCHIVE                       Summarise what an archive would import

    Other:
        quizsmith init [--force]                       Write a quizsmith.yaml template
        quizsmith version                              Show version information

EXAMPLES:
    # What kind of file is this?
    quizsmith detect exam.html

    # Parse a pasted quiz and print it as JSON
    quizsmith parse quiz.txt --json

    # Reproducible shuffled attempt
    quizsmith parse quiz.txt --shuffle --seed 42

    # Grade an attempt
    quizsmith grade quiz.txt --responses 1A2C3B

    # More output
    quizsmith -v parse quiz.txt
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from quizsmith import __version__
from quizsmith.archive import export_archive, read_archive
from quizsmith.config_utils import CONFIG_FILENAME, create_config_template, get_config, parse_format
from quizsmith.detect import detect_format
from quizsmith.errors import QuizsmithError
from quizsmith.grading import grade as grade_responses
from quizsmith.grading import parse_responses
from quizsmith.logging_utils import setup_logging
from quizsmith.models import ParseResult, Quiz, SourceFormat, title_from_questions
from quizsmith.parser import parse_quiz, read_quiz_file
from quizsmith.shuffle import shuffle_options


log = logging.getLogger(__name__)

FORMAT_CHOICES = ["auto"] + [f.value for f in SourceFormat]


class QuizsmithContext:
    """Shared context for CLI commands"""

    def __init__(self, verbosity: int = 0):
        self.working_dir = Path.cwd()
        self.config = get_config(self.working_dir)
        self.verbosity = verbosity

    def resolve_format(self, option: Optional[str], meta: Dict[str, Any]) -> Optional[SourceFormat]:
        """--format wins over frontmatter, which wins over quizsmith.yaml"""
        return (
            parse_format(option)
            or parse_format(meta.get("format"))
            or self.config.default_format
        )

    def load(self, path: str, format_option: Optional[str] = None) -> Tuple[Dict[str, Any], ParseResult]:
        meta, body = read_quiz_file(path)
        result = parse_quiz(
            body,
            self.resolve_format(format_option, meta),
            allow_degenerate=self.config.allow_degenerate,
            min_options=self.config.min_options,
        )
        return meta, result


def _fail(error: QuizsmithError):
    click.echo(str(error), err=True)
    sys.exit(1)


def _print_quiz(result: ParseResult):
    for question in result.questions:
        lo = f" {question.lo}" if question.lo else ""
        click.echo(f"\n{question.number}.{lo} {question.text}")
        correct = result.answers.get(question.number)
        for option in question.options:
            marker = "*" if option.label == correct else " "
            click.echo(f"  {marker} {option.label}. {option.text}")


# ============================================================================
# Click Group Setup
# ============================================================================

@click.group()
@click.option('--verbose', '-v', count=True, help='More output (-vv for debug)')
@click.pass_context
def cli(ctx, verbose: int):
    """
    Quizsmith - Multiple-choice quiz parsing and grading

    Turns pasted quiz text, LMS review pages and plain HTML forms into
    numbered questions with an answer key.
    """
    try:
        ctx.obj = QuizsmithContext(verbosity=verbose)
    except QuizsmithError as e:
        _fail(e)
    setup_logging(ctx.obj.config.log_level, verbose)


# ============================================================================
# Parsing Commands
# ============================================================================

@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def detect(ctx: QuizsmithContext, file: str):
    """
    Show which parser a file would be sent to

    Examples:
        quizsmith detect quiz.txt
        quizsmith detect review.html
    """
    _, body = read_quiz_file(file)
    click.echo(detect_format(body).value)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', 'source_format', type=click.Choice(FORMAT_CHOICES), default=None,
              help='Force a source format instead of detecting it')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.option('--shuffle/--no-shuffle', default=None, help='Shuffle options (remaps the answer key)')
@click.option('--seed', type=int, default=None, help='Seed for a reproducible shuffle')
@click.pass_obj
def parse(ctx: QuizsmithContext, file: str, source_format: Optional[str], as_json: bool,
          shuffle: Optional[bool], seed: Optional[int]):
    """
    Parse a quiz file and print its questions

    Examples:
        quizsmith parse quiz.txt                  # Human-readable
        quizsmith parse quiz.txt --json           # JSON output
        quizsmith parse review.html --format lms_html
        quizsmith parse quiz.txt --shuffle --seed 7
    """
    try:
        meta, result = ctx.load(file, source_format)
    except QuizsmithError as e:
        _fail(e)

    if shuffle is None:
        shuffle = bool(meta.get("shuffle", ctx.config.shuffle_options))
    if shuffle:
        seed = seed if seed is not None else ctx.config.shuffle_seed
        result.questions, result.answers = shuffle_options(result.questions, result.answers, seed=seed)
        log.debug("Shuffled options (seed=%s)", seed)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    title = meta.get("title") or title_from_questions(result.questions)
    click.echo(f"{title}  [{result.source_format.value}, {len(result.questions)} question(s)]")
    _print_quiz(result)
    click.echo()

    if not result.has_answer_key:
        click.echo("[!] No answer key found; this quiz cannot be graded yet", err=True)
    elif result.missing_answers:
        numbers = ", ".join(str(n) for n in result.missing_answers)
        click.echo(f"[!] No answer for question(s): {numbers}", err=True)


# ============================================================================
# Grading
# ============================================================================

@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--responses', '-r', required=True, help='Responses, e.g. 1A2C3B')
@click.option('--format', 'source_format', type=click.Choice(FORMAT_CHOICES), default=None,
              help='Force a source format instead of detecting it')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_obj
def grade(ctx: QuizsmithContext, file: str, responses: str, source_format: Optional[str], as_json: bool):
    """
    Grade a set of responses against the quiz's answer key

    Examples:
        quizsmith grade quiz.txt --responses 1A2C3B
        quizsmith grade quiz.txt -r "1. A, 2. C" --json
    """
    try:
        _, result = ctx.load(file, source_format)
        report = grade_responses(result.questions, result.answers, parse_responses(responses))
    except QuizsmithError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.echo(f"Score: {report.score}/{report.total} ({report.percentage}%)")
    if report.unanswered:
        click.echo(f"Unanswered: {', '.join(str(n) for n in report.unanswered)}")
    click.echo()
    for item in report.review:
        status = "[v]" if item.is_correct else "[x]"
        selected = item.selected or "-"
        line = f"  {status} {item.number}. answered {selected}"
        if not item.is_correct and item.correct:
            line += f", correct {item.correct}"
            if item.correct_text:
                line += f" ({item.correct_text})"
        click.echo(line)


# ============================================================================
# Archives
# ============================================================================

@cli.command()
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output file (default: stdout)')
@click.pass_obj
def export(ctx: QuizsmithContext, files: Tuple[str, ...], output: Optional[str]):
    """
    Bundle parsed quizzes into a JSON archive

    Examples:
        quizsmith export week1.txt week2.html -o quizzes.json
    """
    quizzes = []
    for file in files:
        try:
            meta, result = ctx.load(file)
        except QuizsmithError as e:
            _fail(e)
        quizzes.append(Quiz.from_parse(result, title=meta.get("title")))

    archive = export_archive(quizzes)
    text = json.dumps(archive, indent=2)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"[v] Exported {len(quizzes)} quiz(zes) to {output}")
    else:
        click.echo(text)


@cli.command('import')
@click.argument('archive', type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def import_quizzes(ctx: QuizsmithContext, archive: str):
    """
    Read an archive and report what it holds

    Quizzes repeated inside the archive are counted as skipped duplicates.

    Examples:
        quizsmith import quizzes.json
    """
    try:
        summary = read_archive(archive)
    except QuizsmithError as e:
        _fail(e)

    click.echo(summary.message())
    for quiz in summary.quizzes:
        click.echo(f"  - {quiz.title} ({len(quiz.questions)} question(s))")


# ============================================================================
# Setup
# ============================================================================

@cli.command()
@click.option('--force', is_flag=True, help='Overwrite an existing quizsmith.yaml')
@click.pass_obj
def init(ctx: QuizsmithContext, force: bool):
    """
    Write a quizsmith.yaml template into the current directory

    Examples:
        quizsmith init
        quizsmith init --force
    """
    yaml_path = ctx.working_dir / CONFIG_FILENAME
    if yaml_path.exists() and not force:
        click.echo(f"[!] {CONFIG_FILENAME} already exists (use --force to overwrite)")
        return
    yaml_path.write_text(create_config_template(), encoding="utf-8")
    click.echo(f"[v] Created {CONFIG_FILENAME}")


# ============================================================================
# Version
# ============================================================================

@cli.command()
def version():
    """Show Quizsmith version"""
    click.echo(f"Quizsmith CLI v{__version__}")
    click.echo("Multiple-choice quiz parsing and grading")


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == '__main__':
    cli()
