"""
archive.py - Export and import quiz collections as JSON archives

Archive layout:

    {
      "version": "1.0",
      "exportDate": "2024-05-01T12:00:00+00:00",
      "quizzes": [
        {"title": ..., "content": ..., "questions": [...],
         "answers": {"1": "B"}, "timestamp": ...}
      ]
    }

Quizzes are identified by the hash of their raw content. Importing skips
any quiz whose hash is already known or that appeared earlier in the same
archive.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from quizsmith.errors import archive_format_error
from quizsmith.models import Quiz


log = logging.getLogger(__name__)

ARCHIVE_VERSION = "1.0"


@dataclass
class ImportSummary:
    imported: int = 0
    skipped: int = 0
    quizzes: List[Quiz] = field(default_factory=list)

    def message(self) -> str:
        lines = ["Import complete!"]
        if self.imported:
            lines.append(f"Imported: {self.imported} quiz(zes)")
        if self.skipped:
            lines.append(f"Skipped duplicates: {self.skipped}")
        return "\n".join(lines)


def export_archive(quizzes: Iterable[Quiz]) -> Dict[str, Any]:
    quizzes = list(quizzes)
    log.debug("Exporting %d quiz(zes)", len(quizzes))
    return {
        "version": ARCHIVE_VERSION,
        "exportDate": datetime.now(timezone.utc).isoformat(),
        "quizzes": [quiz.to_dict() for quiz in quizzes],
    }


def import_archive(data: Any, existing_hashes: Iterable[str] = ()) -> ImportSummary:
    """
    Read quizzes out of an archive document.

    Args:
        data: decoded archive (dict)
        existing_hashes: content hashes already in storage

    Returns:
        ImportSummary with the new Quiz records and imported/skipped counts

    Raises:
        ArchiveFormatError: ``data`` is not an archive
    """
    if not isinstance(data, dict):
        raise archive_format_error("top level must be an object")
    entries = data.get("quizzes")
    if not isinstance(entries, list):
        raise archive_format_error("missing 'quizzes' list")

    seen = set(existing_hashes)
    summary = ImportSummary()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise archive_format_error(f"quiz #{index + 1} is not an object")
        try:
            quiz = Quiz.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            raise archive_format_error(f"quiz #{index + 1} could not be read", cause=e)

        if quiz.hash in seen:
            log.debug("Skipping duplicate quiz '%s'", quiz.title)
            summary.skipped += 1
            continue
        seen.add(quiz.hash)
        summary.quizzes.append(quiz)
        summary.imported += 1

    log.info("Archive: %d imported, %d skipped", summary.imported, summary.skipped)
    return summary


def write_archive(quizzes: Iterable[Quiz], path: Union[str, Path]) -> Dict[str, Any]:
    archive = export_archive(quizzes)
    Path(path).write_text(json.dumps(archive, indent=2), encoding="utf-8")
    return archive


def read_archive(path: Union[str, Path], existing_hashes: Iterable[str] = ()) -> ImportSummary:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise archive_format_error("file is not valid JSON", cause=e)
    return import_archive(data, existing_hashes)
