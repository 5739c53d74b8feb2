from __future__ import annotations

import fcntl
import json
import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rapidfuzz.distance import Levenshtein

from kestrel.llm.answerer import ResumeAnswerer
from kestrel.types import JobPosting, QuestionKind, QuestionRecord

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"[\r\n\t]+")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_QUOTES = re.compile(r'["\\]')
_WHITESPACE = re.compile(r"\s+")
_DIGITS = re.compile(r"\d+")
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")

DEFAULT_NUMERIC_ANSWER = 3
OPTION_KINDS = {"radio", "dropdown", "multi_checkbox"}


def sanitize_question(text: str) -> str:
    """Normalize question text into the form used as the cache key."""
    text = _LINE_BREAKS.sub(" ", text.lower())
    text = _QUOTES.sub("", text)
    text = _CONTROL_CHARS.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text.rstrip(", ")


def find_best_match(text: str, options: list[str]) -> str:
    if not options:
        raise ValueError("find_best_match needs at least one option")
    needle = (text or "").strip().lower()
    if not needle:
        return options[0]
    return min(options, key=lambda option: Levenshtein.distance(needle, option.lower()))


def extract_number(text: str, default: int) -> int:
    match = _DIGITS.search(text or "")
    if match is None:
        return default
    return int(match.group(0))


def parse_date(text: str) -> str | None:
    match = _ISO_DATE.search(text or "")
    if match is None:
        return None
    try:
        return date.fromisoformat(match.group(0)).isoformat()
    except ValueError:
        return None


class QuestionCache:
    """Append-only JSON file of previously answered questions."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock_path = self.path.with_name(f"{self.path.name}.lock")
        self._answers: dict[tuple[str, str], str] = {}
        self._index(self._read())

    def __len__(self) -> int:
        return len(self._answers)

    def find(self, question: str, kind: str) -> str | None:
        return self._answers.get((sanitize_question(question), kind))

    def append(self, record: QuestionRecord) -> None:
        record = record.model_copy(update={"question": sanitize_question(record.question)})
        with self._locked():
            entries = self._read()
            self._index(entries)
            entries.append(record.model_dump())
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(entries, indent=4, ensure_ascii=False), encoding="utf-8")
        self._answers.setdefault((record.question, record.type), record.answer)
        logger.debug("Saved answer type=%s question=%r", record.type, record.question)

    def _read(self) -> list[Any]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read answers file %s: %s", self.path, exc)
            return []
        if not isinstance(payload, list):
            logger.error("Answers file %s is not a list of questions; ignoring it", self.path)
            return []
        return payload

    def _index(self, entries: list[Any]) -> None:
        for entry in entries:
            try:
                record = QuestionRecord.model_validate(entry)
            except ValidationError:
                logger.warning("Skipping malformed answer record: %r", entry)
                continue
            self._answers.setdefault((sanitize_question(record.question), record.type), record.answer)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a+", encoding="utf-8") as handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


class AnswerResolver:
    def __init__(self, cache: QuestionCache, answerer: ResumeAnswerer):
        self.cache = cache
        self.answerer = answerer

    def set_job(self, job: JobPosting | None) -> None:
        self.answerer.set_job(job)

    def personal_information(self) -> dict[str, str]:
        return {
            key: str(value)
            for key, value in self.answerer.resume.personal_information.model_dump().items()
            if value not in (None, "")
        }

    def resume_or_cover(self, phrase: str) -> str:
        return self.answerer.resume_or_cover(phrase)

    def cover_letter(self) -> str:
        return self.answerer.write_cover_letter()

    def fix(self, question: str, value: str, error: str) -> str:
        return self.answerer.fix_input(question, value, error)

    def resolve(
        self,
        question: str,
        kind: QuestionKind,
        options: list[str] | None = None,
        *,
        default: int | None = None,
    ) -> str | None:
        key = sanitize_question(question)
        persist = kind not in {"multi_checkbox"}

        if persist:
            cached = self.cache.find(key, kind)
            if cached is not None:
                logger.debug("Cache hit type=%s question=%r", kind, key)
                return cached

        answer = self._ask(question, kind, options, default)
        if kind == "textbox" and answer is not None and not answer.strip():
            logger.warning("Model gave a blank answer to %r, not caching it", key)
            return None
        if answer is None or not persist:
            return answer

        self.cache.append(QuestionRecord(type=kind, question=key, answer=answer))
        return answer

    def _ask(
        self,
        question: str,
        kind: QuestionKind,
        options: list[str] | None,
        default: int | None,
    ) -> str | None:
        if kind in OPTION_KINDS:
            if not options:
                raise ValueError(f"{kind} question {question!r} has no options")
            raw = self.answerer.answer_from_options(question, options)
            choice = find_best_match(raw, options)
            logger.debug("Model answered %r, best option %r", raw, choice)
            return choice

        if kind == "numeric":
            fallback = DEFAULT_NUMERIC_ANSWER if default is None else default
            return str(extract_number(self.answerer.answer_numeric(question), fallback))

        if kind == "date":
            raw = self.answerer.answer_date(question)
            parsed = parse_date(raw)
            if parsed is None:
                logger.warning("Could not parse a date from model output %r", raw)
            return parsed

        return self.answerer.answer_textual(question)
