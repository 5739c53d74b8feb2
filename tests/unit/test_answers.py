from __future__ import annotations

import json

import pytest

from kestrel.core.answers import (
    QuestionCache,
    extract_number,
    find_best_match,
    parse_date,
    sanitize_question,
)
from kestrel.types import QuestionRecord


def test_sanitize_question_normalizes_text() -> None:
    raw = '  How many years of "Python"\n experience do you have?\t,  '
    assert sanitize_question(raw) == "how many years of python experience do you have?"


def test_sanitize_question_is_idempotent() -> None:
    samples = [
        "Are you   legally\r\nauthorized to work?,",
        'Rate your "Go" skills \\ 1-10',
        "plain question",
        "\x07Bell\x1f and unit separator",
    ]
    for sample in samples:
        once = sanitize_question(sample)
        assert sanitize_question(once) == once


def test_find_best_match_returns_closest_member() -> None:
    options = ["Yes", "No", "Prefer not to say"]
    assert find_best_match("yes.", options) == "Yes"
    assert find_best_match("prefer not say", options) == "Prefer not to say"
    assert find_best_match("Maybe", options) in options


def test_find_best_match_blank_text_returns_first_option() -> None:
    assert find_best_match("   ", ["Basic", "Fluent"]) == "Basic"


def test_find_best_match_requires_options() -> None:
    with pytest.raises(ValueError):
        find_best_match("anything", [])


def test_extract_number_takes_first_run_of_digits() -> None:
    assert extract_number("About 7 years, maybe 8", 3) == 7
    assert extract_number("no idea", 3) == 3


def test_parse_date_accepts_iso_dates_only() -> None:
    assert parse_date("I can start on 2025-03-01.") == "2025-03-01"
    assert parse_date("2025-02-30") is None
    assert parse_date("next monday") is None


def test_cache_find_uses_sanitized_question_and_type(tmp_path) -> None:
    cache = QuestionCache(tmp_path / "answers.json")
    cache.append(QuestionRecord(type="textbox", question="What is your   Notice Period?", answer="4 weeks"))

    assert cache.find("what is your notice period?", "textbox") == "4 weeks"
    assert cache.find("what is your notice period?", "numeric") is None


def test_cache_append_persists_and_merges_other_writers(tmp_path) -> None:
    path = tmp_path / "answers.json"
    first = QuestionCache(path)
    second = QuestionCache(path)

    first.append(QuestionRecord(type="numeric", question="years of python", answer=5))
    second.append(QuestionRecord(type="radio", question="Do you need sponsorship?", answer="No"))

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored == [
        {"type": "numeric", "question": "years of python", "answer": "5"},
        {"type": "radio", "question": "do you need sponsorship?", "answer": "No"},
    ]
    assert QuestionCache(path).find("years of python", "numeric") == "5"


def test_cache_first_record_wins(tmp_path) -> None:
    path = tmp_path / "answers.json"
    path.write_text(
        json.dumps(
            [
                {"type": "textbox", "question": "salary", "answer": "100k"},
                {"type": "textbox", "question": "salary", "answer": "120k"},
            ]
        ),
        encoding="utf-8",
    )
    assert QuestionCache(path).find("salary", "textbox") == "100k"


def test_cache_tolerates_bad_files(tmp_path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert len(QuestionCache(broken)) == 0

    not_a_list = tmp_path / "object.json"
    not_a_list.write_text(json.dumps({"question": "x"}), encoding="utf-8")
    assert len(QuestionCache(not_a_list)) == 0

    malformed = tmp_path / "malformed.json"
    malformed.write_text(
        json.dumps([{"type": "essay", "question": "x", "answer": "y"}, {"type": "date", "question": "start", "answer": "2025-01-01"}]),
        encoding="utf-8",
    )
    cache = QuestionCache(malformed)
    assert len(cache) == 1
    assert cache.find("start", "date") == "2025-01-01"


def test_resolve_cache_hit_makes_no_model_call(make_resolver) -> None:
    resolver, provider = make_resolver()
    resolver.cache.append(QuestionRecord(type="radio", question="Do you need sponsorship?", answer="No"))

    assert resolver.resolve("Do you need   sponsorship?", "radio", ["Yes", "No"]) == "No"
    assert provider.calls == 0


def test_resolve_options_answer_is_reconciled_and_cached(make_resolver) -> None:
    resolver, provider = make_resolver("fluent speaker")

    answer = resolver.resolve("English level?", "dropdown", ["Basic", "Fluent", "Native"])

    assert answer == "Fluent"
    assert resolver.cache.find("english level?", "dropdown") == "Fluent"
    assert resolver.resolve("English level?", "dropdown", ["Basic", "Fluent", "Native"]) == "Fluent"
    assert provider.calls == 1


def test_resolve_options_kind_needs_options(make_resolver) -> None:
    resolver, _ = make_resolver()
    with pytest.raises(ValueError):
        resolver.resolve("Pick one", "radio", [])


def test_resolve_numeric_falls_back_to_default(make_resolver) -> None:
    resolver, _ = make_resolver("I am not sure", "no digits either")

    assert resolver.resolve("Years of Rust?", "numeric") == "3"
    assert resolver.resolve("Years of COBOL?", "numeric", default=0) == "0"


def test_resolve_date_failure_is_not_cached(make_resolver) -> None:
    resolver, provider = make_resolver("whenever", "2025-06-01")

    assert resolver.resolve("Earliest start date?", "date") is None
    assert resolver.cache.find("earliest start date?", "date") is None
    assert resolver.resolve("Earliest start date?", "date") == "2025-06-01"
    assert provider.calls == 2


def test_resolve_multi_checkbox_is_never_persisted(make_resolver, tmp_path) -> None:
    resolver, provider = make_resolver("Go", "Go")
    options = ["Python", "Go", "Rust"]

    assert resolver.resolve("Which languages?", "multi_checkbox", options) == "Go"
    assert resolver.resolve("Which languages?", "multi_checkbox", options) == "Go"
    assert provider.calls == 2
    assert not (tmp_path / "answers.json").exists()


def test_resolve_textbox_goes_through_section_classifier(make_resolver) -> None:
    resolver, provider = make_resolver("availability", "4 weeks")

    assert resolver.resolve("What is your notice period?", "textbox") == "4 weeks"
    assert "What is your notice period?" in provider.prompts[0]
    assert "notice_period: 4 weeks" in provider.prompts[1]


def test_personal_information_skips_empty_values(make_resolver) -> None:
    resolver, _ = make_resolver()
    info = resolver.personal_information()
    assert info["first_name"] == "Ada"
    assert info["phone_country_code"] == "+49"
    assert all(info.values())


def test_blank_textual_answer_is_not_cached(make_resolver, tmp_path) -> None:
    resolver, provider = make_resolver("Work Preferences", "  \n", "Work Preferences", "Yes")

    assert resolver.resolve("Are you willing to relocate?", "textbox") is None
    assert not (tmp_path / "answers.json").exists()

    assert resolver.resolve("Are you willing to relocate?", "textbox") == "Yes"
    assert provider.calls == 4
