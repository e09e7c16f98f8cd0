from datetime import date

import pytest

from qobuz_label_scraper.config import format_pl_date, load_config, parse_pl_date
from qobuz_label_scraper.errors import (
    InputFileNotFound,
    InvalidDateFormat,
    InvalidInputLine,
    InvalidNumericValue,
    MissingRequiredKeys,
    ValueOutOfRange,
)


def _write(tmp_path, text):
    p = tmp_path / "plik_wejsciowy.txt"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_config_with_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, "date_from = 01.01.2024\ndate_to = 31.01.2024\n"))
    assert cfg.date_from == date(2024, 1, 1)
    assert cfg.date_to == date(2024, 1, 31)
    assert cfg.min_minutes == 15
    assert cfg.delay_listing == 0.35
    assert cfg.delay_album == 0.55
    assert cfg.max_pages_per_label == 2
    assert cfg.retries == 3
    assert cfg.timeout_ms == 20000
    assert cfg.genre_root == "Classical"
    assert cfg.labels_file == "labels_scrapper.txt"


def test_comments_blank_lines_and_overrides(tmp_path):
    text = """
# zakres dat
DATE_FROM = 01.03.2025   # od
date_to=15.03.2025

min_minutes = 30
delay_listing = 0,5
genre_root = Jazz
labels_file = moje_labele.txt
something_else = ignored
"""
    cfg = load_config(_write(tmp_path, text))
    assert cfg.date_from == date(2025, 3, 1)
    assert cfg.min_minutes == 30
    assert cfg.delay_listing == 0.5
    assert cfg.genre_root == "Jazz"
    assert cfg.labels_file == "moje_labele.txt"


def test_reversed_range_is_swapped(tmp_path):
    cfg = load_config(_write(tmp_path, "date_from = 31.01.2024\ndate_to = 01.01.2024\n"))
    assert cfg.date_from == date(2024, 1, 1)
    assert cfg.date_to == date(2024, 1, 31)
    assert cfg.date_from <= cfg.date_to


def test_line_without_equals_is_fatal(tmp_path):
    with pytest.raises(InvalidInputLine) as exc:
        load_config(_write(tmp_path, "date_from = 01.01.2024\njust some words\n"))
    assert exc.value.details["line"] == 2
    assert exc.value.to_dict()["code"] == "INVALID_INPUT_LINE"


def test_missing_required_keys(tmp_path):
    with pytest.raises(MissingRequiredKeys):
        load_config(_write(tmp_path, "date_from = 01.01.2024\n"))


def test_missing_input_file(tmp_path):
    with pytest.raises(InputFileNotFound):
        load_config(tmp_path / "nope.txt")


@pytest.mark.parametrize("value", ["31.02.2024", "2024-01-01", "1.1.2024"])
def test_invalid_dates(tmp_path, value):
    with pytest.raises(InvalidDateFormat):
        load_config(_write(tmp_path, f"date_from = {value}\ndate_to = 31.01.2024\n"))


def test_non_numeric_value(tmp_path):
    with pytest.raises(InvalidNumericValue):
        load_config(_write(tmp_path, "date_from = 01.01.2024\ndate_to = 31.01.2024\nretries = dużo\n"))


@pytest.mark.parametrize(
    "line",
    ["min_minutes = 0", "timeout_ms = 999", "max_pages_per_label = 0", "retries = -1", "delay_album = -0.1"],
)
def test_value_out_of_range(tmp_path, line):
    with pytest.raises(ValueOutOfRange):
        load_config(_write(tmp_path, f"date_from = 01.01.2024\ndate_to = 31.01.2024\n{line}\n"))


def test_zero_retries_and_delays_are_allowed(tmp_path):
    cfg = load_config(
        _write(tmp_path, "date_from = 01.01.2024\ndate_to = 31.01.2024\nretries = 0\ndelay_listing = 0\n")
    )
    assert cfg.retries == 0
    assert cfg.delay_listing == 0


@pytest.mark.parametrize("d", [date(2024, 2, 29), date(1999, 12, 31), date(2026, 1, 1)])
def test_pl_date_round_trip(d):
    assert parse_pl_date(format_pl_date(d)) == d
    assert format_pl_date(parse_pl_date(format_pl_date(d))) == format_pl_date(d)
