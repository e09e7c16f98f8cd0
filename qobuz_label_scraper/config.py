"""Run configuration read from ``FILES/plik_wejsciowy.txt``.

Example::

    # zakres dat (włącznie)
    date_from = 01.01.2026
    date_to   = 31.01.2026
    min_minutes = 15
    delay_listing = 0,35
    genre_root = Classical
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Tuple

from .errors import (
    InputFileNotFound,
    InvalidDateFormat,
    InvalidInputLine,
    InvalidNumericValue,
    MissingRequiredKeys,
    ValueOutOfRange,
)

log = logging.getLogger(__name__)

INPUT_FILE = "plik_wejsciowy.txt"

DEFAULTS: Dict[str, object] = {
    "min_minutes": 15,
    "delay_listing": 0.35,
    "delay_album": 0.55,
    "max_pages_per_label": 2,
    "retries": 3,
    "timeout_ms": 20000,
    "genre_root": "Classical",
    "accept_language": "en-US,en;q=0.9",
    "user_agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X) QobuzLabelScraper/5.0",
    "labels_file": "labels_scrapper.txt",
}

# key, is_int, minimum
NUMERIC_KEYS: List[Tuple[str, bool, float]] = [
    ("min_minutes", True, 1),
    ("delay_listing", False, 0),
    ("delay_album", False, 0),
    ("max_pages_per_label", True, 1),
    ("retries", True, 0),
    ("timeout_ms", True, 1000),
]

RE_PL_DATE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")
RE_KEY_VALUE = re.compile(r"^([^=]+?)\s*=\s*(.+)$")


@dataclass(frozen=True)
class ScraperConfig:
    date_from: date
    date_to: date
    min_minutes: int = 15
    delay_listing: float = 0.35
    delay_album: float = 0.55
    max_pages_per_label: int = 2
    retries: int = 3
    timeout_ms: int = 20000
    genre_root: str = "Classical"
    accept_language: str = "en-US,en;q=0.9"
    user_agent: str = str(DEFAULTS["user_agent"])
    labels_file: str = "labels_scrapper.txt"

    def in_range(self, d: date) -> bool:
        return self.date_from <= d <= self.date_to


def parse_pl_date(s: str, field_name: str = "date") -> date:
    """Parse ``DD.MM.RRRR`` strictly (``31.02.2024`` is rejected)."""
    value = (s or "").strip()
    if not RE_PL_DATE.match(value):
        raise InvalidDateFormat(
            f"Nieprawidłowy format daty dla {field_name}. Oczekiwano DD.MM.RRRR.",
            {"field": field_name, "value": value},
        )
    try:
        return datetime.strptime(value, "%d.%m.%Y").date()
    except ValueError:
        raise InvalidDateFormat(
            f"Nieprawidłowa data kalendarzowa dla {field_name}: {value}",
            {"field": field_name, "value": value},
        ) from None


def format_pl_date(d: date) -> str:
    return d.strftime("%d.%m.%Y")


def strip_comment(line: str) -> str:
    return line.split("#", 1)[0].strip()


def read_key_values(path: Path) -> Dict[str, str]:
    if not path.is_file():
        raise InputFileNotFound(f"Brak pliku wejściowego: {path}", {"path": str(path)})

    parsed: Dict[str, str] = {}
    for i, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = strip_comment(raw)
        if not line:
            continue
        m = RE_KEY_VALUE.match(line)
        if not m:
            raise InvalidInputLine(
                f"Niepoprawna linia w pliku wejściowym ({i}): {raw}",
                {"line": i, "value": raw},
            )
        parsed[m.group(1).strip().lower()] = m.group(2).strip()
    return parsed


def _parse_number(key: str, raw: object, is_int: bool, minimum: float):
    text = str(raw).strip()
    try:
        value = int(text) if is_int else float(text.replace(",", "."))
    except ValueError:
        raise InvalidNumericValue(f"Wartość {key} musi być liczbą.", {"key": key, "value": text}) from None
    if value != value or value in (float("inf"), float("-inf")):
        raise InvalidNumericValue(f"Wartość {key} musi być liczbą.", {"key": key, "value": text})
    if value < minimum:
        raise ValueOutOfRange(
            f"Wartość {key} musi być >= {minimum:g}.",
            {"key": key, "value": value, "min": minimum},
        )
    return value


def _string_option(parsed: Dict[str, str], key: str) -> str:
    value = (parsed.get(key) or "").strip()
    return value or str(DEFAULTS[key])


def load_config(path: Path) -> ScraperConfig:
    parsed = read_key_values(path)

    missing = [k for k in ("date_from", "date_to") if not parsed.get(k)]
    if missing:
        raise MissingRequiredKeys(
            "Brak wymaganych kluczy date_from/date_to w pliku wejściowym.",
            {"missing": missing},
        )

    date_from = parse_pl_date(parsed["date_from"], "date_from")
    date_to = parse_pl_date(parsed["date_to"], "date_to")
    if date_from > date_to:
        log.warning("date_from > date_to, zamieniam kolejność.")
        date_from, date_to = date_to, date_from

    numbers = {}
    for key, is_int, minimum in NUMERIC_KEYS:
        numbers[key] = _parse_number(key, parsed.get(key, DEFAULTS[key]), is_int, minimum)

    return ScraperConfig(
        date_from=date_from,
        date_to=date_to,
        genre_root=_string_option(parsed, "genre_root"),
        accept_language=_string_option(parsed, "accept_language"),
        user_agent=_string_option(parsed, "user_agent"),
        labels_file=_string_option(parsed, "labels_file"),
        **numbers,
    )
