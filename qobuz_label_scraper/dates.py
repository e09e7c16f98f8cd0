"""Release-date phrases as they appear on listing tiles and album pages.

Supports both:
  - Month-name formats: "Released by Label on Jan 30, 2026"
  - Numeric formats (common on album pages, especially us-en): "Released on 1/30/26"
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional

from bs4 import BeautifulSoup

RE_RELEASED_BY = re.compile(r"\bReleased by .*? on ([A-Za-z\.]+ \d{1,2}, \d{4})", re.IGNORECASE)
RE_RELEASED_ON = re.compile(r"\bReleased on ([A-Za-z\.]+ \d{1,2}, \d{4})", re.IGNORECASE)
RE_TO_BE_RELEASED_MONTH = re.compile(r"\bTo be released on ([A-Za-z\.]+ \d{1,2}, \d{4})", re.IGNORECASE)
RE_RELEASED_BY_NUM = re.compile(r"\bReleased by .*? on (\d{1,2}/\d{1,2}/\d{2,4})", re.IGNORECASE)
RE_RELEASED_ON_NUM = re.compile(r"\bReleased on (\d{1,2}/\d{1,2}/\d{2,4})", re.IGNORECASE)
RE_TO_BE_RELEASED_NUM = re.compile(r"\bTo be released on (\d{1,2}/\d{1,2}/\d{2,4})", re.IGNORECASE)

RE_RELEASE_LINE = re.compile(r"\b(released|to be released)\b", re.IGNORECASE)
RE_NUMERIC_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")

# Release info usually sits in the bullets right under the title.
ALBUM_HEAD_LINES = 120


def _norm_month_token(s: str) -> str:
    # remove trailing dot in abbreviations, e.g. "Jan." -> "Jan"
    return s.replace(".", "")


def parse_english_month_date(s: str) -> Optional[date]:
    s = " ".join((s or "").split()).strip()
    if not s:
        return None

    parts = s.split(" ", 1)
    parts[0] = _norm_month_token(parts[0])
    if parts[0].casefold() == "sept":
        parts[0] = "Sep"
    s = " ".join(parts)

    for fmt in ("%b %d, %Y", "%B %d, %Y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    return None


def parse_numeric_us_date(s: str) -> Optional[date]:
    """Parse ``M/D/YY[YY]``; falls back to ``D/M`` when month-first is not a real date."""
    m = RE_NUMERIC_DATE.match(" ".join((s or "").split()))
    if not m:
        return None

    a, b, year = (int(g) for g in m.groups())
    if year < 100:
        year += 2000

    for month, day in ((a, b), (b, a)):
        try:
            return date(year, month, day)
        except ValueError:
            pass
    return None


def extract_release_date_from_text(text: str) -> Optional[date]:
    if not text:
        return None
    t = " ".join(text.split())

    for rx in (RE_RELEASED_BY, RE_RELEASED_ON, RE_TO_BE_RELEASED_MONTH):
        m = rx.search(t)
        if m:
            d = parse_english_month_date(m.group(1))
            if d:
                return d

    for rx in (RE_RELEASED_BY_NUM, RE_RELEASED_ON_NUM, RE_TO_BE_RELEASED_NUM):
        m = rx.search(t)
        if m:
            d = parse_numeric_us_date(m.group(1))
            if d:
                return d

    return None


def page_lines(soup: BeautifulSoup) -> List[str]:
    return [ln.strip() for ln in soup.get_text("\n", strip=True).split("\n") if ln.strip()]


def parse_album_release_date(soup: BeautifulSoup) -> Optional[date]:
    """Extract release date from album page.

    The release line usually lives near the top, e.g.:
      - "Released on 1/30/26 by …"
      - "To be released on 2/27/26 by …"
      - "Released by … on Jan 30, 2026"

    Individual lines are scanned first (more precise), then the whole page text once.
    """
    lines = page_lines(soup)

    for ln in lines[:ALBUM_HEAD_LINES]:
        if RE_RELEASE_LINE.search(ln):
            d = extract_release_date_from_text(ln)
            if d:
                return d

    return extract_release_date_from_text(" ".join(lines))
