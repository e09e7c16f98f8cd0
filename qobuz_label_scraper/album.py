from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup

from .dates import page_lines, parse_album_release_date
from .models import AlbumDetails

# Album page contains:
# "Total length: 00:03:58" (older pages: "Total length: 41:07")
RE_TOTAL_LENGTH = re.compile(r"Total length:\s*([0-9]{1,2}:[0-9]{2}(?::[0-9]{2})?)", re.IGNORECASE)
RE_HMS = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?")
RE_FIELD_LABEL = re.compile(r"^(main artists|composer|label|total length|available in)\b", re.IGNORECASE)

GENRE_DELIMITERS = ("/", ",", "|", "›", ">")
ABOUT_WINDOW = 160


def hms_to_seconds(hms: str) -> Optional[int]:
    """``HH:MM:SS`` or ``MM:SS`` to seconds."""
    m = RE_HMS.fullmatch((hms or "").strip())
    if not m:
        return None
    a, b, c = m.groups()
    if c is None:
        return int(a) * 60 + int(b)
    return int(a) * 3600 + int(b) * 60 + int(c)


def _clean_line_prefix(s: str) -> str:
    """Remove leading bullets/heading markers from a text line."""
    return re.sub(r"^[\s#*\-•]+", "", (s or "").strip()).strip()


def normalize_genre(raw: str) -> Optional[str]:
    raw = " ".join((raw or "").split())
    if not raw:
        return None

    if raw.casefold().startswith("classical"):
        return "Classical"

    for delim in GENRE_DELIMITERS:
        if delim in raw:
            first = raw.split(delim, 1)[0].strip()
            return first or None

    return raw.split(" ", 1)[0].strip() or None


def parse_album_first_genre(soup: BeautifulSoup) -> Optional[str]:
    """Extract the FIRST genre category from the *About the album* section.

    Qobuz often displays Genre twice:
      - near the top (often only a subgenre, e.g. "Chamber Music")
      - in the "About the album" block (usually the full taxonomy, e.g. "Classical / Chamber Music")

    Only the "About the album" block is read.
    """
    lines = [c for c in (_clean_line_prefix(ln) for ln in page_lines(soup)) if c]

    about_idx: Optional[int] = None
    for i, ln in enumerate(lines):
        if "about the album" in ln.casefold():
            about_idx = i
            break
    if about_idx is None:
        return None

    window = lines[about_idx : about_idx + ABOUT_WINDOW]

    for j, ln in enumerate(window):
        cf = ln.casefold()
        if "genre" not in cf:
            continue

        if ":" in ln:
            left, right = ln.split(":", 1)
            if left.strip().casefold() != "genre":
                continue
            raw = right
        else:
            if not cf.startswith("genre"):
                continue
            raw = " ".join(ln.split()[1:])

        if not raw.strip():
            # Sometimes tags are on the next lines after a bare "Genre:"
            tags: List[str] = []
            for nxt in window[j + 1 : j + 10]:
                if RE_FIELD_LABEL.match(nxt) or nxt.endswith(":"):
                    break
                tags.append(nxt)
            return normalize_genre(tags[0]) if tags else None

        return normalize_genre(raw)

    return None


def _parse_title(soup: BeautifulSoup) -> str:
    h1 = soup.find("h1")
    if not h1:
        return ""
    t = h1.get_text(" ", strip=True)
    return t.split(" by ", 1)[0].strip()


def _parse_main_artists(soup: BeautifulSoup) -> str:
    for tag in soup.find_all(["li", "p", "div"]):
        if not tag.get_text(" ", strip=True).lower().startswith("main artists:"):
            continue
        artists = [aa.get_text(" ", strip=True) for aa in tag.find_all("a") if aa.get_text(strip=True)]
        if artists:
            return ", ".join(artists).strip()
        return tag.get_text(" ", strip=True).split(":", 1)[-1].strip()
    return ""


def parse_album_details(html: str) -> Optional[AlbumDetails]:
    """Parse one album page; ``None`` when the page has no usable total length."""
    soup = BeautifulSoup(html, "html.parser")

    m = RE_TOTAL_LENGTH.search(soup.get_text("\n", strip=True))
    if not m:
        return None
    total_hms = m.group(1).strip()
    total_seconds = hms_to_seconds(total_hms)
    if total_seconds is None:
        return None

    title = _parse_title(soup)
    main_artists = _parse_main_artists(soup)
    if not title and not main_artists:
        return None

    return AlbumDetails(
        title=title,
        main_artists=main_artists,
        total_length_hms=total_hms,
        total_seconds=total_seconds,
        release_date_album=parse_album_release_date(soup),
        genre_first=parse_album_first_genre(soup),
    )
