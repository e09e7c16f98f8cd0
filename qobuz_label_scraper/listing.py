from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Set
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .dates import extract_release_date_from_text
from .labels import normalize_label_base
from .models import Candidate, ScrapeStats

log = logging.getLogger(__name__)

ALBUM_PATH = "/album/"
MAX_HOPS = 10


@dataclass
class ListingPage:
    candidates: List[Candidate] = field(default_factory=list)
    has_page2: bool = False


def album_url_from_href(href: str, page_url: str) -> str:
    return urljoin(page_url, href).split("#", 1)[0]


def listing_has_page2(soup: BeautifulSoup, page_url: str) -> bool:
    """Best-effort detection whether /page/2 exists in pagination."""
    base = normalize_label_base(page_url)
    base_path = urlparse(base).path.rstrip("/")
    pattern = re.compile(re.escape(base_path) + r"/page/2\b")

    for a in soup.find_all("a", href=True):
        href = a["href"]
        if pattern.search(urlparse(urljoin(base, href)).path):
            return True

    # fallback: relaxed check
    return any("/page/2" in a["href"] for a in soup.find_all("a", href=True))


def find_unique_container_date(a_tag, page_url: str, album_url: str, max_hops: int = MAX_HOPS) -> Optional[date]:
    """
    Walk up the DOM from an album link looking for a container that holds
    ONLY this album link (no other /album/ links) and a release-date phrase.
    A container with a neighbouring album in it ends the walk, so a date is
    never borrowed from the next tile.
    """
    node = a_tag
    for _ in range(max_hops):
        if node is None:
            break

        distinct: Set[str] = {
            album_url_from_href(aa["href"], page_url)
            for aa in node.find_all("a", href=True)
            if ALBUM_PATH in aa["href"]
        }
        if distinct - {album_url}:
            break

        if distinct:
            rel = extract_release_date_from_text(node.get_text(" ", strip=True))
            if rel:
                return rel

        node = node.parent

    return None


def extract_album_candidates_from_listing(
    html: str,
    page_url: str,
    label_name: str,
    start: date,
    end: date,
    stats: ScrapeStats,
) -> ListingPage:
    """Strict mode: if release date can't be read from listing, skip the album."""
    soup = BeautifulSoup(html, "html.parser")
    page = ListingPage(has_page2=listing_has_page2(soup, page_url))
    seen_page_urls: Set[str] = set()

    for a in soup.find_all("a", href=True):
        href = a["href"]
        if ALBUM_PATH not in href:
            continue

        album_url = album_url_from_href(href, page_url)
        if album_url in seen_page_urls:
            continue
        seen_page_urls.add(album_url)

        try:
            rel = find_unique_container_date(a, page_url, album_url)
        except Exception as e:  # noqa: BLE001
            stats.parse_errors += 1
            log.debug("Błąd DOM dla %s: %s", album_url, e)
            rel = None
        if not rel:
            continue

        if start <= rel <= end:
            page.candidates.append(Candidate(album_url=album_url, label_name=label_name, release_date_listing=rel))

    return page
