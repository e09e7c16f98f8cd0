"""Accept/reject policy for fetched albums and the final deduplication.

Stages run in a fixed order and stop at the first rejection:
date mismatch (album page date outside the range) -> genre root -> minimum length.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .config import ScraperConfig
from .models import AlbumDetails, Candidate, MissingDateRow, OutputRecord, ScrapeStats

REJECT_DATE_MISMATCH = "date_mismatch"
REJECT_GENRE = "genre"
REJECT_LENGTH = "length"


@dataclass(frozen=True)
class FilterOutcome:
    record: Optional[OutputRecord] = None
    rejected: Optional[str] = None
    missing_date: Optional[MissingDateRow] = None

    @property
    def accepted(self) -> bool:
        return self.record is not None


def evaluate_candidate(
    cand: Candidate,
    det: AlbumDetails,
    config: ScraperConfig,
    stats: ScrapeStats,
) -> FilterOutcome:
    missing: Optional[MissingDateRow] = None

    rel_album = det.release_date_album
    if rel_album is None:
        # Listing date is used as-is; it is not range-checked again.
        stats.missing_album_date += 1
        missing = MissingDateRow(
            label=cand.label_name,
            album_url=cand.album_url,
            listing_release_date=cand.release_date_listing,
            album_title=det.title,
            main_artists=det.main_artists,
        )
        rel_final = cand.release_date_listing
    elif not config.in_range(rel_album):
        stats.rejected_by_date_mismatch += 1
        return FilterOutcome(rejected=REJECT_DATE_MISMATCH)
    else:
        rel_final = rel_album

    genre = (det.genre_first or "").strip().casefold()
    if not genre.startswith(config.genre_root.casefold()):
        stats.rejected_by_genre += 1
        return FilterOutcome(rejected=REJECT_GENRE, missing_date=missing)

    if det.total_seconds < config.min_minutes * 60:
        stats.rejected_by_length += 1
        return FilterOutcome(rejected=REJECT_LENGTH, missing_date=missing)

    record = OutputRecord(
        album_title=det.title,
        main_artists=det.main_artists,
        label=cand.label_name,
        album_url=cand.album_url,
        release_date=rel_final,
    )
    return FilterOutcome(record=record, missing_date=missing)


def norm_key(s: str) -> str:
    """Normalization for dedup keys: strip, collapse whitespace, casefold."""
    return " ".join((s or "").split()).casefold()


def dedupe_records(records: List[OutputRecord], stats: ScrapeStats) -> List[OutputRecord]:
    """Remove duplicates by (album_title, main_artists) within the same label.

    If label differs, both entries are kept; the album URL is not part of the key.
    """
    seen = set()
    deduped: List[OutputRecord] = []
    for r in records:
        key = (norm_key(r.album_title), norm_key(r.main_artists), norm_key(r.label))
        if key in seen:
            stats.duplicates_removed += 1
            continue
        seen.add(key)
        deduped.append(r)
    return deduped
