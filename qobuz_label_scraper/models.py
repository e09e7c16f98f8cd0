from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LabelSource:
    name: str
    url: str


@dataclass(frozen=True)
class Candidate:
    album_url: str
    label_name: str
    release_date_listing: date


@dataclass(frozen=True)
class AlbumDetails:
    title: str
    main_artists: str
    total_length_hms: str
    total_seconds: int
    release_date_album: Optional[date]
    genre_first: Optional[str]


@dataclass(frozen=True)
class OutputRecord:
    album_title: str
    main_artists: str
    label: str
    album_url: str
    release_date: date


@dataclass(frozen=True)
class MissingDateRow:
    """Album page without a readable release date (listing date was used)."""

    label: str
    album_url: str
    listing_release_date: date
    album_title: str
    main_artists: str


@dataclass
class ScrapeStats:
    labels_total: int = 0
    labels_processed: int = 0
    candidates_total: int = 0
    albums_fetched: int = 0
    accepted: int = 0
    rejected_by_genre: int = 0
    rejected_by_length: int = 0
    rejected_by_date_mismatch: int = 0
    missing_album_date: int = 0
    duplicates_removed: int = 0
    http_errors: int = 0
    parse_errors: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class OutputFiles:
    links_txt: str
    xlsx: str
    missing_dates_txt: Optional[str]


@dataclass(frozen=True)
class RunTiming:
    started_at: str
    finished_at: str
    duration_ms: int


@dataclass
class ScrapeResult:
    ok: bool
    output_dir: Optional[str] = None
    files: Optional[OutputFiles] = None
    stats: ScrapeStats = field(default_factory=ScrapeStats)
    timing: Optional[RunTiming] = None
    error: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.ok:
            return {"ok": False, "error": self.error}
        return {
            "ok": True,
            "output_dir": self.output_dir,
            "files": asdict(self.files) if self.files else None,
            "stats": self.stats.to_dict(),
            "timing": asdict(self.timing) if self.timing else None,
        }
