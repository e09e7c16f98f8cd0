"""Two-phase label scrape: listing pages -> album pages -> filter -> dedup -> files."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

import aiohttp

from .album import parse_album_details
from .config import INPUT_FILE, ScraperConfig, format_pl_date, load_config
from .errors import ScraperError
from .fetch import HtmlFetcher, make_session
from .filters import dedupe_records, evaluate_candidate
from .labels import build_label_page_url, normalize_label_base, read_labels_file
from .lanes import RequestLane
from .listing import extract_album_candidates_from_listing
from .models import (
    Candidate,
    LabelSource,
    MissingDateRow,
    OutputFiles,
    OutputRecord,
    RunTiming,
    ScrapeResult,
    ScrapeStats,
)
from .output import (
    OUT_LINKS,
    OUT_MISSING_ALBUM_DATES,
    OUT_XLSX,
    write_links_txt,
    write_missing_dates,
    write_xlsx,
)
from .progress import ProgressCallback, ProgressEmitter, albums_percent, listing_percent

log = logging.getLogger(__name__)

FILES_DIR = "FILES"
DOWNLOAD_DIR = "download"


def _utc_iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="milliseconds")


class LabelScraper:
    """One crawl run over an already loaded config and label list."""

    def __init__(
        self,
        config: ScraperConfig,
        labels: List[LabelSource],
        fetcher: HtmlFetcher,
        stats: ScrapeStats,
        progress: ProgressEmitter,
        *,
        listing_lane: Optional[RequestLane] = None,
        album_lane: Optional[RequestLane] = None,
    ) -> None:
        self.config = config
        self.labels = labels
        self.fetcher = fetcher
        self.stats = stats
        self.progress = progress
        self.listing_lane = listing_lane or RequestLane("listing", config.delay_listing)
        self.album_lane = album_lane or RequestLane("album", config.delay_album)
        self.missing_rows: List[MissingDateRow] = []

    async def scan_label(self, index: int, src: LabelSource, seen: Set[Tuple[str, str]]) -> List[Candidate]:
        cfg = self.config
        total = len(self.labels)
        percent = listing_percent(index, total)
        found: List[Candidate] = []

        base_url = normalize_label_base(src.url)
        for page in range(1, cfg.max_pages_per_label + 1):
            page_url = build_label_page_url(base_url, page)
            log.info("Label=%s, page=%d/%d, url=%s", src.name, page, cfg.max_pages_per_label, page_url)
            self.progress.emit(
                "listing",
                f"Label {index}/{total}: {src.name} (strona {page})",
                percent,
                current=index,
                total=total,
            )

            html = await self.listing_lane.schedule(self.fetcher.fetch, page_url)
            if not html:
                continue

            try:
                listing = extract_album_candidates_from_listing(
                    html, page_url, src.name, cfg.date_from, cfg.date_to, self.stats
                )
            except Exception as e:  # noqa: BLE001
                self.stats.parse_errors += 1
                log.error("Błąd parsowania listingu %s: %s", page_url, e)
                continue

            for c in listing.candidates:
                key = (c.album_url, c.label_name)
                if key not in seen:
                    seen.add(key)
                    found.append(c)

            if page == 1 and not listing.has_page2:
                break

        return found

    async def scan_listings(self) -> List[Candidate]:
        candidates: List[Candidate] = []
        seen_album_per_label: Set[Tuple[str, str]] = set()

        for i, src in enumerate(self.labels, start=1):
            self.stats.labels_processed += 1
            candidates.extend(await self.scan_label(i, src, seen_album_per_label))

        self.stats.candidates_total = len(candidates)
        log.info("Kandydaci po dacie z listingu: %d", len(candidates))
        return candidates

    async def process_candidate(self, cand: Candidate) -> Optional[OutputRecord]:
        html = await self.album_lane.schedule(self.fetcher.fetch, cand.album_url)
        if not html:
            return None

        try:
            det = parse_album_details(html)
        except Exception as e:  # noqa: BLE001
            self.stats.parse_errors += 1
            log.error("Błąd parsowania albumu %s: %s", cand.album_url, e)
            return None
        if det is None:
            log.info("Pomijam %s: brak czasu trwania albumu", cand.album_url)
            return None

        outcome = evaluate_candidate(cand, det, self.config, self.stats)
        if outcome.missing_date is not None:
            self.missing_rows.append(outcome.missing_date)
        if not outcome.accepted:
            log.debug("Odrzucono (%s): %s", outcome.rejected, cand.album_url)
        return outcome.record

    async def fetch_albums(self, candidates: List[Candidate]) -> List[OutputRecord]:
        accepted: List[OutputRecord] = []
        total = len(candidates)
        for i, cand in enumerate(candidates, start=1):
            self.stats.albums_fetched += 1
            self.progress.emit("albums", f"Album {i}/{total}", albums_percent(i, total), current=i, total=total)
            record = await self.process_candidate(cand)
            if record is not None:
                accepted.append(record)
        return accepted

    async def scrape(self) -> List[OutputRecord]:
        candidates = await self.scan_listings()
        accepted = await self.fetch_albums(candidates)
        deduped = dedupe_records(accepted, self.stats)
        self.stats.accepted = len(deduped)
        return deduped


def write_outputs(
    output_dir: Path,
    records: List[OutputRecord],
    missing_rows: List[MissingDateRow],
    progress: ProgressEmitter,
    dry_run: bool = False,
) -> OutputFiles:
    links_path = output_dir / OUT_LINKS
    xlsx_path = output_dir / OUT_XLSX
    missing_path = output_dir / OUT_MISSING_ALBUM_DATES

    progress.emit("writing", "Zapisuję pliki wynikowe...", 92)
    if not dry_run:
        output_dir.mkdir(parents=True, exist_ok=True)
        write_links_txt(links_path, [r.album_url for r in records])
        progress.emit("writing", "Zapisuję XLSX...", 96)
        write_xlsx(xlsx_path, records)
        write_missing_dates(missing_path, missing_rows)

    return OutputFiles(
        links_txt=str(links_path),
        xlsx=str(xlsx_path),
        missing_dates_txt=str(missing_path) if missing_rows else None,
    )


async def run_scraper(
    app_root: Union[str, Path, None] = None,
    dry_run: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> ScrapeResult:
    started = time.time()
    t0 = time.monotonic()
    root = Path(app_root or Path.cwd()).resolve()
    files_dir = root / FILES_DIR
    stats = ScrapeStats()
    progress = ProgressEmitter(on_progress)

    try:
        progress.emit("init", "Wczytuję plik wejściowy...", 1)
        config = load_config(files_dir / INPUT_FILE)
        labels_path = files_dir / config.labels_file
        log.info(
            "Start: app_root=%s, labels=%s, daty %s -> %s, min %d min, delay %.2fs/%.2fs, max stron %d, "
            "retries %d, timeout %dms, genre_root=%s",
            root,
            labels_path,
            format_pl_date(config.date_from),
            format_pl_date(config.date_to),
            config.min_minutes,
            config.delay_listing,
            config.delay_album,
            config.max_pages_per_label,
            config.retries,
            config.timeout_ms,
            config.genre_root,
        )

        progress.emit("labels", "Wczytuję listę labeli...", 3)
        labels = read_labels_file(labels_path)
    except ScraperError as e:
        log.error("Błąd konfiguracji [%s]: %s", e.code, e.message)
        progress.emit("error", e.message, 100)
        return ScrapeResult(ok=False, stats=stats, error=e.to_dict())

    stats.labels_total = len(labels)

    own_session = session is None
    if own_session:
        session = make_session(config.user_agent, config.accept_language)
    try:
        fetcher = HtmlFetcher(session, retries=config.retries, timeout_ms=config.timeout_ms, stats=stats)
        scraper = LabelScraper(config, labels, fetcher, stats, progress)
        records = await scraper.scrape()
    finally:
        if own_session:
            await session.close()

    output_dir = files_dir / DOWNLOAD_DIR
    files = write_outputs(output_dir, records, scraper.missing_rows, progress, dry_run=dry_run)

    finished = time.time()
    progress.emit("done", "Gotowe", 100)
    log.info("Podsumowanie: %s", stats.to_dict())

    return ScrapeResult(
        ok=True,
        output_dir=str(output_dir),
        files=files,
        stats=stats,
        timing=RunTiming(
            started_at=_utc_iso(started),
            finished_at=_utc_iso(finished),
            duration_ms=int((time.monotonic() - t0) * 1000),
        ),
    )


def run(
    app_root: Union[str, Path, None] = None,
    dry_run: bool = False,
    on_progress: Optional[ProgressCallback] = None,
) -> ScrapeResult:
    return asyncio.run(run_scraper(app_root=app_root, dry_run=dry_run, on_progress=on_progress))
