"""Command line entry point: ``qobuz-label-scraper [--app-root DIR] [--dry-run]``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .models import ScrapeResult
from .progress import RichProgressReporter
from .scraper import run_scraper

console = Console()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Qobuz multi-label scraper: listing -> album pages -> list_links.txt + XLSX.",
    )
    parser.add_argument(
        "--app-root",
        type=Path,
        default=None,
        help="Folder aplikacji (zawiera FILES/plik_wejsciowy.txt). Domyślnie: bieżący katalog.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Nie zapisuj plików wynikowych.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Logi DEBUG.")
    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    # aiohttp/asyncio chatter is noise for this tool
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def print_summary(result: ScrapeResult, dry_run: bool = False) -> None:
    s = result.stats
    files = result.files
    if dry_run:
        console.print("[bold yellow]Dry-run, pliki nie zostały zapisane:[/bold yellow]")
    else:
        console.print("[bold green]💾 Zapisano pliki:[/bold green]")
    console.print(f"• {files.links_txt}  ([dim]{s.accepted} linków po deduplikacji[/dim])")
    console.print(f"• {files.xlsx}  ([dim]{s.accepted} wierszy po deduplikacji[/dim])\n")

    console.print("[bold]Podsumowanie:[/bold]")
    console.print(f"• Labels w pliku: [bold]{s.labels_total}[/bold]")
    console.print(f"• Kandydaci po dacie (listing): [bold]{s.candidates_total}[/bold]")
    console.print(f"• Zaakceptowane albumy: [bold]{s.accepted}[/bold]")
    if s.duplicates_removed:
        console.print(f"• Usunięte duplikaty (tytuł+wykonawca w obrębie wytwórni): [bold]{s.duplicates_removed}[/bold]")
    if s.rejected_by_date_mismatch:
        console.print(f"• Odrzucone po weryfikacji daty na album page: [bold]{s.rejected_by_date_mismatch}[/bold]")
    if s.rejected_by_genre:
        console.print(f"• Odrzucone przez filtr gatunku: [bold]{s.rejected_by_genre}[/bold]")
    if s.rejected_by_length:
        console.print(f"• Odrzucone przez minimalną długość: [bold]{s.rejected_by_length}[/bold]")
    if s.missing_album_date:
        console.print(
            f"• Albumy bez rozpoznanej daty na album page (użyto daty z listingu): [bold]{s.missing_album_date}[/bold]"
        )
        if files.missing_dates_txt:
            console.print(f"  [dim]Zapisano listę URL-i do: {files.missing_dates_txt}[/dim]")
    if s.http_errors or s.parse_errors:
        console.print(f"• Błędy HTTP: [bold]{s.http_errors}[/bold], błędy parsowania: [bold]{s.parse_errors}[/bold]")
    console.print(f"[dim]Gotowe w {result.timing.duration_ms / 1000:.1f}s.[/dim]")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    console.print("[bold magenta]Qobuz multi-label scraper[/bold magenta]")
    console.print(
        "[dim]Filtr: data (listing + weryfikacja na album page) + gatunek + minimalny czas. "
        "Deduplikacja na końcu.[/dim]\n"
    )
    if args.dry_run:
        console.print("[bold yellow]Tryb dry-run:[/bold yellow] pliki wynikowe nie zostaną zapisane.\n")

    try:
        with RichProgressReporter(console=console) as reporter:
            result = asyncio.run(run_scraper(app_root=args.app_root, dry_run=args.dry_run, on_progress=reporter))
    except KeyboardInterrupt:
        console.print("\n[bold yellow]🟡 Przerwano Ctrl+C[/bold yellow]")
        return 130

    if not result.ok:
        err = result.error or {}
        console.print(f"[bold red]✖ {err.get('code')}[/bold red] {err.get('message')}")
        if err.get("details"):
            console.print(f"[dim]{err['details']}[/dim]")
        return 1

    print_summary(result, dry_run=args.dry_run)
    return 0


if __name__ == "__main__":
    sys.exit(main())
