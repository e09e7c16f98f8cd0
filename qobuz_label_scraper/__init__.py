"""Qobuz multi-label scraper.

Scans label catalog pages for albums released in a date range, verifies each
album on its own page (release date, genre, total length) and writes
``list_links.txt``, ``title_artist_label.xlsx`` and ``album_date_missing.txt``.
"""

from .errors import ScraperError
from .models import ScrapeResult, ScrapeStats
from .progress import ProgressEvent
from .scraper import run, run_scraper

__all__ = ["ProgressEvent", "ScrapeResult", "ScrapeStats", "ScraperError", "run", "run_scraper"]
