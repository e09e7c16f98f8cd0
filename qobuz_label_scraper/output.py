from __future__ import annotations

from pathlib import Path
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from .config import format_pl_date
from .models import MissingDateRow, OutputRecord

OUT_LINKS = "list_links.txt"
OUT_XLSX = "title_artist_label.xlsx"
OUT_MISSING_ALBUM_DATES = "album_date_missing.txt"

XLSX_HEADERS = ["album_title", "main_artists", "label", "album_url", "release_date"]
XLSX_WIDTHS = [40, 45, 28, 65, 14]
MISSING_HEADERS = ["label", "album_url", "listing_release_date", "album_title", "main_artists"]

HEADER_STYLE = (Font(bold=True), Alignment(vertical="center", horizontal="left", wrap_text=True))
BODY_ALIGNMENT = Alignment(vertical="top", horizontal="left", wrap_text=True)


def write_links_txt(path: Path, links: List[str]) -> None:
    path.write_text("\n".join(links) + ("\n" if links else ""), encoding="utf-8")


def _record_row(r: OutputRecord) -> list:
    return [r.album_title, r.main_artists, r.label, r.album_url, format_pl_date(r.release_date)]


def write_xlsx(path: Path, records: List[OutputRecord]) -> None:
    """One sheet "albums": bold frozen header, fixed widths, wrapped top-aligned cells."""
    wb = Workbook()
    ws = wb.active
    ws.title = "albums"

    ws.append(XLSX_HEADERS)
    for r in records:
        ws.append(_record_row(r))

    for col, width in enumerate(XLSX_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width

    font, header_alignment = HEADER_STYLE
    for row in ws.iter_rows():
        for cell in row:
            if cell.row == 1:
                cell.font = font
                cell.alignment = header_alignment
            else:
                cell.alignment = BODY_ALIGNMENT

    ws.freeze_panes = "A2"
    wb.save(path)


def write_missing_dates(path: Path, rows: List[MissingDateRow]) -> bool:
    """Write the tab-separated report; with no rows a stale report is removed.

    Returns whether the file exists afterwards.
    """
    if not rows:
        path.unlink(missing_ok=True)
        return False

    lines = ["\t".join(MISSING_HEADERS)]
    for r in rows:
        lines.append(
            "\t".join(
                [r.label, r.album_url, format_pl_date(r.listing_release_date), r.album_title, r.main_artists]
            )
        )
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return True
