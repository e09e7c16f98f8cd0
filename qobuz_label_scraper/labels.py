from __future__ import annotations

import re
from pathlib import Path
from typing import List
from urllib.parse import urlparse, urlunparse

from .config import strip_comment
from .errors import InvalidLabelsLine, LabelsFileNotFound
from .models import LabelSource

RE_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)
RE_PAGE_SUFFIX = re.compile(r"/page/\d+/?$")


def read_labels_file(path: Path) -> List[LabelSource]:
    """Read ``Label Name - https://...`` lines, in file order.

    Any malformed line aborts the whole run.
    """
    if not path.is_file():
        raise LabelsFileNotFound(f"Brak pliku labeli: {path}", {"path": str(path)})

    labels: List[LabelSource] = []
    for i, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = strip_comment(raw)
        if not line:
            continue

        name, sep, url = line.partition(" - ")
        if not sep:
            raise InvalidLabelsLine(
                f"Niepoprawna linia {i} w pliku labeli (brak separatora ' - ').",
                {"line": i, "value": raw},
            )

        name = name.strip()
        url = url.strip()
        if not name or not RE_HTTP_URL.match(url):
            raise InvalidLabelsLine(f"Niepoprawna linia {i} w pliku labeli.", {"line": i, "value": raw})

        labels.append(LabelSource(name=name, url=url))

    return labels


def normalize_label_base(url: str) -> str:
    """Remove trailing /page/<n> from label URL if present (keeps query)."""
    p = urlparse(url)
    path = RE_PAGE_SUFFIX.sub("", p.path)
    return urlunparse((p.scheme, p.netloc, path, p.params, p.query, p.fragment))


def build_label_page_url(label_url: str, page: int) -> str:
    p = urlparse(label_url)
    path = RE_PAGE_SUFFIX.sub("", p.path).rstrip("/")
    if page > 1:
        path = f"{path}/page/{page}"
    return urlunparse((p.scheme, p.netloc, path, p.params, p.query, p.fragment))
