from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    phase: str
    message: str
    percent: int
    current: Optional[int] = None
    total: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


ProgressCallback = Callable[[ProgressEvent], None]


def listing_percent(current: int, total: int) -> int:
    return min(40, 5 + round(current / max(1, total) * 35))


def albums_percent(current: int, total: int) -> int:
    return min(90, 40 + round(current / max(1, total) * 50))


class ProgressEmitter:
    """Forwards events to the caller's observer; percent never goes backwards."""

    def __init__(self, on_progress: Optional[ProgressCallback] = None) -> None:
        self._on_progress = on_progress
        self._percent = 0

    def emit(
        self,
        phase: str,
        message: str,
        percent: int,
        current: Optional[int] = None,
        total: Optional[int] = None,
    ) -> ProgressEvent:
        self._percent = max(self._percent, percent)
        event = ProgressEvent(phase=phase, message=message, percent=self._percent, current=current, total=total)
        log.debug("[%s %d%%] %s", phase, event.percent, message)
        if self._on_progress is not None:
            self._on_progress(event)
        return event


class RichProgressReporter:
    """Progress observer for the terminal: one rich bar over 0-100%."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.description}[/bold cyan]"),
            BarColumn(),
            TextColumn("{task.completed:.0f}%"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task = None

    def __enter__(self) -> "RichProgressReporter":
        self.progress.start()
        self._task = self.progress.add_task("Start", total=100)
        return self

    def __exit__(self, *exc) -> None:
        self.progress.stop()

    def __call__(self, event: ProgressEvent) -> None:
        if self._task is None:
            return
        self.progress.update(self._task, completed=event.percent, description=event.message)
