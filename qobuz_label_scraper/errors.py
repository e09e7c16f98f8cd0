"""Fatal errors raised while loading the run configuration and the label list.

Anything raised from here aborts the run before the first HTTP request.
Per-request and per-album problems are never raised; they end up in
``ScrapeStats`` instead.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ScraperError(Exception):
    code = "SCRAPER_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InputFileNotFound(ScraperError):
    code = "INPUT_FILE_NOT_FOUND"


class InvalidInputLine(ScraperError):
    code = "INVALID_INPUT_LINE"


class MissingRequiredKeys(ScraperError):
    code = "MISSING_REQUIRED_KEYS"


class InvalidDateFormat(ScraperError):
    code = "INVALID_DATE_FORMAT"


class InvalidNumericValue(ScraperError):
    code = "INVALID_NUMERIC_VALUE"


class ValueOutOfRange(ScraperError):
    code = "VALUE_OUT_OF_RANGE"


class LabelsFileNotFound(ScraperError):
    code = "LABELS_FILE_NOT_FOUND"


class InvalidLabelsLine(ScraperError):
    code = "INVALID_LABELS_LINE"
