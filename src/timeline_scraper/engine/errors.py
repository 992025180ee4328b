"""Normalized error kinds for the scrape pipeline.

Every failure that can reach a caller is a ScrapeError carrying an ErrorKind,
so the worker can write the kind into its envelope and the API can map it to
an HTTP status without inspecting message text.
"""
from enum import Enum


class ErrorKind(Enum):
    ITEM_EXTRACTION = "item_extraction"     # one container, recovered locally
    CONTENT_NOT_FOUND = "content_not_found" # no container selector matched
    NAVIGATION = "navigation"               # page load failed
    WORKER_TIMEOUT = "worker_timeout"       # worker killed on deadline
    ENVELOPE_PARSE = "envelope_parse"       # worker output unusable
    VALIDATION = "validation"               # bad request input
    INTERNAL = "internal"                   # anything unexpected


class ScrapeError(Exception):
    """Exception carrying a normalized ErrorKind."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "", kind: ErrorKind | None = None):
        if kind is not None:
            self.kind = kind
        super().__init__(message or self.kind.value)


class ItemExtractionError(ScrapeError):
    kind = ErrorKind.ITEM_EXTRACTION


class ContentNotFoundError(ScrapeError):
    kind = ErrorKind.CONTENT_NOT_FOUND


class NavigationError(ScrapeError):
    kind = ErrorKind.NAVIGATION


class WorkerTimeoutError(ScrapeError):
    kind = ErrorKind.WORKER_TIMEOUT


class EnvelopeParseError(ScrapeError):
    kind = ErrorKind.ENVELOPE_PARSE


class ValidationError(ScrapeError):
    kind = ErrorKind.VALIDATION
