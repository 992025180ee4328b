"""engine — field extraction, page extraction and the load/retry controller."""
from .errors import (  # noqa: F401
    ErrorKind,
    ScrapeError,
    ItemExtractionError,
    ContentNotFoundError,
    NavigationError,
    WorkerTimeoutError,
    EnvelopeParseError,
    ValidationError,
)
from .strategies import FieldStrategy, DEFAULT_STRATEGIES  # noqa: F401
from .fields import extract_post, parse_count, resolve_field, is_pinned  # noqa: F401
from .page import ExtractionBatch, extract_batch  # noqa: F401
from .controller import ControllerState, ControllerOutcome, LoadRetryController  # noqa: F401
from .orchestrator import scrape_timeline  # noqa: F401
