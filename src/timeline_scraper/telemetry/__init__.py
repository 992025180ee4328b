"""telemetry — structured JSONL event logging."""
from .logger import ScrapeEventLogger  # noqa: F401
