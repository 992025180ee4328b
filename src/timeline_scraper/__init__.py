"""timeline-scraper — timeline post extraction behind an isolated worker pool.

Provides the field extractor and page extraction engine, the load/retry
controller that drives a browser page, the worker process that wraps one
scrape, and the pool/API that serve scrapes over HTTP.
"""
__version__ = "0.1.0"

from .config import ScrapeConfig, ExtractionPolicy, ServerConfig  # noqa: F401,E402
from .models import Post, ScrapeResult  # noqa: F401,E402
from .container import Container  # noqa: F401,E402
from .engine.errors import ErrorKind, ScrapeError  # noqa: F401,E402
from .engine.orchestrator import scrape_timeline  # noqa: F401,E402
