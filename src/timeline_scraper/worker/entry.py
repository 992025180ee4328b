"""Worker process entry point: scrape one URL, print one envelope, exit.

Invoked as ``python -m timeline_scraper.worker <url>``. stdout carries
exactly one JSON document; all logging goes to stderr.
"""
import argparse
import logging
import os
import sys
import uuid

from ..config import load_extraction_policy, load_scrape_config
from ..engine.errors import ErrorKind, ScrapeError
from ..engine.orchestrator import scrape_timeline
from ..logging_setup import setup_logging
from ..models import ScrapeResult
from ..targets import normalize_target
from ..telemetry.logger import ScrapeEventLogger
from .envelope import encode_envelope

log = logging.getLogger(__name__)


def run_scrape(url: str) -> ScrapeResult:
    """Open a browser, run the controller against url, close the browser."""
    from playwright.sync_api import sync_playwright

    from ..browser.session import open_browser

    config = load_scrape_config()
    policy = load_extraction_policy()
    normalized = normalize_target(url)

    event_logger = None
    if config.event_log_dir:
        event_logger = ScrapeEventLogger(uuid.uuid4().hex[:12], normalized, config.event_log_dir)
    try:
        with sync_playwright() as pw:
            with open_browser(pw, headless=config.headless, locale=config.locale) as page:
                return scrape_timeline(page, normalized, target_url=url, config=config,
                                       policy=policy, event_logger=event_logger)
    finally:
        if event_logger:
            event_logger.close()


def emit(result: ScrapeResult, stream=None) -> None:
    stream = stream or sys.stdout
    stream.write(encode_envelope(result) + "\n")
    stream.flush()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="timeline_scraper.worker",
                                     description="Scrape one timeline URL and print a JSON envelope.")
    parser.add_argument("url", help="Target profile URL")
    args = parser.parse_args(argv)

    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    log.info(f"Starting scrape for: {args.url}")
    try:
        result = run_scrape(args.url)
    except ScrapeError as e:
        log.error(f"Scraping failed: {e}")
        result = ScrapeResult.failure(args.url, str(e), e.kind.value)
    except Exception as e:
        log.exception("Worker crashed")
        result = ScrapeResult.failure(args.url, f"{type(e).__name__}: {e}", ErrorKind.INTERNAL.value)

    emit(result)
    return 0 if result.success else 1
