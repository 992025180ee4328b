"""Orchestrator: entry point for one timeline scrape inside a worker.

Requires injected page, never opens a browser. The worker process owns
the browser lifecycle and calls this with an already-open page.
"""
import logging
import time

from ..config import ExtractionPolicy, ScrapeConfig
from ..models import ScrapeResult
from .controller import ControllerState, LoadRetryController
from .errors import ErrorKind, ScrapeError

log = logging.getLogger(__name__)


def scrape_timeline(page, url: str, *,
                    target_url: str = "",
                    config: ScrapeConfig | None = None,
                    policy: ExtractionPolicy | None = None,
                    max_count: int | None = None,
                    event_logger=None,
                    **controller_kwargs) -> ScrapeResult:
    """Scrape one timeline and fold every outcome into a ScrapeResult.

    Args:
        page: Open Playwright page (or compatible fake).
        url: Normalized URL to navigate to.
        target_url: URL as originally requested; reported in the result.
            Defaults to ``url``.
        config: Controller tuning.
        policy: Exclusion and recency policy.
        max_count: Batch size cap; defaults to ``config.max_tweets``.
        event_logger: Optional ScrapeEventLogger for telemetry.

    Returns:
        ScrapeResult. Never raises for scrape failures; they are reported
        with ``success=False`` and an ``error_kind``.
    """
    config = config or ScrapeConfig()
    policy = policy or ExtractionPolicy()
    target_url = target_url or url
    max_count = max_count or config.max_tweets
    started = time.monotonic()

    controller = LoadRetryController(page, config, policy, event_logger=event_logger,
                                     **controller_kwargs)
    metadata: dict = {"normalizedUrl": url}
    try:
        outcome = controller.run(url, max_count)
    except ScrapeError as e:
        metadata["attempts"] = controller.history.count(ControllerState.NAVIGATING)
        metadata["durationSeconds"] = round(time.monotonic() - started, 2)
        log.error(f"Scraping failed: {e}")
        if event_logger:
            event_logger.log_scrape_end(False, metadata["attempts"], 0,
                                        time.monotonic() - started, error=str(e))
        return ScrapeResult.failure(target_url, str(e), e.kind.value, metadata)
    except Exception as e:
        metadata["durationSeconds"] = round(time.monotonic() - started, 2)
        log.exception("Scraping failed unexpectedly")
        if event_logger:
            event_logger.log_scrape_end(False, 0, 0, time.monotonic() - started, error=str(e))
        return ScrapeResult.failure(target_url, f"{type(e).__name__}: {e}",
                                    ErrorKind.INTERNAL.value, metadata)

    batch = outcome.batch
    metadata.update(batch.stats())
    metadata["attempts"] = outcome.attempts
    metadata["selector"] = outcome.selector
    metadata["durationSeconds"] = round(time.monotonic() - started, 2)
    if event_logger:
        event_logger.log_scrape_end(True, outcome.attempts, len(batch.posts),
                                    time.monotonic() - started)
    log.info(f"Successfully extracted {len(batch.posts)} posts in {outcome.attempts} attempt(s)")
    return ScrapeResult(success=True, url=target_url, tweets=tuple(batch.posts),
                        metadata=metadata)
