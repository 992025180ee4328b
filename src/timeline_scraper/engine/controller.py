"""Load/retry controller: coax the timeline into showing fresh posts.

One controller drives one attempt sequence against an already-open page:

    NAVIGATING -> WAITING_FOR_CONTENT -> SCROLLING -> EVALUATING
        -> ACCEPTED | RETRYING (-> NAVIGATING) | EXHAUSTED

Requires injected page, never opens a browser. The page is a sync
Playwright Page or anything with the same goto / wait_for_selector /
query_selector_all / evaluate surface.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..config import ExtractionPolicy, ScrapeConfig
from ..container import PlaywrightContainer
from ..human.behavior import human_scroll
from ..models import utc_now
from .errors import ContentNotFoundError, NavigationError
from .page import ExtractionBatch, extract_batch
from .strategies import DEFAULT_STRATEGIES

log = logging.getLogger(__name__)

CACHE_BUST_PARAMS = ("_t", "_a")


class ControllerState(Enum):
    NAVIGATING = "navigating"
    WAITING_FOR_CONTENT = "waiting_for_content"
    SCROLLING = "scrolling"
    EVALUATING = "evaluating"
    ACCEPTED = "accepted"
    RETRYING = "retrying"
    EXHAUSTED = "exhausted"


@dataclass
class ControllerOutcome:
    batch: ExtractionBatch
    attempts: int
    selector: str
    history: list[ControllerState] = field(default_factory=list)


def cache_busted(url: str, attempt: int, token_ms: int) -> str:
    """Append a timestamp/attempt token so edge caches serve a fresh page."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
             if k not in CACHE_BUST_PARAMS]
    query.append(("_t", str(token_ms)))
    query.append(("_a", str(attempt)))
    return urlunsplit(parts._replace(query=urlencode(query)))


class LoadRetryController:
    def __init__(self, page, config: ScrapeConfig | None = None,
                 policy: ExtractionPolicy | None = None, *,
                 strategies=DEFAULT_STRATEGIES,
                 container_factory=PlaywrightContainer,
                 sleep=time.sleep,
                 clock=utc_now,
                 event_logger=None):
        self.page = page
        self.config = config or ScrapeConfig()
        self.policy = policy or ExtractionPolicy()
        self.strategies = strategies
        self.state: ControllerState | None = None
        self.history: list[ControllerState] = []
        self._container_factory = container_factory
        self._sleep = sleep
        self._clock = clock
        self._events = event_logger

    def _enter(self, state: ControllerState):
        self.state = state
        self.history.append(state)
        log.debug(f"  -> {state.value}")

    # ── Public ──────────────────────────────────────────────────────────────

    def run(self, url: str, max_count: int | None = None) -> ControllerOutcome:
        """Run attempts until a batch is accepted or every attempt is used up.

        Raises NavigationError or ContentNotFoundError (from the last attempt)
        when every attempt failed. No partial batch is returned in that case.
        """
        max_count = max_count or self.config.max_tweets
        max_attempts = max(1, self.config.max_attempts)
        last_error: NavigationError | ContentNotFoundError | None = None

        for attempt in range(1, max_attempts + 1):
            final = attempt == max_attempts
            try:
                selector, batch = self._attempt(url, attempt, max_count)
            except (NavigationError, ContentNotFoundError) as e:
                last_error = e
                log.warning(f"  Attempt {attempt}/{max_attempts} failed: {e}")
                if self._events:
                    self._events.log_attempt_result(attempt, "error", error=str(e))
                if not final:
                    self._retry(attempt)
                continue

            if batch.recent_count > 0 or final:
                self._enter(ControllerState.ACCEPTED)
                if self._events:
                    self._events.log_attempt_result(
                        attempt, "accepted", total_seen=batch.total_seen,
                        accepted=len(batch.posts), recent=batch.recent_count,
                    )
                log.info(f"  Accepted attempt {attempt}/{max_attempts}: "
                         f"{len(batch.posts)} posts, {batch.recent_count} recent")
                return ControllerOutcome(batch=batch, attempts=attempt,
                                         selector=selector, history=list(self.history))

            log.info(f"  Attempt {attempt}/{max_attempts}: no posts within "
                     f"{self.policy.recent_window_days:g} days, retrying")
            if self._events:
                self._events.log_attempt_result(
                    attempt, "retry", total_seen=batch.total_seen,
                    accepted=len(batch.posts), recent=batch.recent_count,
                )
            self._retry(attempt)

        self._enter(ControllerState.EXHAUSTED)
        raise last_error or ContentNotFoundError("No item containers found")

    # ── States ──────────────────────────────────────────────────────────────

    def _attempt(self, url: str, attempt: int, max_count: int) -> tuple[str, ExtractionBatch]:
        self._enter(ControllerState.NAVIGATING)
        target = url
        if self.config.cache_bust:
            target = cache_busted(url, attempt, int(self._clock().timestamp() * 1000))
        if self._events:
            self._events.log_attempt_start(attempt, target)
        self._navigate(target)

        self._enter(ControllerState.WAITING_FOR_CONTENT)
        selector = self._wait_for_content(attempt)

        self._enter(ControllerState.SCROLLING)
        self._scroll(selector, attempt, max_count)

        self._enter(ControllerState.EVALUATING)
        handles = self.page.query_selector_all(selector)
        if not handles:
            raise ContentNotFoundError(f"No item containers matched {selector!r}")
        containers = [self._container_factory(h) for h in handles]
        batch = extract_batch(containers, max_count, self.policy,
                              strategies=self.strategies, now=self._clock())
        return selector, batch

    def _navigate(self, target: str):
        log.info(f"  Navigating to: {target}")
        try:
            response = self.page.goto(
                target,
                wait_until="domcontentloaded",
                timeout=int(self.config.navigation_timeout * 1000),
            )
        except Exception as e:
            raise NavigationError(f"Navigation to {target} failed: {e}") from e
        status = getattr(response, "status", None) if response is not None else None
        if isinstance(status, int) and status >= 400:
            raise NavigationError(f"Navigation to {target} returned HTTP {status}")
        if self.config.post_navigation_delay > 0:
            self._sleep(self.config.post_navigation_delay)

    def _wait_for_content(self, attempt: int) -> str:
        t0 = time.monotonic()
        timeout_ms = int(self.config.selector_timeout * 1000)
        for selector in self.config.content_selectors:
            try:
                self.page.wait_for_selector(selector, timeout=timeout_ms)
            except Exception:
                log.info(f"  Selector {selector!r} not found, trying next...")
                continue
            log.info(f"  Found posts using selector: {selector!r}")
            if self._events:
                self._events.log_content_wait(attempt, selector, time.monotonic() - t0)
            return selector
        if self._events:
            self._events.log_content_wait(attempt, None, time.monotonic() - t0)
        raise ContentNotFoundError("Could not find any posts on the page")

    def _scroll(self, selector: str, attempt: int, max_count: int):
        target = self.config.container_target(max_count)
        prev_count = self._count(selector)
        prev_height = self._height()
        for step in range(1, self.config.scroll_steps + 1):
            if prev_count >= target:
                log.info(f"  {prev_count} containers reached target {target}, done scrolling")
                return
            try:
                self._scroll_once()
            except Exception as e:
                log.warning(f"  Scroll step {step} failed: {e}")
                return
            self._sleep(self.config.scroll_settle_delay)
            count = self._count(selector)
            height = self._height()
            stalled = count == prev_count and height == prev_height
            log.info(f"  Scroll {step}: found {count} containers")
            if self._events:
                self._events.log_scroll_step(attempt, step, count, height, stalled)
            if stalled:
                log.info("  Content stalled, stopping scroll early")
                return
            prev_count, prev_height = count, height

    def _retry(self, attempt: int):
        self._enter(ControllerState.RETRYING)
        delay = self.config.backoff_for(attempt)
        log.info(f"  Backing off {delay:.1f}s before attempt {attempt + 1}")
        if delay > 0:
            self._sleep(delay)

    # ── Page probes ─────────────────────────────────────────────────────────

    def _scroll_once(self):
        if self.config.human_scroll:
            human_scroll(self.page, 2.0)
        else:
            self.page.evaluate("() => window.scrollBy(0, window.innerHeight * 2)")

    def _count(self, selector: str) -> int:
        try:
            return len(self.page.query_selector_all(selector))
        except Exception as e:
            log.debug(f"    container count failed: {e}")
            return 0

    def _height(self) -> int:
        try:
            return int(self.page.evaluate("() => document.body.scrollHeight"))
        except Exception as e:
            log.debug(f"    scrollHeight probe failed: {e}")
            return 0
