"""Runtime configuration for the controller, the extraction policy and the API.

Every tuning knob lives in a frozen dataclass that is passed in at
construction time. ``load_*`` helpers build them from environment variables
so the worker process and the server read the same settings.
"""
import os
from dataclasses import dataclass

DEFAULT_CONTENT_SELECTORS = (
    "article",
    '[data-testid="tweet"]',
    '[role="article"]',
)


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {value!r}") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Invalid number for {name}: {value!r}") from None


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class ScrapeConfig:
    """Load/retry controller tuning."""

    max_tweets: int = 10
    max_attempts: int = 3
    # Delay before attempt n+1 is backoff_schedule[n-1]; last entry repeats.
    backoff_schedule: tuple[float, ...] = (2.0, 4.0, 8.0)
    navigation_timeout: float = 60.0
    post_navigation_delay: float = 3.0
    content_selectors: tuple[str, ...] = DEFAULT_CONTENT_SELECTORS
    selector_timeout: float = 10.0
    scroll_steps: int = 3
    scroll_settle_delay: float = 2.0
    # None -> 2 * max_count
    min_containers: int | None = None
    cache_bust: bool = True
    human_scroll: bool = True
    headless: bool = True
    locale: str = "en-US"
    event_log_dir: str = ""

    def backoff_for(self, attempt: int) -> float:
        if not self.backoff_schedule:
            return 0.0
        idx = min(max(attempt, 1), len(self.backoff_schedule)) - 1
        return max(0.0, self.backoff_schedule[idx])

    def container_target(self, max_count: int) -> int:
        if self.min_containers is not None:
            return self.min_containers
        return max_count * 2


@dataclass(frozen=True)
class ExtractionPolicy:
    """Which items the page engine drops, and what counts as recent.

    ``max_age_days=None`` disables the freshness cutoff entirely.
    """

    exclude_pinned: bool = True
    max_age_days: float | None = 30
    recent_window_days: float = 7
    pinned_markers: tuple[str, ...] = ("pinned", "promoted")


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    worker_timeout: float = 120.0
    max_workers: int = 4
    log_level: str = "INFO"


def load_scrape_config() -> ScrapeConfig:
    return ScrapeConfig(
        max_tweets=max(1, _env_int("SCRAPER_MAX_TWEETS", 10)),
        max_attempts=max(1, _env_int("SCRAPER_MAX_ATTEMPTS", 3)),
        scroll_steps=max(0, _env_int("SCRAPER_SCROLL_STEPS", 3)),
        scroll_settle_delay=max(0.0, _env_float("SCRAPER_SCROLL_SETTLE", 2.0)),
        headless=_env_bool("SCRAPER_HEADLESS", True),
        event_log_dir=_env_str("SCRAPER_EVENT_LOG_DIR", ""),
    )


def load_extraction_policy() -> ExtractionPolicy:
    freshness = _env_float("SCRAPER_FRESHNESS_DAYS", 30)
    return ExtractionPolicy(
        exclude_pinned=_env_bool("SCRAPER_EXCLUDE_PINNED", True),
        max_age_days=freshness if freshness > 0 else None,
        recent_window_days=max(0.0, _env_float("SCRAPER_RECENT_DAYS", 7)),
    )


def load_server_config() -> ServerConfig:
    return ServerConfig(
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
        worker_timeout=max(1.0, _env_float("SCRAPER_WORKER_TIMEOUT", 120.0)),
        max_workers=max(1, _env_int("SCRAPER_MAX_WORKERS", 4)),
        log_level=_env_str("LOG_LEVEL", "INFO"),
    )
