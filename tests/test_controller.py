"""Tests for the load/retry controller: driven by FakePage, no browser."""
from unittest.mock import MagicMock

import pytest

from timeline_scraper.config import ExtractionPolicy, ScrapeConfig
from timeline_scraper.engine.controller import (
    ControllerState,
    LoadRetryController,
    cache_busted,
)
from timeline_scraper.engine.errors import ContentNotFoundError, NavigationError

from fakes import NOW, FakePage, make_tweet

S = ControllerState


def _config(**overrides):
    params = dict(
        max_tweets=3,
        max_attempts=3,
        backoff_schedule=(1.0, 2.0),
        post_navigation_delay=0,
        scroll_settle_delay=0.5,
        scroll_steps=3,
        human_scroll=False,
    )
    params.update(overrides)
    return ScrapeConfig(**params)


def _controller(page, config=None, policy=None, **kwargs):
    sleeps = []
    controller = LoadRetryController(
        page, config or _config(), policy or ExtractionPolicy(),
        container_factory=lambda handle: handle,
        sleep=sleeps.append,
        clock=lambda: NOW,
        **kwargs,
    )
    return controller, sleeps


def _fresh(n=3, prefix="f"):
    return [make_tweet(f"{prefix}{i}", age_days=1, y=i) for i in range(n)]


def _old(n=3, prefix="o"):
    return [make_tweet(f"{prefix}{i}", age_days=10, y=i) for i in range(n)]


def test_accepts_first_attempt_with_recent_posts():
    page = FakePage([[_fresh(6)]])
    controller, _ = _controller(page)
    outcome = controller.run("https://x.com/alice")

    assert outcome.attempts == 1
    assert outcome.selector == "article"
    assert len(outcome.batch.posts) == 3
    assert outcome.history == [S.NAVIGATING, S.WAITING_FOR_CONTENT, S.SCROLLING,
                               S.EVALUATING, S.ACCEPTED]


def test_retries_until_recent_posts_appear():
    page = FakePage([[_old()], [_fresh()]])
    controller, sleeps = _controller(page)
    outcome = controller.run("https://x.com/alice")

    assert outcome.attempts == 2
    assert outcome.batch.recent_count == 3
    assert S.RETRYING in outcome.history
    assert 1.0 in sleeps
    assert len(page.visits) == 2


def test_final_attempt_accepts_whatever_was_found():
    page = FakePage([[_old()]])
    controller, sleeps = _controller(page)
    outcome = controller.run("https://x.com/alice")

    assert outcome.attempts == 3
    assert outcome.batch.recent_count == 0
    assert len(outcome.batch.posts) == 3
    assert outcome.history[-1] == S.ACCEPTED
    assert [s for s in sleeps if s in (1.0, 2.0)] == [1.0, 2.0]


def test_zero_containers_on_every_attempt_is_fatal():
    page = FakePage([[]])
    controller, _ = _controller(page)
    with pytest.raises(ContentNotFoundError):
        controller.run("https://x.com/alice")
    assert len(page.visits) == 3
    assert controller.history[-1] == S.EXHAUSTED


def test_navigation_error_is_retried():
    page = FakePage([RuntimeError("net::ERR_CONNECTION_RESET"), [_fresh()]])
    controller, _ = _controller(page)
    outcome = controller.run("https://x.com/alice")
    assert outcome.attempts == 2


def test_navigation_errors_exhaust_attempts():
    page = FakePage([RuntimeError("net::ERR_NAME_NOT_RESOLVED")])
    controller, _ = _controller(page)
    with pytest.raises(NavigationError) as exc:
        controller.run("https://x.com/alice")
    assert "ERR_NAME_NOT_RESOLVED" in str(exc.value)
    assert len(page.visits) == 3


def test_http_error_status_is_navigation_failure():
    page = FakePage([429, [_fresh()]])
    controller, _ = _controller(page)
    outcome = controller.run("https://x.com/alice")
    assert outcome.attempts == 2


def test_falls_back_to_next_content_selector():
    page = FakePage([[_fresh()]], selectors=('[role="article"]',))
    controller, _ = _controller(page)
    outcome = controller.run("https://x.com/alice")
    assert outcome.selector == '[role="article"]'


def test_cache_busting_token_per_attempt():
    page = FakePage([[_old()]])
    controller, _ = _controller(page)
    controller.run("https://x.com/alice?lang=en")
    assert "lang=en" in page.visits[0]
    assert "_a=1" in page.visits[0]
    assert "_a=2" in page.visits[1]
    assert "_t=" in page.visits[2]


def test_cache_busting_disabled():
    page = FakePage([[_fresh()]])
    controller, _ = _controller(page, _config(cache_bust=False))
    controller.run("https://x.com/alice")
    assert page.visits == ["https://x.com/alice"]


def test_cache_busted_replaces_previous_token():
    url = cache_busted("https://x.com/alice?_t=1&_a=1&lang=en", 2, 999)
    assert url == "https://x.com/alice?lang=en&_t=999&_a=2"


def test_scroll_stops_when_content_stalls():
    stages = [_fresh(2), _fresh(2)]
    page = FakePage([stages])
    controller, _ = _controller(page)
    controller.run("https://x.com/alice")
    assert page.scrolls == 1


def test_scroll_continues_while_content_grows():
    stages = [_fresh(1), _fresh(2), _fresh(3), _fresh(4), _fresh(5)]
    page = FakePage([stages])
    controller, sleeps = _controller(page, _config(scroll_steps=3, min_containers=100))
    outcome = controller.run("https://x.com/alice")
    assert page.scrolls == 3
    assert sleeps.count(0.5) == 3
    assert outcome.batch.total_seen == 4


def test_scroll_skipped_when_target_reached():
    page = FakePage([[_fresh(6)]])
    controller, _ = _controller(page, _config(min_containers=5))
    controller.run("https://x.com/alice")
    assert page.scrolls == 0


def test_batch_respects_max_count_argument():
    page = FakePage([[_fresh(8)]])
    controller, _ = _controller(page)
    outcome = controller.run("https://x.com/alice", max_count=5)
    assert len(outcome.batch.posts) == 5


def test_event_logger_receives_events():
    events = MagicMock()
    page = FakePage([[_old()], [_fresh()]])
    controller, _ = _controller(page, event_logger=events)
    controller.run("https://x.com/alice")

    assert events.log_attempt_start.call_count == 2
    outcomes = [c.args[1] for c in events.log_attempt_result.call_args_list]
    assert outcomes == ["retry", "accepted"]
    assert events.log_content_wait.call_count == 2


def test_single_attempt_config():
    page = FakePage([[_old()]])
    controller, sleeps = _controller(page, _config(max_attempts=1))
    outcome = controller.run("https://x.com/alice")
    assert outcome.attempts == 1
    assert S.RETRYING not in outcome.history
