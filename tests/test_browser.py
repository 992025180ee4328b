"""Tests for UA helpers, the stealth shim and the browser session."""
import random
from unittest.mock import MagicMock

from timeline_scraper.browser.session import LAUNCH_ARGS, VIEWPORT, open_browser
from timeline_scraper.browser.stealth import build_stealth_shim, install_stealth
from timeline_scraper.browser.ua import (
    CHROME_VERSIONS,
    UA_TEMPLATES,
    build_user_agent,
    pick_user_agent,
    platform_for,
)


def test_build_user_agent_default_template():
    ua = build_user_agent("131.0.6778.86")
    assert "Chrome/131.0.6778.86" in ua
    assert "Windows NT 10.0" in ua


def test_pick_user_agent_is_consistent():
    ua, version = pick_user_agent(random.Random(7))
    assert version in CHROME_VERSIONS
    assert f"Chrome/{version}" in ua


def test_platform_for():
    platforms = [platform_for(t.format(version="1")) for t in UA_TEMPLATES]
    assert platforms == ["Windows", "macOS", "Linux"]


def test_stealth_shim_contents():
    shim = build_stealth_shim("131.0.6778.86", platform="macOS", languages=("de-DE", "de"))
    assert "navigator" in shim
    assert "userAgentData" in shim
    assert '"131"' in shim
    assert '"macOS"' in shim
    assert '["de-DE", "de"]' in shim


def test_install_stealth():
    context = MagicMock()
    assert install_stealth(context, "131.0.0.0") is True
    script = context.add_init_script.call_args[0][0]
    assert "webdriver" in script


def test_install_stealth_failure_is_reported():
    context = MagicMock()
    context.add_init_script.side_effect = RuntimeError("closed")
    assert install_stealth(context, "131.0.0.0") is False


def test_open_browser_lifecycle():
    playwright = MagicMock()
    browser = playwright.chromium.launch.return_value
    context = browser.new_context.return_value
    page = context.new_page.return_value

    with open_browser(playwright, headless=True, locale="en-GB",
                      user_agent=build_user_agent("130.0.6723.117")) as got:
        assert got is page

    playwright.chromium.launch.assert_called_once_with(headless=True, args=LAUNCH_ARGS)
    kwargs = browser.new_context.call_args.kwargs
    assert kwargs["viewport"] == VIEWPORT
    assert kwargs["locale"] == "en-GB"
    assert kwargs["extra_http_headers"]["Accept-Language"].startswith("en-GB")
    assert '"130"' in context.add_init_script.call_args[0][0]
    context.close.assert_called_once()
    browser.close.assert_called_once()


def test_open_browser_closes_on_error():
    playwright = MagicMock()
    browser = playwright.chromium.launch.return_value
    try:
        with open_browser(playwright, rng=random.Random(1)):
            raise RuntimeError("scrape blew up")
    except RuntimeError:
        pass
    browser.new_context.return_value.close.assert_called_once()
    browser.close.assert_called_once()
