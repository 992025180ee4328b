"""Browser session lifecycle for the scrape worker.

The engine never opens a browser; the worker opens one here, hands the page
to the controller and closes everything on the way out.
"""
import logging
import random
from contextlib import contextmanager
from typing import Any

from .stealth import install_stealth
from .ua import pick_user_agent, platform_for

log = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--window-size=1280,800",
]

VIEWPORT = {"width": 1280, "height": 800}


@contextmanager
def open_browser(
    playwright: Any,
    *,
    headless: bool = True,
    locale: str = "en-US",
    user_agent: str = "",
    rng: random.Random | None = None,
):
    """Launch bundled Chromium with a randomized desktop UA. Yields the page."""
    if user_agent:
        chrome_version = "131.0.0.0"
        if "Chrome/" in user_agent:
            chrome_version = user_agent.split("Chrome/")[1].split(" ")[0]
    else:
        user_agent, chrome_version = pick_user_agent(rng)

    log.info("Launching browser...")
    browser = playwright.chromium.launch(headless=headless, args=LAUNCH_ARGS)
    context = None
    try:
        context = browser.new_context(
            viewport=VIEWPORT,
            user_agent=user_agent,
            locale=locale,
            extra_http_headers={"Accept-Language": f"{locale},{locale.split('-')[0]};q=0.9"},
        )
        install_stealth(
            context, chrome_version,
            platform=platform_for(user_agent),
            languages=(locale, locale.split("-")[0]),
        )
        page = context.new_page()
        log.debug(f"Using user agent: {user_agent}")
        yield page
    finally:
        if context is not None:
            try:
                context.close()
            except Exception as e:
                log.warning(f"Failed to close browser context cleanly: {e}")
        try:
            browser.close()
        except Exception as e:
            log.warning(f"Failed to close browser cleanly: {e}")
        log.info("Browser closed")
