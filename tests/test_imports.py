"""Smoke tests: public modules are importable."""


def test_package_imports():
    import timeline_scraper
    from timeline_scraper import Post, ScrapeConfig, ScrapeResult, scrape_timeline
    assert timeline_scraper.__version__
    assert callable(scrape_timeline)
    assert Post and ScrapeConfig and ScrapeResult


def test_browser_imports():
    from timeline_scraper.browser import (
        open_browser,
        build_stealth_shim,
        install_stealth,
        build_user_agent,
        pick_user_agent,
    )
    assert callable(open_browser)
    assert callable(build_stealth_shim)
    assert callable(install_stealth)
    assert callable(build_user_agent)
    assert callable(pick_user_agent)


def test_human_imports():
    from timeline_scraper.human import drift_pointer, inertial_wheel, human_scroll
    assert callable(drift_pointer)
    assert callable(inertial_wheel)
    assert callable(human_scroll)


def test_telemetry_imports():
    from timeline_scraper.telemetry import ScrapeEventLogger
    assert callable(ScrapeEventLogger)


def test_engine_imports():
    from timeline_scraper.engine import LoadRetryController, ErrorKind, ScrapeError, extract_batch
    assert callable(LoadRetryController)
    assert callable(extract_batch)
    assert ErrorKind.NAVIGATION.value == "navigation"
    assert issubclass(ScrapeError, Exception)


def test_service_imports():
    from timeline_scraper.api import create_app
    from timeline_scraper.worker import WorkerPool, parse_envelope
    assert callable(create_app)
    assert callable(WorkerPool)
    assert callable(parse_envelope)
