"""Run the API server: ``python -m timeline_scraper``."""
import logging

from aiohttp import web

from .api.server import create_app
from .config import load_server_config
from .logging_setup import setup_logging
from .worker.pool import WorkerPool

log = logging.getLogger(__name__)


def main() -> None:
    config = load_server_config()
    setup_logging(config.log_level)
    pool = WorkerPool(timeout=config.worker_timeout, max_workers=config.max_workers)
    app = create_app(pool)
    log.info(f"Timeline Scraper API running on port {config.port}")
    log.info("Endpoints:")
    log.info("   GET  /                     - Health check")
    log.info("   POST /scrape               - Scrape with JSON body")
    log.info("   GET  /scrape/:username     - Scrape by username")
    web.run_app(app, host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
