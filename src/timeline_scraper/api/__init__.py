"""api — aiohttp routes in front of the worker pool."""
from .server import create_app, status_for  # noqa: F401
