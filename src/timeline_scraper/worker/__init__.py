"""worker — the scrape worker process and the pool that runs it."""
from .envelope import encode_envelope, parse_envelope  # noqa: F401
from .pool import WorkerPool  # noqa: F401
