"""filtering — exclusion policy and recency checks for extracted posts."""
from .exclusion import exclusion_reason, EXCLUSION_REASONS  # noqa: F401
from .recency import parse_timestamp, age_days, is_stale, recent_count  # noqa: F401
