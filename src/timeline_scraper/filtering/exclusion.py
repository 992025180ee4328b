"""Exclusion policy: decide whether an extracted post joins the batch.

Exclusion is a policy decision, not a failure. Reasons are counted so the
worker can report what was dropped.
"""
import logging
from datetime import datetime

from ..config import ExtractionPolicy
from ..models import Post
from .recency import is_stale

log = logging.getLogger(__name__)

PINNED = "pinned"
MISSING_PERMALINK = "missing_permalink"
DUPLICATE = "duplicate"
STALE = "stale"

EXCLUSION_REASONS = (PINNED, MISSING_PERMALINK, DUPLICATE, STALE)


def exclusion_reason(post: Post, policy: ExtractionPolicy, seen_permalinks: set,
                     now: datetime) -> str | None:
    """Return why post must be dropped, or None to accept it.

    Pinned items are checked on the container before extraction; see
    engine.fields.is_pinned.
    """
    if not post.permalink:
        return MISSING_PERMALINK
    if post.permalink in seen_permalinks:
        return DUPLICATE
    if is_stale(post, policy.max_age_days, now):
        return STALE
    return None
