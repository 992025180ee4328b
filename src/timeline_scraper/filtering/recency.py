"""Timestamp parsing and age checks for the recency policy."""
import logging
from datetime import datetime, timedelta, timezone

from ..models import Post

log = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed). None if unparseable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def age_days(post: Post, now: datetime) -> float | None:
    """Age of the post in days, or None when its timestamp is unknown."""
    moment = parse_timestamp(post.timestamp)
    if moment is None:
        return None
    return (now - moment) / timedelta(days=1)


def is_stale(post: Post, max_age_days: float | None, now: datetime) -> bool:
    """True if the post is older than the cutoff. Unknown age -> benefit of doubt."""
    if max_age_days is None:
        return False
    age = age_days(post, now)
    return age is not None and age > max_age_days


def recent_count(posts, window_days: float, now: datetime) -> int:
    """Count posts with a known timestamp inside the recent window."""
    n = 0
    for p in posts:
        age = age_days(p, now)
        if age is not None and age <= window_days:
            n += 1
    return n
