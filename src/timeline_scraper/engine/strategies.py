"""Per-field selector strategies.

Timeline markup is not stable across sessions, so each field is resolved
through an ordered list of (selector, attribute) strategies. The first
strategy that yields a non-empty value wins. ``attribute=None`` means the
element's rendered text.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldStrategy:
    selector: str
    attribute: str | None = None


# ── Default strategy table ──────────────────────────────────────────────────

AUTHOR = (
    FieldStrategy('[data-testid="User-Name"]'),
    FieldStrategy('[data-testid="User-Names"]'),
    FieldStrategy('a[role="link"][href^="/"] span'),
)

TEXT = (
    FieldStrategy('[data-testid="tweetText"]'),
    FieldStrategy("div[lang]"),
)

PERMALINK = (
    FieldStrategy('a[href*="/status/"]:has(time)', "href"),
    FieldStrategy('a[href*="/status/"]', "href"),
)

TIMESTAMP = (
    FieldStrategy("time", "datetime"),
    FieldStrategy("[datetime]", "datetime"),
)

REPLIES = (
    FieldStrategy('[data-testid="reply"]', "aria-label"),
    FieldStrategy('button[aria-label*="repl" i]', "aria-label"),
)

SHARES = (
    FieldStrategy('[data-testid="retweet"]', "aria-label"),
    FieldStrategy('[data-testid="unretweet"]', "aria-label"),
    FieldStrategy('button[aria-label*="repost" i]', "aria-label"),
)

LIKES = (
    FieldStrategy('[data-testid="like"]', "aria-label"),
    FieldStrategy('[data-testid="unlike"]', "aria-label"),
    FieldStrategy('button[aria-label*="like" i]', "aria-label"),
)

# Presence-only: any match means verified.
VERIFIED = (
    FieldStrategy('[data-testid="icon-verified"]'),
    FieldStrategy('svg[aria-label="Verified account"]'),
)

# Counted, not resolved: every match is one media item.
MEDIA = (
    FieldStrategy('[data-testid="tweetPhoto"]'),
    FieldStrategy('[data-testid="videoPlayer"]'),
)

SOCIAL_CONTEXT = (
    FieldStrategy('[data-testid="socialContext"]'),
)

DEFAULT_STRATEGIES: dict[str, tuple[FieldStrategy, ...]] = {
    "author": AUTHOR,
    "text": TEXT,
    "permalink": PERMALINK,
    "timestamp": TIMESTAMP,
    "replies": REPLIES,
    "shares": SHARES,
    "likes": LIKES,
    "verified": VERIFIED,
    "media": MEDIA,
    "social_context": SOCIAL_CONTEXT,
}


def with_overrides(**fields: tuple[FieldStrategy, ...]) -> dict[str, tuple[FieldStrategy, ...]]:
    """Copy of the default table with some fields replaced."""
    unknown = set(fields) - set(DEFAULT_STRATEGIES)
    if unknown:
        raise KeyError(f"Unknown strategy fields: {sorted(unknown)}")
    table = dict(DEFAULT_STRATEGIES)
    table.update(fields)
    return table
