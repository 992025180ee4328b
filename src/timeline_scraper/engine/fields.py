"""Field extractor: one item container in, one normalized Post out.

Any failure while resolving a container's fields is raised as
ItemExtractionError; the page engine drops that one item and carries on.
"""
import logging
import re
from urllib.parse import urljoin, urlsplit

from ..container import Container
from ..models import Post
from .errors import ItemExtractionError
from .strategies import DEFAULT_STRATEGIES, FieldStrategy

log = logging.getLogger(__name__)

SITE_ORIGIN = "https://x.com"

_COUNT_RE = re.compile(r"\d{1,3}(?:,\d{3})+|\d+")
_STATUS_PATH_RE = re.compile(r"^/([^/]+)/status/(\d+)")


def parse_count(label: str | None) -> int:
    """Parse an engagement label such as ``"1,234 Likes"``.

    Takes the first comma-grouped digit run. Labels without digits parse to 0.
    """
    if not label:
        return 0
    m = _COUNT_RE.search(label)
    if not m:
        return 0
    return int(m.group(0).replace(",", ""))


def resolve_field(container: Container, strategies: tuple[FieldStrategy, ...]) -> str:
    """Return the first non-empty value produced by the strategies, else ''."""
    for strategy in strategies:
        if strategy.attribute is None:
            value = container.text(strategy.selector)
        else:
            value = container.attribute(strategy.selector, strategy.attribute)
        if value and value.strip():
            return value.strip()
    return ""


def normalize_permalink(href: str, origin: str = SITE_ORIGIN) -> str:
    """Absolute status URL with query, fragment and sub-paths removed."""
    if not href:
        return ""
    path = urlsplit(href).path
    m = _STATUS_PATH_RE.match(path)
    if m:
        return f"{origin}/{m.group(1)}/status/{m.group(2)}"
    parts = urlsplit(urljoin(origin + "/", href))
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


def _first_line(value: str) -> str:
    for line in value.splitlines():
        if line.strip():
            return line.strip()
    return ""


def is_pinned(container: Container, markers: tuple[str, ...],
              strategies: dict[str, tuple[FieldStrategy, ...]] = DEFAULT_STRATEGIES) -> bool:
    """True if the social-context marker names the item pinned/promoted."""
    context = resolve_field(container, strategies["social_context"]).lower()
    if not context:
        return False
    return any(marker.lower() in context for marker in markers)


def extract_post(container: Container,
                 strategies: dict[str, tuple[FieldStrategy, ...]] = DEFAULT_STRATEGIES,
                 *, extracted_at: str = "", origin: str = SITE_ORIGIN) -> Post:
    """Resolve every field of one container.

    The returned Post has ``sequence_index=0``; the page engine numbers
    accepted posts.
    """
    try:
        author = _first_line(resolve_field(container, strategies["author"]))
        text = resolve_field(container, strategies["text"])
        permalink = normalize_permalink(resolve_field(container, strategies["permalink"]), origin)
        timestamp = resolve_field(container, strategies["timestamp"])
        replies = parse_count(resolve_field(container, strategies["replies"]))
        shares = parse_count(resolve_field(container, strategies["shares"]))
        likes = parse_count(resolve_field(container, strategies["likes"]))
        verified = any(container.count(s.selector) > 0 for s in strategies["verified"])
        media_selector = ", ".join(s.selector for s in strategies["media"])
        media_count = container.count(media_selector) if media_selector else 0
    except Exception as e:
        raise ItemExtractionError(f"field extraction failed: {e}") from e

    return Post(
        sequence_index=0,
        permalink=permalink,
        author=author,
        text=text,
        timestamp=timestamp,
        reply_count=replies,
        share_count=shares,
        like_count=likes,
        verified=verified,
        media_count=media_count,
        extracted_at=extracted_at,
    )
