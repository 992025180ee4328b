"""Target URL validation and normalization."""
import re
from urllib.parse import urlsplit, urlunsplit

from .engine.errors import ValidationError

ALLOWED_HOSTS = {
    "twitter.com", "www.twitter.com", "mobile.twitter.com",
    "x.com", "www.x.com", "mobile.x.com",
}

PROFILE_ORIGIN = "https://x.com"

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{1,15}$")


def validate_target_url(url) -> str:
    """Return the stripped URL or raise ValidationError."""
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required")
    url = url.strip()
    candidate = url if "://" in url else f"https://{url}"
    parts = urlsplit(candidate)
    host = (parts.hostname or "").lower()
    if parts.scheme not in ("http", "https") or host not in ALLOWED_HOSTS:
        raise ValidationError("Invalid URL. Must be a Twitter/X profile URL")
    return url


def profile_url(username) -> str:
    """Profile URL for a bare username; raises ValidationError on bad names."""
    if not isinstance(username, str):
        raise ValidationError("Username is required")
    name = username.strip().lstrip("@")
    if not _USERNAME_RE.match(name):
        raise ValidationError(f"Invalid username: {username!r}")
    return f"{PROFILE_ORIGIN}/{name}"


def normalize_target(url: str) -> str:
    """https scheme, lowercase host, no fragment, no trailing slash."""
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate}"
    parts = urlsplit(candidate)
    path = parts.path.rstrip("/") or "/"
    return urlunsplit(("https", (parts.netloc or "").lower(), path, parts.query, ""))
