"""Post and ScrapeResult records plus their envelope (camelCase JSON) form.

Both records are frozen: a Post is never mutated after it joins a batch and
a ScrapeResult is fixed once the orchestrator has built it.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(moment: datetime | None = None) -> str:
    """Format as ``2026-10-19T08:00:00.000Z``."""
    moment = moment or utc_now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Post:
    sequence_index: int
    permalink: str
    author: str = ""
    text: str = ""
    timestamp: str = ""
    reply_count: int = 0
    share_count: int = 0
    like_count: int = 0
    verified: bool = False
    media_count: int = 0
    extracted_at: str = ""

    def __post_init__(self):
        for name in ("reply_count", "share_count", "like_count", "media_count"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                object.__setattr__(self, name, max(0, int(value or 0)))

    @property
    def has_media(self) -> bool:
        return self.media_count > 0

    def to_dict(self) -> dict:
        return {
            "sequenceIndex": self.sequence_index,
            "author": self.author,
            "text": self.text,
            "permalink": self.permalink,
            "timestamp": self.timestamp,
            "replyCount": self.reply_count,
            "shareCount": self.share_count,
            "likeCount": self.like_count,
            "verified": self.verified,
            "hasMedia": self.has_media,
            "mediaCount": self.media_count,
            "extractedAt": self.extracted_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Post":
        """Build from the envelope form. Raises KeyError/TypeError/ValueError on bad input."""
        if not isinstance(data, dict):
            raise TypeError(f"post must be an object, got {type(data).__name__}")
        media_count = int(data.get("mediaCount", 0))
        if media_count == 0 and data.get("hasMedia"):
            media_count = 1
        return cls(
            sequence_index=int(data["sequenceIndex"]),
            permalink=str(data["permalink"]),
            author=str(data.get("author", "")),
            text=str(data.get("text", "")),
            timestamp=str(data.get("timestamp", "")),
            reply_count=int(data.get("replyCount", 0)),
            share_count=int(data.get("shareCount", 0)),
            like_count=int(data.get("likeCount", 0)),
            verified=bool(data.get("verified", False)),
            media_count=media_count,
            extracted_at=str(data.get("extractedAt", "")),
        )


@dataclass(frozen=True)
class ScrapeResult:
    success: bool
    url: str
    tweets: tuple[Post, ...] = ()
    error: str = ""
    error_kind: str = ""
    scraped_at: str = field(default_factory=iso_utc)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def tweets_count(self) -> int:
        return len(self.tweets)

    @classmethod
    def failure(cls, url: str, error: str, kind: str, metadata: dict | None = None) -> "ScrapeResult":
        return cls(success=False, url=url, error=error or kind, error_kind=kind,
                   metadata=dict(metadata or {}))

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "success": self.success,
            "url": self.url,
            "tweetsCount": self.tweets_count,
            "tweets": [t.to_dict() for t in self.tweets],
        }
        if not self.success:
            out["error"] = self.error
            if self.error_kind:
                out["errorKind"] = self.error_kind
        out["scrapedAt"] = self.scraped_at
        if self.metadata:
            out["metadata"] = self.metadata
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "ScrapeResult":
        if not isinstance(data, dict):
            raise TypeError(f"envelope must be an object, got {type(data).__name__}")
        success = data["success"]
        if not isinstance(success, bool):
            raise TypeError("'success' must be a boolean")
        raw_tweets = data.get("tweets", [])
        if not isinstance(raw_tweets, list):
            raise TypeError("'tweets' must be a list")
        tweets = tuple(Post.from_dict(t) for t in raw_tweets)
        count = data.get("tweetsCount", len(tweets))
        if count != len(tweets):
            raise ValueError(f"tweetsCount {count} does not match {len(tweets)} tweets")
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise TypeError("'metadata' must be an object")
        return cls(
            success=success,
            url=str(data.get("url", "")),
            tweets=tweets,
            error=str(data.get("error", "")) if not success else "",
            error_kind=str(data.get("errorKind", "")) if not success else "",
            scraped_at=str(data.get("scrapedAt", "")),
            metadata=metadata,
        )
