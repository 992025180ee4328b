"""Tests for Post / ScrapeResult and the worker envelope."""
import json

import pytest

from timeline_scraper.engine.errors import EnvelopeParseError
from timeline_scraper.models import Post, ScrapeResult, iso_utc
from timeline_scraper.worker.envelope import encode_envelope, parse_envelope

from fakes import NOW


def _post(i, **kw):
    return Post(sequence_index=i, permalink=f"https://x.com/a/status/{i}", **kw)


def test_has_media_follows_media_count():
    assert _post(1, media_count=2).has_media
    assert not _post(1).has_media


def test_negative_counts_clamped():
    post = _post(1, like_count=-5, media_count=-1)
    assert post.like_count == 0
    assert post.media_count == 0


def test_post_dict_uses_envelope_names():
    d = _post(1, like_count=5).to_dict()
    assert d["sequenceIndex"] == 1
    assert d["likeCount"] == 5
    assert d["hasMedia"] is False
    assert set(d) == {
        "sequenceIndex", "author", "text", "permalink", "timestamp", "replyCount",
        "shareCount", "likeCount", "verified", "hasMedia", "mediaCount", "extractedAt",
    }


def test_tweets_count_matches_tweets():
    result = ScrapeResult(success=True, url="u", tweets=(_post(1), _post(2)))
    assert result.to_dict()["tweetsCount"] == 2


def test_success_envelope_has_no_error():
    d = ScrapeResult(success=True, url="u").to_dict()
    assert "error" not in d
    assert "metadata" not in d


def test_failure_envelope():
    d = ScrapeResult.failure("u", "Scraping timed out", "worker_timeout").to_dict()
    assert d["success"] is False
    assert d["error"] == "Scraping timed out"
    assert d["errorKind"] == "worker_timeout"
    assert d["tweets"] == []


def test_envelope_round_trip():
    original = ScrapeResult(
        success=True,
        url="https://twitter.com/alice",
        tweets=(_post(1, author="Alice", media_count=1), _post(2, text="second")),
        scraped_at=iso_utc(NOW),
        metadata={"attempts": 2, "recentCount": 1},
    )
    parsed = parse_envelope(encode_envelope(original))
    assert parsed == original
    assert list(parsed.to_dict()) == list(original.to_dict())


def test_parse_accepts_bytes():
    raw = encode_envelope(ScrapeResult(success=True, url="u")).encode()
    assert parse_envelope(raw).success


@pytest.mark.parametrize("raw", ["", "   \n", "{not json", '{"success": true}{"success": true}'])
def test_parse_rejects_unusable_output(raw):
    with pytest.raises(EnvelopeParseError):
        parse_envelope(raw)


def test_parse_rejects_wrong_shape():
    with pytest.raises(EnvelopeParseError):
        parse_envelope(json.dumps([1, 2, 3]))
    with pytest.raises(EnvelopeParseError):
        parse_envelope(json.dumps({"url": "u"}))


def test_parse_rejects_count_mismatch():
    doc = ScrapeResult(success=True, url="u", tweets=(_post(1),)).to_dict()
    doc["tweetsCount"] = 5
    with pytest.raises(EnvelopeParseError):
        parse_envelope(json.dumps(doc))


def test_iso_utc_format():
    assert iso_utc(NOW) == "2026-10-19T12:00:00.000Z"
