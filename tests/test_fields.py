"""Tests for the field extractor and engagement parsing."""
import pytest

from timeline_scraper.engine.errors import ItemExtractionError
from timeline_scraper.engine.fields import (
    extract_post,
    is_pinned,
    normalize_permalink,
    parse_count,
    resolve_field,
)
from timeline_scraper.engine.strategies import FieldStrategy, with_overrides

from fakes import FakeContainer, make_tweet, USER_NAME


def test_parse_count_grouped_digits():
    assert parse_count("1,234 Likes") == 1234
    assert parse_count("1,234,567 Likes. Like") == 1234567


def test_parse_count_plain_digits():
    assert parse_count("12345 reposts") == 12345
    assert parse_count("3 Replies. Reply") == 3


def test_parse_count_no_digits_is_zero():
    assert parse_count("Like") == 0
    assert parse_count("") == 0
    assert parse_count(None) == 0


def test_parse_count_takes_first_run():
    assert parse_count("12 replies, 40 likes") == 12


def test_resolve_field_falls_back_in_order():
    c = FakeContainer(texts={"div[lang]": "fallback text"})
    strategies = (FieldStrategy('[data-testid="tweetText"]'), FieldStrategy("div[lang]"))
    assert resolve_field(c, strategies) == "fallback text"


def test_resolve_field_skips_blank_matches():
    c = FakeContainer(attrs={("a", "href"): "   ", ("b", "href"): "/x"})
    strategies = (FieldStrategy("a", "href"), FieldStrategy("b", "href"))
    assert resolve_field(c, strategies) == "/x"


def test_resolve_field_nothing_matches():
    assert resolve_field(FakeContainer(), (FieldStrategy("a"),)) == ""


def test_normalize_permalink_relative_and_suffix():
    assert normalize_permalink("/alice/status/42") == "https://x.com/alice/status/42"
    assert normalize_permalink("/alice/status/42/analytics") == "https://x.com/alice/status/42"
    assert normalize_permalink("https://twitter.com/alice/status/42?s=20#top") == \
        "https://x.com/alice/status/42"
    assert normalize_permalink("") == ""


def test_extract_post_fields():
    post = extract_post(make_tweet("42", verified=True, photos=2), extracted_at="now")
    assert post.sequence_index == 0
    assert post.author == "Alice"
    assert post.text == "hello world"
    assert post.permalink == "https://x.com/alice/status/42"
    assert post.like_count == 1234
    assert post.reply_count == 3
    assert post.share_count == 12
    assert post.verified is True
    assert post.media_count == 2
    assert post.has_media is True
    assert post.extracted_at == "now"


def test_extract_post_media_only_post():
    c = make_tweet("7", text="", photos=1)
    post = extract_post(c)
    assert post.text == ""
    assert post.has_media


def test_extract_post_unparsable_counts_default_zero():
    post = extract_post(make_tweet("8", likes="Like"))
    assert post.like_count == 0


def test_extract_post_wraps_errors():
    c = make_tweet("9", raises=RuntimeError("element detached"))
    with pytest.raises(ItemExtractionError) as exc:
        extract_post(c)
    assert "element detached" in str(exc.value)


def test_extract_post_with_override_strategy():
    table = with_overrides(author=(FieldStrategy('[data-testid="Author"]'),))
    c = make_tweet("10")
    c.texts['[data-testid="Author"]'] = "Bob"
    assert extract_post(c, table).author == "Bob"
    assert extract_post(c).author == "Alice"


def test_with_overrides_rejects_unknown_field():
    with pytest.raises(KeyError):
        with_overrides(nonsense=())


def test_is_pinned_marker():
    assert is_pinned(make_tweet("1", pinned=True), ("pinned",))
    assert not is_pinned(make_tweet("1"), ("pinned",))


def test_is_pinned_ignores_other_social_context():
    c = make_tweet("1")
    c.texts['[data-testid="socialContext"]'] = "Bob reposted"
    assert not is_pinned(c, ("pinned", "promoted"))


def test_author_first_line_only():
    c = FakeContainer(texts={USER_NAME: "\n  Carol  \n@carol"})
    assert extract_post(c).author == "Carol"
