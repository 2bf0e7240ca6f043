from __future__ import annotations

from datetime import datetime

import pytest

from bizdays.errors import UpstreamFetchError
from bizdays.feeds import FEEDS, load_feed


def test_glen_eira_fetches_every_centre(fake_fetcher):
    feed = FEEDS["glen-eira"]
    payload = load_feed(feed, fetcher=fake_fetcher)

    assert sorted(fake_fetcher.calls) == sorted(feed.sources.values())
    assert set(payload) == {"timestamp", "carnegie", "gesac"}
    assert payload["carnegie"]["days"]["mon"]["timeSlots"]["06:00"] == 10
    assert payload["gesac"]["days"]["sat"]["date"] == "2025-01-18"


def test_feed_payload_is_timestamped(fake_fetcher):
    payload = load_feed(FEEDS["epa-vic"], fetcher=fake_fetcher)
    stamp = datetime.fromisoformat(payload["timestamp"])
    assert stamp.tzinfo is not None
    assert list(payload) == ["timestamp", "beachReport", "yarraWatch"]


def test_single_document_feeds_fetch_once(fake_fetcher):
    load_feed(FEEDS["stonnington"], fetcher=fake_fetcher)
    assert fake_fetcher.calls == [FEEDS["stonnington"].sources["page"]]


def test_one_failing_source_fails_the_feed(fake_fetcher):
    feed = FEEDS["glen-eira"]
    del fake_fetcher.documents[feed.sources["gesac"]]
    with pytest.raises(UpstreamFetchError, match="2c38d8a41"):
        load_feed(feed, fetcher=fake_fetcher)
