"""
Tests for bkm/enrichment.py

Tests background favicon enrichment with a fake icon provider: stored
values, at-most-once attempts, failure tolerance and notifications.
"""
import concurrent.futures

import pytest

from bkm.entities import Bookmark
from bkm.enrichment import FaviconEnricher
from bkm.favicons import encode_favicon
from bkm.notify import NotificationHub, FAVICON_UPDATED


@pytest.fixture
def enricher(db, icon_provider):
    enricher = FaviconEnricher(db, provider=icon_provider, max_workers=2)
    yield enricher
    enricher.shutdown()


class TestSubmit:
    """Test enrichment of single bookmarks."""

    def test_stores_favicon(self, db, enricher, icon_provider):
        bookmark_id = db.create_bookmark("https://golang.org/", "GoLang")

        future = enricher.submit(db.get_bookmark(bookmark_id))
        assert future is not None
        assert enricher.wait(timeout=10)

        assert db.get_bookmark(bookmark_id).favicon == encode_favicon(icon_provider.icon)
        assert icon_provider.calls == ["https://golang.org/"]
        assert enricher.succeeded == 1

    def test_at_most_once_per_bookmark(self, db, enricher, icon_provider):
        bookmark = db.get_bookmark(db.create_bookmark("https://a.test"))

        assert enricher.submit(bookmark) is not None
        assert enricher.submit(bookmark) is None
        enricher.wait(timeout=10)

        assert len(icon_provider.calls) == 1
        assert enricher.attempted == 1

    def test_no_retry_after_failure(self, db, enricher, icon_provider):
        bookmark = db.get_bookmark(db.create_bookmark("https://fail.test"))

        enricher.submit(bookmark)
        enricher.wait(timeout=10)
        assert enricher.submit(bookmark) is None

        assert db.get_bookmark(bookmark.id).favicon == ""
        assert enricher.failed == 1
        assert len(icon_provider.calls) == 1

    def test_unexpected_provider_error(self, db, enricher):
        bookmark = db.get_bookmark(db.create_bookmark("https://crash.test"))

        enricher.submit(bookmark)
        enricher.wait(timeout=10)

        assert db.get_bookmark(bookmark.id).favicon == ""
        assert enricher.failed == 1

    def test_deleted_bookmark(self, enricher):
        enricher.submit(Bookmark(id=999, title="Gone", url="https://gone.test"))
        enricher.wait(timeout=10)

        assert enricher.failed == 1
        assert enricher.succeeded == 0

    def test_legacy_encoding(self, db, icon_provider):
        bookmark = db.get_bookmark(db.create_bookmark("https://a.test"))

        with FaviconEnricher(db, provider=icon_provider, legacy_encoding=True) as enricher:
            enricher.submit(bookmark)
            enricher.wait(timeout=10)

        assert db.get_bookmark(bookmark.id).favicon == encode_favicon(icon_provider.icon, legacy=True)

    def test_submit_after_shutdown(self, db, icon_provider):
        enricher = FaviconEnricher(db, provider=icon_provider)
        enricher.shutdown()

        bookmark = db.get_bookmark(db.create_bookmark("https://a.test"))
        assert enricher.submit(bookmark) is None
        assert icon_provider.calls == []

    def test_finished_jobs_are_released(self, db, enricher):
        futures = [
            enricher.submit(db.get_bookmark(db.create_bookmark(f"https://site{i}.test")))
            for i in range(5)
        ]
        concurrent.futures.wait(futures, timeout=10)
        assert enricher.pending == 0

        enricher.submit(db.get_bookmark(db.create_bookmark("https://last.test")))
        assert len(enricher._futures) <= 1


class TestEnrichMissing:
    """Test the sweep over bookmarks without favicons."""

    def test_enrich_missing(self, db, enricher, icon_provider):
        db.create_bookmark("https://a.test", "A")
        db.create_bookmark("https://b.test", "B")
        db.create_bookmark("https://c.test", "C", favicon="data:image/png;base64,AAAA")

        assert enricher.enrich_missing() == 2
        enricher.wait(timeout=10)

        assert sorted(icon_provider.calls) == ["https://a.test", "https://b.test"]
        assert db.list_bookmarks_missing_favicon() == []

    def test_enrich_missing_skips_attempted(self, db, enricher):
        db.create_bookmark("https://fail.test", "Broken")

        assert enricher.enrich_missing() == 1
        enricher.wait(timeout=10)
        assert enricher.enrich_missing() == 0


class TestNotifications:
    """Test favicon_updated notifications."""

    def test_publishes_favicon_updated(self, db, icon_provider):
        hub = NotificationHub()
        notes = hub.subscribe("ui")
        bookmark = db.get_bookmark(db.create_bookmark("https://a.test"))

        with FaviconEnricher(db, provider=icon_provider, hub=hub) as enricher:
            enricher.submit(bookmark)
            enricher.wait(timeout=10)

        note = notes.get_nowait()
        assert note.event_type == FAVICON_UPDATED
        assert note.entity_id == bookmark.id
        assert note.data["favicon"] == encode_favicon(icon_provider.icon)

    def test_no_notification_on_failure(self, db, icon_provider):
        hub = NotificationHub()
        notes = hub.subscribe("ui")
        bookmark = db.get_bookmark(db.create_bookmark("https://fail.test"))

        with FaviconEnricher(db, provider=icon_provider, hub=hub) as enricher:
            enricher.submit(bookmark)
            enricher.wait(timeout=10)

        assert notes.empty()
