"""
Background favicon enrichment for bkm.

New bookmarks are handed to a bounded thread pool that fetches the site icon
and writes it back to the store. Each bookmark id is attempted at most once
per enricher; failures are logged and leave the favicon empty.
"""
import logging
import threading
import concurrent.futures
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Set

from bkm.db import Database
from bkm.entities import Bookmark
from bkm.errors import BkmError
from bkm.favicons import IconProvider, GoogleIconProvider, encode_favicon
from bkm.notify import NotificationHub, Notification, FAVICON_UPDATED
from bkm.config import get_config

logger = logging.getLogger(__name__)


class FaviconEnricher:
    """Fetch and store favicons out of band."""

    def __init__(
        self,
        db: Database,
        provider: Optional[IconProvider] = None,
        hub: Optional[NotificationHub] = None,
        max_workers: Optional[int] = None,
        legacy_encoding: Optional[bool] = None,
    ):
        """
        Initialize the enricher.

        Args:
            db: Store the favicons are written to
            provider: Icon source (defaults to GoogleIconProvider)
            hub: Receives a favicon_updated notification per stored icon
            max_workers: Pool size (defaults to the configured enrich_workers)
            legacy_encoding: Store bare base64 instead of data URIs
        """
        config = get_config()
        self.db = db
        self.provider = provider or GoogleIconProvider()
        self.hub = hub
        self.legacy_encoding = config.favicon_legacy_encoding if legacy_encoding is None else legacy_encoding
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or config.enrich_workers,
            thread_name_prefix="bkm-favicon",
        )
        self._lock = threading.Lock()
        self._attempted: Set[int] = set()
        self._futures: List[Future] = []
        self._closed = False
        self.succeeded = 0
        self.failed = 0

    @property
    def attempted(self) -> int:
        with self._lock:
            return len(self._attempted)

    def submit(self, bookmark: Bookmark) -> Optional[Future]:
        """
        Queue a bookmark for enrichment without waiting for it.

        Returns:
            The job's future, or None if the bookmark was already attempted
            or the enricher is shut down
        """
        with self._lock:
            if self._closed:
                logger.warning("Enricher is shut down, not fetching favicon for bookmark %s", bookmark.id)
                return None
            if bookmark.id in self._attempted:
                logger.debug("Favicon for bookmark %s already attempted", bookmark.id)
                return None
            self._attempted.add(bookmark.id)
            future = self._executor.submit(self._enrich, bookmark.id, bookmark.url)
            self._futures = [f for f in self._futures if not f.done()]
            self._futures.append(future)
            return future

    @property
    def pending(self) -> int:
        """Number of queued jobs that have not finished yet."""
        with self._lock:
            return sum(1 for f in self._futures if not f.done())

    def _enrich(self, bookmark_id: int, url: str) -> bool:
        try:
            icon = self.provider.fetch(url)
            favicon = encode_favicon(icon, legacy=self.legacy_encoding)
            self.db.update_bookmark_favicon(bookmark_id, favicon)
        except BkmError as e:
            logger.warning("Favicon for bookmark %s not updated: %s", bookmark_id, e.message)
            self._count(False)
            return False
        except Exception:
            logger.exception("Favicon for bookmark %s failed unexpectedly", bookmark_id)
            self._count(False)
            return False

        logger.debug("Stored favicon for bookmark %s (%s)", bookmark_id, icon.content_type)
        self._count(True)
        if self.hub is not None:
            self.hub.broadcast(Notification(
                event_type=FAVICON_UPDATED,
                entity_type="bookmark",
                entity_id=bookmark_id,
                data={"favicon": favicon},
            ))
        return True

    def _count(self, ok: bool):
        with self._lock:
            if ok:
                self.succeeded += 1
            else:
                self.failed += 1

    def enrich_missing(self) -> int:
        """
        Queue every bookmark of the store that has no favicon.

        Returns:
            Number of bookmarks queued
        """
        queued = sum(
            1 for bookmark in self.db.list_bookmarks_missing_favicon()
            if self.submit(bookmark) is not None
        )
        logger.info("Queued %d bookmarks for favicon enrichment", queued)
        return queued

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every queued job has finished.

        Returns:
            True if all jobs finished within the timeout
        """
        with self._lock:
            pending = [f for f in self._futures if not f.done()]
            self._futures = pending
        done, not_done = concurrent.futures.wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True):
        """Stop accepting jobs; optionally wait for running ones."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
