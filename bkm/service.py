"""
Bookmark operations as exposed to clients.

BookmarkService ties the store, the codec, favicon enrichment and change
notifications together. An HTTP or websocket layer only has to translate
requests into these calls and errors through ``bkm.errors.error_response``.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from bkm.db import Database, get_db
from bkm.entities import Folder, Bookmark
from bkm.errors import NotFoundError
from bkm.enrichment import FaviconEnricher
from bkm.favicons import IconProvider
from bkm import exporters, importers
from bkm.importers import ImportResult
from bkm.notify import (
    NotificationHub,
    Notification,
    BOOKMARK_ADDED,
    BOOKMARK_RENAMED,
    BOOKMARK_STARRED,
    BOOKMARK_UNSTARRED,
    BOOKMARK_MOVED,
    BOOKMARK_DELETED,
    FOLDER_ADDED,
    FOLDER_RENAMED,
    FOLDER_MOVED,
    FOLDER_DELETED,
    IMPORT_COMPLETED,
)

logger = logging.getLogger(__name__)


@dataclass
class FolderContents:
    """Direct children of a folder (or of the root when folder is None)."""
    folder: Optional[Folder]
    folders: List[Folder] = field(default_factory=list)
    bookmarks: List[Bookmark] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "folder": self.folder.to_dict() if self.folder else None,
            "folders": [f.to_dict() for f in self.folders],
            "bookmarks": [b.to_dict() for b in self.bookmarks],
        }


class BookmarkService:
    """Client-facing bookmark and folder operations."""

    def __init__(
        self,
        db: Optional[Database] = None,
        hub: Optional[NotificationHub] = None,
        enricher: Optional[FaviconEnricher] = None,
        provider: Optional[IconProvider] = None,
        enrich: bool = True,
    ):
        """
        Initialize the service.

        Args:
            db: Store (defaults to the shared get_db() instance)
            hub: Notification hub (a private one is created if omitted)
            enricher: Favicon enricher to dispatch new bookmarks to
            provider: Icon provider for the default enricher
            enrich: Fetch favicons for new bookmarks
        """
        self.db = db or get_db()
        self.hub = hub or NotificationHub()
        if enricher is None and enrich:
            enricher = FaviconEnricher(self.db, provider=provider, hub=self.hub)
        self.enricher = enricher

    def _notify(self, event_type: str, entity_type: str, entity_id: Optional[int], **data):
        self.hub.broadcast(Notification(event_type, entity_type, entity_id, data))

    # Reads

    def children(self, folder_id: Optional[int] = None) -> FolderContents:
        """
        List the child folders and bookmarks of a folder, or of the root.

        Raises:
            NotFoundError: If the folder does not exist
        """
        folder = self.get_folder(folder_id) if folder_id else None
        return FolderContents(
            folder=folder,
            folders=self.db.list_child_folders(folder_id),
            bookmarks=self.db.list_folder_bookmarks(folder_id),
        )

    def get_folder(self, folder_id: int) -> Folder:
        folder = self.db.get_folder(folder_id)
        if folder is None:
            raise NotFoundError("folder", folder_id)
        return folder

    def get_bookmark(self, bookmark_id: int) -> Bookmark:
        bookmark = self.db.get_bookmark(bookmark_id)
        if bookmark is None:
            raise NotFoundError("bookmark", bookmark_id)
        return bookmark

    def search(self, term: str) -> List[Bookmark]:
        return self.db.search_bookmarks(term)

    def starred(self) -> List[Bookmark]:
        return self.db.list_starred_bookmarks()

    # Folder mutations

    def add_folder(self, title: str, parent_id: Optional[int] = None) -> Folder:
        folder_id = self.db.create_folder(title, parent_id)
        folder = self.get_folder(folder_id)
        self._notify(FOLDER_ADDED, "folder", folder_id, title=folder.title, parent_id=folder.parent_id)
        return folder

    def rename_folder(self, folder_id: int, title: str) -> Folder:
        self.db.rename_folder(folder_id, title)
        self._notify(FOLDER_RENAMED, "folder", folder_id, title=title)
        return self.get_folder(folder_id)

    def move_folder(self, folder_id: int, parent_id: Optional[int] = None) -> Folder:
        self.db.move_folder(folder_id, parent_id)
        folder = self.get_folder(folder_id)
        self._notify(FOLDER_MOVED, "folder", folder_id, parent_id=folder.parent_id)
        return folder

    def delete_folder(self, folder_id: int) -> None:
        self.db.delete_folder(folder_id)
        self._notify(FOLDER_DELETED, "folder", folder_id)

    # Bookmark mutations

    def add_bookmark(
        self,
        url: str,
        title: Optional[str] = None,
        folder_id: Optional[int] = None,
        starred: bool = False,
    ) -> Bookmark:
        """
        Create a bookmark and queue its favicon for retrieval.

        The favicon is fetched in the background; the returned bookmark has
        an empty favicon and a favicon_updated notification follows once it
        is stored.
        """
        bookmark_id = self.db.create_bookmark(url, title=title, folder_id=folder_id, starred=starred)
        bookmark = self.get_bookmark(bookmark_id)
        self._notify(
            BOOKMARK_ADDED, "bookmark", bookmark_id,
            title=bookmark.title, url=bookmark.url, folder_id=bookmark.folder_id,
        )
        if self.enricher is not None:
            self.enricher.submit(bookmark)
        return bookmark

    def rename_bookmark(self, bookmark_id: int, title: str) -> Bookmark:
        self.db.rename_bookmark(bookmark_id, title)
        self._notify(BOOKMARK_RENAMED, "bookmark", bookmark_id, title=title)
        return self.get_bookmark(bookmark_id)

    def move_bookmark(self, bookmark_id: int, folder_id: Optional[int] = None) -> Bookmark:
        self.db.move_bookmark(bookmark_id, folder_id)
        bookmark = self.get_bookmark(bookmark_id)
        self._notify(BOOKMARK_MOVED, "bookmark", bookmark_id, folder_id=bookmark.folder_id)
        return bookmark

    def star(self, bookmark_id: int, starred: bool = True) -> Bookmark:
        self.db.star_bookmark(bookmark_id, starred)
        self._notify(BOOKMARK_STARRED if starred else BOOKMARK_UNSTARRED, "bookmark", bookmark_id)
        return self.get_bookmark(bookmark_id)

    def delete_bookmark(self, bookmark_id: int) -> None:
        self.db.delete_bookmark(bookmark_id)
        self._notify(BOOKMARK_DELETED, "bookmark", bookmark_id)

    # Import / export

    def export_bytes(self, folder_id: Optional[int] = None, title: Optional[str] = None) -> bytes:
        return exporters.export_bytes(self.db, folder_id, title)

    def import_bytes(self, data: bytes, today: Optional[date] = None) -> ImportResult:
        result = importers.import_bytes(self.db, data, today)
        self._notify(
            IMPORT_COMPLETED, "import", result.folder_id,
            title=result.folder_title, folders=result.folders, bookmarks=result.bookmarks,
        )
        return result

    # Enrichment

    def enrich_missing(self) -> int:
        """Queue every bookmark without a favicon; returns how many were queued."""
        if self.enricher is None:
            return 0
        return self.enricher.enrich_missing()

    def close(self, wait: bool = True):
        if self.enricher is not None:
            self.enricher.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
