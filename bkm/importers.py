"""
Netscape bookmark file import for bkm.

Decodes a bookmark document into a sequence of store creates under a fresh
``import-YYYY-MM-DD`` folder. Folders are created as soon as their heading is
seen so their id is known before any of their content is reached.

The lenient HTML parser does not close ``<DT>`` and ``<p>`` tags, so a
folder's later siblings can end up nested inside the folder's ``<DT>``. The
walk therefore ties a folder's content to the ``<DL>`` list that follows its
``<H3>`` heading rather than to the enclosing ``<DT>``.
"""
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup, Tag

from bkm.db import Database
from bkm.errors import DecodeError
from bkm.constants import IMPORT_FOLDER_PREFIX, UNTITLED_FOLDER

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of one import."""
    folder_id: int
    folder_title: str
    folders: int = 0
    bookmarks: int = 0
    skipped: int = 0


def import_folder_title(today: Optional[date] = None) -> str:
    """Title of the wrapper folder an import creates, e.g. import-2024-05-01."""
    return f"{IMPORT_FOLDER_PREFIX}{(today or date.today()).isoformat()}"


def parse_document(data: bytes) -> BeautifulSoup:
    """
    Parse bookmark file bytes.

    Raises:
        DecodeError: If the bytes are not UTF-8 text or hold no bookmark list
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DecodeError(f"bookmark file is not valid UTF-8: {e.reason}") from e
    else:
        text = data

    soup = BeautifulSoup(text, "html.parser")
    if soup.find("dl") is None:
        raise DecodeError("not a Netscape bookmark file: no <DL> list found")
    return soup


def _in_dt(tag: Tag) -> bool:
    return tag.parent is not None and tag.parent.name == "dt"


def _import_bookmark(db: Database, anchor: Tag, parent_id: int, result: ImportResult) -> None:
    url = (anchor.get("href") or "").strip()
    if not url:
        logger.warning("Skipping link without HREF: %r", anchor.get_text()[:80])
        result.skipped += 1
        return

    title = anchor.get_text().strip() or url
    favicon = anchor.get("icon") or ""
    db.create_bookmark(url, title=title, folder_id=parent_id, favicon=favicon)
    result.bookmarks += 1


def _import_node(
    db: Database,
    node: Tag,
    parent_id: int,
    pending_folder_id: Optional[int],
    result: ImportResult,
) -> Optional[int]:
    """
    Import the children of ``node`` under ``parent_id``.

    Args:
        pending_folder_id: Folder created by the last heading whose <DL> has
            not been reached yet

    Returns:
        The folder still waiting for its <DL>, if any
    """
    for child in node.children:
        if not isinstance(child, Tag):
            continue

        if child.name == "h3" and _in_dt(child):
            title = child.get_text().strip() or UNTITLED_FOLDER
            pending_folder_id = db.create_folder(title, parent_id)
            result.folders += 1
        elif child.name == "a" and _in_dt(child):
            _import_bookmark(db, child, parent_id, result)
        elif child.name == "dl":
            target = pending_folder_id if pending_folder_id is not None else parent_id
            _import_node(db, child, target, None, result)
            pending_folder_id = None
        else:
            pending_folder_id = _import_node(db, child, parent_id, pending_folder_id, result)

    return pending_folder_id


def import_bytes(db: Database, data: bytes, today: Optional[date] = None) -> ImportResult:
    """
    Import a Netscape bookmark document.

    The import is not wrapped in a single transaction: a storage failure
    part way leaves the folders and bookmarks created so far in place.

    Args:
        db: Store to import into
        data: Raw file bytes
        today: Date used in the wrapper folder name (defaults to today)

    Returns:
        ImportResult with the wrapper folder id and created counts

    Raises:
        DecodeError: If the document cannot be parsed
        StorageError: If a create fails
    """
    soup = parse_document(data)

    title = import_folder_title(today)
    folder_id = db.create_folder(title)
    result = ImportResult(folder_id=folder_id, folder_title=title)

    _import_node(db, soup, folder_id, None, result)

    logger.info(
        "Imported %d folders and %d bookmarks into %s (skipped %d)",
        result.folders, result.bookmarks, title, result.skipped,
    )
    return result


def import_file(db: Database, path: Path, today: Optional[date] = None) -> ImportResult:
    """
    Import bookmarks from a file.

    Args:
        db: Store to import into
        path: Bookmark file path

    Returns:
        ImportResult
    """
    with open(path, "rb") as f:
        return import_bytes(db, f.read(), today)
