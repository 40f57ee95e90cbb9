"""
Netscape bookmark file export for bkm.

Encodes a tree snapshot into the HTML-based bookmark format that browsers
import. The document header is fixed so that earlier exports stay
recognizable byte for byte.
"""
import html
import logging
from pathlib import Path
from typing import List, Optional

from bkm.db import Database
from bkm.walker import TreeNode, walk, walk_root
from bkm.entities import Bookmark
from bkm.constants import DEFAULT_EXPORT_TITLE
from bkm.config import get_config

logger = logging.getLogger(__name__)

HEADER_TEMPLATE = """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<!-- This is an automatically generated file.
     It will be read and overwritten.
     DO NOT EDIT! -->
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>{title}</TITLE>
<H1>{title}</H1>
<DL><p>
"""

FOOTER = "</DL><p>\n"

INDENT = "\t"


def header(title: str = DEFAULT_EXPORT_TITLE) -> str:
    """The fixed document header, up to and including the outer list."""
    return HEADER_TEMPLATE.format(title=html.escape(title, quote=False))


def _text(value: str) -> str:
    return html.escape(value or "", quote=False)


def _attr(value: str) -> str:
    return html.escape(value or "", quote=True)


def _bookmark_line(bookmark: Bookmark, depth: int) -> str:
    return (
        f'{INDENT * depth}<DT><A HREF="{_attr(bookmark.url)}" '
        f'ICON="{_attr(bookmark.favicon)}">{_text(bookmark.title)}</A>'
    )


def _write_contents(node: TreeNode, lines: List[str], depth: int) -> None:
    """Child folders first, depth first, then the node's own bookmarks."""
    for child in node.children:
        _write_folder(child, lines, depth)
    for bookmark in node.bookmarks:
        lines.append(_bookmark_line(bookmark, depth))


def _write_folder(node: TreeNode, lines: List[str], depth: int) -> None:
    indent = INDENT * depth
    lines.append(f"{indent}<DT><H3>{_text(node.folder.title)}</H3>")
    lines.append(f"{indent}<DL><p>")
    _write_contents(node, lines, depth + 1)
    lines.append(f"{indent}</DL><p>")


def export_tree(node: TreeNode, title: str = DEFAULT_EXPORT_TITLE) -> str:
    """
    Encode a tree snapshot as a Netscape bookmark document.

    Args:
        node: Snapshot from walk() or walk_root(). A folder node is written as
            the single top-level folder; the virtual root node writes its
            folders and bookmarks directly into the outer list.
        title: Document title and heading

    Returns:
        The complete document
    """
    lines: List[str] = []
    if node.folder is None:
        _write_contents(node, lines, 1)
    else:
        _write_folder(node, lines, 1)

    body = "\n".join(lines)
    if body:
        body += "\n"
    return header(title) + body + FOOTER


def export_bytes(db: Database, folder_id: Optional[int] = None, title: Optional[str] = None) -> bytes:
    """
    Export the store, or one folder subtree, as UTF-8 encoded bytes.

    Args:
        db: Store to export
        folder_id: Folder to export; the whole store when 0/None
        title: Document title (defaults to the configured export title)

    Returns:
        Document bytes
    """
    node = walk(db, folder_id) if folder_id else walk_root(db)
    document = export_tree(node, title or get_config().export_title)
    logger.info(
        "Exported %d folders and %d bookmarks",
        node.folder_count(),
        node.bookmark_count(),
    )
    return document.encode("utf-8")


def export_file(db: Database, path: Path, folder_id: Optional[int] = None, title: Optional[str] = None) -> Path:
    """
    Export to a file.

    Args:
        db: Store to export
        path: Output file path
        folder_id: Folder to export; the whole store when 0/None
        title: Document title

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = export_bytes(db, folder_id, title)
    with open(path, "wb") as f:
        f.write(data)
    return path
