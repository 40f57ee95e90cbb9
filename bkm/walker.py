"""
Tree walker for bkm.

Builds read-only snapshots of a folder subtree by querying the store one
folder at a time: one query for the child folders and one for the bookmarks
of every visited folder. Traversal is depth-first and pre-order, with
siblings in title order as returned by the store.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

from bkm.db import Database
from bkm.entities import Folder, Bookmark
from bkm.errors import CycleError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class TreeNode:
    """
    Snapshot of one folder and everything below it.

    ``folder`` is None for the virtual node that holds the top-level folders
    and the root bookmarks of the store.
    """
    folder: Optional[Folder]
    bookmarks: List[Bookmark] = field(default_factory=list)
    children: List["TreeNode"] = field(default_factory=list)

    @property
    def title(self) -> Optional[str]:
        return self.folder.title if self.folder else None

    def folder_count(self) -> int:
        """Number of folders in this subtree, the node's own folder included."""
        own = 1 if self.folder else 0
        return own + sum(child.folder_count() for child in self.children)

    def bookmark_count(self) -> int:
        """Number of bookmarks in this subtree."""
        return len(self.bookmarks) + sum(child.bookmark_count() for child in self.children)


def _walk(db: Database, folder: Optional[Folder], depth: int, max_depth: int, seen: Set[int]) -> TreeNode:
    folder_id = folder.id if folder else None
    if folder_id is not None:
        if folder_id in seen:
            raise CycleError(f"folder {folder_id} visited twice while walking the tree")
        seen.add(folder_id)
    if depth > max_depth:
        raise CycleError(f"folder tree deeper than {max_depth} levels")

    node = TreeNode(folder=folder)
    for child in db.list_child_folders(folder_id):
        node.children.append(_walk(db, child, depth + 1, max_depth, seen))
    node.bookmarks = db.list_folder_bookmarks(folder_id)
    return node


def walk(db: Database, folder, max_depth: Optional[int] = None) -> TreeNode:
    """
    Snapshot the subtree rooted at ``folder``.

    Args:
        db: Store to read from
        folder: Folder entity or folder id
        max_depth: Maximum nesting below ``folder`` (defaults to the store's limit)

    Returns:
        TreeNode for the folder

    Raises:
        NotFoundError: If the folder does not exist
        CycleError: If the stored tree revisits a folder or exceeds max_depth
    """
    if not isinstance(folder, Folder):
        folder_id = folder
        folder = db.get_folder(folder_id)
        if folder is None:
            raise NotFoundError("folder", folder_id)
    logger.debug("walk folder=%s", folder.id)
    return _walk(db, folder, 0, max_depth or db.max_depth, set())


def walk_root(db: Database, max_depth: Optional[int] = None) -> TreeNode:
    """
    Snapshot the whole store.

    Returns:
        A virtual TreeNode (folder=None) whose children are the top-level
        folders and whose bookmarks are the root bookmarks
    """
    logger.debug("walk root")
    return _walk(db, None, 0, max_depth or db.max_depth, set())


def iter_nodes(node: TreeNode, depth: int = 0) -> Iterator[Tuple[int, TreeNode]]:
    """Yield (depth, node) pairs in depth-first pre-order."""
    yield depth, node
    for child in node.children:
        yield from iter_nodes(child, depth + 1)


def flatten_bookmarks(node: TreeNode) -> List[Tuple[Tuple[str, ...], Bookmark]]:
    """
    List every bookmark of a snapshot with the folder titles leading to it.

    Returns:
        (folder title path, bookmark) pairs in traversal order
    """
    result = []

    def visit(current: TreeNode, path: Tuple[str, ...]):
        if current.folder is not None:
            path = path + (current.folder.title,)
        for child in current.children:
            visit(child, path)
        for bookmark in current.bookmarks:
            result.append((path, bookmark))

    visit(node, ())
    return result
