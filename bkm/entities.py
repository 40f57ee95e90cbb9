"""
Value types handed out by the store.

Folders and bookmarks reference their parents by id. The resolved ``parent``
and ``folder`` fields are only filled in by the single-item lookups
(``Database.get_folder`` / ``Database.get_bookmark``); list queries leave them
unset so callers never hold live handles into the store.
"""
from dataclasses import dataclass
from typing import Optional, List


@dataclass(frozen=True)
class Folder:
    """A named tree node that can contain bookmarks and child folders."""
    id: int
    title: str
    parent_id: Optional[int] = None
    child_folder_count: int = 0
    parent: Optional["Folder"] = None

    @property
    def is_root_level(self) -> bool:
        return self.parent_id is None

    def path(self) -> List["Folder"]:
        """Resolved ancestors from the top-level folder down to this one."""
        chain = []
        node: Optional[Folder] = self
        while node is not None:
            chain.append(node)
            node = node.parent
        chain.reverse()
        return chain

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "parent_id": self.parent_id,
            "child_folder_count": self.child_folder_count,
        }


@dataclass(frozen=True)
class Bookmark:
    """A titled URL, optionally owned by a folder."""
    id: int
    title: str
    url: str
    favicon: str = ""
    starred: bool = False
    folder_id: Optional[int] = None
    folder: Optional[Folder] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "favicon": self.favicon,
            "starred": self.starred,
            "folder_id": self.folder_id,
        }
