"""
SQLAlchemy models for bkm.

Defines the persisted schema for folders and bookmarks. Parent links are
plain foreign keys with ON DELETE CASCADE, so removing a folder row removes
its whole subtree inside the database engine.
"""
from typing import Optional
from sqlalchemy import (
    Integer, String, Text, Boolean, ForeignKey, Index
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from bkm.constants import MAX_TITLE_LENGTH, MAX_URL_LENGTH
from bkm.entities import Folder, Bookmark


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class FolderRow(Base):
    """
    Folder table.

    Attributes:
        id: Primary key, never reused (AUTOINCREMENT)
        title: Folder title
        parent_id: Parent folder, NULL for top-level folders
        child_folder_count: Cached number of folders whose parent is this row
    """
    __tablename__ = 'folder'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(MAX_TITLE_LENGTH), nullable=False)
    parent_id: Mapped[Optional[int]] = mapped_column(
        "parentFolderId",
        Integer,
        ForeignKey('folder.id', ondelete='CASCADE'),
        nullable=True
    )
    child_folder_count: Mapped[int] = mapped_column(
        "nbChildrenFolders", Integer, nullable=False, default=0
    )

    __table_args__ = (
        Index('ix_folder_parent_title', 'parentFolderId', 'title'),
        {'sqlite_autoincrement': True},
    )

    def to_entity(self, parent: Optional[Folder] = None) -> Folder:
        return Folder(
            id=self.id,
            title=self.title,
            parent_id=self.parent_id,
            child_folder_count=self.child_folder_count or 0,
            parent=parent,
        )

    def __repr__(self):
        return f"<FolderRow(id={self.id}, title='{self.title[:50]}', parent_id={self.parent_id})>"


class BookmarkRow(Base):
    """
    Bookmark table.

    Attributes:
        id: Primary key, never reused (AUTOINCREMENT)
        title: Bookmark title
        url: The bookmark URL
        favicon: Inline-encoded icon (data URI or bare base64), empty until enriched
        starred: Whether the bookmark is starred
        folder_id: Owning folder, NULL for root bookmarks
    """
    __tablename__ = 'bookmark'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(MAX_TITLE_LENGTH), nullable=False)
    url: Mapped[str] = mapped_column(String(MAX_URL_LENGTH), nullable=False)
    favicon: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default='')
    starred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    folder_id: Mapped[Optional[int]] = mapped_column(
        "folderId",
        Integer,
        ForeignKey('folder.id', ondelete='CASCADE'),
        nullable=True
    )

    __table_args__ = (
        Index('ix_bookmark_folder_title', 'folderId', 'title'),
        {'sqlite_autoincrement': True},
    )

    def to_entity(self, folder: Optional[Folder] = None) -> Bookmark:
        return Bookmark(
            id=self.id,
            title=self.title,
            url=self.url,
            favicon=self.favicon or "",
            starred=bool(self.starred),
            folder_id=self.folder_id,
            folder=folder,
        )

    def __repr__(self):
        return f"<BookmarkRow(id={self.id}, title='{self.title[:50]}', url='{self.url[:50]}')>"
