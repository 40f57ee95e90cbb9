"""
bkm - hierarchical bookmark manager

Bookmarks and folders kept in a strict tree on top of SQLAlchemy, with
Netscape bookmark file import/export and background favicon retrieval.

Example Usage:
    >>> from bkm import Database, walk_root, export_tree
    >>> db = Database("bookmarks.db")
    >>> it = db.create_folder("IT")
    >>> db.create_bookmark("https://golang.org/", "GoLang", it)
    >>> print(export_tree(walk_root(db)))
"""

__version__ = "1.0.0"
__author__ = "bkm Contributors"

# Core database API
from bkm.db import Database, get_db

# Configuration
from bkm.config import BkmConfig, get_config, init_config

# Entities
from bkm.entities import Folder, Bookmark

# Errors
from bkm.errors import (
    BkmError,
    ValidationError,
    CycleError,
    NotFoundError,
    DecodeError,
    FaviconError,
    StorageError,
    error_response,
)

# Tree walking and Import/Export
from bkm.walker import TreeNode, walk, walk_root
from bkm.exporters import export_tree, export_bytes, export_file
from bkm.importers import ImportResult, import_bytes, import_file

# Favicons, notifications, service
from bkm.favicons import Icon, GoogleIconProvider, encode_favicon, decode_favicon
from bkm.enrichment import FaviconEnricher
from bkm.notify import Notification, NotificationHub
from bkm.service import BookmarkService

__all__ = [
    "Database",
    "get_db",
    "BkmConfig",
    "get_config",
    "init_config",
    "Folder",
    "Bookmark",
    "BkmError",
    "ValidationError",
    "CycleError",
    "NotFoundError",
    "DecodeError",
    "FaviconError",
    "StorageError",
    "error_response",
    "TreeNode",
    "walk",
    "walk_root",
    "export_tree",
    "export_bytes",
    "export_file",
    "ImportResult",
    "import_bytes",
    "import_file",
    "Icon",
    "GoogleIconProvider",
    "encode_favicon",
    "decode_favicon",
    "FaviconEnricher",
    "Notification",
    "NotificationHub",
    "BookmarkService",
]
