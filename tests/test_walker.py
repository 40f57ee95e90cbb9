"""
Tests for bkm/walker.py

Tests tree snapshots: structure, ordering, counts, traversal helpers and
the guards against corrupted (cyclic or too deep) trees.
"""
import pytest

from bkm.models import FolderRow
from bkm.walker import walk, walk_root, iter_nodes, flatten_bookmarks
from bkm.errors import NotFoundError, CycleError


class TestWalk:
    """Test folder subtree snapshots."""

    def test_walk_folder(self, db, sample_tree):
        node = walk(db, sample_tree["it"])

        assert node.title == "IT"
        assert [c.title for c in node.children] == ["Development"]
        assert [b.title for b in node.bookmarks] == ["Wiki"]
        assert [b.title for b in node.children[0].bookmarks] == ["GoLang"]
        assert node.children[0].children == []

    def test_walk_accepts_folder_entity(self, db, sample_tree):
        folder = db.get_folder(sample_tree["dev"])
        assert walk(db, folder).title == "Development"

    def test_walk_missing_folder(self, db):
        with pytest.raises(NotFoundError):
            walk(db, 42)

    def test_children_in_title_order(self, db):
        parent = db.create_folder("Parent")
        for title in ["Charlie", "Alpha", "Bravo"]:
            db.create_folder(title, parent)

        assert [c.title for c in walk(db, parent).children] == ["Alpha", "Bravo", "Charlie"]

    def test_counts(self, db, sample_tree):
        node = walk(db, sample_tree["it"])
        assert node.folder_count() == 2
        assert node.bookmark_count() == 2


class TestWalkRoot:
    """Test whole-store snapshots."""

    def test_walk_root(self, db, sample_tree):
        root = walk_root(db)

        assert root.folder is None
        assert root.title is None
        assert [c.title for c in root.children] == ["IT"]
        assert [b.title for b in root.bookmarks] == ["Python"]
        assert root.folder_count() == 2
        assert root.bookmark_count() == 3

    def test_walk_empty_store(self, db):
        root = walk_root(db)
        assert root.children == []
        assert root.bookmarks == []


class TestTraversal:
    """Test traversal helpers."""

    def test_iter_nodes_pre_order(self, db, sample_tree):
        other = db.create_folder("Other")
        db.create_folder("Nested", other)

        visited = [(depth, node.title) for depth, node in iter_nodes(walk_root(db))]
        assert visited == [
            (0, None),
            (1, "IT"),
            (2, "Development"),
            (1, "Other"),
            (2, "Nested"),
        ]

    def test_flatten_bookmarks(self, db, sample_tree):
        flat = [(path, b.title) for path, b in flatten_bookmarks(walk_root(db))]
        assert flat == [
            (("IT", "Development"), "GoLang"),
            (("IT",), "Wiki"),
            ((), "Python"),
        ]


class TestGuards:
    """Test cycle and depth guards."""

    def test_max_depth(self, db):
        a = db.create_folder("A")
        b = db.create_folder("B", a)
        db.create_folder("C", b)

        assert walk(db, a, max_depth=2).folder_count() == 3
        with pytest.raises(CycleError):
            walk(db, a, max_depth=1)

    def test_corrupted_cycle(self, db, sample_tree):
        with db.session() as session:
            session.get(FolderRow, sample_tree["it"]).parent_id = sample_tree["dev"]

        with pytest.raises(CycleError):
            walk(db, db.list_child_folders(sample_tree["dev"])[0])
