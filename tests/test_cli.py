"""
Tests for bkm/cli.py

Runs the command line entry point against temporary databases and checks
both the printed output and the resulting store contents.
"""
import json

import pytest

from bkm import cli
from bkm.db import Database
from bkm.models import FolderRow


@pytest.fixture
def run(db_path):
    """Run bkm with --db pointing at a temporary database."""
    def _run(*args):
        cli.main(["--db", db_path, *args])
    return _run


@pytest.fixture
def store(db_path):
    def _open():
        return Database(path=db_path)
    return _open


class TestArgumentParser:
    """Test parser structure."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_folder_move_defaults_to_top_level(self):
        args = cli.build_parser().parse_args(["folder", "move", "3"])
        assert (args.id, args.to) == (3, 0)

    def test_bookmark_rm_accepts_many_ids(self):
        args = cli.build_parser().parse_args(["bookmark", "rm", "1", "2", "3"])
        assert args.ids == [1, 2, 3]

    def test_invalid_output_format(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["-o", "xml", "starred"])


class TestCommands:
    """Test command execution."""

    def test_init_sample_and_tree(self, run, capsys):
        run("init", "--sample")
        run("tree")

        out = capsys.readouterr().out
        assert "Added sample folders and bookmarks" in out
        assert "IT" in out
        assert "Development" in out
        assert "GoLang" in out

    def test_folder_commands(self, run, store):
        run("folder", "add", "Reading")
        run("folder", "add", "Later", "--parent", "1")
        run("folder", "rename", "2", "Someday")
        run("folder", "move", "2")

        db = store()
        assert [f.title for f in db.list_root_folders()] == ["Reading", "Someday"]
        assert db.get_folder(1).child_folder_count == 0

        run("folder", "rm", "1")
        assert [f.title for f in store().list_root_folders()] == ["Someday"]

    def test_bookmark_commands(self, run, store):
        run("folder", "add", "Dev")
        run("bookmark", "add", "https://golang.org/", "--title", "GoLang", "--folder", "1", "--no-favicon")
        run("bookmark", "rename", "1", "Go")
        run("bookmark", "star", "1")
        run("bookmark", "move", "1")

        bookmark = store().get_bookmark(1)
        assert (bookmark.title, bookmark.starred, bookmark.folder_id) == ("Go", True, None)

        run("bookmark", "star", "1", "--off")
        assert store().get_bookmark(1).starred is False

        run("bookmark", "rm", "1")
        assert store().get_bookmark(1) is None

    def test_bookmark_add_fetches_favicon(self, run, store, icon_provider, monkeypatch):
        monkeypatch.setattr("bkm.enrichment.GoogleIconProvider", lambda: icon_provider)
        run("bookmark", "add", "https://golang.org/")

        assert icon_provider.calls == ["https://golang.org/"]
        assert store().get_bookmark(1).favicon.startswith("data:image/png;base64,")

    def test_search_json(self, run, capsys):
        run("init", "--sample")
        capsys.readouterr()

        run("-o", "json", "search", "golang")
        results = json.loads(capsys.readouterr().out)
        assert [r["title"] for r in results] == ["GoLang"]

    def test_starred_urls(self, run, capsys):
        run("bookmark", "add", "https://a.test", "--star", "--no-favicon")
        run("bookmark", "add", "https://b.test", "--no-favicon")
        capsys.readouterr()

        run("-o", "urls", "starred")
        assert capsys.readouterr().out.split() == ["https://a.test"]

    def test_export_and_import(self, run, store, tmp_path):
        run("init", "--sample")
        exported = tmp_path / "export.html"
        run("export", str(exported))

        assert exported.read_text(encoding="utf-8").startswith("<!DOCTYPE NETSCAPE-Bookmark-file-1>")

        run("import", str(exported))
        db = store()
        titles = [f.title for f in db.list_root_folders()]
        assert "IT" in titles
        assert any(t.startswith("import-") for t in titles)
        assert len(db.search_bookmarks("golang")) == 2

    def test_import_missing_file(self, run):
        with pytest.raises(SystemExit) as exc_info:
            run("import", "nope.html")
        assert exc_info.value.code == 1

    def test_import_invalid_file(self, run, tmp_path, capsys):
        bad = tmp_path / "bad.html"
        bad.write_text("<html>no list</html>")

        with pytest.raises(SystemExit):
            run("import", str(bad))
        assert "Error" in capsys.readouterr().out

    def test_enrich(self, run, store, icon_provider, monkeypatch, capsys):
        monkeypatch.setattr("bkm.enrichment.GoogleIconProvider", lambda: icon_provider)
        run("bookmark", "add", "https://a.test", "--no-favicon")
        run("bookmark", "add", "https://fail.test", "--no-favicon")
        capsys.readouterr()

        run("enrich")

        assert "1 stored, 1 failed" in capsys.readouterr().out
        assert store().list_bookmarks_missing_favicon()[0].url == "https://fail.test"

    def test_check_and_repair(self, run, store):
        run("init", "--sample")
        run("check")

        with store().session() as session:
            session.get(FolderRow, 1).child_folder_count = 9

        with pytest.raises(SystemExit):
            run("check")

        run("check", "--repair")
        assert store().child_count_mismatches() == []


class TestErrors:
    """Test error reporting."""

    def test_missing_folder(self, run, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run("folder", "rename", "42", "Nope")

        assert exc_info.value.code == 1
        assert "folder 42 not found" in capsys.readouterr().out

    def test_cycle(self, run, capsys):
        run("folder", "add", "A")
        run("folder", "add", "B", "--parent", "1")

        with pytest.raises(SystemExit):
            run("folder", "move", "1", "--to", "2")
        assert "Error" in capsys.readouterr().out
