import os
import tempfile
import threading

import pytest

import bkm.config
import bkm.db
from bkm.db import Database
from bkm.errors import FaviconError
from bkm.favicons import Icon


class FakeIconProvider:
    """Icon provider that never touches the network."""

    def __init__(self, data: bytes = b"\x89PNG fake icon", content_type: str = "image/png"):
        self.icon = Icon(content_type=content_type, data=data)
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, url):
        with self._lock:
            self.calls.append(url)
        if "fail" in url:
            raise FaviconError(f"no icon for {url}")
        if "crash" in url:
            raise RuntimeError("provider crashed")
        return self.icon


@pytest.fixture(autouse=True)
def clean_bkm_env(tmp_path, monkeypatch):
    """Isolate every test from user config, BKM_* variables and shared instances."""
    for key in list(os.environ):
        if key.startswith("BKM_"):
            monkeypatch.delenv(key)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(bkm.config, "_config", None)
    monkeypatch.setattr(bkm.db, "_db", None)


@pytest.fixture
def db_path():
    """Path to a database file in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "test.db")


@pytest.fixture
def db(db_path):
    """Empty database."""
    database = Database(path=db_path)
    yield database
    database.engine.dispose()


@pytest.fixture
def sample_tree(db):
    """
    IT
      Development
        GoLang
      Wiki
    Python (root bookmark)
    """
    it = db.create_folder("IT")
    dev = db.create_folder("Development", it)
    golang = db.create_bookmark("https://golang.org/", "GoLang", dev)
    wiki = db.create_bookmark("https://wiki.test/", "Wiki", it)
    python = db.create_bookmark("https://python.org/", "Python")
    return {"it": it, "dev": dev, "golang": golang, "wiki": wiki, "python": python}


@pytest.fixture
def icon_provider():
    return FakeIconProvider()


@pytest.fixture
def browser_export():
    """Bookmark file as written by a browser, with unclosed DT and p tags."""
    return b"""<!DOCTYPE NETSCAPE-Bookmark-file-1>
<!-- This is an automatically generated file.
     It will be read and overwritten.
     DO NOT EDIT! -->
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3 ADD_DATE="1700000000" LAST_MODIFIED="1700000000">Work</H3>
    <DL><p>
        <DT><A HREF="https://x.test" ADD_DATE="1700000000" ICON="data:image/png;base64,AAAA">X</A>
        <DT><H3>Deep</H3>
        <DL><p>
            <DT><A HREF="https://deep.test">Deep link</A>
        </DL><p>
        <DT><A HREF="https://y.test">Y</A>
    </DL><p>
    <DT><A HREF="https://top.test">Top</A>
</DL><p>
"""
