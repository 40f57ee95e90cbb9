#!/usr/bin/env python3
"""
bkm - hierarchical bookmark manager

Command-line interface over the folder tree: browse, edit, import and export
bookmarks, and fill in missing favicons.
"""
import sys
import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich.tree import Tree
from rich.markup import escape

from bkm.config import init_config
from bkm.db import get_db
from bkm.entities import Bookmark
from bkm.errors import BkmError
from bkm.constants import DEFAULT_EXPORT_FILENAME
from bkm.service import BookmarkService
from bkm.walker import TreeNode, walk, walk_root
from bkm import exporters, importers

logger = logging.getLogger(__name__)


console = Console()


def format_bookmark(bookmark: Bookmark, format: str = "plain") -> str:
    """Format a bookmark for output."""
    if format == "json":
        return json.dumps(bookmark.to_dict())
    elif format == "urls":
        return bookmark.url
    else:  # plain
        star = "★ " if bookmark.starred else ""
        return f"[{bookmark.id}] {star}{bookmark.title}\n    {bookmark.url}"


def output_bookmarks(bookmarks: List[Bookmark], format: str = "table", title: str = "Bookmarks"):
    """Output bookmarks in the specified format."""
    if format == "table":
        table = Table(title=title)
        table.add_column("ID", style="cyan")
        table.add_column("Title", style="green")
        table.add_column("URL", style="blue")
        table.add_column("Folder", style="yellow")
        table.add_column("★", style="red")

        for bookmark in bookmarks:
            table.add_row(
                str(bookmark.id),
                bookmark.title[:50],
                bookmark.url[:60],
                str(bookmark.folder_id or ""),
                "★" if bookmark.starred else "",
            )

        console.print(table)
    elif format == "json":
        print(json.dumps([b.to_dict() for b in bookmarks], indent=2))
    else:
        for bookmark in bookmarks:
            print(format_bookmark(bookmark, format))


def _service(args, enrich: bool = False) -> BookmarkService:
    return BookmarkService(db=get_db(args.db), enrich=enrich)


def _folder_label(node: TreeNode) -> str:
    return f"[bold yellow]{escape(node.folder.title)}[/bold yellow] [dim]#{node.folder.id}[/dim]"


def _bookmark_label(bookmark: Bookmark) -> str:
    star = "[red]★[/red] " if bookmark.starred else ""
    return f"{star}{escape(bookmark.title)} [dim]#{bookmark.id} {escape(bookmark.url)}[/dim]"


def _build_tree(node: TreeNode, branch: Tree):
    for child in node.children:
        _build_tree(child, branch.add(_folder_label(child)))
    for bookmark in node.bookmarks:
        branch.add(_bookmark_label(bookmark))


# =================
# COMMANDS
# =================

def cmd_init(args):
    """Create the database, optionally with sample content."""
    db = get_db(args.db)
    if args.sample:
        if db.populate_sample():
            console.print("[green]Added sample folders and bookmarks[/green]")
        else:
            console.print("[yellow]Database already has folders, sample not added[/yellow]")
    console.print(f"[green]Database ready: {db.url}[/green]")


def cmd_tree(args):
    """Show the folder tree."""
    db = get_db(args.db)
    if args.folder:
        node = walk(db, args.folder)
        root = Tree(_folder_label(node))
    else:
        node = walk_root(db)
        root = Tree("[bold]Bookmarks[/bold]")
    _build_tree(node, root)
    console.print(root)


def cmd_folder(args):
    """Folder operations."""
    service = _service(args)
    command = args.folder_command

    if command == "add":
        folder = service.add_folder(args.title, args.parent)
        if not args.quiet:
            console.print(f"[green]Created folder {folder.id}: {folder.title}[/green]")
    elif command == "rename":
        folder = service.rename_folder(args.id, args.title)
        if not args.quiet:
            console.print(f"[green]Renamed folder {folder.id} to {folder.title}[/green]")
    elif command == "move":
        service.move_folder(args.id, args.to)
        if not args.quiet:
            console.print(f"[green]Moved folder {args.id} to {args.to or 'the top level'}[/green]")
    elif command == "rm":
        service.delete_folder(args.id)
        if not args.quiet:
            console.print(f"[green]Deleted folder {args.id} and its contents[/green]")


def cmd_bookmark(args):
    """Bookmark operations."""
    command = args.bookmark_command
    service = _service(args, enrich=command == "add" and not args.no_favicon)

    try:
        if command == "add":
            bookmark = service.add_bookmark(args.url, args.title, args.folder, starred=args.star)
            if not args.quiet:
                console.print(f"[green]Added bookmark {bookmark.id}: {bookmark.title}[/green]")
        elif command == "rename":
            bookmark = service.rename_bookmark(args.id, args.title)
            if not args.quiet:
                console.print(f"[green]Renamed bookmark {bookmark.id} to {bookmark.title}[/green]")
        elif command == "move":
            service.move_bookmark(args.id, args.to)
            if not args.quiet:
                console.print(f"[green]Moved bookmark {args.id} to {args.to or 'the root'}[/green]")
        elif command == "star":
            bookmark = service.star(args.id, not args.off)
            if not args.quiet:
                state = "Starred" if bookmark.starred else "Unstarred"
                console.print(f"[green]{state} bookmark {bookmark.id}[/green]")
        elif command == "rm":
            for bookmark_id in args.ids:
                service.delete_bookmark(bookmark_id)
            if not args.quiet:
                console.print(f"[green]Deleted {len(args.ids)} bookmark(s)[/green]")
    finally:
        service.close()


def cmd_search(args):
    """Search bookmarks by title or URL."""
    db = get_db(args.db)
    bookmarks = db.search_bookmarks(args.term)
    if args.limit:
        bookmarks = bookmarks[:args.limit]
    output_bookmarks(bookmarks, args.output, title=f"Search: {args.term}")


def cmd_starred(args):
    """List starred bookmarks."""
    db = get_db(args.db)
    output_bookmarks(db.list_starred_bookmarks(), args.output, title="Starred")


def cmd_import(args):
    """Import a Netscape bookmark file."""
    db = get_db(args.db)
    path = Path(args.file)
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        sys.exit(1)

    result = importers.import_file(db, path)
    if not args.quiet:
        console.print(
            f"[green]Imported {result.bookmarks} bookmarks in {result.folders} folders "
            f"into '{result.folder_title}' (folder {result.folder_id})[/green]"
        )
        if result.skipped:
            console.print(f"[yellow]Skipped {result.skipped} entries without a URL[/yellow]")


def cmd_export(args):
    """Export to a Netscape bookmark file."""
    db = get_db(args.db)
    path = exporters.export_file(db, Path(args.file), args.folder, args.title)
    if not args.quiet:
        console.print(f"[green]Exported to {path}[/green]")


def cmd_enrich(args):
    """Fetch favicons for bookmarks that have none."""
    service = BookmarkService(db=get_db(args.db), enrich=True)
    try:
        with console.status("Fetching favicons..."):
            queued = service.enrich_missing()
            service.enricher.wait()
        enricher = service.enricher
        console.print(
            f"[green]Favicons: {enricher.succeeded} stored, {enricher.failed} failed "
            f"({queued} queued)[/green]"
        )
    finally:
        service.close()


def cmd_check(args):
    """Check the cached child folder counts."""
    db = get_db(args.db)
    mismatches = db.child_count_mismatches()

    if not mismatches:
        console.print("[green]All folder counts are consistent[/green]")
        return

    table = Table(title="Inconsistent folder counts")
    table.add_column("Folder", style="cyan")
    table.add_column("Cached", style="red")
    table.add_column("Actual", style="green")
    for folder_id, cached, actual in mismatches:
        table.add_row(str(folder_id), str(cached), str(actual))
    console.print(table)

    if args.repair:
        fixed = db.recount_children()
        console.print(f"[green]Repaired {fixed} folder(s)[/green]")
    else:
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="bkm - hierarchical bookmark manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bkm init --sample
  bkm tree
  bkm folder add "Reading" --parent 1
  bkm bookmark add https://example.com --title "Example" --folder 3
  bkm bookmark move 12 --to 0
  bkm search python --output json
  bkm import bookmarks.html
  bkm export backup.html --folder 3

Configuration:
  Default database: ./bkm.db or from config
  Config file: ~/.config/bkm/config.toml
  Environment: BKM_DATABASE, BKM_LOG_LEVEL
        """
    )

    # Global options
    parser.add_argument("--db", help="Database file (default: bkm.db)")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    parser.add_argument("-o", "--output", choices=["table", "json", "plain", "urls"], default="table",
                        help="Output format for bookmark lists")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    init_parser = subparsers.add_parser("init", help="Create the database")
    init_parser.add_argument("--sample", action="store_true", help="Add sample folders and bookmarks")
    init_parser.set_defaults(func=cmd_init)

    tree_parser = subparsers.add_parser("tree", help="Show the folder tree")
    tree_parser.add_argument("--folder", type=int, help="Only show this folder")
    tree_parser.set_defaults(func=cmd_tree)

    # =================
    # FOLDER GROUP
    # =================
    folder_parser = subparsers.add_parser("folder", help="Folder operations")
    folder_subparsers = folder_parser.add_subparsers(dest="folder_command", required=True)

    f_add = folder_subparsers.add_parser("add", help="Create a folder")
    f_add.add_argument("title", help="Folder title")
    f_add.add_argument("--parent", type=int, help="Parent folder id (default: top level)")

    f_rename = folder_subparsers.add_parser("rename", help="Rename a folder")
    f_rename.add_argument("id", type=int, help="Folder id")
    f_rename.add_argument("title", help="New title")

    f_move = folder_subparsers.add_parser("move", help="Move a folder")
    f_move.add_argument("id", type=int, help="Folder id")
    f_move.add_argument("--to", type=int, default=0, help="Destination folder id (0: top level)")

    f_rm = folder_subparsers.add_parser("rm", help="Delete a folder and everything in it")
    f_rm.add_argument("id", type=int, help="Folder id")

    folder_parser.set_defaults(func=cmd_folder)

    # =================
    # BOOKMARK GROUP
    # =================
    bookmark_parser = subparsers.add_parser("bookmark", help="Bookmark operations")
    bookmark_subparsers = bookmark_parser.add_subparsers(dest="bookmark_command", required=True)

    bm_add = bookmark_subparsers.add_parser("add", help="Add a bookmark")
    bm_add.add_argument("url", help="URL to bookmark")
    bm_add.add_argument("--title", help="Title (default: the URL)")
    bm_add.add_argument("--folder", type=int, help="Folder id (default: root)")
    bm_add.add_argument("--star", action="store_true", help="Star the bookmark")
    bm_add.add_argument("--no-favicon", action="store_true", help="Do not fetch the favicon")

    bm_rename = bookmark_subparsers.add_parser("rename", help="Rename a bookmark")
    bm_rename.add_argument("id", type=int, help="Bookmark id")
    bm_rename.add_argument("title", help="New title")

    bm_move = bookmark_subparsers.add_parser("move", help="Move a bookmark")
    bm_move.add_argument("id", type=int, help="Bookmark id")
    bm_move.add_argument("--to", type=int, default=0, help="Destination folder id (0: root)")

    bm_star = bookmark_subparsers.add_parser("star", help="Star or unstar a bookmark")
    bm_star.add_argument("id", type=int, help="Bookmark id")
    bm_star.add_argument("--off", action="store_true", help="Remove the star")

    bm_rm = bookmark_subparsers.add_parser("rm", help="Delete bookmarks")
    bm_rm.add_argument("ids", type=int, nargs="+", help="Bookmark ids")

    bookmark_parser.set_defaults(func=cmd_bookmark)

    search_parser = subparsers.add_parser("search", help="Search bookmarks by title or URL")
    search_parser.add_argument("term", help="Text to look for")
    search_parser.add_argument("--limit", type=int, help="Maximum results")
    search_parser.set_defaults(func=cmd_search)

    starred_parser = subparsers.add_parser("starred", help="List starred bookmarks")
    starred_parser.set_defaults(func=cmd_starred)

    import_parser = subparsers.add_parser("import", help="Import a Netscape bookmark file")
    import_parser.add_argument("file", help="Bookmark HTML file")
    import_parser.set_defaults(func=cmd_import)

    export_parser = subparsers.add_parser("export", help="Export to a Netscape bookmark file")
    export_parser.add_argument("file", nargs="?", default=DEFAULT_EXPORT_FILENAME,
                               help=f"Output file (default: {DEFAULT_EXPORT_FILENAME})")
    export_parser.add_argument("--folder", type=int, help="Only export this folder")
    export_parser.add_argument("--title", help="Document title")
    export_parser.set_defaults(func=cmd_export)

    enrich_parser = subparsers.add_parser("enrich", help="Fetch missing favicons")
    enrich_parser.set_defaults(func=cmd_enrich)

    check_parser = subparsers.add_parser("check", help="Check folder count consistency")
    check_parser.add_argument("--repair", action="store_true", help="Fix inconsistent counts")
    check_parser.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = init_config(
        database=args.db,
        config_file=Path(args.config) if args.config else None,
    )

    level = logging.DEBUG if args.debug else getattr(logging, config.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format='%(levelname)s: %(name)s: %(message)s')

    # Execute command
    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except BkmError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
