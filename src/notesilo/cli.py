"""CLI for notesilo - local-first markdown notes."""

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .core.model import Note
from .core.rename import PARTIAL_IO_FAILURE
from .runtime import build_runtime


def _resolve(rt: Any, ref: str) -> Note | None:
    """Accept either a note key (``Title.md``) or a title."""
    store = rt.workspace.store
    return store.get(ref) or store.find_by_title(ref)


def _not_found(ref: str) -> int:
    print(f"Note {ref} not found", file=sys.stderr)
    return 1


def cmd_new(args: argparse.Namespace, rt: Any) -> int:
    """Create a note (or return the existing one with that title)."""
    content = args.text if args.text is not None else ""
    note = rt.workspace.create_note(args.title or "", parent_dir=args.dir, content=content)
    if not args.quiet:
        print(note.key)
    return 0


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List notes."""
    store = rt.workspace.store
    notes = store.notes_in_dir(args.dir) if args.dir is not None else list(store)
    if args.daily:
        notes = [n for n in notes if n.is_daily]

    if args.json:
        print(json.dumps([n.to_dict() for n in notes], indent=2))
    else:
        for note in notes:
            print(f"{note.key}\t{note.title}")
    return 0


def cmd_open(args: argparse.Namespace, rt: Any) -> int:
    """Print raw Markdown to stdout."""
    note = _resolve(rt, args.ref)
    if note is None:
        return _not_found(args.ref)
    print(note.content)
    return 0


def cmd_write(args: argparse.Namespace, rt: Any) -> int:
    """Replace a note's content (from --text or stdin)."""
    note = _resolve(rt, args.ref)
    if note is None:
        return _not_found(args.ref)
    text = args.text if args.text is not None else sys.stdin.read()
    if not rt.workspace.update_content(note.key, text):
        print(f"Error: note {note.key} is being renamed; content not saved", file=sys.stderr)
        return 1
    for notice in rt.workspace.notifications:
        print(f"Warning: {notice}", file=sys.stderr)
    return 0


def cmd_rename(args: argparse.Namespace, rt: Any) -> int:
    """Rename a note and rewrite links pointing at it."""
    note = _resolve(rt, args.ref)
    if note is None:
        return _not_found(args.ref)

    result = rt.workspace.rename(note.key, args.title)
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1

    if result.status == PARTIAL_IO_FAILURE:
        print(f"Warning: {result.message}", file=sys.stderr)
    if args.json:
        print(json.dumps({
            "key": result.key,
            "new_key": result.new_key,
            "status": result.status,
            "links_rewritten": result.links_rewritten,
        }))
    elif not args.quiet:
        print(result.new_key)
        if result.links_rewritten:
            print(f"Updated links in {result.links_rewritten} note(s)")
    return 0


def cmd_rm(args: argparse.Namespace, rt: Any) -> int:
    """Delete a note and its file."""
    note = _resolve(rt, args.ref)
    if note is None:
        return _not_found(args.ref)

    # Confirm unless --yes
    if not args.yes:
        response = input(f"Delete note {note.key}? [y/N] ")
        if response.lower() not in ("y", "yes"):
            print("Aborted")
            return 0

    rt.workspace.delete_note(note.key)
    if not args.quiet:
        print(f"Deleted {note.key}")
    return 0


def cmd_backlinks(args: argparse.Namespace, rt: Any) -> int:
    """List notes that link to a note."""
    note = _resolve(rt, args.ref)
    if note is None:
        return _not_found(args.ref)

    sources = rt.workspace.backlinks(note.key)
    if args.json:
        print(json.dumps([{"key": n.key, "title": n.title} for n in sources]))
    else:
        for source in sources:
            print(f"{source.key}\t{source.title}")
    return 0


def cmd_search(args: argparse.Namespace, rt: Any) -> int:
    """Search titles and content."""
    matches = rt.workspace.search.search(args.query)[: args.limit]
    if args.json:
        print(json.dumps([
            {"key": m.note.key, "title": m.note.title, "score": m.score, "spans": m.spans}
            for m in matches
        ]))
    else:
        for m in matches:
            print(f"{m.note.key}\t{m.note.title}")
    return 0


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install notesilo[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token_arg = getattr(args, 'token', 'auto')
    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    print(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def _version_string() -> str:
    return (
        f"notesilo {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="silo", description="notesilo CLI"
    )
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/silo.toml, notes/silo.toml)",
    )
    parser.add_argument(
        "--notes",
        type=Path,
        default=None,
        help="Path to notes directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Logging level (default: from config, WARNING)"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_new = subparsers.add_parser("new", help="Create a new note")
    parser_new.add_argument("title", nargs="?", default="", help="Note title (default: Untitled)")
    parser_new.add_argument("--dir", default=None, help="Logical parent directory")
    parser_new.add_argument("--text", default=None, help="Initial content")

    parser_ls = subparsers.add_parser("ls", help="List notes")
    parser_ls.add_argument("--dir", default=None, help="Only notes in this directory")
    parser_ls.add_argument("--daily", action="store_true", help="Only daily notes")

    parser_open = subparsers.add_parser("open", help="Print raw Markdown to stdout")
    parser_open.add_argument("ref", help="Note key or title")

    parser_write = subparsers.add_parser("write", help="Replace note content")
    parser_write.add_argument("ref", help="Note key or title")
    parser_write.add_argument("--text", default=None, help="New content (default: stdin)")

    parser_rename = subparsers.add_parser("rename", help="Rename a note and update backlinks")
    parser_rename.add_argument("ref", help="Note key or title")
    parser_rename.add_argument("title", help="New title (empty: Untitled)")

    parser_rm = subparsers.add_parser("rm", help="Delete a note")
    parser_rm.add_argument("ref", help="Note key or title")
    parser_rm.add_argument("--yes", action="store_true", help="Skip confirmation")

    parser_backlinks = subparsers.add_parser("backlinks", help="Show notes linking to a note")
    parser_backlinks.add_argument("ref", help="Note key or title")

    parser_search = subparsers.add_parser("search", help="Search titles and content")
    parser_search.add_argument("query", help="Search text")
    parser_search.add_argument("--limit", type=int, default=20, help="Maximum results")

    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument(
        "--host", default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=8765,
        help="Port to bind to (default: 8765)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    args = parser.parse_args()

    rt = build_runtime(notes_path=args.notes, config_path=args.config, load=False)

    logging.basicConfig(
        level=(args.log_level or rt.config.log.level).upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    rt.workspace.load()

    handlers = {
        "new": cmd_new,
        "ls": cmd_ls,
        "open": cmd_open,
        "write": cmd_write,
        "rename": cmd_rename,
        "rm": cmd_rm,
        "backlinks": cmd_backlinks,
        "search": cmd_search,
        "serve": cmd_serve,
    }
    handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
