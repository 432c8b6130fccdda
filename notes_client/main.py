"""Command-line entrypoint.

Thin driver over the same services a GUI would use: every write goes
through EditorSession, so the CLI follows the form rules (validation,
create-vs-update, selection after save).
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from notes_client.app_settings import BACKENDS, load_config, open_settings
from notes_client.bootstrap import Services, build_services
from notes_client.core.clock import parse_timestamp
from notes_client.core.errors import NotesError, NotFoundError, ValidationError
from notes_client.core.models import Note
from notes_client.logging_setup import install_global_exception_hooks, setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="notes-client", description="Local notes")
    p.add_argument("--data-dir", type=Path, default=None, help="Folder for the notes file")
    p.add_argument("--backend", choices=BACKENDS, default=None, help="Storage backend")
    p.add_argument("--settings", type=Path, default=None, help="Path to settings.ini")
    p.add_argument("-v", "--verbose", action="store_true", help="Log to console")

    sub = p.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List notes")
    p_list.add_argument("--search", default="", help="Case-insensitive filter on title/content")

    p_show = sub.add_parser("show", help="Show a note (default: the last viewed one)")
    p_show.add_argument("note_id", nargs="?")

    p_new = sub.add_parser("new", help="Create a note")
    p_new.add_argument("--title", required=True)
    p_new.add_argument("--content", required=True)

    p_edit = sub.add_parser("edit", help="Edit a note")
    p_edit.add_argument("note_id")
    p_edit.add_argument("--title")
    p_edit.add_argument("--content")

    p_delete = sub.add_parser("delete", help="Delete a note")
    p_delete.add_argument("note_id")
    p_delete.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    return p.parse_args(argv)


def display_title(note: Note) -> str:
    return note.title or "Untitled"


def display_time(stamp: str) -> str:
    try:
        return parse_timestamp(stamp).astimezone().strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return stamp


# ───────────────────────── commands ─────────────────────────


def cmd_list(services: Services, args: argparse.Namespace) -> int:
    notes = services.visible_notes(args.search)
    if not notes:
        print("No notes found.")
        return 0
    active = services.selection.active_id
    for note in notes:
        marker = "*" if note.id == active else " "
        print(f"{marker} {note.id}  {display_time(note.updated)}  {display_title(note)}")
    return 0


def cmd_show(services: Services, args: argparse.Namespace) -> int:
    note_id = args.note_id or services.selection.active_id
    if not note_id:
        print("No note selected.", file=sys.stderr)
        return 1
    if not services.session.view(note_id):
        raise NotFoundError(note_id)
    note = services.selection.active_note()
    print(display_title(note))
    print(f"Last updated: {display_time(note.updated)}")
    print()
    print(note.content)
    return 0


def cmd_new(services: Services, args: argparse.Namespace) -> int:
    session = services.session
    session.begin_create()
    session.on_field_change("title", args.title)
    session.on_field_change("content", args.content)
    note = session.save()
    print(note.id)
    return 0


def cmd_edit(services: Services, args: argparse.Namespace) -> int:
    if args.title is None and args.content is None:
        print("Nothing to change: pass --title and/or --content.", file=sys.stderr)
        return 1
    session = services.session
    session.begin_edit(args.note_id)
    if args.title is not None:
        session.on_field_change("title", args.title)
    if args.content is not None:
        session.on_field_change("content", args.content)
    if not session.is_dirty:
        session.cancel()
        print("No changes.")
        return 0
    note = session.save()
    print(note.id)
    return 0


def cmd_delete(services: Services, args: argparse.Namespace) -> int:
    if not services.session.view(args.note_id):
        raise NotFoundError(args.note_id)
    if not args.yes:
        try:
            answer = input("Are you sure you want to delete this note? This action cannot be undone. [y/N] ")
        except EOFError:
            # stdin closed before an answer; pass --yes to delete without asking
            print()
            print("Cancelled: no confirmation given (use --yes).", file=sys.stderr)
            return 1
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled.")
            return 0
    services.session.delete_active()
    return 0


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "new": cmd_new,
    "edit": cmd_edit,
    "delete": cmd_delete,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    log = setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)
    install_global_exception_hooks(log)

    settings = open_settings(args.settings)
    config = load_config(settings)
    if args.data_dir is not None:
        config = dataclasses.replace(config, data_dir=args.data_dir)
    if args.backend is not None:
        config = dataclasses.replace(config, backend=args.backend)

    services = build_services(config, settings)
    services.store.persistenceFailed.connect(
        lambda msg: print(f"warning: notes were not saved: {msg}", file=sys.stderr)
    )

    try:
        return COMMANDS[args.command](services, args)
    except ValidationError as exc:
        for field, msg in exc.errors.items():
            print(f"error: {field}: {msg}", file=sys.stderr)
        return 1
    except NotesError as exc:
        log.debug("Command %s failed: %s", args.command, exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        settings.sync()


if __name__ == "__main__":
    raise SystemExit(main())
