#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Quick Notes

Keeps short notes in a JSON array (notes.json in the data directory).

    jt-notes add "call the plumber" --tag home
    jt-notes list --tag home
    jt-notes search plumber
    jt-notes delete 3
    jt-notes export notes.md
"""

import argparse
import sys
from pathlib import Path

from jtoolkit.common import ToolkitError, data_dir, load_records, now_iso, save_records

STORE_NAME = "notes.json"


def store_path() -> Path:
    return data_dir() / STORE_NAME


def add_note(notes: list[dict], text: str, tags: list[str] | None = None) -> dict:
    text = text.strip()
    if not text:
        raise ToolkitError("Note text is empty")
    note = {
        "id": max((n["id"] for n in notes), default=0) + 1,
        "text": text,
        "tags": sorted({t.strip().lower() for t in tags or [] if t.strip()}),
        "created": now_iso(),
    }
    notes.append(note)
    return note


def filter_notes(notes: list[dict], *, tag: str | None = None, term: str | None = None) -> list[dict]:
    result = notes
    if tag:
        result = [n for n in result if tag.lower() in n.get("tags", [])]
    if term:
        needle = term.lower()
        result = [n for n in result if needle in n["text"].lower()
                  or any(needle in t for t in n.get("tags", []))]
    return result


def delete_note(notes: list[dict], note_id: int) -> dict:
    for i, n in enumerate(notes):
        if n["id"] == note_id:
            return notes.pop(i)
    raise ToolkitError(f"No note with id {note_id}")


def to_markdown(notes: list[dict]) -> str:
    lines = ["# Notes", ""]
    for n in notes:
        tags = " ".join(f"`#{t}`" for t in n.get("tags", []))
        lines.append(f"- **{n['created']}** {n['text']} {tags}".rstrip())
    return "\n".join(lines) + "\n"


def print_notes(notes: list[dict]) -> None:
    if not notes:
        print("No notes.")
        return
    for n in notes:
        tags = f"  [{', '.join(n['tags'])}]" if n.get("tags") else ""
        print(f"  {n['id']:>4}  {n['created'][:16].replace('T', ' ')}  {n['text']}{tags}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Quick command-line notes.")
    sub = parser.add_subparsers(dest="command", required=True)
    p = sub.add_parser("add", help="add a note")
    p.add_argument("text", nargs="+")
    p.add_argument("-t", "--tag", action="append", default=[])
    p = sub.add_parser("list", help="list notes")
    p.add_argument("-t", "--tag")
    p = sub.add_parser("search", help="search note text and tags")
    p.add_argument("term")
    p = sub.add_parser("delete", help="delete a note by id")
    p.add_argument("id", type=int)
    p = sub.add_parser("clear", help="delete all notes")
    p.add_argument("--yes", action="store_true")
    p = sub.add_parser("export", help="export notes as Markdown")
    p.add_argument("file", type=Path)
    args = parser.parse_args(argv)

    path = store_path()
    try:
        notes = load_records(path)
        if args.command == "add":
            note = add_note(notes, " ".join(args.text), args.tag)
            save_records(path, notes)
            print(f"  [OK] Note {note['id']} saved")
        elif args.command == "list":
            print_notes(filter_notes(notes, tag=args.tag))
        elif args.command == "search":
            print_notes(filter_notes(notes, term=args.term))
        elif args.command == "delete":
            note = delete_note(notes, args.id)
            save_records(path, notes)
            print(f"  [OK] Deleted note {note['id']}: {note['text']}")
        elif args.command == "clear":
            if not args.yes:
                print(f"  [DRY-RUN] {len(notes)} notes would be deleted; add --yes")
                return 0
            save_records(path, [])
            print(f"  [OK] Deleted {len(notes)} notes")
        elif args.command == "export":
            args.file.write_text(to_markdown(notes), encoding="utf-8")
            print(f"  [OK] {args.file} ({len(notes)} notes)")
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
