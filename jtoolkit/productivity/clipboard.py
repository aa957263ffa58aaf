#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Clipboard History

`watch` polls the clipboard and appends every new text to clipboard.json in
the data directory (newest last, capped at --max entries). `list` shows the
history, `copy N` puts entry N back on the clipboard, `clear` empties it.
"""

import argparse
import sys
import time
from collections.abc import Callable
from pathlib import Path

import pyperclip

from jtoolkit.common import ToolkitError, data_dir, load_records, now_iso, save_records

STORE_NAME = "clipboard.json"
DEFAULT_MAX = 100
PREVIEW = 70


def store_path() -> Path:
    return data_dir() / STORE_NAME


def add_entry(history: list[dict], text: str, max_entries: int = DEFAULT_MAX) -> bool:
    """Append text unless it is empty or equal to the latest entry; trim to max."""
    if not text or not text.strip():
        return False
    if history and history[-1]["text"] == text:
        return False
    # Re-copied older text moves to the end
    history[:] = [h for h in history if h["text"] != text]
    history.append({"text": text, "captured": now_iso()})
    if len(history) > max_entries:
        del history[: len(history) - max_entries]
    return True


def preview(text: str, width: int = PREVIEW) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= width else flat[: width - 3] + "..."


def read_clipboard() -> str:
    try:
        return pyperclip.paste() or ""
    except pyperclip.PyperclipException as exc:
        raise ToolkitError(f"Clipboard not available: {exc}") from exc


def watch(path: Path, *, interval: float = 1.0, max_entries: int = DEFAULT_MAX,
          rounds: int = 0, sleep: Callable[[float], None] = time.sleep) -> int:
    """Poll the clipboard; return how many new entries were captured."""
    history = load_records(path)
    captured = 0
    last = history[-1]["text"] if history else None
    n = 0
    try:
        while True:
            text = read_clipboard()
            if text != last and add_entry(history, text, max_entries):
                save_records(path, history)
                captured += 1
                print(f"  [+] {preview(text)}")
            last = text
            n += 1
            if rounds and n >= rounds:
                break
            sleep(interval)
    except KeyboardInterrupt:
        print("\nStopped.")
    return captured


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Clipboard history.")
    sub = parser.add_subparsers(dest="command", required=True)
    p = sub.add_parser("watch", help="record clipboard changes until Ctrl+C")
    p.add_argument("-i", "--interval", type=float, default=1.0)
    p.add_argument("--max", type=int, default=DEFAULT_MAX, help="entries to keep")
    p = sub.add_parser("list", help="show history (newest first)")
    p.add_argument("-n", "--limit", type=int, default=20)
    p = sub.add_parser("copy", help="copy entry N back to the clipboard")
    p.add_argument("n", type=int, help="1 = newest")
    sub.add_parser("clear", help="forget the history")
    args = parser.parse_args(argv)

    path = store_path()
    try:
        if args.command == "watch":
            print(f"Watching clipboard every {args.interval:g}s (Ctrl+C to stop)...")
            captured = watch(path, interval=args.interval, max_entries=args.max)
            print(f"  [OK] {captured} new entries saved to {path}")
        elif args.command == "list":
            history = load_records(path)
            if not history:
                print("Clipboard history is empty.")
            for i, h in enumerate(reversed(history[-args.limit:] if args.limit else history), 1):
                print(f"  {i:>3}  {h['captured'][11:19]}  {preview(h['text'])}")
        elif args.command == "copy":
            history = load_records(path)
            if not 1 <= args.n <= len(history):
                raise ToolkitError(f"No entry {args.n} (history has {len(history)})")
            text = history[-args.n]["text"]
            try:
                pyperclip.copy(text)
            except pyperclip.PyperclipException as exc:
                raise ToolkitError(f"Clipboard not available: {exc}") from exc
            print(f"  [OK] Copied: {preview(text)}")
        elif args.command == "clear":
            save_records(path, [])
            print("  [OK] History cleared")
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
