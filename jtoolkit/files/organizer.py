#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Organizer

Sorts the files of a directory into category folders (categories.json),
optionally with YYYY/MM sub-folders from the modification date. Runs as a
preview unless --apply is given. Every applied run writes an undo log that
--undo can replay backwards.
"""

import argparse
import datetime
import logging
import shutil
import sys
from pathlib import Path

from jtoolkit.common import (
    ToolkitError,
    category_for,
    load_records,
    now_iso,
    save_records,
    setup_file_logging,
    stamp,
    unique_path,
)

logger = logging.getLogger(__name__)

UNDO_PREFIX = ".organize-undo-"


def plan_moves(source: Path, dest: Path | None = None, *, by_date: bool = False,
               recursive: bool = False) -> list[tuple[Path, Path]]:
    """Return [(src, dst)] for every file that is not already in place."""
    dest = dest or source
    files = source.rglob("*") if recursive else source.iterdir()
    moves: list[tuple[Path, Path]] = []
    claimed: set[Path] = set()
    for path in sorted(files):
        if not path.is_file() or path.is_symlink() or path.name.startswith(UNDO_PREFIX):
            continue
        folder = dest / category_for(path)
        if by_date:
            mtime = datetime.datetime.fromtimestamp(path.stat().st_mtime)
            folder = folder / f"{mtime:%Y}" / f"{mtime:%m}"
        if path.parent == folder:
            continue
        target = folder / path.name
        n = 1
        while target in claimed or (target.exists() and target != path):
            target = folder / f"{path.stem} ({n}){path.suffix}"
            n += 1
        claimed.add(target)
        moves.append((path, target))
    return moves


def apply_moves(moves: list[tuple[Path, Path]]) -> list[dict]:
    done: list[dict] = []
    for src, dst in moves:
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst = unique_path(dst)
        try:
            shutil.move(str(src), str(dst))
        except OSError as exc:
            logger.error("move failed %s -> %s: %s", src, dst, exc)
            print(f"  [ERROR] {src.name}: {exc}", file=sys.stderr)
            continue
        logger.info("moved %s -> %s", src, dst)
        done.append({"src": str(src), "dst": str(dst), "moved": now_iso()})
    return done


def undo(log_file: Path) -> int:
    """Move files back to where an undo log says they came from."""
    records = load_records(log_file)
    if not records:
        raise ToolkitError(f"{log_file} contains no moves")
    restored = 0
    for rec in reversed(records):
        src, dst = Path(rec["src"]), Path(rec["dst"])
        if not dst.exists():
            print(f"  [WARN] missing {dst}, skipped")
            continue
        src.parent.mkdir(parents=True, exist_ok=True)
        target = unique_path(src)
        shutil.move(str(dst), str(target))
        logger.info("restored %s -> %s", dst, target)
        restored += 1
        # Remove category (and YYYY/MM) folders left empty
        parent = dst.parent
        for _ in range(3):
            if parent == src.parent or not parent.is_dir() or any(parent.iterdir()):
                break
            parent.rmdir()
            parent = parent.parent
    return restored


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sort files into category folders.")
    parser.add_argument("source", nargs="?", type=Path, default=Path.home() / "Downloads")
    parser.add_argument("--dest", type=Path, help="root for category folders (default: source)")
    parser.add_argument("--by-date", action="store_true", help="add YYYY/MM sub-folders")
    parser.add_argument("-r", "--recursive", action="store_true")
    parser.add_argument("--apply", action="store_true", help="move files (default is preview)")
    parser.add_argument("--undo", type=Path, metavar="LOG", help="reverse a previous run")
    args = parser.parse_args(argv)

    try:
        if args.undo:
            setup_file_logging(args.undo.with_suffix(".log"))
            restored = undo(args.undo)
            print(f"  [OK] Restored {restored} files")
            return 0

        source = args.source.expanduser()
        if not source.is_dir():
            raise ToolkitError(f"Not a directory: {source}")
        dest = args.dest.expanduser() if args.dest else source
        moves = plan_moves(source, dest, by_date=args.by_date, recursive=args.recursive)
        if not moves:
            print("Nothing to organize.")
            return 0

        for src, dst in moves:
            print(f"  {src.name}  ->  {dst.relative_to(dest)}")
        if not args.apply:
            print(f"  [DRY-RUN] {len(moves)} files would be moved; re-run with --apply")
            return 0

        undo_log = dest / f"{UNDO_PREFIX}{stamp()}.json"
        setup_file_logging(undo_log.with_suffix(".log"))
        done = apply_moves(moves)
        save_records(undo_log, done)
        print(f"  [OK] Moved {len(done)} files; undo with --undo {undo_log}")
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
