#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Temp Cleanup

Finds files older than N days in temporary directories. Dry-run by default;
--delete removes them, plus any old folder they leave empty, and reports
freed space. Files that cannot be read or removed are counted and skipped.
"""

import argparse
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from jtoolkit.common import format_bytes

DEFAULT_DAYS = 7


@dataclass
class CleanupResult:
    candidates: list[tuple[Path, int]] = field(default_factory=list)
    removed: int = 0
    freed: int = 0
    errors: int = 0
    dirs_removed: int = 0


def find_old_files(roots: list[Path], days: float, *, now: float | None = None) -> tuple[list[tuple[Path, int]], int]:
    """Return ([(path, size)], error_count) for files not modified in `days`."""
    cutoff = (now if now is not None else time.time()) - days * 86400
    found: list[tuple[Path, int]] = []
    errors = 0
    for root in roots:
        if not root.is_dir():
            continue
        for path in root.rglob("*"):
            try:
                if path.is_symlink() or not path.is_file():
                    continue
                st = path.stat()
            except OSError:
                errors += 1
                continue
            if st.st_mtime < cutoff:
                found.append((path, st.st_size))
    return found, errors


def stale_parents(roots: list[Path], files: list[Path], cutoff: float) -> list[Path]:
    """Directories holding old files that are themselves older than cutoff, deepest first.

    Ages are taken before anything is deleted; removing a file touches its
    parent's mtime.
    """
    dirs: set[Path] = set()
    for path in files:
        root = next((r for r in roots if r in path.parents), None)
        if root is None:
            continue
        for parent in path.parents:
            if parent == root:
                break
            dirs.add(parent)
    stale = []
    for d in dirs:
        try:
            if not d.is_symlink() and d.stat().st_mtime < cutoff:
                stale.append(d)
        except OSError:
            continue
    return sorted(stale, key=lambda p: len(p.parts), reverse=True)


def remove_empty_dirs(dirs: list[Path]) -> int:
    """rmdir each directory that is now empty (never a cleanup root)."""
    removed = 0
    for d in dirs:
        try:
            d.rmdir()
            removed += 1
        except OSError:
            continue
    return removed


def cleanup(roots: list[Path], days: float, *, delete: bool = False, now: float | None = None) -> CleanupResult:
    now = now if now is not None else time.time()
    result = CleanupResult()
    result.candidates, result.errors = find_old_files(roots, days, now=now)
    if not delete:
        return result
    old_dirs = stale_parents(roots, [path for path, _ in result.candidates], now - days * 86400)
    for path, size in result.candidates:
        try:
            path.unlink()
        except OSError:
            result.errors += 1
            continue
        result.removed += 1
        result.freed += size
    result.dirs_removed = remove_empty_dirs(old_dirs)
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Clean old files out of temp directories.")
    parser.add_argument("--path", type=Path, action="append", dest="paths",
                        help="directory to clean (repeatable, default: system temp dir)")
    parser.add_argument("--days", type=float, default=DEFAULT_DAYS, help="minimum age in days")
    parser.add_argument("--delete", action="store_true", help="actually delete (default is dry-run)")
    parser.add_argument("-v", "--verbose", action="store_true", help="list every file")
    args = parser.parse_args(argv)

    roots = [p.expanduser() for p in (args.paths or [Path(tempfile.gettempdir())])]
    print(f"Scanning {', '.join(str(r) for r in roots)} for files older than {args.days:g} days...")

    result = cleanup(roots, args.days, delete=args.delete)
    total = sum(size for _, size in result.candidates)

    if args.verbose:
        for path, size in result.candidates:
            print(f"  {format_bytes(size):>10}  {path}")

    if args.delete:
        print(f"  [OK] Removed {result.removed:,} files, freed {format_bytes(result.freed)}")
        if result.dirs_removed:
            print(f"  [OK] Removed {result.dirs_removed:,} empty directories")
    else:
        print(f"  [DRY-RUN] {len(result.candidates):,} files, {format_bytes(total)} would be removed")
        print("  Re-run with --delete to remove them.")
    if result.errors:
        print(f"  [WARN] {result.errors:,} files could not be read or removed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
