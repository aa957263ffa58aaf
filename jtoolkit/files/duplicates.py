#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Duplicate File Finder

Groups files by size first, then hashes only files that share a size, and
reports every group of identical files with the space the extra copies
waste. Can export the groups to CSV and delete the extra copies, keeping the
oldest file of each group.
"""

import argparse
import hashlib
import sys
from collections import defaultdict
from pathlib import Path

from jtoolkit.common import format_bytes, iter_files, write_csv

ALGORITHMS = ("sha256", "sha1", "md5")
CHUNK = 1024 * 1024


def file_digest(path: Path, algorithm: str = "sha256") -> str:
    h = hashlib.new(algorithm)
    with path.open("rb") as fh:
        for block in iter(lambda: fh.read(CHUNK), b""):
            h.update(block)
    return h.hexdigest()


def find_duplicates(
    roots: list[Path], *, algorithm: str = "sha256", min_size: int = 1,
) -> list[list[Path]]:
    """Return groups (2+ paths) of identical files, each sorted oldest first."""
    by_size: dict[int, list[Path]] = defaultdict(list)
    # (device, inode) so overlapping roots and hard links count once
    seen: set[tuple[int, int]] = set()
    for root in roots:
        for path in iter_files(root, skip_dirs=(".git",)):
            try:
                st = path.stat()
            except OSError:
                continue
            key = (st.st_dev, st.st_ino)
            if key in seen:
                continue
            seen.add(key)
            if st.st_size >= min_size:
                by_size[st.st_size].append(path)


    groups: list[list[Path]] = []
    for size, paths in sorted(by_size.items(), reverse=True):
        if len(paths) < 2:
            continue
        by_hash: dict[str, list[Path]] = defaultdict(list)
        for path in paths:
            try:
                by_hash[file_digest(path, algorithm)].append(path)
            except OSError as exc:
                print(f"  [WARN] cannot read {path}: {exc}", file=sys.stderr)
        for same in by_hash.values():
            if len(same) > 1:
                groups.append(sorted(same, key=_mtime_key))
    return groups


def _mtime_key(path: Path) -> tuple[float, str]:
    try:
        return path.stat().st_mtime, str(path)
    except OSError:
        return float("inf"), str(path)


def wasted_bytes(groups: list[list[Path]]) -> int:
    total = 0
    for group in groups:
        try:
            total += group[0].stat().st_size * (len(group) - 1)
        except OSError:
            continue
    return total


def delete_extras(groups: list[list[Path]]) -> tuple[int, int]:
    """Delete every file but the first of each group; return (removed, freed)."""
    removed = freed = 0
    for group in groups:
        for path in group[1:]:
            try:
                size = path.stat().st_size
                path.unlink()
            except OSError as exc:
                print(f"  [WARN] cannot delete {path}: {exc}", file=sys.stderr)
                continue
            removed += 1
            freed += size
    return removed, freed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find duplicate files by content hash.")
    parser.add_argument("paths", nargs="+", type=Path, help="directories to scan")
    parser.add_argument("--algorithm", choices=ALGORITHMS, default="sha256")
    parser.add_argument("--min-size", type=int, default=1, help="ignore files smaller than this (bytes)")
    parser.add_argument("--csv", type=Path, help="export duplicate groups to CSV")
    parser.add_argument("--delete", action="store_true", help="delete extra copies (keeps the oldest)")
    parser.add_argument("--yes", action="store_true", help="confirm --delete")
    args = parser.parse_args(argv)

    roots = [p.expanduser() for p in args.paths]
    missing = [r for r in roots if not r.is_dir()]
    if missing:
        print(f"[ERROR] Not a directory: {missing[0]}", file=sys.stderr)
        return 1

    groups = find_duplicates(roots, algorithm=args.algorithm, min_size=args.min_size)
    if not groups:
        print("No duplicates found.")
        return 0

    for n, group in enumerate(groups, 1):
        size = group[0].stat().st_size
        print(f"Group {n} ({len(group)} files, {format_bytes(size)} each)")
        for i, path in enumerate(group):
            print(f"  {'keep' if i == 0 else 'dup '}  {path}")
    print()
    print(f"{len(groups)} duplicate groups, {format_bytes(wasted_bytes(groups))} wasted")

    if args.csv:
        rows = (
            {"group": n, "path": str(p), "size": p.stat().st_size, "keep": i == 0}
            for n, group in enumerate(groups, 1) for i, p in enumerate(group)
        )
        write_csv(args.csv, ["group", "path", "size", "keep"], rows)
        print(f"  [OK] {args.csv}")

    if args.delete:
        if not args.yes:
            print("  [DRY-RUN] add --yes to delete the duplicate copies")
        else:
            removed, freed = delete_extras(groups)
            print(f"  [OK] Deleted {removed} files, freed {format_bytes(freed)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
