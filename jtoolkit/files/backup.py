#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Folder Backup

Backs up a directory tree into a timestamped zip archive (or a plain folder
copy), honouring exclude patterns, keeps only the newest N backups and logs
every run to backup.log next to the backups.
"""

import argparse
import fnmatch
import glob
import logging
import shutil
import sys
import zipfile
from dataclasses import dataclass
from pathlib import Path

from jtoolkit.common import ToolkitError, format_bytes, iter_files, setup_file_logging, stamp

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDES = ("*.tmp", "~$*", "Thumbs.db", ".DS_Store")
LOG_NAME = "backup.log"


@dataclass
class BackupResult:
    path: Path
    files: int
    bytes: int
    skipped: int


def is_excluded(rel: Path, patterns: tuple[str, ...]) -> bool:
    """Match patterns against the file name and the relative POSIX path."""
    name, posix = rel.name, rel.as_posix()
    return any(fnmatch.fnmatch(name, p) or fnmatch.fnmatch(posix, p) for p in patterns)


def collect(source: Path, patterns: tuple[str, ...]) -> list[tuple[Path, Path]]:
    items = []
    for path in iter_files(source, skip_dirs=()):
        rel = path.relative_to(source)
        if not is_excluded(rel, patterns):
            items.append((path, rel))
    return items


def backup_zip(source: Path, target: Path, items: list[tuple[Path, Path]]) -> BackupResult:
    total = skipped = count = 0
    try:
        # pre-1980 mtimes are clamped instead of rejected
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False) as zf:
            for path, rel in items:
                try:
                    zf.write(path, arcname=(Path(source.name) / rel).as_posix())
                except OSError as exc:
                    logger.warning("skipped %s: %s", path, exc)
                    skipped += 1
                    continue
                count += 1
                total += path.stat().st_size
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    return BackupResult(target, count, total, skipped)



def backup_copy(source: Path, target: Path, items: list[tuple[Path, Path]]) -> BackupResult:
    total = skipped = count = 0
    for path, rel in items:
        dst = target / rel
        dst.parent.mkdir(parents=True, exist_ok=True)
        try:
            shutil.copy2(path, dst)
        except OSError as exc:
            logger.warning("skipped %s: %s", path, exc)
            skipped += 1
            continue
        count += 1
        total += dst.stat().st_size
    return BackupResult(target, count, total, skipped)


def verify_zip(archive: Path) -> str | None:
    """Return the first corrupt member name, or None when the archive is sound."""
    with zipfile.ZipFile(archive) as zf:
        return zf.testzip()


def list_backups(dest: Path, name: str) -> list[Path]:
    """Existing backups of `name` in dest, oldest first (timestamps sort lexically)."""
    return sorted(p for p in dest.glob(f"{glob.escape(name)}_????????_??????*") if p.name != LOG_NAME)


def prune(dest: Path, name: str, keep: int) -> list[Path]:
    """Delete all but the newest `keep` backups; return what was removed."""
    backups = list_backups(dest, name)
    doomed = backups[:-keep] if keep > 0 else []
    for old in doomed:
        if old.is_dir():
            shutil.rmtree(old)
        else:
            old.unlink()
        logger.info("pruned %s", old)
    return doomed


def run_backup(source: Path, dest: Path, *, mode: str = "zip",
               excludes: tuple[str, ...] = DEFAULT_EXCLUDES) -> BackupResult:
    if not source.is_dir():
        raise ToolkitError(f"Source is not a directory: {source}")
    dest = dest.resolve()
    if dest == source.resolve() or source.resolve() in dest.parents:
        raise ToolkitError("Destination must not be inside the source directory")
    dest.mkdir(parents=True, exist_ok=True)

    items = collect(source, excludes)
    base = f"{source.name}_{stamp()}"
    if mode == "zip":
        result = backup_zip(source, dest / f"{base}.zip", items)
    else:
        result = backup_copy(source, dest / base, items)
    logger.info(
        "backup %s -> %s: %d files, %s, %d skipped",
        source, result.path, result.files, format_bytes(result.bytes), result.skipped,
    )
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Back up a directory to a timestamped archive.")
    parser.add_argument("source", type=Path)
    parser.add_argument("dest", type=Path, help="directory that holds the backups")
    parser.add_argument("--mode", choices=("zip", "copy"), default="zip")
    parser.add_argument("--exclude", action="append", default=[], metavar="GLOB",
                        help="extra exclude pattern (repeatable)")
    parser.add_argument("--keep", type=int, default=0, help="keep only the newest N backups (0 = all)")
    parser.add_argument("--verify", action="store_true", help="test the zip after writing it")
    args = parser.parse_args(argv)

    source, dest = args.source.expanduser(), args.dest.expanduser()
    dest.mkdir(parents=True, exist_ok=True)
    setup_file_logging(dest / LOG_NAME)

    try:
        result = run_backup(source, dest, mode=args.mode,
                            excludes=DEFAULT_EXCLUDES + tuple(args.exclude))
    except (ToolkitError, OSError) as exc:
        logger.error("backup of %s failed: %s", source, exc)
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    print(f"  [OK] {result.path} ({result.files:,} files, {format_bytes(result.bytes)})")
    if result.skipped:
        print(f"  [WARN] {result.skipped} files could not be read (see {dest / LOG_NAME})")

    if args.verify and args.mode == "zip":
        bad = verify_zip(result.path)
        if bad:
            logger.error("verification failed on %s: %s", result.path, bad)
            print(f"[ERROR] Verification failed: corrupt member {bad}", file=sys.stderr)
            return 1
        logger.info("verified %s", result.path)
        print("  [OK] Archive verified")

    if args.keep:
        for old in prune(dest, source.name, args.keep):
            print(f"  [OK] Pruned {old.name}")
    return 1 if result.skipped else 0


if __name__ == "__main__":
    sys.exit(main())
