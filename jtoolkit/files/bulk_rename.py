#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bulk Renamer

Applies one or more rename rules to the files of a directory: prefix,
suffix, plain or regex replacement, case change and sequential numbering.
Shows a preview unless --apply is given and refuses to run when two files
would end up with the same name.
"""

import argparse
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from jtoolkit.common import ToolkitError


@dataclass
class RenameRules:
    prefix: str = ""
    suffix: str = ""
    replace: tuple[str, str] | None = None
    regex: tuple[str, str] | None = None
    case: str | None = None            # "lower" | "upper"
    number: bool = False
    start: int = 1
    width: int = 3
    separator: str = "_"


def new_name(path: Path, rules: RenameRules, index: int) -> str:
    """Compute the new file name; the extension is kept apart from the stem."""
    stem, ext = path.stem, path.suffix
    if rules.replace:
        stem = stem.replace(*rules.replace)
    if rules.regex:
        try:
            stem = re.sub(rules.regex[0], rules.regex[1], stem)
        except re.error as exc:
            raise ToolkitError(f"Bad regex {rules.regex[0]!r}: {exc}") from exc
    if rules.case == "lower":
        stem, ext = stem.lower(), ext.lower()
    elif rules.case == "upper":
        stem = stem.upper()
    if rules.number:
        stem = f"{stem}{rules.separator}{rules.start + index:0{rules.width}d}"
    name = f"{rules.prefix}{stem}{rules.suffix}{ext}"
    if "/" in name or os.sep in name or (os.altsep and os.altsep in name):
        raise ToolkitError(f"{path.name} would become {name!r}, which is not a plain file name")
    return name



def plan(directory: Path, rules: RenameRules, *, ext: str | None = None) -> list[tuple[Path, Path]]:
    files = sorted(p for p in directory.iterdir() if p.is_file())
    if ext:
        wanted = ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        files = [p for p in files if p.suffix.lower() == wanted]
    return [(p, p.with_name(new_name(p, rules, i))) for i, p in enumerate(files)]


def check_collisions(pairs: list[tuple[Path, Path]]) -> None:
    """Raise ToolkitError if targets clash with each other or with untouched files."""
    sources = {src for src, _ in pairs}
    seen: dict[str, Path] = {}
    for src, dst in pairs:
        if not dst.name or dst.name in (".", ".."):
            raise ToolkitError(f"{src.name} would get an empty name")
        key = dst.name.lower()
        if key in seen:
            raise ToolkitError(f"{seen[key].name} and {src.name} would both become {dst.name}")
        seen[key] = src
        if dst.exists() and dst not in sources:
            raise ToolkitError(f"{dst.name} already exists")


def apply(pairs: list[tuple[Path, Path]]) -> int:
    """Rename via temporary names so swaps and chains (a->b, b->c) succeed.

    If any rename fails, the files already moved are put back under their
    original names and ToolkitError is raised.
    """
    staged: list[tuple[Path, Path, Path]] = []
    done: list[tuple[Path, Path]] = []
    try:
        for i, (src, dst) in enumerate(pairs):
            if src == dst:
                continue
            tmp = src.with_name(f".jt-rename-{i}-{src.name}")
            src.rename(tmp)
            staged.append((src, tmp, dst))
        for src, tmp, dst in staged:
            tmp.rename(dst)
            done.append((tmp, dst))
    except OSError as exc:
        stuck = rollback(staged, done)
        msg = f"Rename failed ({exc}); changes were rolled back"
        if stuck:
            msg += f", but {len(stuck)} files could not be restored: {', '.join(p.name for p in stuck)}"
        raise ToolkitError(msg) from exc
    return len(staged)


def rollback(staged: list[tuple[Path, Path, Path]], done: list[tuple[Path, Path]]) -> list[Path]:
    """Undo a partial apply(); return the paths left where they are."""
    stuck: list[Path] = []
    for tmp, dst in reversed(done):
        try:
            dst.rename(tmp)
        except OSError:
            stuck.append(dst)
    for src, tmp, _dst in reversed(staged):
        if not tmp.exists():
            continue
        try:
            tmp.rename(src)
        except OSError:
            stuck.append(tmp)
    return stuck


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Rename many files at once.")
    parser.add_argument("directory", type=Path)
    parser.add_argument("--prefix", default="")
    parser.add_argument("--suffix", default="", help="added before the extension")
    parser.add_argument("--replace", nargs=2, metavar=("OLD", "NEW"))
    parser.add_argument("--regex", nargs=2, metavar=("PATTERN", "REPL"))
    case = parser.add_mutually_exclusive_group()
    case.add_argument("--lower", action="store_const", const="lower", dest="case")
    case.add_argument("--upper", action="store_const", const="upper", dest="case")
    parser.add_argument("--number", action="store_true", help="append a sequence number")
    parser.add_argument("--start", type=int, default=1)
    parser.add_argument("--width", type=int, default=3)
    parser.add_argument("--ext", help="only files with this extension")
    parser.add_argument("--apply", action="store_true", help="rename (default is preview)")
    args = parser.parse_args(argv)

    directory = args.directory.expanduser()
    rules = RenameRules(
        prefix=args.prefix, suffix=args.suffix,
        replace=tuple(args.replace) if args.replace else None,
        regex=tuple(args.regex) if args.regex else None,
        case=args.case, number=args.number, start=args.start, width=args.width,
    )
    try:
        if not directory.is_dir():
            raise ToolkitError(f"Not a directory: {directory}")
        pairs = [(s, d) for s, d in plan(directory, rules, ext=args.ext) if s != d]
        if not pairs:
            print("Nothing to rename.")
            return 0
        check_collisions(pairs)
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    for src, dst in pairs:
        print(f"  {src.name}  ->  {dst.name}")
    if not args.apply:
        print(f"  [DRY-RUN] {len(pairs)} files would be renamed; re-run with --apply")
        return 0
    try:
        count = apply(pairs)
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"  [OK] Renamed {count} files")
    return 0


if __name__ == "__main__":
    sys.exit(main())
