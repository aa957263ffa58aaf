#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Disk Usage Report

Generates a Markdown report with:
  - usage of every real mount
  - file categories (categories.json) for a scanned tree
  - extension breakdown of the "Other" category
  - the largest files found during the scan
"""

import argparse
import heapq
import stat as stat_mod
import sys
from dataclasses import dataclass, field
from pathlib import Path

import psutil

from jtoolkit.common import (
    HOSTNAME,
    format_bytes,
    get_real_mounts,
    load_categories,
    markdown_table,
    now_iso,
)

MAX_FILES = 200_000
TOP_LARGEST = 20
# "Other" extensions shown only when significant
MIN_OTHER_SIZE = 10 * 1024 * 1024
MIN_OTHER_COUNT = 1000


@dataclass
class ScanResult:
    cat_stats: dict[str, list[int]] = field(default_factory=dict)     # {category: [count, bytes]}
    other_exts: dict[str, list[int]] = field(default_factory=dict)    # {ext: [count, bytes]}
    largest: list[tuple[int, str]] = field(default_factory=list)      # [(bytes, path)]
    scanned: int = 0
    truncated: bool = False

    @property
    def total_bytes(self) -> int:
        return sum(v[1] for v in self.cat_stats.values())


def _bump(table: dict[str, list[int]], key: str, size: int) -> None:
    if key in table:
        table[key][0] += 1
        table[key][1] += size
    else:
        table[key] = [1, size]


def scan_tree(root: Path, max_files: int = MAX_FILES, top: int = TOP_LARGEST) -> ScanResult:
    """Scan files under root (same device, no symlink follow).

    Uses a single lstat() per entry.
    """
    _, ext_to_cat = load_categories()
    result = ScanResult()
    try:
        root_dev = root.stat().st_dev
    except OSError:
        return result

    heap: list[tuple[int, str]] = []
    stack = [root]
    while stack:
        current = stack.pop()
        try:
            entries = list(current.iterdir())
        except OSError:
            continue
        for entry in entries:
            if result.scanned >= max_files:
                result.truncated = True
                stack.clear()
                break
            try:
                st = entry.lstat()
            except OSError:
                continue
            mode = st.st_mode
            if stat_mod.S_ISLNK(mode):
                continue
            if stat_mod.S_ISDIR(mode):
                if st.st_dev == root_dev:
                    stack.append(entry)
            elif stat_mod.S_ISREG(mode):
                ext = entry.suffix.lower()
                cat = ext_to_cat.get(ext, "Other")
                _bump(result.cat_stats, cat, st.st_size)
                if cat == "Other":
                    _bump(result.other_exts, ext or "(no ext)", st.st_size)
                item = (st.st_size, str(entry))
                if len(heap) < top:
                    heapq.heappush(heap, item)
                elif heap and item > heap[0]:
                    heapq.heapreplace(heap, item)
                result.scanned += 1

    result.largest = sorted(heap, reverse=True)
    return result


def mount_rows() -> list[list[str]]:
    rows = []
    for part in get_real_mounts():
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except (PermissionError, OSError):
            continue
        rows.append([
            part.device, format_bytes(usage.total), format_bytes(usage.used),
            format_bytes(usage.free), f"{usage.percent:.0f}%", part.mountpoint,
        ])
    return rows


def render(root: Path, result: ScanResult, mounts: list[list[str]]) -> list[str]:
    lines: list[str] = []
    w = lines.append

    w(f"# Disk Space Report - {HOSTNAME}")
    w("")
    w(f"> Generated: {now_iso()}")
    w("")

    w("## Mounts")
    w("")
    if mounts:
        lines.extend(markdown_table(["Filesystem", "Size", "Used", "Avail", "Use%", "Mount"], mounts))
    else:
        w("(no mounts found)")
    w("")

    w(f"## File Categories under `{root}`")
    w("")
    if not result.cat_stats:
        w("(no files found or access denied)")
        w("")
        return lines

    truncated = " (truncated)" if result.truncated else ""
    w(f"*Scanned {result.scanned:,} files, {format_bytes(result.total_bytes)}{truncated}*")
    w("")
    by_size = sorted(result.cat_stats.items(), key=lambda x: x[1][1], reverse=True)
    grand = result.total_bytes or 1
    lines.extend(markdown_table(
        ["Category", "Count", "Total Size", "Share"],
        ([cat, f"{cnt:,}", format_bytes(tot), f"{tot * 100 // grand}%"] for cat, (cnt, tot) in by_size),
    ))
    w("")

    significant = {
        ext: v for ext, v in result.other_exts.items()
        if v[1] >= MIN_OTHER_SIZE or v[0] >= MIN_OTHER_COUNT
    }
    w("## Other Extensions")
    w("")
    if significant:
        lines.extend(markdown_table(
            ["Extension", "Count", "Total Size"],
            ([ext, f"{cnt:,}", format_bytes(tot)]
             for ext, (cnt, tot) in sorted(significant.items(), key=lambda x: x[1][1], reverse=True)),
        ))
    else:
        w("(no extension reaches threshold)")
    w("")

    w("## Largest Files")
    w("")
    rows = []
    for size, path_str in result.largest:
        if len(path_str) > 80:
            path_str = "..." + path_str[-77:]
        rows.append([path_str, format_bytes(size)])
    lines.extend(markdown_table(["File Path", "Size"], rows))
    w("")
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Disk usage and file category report.")
    parser.add_argument("path", nargs="?", type=Path, default=Path.home(), help="tree to scan (default: home)")
    parser.add_argument("--max-files", type=int, default=MAX_FILES)
    parser.add_argument("--top", type=int, default=TOP_LARGEST, help="number of largest files to list")
    parser.add_argument("-o", "--output", type=Path, help="write the report here instead of stdout")
    args = parser.parse_args(argv)

    root = args.path.expanduser()
    if not root.is_dir():
        print(f"[ERROR] Not a directory: {root}", file=sys.stderr)
        return 1

    print(f"  Scanning {root}...", file=sys.stderr)
    result = scan_tree(root, max_files=args.max_files, top=args.top)
    report = "\n".join(render(root, result, mount_rows()))

    if args.output:
        args.output.write_text(report, encoding="utf-8")
        print(f"  [OK] {args.output} ({result.scanned:,} files scanned)")
    else:
        print(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
