#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File Integrity Checker

    baseline DIR   record a hash manifest of every file in DIR
    verify DIR     compare DIR against the manifest: ADDED / REMOVED / MODIFIED
    hash FILE...   print digests

The manifest defaults to DIR/.integrity.json and is excluded from itself.
Exit code of `verify` is 1 when anything changed.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path

from jtoolkit.common import ToolkitError, iter_files, now_iso, read_json, write_json
from jtoolkit.files.duplicates import ALGORITHMS, file_digest

MANIFEST_NAME = ".integrity.json"


@dataclass
class Changes:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.added or self.removed or self.modified)


def hash_tree(root: Path, algorithm: str = "sha256", *, exclude: Path | None = None) -> dict[str, str]:
    digests: dict[str, str] = {}
    skip = exclude.resolve() if exclude else None
    for path in iter_files(root, skip_dirs=(".git",)):
        if skip and path.resolve() == skip:
            continue
        try:
            digests[path.relative_to(root).as_posix()] = file_digest(path, algorithm)
        except OSError as exc:
            print(f"  [WARN] cannot read {path}: {exc}", file=sys.stderr)
    return digests


def create_baseline(root: Path, manifest: Path, algorithm: str = "sha256") -> dict:
    data = {
        "root": str(root.resolve()),
        "algorithm": algorithm,
        "created": now_iso(),
        "files": hash_tree(root, algorithm, exclude=manifest),
    }
    write_json(manifest, data)
    return data


def compare(baseline: dict[str, str], current: dict[str, str]) -> Changes:
    return Changes(
        added=sorted(current.keys() - baseline.keys()),
        removed=sorted(baseline.keys() - current.keys()),
        modified=sorted(k for k in baseline.keys() & current.keys() if baseline[k] != current[k]),
    )


def verify(root: Path, manifest: Path) -> Changes:
    data = read_json(manifest)
    if not isinstance(data, dict) or "files" not in data:
        raise ToolkitError(f"No baseline found at {manifest} (run `baseline` first)")
    algorithm = data.get("algorithm", "sha256")
    if algorithm not in ALGORITHMS:
        raise ToolkitError(f"Unsupported algorithm in manifest: {algorithm}")
    return compare(data["files"], hash_tree(root, algorithm, exclude=manifest))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Detect changed files with hash baselines.")
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_ in (("baseline", "record a manifest"), ("verify", "compare against the manifest")):
        p = sub.add_parser(name, help=help_)
        p.add_argument("directory", type=Path)
        p.add_argument("-m", "--manifest", type=Path, help=f"manifest path (default: DIR/{MANIFEST_NAME})")
        if name == "baseline":
            p.add_argument("--algorithm", choices=ALGORITHMS, default="sha256")
    p = sub.add_parser("hash", help="print file digests")
    p.add_argument("files", nargs="+", type=Path)
    p.add_argument("--algorithm", choices=ALGORITHMS, default="sha256")
    args = parser.parse_args(argv)

    try:
        if args.command == "hash":
            failed = 0
            for f in args.files:
                try:
                    print(f"{file_digest(f, args.algorithm)}  {f}")
                except OSError as exc:
                    print(f"[ERROR] {f}: {exc}", file=sys.stderr)
                    failed += 1
            return 1 if failed else 0

        root = args.directory.expanduser()
        if not root.is_dir():
            raise ToolkitError(f"Not a directory: {root}")
        manifest = args.manifest or root / MANIFEST_NAME

        if args.command == "baseline":
            data = create_baseline(root, manifest, args.algorithm)
            print(f"  [OK] {len(data['files'])} files recorded in {manifest}")
            return 0

        changes = verify(root, manifest)
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    for label, items in (("ADDED", changes.added), ("REMOVED", changes.removed), ("MODIFIED", changes.modified)):
        for item in items:
            print(f"  {label:<8} {item}")
    if changes.clean:
        print("  [OK] No changes since baseline")
        return 0
    print(f"{len(changes.added)} added, {len(changes.removed)} removed, {len(changes.modified)} modified")
    return 1


if __name__ == "__main__":
    sys.exit(main())
