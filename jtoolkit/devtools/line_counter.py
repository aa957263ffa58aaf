#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Line Counter

Counts files, code lines, blank lines and comment lines per language in a
source tree, skipping VCS metadata, dependency folders and virtualenvs.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

from jtoolkit.common import iter_files, markdown_table, write_csv

# extension -> (language, line comment prefixes)
LANGUAGES: dict[str, tuple[str, tuple[str, ...]]] = {
    ".py": ("Python", ("#",)),
    ".ps1": ("PowerShell", ("#",)),
    ".sh": ("Shell", ("#",)),
    ".bash": ("Shell", ("#",)),
    ".rb": ("Ruby", ("#",)),
    ".pl": ("Perl", ("#",)),
    ".r": ("R", ("#",)),
    ".yaml": ("YAML", ("#",)),
    ".yml": ("YAML", ("#",)),
    ".toml": ("TOML", ("#",)),
    ".js": ("JavaScript", ("//",)),
    ".jsx": ("JavaScript", ("//",)),
    ".ts": ("TypeScript", ("//",)),
    ".tsx": ("TypeScript", ("//",)),
    ".java": ("Java", ("//",)),
    ".kt": ("Kotlin", ("//",)),
    ".c": ("C", ("//",)),
    ".h": ("C", ("//",)),
    ".cpp": ("C++", ("//",)),
    ".hpp": ("C++", ("//",)),
    ".cs": ("C#", ("//",)),
    ".go": ("Go", ("//",)),
    ".rs": ("Rust", ("//",)),
    ".swift": ("Swift", ("//",)),
    ".php": ("PHP", ("//", "#")),
    ".css": ("CSS", ()),
    ".scss": ("SCSS", ("//",)),
    ".html": ("HTML", ()),
    ".htm": ("HTML", ()),
    ".sql": ("SQL", ("--",)),
    ".lua": ("Lua", ("--",)),
    ".bat": ("Batch", ("rem ", "REM ", "::")),
    ".md": ("Markdown", ()),
}


@dataclass
class LangStats:
    files: int = 0
    code: int = 0
    blank: int = 0
    comment: int = 0

    @property
    def total(self) -> int:
        return self.code + self.blank + self.comment


def count_lines(text: str, comment_prefixes: tuple[str, ...]) -> tuple[int, int, int]:
    """Return (code, blank, comment) line counts for text."""
    code = blank = comment = 0
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            blank += 1
        elif comment_prefixes and stripped.startswith(comment_prefixes):
            comment += 1
        else:
            code += 1
    return code, blank, comment


def count_tree(root: Path, *, include_unknown: bool = False) -> dict[str, LangStats]:
    stats: dict[str, LangStats] = {}
    for path in iter_files(root):
        lang, prefixes = LANGUAGES.get(path.suffix.lower(), (None, ()))
        if lang is None:
            if not include_unknown:
                continue
            lang = f"Other ({path.suffix.lower() or 'no ext'})"
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        if "\x00" in text[:1024]:
            continue
        code, blank, comment = count_lines(text, prefixes)
        s = stats.setdefault(lang, LangStats())
        s.files += 1
        s.code += code
        s.blank += blank
        s.comment += comment
    return stats


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Count lines of code per language.")
    parser.add_argument("root", nargs="?", type=Path, default=Path.cwd())
    parser.add_argument("--all", action="store_true", help="include unrecognised extensions")
    parser.add_argument("--csv", type=Path, help="export the table as CSV")
    args = parser.parse_args(argv)

    root = args.root.expanduser()
    if not root.is_dir():
        print(f"[ERROR] Not a directory: {root}", file=sys.stderr)
        return 1

    stats = count_tree(root, include_unknown=args.all)
    if not stats:
        print("No source files found.")
        return 0

    ordered = sorted(stats.items(), key=lambda x: x[1].code, reverse=True)
    rows = [[lang, f"{s.files:,}", f"{s.code:,}", f"{s.comment:,}", f"{s.blank:,}"] for lang, s in ordered]
    total = LangStats(
        files=sum(s.files for s in stats.values()),
        code=sum(s.code for s in stats.values()),
        blank=sum(s.blank for s in stats.values()),
        comment=sum(s.comment for s in stats.values()),
    )
    rows.append(["**Total**", f"{total.files:,}", f"{total.code:,}", f"{total.comment:,}", f"{total.blank:,}"])
    print("\n".join(markdown_table(["Language", "Files", "Code", "Comment", "Blank"], rows)))

    if args.csv:
        write_csv(
            args.csv, ["language", "files", "code", "comment", "blank"],
            ({"language": lang, "files": s.files, "code": s.code, "comment": s.comment, "blank": s.blank}
             for lang, s in ordered),
        )
        print(f"  [OK] {args.csv}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
