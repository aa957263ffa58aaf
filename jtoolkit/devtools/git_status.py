#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Multi-Repository Git Status

Finds git repositories below a root directory and reports, for each one,
the current branch, number of changed files, ahead/behind counts against the
upstream and the last commit. Optionally fetches first, or fast-forward pulls
repositories that have no local changes.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

from jtoolkit.common import SKIP_DIRS, ToolkitError, markdown_table, run_cmd_checked, sanitize, which

DEFAULT_DEPTH = 3


@dataclass
class RepoStatus:
    path: Path
    branch: str = "?"
    changed: int = 0
    ahead: int = 0
    behind: int = 0
    upstream: str = ""
    last_commit: str = ""
    error: str = ""
    action: str = ""

    @property
    def dirty(self) -> bool:
        return self.changed > 0


def find_repos(root: Path, max_depth: int = DEFAULT_DEPTH) -> list[Path]:
    """Return directories under root (inclusive) that contain a .git entry."""
    repos: list[Path] = []
    stack = [(root, 0)]
    while stack:
        current, depth = stack.pop()
        if (current / ".git").exists():
            repos.append(current)
            continue
        if depth >= max_depth:
            continue
        try:
            children = sorted(p for p in current.iterdir() if p.is_dir() and not p.is_symlink())
        except OSError:
            continue
        for child in reversed(children):
            if child.name in SKIP_DIRS:
                continue
            stack.append((child, depth + 1))
    return sorted(repos)


def parse_porcelain(output: str) -> tuple[str, str, int, int, int]:
    """Parse `git status --porcelain=v2 --branch` into (branch, upstream, ahead, behind, changed)."""
    branch, upstream = "?", ""
    ahead = behind = changed = 0
    for line in output.splitlines():
        if line.startswith("# branch.head "):
            branch = line.split(" ", 2)[2]
        elif line.startswith("# branch.upstream "):
            upstream = line.split(" ", 2)[2]
        elif line.startswith("# branch.ab "):
            for part in line.split()[2:]:
                if part.startswith("+"):
                    ahead = int(part[1:])
                elif part.startswith("-"):
                    behind = int(part[1:])
        elif line and not line.startswith("#"):
            changed += 1
    return branch, upstream, ahead, behind, changed


def repo_status(path: Path, *, fetch: bool = False, pull: bool = False) -> RepoStatus:
    status = RepoStatus(path=path)
    try:
        if fetch or pull:
            run_cmd_checked(["git", "fetch", "--quiet"], cwd=path, timeout=120)
        out = run_cmd_checked(["git", "status", "--porcelain=v2", "--branch"], cwd=path)
        status.branch, status.upstream, status.ahead, status.behind, status.changed = parse_porcelain(out)
        status.last_commit = sanitize(run_cmd_checked(
            ["git", "log", "-1", "--format=%h %s (%cr)"], cwd=path,
        ))
    except ToolkitError as exc:
        # A fresh repo without commits fails on `git log`
        if not status.last_commit and "does not have any commits" in str(exc):
            status.last_commit = "(no commits)"
        else:
            status.error = sanitize(str(exc))
            return status

    if pull:
        if status.dirty:
            status.action = "skipped (dirty)"
        elif not status.upstream:
            status.action = "skipped (no upstream)"
        elif status.behind == 0:
            status.action = "up to date"
        else:
            try:
                run_cmd_checked(["git", "pull", "--ff-only", "--quiet"], cwd=path, timeout=300)
                status.action = f"pulled {status.behind} commit(s)"
                status.behind = 0
            except ToolkitError as exc:
                status.action = "pull failed"
                status.error = sanitize(str(exc))
    return status


def render(root: Path, statuses: list[RepoStatus]) -> list[str]:
    rows = []
    for s in statuses:
        try:
            name = str(s.path.relative_to(root)) or "."
        except ValueError:
            name = str(s.path)
        if s.error and not s.action:
            rows.append([name, "-", "-", "-", f"ERROR: {s.error}"])
            continue
        sync = f"+{s.ahead} / -{s.behind}" if s.upstream else "no upstream"
        state = f"{s.changed} changed" if s.dirty else "clean"
        note = s.action or s.last_commit
        rows.append([name, s.branch, state, sync, note])
    return markdown_table(["Repository", "Branch", "Working Tree", "Ahead / Behind", "Last Commit / Action"], rows)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show git status for every repository under a directory.")
    parser.add_argument("root", nargs="?", type=Path, default=Path.cwd())
    parser.add_argument("--depth", type=int, default=DEFAULT_DEPTH, help="search depth")
    parser.add_argument("--fetch", action="store_true", help="git fetch before reporting")
    parser.add_argument("--pull", action="store_true", help="fast-forward pull clean repositories")
    parser.add_argument("--dirty-only", action="store_true", help="only list repositories with changes")
    args = parser.parse_args(argv)

    if not which("git"):
        print("[ERROR] git not found on PATH", file=sys.stderr)
        return 1

    root = args.root.expanduser().resolve()
    repos = find_repos(root, args.depth)
    if not repos:
        print(f"No git repositories found under {root}")
        return 0

    print(f"Checking {len(repos)} repositories under {root}...")
    statuses = [repo_status(r, fetch=args.fetch, pull=args.pull) for r in repos]
    if args.dirty_only:
        statuses = [s for s in statuses if s.dirty or s.ahead or s.error]

    print()
    print("\n".join(render(root, statuses)))
    print()
    dirty = sum(1 for s in statuses if s.dirty)
    failed = sum(1 for s in statuses if s.error)
    print(f"{len(repos)} repositories, {dirty} with local changes, {failed} with errors")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
