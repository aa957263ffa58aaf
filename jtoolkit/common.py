# -*- coding: utf-8 -*-
"""
Helpers shared by every jToolkit utility.

Covers running external commands, human-readable formatting, the shared
file-category table (categories.json), the flat JSON / CSV record stores kept
under the data directory, and log-file setup for the tools that keep one.
"""

import csv
import datetime
import functools
import json
import logging
import os
import re
import shutil
import socket
import subprocess
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path

import psutil

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
PACKAGE_DIR = Path(__file__).resolve().parent
HOSTNAME = socket.gethostname()
DATA_ENV_VAR = "JTOOLKIT_HOME"
DEFAULT_DATA_DIR = Path.home() / ".jtoolkit"

# Directories never worth descending into when walking a tree
SKIP_DIRS = frozenset({
    ".git", ".hg", ".svn", "node_modules", "__pycache__",
    ".venv", "venv", ".tox", ".mypy_cache", ".pytest_cache",
})

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ToolkitError(Exception):
    """User-facing failure: printed as [ERROR] and turned into exit code 1."""


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
def run_cmd(command: str | list[str], *, timeout: int = 30, cwd: Path | None = None) -> str:
    """Run a command and return stdout, or "" when it cannot run."""
    try:
        r = subprocess.run(
            command,
            shell=isinstance(command, str),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=cwd,
        )
        return r.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        return ""


def run_cmd_checked(args: list[str], *, timeout: int = 60, cwd: Path | None = None) -> str:
    """Run a command, raising ToolkitError on a missing binary or non-zero exit."""
    if not which(args[0]):
        raise ToolkitError(f"{args[0]} not found on PATH")
    try:
        r = subprocess.run(
            args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired as exc:
        raise ToolkitError(f"{' '.join(args)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise ToolkitError(f"{' '.join(args)} failed: {exc}") from exc
    if r.returncode != 0:
        detail = (r.stderr or r.stdout).strip().splitlines()
        raise ToolkitError(
            f"{' '.join(args)} exited {r.returncode}: {detail[-1] if detail else 'no output'}"
        )
    return r.stdout.strip()


def which(name: str) -> bool:
    """Check if a command is available on PATH."""
    return shutil.which(name) is not None


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------
def format_bytes(n: int | float) -> str:
    """Format bytes to human-readable string."""
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(n) < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} PB"


def format_duration(seconds: float) -> str:
    seconds = int(seconds)
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def sanitize(text: str) -> str:
    """Strip ANSI escape codes and non-printable characters."""
    text = re.sub(r"\x1b\[[0-9;]*m", "", text)
    return "".join(c for c in text if c.isprintable() or c in "\n\t")


def now_iso() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


def stamp() -> str:
    """Compact timestamp used in generated file names."""
    return datetime.datetime.now().strftime("%Y%m%d_%H%M%S")


def markdown_table(headers: list[str], rows: Iterable[Iterable[object]]) -> list[str]:
    """Render a Markdown table as a list of lines."""
    out = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("-" * (len(h) + 2) for h in headers) + "|",
    ]
    for row in rows:
        out.append("| " + " | ".join(str(c) for c in row) + " |")
    return out


# ---------------------------------------------------------------------------
# File-type categories (categories.json, shared across tools)
# ---------------------------------------------------------------------------
@functools.lru_cache(maxsize=1)
def load_categories() -> tuple[dict[str, frozenset[str]], dict[str, str]]:
    """Load categories from categories.json inside the package."""
    cat_file = PACKAGE_DIR / "categories.json"
    raw: dict[str, list[str]] = json.loads(cat_file.read_text(encoding="utf-8"))
    categories = {cat: frozenset(exts) for cat, exts in raw.items()}
    ext_to_cat = {ext: cat for cat, exts in categories.items() for ext in exts}
    return categories, ext_to_cat


def category_for(path: Path) -> str:
    _, ext_to_cat = load_categories()
    return ext_to_cat.get(path.suffix.lower(), "Other")


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------
def get_real_mounts() -> list:
    """Return real (non-virtual) mount partitions."""
    skip_fs = {"tmpfs", "devtmpfs", "overlay", "efivarfs", "squashfs"}
    result = []
    for part in psutil.disk_partitions(all=False):
        if part.fstype in skip_fs:
            continue
        if "/run/credentials" in part.mountpoint or "/snap/" in part.mountpoint:
            continue
        result.append(part)
    return result


def iter_files(root: Path, *, skip_dirs: Iterable[str] = SKIP_DIRS) -> Iterator[Path]:
    """Yield regular files under root, pruning skip_dirs, never following symlinks."""
    skip = set(skip_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip)
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_symlink() or not path.is_file():
                continue
            yield path


def unique_path(path: Path) -> Path:
    """Return path, or 'name (1).ext', 'name (2).ext'... if it already exists."""
    if not path.exists():
        return path
    n = 1
    while True:
        candidate = path.with_name(f"{path.stem} ({n}){path.suffix}")
        if not candidate.exists():
            return candidate
        n += 1


# ---------------------------------------------------------------------------
# Record stores
# ---------------------------------------------------------------------------
def data_dir() -> Path:
    """Directory holding notes, time logs and other stores ($JTOOLKIT_HOME)."""
    base = Path(os.environ.get(DATA_ENV_VAR) or DEFAULT_DATA_DIR).expanduser()
    base.mkdir(parents=True, exist_ok=True)
    return base


def read_json(path: Path, default=None):
    """Read a JSON file; a missing file yields default."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    except OSError as exc:
        raise ToolkitError(f"Cannot read {path}: {exc}") from exc
    if not text.strip():
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ToolkitError(f"{path} is not valid JSON ({exc})") from exc


def write_json(path: Path, data) -> None:
    """Write JSON atomically (temp file in the same directory, then replace)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def load_records(path: Path) -> list[dict]:
    """Load a flat JSON array of records."""
    data = read_json(path, default=[])
    if not isinstance(data, list):
        raise ToolkitError(f"{path} does not contain a JSON array")
    return data


def save_records(path: Path, records: list[dict]) -> None:
    write_json(path, records)


def append_csv_row(path: Path, fieldnames: list[str], row: dict) -> None:
    """Append one row to a CSV file, writing the header when the file is new."""
    path.parent.mkdir(parents=True, exist_ok=True)
    new_file = not path.exists() or path.stat().st_size == 0
    with path.open("a", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames, extrasaction="ignore")
        if new_file:
            writer.writeheader()
        writer.writerow(row)


def write_csv(path: Path, fieldnames: list[str], rows: Iterable[dict]) -> int:
    """Write rows to a fresh CSV file; return the row count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
            count += 1
    return count


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def setup_file_logging(log_file: Path, level: int = logging.INFO) -> logging.Logger:
    """Attach a FileHandler for log_file to the jtoolkit logger (once per file)."""
    root = logging.getLogger("jtoolkit")
    root.setLevel(level)
    target = str(Path(log_file).resolve())
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return root
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return root
