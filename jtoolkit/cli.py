#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
jToolkit command catalog.

    jtoolkit list                 show every tool, grouped by folder
    jtoolkit <tool> [args...]     run a tool (same as jt-<tool>)
"""

import importlib
import sys

from jtoolkit import __version__

# folder -> [(tool, module, summary)]
CATALOG: dict[str, list[tuple[str, str, str]]] = {
    "System-Utilities": [
        ("health-check", "jtoolkit.system.health_check", "CPU / memory / disk / battery health with thresholds"),
        ("disk-report", "jtoolkit.system.disk_report", "mount usage and file-category breakdown"),
        ("temp-cleanup", "jtoolkit.system.temp_cleanup", "remove old files from temp directories"),
        ("benchmark", "jtoolkit.system.benchmark", "quick CPU / memory / disk benchmark to CSV"),
        ("sysinfo", "jtoolkit.system.sysinfo", "system inventory snapshot"),
    ],
    "Development-Tools": [
        ("git-status", "jtoolkit.devtools.git_status", "status of every git repository under a folder"),
        ("line-counter", "jtoolkit.devtools.line_counter", "lines of code per language"),
        ("project-init", "jtoolkit.devtools.project_init", "scaffold a new project"),
    ],
    "File-Management": [
        ("duplicates", "jtoolkit.files.duplicates", "find duplicate files by hash"),
        ("organizer", "jtoolkit.files.organizer", "sort files into category folders"),
        ("backup", "jtoolkit.files.backup", "timestamped zip / copy backups with retention"),
        ("bulk-rename", "jtoolkit.files.bulk_rename", "rename many files at once"),
        ("image-resize", "jtoolkit.files.image_resize", "batch resize images"),
    ],
    "Network-Tools": [
        ("net-diag", "jtoolkit.network.net_diag", "connectivity diagnostics"),
        ("port-scan", "jtoolkit.network.port_scan", "TCP connect port scanner"),
        ("site-monitor", "jtoolkit.network.site_monitor", "poll websites and log outages"),
        ("speed-test", "jtoolkit.network.speed_test", "download throughput and latency"),
    ],
    "Productivity": [
        ("notes", "jtoolkit.productivity.notes", "quick notes"),
        ("clipboard", "jtoolkit.productivity.clipboard", "clipboard history"),
        ("time-tracker", "jtoolkit.productivity.time_tracker", "track time per task"),
        ("pomodoro", "jtoolkit.productivity.pomodoro", "pomodoro timer"),
        ("qr-code", "jtoolkit.productivity.qr_code", "generate QR code images"),
    ],
    "Security-Tools": [
        ("password-gen", "jtoolkit.security.password_gen", "generate passwords and passphrases"),
        ("password-check", "jtoolkit.security.password_check", "score password strength"),
        ("file-integrity", "jtoolkit.security.file_integrity", "hash baselines and change detection"),
    ],
    "Web-Portfolio": [
        ("portfolio", "jtoolkit.web.portfolio", "static portfolio page from JSON"),
        ("link-checker", "jtoolkit.web.link_checker", "find broken links"),
    ],
}

TOOLS = {tool: module for entries in CATALOG.values() for tool, module, _ in entries}


def print_catalog() -> None:
    print(f"jToolkit {__version__}")
    for folder, entries in CATALOG.items():
        print()
        print(f"{folder}:")
        for tool, _module, summary in entries:
            print(f"  {tool:<16} {summary}")
    print()
    print("Run `jtoolkit <tool> --help` for the options of a tool.")


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args or args[0] in ("list", "-h", "--help"):
        print_catalog()
        return 0
    if args[0] == "--version":
        print(__version__)
        return 0

    tool, rest = args[0], args[1:]
    module_name = TOOLS.get(tool) or TOOLS.get(tool.replace("_", "-"))
    if module_name is None:
        print(f"[ERROR] Unknown tool {tool!r}. Run `jtoolkit list`.", file=sys.stderr)
        return 2
    module = importlib.import_module(module_name)
    return module.main(rest)


if __name__ == "__main__":
    sys.exit(main())
