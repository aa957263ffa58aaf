#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Time Tracker

Logs work sessions to timelog.json in the data directory. Starting a task
stops whatever is running; an open entry has "end": null.

    jt-time-tracker start "write report"
    jt-time-tracker status
    jt-time-tracker stop
    jt-time-tracker report --days 7
"""

import argparse
import datetime
import sys
from collections import defaultdict
from pathlib import Path

from jtoolkit.common import ToolkitError, data_dir, load_records, save_records, write_csv

STORE_NAME = "timelog.json"
CSV_FIELDS = ["task", "start", "end", "minutes"]


def store_path() -> Path:
    return data_dir() / STORE_NAME


def _now() -> datetime.datetime:
    return datetime.datetime.now().replace(microsecond=0)


def running(entries: list[dict]) -> dict | None:
    return next((e for e in reversed(entries) if e.get("end") is None), None)


def stop(entries: list[dict], *, at: datetime.datetime | None = None) -> dict | None:
    entry = running(entries)
    if entry is None:
        return None
    end = at or _now()
    start = datetime.datetime.fromisoformat(entry["start"])
    entry["end"] = end.isoformat()
    entry["minutes"] = round(max((end - start).total_seconds(), 0) / 60, 1)
    return entry


def start(entries: list[dict], task: str, *, at: datetime.datetime | None = None) -> tuple[dict, dict | None]:
    """Begin task; return (new entry, entry that was stopped or None)."""
    task = task.strip()
    if not task:
        raise ToolkitError("Task name is empty")
    when = at or _now()
    stopped = stop(entries, at=when)
    entry = {"task": task, "start": when.isoformat(), "end": None, "minutes": 0}
    entries.append(entry)
    return entry, stopped


def summarize(entries: list[dict], *, days: int | None = None,
              now: datetime.datetime | None = None) -> dict[str, float]:
    """Minutes per task, largest first; a running entry counts up to now."""
    now = now or _now()
    cutoff = now - datetime.timedelta(days=days) if days else None
    totals: dict[str, float] = defaultdict(float)
    for e in entries:
        begin = datetime.datetime.fromisoformat(e["start"])
        if cutoff and begin < cutoff:
            continue
        if e.get("end") is None:
            minutes = max((now - begin).total_seconds(), 0) / 60
        else:
            minutes = e.get("minutes", 0)
        totals[e["task"]] += minutes
    return dict(sorted(totals.items(), key=lambda x: x[1], reverse=True))


def fmt_minutes(minutes: float) -> str:
    h, m = divmod(int(round(minutes)), 60)
    return f"{h}h {m:02d}m" if h else f"{m}m"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Track time spent on tasks.")
    sub = parser.add_subparsers(dest="command", required=True)
    p = sub.add_parser("start", help="start a task (stops the running one)")
    p.add_argument("task", nargs="+")
    sub.add_parser("stop", help="stop the running task")
    sub.add_parser("status", help="show the running task")
    p = sub.add_parser("report", help="minutes per task")
    p.add_argument("--days", type=int, help="only entries started in the last N days")
    p = sub.add_parser("export", help="export all entries as CSV")
    p.add_argument("file", type=Path)
    args = parser.parse_args(argv)

    path = store_path()
    try:
        entries = load_records(path)
        if args.command == "start":
            entry, stopped = start(entries, " ".join(args.task))
            save_records(path, entries)
            if stopped:
                print(f"  [OK] Stopped '{stopped['task']}' after {fmt_minutes(stopped['minutes'])}")
            print(f"  [OK] Started '{entry['task']}' at {entry['start'][11:16]}")
        elif args.command == "stop":
            stopped = stop(entries)
            if stopped is None:
                print("Nothing is running.")
                return 0
            save_records(path, entries)
            print(f"  [OK] Stopped '{stopped['task']}' after {fmt_minutes(stopped['minutes'])}")
        elif args.command == "status":
            entry = running(entries)
            if entry is None:
                print("Nothing is running.")
            else:
                elapsed = (_now() - datetime.datetime.fromisoformat(entry["start"])).total_seconds() / 60
                print(f"  Running: '{entry['task']}' for {fmt_minutes(elapsed)}")
        elif args.command == "report":
            totals = summarize(entries, days=args.days)
            if not totals:
                print("No entries.")
                return 0
            width = max(len(t) for t in totals)
            for task, minutes in totals.items():
                print(f"  {task:<{width}}  {fmt_minutes(minutes):>8}")
            print(f"  {'Total':<{width}}  {fmt_minutes(sum(totals.values())):>8}")
        elif args.command == "export":
            count = write_csv(args.file, CSV_FIELDS, entries)
            print(f"  [OK] {args.file} ({count} entries)")
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
