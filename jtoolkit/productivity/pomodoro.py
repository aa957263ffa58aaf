#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pomodoro Timer

Runs work / short break cycles with a long break after every --cycles work
sessions. Completed work sessions are appended to pomodoro.json in the data
directory.
"""

import argparse
import sys
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from jtoolkit.common import data_dir, load_records, now_iso, save_records

STORE_NAME = "pomodoro.json"


def schedule(rounds: int, *, work: float, short: float, long: float, cycles: int) -> Iterator[tuple[str, float]]:
    """Yield (phase, minutes): work, break, work, ... with a long break every `cycles`."""
    for n in range(1, rounds + 1):
        yield "work", work
        if n == rounds:
            break
        yield ("long break", long) if n % cycles == 0 else ("short break", short)


def countdown(minutes: float, label: str, *, sleep: Callable[[float], None] = time.sleep,
              tick: float = 1.0) -> None:
    remaining = int(minutes * 60)
    while remaining > 0:
        mins, secs = divmod(remaining, 60)
        print(f"\r  {label:<12} {mins:02d}:{secs:02d} ", end="", flush=True)
        step = min(tick, remaining)
        sleep(step)
        remaining -= int(step) or 1
    print(f"\r  {label:<12} done    ")


def log_session(path: Path, task: str, minutes: float) -> None:
    records = load_records(path)
    records.append({"task": task, "minutes": minutes, "finished": now_iso()})
    save_records(path, records)


def run(task: str, rounds: int, *, work: float, short: float, long: float, cycles: int,
        store: Path, sleep: Callable[[float], None] = time.sleep) -> int:
    """Run the schedule; return the number of completed work sessions."""
    completed = 0
    try:
        for phase, minutes in schedule(rounds, work=work, short=short, long=long, cycles=cycles):
            print("\a", end="")
            countdown(minutes, phase, sleep=sleep)
            if phase == "work":
                completed += 1
                log_session(store, task, minutes)
                print(f"  [OK] Session {completed}/{rounds} complete")
    except KeyboardInterrupt:
        print("\nStopped.")
    return completed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Pomodoro timer.")
    parser.add_argument("task", nargs="?", default="focus")
    parser.add_argument("--work", type=float, default=25, help="work minutes")
    parser.add_argument("--short", type=float, default=5, help="short break minutes")
    parser.add_argument("--long", type=float, default=15, help="long break minutes")
    parser.add_argument("--cycles", type=int, default=4, help="work sessions before a long break")
    parser.add_argument("-n", "--rounds", type=int, default=4, help="work sessions to run")
    parser.add_argument("--stats", action="store_true", help="show completed sessions and exit")
    args = parser.parse_args(argv)

    store = data_dir() / STORE_NAME
    if args.stats:
        records = load_records(store)
        today = now_iso()[:10]
        done_today = [r for r in records if r["finished"].startswith(today)]
        print(f"  Today : {len(done_today)} sessions, {sum(r['minutes'] for r in done_today):g} min")
        print(f"  Total : {len(records)} sessions, {sum(r['minutes'] for r in records):g} min")
        return 0

    if args.rounds < 1 or args.cycles < 1:
        parser.error("--rounds and --cycles must be at least 1")
    print(f"Pomodoro: {args.rounds} x {args.work:g} min on '{args.task}' (Ctrl+C to stop)")
    completed = run(args.task, args.rounds, work=args.work, short=args.short,
                    long=args.long, cycles=args.cycles, store=store)
    print(f"{completed} sessions completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
