#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Website Monitor

Polls one or more URLs every --interval seconds, records status code and
latency to CSV and logs every UP/DOWN transition to site_monitor.log.
Stops after --count rounds (0 = until Ctrl+C) and prints uptime per URL.
"""

import argparse
import logging
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import requests

from jtoolkit.common import append_csv_row, data_dir, now_iso, setup_file_logging

logger = logging.getLogger(__name__)

CSV_FIELDS = ["timestamp", "url", "status", "ms", "up", "error"]
USER_AGENT = "jtoolkit-site-monitor/1.0"


@dataclass
class SiteState:
    url: str
    up: bool | None = None
    checks: int = 0
    failures: int = 0
    last_status: int | None = None
    last_ms: float = 0.0

    @property
    def uptime(self) -> float:
        return 100.0 * (self.checks - self.failures) / self.checks if self.checks else 0.0


def check_url(session: requests.Session, url: str, *, timeout: float = 10.0,
              expect: str | None = None) -> dict:
    """Fetch url once. Up means status < 400 and, if given, `expect` in the body."""
    start = time.perf_counter()
    try:
        r = session.get(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as exc:
        return {"timestamp": now_iso(), "url": url, "status": None,
                "ms": round((time.perf_counter() - start) * 1000, 1), "up": False,
                "error": exc.__class__.__name__}
    ms = round((time.perf_counter() - start) * 1000, 1)
    up = r.status_code < 400
    error = "" if up else r.reason or f"HTTP {r.status_code}"
    if up and expect and expect not in r.text:
        up, error = False, f"text {expect!r} not found"
    return {"timestamp": now_iso(), "url": url, "status": r.status_code, "ms": ms, "up": up, "error": error}


def record(state: SiteState, result: dict) -> str | None:
    """Fold a check result into state; return 'UP'/'DOWN' on a transition."""
    state.checks += 1
    state.last_status = result["status"]
    state.last_ms = result["ms"]
    if not result["up"]:
        state.failures += 1
    changed = state.up is not None and state.up != result["up"]
    first_down = state.up is None and not result["up"]
    state.up = result["up"]
    if changed or first_down:
        return "UP" if result["up"] else "DOWN"
    return None


def monitor(
    urls: list[str], *, interval: float = 60.0, count: int = 0, timeout: float = 10.0,
    expect: str | None = None, csv_path: Path | None = None,
    session: requests.Session | None = None, sleep: Callable[[float], None] = time.sleep,
) -> dict[str, SiteState]:
    states = {u: SiteState(u) for u in urls}
    session = session or requests.Session()
    session.headers.setdefault("User-Agent", USER_AGENT)
    rounds = 0
    try:
        while True:
            for url in urls:
                result = check_url(session, url, timeout=timeout, expect=expect)
                transition = record(states[url], result)
                mark = "UP  " if result["up"] else "DOWN"
                print(f"  {result['timestamp']}  {mark}  {result['status'] or '---'}  "
                      f"{result['ms']:>8.1f} ms  {url}  {result['error']}".rstrip())
                if transition == "DOWN":
                    logger.warning("%s is DOWN (%s)", url, result["error"] or result["status"])
                elif transition == "UP":
                    logger.info("%s is back UP (%s, %.0f ms)", url, result["status"], result["ms"])
                if csv_path:
                    append_csv_row(csv_path, CSV_FIELDS, result)
            rounds += 1
            if count and rounds >= count:
                break
            sleep(interval)
    except KeyboardInterrupt:
        print("\nStopped.")
    return states


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Poll websites and log availability.")
    parser.add_argument("urls", nargs="+")
    parser.add_argument("-i", "--interval", type=float, default=60.0, help="seconds between rounds")
    parser.add_argument("-n", "--count", type=int, default=0, help="rounds to run (0 = forever)")
    parser.add_argument("--timeout", type=float, default=10.0)
    parser.add_argument("--expect", help="text that must appear in the page")
    parser.add_argument("--csv", type=Path, help="results CSV (default: <data dir>/site_monitor.csv)")
    parser.add_argument("--log", type=Path, help="log file (default: <data dir>/site_monitor.log)")
    args = parser.parse_args(argv)

    base = data_dir()
    setup_file_logging(args.log or base / "site_monitor.log")
    csv_path = args.csv or base / "site_monitor.csv"
    logger.info("monitoring %s every %ss", ", ".join(args.urls), args.interval)

    states = monitor(args.urls, interval=args.interval, count=args.count,
                     timeout=args.timeout, expect=args.expect, csv_path=csv_path)

    print()
    print("Summary:")
    for s in states.values():
        print(f"  {s.url}: {s.uptime:.1f}% up over {s.checks} checks")
    return 0 if all(s.up for s in states.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
