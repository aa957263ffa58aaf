#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TCP Port Scanner

Connect-scans a host over a port list such as "22,80,443", "1-1024" or a
mix of both. Only use it against hosts you are allowed to scan.
"""

import argparse
import socket
import sys
import time
from pathlib import Path

from jtoolkit.common import now_iso, write_csv

COMMON_PORTS = "21,22,23,25,53,80,110,143,443,445,993,995,3306,3389,5432,6379,8080,8443"
MAX_PORT = 65535
CSV_FIELDS = ["timestamp", "host", "port", "state", "service", "ms"]


def parse_ports(spec: str) -> list[int]:
    """Expand '22,80,8000-8010' into a sorted, de-duplicated port list."""
    ports: set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        lo_s, dash, hi_s = part.partition("-")
        try:
            lo = int(lo_s)
            hi = int(hi_s) if dash else lo
        except ValueError:
            raise ValueError(f"invalid port spec {part!r}") from None
        if not (1 <= lo <= MAX_PORT and 1 <= hi <= MAX_PORT) or lo > hi:
            raise ValueError(f"port range out of bounds: {part!r}")
        ports.update(range(lo, hi + 1))
    if not ports:
        raise ValueError("no ports given")
    return sorted(ports)


def service_name(port: int) -> str:
    try:
        return socket.getservbyport(port, "tcp")
    except OSError:
        return ""


def scan_port(host: str, port: int, timeout: float) -> tuple[str, float]:
    """Return ('open' | 'closed' | 'filtered', elapsed_ms)."""
    start = time.perf_counter()
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(timeout)
        try:
            code = s.connect_ex((host, port))
        except socket.timeout:
            code = None
        except OSError:
            code = -1
    ms = (time.perf_counter() - start) * 1000
    if code == 0:
        return "open", ms
    if code is None or ms >= timeout * 1000:
        return "filtered", ms
    return "closed", ms


def scan(host: str, ports: list[int], timeout: float = 0.5) -> list[dict]:
    try:
        address = socket.gethostbyname(host)
    except socket.gaierror as exc:
        raise ValueError(f"cannot resolve {host}: {exc}") from exc
    results = []
    scanned_at = now_iso()
    for port in ports:
        state, ms = scan_port(address, port, timeout)
        results.append({
            "timestamp": scanned_at, "host": host, "port": port, "state": state,
            "service": service_name(port) if state == "open" else "", "ms": round(ms, 1),
        })
    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="TCP connect port scanner.")
    parser.add_argument("host")
    parser.add_argument("-p", "--ports", default=COMMON_PORTS, help="e.g. 22,80,443 or 1-1024")
    parser.add_argument("--timeout", type=float, default=0.5, help="per-port timeout (s)")
    parser.add_argument("--all", action="store_true", help="show closed/filtered ports too")
    parser.add_argument("--csv", type=Path, help="write results as CSV")
    args = parser.parse_args(argv)

    try:
        ports = parse_ports(args.ports)
        print(f"Scanning {args.host} ({len(ports)} ports)...")
        results = scan(args.host, ports, args.timeout)
    except ValueError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130

    shown = [r for r in results if args.all or r["state"] == "open"]
    for r in shown:
        print(f"  {r['port']:>5}/tcp  {r['state']:<8} {r['service']}")
    open_count = sum(1 for r in results if r["state"] == "open")
    print(f"{open_count} open of {len(results)} scanned")

    if args.csv:
        write_csv(args.csv, CSV_FIELDS, results)
        print(f"  [OK] {args.csv}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
