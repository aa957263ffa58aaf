#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Quick System Benchmark

Measures CPU (sha256 rounds per second), memory copy throughput and
sequential disk write / read throughput, then appends one row per run to a
CSV file so results can be compared over time.
"""

import argparse
import hashlib
import os
import sys
import tempfile
import time
from pathlib import Path

from jtoolkit.common import HOSTNAME, append_csv_row, data_dir, now_iso

CSV_FIELDS = ["timestamp", "host", "cpu_ops", "mem_mbps", "disk_write_mbps", "disk_read_mbps"]
MB = 1024 * 1024


def bench_cpu(seconds: float = 2.0) -> float:
    """Hash a 1 KB block repeatedly; return rounds per second."""
    block = os.urandom(1024)
    rounds = 0
    start = time.perf_counter()
    deadline = start + seconds
    while time.perf_counter() < deadline:
        for _ in range(1000):
            block = hashlib.sha256(block).digest() * 32
        rounds += 1000
    return rounds / (time.perf_counter() - start)


def bench_memory(size_mb: int = 64, repeats: int = 5) -> float:
    """Copy a buffer of size_mb several times; return MB/s."""
    src = bytearray(size_mb * MB)
    start = time.perf_counter()
    for _ in range(repeats):
        dst = bytes(src)
        del dst
    elapsed = time.perf_counter() - start
    return size_mb * repeats / elapsed if elapsed else 0.0


def bench_disk(size_mb: int = 128, directory: Path | None = None) -> tuple[float, float]:
    """Write then read a temp file of size_mb; return (write MB/s, read MB/s)."""
    chunk = os.urandom(MB)
    fd, name = tempfile.mkstemp(prefix="jt-bench-", dir=directory)
    path = Path(name)
    try:
        start = time.perf_counter()
        with os.fdopen(fd, "wb") as fh:
            for _ in range(size_mb):
                fh.write(chunk)
            fh.flush()
            os.fsync(fh.fileno())
        write_s = time.perf_counter() - start

        start = time.perf_counter()
        with path.open("rb") as fh:
            while fh.read(MB):
                pass
        read_s = time.perf_counter() - start
    finally:
        path.unlink(missing_ok=True)
    return (size_mb / write_s if write_s else 0.0, size_mb / read_s if read_s else 0.0)


def run_benchmark(*, cpu_seconds: float, mem_mb: int, disk_mb: int, disk_dir: Path | None) -> dict:
    print("  CPU...")
    cpu_ops = bench_cpu(cpu_seconds)
    print("  Memory...")
    mem = bench_memory(mem_mb)
    print("  Disk...")
    disk_w, disk_r = bench_disk(disk_mb, disk_dir)
    return {
        "timestamp": now_iso(),
        "host": HOSTNAME,
        "cpu_ops": round(cpu_ops),
        "mem_mbps": round(mem, 1),
        "disk_write_mbps": round(disk_w, 1),
        "disk_read_mbps": round(disk_r, 1),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Quick CPU / memory / disk benchmark.")
    parser.add_argument("--cpu-seconds", type=float, default=2.0)
    parser.add_argument("--mem-mb", type=int, default=64)
    parser.add_argument("--disk-mb", type=int, default=128)
    parser.add_argument("--disk-dir", type=Path, help="directory for the disk test file")
    parser.add_argument("--csv", type=Path, help="results file (default: <data dir>/benchmark.csv)")
    args = parser.parse_args(argv)

    print(f"Benchmarking {HOSTNAME}...")
    try:
        row = run_benchmark(
            cpu_seconds=args.cpu_seconds, mem_mb=args.mem_mb,
            disk_mb=args.disk_mb, disk_dir=args.disk_dir,
        )
    except OSError as exc:
        print(f"[ERROR] Benchmark failed: {exc}", file=sys.stderr)
        return 1

    print()
    print(f"  CPU        : {row['cpu_ops']:,} sha256 rounds/s")
    print(f"  Memory     : {row['mem_mbps']} MB/s")
    print(f"  Disk write : {row['disk_write_mbps']} MB/s")
    print(f"  Disk read  : {row['disk_read_mbps']} MB/s")

    csv_path = args.csv or data_dir() / "benchmark.csv"
    append_csv_row(csv_path, CSV_FIELDS, row)
    print(f"  [OK] {csv_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
