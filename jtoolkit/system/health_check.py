#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
System Health Check

Takes one snapshot of CPU, memory, swap, disk and battery state, compares each
metric to warn / critical thresholds and prints a status table.

Exit code: 0 when everything is OK, 1 on any WARN, 2 on any CRIT.
"""

import argparse
import datetime
import sys
from pathlib import Path

import psutil

from jtoolkit.common import (
    HOSTNAME,
    format_bytes,
    format_duration,
    get_real_mounts,
    markdown_table,
    now_iso,
    write_json,
)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
DEFAULT_CPU = (80.0, 95.0)
DEFAULT_MEMORY = (80.0, 95.0)
DEFAULT_SWAP = (50.0, 90.0)
DEFAULT_DISK = (85.0, 95.0)
# Battery thresholds are lower bounds: below warn -> WARN
DEFAULT_BATTERY = (20.0, 10.0)

STATUS_RANK = {"OK": 0, "WARN": 1, "CRIT": 2}


def evaluate(value: float, warn: float, crit: float, *, low_is_bad: bool = False) -> str:
    """Classify value against thresholds as OK, WARN or CRIT."""
    if low_is_bad:
        if value <= crit:
            return "CRIT"
        if value <= warn:
            return "WARN"
        return "OK"
    if value >= crit:
        return "CRIT"
    if value >= warn:
        return "WARN"
    return "OK"


def overall_status(metrics: list[dict]) -> str:
    worst = "OK"
    for m in metrics:
        if STATUS_RANK[m["status"]] > STATUS_RANK[worst]:
            worst = m["status"]
    return worst


def collect_metrics(
    *,
    cpu: tuple[float, float] = DEFAULT_CPU,
    memory: tuple[float, float] = DEFAULT_MEMORY,
    swap: tuple[float, float] = DEFAULT_SWAP,
    disk: tuple[float, float] = DEFAULT_DISK,
    battery: tuple[float, float] = DEFAULT_BATTERY,
    cpu_interval: float = 1.0,
) -> list[dict]:
    """Sample the system once and return one dict per checked metric."""
    metrics: list[dict] = []

    def add(name: str, value: float, status: str, detail: str) -> None:
        metrics.append({
            "name": name, "value": round(value, 1), "status": status, "detail": detail,
        })

    cpu_pct = psutil.cpu_percent(interval=cpu_interval)
    add("CPU", cpu_pct, evaluate(cpu_pct, *cpu), f"{psutil.cpu_count(logical=True)} threads")

    vmem = psutil.virtual_memory()
    add(
        "Memory", vmem.percent, evaluate(vmem.percent, *memory),
        f"{format_bytes(vmem.used)} / {format_bytes(vmem.total)}",
    )

    sw = psutil.swap_memory()
    if sw.total:
        add(
            "Swap", sw.percent, evaluate(sw.percent, *swap),
            f"{format_bytes(sw.used)} / {format_bytes(sw.total)}",
        )

    for part in get_real_mounts():
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except (PermissionError, OSError):
            continue
        add(
            f"Disk {part.mountpoint}", usage.percent, evaluate(usage.percent, *disk),
            f"{format_bytes(usage.free)} free of {format_bytes(usage.total)}",
        )

    sensors_battery = getattr(psutil, "sensors_battery", None)
    batt = sensors_battery() if sensors_battery else None
    if batt is not None:
        if batt.power_plugged:
            status = "OK"
        else:
            status = evaluate(batt.percent, *battery, low_is_bad=True)
        add(
            "Battery", batt.percent, status,
            "plugged in" if batt.power_plugged else "on battery",
        )

    return metrics


def system_summary() -> dict:
    boot = datetime.datetime.fromtimestamp(psutil.boot_time())
    uptime = (datetime.datetime.now() - boot).total_seconds()
    try:
        load = [round(x, 2) for x in psutil.getloadavg()]
    except (AttributeError, OSError):
        load = []
    return {
        "hostname": HOSTNAME,
        "checked": now_iso(),
        "boot_time": boot.isoformat(timespec="seconds"),
        "uptime": format_duration(uptime),
        "load_average": load,
        "process_count": len(psutil.pids()),
    }


def render(summary: dict, metrics: list[dict]) -> list[str]:
    lines: list[str] = []
    w = lines.append
    w(f"# Health Check - {summary['hostname']}")
    w("")
    w(f"> Checked: {summary['checked']}  |  Uptime: {summary['uptime']}"
      f"  |  Processes: {summary['process_count']}")
    if summary["load_average"]:
        w(f"> Load average: {' '.join(str(x) for x in summary['load_average'])}")
    w("")
    lines.extend(markdown_table(
        ["Metric", "Value", "Status", "Detail"],
        ([m["name"], f"{m['value']}%", m["status"], m["detail"]] for m in metrics),
    ))
    w("")
    w(f"Overall: **{overall_status(metrics)}**")
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="One-shot system health check.")
    parser.add_argument("--cpu", nargs=2, type=float, metavar=("WARN", "CRIT"), default=DEFAULT_CPU)
    parser.add_argument("--memory", nargs=2, type=float, metavar=("WARN", "CRIT"), default=DEFAULT_MEMORY)
    parser.add_argument("--swap", nargs=2, type=float, metavar=("WARN", "CRIT"), default=DEFAULT_SWAP)
    parser.add_argument("--disk", nargs=2, type=float, metavar=("WARN", "CRIT"), default=DEFAULT_DISK)
    parser.add_argument("--interval", type=float, default=1.0, help="CPU sampling interval (s)")
    parser.add_argument("--json", type=Path, metavar="FILE", help="also write results as JSON")
    args = parser.parse_args(argv)

    metrics = collect_metrics(
        cpu=tuple(args.cpu), memory=tuple(args.memory),
        swap=tuple(args.swap), disk=tuple(args.disk),
        cpu_interval=args.interval,
    )
    summary = system_summary()
    print("\n".join(render(summary, metrics)))

    status = overall_status(metrics)
    if args.json:
        write_json(args.json, {**summary, "status": status, "metrics": metrics})
        print(f"  [OK] {args.json}")
    return STATUS_RANK[status]


if __name__ == "__main__":
    sys.exit(main())
