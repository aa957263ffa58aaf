#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
System Inventory Snapshot

Portable subset of a full hardware/software inventory: OS, CPU, memory,
mounts, network interfaces and boot time. Markdown by default, JSON with
--json.
"""

import argparse
import datetime
import json
import platform
import re
import socket
import sys
from pathlib import Path

import psutil

from jtoolkit.common import (
    HOSTNAME,
    format_bytes,
    get_real_mounts,
    markdown_table,
    now_iso,
    run_cmd,
    which,
)


def cpu_model() -> str:
    system = platform.system()
    if system == "Linux":
        try:
            cpuinfo = Path("/proc/cpuinfo").read_text(encoding="utf-8", errors="replace")
        except OSError:
            cpuinfo = ""
        m = re.search(r"^model name\s*:\s*(.+)$", cpuinfo, re.MULTILINE)
        if m:
            return m.group(1).strip()
    elif system == "Darwin" and which("sysctl"):
        out = run_cmd(["sysctl", "-n", "machdep.cpu.brand_string"])
        if out:
            return out
    return platform.processor() or "N/A"


def os_name() -> str:
    if platform.system() == "Linux":
        try:
            release = Path("/etc/os-release").read_text(encoding="utf-8")
        except OSError:
            release = ""
        m = re.search(r'PRETTY_NAME="(.+?)"', release)
        if m:
            return m.group(1)
    return platform.platform()


def interfaces() -> list[dict]:
    result = []
    stats = psutil.net_if_stats()
    for name, addrs in sorted(psutil.net_if_addrs().items()):
        ipv4 = [a.address for a in addrs if a.family == socket.AF_INET]
        mac = next((a.address for a in addrs if a.family == psutil.AF_LINK), "")
        st = stats.get(name)
        result.append({
            "name": name,
            "ipv4": ipv4,
            "mac": mac,
            "up": bool(st and st.isup),
            "speed_mbps": st.speed if st else 0,
        })
    return result


def collect() -> dict:
    vmem = psutil.virtual_memory()
    boot = datetime.datetime.fromtimestamp(psutil.boot_time())
    mounts = []
    for part in get_real_mounts():
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError:
            continue
        mounts.append({
            "device": part.device, "mount": part.mountpoint, "fstype": part.fstype,
            "total": usage.total, "used": usage.used, "percent": usage.percent,
        })
    return {
        "generated": now_iso(),
        "hostname": HOSTNAME,
        "os": os_name(),
        "kernel": platform.release(),
        "architecture": platform.machine(),
        "python": platform.python_version(),
        "cpu": {
            "model": cpu_model(),
            "cores": psutil.cpu_count(logical=False),
            "threads": psutil.cpu_count(logical=True),
        },
        "memory_total": vmem.total,
        "boot_time": boot.isoformat(timespec="seconds"),
        "mounts": mounts,
        "interfaces": interfaces(),
    }


def render(info: dict) -> list[str]:
    lines: list[str] = []
    w = lines.append
    w(f"# System Inventory - {info['hostname']}")
    w("")
    w(f"> Generated: {info['generated']}")
    w("")
    w("## System")
    w("")
    lines.extend(markdown_table(["Property", "Value"], [
        ["Hostname", info["hostname"]],
        ["OS", info["os"]],
        ["Kernel", info["kernel"]],
        ["Architecture", info["architecture"]],
        ["Python", info["python"]],
        ["CPU", info["cpu"]["model"]],
        ["Cores / Threads", f"{info['cpu']['cores']} / {info['cpu']['threads']}"],
        ["Memory", format_bytes(info["memory_total"])],
        ["Last Boot", info["boot_time"]],
    ]))
    w("")
    w("## Storage")
    w("")
    lines.extend(markdown_table(
        ["Device", "Mount", "FS", "Size", "Used"],
        ([m["device"], m["mount"], m["fstype"], format_bytes(m["total"]), f"{m['percent']:.0f}%"]
         for m in info["mounts"]),
    ))
    w("")
    w("## Network Interfaces")
    w("")
    lines.extend(markdown_table(
        ["Interface", "IPv4", "MAC", "State", "Speed"],
        ([i["name"], ", ".join(i["ipv4"]) or "-", i["mac"] or "-",
          "up" if i["up"] else "down", f"{i['speed_mbps']} Mb/s" if i["speed_mbps"] else "-"]
         for i in info["interfaces"]),
    ))
    w("")
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print a system inventory snapshot.")
    parser.add_argument("--json", action="store_true", help="emit JSON instead of Markdown")
    parser.add_argument("-o", "--output", type=Path, help="write to file instead of stdout")
    args = parser.parse_args(argv)

    info = collect()
    text = json.dumps(info, indent=2) if args.json else "\n".join(render(info))
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        print(f"  [OK] {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
