#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Network Diagnostics

Runs a fixed sequence of connectivity checks and prints PASS/FAIL for each:
  1. at least one non-loopback interface is up with an address
  2. the default gateway answers ping (when `ping` is available)
  3. DNS resolves the test host names
  4. TCP connections succeed to the test endpoints
  5. the public IP address can be fetched over HTTP
"""

import argparse
import platform
import re
import socket
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import psutil
import requests

from jtoolkit.common import run_cmd, which

DNS_HOSTS = ["example.com", "python.org", "cloudflare.com"]
TCP_ENDPOINTS = [("1.1.1.1", 53), ("8.8.8.8", 53), ("example.com", 443)]
PUBLIC_IP_URL = "https://api.ipify.org"
TIMEOUT = 3.0


@dataclass
class Check:
    name: str
    ok: bool
    detail: str


def check_interfaces() -> Check:
    up = []
    stats = psutil.net_if_stats()
    for name, addrs in psutil.net_if_addrs().items():
        st = stats.get(name)
        if not st or not st.isup:
            continue
        for a in addrs:
            if a.family == socket.AF_INET and not a.address.startswith("127."):
                up.append(f"{name}={a.address}")
    return Check("Interfaces", bool(up), ", ".join(up) or "no interface with an IPv4 address is up")


def default_gateway() -> str | None:
    """Best-effort default gateway lookup without platform-specific APIs."""
    route = Path("/proc/net/route")
    if route.exists():
        try:
            for line in route.read_text().splitlines()[1:]:
                fields = line.split()
                if len(fields) > 2 and fields[1] == "00000000":
                    return socket.inet_ntoa(bytes.fromhex(fields[2])[::-1])
        except (OSError, ValueError):
            pass
    if which("ip"):
        m = re.search(r"default via (\S+)", run_cmd(["ip", "route", "show", "default"]))
        if m:
            return m.group(1)
    if which("netstat"):
        for line in run_cmd(["netstat", "-rn"]).splitlines():
            parts = line.split()
            if len(parts) > 1 and parts[0] in ("default", "0.0.0.0"):
                candidate = parts[1] if parts[0] == "default" else (parts[2] if len(parts) > 2 else "")
                if re.fullmatch(r"\d+\.\d+\.\d+\.\d+", candidate):
                    return candidate
    return None


def ping(host: str, count: int = 2, timeout: float = TIMEOUT) -> tuple[bool, str]:
    if not which("ping"):
        return False, "ping not available"
    flag = "-n" if platform.system() == "Windows" else "-c"
    out = run_cmd(["ping", flag, str(count), host], timeout=int(timeout * count) + 5)
    m = re.search(r"(?:time|Average)[=<]\s*([\d.]+)\s*ms", out) or re.search(r"= [\d.]+/([\d.]+)/", out)
    if re.search(r"\b0(\.0)?% (packet )?loss|TTL=|ttl=", out):
        return True, f"{m.group(1)} ms" if m else "reachable"
    return False, "no reply"


def check_gateway() -> Check:
    gw = default_gateway()
    if not gw:
        return Check("Gateway", False, "no default route")
    ok, detail = ping(gw)
    return Check("Gateway", ok, f"{gw}: {detail}")


def check_dns(hosts: list[str]) -> list[Check]:
    checks = []
    for host in hosts:
        start = time.perf_counter()
        try:
            addrs = sorted({info[4][0] for info in socket.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)})
        except socket.gaierror as exc:
            checks.append(Check(f"DNS {host}", False, str(exc)))
            continue
        ms = (time.perf_counter() - start) * 1000
        checks.append(Check(f"DNS {host}", True, f"{', '.join(addrs[:3])} ({ms:.0f} ms)"))
    return checks


def tcp_connect(host: str, port: int, timeout: float = TIMEOUT) -> tuple[bool, float, str]:
    """Return (ok, elapsed_ms, error)."""
    start = time.perf_counter()
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError as exc:
        return False, (time.perf_counter() - start) * 1000, str(exc) or exc.__class__.__name__
    return True, (time.perf_counter() - start) * 1000, ""


def check_tcp(endpoints: list[tuple[str, int]]) -> list[Check]:
    checks = []
    for host, port in endpoints:
        ok, ms, err = tcp_connect(host, port)
        checks.append(Check(f"TCP {host}:{port}", ok, f"{ms:.0f} ms" if ok else err))
    return checks


def check_public_ip(url: str = PUBLIC_IP_URL) -> Check:
    try:
        r = requests.get(url, timeout=TIMEOUT * 2)
        r.raise_for_status()
    except requests.RequestException as exc:
        return Check("Public IP", False, str(exc))
    return Check("Public IP", True, r.text.strip())


def parse_endpoint(text: str) -> tuple[str, int]:
    host, sep, port = text.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {text!r}")
    return host, int(port)


def run_checks(dns_hosts: list[str], endpoints: list[tuple[str, int]], *, skip_http: bool = False) -> list[Check]:
    checks = [check_interfaces(), check_gateway()]
    checks.extend(check_dns(dns_hosts))
    checks.extend(check_tcp(endpoints))
    if not skip_http:
        checks.append(check_public_ip())
    return checks


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run basic network connectivity checks.")
    parser.add_argument("--dns", nargs="+", default=DNS_HOSTS, metavar="HOST")
    parser.add_argument("--tcp", nargs="+", type=parse_endpoint, default=TCP_ENDPOINTS, metavar="HOST:PORT")
    parser.add_argument("--no-http", action="store_true", help="skip the public IP lookup")
    args = parser.parse_args(argv)

    print("Running network diagnostics...")
    print()
    checks = run_checks(args.dns, args.tcp, skip_http=args.no_http)
    width = max(len(c.name) for c in checks)
    for c in checks:
        print(f"  [{'PASS' if c.ok else 'FAIL'}] {c.name:<{width}}  {c.detail}")
    failed = sum(1 for c in checks if not c.ok)
    print()
    print(f"{len(checks) - failed}/{len(checks)} checks passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
