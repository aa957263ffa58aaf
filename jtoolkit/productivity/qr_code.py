#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
QR Code Generator

Renders text, a URL or a Wi-Fi join string into a QR code PNG.
"""

import argparse
import sys
from pathlib import Path

import qrcode
from PIL import Image

from jtoolkit.common import ToolkitError

ERROR_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


def wifi_payload(ssid: str, password: str = "", security: str = "WPA", hidden: bool = False) -> str:
    """Build the WIFI: string phones understand; special characters are escaped."""
    def esc(value: str) -> str:
        for ch in "\\;,:\"":
            value = value.replace(ch, "\\" + ch)
        return value

    security = security.upper() if password else "nopass"
    parts = [f"T:{security}", f"S:{esc(ssid)}"]
    if password:
        parts.append(f"P:{esc(password)}")
    if hidden:
        parts.append("H:true")
    return "WIFI:" + ";".join(parts) + ";;"


def make_qr(data: str, *, box_size: int = 10, border: int = 4, error: str = "M",
            fill: str = "black", back: str = "white", size: int | None = None) -> Image.Image:
    if not data:
        raise ToolkitError("Nothing to encode")
    if error not in ERROR_LEVELS:
        raise ToolkitError(f"Unknown error correction level {error!r}")
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_LEVELS[error],
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color=fill, back_color=back).convert("RGB")
    if size:
        img = img.resize((size, size), Image.Resampling.NEAREST)
    return img


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a QR code PNG.")
    parser.add_argument("data", nargs="?", help="text or URL to encode")
    parser.add_argument("-o", "--output", type=Path, default=Path("qrcode.png"))
    parser.add_argument("--box-size", type=int, default=10)
    parser.add_argument("--border", type=int, default=4)
    parser.add_argument("--error", choices=sorted(ERROR_LEVELS), default="M")
    parser.add_argument("--size", type=int, help="final image size in pixels")
    wifi = parser.add_argument_group("wifi")
    wifi.add_argument("--wifi-ssid")
    wifi.add_argument("--wifi-password", default="")
    wifi.add_argument("--wifi-security", default="WPA", choices=("WPA", "WEP"))
    wifi.add_argument("--wifi-hidden", action="store_true")
    args = parser.parse_args(argv)

    if args.wifi_ssid:
        data = wifi_payload(args.wifi_ssid, args.wifi_password, args.wifi_security, args.wifi_hidden)
    else:
        data = args.data
    if not data:
        parser.error("give DATA or --wifi-ssid")

    try:
        img = make_qr(data, box_size=args.box_size, border=args.border, error=args.error, size=args.size)
        img.save(args.output)
    except (ToolkitError, OSError, ValueError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"  [OK] {args.output} ({img.size[0]}x{img.size[1]})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
