#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Batch Image Resizer

Resizes every image in a directory (or a list of files) with Pillow. Size is
given as --width/--height (aspect ratio kept when only one is set), a
--percent scale, or a --max-size bounding box. Output goes to a separate
directory unless --in-place.
"""

import argparse
import sys
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from jtoolkit.common import ToolkitError, format_bytes, unique_path

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tif", ".tiff", ".webp"}
FORMATS = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "webp": "WEBP", "bmp": "BMP", "gif": "GIF", "tiff": "TIFF"}


def target_size(
    size: tuple[int, int], *, width: int | None = None, height: int | None = None,
    percent: float | None = None, max_size: int | None = None,
) -> tuple[int, int]:
    """Compute the output size for an image of `size`."""
    w, h = size
    if percent is not None:
        if percent <= 0:
            raise ToolkitError("--percent must be positive")
        return max(1, round(w * percent / 100)), max(1, round(h * percent / 100))
    if max_size is not None:
        if max(w, h) <= max_size:
            return w, h
        ratio = max_size / max(w, h)
        return max(1, round(w * ratio)), max(1, round(h * ratio))
    if width and height:
        return width, height
    if width:
        return width, max(1, round(h * width / w))
    if height:
        return max(1, round(w * height / h)), height
    raise ToolkitError("Give --width, --height, --percent or --max-size")


def output_path(src: Path, out_dir: Path | None, fmt: str | None, in_place: bool) -> Path:
    suffix = f".{fmt.lower()}" if fmt else src.suffix
    if in_place:
        dst = src.with_suffix(suffix)
        # a format change must not clobber a sibling with the new extension
        return src if dst == src else unique_path(dst)
    return unique_path((out_dir or src.parent / "resized") / f"{src.stem}{suffix}")



def resize_image(src: Path, dst: Path, size_args: dict, *, fmt: str | None = None, quality: int = 85) -> tuple[tuple[int, int], tuple[int, int]]:
    with Image.open(src) as img:
        img = ImageOps.exif_transpose(img)
        new_size = target_size(img.size, **size_args)
        resized = img.resize(new_size, Image.Resampling.LANCZOS) if new_size != img.size else img.copy()
        pil_format = FORMATS.get((fmt or dst.suffix.lstrip(".")).lower())
        if pil_format == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")
        dst.parent.mkdir(parents=True, exist_ok=True)
        save_kwargs = {"quality": quality, "optimize": True} if pil_format in ("JPEG", "WEBP") else {}
        resized.save(dst, format=pil_format, **save_kwargs)
        return img.size, new_size


def gather(inputs: list[Path]) -> list[Path]:
    files: list[Path] = []
    for p in inputs:
        if p.is_dir():
            files.extend(sorted(f for f in p.iterdir() if f.is_file() and f.suffix.lower() in IMAGE_EXTS))
        elif p.is_file():
            files.append(p)
    return files


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Batch resize images.")
    parser.add_argument("inputs", nargs="+", type=Path, help="image files or directories")
    size = parser.add_argument_group("size")
    size.add_argument("--width", type=int)
    size.add_argument("--height", type=int)
    size.add_argument("--percent", type=float)
    size.add_argument("--max-size", type=int, help="fit inside a square of this many pixels")
    parser.add_argument("--format", choices=sorted(FORMATS), help="convert to this format")
    parser.add_argument("--quality", type=int, default=85, help="JPEG/WebP quality")
    parser.add_argument("-o", "--out-dir", type=Path, help="output directory (default: <input>/resized)")
    parser.add_argument("--in-place", action="store_true", help="overwrite the originals")
    args = parser.parse_args(argv)

    size_args = {"width": args.width, "height": args.height, "percent": args.percent, "max_size": args.max_size}
    if not any(v is not None for v in size_args.values()):
        parser.error("one of --width, --height, --percent, --max-size is required")

    files = gather([p.expanduser() for p in args.inputs])
    if not files:
        print("No images found.")
        return 0

    failed = 0
    for src in files:
        dst = output_path(src, args.out_dir, args.format, args.in_place)
        try:
            old, new = resize_image(src, dst, size_args, fmt=args.format, quality=args.quality)
        except (UnidentifiedImageError, OSError, ToolkitError) as exc:
            print(f"  [ERROR] {src.name}: {exc}", file=sys.stderr)
            failed += 1
            continue
        if args.in_place and dst != src:
            src.unlink()
        print(f"  [OK] {src.name} {old[0]}x{old[1]} -> {dst.name} {new[0]}x{new[1]} ({format_bytes(dst.stat().st_size)})")
    print(f"{len(files) - failed} of {len(files)} images resized")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
