#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Link Checker

Collects every href/src from a local HTML directory or a website (same host,
limited depth), checks each distinct link once and reports the broken ones
(HTTP status >= 400, connection errors, missing local files).
"""

import argparse
import sys
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urldefrag, urljoin, urlsplit

import requests
from bs4 import BeautifulSoup

USER_AGENT = "jtoolkit-link-checker/1.0"
TIMEOUT = 10.0
LINK_ATTRS = (("a", "href"), ("link", "href"), ("img", "src"), ("script", "src"), ("iframe", "src"), ("source", "src"))
SKIP_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")


@dataclass
class LinkResult:
    url: str
    source: str
    status: int | None
    ok: bool
    error: str = ""


def extract_links(markup: str, base: str) -> list[str]:
    """Absolute link targets found in markup, fragments removed, in page order."""
    soup = BeautifulSoup(markup, "html.parser")
    found: list[str] = []
    for tag, attr in LINK_ATTRS:
        for el in soup.find_all(tag):
            value = (el.get(attr) or "").strip()
            if not value or value.startswith("#") or value.lower().startswith(SKIP_SCHEMES):
                continue
            target, _frag = urldefrag(urljoin(base, value))
            if target not in found:
                found.append(target)
    return found


def check_remote(session: requests.Session, url: str, source: str) -> LinkResult:
    """HEAD first; some servers reject HEAD, so retry those with GET."""
    try:
        r = session.head(url, allow_redirects=True, timeout=TIMEOUT)
        if r.status_code in (403, 405) or r.status_code >= 500:
            r = session.get(url, allow_redirects=True, timeout=TIMEOUT, stream=True)
            r.close()
    except requests.RequestException as exc:
        return LinkResult(url, source, None, False, exc.__class__.__name__)
    return LinkResult(url, source, r.status_code, r.status_code < 400)


def check_local(url: str, source: str) -> LinkResult:
    path = Path(unquote(urlsplit(url).path))
    if path.is_dir():
        path = path / "index.html"
    if path.exists():
        return LinkResult(url, source, None, True)
    return LinkResult(url, source, None, False, "file not found")


def crawl_local(root: Path) -> dict[str, str]:
    """Map every link in the HTML files under root to the first page it appeared on."""
    links: dict[str, str] = {}
    for page in sorted(root.rglob("*.htm*")):
        base = page.resolve().as_uri()
        try:
            markup = page.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        for link in extract_links(markup, base):
            links.setdefault(link, str(page.relative_to(root)))
    return links


def crawl_site(session: requests.Session, start: str, max_depth: int = 1, max_pages: int = 50) -> dict[str, str]:
    """Breadth-first crawl of pages on start's host."""
    host = urlsplit(start).netloc
    links: dict[str, str] = {}
    seen = {start}
    queue = deque([(start, 0)])
    pages = 0
    while queue and pages < max_pages:
        url, depth = queue.popleft()
        try:
            r = session.get(url, timeout=TIMEOUT)
        except requests.RequestException as exc:
            print(f"  [WARN] cannot fetch {url}: {exc.__class__.__name__}", file=sys.stderr)
            continue
        pages += 1
        if "html" not in r.headers.get("Content-Type", ""):
            continue
        for link in extract_links(r.text, r.url):
            links.setdefault(link, url)
            if depth < max_depth and urlsplit(link).netloc == host and link not in seen:
                seen.add(link)
                queue.append((link, depth + 1))
    return links


def check_links(links: dict[str, str], session: requests.Session, *, external: bool = True) -> list[LinkResult]:
    results = []
    for url, source in links.items():
        scheme = urlsplit(url).scheme
        if scheme == "file":
            results.append(check_local(url, source))
        elif scheme in ("http", "https"):
            if external:
                results.append(check_remote(session, url, source))
    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find broken links in a site or local HTML folder.")
    parser.add_argument("target", help="URL or directory of HTML files")
    parser.add_argument("--depth", type=int, default=1, help="crawl depth for URLs")
    parser.add_argument("--max-pages", type=int, default=50)
    parser.add_argument("--no-external", action="store_true", help="only check local files")
    parser.add_argument("-v", "--verbose", action="store_true", help="list working links too")
    args = parser.parse_args(argv)

    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    target_dir = Path(args.target).expanduser()
    if target_dir.is_dir():
        links = crawl_local(target_dir)
    elif urlsplit(args.target).scheme in ("http", "https"):
        links = crawl_site(session, args.target, args.depth, args.max_pages)
    else:
        print(f"[ERROR] Not a directory or http(s) URL: {args.target}", file=sys.stderr)
        return 1

    print(f"Checking {len(links)} links...")
    results = check_links(links, session, external=not args.no_external)
    broken = [r for r in results if not r.ok]
    for r in results:
        if r.ok and not args.verbose:
            continue
        state = "OK" if r.ok else "BROKEN"
        print(f"  [{state:<6}] {r.status or '-'}  {r.url}  (on {r.source}) {r.error}".rstrip())
    print(f"{len(broken)} broken of {len(results)} checked")
    return 1 if broken else 0


if __name__ == "__main__":
    sys.exit(main())
