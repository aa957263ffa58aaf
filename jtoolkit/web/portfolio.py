#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Portfolio Site Generator

Builds a static one-page portfolio (index.html + style.css) from a JSON
profile. `--init` writes a sample profile to start from.

Profile keys: name, title, about, email, location, links {label: url},
skills [..], projects [{name, description, url, tags [..]}].
"""

import argparse
import html
import sys
from pathlib import Path

from jtoolkit.common import ToolkitError, now_iso, read_json, write_json

SAMPLE_PROFILE = {
    "name": "Jane Doe",
    "title": "Systems Engineer",
    "about": "I automate the boring parts of running computers.",
    "email": "jane@example.com",
    "location": "Remote",
    "links": {"GitHub": "https://github.com/janedoe", "LinkedIn": "https://www.linkedin.com/in/janedoe"},
    "skills": ["Python", "PowerShell", "Linux", "Networking"],
    "projects": [
        {
            "name": "jToolkit",
            "description": "Portable command-line utilities for everyday system chores.",
            "url": "https://github.com/janedoe/jtoolkit",
            "tags": ["python", "cli"],
        },
    ],
}

STYLE_CSS = """\
:root { --fg: #1d232a; --muted: #5b6673; --accent: #2f6fde; --bg: #f7f8fa; }
* { box-sizing: border-box; }
body { margin: 0; font-family: system-ui, -apple-system, "Segoe UI", sans-serif; color: var(--fg); background: var(--bg); line-height: 1.6; }
header { padding: 4rem 1.5rem 2rem; text-align: center; }
header h1 { margin: 0; font-size: 2.4rem; }
header p.title { margin: .25rem 0 1rem; color: var(--muted); font-size: 1.2rem; }
nav a { margin: 0 .5rem; color: var(--accent); text-decoration: none; }
main { max-width: 860px; margin: 0 auto; padding: 0 1.5rem 3rem; }
section { margin-top: 2.5rem; }
h2 { border-bottom: 2px solid var(--accent); padding-bottom: .25rem; }
ul.skills { list-style: none; padding: 0; display: flex; flex-wrap: wrap; gap: .5rem; }
ul.skills li { background: #fff; border: 1px solid #dde2e8; border-radius: 999px; padding: .2rem .8rem; }
.projects { display: grid; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); gap: 1rem; }
.card { background: #fff; border: 1px solid #dde2e8; border-radius: 8px; padding: 1rem; }
.card h3 { margin-top: 0; }
.tag { font-size: .8rem; color: var(--muted); margin-right: .4rem; }
footer { text-align: center; color: var(--muted); padding: 2rem; font-size: .9rem; }
"""

REQUIRED = ("name", "title")


def esc(value) -> str:
    return html.escape(str(value), quote=True)


def safe_url(url: str) -> str:
    """Only http(s) and mailto links are emitted; anything else becomes '#'."""
    url = str(url).strip()
    if url.lower().startswith(("http://", "https://", "mailto:")):
        return esc(url)
    return "#"


def validate(profile: dict) -> None:
    if not isinstance(profile, dict):
        raise ToolkitError("Profile must be a JSON object")
    missing = [k for k in REQUIRED if not profile.get(k)]
    if missing:
        raise ToolkitError(f"Profile is missing: {', '.join(missing)}")
    for i, proj in enumerate(profile.get("projects", []), 1):
        if not isinstance(proj, dict) or not proj.get("name"):
            raise ToolkitError(f"Project {i} needs a name")


def render_html(profile: dict) -> str:
    validate(profile)
    lines: list[str] = []
    w = lines.append
    name = esc(profile["name"])

    w("<!DOCTYPE html>")
    w('<html lang="en">')
    w("<head>")
    w('  <meta charset="utf-8">')
    w('  <meta name="viewport" content="width=device-width, initial-scale=1">')
    w(f"  <title>{name} - {esc(profile['title'])}</title>")
    w(f'  <meta name="description" content="{esc(profile.get("about", ""))}">')
    w('  <link rel="stylesheet" href="style.css">')
    w("</head>")
    w("<body>")
    w("<header>")
    w(f"  <h1>{name}</h1>")
    w(f'  <p class="title">{esc(profile["title"])}</p>')
    links = profile.get("links", {})
    if links:
        w("  <nav>")
        for label, url in links.items():
            w(f'    <a href="{safe_url(url)}">{esc(label)}</a>')
        w("  </nav>")
    w("</header>")
    w("<main>")

    if profile.get("about"):
        w('  <section id="about">')
        w("    <h2>About</h2>")
        for para in str(profile["about"]).split("\n\n"):
            w(f"    <p>{esc(para.strip())}</p>")
        w("  </section>")

    if profile.get("skills"):
        w('  <section id="skills">')
        w("    <h2>Skills</h2>")
        w('    <ul class="skills">')
        for skill in profile["skills"]:
            w(f"      <li>{esc(skill)}</li>")
        w("    </ul>")
        w("  </section>")

    if profile.get("projects"):
        w('  <section id="projects">')
        w("    <h2>Projects</h2>")
        w('    <div class="projects">')
        for proj in profile["projects"]:
            w('      <article class="card">')
            title = esc(proj["name"])
            if proj.get("url"):
                title = f'<a href="{safe_url(proj["url"])}">{title}</a>'
            w(f"        <h3>{title}</h3>")
            if proj.get("description"):
                w(f"        <p>{esc(proj['description'])}</p>")
            if proj.get("tags"):
                w("        <p>" + "".join(f'<span class="tag">#{esc(t)}</span>' for t in proj["tags"]) + "</p>")
            w("      </article>")
        w("    </div>")
        w("  </section>")

    if profile.get("email") or profile.get("location"):
        w('  <section id="contact">')
        w("    <h2>Contact</h2>")
        if profile.get("email"):
            email = esc(profile["email"])
            w(f'    <p><a href="mailto:{email}">{email}</a></p>')
        if profile.get("location"):
            w(f"    <p>{esc(profile['location'])}</p>")
        w("  </section>")

    w("</main>")
    w(f"<footer>&copy; {name} &middot; generated {now_iso()[:10]}</footer>")
    w("</body>")
    w("</html>")
    return "\n".join(lines) + "\n"


def build(profile_path: Path, out_dir: Path) -> list[Path]:
    profile = read_json(profile_path)
    if profile is None:
        raise ToolkitError(f"Profile not found: {profile_path}")
    page = render_html(profile)
    out_dir.mkdir(parents=True, exist_ok=True)
    index, css = out_dir / "index.html", out_dir / "style.css"
    index.write_text(page, encoding="utf-8")
    css.write_text(STYLE_CSS, encoding="utf-8")
    return [index, css]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a static portfolio page from JSON.")
    parser.add_argument("profile", type=Path, nargs="?", default=Path("profile.json"))
    parser.add_argument("-o", "--out-dir", type=Path, default=Path("site"))
    parser.add_argument("--init", action="store_true", help="write a sample profile and exit")
    args = parser.parse_args(argv)

    try:
        if args.init:
            if args.profile.exists():
                raise ToolkitError(f"{args.profile} already exists")
            write_json(args.profile, SAMPLE_PROFILE)
            print(f"  [OK] {args.profile}")
            return 0
        for path in build(args.profile, args.out_dir):
            print(f"  [OK] {path}")
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
