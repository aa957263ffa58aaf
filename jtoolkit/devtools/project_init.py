#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Project Scaffolder

Creates a new project directory from a small built-in template (python,
node, web, generic) with README, .gitignore and source/test folders, and
optionally initialises a git repository with a first commit.
"""

import argparse
import datetime
import json
import re
import sys
from pathlib import Path

from jtoolkit.common import ToolkitError, run_cmd_checked

COMMON_IGNORE = [".DS_Store", "Thumbs.db", "*.log", ".env", ".idea/", ".vscode/"]

TEMPLATES: dict[str, dict] = {
    "python": {
        "ignore": ["__pycache__/", "*.py[cod]", ".venv/", "venv/", "build/", "dist/", "*.egg-info/", ".pytest_cache/"],
        "dirs": ["src/{module}", "tests"],
        "files": {
            "src/{module}/__init__.py": '"""{name}."""\n\n__version__ = "0.1.0"\n',
            "tests/test_{module}.py": "import {module}\n\n\ndef test_version():\n    assert {module}.__version__\n",
            "pyproject.toml": (
                '[build-system]\nrequires = ["setuptools>=68"]\nbuild-backend = "setuptools.build_meta"\n\n'
                '[project]\nname = "{name}"\nversion = "0.1.0"\nrequires-python = ">=3.12"\n\n'
                '[tool.setuptools.packages.find]\nwhere = ["src"]\n'
            ),
        },
    },
    "node": {
        "ignore": ["node_modules/", "dist/", "coverage/", "npm-debug.log*"],
        "dirs": ["src", "test"],
        "files": {
            "src/index.js": "console.log('Hello from {name}');\n",
        },
    },
    "web": {
        "ignore": ["node_modules/", "dist/"],
        "dirs": ["css", "js", "img"],
        "files": {
            "index.html": (
                '<!DOCTYPE html>\n<html lang="en">\n<head>\n  <meta charset="utf-8">\n'
                '  <meta name="viewport" content="width=device-width, initial-scale=1">\n'
                "  <title>{name}</title>\n  <link rel=\"stylesheet\" href=\"css/style.css\">\n"
                "</head>\n<body>\n  <h1>{name}</h1>\n  <script src=\"js/main.js\"></script>\n"
                "</body>\n</html>\n"
            ),
            "css/style.css": "body {{\n  font-family: system-ui, sans-serif;\n  margin: 2rem;\n}}\n",
            "js/main.js": "'use strict';\n",
        },
    },
    "generic": {
        "ignore": [],
        "dirs": ["docs"],
        "files": {},
    },
}


def module_name(name: str) -> str:
    """Turn a project name into a valid Python module name."""
    mod = re.sub(r"[^0-9a-zA-Z_]+", "_", name).strip("_").lower()
    if not mod or mod[0].isdigit():
        mod = f"p_{mod}"
    return mod


def scaffold(target: Path, template: str, *, name: str | None = None, force: bool = False) -> list[Path]:
    """Create the template's files under target; return the created paths."""
    if template not in TEMPLATES:
        raise ToolkitError(f"Unknown template {template!r} (choose from {', '.join(TEMPLATES)})")
    if target.exists() and any(target.iterdir()) and not force:
        raise ToolkitError(f"{target} is not empty (use --force to scaffold anyway)")

    spec = TEMPLATES[template]
    name = name or target.name
    ctx = {"name": name, "module": module_name(name)}
    created: list[Path] = []

    target.mkdir(parents=True, exist_ok=True)
    for d in spec["dirs"]:
        path = target / d.format(**ctx)
        path.mkdir(parents=True, exist_ok=True)
        created.append(path)

    files = {
        "README.md": f"# {name}\n\nCreated {datetime.date.today().isoformat()} from the `{template}` template.\n",
        ".gitignore": "\n".join(COMMON_IGNORE + spec["ignore"]) + "\n",
    }
    for rel, content in spec["files"].items():
        files[rel.format(**ctx)] = content.format(**ctx)
    if template == "node":
        files["package.json"] = json.dumps(
            {"name": ctx["module"].replace("_", "-"), "version": "0.1.0", "main": "src/index.js",
             "scripts": {"start": "node src/index.js"}},
            indent=2,
        ) + "\n"

    for rel, content in files.items():
        path = target / rel
        if path.exists() and not force:
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        created.append(path)
    return created


def git_init(target: Path) -> None:
    run_cmd_checked(["git", "init", "--quiet"], cwd=target)
    run_cmd_checked(["git", "add", "-A"], cwd=target)
    run_cmd_checked(["git", "commit", "--quiet", "-m", "Initial commit"], cwd=target)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scaffold a new project directory.")
    parser.add_argument("path", type=Path, help="project directory to create")
    parser.add_argument("-t", "--template", choices=sorted(TEMPLATES), default="generic")
    parser.add_argument("--name", help="project name (default: directory name)")
    parser.add_argument("--git", action="store_true", help="git init and make an initial commit")
    parser.add_argument("--force", action="store_true", help="allow a non-empty directory")
    args = parser.parse_args(argv)

    target = args.path.expanduser()
    try:
        created = scaffold(target, args.template, name=args.name, force=args.force)
        for path in created:
            print(f"  [OK] {path}")
        if args.git:
            git_init(target)
            print("  [OK] git repository initialised")
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"Project ready at {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
