"""
Unit tests for Development-Tools
"""
from unittest.mock import patch

import pytest

from jtoolkit.common import ToolkitError
from jtoolkit.devtools import git_status, line_counter, project_init

PORCELAIN = """\
# branch.oid 1234abcd
# branch.head main
# branch.upstream origin/main
# branch.ab +2 -5
1 .M N... 100644 100644 100644 aaa bbb src/app.py
? notes.txt
"""


class TestGitStatus:
    """Repository discovery and status parsing"""

    def test_parse_porcelain(self):
        assert git_status.parse_porcelain(PORCELAIN) == ("main", "origin/main", 2, 5, 2)

    def test_parse_porcelain_no_upstream(self):
        branch, upstream, ahead, behind, changed = git_status.parse_porcelain("# branch.head dev\n")
        assert (branch, upstream, ahead, behind, changed) == ("dev", "", 0, 0, 0)

    def test_find_repos(self, tmp_path):
        for rel in ("a", "b/c", "node_modules/pkg", "deep/1/2/3/4"):
            (tmp_path / rel / ".git").mkdir(parents=True)
        (tmp_path / "a" / "nested" / ".git").mkdir(parents=True)
        repos = git_status.find_repos(tmp_path, max_depth=3)
        assert repos == [tmp_path / "a", tmp_path / "b" / "c"]

    def test_repo_status_from_git_output(self, tmp_path):
        with patch.object(git_status, "run_cmd_checked", side_effect=[PORCELAIN, "abc123 fix (2 days ago)"]):
            status = git_status.repo_status(tmp_path)
        assert status.branch == "main"
        assert status.dirty
        assert status.behind == 5
        assert status.last_commit.startswith("abc123")

    def test_commit_subject_is_sanitized(self, tmp_path):
        subject = "abc123 \x1b[31mred\x1b[0m title\x07 (1 hour ago)"
        with patch.object(git_status, "run_cmd_checked", side_effect=[PORCELAIN, subject]):
            status = git_status.repo_status(tmp_path)
        assert status.last_commit == "abc123 red title (1 hour ago)"

    def test_pull_skips_dirty_tree(self, tmp_path):
        outputs = ["", PORCELAIN, "abc123 fix"]
        with patch.object(git_status, "run_cmd_checked", side_effect=outputs) as run:
            status = git_status.repo_status(tmp_path, pull=True)
        assert status.action == "skipped (dirty)"
        assert run.call_count == 3

    def test_pull_fast_forwards_clean_repo(self, tmp_path):
        clean = "# branch.head main\n# branch.upstream origin/main\n# branch.ab +0 -3\n"
        outputs = ["", clean, "abc123 fix", ""]
        with patch.object(git_status, "run_cmd_checked", side_effect=outputs) as run:
            status = git_status.repo_status(tmp_path, pull=True)
        assert status.action == "pulled 3 commit(s)"
        assert status.behind == 0
        assert run.call_args_list[-1].args[0][:3] == ["git", "pull", "--ff-only"]

    def test_error_is_recorded(self, tmp_path):
        with patch.object(git_status, "run_cmd_checked", side_effect=ToolkitError("git exited 128: boom")):
            status = git_status.repo_status(tmp_path)
        assert status.error == "git exited 128: boom"
        rows = git_status.render(tmp_path.parent, [status])
        assert "ERROR: git exited 128: boom" in rows[-1]


class TestLineCounter:
    """Per-language line counting"""

    def test_count_lines(self):
        text = "import os\n\n# comment\n    # indented comment\nprint(1)\n"
        assert line_counter.count_lines(text, ("#",)) == (2, 1, 2)

    def test_count_lines_without_comment_syntax(self):
        assert line_counter.count_lines("<p>\n\n</p>\n", ()) == (2, 1, 0)

    def test_count_tree(self, tmp_path):
        (tmp_path / "main.py").write_text("x = 1\n# c\n\n")
        (tmp_path / "app.js").write_text("// c\nlet a = 1;\n")
        (tmp_path / "data.bin").write_bytes(b"\x00\x01\x02")
        (tmp_path / "notes.xyz").write_text("hello\n")
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "dep.js").write_text("let b = 2;\n")

        stats = line_counter.count_tree(tmp_path)
        assert set(stats) == {"Python", "JavaScript"}
        assert (stats["Python"].code, stats["Python"].comment, stats["Python"].blank) == (1, 1, 1)
        assert stats["JavaScript"].files == 1

        with_unknown = line_counter.count_tree(tmp_path, include_unknown=True)
        assert "Other (.xyz)" in with_unknown
        assert "Other (.bin)" not in with_unknown

    def test_main_writes_csv(self, tmp_path, capsys):
        src = tmp_path / "src"
        src.mkdir()
        (src / "a.py").write_text("x = 1\n")
        out = tmp_path / "loc.csv"
        assert line_counter.main([str(src), "--csv", str(out)]) == 0
        assert out.read_text().splitlines()[1] == "Python,1,1,0,0"
        assert "**Total**" in capsys.readouterr().out


class TestProjectInit:
    """Project scaffolding"""

    def test_module_name(self):
        assert project_init.module_name("My Cool-App") == "my_cool_app"
        assert project_init.module_name("3d tools") == "p_3d_tools"

    def test_scaffold_python(self, tmp_path):
        target = tmp_path / "demo-app"
        created = project_init.scaffold(target, "python")
        assert (target / "src" / "demo_app" / "__init__.py").is_file()
        assert (target / "tests" / "test_demo_app.py").read_text().startswith("import demo_app")
        assert "__pycache__/" in (target / ".gitignore").read_text()
        assert 'name = "demo-app"' in (target / "pyproject.toml").read_text()
        assert target / "README.md" in created

    def test_scaffold_web_css_braces(self, tmp_path):
        project_init.scaffold(tmp_path / "site", "web", name="Site")
        css = (tmp_path / "site" / "css" / "style.css").read_text()
        assert css.startswith("body {\n")
        assert "<title>Site</title>" in (tmp_path / "site" / "index.html").read_text()

    def test_scaffold_node_package_json(self, tmp_path):
        project_init.scaffold(tmp_path / "My App", "node")
        assert '"name": "my-app"' in (tmp_path / "My App" / "package.json").read_text()

    def test_refuses_non_empty_dir(self, tmp_path):
        (tmp_path / "existing.txt").write_text("x")
        with pytest.raises(ToolkitError, match="not empty"):
            project_init.scaffold(tmp_path, "generic")

    def test_force_overwrites_template_files(self, tmp_path):
        (tmp_path / "README.md").write_text("mine")
        project_init.scaffold(tmp_path, "generic", force=True)
        assert (tmp_path / "README.md").read_text() != "mine"

    def test_unknown_template(self, tmp_path):
        with pytest.raises(ToolkitError, match="Unknown template"):
            project_init.scaffold(tmp_path / "x", "cobol")
