"""
Unit tests for the jtoolkit command catalog
"""
import importlib
import tomllib
from pathlib import Path

import pytest

from jtoolkit import __version__, cli

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


class TestCatalog:
    """Dispatch and listing"""

    @pytest.mark.parametrize("tool,module", sorted(cli.TOOLS.items()))
    def test_every_tool_has_main(self, tool, module):
        assert callable(importlib.import_module(module).main)

    def test_console_scripts_match_catalog(self):
        with PYPROJECT.open("rb") as fh:
            scripts = tomllib.load(fh)["project"]["scripts"]
        expected = {f"jt-{tool}": f"{module}:main" for tool, module in cli.TOOLS.items()}
        expected["jtoolkit"] = "jtoolkit.cli:main"
        assert scripts == expected

    def test_list(self, capsys):
        assert cli.main(["list"]) == 0
        out = capsys.readouterr().out
        assert "Security-Tools:" in out
        assert "password-gen" in out

    def test_version(self, capsys):
        assert cli.main(["--version"]) == 0
        assert capsys.readouterr().out.strip() == __version__

    def test_unknown_tool(self, capsys):
        assert cli.main(["teleport"]) == 2
        assert "Unknown tool" in capsys.readouterr().err

    def test_dispatch_passes_arguments(self, capsys):
        assert cli.main(["password_check", "Tr0ub4dor&3x!Q9z"]) == 0
        assert "Very Strong" in capsys.readouterr().out
