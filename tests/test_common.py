"""
Unit tests for the shared helpers
"""
import csv
import logging
import sys
from pathlib import Path

import pytest

from jtoolkit import common
from jtoolkit.common import ToolkitError


class TestFormatting:
    """Human-readable formatting helpers"""

    def test_format_bytes_units(self):
        assert common.format_bytes(512) == "512.0 B"
        assert common.format_bytes(1536) == "1.5 KB"
        assert common.format_bytes(5 * 1024 ** 3) == "5.0 GB"

    def test_format_duration(self):
        assert common.format_duration(42) == "42s"
        assert common.format_duration(125) == "2m 5s"
        assert common.format_duration(3 * 3600 + 60) == "3h 1m"
        assert common.format_duration(2 * 86400 + 3600) == "2d 1h 0m"

    def test_sanitize_strips_ansi(self):
        assert common.sanitize("\x1b[31mred\x1b[0m\x07") == "red"

    def test_markdown_table(self):
        lines = common.markdown_table(["A", "Bee"], [[1, "x"]])
        assert lines == ["| A | Bee |", "|---|-----|", "| 1 | x |"]


class TestCategories:
    """categories.json lookups"""

    def test_known_extension(self):
        assert common.category_for(Path("holiday.JPG")) == "Images"
        assert common.category_for(Path("report.pdf")) == "Documents"

    def test_unknown_extension_is_other(self):
        assert common.category_for(Path("weird.zzz")) == "Other"
        assert common.category_for(Path("Makefile")) == "Other"

    def test_every_extension_maps_to_one_category(self):
        categories, ext_to_cat = common.load_categories()
        assert sum(len(v) for v in categories.values()) == len(ext_to_cat)


class TestCommands:
    """Subprocess wrappers"""

    def test_run_cmd_returns_stdout(self):
        out = common.run_cmd([sys.executable, "-c", "print('hi')"])
        assert out == "hi"

    def test_run_cmd_missing_binary_returns_empty(self):
        assert common.run_cmd(["definitely-not-a-real-binary-xyz"]) == ""

    def test_run_cmd_checked_raises_on_failure(self):
        with pytest.raises(ToolkitError, match="exited 3"):
            common.run_cmd_checked([sys.executable, "-c", "import sys; sys.exit(3)"])

    def test_run_cmd_checked_missing_binary(self):
        with pytest.raises(ToolkitError, match="not found"):
            common.run_cmd_checked(["definitely-not-a-real-binary-xyz"])


class TestStores:
    """JSON / CSV record stores"""

    def test_missing_store_reads_empty(self, tmp_path):
        assert common.load_records(tmp_path / "none.json") == []

    def test_round_trip_records(self, tmp_path):
        path = tmp_path / "sub" / "records.json"
        common.save_records(path, [{"a": 1}])
        assert common.load_records(path) == [{"a": 1}]
        assert not list(path.parent.glob("*.tmp"))

    def test_corrupt_store_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ToolkitError, match="not valid JSON"):
            common.load_records(path)

    def test_non_array_store_raises(self, tmp_path):
        path = tmp_path / "obj.json"
        path.write_text('{"a": 1}', encoding="utf-8")
        with pytest.raises(ToolkitError, match="JSON array"):
            common.load_records(path)

    def test_append_csv_writes_header_once(self, tmp_path):
        path = tmp_path / "rows.csv"
        common.append_csv_row(path, ["x", "y"], {"x": 1, "y": 2})
        common.append_csv_row(path, ["x", "y"], {"x": 3, "y": 4})
        with path.open(newline="") as fh:
            rows = list(csv.reader(fh))
        assert rows == [["x", "y"], ["1", "2"], ["3", "4"]]

    def test_data_dir_honours_env(self, data_home):
        assert common.data_dir() == data_home
        assert data_home.is_dir()


class TestFilesystem:
    """Tree walking and unique names"""

    def test_iter_files_prunes_skip_dirs(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "config").write_text("x")
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.py").write_text("x")
        found = [p.relative_to(tmp_path).as_posix() for p in common.iter_files(tmp_path)]
        assert found == ["src/a.py"]

    def test_unique_path(self, tmp_path):
        target = tmp_path / "file.txt"
        assert common.unique_path(target) == target
        target.write_text("x")
        assert common.unique_path(target).name == "file (1).txt"
        (tmp_path / "file (1).txt").write_text("x")
        assert common.unique_path(target).name == "file (2).txt"


class TestLogging:
    """Log-file setup"""

    def test_setup_file_logging_is_idempotent(self, tmp_path):
        log_file = tmp_path / "tool.log"
        root = common.setup_file_logging(log_file)
        common.setup_file_logging(log_file)
        handlers = [h for h in root.handlers
                    if isinstance(h, logging.FileHandler) and h.baseFilename == str(log_file.resolve())]
        assert len(handlers) == 1
        logging.getLogger("jtoolkit.test").info("hello")
        handlers[0].flush()
        assert "hello" in log_file.read_text()
        root.removeHandler(handlers[0])
        handlers[0].close()
