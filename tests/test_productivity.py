"""
Unit tests for Productivity
"""
import datetime
import json
from unittest.mock import patch

import pytest
from PIL import Image

from jtoolkit.common import ToolkitError
from jtoolkit.productivity import clipboard, notes, pomodoro, qr_code, time_tracker


class TestNotes:
    """Note store operations"""

    def test_add_assigns_increasing_ids(self):
        store = []
        first = notes.add_note(store, "buy milk", ["Home", " errands ", ""])
        second = notes.add_note(store, "  call Bob  ")
        assert (first["id"], second["id"]) == (1, 2)
        assert first["tags"] == ["errands", "home"]
        assert second["text"] == "call Bob"

    def test_ids_never_reused_after_delete(self):
        store = []
        for text in ("a", "b", "c"):
            notes.add_note(store, text)
        notes.delete_note(store, 2)
        assert notes.add_note(store, "d")["id"] == 4

    def test_empty_note_rejected(self):
        with pytest.raises(ToolkitError, match="empty"):
            notes.add_note([], "   ")

    def test_delete_unknown_id(self):
        with pytest.raises(ToolkitError, match="No note with id 9"):
            notes.delete_note([], 9)

    def test_filter(self):
        store = []
        notes.add_note(store, "Fix the sink", ["home"])
        notes.add_note(store, "Quarterly report", ["work"])
        assert [n["id"] for n in notes.filter_notes(store, tag="HOME")] == [1]
        assert [n["id"] for n in notes.filter_notes(store, term="REPORT")] == [2]
        assert [n["id"] for n in notes.filter_notes(store, term="wor")] == [2]

    def test_cli_round_trip(self, data_home, tmp_path, capsys):
        assert notes.main(["add", "pay", "rent", "-t", "money"]) == 0
        assert notes.main(["add", "walk dog"]) == 0
        saved = json.loads((data_home / "notes.json").read_text())
        assert [n["text"] for n in saved] == ["pay rent", "walk dog"]

        capsys.readouterr()
        assert notes.main(["search", "rent"]) == 0
        out = capsys.readouterr().out
        assert "pay rent" in out and "walk dog" not in out

        export = tmp_path / "notes.md"
        assert notes.main(["export", str(export)]) == 0
        assert "`#money`" in export.read_text()

        assert notes.main(["delete", "7"]) == 1
        assert notes.main(["clear"]) == 0
        assert len(json.loads((data_home / "notes.json").read_text())) == 2
        assert notes.main(["clear", "--yes"]) == 0
        assert json.loads((data_home / "notes.json").read_text()) == []

    def test_corrupt_store_reports_error(self, data_home, capsys):
        data_home.mkdir(parents=True)
        (data_home / "notes.json").write_text("{oops")
        assert notes.main(["list"]) == 1
        assert "not valid JSON" in capsys.readouterr().err


class TestClipboard:
    """History rules and the watcher loop"""

    def test_add_entry_rules(self):
        history = []
        assert clipboard.add_entry(history, "one")
        assert not clipboard.add_entry(history, "one")
        assert not clipboard.add_entry(history, "   ")
        assert clipboard.add_entry(history, "two")
        assert clipboard.add_entry(history, "one")
        assert [h["text"] for h in history] == ["two", "one"]

    def test_add_entry_caps_history(self):
        history = []
        for i in range(5):
            clipboard.add_entry(history, f"item {i}", max_entries=3)
        assert [h["text"] for h in history] == ["item 2", "item 3", "item 4"]

    def test_preview(self):
        assert clipboard.preview("a\n  b\tc") == "a b c"
        assert clipboard.preview("x" * 100, width=10) == "xxxxxxx..."

    def test_watch_captures_changes(self, tmp_path):
        store = tmp_path / "clip.json"
        values = iter(["first", "first", "", "second"])
        with patch.object(clipboard.pyperclip, "paste", side_effect=lambda: next(values)):
            captured = clipboard.watch(store, rounds=4, sleep=lambda s: None)
        assert captured == 2
        assert [h["text"] for h in json.loads(store.read_text())] == ["first", "second"]

    def test_unavailable_clipboard(self):
        err = clipboard.pyperclip.PyperclipException("no backend")
        with patch.object(clipboard.pyperclip, "paste", side_effect=err):
            with pytest.raises(ToolkitError, match="Clipboard not available"):
                clipboard.read_clipboard()

    def test_copy_newest(self, data_home):
        history = []
        clipboard.add_entry(history, "old")
        clipboard.add_entry(history, "new")
        clipboard.save_records(clipboard.store_path(), history)
        with patch.object(clipboard.pyperclip, "copy") as copy:
            assert clipboard.main(["copy", "1"]) == 0
            copy.assert_called_once_with("new")
            assert clipboard.main(["copy", "3"]) == 1


class TestTimeTracker:
    """Sessions, switching and reports"""

    T0 = datetime.datetime(2026, 3, 2, 9, 0, 0)

    def test_start_stops_running_task(self):
        entries = []
        time_tracker.start(entries, "emails", at=self.T0)
        entry, stopped = time_tracker.start(entries, "report", at=self.T0 + datetime.timedelta(minutes=30))
        assert stopped["task"] == "emails"
        assert stopped["minutes"] == 30.0
        assert time_tracker.running(entries) is entry

    def test_stop_when_idle(self):
        assert time_tracker.stop([]) is None

    def test_empty_task(self):
        with pytest.raises(ToolkitError):
            time_tracker.start([], "  ")

    def test_summarize(self):
        entries = []
        time_tracker.start(entries, "old", at=self.T0 - datetime.timedelta(days=10))
        time_tracker.stop(entries, at=self.T0 - datetime.timedelta(days=10, minutes=-60))
        time_tracker.start(entries, "report", at=self.T0)
        time_tracker.start(entries, "emails", at=self.T0 + datetime.timedelta(minutes=20))
        time_tracker.start(entries, "report", at=self.T0 + datetime.timedelta(minutes=30))
        now = self.T0 + datetime.timedelta(minutes=90)

        totals = time_tracker.summarize(entries, now=now)
        assert totals == {"report": 80.0, "old": 60.0, "emails": 10.0}
        recent = time_tracker.summarize(entries, days=7, now=now)
        assert "old" not in recent

    def test_fmt_minutes(self):
        assert time_tracker.fmt_minutes(45) == "45m"
        assert time_tracker.fmt_minutes(125) == "2h 05m"

    def test_cli_export(self, data_home, tmp_path):
        assert time_tracker.main(["start", "deep", "work"]) == 0
        assert time_tracker.main(["stop"]) == 0
        assert time_tracker.main(["stop"]) == 0
        out = tmp_path / "time.csv"
        assert time_tracker.main(["export", str(out)]) == 0
        rows = out.read_text().splitlines()
        assert rows[0] == "task,start,end,minutes"
        assert rows[1].startswith("deep work,")


class TestPomodoro:
    """Phase schedule and session logging"""

    def test_schedule(self):
        phases = [p for p, _ in pomodoro.schedule(5, work=25, short=5, long=15, cycles=2)]
        assert phases == [
            "work", "short break", "work", "long break", "work",
            "short break", "work", "long break", "work",
        ]

    def test_single_round_has_no_break(self):
        assert list(pomodoro.schedule(1, work=25, short=5, long=15, cycles=4)) == [("work", 25)]

    def test_countdown_sleeps_whole_duration(self, capsys):
        naps = []
        pomodoro.countdown(0.5, "work", sleep=naps.append)
        assert sum(naps) == 30
        assert "done" in capsys.readouterr().out

    def test_run_logs_work_sessions(self, tmp_path):
        store = tmp_path / "pomodoro.json"
        completed = pomodoro.run("write", 2, work=0.05, short=0.05, long=0.05, cycles=4,
                                 store=store, sleep=lambda s: None)
        assert completed == 2
        records = json.loads(store.read_text())
        assert [r["task"] for r in records] == ["write", "write"]

    def test_interrupt_keeps_completed(self, tmp_path):
        store = tmp_path / "pomodoro.json"
        calls = {"n": 0}

        def sleep(_seconds):
            calls["n"] += 1
            if calls["n"] > 3:
                raise KeyboardInterrupt

        completed = pomodoro.run("x", 3, work=0.05, short=0.05, long=0.05, cycles=4, store=store, sleep=sleep)
        assert completed == 1

    def test_stats(self, data_home, capsys):
        pomodoro.log_session(data_home / "pomodoro.json", "x", 25)
        assert pomodoro.main(["--stats"]) == 0
        assert "Today : 1 sessions, 25 min" in capsys.readouterr().out


class TestQrCode:
    """Payload building and rendering"""

    def test_wifi_payload_escapes(self):
        assert qr_code.wifi_payload("Home;Net", 'p"a:ss') == 'WIFI:T:WPA;S:Home\\;Net;P:p\\"a\\:ss;;'

    def test_open_network(self):
        assert qr_code.wifi_payload("Cafe", hidden=True) == "WIFI:T:nopass;S:Cafe;H:true;;"

    def test_make_qr(self):
        img = qr_code.make_qr("https://example.com", size=200)
        assert img.size == (200, 200)
        assert img.mode == "RGB"

    def test_make_qr_rejects_empty(self):
        with pytest.raises(ToolkitError):
            qr_code.make_qr("")

    def test_main_writes_png(self, tmp_path):
        out = tmp_path / "wifi.png"
        assert qr_code.main(["--wifi-ssid", "Home", "--wifi-password", "secret", "-o", str(out)]) == 0
        with Image.open(out) as img:
            assert img.format == "PNG"
