"""
Unit tests for Network-Tools
"""
import argparse
import socket
from unittest.mock import MagicMock, patch

import pytest
import requests

from jtoolkit.network import net_diag, port_scan, site_monitor, speed_test


@pytest.fixture
def listener():
    """A local TCP socket accepting connections; yields its port."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(5)
    yield srv.getsockname()[1]
    srv.close()


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def fake_response(status=200, text="ok", reason="OK"):
    r = MagicMock()
    r.status_code = status
    r.text = text
    r.reason = reason
    return r


class TestPortScan:
    """Port list parsing and connect scan"""

    def test_parse_ports(self):
        assert port_scan.parse_ports("80, 22,8000-8002,22") == [22, 80, 8000, 8001, 8002]

    @pytest.mark.parametrize("spec,message", [
        ("abc", "invalid port spec"),
        ("0", "out of bounds"),
        ("70000", "out of bounds"),
        ("90-80", "out of bounds"),
        (" , ", "no ports given"),
    ])
    def test_parse_ports_rejects(self, spec, message):
        with pytest.raises(ValueError, match=message):
            port_scan.parse_ports(spec)

    def test_open_and_closed(self, listener):
        assert port_scan.scan_port("127.0.0.1", listener, 1.0)[0] == "open"
        assert port_scan.scan_port("127.0.0.1", free_port(), 1.0)[0] == "closed"

    def test_scan_results_and_csv(self, listener, tmp_path):
        out = tmp_path / "scan.csv"
        code = port_scan.main(["127.0.0.1", "-p", str(listener), "--csv", str(out)])
        assert code == 0
        rows = out.read_text().splitlines()
        assert rows[0] == ",".join(port_scan.CSV_FIELDS)
        assert f",127.0.0.1,{listener},open," in rows[1]

    def test_unresolvable_host(self):
        with patch.object(port_scan.socket, "gethostbyname", side_effect=socket.gaierror("nope")):
            with pytest.raises(ValueError, match="cannot resolve"):
                port_scan.scan("no.such.host", [80])


class TestNetDiag:
    """Connectivity checks"""

    def test_parse_endpoint(self):
        assert net_diag.parse_endpoint("example.com:443") == ("example.com", 443)
        with pytest.raises(argparse.ArgumentTypeError):
            net_diag.parse_endpoint("example.com")

    def test_tcp_connect(self, listener):
        ok, ms, err = net_diag.tcp_connect("127.0.0.1", listener)
        assert ok and ms >= 0 and err == ""
        ok, _ms, err = net_diag.tcp_connect("127.0.0.1", free_port(), timeout=1.0)
        assert not ok and err

    def test_check_dns_failure(self):
        with patch.object(net_diag.socket, "getaddrinfo", side_effect=socket.gaierror("no name")):
            checks = net_diag.check_dns(["bad.invalid"])
        assert not checks[0].ok
        assert checks[0].name == "DNS bad.invalid"

    def test_public_ip(self):
        with patch.object(net_diag.requests, "get", return_value=fake_response(text=" 203.0.113.7\n")):
            check = net_diag.check_public_ip()
        assert check.ok and check.detail == "203.0.113.7"

    def test_public_ip_failure(self):
        with patch.object(net_diag.requests, "get", side_effect=requests.ConnectionError("down")):
            assert not net_diag.check_public_ip().ok

    def test_main_exit_code(self, capsys):
        checks = [net_diag.Check("Interfaces", True, "eth0"), net_diag.Check("Gateway", False, "no default route")]
        with patch.object(net_diag, "run_checks", return_value=checks):
            assert net_diag.main(["--no-http"]) == 1
        out = capsys.readouterr().out
        assert "[FAIL] Gateway" in out
        assert "1/2 checks passed" in out


class TestSiteMonitor:
    """Polling, transitions and uptime"""

    def test_check_url_expect_text(self):
        session = MagicMock()
        session.get.return_value = fake_response(text="Welcome home")
        assert site_monitor.check_url(session, "https://a.test", expect="Welcome")["up"]
        result = site_monitor.check_url(session, "https://a.test", expect="Missing")
        assert not result["up"]
        assert "not found" in result["error"]

    def test_check_url_error_status(self):
        session = MagicMock()
        session.get.return_value = fake_response(status=503, reason="Service Unavailable")
        result = site_monitor.check_url(session, "https://a.test")
        assert result == {**result, "status": 503, "up": False, "error": "Service Unavailable"}

    def test_check_url_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("refused")
        result = site_monitor.check_url(session, "https://a.test")
        assert result["status"] is None
        assert result["error"] == "ConnectionError"

    def test_record_transitions(self):
        state = site_monitor.SiteState("https://a.test")
        up = {"status": 200, "ms": 5.0, "up": True}
        down = {"status": 500, "ms": 5.0, "up": False}
        assert site_monitor.record(state, up) is None
        assert site_monitor.record(state, up) is None
        assert site_monitor.record(state, down) == "DOWN"
        assert site_monitor.record(state, up) == "UP"
        assert state.uptime == 75.0

    def test_first_check_down_is_reported(self):
        state = site_monitor.SiteState("https://a.test")
        assert site_monitor.record(state, {"status": None, "ms": 1.0, "up": False}) == "DOWN"

    def test_monitor_rounds_and_csv(self, tmp_path):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = [fake_response(), fake_response(status=500, reason="Error"), fake_response()]
        naps = []
        out = tmp_path / "monitor.csv"
        states = site_monitor.monitor(["https://a.test"], interval=5, count=3, csv_path=out,
                                      session=session, sleep=naps.append)
        assert naps == [5, 5]
        assert states["https://a.test"].checks == 3
        assert states["https://a.test"].failures == 1
        assert len(out.read_text().splitlines()) == 4

    def test_transition_logged(self, tmp_path, data_home):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = [fake_response(), fake_response(status=404, reason="Not Found")]
        log = tmp_path / "monitor.log"
        with patch.object(site_monitor.requests, "Session", return_value=session):
            code = site_monitor.main(["https://a.test", "-n", "2", "-i", "0", "--log", str(log)])
        assert code == 1
        assert "https://a.test is DOWN (Not Found)" in log.read_text()
        assert (data_home / "site_monitor.csv").exists()


class TestSpeedTest:
    """Throughput maths and streaming"""

    def test_mbps(self):
        assert speed_test.mbps(1_000_000, 1.0) == 8.0
        assert speed_test.mbps(100, 0) == 0.0

    def test_measure_download_stops_at_max(self):
        response = MagicMock()
        response.__enter__.return_value = response
        response.iter_content.return_value = iter([b"x" * 1000] * 10)
        session = MagicMock()
        session.get.return_value = response
        received, seconds = speed_test.measure_download("https://a.test/file", max_bytes=2500, session=session)
        assert received == 3000
        assert seconds >= 0

    def test_measure_latency_without_host(self):
        assert speed_test.measure_latency("not a url") is None

    def test_main_appends_csv(self, tmp_path):
        out = tmp_path / "speed.csv"
        with patch.object(speed_test, "measure_latency", return_value=12.34), \
             patch.object(speed_test, "measure_download", return_value=(2_000_000, 2.0)):
            assert speed_test.main(["--csv", str(out)]) == 0
        rows = out.read_text().splitlines()
        assert rows[1].endswith(",12.3,2000000,2.0,8.0")
