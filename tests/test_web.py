"""
Unit tests for Web-Portfolio
"""
import copy
from unittest.mock import MagicMock

import pytest
import requests

from jtoolkit.common import ToolkitError
from jtoolkit.web import link_checker, portfolio


class TestPortfolio:
    """Profile validation and HTML rendering"""

    def test_render_sample(self):
        page = portfolio.render_html(portfolio.SAMPLE_PROFILE)
        assert "<title>Jane Doe - Systems Engineer</title>" in page
        assert '<a href="https://github.com/janedoe">GitHub</a>' in page
        assert '<span class="tag">#python</span>' in page
        assert 'href="mailto:jane@example.com"' in page

    def test_values_are_escaped(self):
        profile = copy.deepcopy(portfolio.SAMPLE_PROFILE)
        profile["name"] = "<script>alert(1)</script>"
        profile["links"] = {"Bad": "javascript:alert(1)"}
        page = portfolio.render_html(profile)
        assert "<script>" not in page
        assert "&lt;script&gt;" in page
        assert '<a href="#">Bad</a>' in page

    def test_safe_url(self):
        assert portfolio.safe_url("https://a.test/?x=1&y=2") == "https://a.test/?x=1&amp;y=2"
        assert portfolio.safe_url(" MAILTO:me@a.test ") == "MAILTO:me@a.test"
        assert portfolio.safe_url("data:text/html,hi") == "#"

    @pytest.mark.parametrize("profile,message", [
        ({"title": "x"}, "missing: name"),
        ({"name": "A", "title": "B", "projects": [{"url": "https://a.test"}]}, "Project 1 needs a name"),
        (["not", "a", "dict"], "JSON object"),
    ])
    def test_validate(self, profile, message):
        with pytest.raises(ToolkitError, match=message):
            portfolio.validate(profile)

    def test_init_then_build(self, tmp_path):
        profile = tmp_path / "profile.json"
        site = tmp_path / "site"
        assert portfolio.main([str(profile), "--init"]) == 0
        assert portfolio.main([str(profile), "--init"]) == 1
        assert portfolio.main([str(profile), "-o", str(site)]) == 0
        assert (site / "index.html").read_text().startswith("<!DOCTYPE html>")
        assert ":root" in (site / "style.css").read_text()

    def test_missing_profile(self, tmp_path):
        with pytest.raises(ToolkitError, match="not found"):
            portfolio.build(tmp_path / "nope.json", tmp_path / "out")


def response(status, content_type="text/html", text="", url="https://a.test/"):
    r = MagicMock()
    r.status_code = status
    r.headers = {"Content-Type": content_type}
    r.text = text
    r.url = url
    return r


class TestLinkChecker:
    """Link extraction, crawling and checking"""

    MARKUP = """
    <html><head><link rel="stylesheet" href="css/site.css"></head><body>
      <a href="/about#team">About</a>
      <a href="/about">About again</a>
      <a href="#top">Top</a>
      <a href="mailto:me@a.test">Mail</a>
      <a href="https://other.test/page">Other</a>
      <img src="img/logo.png">
      <a>no href</a>
    </body></html>
    """

    def test_extract_links(self):
        links = link_checker.extract_links(self.MARKUP, "https://a.test/blog/")
        assert links == [
            "https://a.test/about",
            "https://other.test/page",
            "https://a.test/blog/css/site.css",
            "https://a.test/blog/img/logo.png",
        ]

    def test_check_remote_falls_back_to_get(self):
        session = MagicMock()
        session.head.return_value = response(405)
        session.get.return_value = response(200)
        result = link_checker.check_remote(session, "https://a.test/x", "index.html")
        assert result.ok and result.status == 200
        session.get.assert_called_once()

    def test_check_remote_broken(self):
        session = MagicMock()
        session.head.return_value = response(404)
        result = link_checker.check_remote(session, "https://a.test/gone", "index.html")
        assert not result.ok and result.status == 404
        session.get.assert_not_called()

    def test_check_remote_connection_error(self):
        session = MagicMock()
        session.head.side_effect = requests.ConnectionError("refused")
        result = link_checker.check_remote(session, "https://down.test/", "index.html")
        assert not result.ok
        assert result.error == "ConnectionError"

    def test_local_tree(self, tmp_path):
        (tmp_path / "docs").mkdir()
        (tmp_path / "index.html").write_text(
            '<a href="docs/">Docs</a><a href="missing.html">Gone</a>'
            '<a href="https://ext.test/">Ext</a>'
        )
        (tmp_path / "docs" / "index.html").write_text('<img src="../logo.png">')
        (tmp_path / "logo.png").write_bytes(b"png")

        links = link_checker.crawl_local(tmp_path)
        assert links[(tmp_path / "logo.png").resolve().as_uri()] == "docs/index.html"

        results = link_checker.check_links(links, MagicMock(), external=False)
        broken = [r.url.rsplit("/", 1)[-1] for r in results if not r.ok]
        assert broken == ["missing.html"]
        assert len(results) == 3

    def test_crawl_site_stays_on_host(self):
        pages = {
            "https://a.test/": response(200, text='<a href="/p2">2</a><a href="https://b.test/">b</a>'),
            "https://a.test/p2": response(200, text='<a href="/p3">3</a>', url="https://a.test/p2"),
        }
        session = MagicMock()
        session.get.side_effect = lambda url, timeout: pages[url]
        links = link_checker.crawl_site(session, "https://a.test/", max_depth=1)
        assert set(links) == {"https://a.test/p2", "https://b.test/", "https://a.test/p3"}
        assert links["https://a.test/p3"] == "https://a.test/p2"
        assert session.get.call_count == 2

    def test_main_bad_target(self, tmp_path):
        assert link_checker.main([str(tmp_path / "nothing-here")]) == 1
