"""Tests for sitepub.links.rewriter — rewriting generated HTML for a URL prefix."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from sitepub.core.errors import LinkRewriteError
from sitepub.links.rewriter import LinkRewriter, fix_links

_REF_RE = re.compile(r"""(?:href|src)=["']([^"']*)["']""")


def _references(html: str) -> list[str]:
    return _REF_RE.findall(html)


class TestRewriteReference:
    def test_relative(self):
        rewriter = LinkRewriter("/blacksheep/")
        assert rewriter.rewrite_reference("../routing/", "getting-started") == "/blacksheep/routing/"

    def test_rooted_prefix(self):
        rewriter = LinkRewriter("/blacksheep/")
        assert rewriter.rewrite_reference("/img/logo.png", "") == "/blacksheep/img/logo.png"

    def test_custom_rooted_prefixes(self):
        rewriter = LinkRewriter("/blacksheep/", rooted_prefixes=["/static"])
        assert rewriter.rewrite_reference("/static/a.css", "") == "/blacksheep/static/a.css"
        assert rewriter.rewrite_reference("/img/logo.png", "") == "/img/logo.png"

    @pytest.mark.parametrize(
        "url",
        ["https://github.com/Neoteroi", "#install", "/rodi/", "/blacksheep/routing/", "", "mailto:x@y.z"],
    )
    def test_untouched(self, url):
        assert LinkRewriter("/blacksheep/").rewrite_reference(url, "getting-started") == url

    def test_base_path_is_normalised(self):
        assert LinkRewriter("blacksheep").base_path == "/blacksheep/"


class TestRewriteHtml:
    def test_attributes_double_and_single_quotes(self):
        html = """<a href="routing/">R</a><link href='assets/main.css'>"""
        out, report = LinkRewriter("/blacksheep/").rewrite_html(html)
        assert out == """<a href="/blacksheep/routing/">R</a><link href='/blacksheep/assets/main.css'>"""
        assert report.replacements == 2
        assert report.changed

    def test_attribute_names_are_matched_whole(self):
        html = """<img data-src="a.png" src="b.png"><a xlink:href="c">"""
        out, report = LinkRewriter("/docs/").rewrite_html(html)
        assert 'data-src="a.png"' in out
        assert 'xlink:href="c"' in out
        assert 'src="/docs/b.png"' in out
        assert report.replacements == 1

    def test_case_insensitive_attribute(self):
        out, _ = LinkRewriter("/docs/").rewrite_html('<A HREF="x/">')
        assert out == '<A HREF="/docs/x/">'

    def test_theme_object_literal(self):
        html = """var __md_scope = {base: "..", worker: "../assets/javascripts/workers/search.js"}"""
        out, report = LinkRewriter("/blacksheep/").rewrite_html(html, page_dir="getting-started")
        assert 'base: "/blacksheep/"' in out
        assert 'worker: "/blacksheep/assets/javascripts/workers/search.js"' in out
        assert report.replacements == 2

    def test_theme_json_config(self):
        html = """{"base": ".", "features": [], "search": "assets/javascripts/workers/search.js"}"""
        out, report = LinkRewriter("/blacksheep/v1/").rewrite_html(html)
        assert '"base": "/blacksheep/v1/"' in out
        assert '"search": "/blacksheep/v1/assets/javascripts/workers/search.js"' in out
        assert report.replacements == 2

    def test_theme_keys_inside_other_words_are_ignored(self):
        html = """{"database": "x", codebase: "y"}"""
        out, report = LinkRewriter("/blacksheep/").rewrite_html(html)
        assert out == html
        assert report.replacements == 0

    def test_repairs_prefixed_absolute_urls(self):
        html = """<a href="/blacksheep/https://github.com/Neoteroi">gh</a> /blacksheep/http://example.org"""
        out, report = LinkRewriter("/blacksheep/").rewrite_html(html)
        assert out == """<a href="https://github.com/Neoteroi">gh</a> http://example.org"""
        assert report.replacements == 2

    def test_escaping_reference_is_recorded(self):
        html = """<a href="../../outside/">x</a><a href="../ok/">y</a>"""
        out, report = LinkRewriter("/blacksheep/").rewrite_html(html, page_dir="getting-started", path="p.html")
        assert 'href="../../outside/"' in out
        assert 'href="/blacksheep/ok/"' in out
        assert report.unresolved == ["../../outside/"]
        assert report.replacements == 1
        assert report.path == "p.html"

    def test_site_root_base_path(self):
        html = """<a href="getting-started/">x</a><img src="/img/a.png">"""
        out, _ = LinkRewriter("/").rewrite_html(html)
        assert out == """<a href="/getting-started/">x</a><img src="/img/a.png">"""

    def test_unchanged_page(self):
        html = "<p>No links here</p>"
        out, report = LinkRewriter("/blacksheep/").rewrite_html(html)
        assert out == html
        assert not report.changed


class TestRewriteTree:
    def test_rewrites_every_page(self, site_dir: Path):
        result = LinkRewriter("/blacksheep/").rewrite_tree(site_dir)

        assert result.files_scanned == 3
        assert result.files_changed == 3
        assert result.replacements == 8 + 6 + 3
        assert [p.path for p in result.pages] == [
            "getting-started/index.html",
            "guides/authentication/index.html",
            "index.html",
        ]

        root_page = (site_dir / "index.html").read_text(encoding="utf-8")
        assert 'href="/blacksheep/"' in root_page
        assert 'href="/blacksheep/getting-started/"' in root_page
        assert 'href="https://www.neoteroi.dev/blacksheep/"' in root_page
        assert 'href="https://github.com/Neoteroi/BlackSheep"' in root_page
        assert 'href="#install"' in root_page
        assert 'href="/rodi/"' in root_page
        assert 'src="/blacksheep/img/logo.png"' in root_page
        assert '"base": "/blacksheep/"' in root_page

        deep_page = (site_dir / "guides" / "authentication" / "index.html").read_text(encoding="utf-8")
        assert 'href="/blacksheep/guides/authorization/"' in deep_page
        assert 'src="/blacksheep/assets/javascripts/bundle.js"' in deep_page

    def test_non_html_files_untouched(self, site_dir: Path):
        LinkRewriter("/blacksheep/").rewrite_tree(site_dir)
        assert (site_dir / "assets" / "javascripts" / "bundle.js").read_text() == "console.log(1);\n"

    def test_idempotent(self, site_dir: Path):
        rewriter = LinkRewriter("/blacksheep/")
        rewriter.rewrite_tree(site_dir)
        first = {p: p.read_text(encoding="utf-8") for p in site_dir.rglob("*.html")}

        second = rewriter.rewrite_tree(site_dir)

        assert second.replacements == 0
        assert second.files_changed == 0
        assert {p: p.read_text(encoding="utf-8") for p in site_dir.rglob("*.html")} == first

    def test_site_relative_references_start_with_prefix(self, site_dir: Path):
        LinkRewriter("/blacksheep/v1/").rewrite_tree(site_dir)

        for page in site_dir.rglob("*.html"):
            for ref in _references(page.read_text(encoding="utf-8")):
                if ref.startswith(("http://", "https://", "#", "/rodi/")):
                    continue
                assert ref.startswith("/blacksheep/v1/"), f"{page}: {ref}"

    def test_dry_run_writes_nothing(self, site_dir: Path):
        before = (site_dir / "index.html").read_text(encoding="utf-8")
        result = LinkRewriter("/blacksheep/").rewrite_tree(site_dir, dry_run=True)

        assert result.dry_run
        assert result.files_changed == 3
        assert (site_dir / "index.html").read_text(encoding="utf-8") == before
        assert "would change" in result.summary()

    def test_unresolved_references_reported(self, site_dir: Path):
        (site_dir / "404.html").write_text('<a href="../elsewhere/">x</a>', encoding="utf-8")
        result = LinkRewriter("/blacksheep/").rewrite_tree(site_dir)
        assert result.unresolved == ["404.html: ../elsewhere/"]

    def test_missing_site_dir(self, tmp_path: Path):
        with pytest.raises(LinkRewriteError, match="Site directory not found"):
            LinkRewriter("/blacksheep/").rewrite_tree(tmp_path / "missing")

    def test_unreadable_page(self, site_dir: Path):
        (site_dir / "broken.html").write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(LinkRewriteError, match="Cannot read broken.html") as exc_info:
            LinkRewriter("/blacksheep/").rewrite_tree(site_dir)
        assert exc_info.value.context.step == "fixlinks"


class TestFixLinks:
    def test_version_segment(self, site_dir: Path):
        result = fix_links(site_dir, base_path="blacksheep", version="v1")
        assert result.base_path == "/blacksheep/v1/"
        assert 'href="/blacksheep/v1/getting-started/"' in (site_dir / "index.html").read_text(encoding="utf-8")

    def test_summary(self, site_dir: Path):
        result = fix_links(site_dir, base_path="/blacksheep/")
        assert result.summary() == "3 pages scanned, 3 changed, 17 references rewritten to /blacksheep/"
