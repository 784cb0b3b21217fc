# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""End-to-end soft-404 scenarios through classify_page()."""

from __future__ import annotations

import logging
import time

import pytest

from soft404 import ClassificationOutcome, classify_page, extract_signals, signals_from_html
from soft404.detector import SEARCH_ENGINE_SKIPPED, has_explicit_404
from tests._page_helpers import article, page


class TestScenarios:
    def test_a_error_title_on_sparse_page(self):
        out = classify_page(page(title="404 - Page Not Found", bodyText=article(15), domain="example.com"))
        assert out.is_404
        assert out.confidence >= 80

    def test_b_long_article(self):
        out = classify_page(page(title="Quarterly Report", bodyText=article(600), domain="example.com"))
        assert not out.is_404
        assert out.confidence == -20.0

    def test_c_facebook_unavailable_content(self):
        chrome = article(800)
        out = classify_page(
            page(
                title="This content isn't available",
                bodyText=chrome + " This content isn't available.",
                url="https://www.facebook.com/some.person/posts/123",
                domain="www.facebook.com",
            )
        )
        assert out.is_404
        # -20 sparsity, platform 28 + 14, medium title 21, medium body 6.3
        assert out.confidence == pytest.approx(49.3)
        assert 35 <= out.confidence < 80
        assert any(i.startswith("Platform-specific (facebook.com)") for i in out.indicators)

    def test_d_url_alone_is_not_enough(self):
        out = classify_page(
            page(
                title="Annual Archive",
                bodyText=article(300),
                url="https://site.example/archive/2019/404.html",
                domain="site.example",
            )
        )
        assert not out.is_404
        assert out.confidence == 30.0
        assert out.indicators == (r"URL matches: /404(\.html?)?$",)

    def test_e_weak_indicators_on_sparse_page(self):
        body = "Sorry, that was not found. It doesn't exist. Broken link. " * 5
        out = classify_page(page(bodyText=body, domain="example.org"))
        assert out.is_404
        # 25 sparse + 10 diversity + 10 short sentences + 3 x 3 weak
        assert out.confidence == pytest.approx(54.0)
        assert "Multiple weak indicators found: 3" in out.indicators

    def test_c_body_only_phrase_on_long_page(self):
        # The phrase in body text alone is damped to almost nothing on an 800-word page.
        out = classify_page(
            page(
                bodyText=article(800) + " This content isn't available.",
                url="https://www.facebook.com/some.person/posts/123",
                domain="www.facebook.com",
            )
        )
        assert not out.is_404
        # -20 sparsity, platform body 14, medium body 6.3
        assert out.confidence == pytest.approx(0.3)
        assert out.indicators[0] == "Page has substantial content"
        assert any(i.startswith("Platform-specific body (facebook.com)") for i in out.indicators)


class TestLongPages:
    def test_quoted_404_prose_classifies_quickly(self):
        filler = "note that the page you are reading is another example of the site " * 60
        body = 'The server answered "404" once. ' + filler
        start = time.perf_counter()
        out = classify_page(page(title="Blog", bodyText=body, domain="blog.example"))
        assert time.perf_counter() - start < 1.0
        # -20 substantial content, +10 low vocabulary diversity; no indicator matches
        assert not out.is_404
        assert out.confidence == pytest.approx(-10.0)
        assert out.indicators == ("Page has substantial content", "Low vocabulary diversity")


class TestPlatformCalibration:
    BODY = article(145) + " This content isn't available."

    def test_facebook_threshold_override(self):
        out = classify_page(page(title="Facebook", bodyText=self.BODY, domain="facebook.com"))
        # 5 limited content + platform body 20 + medium body 12
        assert out.confidence == pytest.approx(37.0)
        assert out.is_404

    def test_same_page_elsewhere_is_not_404(self):
        out = classify_page(page(title="Facebook", bodyText=self.BODY, domain="example.com"))
        assert out.confidence == pytest.approx(17.0)
        assert not out.is_404


class TestOtherPaths:
    def test_meta_status_on_normal_page(self):
        out = classify_page(
            page(title="Shop", bodyText=article(300), metaTags=[{"name": "prerender-status-code", "content": "404"}])
        )
        # 50 >= 40 only counts with an explicit "404" in the text
        assert not out.is_404

    def test_meta_status_with_explicit_404(self):
        out = classify_page(
            page(
                title="Shop",
                bodyText=article(300) + " Error code 404.",
                metaTags=[{"name": "prerender-status-code", "content": "404"}],
            )
        )
        assert out.is_404

    def test_empty_page_is_not_404(self):
        out = classify_page(page())
        assert not out.is_404
        assert out.indicators == ("Extremely sparse content: 0 words",)

    def test_none_page(self):
        out = classify_page(None)
        assert isinstance(out, ClassificationOutcome)
        assert not out.is_404

    def test_accepts_signals(self):
        signals = extract_signals(page(title="Error 404", bodyText=article(15)))
        assert classify_page(signals).is_404

    def test_github_dom_dump(self):
        html = (
            "<html><head><title>Page not found · GitHub</title></head><body>"
            "<h1>404</h1><h2>This is not the web page you are looking for</h2>"
            '<img src="/images/404-octocat.png" alt="Octocat"><a href="/">Home</a>'
            "</body></html>"
        )
        out = classify_page(signals_from_html(html, url="https://github.com/acme/nothing-here"))
        assert out.is_404
        assert "404 image found" in out.indicators
        assert "Known site with sparse content" in out.indicators


class TestSearchEngineGuard:
    @pytest.mark.parametrize("domain", ["www.google.com", "duckduckgo.com", "search.yahoo.com"])
    def test_search_engines_are_skipped(self, domain: str):
        out = classify_page(page(title="404 - Page Not Found", bodyText="", domain=domain))
        assert out == ClassificationOutcome(is_404=False, confidence=0.0, indicators=(SEARCH_ENGINE_SKIPPED,))

    def test_domain_from_url_is_checked(self):
        out = classify_page(page(title="404 - Page Not Found", url="https://www.bing.com/search?q=x"))
        assert not out.is_404


class TestExplicit404:
    @pytest.mark.parametrize(
        "fields,expected",
        [
            ({"title": "Error 404"}, True),
            ({"bodyText": "code 404 here"}, True),
            ({"url": "https://a.test/404"}, False),
            ({"headings": ["404"]}, False),
            ({}, False),
        ],
    )
    def test_title_and_body_only(self, fields: dict, expected: bool):
        assert has_explicit_404(extract_signals(page(**fields))) is expected


class TestLogging:
    def test_verdict_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="soft404.detector"):
            classify_page(page(title="Error 404", bodyText=article(15), url="https://a.test/x"))
        assert any("is_404=True" in r.getMessage() and "https://a.test/x" in r.getMessage() for r in caplog.records)

    def test_search_engine_skip_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="soft404.detector"):
            classify_page(page(domain="www.google.com"))
        assert any("search engine" in r.getMessage() for r in caplog.records)
