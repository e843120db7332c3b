"""Tests for technology detection."""

import pytest

from pagescope.models.scrape_models import TechSignal
from pagescope.services.tech_stack import TECH_SIGNATURES, TechSignature, detect_tech_stack


def _names(html: str, url: str = "https://example.com/") -> list[str]:
    return [signal.name for signal in detect_tech_stack(html, url)]


class TestDetectTechStack:
    def test_nothing_detected(self):
        assert detect_tech_stack("<html><body>plain</body></html>", "https://example.com/") == []

    def test_next_suppresses_react(self):
        html = '<div id="__next"></div><script>React.createElement</script>'
        assert _names(html) == ["Next.js"]

    def test_react_without_next(self):
        assert _names('<div data-reactroot=""></div>') == ["React"]

    def test_nuxt_suppresses_vue(self):
        assert _names('<div id="__nuxt"></div><script src="vue.js"></script>') == ["Nuxt.js"]

    def test_vue(self):
        assert _names('<script src="/vue.runtime.js"></script>') == ["Vue.js"]

    def test_matching_is_case_insensitive(self):
        assert _names('<script src="/JQUERY.min.js"></script>') == ["jQuery"]

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://my-app.vercel.app/", "Vercel"),
            ("https://site.netlify.app/docs", "Netlify"),
            ("https://someone.github.io/project", "GitHub Pages"),
        ],
    )
    def test_hosting_from_host_name(self, url, expected):
        assert _names("<html></html>", url) == [expected]

    def test_host_markers_ignore_html(self):
        assert _names('<a href="https://x.vercel.app">deployed</a>') == []

    def test_results_follow_catalog_order(self):
        html = "<script src='jquery.js'></script><link href='bootstrap.css'><div ng-version='17'>"
        assert _names(html) == ["Angular", "Bootstrap", "jQuery"]

    def test_signals_carry_icons(self):
        assert detect_tech_stack("cloudflare", "https://example.com/") == [
            TechSignal(name="Cloudflare", icon="CF")
        ]

    def test_custom_catalog(self):
        signatures = (TechSignature("Htmx", "htmx", ("hx-get",)),)
        signals = detect_tech_stack('<button hx-get="/x">', "https://example.com/", signatures)
        assert signals == [TechSignal(name="Htmx", icon="htmx")]

    def test_catalog_names_are_unique(self):
        names = [signature.name for signature in TECH_SIGNATURES]
        assert len(names) == len(set(names))
