"""Tests for target parsing and link extraction/categorization."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from pageaudit.errors import TargetURLError
from pageaudit.links import extract_links, is_internal, parse_target, resolve_link


def _links(body: str, target_url: str = "http://example.com"):
    soup = BeautifulSoup(f"<html><body>{body}</body></html>", "lxml")
    return extract_links(soup, parse_target(target_url))


class TestParseTarget:
    def test_parses_scheme_host_path(self) -> None:
        target = parse_target("https://example.com:8080/docs/index.html")
        assert target.scheme == "https"
        assert target.host == "example.com:8080"
        assert target.path == "/docs/index.html"

    def test_userinfo_is_not_part_of_host(self) -> None:
        assert parse_target("http://user:pw@example.com/").host == "example.com"

    @pytest.mark.parametrize("url", ["", "example.com", "not-a-url", "http://", "http://example.com:abc/"])
    def test_rejects_unusable_urls(self, url: str) -> None:
        with pytest.raises(TargetURLError):
            parse_target(url)

    def test_target_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_target("nope")


class TestResolveLink:
    def setup_method(self) -> None:
        self.target = parse_target("http://example.com/dir/index.html")

    def test_absolute_path(self) -> None:
        assert resolve_link("/about", self.target) == "http://example.com/about"

    def test_relative_path(self) -> None:
        assert resolve_link("page2.html", self.target) == "http://example.com/dir/page2.html"

    def test_protocol_relative(self) -> None:
        assert resolve_link("//cdn.other.com/x.js", self.target) == "http://cdn.other.com/x.js"

    def test_http_values_are_untouched(self) -> None:
        assert resolve_link("https://other.com/a/../b", self.target) == "https://other.com/a/../b"

    def test_unresolvable_value_is_kept(self) -> None:
        assert resolve_link("//[broken", self.target) == "//[broken"


class TestExtractLinks:
    def test_categorizes_internal_and_external(self) -> None:
        links = _links('<a href="/about">About</a><a href="http://other.com">Other</a>')

        assert links.internal == ["http://example.com/about"]
        assert links.external == ["http://other.com"]
        assert links.all == ["http://example.com/about", "http://other.com"]

    def test_skips_fragment_script_and_empty_links(self) -> None:
        links = _links(
            '<a href="#top">Top</a>'
            '<a href="javascript:void(0)">JS</a>'
            '<a href="">Empty</a>'
            "<a>No href</a>"
        )
        assert links.all == []

    def test_deduplicates_on_resolved_form(self) -> None:
        links = _links(
            '<a href="/about">1</a>'
            '<a href="http://other.com">2</a>'
            '<a href="http://example.com/about">3</a>'
        )
        assert links.all == ["http://example.com/about", "http://other.com"]
        assert links.internal == ["http://example.com/about"]

    def test_preserves_document_order(self) -> None:
        links = _links(
            '<div><a href="/c">c</a></div>'
            '<p><span><a href="/a">a</a></span></p>'
            '<a href="/b">b</a>'
        )
        assert links.all == [
            "http://example.com/c",
            "http://example.com/a",
            "http://example.com/b",
        ]

    def test_subdomain_counts_as_internal(self) -> None:
        links = _links('<a href="http://blog.example.com/post">Blog</a>')
        assert links.internal == ["http://blog.example.com/post"]

    def test_counts_add_up(self) -> None:
        links = _links(
            '<a href="/1">1</a><a href="/2">2</a><a href="/1">dup</a>'
            '<a href="https://a.org">a</a><a href="mailto:someone@mail.org">mail</a>'
        )
        assert len(links.internal) + len(links.external) == len(links.all) == 4
        assert "mailto:someone@mail.org" in links.external


class TestIsInternal:
    def test_host_substring_match(self) -> None:
        target = parse_target("http://example.com")
        assert is_internal("http://example.com/x", target) is True
        assert is_internal("http://other.org/?ref=example.com", target) is True
        assert is_internal("http://other.org/", target) is False
