"""Tests for SourceURL validation and manifest parsing."""

from __future__ import annotations

import pytest

from imagelink.errors import InvalidURLError
from imagelink.models.source_url import SourceURL, parse_manifest


class TestSourceURL:
    @pytest.mark.parametrize(
        "raw",
        ["http://x/1.jpg", "https://example.com/images/a", "HTTPS://Example.com/b.png"],
    )
    def test_valid(self, raw):
        assert SourceURL(raw).is_valid

    @pytest.mark.parametrize(
        "raw",
        ["ftp://bad", "a", "", "file:///etc/passwd", "http://", "mailto:me@example.com", "http://x:99999/a.jpg"],
    )
    def test_invalid(self, raw):
        assert not SourceURL(raw).is_valid

    def test_parse_raises_for_invalid(self):
        with pytest.raises(InvalidURLError):
            SourceURL.parse("ftp://bad")

    def test_parse_returns_value(self):
        assert SourceURL.parse("http://x/1.jpg").raw == "http://x/1.jpg"

    def test_url_components(self):
        url = SourceURL("https://example.com/path/pic.jpg?size=l").url
        assert url.netloc == "example.com"
        assert url.path == "/path/pic.jpg"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("http://x/1.JPG", True),
            ("http://x/1.webp", True),
            ("http://x/photo.tiff", True),
            ("https://example.com/images/12345", True),
            ("https://example.com/file.pdf", False),
            ("https://example.com/page", False),
            ("ftp://x/1.jpg", False),
        ],
    )
    def test_image_heuristic(self, raw, expected):
        assert SourceURL(raw).is_image_url is expected

    def test_equality_uses_raw_string(self):
        assert SourceURL("http://x/1.jpg") == SourceURL("http://x/1.jpg")
        assert SourceURL("http://x/1.jpg") != SourceURL("http://x/2.jpg")
        assert len({SourceURL("http://x/1.jpg"), SourceURL("http://x/1.jpg")}) == 1

    def test_immutable(self):
        url = SourceURL("http://x/1.jpg")
        with pytest.raises(AttributeError):
            url.raw = "http://x/2.jpg"  # type: ignore[misc]


class TestParseManifest:
    def test_drops_blank_and_invalid_lines(self):
        text = "a\n\nhttp://x/1.jpg\nftp://bad\n  http://x/2.png  \n"
        entries = parse_manifest(text)
        assert [e.raw for e in entries] == ["http://x/1.jpg", "http://x/2.png"]

    def test_preserves_order_and_duplicates(self):
        text = "http://x/b.jpg\nhttp://x/a.jpg\nhttp://x/b.jpg"
        assert [e.raw for e in parse_manifest(text)] == [
            "http://x/b.jpg",
            "http://x/a.jpg",
            "http://x/b.jpg",
        ]

    def test_windows_line_endings(self):
        text = "http://x/1.jpg\r\nhttp://x/2.jpg\r\n"
        assert [e.raw for e in parse_manifest(text)] == ["http://x/1.jpg", "http://x/2.jpg"]

    def test_empty_text(self):
        assert parse_manifest("") == []
        assert parse_manifest("\n \n\t\n") == []
