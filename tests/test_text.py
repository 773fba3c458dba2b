"""Tests for text.py: whitespace normalisation."""
import pytest

from six_scraper.text import normalize


class TestNormalize:
    @pytest.mark.parametrize("raw, expected", [
        ("hello world", "hello world"),
        ("  hello   world  ", "hello world"),
        ("line1\nline2\n\nline3", "line1 line2 line3"),
        ("\t  tabs\tand  spaces  \n", "tabs and spaces"),
        ("  a   b\n\tc ", "a b c"),
        ("single", "single"),
    ])
    def test_collapses_runs(self, raw, expected):
        assert normalize(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "\n\t\r\n "])
    def test_blank_becomes_empty(self, raw):
        assert normalize(raw) == ""

    def test_idempotent(self):
        once = normalize("  Catatan \r\n   penting\t ")
        assert normalize(once) == once
