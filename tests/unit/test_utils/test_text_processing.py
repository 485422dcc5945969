"""Unit tests for identifier and date helpers."""

from __future__ import annotations

import pytest

from citenet.utils.text_processing import (
    identifier_key,
    looks_like_doi,
    normalize_identifier,
    parse_year,
    truncate_title,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("10.1038/nature14539", "10.1038/nature14539"),
        ("  10.1038/nature14539 ", "10.1038/nature14539"),
        ("https://doi.org/10.1038/nature14539", "10.1038/nature14539"),
        ("http://dx.doi.org/10.1038/nature14539", "10.1038/nature14539"),
        ("DOI:10.1038/Nature14539", "10.1038/Nature14539"),
        ("openaire____::abc", "openaire____::abc"),
    ],
)
def test_normalize_identifier(raw, expected):
    assert normalize_identifier(raw) == expected


def test_identifiers_compare_case_insensitively():
    assert identifier_key("10.1/ABC") == "10.1/abc"
    assert identifier_key("https://doi.org/10.1/ABC") == identifier_key("doi:10.1/abc")
    assert identifier_key("10.1/abc") != identifier_key("10.1/abd")


def test_looks_like_doi():
    assert looks_like_doi("10.5281/zenodo.1")
    assert looks_like_doi("https://doi.org/10.5281/zenodo.1")
    assert not looks_like_doi("50|doi_dedup___::abc")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2021-03-04", 2021), ("2019", 2019), (2015, 2015), ("unknown", None), (None, None), (0, None)],
)
def test_parse_year(value, expected):
    assert parse_year(value) == expected


def test_truncate_title():
    assert truncate_title("short") == "short"
    assert truncate_title("x" * 60, max_chars=10) == "x" * 10 + "..."
