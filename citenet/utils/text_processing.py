"""Identifier, date and title normalization helpers."""

from __future__ import annotations

import re
from datetime import datetime, timezone

_DOI_PREFIXES = ("https://doi.org/", "http://doi.org/", "https://dx.doi.org/", "http://dx.doi.org/", "doi:")
_YEAR_RE = re.compile(r"(\d{4})")


def normalize_identifier(raw: str) -> str:
    """Strip whitespace and resolver/scheme prefixes from a persistent identifier."""
    value = raw.strip()
    lowered = value.lower()
    for prefix in _DOI_PREFIXES:
        if lowered.startswith(prefix):
            return value[len(prefix):].strip()
    return value


def identifier_key(identifier: str) -> str:
    """Comparison key for identifiers (DOIs are case-insensitive)."""
    return normalize_identifier(identifier).casefold()


def looks_like_doi(identifier: str) -> bool:
    return normalize_identifier(identifier).startswith("10.")


def current_year() -> int:
    return datetime.now(timezone.utc).year


def parse_year(value: object) -> int | None:
    """Extract a four digit year from a date string such as ``2021-03-04``."""
    if isinstance(value, int):
        return value if value > 0 else None
    if not isinstance(value, str):
        return None
    match = _YEAR_RE.search(value)
    return int(match.group(1)) if match else None


def truncate_title(title: str, max_chars: int = 50) -> str:
    """Shorten a title for log output."""
    if len(title) <= max_chars:
        return title
    return title[:max_chars] + "..."
