"""Date parsing helpers for statement text."""

from __future__ import annotations

import re
from datetime import date

# Two-digit years below the pivot land in the 2000s, the rest in the 1900s.
TWO_DIGIT_YEAR_PIVOT = 51

_US_DATE_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2}|\d{4})$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Unanchored form used to locate date tokens inside PDF lines.
DATE_TOKEN_RE = re.compile(r"(?<![\d/-])(\d{1,2}[/-]\d{1,2}[/-](?:\d{4}|\d{2}))(?![\d/-])")


def parse_date(value: str, *, pivot: int = TWO_DIGIT_YEAR_PIVOT) -> date:
    """Parse ``MM/DD/YYYY``, ``M/D/YY`` or ISO ``YYYY-MM-DD`` into a date.

    Raises ``ValueError`` for anything else, including impossible calendar dates
    such as ``13/01/2024``.
    """

    cleaned = (value or "").strip()
    iso_match = _ISO_DATE_RE.match(cleaned)
    if iso_match:
        year, month, day = (int(part) for part in iso_match.groups())
        return _build_date(value, year, month, day)

    us_match = _US_DATE_RE.match(cleaned)
    if us_match:
        month, day = int(us_match.group(1)), int(us_match.group(2))
        year_text = us_match.group(3)
        year = int(year_text)
        if len(year_text) == 2:
            year += 2000 if year < pivot else 1900
        return _build_date(value, year, month, day)

    raise ValueError(f"Unrecognized date format: {value!r}")


def find_date_token(text: str) -> re.Match[str] | None:
    """Return the first date-looking token in ``text`` (not yet validated)."""

    return DATE_TOKEN_RE.search(text or "")


def _build_date(raw: str, year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date {raw!r}: {exc}") from exc
