from __future__ import annotations

from datetime import date

import pytest

from fin_ingest.fin_extract.utils import find_date_token, parse_date


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("01/02/2024", date(2024, 1, 2)),
        ("1/5/24", date(2024, 1, 5)),
        ("12/31/1999", date(1999, 12, 31)),
        ("12-31-99", date(1999, 12, 31)),
        ("3/4/50", date(2050, 3, 4)),
        ("3/4/51", date(1951, 3, 4)),
        ("2024-02-29", date(2024, 2, 29)),
        (" 07/04/2023 ", date(2023, 7, 4)),
    ],
)
def test_parse_date(raw: str, expected: date) -> None:
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", ["13/01/2024", "02/30/2024", "2023-02-29", "Jan 5 2024", "", "1/2"])
def test_parse_date_rejects_invalid(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_date(raw)


def test_find_date_token() -> None:
    match = find_date_token("Posted 11/01/2024 SWEETGREEN")
    assert match is not None
    assert match.group(1) == "11/01/2024"
    assert find_date_token("Account 1234-5678-9012") is None
    assert find_date_token("Page 1 of 2") is None
