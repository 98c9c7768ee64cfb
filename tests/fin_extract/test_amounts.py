from __future__ import annotations

import pytest

from fin_ingest.fin_extract.utils import (
    SignConvention,
    SignedAmount,
    find_amount_tokens,
    first_amount_token,
    normalize_sign,
    parse_amount,
    strip_amount_tokens,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("-4.50", -4.5),
        ("$1,234.56", 1234.56),
        ("-$54.32", -54.32),
        ("(1,234.50)", -1234.5),
        ("($12.00)", -12.0),
        ("$(12.00)", -12.0),
        ("45.00 CR", 45.0),
        ("-45.00 CR", 45.0),
        ("12.00-", -12.0),
        ("–7.25", -7.25),
        ("USD 10.00", 10.0),
        ("2000", 2000.0),
    ],
)
def test_parse_amount(raw: str, expected: float) -> None:
    assert parse_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "   ", "$", "abc", "--"])
def test_parse_amount_rejects_non_numeric(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_find_amount_tokens_skips_dates_and_references() -> None:
    text = "01/15/2024 REF 123456 COFFEE SHOP -$4.50 BAL 1,020.00"
    tokens = find_amount_tokens(text)
    assert [token.value for token in tokens] == [-4.5, 1020.0]
    assert tokens[0].text == "-$4.50"


def test_find_amount_tokens_handles_parentheses_and_credit_marker() -> None:
    tokens = find_amount_tokens("Refund (12.34) then 45.00 CR")
    assert [token.value for token in tokens] == [-12.34, 45.0]


def test_zero_tokens_only_kept_when_literal() -> None:
    assert [token.value for token in find_amount_tokens("Fee 0.00")] == [0.0]
    assert find_amount_tokens("Fee $0.00") == []


def test_first_amount_token_none_when_absent() -> None:
    assert first_amount_token("Page 1 of 3") is None
    assert first_amount_token("STORE 42") is None


def test_strip_amount_tokens() -> None:
    assert strip_amount_tokens("Coffee Shop -$4.50 extra") == "Coffee Shop extra"


def test_normalize_sign_conventions() -> None:
    assert normalize_sign(SignedAmount(-4.5)) == -4.5
    assert normalize_sign(SignedAmount(42.1, SignConvention.EXPENSE_POSITIVE)) == -42.1
    assert normalize_sign(SignedAmount(-15.0, SignConvention.EXPENSE_POSITIVE)) == 15.0
    assert normalize_sign(SignedAmount(10.005 + 0.0001)) == 10.01


def test_normalize_sign_never_returns_negative_zero() -> None:
    value = normalize_sign(SignedAmount(0.0, SignConvention.EXPENSE_POSITIVE))
    assert value == 0.0
    assert str(value) == "0.0"
