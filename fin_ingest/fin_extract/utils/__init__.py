"""Shared utilities for statement parsers."""

from __future__ import annotations

from .amounts import (
    AmountToken,
    SignConvention,
    SignedAmount,
    find_amount_tokens,
    first_amount_token,
    normalize_sign,
    parse_amount,
    strip_amount_tokens,
)
from .dates import DATE_TOKEN_RE, find_date_token, parse_date

__all__ = [
    "AmountToken",
    "DATE_TOKEN_RE",
    "SignConvention",
    "SignedAmount",
    "find_amount_tokens",
    "find_date_token",
    "first_amount_token",
    "normalize_sign",
    "parse_amount",
    "parse_date",
    "strip_amount_tokens",
]
