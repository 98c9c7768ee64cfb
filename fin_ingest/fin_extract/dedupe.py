"""Collapse rows re-derived more than once by overlapping segmentation windows."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from fin_ingest.shared.merchants import merchant_key

from .types import ParsedTransaction

DedupeKey = tuple[date, float, str]


def transaction_key(transaction: ParsedTransaction) -> DedupeKey:
    return (
        transaction.date,
        round(transaction.amount, 2),
        merchant_key(transaction.merchant_name),
    )


def dedupe(transactions: Iterable[ParsedTransaction]) -> list[ParsedTransaction]:
    """Drop repeats of ``(date, amount, merchant)``; the first occurrence wins, order is kept."""

    seen: set[DedupeKey] = set()
    unique: list[ParsedTransaction] = []
    for transaction in transactions:
        key = transaction_key(transaction)
        if key in seen:
            continue
        seen.add(key)
        unique.append(transaction)
    return unique
