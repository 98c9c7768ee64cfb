"""Delimited-text (CSV/TSV) statement parsing."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fin_ingest.fin_classify.categories import auto_tag
from fin_ingest.shared.merchants import clean_merchant_name

from ..types import ParsedTransaction, ParseResult
from ..utils import SignConvention, SignedAmount, normalize_sign, parse_amount, parse_date

_log = logging.getLogger(__name__)

_SNIFF_DELIMITERS = ",;\t|"

# Discover writes "Trans. Date"; Chase card exports use "Transaction Date" with signed amounts.
TRANSACTION_DATE_HEADERS = ("trans. date",)
POST_DATE_HEADERS = ("post date",)

DATE_HEADERS = (
    "date",
    "trans. date",
    "transaction date",
    "trans date",
    "posted date",
    "posting date",
    "post date",
)
DESCRIPTION_HEADERS = (
    "description",
    "merchant",
    "name",
    "memo",
    "payee",
    "transaction description",
)
AMOUNT_HEADERS = ("amount", "transaction amount")
DEBIT_HEADERS = ("debit", "debit amount", "withdrawal", "withdrawals")
CREDIT_HEADERS = ("credit", "credit amount", "deposit", "deposits")
CATEGORY_HEADERS = ("category", "type")


@dataclass(slots=True)
class _ColumnMapping:
    layout: str
    date_index: int
    description_index: int
    amount_index: int | None = None
    debit_index: int | None = None
    credit_index: int | None = None
    category_index: int | None = None
    convention: SignConvention = SignConvention.EXPENSE_NEGATIVE


def parse_delimited(content: str) -> ParseResult:
    """Parse a delimited statement export into transactions plus warnings.

    Unsupported layouts are a normal outcome: they produce an empty transaction
    list and an error naming the column that could not be found.
    """

    result = ParseResult()
    text = (content or "").lstrip("\ufeff")
    if not text.strip():
        result.errors.append("The delimited file is empty")
        return result

    reader = csv.reader(io.StringIO(text, newline=""), _sniff_dialect(text))
    try:
        rows = [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as exc:
        result.errors.append(f"Malformed delimited input near line {reader.line_num}: {exc}")
        return result

    if not rows:
        result.errors.append("The delimited file is empty")
        return result

    headers = [cell.strip().lower() for cell in rows[0]]
    mapping, missing = _detect_columns(headers)
    if mapping is None:
        result.errors.append(f"Could not find {missing} column (headers: {', '.join(headers)})")
        return result
    _log.debug("Using %s column layout for delimited input", mapping.layout)

    for row_number, row in enumerate(rows[1:], start=2):
        transaction = _parse_row(row, mapping, row_number, result.errors)
        if transaction is not None:
            result.transactions.append(transaction)
    return result


def _sniff_dialect(text: str) -> type[csv.Dialect] | csv.Dialect:
    sample = "\n".join(text.splitlines()[:20])
    try:
        return csv.Sniffer().sniff(sample, delimiters=_SNIFF_DELIMITERS)
    except csv.Error:
        return csv.excel


def _detect_columns(headers: Sequence[str]) -> tuple[_ColumnMapping | None, str]:
    trans_date_idx = _find_index(headers, TRANSACTION_DATE_HEADERS)
    post_date_idx = _find_index(headers, POST_DATE_HEADERS)
    if trans_date_idx is not None and post_date_idx is not None:
        # Card-issuer export: Trans. Date, Post Date, Description, Amount, Category,
        # with purchases written as positive numbers.
        desc_idx = _find_index(headers, ("description",))
        amount_idx = _find_index(headers, ("amount",))
        if desc_idx is None:
            return None, "description"
        if amount_idx is None:
            return None, "amount"
        return (
            _ColumnMapping(
                layout="card-issuer",
                date_index=trans_date_idx,
                description_index=desc_idx,
                amount_index=amount_idx,
                category_index=_find_index(headers, ("category",)),
                convention=SignConvention.EXPENSE_POSITIVE,
            ),
            "",
        )

    date_idx = _find_index(headers, DATE_HEADERS)
    if date_idx is None:
        return None, "date"
    desc_idx = _find_index(headers, DESCRIPTION_HEADERS)
    if desc_idx is None:
        return None, "description"
    amount_idx = _find_index(headers, AMOUNT_HEADERS)
    debit_idx = _find_index(headers, DEBIT_HEADERS)
    credit_idx = _find_index(headers, CREDIT_HEADERS)
    if amount_idx is None and debit_idx is None and credit_idx is None:
        return None, "amount"
    return (
        _ColumnMapping(
            layout="generic",
            date_index=date_idx,
            description_index=desc_idx,
            amount_index=amount_idx,
            debit_index=debit_idx,
            credit_index=credit_idx,
            category_index=_find_index(headers, CATEGORY_HEADERS),
        ),
        "",
    )


def _parse_row(
    row: Sequence[str],
    mapping: _ColumnMapping,
    row_number: int,
    errors: list[str],
) -> ParsedTransaction | None:
    date_value = _get_cell(row, mapping.date_index)
    if not date_value:
        errors.append(f"Row {row_number}: missing date")
        return None
    try:
        txn_date = parse_date(date_value)
    except ValueError:
        errors.append(f"Row {row_number}: invalid date: {date_value}")
        return None

    try:
        raw_amount = _row_amount(row, mapping)
    except ValueError as exc:
        errors.append(f"Row {row_number}: invalid amount: {exc}")
        return None
    amount = normalize_sign(SignedAmount(raw_amount, mapping.convention))

    description = _get_cell(row, mapping.description_index)
    if not description:
        errors.append(f"Row {row_number}: missing description")
        return None
    merchant_name = clean_merchant_name(description)

    category = _get_cell(row, mapping.category_index) or None
    if category is None:
        category = auto_tag(None, merchant_name, description, amount)

    return ParsedTransaction(
        date=txn_date,
        name=description,
        merchant_name=merchant_name,
        amount=amount,
        category=category,
    )


def _row_amount(row: Sequence[str], mapping: _ColumnMapping) -> float:
    amount_value = _get_cell(row, mapping.amount_index)
    if amount_value:
        return parse_amount(amount_value)
    if mapping.debit_index is None and mapping.credit_index is None:
        raise ValueError("(blank)")

    debit_value = _get_cell(row, mapping.debit_index)
    credit_value = _get_cell(row, mapping.credit_index)
    if not debit_value and not credit_value:
        raise ValueError("(blank debit and credit)")
    debit = abs(parse_amount(debit_value)) if debit_value else 0.0
    credit = abs(parse_amount(credit_value)) if credit_value else 0.0
    return credit - debit


def _get_cell(cells: Sequence[str], index: int | None) -> str:
    if index is None or index < 0 or index >= len(cells):
        return ""
    return cells[index].strip()


def _find_index(headers: Sequence[str], targets: Sequence[str]) -> int | None:
    for target in targets:
        for idx, header in enumerate(headers):
            if header == target:
                return idx
    return None
