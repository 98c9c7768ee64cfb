"""Turn reconstructed PDF lines into transaction rows.

Statements carry no reliable table structure once flattened to text, so rows are
recovered with an ordered chain of strategies. Each strategy is a plain function
``(lines, warnings, settings) -> transactions``; the next one only runs when the
previous produced nothing.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from datetime import date

from fin_ingest.fin_classify.categories import auto_tag
from fin_ingest.shared.config import ExtractionSettings, SegmentationSettings, default_extraction_settings
from fin_ingest.shared.merchants import clean_merchant_name

from .types import ParsedTransaction, ParseResult, TextLine
from .utils import (
    DATE_TOKEN_RE,
    SignedAmount,
    find_amount_tokens,
    find_date_token,
    first_amount_token,
    normalize_sign,
    parse_date,
    strip_amount_tokens,
)

_log = logging.getLogger(__name__)

UNKNOWN_DESCRIPTION = "Unknown Transaction"

TRANSACTION_TYPE_KEYWORDS: tuple[str, ...] = (
    "Purchase",
    "Deposit",
    "Direct Debit",
    "Direct Deposit",
    "Transfer",
    "Round Up Transfer",
    "Round Up",
    "ATM Withdrawal",
    "Adjustment",
    "Fee",
    "Payment",
    "Withdrawal",
    "Credit",
    "Refund",
)

# Longest keyword first so "Round Up Transfer" is not cut short by "Transfer".
TYPE_KEYWORD_RE = re.compile(
    r"\b(?:"
    + "|".join(
        re.escape(keyword) for keyword in sorted(TRANSACTION_TYPE_KEYWORDS, key=len, reverse=True)
    )
    + r")\b",
    re.IGNORECASE,
)
PAGE_NUMBER_RE = re.compile(r"^\s*(?:page\s+)?\d+\s+of\s+\d+\s*$|^\s*page\s+\d+\s*$", re.IGNORECASE)
_LEADING_DATE_RE = re.compile(r"^\s*" + DATE_TOKEN_RE.pattern)

Strategy = Callable[[Sequence[TextLine], list[str], SegmentationSettings], list[ParsedTransaction]]


def segment(
    lines: Sequence[TextLine],
    *,
    settings: ExtractionSettings | None = None,
    strategies: Sequence[tuple[str, Strategy]] | None = None,
) -> ParseResult:
    """Run the strategy chain over ``lines`` and return the first non-empty outcome.

    Only the winning strategy's warnings are reported. When every strategy comes
    back empty the errors collect all of their warnings plus a sample of the first
    reconstructed lines so unsupported layouts can be diagnosed.
    """

    extraction = settings or default_extraction_settings()
    chain = STRATEGIES if strategies is None else strategies
    collected: list[str] = []

    for name, strategy in chain:
        warnings: list[str] = []
        transactions = strategy(lines, warnings, extraction.segmentation)
        _log.debug("Strategy %s produced %d transactions", name, len(transactions))
        if transactions:
            return ParseResult(transactions=transactions, errors=_unique(warnings))
        collected.extend(warnings)

    collected.append(f"Could not find transactions. Extracted {len(lines)} text segments from PDF.")
    sample = [
        f'Line {index}: "{line.text}"'
        for index, line in enumerate(lines[: extraction.pdf.diagnostic_lines])
    ]
    collected.append("Sample extracted text: " + "; ".join(sample))
    return ParseResult(transactions=[], errors=_unique(collected))


def table_header_strategy(
    lines: Sequence[TextLine],
    warnings: list[str],
    settings: SegmentationSettings,
) -> list[ParsedTransaction]:
    """Fold the rows below a ``Transaction Date ... Description`` header."""

    header_index = next(
        (index for index, line in enumerate(lines) if _is_table_header(line.text)),
        None,
    )
    if header_index is None:
        return []

    rows: list[list[str]] = []
    for line in lines[header_index + 1 :]:
        text = line.text.strip()
        if not text or _is_table_header(text) or _is_boilerplate(text):
            continue
        if _starts_with_date(text):
            rows.append([text])
        elif rows:
            rows[-1].append(text)

    transactions: list[ParsedTransaction] = []
    for parts in rows:
        folded = " ".join(parts)
        date_match = find_date_token(folded)
        if date_match is None:  # pragma: no cover - rows always start with a date
            continue
        txn_date = _parse_row_date(date_match.group(1), warnings)
        if txn_date is None:
            continue

        rest = folded[date_match.end() :]
        keyword = TYPE_KEYWORD_RE.search(rest)
        if keyword:
            description = rest[: keyword.start()]
            amount_token = first_amount_token(rest[keyword.end() :])
        else:
            amount_token = first_amount_token(rest)
            description = rest[: amount_token.start] if amount_token else rest

        if amount_token is None:
            warnings.append(f"No amount found for row: {folded}")
            continue
        description = _clean_description(description)
        if not description:
            warnings.append(f"Missing description for row: {folded}")
            continue
        transactions.append(_build_transaction(txn_date, description, amount_token.value))
    return transactions


def nearby_window_strategy(
    lines: Sequence[TextLine],
    warnings: list[str],
    settings: SegmentationSettings,
) -> list[ParsedTransaction]:
    """Pair each date with a type keyword and an amount found within a few lines."""

    transactions: list[ParsedTransaction] = []
    total = len(lines)
    index = 0
    while index < total:
        text = lines[index].text
        date_match = find_date_token(text)
        if date_match is None:
            index += 1
            continue
        txn_date = _parse_row_date(date_match.group(1), warnings)
        if txn_date is None:
            index += 1
            continue
        after_date = text[date_match.end() :]

        type_index: int | None = None
        type_match: re.Match[str] | None = None
        for offset in range(settings.type_window + 1):
            candidate = index + offset
            if candidate >= total:
                break
            if offset and _starts_with_date(lines[candidate].text):
                break
            search_text = after_date if offset == 0 else lines[candidate].text
            type_match = TYPE_KEYWORD_RE.search(search_text)
            if type_match:
                type_index = candidate
                break

        if type_index is not None and type_match is not None:
            if type_index == index:
                parts = [after_date[: type_match.start()]]
            else:
                parts = [after_date]
                parts.extend(line.text for line in lines[index + 1 : type_index])
                parts.append(lines[type_index].text[: type_match.start()])
        else:
            parts = [after_date]
            for line in lines[index + 1 : index + 1 + settings.description_lines]:
                if _starts_with_date(line.text):
                    break
                parts.append(line.text)

        amount_value = _scan_amount(lines, index, after_date, type_index, type_match, settings)
        if amount_value is not None:
            description = _clean_description(" ".join(parts))
            if description:
                transactions.append(_build_transaction(txn_date, description, amount_value))
            else:
                warnings.append(f"Missing description for transaction dated {date_match.group(1)}")
            index = max(index + 1, (type_index if type_index is not None else index) + 1)
            continue
        index += 1
    return transactions


def generic_date_amount_strategy(
    lines: Sequence[TextLine],
    warnings: list[str],
    settings: SegmentationSettings,
) -> list[ParsedTransaction]:
    """Last resort: any date with an amount on the same or the next few lines."""

    transactions: list[ParsedTransaction] = []
    total = len(lines)
    for index, line in enumerate(lines):
        date_match = find_date_token(line.text)
        if date_match is None:
            continue
        txn_date = _parse_row_date(date_match.group(1), warnings)
        if txn_date is None:
            continue

        amount_value: float | None = None
        for candidate in range(index, min(total, index + settings.generic_lookahead + 1)):
            tokens = find_amount_tokens(lines[candidate].text)
            if tokens:
                # The transaction amount is usually the rightmost figure on the line.
                amount_value = tokens[-1].value
                break
        if amount_value is None:
            continue

        description = _clean_description(line.text)
        if not description and index + 1 < total:
            description = _clean_description(lines[index + 1].text)
        transactions.append(
            _build_transaction(txn_date, description or UNKNOWN_DESCRIPTION, amount_value)
        )
    return transactions


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("table-header", table_header_strategy),
    ("nearby-window", nearby_window_strategy),
    ("generic-date-amount", generic_date_amount_strategy),
)


def _scan_amount(
    lines: Sequence[TextLine],
    date_index: int,
    after_date: str,
    type_index: int | None,
    type_match: re.Match[str] | None,
    settings: SegmentationSettings,
) -> float | None:
    start = type_index if type_index is not None else date_index
    for offset in range(settings.amount_window + 1):
        candidate = start + offset
        if candidate >= len(lines):
            break
        text = lines[candidate].text
        if candidate == type_index and type_match is not None:
            source = after_date if candidate == date_index else text
            region = source[type_match.end() :]
        elif candidate == date_index:
            region = after_date
        else:
            if _starts_with_date(text):
                break
            region = text
        token = first_amount_token(region)
        if token is not None:
            return token.value
    return None


def _build_transaction(txn_date: date, description: str, amount: float) -> ParsedTransaction:
    name = " ".join(description.split())
    merchant_name = clean_merchant_name(name)
    signed = normalize_sign(SignedAmount(amount))
    return ParsedTransaction(
        date=txn_date,
        name=name,
        merchant_name=merchant_name,
        amount=signed,
        category=auto_tag(None, merchant_name, name, signed),
    )


def _parse_row_date(token: str, warnings: list[str]) -> date | None:
    try:
        return parse_date(token)
    except ValueError:
        warnings.append(f"Invalid date: {token}")
        return None


def _clean_description(text: str) -> str:
    without_dates = DATE_TOKEN_RE.sub(" ", text or "")
    return strip_amount_tokens(without_dates).strip(" -|:")


def _is_table_header(text: str) -> bool:
    lowered = " ".join(text.lower().split())
    return "transaction date" in lowered and "description" in lowered


def _is_boilerplate(text: str) -> bool:
    return bool(PAGE_NUMBER_RE.match(text)) or "summary" in text.lower()


def _starts_with_date(text: str) -> bool:
    return bool(_LEADING_DATE_RE.match(text))


def _unique(messages: list[str]) -> list[str]:
    return list(dict.fromkeys(messages))
