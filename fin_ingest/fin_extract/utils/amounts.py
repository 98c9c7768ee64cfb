"""Amount parsing and sign normalisation helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_DASHES = str.maketrans({"–": "-", "−": "-", "—": "-"})
_CREDIT_SUFFIX_RE = re.compile(r"\s*\bCR\.?$", re.IGNORECASE)
_CURRENCY_SYMBOL_RE = re.compile(r"[$€£]|\bUSD\b", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")

# Statement amount tokens: -$1,234.56, (1,234.56), 45.00 CR. Two decimals are mandatory
# so that dates, reference numbers and page counts never look like money.
AMOUNT_TOKEN_RE = re.compile(
    r"""
    (?<![\w.,/$])
    (?:
        \(\s*-?\$?\s?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}\s*\)
      | [-–−]?\$?\s?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}
    )
    (?!\d)
    (?:\s?CR\b)?
    """,
    re.VERBOSE | re.IGNORECASE,
)


class SignConvention(Enum):
    """How a source format maps money out to a sign."""

    EXPENSE_NEGATIVE = "expense_negative"
    EXPENSE_POSITIVE = "expense_positive"


@dataclass(frozen=True, slots=True)
class SignedAmount:
    """An amount as written in the source, tagged with that source's sign convention."""

    value: float
    convention: SignConvention = SignConvention.EXPENSE_NEGATIVE


@dataclass(frozen=True, slots=True)
class AmountToken:
    text: str
    value: float
    start: int
    end: int


def parse_amount(value: str) -> float:
    """Parse currency strings into floats.

    Handles ``-$1,234.56``, ``(123.45)``, ``$(12.00)``, the trailing-minus export style
    ``12.00-`` and the credit marker ``45.00 CR``. A ``CR`` suffix always yields a
    positive amount, whatever other sign markers are present. Raises ``ValueError``
    when no numeric content remains once formatting is stripped.
    """

    cleaned = (value or "").strip().translate(_DASHES)
    credit = False
    credit_match = _CREDIT_SUFFIX_RE.search(cleaned)
    if credit_match:
        credit = True
        cleaned = cleaned[: credit_match.start()].strip()

    negative = False
    cleaned = _CURRENCY_SYMBOL_RE.sub("", cleaned).replace(",", "").strip()
    if cleaned.endswith("-"):
        negative = True
        cleaned = cleaned[:-1].strip()
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1].strip()
    if cleaned.startswith("-"):
        negative = True
        cleaned = cleaned[1:].strip()

    match = _NUMBER_RE.search(cleaned)
    if not match:
        raise ValueError(f"Empty amount in '{value}'")
    amount = float(match.group())
    if credit:
        return amount
    return -amount if negative else amount


def find_amount_tokens(text: str) -> list[AmountToken]:
    """Return well-formed amount tokens in ``text``, left to right.

    A token that evaluates to zero is only kept when it is literally ``0.00``;
    anything else that collapses to zero is treated as a mis-read.
    """

    tokens: list[AmountToken] = []
    for match in AMOUNT_TOKEN_RE.finditer(text or ""):
        literal = match.group(0)
        try:
            amount = parse_amount(literal)
        except ValueError:
            continue
        if amount == 0 and literal.strip() != "0.00":
            continue
        tokens.append(AmountToken(text=literal, value=amount, start=match.start(), end=match.end()))
    return tokens


def first_amount_token(text: str) -> AmountToken | None:
    tokens = find_amount_tokens(text)
    return tokens[0] if tokens else None


def strip_amount_tokens(text: str) -> str:
    """Remove every amount token from ``text`` and collapse whitespace."""

    return " ".join(AMOUNT_TOKEN_RE.sub(" ", text or "").split())


def normalize_sign(amount: SignedAmount) -> float:
    """Map a source amount onto the canonical convention (negative = money out)."""

    value = amount.value
    if amount.convention is SignConvention.EXPENSE_POSITIVE:
        value = -value
    return round(value, 2) + 0.0
