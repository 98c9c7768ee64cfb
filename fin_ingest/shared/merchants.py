"""Merchant normalization helpers shared across modules."""

from __future__ import annotations

import re
from functools import lru_cache

UNKNOWN_MERCHANT = "Unknown"

# Everything from the first separator onwards is store numbers, card tokens or location noise.
TRUNCATE_RE = re.compile(
    r"\s{2,}|#|\*|APPLE PAY ENDING|GOOGLE PAY ENDING|SAMSUNG PAY ENDING",
    re.IGNORECASE,
)
NETWORK_PREFIX_RE = re.compile(
    r"^(?:PURCHASE AUTHORIZED ON|DEBIT CARD PURCHASE|POS PURCHASE|POS DEBIT|CHECKCARD|POS|DEBIT|ACH)\s+",
    re.IGNORECASE,
)
_WORD_PART_RE = re.compile(r"[^\s\-/]+")


def clean_merchant_name(raw: str | None) -> str:
    """Return a display-friendly merchant name derived from a raw description.

    ``"POS STARBUCKS STORE 123  SEATTLE WA"`` becomes ``"Starbucks Store 123"``;
    mixed-case input such as ``"Amazon.com"`` is treated as already human-authored
    and only trimmed. The result is never empty.
    """

    text = (raw or "").strip()
    if not text:
        return UNKNOWN_MERCHANT

    head = TRUNCATE_RE.split(text, maxsplit=1)[0].strip()
    if not head:
        head = TRUNCATE_RE.sub(" ", text)

    head = NETWORK_PREFIX_RE.sub("", head)
    head = " ".join(head.split())
    if not head:
        return UNKNOWN_MERCHANT

    if _is_uniform_case(head):
        head = " ".join(_title_token(token) for token in head.split(" "))
    return head or UNKNOWN_MERCHANT


@lru_cache(maxsize=4096)
def merchant_key(merchant: str | None) -> str:
    """Return an uppercase, whitespace-collapsed key for duplicate detection."""

    cleaned = (merchant or "").strip().upper()
    return " ".join(cleaned.split())


def _is_uniform_case(text: str) -> bool:
    letters = [char for char in text if char.isalpha()]
    if not letters:
        return False
    return text == text.upper() or text == text.lower()


def _title_token(token: str) -> str:
    # Short all-caps tokens are acronyms or store codes (ATM, BP, CVS, 7E1).
    if len(token) <= 3 and token.isupper():
        return token
    return _WORD_PART_RE.sub(lambda match: match.group(0).capitalize(), token)
