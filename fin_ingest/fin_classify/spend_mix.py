"""Essential vs. flex spend scoring.

Analytics-only: the label is derived on demand from transaction fields and is
never stored on the transaction. Income and transfers (``amount >= 0``) are not
spend and always score as ``flex``. Unclassifiable spend also falls back to
``flex``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .categories import coerce_amount

if TYPE_CHECKING:  # pragma: no cover - import only for typing
    from fin_ingest.fin_extract.types import ParsedTransaction

SpendClass = Literal["essential", "flex"]
ESSENTIAL: SpendClass = "essential"
FLEX: SpendClass = "flex"
SPEND_CLASSES: tuple[SpendClass, ...] = (ESSENTIAL, FLEX)

ESSENTIAL_CATEGORY_KEYWORDS: tuple[str, ...] = (
    "rent",
    "mortgage",
    "housing",
    "utility",
    "utilities",
    "electric",
    "water",
    "gas bill",
    "internet",
    "phone",
    "cellular",
    "insurance",
    "medical",
    "health",
    "dental",
    "vision",
    "pharmacy",
    "prescription",
    "education",
    "tuition",
    "textbook",
    "fees",
    "transportation",
    "public transit",
    "transit",
    "bus",
    "rail",
    "metro",
    "fuel",
    "gasoline",
    "grocery",
    "groceries",
    "supermarket",
    "market",
    "wholesale club",
    "childcare",
)

ESSENTIAL_MERCHANT_KEYWORDS: tuple[str, ...] = (
    "walmart",
    "whole foods",
    "trader joe",
    "costco",
    "aldi",
    "kroger",
    "publix",
    "heb",
    "safeway",
    "meijer",
    "target",
    "wegmans",
    "food lion",
    "winco",
    "bj's",
    "sam's club",
    "stop & shop",
    "giant food",
    "raley",
    "vons",
    "fred meyer",
)

FLEX_KEYWORDS: tuple[str, ...] = (
    "restaurant",
    "dining",
    "fast food",
    "bar",
    "coffee",
    "alcohol",
    "entertainment",
    "subscription",
    "shopping",
    "fashion",
    "electronics",
    "gift",
    "travel",
    "vacation",
    "gaming",
    "food and drink",
    "food & drink",
)

# Checked before any scoring; first matching entry decides.
MANUAL_OVERRIDES: tuple[tuple[str, SpendClass], ...] = (
    ("landlord", ESSENTIAL),
    ("property management", ESSENTIAL),
    ("property mgmt", ESSENTIAL),
    ("rent payment", ESSENTIAL),
    ("netflix", FLEX),
    ("spotify", FLEX),
    ("hulu", FLEX),
    ("disney+", FLEX),
    ("disney plus", FLEX),
    ("hbo max", FLEX),
    ("youtube premium", FLEX),
    ("paramount+", FLEX),
    ("peacock", FLEX),
)

ESSENTIAL_CATEGORY_WEIGHT = 2
ESSENTIAL_MERCHANT_TEXT_WEIGHT = 1
ESSENTIAL_MERCHANT_TABLE_WEIGHT = 3
FLEX_CATEGORY_WEIGHT = 2
FLEX_MERCHANT_WEIGHT = 2


@dataclass(frozen=True, slots=True)
class SpendScore:
    essential: int
    flex: int
    override: SpendClass | None = None


def score_spend(
    category: str | None,
    merchant_name: str | None,
    name: str | None,
) -> SpendScore:
    """Return keyword scores for an expense, or the manual override that applies."""

    category_text = _normalize(category)
    merchant_text = _normalize(merchant_name) or _normalize(name)
    name_text = _normalize(name)

    for keyword, label in MANUAL_OVERRIDES:
        if keyword in merchant_text or keyword in name_text:
            return SpendScore(essential=0, flex=0, override=label)

    essential = 0
    if _contains_any(category_text, ESSENTIAL_CATEGORY_KEYWORDS):
        essential += ESSENTIAL_CATEGORY_WEIGHT
    if _contains_any(merchant_text, ESSENTIAL_CATEGORY_KEYWORDS):
        essential += ESSENTIAL_MERCHANT_TEXT_WEIGHT
    if _contains_any(merchant_text, ESSENTIAL_MERCHANT_KEYWORDS):
        essential += ESSENTIAL_MERCHANT_TABLE_WEIGHT

    flex = 0
    if _contains_any(category_text, FLEX_KEYWORDS):
        flex += FLEX_CATEGORY_WEIGHT
    if _contains_any(merchant_text, FLEX_KEYWORDS):
        flex += FLEX_MERCHANT_WEIGHT

    return SpendScore(essential=essential, flex=flex)


def classify_spend(
    category: str | None,
    merchant_name: str | None,
    name: str | None,
    amount: float,
) -> SpendClass:
    """Classify a transaction as ``essential`` or ``flex``; never raises."""

    if coerce_amount(amount) >= 0:
        return FLEX

    score = score_spend(category, merchant_name, name)
    if score.override is not None:
        return score.override
    if score.essential >= 3 and score.essential >= score.flex:
        return ESSENTIAL
    if score.flex >= 2 and score.flex > score.essential:
        return FLEX
    if _contains_any(_normalize(category), ESSENTIAL_CATEGORY_KEYWORDS):
        return ESSENTIAL
    return FLEX


def classify_transaction(transaction: ParsedTransaction) -> SpendClass:
    return classify_spend(
        transaction.category,
        transaction.merchant_name,
        transaction.name,
        transaction.amount,
    )


def _normalize(value: object) -> str:
    return str(value or "").lower()


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)
