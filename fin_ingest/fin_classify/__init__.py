"""Heuristic transaction classifiers (category auto-tagging and essential/flex scoring)."""

from __future__ import annotations

from .categories import CATEGORY_LABELS, auto_tag
from .spend_mix import SPEND_CLASSES, SpendScore, classify_spend, classify_transaction, score_spend

__all__ = [
    "CATEGORY_LABELS",
    "SPEND_CLASSES",
    "SpendScore",
    "auto_tag",
    "classify_spend",
    "classify_transaction",
    "score_spend",
]
