"""Dataclasses describing statements flowing through the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

DeclaredFormat = Literal["csv", "delimited", "pdf"]


@dataclass(frozen=True, slots=True)
class RawStatement:
    """Input to one ingestion call: the uploaded bytes plus format hints."""

    content: bytes
    filename: str = ""
    declared_format: DeclaredFormat | None = None


@dataclass(frozen=True, slots=True)
class TextFragment:
    """A positioned run of text decoded from a PDF page."""

    text: str
    x0: float
    x1: float
    top: float
    page_number: int = 1


@dataclass(frozen=True, slots=True)
class TextLine:
    """Fragments collapsed into one reading-order line."""

    text: str
    top: float = 0.0
    page_number: int = 1


@dataclass(slots=True)
class ParsedTransaction:
    """Normalized transaction; negative amounts are money out, positive money in."""

    date: date
    name: str
    merchant_name: str | None
    amount: float
    category: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "name": self.name,
            "merchant_name": self.merchant_name,
            "amount": self.amount,
            "category": self.category,
        }


@dataclass(slots=True)
class ParseResult:
    """Transactions plus non-fatal diagnostics collected while parsing."""

    transactions: list[ParsedTransaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": [txn.to_dict() for txn in self.transactions],
            "errors": list(self.errors),
        }
