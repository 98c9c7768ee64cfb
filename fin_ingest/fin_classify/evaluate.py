"""Measure the essential/flex classifier against hand-labeled transactions."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from fin_ingest.fin_extract.utils.amounts import parse_amount
from fin_ingest.shared.exceptions import ClassificationError

from .spend_mix import ESSENTIAL, FLEX, SPEND_CLASSES, SpendClass, classify_spend

EXPECTED_CLASS_FIELD = "expected_class"
PREDICTED_CLASS_FIELD = "predicted_class"

AMOUNT_FIELDS = ("amount", "Amount", "transaction_amount", "Transaction Amount", "net_amount", "Net Amount")
CATEGORY_FIELDS = ("category", "Category", "plaid_category", "Plaid Category")
MERCHANT_FIELDS = ("merchant_name", "merchant", "Merchant Name", "Merchant", "description", "Description")
NAME_FIELDS = ("name", "Name", "transaction_name", "Transaction Name", "memo", "Memo")


@dataclass(slots=True)
class EvaluationResult:
    """Confusion matrix (actual -> predicted) plus skip counters and mismatching rows."""

    evaluated: int = 0
    skipped_missing_class: int = 0
    skipped_invalid_amount: int = 0
    confusion: dict[SpendClass, dict[SpendClass, int]] = field(
        default_factory=lambda: {actual: {predicted: 0 for predicted in SPEND_CLASSES} for actual in SPEND_CLASSES}
    )
    mismatches: list[dict[str, str]] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        correct = sum(self.confusion[label][label] for label in SPEND_CLASSES)
        return _ratio(correct, self.evaluated)

    def precision(self, label: SpendClass) -> float:
        predicted = sum(self.confusion[actual][label] for actual in SPEND_CLASSES)
        return _ratio(self.confusion[label][label], predicted)

    def recall(self, label: SpendClass) -> float:
        actual = sum(self.confusion[label].values())
        return _ratio(self.confusion[label][label], actual)


def load_labeled_rows(path: str | Path, *, delimiter: str | None = None) -> list[dict[str, str]]:
    """Read a labeled CSV into dicts keyed by trimmed header names.

    Raises:
        ClassificationError: If the file cannot be parsed or has no header row.
    """

    file_path = Path(path).expanduser()
    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ClassificationError(f"Cannot read labeled file {file_path}: {exc}") from exc

    reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=delimiter or ",")
    try:
        rows = [
            {str(key).strip(): (value or "").strip() for key, value in row.items() if key is not None}
            for row in reader
            if any((value or "").strip() for value in row.values() if isinstance(value, str))
        ]
    except csv.Error as exc:
        raise ClassificationError(f"Failed to parse {file_path} near line {reader.line_num}: {exc}") from exc

    if not reader.fieldnames:
        raise ClassificationError(f"Labeled file {file_path} has no header row")
    return rows


def evaluate_labeled_rows(rows: Iterable[Mapping[str, str]]) -> EvaluationResult:
    """Classify each labeled row and tally the outcome.

    Rows whose ``expected_class`` is not ``essential``/``flex`` or whose amount
    cannot be parsed are counted as skipped and never scored.
    """

    result = EvaluationResult()
    for row in rows:
        expected = _normalize_class(row.get(EXPECTED_CLASS_FIELD))
        if expected is None:
            result.skipped_missing_class += 1
            continue

        try:
            amount = parse_amount(_pick(row, AMOUNT_FIELDS) or "")
        except ValueError:
            result.skipped_invalid_amount += 1
            continue

        predicted = classify_spend(
            _pick(row, CATEGORY_FIELDS),
            _pick(row, MERCHANT_FIELDS),
            _pick(row, NAME_FIELDS),
            amount,
        )
        result.evaluated += 1
        result.confusion[expected][predicted] += 1
        if predicted != expected:
            mismatch = dict(row)
            mismatch[PREDICTED_CLASS_FIELD] = predicted
            mismatch[EXPECTED_CLASS_FIELD] = expected
            result.mismatches.append(mismatch)
    return result


def write_mismatches(mismatches: Sequence[Mapping[str, str]], output_path: str | Path) -> Path | None:
    """Write mismatching rows as CSV; nothing is written when there are none."""

    if not mismatches:
        return None
    fieldnames: list[str] = []
    for row in mismatches:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)

    path = Path(output_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames, restval="")
        writer.writeheader()
        writer.writerows(mismatches)
    return path


def format_report(result: EvaluationResult) -> list[str]:
    lines = [
        "--- Spend Mix Classifier Accuracy ---",
        f"Evaluated: {result.evaluated}",
        f"Skipped (missing expected_class): {result.skipped_missing_class}",
        f"Skipped (invalid amount): {result.skipped_invalid_amount}",
        "",
        "Confusion Matrix (actual -> predicted)",
    ]
    for actual in SPEND_CLASSES:
        for predicted in SPEND_CLASSES:
            label = f"{actual} -> {predicted}:"
            lines.append(f"  {label:<24}{result.confusion[actual][predicted]}")
    lines.extend(
        [
            "",
            "Metrics",
            f"  Accuracy:              {_percent(result.accuracy)}",
            f"  Precision (essential): {_percent(result.precision(ESSENTIAL))}",
            f"  Recall (essential):    {_percent(result.recall(ESSENTIAL))}",
            f"  Precision (flex):      {_percent(result.precision(FLEX))}",
            f"  Recall (flex):         {_percent(result.recall(FLEX))}",
        ]
    )
    return lines


def _pick(row: Mapping[str, str], keys: Sequence[str]) -> str | None:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _normalize_class(value: str | None) -> SpendClass | None:
    normalized = (value or "").strip().lower()
    if normalized == ESSENTIAL:
        return ESSENTIAL
    if normalized == FLEX:
        return FLEX
    return None


def _ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def _percent(value: float) -> str:
    return f"{value * 100:.2f}%"
