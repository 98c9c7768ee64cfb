from __future__ import annotations

import csv
from pathlib import Path

import pytest
from click.testing import CliRunner

from fin_ingest.fin_classify.evaluate import (
    evaluate_labeled_rows,
    format_report,
    load_labeled_rows,
    write_mismatches,
)
from fin_ingest.fin_classify.main import main
from fin_ingest.shared.exceptions import ClassificationError

LABELED_CSV = """date,merchant_name,category,amount,expected_class
2024-01-02,Whole Foods,Groceries,-120.50,essential
2024-01-03,Netflix,Entertainment,-15.99,flex
2024-01-04,Chipotle,Restaurants,-60.00,essential
2024-01-05,Mystery,,-10.00,
2024-01-06,Bookstore,Shopping,n/a,flex
2024-01-07,ACME PAYROLL,Income,2000,Flex
"""


@pytest.fixture()
def labeled_file(tmp_path: Path) -> Path:
    path = tmp_path / "labeled.csv"
    path.write_text(LABELED_CSV, encoding="utf-8")
    return path


def test_evaluate_labeled_rows(labeled_file: Path) -> None:
    result = evaluate_labeled_rows(load_labeled_rows(labeled_file))

    assert result.evaluated == 4
    assert result.skipped_missing_class == 1
    assert result.skipped_invalid_amount == 1
    assert result.confusion == {
        "essential": {"essential": 1, "flex": 1},
        "flex": {"essential": 0, "flex": 2},
    }
    assert result.accuracy == pytest.approx(0.75)
    assert result.precision("essential") == pytest.approx(1.0)
    assert result.recall("essential") == pytest.approx(0.5)
    assert result.precision("flex") == pytest.approx(2 / 3)
    assert result.recall("flex") == pytest.approx(1.0)

    assert len(result.mismatches) == 1
    mismatch = result.mismatches[0]
    assert mismatch["merchant_name"] == "Chipotle"
    assert mismatch["predicted_class"] == "flex"
    assert mismatch["expected_class"] == "essential"


def test_empty_input_scores_zero() -> None:
    result = evaluate_labeled_rows([])
    assert result.evaluated == 0
    assert result.accuracy == 0.0
    assert result.precision("flex") == 0.0


def test_custom_delimiter(tmp_path: Path) -> None:
    path = tmp_path / "labeled.tsv"
    path.write_text("merchant;amount;expected_class\nHulu;-7.99;flex\n", encoding="utf-8")
    rows = load_labeled_rows(path, delimiter=";")
    assert rows == [{"merchant": "Hulu", "amount": "-7.99", "expected_class": "flex"}]
    assert evaluate_labeled_rows(rows).confusion["flex"]["flex"] == 1


def test_load_rejects_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ClassificationError):
        load_labeled_rows(path)


def test_write_mismatches(tmp_path: Path) -> None:
    assert write_mismatches([], tmp_path / "none.csv") is None
    assert not (tmp_path / "none.csv").exists()

    target = tmp_path / "reports" / "mismatches.csv"
    written = write_mismatches([{"merchant": "Chipotle", "predicted_class": "flex"}], target)
    assert written == target
    with target.open(encoding="utf-8", newline="") as handle:
        assert list(csv.DictReader(handle)) == [{"merchant": "Chipotle", "predicted_class": "flex"}]


def test_format_report_lists_metrics(labeled_file: Path) -> None:
    report = "\n".join(format_report(evaluate_labeled_rows(load_labeled_rows(labeled_file))))
    assert "Evaluated: 4" in report
    assert "essential -> flex:" in report
    assert "Accuracy:              75.00%" in report


def test_evaluate_cli(labeled_file: Path, tmp_path: Path) -> None:
    errors_path = tmp_path / "mismatches.csv"

    runner = CliRunner()
    result = runner.invoke(main, ["evaluate", "--file", str(labeled_file), "--errors", str(errors_path)])
    assert result.exit_code == 0, result.output
    assert "Evaluated: 4" in result.stdout
    assert "Skipped (invalid amount): 1" in result.stdout
    assert errors_path.exists()
    assert "predicted_class" in errors_path.read_text(encoding="utf-8")


def test_evaluate_cli_requires_file() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["evaluate"])
    assert result.exit_code == 2
