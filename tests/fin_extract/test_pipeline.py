from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from fin_ingest.fin_extract.pipeline import DELIMITED, PDF, ingest, ingest_path, resolve_format
from fin_ingest.fin_extract.types import RawStatement, TextLine
from fin_ingest.shared.exceptions import UnsupportedFormatError

CSV_BYTES = b"Date,Description,Amount\n01/02/2024,Starbucks,-4.50\n01/03/2024,Payroll Inc,2000.00\n"


def test_ingest_delimited_statement() -> None:
    result = ingest(RawStatement(content=CSV_BYTES, filename="checking.csv"))
    assert result.errors == []
    assert result.to_dict()["transactions"] == [
        {
            "date": "2024-01-02",
            "name": "Starbucks",
            "merchant_name": "Starbucks",
            "amount": -4.5,
            "category": "Food & Drink",
        },
        {
            "date": "2024-01-03",
            "name": "Payroll Inc",
            "merchant_name": "Payroll Inc",
            "amount": 2000.0,
            "category": "Income",
        },
    ]


def test_malformed_pdf_is_reported_not_raised() -> None:
    result = ingest(RawStatement(content=b"%PDF-1.7 this is not really a pdf", filename="broken.pdf"))
    assert result.transactions == []
    assert result.errors
    assert all(message for message in result.errors)


def test_unsupported_declared_format_is_reported() -> None:
    result = ingest(RawStatement(content=CSV_BYTES, filename="checking.csv", declared_format="xlsx"))  # type: ignore[arg-type]
    assert result.transactions == []
    assert result.errors == ["Unsupported declared format 'xlsx'. Expected csv or pdf."]


def test_pdf_lines_are_segmented_and_deduplicated(monkeypatch: pytest.MonkeyPatch) -> None:
    lines = [
        TextLine(text=text)
        for text in (
            "1/02/2024",
            "Amazon.com",
            "Purchase",
            "-$54.32",
            "1/02/2024",
            "AMAZON.COM",
            "Purchase",
            "-$54.32",
        )
    ]
    monkeypatch.setattr(
        "fin_ingest.fin_extract.pipeline.extract_lines",
        lambda content, settings=None: lines,
    )
    result = ingest(RawStatement(content=b"%PDF-1.4", filename="statement.pdf"))
    assert len(result.transactions) == 1
    txn = result.transactions[0]
    assert (txn.date, txn.merchant_name, txn.amount, txn.category) == (
        date(2024, 1, 2),
        "Amazon.com",
        -54.32,
        "Shopping",
    )


def test_pdf_without_text_layer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "fin_ingest.fin_extract.pipeline.extract_lines",
        lambda content, settings=None: [],
    )
    result = ingest(RawStatement(content=b"%PDF-1.4", filename="scan.pdf"))
    assert result.transactions == []
    assert result.errors == ["No text could be extracted from the PDF"]


def test_unexpected_parser_failure_is_contained(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(content: str):
        raise RuntimeError("boom")

    monkeypatch.setattr("fin_ingest.fin_extract.pipeline.parse_delimited", explode)
    result = ingest(RawStatement(content=CSV_BYTES, filename="checking.csv"))
    assert result.transactions == []
    assert result.errors == ["Failed to parse checking.csv: boom"]


def test_latin1_fallback_adds_warning() -> None:
    content = "Date,Description,Amount\n01/02/2024,Café Rouge,-4.50\n".encode("latin-1")
    result = ingest(RawStatement(content=content, filename="export.csv"))
    assert result.errors == ["File is not valid UTF-8; decoded as Latin-1"]
    assert result.transactions[0].name == "Café Rouge"


def test_real_text_layer_pdf(make_text_pdf, tmp_path: Path) -> None:
    pdf_path = tmp_path / "statement.pdf"
    pdf_path.write_bytes(
        make_text_pdf(
            [
                "Transaction Date Description Type Amount",
                "01/05/2024 WHOLE FOODS MARKET Purchase -82.13",
                "01/06/2024 ACME PAYROLL Direct Deposit 1,500.00",
            ]
        )
    )
    result = ingest_path(pdf_path)
    assert result.errors == []
    assert [(txn.name, txn.amount) for txn in result.transactions] == [
        ("WHOLE FOODS MARKET", -82.13),
        ("ACME PAYROLL", 1500.0),
    ]


@pytest.mark.parametrize(
    ("statement", "expected"),
    [
        (RawStatement(content=b"%PDF-1.4", filename="a.csv", declared_format="pdf"), PDF),
        (RawStatement(content=b"Date,Amount", filename="a.pdf", declared_format="csv"), DELIMITED),
        (RawStatement(content=b"anything", filename="export.TSV"), DELIMITED),
        (RawStatement(content=b"anything", filename="statement.pdf"), PDF),
        (RawStatement(content=b"%PDF-1.4\n...", filename="upload"), PDF),
        (RawStatement(content=b"Date;Description;Amount\n", filename="upload"), DELIMITED),
        (RawStatement(content=b"\x00\x01binary", filename=""), PDF),
    ],
)
def test_resolve_format(statement: RawStatement, expected: str) -> None:
    assert resolve_format(statement) == expected


def test_resolve_format_rejects_unknown_declared_format() -> None:
    with pytest.raises(UnsupportedFormatError):
        resolve_format(RawStatement(content=b"", declared_format="ofx"))  # type: ignore[arg-type]
