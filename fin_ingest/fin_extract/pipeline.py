"""Statement ingestion entry point: format dispatch, parsing, dedup, warnings."""

from __future__ import annotations

import logging
from pathlib import Path

from fin_ingest.shared.config import ExtractionSettings, default_extraction_settings
from fin_ingest.shared.exceptions import ExtractionError, UnsupportedFormatError

from .dedupe import dedupe
from .parsers.delimited import parse_delimited
from .parsers.pdf_loader import extract_lines
from .segmenter import segment
from .types import DeclaredFormat, ParseResult, RawStatement

_log = logging.getLogger(__name__)

DELIMITED = "delimited"
PDF = "pdf"

_FORMAT_ALIASES = {"csv": DELIMITED, "delimited": DELIMITED, "tsv": DELIMITED, "pdf": PDF}
_EXTENSION_FORMATS = {".csv": DELIMITED, ".tsv": DELIMITED, ".txt": DELIMITED, ".pdf": PDF}
_PDF_MAGIC = b"%PDF-"


def resolve_format(statement: RawStatement) -> str:
    """Return ``"delimited"`` or ``"pdf"`` for a statement.

    Declared format wins, then the filename extension, then the content itself:
    ``%PDF-`` magic bytes, or a delimiter in the first line. Anything still
    undetermined is handed to the PDF reader, which reports undecodable input as
    an error.
    """

    if statement.declared_format:
        declared = _FORMAT_ALIASES.get(statement.declared_format.lower())
        if declared is None:
            raise UnsupportedFormatError(
                f"Unsupported declared format '{statement.declared_format}'. Expected csv or pdf."
            )
        return declared

    suffix = Path(statement.filename or "").suffix.lower()
    if suffix in _EXTENSION_FORMATS:
        return _EXTENSION_FORMATS[suffix]
    head = statement.content.lstrip()[:1024]
    if head.startswith(_PDF_MAGIC):
        return PDF
    first_line = head.split(b"\n", 1)[0]
    if any(delimiter in first_line for delimiter in (b",", b"\t", b";", b"|")):
        return DELIMITED
    return PDF


def ingest(statement: RawStatement, *, settings: ExtractionSettings | None = None) -> ParseResult:
    """Parse one statement into transactions plus warnings; never raises.

    Fatal problems (unknown format, undecodable PDF, unexpected parser faults)
    come back as a single error with no transactions.
    """

    extraction = settings or default_extraction_settings()
    label = statement.filename or "<statement>"
    try:
        file_format = resolve_format(statement)
        _log.debug("Ingesting %s as %s", label, file_format)
        if file_format == DELIMITED:
            return _ingest_delimited(statement.content)
        return _ingest_pdf(statement.content, extraction)
    except ExtractionError as exc:
        _log.warning("Extraction failed for %s: %s", label, exc)
        return ParseResult(transactions=[], errors=[str(exc)])
    except Exception as exc:
        _log.exception("Unexpected failure while parsing %s", label)
        return ParseResult(transactions=[], errors=[f"Failed to parse {label}: {exc}"])


def ingest_path(
    path: str | Path,
    *,
    declared_format: DeclaredFormat | None = None,
    settings: ExtractionSettings | None = None,
) -> ParseResult:
    """Read ``path`` and run :func:`ingest` on its bytes."""

    file_path = Path(path).expanduser()
    statement = RawStatement(
        content=file_path.read_bytes(),
        filename=file_path.name,
        declared_format=declared_format,
    )
    return ingest(statement, settings=settings)


def _ingest_delimited(content: bytes) -> ParseResult:
    warnings: list[str] = []
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = content.decode("latin-1")
        warnings.append("File is not valid UTF-8; decoded as Latin-1")
    result = parse_delimited(text)
    result.errors[:0] = warnings
    return result


def _ingest_pdf(content: bytes, settings: ExtractionSettings) -> ParseResult:
    lines = extract_lines(content, settings=settings.pdf)
    if not lines:
        return ParseResult(transactions=[], errors=["No text could be extracted from the PDF"])
    result = segment(lines, settings=settings)
    before = len(result.transactions)
    result.transactions = dedupe(result.transactions)
    if len(result.transactions) != before:
        _log.debug("Dropped %d duplicate rows", before - len(result.transactions))
    return result
