"""Statement extraction: delimited and PDF statements into normalized transactions."""

from __future__ import annotations

from .pipeline import ingest, ingest_path, resolve_format
from .types import ParsedTransaction, ParseResult, RawStatement, TextLine

__all__ = [
    "ParseResult",
    "ParsedTransaction",
    "RawStatement",
    "TextLine",
    "ingest",
    "ingest_path",
    "resolve_format",
]
