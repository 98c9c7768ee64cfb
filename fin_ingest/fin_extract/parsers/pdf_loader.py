"""Rebuild reading-order text lines from text-layer PDFs with pdfplumber."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable
from typing import Any

import pdfplumber

from fin_ingest.shared.config import PdfSettings, default_extraction_settings
from fin_ingest.shared.exceptions import ExtractionError

from ..types import TextFragment, TextLine

_log = logging.getLogger(__name__)


def extract_lines(content: bytes, *, settings: PdfSettings | None = None) -> list[TextLine]:
    """Return the text lines of every page, top to bottom, pages in document order.

    Raises:
        ExtractionError: If the bytes cannot be opened as a PDF at all.
    """

    pdf_settings = settings or default_extraction_settings().pdf
    lines: list[TextLine] = []
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            for page_number, page in enumerate(pdf.pages, start=1):
                fragments = list(_page_fragments(page, page_number, pdf_settings))
                page_lines = group_fragments(
                    fragments,
                    y_tolerance=pdf_settings.y_tolerance,
                    gap_threshold=pdf_settings.gap_threshold,
                )
                _log.debug(
                    "Page %d: %d fragments -> %d lines", page_number, len(fragments), len(page_lines)
                )
                lines.extend(page_lines)
    except Exception as exc:
        raise ExtractionError(f"Failed to read PDF: {exc}") from exc
    return lines


def group_fragments(
    fragments: Iterable[TextFragment],
    *,
    y_tolerance: float = 3.0,
    gap_threshold: float = 1.0,
) -> list[TextLine]:
    """Cluster positioned fragments into lines.

    A fragment joins the current line when its ``top`` is within ``y_tolerance`` of
    the line's first fragment. Within a line, fragments are ordered by ``x0`` and a
    space is inserted only where the horizontal gap exceeds ``gap_threshold``, so
    abutting glyph runs stay glued together while table columns are separated.
    """

    ordered = sorted(
        (fragment for fragment in fragments if fragment.text.strip()),
        key=lambda fragment: (fragment.page_number, fragment.top, fragment.x0),
    )

    groups: list[tuple[int, float, list[TextFragment]]] = []
    for fragment in ordered:
        if groups:
            page_number, anchor, members = groups[-1]
            if page_number == fragment.page_number and abs(fragment.top - anchor) <= y_tolerance:
                members.append(fragment)
                continue
        groups.append((fragment.page_number, fragment.top, [fragment]))

    lines: list[TextLine] = []
    for page_number, anchor, members in groups:
        text = _join_fragments(members, gap_threshold)
        if text:
            lines.append(TextLine(text=text, top=anchor, page_number=page_number))
    return lines


def _join_fragments(members: list[TextFragment], gap_threshold: float) -> str:
    parts: list[str] = []
    last_x1: float | None = None
    for fragment in sorted(members, key=lambda item: item.x0):
        if last_x1 is not None and fragment.x0 - last_x1 > gap_threshold:
            parts.append(" ")
        parts.append(fragment.text)
        last_x1 = fragment.x1 if last_x1 is None else max(last_x1, fragment.x1)
    return " ".join("".join(parts).split())


def _page_fragments(page: Any, page_number: int, settings: PdfSettings) -> Iterable[TextFragment]:
    words = page.extract_words(
        x_tolerance=settings.gap_threshold,
        y_tolerance=settings.y_tolerance,
        keep_blank_chars=False,
        use_text_flow=False,
    )
    for word in words:
        yield TextFragment(
            text=str(word["text"]),
            x0=float(word["x0"]),
            x1=float(word["x1"]),
            top=float(word["top"]),
            page_number=page_number,
        )
