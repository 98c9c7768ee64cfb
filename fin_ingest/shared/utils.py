"""Miscellaneous helper utilities."""

from __future__ import annotations

import hashlib


def compute_content_sha256(content: bytes) -> str:
    """Return the SHA256 hex digest of a raw statement buffer.

    Callers use it as the duplicate-import key before handing the same bytes
    to :func:`fin_ingest.fin_extract.pipeline.ingest`.
    """

    return hashlib.sha256(content).hexdigest()
